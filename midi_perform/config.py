"""
Configuration loading and validation.

Handles YAML config parsing with environment variable expansion.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .coalescer import DEFAULT_TRACKED_MODIFIERS
from .errors import ConfigError, UnknownKeyError
from .keys import Modifier, parse_key
from .sequencer import OCTAVE_DELAY_MS


@dataclass
class Config:
    """Root configuration object."""
    device: str | None = None  # Exact device name to connect to
    mappings: Path | None = None  # Mapping file replacing the default table
    poll_interval: float = 1.0
    settle_delay_ms: int = OCTAVE_DELAY_MS
    tracked_modifiers: tuple[Modifier, ...] = DEFAULT_TRACKED_MODIFIERS
    dry_run: bool = False
    quiet: bool = False


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR} syntax.
    """
    pattern = re.compile(r'\$\{([^}]+)\}')

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return pattern.sub(replacer, value)


def expand_env_vars_recursive(obj: Any) -> Any:
    """Recursively expand environment variables in a data structure."""
    if isinstance(obj, str):
        return expand_env_vars(obj)
    elif isinstance(obj, dict):
        return {k: expand_env_vars_recursive(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [expand_env_vars_recursive(item) for item in obj]
    return obj


def _expect(raw: dict[str, Any], key: str, types: tuple[type, ...]) -> Any:
    value = raw[key]
    # bool is an int subclass
    if not isinstance(value, types) or (isinstance(value, bool) and bool not in types):
        raise ConfigError(f"'{key}' has the wrong type: {value!r}")
    return value


def parse_tracked_modifiers(names: list[Any]) -> tuple[Modifier, ...]:
    """Parse a list of modifier names such as ["shift", "ctrl"]."""
    modifiers = []
    for name in names:
        try:
            key = parse_key(str(name))
        except UnknownKeyError as e:
            raise ConfigError(str(e)) from e
        if not isinstance(key, Modifier):
            raise ConfigError(f"Not a modifier key: {name!r}")
        modifiers.append(key)
    return tuple(modifiers)


def parse_config(raw: dict[str, Any] | None) -> Config:
    """Build a Config from parsed YAML data."""
    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a mapping")

    known = {"device", "mappings", "poll_interval", "settle_delay_ms", "tracked_modifiers", "dry_run", "quiet"}
    unknown = set(raw) - known
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    raw = expand_env_vars_recursive(raw)
    config = Config()

    if raw.get("device") is not None:
        config.device = str(_expect(raw, "device", (str, int)))
    if raw.get("mappings") is not None:
        config.mappings = Path(_expect(raw, "mappings", (str,))).expanduser()
    if "poll_interval" in raw:
        config.poll_interval = float(_expect(raw, "poll_interval", (int, float)))
        if config.poll_interval <= 0:
            raise ConfigError("'poll_interval' must be positive")
    if "settle_delay_ms" in raw:
        config.settle_delay_ms = _expect(raw, "settle_delay_ms", (int,))
        if config.settle_delay_ms < 0:
            raise ConfigError("'settle_delay_ms' must not be negative")
    if "tracked_modifiers" in raw:
        config.tracked_modifiers = parse_tracked_modifiers(_expect(raw, "tracked_modifiers", (list,)))
    if "dry_run" in raw:
        config.dry_run = _expect(raw, "dry_run", (bool,))
    if "quiet" in raw:
        config.quiet = _expect(raw, "quiet", (bool,))

    return config


def load_config(path: Path) -> Config:
    """Load configuration from a YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path} is not valid UTF-8 text: {e.reason}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    return parse_config(raw)
