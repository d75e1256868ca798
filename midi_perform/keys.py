"""
Keyboard key types.

A key is one of three variants: a modifier, a system key, or a single
character on the keyboard layout.
"""

from dataclasses import dataclass
from enum import Enum

from .errors import UnknownKeyError


class Modifier(Enum):
    """Modifier keys the engine can hold down."""
    SHIFT = "shift"
    CONTROL = "control"
    ALT = "alt"

    def __str__(self) -> str:
        return self.value.capitalize()


class SystemKey(Enum):
    """Named non-character keys."""
    ESCAPE = "escape"

    def __str__(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class LayoutKey:
    """A key identified by the character it types on the current layout."""
    char: str

    def __post_init__(self) -> None:
        if len(self.char) != 1:
            raise ValueError(f"LayoutKey needs exactly one character, got {self.char!r}")

    def __str__(self) -> str:
        return "Space" if self.char == " " else repr(self.char)


Key = Modifier | SystemKey | LayoutKey


KEY_ALIASES: dict[str, Key] = {
    "shift": Modifier.SHIFT,
    "control": Modifier.CONTROL,
    "ctrl": Modifier.CONTROL,
    "alt": Modifier.ALT,
    "escape": SystemKey.ESCAPE,
    "esc": SystemKey.ESCAPE,
    "space": LayoutKey(" "),
}


def parse_key(name: str) -> Key:
    """
    Resolve a key name from a mapping file.

    Single characters map to layout keys (case preserved). Longer names are
    looked up case-insensitively in KEY_ALIASES.

    Raises:
        UnknownKeyError: If the name is empty or not a known key.
    """
    if len(name) == 1:
        return LayoutKey(name)
    key = KEY_ALIASES.get(name.lower())
    if key is None:
        raise UnknownKeyError(name)
    return key
