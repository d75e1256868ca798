"""
Exception types raised by the MIDI perform engine.
"""

from pathlib import Path


class MidiPerformError(Exception):
    """Base class for all errors raised by midi_perform."""


class UnknownKeyError(MidiPerformError, ValueError):
    """A key name could not be resolved to a keyboard key."""

    def __init__(self, name: str):
        super().__init__(f"Unknown key name: {name!r}")
        self.name = name


class MappingParseError(MidiPerformError):
    """A mapping file line could not be parsed."""

    def __init__(self, path: Path | str, line_number: int, reason: str):
        super().__init__(f"{path}:{line_number}: {reason}")
        self.path = Path(path)
        self.line_number = line_number
        self.reason = reason


class TransportError(MidiPerformError):
    """The MIDI transport could not be initialized or queried."""


class ConfigError(MidiPerformError):
    """The configuration file is invalid."""
