"""
Sequence event types.

A sequence is an ordered tuple of events run by the sequencer when a note
is pressed or released.
"""

from dataclasses import dataclass

from .keys import Key, LayoutKey, Modifier


@dataclass(frozen=True)
class Delay:
    """Pause the sequence."""
    ms: int

    @property
    def seconds(self) -> float:
        return self.ms / 1000

    def __str__(self) -> str:
        return f"Delay {self.ms}ms"


@dataclass(frozen=True)
class KeyDown:
    """Press a key."""
    key: Key

    def __str__(self) -> str:
        return f"KeyDown {self.key}"


@dataclass(frozen=True)
class KeyUp:
    """Release a key."""
    key: Key

    def __str__(self) -> str:
        return f"KeyUp {self.key}"


@dataclass(frozen=True)
class ModifierSet:
    """Bring the held modifiers to exactly `modifier` (or none)."""
    modifier: Modifier | None = None

    def __str__(self) -> str:
        return f"ModifierSet {self.modifier or 'none'}"


Event = Delay | KeyDown | KeyUp | ModifierSet
EventSequence = tuple[Event, ...]


def down_event(char: str, modifier: Modifier | None = None, delay_ms: int | None = None) -> EventSequence:
    """
    Build the note-on sequence for a single character.

    Sets the modifier context, presses the key, and optionally waits
    `delay_ms` for the modified key to register.
    """
    events: list[Event] = [ModifierSet(modifier), KeyDown(LayoutKey(char))]
    if delay_ms:
        events.append(Delay(delay_ms))
    return tuple(events)


def up_event(char: str) -> EventSequence:
    """
    Build the note-off sequence for a single character.

    The modifier stays held so the next note in the same register needs no
    modifier transition.
    """
    return (KeyUp(LayoutKey(char)),)
