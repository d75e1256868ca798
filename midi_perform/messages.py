"""
MIDI message types.

Provides the Note value type and typed dataclasses for the note messages
the engine reacts to.
"""

import re
from dataclasses import dataclass

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
NOTE_MIN = 0
NOTE_MAX = 127
CHANNEL_MIN = 0
CHANNEL_MAX = 15

_NOTE_NAME_RE = re.compile(r"^([A-Ga-g])(#?)(-?\d+)$")


@dataclass(frozen=True, order=True)
class Note:
    """A MIDI pitch index (0-127). C4 is 60, so C1 is 24."""
    index: int

    def __post_init__(self) -> None:
        if not NOTE_MIN <= self.index <= NOTE_MAX:
            raise ValueError(f"Note index out of range: {self.index}")

    @classmethod
    def from_name(cls, name: str) -> "Note":
        """Parse a note name such as "C1", "F#3" or "A-1"."""
        match = _NOTE_NAME_RE.match(name.strip())
        if match is None:
            raise ValueError(f"Invalid note name: {name!r}")
        letter, sharp, octave = match.groups()
        semitone = NOTE_NAMES.index(letter.upper() + sharp)
        return cls((int(octave) + 1) * 12 + semitone)

    @property
    def name(self) -> str:
        octave, semitone = divmod(self.index, 12)
        return f"{NOTE_NAMES[semitone]}{octave - 1}"

    def __add__(self, offset: int) -> "Note":
        return Note(self.index + offset)

    def __str__(self) -> str:
        return self.name


C1 = Note.from_name("C1")


@dataclass(frozen=True)
class MidiMessage:
    """Base class for MIDI messages."""
    channel: int


@dataclass(frozen=True)
class NoteOn(MidiMessage):
    """Note On MIDI message."""
    note: int
    velocity: int

    def __str__(self) -> str:
        return f"NoteOn ch={self.channel} note={self.note} vel={self.velocity}"


@dataclass(frozen=True)
class NoteOff(MidiMessage):
    """Note Off MIDI message."""
    note: int
    velocity: int

    def __str__(self) -> str:
        return f"NoteOff ch={self.channel} note={self.note} vel={self.velocity}"


@dataclass(frozen=True)
class UnknownMessage:
    """Any MIDI message that is not a note message."""
    raw: object

    def __str__(self) -> str:
        return f"Unknown: {self.raw}"


def parse_midi_message(msg) -> MidiMessage | UnknownMessage:
    """
    Parse a mido message into a typed MidiMessage.

    A note_on with velocity 0 is a note release in running-status streams,
    so it becomes a NoteOff.
    """
    if msg.type == "note_on":
        if msg.velocity == 0:
            return NoteOff(channel=msg.channel, note=msg.note, velocity=0)
        return NoteOn(channel=msg.channel, note=msg.note, velocity=msg.velocity)
    elif msg.type == "note_off":
        return NoteOff(channel=msg.channel, note=msg.note, velocity=msg.velocity)
    else:
        return UnknownMessage(raw=msg)
