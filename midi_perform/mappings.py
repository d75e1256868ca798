"""
Note mapping table.

Binds (note, channel) pairs to the event sequences played on note-on and
note-off, builds the default table, and imports mapping files.
"""

import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from .errors import MappingParseError
from .events import (
    Delay,
    EventSequence,
    KeyDown,
    KeyUp,
    ModifierSet,
    down_event,
    up_event,
)
from .keys import LayoutKey, Modifier, SystemKey, parse_key
from .messages import C1, CHANNEL_MAX, CHANNEL_MIN, NOTE_MAX, NOTE_MIN, Note
from .sequencer import KEY_DELAY_MS, MOD_DELAY_MS, SYS_DELAY_MS

# Characters played by consecutive notes, starting at C1
DEFAULT_KEYS = (
    "t", "h", "x", "g", "j", "e", "z", "p", "k", "f", "y", "m",
    "d", "w", "a", "u", "o", "r", "n", "e", "c", "t", "l", "i",
    "s", "g", "h", "v", "b", "d", "q", "a", "m", "e", "u", "o",
    "r", " ", "1", "2", "3", "4", "5", "6", "7", "8", "9", "0",
)

# Pad buttons on the top of the keyboard, sent on channel 9
PAD_CHANNEL = 9
PAD_BASE_NOTE = 40
DEFAULT_PADS = ("z", "x", "c", "v", "b", "n", "m", ",")


@dataclass(frozen=True)
class NoteMapping:
    """Event sequences bound to a note on a channel (None matches any channel)."""
    note: Note
    channel: int | None
    on: EventSequence = ()
    off: EventSequence = ()

    def matches(self, note: Note | int, channel: int) -> bool:
        index = note.index if isinstance(note, Note) else note
        if self.note.index != index:
            return False
        return self.channel is None or self.channel == channel

    def __str__(self) -> str:
        channel = "*" if self.channel is None else self.channel
        return f"{self.note} ({self.note.index}) @ {channel}"


class MappingTable:
    """
    Ordered collection of note mappings.

    Lookup returns the first match in insertion order, so duplicates added
    later are only reachable when an earlier entry does not match.
    """

    def __init__(self, mappings: Iterable[NoteMapping] = ()):
        self._lock = threading.Lock()
        self._mappings: list[NoteMapping] = list(mappings)

    def add(self, mapping: NoteMapping) -> None:
        with self._lock:
            self._mappings.append(mapping)

    def extend(self, mappings: Iterable[NoteMapping]) -> None:
        with self._lock:
            self._mappings.extend(mappings)

    def clear(self) -> None:
        with self._lock:
            self._mappings.clear()

    def find(self, note: Note | int, channel: int) -> NoteMapping | None:
        """Find the first mapping for a note on a channel."""
        with self._lock:
            for mapping in self._mappings:
                if mapping.matches(note, channel):
                    return mapping
        return None

    def import_file(self, path: Path | str) -> int:
        """
        Replace the table with the mappings in a file.

        The table is only modified if the whole file parses.

        Returns:
            Number of mappings loaded.

        Raises:
            MappingParseError: If a line is malformed.
            OSError: If the file cannot be read.
        """
        mappings = load_mapping_file(path)
        with self._lock:
            self._mappings = mappings
        return len(mappings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._mappings)

    def __iter__(self) -> Iterator[NoteMapping]:
        with self._lock:
            return iter(list(self._mappings))


def parse_mapping_line(line: str) -> NoteMapping:
    """
    Parse one `note channel keydown keyup` line.

    Raises:
        ValueError: Describing what is wrong with the line.
    """
    fields = line.split()
    if len(fields) != 4:
        raise ValueError(f"expected 4 fields (note channel keydown keyup), got {len(fields)}")
    note_field, channel_field, down_name, up_name = fields

    try:
        note_index = int(note_field)
        channel = int(channel_field)
    except ValueError:
        raise ValueError(f"note and channel must be integers: {note_field!r} {channel_field!r}") from None

    if not NOTE_MIN <= note_index <= NOTE_MAX:
        raise ValueError(f"note {note_index} out of range {NOTE_MIN}-{NOTE_MAX}")
    if not CHANNEL_MIN <= channel <= CHANNEL_MAX:
        raise ValueError(f"channel {channel} out of range {CHANNEL_MIN}-{CHANNEL_MAX}")

    return NoteMapping(
        note=Note(note_index),
        channel=channel,
        on=(KeyDown(parse_key(down_name)),),
        off=(KeyUp(parse_key(up_name)),),
    )


def load_mapping_file(path: Path | str) -> list[NoteMapping]:
    """Parse every mapping in a file. Blank lines and # comments are skipped."""
    path = Path(path)
    mappings: list[NoteMapping] = []
    with open(path, "rb") as f:
        for line_number, raw in enumerate(f, 1):
            try:
                stripped = raw.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                raise MappingParseError(path, line_number, f"not valid UTF-8 text: {e.reason}") from e
            if not stripped or stripped.startswith("#"):
                continue
            try:
                mappings.append(parse_mapping_line(stripped))
            except ValueError as e:
                raise MappingParseError(path, line_number, str(e)) from e
    return mappings


def pad_sequence(pad: str) -> EventSequence:
    """Clear dialogs with Escape, then send Control+Alt+Shift+pad."""
    key = LayoutKey(pad)
    return (
        ModifierSet(None),
        KeyDown(SystemKey.ESCAPE),
        Delay(KEY_DELAY_MS),
        KeyUp(SystemKey.ESCAPE),
        Delay(SYS_DELAY_MS),
        KeyDown(Modifier.CONTROL),
        KeyDown(Modifier.ALT),
        KeyDown(Modifier.SHIFT),
        Delay(MOD_DELAY_MS),
        KeyDown(key),
        Delay(KEY_DELAY_MS),
        KeyUp(key),
        Delay(MOD_DELAY_MS),
        KeyUp(Modifier.SHIFT),
        KeyUp(Modifier.ALT),
        KeyUp(Modifier.CONTROL),
    )


def generate_default_mappings(table: MappingTable) -> None:
    """
    Fill a table with the built-in layout.

    Two registers on channel 0: the low one (from C1) types each key with
    Control held, the one an octave up types it bare. Pads on channel 9
    trigger macro sequences.
    """
    for key_idx, char in enumerate(DEFAULT_KEYS):
        table.add(NoteMapping(
            note=C1 + key_idx,
            channel=0,
            on=down_event(char, Modifier.CONTROL, MOD_DELAY_MS),
            off=up_event(char),
        ))
        table.add(NoteMapping(
            note=C1 + key_idx + 12,
            channel=0,
            on=down_event(char),
            off=up_event(char),
        ))

    for pad_idx, pad in enumerate(DEFAULT_PADS):
        table.add(NoteMapping(
            note=Note(PAD_BASE_NOTE + pad_idx),
            channel=PAD_CHANNEL,
            on=pad_sequence(pad),
        ))


def default_mapping_table() -> MappingTable:
    """Create a table holding the built-in layout."""
    table = MappingTable()
    generate_default_mappings(table)
    return table
