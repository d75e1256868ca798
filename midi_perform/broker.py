"""
Message broker for routing MIDI note messages to key sequences.

The broker is the single owner of the mapping table and the keyboard.
Device threads hand messages to handle(), which only enqueues them; one
owner thread plays each triggered sequence to completion before taking
the next message, so key output from different notes never interleaves.
"""

import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .coalescer import ModifierCoalescer
from .mappings import MappingTable
from .messages import MidiMessage, NoteOff, NoteOn, UnknownMessage
from .sequencer import OCTAVE_DELAY_MS, execute

# Marks the end of the queue
_STOP = object()


@dataclass
class MessageBroker:
    """
    Routes note messages to the sequences bound in a mapping table.

    Handles:
    - Note-on / note-off lookup
    - Serialized sequence playback on one owner thread
    - Releasing held modifiers on shutdown
    """
    mappings: MappingTable
    coalescer: ModifierCoalescer
    settle_ms: int = OCTAVE_DELAY_MS
    quiet: bool = False
    sleep: Callable[[float], None] = time.sleep
    _queue: queue.Queue = field(default_factory=queue.Queue, init=False, repr=False)
    _thread: threading.Thread | None = field(default=None, init=False, repr=False)

    def handle(self, device_name: str, message: MidiMessage | UnknownMessage) -> None:
        """
        Queue a message for the owner thread.

        Safe to call from any thread; never blocks on key output.
        """
        self._queue.put((device_name, message))

    def dispatch(self, device_name: str, message: MidiMessage | UnknownMessage) -> bool:
        """
        Look up a message and play its sequence on the calling thread.

        Returns:
            True if a sequence was played.
        """
        if not isinstance(message, (NoteOn, NoteOff)):
            return False

        if not self.quiet:
            print(f"[{device_name}] {message}")

        mapping = self.mappings.find(message.note, message.channel)
        if mapping is None:
            print(f"No note mapping for {message.note} @ {message.channel}")
            return False

        sequence = mapping.on if isinstance(message, NoteOn) else mapping.off
        execute(sequence, self.coalescer, settle_ms=self.settle_ms, sleep=self.sleep)
        return True

    def start(self) -> None:
        """Start the owner thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="midi-perform-keys", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Finish queued messages, stop the owner thread, and release modifiers.

        Modifiers are released by the owner thread once it reaches the end of
        the queue. If the join times out the owner thread keeps running and
        releases them when its current sequence finishes.
        """
        if self._thread is None:
            self.coalescer.release_all()
            return

        self._queue.put(_STOP)
        self._thread.join(timeout)
        if self._thread.is_alive():
            print("  -> Still playing a sequence; modifiers will be released when it ends")
            return
        self._thread = None

    def drain(self) -> None:
        """Play every queued message on the calling thread."""
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is _STOP:
                return
            self._dispatch_safely(*item)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                try:
                    self.coalescer.release_all()
                except Exception as e:
                    print(f"  -> Error releasing modifiers: {e}")
                return
            self._dispatch_safely(*item)

    def _dispatch_safely(self, device_name: str, message: MidiMessage | UnknownMessage) -> None:
        try:
            self.dispatch(device_name, message)
        except Exception as e:
            print(f"  -> Error playing sequence for [{device_name}] {message}: {e}")


def create_broker(
    mappings: MappingTable,
    coalescer: ModifierCoalescer,
    settle_ms: int = OCTAVE_DELAY_MS,
    quiet: bool = False,
) -> MessageBroker:
    """
    Create a message broker with the given configuration.

    Args:
        mappings: Table of note mappings the broker will own.
        coalescer: Modifier coalescer wrapping the key simulator.
        settle_ms: Pause after a modifier change.
        quiet: Suppress the per-message log line.

    Returns:
        Configured MessageBroker.
    """
    return MessageBroker(
        mappings=mappings,
        coalescer=coalescer,
        settle_ms=settle_ms,
        quiet=quiet,
    )
