"""
Event sequence execution.

Runs a note's event sequence in order on the calling thread.
"""

import time
from collections.abc import Callable, Iterable

from .coalescer import ModifierCoalescer
from .events import Delay, Event, KeyDown, KeyUp, ModifierSet

# Time for a keyboard modifier to stick
MOD_DELAY_MS = 150

# Time for a keydown event to stick
KEY_DELAY_MS = 40

# Time required for system events, such as Escape
SYS_DELAY_MS = 400

# Settle time after a modifier change (switching octaves)
OCTAVE_DELAY_MS = 10


def execute(
    sequence: Iterable[Event],
    coalescer: ModifierCoalescer,
    settle_ms: int = OCTAVE_DELAY_MS,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Execute a sequence of events, blocking until the last one is done.

    Args:
        sequence: Events to run, in order.
        coalescer: Modifier state and key simulator to act on.
        settle_ms: Pause after a ModifierSet that changed any modifier.
        sleep: Sleep function taking seconds (injectable for tests).
    """
    for event in sequence:
        if isinstance(event, Delay):
            sleep(event.seconds)
        elif isinstance(event, KeyDown):
            coalescer.press(event.key)
        elif isinstance(event, KeyUp):
            coalescer.release(event.key)
        elif isinstance(event, ModifierSet):
            if coalescer.set(event.modifier) and settle_ms > 0:
                sleep(settle_ms / 1000)
        else:
            raise TypeError(f"Unknown sequence event: {event!r}")
