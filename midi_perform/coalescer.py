"""
Modifier key coalescing.

Tracks which modifier keys are held and only sends the key transitions
needed to reach a requested modifier state, so consecutive notes in the
same register cost no extra key events.
"""

from collections.abc import Iterable

from .keyboard import KeySimulator
from .keys import Key, Modifier

DEFAULT_TRACKED_MODIFIERS = (Modifier.SHIFT, Modifier.CONTROL)


class ModifierCoalescer:
    """
    Owns a KeySimulator and the held state of its tracked modifiers.

    All key traffic goes through press()/release() so that explicit
    KeyDown/KeyUp events on a tracked modifier keep the held set accurate.
    """

    def __init__(
        self,
        simulator: KeySimulator,
        tracked: Iterable[Modifier] = DEFAULT_TRACKED_MODIFIERS,
    ):
        self.simulator = simulator
        self.tracked: tuple[Modifier, ...] = tuple(tracked)
        self._held: set[Modifier] = set()

    @property
    def held(self) -> frozenset[Modifier]:
        """Tracked modifiers currently believed to be pressed."""
        return frozenset(self._held)

    def press(self, key: Key) -> bool:
        """
        Press a key.

        Returns:
            False if the key is a tracked modifier that is already held,
            True if a press was sent.
        """
        if key in self.tracked:
            if key in self._held:
                return False
            self.simulator.press(key)
            self._held.add(key)
            return True
        self.simulator.press(key)
        return True

    def release(self, key: Key) -> bool:
        """
        Release a key.

        Returns:
            False if the key is a tracked modifier that is not held,
            True if a release was sent.
        """
        if key in self.tracked:
            if key not in self._held:
                return False
            self.simulator.release(key)
            self._held.discard(key)
            return True
        self.simulator.release(key)
        return True

    def set(self, desired: Modifier | None) -> bool:
        """
        Move the tracked modifiers to exactly `desired` held (or none).

        Returns:
            True if at least one press or release was sent.
        """
        changed = False
        for modifier in self.tracked:
            if modifier == desired:
                changed |= self.press(modifier)
            else:
                changed |= self.release(modifier)
        return changed

    def release_all(self) -> bool:
        """Release every held tracked modifier."""
        return self.set(None)
