"""
Key simulator backends.

The engine only needs press() and release(); platform backends implement
the KeySimulator protocol.
"""

from typing import Protocol

from .keys import Key, LayoutKey, Modifier, SystemKey


class KeySimulator(Protocol):
    """Synthesizes key presses on the platform keyboard."""

    def press(self, key: Key) -> None:
        ...

    def release(self, key: Key) -> None:
        ...


class PynputKeySimulator:
    """Key simulator backed by pynput's keyboard Controller."""

    def __init__(self, controller=None):
        # pynput selects its platform backend on import (needs a display on Linux).
        from pynput.keyboard import Controller, Key as PynputKey

        self._controller = controller if controller is not None else Controller()
        self._special = {
            Modifier.SHIFT: PynputKey.shift,
            Modifier.CONTROL: PynputKey.ctrl,
            Modifier.ALT: PynputKey.alt,
            SystemKey.ESCAPE: PynputKey.esc,
            LayoutKey(" "): PynputKey.space,
        }

    def _resolve(self, key: Key):
        if key in self._special:
            return self._special[key]
        if isinstance(key, LayoutKey):
            return key.char
        raise ValueError(f"No pynput key for {key!r}")

    def press(self, key: Key) -> None:
        self._controller.press(self._resolve(key))

    def release(self, key: Key) -> None:
        self._controller.release(self._resolve(key))


class DryRunKeySimulator:
    """Prints key events instead of sending them."""

    def press(self, key: Key) -> None:
        print(f"  -> [dry-run] press {key}")

    def release(self, key: Key) -> None:
        print(f"  -> [dry-run] release {key}")
