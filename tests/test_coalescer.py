"""Tests for modifier coalescing."""

import pytest

from midi_perform.keys import LayoutKey, Modifier


@pytest.mark.unit
class TestModifierCoalescer:
    def test_set_is_idempotent(self, coalescer, key_log):
        assert coalescer.set(Modifier.CONTROL) is True
        assert coalescer.set(Modifier.CONTROL) is False
        assert key_log == [("press", Modifier.CONTROL)]

    def test_set_none_twice(self, coalescer, key_log):
        coalescer.set(Modifier.SHIFT)
        assert coalescer.set(None) is True
        assert coalescer.set(None) is False
        assert key_log == [("press", Modifier.SHIFT), ("release", Modifier.SHIFT)]

    def test_set_none_when_nothing_held(self, coalescer, key_log):
        assert coalescer.set(None) is False
        assert key_log == []

    def test_switching_modifier_releases_the_other(self, coalescer, key_log):
        coalescer.set(Modifier.SHIFT)
        key_log.clear()

        assert coalescer.set(Modifier.CONTROL) is True
        assert key_log == [("release", Modifier.SHIFT), ("press", Modifier.CONTROL)]
        assert coalescer.held == {Modifier.CONTROL}

    def test_untracked_desired_only_releases(self, coalescer, key_log):
        coalescer.set(Modifier.CONTROL)
        key_log.clear()

        assert coalescer.set(Modifier.ALT) is True
        assert key_log == [("release", Modifier.CONTROL)]
        assert coalescer.held == frozenset()

    def test_explicit_press_updates_held(self, coalescer, key_log):
        assert coalescer.press(Modifier.CONTROL) is True
        assert coalescer.press(Modifier.CONTROL) is False
        assert coalescer.set(Modifier.CONTROL) is False
        assert key_log == [("press", Modifier.CONTROL)]

    def test_explicit_release_of_unheld_modifier_is_skipped(self, coalescer, key_log):
        assert coalescer.release(Modifier.SHIFT) is False
        assert key_log == []

    def test_untracked_keys_always_pass_through(self, coalescer, key_log):
        assert coalescer.press(LayoutKey("a")) is True
        assert coalescer.press(LayoutKey("a")) is True
        assert coalescer.release(Modifier.ALT) is True
        assert key_log == [
            ("press", LayoutKey("a")),
            ("press", LayoutKey("a")),
            ("release", Modifier.ALT),
        ]

    def test_release_all(self, coalescer, key_log):
        coalescer.press(Modifier.SHIFT)
        coalescer.press(Modifier.CONTROL)
        key_log.clear()

        assert coalescer.release_all() is True
        assert sorted(key_log, key=str) == sorted(
            [("release", Modifier.SHIFT), ("release", Modifier.CONTROL)], key=str
        )
        assert coalescer.held == frozenset()

    def test_custom_tracked_set(self, simulator, key_log):
        from midi_perform.coalescer import ModifierCoalescer

        coalescer = ModifierCoalescer(simulator, tracked=[Modifier.ALT])
        assert coalescer.set(Modifier.ALT) is True
        assert coalescer.set(Modifier.ALT) is False
        assert coalescer.press(Modifier.SHIFT) is True
        assert key_log == [("press", Modifier.ALT), ("press", Modifier.SHIFT)]
