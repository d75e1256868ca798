"""Tests for event sequence execution."""

import pytest

from midi_perform.events import Delay, KeyDown, KeyUp, ModifierSet, down_event, up_event
from midi_perform.keys import LayoutKey, Modifier, SystemKey
from midi_perform.sequencer import OCTAVE_DELAY_MS, execute


@pytest.mark.unit
class TestExecute:
    def test_actions_in_declared_order(self, coalescer, fake_sleep, key_log):
        sequence = (
            KeyDown(SystemKey.ESCAPE),
            Delay(40),
            KeyUp(SystemKey.ESCAPE),
            Delay(400),
            KeyDown(LayoutKey("z")),
            KeyUp(LayoutKey("z")),
        )
        execute(sequence, coalescer, sleep=fake_sleep)

        assert key_log == [
            ("press", SystemKey.ESCAPE),
            ("sleep", 40),
            ("release", SystemKey.ESCAPE),
            ("sleep", 400),
            ("press", LayoutKey("z")),
            ("release", LayoutKey("z")),
        ]

    def test_sleeps_at_least_sum_of_delays(self, coalescer, fake_sleep):
        sequence = (Delay(10), KeyDown(LayoutKey("a")), Delay(25), KeyUp(LayoutKey("a")), Delay(5))
        execute(sequence, coalescer, sleep=fake_sleep)

        assert fake_sleep.total == pytest.approx(0.040)

    def test_real_sleep_blocks(self, coalescer):
        import time

        start = time.monotonic()
        execute((Delay(20), Delay(30)), coalescer)
        assert time.monotonic() - start >= 0.05

    def test_modifier_change_adds_settle_delay(self, coalescer, fake_sleep, key_log):
        execute((ModifierSet(Modifier.CONTROL), KeyDown(LayoutKey("t"))), coalescer, sleep=fake_sleep)

        assert key_log == [
            ("press", Modifier.CONTROL),
            ("sleep", OCTAVE_DELAY_MS),
            ("press", LayoutKey("t")),
        ]

    def test_unchanged_modifier_has_no_settle_delay(self, coalescer, fake_sleep, key_log):
        execute((ModifierSet(Modifier.CONTROL),), coalescer, sleep=fake_sleep)
        key_log.clear()

        execute((ModifierSet(Modifier.CONTROL), KeyDown(LayoutKey("h"))), coalescer, sleep=fake_sleep)
        assert key_log == [("press", LayoutKey("h"))]

    def test_custom_settle_delay(self, coalescer, fake_sleep):
        execute((ModifierSet(Modifier.SHIFT),), coalescer, settle_ms=25, sleep=fake_sleep)
        assert fake_sleep.calls == [0.025]

    def test_zero_settle_delay_skips_sleep(self, coalescer, fake_sleep):
        execute((ModifierSet(Modifier.SHIFT),), coalescer, settle_ms=0, sleep=fake_sleep)
        assert fake_sleep.calls == []

    def test_unknown_event(self, coalescer, fake_sleep):
        with pytest.raises(TypeError):
            execute(("not an event",), coalescer, sleep=fake_sleep)


@pytest.mark.unit
class TestSequenceHelpers:
    def test_down_event(self):
        assert down_event("t") == (ModifierSet(None), KeyDown(LayoutKey("t")))
        assert down_event("t", Modifier.CONTROL, 150) == (
            ModifierSet(Modifier.CONTROL),
            KeyDown(LayoutKey("t")),
            Delay(150),
        )

    def test_up_event_leaves_modifier_held(self):
        assert up_event("t") == (KeyUp(LayoutKey("t")),)

    def test_same_register_notes_skip_modifier(self, coalescer, fake_sleep, key_log):
        for char in "th":
            execute(down_event(char, Modifier.CONTROL), coalescer, sleep=fake_sleep)
            execute(up_event(char), coalescer, sleep=fake_sleep)

        assert key_log == [
            ("press", Modifier.CONTROL),
            ("sleep", OCTAVE_DELAY_MS),
            ("press", LayoutKey("t")),
            ("release", LayoutKey("t")),
            ("press", LayoutKey("h")),
            ("release", LayoutKey("h")),
        ]
