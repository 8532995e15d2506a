"""
Keypad Unit Tests
=================

Tests for the sixteen-key keypad: key names, held state and the
press-event queue.

Copyright (c) 2026 CHIP-8 SDK Contributors
"""

import pytest
from chip8_sdk.emulator import KEY_NAMES, Keyboard, KeyboardState, key_code


class TestKeyNames:
    """Host key names map onto key codes."""

    @pytest.mark.parametrize("name,code", [
        ("0", 0), ("9", 9), ("A", 10), ("F", 15),
        ("NUMPAD0", 0), ("NUMPAD7", 7),
        ("a", 10), ("numpad3", 3),
    ])
    def test_key_code(self, name, code):
        assert key_code(name) == code

    def test_integer_codes(self):
        assert key_code(0) == 0
        assert key_code(15) == 15

    @pytest.mark.parametrize("key", [16, -1, "G", "ENTER", "NUMPAD10"])
    def test_invalid_keys(self, key):
        with pytest.raises(ValueError):
            key_code(key)

    def test_map_covers_all_codes(self):
        assert set(KEY_NAMES.values()) == set(range(16))


class TestHeldState:
    """is_key_down reflects presses and releases."""

    def test_press_and_release(self):
        kb = Keyboard()
        kb.key_down("C")
        assert kb.is_key_down(0xC)
        kb.key_up("C")
        assert not kb.is_key_down(0xC)

    def test_out_of_range_never_down(self):
        kb = Keyboard()
        assert not kb.is_key_down(16)
        assert not kb.is_key_down(255)

    def test_pressed_keys(self):
        kb = Keyboard()
        kb.key_down(3)
        kb.key_down(1)
        assert kb.pressed_keys() == [1, 3]

    def test_tap_leaves_key_up(self):
        kb = Keyboard()
        kb.tap_key(4)
        assert not kb.is_key_down(4)
        assert kb.pending_events() == 1


class TestEvents:
    """The press-event queue consumed by getkey."""

    def test_empty_poll(self):
        assert Keyboard().poll_key_event() is None

    def test_fifo_order(self):
        kb = Keyboard()
        kb.tap_key(2)
        kb.tap_key(7)
        assert kb.poll_key_event() == 2
        assert kb.poll_key_event() == 7
        assert kb.poll_key_event() is None

    def test_held_key_not_requeued(self):
        kb = Keyboard()
        kb.key_down(5)
        kb.key_down(5)
        assert kb.pending_events() == 1

    def test_release_and_press_requeues(self):
        kb = Keyboard()
        kb.tap_key(5)
        kb.tap_key(5)
        assert kb.pending_events() == 2

    def test_clear(self):
        kb = Keyboard()
        kb.key_down(1)
        kb.clear()
        assert kb.pressed_keys() == []
        assert kb.poll_key_event() is None

    def test_state_round_trip(self):
        kb = Keyboard()
        kb.key_down(9)
        kb.tap_key(3)
        state = kb.get_state()
        assert state == KeyboardState(
            pressed=[i == 9 for i in range(16)],
            events=[9, 3],
        )

        other = Keyboard()
        other.set_state(state)
        assert other.is_key_down(9)
        assert other.poll_key_event() == 9
