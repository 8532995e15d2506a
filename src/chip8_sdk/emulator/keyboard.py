"""
Hexadecimal Keypad for the CHIP-8 Emulator
==========================================

The CHIP-8 keypad has sixteen keys, 0-F:

    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F

Two kinds of question are asked of it:

- "is key K down right now?" (skp / sknp), answered from a fixed
  16-entry pressed-state array indexed by key code;
- "has a key been pressed, and which?" (getkey), answered from a queue
  of press events that the getkey instruction consumes one at a time.

Host key names follow the desktop layout the emulator was first built
for: the digit keys and A-F, plus the numeric keypad.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from chip8_sdk.cpu.chip8 import NUM_KEYS


# =============================================================================
# HOST KEY MAP
# =============================================================================
# Host key name to CHIP-8 key code. Both the main-row digits and the
# numeric keypad map to 0-9.

KEY_NAMES: Dict[str, int] = {
    **{str(d): d for d in range(10)},
    **{f"NUMPAD{d}": d for d in range(10)},
    "A": 0xA, "B": 0xB, "C": 0xC, "D": 0xD, "E": 0xE, "F": 0xF,
}

KeyRef = Union[int, str]


def key_code(key: KeyRef) -> int:
    """
    Translate a key reference into a key code.

    Args:
        key: Key code 0-15, or a host key name such as "A" or "numpad5"
             (names are case-insensitive)

    Raises:
        ValueError: If the key is not on the keypad
    """
    if isinstance(key, int):
        if 0 <= key < NUM_KEYS:
            return key
        raise ValueError(f"key code must be 0-15, got {key}")

    code = KEY_NAMES.get(key.upper())
    if code is None:
        raise ValueError(f"unknown key name: {key!r}")
    return code


@dataclass
class KeyboardState:
    """
    Keypad state for snapshotting.

    Attributes:
        pressed: Pressed flag per key code
        events: Pending key-press events, oldest first
    """
    pressed: List[bool] = field(default_factory=lambda: [False] * NUM_KEYS)
    events: List[int] = field(default_factory=list)


class Keyboard:
    """
    Sixteen-key keypad with a press-event queue.

    Example:
        >>> kb = Keyboard()
        >>> kb.key_down("A")
        >>> kb.is_key_down(0xA)
        True
        >>> kb.poll_key_event()
        10
        >>> kb.poll_key_event() is None
        True
    """

    def __init__(self) -> None:
        self._pressed: List[bool] = [False] * NUM_KEYS
        self._events: deque[int] = deque()

    def key_down(self, key: KeyRef) -> None:
        """Press a key. A key that is already down is not queued again."""
        code = key_code(key)
        if not self._pressed[code]:
            self._events.append(code)
        self._pressed[code] = True

    def key_up(self, key: KeyRef) -> None:
        """Release a key."""
        self._pressed[key_code(key)] = False

    def tap_key(self, key: KeyRef) -> None:
        """
        Press and release a key.

        The press event stays queued for getkey, but skp/sknp will see
        the key as up.
        """
        self.key_down(key)
        self.key_up(key)

    def is_key_down(self, code: int) -> bool:
        """
        Check whether a key is held.

        Codes outside 0-15 name no key and are never down.
        """
        if 0 <= code < NUM_KEYS:
            return self._pressed[code]
        return False

    def poll_key_event(self) -> Optional[int]:
        """
        Take the oldest pending key-press event.

        Returns:
            The key code, or None if no key has been pressed since the
            last poll
        """
        if self._events:
            return self._events.popleft()
        return None

    def pending_events(self) -> int:
        return len(self._events)

    def pressed_keys(self) -> List[int]:
        """Codes of all keys currently held, ascending."""
        return [code for code, down in enumerate(self._pressed) if down]

    def clear(self) -> None:
        """Release all keys and drop pending events."""
        self._pressed = [False] * NUM_KEYS
        self._events.clear()

    # =========================================================================
    # Snapshot Support
    # =========================================================================

    def get_state(self) -> KeyboardState:
        return KeyboardState(pressed=list(self._pressed), events=list(self._events))

    def set_state(self, state: KeyboardState) -> None:
        self._pressed = list(state.pressed)
        self._events = deque(state.events)
