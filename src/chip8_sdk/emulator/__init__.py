"""
CHIP-8 Emulator
===============

A CHIP-8 virtual machine: interpreter core plus in-memory display and
keypad.

- **Interpreter**: the full instruction set, including the gt/gte/lt/lte
  comparison extension
- **Memory**: 4 KiB with the built-in hex font at $000
- **Display**: 64 × 32 XOR-drawn pixels, with text and PNG rendering
- **Keypad**: 16 keys with held-state queries and a press-event queue

Quick Start
-----------

Run assembled source::

    >>> from chip8_sdk.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator()
    >>> code = emu.load_program("ld v0, 1  ld v1, 250  add v1, v0")
    >>> emu.run(3)
    3
    >>> emu.registers["v1"]
    251

Run a ROM in real time::

    >>> emu = Emulator(EmulatorConfig(cycles_per_second=500))
    >>> emu.load_rom_file("pong.ch8")
    >>> emu.run_realtime(2.0)

Timing
------

The interpreter has no clock. Delay and sound timers tick once per
executed instruction; ``run_realtime`` (or any host loop) decides how
many instructions run per second.

Module Structure
----------------

- `emulator.py`: Main Emulator class (high-level API)
- `cpu.py`: Interpreter core and the display/input protocols
- `memory.py`: 4 KiB memory and ROM loading
- `display.py`: Pixel grid
- `keyboard.py`: Keypad and host key names
"""

# Main entry point
from .emulator import Emulator, EmulatorConfig

# CPU components
from .cpu import Chip8CPU, CPUState, DisplaySurface, InputSurface

# Memory subsystem
from .memory import Memory

# I/O
from .display import Display, DisplayState
from .keyboard import Keyboard, KeyboardState, KEY_NAMES, key_code

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",

    # CPU
    "Chip8CPU",
    "CPUState",
    "DisplaySurface",
    "InputSurface",

    # Memory
    "Memory",

    # Display
    "Display",
    "DisplayState",

    # Keyboard
    "Keyboard",
    "KeyboardState",
    "KEY_NAMES",
    "key_code",
]
