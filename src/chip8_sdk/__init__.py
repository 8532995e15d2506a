"""
CHIP-8 SDK - Assembler, Emulator and Tools for CHIP-8
=====================================================

This package provides a complete toolchain for writing and running
programs for CHIP-8, the 1970s virtual machine with a 64 × 32 monochrome
display, a 16-key hexadecimal keypad and 4 KiB of memory.

Main Components
---------------
- **assembler**: Two-pass CHIP-8 assembler (c8asm)
    Converts assembly source files (.asm) to program images (.ch8)

- **emulator**: CHIP-8 virtual machine (c8run)
    Interpreter core, memory, display and keypad, with headless and
    real-time run loops

- **disassembler**: CHIP-8 disassembler (c8disasm)
    Converts program images back into assembly source

- **cpu**: Instruction set definition
    Opcode table, machine constants and the built-in hex font

Quick Start
-----------
Assemble a program:
    >>> from chip8_sdk.assembler import Assembler
    >>> asm = Assembler()
    >>> code = asm.assemble_file("pong.asm")
    >>> asm.write_binary("pong.ch8")

Run it:
    >>> from chip8_sdk.emulator import Emulator
    >>> emu = Emulator()
    >>> emu.load_rom_file("pong.ch8")
    >>> emu.run(10_000)
    >>> print(emu.display_text)

Or use the command-line tools:
    $ c8asm pong.asm -o pong.ch8
    $ c8disasm pong.ch8
    $ c8run pong.ch8 -n 10000

Version History
---------------
1.0.0 - Initial release with assembler, emulator and disassembler
"""

__version__ = "1.0.0"
__author__ = "CHIP-8 SDK Contributors"

# =============================================================================
# Public API Exports
# =============================================================================
# These are the main classes and functions that users of the library will use.
# We import them here so they can be accessed directly from chip8_sdk.
# =============================================================================

from chip8_sdk.assembler import Assembler
from chip8_sdk.disassembler import Chip8Disassembler
from chip8_sdk.emulator import Emulator, EmulatorConfig
from chip8_sdk.errors import (
    Chip8Error,
    SourceLocation,
    AssemblerError,
    AssemblySyntaxError,
    UnexpectedTokenError,
    MissingOperandError,
    UnknownInstructionError,
    UndefinedLabelError,
    DuplicateLabelError,
    InvalidRegisterError,
    ImmediateOutOfRangeError,
    EmulatorError,
    UnknownOpcodeError,
    StackOverflowError,
    StackUnderflowError,
    RomSizeError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Main classes
    "Assembler",
    "Chip8Disassembler",
    "Emulator",
    "EmulatorConfig",
    # Errors
    "Chip8Error",
    "SourceLocation",
    "AssemblerError",
    "AssemblySyntaxError",
    "UnexpectedTokenError",
    "MissingOperandError",
    "UnknownInstructionError",
    "UndefinedLabelError",
    "DuplicateLabelError",
    "InvalidRegisterError",
    "ImmediateOutOfRangeError",
    "EmulatorError",
    "UnknownOpcodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "RomSizeError",
]
