"""
CHIP-8 SDK Disassembler Module
==============================

Disassembly of CHIP-8 program images, for inspecting ROMs and for
debugging programs running in the emulator.

Usage:
    from chip8_sdk.disassembler import Chip8Disassembler

    disasm = Chip8Disassembler()
    instructions = disasm.disassemble(rom_bytes, start_address=0x200)
"""

from .chip8 import Chip8Disassembler, DisassembledInstruction

__all__ = [
    "Chip8Disassembler",
    "DisassembledInstruction",
]
