"""
CHIP-8 SDK CPU Package
======================

This package contains the CHIP-8 architecture definitions shared by the
assembler, the disassembler and the emulator.

Modules:
    chip8: Instruction set definitions, operand forms, memory layout
           constants, the built-in font, and encode/decode helpers.

Both the assembler (which encodes instructions) and the disassembler
(which decodes them) use the same table, so the two can never disagree
about what a word means.

Usage:
    from chip8_sdk.cpu import (
        OperandForm,
        InstructionInfo,
        OPCODE_TABLE,
        get_instruction_info,
    )
"""

# =============================================================================
# Public API Exports
# =============================================================================

from chip8_sdk.cpu.chip8 import (
    # Machine constants
    MEMORY_SIZE,
    PROGRAM_START,
    MAX_PROGRAM_SIZE,
    ADDRESS_MASK,
    NUM_REGISTERS,
    FLAG_REGISTER,
    STACK_DEPTH,
    NUM_KEYS,
    DISPLAY_WIDTH,
    DISPLAY_HEIGHT,
    MAX_SPRITE_HEIGHT,
    FONT_ADDRESS,
    FONT_GLYPH_SIZE,
    FONT_SPRITES,
    font_address,
    # Core types
    OperandForm,
    OperandKind,
    InstructionInfo,
    # Instruction database
    OPCODE_TABLE,
    OPERAND_SYNTAX,
    DECODE_ONLY,
    MNEMONICS,
    TIMER_KEYWORDS,
    # Lookup functions
    get_instruction_info,
    get_valid_forms,
    is_valid_instruction,
    decode,
    encode,
)

__all__ = [
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_PROGRAM_SIZE",
    "ADDRESS_MASK",
    "NUM_REGISTERS",
    "FLAG_REGISTER",
    "STACK_DEPTH",
    "NUM_KEYS",
    "DISPLAY_WIDTH",
    "DISPLAY_HEIGHT",
    "MAX_SPRITE_HEIGHT",
    "FONT_ADDRESS",
    "FONT_GLYPH_SIZE",
    "FONT_SPRITES",
    "font_address",
    "OperandForm",
    "OperandKind",
    "InstructionInfo",
    "OPCODE_TABLE",
    "OPERAND_SYNTAX",
    "DECODE_ONLY",
    "MNEMONICS",
    "TIMER_KEYWORDS",
    "get_instruction_info",
    "get_valid_forms",
    "is_valid_instruction",
    "decode",
    "encode",
]
