"""
CHIP-8 Instruction Set Definition
=================================

This module is the single source of truth for the CHIP-8 instruction set
as used by this SDK. The assembler encodes from it, the disassembler
decodes with it, and the interpreter takes its memory layout and font
from it.

Instruction Format
------------------
Every instruction is one 16-bit big-endian word. Operand fields are
packed into fixed nibble positions:

    15..12  11..8  7..4  3..0
    op      x      y     n
            nnn (12-bit address)
                   kk (8-bit immediate)

Operand Forms
-------------
The assembler picks an encoding from the mnemonic plus the *shape* of
its operands, the way a classic assembler picks an addressing mode:

| Form           | Syntax            | Fields   |
|----------------|-------------------|----------|
| NONE           | cls               | -        |
| ADDRESS        | jp 512 / jp .loop | nnn      |
| REG            | shr v1            | x        |
| REG_BYTE       | ld v1, 42         | x, kk    |
| REG_REG        | ld v1, v2         | x, y     |
| REG_REG_NIBBLE | drw v1, v2, 5     | x, y, n  |
| REG_DT         | ld v1, dt         | x        |
| DT_REG         | ld dt, v1         | x        |
| ST_REG         | ld st, v1         | x        |

Comparison Extension
--------------------
The gt/gte/lt/lte instructions (9xy1-9xy4) are NOT part of the baseline
CHIP-8 instruction set. They are a local extension that stores the
result of an unsigned comparison in VF (1 = true, 0 = false) without
altering control flow. Programs that use them will not run on other
CHIP-8 interpreters.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Machine Constants
# =============================================================================

MEMORY_SIZE = 0x1000          # 4 KiB address space
PROGRAM_START = 0x200         # Programs load here; below is reserved
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START  # $E00 bytes
ADDRESS_MASK = 0xFFF

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF           # VF doubles as carry/borrow/collision flag
STACK_DEPTH = 16
NUM_KEYS = 16

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32

MAX_SPRITE_HEIGHT = 10        # Largest height the assembler accepts for drw

FONT_ADDRESS = 0x000
FONT_GLYPH_SIZE = 5

# Built-in hexadecimal digit glyphs 0-F, 5 rows each, 4 pixels wide
# (the high nibble of each row byte).
FONT_SPRITES = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def font_address(digit: int) -> int:
    """Return the address of the built-in glyph for a hex digit (0-15)."""
    return FONT_ADDRESS + (digit & 0xF) * FONT_GLYPH_SIZE


# =============================================================================
# Operand Forms
# =============================================================================

class OperandForm(Enum):
    """
    Operand shapes an instruction can take.

    Each form fixes which opcode fields are filled and from which
    operand, and so determines the encoding.
    """
    NONE = auto()            # cls, ret
    ADDRESS = auto()         # nnn from a number or label
    REG = auto()             # x
    REG_BYTE = auto()        # x, kk
    REG_REG = auto()         # x, y
    REG_REG_NIBBLE = auto()  # x, y, n
    REG_DT = auto()          # x (destination), delay timer source
    DT_REG = auto()          # x (source), delay timer destination
    ST_REG = auto()          # x (source), sound timer destination

    def __str__(self) -> str:
        """Return the operand syntax for error messages."""
        return {
            OperandForm.NONE: "no operands",
            OperandForm.ADDRESS: "address",
            OperandForm.REG: "vx",
            OperandForm.REG_BYTE: "vx, byte",
            OperandForm.REG_REG: "vx, vy",
            OperandForm.REG_REG_NIBBLE: "vx, vy, n",
            OperandForm.REG_DT: "vx, dt",
            OperandForm.DT_REG: "dt, vx",
            OperandForm.ST_REG: "st, vx",
        }[self]


class OperandKind(Enum):
    """
    Token-level operand categories checked by the first assembler pass.

    REGISTER matches anything spelled like a register (``v`` followed by
    anything, or the ``dt``/``st`` keywords); whether it names a real
    register is checked when encoding.
    """
    REGISTER = auto()
    NUMBER = auto()
    LABEL = auto()

    def __str__(self) -> str:
        return self.name.lower()


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Encoding of one mnemonic in one operand form.

    Attributes:
        opcode: Opcode template with all operand fields zero
        mask: Bits of a word that must equal ``opcode`` for it to decode
              as this instruction
        form: Operand form, which says how operands fill the template
    """
    opcode: int
    mask: int
    form: OperandForm

    def __repr__(self) -> str:
        return f"InstructionInfo(opcode=${self.opcode:04X}, mask=${self.mask:04X}, form={self.form.name})"


# =============================================================================
# Opcode Table
# =============================================================================
# Key: (mnemonic, operand form)
# Value: InstructionInfo(opcode template, decode mask, form)
# =============================================================================

OPCODE_TABLE: dict[tuple[str, OperandForm], InstructionInfo] = {
    # Flow control
    ("cls", OperandForm.NONE): InstructionInfo(0x00E0, 0xFFFF, OperandForm.NONE),        # Clear display
    ("ret", OperandForm.NONE): InstructionInfo(0x00EE, 0xFFFF, OperandForm.NONE),        # Return
    ("jp", OperandForm.ADDRESS): InstructionInfo(0x1000, 0xF000, OperandForm.ADDRESS),   # Jump
    ("call", OperandForm.ADDRESS): InstructionInfo(0x2000, 0xF000, OperandForm.ADDRESS), # Call

    # Conditional skips
    ("se", OperandForm.REG_BYTE): InstructionInfo(0x3000, 0xF000, OperandForm.REG_BYTE),
    ("sne", OperandForm.REG_BYTE): InstructionInfo(0x4000, 0xF000, OperandForm.REG_BYTE),
    ("se", OperandForm.REG_REG): InstructionInfo(0x5000, 0xF00F, OperandForm.REG_REG),
    ("sne", OperandForm.REG_REG): InstructionInfo(0x9000, 0xF00F, OperandForm.REG_REG),

    # Loads and immediate arithmetic
    ("ld", OperandForm.REG_BYTE): InstructionInfo(0x6000, 0xF000, OperandForm.REG_BYTE),
    ("add", OperandForm.REG_BYTE): InstructionInfo(0x7000, 0xF000, OperandForm.REG_BYTE),

    # Register-register ALU (8xyN)
    ("ld", OperandForm.REG_REG): InstructionInfo(0x8000, 0xF00F, OperandForm.REG_REG),
    ("or", OperandForm.REG_REG): InstructionInfo(0x8001, 0xF00F, OperandForm.REG_REG),
    ("and", OperandForm.REG_REG): InstructionInfo(0x8002, 0xF00F, OperandForm.REG_REG),
    ("xor", OperandForm.REG_REG): InstructionInfo(0x8003, 0xF00F, OperandForm.REG_REG),
    ("add", OperandForm.REG_REG): InstructionInfo(0x8004, 0xF00F, OperandForm.REG_REG),
    ("sub", OperandForm.REG_REG): InstructionInfo(0x8005, 0xF00F, OperandForm.REG_REG),
    ("shr", OperandForm.REG): InstructionInfo(0x8006, 0xF00F, OperandForm.REG),
    ("subn", OperandForm.REG_REG): InstructionInfo(0x8007, 0xF00F, OperandForm.REG_REG),
    ("shl", OperandForm.REG): InstructionInfo(0x800E, 0xF00F, OperandForm.REG),

    # Comparison extension (non-standard, result in VF)
    ("gt", OperandForm.REG_REG): InstructionInfo(0x9001, 0xF00F, OperandForm.REG_REG),
    ("gte", OperandForm.REG_REG): InstructionInfo(0x9002, 0xF00F, OperandForm.REG_REG),
    ("lt", OperandForm.REG_REG): InstructionInfo(0x9003, 0xF00F, OperandForm.REG_REG),
    ("lte", OperandForm.REG_REG): InstructionInfo(0x9004, 0xF00F, OperandForm.REG_REG),

    # Index register, jumps through V0, random, drawing
    ("ldi", OperandForm.ADDRESS): InstructionInfo(0xA000, 0xF000, OperandForm.ADDRESS),
    ("jp0", OperandForm.ADDRESS): InstructionInfo(0xB000, 0xF000, OperandForm.ADDRESS),
    ("rnd", OperandForm.REG_BYTE): InstructionInfo(0xC000, 0xF000, OperandForm.REG_BYTE),
    ("drw", OperandForm.REG_REG_NIBBLE): InstructionInfo(0xD000, 0xF000, OperandForm.REG_REG_NIBBLE),

    # Keypad
    ("skp", OperandForm.REG): InstructionInfo(0xE09E, 0xF0FF, OperandForm.REG),
    ("sknp", OperandForm.REG): InstructionInfo(0xE0A1, 0xF0FF, OperandForm.REG),

    # Timers, memory and misc (FxKK)
    ("ld", OperandForm.REG_DT): InstructionInfo(0xF007, 0xF0FF, OperandForm.REG_DT),
    ("getkey", OperandForm.REG): InstructionInfo(0xF00A, 0xF0FF, OperandForm.REG),
    ("ld", OperandForm.DT_REG): InstructionInfo(0xF015, 0xF0FF, OperandForm.DT_REG),
    ("ld", OperandForm.ST_REG): InstructionInfo(0xF018, 0xF0FF, OperandForm.ST_REG),
    ("addi", OperandForm.REG): InstructionInfo(0xF01E, 0xF0FF, OperandForm.REG),
    ("ldsprt", OperandForm.REG): InstructionInfo(0xF029, 0xF0FF, OperandForm.REG),
    ("ldbcd", OperandForm.REG): InstructionInfo(0xF033, 0xF0FF, OperandForm.REG),
    ("dumpreg", OperandForm.REG): InstructionInfo(0xF055, 0xF0FF, OperandForm.REG),
    ("ldreg", OperandForm.REG): InstructionInfo(0xF065, 0xF0FF, OperandForm.REG),
}

# The interpreter executes or/and/xor (8xy1-8xy3) and Bnnn, but the
# assembly language has no mnemonics for them. They stay in the table
# (under the names the disassembler prints) so that decoding is complete,
# and are excluded from what the assembler accepts.
DECODE_ONLY: frozenset[str] = frozenset({"or", "and", "xor", "jp0"})


# =============================================================================
# Assembly Syntax
# =============================================================================
# Operand kinds accepted at each position, checked token by token in the
# first pass. The number of entries is the mnemonic's arity.

_REG = frozenset({OperandKind.REGISTER})
_NUM = frozenset({OperandKind.NUMBER})
_REG_OR_NUM = frozenset({OperandKind.REGISTER, OperandKind.NUMBER})
_TARGET = frozenset({OperandKind.NUMBER, OperandKind.LABEL})

OPERAND_SYNTAX: dict[str, tuple[frozenset[OperandKind], ...]] = {
    "cls": (),
    "ret": (),
    "jp": (_TARGET,),
    "call": (_TARGET,),
    "se": (_REG, _REG_OR_NUM),
    "sne": (_REG, _REG_OR_NUM),
    "gt": (_REG, _REG),
    "gte": (_REG, _REG),
    "lt": (_REG, _REG),
    "lte": (_REG, _REG),
    "ld": (_REG, _REG_OR_NUM),
    "ldi": (_NUM,),
    "ldsprt": (_REG,),
    "ldbcd": (_REG,),
    "dumpreg": (_REG,),
    "ldreg": (_REG,),
    "getkey": (_REG,),
    "add": (_REG, _REG_OR_NUM),
    "addi": (_REG,),
    "sub": (_REG, _REG),
    "subn": (_REG, _REG),
    "shr": (_REG,),
    "shl": (_REG,),
    "rnd": (_REG, _NUM),
    "drw": (_REG, _REG, _NUM),
    "skp": (_REG,),
    "sknp": (_REG,),
}

# Set of all mnemonics the assembler accepts
MNEMONICS: frozenset[str] = frozenset(OPERAND_SYNTAX)

# Pseudo-registers usable only in the ld timer forms
TIMER_KEYWORDS: frozenset[str] = frozenset({"dt", "st"})


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str, form: OperandForm) -> Optional[InstructionInfo]:
    """
    Look up instruction information by mnemonic and operand form.

    Returns:
        InstructionInfo if found, None if the combination is invalid
    """
    return OPCODE_TABLE.get((mnemonic, form))


def get_valid_forms(mnemonic: str) -> list[OperandForm]:
    """Get all operand forms the assembler accepts for a mnemonic."""
    return [form for (m, form) in OPCODE_TABLE if m == mnemonic]


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is part of the assembly language."""
    return mnemonic in MNEMONICS


def decode(word: int) -> Optional[tuple[str, InstructionInfo]]:
    """
    Find the instruction a 16-bit word encodes.

    Returns:
        (mnemonic, InstructionInfo), or None if the word is not a valid
        instruction
    """
    for (mnemonic, _), info in OPCODE_TABLE.items():
        if word & info.mask == info.opcode:
            return mnemonic, info
    return None


def encode(info: InstructionInfo, x: int = 0, y: int = 0, value: int = 0) -> int:
    """
    Fill an opcode template with operand fields.

    Args:
        info: Instruction to encode
        x: Register index for the x field
        y: Register index for the y field
        value: nnn, kk or n depending on the form

    Returns:
        The 16-bit instruction word
    """
    word = info.opcode | ((x & 0xF) << 8)
    match info.form:
        case OperandForm.ADDRESS:
            word = info.opcode | (value & ADDRESS_MASK)
        case OperandForm.REG_BYTE:
            word |= value & 0xFF
        case OperandForm.REG_REG:
            word |= (y & 0xF) << 4
        case OperandForm.REG_REG_NIBBLE:
            word |= ((y & 0xF) << 4) | (value & 0xF)
        case OperandForm.NONE:
            word = info.opcode
    return word
