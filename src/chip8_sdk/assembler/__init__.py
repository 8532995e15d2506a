"""
CHIP-8 Assembler
================

This package provides a two-pass assembler for the CHIP-8 mnemonic
language. It turns source text into a program image that loads at $200.

Main Components
---------------
- **Assembler**: Main class that runs the pipeline and writes outputs
- **Lexer**: Tokenizes source into label, identifier and number tokens
- **Parser**: First pass, which builds instruction records and the label table
- **CodeGenerator**: Second pass, which resolves labels and encodes opcodes

Assembly Process
----------------
1. **Tokenizing (Lexer)**: comments and unknown punctuation are dropped.
2. **Pass 1 (Parser)**: each label records the offset of the next
   instruction. Each mnemonic consumes its fixed number of operands,
   checked by kind, and advances the offset by 2.
3. **Pass 2 (CodeGenerator)**: every record is encoded through the shared
   opcode table. Labels resolve to offset + $200. Registers, bytes, sprite
   heights and addresses are range-checked.

Any error aborts the assembly; there is no warning tier.

Instruction Summary
-------------------
    cls                     clear screen
    ret                     return
    jp <nnn | .label>       jump to address
    call <nnn | .label>     call subroutine
    se vx, <vy | nn>        skip if equal
    sne vx, <vy | nn>       skip if not equal
    gt vx, vy               vf = vx > vy     (extension)
    gte vx, vy              vf = vx >= vy    (extension)
    lt vx, vy               vf = vx < vy     (extension)
    lte vx, vy              vf = vx <= vy    (extension)
    ld vx, <nn | vy | dt>   load nn, vy or dt into vx
    ld dt, vx               load vx into delay timer
    ld st, vx               load vx into sound timer
    ldi nnn                 load address into I
    ldsprt vx               point I at the font glyph for vx
    ldbcd vx                store BCD of vx at I..I+2
    dumpreg vx              store v0..vx at I
    ldreg vx                load v0..vx from I
    getkey vx               wait for a key press, store it in vx
    add vx, <nn | vy>       add to vx
    addi vx                 I += vx
    sub vx, vy              vx -= vy
    subn vx, vy             vx = vy - vx
    shr vx                  vx >>= 1
    shl vx                  vx <<= 1
    rnd vx, nn              vx = random & nn
    drw vx, vy, n           draw n-byte sprite from I at (vx, vy)
    skp vx                  skip if key vx is down
    sknp vx                 skip if key vx is up
"""

from chip8_sdk.assembler.assembler import Assembler, assemble, assemble_file, resolve_labels
from chip8_sdk.assembler.lexer import Lexer, Token, TokenType, tokenize
from chip8_sdk.assembler.parser import InstructionRecord, Label, LabelTable, Parser
from chip8_sdk.assembler.codegen import CodeGenerator

__all__ = [
    "Assembler",
    "assemble",
    "assemble_file",
    "resolve_labels",
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    "InstructionRecord",
    "Label",
    "LabelTable",
    "Parser",
    "CodeGenerator",
]
