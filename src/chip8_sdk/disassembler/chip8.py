"""
CHIP-8 Disassembler
===================

Decodes CHIP-8 program images back into assembly language. Output uses
the same mnemonics and operand syntax the assembler accepts, so a
disassembly of a program built with c8asm can be fed straight back in
(decimal operands, labels emitted where a symbol table names an
address).

The interpreter also executes or/and/xor (8xy1-8xy3) and jp0 (Bnnn),
which the assembly language has no mnemonics for; those disassemble
under these names but will not reassemble.

Words that are not valid instructions (usually sprite data embedded in
the program) are shown as ``dw $NNNN`` lines marked "unknown opcode". A
trailing odd byte is shown as ``db $NN``. Neither is accepted by the
assembler; they exist so the listing still accounts for every byte.

Usage:
    >>> from chip8_sdk.disassembler import Chip8Disassembler
    >>> disasm = Chip8Disassembler()
    >>> print(disasm.disassemble_one(bytes([0x63, 0x07])))
    $200: 63 07  ld v3, 7
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from chip8_sdk.cpu.chip8 import (
    ADDRESS_MASK,
    OperandForm,
    PROGRAM_START,
    decode,
)


# =============================================================================
# Disassembled Instruction
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    One decoded instruction (or data word).

    Attributes:
        address: Memory address of the instruction
        opcode: The raw 16-bit word (or the single byte for a trailing db)
        mnemonic: Assembly mnemonic, or "dw"/"db" for data
        operand_str: Formatted operands in assembler syntax
        size: Bytes consumed (2, or 1 for a trailing odd byte)
        raw_bytes: The bytes making up the instruction
        comment: Optional annotation (target address, unknown opcode)
    """
    address: int
    opcode: int
    mnemonic: str
    operand_str: str
    size: int
    raw_bytes: bytes
    comment: str = ""

    @property
    def is_data(self) -> bool:
        return self.mnemonic in ("dw", "db")

    @property
    def source(self) -> str:
        """The instruction as it would be written in a source file."""
        if self.operand_str:
            return f"{self.mnemonic} {self.operand_str}"
        return self.mnemonic

    def __str__(self) -> str:
        """Format as listing line: ADDRESS: BYTES  MNEMONIC OPERANDS"""
        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes).ljust(5)
        if self.comment:
            return f"${self.address:03X}: {hex_bytes}  {self.source:<16} ; {self.comment}"
        return f"${self.address:03X}: {hex_bytes}  {self.source}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"${self.address:03X}",
            "address_int": self.address,
            "opcode": f"${self.opcode:04X}",
            "mnemonic": self.mnemonic,
            "operand": self.operand_str,
            "size": self.size,
            "bytes": [f"${b:02X}" for b in self.raw_bytes],
            "comment": self.comment,
        }


# =============================================================================
# Disassembler
# =============================================================================

class Chip8Disassembler:
    """
    Disassembler for CHIP-8 machine code.

    Decoding is table-driven: each word is matched against the shared
    opcode table, so the disassembler always agrees with the assembler
    and interpreter about what a word means.

    Attributes:
        _symbol_table: Maps absolute addresses to label names (".loop")
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        """
        Initialize the disassembler.

        Args:
            symbol_table: Optional dict mapping addresses to label names.
                          Jump, call and index targets at those addresses
                          are printed as labels.
        """
        self._symbol_table = dict(symbol_table or {})

    def add_symbol(self, address: int, name: str) -> None:
        self._symbol_table[address] = name

    def add_symbols(self, symbols: Dict[int, str]) -> None:
        """
        Add multiple symbols.

        Args:
            symbols: Dictionary mapping addresses to names
        """
        self._symbol_table.update(symbols)

    def disassemble_one(
        self,
        data: bytes,
        address: int = PROGRAM_START,
        offset: int = 0,
    ) -> DisassembledInstruction:
        """
        Disassemble a single instruction.

        Args:
            data: Byte buffer containing the instruction
            address: Memory address of the instruction
            offset: Offset into data where the instruction starts

        Returns:
            DisassembledInstruction with decoded information

        Raises:
            ValueError: If offset is beyond the end of data
        """
        if offset >= len(data):
            raise ValueError(f"Offset {offset} beyond data length {len(data)}")

        if offset + 1 == len(data):
            byte = data[offset]
            return DisassembledInstruction(
                address=address,
                opcode=byte,
                mnemonic="db",
                operand_str=f"${byte:02X}",
                size=1,
                raw_bytes=bytes([byte]),
                comment="trailing byte",
            )

        raw = bytes(data[offset:offset + 2])
        word = (raw[0] << 8) | raw[1]

        decoded = decode(word)
        if decoded is None:
            return DisassembledInstruction(
                address=address,
                opcode=word,
                mnemonic="dw",
                operand_str=f"${word:04X}",
                size=2,
                raw_bytes=raw,
                comment="unknown opcode",
            )

        mnemonic, info = decoded
        operand_str, comment = self._format_operands(mnemonic, info.form, word)
        return DisassembledInstruction(
            address=address,
            opcode=word,
            mnemonic=mnemonic,
            operand_str=operand_str,
            size=2,
            raw_bytes=raw,
            comment=comment,
        )

    def _format_operands(self, mnemonic: str, form: OperandForm, word: int) -> tuple[str, str]:
        """
        Format operand fields in assembler syntax.

        Returns:
            Tuple of (operand_string, comment)
        """
        x = (word >> 8) & 0xF
        y = (word >> 4) & 0xF

        match form:
            case OperandForm.NONE:
                return "", ""
            case OperandForm.ADDRESS:
                return self._format_address(mnemonic, word & ADDRESS_MASK)
            case OperandForm.REG:
                return f"v{x}", ""
            case OperandForm.REG_BYTE:
                return f"v{x}, {word & 0xFF}", ""
            case OperandForm.REG_REG:
                return f"v{x}, v{y}", ""
            case OperandForm.REG_REG_NIBBLE:
                return f"v{x}, v{y}, {word & 0xF}", ""
            case OperandForm.REG_DT:
                return f"v{x}, dt", ""
            case OperandForm.DT_REG:
                return f"dt, v{x}", ""
            case OperandForm.ST_REG:
                return f"st, v{x}", ""

    def _format_address(self, mnemonic: str, target: int) -> tuple[str, str]:
        # ldi takes a plain number in source, so it never gets a label
        if mnemonic != "ldi" and target in self._symbol_table:
            return self._symbol_table[target], f"${target:03X}"
        return str(target), f"${target:03X}"

    def disassemble(
        self,
        data: bytes,
        start_address: int = PROGRAM_START,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble consecutive instructions.

        Args:
            data: Byte buffer containing machine code
            start_address: Memory address of the first byte
            count: Maximum number of instructions (None = all)

        Returns:
            List of DisassembledInstruction objects
        """
        result = []
        offset = 0
        address = start_address

        while offset < len(data):
            if count is not None and len(result) >= count:
                break
            instr = self.disassemble_one(data, address, offset)
            result.append(instr)
            offset += instr.size
            address += instr.size

        return result

    def disassemble_to_text(
        self,
        data: bytes,
        start_address: int = PROGRAM_START,
        count: Optional[int] = None,
    ) -> str:
        """
        Disassemble and return a formatted listing.

        Addresses that appear in the symbol table get a label line
        before the instruction stored there.
        """
        lines = []
        for instr in self.disassemble(data, start_address, count):
            name = self._symbol_table.get(instr.address)
            if name is not None:
                lines.append(name)
            lines.append(str(instr))
        return "\n".join(lines)

    def disassemble_to_source(
        self,
        data: bytes,
        start_address: int = PROGRAM_START,
        count: Optional[int] = None,
    ) -> str:
        """
        Disassemble into plain assembly source.

        Returns:
            Source text with one instruction per line and label lines
            where the symbol table names an address. Data words appear
            as comments since the assembler has no data directive.
        """
        lines = []
        for instr in self.disassemble(data, start_address, count):
            name = self._symbol_table.get(instr.address)
            if name is not None:
                lines.append(name)
            if instr.is_data:
                lines.append(f"    ; {instr.source}")
            else:
                lines.append(f"    {instr.source}")
        return "\n".join(lines) + "\n"
