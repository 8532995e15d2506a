"""
CHIP-8 Code Generator (Second Pass)
===================================

The code generator turns the first pass's InstructionRecords into
opcode bytes. For each record it:

1. Classifies the operands (register, timer keyword, number, label) and
   picks the operand form, e.g. ``ld v1, dt`` → REG_DT.
2. Looks up the (mnemonic, form) encoding in the shared opcode table.
3. Resolves labels to absolute addresses (offset + $200) and range-checks
   every field: registers 0-15, bytes 0-255, sprite heights 0-10 and
   addresses 0-$FFF.
4. Appends the big-endian word to the output.

Every error is fatal; nothing is returned for a program that fails.
"""

import logging
from pathlib import Path
from typing import Optional

from chip8_sdk.assembler.lexer import Token, TokenType
from chip8_sdk.assembler.parser import InstructionRecord, LabelTable
from chip8_sdk.cpu.chip8 import (
    ADDRESS_MASK,
    MAX_SPRITE_HEIGHT,
    NUM_REGISTERS,
    PROGRAM_START,
    InstructionInfo,
    OperandForm,
    encode,
    get_instruction_info,
    get_valid_forms,
)
from chip8_sdk.errors import (
    AssemblySyntaxError,
    ImmediateOutOfRangeError,
    InvalidRegisterError,
)

logger = logging.getLogger(__name__)


class CodeGenerator:
    """
    Second assembler pass: encode instruction records into bytes.

    Usage:
        codegen = CodeGenerator(labels, source_lines)
        code = codegen.generate(records)

    Attributes:
        base_address: Address the program is loaded at (label offsets are
                      relative to it)
    """

    def __init__(
        self,
        labels: LabelTable,
        source_lines: Optional[list[str]] = None,
        base_address: int = PROGRAM_START,
    ):
        self._labels = labels
        self._source_lines = source_lines or []
        self.base_address = base_address
        self._code = bytearray()
        self._listing_lines: list[str] = []

    def generate(self, records: list[InstructionRecord]) -> bytes:
        """
        Encode all records.

        Returns:
            The program image, in program order

        Raises:
            AssemblerError: On the first record that cannot be encoded
        """
        self._code = bytearray()
        self._listing_lines = []

        for record in records:
            word = self.encode_record(record)
            self._emit_word(word)
            self._listing_lines.append(
                f"{self.base_address + record.offset:03X}   {word:04X}  "
                f"{record.token.line:5d}  {self._line_of(record.token) or record}"
            )

        logger.debug(f"Pass 2: {len(self._code)} bytes")
        return bytes(self._code)

    def encode_record(self, record: InstructionRecord) -> int:
        """Encode a single record into its 16-bit instruction word."""
        form = self._classify(record)
        info = get_instruction_info(record.mnemonic, form)
        if info is None:
            self._reject_timer_keywords(record)
            raise self._form_error(record, form)
        return self._encode(record, info)

    # =========================================================================
    # Operand Classification
    # =========================================================================

    def _classify(self, record: InstructionRecord) -> OperandForm:
        """Work out the operand form from the operand tokens."""
        ops = record.operands
        shapes = tuple(self._shape(t) for t in ops)

        match shapes:
            case ():
                return OperandForm.NONE
            case ("num" | "label",):
                return OperandForm.ADDRESS
            case ("reg",):
                return OperandForm.REG
            case ("reg", "num"):
                return OperandForm.REG_BYTE
            case ("reg", "reg"):
                return OperandForm.REG_REG
            case ("reg", "reg", "num"):
                return OperandForm.REG_REG_NIBBLE
            case ("reg", "dt"):
                return OperandForm.REG_DT
            case ("dt", "reg"):
                return OperandForm.DT_REG
            case ("st", "reg"):
                return OperandForm.ST_REG

        self._reject_timer_keywords(record)
        raise self._form_error(record, None)

    def _reject_timer_keywords(self, record: InstructionRecord) -> None:
        """Raise if dt/st appear outside the three ld timer forms."""
        for token in record.operands:
            if self._shape(token) in ("dt", "st"):
                raise InvalidRegisterError(
                    token.value,
                    location=token.location,
                    source_line=self._line_of(token),
                    hint=f"'{token.value}' is only valid in 'ld vx, dt', 'ld dt, vx' and 'ld st, vx'",
                )

    @staticmethod
    def _shape(token: Token) -> str:
        if token.type == TokenType.NUMBER:
            return "num"
        if token.type == TokenType.LABEL:
            return "label"
        if token.value in ("dt", "st"):
            return token.value
        return "reg"

    def _form_error(self, record: InstructionRecord, form: Optional[OperandForm]) -> AssemblySyntaxError:
        valid = ", ".join(f"'{record.mnemonic} {f}'" for f in get_valid_forms(record.mnemonic))
        return AssemblySyntaxError(
            f"invalid operands for '{record.mnemonic}': {', '.join(record.operand_values)}",
            location=record.location,
            hint=f"accepted forms: {valid}" if valid else None,
            source_line=self._line_of(record.token),
        )

    # =========================================================================
    # Field Encoding
    # =========================================================================

    def _encode(self, record: InstructionRecord, info: InstructionInfo) -> int:
        ops = record.operands

        match info.form:
            case OperandForm.NONE:
                return encode(info)
            case OperandForm.ADDRESS:
                return encode(info, value=self._address(ops[0]))
            case OperandForm.REG | OperandForm.REG_DT:
                return encode(info, x=self._register(ops[0]))
            case OperandForm.DT_REG | OperandForm.ST_REG:
                # Source register goes in the x field
                return encode(info, x=self._register(ops[1]))
            case OperandForm.REG_BYTE:
                return encode(info, x=self._register(ops[0]), value=self._number(ops[1], 0xFF, "byte value"))
            case OperandForm.REG_REG:
                return encode(info, x=self._register(ops[0]), y=self._register(ops[1]))
            case OperandForm.REG_REG_NIBBLE:
                return encode(
                    info,
                    x=self._register(ops[0]),
                    y=self._register(ops[1]),
                    value=self._number(ops[2], MAX_SPRITE_HEIGHT, "sprite height"),
                )
        raise AssertionError(f"unhandled operand form {info.form}")

    def _register(self, token: Token) -> int:
        """Parse ``vN`` into N, checking 0 <= N < 16."""
        text = token.value
        digits = text[1:]
        if text.startswith("v") and digits.isdigit():
            index = int(digits)
            if index < NUM_REGISTERS:
                return index
        raise InvalidRegisterError(
            text,
            location=token.location,
            source_line=self._line_of(token),
        )

    def _number(self, token: Token, maximum: int, what: str) -> int:
        value = int(token.value)
        if value > maximum:
            raise ImmediateOutOfRangeError(
                value,
                maximum,
                what,
                location=token.location,
                source_line=self._line_of(token),
            )
        return value

    def _address(self, token: Token) -> int:
        """Numeric address, or label offset plus the load address."""
        if token.type == TokenType.LABEL:
            value = self._labels.resolve(token.value, token.location, self._line_of(token))
            value += self.base_address
            if value > ADDRESS_MASK:
                raise ImmediateOutOfRangeError(
                    value,
                    ADDRESS_MASK,
                    f"address of '{token.value}'",
                    location=token.location,
                    source_line=self._line_of(token),
                )
            return value
        return self._number(token, ADDRESS_MASK, "address")

    # =========================================================================
    # Output
    # =========================================================================

    def _emit_word(self, word: int) -> None:
        """Emit a 16-bit word (big-endian)."""
        self._code.append((word >> 8) & 0xFF)
        self._code.append(word & 0xFF)

    def _line_of(self, token: Token) -> Optional[str]:
        if 1 <= token.line <= len(self._source_lines):
            return self._source_lines[token.line - 1]
        return None

    def get_code(self) -> bytes:
        return bytes(self._code)

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, opcodes, and source lines,
            followed by the label table.
        """
        lines = []
        lines.append("CHIP-8 Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr  Code  Line   Source")
        lines.append("-" * 60)
        lines.extend(self._listing_lines)
        lines.append("")
        lines.append("Label Table")
        lines.append("-" * 30)
        for name, address in sorted(self.get_symbols().items()):
            lines.append(f"{name:20s} = ${address:03X}")
        return "\n".join(lines)

    def get_symbols(self) -> dict[str, int]:
        """Label name to absolute address."""
        return {name: offset + self.base_address for name, offset in self._labels.items()}

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name = $address (one per line, sorted by name)
        """
        with open(filepath, "w") as f:
            f.write("; Symbol table\n")
            f.write("; Generated by c8asm\n")
            for name, address in sorted(self.get_symbols().items()):
                f.write(f"{name} = ${address:03X}\n")
