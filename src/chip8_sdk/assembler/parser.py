"""
CHIP-8 Assembly Parser (First Pass)
===================================

The parser walks the token stream once and produces:

- a list of InstructionRecord objects, one per emitted instruction, each
  holding its mnemonic, its operand tokens and its byte offset;
- a LabelTable mapping each label to the offset of the instruction that
  follows it.

Statement Structure
-------------------
There are no line terminators in the grammar. A statement is either a
label token, or a mnemonic followed by exactly as many operand tokens
as that mnemonic takes:

    .loop               ; label, consumes no space
    ld v0, 5            ; mnemonic + 2 operands
    drw v0, v1, 5       ; mnemonic + 3 operands

Each operand is checked by kind (register, number, label) against the
mnemonic's syntax. Register numbers and value ranges are checked later,
when the instruction is encoded.

Offsets count from the start of the program (0, 2, 4, ...). The load
address is added only when a label is resolved.
"""

import difflib
import logging
from dataclasses import dataclass, field
from typing import Optional

from chip8_sdk.assembler.lexer import Token, TokenType
from chip8_sdk.cpu.chip8 import OPERAND_SYNTAX, MNEMONICS, TIMER_KEYWORDS, OperandKind
from chip8_sdk.errors import (
    DuplicateLabelError,
    MissingOperandError,
    SourceLocation,
    UndefinedLabelError,
    UnexpectedTokenError,
    UnknownInstructionError,
)

logger = logging.getLogger(__name__)

INSTRUCTION_SIZE = 2


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class InstructionRecord:
    """
    One instruction, structured but not yet encoded.

    Attributes:
        mnemonic: Lower-case mnemonic
        operands: Operand tokens in source order
        offset: Byte offset from the start of the program
        token: The mnemonic token (for error locations)
    """
    mnemonic: str
    operands: list[Token]
    offset: int
    token: Token

    @property
    def operand_values(self) -> tuple[str, ...]:
        """Operand texts in source order."""
        return tuple(t.value for t in self.operands)

    @property
    def location(self) -> SourceLocation:
        return self.token.location

    def __str__(self) -> str:
        if self.operands:
            return f"{self.mnemonic} {', '.join(self.operand_values)}"
        return self.mnemonic


@dataclass
class Label:
    """A label definition: name, program offset and where it was written."""
    name: str
    offset: int
    location: Optional[SourceLocation] = None


@dataclass
class LabelTable:
    """
    Label name to program offset.

    A label may be defined at most once. Offsets are relative to the
    start of the program; callers add the load address.
    """
    _labels: dict[str, Label] = field(default_factory=dict)

    def define(self, name: str, offset: int, location: Optional[SourceLocation] = None,
               source_line: Optional[str] = None) -> None:
        """
        Record a label definition.

        Raises:
            DuplicateLabelError: If the label already exists
        """
        if name in self._labels:
            raise DuplicateLabelError(
                name,
                location=location,
                original_location=self._labels[name].location,
                source_line=source_line,
            )
        self._labels[name] = Label(name, offset, location)
        logger.debug(f"Label {name} at offset {offset}")

    def resolve(self, name: str, location: Optional[SourceLocation] = None,
                source_line: Optional[str] = None) -> int:
        """
        Look up a label's offset.

        Raises:
            UndefinedLabelError: If the label was never defined
        """
        label = self._labels.get(name)
        if label is None:
            raise UndefinedLabelError(
                name,
                location=location,
                source_line=source_line,
                similar_labels=self.similar(name),
            )
        return label.offset

    def similar(self, name: str) -> list[str]:
        """Return up to three defined labels spelled like ``name``."""
        return difflib.get_close_matches(name, list(self._labels), n=3, cutoff=0.7)

    def items(self) -> list[tuple[str, int]]:
        """(name, offset) pairs in definition order."""
        return [(label.name, label.offset) for label in self._labels.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._labels

    def __getitem__(self, name: str) -> int:
        return self._labels[name].offset

    def __len__(self) -> int:
        return len(self._labels)


# =============================================================================
# Operand Predicates
# =============================================================================

def is_register(token: Token) -> bool:
    """Anything spelled like a register: v<something>, dt or st."""
    if token.type != TokenType.IDENTIFIER:
        return False
    return token.value.startswith("v") or token.value in TIMER_KEYWORDS


def is_number(token: Token) -> bool:
    return token.type == TokenType.NUMBER


def is_label(token: Token) -> bool:
    return token.type == TokenType.LABEL


_PREDICATES = {
    OperandKind.REGISTER: is_register,
    OperandKind.NUMBER: is_number,
    OperandKind.LABEL: is_label,
}


def _describe(kinds: frozenset[OperandKind]) -> str:
    """Render an operand kind set as 'register or number' for messages."""
    names = sorted(str(kind) for kind in kinds)
    return " or ".join(names)


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    First assembler pass: structure the token stream and collect labels.

    Usage:
        parser = Parser(tokens, source_lines)
        records = parser.parse()
        labels = parser.labels

    Attributes:
        labels: LabelTable filled in by parse()
    """

    def __init__(self, tokens: list[Token], source_lines: Optional[list[str]] = None):
        self._tokens = tokens
        self._source_lines = source_lines or []
        self._pos = 0
        self.labels = LabelTable()

    def parse(self) -> list[InstructionRecord]:
        """
        Run the first pass.

        Returns:
            Instruction records in program order

        Raises:
            DuplicateLabelError: A label is defined twice
            UnknownInstructionError: A statement does not start with a mnemonic
            UnexpectedTokenError: An operand has the wrong kind
            MissingOperandError: The source ends mid-instruction
        """
        records: list[InstructionRecord] = []
        offset = 0

        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            self._pos += 1

            if token.type == TokenType.LABEL:
                self.labels.define(token.value, offset, token.location, self._line_of(token))
                continue

            record = self._parse_instruction(token, offset)
            records.append(record)
            offset += INSTRUCTION_SIZE

        logger.debug(f"Pass 1: {len(records)} instructions, {len(self.labels)} labels")
        return records

    def _parse_instruction(self, token: Token, offset: int) -> InstructionRecord:
        """Consume one mnemonic and its operands."""
        if token.type != TokenType.IDENTIFIER or token.value not in MNEMONICS:
            raise UnknownInstructionError(
                token.value,
                location=token.location,
                source_line=self._line_of(token),
                suggestions=self._suggest_mnemonics(token.value),
            )

        mnemonic = token.value
        operands: list[Token] = []

        for kinds in OPERAND_SYNTAX[mnemonic]:
            if self._pos >= len(self._tokens):
                raise MissingOperandError(
                    mnemonic,
                    _describe(kinds),
                    location=token.location,
                    source_line=self._line_of(token),
                )

            operand = self._tokens[self._pos]
            if not any(_PREDICATES[kind](operand) for kind in kinds):
                raise UnexpectedTokenError(
                    operand.value,
                    _describe(kinds),
                    mnemonic,
                    location=operand.location,
                    source_line=self._line_of(operand),
                )

            operands.append(operand)
            self._pos += 1

        return InstructionRecord(mnemonic, operands, offset, token)

    def _line_of(self, token: Token) -> Optional[str]:
        """Source text of the token's line, if the source is available."""
        if 1 <= token.line <= len(self._source_lines):
            return self._source_lines[token.line - 1]
        return None

    @staticmethod
    def _suggest_mnemonics(word: str) -> list[str]:
        if word.lower() in MNEMONICS:
            return [word.lower()]
        return difflib.get_close_matches(word.lower(), sorted(MNEMONICS), n=3, cutoff=0.7)
