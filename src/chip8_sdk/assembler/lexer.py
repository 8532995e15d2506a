"""
CHIP-8 Assembly Language Lexer
==============================

This module implements the lexer (tokenizer) for CHIP-8 assembly
language. It converts source text into a flat stream of tokens for the
first assembler pass.

Token Types
-----------
- LABEL: ``.name`` - a label definition or reference (text includes the dot)
- IDENTIFIER: mnemonics, register names (``v3``), ``dt``/``st`` keywords
- NUMBER: decimal literals (digits only, kept as text)

Lexical Rules
-------------
- ``.`` starts a label; letters, digits and ``_`` continue it
- a digit starts a number; only digits continue it
- a letter starts an identifier; letters, digits and ``_`` continue it
- ``;`` starts a comment that runs to the end of the line
- every other character is skipped without complaint

The last rule means commas are optional (``ld v1, 2`` and ``ld v1 2``
are the same statement) and stray punctuation such as ``ldi, 2000`` is
harmless. The lexer therefore never fails.

Example
-------
>>> from chip8_sdk.assembler.lexer import Lexer
>>> for token in Lexer(".loop jp .loop ; forever").tokenize():
...     print(token)
Token(LABEL, '.loop', 1:1)
Token(IDENTIFIER, 'jp', 1:7)
Token(LABEL, '.loop', 1:10)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import string

from chip8_sdk.errors import SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for CHIP-8 assembly language."""
    LABEL = auto()       # .name
    IDENTIFIER = auto()  # Mnemonics, registers, keywords
    NUMBER = auto()      # Decimal literal


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The TokenType classification
        value: The token text exactly as written
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes CHIP-8 assembly source code.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters

    # Characters that can continue an identifier or label
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects in source order
        """
        while not self._at_end():
            char = self._peek()

            if char == ";":
                self._skip_comment()
                continue

            token = self._scan_token()
            if token is not None:
                yield token

    def get_line(self, line_number: int) -> str:
        """Return the text of a 1-indexed source line (empty if out of range)."""
        lines = self.source.split("\n")
        if 1 <= line_number <= len(lines):
            return lines[line_number - 1]
        return ""

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Look at the current character without advancing ('' at end)."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        Updates line and column tracking.
        """
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def _skip_comment(self) -> None:
        """Skip from ';' up to (not including) the end of the line."""
        while not self._at_end() and self._peek() != "\n":
            self._advance()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token | None:
        """
        Scan the next token from source.

        Returns:
            The next Token, or None if the character was skipped
        """
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char == ".":
            self._advance()
            name = "." + self._scan_while(self.IDENT_CHARS)
            return Token(TokenType.LABEL, name, start_line, start_column, self.filename)

        if char in string.digits:
            text = self._scan_while(string.digits)
            return Token(TokenType.NUMBER, text, start_line, start_column, self.filename)

        if char in self.IDENT_START:
            text = self._scan_while(self.IDENT_CHARS)
            return Token(TokenType.IDENTIFIER, text, start_line, start_column, self.filename)

        # Whitespace, commas and any other punctuation
        self._advance()
        return None

    def _scan_while(self, allowed: str) -> str:
        """Consume characters while they are in ``allowed``."""
        chars = []
        # Note: Must check for non-empty string first because '' in 'string' is True in Python
        while self._peek() and self._peek() in allowed:
            chars.append(self._advance())
        return "".join(chars)


def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize a complete source string into a list."""
    return list(Lexer(source, filename).tokenize())
