"""
CHIP-8 SDK Error Hierarchy
==========================

This module defines the exception hierarchy for the entire CHIP-8 SDK.
All exceptions inherit from Chip8Error, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Assembler-stage and interpreter-stage failures live on two separate
branches of the tree, so tooling can tell "the program did not build"
apart from "the program crashed while running".

Exception Hierarchy
-------------------
Chip8Error (base)
├── AssemblerError (assembler-related)
│   ├── AssemblySyntaxError - malformed source
│   │   ├── UnexpectedTokenError - wrong kind of operand
│   │   └── MissingOperandError - source ended mid-instruction
│   ├── UnknownInstructionError - mnemonic not in the instruction set
│   ├── DuplicateLabelError - label defined more than once
│   ├── UndefinedLabelError - reference to a label never defined
│   ├── InvalidRegisterError - register outside v0-v15
│   └── ImmediateOutOfRangeError - literal too large for its field
└── EmulatorError (interpreter-related)
    ├── UnknownOpcodeError - no instruction matches the fetched word
    ├── StackOverflowError - call with all 16 stack slots in use
    ├── StackUnderflowError - return with an empty stack
    └── RomSizeError - program image larger than program memory

Error messages from the assembler follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all CHIP-8 SDK errors.

    All exceptions in the SDK inherit from this class, allowing callers
    to catch all SDK-related errors with a single except clause:

        try:
            emulator.load_program(source)
            emulator.run(10_000)
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Chip8Error):
    """
    Base exception for all assembler-related errors.

    Every assembler error is fatal to the whole assembly: the assembler
    never returns a partially encoded program.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            pong.asm:15:9: error: undefined label '.draw_scroe'
                call .draw_scroe
                     ^
            hint: did you mean '.draw_score'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Raised when the operands of an instruction do not match any shape
    the instruction accepts.
    """
    pass


class UnexpectedTokenError(AssemblySyntaxError):
    """
    An operand token of the wrong kind.

    Example:
        drw v1, v2, .sprite   ; height must be a number, not a label
    """

    def __init__(
        self,
        found: str,
        expected: str,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected
        self.mnemonic = mnemonic
        super().__init__(
            f"expected {expected} in '{mnemonic}', found '{found}'",
            location=location,
            source_line=source_line,
        )


class MissingOperandError(AssemblySyntaxError):
    """The source ended before an instruction received all its operands."""

    def __init__(
        self,
        mnemonic: str,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.expected = expected
        super().__init__(
            f"'{mnemonic}' is missing an operand: expected {expected}",
            location=location,
            source_line=source_line,
        )


class UnknownInstructionError(AssemblerError):
    """
    A statement starts with something that is not a known mnemonic.

    Mnemonics are lower-case; a case-insensitive match is offered
    as a hint.
    """

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        suggestions: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.suggestions = suggestions or []

        hint = None
        if self.suggestions:
            hint = "did you mean " + ", ".join(f"'{s}'" for s in self.suggestions[:3]) + "?"

        super().__init__(
            f"unknown instruction '{mnemonic}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedLabelError(AssemblerError):
    """
    Reference to a label that is never defined.

    Raised during the second pass, once every label definition in the
    program is known.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateLabelError(AssemblerError):
    """
    Label defined multiple times.

    Includes the location of the first definition when available.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class InvalidRegisterError(AssemblerError):
    """
    Register operand outside v0-v15, or not a general register at all.

    Example:
        ld v16, 1   ; there are only sixteen registers
        add dt, 1   ; dt is only valid in the ld forms
    """

    def __init__(
        self,
        register: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.register = register
        super().__init__(
            f"invalid register '{register}'",
            location=location,
            hint=hint or "general registers are v0 through v15",
            source_line=source_line,
        )


class ImmediateOutOfRangeError(AssemblerError):
    """
    Numeric operand (or resolved label address) too large for its field.

    Example:
        ld v0, 256      ; byte immediates are 0-255
        drw v0, v1, 11  ; sprites are at most 10 rows
        jp 4096         ; addresses are 12 bits
    """

    def __init__(
        self,
        value: int,
        maximum: int,
        what: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        self.maximum = maximum
        self.what = what
        super().__init__(
            f"{what} {value} is out of range (maximum {maximum})",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Emulator Exceptions
# =============================================================================

class EmulatorError(Chip8Error):
    """
    Base exception for fatal interpreter conditions.

    The machine cannot continue after one of these; the host may reset
    and start again with fresh state.

    Attributes:
        message: The error description
        pc: Address of the faulting instruction (optional)
        opcode: The faulting instruction word (optional)
    """

    def __init__(
        self,
        message: str,
        pc: Optional[int] = None,
        opcode: Optional[int] = None,
    ):
        self.message = message
        self.pc = pc
        self.opcode = opcode
        if pc is not None:
            super().__init__(f"{message} at ${pc:03X}")
        else:
            super().__init__(message)


class UnknownOpcodeError(EmulatorError):
    """The fetched word does not decode to any instruction."""

    def __init__(self, opcode: int, pc: Optional[int] = None):
        super().__init__(f"unknown opcode ${opcode:04X}", pc=pc, opcode=opcode)


class StackOverflowError(EmulatorError):
    """A call was executed with all 16 stack slots already in use."""

    def __init__(self, pc: Optional[int] = None, opcode: Optional[int] = None):
        super().__init__("call stack overflow", pc=pc, opcode=opcode)


class StackUnderflowError(EmulatorError):
    """A return was executed with an empty call stack."""

    def __init__(self, pc: Optional[int] = None, opcode: Optional[int] = None):
        super().__init__("return with empty call stack", pc=pc, opcode=opcode)


class RomSizeError(EmulatorError):
    """
    Program image does not fit in program memory.

    Programs load at $200 and may occupy at most $E00 bytes.
    """

    def __init__(self, size: int, maximum: int):
        self.size = size
        self.maximum = maximum
        super().__init__(f"program is {size} bytes, maximum is {maximum}")
