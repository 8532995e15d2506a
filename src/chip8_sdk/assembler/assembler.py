"""
CHIP-8 Assembler - Main Interface
=================================

This module provides the main Assembler class, the primary interface for
assembling CHIP-8 source code. It runs the lexer, the first pass
(parser) and the second pass (code generator) and keeps the results
around for listing and symbol output.

Example Usage
-------------
>>> from chip8_sdk.assembler import Assembler
>>> asm = Assembler()
>>> code = asm.assemble_string('''
...     .loop
...         ld v0, 5
...         jp .loop
... ''')
>>> code.hex()
'60051200'
>>> asm.get_symbols()
{'.loop': 512}

Command-Line Usage
------------------
    $ c8asm pong.asm -o pong.ch8 -l pong.lst -s pong.sym
"""

import logging
from pathlib import Path
from typing import Optional

from chip8_sdk.assembler.codegen import CodeGenerator
from chip8_sdk.assembler.lexer import Lexer
from chip8_sdk.assembler.parser import InstructionRecord, LabelTable, Parser
from chip8_sdk.cpu.chip8 import PROGRAM_START

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main CHIP-8 assembler class.

    Assembly is all-or-nothing: if any error is raised, ``get_code()``
    keeps returning the previous successful result (or nothing) and no
    partial program is ever produced.

    Attributes:
        base_address: Load address that label references are relative to
    """

    def __init__(self, base_address: int = PROGRAM_START):
        self.base_address = base_address
        self._codegen: Optional[CodeGenerator] = None
        self._records: list[InstructionRecord] = []
        self._code = b""

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        The assembly pipeline is:
        1. Tokenize (lexer)
        2. Structure instructions and collect labels (pass 1)
        3. Encode instructions (pass 2)

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The program image, ready to load at the base address

        Raises:
            AssemblerError: If assembly fails
        """
        lexer = Lexer(source, filename)
        tokens = list(lexer.tokenize())
        source_lines = source.split("\n")
        logger.debug(f"{filename}: {len(tokens)} tokens")

        parser = Parser(tokens, source_lines)
        records = parser.parse()

        codegen = CodeGenerator(parser.labels, source_lines, self.base_address)
        code = codegen.generate(records)

        # Only commit results once both passes have succeeded
        self._codegen = codegen
        self._records = records
        self._code = code

        logger.debug(f"{filename}: assembled {len(code)} bytes, {len(parser.labels)} labels")
        return code

    assemble = assemble_string

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        """Get the most recently assembled program image."""
        return self._code

    def get_records(self) -> list[InstructionRecord]:
        """Get the instruction records of the most recent assembly."""
        return list(self._records)

    def get_symbols(self) -> dict[str, int]:
        """
        Get the label table.

        Returns:
            Dictionary mapping label names to absolute addresses
        """
        if self._codegen is None:
            return {}
        return self._codegen.get_symbols()

    def get_listing(self) -> str:
        """Get the assembly listing with addresses, opcodes and source."""
        if self._codegen is None:
            return ""
        return self._codegen.get_listing()

    def write_binary(self, filepath: str | Path) -> None:
        """Write the raw program image (a .ch8 ROM)."""
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.debug(f"Wrote {len(code)} bytes to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        Path(filepath).write_text(self.get_listing())

    def write_symbols(self, filepath: str | Path) -> None:
        if self._codegen is None:
            Path(filepath).write_text("")
            return
        self._codegen.write_symbols(filepath)


def assemble(source: str, filename: str = "<input>") -> bytes:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> bytes:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_file(filepath)


def resolve_labels(source: str, filename: str = "<input>") -> LabelTable:
    """Run only the first pass and return the label table (offsets from 0)."""
    parser = Parser(list(Lexer(source, filename).tokenize()), source.split("\n"))
    parser.parse()
    return parser.labels
