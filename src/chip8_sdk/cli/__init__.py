"""
CHIP-8 SDK Command-Line Interface
=================================

This package provides command-line tools for the CHIP-8 SDK:

- **c8asm**: CHIP-8 assembler
- **c8disasm**: CHIP-8 disassembler
- **c8run**: Headless CHIP-8 runner

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["c8asm", "c8disasm", "c8run", "setup_logging"]

import logging


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )
