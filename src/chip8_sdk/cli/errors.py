"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes across all CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Assembly error or fatal emulation error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for all CLI tools.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Runtime")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from chip8_sdk.errors import AssemblerError, Chip8Error

    if isinstance(error, AssemblerError):
        # Assembler errors carry their own "file:line:col: error:" prefix
        # and source excerpt
        click.echo(str(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, Chip8Error):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, (click.BadParameter, ValueError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)


def parse_address(text: str) -> int:
    """
    Parse an address given on the command line.

    Accepts decimal, ``0x``-prefixed hex and ``$``-prefixed hex.

    Raises:
        click.BadParameter: If the text is not a number or is out of range
    """
    try:
        if text.lower().startswith("0x"):
            value = int(text, 16)
        elif text.startswith("$"):
            value = int(text[1:], 16)
        else:
            value = int(text)
    except ValueError:
        raise click.BadParameter(f"invalid address '{text}'")

    if not 0 <= value <= 0xFFF:
        raise click.BadParameter(f"address must be 0-4095 ($000-$FFF), got {text}")
    return value
