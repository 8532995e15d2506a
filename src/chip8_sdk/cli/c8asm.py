"""
c8asm - CHIP-8 Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the CHIP-8
assembler.

Usage Examples
--------------
Basic assembly:
    $ c8asm pong.asm

With output file:
    $ c8asm pong.asm -o pong.ch8

Generate all output files:
    $ c8asm pong.asm -o pong.ch8 -l pong.lst -s pong.sym

Verbose mode:
    $ c8asm -v pong.asm
"""

from pathlib import Path
from typing import Optional

import click

from chip8_sdk import __version__
from chip8_sdk.assembler import Assembler
from chip8_sdk.cli import setup_logging
from chip8_sdk.cli.errors import handle_cli_exception


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output program image (default: input.ch8)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8asm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble CHIP-8 source code.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    The output is a raw program image, loaded at $200 by any CHIP-8
    interpreter.

    \b
    Examples:
        c8asm pong.asm              # Outputs pong.ch8
        c8asm pong.asm -o out.ch8   # Specify output file
        c8asm pong.asm -l pong.lst  # Also write a listing
    """
    setup_logging(verbose)
    output_file = output if output is not None else input_file.with_suffix(".ch8")

    asm = Assembler()

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        code = asm.assemble_file(input_file)
        asm.write_binary(output_file)
        if verbose:
            click.echo(f"Wrote {len(code)} bytes to {output_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(f"Assembly complete: {len(code)} bytes, {len(code) // 2} instructions")
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
