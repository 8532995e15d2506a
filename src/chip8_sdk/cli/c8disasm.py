"""
c8disasm - CHIP-8 Disassembler Command-Line Interface
=====================================================

This module implements the command-line interface for the CHIP-8
disassembler.

Usage Examples
--------------
Disassemble a ROM:
    $ c8disasm pong.ch8

With base address:
    $ c8disasm sprite.bin --address 0x300

Limit number of instructions:
    $ c8disasm pong.ch8 --count 20

Output to file:
    $ c8disasm pong.ch8 -o pong.dis

Hex dump with disassembly:
    $ c8disasm pong.ch8 --hex

Source only, ready to reassemble:
    $ c8disasm pong.ch8 --source -o pong2.asm
"""

import sys
from pathlib import Path
from typing import Optional

import click

from chip8_sdk import __version__
from chip8_sdk.cli import setup_logging
from chip8_sdk.cli.errors import ExitCode, handle_cli_exception, parse_address
from chip8_sdk.disassembler import Chip8Disassembler


# =============================================================================
# Symbol Files
# =============================================================================

def read_symbol_file(path: Path) -> dict[int, str]:
    """
    Read a symbol file written by c8asm.

    Lines look like ``.loop = $20A``; blank lines and ``;`` comments are
    skipped.

    Returns:
        Dict mapping address to label name
    """
    symbols = {}
    for line in path.read_text().splitlines():
        line = line.split(";", 1)[0].strip()
        if not line or "=" not in line:
            continue
        name, value = (part.strip() for part in line.split("=", 1))
        symbols[parse_address(value)] = name
    return symbols


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
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=str,
    default="0x200",
    help="Load address of the first byte (hex with 0x/$ prefix or decimal). Default: 0x200",
)
@click.option(
    "-c", "--count",
    type=int,
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Symbol file (from c8asm -s) used to label addresses",
)
@click.option(
    "--hex",
    "show_hex",
    is_flag=True,
    help="Include hex dump before disassembly",
)
@click.option(
    "--source",
    is_flag=True,
    help="Emit plain assembly source instead of a listing",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8disasm")
def main(
    input_file: Path,
    output: Optional[Path],
    address: str,
    count: Optional[int],
    symbols: Optional[Path],
    show_hex: bool,
    source: bool,
    verbose: bool,
) -> None:
    """
    Disassemble a CHIP-8 program image.

    INPUT_FILE is the binary file to disassemble.

    \b
    Examples:
        c8disasm pong.ch8
        c8disasm pong.ch8 --count 20 -o listing.dis
        c8disasm pong.ch8 -s pong.sym --source
    """
    setup_logging(verbose)

    try:
        base_address = parse_address(address)
        symbol_table = read_symbol_file(symbols) if symbols else {}
        data = input_file.read_bytes()
    except Exception as e:
        handle_cli_exception(e, verbose=verbose)

    if len(data) == 0:
        click.echo(f"Error: {input_file} is empty", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    if verbose:
        click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)
        click.echo(f"Base address: ${base_address:03X}", err=True)

    disasm = Chip8Disassembler(symbol_table=symbol_table)

    if source:
        result = disasm.disassemble_to_source(data, start_address=base_address, count=count)
    else:
        output_lines = [
            f"; Disassembly of {input_file.name}",
            f"; Size: {len(data)} bytes",
            f"; Base address: ${base_address:03X}",
            "",
        ]

        if show_hex:
            output_lines.append("; Hex dump:")
            output_lines.append("; " + "-" * 60)
            for i in range(0, len(data), 16):
                chunk = data[i:i + 16]
                hex_str = " ".join(f"{b:02X}" for b in chunk)
                output_lines.append(f"; ${base_address + i:03X}: {hex_str}")
            output_lines.append("; " + "-" * 60)
            output_lines.append("")

        output_lines.append(disasm.disassemble_to_text(data, start_address=base_address, count=count))
        result = "\n".join(output_lines) + "\n"

    if output:
        try:
            output.write_text(result, encoding="utf-8")
        except OSError as e:
            handle_cli_exception(e, verbose=verbose)
        if verbose:
            click.echo(f"Output written to: {output}", err=True)
    else:
        click.echo(result, nl=False)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
