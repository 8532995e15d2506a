"""
c8run - Headless CHIP-8 Runner
==============================

Runs a CHIP-8 program without a window and prints the final screen as
text. Useful for smoke-testing ROMs, for scripted runs in CI, and for
capturing screenshots.

Usage Examples
--------------
Run a ROM for 10000 instructions:
    $ c8run pong.ch8 -n 10000

Assemble and run in one step:
    $ c8run --asm pong.asm

Hold keys while running, then save a screenshot:
    $ c8run pong.ch8 --press 1 --press C --screenshot pong.png

Run in real time (500 instructions per second for 4 seconds):
    $ c8run pong.ch8 -n 2000 --cps 500 --realtime
"""

from pathlib import Path
from typing import Optional

import click

from chip8_sdk import __version__
from chip8_sdk.cli import setup_logging
from chip8_sdk.cli.errors import handle_cli_exception
from chip8_sdk.emulator import Emulator, EmulatorConfig


def format_registers(emu: Emulator) -> str:
    """Format the machine registers as a compact two-line summary."""
    regs = emu.registers
    general = " ".join(f"v{n:X}={regs[f'v{n}']:02X}" for n in range(16))
    return (
        f"{general}\n"
        f"I=${regs['i']:03X} PC=${regs['pc']:03X} SP={regs['sp']} "
        f"DT={regs['dt']} ST={regs['st']}"
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "program",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--asm",
    "is_source",
    is_flag=True,
    help="PROGRAM is assembly source; assemble it before running",
)
@click.option(
    "-n", "--cycles",
    type=click.IntRange(min=0),
    default=10_000,
    show_default=True,
    help="Number of instructions to execute",
)
@click.option(
    "--cps",
    type=click.IntRange(min=1),
    default=500,
    show_default=True,
    help="Instructions per second (used with --realtime)",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the random number instruction",
)
@click.option(
    "--realtime",
    is_flag=True,
    help="Throttle to --cps instructions per second",
)
@click.option(
    "-p", "--press",
    "keys",
    multiple=True,
    help="Hold a key (0-9, A-F) for the whole run (can be repeated)",
)
@click.option(
    "--screenshot",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Save the final screen as a PNG image",
)
@click.option(
    "--scale",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="Pixel scale for --screenshot",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (registers and debug logging)",
)
@click.version_option(version=__version__, prog_name="c8run")
def main(
    program: Path,
    is_source: bool,
    cycles: int,
    cps: int,
    seed: Optional[int],
    realtime: bool,
    keys: tuple[str, ...],
    screenshot: Optional[Path],
    scale: int,
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 program headless and print the final screen.

    PROGRAM is a program image (.ch8), or assembly source with --asm.

    \b
    Examples:
        c8run pong.ch8
        c8run --asm pong.asm -n 50000
        c8run pong.ch8 --press 1 --screenshot pong.png
    """
    setup_logging(verbose)

    try:
        emu = Emulator(EmulatorConfig(cycles_per_second=cps, seed=seed))

        if is_source:
            code = emu.load_program(program.read_text(), str(program))
            if verbose:
                click.echo(f"Assembled {program}: {len(code)} bytes", err=True)
        else:
            emu.load_rom_file(program)

        for key in keys:
            emu.press_key(key)

        if realtime:
            executed = emu.run_realtime(cycles / cps)
        else:
            executed = emu.run(cycles)

        click.echo(emu.display_text)

        if verbose:
            click.echo(f"Executed {executed} instructions", err=True)
            click.echo(format_registers(emu), err=True)

        if screenshot:
            emu.display.save_image(screenshot, scale=scale)
            if verbose:
                click.echo(f"Wrote screenshot to {screenshot}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Runtime")


if __name__ == "__main__":
    main()
