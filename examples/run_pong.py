#!/usr/bin/env python3
"""
CHIP-8 Pong Demo
================

This script demonstrates how to use the CHIP-8 SDK to:
1. Assemble a program from source
2. Load it into the emulator
3. Run it headless while pressing keys
4. Print the screen and save a screenshot

Usage:
    python examples/run_pong.py
"""

from pathlib import Path

from chip8_sdk.emulator import Emulator, EmulatorConfig


def main():
    # Output directory for screenshots
    output_dir = Path("trash")
    output_dir.mkdir(exist_ok=True)

    # ==========================================================================
    # 1. Create an emulator instance
    # ==========================================================================
    # A fixed seed makes the ball's random starting height repeatable.

    print("Creating CHIP-8 emulator...")
    emu = Emulator(EmulatorConfig(cycles_per_second=200, seed=2024))

    # ==========================================================================
    # 2. Assemble and load Pong
    # ==========================================================================
    source_path = Path(__file__).with_name("pong.asm")
    code = emu.load_program(source_path.read_text(), str(source_path))
    print(f"  Assembled {source_path.name}: {len(code)} bytes")

    # ==========================================================================
    # 3. Run the game
    # ==========================================================================
    emu.run(5_000)
    print("\nAfter 5000 instructions:")
    print(emu.display_text)

    # Hold key 1 to move the left paddle down for a while
    emu.tap_key("1", hold_cycles=2_000)
    emu.run(1_000)
    print("\nAfter moving the left paddle:")
    print(emu.display_text)

    # ==========================================================================
    # 4. Take a screenshot
    # ==========================================================================
    emu.display.save_image(output_dir / "pong.png", scale=8)
    print(f"\nScreenshot saved to {output_dir / 'pong.png'}")

    regs = emu.registers
    print(f"Score: left {regs['v8']}, right {regs['v9']}")


if __name__ == "__main__":
    main()
