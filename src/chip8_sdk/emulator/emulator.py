"""
CHIP-8 Emulator - Main Orchestrator
===================================

This module provides the main `Emulator` class. It wires the interpreter
core to memory, a display and a keypad, and adds the host-side pieces
that live outside the core: ROM loading, assembling and loading source,
and the run loops (cycle-bounded or throttled to wall-clock time).

The Emulator class:
- Initializes all components (CPU, memory, display, keyboard)
- Loads programs from raw bytes, ROM files or assembly source
- Runs for a number of instructions, or for a length of real time
- Simulates key presses
- Exposes display output as text or PNG

Example usage:
    >>> from chip8_sdk.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(seed=1))
    >>> code = emu.load_program('''
    ...     ld v0, 0
    ...     ld v1, 0
    ...     ld v2, 10
    ...     ldsprt v2
    ...     drw v0, v1, 5
    ...     .end
    ...     jp .end
    ... ''')
    >>> emu.run(max_cycles=100)
    100
    >>> print(emu.display_lines[0][:8])
    ####....
"""

import logging
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from chip8_sdk.assembler import Assembler
from chip8_sdk.emulator.cpu import Chip8CPU, CPUState
from chip8_sdk.emulator.display import Display
from chip8_sdk.emulator.keyboard import Keyboard, KeyRef
from chip8_sdk.emulator.memory import Memory
from chip8_sdk.errors import EmulatorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        cycles_per_second: Instruction rate targeted by run_realtime().
                           The timers tick once per instruction, so this
                           also sets how fast they count down. Default 500.
        seed: Seed for the random number instruction. None gives a
              different sequence on every run.

    Example:
        >>> config = EmulatorConfig(cycles_per_second=200, seed=42)
    """
    cycles_per_second: int = 500
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.cycles_per_second <= 0:
            raise ValueError(f"cycles_per_second must be positive, got {self.cycles_per_second}")


class Emulator:
    """
    CHIP-8 emulator.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        memory: 4 KiB memory
        cpu: The interpreter core (accessible for low-level control)
        display: The 64 × 32 display
        keyboard: The 16-key keypad

    Example:
        >>> emu = Emulator()
        >>> emu.load_rom_file("pong.ch8")
        >>> emu.run(10_000)
        >>> print(emu.display_text)
    """

    def __init__(
        self,
        config: Optional[EmulatorConfig] = None,
        display: Optional[Display] = None,
        keyboard: Optional[Keyboard] = None,
    ):
        self.config = config or EmulatorConfig()
        self.memory = Memory()
        self.display = display or Display()
        self.keyboard = keyboard or Keyboard()
        self.cpu = Chip8CPU(
            self.memory,
            self.display,
            self.keyboard,
            rng=random.Random(self.config.seed),
        )
        self._total_cycles = 0
        self._program: bytes = b""

    # =========================================================================
    # Lifecycle and Program Loading
    # =========================================================================

    def reset(self) -> None:
        """
        Reset to power-on state, keeping the loaded program.

        Memory is re-initialized (font restored, everything else zeroed)
        and the program image is copied back in, so a program that
        modified itself starts over from its original bytes.
        """
        self.memory.reset()
        if self._program:
            self.memory.load(self._program)
        self.cpu.reset()
        self.display.clear()
        self.keyboard.clear()
        self._total_cycles = 0
        logger.debug("Emulator reset")

    def load_rom(self, data: bytes) -> None:
        """
        Load a program image at $200 and reset.

        Raises:
            RomSizeError: If the image is larger than $E00 bytes
        """
        # Size is checked by a throwaway Memory first so a failed load
        # leaves the current machine untouched
        Memory().load(data)
        self._program = bytes(data)
        self.reset()
        logger.debug(f"Loaded {len(data)}-byte program")

    def load_rom_file(self, path: Union[str, Path]) -> None:
        """
        Load a .ch8 ROM file.

        Raises:
            FileNotFoundError: If the file does not exist
            RomSizeError: If the image is too large
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"ROM file not found: {path}")
        self.load_rom(path.read_bytes())

    def load_program(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source and load the result.

        Nothing is loaded if assembly fails.

        Returns:
            The assembled program image

        Raises:
            AssemblerError: If the source does not assemble
        """
        code = Assembler().assemble_string(source, filename)
        self.load_rom(code)
        return code

    # =========================================================================
    # Execution Control
    # =========================================================================

    def step(self) -> int:
        """
        Execute a single instruction.

        Returns:
            The instruction word executed
        """
        opcode = self.cpu.execute_one()
        self._total_cycles += 1
        return opcode

    def run(self, max_cycles: int = 1_000_000) -> int:
        """
        Execute up to ``max_cycles`` instructions as fast as possible.

        Returns:
            Number of instructions executed

        Raises:
            EmulatorError: If the program hits a fatal condition
        """
        executed = 0
        try:
            while executed < max_cycles:
                self.cpu.execute_one()
                executed += 1
        except EmulatorError as e:
            logger.error(f"Execution stopped after {executed} instructions: {e}")
            raise
        finally:
            self._total_cycles += executed

        logger.debug(f"Ran {executed} instructions, PC=${self.cpu.pc:03X}")
        return executed

    def run_realtime(self, duration: float) -> int:
        """
        Run for ``duration`` seconds at the configured instruction rate.

        Each instruction is given a 1/cycles_per_second time slot; the loop
        sleeps away whatever remains of a slot after executing.

        Returns:
            Number of instructions executed
        """
        period = 1.0 / self.config.cycles_per_second
        start = time.perf_counter()
        deadline = start + duration
        next_slot = start
        executed = 0

        try:
            while True:
                now = time.perf_counter()
                if now >= deadline:
                    break
                if now < next_slot:
                    time.sleep(next_slot - now)
                self.cpu.execute_one()
                executed += 1
                # After a stall, restart the schedule from now instead of
                # replaying the missed slots back to back
                next_slot = max(next_slot, now) + period
        except EmulatorError as e:
            logger.error(f"Execution stopped after {executed} instructions: {e}")
            raise
        finally:
            self._total_cycles += executed

        logger.debug(f"Ran {executed} instructions in {duration:.2f}s")
        return executed

    # =========================================================================
    # Keyboard Input
    # =========================================================================

    def press_key(self, key: KeyRef) -> None:
        """Press and hold a key (code 0-15 or host key name)."""
        self.keyboard.key_down(key)

    def release_key(self, key: KeyRef) -> None:
        self.keyboard.key_up(key)

    def tap_key(self, key: KeyRef, hold_cycles: int = 0) -> None:
        """
        Press a key, optionally run while it is held, then release it.

        Args:
            key: Key code or name
            hold_cycles: Instructions to execute with the key held
        """
        self.keyboard.key_down(key)
        if hold_cycles:
            self.run(hold_cycles)
        self.keyboard.key_up(key)

    # =========================================================================
    # Display Output
    # =========================================================================

    @property
    def display_text(self) -> str:
        """Current screen as text ('#' lit, '.' dark)."""
        return self.display.get_text()

    @property
    def display_lines(self) -> list[str]:
        return self.display.get_text_grid()

    def render_display(self, scale: int = 8) -> bytes:
        """Render the screen as PNG bytes."""
        return self.display.render_image(scale=scale)

    # =========================================================================
    # State Inspection
    # =========================================================================

    @property
    def registers(self) -> dict:
        """
        Get current register values as a dictionary.

        Returns:
            Dictionary with keys v0-v15, i, pc, sp, dt, st
        """
        regs = {f"v{n}": value for n, value in enumerate(self.cpu.v)}
        regs.update({
            "i": self.cpu.i,
            "pc": self.cpu.pc,
            "sp": self.cpu.sp,
            "dt": self.cpu.dt,
            "st": self.cpu.st,
        })
        return regs

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is running (the host should beep)."""
        return self.cpu.st > 0

    @property
    def total_cycles(self) -> int:
        """Instructions executed since the last reset."""
        return self._total_cycles

    def get_cpu_state(self) -> CPUState:
        return self.cpu.get_state()

    def __repr__(self) -> str:
        return (
            f"Emulator(pc=${self.cpu.pc:03X}, cycles={self._total_cycles}, "
            f"program={len(self._program)} bytes)"
        )
