"""
Emulator Integration Tests
==========================

Tests for the Emulator facade: loading programs, run loops, key
simulation, display output and error propagation. Programs are written
in assembly and assembled on the fly.

Copyright (c) 2026 CHIP-8 SDK Contributors
"""

from pathlib import Path

import pytest
from chip8_sdk.assembler import Assembler
from chip8_sdk.emulator import Emulator, EmulatorConfig
from chip8_sdk.errors import (
    AssemblerError,
    RomSizeError,
    StackUnderflowError,
    UnknownOpcodeError,
)

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.fixture
def emu():
    """Emulator with a fixed random seed."""
    return Emulator(EmulatorConfig(seed=1234))


# =============================================================================
# Configuration
# =============================================================================

class TestConfig:
    """EmulatorConfig validation."""

    def test_defaults(self):
        config = EmulatorConfig()
        assert config.cycles_per_second == 500
        assert config.seed is None

    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            EmulatorConfig(cycles_per_second=0)

    def test_frozen(self):
        config = EmulatorConfig()
        with pytest.raises(AttributeError):
            config.seed = 5


# =============================================================================
# Loading
# =============================================================================

class TestLoading:
    """ROM and source loading."""

    def test_load_program_returns_code(self, emu):
        code = emu.load_program("ld v3, 7")
        assert code == bytes([0x63, 0x07])
        assert emu.memory.read_word(0x200) == 0x6307

    def test_load_rom_file(self, emu, tmp_path):
        rom = tmp_path / "prog.ch8"
        rom.write_bytes(bytes([0x60, 0x2A]))
        emu.load_rom_file(rom)
        emu.step()
        assert emu.registers["v0"] == 42

    def test_missing_rom_file(self, emu, tmp_path):
        with pytest.raises(FileNotFoundError):
            emu.load_rom_file(tmp_path / "nope.ch8")

    def test_oversized_rom_leaves_machine_untouched(self, emu):
        emu.load_program("ld v0, 1")
        with pytest.raises(RomSizeError):
            emu.load_rom(bytes(0xE01))
        assert emu.memory.read_word(0x200) == 0x6001

    def test_bad_source_not_loaded(self, emu):
        emu.load_program("ld v0, 1")
        with pytest.raises(AssemblerError):
            emu.load_program("ld v0, 999")
        assert emu.memory.read_word(0x200) == 0x6001

    def test_reset_reloads_program(self, emu):
        # Program overwrites its own first instruction, then loops
        emu.load_program("""
            ld v0, 0
            ldi 512
            dumpreg v0
            .end jp .end
        """)
        emu.run(4)
        assert emu.memory.read(0x200) == 0
        emu.reset()
        assert emu.memory.read_word(0x200) == 0x6000
        assert emu.registers["pc"] == 0x200
        assert emu.total_cycles == 0


# =============================================================================
# Execution
# =============================================================================

class TestExecution:
    """step, run and run_realtime."""

    def test_step(self, emu):
        emu.load_program("ld v1, 5\nld v2, 6")
        assert emu.step() == 0x6105
        assert emu.total_cycles == 1

    def test_run_counts_cycles(self, emu):
        emu.load_program(".loop jp .loop")
        assert emu.run(250) == 250
        assert emu.total_cycles == 250

    def test_run_propagates_fatal_error(self, emu):
        emu.load_program("cls\nret")
        with pytest.raises(StackUnderflowError):
            emu.run(10)
        assert emu.total_cycles == 1
        assert emu.registers["pc"] == 0x202

    def test_run_into_empty_memory(self, emu):
        emu.load_program("cls")
        with pytest.raises(UnknownOpcodeError) as exc_info:
            emu.run(10)
        assert exc_info.value.opcode == 0x0000
        assert exc_info.value.pc == 0x202

    def test_run_realtime(self):
        emu = Emulator(EmulatorConfig(cycles_per_second=1000))
        emu.load_program(".loop jp .loop")
        executed = emu.run_realtime(0.05)
        assert 0 < executed <= 60

    def test_run_realtime_no_burst_after_stall(self, monkeypatch):
        import chip8_sdk.emulator.emulator as emulator_module

        class FakeClock:
            def __init__(self):
                self.now = 0.0

            def perf_counter(self):
                return self.now

            def sleep(self, seconds):
                self.now += seconds

        clock = FakeClock()
        monkeypatch.setattr(emulator_module, "time", clock)

        emu = Emulator(EmulatorConfig(cycles_per_second=100))
        emu.load_program(".loop jp .loop")

        times = []
        execute = emu.cpu.execute_one

        def timed_execute():
            times.append(clock.now)
            if len(times) == 1:
                clock.now += 0.5  # host stalls during the first instruction
            return execute()

        monkeypatch.setattr(emu.cpu, "execute_one", timed_execute)
        executed = emu.run_realtime(1.0)

        gaps = [b - a for a, b in zip(times[1:], times[2:])]
        assert all(gap >= 0.01 - 1e-9 for gap in gaps)
        assert executed <= 52

    def test_seed_makes_random_repeatable(self):
        results = []
        for _ in range(2):
            emu = Emulator(EmulatorConfig(seed=99))
            emu.load_program("rnd v0, 255\nrnd v1, 255\nrnd v2, 255")
            emu.run(3)
            regs = emu.registers
            results.append((regs["v0"], regs["v1"], regs["v2"]))
        assert results[0] == results[1]


# =============================================================================
# Keys, Timers and Display
# =============================================================================

class TestHostInterface:
    """Key simulation, sound flag and display output."""

    def test_press_key_by_name(self, emu):
        emu.load_program("getkey v5")
        emu.run(3)
        assert emu.registers["pc"] == 0x200
        emu.press_key("E")
        emu.step()
        assert emu.registers["v5"] == 0xE

    def test_release_key(self, emu):
        emu.press_key(3)
        emu.release_key(3)
        assert not emu.keyboard.is_key_down(3)

    def test_tap_key_holds_for_cycles(self, emu):
        emu.load_program("""
            ld v0, 7
            .wait
            sknp v0
            jp .pressed
            jp .wait
            .pressed
            ld v1, 1
            .end jp .end
        """)
        emu.run(5)
        emu.tap_key(7, hold_cycles=10)
        assert emu.registers["v1"] == 1
        assert not emu.keyboard.is_key_down(7)

    def test_sound_active(self, emu):
        emu.load_program("ld v0, 2\nld st, v0\ncls\ncls\ncls")
        emu.run(2)
        assert emu.sound_active
        emu.run(2)
        assert not emu.sound_active

    def test_display_lines(self, emu):
        emu.load_program("""
            ld v0, 0
            ld v1, 0
            ld v2, 10
            ldsprt v2
            drw v0, v1, 5
            .end
            jp .end
        """)
        emu.run(100)
        lines = emu.display_lines
        assert lines[0][:8] == "####...."
        assert lines[2][:4] == "####"
        assert lines[4][:4] == "#..#"

    def test_draw_score_digits(self, emu):
        emu.load_program("""
            ld v0, 0
            ld v1, 0
            ld v2, 8
            ldsprt v2
            drw v0, v1, 5
        """)
        emu.run(5)
        assert emu.display_text.split("\n")[2][:4] == "####"

    def test_render_display_png(self, emu):
        png = emu.render_display(scale=2)
        assert png[:4] == b"\x89PNG"

    def test_registers_dict(self, emu):
        regs = emu.registers
        assert set(regs) == {f"v{n}" for n in range(16)} | {"i", "pc", "sp", "dt", "st"}

    def test_repr(self, emu):
        emu.load_program("cls")
        assert repr(emu) == "Emulator(pc=$200, cycles=0, program=2 bytes)"


# =============================================================================
# Sample Program
# =============================================================================

class TestPong:
    """The bundled Pong game runs without faults and draws its court."""

    @pytest.fixture
    def pong(self, emu):
        asm = Assembler()
        code = asm.assemble_file(EXAMPLES_DIR / "pong.asm")
        emu.load_rom(code)
        emu.game_loop = asm.get_symbols()[".game_loop"]
        return emu

    @staticmethod
    def run_frame(emu, cycles):
        """Run, then continue until a complete frame has been drawn."""
        emu.run(cycles)
        for _ in range(1_000):
            if emu.registers["pc"] == emu.game_loop:
                return
            emu.step()
        raise AssertionError("game loop never reached")

    def test_runs_without_error(self, pong):
        assert pong.run(20_000) == 20_000

    def test_draws_paddles_and_score(self, pong):
        self.run_frame(pong, 2_000)
        lines = pong.display_lines
        # Left paddle at x=1, right paddle at x=62, both 5 rows tall
        # (the ball may erase one pixel where it overlaps)
        assert sum(line[1] == "#" for line in lines) >= 4
        assert sum(line[62] == "#" for line in lines) >= 4
        # Score digits are drawn at the top
        assert "#" in lines[0][16:20]
        assert "#" in lines[0][42:46]

    def test_paddle_moves_with_key(self, pong):
        self.run_frame(pong, 2_000)
        start = pong.registers["v0"]
        pong.tap_key("1", hold_cycles=400)
        assert pong.registers["v0"] > start
