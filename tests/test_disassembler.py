"""
Unit Tests for the Disassembler Module
======================================

Tests for the CHIP-8 disassembler.

Test coverage includes:
- Every operand form
- Decode-only instructions
- Symbol table labels
- Edge cases (unknown words, odd trailing byte, empty input)
- Reassembly of disassembled output
- The c8disasm CLI

Copyright (c) 2026 CHIP-8 SDK Contributors
"""

from pathlib import Path

import pytest
from chip8_sdk.assembler import Assembler, assemble
from chip8_sdk.disassembler import Chip8Disassembler, DisassembledInstruction

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


def disasm_word(word: int, **kwargs) -> DisassembledInstruction:
    return Chip8Disassembler(**kwargs).disassemble_one(word.to_bytes(2, "big"))


# =============================================================================
# Single Instructions
# =============================================================================

class TestDisassembleOne:
    """Decoding of individual words."""

    @pytest.mark.parametrize("word,text", [
        (0x00E0, "cls"),
        (0x00EE, "ret"),
        (0x1300, "jp 768"),
        (0x2400, "call 1024"),
        (0x312A, "se v1, 42"),
        (0x42FF, "sne v2, 255"),
        (0x5340, "se v3, v4"),
        (0x6307, "ld v3, 7"),
        (0x7701, "add v7, 1"),
        (0x8120, "ld v1, v2"),
        (0x8124, "add v1, v2"),
        (0x8125, "sub v1, v2"),
        (0x8106, "shr v1"),
        (0x8127, "subn v1, v2"),
        (0x810E, "shl v1"),
        (0x9560, "sne v5, v6"),
        (0x9121, "gt v1, v2"),
        (0x9122, "gte v1, v2"),
        (0x9123, "lt v1, v2"),
        (0x9124, "lte v1, v2"),
        (0xA7D0, "ldi 2000"),
        (0xCA1F, "rnd v10, 31"),
        (0xD125, "drw v1, v2, 5"),
        (0xE49E, "skp v4"),
        (0xE4A1, "sknp v4"),
        (0xF207, "ld v2, dt"),
        (0xF20A, "getkey v2"),
        (0xF215, "ld dt, v2"),
        (0xF218, "ld st, v2"),
        (0xF21E, "addi v2"),
        (0xF229, "ldsprt v2"),
        (0xF233, "ldbcd v2"),
        (0xF255, "dumpreg v2"),
        (0xF265, "ldreg v2"),
    ])
    def test_instruction(self, word, text):
        instr = disasm_word(word)
        assert instr.source == text
        assert instr.opcode == word
        assert instr.size == 2

    @pytest.mark.parametrize("word,text", [
        (0x8121, "or v1, v2"),
        (0x8122, "and v1, v2"),
        (0x8123, "xor v1, v2"),
        (0xB300, "jp0 768"),
    ])
    def test_decode_only(self, word, text):
        assert disasm_word(word).source == text

    def test_address_comment(self):
        instr = disasm_word(0x1300)
        assert instr.comment == "$300"

    def test_default_address(self):
        assert disasm_word(0x00E0).address == 0x200

    def test_str_format(self):
        assert str(disasm_word(0x6307)) == "$200: 63 07  ld v3, 7"

    def test_str_with_comment(self):
        assert str(disasm_word(0x1300)) == "$200: 13 00  jp 768           ; $300"

    def test_to_dict(self):
        d = disasm_word(0x6307).to_dict()
        assert d["address"] == "$200"
        assert d["address_int"] == 0x200
        assert d["opcode"] == "$6307"
        assert d["mnemonic"] == "ld"
        assert d["operand"] == "v3, 7"
        assert d["bytes"] == ["$63", "$07"]


# =============================================================================
# Data and Edge Cases
# =============================================================================

class TestEdgeCases:
    """Words that are not instructions."""

    @pytest.mark.parametrize("word", [0x0000, 0x0123, 0x5121, 0x8008, 0x9125, 0xE000, 0xF0FF])
    def test_unknown_word(self, word):
        instr = disasm_word(word)
        assert instr.mnemonic == "dw"
        assert instr.operand_str == f"${word:04X}"
        assert instr.comment == "unknown opcode"
        assert instr.is_data

    def test_trailing_byte(self):
        instrs = Chip8Disassembler().disassemble(bytes([0x00, 0xE0, 0xAB]))
        assert len(instrs) == 2
        assert instrs[1].mnemonic == "db"
        assert instrs[1].operand_str == "$AB"
        assert instrs[1].size == 1
        assert instrs[1].address == 0x202

    def test_empty_input(self):
        assert Chip8Disassembler().disassemble(b"") == []

    def test_offset_beyond_data(self):
        with pytest.raises(ValueError):
            Chip8Disassembler().disassemble_one(b"", 0x200)


# =============================================================================
# Multiple Instructions
# =============================================================================

class TestDisassemble:
    """Sequences, limits and symbols."""

    def test_addresses_advance(self):
        instrs = Chip8Disassembler().disassemble(assemble("cls\nret\ncls"))
        assert [i.address for i in instrs] == [0x200, 0x202, 0x204]

    def test_start_address(self):
        instrs = Chip8Disassembler().disassemble(assemble("cls"), start_address=0x300)
        assert instrs[0].address == 0x300

    def test_count(self):
        instrs = Chip8Disassembler().disassemble(assemble("cls\ncls\ncls"), count=2)
        assert len(instrs) == 2

    def test_symbols_replace_targets(self):
        disasm = Chip8Disassembler(symbol_table={0x202: ".sub"})
        instrs = disasm.disassemble(assemble("call .sub\n.sub ret"))
        assert instrs[0].source == "call .sub"

    def test_ldi_never_labelled(self):
        disasm = Chip8Disassembler(symbol_table={0x300: ".data"})
        assert disasm.disassemble_one(bytes([0xA3, 0x00])).source == "ldi 768"

    def test_add_symbols(self):
        disasm = Chip8Disassembler()
        disasm.add_symbol(0x200, ".start")
        disasm.add_symbols({0x202: ".next"})
        text = disasm.disassemble_to_text(assemble("jp .next\n.next ret"))
        lines = text.split("\n")
        assert lines[0] == ".start"
        assert "jp .next" in lines[1]
        assert lines[2] == ".next"

    def test_to_text(self):
        text = Chip8Disassembler().disassemble_to_text(assemble("cls\nret"))
        assert text == "$200: 00 E0  cls\n$202: 00 EE  ret"


# =============================================================================
# Reassembly
# =============================================================================

class TestReassembly:
    """Disassembled source assembles back to the same bytes."""

    def test_numeric_round_trip(self):
        source = "ld v0, 5\nld dt, v0\nld v1, dt\ndrw v0, v1, 3\njp 512"
        code = assemble(source)
        text = Chip8Disassembler().disassemble_to_source(code)
        assert assemble(text) == code

    def test_source_count(self):
        code = assemble("cls\nret\ncls")
        text = Chip8Disassembler().disassemble_to_source(code, count=2)
        assert text == "    cls\n    ret\n"

    def test_pong_round_trip(self):
        asm = Assembler()
        code = asm.assemble_file(EXAMPLES_DIR / "pong.asm")
        symbols = {address: name for name, address in asm.get_symbols().items()}
        text = Chip8Disassembler(symbol_table=symbols).disassemble_to_source(code)
        assert assemble(text) == code


# =============================================================================
# CLI Tests
# =============================================================================

class TestDisassemblerCLI:
    """Tests for the c8disasm CLI tool."""

    def test_cli_help(self):
        """Test CLI help output."""
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Disassemble a CHIP-8" in result.output

    def test_cli_version(self):
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_cli_basic_disassembly(self, tmp_path):
        """Test basic disassembly."""
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xE0, 0x00, 0xEE]))

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file)])

        assert result.exit_code == 0
        assert "cls" in result.output
        assert "ret" in result.output
        assert "; Base address: $200" in result.output

    def test_cli_with_address(self, tmp_path):
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xE0]))

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "--address", "0x300"])

        assert result.exit_code == 0
        assert "$300: 00 E0  cls" in result.output

    def test_cli_bad_address(self, tmp_path):
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xE0]))

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "--address", "zzz"])

        assert result.exit_code == 2

    def test_cli_hex_dump(self, tmp_path):
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        test_file = tmp_path / "test.ch8"
        test_file.write_bytes(bytes([0x00, 0xE0]))

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file), "--hex"])

        assert result.exit_code == 0
        assert "Hex dump" in result.output

    def test_cli_empty_file(self, tmp_path):
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        test_file = tmp_path / "empty.ch8"
        test_file.write_bytes(b"")

        runner = CliRunner()
        result = runner.invoke(main, [str(test_file)])

        assert result.exit_code == 2

    def test_cli_source_with_symbols(self, tmp_path):
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        asm = Assembler()
        asm.assemble_string(".top\ncls\njp .top")
        rom = tmp_path / "prog.ch8"
        sym = tmp_path / "prog.sym"
        out = tmp_path / "prog.asm"
        asm.write_binary(rom)
        asm.write_symbols(sym)

        runner = CliRunner()
        result = runner.invoke(main, [str(rom), "-s", str(sym), "--source", "-o", str(out)])

        assert result.exit_code == 0
        text = out.read_text()
        assert ".top" in text
        assert "jp .top" in text
        assert assemble(text) == rom.read_bytes()

    def test_cli_source_with_count(self, tmp_path):
        from click.testing import CliRunner
        from chip8_sdk.cli.c8disasm import main

        rom = tmp_path / "prog.ch8"
        rom.write_bytes(bytes([0x00, 0xE0] * 4))

        runner = CliRunner()
        result = runner.invoke(main, [str(rom), "--source", "-c", "1"])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["    cls"]
