"""
First Pass (Parser) Unit Tests
==============================

Tests for instruction records, label collection and the operand-kind
checks performed before any encoding happens.

Copyright (c) 2026 CHIP-8 SDK Contributors
"""

import pytest
from chip8_sdk.assembler.lexer import tokenize
from chip8_sdk.assembler.parser import LabelTable, Parser
from chip8_sdk.assembler import resolve_labels
from chip8_sdk.errors import (
    DuplicateLabelError,
    MissingOperandError,
    SourceLocation,
    UndefinedLabelError,
    UnexpectedTokenError,
    UnknownInstructionError,
)


def parse(source: str):
    parser = Parser(tokenize(source), source.split("\n"))
    records = parser.parse()
    return records, parser.labels


# =============================================================================
# Instruction Records
# =============================================================================

class TestRecords:
    """One record per instruction, two bytes apart."""

    def test_offsets(self):
        records, _ = parse("cls\nld v0, 1\nret")
        assert [r.offset for r in records] == [0, 2, 4]

    def test_mnemonic_and_operands(self):
        records, _ = parse("drw v1, v2, 5")
        assert records[0].mnemonic == "drw"
        assert records[0].operand_values == ("v1", "v2", "5")

    def test_operand_count_fixed_by_mnemonic(self):
        """Operands are consumed by arity, so statements may share a line."""
        records, _ = parse("ld v0, 1 ld v1, 2 cls")
        assert [r.mnemonic for r in records] == ["ld", "ld", "cls"]

    def test_record_str(self):
        records, _ = parse("se v1, 3")
        assert str(records[0]) == "se v1, 3"

    def test_location_is_mnemonic_position(self):
        records, _ = parse("\n   ret")
        assert records[0].location == SourceLocation("<input>", 2, 4)

    def test_empty_program(self):
        records, labels = parse("; just a comment\n")
        assert records == []
        assert len(labels) == 0


# =============================================================================
# Labels
# =============================================================================

class TestLabels:
    """Labels bind to the offset of the next instruction."""

    def test_label_offset(self):
        _, labels = parse("cls\n.here\nret")
        assert labels[".here"] == 2

    def test_label_at_start(self):
        _, labels = parse(".start cls")
        assert labels[".start"] == 0

    def test_label_at_end(self):
        _, labels = parse("cls\n.end")
        assert labels[".end"] == 2

    def test_consecutive_labels_share_offset(self):
        _, labels = parse("cls\n.a\n.b\nret")
        assert labels[".a"] == labels[".b"] == 2

    def test_label_reference_is_not_definition(self):
        _, labels = parse("jp .later\n.later cls")
        assert len(labels) == 1
        assert labels[".later"] == 2

    def test_duplicate_label(self):
        with pytest.raises(DuplicateLabelError) as exc_info:
            parse(".a cls\n.a ret")
        assert exc_info.value.label == ".a"
        assert exc_info.value.original_location == SourceLocation("<input>", 1, 1)
        assert "first defined at <input>:1:1" in str(exc_info.value)

    def test_resolve_labels_helper(self):
        labels = resolve_labels("cls\n.x ret")
        assert ".x" in labels
        assert labels[".x"] == 2


class TestLabelTable:
    """LabelTable lookups."""

    def test_resolve_undefined(self):
        table = LabelTable()
        with pytest.raises(UndefinedLabelError):
            table.resolve(".missing")

    def test_similar_names_suggested(self):
        table = LabelTable()
        table.define(".draw_score", 0)
        with pytest.raises(UndefinedLabelError) as exc_info:
            table.resolve(".draw_scroe")
        assert ".draw_score" in exc_info.value.similar_labels
        assert "did you mean '.draw_score'?" in str(exc_info.value)

    def test_items(self):
        table = LabelTable()
        table.define(".a", 0)
        table.define(".b", 4)
        assert dict(table.items()) == {".a": 0, ".b": 4}


# =============================================================================
# Operand Kind Checks
# =============================================================================

class TestOperandKinds:
    """The first pass rejects operands of the wrong kind."""

    def test_unknown_mnemonic(self):
        with pytest.raises(UnknownInstructionError) as exc_info:
            parse("mov v0, 1")
        assert exc_info.value.mnemonic == "mov"

    def test_uppercase_mnemonic_suggests_lowercase(self):
        with pytest.raises(UnknownInstructionError) as exc_info:
            parse("CLS")
        assert exc_info.value.suggestions == ["cls"]

    def test_misspelled_mnemonic_suggestion(self):
        with pytest.raises(UnknownInstructionError) as exc_info:
            parse("dumprg v3")
        assert "dumpreg" in exc_info.value.suggestions

    def test_number_where_mnemonic_expected(self):
        with pytest.raises(UnknownInstructionError):
            parse("42")

    def test_label_where_register_expected(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse("ld .x, 1")
        assert exc_info.value.found == ".x"
        assert exc_info.value.mnemonic == "ld"

    def test_label_as_drw_height(self):
        with pytest.raises(UnexpectedTokenError):
            parse("drw v1, v2, .sprite")

    def test_register_as_jump_target(self):
        with pytest.raises(UnexpectedTokenError):
            parse("jp v0")

    def test_ldi_rejects_label(self):
        with pytest.raises(UnexpectedTokenError):
            parse("ldi .sprite")

    def test_rnd_rejects_register_mask(self):
        with pytest.raises(UnexpectedTokenError):
            parse("rnd v0, v1")

    def test_missing_operand_at_end(self):
        with pytest.raises(MissingOperandError) as exc_info:
            parse("ld v0")
        assert exc_info.value.mnemonic == "ld"

    def test_error_location_points_at_operand(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse("cls\nse 5, v1")
        assert exc_info.value.location == SourceLocation("<input>", 2, 4)

    def test_error_message_has_caret(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse("se 5, v1")
        lines = str(exc_info.value).split("\n")
        assert lines[0].startswith("<input>:1:4: error:")
        assert lines[1] == "    se 5, v1"
        assert lines[2] == "       ^"
