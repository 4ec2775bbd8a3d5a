"""Tests for table recovery from the stacked sheet."""

import csv
from unittest.mock import patch

import pytest

from src.ingest import grid_parser
from src.ingest.grid_parser import (
    ParserState,
    advance,
    build_record,
    detect_header,
    is_blank_row,
    parse_grid,
    parse_sheet_text,
    read_grid,
)
from src.tables.models import TableKind
from tests.sheet_samples import CARD_HEADER, DETAIL_HEADER, PARTNER_HEADER, RULE_HEADER


class TestBlankRows:
    """Tests for separator detection."""

    def test_empty_row_is_blank(self):
        assert is_blank_row([]) == True

    def test_whitespace_cells_are_blank(self):
        assert is_blank_row(["", "  ", "\t"]) == True

    def test_row_with_value_is_not_blank(self):
        assert is_blank_row(["", "x", ""]) == False


class TestDetectHeader:
    """Tests for header signature matching."""

    def test_each_table_detected(self):
        assert detect_header(PARTNER_HEADER) == TableKind.PARTNER
        assert detect_header(CARD_HEADER) == TableKind.CARD
        assert detect_header(DETAIL_HEADER) == TableKind.PRODUCT_DETAIL
        assert detect_header(RULE_HEADER) == TableKind.DISPLAY_RULE

    def test_key_column_must_be_first(self):
        """Test that the signature alone is not enough."""
        assert detect_header(["Partner_Name", "Partner_ID"]) is None

    def test_signature_required(self):
        """Test that the key column alone is not enough."""
        assert detect_header(["Config_ID", "Partner_ID", "Something"]) is None

    def test_first_cell_trimmed(self):
        assert detect_header(["  Rule_ID ", "Config_ID", "User_Segment"]) == TableKind.DISPLAY_RULE

    def test_card_title_checked_before_hero_banner(self):
        """Test that a header naming both signatures routes to cards."""
        row = ["Config_ID", "Hero_Banner_URL", "Card_Title"]
        assert detect_header(row) == TableKind.CARD


class TestBuildRecord:
    """Tests for zipping headers with cells."""

    def test_short_row_fills_empty_strings(self):
        record = build_record(["A", "B", "C"], ["1"])
        assert record == {"A": "1", "B": "", "C": ""}

    def test_long_row_ignores_extra_cells(self):
        record = build_record(["A", "B"], ["1", "2", "3", "4"])
        assert record == {"A": "1", "B": "2"}

    def test_empty_header_skipped(self):
        record = build_record(["A", "", "C"], ["1", "2", "3"])
        assert record == {"A": "1", "C": "3"}

    def test_values_trimmed(self):
        record = build_record(["A"], ["  padded  "])
        assert record == {"A": "padded"}


class TestAdvance:
    """Tests for the recovery state machine transitions."""

    def test_header_opens_table_without_emission(self):
        state, emission = advance(ParserState(), PARTNER_HEADER)
        assert state.table == TableKind.PARTNER
        assert state.headers == tuple(PARTNER_HEADER)
        assert emission is None

    def test_data_row_emits_for_open_table(self):
        state = ParserState(table=TableKind.PARTNER, headers=tuple(PARTNER_HEADER))
        next_state, emission = advance(state, ["P1", "Acme"])
        assert next_state == state
        assert emission[0] == TableKind.PARTNER
        assert emission[1]["Partner_ID"] == "P1"

    def test_blank_row_resets(self):
        state = ParserState(table=TableKind.PARTNER, headers=tuple(PARTNER_HEADER))
        next_state, emission = advance(state, ["", ""])
        assert next_state.table is None
        assert emission is None

    def test_orphan_row_dropped(self):
        state, emission = advance(ParserState(), ["P1", "Acme"])
        assert state.table is None
        assert emission is None


class TestParseGrid:
    """Tests for full-grid recovery."""

    def test_header_followed_by_blank_yields_nothing(self):
        grid = [PARTNER_HEADER, [], ["P1", "Acme", "ACM", "Card", "Active"]]
        tables = parse_grid(grid)
        assert tables.partners == ()

    def test_card_and_detail_headers_back_to_back(self):
        grid = [
            CARD_HEADER,
            ["C1", "P1", "Gold"],
            DETAIL_HEADER,
            ["C1", "https://img"],
            CARD_HEADER,
            ["C2", "P1", "Silver"],
        ]
        tables = parse_grid(grid)
        assert [c.Config_ID for c in tables.cards] == ["C1", "C2"]
        assert [d.Hero_Banner_URL for d in tables.product_details] == ["https://img"]

    def test_ragged_rows(self):
        grid = [
            PARTNER_HEADER,
            ["P1", "Acme"],
            ["P2", "Borealis", "BOR", "Loan", "Active", "extra", "cells"],
        ]
        tables = parse_grid(grid)
        assert tables.partners[0].Status == ""
        assert tables.partners[0].Bank_Code == ""
        assert tables.partners[1].Status == "Active"

    def test_orphan_rows_before_header_and_after_reset(self):
        grid = [
            ["stray", "row"],
            RULE_HEADER,
            ["R1", "C1", "All", "", "", "3"],
            [],
            ["R2", "C2", "All", "", "", "4"],
            RULE_HEADER,
            ["R3", "C3", "All", "", "", "5"],
        ]
        tables = parse_grid(grid)
        assert [r.Rule_ID for r in tables.display_rules] == ["R1", "R3"]
        assert tables.partners == ()
        assert tables.cards == ()

    def test_row_order_preserved(self):
        grid = [PARTNER_HEADER] + [[f"P{i}", f"Name {i}"] for i in range(5)]
        tables = parse_grid(grid)
        assert [p.Partner_ID for p in tables.partners] == ["P0", "P1", "P2", "P3", "P4"]

    def test_unknown_columns_ignored(self):
        grid = [PARTNER_HEADER + ["Notes"], ["P1", "Acme", "", "", "Active", "internal"]]
        tables = parse_grid(grid)
        assert tables.partners[0].Partner_Name == "Acme"
        assert not hasattr(tables.partners[0], "Notes")

    def test_empty_grid(self):
        tables = parse_grid([])
        assert tables.counts() == {
            "partners": 0,
            "cards": 0,
            "product_details": 0,
            "display_rules": 0,
        }

    def test_multiple_blank_spacers(self):
        grid = [PARTNER_HEADER, ["P1", "Acme"], [], [""], ["  ", ""], RULE_HEADER, ["R1", "C1"]]
        tables = parse_grid(grid)
        assert len(tables.partners) == 1
        assert len(tables.display_rules) == 1


class TestReadGrid:
    """Tests for CSV tokenization."""

    def test_blank_lines_preserved(self):
        rows = read_grid("a,b\n\nc,d\n")
        assert rows == [["a", "b"], [], ["c", "d"]]

    def test_trailing_empty_fields_preserved(self):
        rows = read_grid("a,,\n")
        assert rows == [["a", "", ""]]

    def test_crlf_line_endings(self):
        rows = read_grid("a,b\r\n\r\nc,d\r\n")
        assert rows == [["a", "b"], [], ["c", "d"]]

    def test_quoted_cells(self):
        rows = read_grid('C1,"Cashback, 5%","line one\nline two"\n')
        assert rows == [["C1", "Cashback, 5%", "line one\nline two"]]

    def test_byte_order_mark_removed(self):
        tables = parse_sheet_text("\ufeffPartner_ID,Partner_Name\nP1,Acme\n")
        assert tables.partners[0].Partner_ID == "P1"

    def test_cell_longer_than_default_field_limit(self):
        long_name = "x" * 200000
        tables = parse_sheet_text(f"Partner_ID,Partner_Name,Status\nP1,{long_name},Active\n")
        assert tables.partners[0].Partner_Name == long_name
        assert tables.partners[0].Status == "Active"

    def test_tokenizer_error_keeps_rows_read_so_far(self):
        class BrokenReader:
            line_num = 2

            def __iter__(self):
                yield ["Partner_ID", "Partner_Name"]
                yield ["P1", "Acme"]
                raise csv.Error("unexpected end of data")

        with patch.object(grid_parser.csv, "reader", return_value=BrokenReader()):
            rows = read_grid("ignored")

        assert rows == [["Partner_ID", "Partner_Name"], ["P1", "Acme"]]


def test_full_sheet(full_sheet_csv):
    """Test recovery of a sheet with all four tables."""
    tables = parse_sheet_text(full_sheet_csv)

    assert tables.counts() == {
        "partners": 3,
        "cards": 4,
        "product_details": 2,
        "display_rules": 3,
    }
    assert tables.cards[0].Card_Title == "Acme Gold"
    assert tables.cards[0].Benefit_2 == ""
    assert tables.display_rules[0].User_Segment == "New User"


def test_parse_logs_summary(caplog, full_sheet_csv):
    """Test that recovery logs table sizes at debug level."""
    with caplog.at_level("DEBUG", logger=grid_parser.logger.name):
        parse_sheet_text(full_sheet_csv + "\nstray,row\n")
    assert "dropped 1 orphan rows" in caplog.text
