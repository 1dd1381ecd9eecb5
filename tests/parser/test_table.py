"""Tests for topicdoc.parser.table."""

from __future__ import annotations

from typing import List

from topicdoc.parser.richtext import rich_format
from topicdoc.parser.table import (
    FORMAT_CSV,
    FORMAT_SIMPLE,
    JUSTIFY_RIGHT,
    TABLE_EMBEDDED,
    EMBEDDED_OPTION,
    Table,
    compress,
    parse_csv,
)


def _join_cell(lines: List[str], kind: str) -> str:
    return rich_format(" ".join(line.strip() for line in lines if line.strip()))


def test_parse_csv_handles_quotes_and_empty_fields() -> None:
    assert parse_csv('a, "b, c", ,"d""e"') == ["a", "b, c", "", 'd"e']


def test_compress_collapses_blanks() -> None:
    assert compress("  a \t  b  ") == "a b"


def test_options_set_title_caption_and_format() -> None:
    table = Table("Sizes, The caption, format=simple, justify=right, link=no")

    assert table.title == "Sizes"
    assert table.caption == "The caption"
    assert table.format == FORMAT_SIMPLE
    assert table.justification == JUSTIFY_RIGHT
    assert table.link is False


def test_embedded_option_marks_nested_tables() -> None:
    table = Table(EMBEDDED_OPTION)

    assert table.embedded
    assert table.kind == TABLE_EMBEDDED


def test_simple_table_rows_and_references() -> None:
    table = Table("format=simple", formatter=_join_cell)

    table.parse_line("| Name | Picture |")
    table.parse_line("| <Shape> | (see a.png) |")
    table.parse_end()

    assert (table.rows, table.cols) == (2, 2)
    assert table.cell(1, 2).content == "Picture"
    assert table.cell(2, 1).content.startswith('<link target="Shape"')
    assert table.references() == (["Shape"], ["a.png"])


def test_csv_table_rows() -> None:
    table = Table("format=csv", formatter=_join_cell)

    for line in ("Name, Size", "a, 1", "b, 2"):
        table.parse_line(line)
    table.parse_end()

    assert table.format == FORMAT_CSV
    assert table.rows == 3
    assert [table.cell(row, 1).content for row in (1, 2, 3)] == ["Name", "a", "b"]
    assert table.cell(3, 2).content == "2"


def test_lines_before_the_ruler_form_the_summary() -> None:
    table = Table()

    table.parse_line("Sizes of")
    table.parse_line("things.")

    assert table.summary == "Sizes of things."
    assert table.rows == 0


def test_unlinked_tables_report_no_references() -> None:
    table = Table("format=simple, link=no", formatter=_join_cell)
    table.parse_line("| <Shape> |")
    table.parse_line("| <Other> |")
    table.parse_end()

    assert table.references() == ([], [])
