"""Tests for topicdoc.parser.native."""

from __future__ import annotations

from topicdoc.modelines import Modelines
from topicdoc.parser.native import NativeParser
from topicdoc.parser.table import Table


def test_header_starts_a_typed_topic() -> None:
    parser = NativeParser()

    topics = parser.parse_comment(["Function: Add", "    Adds two numbers."], False, 10)

    assert len(topics) == 1
    topic = topics[0]
    assert (topic.type, topic.title) == ("function", "Add")
    assert topic.body == "<p>Adds two numbers.</p>"
    assert topic.summary == "Adds two numbers."
    assert topic.line_number == 10
    assert topic.is_list is False


def test_definition_lines_under_a_heading_make_a_description_list() -> None:
    parser = NativeParser()
    lines = ["Function: Add", "Adds two.", "", "Parameters:", "  a - first", "  b - second"]

    topic = parser.parse_comment(lines, False, 1)[0]

    assert topic.body == (
        "<p>Adds two.</p><h>Parameters</h>"
        "<dl><de>a</de><dd>first</dd><de>b</de><dd>second</dd></dl>"
    )


def test_plural_keyword_makes_a_list_topic_with_symbol_entries() -> None:
    parser = NativeParser()
    lines = ["Constants: Colors", "", "  RED - The red one.", "  BLUE - The blue one."]

    topic = parser.parse_comment(lines, False, 1)[0]

    assert topic.type == "constant"
    assert topic.is_list is True
    assert topic.title == "Colors"
    assert topic.body == (
        "<dl><ds>RED</ds><dd>The red one.</dd><ds>BLUE</ds><dd>The blue one.</dd></dl>"
    )
    assert topic.summary is None


def test_class_topic_scopes_later_topics() -> None:
    parser = NativeParser()
    lines = ["Class: Shape", "A shape.", "", "Function: area", "Computes area."]

    shape, area = parser.parse_comment(lines, False, 1)

    assert shape.package == "Shape"
    assert area.line_number == 4
    assert area.symbol == "Shape.area"

    later = parser.parse_comment(["Function: perimeter"], False, 20)[0]
    assert later.symbol == "Shape.perimeter"

    parser.start()
    assert parser.parse_comment(["Function: free"], False, 30)[0].symbol == "free"


def test_headerless_doc_comment_becomes_an_untyped_topic() -> None:
    parser = NativeParser()

    topic = parser.parse_comment(["", "Adds two numbers.", "More."], True, 5)[0]

    assert topic.type is None
    assert topic.title is None
    assert topic.body == "<p>Adds two numbers. More.</p>"
    assert topic.line_number == 6


def test_prototype_section_is_lifted_out_of_the_body() -> None:
    parser = NativeParser()
    lines = ["Function: f", "Prototype:", "  int f(", "    void)", "(end)", "Does things."]

    topic = parser.parse_comment(lines, False, 1)[0]

    assert topic.prototype == "int f( void)"
    assert topic.body == "<p>Does things.</p>"


def test_is_mine_checks_the_first_content_line() -> None:
    parser = NativeParser()

    assert parser.is_mine(["", "  Function: x"])
    assert not parser.is_mine(["Just text"])
    assert not parser.is_mine(["Widget: x"])
    assert not parser.is_mine(["", ""])


def test_code_block_keeps_relative_indentation() -> None:
    parser = NativeParser()

    body = parser.format_body(["(code)", "  int x;", "    y();", "(end)"])

    assert body == "<code>int x;\n  y();\n</code>"


def test_block_start_wins_over_a_definition_entry() -> None:
    parser = NativeParser()

    body = parser.format_body(["- item", "(example - usage)", "x = 1;", "(end)"])

    assert "<dl>" not in body
    assert body.startswith("<ul><li>item</li></ul><code")
    assert body.endswith("x = 1;\n</code>")


def test_prefix_code_lines_are_escaped() -> None:
    parser = NativeParser()

    body = parser.format_body(["Text.", "> a < b", "> c"])

    assert body == "<p>Text.</p><prefixcode>a &lt; b\nc</prefixcode>"


def test_prefix_code_can_be_disabled_by_modeline() -> None:
    parser = NativeParser(modelines=Modelines({"code": 0}))

    body = parser.format_body(["> quoted"])

    assert body == "<p>&gt; quoted</p>"


def test_indented_bullets_nest() -> None:
    parser = NativeParser(default_indent=4)

    body = parser.format_body(["- one", "    - nested", "- two"])

    assert body == (
        "<ul><li>one</li><ul><BulletIndent1><li>nested</li></BulletIndent1></ul>"
        "<li>two</li></ul>"
    )


def test_default_indent_nests_a_four_column_bullet() -> None:
    body = NativeParser().format_body(["- a", "    - b", "- c"])

    assert body == "<ul><li>a</li><ul><BulletIndent1><li>b</li></BulletIndent1></ul><li>c</li></ul>"


def test_bullets_can_be_disabled_by_modeline() -> None:
    parser = NativeParser(modelines=Modelines({"bullists": 0}))

    assert parser.format_body(["- one"]) == "<p>- one</p>"


def test_admonition_wraps_following_blocks_until_closed() -> None:
    parser = NativeParser()

    body = parser.format_body(["Note!: Be careful.", "More text.", "(end!)", "After."])

    assert body == (
        "<admon-Note><ah>Note: Be careful.</ah><p>More text.</p></admon-Note>"
        "<p>After.</p>"
    )


def test_simple_table_is_stored_as_an_object() -> None:
    parser = NativeParser()
    lines = [
        "(start table Sizes, format=simple)",
        "| Name | Size |",
        "| a | 1 |",
        "(end table)",
    ]

    body = parser.format_body(lines)

    assert body == "<table=1>"
    assert len(parser.objects) == 1
    table = parser.objects[0]
    assert isinstance(table, Table)
    assert table.title == "Sizes"
    assert (table.rows, table.cols) == (2, 2)
    assert table.cell(1, 1).is_head
    assert table.cell(1, 1).content == "<p>Name</p>"
    assert table.cell(2, 2).content.startswith("<p>1")


def test_custom_object_sink_assigns_ids() -> None:
    seen = []

    def sink(obj: object) -> int:
        seen.append(obj)
        return 7

    parser = NativeParser(on_object=sink)

    body = parser.format_body(["(table)", "| x |", "(end table)"])

    assert body == "<table=7>"
    assert len(seen) == 1
