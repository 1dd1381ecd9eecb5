"""Tests for topicdoc.parser.javadoc."""

from __future__ import annotations

from topicdoc.parser.javadoc import JavaDocParser, convert_inline_tags, is_javadoc
from topicdoc.parser.native import NativeParser


def test_is_javadoc_needs_doc_comment_with_tags() -> None:
    lines = ["Adds.", "@param a first"]

    assert is_javadoc(lines, True)
    assert not is_javadoc(lines, False)
    assert not is_javadoc(["plain"], True)
    assert is_javadoc(["See {@link Shape}."], True)


def test_convert_inline_tags() -> None:
    assert convert_inline_tags("See {@link Shape#area the area}.") == "See <Shape#area>."
    assert convert_inline_tags("Use {@code a < b} here") == "Use a < b here"
    assert convert_inline_tags("{@inheritDoc}") == ""


def test_block_tags_become_headings() -> None:
    parser = JavaDocParser(NativeParser())
    lines = [
        "   Adds {@code a} and b.",
        "   @param a first",
        "   @param b second",
        "   @return the sum",
    ]

    topic = parser.parse_comment(lines, 3)[0]

    assert topic.type is None
    assert topic.line_number == 3
    assert topic.summary == "Adds a and b."
    assert topic.body == (
        "<p>Adds a and b.</p>"
        "<h>Parameters</h><dl><de>a</de><dd>first</dd><de>b</de><dd>second</dd></dl>"
        "<h>Returns</h><p>the sum</p>"
    )


def test_see_tag_links_a_bare_symbol() -> None:
    parser = JavaDocParser(NativeParser())

    topic = parser.parse_comment(["", "@see Shape"], 1)[0]

    assert topic.line_number == 2
    assert topic.body == (
        '<h>See Also</h><p><link target="Shape" name="Shape" original="&lt;Shape&gt;"></p>'
    )


def test_unknown_tags_are_dropped_and_empty_comments_ignored() -> None:
    parser = JavaDocParser(NativeParser())

    topic = parser.parse_comment(["Text.", "@custom stuff"], 1)[0]

    assert topic.body == "<p>Text.</p>"
    assert parser.parse_comment(["", "  "], 1) == []
