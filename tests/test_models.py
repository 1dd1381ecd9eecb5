"""Tests for topicdoc.models."""

from __future__ import annotations

import pytest

from topicdoc.models import (
    Element,
    Topic,
    TopicError,
    identifiers_of,
    join_symbols,
    symbol_from_text,
)


def test_symbol_from_text_normalises_separators_and_parameters() -> None:
    assert symbol_from_text("Outer::Inner") == "Outer.Inner"
    assert symbol_from_text("ptr -> field") == "ptr.field"
    assert symbol_from_text("Shape.area()") == "Shape.area"
    assert symbol_from_text("   ") is None
    assert symbol_from_text(None) is None


def test_join_and_split_symbols() -> None:
    assert join_symbols("A", None, "b") == "A.b"
    assert join_symbols(None, "") is None
    assert identifiers_of("A.B.c") == ["A", "B", "c"]
    assert identifiers_of(None) == []


def test_symbol_joins_package_and_title() -> None:
    topic = Topic("function", "area", package="Shape")

    assert topic.symbol == "Shape.area"
    assert topic.package == "Shape"


def test_always_global_types_ignore_the_package() -> None:
    topic = Topic("file", "shape.h", package="Shape")

    assert topic.symbol == "shape.h"


def test_scope_start_types_report_their_own_symbol_as_package() -> None:
    topic = Topic("class", "Circle", package="geo")

    assert topic.package == "geo.Circle"
    assert topic.stored_package == "geo"

    topic.package = "shapes"
    assert topic.package == "shapes.Circle"


def test_whitespace_only_body_is_rejected() -> None:
    with pytest.raises(TopicError):
        Topic("function", "f", body="  \n ")

    topic = Topic("function", "f", body="<p>x</p>")
    with pytest.raises(TopicError):
        topic.body = "\t"
    topic.body = None
    assert topic.body is None


def test_clone_copies_elements_and_attributes() -> None:
    topic = Topic(
        "type",
        "Color",
        elements=[Element("red", "Warm.")],
        attributes=["struct"],
    )

    copy = topic.clone()
    copy.elements[0].description = "Changed."
    copy.add_attribute("static")

    assert topic.elements[0].description == "Warm."
    assert topic.attributes == ["struct"]
    assert copy.has_attribute("static")


def test_to_dict_reports_derived_fields() -> None:
    data = Topic("function", "area", package="Shape", line_number=7).to_dict()

    assert data["symbol"] == "Shape.area"
    assert data["line_number"] == 7
    assert data["using"] == []
    assert data["elements"] == []
