"""Tests for topicdoc.parser.summary."""

from __future__ import annotations

from topicdoc.parser.summary import summary_from_body, summary_from_description_list


def test_single_sentence_paragraph_is_the_summary() -> None:
    assert summary_from_body("<p>Adds two numbers.</p>") == "Adds two numbers."


def test_summary_stops_after_first_sentence() -> None:
    body = "<h>Overview</h><p>First part! Second part.</p>"

    assert summary_from_body(body) == "First part! "


def test_body_without_leading_paragraph_has_no_summary() -> None:
    assert summary_from_body("<code>x = 1\n</code>") is None
    assert summary_from_body(None) is None
    assert summary_from_body("") is None


def test_description_list_summary() -> None:
    assert summary_from_description_list("Width in pixels. Must be even.") == "Width in pixels. "
    assert summary_from_description_list("Just one") == "Just one"
    assert summary_from_description_list(None) is None
