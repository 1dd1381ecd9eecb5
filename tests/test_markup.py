"""Tests for topicdoc.markup."""

from __future__ import annotations

from topicdoc.markup import (
    ListEntry,
    convert_amp_chars,
    iter_image_targets,
    iter_link_targets,
    iter_list_entries,
    iter_list_symbols,
    iter_table_ids,
    replace_table_ids,
    restore_amp_chars,
)


def test_convert_and_restore_amp_chars() -> None:
    assert convert_amp_chars('a<b & "c">') == "a&lt;b &amp; &quot;c&quot;&gt;"
    assert restore_amp_chars("&amp;lt;") == "&lt;"


def test_iterators_find_inline_references() -> None:
    body = (
        '<p>See <link target="a&lt;T&gt;" name="a" original="&lt;a&gt;"> and '
        '<img mode="link" target="pic.png" original="(see pic.png)">.</p><table=3>'
    )

    assert list(iter_link_targets(body)) == ["a<T>"]
    assert list(iter_image_targets(body)) == ["pic.png"]
    assert list(iter_table_ids(body)) == ["3"]


def test_description_list_entries() -> None:
    body = "<dl><ds>a&amp;b</ds><dd><p>First.</p></dd><de>plain</de><dd>x</dd><ds>c</ds><dd>Second.</dd></dl>"

    assert list(iter_list_symbols(body)) == ["a&b", "c"]
    assert list(iter_list_entries(body)) == [
        ListEntry("a&amp;b", "<p>First.</p>"),
        ListEntry("c", "Second."),
    ]


def test_replace_table_ids() -> None:
    assert replace_table_ids("<table=1><p>x</p><table=2>", lambda old: str(int(old) + 10)) == (
        "<table=11><p>x</p><table=12>"
    )
