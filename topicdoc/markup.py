"""Helpers for the intermediate topic body markup.

Bodies use a small tag vocabulary: ``<p>``, ``<h>``, ``<ul>/<li>``,
``<ol>/<li>``, ``<dl>`` with ``<ds>`` (symbol) / ``<de>`` (plain) terms and
``<dd>`` descriptions, ``<code>``, ``<prefixcode>``, ``<quote>``, diagram
blocks, ``<admon-KIND>`` containers, ``<table=ID>`` object references and the
inline tags ``<b> <i> <u> <del> <link> <url> <email> <img>``. Text outside tags
is escaped with :func:`convert_amp_chars`.
"""

from __future__ import annotations

import re
from typing import Iterator, NamedTuple

_LINK_PATTERN = re.compile(r'<link target="([^"]*)" name="[^"]*" original="[^"]*">')
_IMAGE_PATTERN = re.compile(r'<img mode="[^"]*" target="([^"]+)" original="[^"]*">')
_TABLE_PATTERN = re.compile(r"<table=([^>]+)>")
_SYMBOL_ENTRY_PATTERN = re.compile(r"<ds>([^<]+)</ds>")
_DESCRIPTION_ENTRY_PATTERN = re.compile(r"<ds>([^<]+)</ds><dd>(.*?)</dd>", re.DOTALL)


def convert_amp_chars(text: str) -> str:
    """Escape the characters that would otherwise read as markup."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def restore_amp_chars(text: str) -> str:
    """Reverse :func:`convert_amp_chars`."""
    return (
        text.replace("&quot;", '"')
        .replace("&gt;", ">")
        .replace("&lt;", "<")
        .replace("&amp;", "&")
    )


class ListEntry(NamedTuple):
    symbol: str
    description: str


def iter_link_targets(body: str) -> Iterator[str]:
    for match in _LINK_PATTERN.finditer(body):
        yield restore_amp_chars(match.group(1))


def iter_image_targets(body: str) -> Iterator[str]:
    for match in _IMAGE_PATTERN.finditer(body):
        yield restore_amp_chars(match.group(1))


def iter_table_ids(body: str) -> Iterator[str]:
    for match in _TABLE_PATTERN.finditer(body):
        yield match.group(1)


def iter_list_symbols(body: str) -> Iterator[str]:
    """Yield the unescaped ``<ds>`` terms of every description list."""
    for match in _SYMBOL_ENTRY_PATTERN.finditer(body):
        yield restore_amp_chars(match.group(1))


def iter_list_entries(body: str) -> Iterator[ListEntry]:
    """Yield ``(symbol, description)`` pairs; the symbol stays escaped."""
    for match in _DESCRIPTION_ENTRY_PATTERN.finditer(body):
        yield ListEntry(match.group(1), match.group(2))


def replace_table_ids(body: str, replace) -> str:
    """Rewrite every ``<table=ID>`` reference through ``replace(ID) -> ID``."""
    return _TABLE_PATTERN.sub(lambda match: f"<table={replace(match.group(1))}>", body)


__all__ = [
    "ListEntry",
    "convert_amp_chars",
    "iter_image_targets",
    "iter_link_targets",
    "iter_list_entries",
    "iter_list_symbols",
    "iter_table_ids",
    "replace_table_ids",
    "restore_amp_chars",
]
