"""Inline rich formatting of accumulated comment text.

Text runs are converted to body markup in three steps. Bare e-mail
addresses, URLs and ``(see target)`` image references are bracketed first
with the private sentinels ``\\x1E`` / ``\\x1F`` so their punctuation is not
read as emphasis. The text is then split on the emphasis symbols, and the
pieces are walked left to right pairing openers with closers: ``*bold*``,
``'italic'``, ``_underline_``, ``~~strike~~`` and ``<link>``.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Sequence, Tuple

from ..markup import convert_amp_chars

_OPEN_SENTINEL = "\x1E"
_CLOSE_SENTINEL = "\x1F"

_EMAIL = re.compile(
    r"(?<![a-z0-9<])(?:mailto:)?((?:[a-z0-9\-_]+\.)*[a-z0-9\-_]+@(?:[a-z0-9\-]+\.)+[a-z]{2,4})(?![a-z0-9>])",
    re.IGNORECASE,
)
_URL = re.compile(
    r"(?<![a-z0-9<])((?:http|https|ftp|ftps|news|file|git):"
    r"[a-z0-9\-\=\~\@\#\%\&\_\+\/\;\:\?\*\.\,]*[a-z0-9\-\=\~\@\#\%\&\_\+\/\;\:\?\*])"
    r"(?![a-z0-9\-\=\~\@\#\%\&\_\+\/\;\:\?\*\>])",
    re.IGNORECASE,
)
_SEE_IMAGE = re.compile(r"(\( *see +)([^\)]+?)( *\))", re.IGNORECASE)
_SPLIT = re.compile(r"([\'\*_\~<>\x1E\x1F])")

_LINK_EMAIL = re.compile(
    r"^(?:mailto:)?((?:[a-z0-9\-_]+\.)*[a-z0-9\-_]+@(?:[a-z0-9\-]+\.)+[a-z]{2,4})$",
    re.IGNORECASE,
)
_LINK_URL = re.compile(r"^(?:http|https|ftp|ftps|news|file|git):", re.IGNORECASE)

_OPENING_SYMBOLS = frozenset("'*_<")
_CLOSING_SYMBOLS = frozenset("'*_>")
_BEFORE_OPENING = re.compile(r"[ \t\n\(\{\[\"\'\-\/]$")
_AFTER_CLOSING = re.compile(r"^[ \t\n\)\]\}\.\,\!\?\"\'\;\:\-\/]")
_LINK_PLURAL = re.compile(r"^(?:es|s|')")
_WHITESPACE_START = re.compile(r"^[ \t\n]")
_WHITESPACE_END = re.compile(r"[ \t\n]$")
_WHITESPACE = re.compile(r"[ \t\n]")


class TagType(Enum):
    NOT_A_TAG = 0
    POSSIBLE_OPENING = 1
    POSSIBLE_CLOSING = 2


def _sentinel_tag(content: str) -> str:
    return f"{_OPEN_SENTINEL}{content}{_CLOSE_SENTINEL}"


def _mark_email(match: re.Match) -> str:
    address = convert_amp_chars(match.group(1))
    return _sentinel_tag(f'email target="{address}" name="{address}"')


def _mark_url(match: re.Match) -> str:
    target = convert_amp_chars(match.group(1))
    return _sentinel_tag(f'url target="{target}" name="{target}"')


def _mark_image(match: re.Match) -> str:
    target = convert_amp_chars(match.group(2))
    original = convert_amp_chars(match.group(1) + match.group(2) + match.group(3))
    return _sentinel_tag(f'img mode="link" target="{target}" original="{original}"')


def split_pieces(text: str) -> List[str]:
    """Split *text* on the emphasis symbols, dropping empty pieces."""
    return [piece for piece in _SPLIT.split(text) if piece]


def tag_type(pieces: Sequence[str], index: int) -> TagType:
    """Classify the symbol at *index* by the characters surrounding it.

    This only answers whether the position allows a tag; whether the tag is
    actually paired is decided by :func:`closing_tag`.
    """
    piece = pieces[index]
    count = len(pieces)
    before_allows_opening = index == 0 or bool(_BEFORE_OPENING.search(pieces[index - 1]))

    if (
        piece in _OPENING_SYMBOLS
        and before_allows_opening
        and index + 1 < count
        and not _WHITESPACE_START.match(pieces[index + 1])
        and (piece != "<" or not re.match(r"^[<=-]", pieces[index + 1]))
        and (piece != "*" or not pieces[index + 1].startswith("="))
    ):
        return TagType.POSSIBLE_OPENING

    if (
        piece == "~"
        and before_allows_opening
        and index + 2 < count
        and not _WHITESPACE_START.match(pieces[index + 2])
    ):
        return TagType.POSSIBLE_OPENING

    if (
        piece in _CLOSING_SYMBOLS
        and (
            index + 1 == count
            or bool(_AFTER_CLOSING.match(pieces[index + 1]))
            or (piece == ">" and bool(_LINK_PLURAL.match(pieces[index + 1])))
        )
        and index != 0
        and not _WHITESPACE_END.search(pieces[index - 1])
        and (piece != ">" or not re.search(r"[>=-]$", pieces[index - 1]))
    ):
        return TagType.POSSIBLE_CLOSING

    if (
        piece == "~"
        and (index + 2 == count or (index + 2 < count and bool(_AFTER_CLOSING.match(pieces[index + 2]))))
        and index >= 2
        and not _WHITESPACE_END.search(pieces[index - 2])
    ):
        return TagType.POSSIBLE_CLOSING

    return TagType.NOT_A_TAG


def closing_tag(pieces: Sequence[str], index: int, track_whitespace: bool = False) -> Tuple[int, bool]:
    """Find the closer pairing with the opener at *index*.

    Returns ``(closer_index, has_whitespace)``; the index is -1 when the tag
    is not closed, when nothing sits between the two tags, or when a second
    opener of the same kind appears first. Links are skipped while scanning
    since emphasis cannot appear inside them.
    """
    opener = pieces[index]
    double = False
    if opener in ("*", "_", "'"):
        closer = opener
    elif opener == "~":
        closer = opener
        double = True
    elif opener == "<":
        closer = ">"
    else:
        return -1, False

    beginning = index
    has_whitespace = False
    index += 1
    count = len(pieces)

    while index < count:
        piece = pieces[index]
        if piece == "<" and tag_type(pieces, index) is TagType.POSSIBLE_OPENING:
            if closer == ">":
                return -1, False
            end, link_whitespace = closing_tag(pieces, index, track_whitespace and not has_whitespace)
            if end != -1:
                if link_whitespace:
                    has_whitespace = True
                index = end
        elif piece == closer and (not double or (index + 1 < count and pieces[index + 1] == closer)):
            kind = tag_type(pieces, index)
            if kind is TagType.POSSIBLE_CLOSING:
                if index == beginning + 1:
                    return -1, False
                return index, has_whitespace
            if kind is TagType.POSSIBLE_OPENING:
                return -1, False
        elif track_whitespace and not has_whitespace and _WHITESPACE.search(piece):
            has_whitespace = True
        index += 1

    return -1, False


def _link_markup(text: str) -> str:
    text = convert_amp_chars(text)
    email = _LINK_EMAIL.match(text)
    if email:
        return f'<email target="{email.group(1)}" name="{email.group(1)}">'
    if _LINK_URL.match(text):
        return f'<url target="{text}" name="{text}">'
    return f'<link target="{text}" name="{text}" original="&lt;{text}&gt;">'


def rich_format(text: str) -> str:
    """Convert one accumulated text run to inline body markup."""
    text = _EMAIL.sub(_mark_email, text)
    text = _URL.sub(_mark_url, text)
    text = _SEE_IMAGE.sub(_mark_image, text)

    pieces = split_pieces(text)
    count = len(pieces)
    output: List[str] = []

    bold = underline = italic = strike = False
    underline_has_whitespace = False

    index = 0
    while index < count:
        piece = pieces[index]

        if piece == _OPEN_SENTINEL:
            output.append("<")
            index += 1
            while index < count and pieces[index] != _CLOSE_SENTINEL:
                output.append(pieces[index])
                index += 1
            output.append(">")

        elif piece == "<" and tag_type(pieces, index) is TagType.POSSIBLE_OPENING:
            end, _ = closing_tag(pieces, index)
            if end != -1:
                output.append(_link_markup("".join(pieces[index + 1:end])))
                index = end
            else:
                output.append("&lt;")

        elif piece == "*":
            kind = tag_type(pieces, index)
            if kind is TagType.POSSIBLE_OPENING and closing_tag(pieces, index)[0] != -1:
                bold = True
                output.append("<b>")
            elif bold and kind is TagType.POSSIBLE_CLOSING:
                bold = False
                output.append("</b>")
            else:
                output.append("*")

        elif piece == "_":
            kind = tag_type(pieces, index)
            end, has_whitespace = (-1, False)
            if kind is TagType.POSSIBLE_OPENING:
                end, has_whitespace = closing_tag(pieces, index, track_whitespace=True)
            if end != -1:
                underline = True
                underline_has_whitespace = has_whitespace
                output.append("<u>")
            elif underline and kind is TagType.POSSIBLE_CLOSING:
                underline = False
                output.append("</u>")
            elif underline and not underline_has_whitespace:
                # _some_underlined_text_ reads as "some underlined text".
                output.append(" ")
            else:
                output.append("_")

        elif piece == "'":
            kind = tag_type(pieces, index)
            if kind is TagType.POSSIBLE_OPENING and closing_tag(pieces, index)[0] != -1:
                italic = True
                output.append("<i>")
            elif italic and kind is TagType.POSSIBLE_CLOSING:
                italic = False
                output.append("</i>")
            else:
                output.append("'")

        elif piece == "~" and index + 1 < count and pieces[index + 1] == "~":
            kind = tag_type(pieces, index)
            if kind is TagType.POSSIBLE_OPENING and closing_tag(pieces, index)[0] != -1:
                strike = True
                output.append("<del>")
                index += 1
            elif strike and kind is TagType.POSSIBLE_CLOSING:
                strike = False
                output.append("</del>")
                index += 1
            else:
                output.append("~")

        else:
            output.append(convert_amp_chars(piece))

        index += 1

    return "".join(output)


__all__ = ["TagType", "closing_tag", "rich_format", "split_pieces", "tag_type"]
