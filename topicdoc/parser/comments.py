"""Comment cleaning ahead of the native formatter.

Front ends hand over comments with their markers blanked out. What remains
may still carry decoration: boxes drawn with a repeated symbol down the left
or right side, and horizontal rules made of four or more symbols.
:func:`clean_comment` removes both in place, expands tabs and strips trailing
whitespace, leaving lines whose remaining indentation is meaningful.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, MutableSequence, Optional

_HORIZONTAL_LINE = re.compile(r"^([^a-zA-Z0-9 ])\1{3,}$")
_HORIZONTAL_LINE_EDGES = re.compile(r"^([^a-zA-Z0-9 ])\1*([^a-zA-Z0-9 ])\2{3,}([^a-zA-Z0-9 ])\3*$")
_STRIP_HORIZONTAL_LINE = re.compile(r"^ *([^a-zA-Z0-9 ])\1{3,}$")
_STRIP_HORIZONTAL_LINE_EDGES = re.compile(r"^ *([^a-zA-Z0-9 ])\1*([^a-zA-Z0-9 ])\2{3,}([^a-zA-Z0-9 ])\3*$")

_LEFT_BORDER = re.compile(r"^([^a-zA-Z0-9])\1*(?: |$)")
_RIGHT_BORDER = re.compile(r" ([^a-zA-Z0-9])\1*$")
_STRIP_LEFT_BORDER = re.compile(r"^ *([^a-zA-Z0-9 ])\1*")
_STRIP_RIGHT_BORDER = re.compile(r" *([^a-zA-Z0-9 ])\1*$")

_VERBATIM_START = (
    re.compile(r"^ *\( *(?:(?:start|begin)? +)(?:ditaa|mscgen|sdedit|drawing)([^\)]*)\)$", re.IGNORECASE),
    re.compile(r"^ *\( *(?:(?:start|begin)? +)?(?:table|code|example|diagram) *\)$", re.IGNORECASE),
)
_VERBATIM_END = re.compile(
    r"^ *\( *(?:end|finish|done)(?: +(?:table|code|example|diagram|ditaa|mscgen|sdedit|drawing))? *\)$",
    re.IGNORECASE,
)

# Guards the edge pattern against pathological generated lines.
_MAX_RULE_LENGTH = 256


class _Border(Enum):
    DONT_KNOW = 0
    UNIFORM = 1
    UNIFORM_IF_AT_END = 2
    NOT_UNIFORM = 3


def expand_tabs(line: str, tab_length: int) -> str:
    """Expand tabs to the next multiple of *tab_length*."""
    if tab_length < 1:
        tab_length = 1
    index = line.find("\t")
    while index != -1:
        line = line[:index] + " " * (tab_length - index % tab_length) + line[index + 1:]
        index = line.find("\t", index)
    return line


def _is_horizontal_line(line: str) -> bool:
    if _HORIZONTAL_LINE.match(line):
        return True
    return len(line) < _MAX_RULE_LENGTH and bool(_HORIZONTAL_LINE_EDGES.match(line))


def clean_comment(lines: MutableSequence[str], tab_length: int = 4) -> MutableSequence[str]:
    """Strip decoration from *lines* in place and return them.

    A left or right border only counts when every non-blank line carries the
    same symbol; blank lines inside the comment break the border, blank lines
    at its end do not. Horizontal rules are blanked except inside code,
    diagram and table blocks, where they may be content.
    """
    left = _Border.DONT_KNOW
    right = _Border.DONT_KNOW
    left_char: Optional[str] = None
    right_char: Optional[str] = None

    for index, original in enumerate(lines):
        lines[index] = expand_tabs(original.rstrip(" \t"), tab_length)
        line = lines[index].lstrip(" ")

        if not line:
            if left is _Border.UNIFORM:
                left = _Border.UNIFORM_IF_AT_END
            if right is _Border.UNIFORM:
                right = _Border.UNIFORM_IF_AT_END
            continue
        if _is_horizontal_line(line):
            continue

        if left is _Border.UNIFORM_IF_AT_END:
            left = _Border.NOT_UNIFORM
        if right is _Border.UNIFORM_IF_AT_END:
            right = _Border.NOT_UNIFORM

        if left is not _Border.NOT_UNIFORM:
            match = _LEFT_BORDER.match(line)
            if match:
                if left is _Border.DONT_KNOW:
                    left = _Border.UNIFORM
                    left_char = match.group(1)
                elif left_char != match.group(1):
                    left = _Border.NOT_UNIFORM
            # "/* Function: X" has its opener blanked, so the first line may lack the border.
            elif index != 0:
                left = _Border.NOT_UNIFORM

        if right is not _Border.NOT_UNIFORM:
            match = _RIGHT_BORDER.search(line)
            if match:
                if right is _Border.DONT_KNOW:
                    right = _Border.UNIFORM
                    right_char = match.group(1)
                elif right_char != match.group(1):
                    right = _Border.NOT_UNIFORM
            else:
                right = _Border.NOT_UNIFORM

    strip_left = left in (_Border.UNIFORM, _Border.UNIFORM_IF_AT_END)
    strip_right = right in (_Border.UNIFORM, _Border.UNIFORM_IF_AT_END)

    in_code = False
    for index, line in enumerate(lines):
        if strip_left:
            line = _STRIP_LEFT_BORDER.sub("", line, count=1)
        if strip_right:
            line = _STRIP_RIGHT_BORDER.sub("", line, count=1)

        if in_code:
            if _VERBATIM_END.match(line):
                in_code = False
        elif any(pattern.match(line) for pattern in _VERBATIM_START):
            in_code = True
        else:
            line = _STRIP_HORIZONTAL_LINE.sub("", line)
            line = _STRIP_HORIZONTAL_LINE_EDGES.sub("", line)
        lines[index] = line

    return lines


def is_blank(lines: List[str]) -> bool:
    return all(not line.strip() for line in lines)


__all__ = ["clean_comment", "expand_tabs", "is_blank"]
