"""JavaDoc style comments (``/** ... @param x ... */``).

These comments never carry a header, so they always produce one headerless
topic that is attached to the declaration following the comment. The
description is formatted as native text; block tags become headings with
definition lists or paragraphs.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..logging import get_logger
from ..markup import convert_amp_chars
from ..models import Topic
from .native import NativeParser
from .richtext import rich_format
from .summary import summary_from_body

_LOGGER = get_logger("parser.javadoc")

_BLOCK_TAG = re.compile(r"^\s*@(\w+)\s*(.*)$")
_ANY_BLOCK_TAG = re.compile(r"^\s*@\w+")
_INLINE_LINK = re.compile(r"\{@(?:link|linkplain)\s+([^\s}]+)(?:\s+[^}]*)?\}")
_INLINE_CODE = re.compile(r"\{@(?:code|literal)\s+([^}]*)\}")
_INLINE_OTHER = re.compile(r"\{@\w+\s*([^}]*)\}")
_FIRST_WORD = re.compile(r"^(\S+)\s*(.*)$")

# Tag -> (heading, whether the first word names an entry)
_LIST_TAGS: Dict[str, Tuple[str, bool]] = {
    "param": ("Parameters", True),
    "throws": ("Throws", True),
    "exception": ("Throws", True),
}
_PARAGRAPH_TAGS: Dict[str, str] = {
    "return": "Returns",
    "returns": "Returns",
    "see": "See Also",
    "deprecated": "Deprecated",
    "author": "Author",
    "version": "Version",
    "since": "Since",
}


def is_javadoc(lines: Sequence[str], is_doc: bool) -> bool:
    """True for doc-styled comments that use block or inline tags."""
    if not is_doc:
        return False
    return any(_ANY_BLOCK_TAG.match(line) or "{@" in line for line in lines)


def convert_inline_tags(text: str) -> str:
    text = _INLINE_LINK.sub(lambda match: f"<{match.group(1)}>", text)
    text = _INLINE_CODE.sub(lambda match: match.group(1), text)
    return _INLINE_OTHER.sub(lambda match: match.group(1), text)


class JavaDocParser:
    """Formats JavaDoc comments through the native body formatter."""

    def __init__(self, native: NativeParser) -> None:
        self.native = native

    def is_mine(self, lines: Sequence[str], is_doc: bool) -> bool:
        return is_javadoc(lines, is_doc)

    def parse_comment(self, lines: Sequence[str], line_number: int) -> List[Topic]:
        description: List[str] = []
        tags: List[Tuple[str, List[str]]] = []
        first_line: Optional[int] = None

        for index, line in enumerate(lines):
            if first_line is None and line.strip():
                first_line = index
            match = _BLOCK_TAG.match(line)
            if match is not None:
                tags.append((match.group(1).lower(), [match.group(2)]))
            elif tags:
                tags[-1][1].append(line)
            else:
                description.append(line)

        if first_line is None:
            return []

        body = self.native.format_body([convert_inline_tags(line) for line in description])
        body += self._format_tags(tags)
        topic = self.native.make_topic(None, None, self.native.package, body, line_number + first_line)
        return [topic]

    def _format_tags(self, tags: List[Tuple[str, List[str]]]) -> str:
        output: List[str] = []
        open_heading: Optional[str] = None

        for tag, tag_lines in tags:
            text = convert_inline_tags(" ".join(part.strip() for part in tag_lines if part.strip()))
            if tag in _LIST_TAGS:
                heading, _ = _LIST_TAGS[tag]
                if open_heading != heading:
                    if open_heading is not None:
                        output.append("</dl>")
                    output.append(f"<h>{heading}</h><dl>")
                    open_heading = heading
                match = _FIRST_WORD.match(text)
                if match is None:
                    continue
                name, rest = match.group(1), match.group(2)
                output.append(f"<de>{convert_amp_chars(name)}</de><dd>{rich_format(rest)}</dd>")
                continue

            if open_heading is not None:
                output.append("</dl>")
                open_heading = None

            heading = _PARAGRAPH_TAGS.get(tag)
            if heading is None:
                _LOGGER.debug("Ignoring unsupported tag @%s", tag)
                continue
            if tag == "see" and text and " " not in text and not text.startswith(("<", '"')):
                text = f"<{text}>"
            output.append(f"<h>{heading}</h>")
            if text:
                output.append(f"<p>{rich_format(text)}</p>")

        if open_heading is not None:
            output.append("</dl>")
        return "".join(output)


__all__ = ["JavaDocParser", "convert_inline_tags", "is_javadoc"]
