"""Native comment format.

A native comment is a sequence of topics, each introduced by a header line
``Keyword: Title`` after a blank line (or at the start of the comment). The
keyword selects the topic type from the policy table; a plural keyword makes
a list topic. The lines up to the next header form the topic body, which
:meth:`NativeParser.format_body` turns into body markup::

    Function: Add
        Adds two numbers.

        Parameters:
            a - first operand
            b - second operand

Doc-styled comments without any header become a single headerless topic
which is later attached to the declaration that follows it.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence, Tuple

from ..logging import get_logger
from ..markup import convert_amp_chars
from ..models import Topic
from ..modelines import Modelines
from ..topics import TOPIC_ENUMERATION, TOPIC_FUNCTION, Scope, topic_types
from .blocks import BlockTag
from .indent import DEFAULT_INDENT_WIDTH, IndentTracker
from .richtext import rich_format
from .summary import summary_from_body
from .table import EMBEDDED_OPTION, TABLE, TABLE_EMBEDDED, Table

_LOGGER = get_logger("parser.native")

ObjectSink = Callable[[object], int]

FUNCTION_LIST_IGNORED_HEADINGS = frozenset(
    {"parameters", "parameter", "params", "param", "arguments", "argument", "args", "arg"}
)
ADMONITIONS = frozenset({"tip", "note", "example", "important", "warning", "caution"})

_HEADER_LINE = re.compile(r"^ *([a-z0-9 ]*[a-z0-9]): +(.*)$", re.IGNORECASE)

# Comment level block tracking
_SECTION_END = re.compile(
    r"^ *\( *(?:end|finish|done)(?: +(?:table|code|example|diagram|ditaa|mscgen|sdedit))? *\)$",
    re.IGNORECASE,
)
_DIAGRAM_SECTION_START = re.compile(r"^ *\( *(?:(?:start|begin)? +)(?:ditaa|mscgen|sdedit)([^\)]*)\)$", re.IGNORECASE)
_SECTION_START = re.compile(r"^ *\( *(?:(?:start|begin)? +)?(?:table|code|example|diagram) *\)$", re.IGNORECASE)
_PROTOTYPE_START = re.compile(r"^ *(Prototype|Synopsis) *: *$", re.IGNORECASE)
_PROTOTYPE_HEADER_END = re.compile(r"^ *[a-z0-9]*[a-z0-9 ]*: *$", re.IGNORECASE)
_PROTOTYPE_END = re.compile(r"^ *\( *(end|finish|done)(?: +(?:prototype|synopsis))? *\)$", re.IGNORECASE)

# Body formatting
_TABLE_END = re.compile(r"^ *\( *(?:end|finish|done)(?: +(?:table))? *\)$", re.IGNORECASE)
_BLOCK_END = re.compile(
    r"^ *\( *(?:end|finish|done)(?: +(?:table|code|example|diagram|ditaa|mscgen|sdedit|drawing))? *\)$",
    re.IGNORECASE,
)
_ADMONITION_END = re.compile(r"^ *\(end!\) *$", re.IGNORECASE)
_PREFIX_CODE = re.compile(r"^ *[>:|](.*)$")
_PREFIX_CODE_STRICT = re.compile(r"^[>:|](.*)$")
_LEADING_WHITESPACE = re.compile(r"^(\s+)")
_BULLET = re.compile(r"^[-\*o+] +([^ ].*)$")
_ORDERED = re.compile(r"^([ia-z0-9])\. +([^ ].*)$", re.IGNORECASE)
_ORDERED_CONTINUED = re.compile(r"^([1-9]+)\. +([^ ].*)$")
_DEFINITION = re.compile(r"^(.+?) +- +([^ ].*)$")
_INDENT_SWITCH = re.compile(r"^\( *indent *(on|off) *\)$", re.IGNORECASE)
_INDENT_INCREASE = re.compile(r"^indent\+$", re.IGNORECASE)
_INDENT_DECREASE = re.compile(r"^indent-$", re.IGNORECASE)
_TABLE_START = re.compile(r"^ *\( *(?:(?:start|begin)? +)?table([^\)]*)\)$", re.IGNORECASE)
_EMBEDDED_TABLE = re.compile(r"^\[\[(.+)$")
_ADMONITION = re.compile(r"^\s*([a-z]+)!:(.*)$", re.IGNORECASE)
_HEADING = re.compile(r"^\s*(.*)([^ \t]):$")
_CODE_START = re.compile(r"^\( *(?:(?:start|begin)? +)?(?:code|example|diagram)([^\)]*)\)$", re.IGNORECASE)
_QUOTE_START = re.compile(r"^ *\(quote\) *$", re.IGNORECASE)
_DIAGRAM_STARTS = (
    (BlockTag.DITAA, re.compile(r"^ *\( *(?:(?:start|begin)? +)?ditaa([^\)]*)\)$", re.IGNORECASE)),
    (BlockTag.DRAWING, re.compile(r"^ *\( *(?:(?:start|begin)? +)?drawing([^\)]*)\)$", re.IGNORECASE)),
    (BlockTag.MSCGEN, re.compile(r"^ *\( *(?:(?:start|begin)? +)?mscgen([^\)]*)\)$", re.IGNORECASE)),
    (BlockTag.SDEDIT, re.compile(r"^ *\( *(?:(?:start|begin)? +)?sdedit([^\)]*)\)$", re.IGNORECASE)),
)
_DIAGRAM_NAMES = {
    BlockTag.DITAA: "ditaa",
    BlockTag.DRAWING: "drawing",
    BlockTag.MSCGEN: "mscgen",
    BlockTag.SDEDIT: "sdedit",
}
_INLINE_IMAGE = re.compile(r"^(\( *see +)([^\)]+?)( *\))$", re.IGNORECASE)
_CODE_LINE = re.compile(r"^( *)(.*)$")


class NativeParser:
    """Parser for native comments of one file.

    ``package`` carries the package of the last topic across comments, so a
    class topic puts the topics of later comments into its scope. Call
    :meth:`start` before each file.
    """

    def __init__(
        self,
        modelines: Optional[Modelines] = None,
        default_indent: int = DEFAULT_INDENT_WIDTH,
        on_object: Optional[ObjectSink] = None,
    ) -> None:
        self.modelines = modelines if modelines is not None else Modelines()
        self.default_indent = default_indent
        self.objects: List[object] = []
        self.on_object: ObjectSink = on_object or self._store_object
        self.package: Optional[str] = None

    def _store_object(self, obj: object) -> int:
        self.objects.append(obj)
        return len(self.objects)

    def start(self) -> None:
        self.package = None

    # -- ownership -----------------------------------------------------------

    def parse_header_line(self, line: Optional[str]) -> Optional[Tuple[str, str]]:
        """Return ``(keyword, title)`` when *line* is a topic header."""
        if line is None:
            return None
        match = _HEADER_LINE.match(line)
        if match is None:
            return None
        keyword, title = match.group(1), match.group(2)
        if topic_types().keyword_info(keyword) is None:
            return None
        return keyword, title

    def is_mine(self, lines: Sequence[str]) -> bool:
        """True when the first non-blank line is a header."""
        for line in lines:
            if line:
                return self.parse_header_line(line) is not None
        return False

    # -- topics --------------------------------------------------------------

    def parse_comment(self, lines: Sequence[str], is_javadoc: bool, line_number: int) -> List[Topic]:
        """Split a cleaned comment into topics.

        ``Prototype:`` sections are removed from the body and become the
        prototype of the topic they appear in.
        """
        lines = list(lines)
        topics: List[Topic] = []

        topic_type: Optional[str] = None
        title: Optional[str] = None
        is_plural = False
        has_header = False
        headerless = False

        prev_blank = True
        in_code = False
        in_prototype = False
        prototype_lines: List[str] = []
        body_start = body_end = 0

        def finish(topic_line: int) -> None:
            nonlocal prototype_lines, in_prototype
            if topic_types().scope_of(topic_type) in (Scope.START, Scope.END):
                self.package = None
            body = self.format_body(lines[body_start:body_end], topic_type, is_plural)
            topic = self.make_topic(topic_type, title, self.package, body, topic_line, is_plural)
            if prototype_lines:
                topic.prototype = " ".join(prototype_lines)
                prototype_lines = []
                in_prototype = False
            topics.append(topic)
            self.package = topic.package

        for index, line in enumerate(lines):
            header = self.parse_header_line(line) if prev_blank and line else None

            if in_code:
                if _SECTION_END.match(line):
                    in_code = False
                prev_blank = False
                body_end += 1

            elif not line:
                prev_blank = True
                if has_header:
                    body_end += 1

            elif header is not None:
                if has_header:
                    finish(line_number + body_start - 1)
                keyword, title = header
                topic_type, is_plural = topic_types().keyword_info(keyword)
                body_start = body_end = index + 1
                has_header = True
                headerless = False
                prev_blank = False

            elif is_javadoc and not has_header:
                # The first content line starts the body; blank lines in between are kept.
                if not headerless:
                    headerless = True
                    topic_type, title, is_plural = None, None, False
                    body_start = index
                body_end = index + 1

            elif in_prototype:
                if _PROTOTYPE_HEADER_END.match(line):
                    in_prototype = False
                elif _PROTOTYPE_END.match(line):
                    in_prototype = False
                    lines[index] = ""
                else:
                    prototype_lines.append(line.strip())
                    lines[index] = ""
                prev_blank = False
                body_end += 1

            elif _PROTOTYPE_START.match(line) and self.modelines.enabled("proto"):
                in_prototype = True
                lines[index] = ""
                prev_blank = False
                body_end += 1

            elif has_header:
                prev_blank = False
                body_end += 1
                if _DIAGRAM_SECTION_START.match(line) or _SECTION_START.match(line):
                    in_code = True

        if has_header:
            finish(line_number + body_start - 1)
        elif headerless:
            finish(line_number + body_start)

        return topics

    def make_topic(
        self,
        topic_type: Optional[str],
        title: Optional[str],
        package: Optional[str],
        body: Optional[str],
        line_number: int,
        is_list: bool = False,
    ) -> Topic:
        """Build a topic whose summary is taken from *body*."""
        body = body if body and body.strip() else None
        return Topic(
            topic_type,
            title,
            package,
            summary=summary_from_body(body),
            body=body,
            line_number=line_number,
            is_list=is_list,
        )

    # -- bodies --------------------------------------------------------------

    def format_body(self, lines: Sequence[str], topic_type: Optional[str] = None, is_list: bool = False) -> str:
        """Convert body lines to markup.

        *topic_type* may also be one of the table kinds when formatting the
        content of a table cell.
        """
        return _BodyFormatter(self, topic_type, is_list).format(lines)

    def format_cell(self, lines: List[str], kind: str) -> str:
        return self.format_body(lines, kind, False)


class _BodyFormatter:
    """State machine behind :meth:`NativeParser.format_body`."""

    def __init__(self, parser: NativeParser, topic_type: Optional[str], is_list: bool) -> None:
        self.parser = parser
        self.topic_type = topic_type
        self.is_list = is_list
        modelines = parser.modelines

        if topic_type == TABLE:
            self.table_type = 1
        elif topic_type == TABLE_EMBEDDED:
            self.table_type = 2
        else:
            self.table_type = 0
        code_mode = modelines.value("code", 1)
        self.inline_mode = 0 if self.table_type else (code_mode if isinstance(code_mode, int) else 1)

        self.indent = IndentTracker(parser.default_indent, auto=modelines.enabled("lvl"))
        self.output: List[str] = []
        self.current = BlockTag.NONE
        self.text: Optional[str] = None
        self.code: Optional[str] = None
        self.removed_spaces = 0
        self.prev_blank = True
        self.admonition = ""
        self.ignore_list_symbols = False
        self.table: Optional[Table] = None

    # -- helpers -------------------------------------------------------------

    def emit(self, text: Optional[str]) -> None:
        if text:
            self.output.append(text)

    def flush_text(self) -> None:
        if self.text is not None:
            self.emit(rich_format(self.text))
            self.text = None

    def flush_code(self, escape: bool) -> None:
        if self.code is not None:
            code = self.code.rstrip("\n")
            self.emit(convert_amp_chars(code) if escape else code)
            self.code = None

    def add_to_code_block(self, line: str) -> None:
        """Append a line keeping the smallest indentation seen at the left margin."""
        match = _CODE_LINE.match(line)
        spaces, code = len(match.group(1)), match.group(2)

        if self.code is None:
            # Leading blank lines are dropped.
            if code:
                self.code = code + "\n"
                self.removed_spaces = spaces
        elif code:
            if spaces != self.removed_spaces:
                padding = " " * abs(spaces - self.removed_spaces)
                if spaces > self.removed_spaces:
                    self.code += padding
                else:
                    self.code = re.sub(r"^(.)", lambda m: padding + m.group(1), self.code, flags=re.MULTILINE)
                    self.removed_spaces = spaces
            self.code += code + "\n"
        else:
            self.code += "\n"

    def enabled(self, key: str) -> bool:
        return self.parser.modelines.enabled(key)

    def open_list(self, tag: BlockTag, column: int, opener: str, level_spec: Optional[str] = None) -> None:
        text, self.current = self.indent.process(self.current, tag, column, level_spec)
        self.emit(text)
        if self.current != tag:
            self.emit(self.current.tag_ender)
            self.emit(opener + self.indent.markup())
            self.current = tag

    # -- driver --------------------------------------------------------------

    def format(self, lines: Sequence[str]) -> str:
        for line in lines:
            self.process_line(line)
        self.finish()
        return "".join(self.output)

    def process_line(self, line: str) -> None:
        if self.table is not None:
            self.table_line(line)
        elif self.current.is_verbatim:
            self.verbatim_line(line)
        elif self.admonition and _ADMONITION_END.match(line):
            self.close_admonition()
        else:
            prefix = None
            if self.inline_mode == 1:
                prefix = _PREFIX_CODE.match(line)
            elif self.inline_mode == 2:
                prefix = _PREFIX_CODE_STRICT.match(line)
            if prefix is not None:
                self.prefix_code_line(prefix.group(1))
            else:
                self.text_line(line)

    def table_line(self, line: str) -> None:
        if _TABLE_END.match(line):
            self.table.parse_end()
            self.table = None
            return
        blank = not line.strip()
        if self.table_type >= 1 and not blank:
            line = ("!" if self.prev_blank else " ") + line
        self.table.parse_line(line)
        self.prev_blank = blank

    def verbatim_line(self, line: str) -> None:
        if _BLOCK_END.match(line):
            self.flush_code(escape=self.current.escapes_content)
            self.emit(self.current.tag_ender)
            self.current = BlockTag.NONE
            self.prev_blank = False
        elif self.current in (BlockTag.DRAWING, BlockTag.QUOTE):
            self.code = (self.code or "") + line + "\n"
        else:
            self.add_to_code_block(line)

    def close_admonition(self) -> None:
        if self.current == BlockTag.PREFIX_CODE:
            self.flush_code(escape=True)
        self.flush_text()
        self.emit(self.indent.end(self.current))
        self.emit(self.admonition)
        self.admonition = ""
        self.current = BlockTag.NONE
        self.prev_blank = True

    def prefix_code_line(self, code: str) -> None:
        self.emit(self.admonition)
        self.admonition = ""
        if self.current != BlockTag.PREFIX_CODE:
            self.flush_text()
            self.emit(self.indent.end(self.current) + "<prefixcode>")
            self.current = BlockTag.PREFIX_CODE
        self.add_to_code_block(code)

    def start_block(self, markup: str, tag: BlockTag) -> None:
        self.flush_text()
        self.emit(self.indent.end(self.current) + markup)
        self.current = tag

    def start_table(self, options: str, column: int = 0, ruler: Optional[str] = None) -> None:
        self.flush_text()
        self.emit(self.indent.end(self.current))
        self.current = BlockTag.NONE
        self.table = Table(options, formatter=self.parser.format_cell)
        self.emit(f"<table={self.parser.on_object(self.table)}>")
        if ruler is not None:
            self.table.parse_line(" " * column + "[ " + ruler)
        self.prev_blank = False

    def text_line(self, line: str) -> None:
        column = 0
        leading = _LEADING_WHITESPACE.match(line)
        if leading is not None:
            column = len(leading.group(1))
            line = line[column:]

        if self.current == BlockTag.PREFIX_CODE:
            self.flush_code(escape=True)
            self.emit(self.current.tag_ender)
            self.current = BlockTag.NONE
            self.prev_blank = False

        if not line:
            if self.current == BlockTag.PARAGRAPH:
                self.emit(rich_format(self.text or "") + "</p>")
                self.text = None
                self.current = BlockTag.NONE
            self.prev_blank = True
            return

        table = _TABLE_START.match(line) if self.table_type == 0 else None
        if table is not None:
            self.start_table(table.group(1))
            return
        embedded = _EMBEDDED_TABLE.match(line) if self.table_type == 1 else None
        if embedded is not None:
            self.start_table(EMBEDDED_OPTION, column, embedded.group(1))
            return
        code = _CODE_START.match(line)
        if code is not None:
            self.start_block(f"<code{code.group(1)}>", BlockTag.CODE)
            return
        if _QUOTE_START.match(line):
            self.start_block("<quote>", BlockTag.QUOTE)
            return
        for tag, pattern in _DIAGRAM_STARTS:
            diagram = pattern.match(line)
            if diagram is not None:
                self.start_block(f"<{_DIAGRAM_NAMES[tag]} {diagram.group(1)}>\n", tag)
                return

        bullet = _BULLET.match(line)
        if bullet is not None and not bullet.group(1).startswith("- ") and self.enabled("bullists"):
            self.flush_text()
            self.open_list(BlockTag.BULLET_LIST, column, "<ul>")
            self.emit("<li>")
            self.text = bullet.group(1)
            self.prev_blank = False
            return

        ordered = None
        if self.current != BlockTag.PARAGRAPH:
            ordered = _ORDERED.match(line)
        if ordered is None and self.current == BlockTag.ORDERED_LIST:
            ordered = _ORDERED_CONTINUED.match(line)
        if ordered is not None and self.enabled("numlists"):
            order, text = ordered.group(1), ordered.group(2)
            self.flush_text()
            list_type = "1" if order.isdigit() else order
            self.open_list(BlockTag.ORDERED_LIST, column, f'<ol type="{list_type}">', order)
            self.emit("<li>")
            self.text = text
            self.prev_blank = False
            return

        definition = _DEFINITION.match(line) if self.current != BlockTag.PARAGRAPH else None
        if definition is not None and self.enabled("deflists"):
            entry, description = definition.group(1), definition.group(2)
            self.flush_text()
            self.open_list(BlockTag.DESCRIPTION_LIST, column, "<dl>")
            symbolic = (self.is_list and not self.ignore_list_symbols) or self.topic_type == TOPIC_ENUMERATION
            tag = "ds" if symbolic else "de"
            self.emit(f"<{tag}>{convert_amp_chars(entry)}</{tag}><dd>")
            self.text = description
            self.prev_blank = False
            return

        switch = _INDENT_SWITCH.match(line)
        if switch is not None:
            self.indent.set_auto(switch.group(1).lower() == "on")
            return
        if _INDENT_INCREASE.match(line):
            self.indent.increase()
            return
        if _INDENT_DECREASE.match(line):
            closing, self.current = self.indent.decrease(self.current)
            if closing is not None:
                self.flush_text()
                self.emit(closing)
            return

        admonition = _ADMONITION.match(line) if self.prev_blank else None
        if admonition is not None and admonition.group(1).lower() in ADMONITIONS and self.enabled("admon"):
            word = admonition.group(1).capitalize()
            self.flush_text()
            self.emit(self.indent.end(self.current))
            self.emit(self.admonition)
            self.emit(f"<admon-{word}><ah>{rich_format(word + ':' + admonition.group(2))}</ah>")
            self.admonition = f"</admon-{word}>"
            self.current = BlockTag.NONE
            self.prev_blank = False
            return

        heading = _HEADING.match(line) if self.prev_blank else None
        if heading is not None:
            heading_text = heading.group(1) + heading.group(2)
            self.flush_text()
            self.emit(self.indent.end(self.current))
            self.emit(self.admonition)
            self.emit(f"<h>{rich_format(heading_text)}</h>")
            self.admonition = ""
            self.current = BlockTag.NONE
            if self.topic_type == TOPIC_FUNCTION and self.is_list:
                self.ignore_list_symbols = heading_text.lower() in FUNCTION_LIST_IGNORED_HEADINGS
            self.prev_blank = False
            return

        image = _INLINE_IMAGE.match(line)
        if image is not None:
            self.flush_text()
            self.emit(self.indent.end(self.current))
            self.current = BlockTag.NONE
            target = convert_amp_chars(image.group(2))
            original = convert_amp_chars(image.group(1) + image.group(2) + image.group(3))
            self.emit(f'<img mode="inline" target="{target}" original="{original}">')
            self.prev_blank = False
            return

        self.plain_text(line, column)

    def plain_text(self, line: str, column: int) -> None:
        if self.prev_blank and self.current.line_ender is not None:
            # A blank line inside a list either continues the entry or ends the list.
            self.emit(rich_format(self.text or ""))
            if self.indent.can_increase(column):
                self.emit("<br>")
            else:
                self.emit(self.indent.end(self.current) + "<p>")
                self.current = BlockTag.PARAGRAPH
            self.text = None
        elif self.current == BlockTag.NONE:
            self.emit("<p>")
            self.current = BlockTag.PARAGRAPH

        self.text = line if self.text is None else f"{self.text} {line}"
        self.prev_blank = False

    def finish(self) -> None:
        if self.table is not None:
            _LOGGER.warning("Table without an end marker closed at the end of the comment")
            self.table.parse_end()
            self.table = None
        elif self.text is not None:
            self.flush_text()
        elif self.code is not None:
            if self.current.is_verbatim:
                _LOGGER.warning("Unterminated %s block closed at the end of the comment", self.current.name.lower())
            self.flush_code(escape=self.current not in _DIAGRAM_NAMES)

        if self.current.line_ender is not None:
            self.emit(self.indent.end(self.current))
        else:
            self.emit(self.current.tag_ender)
        self.emit(self.admonition)


__all__ = ["ADMONITIONS", "FUNCTION_LIST_IGNORED_HEADINGS", "NativeParser", "ObjectSink"]
