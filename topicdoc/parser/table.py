"""Tables embedded in comment bodies.

A table is opened by ``(start table [options])`` and closed by
``(end table)``. Three line formats are understood:

``nd`` (default)
    A ruler of ``[Field  ][Field  ]`` (or ``|field|field|``) columns defines
    the cell boundaries; following lines are cut at those boundaries and a
    line starting with ``!`` (a blank line in the comment) starts a new row.
    A ``[[`` line inside a cell starts a nested, embedded table.
``simple``
    ``| a | b |`` lines, one row per line.
``csv``
    Comma separated values with ``"quoted, fields"``.

Cell text is collected raw and formatted through a callback when its row
is finished, so cells may hold any body markup, nested tables included.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..markup import iter_image_targets, iter_link_targets

TABLE = "table"
TABLE_EMBEDDED = "tableEmbedded"

FORMAT_AUTO = 0
FORMAT_ND = 1
FORMAT_SIMPLE = 2
FORMAT_CSV = 3

JUSTIFY_DEFAULT = -1
JUSTIFY_LEFT = 0
JUSTIFY_CENTER = 1
JUSTIFY_RIGHT = 2

EMBEDDED_OPTION = "--Embedded"

CellFormatter = Callable[[List[str], str], str]

_FORMATS = {
    "auto": FORMAT_AUTO,
    "nd": FORMAT_ND,
    "nd+": FORMAT_ND,
    "simple": FORMAT_SIMPLE,
    "csv": FORMAT_CSV,
    "cvs": FORMAT_CSV,
}
_JUSTIFICATIONS = {"left": JUSTIFY_LEFT, "center": JUSTIFY_CENTER, "right": JUSTIFY_RIGHT}

_CSV_FIELD = re.compile(r'([^",]+),?\s*|"((?:[^"]|"")*)"\s*,?\s*|(),\s*')
_OPTION = re.compile(r"^(title|caption|link|header|format|justification|justify)\s*=(.*)$", re.IGNORECASE)

_ND_RULER_START = re.compile(r"^(\s*)(\[)[^\[]")
_PIPE_RULER_START = re.compile(r"^(\s*)(\|)")
_ND_RULER_FIELD = re.compile(r"^(\s*\[)([^\[\]]*)(\]?)")
_PIPE_RULER_FIELD = re.compile(r"^(\s*\|)([^\|]+)")
_SIMPLE_FIELD = re.compile(r"^(\s*)\|([^\|]+)")
_SUMMARY_EXCLUDED = re.compile(r"^\s*[-+!]")
_ROW_SEPARATOR = re.compile(r"^\s*[-+]+\s*$")
_ROW_BANG = re.compile(r"^(\s*!)")
_NULL_FIELD = re.compile(r"^-+$")
_GROUP_START = re.compile(r"^(\s*)\{")
_GROUP_END = re.compile(r"\}(\s*)$")


def trim(text: str) -> str:
    return text.strip(" \t")


def compress(text: str) -> str:
    """Trim *text* and collapse runs of blanks to one space."""
    return re.sub(r"[ \t]+", " ", trim(text))


def parse_csv(text: str) -> List[str]:
    """Split one line of comma separated values; ``""`` escapes a quote."""
    fields: List[str] = []
    for match in _CSV_FIELD.finditer(text.lstrip()):
        plain, quoted, _ = match.groups()
        if plain is not None:
            fields.append(trim(plain))
        elif quoted is not None:
            fields.append(trim(quoted.replace('""', '"')))
        else:
            fields.append("")
    return fields


@dataclass
class TableCell:
    is_head: bool = False
    start: Optional[int] = None
    end: Optional[int] = None
    is_null: bool = False
    spanning: int = 0
    width: int = 0
    lines: List[str] = field(default_factory=list)
    line: Optional[str] = None
    brk: bool = False
    content: Optional[str] = None

    def clone(self) -> "TableCell":
        """Copy the geometry of this cell into an empty one."""
        return TableCell(
            start=self.start,
            end=self.end,
            is_null=self.is_null,
            spanning=self.spanning,
            width=self.width,
        )

    def text(self, clean: bool = False) -> Optional[str]:
        """Return the formatted content; *clean* flattens paragraphs to ``<br>`` breaks."""
        if not clean or not self.content:
            return self.content
        text = compress(self.content)
        text = text.replace("\\[", "[")
        text = text.replace("<p>", "").replace("</p>", "\n")
        text = re.sub(r"\n+", "\n", text)
        return text.replace("\n", "<br>")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_head": self.is_head,
            "is_null": self.is_null,
            "spanning": self.spanning,
            "width": self.width,
            "content": self.content,
        }


class Table:
    """Incremental parser for one table block."""

    def __init__(self, options: Optional[str] = None, formatter: Optional[CellFormatter] = None) -> None:
        self.rows = 0
        self.cols = 0
        self.cursor = 0
        self.ruler_cols = 0
        self.ruler_width = 0
        self.max_width = 0
        self.format = FORMAT_ND
        self.justification = JUSTIFY_DEFAULT
        self.link = True
        self.header = True
        self.kind = TABLE
        self.title: Optional[str] = None
        self.caption: Optional[str] = None
        self.summary: Optional[str] = None
        self.formatter = formatter
        self._cells: Dict[Tuple[int, int], TableCell] = {}
        if options is not None:
            self._apply_options(parse_csv(options))

    def _apply_options(self, options: List[str]) -> None:
        if options and options[0] == EMBEDDED_OPTION:
            self.kind = TABLE_EMBEDDED
            self.format = FORMAT_ND
            options = options[1:]

        if options and "=" not in options[0]:
            self.title = options.pop(0)
            if options and "=" not in options[0]:
                self.caption = options.pop(0)

        for option in options:
            match = _OPTION.match(option)
            if match is None:
                continue
            key, value = match.group(1).lower(), match.group(2)
            if key == "title":
                self.title = value
            elif key == "caption":
                self.caption = value
            elif key == "link":
                self.link = value.strip().lower() == "yes"
            elif key == "header":
                self.header = value.strip().lower() == "yes"
            elif key == "format":
                self.format = _FORMATS.get(value.strip().lower(), FORMAT_AUTO)
            else:
                self.justification = _JUSTIFICATIONS.get(value.strip().lower(), JUSTIFY_DEFAULT)

    @property
    def embedded(self) -> bool:
        return self.kind == TABLE_EMBEDDED

    # -- cells ---------------------------------------------------------------

    def cell(self, row: int, col: int) -> Optional[TableCell]:
        if row > self.rows or col > self.cols:
            return None
        return self._cells.get((row, col))

    def _set_cell(self, row: int, col: int, cell: TableCell) -> None:
        self.rows = max(self.rows, row)
        self.cols = max(self.cols, col)
        self._cells[(row, col)] = cell

    def iter_cells(self) -> Iterator[Tuple[int, int, TableCell]]:
        for row in range(1, self.rows + 1):
            for col in range(1, self.cols + 1):
                cell = self.cell(row, col)
                if cell is not None:
                    yield row, col, cell

    def references(self) -> Tuple[List[str], List[str]]:
        """Return the link and image targets found in the formatted cells."""
        links: List[str] = []
        images: List[str] = []
        if self.rows <= 0 or self.cols <= 0 or not self.link:
            return links, images
        for _, _, cell in self.iter_cells():
            if cell.is_null or cell.content is None:
                continue
            links.extend(iter_link_targets(cell.content))
            images.extend(iter_image_targets(cell.content))
        return links, images

    # -- parsing -------------------------------------------------------------

    def parse_line(self, line: str) -> None:
        if self.format == FORMAT_SIMPLE:
            self._parse_line_simple(line)
        elif self.format == FORMAT_CSV:
            self._parse_line_csv(line)
        else:
            self._parse_line_nd(line)

    def parse_end(self) -> None:
        self._row_end()

    def _parse_line_nd(self, line: str) -> None:
        length = len(line)
        ruler = _ND_RULER_START.match(line) if self.format >= FORMAT_ND else None
        if ruler is None and self.cursor == 0:
            ruler = _PIPE_RULER_START.match(line)

        if ruler is not None:
            # Sub-rulers need a primary ruler.
            if self.cursor and not self.ruler_cols:
                return
            if self.cursor == 0 and ruler.group(2) == "|":
                self.format = FORMAT_AUTO
            line_format = self.format

            self._row_end()
            self._header_start(len(ruler.group(1)), length)

            pos = col = 0
            while True:
                if line_format == FORMAT_AUTO:
                    match = _PIPE_RULER_FIELD.match(line)
                else:
                    match = _ND_RULER_FIELD.match(line)
                if match is None:
                    break
                leading, text = len(match.group(1)), match.group(2)
                size = len(text)
                if line_format != FORMAT_AUTO:
                    leading -= 1
                    size += 2 if match.group(3) == "]" else 1
                pos += leading
                col += 1
                cell = self._header_field(col, pos, pos + size - 1)
                if _NULL_FIELD.match(text):
                    cell.is_null = True
                else:
                    cell.line = compress(text)
                line = line[leading + size:]
                pos += size
            return

        if self.cursor == 0 and not _SUMMARY_EXCLUDED.match(line):
            if line:
                self.summary = line if self.summary is None else f"{self.summary} {line}"
            return

        row = self.cursor
        pos = 0
        new_row = -1
        if _ROW_SEPARATOR.match(line):
            if self.rows == 0:
                self.format = FORMAT_AUTO
                return
            new_row = 0
        elif self.format >= FORMAT_ND:
            bang = _ROW_BANG.match(line)
            if bang is not None:
                new_row = len(bang.group(1))

        if new_row >= 0:
            row = self._row_end()
            col = 1
            while pos < self.max_width and col <= self.cols:
                owner = None
                for owner_col in range(1, self.cols + 1):
                    candidate = self.cell(row - 1, owner_col)
                    if candidate is not None and candidate.start is not None and candidate.start <= pos <= candidate.end:
                        owner = candidate.clone()
                        break
                if owner is not None:
                    pos = owner.end + 1
                    self._set_cell(row, col, owner)
                    col += 1
                pos += 1
            pos = new_row

        self._fill_row(row, line, pos)

    def _fill_row(self, row: int, line: str, pos: int) -> None:
        length = len(line)
        col = 1
        cell: Optional[TableCell] = None
        while pos < length:
            while cell is None or pos > cell.end:
                cell = self.cell(row, col)
                col += 1
                if cell is None or cell.start is None:
                    cell = None
                    break
                if pos < cell.start:
                    pos = cell.start
            if cell is None:
                break
            size = cell.end - pos + 1
            text = line[pos:pos + size]
            if text:
                if cell.line is not None:
                    cell.lines.append(cell.line)
                if cell.lines and (cell.brk or cell.is_head):
                    cell.lines.append("\n")
                cell.line = text
                cell.brk = False
            else:
                cell.brk = True
            pos += size

        # Cells the line did not reach get a paragraph break.
        while col <= self.cols:
            missing = self.cell(row, col)
            col += 1
            if missing is not None:
                missing.brk = True

    def _parse_line_simple(self, line: str) -> None:
        if not _PIPE_RULER_START.match(line):
            return
        length = len(line)

        if self.cursor == 0 and self.header:
            self._row_end()
            self._header_start(0, length)
            pos = col = 0
            while True:
                match = _SIMPLE_FIELD.match(line)
                if match is None:
                    break
                leading, text = len(match.group(1)) + 1, match.group(2)
                size = len(text)
                col += 1
                pos += leading
                cell = self._header_field(col, pos, pos + size - 1)
                if _NULL_FIELD.match(text):
                    cell.is_null = True
                else:
                    cell.line = compress(text)
                line = line[leading + size:]
                pos += size
            return

        row = self._row_end()
        fields = line.split("|")[1:]
        while fields and fields[-1] == "":
            fields.pop()

        col = 1
        while fields:
            cell = self._data_cell(row, col)
            value = fields.pop(0)
            group = _GROUP_START.match(value)
            if group is None:
                cell.lines.append(value)
            else:
                # "{ a | b }" keeps several fields in one cell, one line each.
                nesting = 1
                value = value[len(group.group(1)) + 1:]
                while True:
                    end = _GROUP_END.search(value)
                    if end is not None:
                        value = value[: end.start()]
                        nesting -= 1
                    if cell.lines:
                        cell.lines.append("\n")
                    cell.lines.append(value)
                    if not nesting or not fields:
                        break
                    value = fields.pop(0)
                    if not value:
                        break
            col += 1

    def _parse_line_csv(self, line: str) -> None:
        if not line.strip():
            return
        length = len(line)

        if self.cursor == 0 and self.header:
            self._row_end()
            self._header_start(0, length)
            pos = 0
            for col, text in enumerate(parse_csv(line), start=1):
                size = len(text)
                cell = self._header_field(col, pos, pos + size - 1)
                if _NULL_FIELD.match(text):
                    cell.is_null = True
                else:
                    cell.line = compress(text)
                pos += size
            return

        row = self._row_end()
        for col, value in enumerate(parse_csv(line), start=1):
            self._data_cell(row, col).lines.append(value)

    def _data_cell(self, row: int, col: int) -> TableCell:
        # Rows of headerless simple and csv tables have no ruler to inherit from.
        previous = self.cell(row - 1, col) if self.ruler_cols else None
        cell = previous.clone() if previous is not None else TableCell()
        self._set_cell(row, col, cell)
        return cell

    # -- rulers and rows -----------------------------------------------------

    def _header_start(self, indent: int, length: int) -> None:
        if not self.max_width or length > self.max_width:
            self.max_width = length
        self.ruler_cols = 0
        self.ruler_width = length - indent + 1

    def _header_field(self, col: int, start: int, end: int) -> TableCell:
        self.ruler_cols += 1
        cell = TableCell(is_head=True, start=start, end=end)
        self._set_cell(self.cursor, col, cell)

        spanning = 1
        if self.cursor:
            while True:
                primary = self.cell(1, col + spanning)
                if primary is None or primary is cell or cell.end < primary.start:
                    break
                spanning += 1
        if spanning > 1:
            cell.spanning = spanning
        return cell

    def _row_end(self) -> int:
        row = self.cursor
        self.cursor += 1
        if not row:
            return 1

        total_width = 0
        for col in range(1, self.cols + 1):
            cell = self.cell(row, col)
            if cell is None:
                if col > self.ruler_cols:
                    continue
                previous = self.cell(row - 1, col)
                if previous is None:
                    continue
                cell = previous.clone()
                self._set_cell(row, col, cell)

            if cell.line is not None:
                cell.lines.append(cell.line)
            if cell.lines and not cell.is_null and self.formatter is not None:
                cell.content = self.formatter(cell.lines, self.kind)

            if self.ruler_width > 0 and cell.start is not None and cell.end is not None:
                if col == self.cols and self.format == FORMAT_ND:
                    width = 100 - total_width
                else:
                    width = (cell.end - cell.start + 1) * 100 // self.ruler_width
                cell.width = width
                total_width += width

            cell.brk = False
            cell.line = None

        return self.cursor

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "title": self.title,
            "caption": self.caption,
            "summary": self.summary,
            "format": self.format,
            "justification": self.justification,
            "rows": [[self._cell_dict(row, col) for col in range(1, self.cols + 1)] for row in range(1, self.rows + 1)],
        }

    def _cell_dict(self, row: int, col: int) -> Optional[Dict[str, Any]]:
        cell = self.cell(row, col)
        return cell.to_dict() if cell is not None else None

    def __repr__(self) -> str:
        return f"Table(kind={self.kind!r}, rows={self.rows}, cols={self.cols}, title={self.title!r})"


__all__ = [
    "CellFormatter",
    "EMBEDDED_OPTION",
    "FORMAT_AUTO",
    "FORMAT_CSV",
    "FORMAT_ND",
    "FORMAT_SIMPLE",
    "TABLE",
    "TABLE_EMBEDDED",
    "Table",
    "TableCell",
    "compress",
    "parse_csv",
    "trim",
]
