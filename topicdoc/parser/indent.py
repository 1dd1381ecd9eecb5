"""Indentation tracking for nested lists in comment bodies.

The tracker keeps a stack of open list levels. Each call to
:meth:`IndentTracker.process` compares the column of a new list entry with
the column the current level was entered at and decides whether to nest one
level deeper, stay, or unwind one or more levels. Nested levels are wrapped in
``<BulletIndentN>`` / ``<DescIndentN>`` / ``<OrderedIndentN>`` tags so the
renderers can indent them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..modelines import Modelines
from .blocks import BlockTag

DEFAULT_INDENT_WIDTH = 8


def default_indent_width(
    modelines: Optional[Modelines] = None,
    configured: Optional[int] = None,
    language_indent: Optional[int] = None,
    language_tab_length: Optional[int] = None,
) -> int:
    """Resolve the column width of one nesting level.

    The first usable value wins: the ``indent`` modeline, the configured
    width, the language's indent and then its tab length. Widths of one or
    less cannot express nesting and fall through to the next candidate.
    """
    candidates = [
        modelines.value("indent") if modelines is not None else None,
        configured,
        language_indent,
        language_tab_length,
    ]
    for candidate in candidates:
        if isinstance(candidate, int) and candidate > 1:
            return candidate
    return DEFAULT_INDENT_WIDTH


def _dotted_depth(level_spec: Optional[str]) -> Optional[int]:
    if not level_spec:
        return None
    parts = level_spec.rstrip(".").split(".")
    if len(parts) > 1:
        return len(parts) - 1
    return None


@dataclass
class _Frame:
    previous: BlockTag
    column: int
    tag: BlockTag
    opened: bool = False


class IndentTracker:
    """Stack machine turning entry columns into nested list markup."""

    def __init__(self, default_width: int = DEFAULT_INDENT_WIDTH, auto: bool = True, pretty: bool = False) -> None:
        self.default_width = default_width if default_width > 1 else DEFAULT_INDENT_WIDTH
        self.auto = auto
        self.pretty = pretty
        self.width = self.default_width if auto else 0
        self.column = 0
        self._stack: List[_Frame] = []
        self._pending_increase = False

    @property
    def level(self) -> int:
        return len(self._stack)

    def reset(self) -> None:
        self.column = 0
        self.width = self.default_width if self.auto else 0

    # -- automatic nesting ---------------------------------------------------

    def process(
        self,
        current: BlockTag,
        new_tag: BlockTag,
        column: int,
        level_spec: Optional[str] = None,
    ) -> Tuple[str, BlockTag]:
        """Handle a new list entry of kind *new_tag* starting at *column*.

        Returns the markup to emit and the block kind that is current
        afterwards. ``BlockTag.NEW`` means a level was pushed and the caller
        must open the list (followed by :meth:`markup`).
        """
        if current.line_ender is None:
            self.column = column
            return "", current

        output = [current.line_ender]
        increase = False
        if self._pending_increase:
            self._pending_increase = False
            increase = True
        elif self.width:
            if self.can_increase(column, level_spec):
                increase = True
            elif self._stack and self.can_decrease(column, level_spec):
                while self._stack and self.can_decrease(column, level_spec):
                    text, current = self._pop()
                    output.append(text)

        if not increase and self._stack and current != new_tag:
            text, current = self._pop()
            output.append(text)
            increase = True

        if increase:
            self._push(current, new_tag)
            current = BlockTag.NEW

        self.column = column
        if self.pretty:
            output.append("\n" + "\t" * self.level)
        return "".join(output), current

    def markup(self) -> str:
        """Open tag of the most recently pushed level, emitted only once."""
        output = ""
        if self._stack:
            frame = self._stack[-1]
            if not frame.opened:
                frame.opened = True
                output = f"<{frame.tag.description}Indent{self.level}>"
        if self.pretty:
            output += "\n" + "\t" * self.level
        return output

    def end(self, current: BlockTag) -> str:
        """Close every open level plus the current block and reset."""
        output = [current.line_ender or ""]
        if self.pretty:
            output.append("\n")
        while self._stack:
            text, current = self._pop()
            output.append(text)
        output.append(current.tag_ender)
        self.reset()
        return "".join(output)

    def can_increase(self, column: int, level_spec: Optional[str] = None) -> bool:
        depth = _dotted_depth(level_spec)
        if depth is not None:
            self.width = -1
            return depth > self.level
        if self.width > 0:
            return column / self.width > self.column / self.width
        return False

    def can_decrease(self, column: int, level_spec: Optional[str] = None) -> bool:
        depth = _dotted_depth(level_spec)
        if depth is not None:
            self.width = -1
            return depth < self.level
        if self.width > 0:
            return column / self.width < self.column / self.width
        return False

    # -- manual nesting ------------------------------------------------------

    def set_auto(self, enabled: bool) -> None:
        """Switch column based nesting on or off (``(indent on|off)``)."""
        self.auto = enabled
        if not enabled:
            self.width = 0
        elif not self._stack:
            self.width = self.default_width

    def increase(self) -> None:
        """Nest the next list entry one level deeper regardless of its column."""
        self.width = 0
        self._pending_increase = True

    def decrease(self, current: BlockTag) -> Tuple[Optional[str], BlockTag]:
        """Close the innermost level; returns None when nothing is open."""
        if not self._stack:
            return None, current
        output = current.line_ender or ""
        text, current = self._pop()
        output += text
        if not self._stack:
            self.reset()
        return output, current

    # -- stack ---------------------------------------------------------------

    def _push(self, current: BlockTag, new_tag: BlockTag) -> None:
        self._stack.append(_Frame(previous=current, column=self.column, tag=new_tag))

    def _pop(self) -> Tuple[str, BlockTag]:
        level = self.level
        frame = self._stack.pop()
        output = "\n" + "\t" * level if self.pretty else ""
        output += f"</{frame.tag.description}Indent{level}>{frame.tag.tag_ender}"
        self.column = frame.column
        return output, frame.previous


__all__ = ["DEFAULT_INDENT_WIDTH", "IndentTracker", "default_indent_width"]
