"""Base classes for language front ends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from ..models import ScopeChange, Topic

ENUM_GLOBAL = "global"
ENUM_UNDER_TYPE = "under type"
ENUM_UNDER_PARENT = "under parent"


class CommentSink(Protocol):
    """What a front end reports to while it walks a file."""

    def on_comment(self, lines: List[str], line_number: int, is_doc: bool) -> int:
        ...

    def on_class(self, class_symbol: Optional[str]) -> None:
        ...

    def on_class_parent(
        self,
        class_symbol: Optional[str],
        parent: Optional[str],
        scope: Optional[str],
        using: Optional[Sequence[str]],
        flags: int,
    ) -> None:
        ...


@dataclass
class FileParse:
    """Auto-topics and scope record produced for one file."""

    auto_topics: Optional[List[Topic]] = None
    scope_record: Optional[List[ScopeChange]] = None


class Language(ABC):
    """Contract for front ends that turn source text into auto-topics."""

    name: str = ""
    extensions: Tuple[str, ...] = ()
    tab_length: Optional[int] = None
    indent: Optional[int] = None
    enum_values: str = ENUM_GLOBAL
    plaintext: bool = False
    package_separator: str = "."

    def supports(self, path: Path) -> bool:
        """Return True when *path* looks like a file of this language."""
        return path.suffix.lower() in self.extensions

    @abstractmethod
    def parse_file(self, text: str, sink: CommentSink) -> FileParse:
        """Send comments to *sink* and return the file's auto-topics."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


# ---------------------------------------------------------------------------
# Scope tracking
# ---------------------------------------------------------------------------


@dataclass
class ScopeFrame:
    """One open ``{ ... }`` region while walking a file."""

    closing_symbol: Optional[str]
    package: Optional[str] = None
    using: Optional[List[str]] = None
    linkage: Optional[str] = None
    namespace: Optional[str] = None
    class_name: Optional[str] = None


class ScopeTracker:
    """Scope stack plus the chronological record of package changes.

    The record always starts with the global package at line one; a new entry
    is appended whenever pushing or popping a frame changes the package that is
    visible to the code that follows. Two changes on the same line collapse
    into the later one.
    """

    def __init__(self) -> None:
        self._stack: List[ScopeFrame] = [ScopeFrame(None)]
        self.record: List[ScopeChange] = [ScopeChange(1, None)]

    @property
    def current(self) -> ScopeFrame:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    @property
    def current_package(self) -> Optional[str]:
        return self.current.package

    @property
    def current_using(self) -> Optional[List[str]]:
        using = self.current.using
        return list(using) if using else None

    @property
    def closing_symbol(self) -> Optional[str]:
        return self.current.closing_symbol

    def start_scope(
        self,
        closing_symbol: str,
        line_number: int,
        package: Optional[str] = None,
        using: Optional[Sequence[str]] = None,
        *,
        class_name: Optional[str] = None,
        inherit_class: bool = True,
    ) -> ScopeFrame:
        parent = self.current
        combined = list(parent.using or []) + list(using or [])
        frame = ScopeFrame(
            closing_symbol,
            package if package is not None else parent.package,
            using=combined or None,
            linkage=parent.linkage,
            namespace=parent.namespace,
            class_name=class_name if class_name is not None or not inherit_class else parent.class_name,
        )
        self._stack.append(frame)
        if frame.package != parent.package:
            self._record(line_number, frame.package)
        return frame

    def end_scope(self, line_number: int) -> None:
        if len(self._stack) == 1:
            return
        frame = self._stack.pop()
        if frame.package != self.current.package:
            self._record(line_number, self.current.package)

    def add_using(self, symbol: Optional[str]) -> None:
        if not symbol:
            return
        frame = self.current
        frame.using = list(frame.using or []) + [symbol]

    def _record(self, line_number: int, package: Optional[str]) -> None:
        if self.record and self.record[-1].line_number == line_number:
            self.record[-1] = ScopeChange(line_number, package)
        else:
            self.record.append(ScopeChange(line_number, package))


__all__ = [
    "CommentSink",
    "ENUM_GLOBAL",
    "ENUM_UNDER_PARENT",
    "ENUM_UNDER_TYPE",
    "FileParse",
    "Language",
    "ScopeFrame",
    "ScopeTracker",
]
