"""Core data models shared across topicdoc components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence

from .topics import Scope, topic_types

SUMMARIES_NO = 0
SUMMARIES_YES = 1
SUMMARIES_ONLY = 2

RESOLVE_RELATIVE = 0x01
RESOLVE_ABSOLUTE = 0x02
RESOLVE_NOPLURAL = 0x04
RESOLVE_NOUSING = 0x08

_SYMBOL_SEPARATORS = re.compile(r"\s*(?:::|->|\.)\s*")
_TRAILING_PARAMETERS = re.compile(r"\s*\([^\(]*\)$")


class TopicError(ValueError):
    """Raised when a topic would be built from an invalid body."""


# ---------------------------------------------------------------------------
# Symbol helpers
# ---------------------------------------------------------------------------


def symbol_from_text(text: Optional[str]) -> Optional[str]:
    """Normalise a textual name (``A::B``, ``a->b``, ``a.b()``) to a symbol."""
    if text is None:
        return None
    stripped = _TRAILING_PARAMETERS.sub("", text.strip())
    identifiers = [part for part in _SYMBOL_SEPARATORS.split(stripped) if part]
    return ".".join(identifiers) if identifiers else None


def identifiers_of(symbol: Optional[str]) -> List[str]:
    if not symbol:
        return []
    return symbol.split(".")


def join_symbols(*symbols: Optional[str]) -> Optional[str]:
    """Join symbols skipping empty parts; returns None when nothing remains."""
    parts = [symbol for symbol in symbols if symbol]
    return ".".join(parts) if parts else None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass
class Element:
    """Inline member documentation (struct field, enum value, parameter)."""

    name: str
    description: str = ""


@dataclass(frozen=True)
class ScopeChange:
    """The package in effect from ``line_number`` onwards."""

    line_number: int
    package: Optional[str]


@dataclass
class HierarchyEntry:
    """A class registration or inheritance edge reported by a front end."""

    class_symbol: Optional[str]
    parent: Optional[str] = None
    scope: Optional[str] = None
    using: List[str] = field(default_factory=list)
    flags: int = 0


@dataclass
class SourceFile:
    """A source file with a registered front end."""

    path: str
    language: str
    size: int = 0


@dataclass
class SourceManifest:
    """Source files found under a project root."""

    root: str
    files: List[SourceFile] = field(default_factory=list)


class Topic:
    """A single documentation entry.

    ``package`` is type dependent: scope-start types (classes) report their own
    symbol, every other type reports the stored package. ``symbol`` joins the
    package and the title unless the type is always global.
    """

    def __init__(
        self,
        type: Optional[str],
        title: Optional[str] = None,
        package: Optional[str] = None,
        using: Optional[Sequence[str]] = None,
        prototype: Optional[str] = None,
        summary: Optional[str] = None,
        body: Optional[str] = None,
        line_number: int = 0,
        is_list: bool = False,
        *,
        summaries: int = SUMMARIES_YES,
        is_auto: bool = False,
        elements: Optional[Iterable[Element]] = None,
        attributes: Optional[Iterable[str]] = None,
    ) -> None:
        _check_body(body)
        self.type = type
        self.title = title
        self._package = package
        self.using: Optional[List[str]] = list(using) if using is not None else None
        self.prototype = prototype
        self.summary = summary
        self._body = body
        self.line_number = line_number
        self.is_list = is_list
        self.summaries = summaries
        self.is_auto = is_auto
        self.elements: List[Element] = list(elements or [])
        self.attributes: List[str] = list(attributes or [])

    # -- derived -------------------------------------------------------------

    @property
    def symbol(self) -> Optional[str]:
        title_symbol = symbol_from_text(self.title)
        if topic_types().scope_of(self.type) == Scope.ALWAYS_GLOBAL:
            return title_symbol
        return join_symbols(self._package, title_symbol)

    @property
    def package(self) -> Optional[str]:
        # Headerless topics have no type yet and keep their stored package.
        if self.type and topic_types().scope_of(self.type) == Scope.START:
            return self.symbol
        return self._package

    @package.setter
    def package(self, value: Optional[str]) -> None:
        self._package = value

    @property
    def stored_package(self) -> Optional[str]:
        return self._package

    @property
    def body(self) -> Optional[str]:
        return self._body

    @body.setter
    def body(self, value: Optional[str]) -> None:
        _check_body(value)
        self._body = value

    # -- attributes ----------------------------------------------------------

    def has_attribute(self, attribute: str) -> bool:
        return attribute in self.attributes

    def add_attribute(self, attribute: Optional[str]) -> None:
        if attribute is not None:
            self.attributes.append(attribute)

    def clone(self) -> "Topic":
        copy = Topic(
            self.type,
            self.title,
            self._package,
            self.using,
            self.prototype,
            self.summary,
            self._body,
            self.line_number,
            self.is_list,
            summaries=self.summaries,
            is_auto=self.is_auto,
            elements=[Element(e.name, e.description) for e in self.elements],
            attributes=self.attributes,
        )
        return copy

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "package": self.package,
            "symbol": self.symbol,
            "using": list(self.using) if self.using else [],
            "prototype": self.prototype,
            "summary": self.summary,
            "body": self.body,
            "line_number": self.line_number,
            "is_list": self.is_list,
            "is_auto": self.is_auto,
            "summaries": self.summaries,
            "elements": [{"name": e.name, "description": e.description} for e in self.elements],
            "attributes": list(self.attributes),
        }

    def __repr__(self) -> str:
        return (
            f"Topic(type={self.type!r}, title={self.title!r}, package={self._package!r}, "
            f"line={self.line_number})"
        )


def _check_body(body: Optional[str]) -> None:
    if body and not body.strip():
        raise TopicError("topic body must not consist only of whitespace")


__all__ = [
    "Element",
    "HierarchyEntry",
    "RESOLVE_ABSOLUTE",
    "RESOLVE_NOPLURAL",
    "RESOLVE_NOUSING",
    "RESOLVE_RELATIVE",
    "SUMMARIES_NO",
    "SUMMARIES_ONLY",
    "SUMMARIES_YES",
    "ScopeChange",
    "SourceFile",
    "SourceManifest",
    "Topic",
    "TopicError",
    "identifiers_of",
    "join_symbols",
    "symbol_from_text",
]
