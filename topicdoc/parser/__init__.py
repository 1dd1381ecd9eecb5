"""Comment parsing, reconciliation and build passes."""

from __future__ import annotations

from .coordinator import ParseContext, ParsedFile, Parser, ParserError
from .javadoc import JavaDocParser
from .native import NativeParser
from .reconcile import reconcile
from .symbols import SymbolReport, collect_symbols

__all__ = [
    "JavaDocParser",
    "NativeParser",
    "ParseContext",
    "ParsedFile",
    "Parser",
    "ParserError",
    "SymbolReport",
    "collect_symbols",
    "reconcile",
]
