"""Symbol and reference extraction for the symbol table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..languages.base import ENUM_GLOBAL, ENUM_UNDER_PARENT, ENUM_UNDER_TYPE
from ..logging import get_logger
from ..markup import iter_image_targets, iter_link_targets, iter_list_entries, iter_table_ids, restore_amp_chars
from ..models import SUMMARIES_ONLY, HierarchyEntry, Topic, join_symbols, symbol_from_text
from ..topics import TOPIC_CLASS, TOPIC_CONSTANT, TOPIC_ENUMERATION, TOPIC_GENERIC, TOPIC_TYPE, Scope, topic_types
from .summary import summary_from_description_list
from .table import Table

_LOGGER = get_logger("parser.symbols")

ObjectLookup = Callable[[str], object]


@dataclass
class SymbolDefinition:
    symbol: Optional[str]
    type: Optional[str]
    prototype: Optional[str] = None
    summary: Optional[str] = None


@dataclass
class SymbolReference:
    symbol: Optional[str]
    package: Optional[str] = None
    using: Optional[List[str]] = None


@dataclass
class SymbolReport:
    """Everything one file contributes to the symbol table."""

    source: Optional[str] = None
    definitions: List[SymbolDefinition] = field(default_factory=list)
    references: List[SymbolReference] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    hierarchy: List[HierarchyEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "definitions": [vars(item) for item in self.definitions],
            "references": [vars(item) for item in self.references],
            "images": list(self.images),
            "hierarchy": [vars(item) for item in self.hierarchy],
        }


def collect_symbols(
    topics: Sequence[Topic],
    *,
    source: Optional[str] = None,
    enum_values: str = ENUM_GLOBAL,
    hierarchy: Optional[Sequence[HierarchyEntry]] = None,
    lookup_object: Optional[ObjectLookup] = None,
) -> SymbolReport:
    """Collect definitions and references from a file's final topics.

    A class topic without a body only references its class, so a class may be
    documented across several files. Enumeration values are placed according
    to *enum_values*; entries of other lists sit under the topic's package
    unless the type is always global.
    """
    report = SymbolReport(source=source)
    types = topic_types()

    for topic in topics:
        if topic.summaries == SUMMARIES_ONLY:
            continue
        body = topic.body or ""

        if topic.type == TOPIC_CLASS:
            if body:
                report.definitions.append(
                    SymbolDefinition(topic.symbol, topic.type, topic.prototype, topic.summary)
                )
            else:
                report.references.append(SymbolReference(topic.symbol))
        else:
            symbol_type = TOPIC_TYPE if topic.type == TOPIC_ENUMERATION else topic.type
            report.definitions.append(
                SymbolDefinition(topic.symbol, symbol_type, topic.prototype, topic.summary)
            )

        if topic.is_list or topic.type == TOPIC_ENUMERATION:
            entry_type = topic.type
            if topic.type == TOPIC_ENUMERATION:
                entry_type = TOPIC_CONSTANT
                behavior = enum_values
            elif types.scope_of(topic.type) == Scope.ALWAYS_GLOBAL:
                behavior = ENUM_GLOBAL
            else:
                behavior = ENUM_UNDER_PARENT

            for entry in iter_list_entries(body):
                symbol = symbol_from_text(restore_amp_chars(entry.symbol))
                if behavior == ENUM_UNDER_PARENT:
                    symbol = join_symbols(topic.package, symbol)
                elif behavior == ENUM_UNDER_TYPE:
                    symbol = join_symbols(topic.symbol, symbol)
                report.definitions.append(
                    SymbolDefinition(symbol, entry_type, None, summary_from_description_list(entry.description))
                )

        for target in iter_link_targets(body):
            report.references.append(SymbolReference(symbol_from_text(target), topic.package, topic.using))
        report.images.extend(iter_image_targets(body))

        if lookup_object is not None:
            for object_id in iter_table_ids(body):
                _collect_table(report, topic, lookup_object(object_id))

    if hierarchy:
        report.hierarchy.extend(hierarchy)

    _LOGGER.debug(
        "Symbols for %s: definitions=%d references=%d",
        source,
        len(report.definitions),
        len(report.references),
    )
    return report


def _collect_table(report: SymbolReport, topic: Topic, table: object) -> None:
    if not isinstance(table, Table):
        return
    if table.title:
        report.definitions.append(
            SymbolDefinition(symbol_from_text(table.title), TOPIC_GENERIC, None, table.summary)
        )
    links, images = table.references()
    for target in links:
        report.references.append(SymbolReference(symbol_from_text(target), topic.package, topic.using))
    report.images.extend(images)


__all__ = [
    "SymbolDefinition",
    "SymbolReference",
    "SymbolReport",
    "collect_symbols",
]
