"""Reconciliation of comment topics with the auto-topics of a front end.

The stages run in a fixed order, each relying on what the previous one left
behind:

1. :func:`repair_packages` assigns packages to comment topics.
2. :func:`merge_auto_topics` merges the two line ordered topic streams.
3. :func:`remove_headerless_topics` drops what attached to nothing.
4. :func:`add_to_class_hierarchy` registers classes.
5. :func:`add_package_delineators` adds headings when the package changes.
6. :func:`break_lists` splits list topics into single topics.
7. :func:`make_auto_groups` inserts group headings.

:func:`reconcile` runs them all.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from ..logging import get_logger
from ..markup import convert_amp_chars, iter_list_entries, iter_list_symbols, restore_amp_chars
from ..models import ScopeChange, Topic, identifiers_of, join_symbols, symbol_from_text
from ..topics import (
    TOPIC_CLASS,
    TOPIC_ENUMERATION,
    TOPIC_FUNCTION,
    TOPIC_GENERIC,
    TOPIC_GROUP,
    TOPIC_SECTION,
    TOPIC_TYPE,
    Scope,
    topic_types,
)
from .richtext import rich_format
from .summary import summary_from_body, summary_from_description_list

_LOGGER = get_logger("parser.reconcile")

_PARAMETER_TAIL = re.compile(r"[\t ]*\([^\(]*$")
_TRAILING_HEADINGS = re.compile(r"(?:<h>[^<]+</h>)+$")
_EMPTY_HEADINGS = re.compile(r"(?:<h>[^<]+</h>)+(<h>[^<]+</h>)")

_ELEMENT_TYPES = frozenset({TOPIC_ENUMERATION, TOPIC_TYPE, TOPIC_FUNCTION})

ClassCallback = Callable[[Optional[str]], None]


def _is_scope_boundary(topic: Topic) -> bool:
    return topic_types().scope_of(topic.type) in (Scope.START, Scope.END)


# ---------------------------------------------------------------------------
# Stage 1: packages
# ---------------------------------------------------------------------------


def repair_packages(
    topics: List[Topic],
    auto_topics: Optional[Sequence[Topic]],
    scope_record: Optional[Sequence[ScopeChange]],
) -> None:
    """Give every comment topic the package in effect at its line.

    The three streams are walked together by line number. Scope changes set
    the current package. A class comment opens a provisional package that
    lasts until the next auto-topic reports the real one.
    """
    auto_topics = auto_topics or []
    scope_record = scope_record or []
    topic_index = auto_index = scope_index = 0
    current: Optional[str] = None
    provisional = False

    while topic_index < len(topics):
        topic = topics[topic_index]
        auto = auto_topics[auto_index] if auto_index < len(auto_topics) else None
        scope = scope_record[scope_index] if scope_index < len(scope_record) else None

        if (
            scope is not None
            and scope.line_number <= topic.line_number
            and (auto is None or scope.line_number <= auto.line_number)
        ):
            current = scope.package
            provisional = False
            scope_index += 1
        elif auto is not None and auto.line_number <= topic.line_number:
            if provisional:
                current = auto.package
                provisional = False
            auto_index += 1
        else:
            if topic.type and _is_scope_boundary(topic):
                current = topic.package
                provisional = True
            else:
                topic.package = current
            topic_index += 1


# ---------------------------------------------------------------------------
# Stage 2: merging
# ---------------------------------------------------------------------------


def expand_elements(auto: Topic, topic: Topic) -> None:
    """Append the auto-topic's elements to *topic* as a definition list.

    Elements always expand into the auto-topic itself; a comment topic only
    receives them for enumerations, types and functions.
    """
    if not auto.elements:
        return
    if auto is not topic and topic.type not in _ELEMENT_TYPES:
        return
    entries = "".join(
        f"<ds>{convert_amp_chars(element.name)}</ds><dd>{rich_format(element.description)}</dd>"
        for element in auto.elements
    )
    topic.body = f"{topic.body or ''}<dl>{entries}</dl>"


def _merge_into(topic: Topic, auto: Topic) -> None:
    topic.type = auto.type
    if not topic.prototype:
        topic.prototype = auto.prototype
    topic.using = auto.using
    expand_elements(auto, topic)
    if not topic.title:
        topic.title = auto.title
    for attribute in auto.attributes:
        if not topic.has_attribute(attribute):
            topic.add_attribute(attribute)

    if topic_types().scope_of(topic.type) != Scope.START:
        topic.package = auto.package
    elif auto.package != topic.package:
        auto_identifiers = identifiers_of(auto.package)
        identifiers = identifiers_of(topic.package)
        while auto_identifiers and identifiers and auto_identifiers[-1] == identifiers[-1]:
            auto_identifiers.pop()
            identifiers.pop()
        if auto_identifiers:
            topic.package = join_symbols(*auto_identifiers)


def merge_auto_topics(
    topics: List[Topic],
    auto_topics: Optional[Sequence[Topic]],
    documented_only: bool = False,
) -> List[Topic]:
    """Merge *auto_topics* into the comment topics, in place.

    When both lists reach the same line the comment topic is handled first.
    Symbols already documented by a list topic suppress the matching
    auto-topic once.
    """
    if not auto_topics:
        return topics

    in_lists: Dict[Optional[str], Set[str]] = {}
    topic_index = auto_index = 0
    merged = inserted = removed = 0

    def listed(auto: Topic) -> bool:
        symbols = in_lists.get(auto.type)
        if symbols is not None and auto.title in symbols:
            # A second auto-topic of the same name is kept.
            symbols.discard(auto.title)
            return True
        return False

    while topic_index < len(topics) and auto_index < len(auto_topics):
        topic = topics[topic_index]
        auto = auto_topics[auto_index]

        if auto.line_number < topic.line_number:
            if not listed(auto) and not documented_only:
                expand_elements(auto, auto)
                topics.insert(topic_index, auto)
                topic_index += 1
                inserted += 1
            auto_index += 1

        elif (
            not topic.title
            and topic_index + 1 < len(topics)
            and topics[topic_index + 1].line_number < auto.line_number
        ):
            del topics[topic_index]
            removed += 1

        elif not topic.title or (
            topic.type == auto.type and _PARAMETER_TAIL.sub("", topic.title) in (auto.title or "")
        ):
            _merge_into(topic, auto)
            topic_index += 1
            auto_index += 1
            merged += 1

        else:
            if topic.is_list and topic.body:
                in_lists.setdefault(topic.type, set()).update(iter_list_symbols(topic.body))
            topic_index += 1

    if not documented_only:
        for auto in auto_topics[auto_index:]:
            if listed(auto):
                continue
            expand_elements(auto, auto)
            topics.append(auto)
            inserted += 1

    _LOGGER.debug("Auto-topic merge: merged=%d inserted=%d removed=%d", merged, inserted, removed)
    return topics


# ---------------------------------------------------------------------------
# Stages 3-6
# ---------------------------------------------------------------------------


def remove_headerless_topics(topics: List[Topic]) -> List[Topic]:
    kept = [topic for topic in topics if topic.title]
    if len(kept) != len(topics):
        _LOGGER.debug("Headerless topics: removed=%d", len(topics) - len(kept))
    topics[:] = kept
    return topics


def add_to_class_hierarchy(topics: Sequence[Topic], on_class: ClassCallback) -> None:
    """Register class topics, including every entry of class list topics."""
    types = topic_types()
    for topic in topics:
        if not topic.type or not types.info(topic.type).class_hierarchy:
            continue
        if topic.is_list:
            for symbol in iter_list_symbols(topic.body or ""):
                on_class(symbol_from_text(symbol))
        else:
            on_class(topic.package)


def add_package_delineators(topics: List[Topic], separator: str = ".") -> List[Topic]:
    """Insert a heading wherever topics change package without one.

    Returning to the global scope adds a ``Global`` section. Returning to a
    package that had a class topic earlier repeats that topic as
    "(continued)"; any other package gets a class heading named after it.
    """
    types = topic_types()
    used: Dict[str, Tuple[Optional[str], Optional[str]]] = {}
    current: Optional[str] = None
    index = 0
    added = 0

    while index < len(topics):
        topic = topics[index]
        if topic.package != current:
            current = topic.package
            scope = types.scope_of(topic.type)

            if scope == Scope.START:
                if current is not None:
                    used[current] = (topic.title, topic.type)
            elif scope == Scope.NORMAL:
                topics.insert(index, _delineator(topic, current, used, separator))
                index += 1
                added += 1
        index += 1

    if added:
        _LOGGER.debug("Package delineators: inserted=%d", added)
    return topics


def _delineator(
    topic: Topic,
    package: Optional[str],
    used: Dict[str, Tuple[Optional[str], Optional[str]]],
    separator: str,
) -> Topic:
    if package is None:
        return Topic(TOPIC_SECTION, "Global", line_number=topic.line_number)

    identifiers = identifiers_of(package)
    summary = body = None
    if package in used:
        title, topic_type = used[package]
        body = "<p>(continued)</p>"
        summary = "(continued)"
    else:
        title = separator.join(identifiers)
        topic_type = TOPIC_CLASS
        used[package] = (title, topic_type)

    for _ in identifiers_of(symbol_from_text(title)):
        if identifiers:
            identifiers.pop()

    return Topic(
        topic_type,
        title,
        join_symbols(*identifiers),
        summary=summary,
        body=body,
        line_number=topic.line_number,
    )


def break_lists(topics: List[Topic]) -> List[Topic]:
    """Split list topics of types that allow it into one topic per entry.

    Text outside the definition lists survives as a group topic carrying the
    list's title. Headings left without content are dropped.
    """
    types = topic_types()
    index = 0

    while index < len(topics):
        topic = topics[index]
        if not topic.is_list or not types.info(topic.type).break_lists:
            index += 1
            continue

        body = topic.body or ""
        new_topics: List[Topic] = []
        remainder: List[str] = []
        position = 0

        while True:
            start = body.find("<dl>", position)
            if start == -1:
                break
            end = body.find("</dl>", start)
            if end == -1:
                break
            remainder.append(body[position:start])
            for entry in iter_list_entries(body[start:end]):
                new_topics.append(
                    Topic(
                        topic.type,
                        restore_amp_chars(entry.symbol),
                        topic.package,
                        topic.using,
                        summary=summary_from_description_list(entry.description),
                        body=f"<p>{entry.description}</p>",
                        line_number=topic.line_number,
                    )
                )
            position = end + len("</dl>")

        remainder.append(body[position:])
        new_body = _TRAILING_HEADINGS.sub("", "".join(remainder))
        new_body = _EMPTY_HEADINGS.sub(r"\1", new_body)

        if new_body.strip():
            new_topics.insert(
                0,
                Topic(
                    TOPIC_GROUP,
                    topic.title,
                    topic.package,
                    topic.using,
                    summary=summary_from_body(new_body),
                    body=new_body,
                    line_number=topic.line_number,
                ),
            )

        topics[index:index + 1] = new_topics
        index += len(new_topics)
        _LOGGER.debug("Broke list topic %r into %d topics", topic.title, len(new_topics))

    return topics


# ---------------------------------------------------------------------------
# Stage 7: auto groups
# ---------------------------------------------------------------------------


@dataclass
class AutoGroup:
    """A run of topics that will share one group heading."""

    count: int
    type: Optional[str]
    second_type: Optional[str] = None

    @property
    def title(self) -> str:
        types = topic_types()
        title = types.name_of(self.type or TOPIC_GENERIC, plural=True)
        if self.second_type is not None:
            title += " and " + types.name_of(self.second_type, plural=True)
        return title


def plan_auto_groups(topic_type_names: Sequence[Optional[str]]) -> List[AutoGroup]:
    """Cluster consecutive topic types into groups.

    Generic topics join the run they follow. Short alternating runs of two
    compatible types (A, B, A where runs of three or fewer sit next to a run
    of two or fewer) are combined into a single two-type group.
    """
    groups: List[AutoGroup] = []
    for name in topic_type_names:
        if not groups or (name != groups[-1].type and name != TOPIC_GENERIC):
            groups.append(AutoGroup(1, name))
        else:
            groups[-1].count += 1

    types = topic_types()
    index = 0
    while index < len(groups) - 2:
        first = groups[index].type
        second = groups[index + 1].type
        if groups[index + 2].type != first or not types.can_group_with(first or "", second or ""):
            index += 1
            continue

        has_noise = has_threes = has_small = False
        end = index
        while end < len(groups) and groups[end].type in (first, second):
            count = groups[end].count
            if count > 3:
                # The short runs must be consecutive.
                has_threes = has_small = False
            elif count == 3:
                has_threes = True
                if has_small:
                    has_noise = True
            else:
                if has_threes or has_small:
                    has_noise = True
                has_small = True
            end += 1

        if not has_noise:
            index = end - 1
            continue

        groups[index].second_type = second
        groups[index].count += sum(group.count for group in groups[index + 1:end])
        del groups[index + 1:end]
        index += 1

    return groups


def _make_auto_groups_for(topics: List[Topic], start: int, end: int) -> int:
    if any(topic.type == TOPIC_GROUP for topic in topics[start:end]):
        return 0

    groups = plan_auto_groups([topic.type for topic in topics[start:end]])
    added = 0
    index = start
    for group in groups:
        if group.type != TOPIC_GENERIC:
            first = topics[index]
            heading = Topic(
                TOPIC_GROUP,
                group.title,
                first.package,
                first.using,
                line_number=first.line_number,
                is_auto=True,
            )
            topics.insert(index, heading)
            index += 1
            added += 1
        index += group.count
    return added


def make_auto_groups(topics: List[Topic]) -> List[Topic]:
    """Add group headings to every stretch between scope boundaries."""
    if len(topics) < 2:
        return topics

    index = start = 0
    if topic_types().info(topics[0].type).page_title_if_first:
        index = start = 1

    added = 0
    while index < len(topics):
        if _is_scope_boundary(topics[index]):
            if index > start:
                count = _make_auto_groups_for(topics, start, index)
                index += count
                added += count
            start = index + 1
        index += 1

    if index > start:
        added += _make_auto_groups_for(topics, start, index)

    if added:
        _LOGGER.debug("Auto groups: inserted=%d", added)
    return topics


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def reconcile(
    topics: List[Topic],
    auto_topics: Optional[Sequence[Topic]] = None,
    scope_record: Optional[Sequence[ScopeChange]] = None,
    *,
    on_class: Optional[ClassCallback] = None,
    documented_only: bool = False,
    auto_group: bool = True,
    package_separator: str = ".",
) -> List[Topic]:
    """Run every reconciliation stage over one file's topics.

    The stages work on a copy of *topics*; the caller's list is left as it was.
    """
    topics = list(topics)
    if auto_topics is not None:
        repair_packages(topics, auto_topics, scope_record)
        merge_auto_topics(topics, auto_topics, documented_only)
    remove_headerless_topics(topics)
    if on_class is not None:
        add_to_class_hierarchy(topics, on_class)
    # Without auto-topics every package change comes from a comment topic.
    if auto_topics is not None:
        add_package_delineators(topics, package_separator)
    break_lists(topics)
    if auto_group:
        make_auto_groups(topics)
    return topics


__all__ = [
    "AutoGroup",
    "add_package_delineators",
    "add_to_class_hierarchy",
    "break_lists",
    "expand_elements",
    "make_auto_groups",
    "merge_auto_topics",
    "plan_auto_groups",
    "reconcile",
    "remove_headerless_topics",
    "repair_packages",
]
