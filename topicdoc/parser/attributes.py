"""Build time passes over a file's reconciled topics.

These run when a file is about to be rendered rather than when it is parsed:
auto-group cleanup, merging of same-named groups, sorting, summary
suppression and the page footer.
"""

from __future__ import annotations

import locale
from threading import Lock
from typing import Callable, List, Optional, Tuple

from jinja2 import Environment

from ..logging import get_logger
from ..models import SUMMARIES_NO, SUMMARIES_YES, Topic
from ..topics import TOPIC_GENERIC, TOPIC_GROUP, Scope, topic_types

_LOGGER = get_logger("parser.attributes")

CONTINUED_BODY = "<p>(continued)</p>"

FooterFormatter = Callable[[List[str]], str]

_FOOTER_LOCK = Lock()
_footer_cache: Optional[Tuple[Tuple[str, str], Optional[str]]] = None


def _scope(topic: Topic) -> Scope:
    return topic_types().scope_of(topic.type)


def _is_boundary(topic: Topic) -> bool:
    return _scope(topic) in (Scope.START, Scope.END)


# ---------------------------------------------------------------------------
# Auto groups
# ---------------------------------------------------------------------------


def clean_auto_groups(topics: List[Topic]) -> List[Topic]:
    """Remove a generated group heading when it would head a single topic."""
    auto_index = -1
    items = 0
    for index, topic in enumerate(topics):
        if items >= 2:
            break
        if _is_boundary(topic):
            continue
        if topic.type == TOPIC_GROUP:
            if topic.is_auto:
                auto_index = index
        else:
            items += 1

    if items < 2 and auto_index >= 0:
        _LOGGER.debug("Removing lone auto group %r", topics[auto_index].title)
        del topics[auto_index]
    return topics


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


def _join_optional(first: Optional[str], second: Optional[str]) -> Optional[str]:
    if first is None:
        return second
    if second is None:
        return first
    return first + second


def delete_section(topics: List[Topic], primary: Optional[Topic], index: int) -> None:
    """Fold the emptied section at *index* into *primary* and drop it."""
    duplicate = topics[index]
    if primary is not None and primary is not duplicate and duplicate.body != CONTINUED_BODY:
        primary.summary = _join_optional(primary.summary, duplicate.summary)
        primary.body = _join_optional(primary.body, duplicate.body)
    del topics[index]


def _gather_group(
    topics: List[Topic],
    start: int,
    package: Optional[str],
    title: str,
    group_type: Optional[str],
    section: Optional[Topic],
) -> int:
    """Pull later members of the group *title* up to index *start*.

    Returns the index just past the last relocated topic.
    """
    end = start
    later_section: Optional[Topic] = None
    index = start

    while index < len(topics):
        candidate = topics[index]
        scope = _scope(candidate)
        if scope == Scope.END:
            later_section = None
        elif scope == Scope.START:
            later_section = candidate if candidate.package == package else None

        if later_section is not None:
            if candidate.type == TOPIC_GROUP and candidate.title == title:
                del topics[index]
                while index < len(topics):
                    member = topics[index]
                    if _is_boundary(member):
                        if topics[index - 1] is later_section:
                            delete_section(topics, section, index - 1)
                            index -= 1
                        break
                    if member.type == TOPIC_GROUP:
                        break
                    del topics[index]
                    topics.insert(end, member)
                    end += 1
                    index += 1
                continue
        elif group_type is not None and candidate.type == group_type and candidate.package == package:
            del topics[index]
            topics.insert(end, candidate)
            end += 1
        index += 1

    if later_section is not None and topics and topics[-1] is later_section:
        delete_section(topics, section, len(topics) - 1)
    return end


def _position_of(topics: List[Topic], topic: Topic, start: int) -> Optional[int]:
    for index in range(start, len(topics)):
        if topics[index] is topic:
            return index
    return None


def apply_merge_attributes(topics: List[Topic]) -> List[Topic]:
    """Merge groups of the same title within one package.

    Only groups whose first member's type allows merging are gathered. Later
    groups with the same title in a section of the same package, and topics of
    the group's type in the same package outside any section, move up to
    follow the first group. Sections emptied by the move are folded into the
    first section.
    """
    types = topic_types()
    package: Optional[str] = None
    section: Optional[Topic] = None
    group_title: Optional[str] = None
    group_type: Optional[str] = None
    awaiting_member = False
    index = 0

    while index < len(topics):
        topic = topics[index]
        scope = _scope(topic)
        is_group = topic.type == TOPIC_GROUP

        if scope not in (Scope.START, Scope.END) and not is_group:
            if group_title is not None and awaiting_member:
                if types.info(topic.type).merge_groupings:
                    group_type = topic.type
                else:
                    group_title = None
                awaiting_member = False
            index += 1
            continue

        if group_title is not None:
            end = _gather_group(topics, index, package, group_title, group_type, section)
            position = _position_of(topics, topic, end)
            if position is None:
                # The section was folded into the current one.
                group_title = group_type = None
                awaiting_member = False
                index = end
                continue
            index = position

        if scope == Scope.START:
            section = topic
            package = topic.package
            group_title = group_type = None
        elif is_group:
            group_title = topic.title
            group_type = None
            awaiting_member = True
        else:
            section = package = group_title = group_type = None
        index += 1

    return topics


# ---------------------------------------------------------------------------
# Sorting and summaries
# ---------------------------------------------------------------------------


def _title_key(topic: Topic) -> Tuple[str, str]:
    title = topic.title or ""
    return locale.strxfrm(title.casefold()), title


def apply_sort_attributes(topics: List[Topic]) -> List[Topic]:
    """Sort the members of every group whose members are all sortable."""
    types = topic_types()
    start = end = -1
    count = len(topics)

    for index in range(count):
        topic = topics[index]
        status = 0
        if _is_boundary(topic):
            status = -1
        elif topic.type == TOPIC_GROUP:
            status = 1
        elif end >= 0:
            end = index if types.info(topic.type).sort_groupings else -1

        if status or (end >= 0 and index + 1 == count):
            if end > start >= 0:
                topics[start:end + 1] = sorted(topics[start:end + 1], key=_title_key)
            start = index + 1
            end = start if status == 1 else -1

    return topics


def apply_summaries_attributes(topics: List[Topic]) -> List[Topic]:
    """Turn summaries off for groups made only of no-summary types.

    A section loses its summary too when its last group did.
    """
    types = topic_types()
    group: Optional[Topic] = None
    section: Optional[Topic] = None

    def close() -> None:
        if group is None:
            return
        if section is not None:
            section.summaries = SUMMARIES_NO
        group.summaries = SUMMARIES_NO

    for topic in topics:
        if _is_boundary(topic):
            close()
            section = topic if topic.summaries == SUMMARIES_YES else None
            group = None
        elif topic.type == TOPIC_GROUP:
            if group is not None:
                group.summaries = SUMMARIES_NO
            group = topic if topic.summaries == SUMMARIES_YES else None
        elif group is not None:
            if types.info(topic.type).dont_summaries and topic.summaries == SUMMARIES_YES:
                topic.summaries = SUMMARIES_NO
            else:
                group = None

    close()
    return topics


# ---------------------------------------------------------------------------
# Page footer
# ---------------------------------------------------------------------------


def render_footer_text(footer: str, project: str) -> str:
    environment = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)
    return environment.from_string(footer).render(project=project)


def page_footer_body(footer: Optional[str], project: str, formatter: FooterFormatter) -> Optional[str]:
    """Return the formatted footer body, formatting it at most once per text."""
    global _footer_cache
    if footer is None:
        return None
    key = (footer, project)
    with _FOOTER_LOCK:
        if _footer_cache is not None and _footer_cache[0] == key:
            return _footer_cache[1]
        text = render_footer_text(footer, project).replace("<br>", "\n\n")
        body = formatter(text.split("\n")) or None
        _footer_cache = (key, body)
        _LOGGER.debug("Formatted page footer for %s", project)
        return body


def reset_page_footer() -> None:
    global _footer_cache
    with _FOOTER_LOCK:
        _footer_cache = None


def apply_page_footer(
    topics: List[Topic],
    footer: Optional[str],
    project: str,
    formatter: FooterFormatter,
) -> List[Topic]:
    body = page_footer_body(footer, project, formatter)
    if body:
        topics.append(Topic(TOPIC_GENERIC, body=body, is_auto=True, summaries=SUMMARIES_NO))
    return topics


__all__ = [
    "CONTINUED_BODY",
    "apply_merge_attributes",
    "apply_page_footer",
    "apply_sort_attributes",
    "apply_summaries_attributes",
    "clean_auto_groups",
    "delete_section",
    "page_footer_body",
    "render_footer_text",
    "reset_page_footer",
]
