"""Tests for topicdoc.parser.attributes."""

from __future__ import annotations

from dataclasses import replace
from typing import List

from topicdoc.models import SUMMARIES_NO, SUMMARIES_YES, Topic
from topicdoc.parser.attributes import (
    apply_merge_attributes,
    apply_page_footer,
    apply_sort_attributes,
    apply_summaries_attributes,
    clean_auto_groups,
    delete_section,
    page_footer_body,
    render_footer_text,
)
from topicdoc.topics import default_topic_types, use_topic_types


def _titles(topics: List[Topic]) -> List[str]:
    return [topic.title or "" for topic in topics]


def test_lone_auto_group_is_removed() -> None:
    topics = [Topic("group", "Functions", is_auto=True), Topic("function", "f")]

    assert _titles(clean_auto_groups(topics)) == ["f"]


def test_auto_group_with_two_members_stays() -> None:
    topics = [Topic("group", "Functions", is_auto=True), Topic("function", "f"), Topic("function", "g")]

    assert len(clean_auto_groups(topics)) == 3


def test_hand_written_group_is_never_removed() -> None:
    topics = [Topic("class", "Shape"), Topic("group", "Mine"), Topic("function", "f")]

    assert len(clean_auto_groups(topics)) == 3


def test_group_members_are_sorted_case_insensitively() -> None:
    topics = [
        Topic("group", "Functions"),
        Topic("function", "b"),
        Topic("function", "A"),
        Topic("function", "c"),
    ]

    assert _titles(apply_sort_attributes(topics)) == ["Functions", "A", "b", "c"]


def test_group_with_unsortable_member_keeps_its_order() -> None:
    topics = [
        Topic("group", "Misc"),
        Topic("function", "b"),
        Topic("generic", "a"),
        Topic("function", "0"),
    ]

    assert _titles(apply_sort_attributes(topics)) == ["Misc", "b", "a", "0"]


def test_summaries_turn_off_for_no_summary_groups() -> None:
    constant = default_topic_types().info("constant")
    use_topic_types(default_topic_types().merged([replace(constant, dont_summaries=True)]))
    section = Topic("class", "Shape")
    group = Topic("group", "Constants")
    members = [Topic("constant", "A"), Topic("constant", "B")]

    apply_summaries_attributes([section, group, *members])

    assert section.summaries == SUMMARIES_NO
    assert group.summaries == SUMMARIES_NO
    assert [member.summaries for member in members] == [SUMMARIES_NO, SUMMARIES_NO]


def test_summaries_stay_on_for_mixed_groups() -> None:
    section = Topic("class", "Shape")
    group = Topic("group", "Functions")

    apply_summaries_attributes([section, group, Topic("function", "f")])

    assert section.summaries == SUMMARIES_YES
    assert group.summaries == SUMMARIES_YES


def test_continued_section_groups_merge_into_the_first() -> None:
    topics = [
        Topic("class", "A", line_number=1),
        Topic("group", "Functions", "A", line_number=2),
        Topic("function", "f", "A", line_number=3),
        Topic("section", "Global", line_number=10),
        Topic("function", "x", line_number=11),
        Topic("class", "A", body="<p>(continued)</p>", line_number=20),
        Topic("group", "Functions", "A", line_number=21),
        Topic("function", "g", "A", line_number=22),
    ]

    apply_merge_attributes(topics)

    assert _titles(topics) == ["A", "Functions", "f", "g", "Global", "x"]


def test_delete_section_folds_text_into_the_primary() -> None:
    primary = Topic("class", "A", summary="One.", body="<p>One.</p>")
    duplicate = Topic("class", "A", summary="Two.", body="<p>Two.</p>")
    continued = Topic("class", "A", body="<p>(continued)</p>")
    topics = [primary, duplicate, continued]

    delete_section(topics, primary, 2)
    delete_section(topics, primary, 1)

    assert topics == [primary]
    assert primary.summary == "One.Two."
    assert primary.body == "<p>One.</p><p>Two.</p>"


def test_footer_template_renders_the_project_name() -> None:
    assert render_footer_text("Copyright {{ project }}", "Demo") == "Copyright Demo"


def test_page_footer_is_formatted_once() -> None:
    calls: List[List[str]] = []

    def formatter(lines: List[str]) -> str:
        calls.append(lines)
        return "<p>" + " ".join(lines) + "</p>"

    first = page_footer_body("By {{ project }}<br>Thanks", "Demo", formatter)
    second = page_footer_body("By {{ project }}<br>Thanks", "Demo", formatter)

    assert first == second == "<p>By Demo  Thanks</p>"
    assert calls == [["By Demo", "", "Thanks"]]


def test_apply_page_footer_appends_a_generic_topic() -> None:
    topics = apply_page_footer([Topic("function", "f")], "Footer", "Demo", lambda lines: "<p>Footer</p>")

    footer = topics[-1]
    assert footer.type == "generic"
    assert footer.body == "<p>Footer</p>"
    assert footer.is_auto
    assert footer.summaries == SUMMARIES_NO
    assert len(apply_page_footer([], None, "Demo", lambda lines: "x")) == 0
