"""Tests for topicdoc.parser.indent."""

from __future__ import annotations

from topicdoc.modelines import Modelines
from topicdoc.parser.blocks import BlockTag
from topicdoc.parser.indent import DEFAULT_INDENT_WIDTH, IndentTracker, default_indent_width


def test_default_indent_width_precedence() -> None:
    assert default_indent_width(Modelines({"indent": 2}), 4) == 2
    assert default_indent_width(None, 1, 3) == 3
    assert default_indent_width(Modelines({"indent": 1}), None, None, 6) == 6
    assert default_indent_width() == DEFAULT_INDENT_WIDTH


def test_first_entry_only_records_its_column() -> None:
    tracker = IndentTracker(default_width=4)

    output, current = tracker.process(BlockTag.NONE, BlockTag.BULLET_LIST, 0)

    assert (output, current) == ("", BlockTag.NONE)
    assert tracker.level == 0


def test_deeper_column_nests_and_shallower_unwinds() -> None:
    tracker = IndentTracker(default_width=4)
    tracker.process(BlockTag.NONE, BlockTag.BULLET_LIST, 0)

    output, current = tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 4)
    assert (output, current) == ("</li>", BlockTag.NEW)
    assert tracker.markup() == "<BulletIndent1>"
    assert tracker.markup() == ""

    output, current = tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 0)
    assert output == "</li></BulletIndent1></ul>"
    assert current == BlockTag.BULLET_LIST
    assert tracker.level == 0


def test_same_column_stays_at_the_same_level() -> None:
    tracker = IndentTracker(default_width=4)
    tracker.process(BlockTag.NONE, BlockTag.BULLET_LIST, 2)

    output, current = tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 2)

    assert (output, current) == ("</li>", BlockTag.BULLET_LIST)
    assert tracker.level == 0


def test_default_width_nests_any_deeper_column() -> None:
    tracker = IndentTracker()
    tracker.process(BlockTag.NONE, BlockTag.BULLET_LIST, 0)

    output, current = tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 4)
    assert (output, current) == ("</li>", BlockTag.NEW)
    assert tracker.markup() == "<BulletIndent1>"

    output, current = tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 0)
    assert output == "</li></BulletIndent1></ul>"
    assert current == BlockTag.BULLET_LIST
    assert tracker.level == 0


def test_end_closes_every_open_level() -> None:
    tracker = IndentTracker(default_width=4)
    tracker.process(BlockTag.NONE, BlockTag.BULLET_LIST, 0)
    tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 4)
    tracker.markup()
    tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 8)
    assert tracker.markup() == "<BulletIndent2>"

    output = tracker.end(BlockTag.BULLET_LIST)

    assert output == "</li></BulletIndent2></ul></BulletIndent1></ul></ul>"
    assert tracker.level == 0


def test_manual_increase_and_decrease() -> None:
    tracker = IndentTracker(default_width=4)
    tracker.increase()

    output, current = tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 0)
    assert (output, current) == ("</li>", BlockTag.NEW)
    assert tracker.level == 1

    output, current = tracker.decrease(BlockTag.BULLET_LIST)
    assert output == "</li></BulletIndent1></ul>"
    assert current == BlockTag.BULLET_LIST
    assert tracker.width == 4

    assert tracker.decrease(BlockTag.BULLET_LIST) == (None, BlockTag.BULLET_LIST)


def test_disabled_auto_indent_ignores_columns() -> None:
    tracker = IndentTracker(default_width=4)
    tracker.set_auto(False)

    output, current = tracker.process(BlockTag.BULLET_LIST, BlockTag.BULLET_LIST, 12)

    assert (output, current) == ("</li>", BlockTag.BULLET_LIST)
    assert tracker.level == 0


def test_dotted_numbers_drive_ordered_list_levels() -> None:
    tracker = IndentTracker(default_width=4)

    assert tracker.can_increase(0, "1.1.") is True
    assert tracker.width == -1
    assert tracker.can_decrease(0, "2.") is False
