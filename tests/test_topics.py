"""Tests for topicdoc.topics."""

from __future__ import annotations

from pathlib import Path

import pytest

from topicdoc.config import ConfigError
from topicdoc.topics import (
    TOPIC_CLASS,
    TOPIC_FUNCTION,
    TOPIC_GENERIC,
    TOPIC_VARIABLE,
    Scope,
    default_topic_types,
    load_topic_types,
    topic_types,
    use_topic_types,
)


def test_keyword_lookup_reports_type_and_plurality() -> None:
    table = default_topic_types()

    assert table.keyword_info("Function") == (TOPIC_FUNCTION, False)
    assert table.keyword_info("methods") == (TOPIC_FUNCTION, True)
    assert table.keyword_info("struct") == (TOPIC_CLASS, False)
    assert table.keyword_info("widget") is None


def test_unknown_types_behave_as_generic() -> None:
    table = default_topic_types()

    assert table.info("nonsense").name == TOPIC_GENERIC
    assert table.info(None).name == TOPIC_GENERIC
    assert table.scope_of("nonsense") == Scope.NORMAL


def test_policy_flags_of_builtin_types() -> None:
    table = default_topic_types()

    assert table.scope_of("class") == Scope.START
    assert table.scope_of("section") == Scope.END
    assert table.scope_of("file") == Scope.ALWAYS_GLOBAL
    assert table.info("function").break_lists is True
    assert table.info("variable").break_lists is False
    assert table.info("class").class_hierarchy is True
    assert table.info("type").merge_groupings is False
    assert table.info("type").sort_groupings is True


def test_can_group_with_is_symmetric() -> None:
    table = default_topic_types()

    assert table.can_group_with("function", "variable")
    assert table.can_group_with("macro", "function")
    assert table.can_group_with("event", "delegate")
    assert not table.can_group_with("function", "class")


def test_name_of_uses_display_or_plural() -> None:
    table = default_topic_types()

    assert table.name_of("function") == "Function"
    assert table.name_of("property", plural=True) == "Properties"


def test_use_topic_types_swaps_and_restores_the_active_table() -> None:
    custom = default_topic_types().merged([])

    previous = use_topic_types(custom)

    assert previous is default_topic_types()
    assert topic_types() is custom
    use_topic_types(None)
    assert topic_types() is default_topic_types()


def test_load_topic_types_updates_and_adds_entries(tmp_path: Path) -> None:
    path = tmp_path / "topics.yml"
    path.write_text(
        """
function:
  sort_groupings: false
signal:
  display: Signal
  plural: Signals
  keywords: [[signal, signals], slot]
  can_group_with: [Function]
""",
        encoding="utf-8",
    )

    table = load_topic_types(path)

    assert table.info("function").sort_groupings is False
    assert table.info("function").merge_groupings is True
    assert table.keyword_info("signals") == ("signal", True)
    assert table.keyword_info("slot") == ("signal", False)
    assert table.can_group_with("function", "signal")
    assert table.info(TOPIC_VARIABLE).display == "Variable"


def test_load_topic_types_rejects_unknown_scope(tmp_path: Path) -> None:
    path = tmp_path / "topics.yml"
    path.write_text("widget:\n  scope: sideways\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_topic_types(path)


def test_load_topic_types_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_topic_types(tmp_path / "missing.yml")
