"""Tests for topicdoc.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from topicdoc.config import ConfigError, ParserSettings, TopicDocConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, TopicDocConfig)
    assert config.root == tmp_path.resolve()
    assert config.parser == ParserSettings()
    assert config.parser.tab_length == 4
    assert config.parser.auto_group is True
    assert config.languages.enabled == []
    assert config.topic_types_file is None
    assert config.exclude_paths == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".topicdoc.yml"
    config_file.write_text(
        """
parser:
  tab_length: 8
  indent: 2
  documented_only: yes
  auto_group: false
  only_file_titles: true
  page_footer: "Copyright {{ project }}"
languages:
  enabled: [cpp]
topic_types: "docs/topics.yml"
exclude_paths:
  - "third_party/"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.parser.tab_length == 8
    assert config.parser.indent == 2
    assert config.parser.documented_only is True
    assert config.parser.auto_group is False
    assert config.parser.only_file_titles is True
    assert config.parser.page_footer == "Copyright {{ project }}"
    assert config.languages.enabled == ["cpp"]
    assert config.topic_types_file == tmp_path.resolve() / "docs" / "topics.yml"
    assert config.exclude_paths == ["third_party/"]


def test_load_config_accepts_a_file_next_to_the_config(tmp_path: Path) -> None:
    (tmp_path / ".topicdoc.yml").write_text("exclude_paths: vendor/\n", encoding="utf-8")

    config = load_config(tmp_path / "main.cpp")

    assert config.exclude_paths == ["vendor/"]


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".topicdoc.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.parser == ParserSettings()


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".topicdoc.yml").write_text("parser: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".topicdoc.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_positive_tab_length_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".topicdoc.yml").write_text("parser:\n  tab_length: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_project_name_comes_from_root(tmp_path: Path) -> None:
    root = tmp_path / "widgets"
    root.mkdir()

    assert load_config(root).project_name == "widgets"
