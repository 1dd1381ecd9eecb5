"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tests._fixtures.source_tree import SourceTreeBuilder
from topicdoc.cli import _build_parser, main

INTRO = """
Title: Intro

Some text.

Function: Add
Adds two numbers.
"""

MATH = """
/** Adds two numbers. */
int add(int a, int b);
"""


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "parse"])
    assert args.verbose is True
    assert args.command == "parse"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["symbols", "src", "--verbose"])
    assert args.verbose is True
    assert args.command == "symbols"
    assert args.path == "src"


def test_cli_accepts_build_and_json_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["parse", "--build", "--json", "a.cpp"])
    assert args.build is True
    assert args.json is True


def test_parse_directory_as_json(source_tree: SourceTreeBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write({"intro.txt": INTRO, "src/math.cpp": MATH})

    main(["parse", "--json", str(source_tree.path())])

    results = {item["source"]: item for item in json.loads(capsys.readouterr().out)}
    assert set(results) == {"intro.txt", "src/math.cpp"}
    assert results["intro.txt"]["menu_title"] == "Intro"
    add = results["src/math.cpp"]["topics"][0]
    assert add["title"] == "add"
    assert add["prototype"] == "int add(int a,int b)"
    assert add["summary"] == "Adds two numbers."


def test_parse_single_file_prints_topics(source_tree: SourceTreeBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write({"intro.txt": INTRO})

    main(["parse", "--build", str(source_tree.path("intro.txt"))])

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "intro.txt (Intro)"
    assert "section" in lines[1] and lines[1].endswith("Intro")
    assert any(line.strip() == "Adds two numbers." for line in lines)


def test_symbols_command_lists_definitions(
    source_tree: SourceTreeBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_tree.write({"math.cpp": MATH})

    main(["symbols", str(source_tree.path("math.cpp"))])

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "math.cpp"
    assert "  def  add  (function)" in lines


def test_modelines_command(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("-ND- indent=4, proto=no -ND-\nText.\n", encoding="utf-8")

    main(["modelines", str(path)])

    lines = capsys.readouterr().out.splitlines()
    assert "indent=4" in lines
    assert "proto=0" in lines


def test_missing_path_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["parse", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "Source path not found" in capsys.readouterr().err


def test_invalid_config_exits_with_error(
    source_tree: SourceTreeBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    source_tree.write({".topicdoc.yml": "parser: [\n", "intro.txt": INTRO})

    with pytest.raises(SystemExit) as excinfo:
        main(["parse", str(source_tree.path())])

    assert excinfo.value.code == 1
    assert "topicdoc parse failed" in capsys.readouterr().err
