"""Tests for topicdoc.source_scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.source_tree import SourceTreeBuilder
from topicdoc.source_scanner import SourceScanner, build_ignore_rule, should_ignore


def test_scan_keeps_files_with_a_front_end(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            "src/shape.h": "int area();\n",
            "src/shape.cpp": "int area() { return 0; }\n",
            "docs/intro.txt": "Title: Intro\n",
            "build.gradle": "apply plugin: 'java'\n",
        }
    )

    manifest = source_tree.scan()

    assert manifest.root == str(source_tree.path().resolve())
    assert [(file.path, file.language) for file in manifest.files] == [
        ("docs/intro.txt", "text"),
        ("src/shape.cpp", "cpp"),
        ("src/shape.h", "cpp"),
    ]
    assert manifest.files[2].size == len("int area();\n")


def test_scan_honours_gitignore_and_excluded_dirs(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            ".gitignore": "generated/\n*.inl\n!keep.inl\n",
            "generated/out.h": "int x;\n",
            "src/a.inl": "int y;\n",
            "src/keep.inl": "int z;\n",
            "node_modules/lib.h": "int w;\n",
            "src/main.cpp": "int main();\n",
        }
    )

    paths = [file.path for file in source_tree.scan().files]

    assert paths == ["src/keep.inl", "src/main.cpp"]


def test_scan_reads_exclude_paths_from_config(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            ".topicdoc.yml": "exclude_paths:\n  - third_party/\n",
            "third_party/zlib.h": "int inflate();\n",
            "main.c": "int main();\n",
        }
    )

    paths = [file.path for file in source_tree.scan().files]

    assert paths == ["main.c"]


def test_explicit_exclude_paths_override_config(source_tree: SourceTreeBuilder) -> None:
    source_tree.write(
        {
            ".topicdoc.yml": "exclude_paths:\n  - third_party/\n",
            "third_party/zlib.h": "int inflate();\n",
            "main.c": "int main();\n",
        }
    )

    manifest = SourceScanner().scan(source_tree.path(), exclude_paths=["/main.c"])

    assert [file.path for file in manifest.files] == ["third_party/zlib.h"]


def test_scan_rejects_missing_and_file_roots(tmp_path: Path) -> None:
    scanner = SourceScanner()
    with pytest.raises(FileNotFoundError):
        scanner.scan(tmp_path / "missing")

    file_path = tmp_path / "file.h"
    file_path.write_text("int x;\n", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        scanner.scan(file_path)


def test_ignore_rules() -> None:
    rules = [build_ignore_rule("build/"), build_ignore_rule("/docs/*.txt"), build_ignore_rule("*.txt", negate=True)]
    rules = [rule for rule in rules if rule is not None]

    assert should_ignore("build", True, rules)
    assert not should_ignore("build", False, rules)
    assert should_ignore("docs/a.txt", False, rules) is False
    assert build_ignore_rule("   ") is None
