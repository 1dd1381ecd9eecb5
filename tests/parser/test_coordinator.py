"""End-to-end tests for topicdoc.parser.coordinator."""

from __future__ import annotations

from pathlib import Path

import pytest

from topicdoc.config import ParserSettings, TopicDocConfig
from topicdoc.models import SUMMARIES_NO
from topicdoc.parser import Parser, ParserError
from topicdoc.parser.symbols import SymbolDefinition
from topicdoc.parser.table import Table

CPP_SOURCE = (
    "/** Adds two numbers. */\n"
    "int add(int a, int b);\n"
    "\n"
    "int sub(int a, int b);\n"
)

TEXT_SOURCE = (
    "Title: Intro\n"
    "\n"
    "Some text.\n"
    "\n"
    "Function: Add\n"
    "Adds two numbers.\n"
)

TABLE_SOURCE = (
    "Title: Sizes\n"
    "\n"
    "(start table Sizes, format=simple)\n"
    "| Name | Size |\n"
    "| a | 1 |\n"
    "(end table)\n"
)


def test_cpp_comment_merges_with_its_declaration() -> None:
    parser = Parser()

    parsed = parser.load("math.cpp", CPP_SOURCE)

    assert parsed.language is not None and parsed.language.name == "cpp"
    titles = [topic.title for topic in parsed.topics or []]
    assert titles == ["math.cpp", "Functions", "add", "sub"]
    add = parsed.topics[2]
    assert add.prototype == "int add(int a,int b)"
    assert add.summary == "Adds two numbers."
    assert add.line_number == 1
    assert not parsed.topics[3].is_auto
    assert parser.default_menu_title("math.cpp") == "math.cpp"


def test_native_header_comment_merges_with_a_definition() -> None:
    parser = Parser()
    source = "// Function: Add\n//\tAdds two numbers.\nint Add(int a, int b) { return a+b; }\n"

    parsed = parser.load("add.cpp", source)

    assert parsed.topics is not None and len(parsed.topics) == 1
    topic = parsed.topics[0]
    assert (topic.type, topic.title) == ("function", "Add")
    assert topic.prototype == "int Add(int a,int b)"
    assert topic.body == "<p>Adds two numbers.</p>"
    assert parser.default_menu_title("add.cpp") == "Add"


def test_nested_struct_stays_inside_its_class_section() -> None:
    parser = Parser()
    source = "class Q {\npublic:\n    struct R { int a; };\n    int b;\n};\n"

    parsed = parser.load("q.h", source)

    topics = parsed.topics or []
    assert "Global" not in [topic.title for topic in topics]
    assert [topic.title for topic in topics if topic.type == "class"] == ["Q"]
    folded = next(topic for topic in topics if topic.type == "type")
    assert (folded.title, folded.package) == ("R", "Q")


def test_symbols_report_merged_definitions() -> None:
    parser = Parser()
    parser.load("math.cpp", CPP_SOURCE)

    report = parser.parse_symbols("math.cpp")

    assert report.source == "math.cpp"
    assert SymbolDefinition("add", "function", "int add(int a,int b)", "Adds two numbers.") in report.definitions
    assert SymbolDefinition("sub", "function", "int sub(int a,int b)", None) in report.definitions


def test_text_file_titles_the_page_with_its_first_topic() -> None:
    parser = Parser()

    parsed = parser.load("intro.txt", TEXT_SOURCE)

    assert parsed.language is not None and parsed.language.name == "text"
    assert [topic.title for topic in parsed.topics or []] == ["Intro", "Functions", "Add"]
    assert parser.default_menu_title("intro.txt") == "Intro"


def test_build_passes_run_once() -> None:
    config = TopicDocConfig(root=Path("/work/demo"), parser=ParserSettings(page_footer="Made by {{ project }}"))
    parser = Parser(config)
    parser.load("intro.txt", TEXT_SOURCE)

    parser.parse_for_build("intro.txt")
    parsed = parser.parse_for_build("intro.txt")

    topics = parsed.topics or []
    assert [topic.title for topic in topics[:-1]] == ["Intro", "Add"]
    footer = topics[-1]
    assert footer.type == "generic"
    assert footer.body == "<p>Made by demo</p>"
    assert footer.summaries == SUMMARIES_NO


def test_only_file_titles_adds_a_file_topic() -> None:
    parser = Parser(TopicDocConfig(root=Path("."), parser=ParserSettings(only_file_titles=True)))

    parsed = parser.load("intro.txt", TEXT_SOURCE)

    assert parsed.topics is not None
    assert (parsed.topics[0].type, parsed.topics[0].title) == ("file", "intro.txt")
    assert parsed.default_menu_title == "intro.txt"


def test_documented_only_drops_undocumented_declarations() -> None:
    parser = Parser(TopicDocConfig(root=Path("."), parser=ParserSettings(documented_only=True)))

    parsed = parser.load("math.cpp", CPP_SOURCE)

    assert [topic.title for topic in parsed.topics or []] == ["add"]


def test_nd_modeline_disables_a_file() -> None:
    parser = Parser()

    parsed = parser.load("off.txt", "-ND- nd=no -ND-\nFunction: Add\n")

    assert parsed.topics == []
    assert not parsed.has_content


def test_files_are_read_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "intro.txt"
    path.write_text(TEXT_SOURCE, encoding="utf-8")
    parser = Parser()

    parsed = parser.load(str(path))

    assert parsed.topics is not None and parsed.topics[0].title == "Intro"


def test_missing_file_and_unknown_language_raise() -> None:
    parser = Parser()

    with pytest.raises(ParserError):
        parser.load("/nonexistent/intro.txt")
    with pytest.raises(ParserError):
        parser.load("notes.unknown", "Title: x\n")


def test_unloaded_sources_raise() -> None:
    parser = Parser()

    with pytest.raises(ParserError):
        parser.topics("never.txt")

    parser.load("intro.txt", TEXT_SOURCE)
    parser.unload("intro.txt")
    assert not parser.is_loaded("intro.txt")
    with pytest.raises(ParserError):
        parser.modelines("intro.txt")


def test_dropped_topics_are_reparsed_on_demand() -> None:
    parser = Parser()
    parser.load("intro.txt", TEXT_SOURCE)

    first, reloaded = parser.topics("intro.txt")
    assert reloaded is False

    parser.drop("intro.txt")
    assert parser.parsed_file("intro.txt").topics is None

    again, reloaded = parser.topics("intro.txt")
    assert reloaded is True
    assert [topic.title for topic in again] == [topic.title for topic in first]


def test_objects_are_registered_per_file() -> None:
    parser = Parser()
    parser.load("sizes.txt", TABLE_SOURCE)

    table = parser.object("sizes.txt", 1)

    assert isinstance(table, Table)
    assert table.title == "Sizes"
    with pytest.raises(ParserError):
        parser.object("sizes.txt", 2)
    with pytest.raises(ParserError):
        parser.on_object(table)


def test_copy_topic_duplicates_embedded_tables() -> None:
    parser = Parser()
    parser.load("sizes.txt", TABLE_SOURCE)
    parser.load("other.txt", TABLE_SOURCE)
    topic = parser.parsed_file("sizes.txt").topics[0]

    copy = parser.copy_topic(topic, "sizes.txt", "other.txt")

    assert copy is not topic
    assert topic.body == "<table=1>"
    assert copy.body == "<table=2>"
    assert parser.object("other.txt", 2) is parser.object("sizes.txt", 1)
