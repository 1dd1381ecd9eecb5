"""Tests for topicdoc.languages.cpp."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from topicdoc.languages.cpp import CppLanguage, normalize_prototype
from topicdoc.models import RESOLVE_RELATIVE, ScopeChange


class RecordingSink:
    """Collects everything a front end reports."""

    def __init__(self) -> None:
        self.comments: List[Tuple[List[str], int, bool]] = []
        self.classes: List[Optional[str]] = []
        self.parents: List[Tuple[Optional[str], Optional[str], Optional[str], int]] = []

    def on_comment(self, lines: List[str], line_number: int, is_doc: bool) -> int:
        self.comments.append((lines, line_number, is_doc))
        return 0

    def on_class(self, class_symbol: Optional[str]) -> None:
        self.classes.append(class_symbol)

    def on_class_parent(
        self,
        class_symbol: Optional[str],
        parent: Optional[str],
        scope: Optional[str],
        using: Optional[Sequence[str]],
        flags: int,
    ) -> None:
        self.parents.append((class_symbol, parent, scope, flags))


def _parse(text: str) -> Tuple[RecordingSink, list, list]:
    sink = RecordingSink()
    result = CppLanguage().parse_file(text, sink)
    return sink, result.auto_topics or [], result.scope_record or []


def test_normalize_prototype_spacing_is_a_fixed_point() -> None:
    samples = {
        "int  add ( int a , int b )": "int add(int a,int b)",
        "const std :: string & name": "const std::string& name",
        "std::vector< int > v": "std::vector<int> v",
    }

    for raw, expected in samples.items():
        assert normalize_prototype(raw) == expected
        assert normalize_prototype(expected) == expected


def test_function_declaration_becomes_auto_topic() -> None:
    _, topics, _ = _parse("int add(int a, int b);\n")

    assert len(topics) == 1
    topic = topics[0]
    assert topic.type == "function"
    assert topic.title == "add"
    assert topic.prototype == "int add(int a,int b)"
    assert topic.line_number == 1


def test_comments_are_forwarded_to_the_sink() -> None:
    sink, _, _ = _parse("/** Adds. */\nint add(int a, int b);\n")

    assert len(sink.comments) == 1
    lines, line_number, is_doc = sink.comments[0]
    assert line_number == 1
    assert is_doc is True
    assert lines[0].strip() == "Adds."


def test_namespace_class_and_members_track_packages() -> None:
    text = (
        "namespace geo {\n"
        "class Circle : public Shape {\n"
        "public:\n"
        "    double radius;\n"
        "    double area() const;\n"
        "};\n"
        "}\n"
    )

    sink, topics, record = _parse(text)

    assert [(topic.type, topic.title) for topic in topics] == [
        ("class", "geo.Circle"),
        ("variable", "radius"),
        ("function", "area"),
    ]
    assert topics[0].prototype == "class Circle : public Shape"
    assert topics[1].package == "geo.Circle"
    assert topics[2].prototype == "double area() const"
    assert sink.classes == ["geo", "geo.Circle"]
    assert sink.parents == [("geo.Circle", "Shape", "geo", RESOLVE_RELATIVE)]
    assert record == [
        ScopeChange(1, "geo"),
        ScopeChange(2, "geo.Circle"),
        ScopeChange(6, "geo"),
        ScopeChange(7, None),
    ]


def test_plain_struct_folds_into_a_type_with_elements() -> None:
    text = (
        "struct Point {\n"
        "    int x; //!< Horizontal.\n"
        "    int y; //!< Vertical.\n"
        "};\n"
    )

    _, topics, _ = _parse(text)

    assert len(topics) == 1
    point = topics[0]
    assert point.type == "type"
    assert point.title == "Point"
    assert point.prototype == "struct Point { int x; int y; };"
    assert [(element.name, element.description) for element in point.elements] == [
        ("x", "Horizontal."),
        ("y", "Vertical."),
    ]


def test_struct_with_a_method_stays_a_class() -> None:
    text = (
        "struct Point {\n"
        "    int x;\n"
        "    int length();\n"
        "};\n"
    )

    _, topics, _ = _parse(text)

    assert [topic.type for topic in topics] == ["class", "variable", "function"]
    assert topics[0].has_attribute("struct")


def test_nested_plain_struct_keeps_its_enclosing_package() -> None:
    text = (
        "class Shape {\n"
        "public:\n"
        "    struct Extent { int w; };\n"
        "    int sides;\n"
        "};\n"
    )

    _, topics, _ = _parse(text)

    assert [(topic.type, topic.title, topic.package) for topic in topics] == [
        ("class", "Shape", "Shape"),
        ("type", "Extent", "Shape"),
        ("variable", "sides", "Shape"),
    ]
    assert topics[1].symbol == "Shape.Extent"
    assert topics[1].prototype == "struct Extent { int w; };"


def test_enumeration_collects_its_values() -> None:
    _, topics, _ = _parse("enum Color { RED, GREEN = 2 };\n")

    assert len(topics) == 1
    color = topics[0]
    assert color.type == "enumeration"
    assert color.title == "Color"
    assert color.prototype == "enum Color"
    assert [element.name for element in color.elements] == ["RED", "GREEN"]


def test_extern_c_block_prefixes_function_prototypes() -> None:
    _, topics, _ = _parse('extern "C" {\nint f(void);\n}\n')

    assert topics[0].title == "f"
    assert topics[0].prototype == 'extern "C" int f(void)'


def test_out_of_line_constructor_is_rescoped_to_its_class() -> None:
    _, topics, _ = _parse("Circle::Circle(double r) {}\n")

    assert len(topics) == 1
    constructor = topics[0]
    assert constructor.title == "Circle"
    assert constructor.package == "Circle"
    assert constructor.symbol == "Circle.Circle"
    assert constructor.prototype == "Circle(double r)"


def test_const_and_static_variables() -> None:
    _, topics, _ = _parse("static const int limit = 10;\nstatic int count;\n")

    assert [(topic.type, topic.title) for topic in topics] == [
        ("constant", "limit"),
        ("variable", "count"),
    ]
    assert all(topic.has_attribute("static") for topic in topics)


def test_function_pointer_variable_keeps_its_parameters() -> None:
    _, topics, _ = _parse("int (*handler)(int code);\n")

    assert [(topic.type, topic.title) for topic in topics] == [("variable", "handler")]
    assert topics[0].prototype == "int(* handler)(int code)"
