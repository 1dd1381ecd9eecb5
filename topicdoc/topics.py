"""Per-type topic policy table.

Every topic carries a type name (``"function"``, ``"class"`` ...). The behaviour
of the reconciliation stages is driven by the flags registered here for that
type: how the type affects the current package, whether runs of it may be
auto-grouped with another type, whether list topics of that type are broken
into individual topics, and so on.

The built-in table mirrors the keywords commonly used in native comments. It
can be extended or overridden with a YAML file (see :func:`load_topic_types`).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

import yaml

from .logging import get_logger

_LOGGER = get_logger("topics")

TOPIC_GENERIC = "generic"
TOPIC_GROUP = "group"
TOPIC_SECTION = "section"
TOPIC_FILE = "file"
TOPIC_CLASS = "class"
TOPIC_INTERFACE = "interface"
TOPIC_FUNCTION = "function"
TOPIC_VARIABLE = "variable"
TOPIC_CONSTANT = "constant"
TOPIC_ENUMERATION = "enumeration"
TOPIC_TYPE = "type"
TOPIC_PROPERTY = "property"
TOPIC_MACRO = "macro"
TOPIC_EVENT = "event"
TOPIC_DELEGATE = "delegate"


class Scope(str, Enum):
    """How a topic type interacts with the current package."""

    NORMAL = "normal"
    START = "start"
    END = "end"
    ALWAYS_GLOBAL = "always global"


@dataclass(frozen=True)
class TopicType:
    """Policy flags for one topic type."""

    name: str
    display: str
    plural: str
    keywords: Tuple[Tuple[str, Optional[str]], ...] = ()
    scope: Scope = Scope.NORMAL
    can_group_with: FrozenSet[str] = frozenset()
    merge_groupings: bool = False
    sort_groupings: bool = False
    break_lists: bool = False
    dont_summaries: bool = False
    class_hierarchy: bool = False
    page_title_if_first: bool = False

    def can_group(self, other: str) -> bool:
        return other in self.can_group_with


def _kw(*pairs: str) -> Tuple[Tuple[str, Optional[str]], ...]:
    """Build keyword pairs from a flat ``singular, plural, singular, plural`` list.

    An empty plural string marks a keyword without plural form.
    """
    result: List[Tuple[str, Optional[str]]] = []
    for index in range(0, len(pairs), 2):
        plural = pairs[index + 1] if index + 1 < len(pairs) else ""
        result.append((pairs[index], plural or None))
    return tuple(result)


_BUILTIN_TYPES: Tuple[TopicType, ...] = (
    TopicType(
        TOPIC_GENERIC,
        "Generic",
        "Generics",
        keywords=_kw("topic", "topics", "about", "", "list", ""),
    ),
    TopicType(
        TOPIC_SECTION,
        "Section",
        "Sections",
        keywords=_kw("section", "", "title", ""),
        scope=Scope.END,
        page_title_if_first=True,
    ),
    TopicType(TOPIC_GROUP, "Group", "Groups", keywords=_kw("group", "")),
    TopicType(
        TOPIC_FILE,
        "File",
        "Files",
        keywords=_kw(
            "file", "files", "program", "programs", "script", "scripts",
            "document", "documents", "doc", "docs", "header", "headers",
        ),
        scope=Scope.ALWAYS_GLOBAL,
        page_title_if_first=True,
    ),
    TopicType(
        TOPIC_CLASS,
        "Class",
        "Classes",
        keywords=_kw(
            "class", "classes", "structure", "structures", "struct", "structs",
            "package", "packages", "namespace", "namespaces",
        ),
        scope=Scope.START,
        class_hierarchy=True,
        page_title_if_first=True,
    ),
    TopicType(
        TOPIC_INTERFACE,
        "Interface",
        "Interfaces",
        keywords=_kw("interface", "interfaces"),
        scope=Scope.START,
        class_hierarchy=True,
        page_title_if_first=True,
    ),
    TopicType(
        TOPIC_TYPE,
        "Type",
        "Types",
        keywords=_kw("type", "types", "typedef", "typedefs"),
        can_group_with=frozenset({TOPIC_ENUMERATION}),
        sort_groupings=True,
    ),
    TopicType(
        TOPIC_CONSTANT,
        "Constant",
        "Constants",
        keywords=_kw("constant", "constants", "const", "consts"),
        can_group_with=frozenset({TOPIC_VARIABLE, TOPIC_ENUMERATION}),
        merge_groupings=True,
        sort_groupings=True,
    ),
    TopicType(
        TOPIC_ENUMERATION,
        "Enumeration",
        "Enumerations",
        keywords=_kw("enumeration", "enumerations", "enum", "enums"),
        can_group_with=frozenset({TOPIC_TYPE, TOPIC_CONSTANT}),
        sort_groupings=True,
    ),
    TopicType(
        TOPIC_FUNCTION,
        "Function",
        "Functions",
        keywords=_kw(
            "function", "functions", "func", "funcs", "procedure", "procedures",
            "proc", "procs", "routine", "routines", "subroutine", "subroutines",
            "sub", "subs", "method", "methods", "callback", "callbacks",
            "constructor", "constructors", "destructor", "destructors",
            "operator", "operators",
        ),
        can_group_with=frozenset({TOPIC_VARIABLE, TOPIC_PROPERTY, TOPIC_MACRO}),
        merge_groupings=True,
        sort_groupings=True,
        break_lists=True,
    ),
    TopicType(
        TOPIC_PROPERTY,
        "Property",
        "Properties",
        keywords=_kw("property", "properties", "prop", "props"),
        can_group_with=frozenset({TOPIC_FUNCTION, TOPIC_VARIABLE}),
        merge_groupings=True,
        sort_groupings=True,
    ),
    TopicType(
        TOPIC_VARIABLE,
        "Variable",
        "Variables",
        keywords=_kw(
            "variable", "variables", "var", "vars", "integer", "integers",
            "int", "ints", "uint", "uints", "long", "longs", "ulong", "ulongs",
            "short", "shorts", "ushort", "ushorts", "byte", "bytes",
            "ubyte", "ubytes", "sbyte", "sbytes", "float", "floats",
            "double", "doubles", "real", "reals", "decimal", "decimals",
            "scalar", "scalars", "array", "arrays", "arrayref", "arrayrefs",
            "hash", "hashes", "hashref", "hashrefs", "bool", "bools",
            "boolean", "booleans", "flag", "flags", "bit", "bits",
            "bitfield", "bitfields", "field", "fields", "pointer", "pointers",
            "ptr", "ptrs", "reference", "references", "ref", "refs",
            "object", "objects", "obj", "objs", "character", "characters",
            "wcharacter", "wcharacters", "char", "chars", "wchar", "wchars",
            "string", "strings", "wstring", "wstrings", "str", "strs",
            "wstr", "wstrs", "handle", "handles",
        ),
        can_group_with=frozenset({TOPIC_CONSTANT, TOPIC_PROPERTY, TOPIC_FUNCTION}),
        merge_groupings=True,
        sort_groupings=True,
    ),
    TopicType(
        TOPIC_MACRO,
        "Macro",
        "Macros",
        keywords=_kw("define", "defines", "def", "defs", "macro", "macros"),
        can_group_with=frozenset({TOPIC_FUNCTION}),
        sort_groupings=True,
    ),
    TopicType(
        TOPIC_EVENT,
        "Event",
        "Events",
        keywords=_kw("event", "events"),
        can_group_with=frozenset({TOPIC_DELEGATE}),
    ),
    TopicType(
        TOPIC_DELEGATE,
        "Delegate",
        "Delegates",
        keywords=_kw("delegate", "delegates"),
        can_group_with=frozenset({TOPIC_EVENT}),
    ),
)


class TopicTypes:
    """Read-only lookup over a set of :class:`TopicType` entries."""

    def __init__(self, types: Iterable[TopicType]) -> None:
        self._types: Dict[str, TopicType] = {}
        self._keywords: Dict[str, Tuple[str, bool]] = {}
        for topic_type in types:
            self._types[topic_type.name] = topic_type
        for topic_type in self._types.values():
            for singular, plural in topic_type.keywords:
                self._keywords[singular.lower()] = (topic_type.name, False)
                if plural:
                    self._keywords[plural.lower()] = (topic_type.name, True)
        if TOPIC_GENERIC not in self._types:
            raise ValueError("topic type table must define the generic type")

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[TopicType]:
        return iter(self._types.values())

    def info(self, name: Optional[str]) -> TopicType:
        """Return the policy for *name*; unknown and missing types act as generic."""
        if name is None:
            return self._types[TOPIC_GENERIC]
        topic_type = self._types.get(name)
        if topic_type is None:
            _LOGGER.debug("Unknown topic type %r treated as generic", name)
            return self._types[TOPIC_GENERIC]
        return topic_type

    def scope_of(self, name: Optional[str]) -> Scope:
        return self.info(name).scope

    def keyword_info(self, keyword: str) -> Optional[Tuple[str, bool]]:
        """Return ``(type, is_plural)`` for a comment header keyword."""
        return self._keywords.get(keyword.lower())

    def name_of(self, name: str, plural: bool = False) -> str:
        topic_type = self.info(name)
        return topic_type.plural if plural else topic_type.display

    def can_group_with(self, first: str, second: str) -> bool:
        return self.info(first).can_group(second) or self.info(second).can_group(first)

    def merged(self, overrides: Iterable[TopicType]) -> "TopicTypes":
        """Return a new table with *overrides* replacing or adding entries."""
        combined = dict(self._types)
        for topic_type in overrides:
            combined[topic_type.name] = topic_type
        return TopicTypes(combined.values())


_DEFAULT_TABLE = TopicTypes(_BUILTIN_TYPES)
_active = _DEFAULT_TABLE


def default_topic_types() -> TopicTypes:
    """Return the built-in policy table."""
    return _DEFAULT_TABLE


def topic_types() -> TopicTypes:
    """Return the policy table consulted by topics and reconciliation stages."""
    return _active


def use_topic_types(table: TopicTypes | None) -> TopicTypes:
    """Install *table* as the active policy table, returning the previous one.

    Passing ``None`` restores the built-in table.
    """
    global _active
    previous = _active
    _active = table if table is not None else _DEFAULT_TABLE
    return previous


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

_FLAG_KEYS = (
    "merge_groupings",
    "sort_groupings",
    "break_lists",
    "dont_summaries",
    "class_hierarchy",
    "page_title_if_first",
)


def load_topic_types(path: Path, base: TopicTypes | None = None) -> TopicTypes:
    """Load topic type overrides from a YAML mapping of ``name -> settings``.

    Entries naming an existing type update only the keys they mention::

        function:
          sort_groupings: false
        signal:
          display: Signal
          plural: Signals
          keywords: [[signal, signals], [slot, slots]]
          can_group_with: [function]
    """
    from .config import ConfigError

    base = base or default_topic_types()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read topic types from {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if data is None:
        return base
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping of topic types")
    return base.merged(_topic_type_from_mapping(str(name), value or {}, base) for name, value in data.items())


def _topic_type_from_mapping(name: str, data: Mapping[str, Any], base: TopicTypes) -> TopicType:
    from .config import ConfigError

    if not isinstance(data, Mapping):
        raise ConfigError(f"Topic type '{name}' must be a mapping")
    key = name.lower()
    current = base.info(key) if key in base else TopicType(key, name.title(), f"{name.title()}s")

    changes: Dict[str, Any] = {}
    if "display" in data:
        changes["display"] = str(data["display"])
    if "plural" in data:
        changes["plural"] = str(data["plural"])
    if "scope" in data:
        try:
            changes["scope"] = Scope(str(data["scope"]).lower())
        except ValueError as exc:
            raise ConfigError(f"Topic type '{name}' has an unknown scope: {data['scope']}") from exc
    if "keywords" in data:
        changes["keywords"] = tuple(_keyword_pair(name, entry) for entry in data["keywords"] or [])
    if "can_group_with" in data:
        changes["can_group_with"] = frozenset(str(item).lower() for item in data["can_group_with"] or [])
    for flag in _FLAG_KEYS:
        if flag in data:
            changes[flag] = bool(data[flag])
    return replace(current, **changes)


def _keyword_pair(name: str, entry: Any) -> Tuple[str, Optional[str]]:
    from .config import ConfigError

    if isinstance(entry, str):
        return (entry.lower(), None)
    if isinstance(entry, (list, tuple)) and 1 <= len(entry) <= 2:
        plural = str(entry[1]).lower() if len(entry) == 2 and entry[1] else None
        return (str(entry[0]).lower(), plural)
    raise ConfigError(f"Topic type '{name}' has an invalid keyword entry: {entry!r}")


__all__ = [
    "Scope",
    "TOPIC_CLASS",
    "TOPIC_CONSTANT",
    "TOPIC_DELEGATE",
    "TOPIC_ENUMERATION",
    "TOPIC_EVENT",
    "TOPIC_FILE",
    "TOPIC_FUNCTION",
    "TOPIC_GENERIC",
    "TOPIC_GROUP",
    "TOPIC_INTERFACE",
    "TOPIC_MACRO",
    "TOPIC_PROPERTY",
    "TOPIC_SECTION",
    "TOPIC_TYPE",
    "TOPIC_VARIABLE",
    "TopicType",
    "TopicTypes",
    "default_topic_types",
    "load_topic_types",
    "topic_types",
    "use_topic_types",
]
