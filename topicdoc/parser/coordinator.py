"""Per-file parsing: comments in, reconciled topics out."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import ParserSettings, TopicDocConfig
from ..languages import Language, discover_languages, language_for
from ..languages.base import ENUM_GLOBAL, FileParse
from ..logging import get_logger
from ..markup import replace_table_ids
from ..modelines import Modelines, parse_modelines
from ..models import RESOLVE_NOPLURAL, HierarchyEntry, Topic
from ..topics import TOPIC_FILE, TOPIC_GENERIC, load_topic_types, topic_types, use_topic_types
from .attributes import (
    apply_merge_attributes,
    apply_page_footer,
    apply_sort_attributes,
    apply_summaries_attributes,
    clean_auto_groups,
)
from .comments import clean_comment
from .indent import default_indent_width
from .javadoc import JavaDocParser
from .native import NativeParser
from .reconcile import reconcile
from .symbols import SymbolReport, collect_symbols


class ParserError(RuntimeError):
    """Raised when a source or object is referenced before it exists."""


@dataclass
class ParsedFile:
    """Everything the parser keeps for one source."""

    source: str
    language: Optional[Language] = None
    modelines: Modelines = field(default_factory=Modelines)
    topics: Optional[List[Topic]] = None
    objects: Optional[List[object]] = None
    hierarchy: Optional[List[HierarchyEntry]] = None
    default_menu_title: Optional[str] = None
    text: Optional[str] = None
    built: bool = False

    @property
    def has_content(self) -> bool:
        return bool(self.topics)


class ParseContext:
    """Receives comments, classes and objects while one file is parsed."""

    def __init__(self, parsed: ParsedFile, settings: ParserSettings) -> None:
        language = parsed.language
        self.parsed = parsed
        self.topics: List[Topic] = []
        self.objects: List[object] = []
        self.hierarchy: List[HierarchyEntry] = []
        self.tab_length = (language.tab_length if language is not None else None) or settings.tab_length
        self.native = NativeParser(
            parsed.modelines,
            default_indent=default_indent_width(
                parsed.modelines,
                settings.indent,
                language.indent if language is not None else None,
                language.tab_length if language is not None else None,
            ),
            on_object=self.on_object,
        )
        self.javadoc = JavaDocParser(self.native)
        self.native.start()

    def on_comment(self, lines: List[str], line_number: int, is_doc: bool) -> int:
        """Turn one comment into topics, returning how many were created.

        Native content wins over JavaDoc tags. An ambiguous doc-styled comment
        is read as a single headerless native topic.
        """
        lines = clean_comment(list(lines), self.tab_length)
        if self.native.is_mine(lines):
            topics = self.native.parse_comment(lines, is_doc, line_number)
        elif self.javadoc.is_mine(lines, is_doc):
            topics = self.javadoc.parse_comment(lines, line_number)
        elif is_doc:
            topics = self.native.parse_comment(lines, True, line_number)
        else:
            return 0
        self.topics.extend(topics)
        return len(topics)

    def on_class(self, class_symbol: Optional[str]) -> None:
        self.hierarchy.append(HierarchyEntry(class_symbol))

    def on_class_parent(
        self,
        class_symbol: Optional[str],
        parent: Optional[str],
        scope: Optional[str],
        using: Optional[Sequence[str]],
        flags: int,
    ) -> None:
        self.hierarchy.append(
            HierarchyEntry(class_symbol, parent, scope, list(using or []), flags | RESOLVE_NOPLURAL)
        )

    def on_object(self, obj: object) -> int:
        self.objects.append(obj)
        return len(self.objects)


class Parser:
    """Loads sources and keeps their topics until dropped or unloaded."""

    def __init__(
        self,
        config: Optional[TopicDocConfig] = None,
        languages: Optional[Sequence[Language]] = None,
    ) -> None:
        self.config = config
        self.settings = config.parser if config is not None else ParserSettings()
        if languages is not None:
            self.languages = list(languages)
        else:
            self.languages = discover_languages(config.languages.enabled if config is not None else None)
        self.logger = get_logger("parser")
        self._files: Dict[str, ParsedFile] = {}
        self._context: Optional[ParseContext] = None
        if config is not None and config.topic_types_file is not None:
            use_topic_types(load_topic_types(config.topic_types_file, topic_types()))

    # -- loading -------------------------------------------------------------

    def load(self, source: str, text: Optional[str] = None, language: Optional[Language] = None) -> ParsedFile:
        """Parse *source* (or *text* on its behalf) and cache the result."""
        source = str(source)
        parsed = ParsedFile(source, text=text)
        self._files[source] = parsed
        self._parse(parsed, language)
        return parsed

    def topics(self, source: str) -> Tuple[List[Topic], bool]:
        """Return the topics of *source* and whether they had to be re-parsed."""
        parsed = self._file(source)
        if parsed.topics is None:
            self.logger.debug("Reloading dropped source %s", source)
            self._parse(parsed, parsed.language)
            return parsed.topics or [], True
        return parsed.topics, False

    def drop(self, source: str) -> None:
        """Release the topics and objects of *source*, keeping its metadata."""
        parsed = self._file(source)
        parsed.topics = None
        parsed.objects = None
        parsed.built = False

    def unload(self, source: str) -> None:
        self._file(source)
        del self._files[str(source)]

    def is_loaded(self, source: str) -> bool:
        return str(source) in self._files

    # -- accessors -----------------------------------------------------------

    def parsed_file(self, source: str) -> ParsedFile:
        return self._file(source)

    def hierarchy(self, source: str) -> Optional[List[HierarchyEntry]]:
        return self._file(source).hierarchy

    def default_menu_title(self, source: str) -> Optional[str]:
        return self._file(source).default_menu_title

    def language(self, source: str) -> Optional[Language]:
        return self._file(source).language

    def modelines(self, source: str) -> Modelines:
        return self._file(source).modelines

    def object(self, source: str, object_id: object) -> object:
        """Return the object registered for *source* under the 1-based *object_id*."""
        parsed = self._file(source)
        objects = parsed.objects or []
        try:
            index = int(str(object_id))
        except ValueError:
            index = 0
        if index < 1 or index > len(objects):
            raise ParserError(f"Referencing undefined object {object_id} within {source}")
        return objects[index - 1]

    def on_object(self, obj: object) -> int:
        """Register *obj* with the file being parsed and return its id."""
        if self._context is None:
            raise ParserError("Objects can only be registered while a source is parsed")
        return self._context.on_object(obj)

    def copy_topic(self, topic: Topic, source: str, new_source: str) -> Topic:
        """Clone *topic* into *new_source*, duplicating its embedded tables."""
        self._file(source)
        self._file(new_source)
        clone = topic.clone()
        if topic.body:
            clone.body = replace_table_ids(
                topic.body, lambda object_id: self._duplicate_object(source, object_id, new_source)
            )
        return clone

    def _duplicate_object(self, source: str, object_id: str, new_source: str) -> str:
        obj = self.object(source, object_id)
        target = self._file(new_source)
        if target.objects is None:
            self.topics(new_source)
        objects = target.objects if target.objects is not None else []
        objects.append(obj)
        target.objects = objects
        return str(len(objects))

    # -- build ---------------------------------------------------------------

    def parse_for_build(self, source: str) -> ParsedFile:
        """Apply the build time passes to *source* and return its record."""
        topics, _ = self.topics(source)
        parsed = self._file(source)
        if parsed.built:
            return parsed

        clean_auto_groups(topics)
        apply_merge_attributes(topics)
        apply_sort_attributes(topics)
        apply_summaries_attributes(topics)
        apply_page_footer(topics, self.settings.page_footer, self._project_name(), self._format_footer)
        parsed.built = True
        return parsed

    def parse_symbols(self, source: str) -> SymbolReport:
        topics, _ = self.topics(source)
        parsed = self._file(source)
        language = parsed.language
        return collect_symbols(
            topics,
            source=parsed.source,
            enum_values=language.enum_values if language is not None else ENUM_GLOBAL,
            hierarchy=parsed.hierarchy,
            lookup_object=lambda object_id: self.object(source, object_id),
        )

    def _format_footer(self, lines: List[str]) -> str:
        native = NativeParser(Modelines(), default_indent=default_indent_width(None, self.settings.indent))
        return native.format_body(lines, TOPIC_GENERIC)

    def _project_name(self) -> str:
        return self.config.project_name if self.config is not None else ""

    # -- parsing -------------------------------------------------------------

    def _file(self, source: str) -> ParsedFile:
        parsed = self._files.get(str(source))
        if parsed is None:
            raise ParserError(f"{source} was not previously loaded")
        return parsed

    def _read(self, parsed: ParsedFile) -> str:
        if parsed.text is not None:
            return parsed.text
        path = Path(parsed.source)
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ParserError(f"Unable to read {parsed.source}: {exc}") from exc

    def _parse(self, parsed: ParsedFile, language: Optional[Language]) -> None:
        text = self._read(parsed).replace("\r\n", "\n").replace("\r", "\n")
        lines = text.split("\n")
        path = Path(parsed.source)

        chosen = language or parsed.language or language_for(path, self.languages)
        if chosen is None:
            raise ParserError(f"No language front end handles {parsed.source}")
        modelines = parse_modelines(lines, plaintext=chosen.plaintext, source=parsed.source)
        mode = modelines.value("lang")
        if language is None and parsed.language is None and isinstance(mode, str):
            chosen = language_for(path, self.languages, mode) or chosen

        parsed.language = chosen
        parsed.modelines = modelines
        parsed.topics = []
        parsed.objects = []
        parsed.built = False

        if modelines.is_disabled("nd"):
            self.logger.debug("Skipping %s: documentation disabled by modeline", parsed.source)
            return

        if chosen.plaintext:
            text = "\n".join(lines)

        context = ParseContext(parsed, self.settings)
        self._context = context
        try:
            result = chosen.parse_file(text, context) or FileParse()
        finally:
            self._context = None

        topics = reconcile(
            context.topics,
            result.auto_topics,
            result.scope_record,
            on_class=context.on_class,
            documented_only=self.settings.documented_only,
            auto_group=self.settings.auto_group,
            package_separator=chosen.package_separator,
        )

        menu_title = self._menu_title(parsed.source, topics)
        if parsed.default_menu_title is None:
            parsed.default_menu_title = menu_title

        parsed.topics = topics
        parsed.objects = context.objects
        parsed.hierarchy = context.hierarchy or None
        self.logger.debug("Parsed %s: %d topics", parsed.source, len(topics))

    def _menu_title(self, source: str, topics: List[Topic]) -> str:
        """Pick the menu title, adding a file topic when no topic can title the page."""
        if not topics:
            return source

        first = topics[0]
        if self.settings.only_file_titles:
            add_file_title = first.type != TOPIC_FILE
        else:
            add_file_title = len(topics) != 1 and not topic_types().info(first.type).page_title_if_first

        if not add_file_title:
            return first.title or source
        topics.insert(0, Topic(TOPIC_FILE, source, line_number=1))
        return source


__all__ = ["ParseContext", "ParsedFile", "Parser", "ParserError"]
