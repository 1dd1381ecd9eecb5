"""C/C++ front end.

Recognition is shallow: the parser walks the token stream one statement at a
time and tries a fixed list of recognizers (``using``, ``namespace``, linkage
blocks, ``typedef``, ``friend``, classes, access labels, functions, enums and
variables). Each recognizer takes the index of the first token of the
statement and returns the index after what it consumed, or ``None`` when the
statement does not have its shape. Nothing a recognizer does before it fails
is kept.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from ..markup import convert_amp_chars
from ..models import (
    RESOLVE_RELATIVE,
    Element,
    Topic,
    identifiers_of,
    join_symbols,
    symbol_from_text,
)
from ..tokenizer import CommentSyntax, Token, Tokenizer, TokenKind
from ..topics import (
    TOPIC_CLASS,
    TOPIC_CONSTANT,
    TOPIC_ENUMERATION,
    TOPIC_FUNCTION,
    TOPIC_TYPE,
    TOPIC_VARIABLE,
    Scope,
    topic_types,
)
from .base import ENUM_UNDER_TYPE, CommentSink, FileParse, Language, ScopeTracker

# Value 1 marks keys that may fold into a plain type (struct, union).
CLASS_KEYWORDS: Dict[str, int] = {"class": 2, "struct": 1, "union": 1}

CLASS_MODIFIERS = frozenset({"private", "protected", "public", "static", "virtual"})

CLASS_SCOPES = frozenset({"public", "protected", "private"})

FUNCTION_STORAGE_CLASSES = frozenset(
    {
        "__based", "_cdecl", "__cdecl", "const", "_const", "__declspec",
        "__fastcall", "extern", "inline", "__inline", "__inline__", "restrict",
        "__restrict", "__restrict__", "static", "__sptr", "__stdcall",
        "__unaligned", "__uptr", "__w64", "virtual", "explicit", "constexpr",
    }
)

FUNCTION_ATTRIBUTES = frozenset(
    {"__attribute__", "const", "throw", "__restrict", "__restrict__", "noexcept", "override", "final"}
)

VARIABLE_STORAGE_CLASSES = frozenset(
    {
        "auto", "const", "__const", "__const__", "extern", "register",
        "restrict", "static", "typename", "volatile", "__volatile", "mutable",
        "constexpr",
    }
)

RESERVED_WORDS = frozenset(
    {
        "asm", "__asm", "__asm__", "auto", "bool", "break", "case", "catch",
        "char", "class", "const", "__const", "const_cast", "continue",
        "default", "delete", "do", "double", "dynamic_cast", "else", "enum",
        "explicit", "export", "extern", "false", "float", "for", "friend",
        "goto", "if", "inline", "__inline", "int", "long", "mutable",
        "namespace", "new", "operator", "private", "protected", "public",
        "register", "reinterpret_cast", "__restrict", "__restrict__", "return",
        "short", "signed", "sizeof", "static", "static_cast", "struct",
        "switch", "template", "this", "throw", "true", "try", "typedef",
        "typeid", "typename", "union", "unsigned", "using", "virtual", "void",
        "volatile", "__volatile", "wchar_t", "while",
    }
)

# Value 2 marks builtins that may be followed by another builtin ("unsigned long int").
TYPE_BUILTINS: Dict[str, int] = {
    "bool": 1,
    "char": 2,
    "double": 2,
    "float": 2,
    "int": 2,
    "long": 2,
    "longlong": 2,
    "__longlong": 2,
    "short": 2,
    "signed": 2,
    "unsigned": 2,
    "__unsigned": 2,
    "void": 1,
    "wchar_t": 1,
}

TYPE_KEYWORDS = frozenset({"class", "enum", "struct", "union"})

TYPE_MODIFIERS = frozenset({"&", "*", "restrict", "__restrict", "__restrict__"})

_OPERATOR_SYMBOLS = frozenset("+-!~*/%&|^<>[]=,)")
_NAME_START = re.compile(r"^[A-Za-z_]")
_TRAILING_NAME = re.compile(r"[A-Za-z0-9_]+$")


def normalize_prototype(text: str) -> str:
    """Canonical spacing for a declaration.

    Whitespace runs collapse to one space; there is no space around ``::``,
    ``<`` and ``(``, none before ``>``, ``)``, ``&``, ``*`` and ``,``, none
    after a comma, and exactly one between ``>``, ``)``, ``&`` or ``*`` and a
    following name. Applying it twice gives the same result.
    """
    text = re.sub(r"\s+", " ", text).strip()
    text = re.sub(r"\s*::\s*", "::", text)
    text = re.sub(r"\s*([<(])\s*", r"\1", text)
    text = re.sub(r"\s*([>)&*,])", r"\1", text)
    text = re.sub(r"([>)&*,])\s*", r"\1", text)
    text = re.sub(r"([>)&*])(?=[\w~])", r"\1 ", text)
    return text.strip()


class _Declaration(NamedTuple):
    defn: str
    ident: Optional[str]
    desc: str


class CppLanguage(Language):
    """Front end for C and C++ sources."""

    name = "cpp"
    extensions = (".c", ".h", ".cpp", ".hpp", ".cc", ".hh", ".cxx", ".hxx", ".c++", ".h++", ".inl")
    enum_values = ENUM_UNDER_TYPE
    package_separator = "::"

    def __init__(self, syntax: CommentSyntax | None = None) -> None:
        self.tokenizer = Tokenizer(syntax or CommentSyntax())

    def parse_file(self, text: str, sink: CommentSink) -> FileParse:
        stream = self.tokenizer.tokenize(text)
        for comment in stream.comments:
            sink.on_comment(list(comment.lines), comment.line_number, comment.is_doc)
        parser = CppStatementParser(stream.tokens, sink, self.tokenizer)
        return parser.parse()


class CppStatementParser:
    """Per-file recognizer state: tokens, scope stack and auto-topics."""

    def __init__(self, tokens: Sequence[Token], sink: CommentSink, tokenizer: Tokenizer | None = None) -> None:
        self.tokens = list(tokens)
        self.sink = sink
        self.tokenizer = tokenizer or Tokenizer()
        self.scopes = ScopeTracker()
        self.auto_topics: List[Topic] = []
        self._member_descriptions: Dict[int, str] = {}
        self._recognizers: Tuple[Callable[[int], Optional[int]], ...] = (
            self.try_using,
            self.try_namespace,
            self.try_linkage,
            self.try_typedefs,
            self.try_friends,
            self.try_class,
            self.try_scope,
            self.try_function,
            self.try_enumeration,
            self.try_variable,
        )

    # -- driver --------------------------------------------------------------

    def parse(self) -> FileParse:
        count = len(self.tokens)
        index = 0
        while index < count:
            skipped = self.skip_whitespace(index)
            if skipped != index:
                index = skipped
                continue

            consumed = None
            for recognizer in self._recognizers:
                consumed = recognizer(index)
                if consumed is not None:
                    break
            if consumed is not None:
                index = consumed if consumed > index else index + 1
                continue

            token = self._text(index)
            if token == "{":
                self.scopes.start_scope("}", self._line(index))
                index += 1
            elif token == "}":
                if self.scopes.closing_symbol == "}":
                    self.scopes.end_scope(self._line(index))
                index += 1
            else:
                index = max(self.skip_rest_of_statement(index), index + 1)

        self.convert_classes()
        return FileParse(auto_topics=self.auto_topics, scope_record=list(self.scopes.record) or None)

    def add_auto_topic(self, topic: Topic) -> None:
        self.auto_topics.append(topic)

    # -- token access --------------------------------------------------------

    def _text(self, index: int) -> str:
        if 0 <= index < len(self.tokens):
            return self.tokens[index].text
        return ""

    def _line(self, index: int) -> int:
        if not self.tokens:
            return 1
        if index >= len(self.tokens):
            token = self.tokens[-1]
            return token.line + token.text.count("\n")
        return self.tokens[index].line

    def _is_name(self, index: int) -> bool:
        return index < len(self.tokens) and self.tokens[index].kind is TokenKind.IDENTIFIER and bool(
            _NAME_START.match(self.tokens[index].text)
        )

    def create_string(self, start: int, end: int) -> str:
        parts = []
        for token in self.tokens[start:end]:
            parts.append(" " if token.is_blank else token.text)
        return "".join(parts)

    # -- skipping ------------------------------------------------------------

    def skip_whitespace(self, index: int, desc: Optional[List[str]] = None) -> int:
        """Step over whitespace, comments and preprocessor lines.

        Trailing member comments (``//!<``) found on the way are appended to
        *desc* when a collector is given.
        """
        count = len(self.tokens)
        while index < count and self.tokens[index].is_blank:
            token = self.tokens[index]
            if desc is not None and token.kind is TokenKind.COMMENT and self.tokenizer.is_member_comment(token.text):
                text = self.tokenizer.member_comment_text(token.text)
                if text:
                    desc.append(text)
            index += 1
        return index

    def skip_string(self, index: int) -> Optional[int]:
        if index < len(self.tokens) and self.tokens[index].kind is TokenKind.STRING:
            return index + 1
        return None

    def skip_generic(self, index: int, desc: Optional[List[str]] = None) -> int:
        token = self._text(index)
        if token == "{":
            return self.skip_terminator(index + 1, ("}",))[0]
        if token == "(":
            return self.skip_terminator(index + 1, (")",))[0]
        if token == "[":
            return self.skip_terminator(index + 1, ("]",))[0]
        skipped = self.skip_whitespace(index, desc)
        if skipped != index:
            return skipped
        skipped = self.skip_string(index)
        if skipped is not None:
            return skipped
        return index + 1

    def skip_terminator(
        self, index: int, terminators: Sequence[str], desc: Optional[List[str]] = None
    ) -> Tuple[int, Optional[str]]:
        """Skip balanced groups until one of *terminators*, consuming it."""
        count = len(self.tokens)
        while index < count and self.tokens[index].text not in terminators:
            index = self.skip_generic(index, desc)
        if index < count:
            return index + 1, self.tokens[index].text
        return count, None

    def skip_rest_of_statement(self, index: int) -> int:
        count = len(self.tokens)
        while index < count:
            token = self.tokens[index].text
            if token == ";":
                return index + 1
            if token == "{":
                return self.skip_generic(index)
            index = self.skip_generic(index)
        return index

    # -- declaration pieces --------------------------------------------------

    def get_identifier(self, index: int, defn: Optional[str] = None) -> Tuple[int, Optional[str]]:
        """Read ``name``, ``~name`` or ``a::b::name``; with *defn* only the ``::`` tail."""
        index = self.skip_whitespace(index)
        token = self._text(index)
        if defn is None:
            if token == "~":
                defn = "~"
                index = self.skip_whitespace(index + 1)
                token = self._text(index)
            if self._is_name(index) and token not in RESERVED_WORDS:
                defn = (defn or "") + token
                index = self.skip_whitespace(index + 1)
                token = self._text(index)

        while token == ":" and self._text(index + 1) == ":":
            defn = (defn or "") + "::"
            index = self.skip_whitespace(index + 2)
            token = self._text(index)
            if token == "~":
                defn += "~"
                index = self.skip_whitespace(index + 1)
                token = self._text(index)
            if not self._is_name(index) or token in RESERVED_WORDS:
                break
            defn += token
            index = self.skip_whitespace(index + 1)
            token = self._text(index)

        return index, defn

    def get_template(self, index: int) -> Tuple[int, Optional[str]]:
        """Read a ``template <...>`` prefix."""
        start = index
        index = self.skip_whitespace(index)
        if self._text(index) == "export":
            index = self.skip_whitespace(index + 1)
        if self._text(index) != "template":
            return start, None
        index, defn = self.get_template_arguments(index + 1, "template ")
        return (start, None) if defn == "template " else (index, defn)

    def get_template_arguments(self, index: int, defn: str) -> Tuple[int, str]:
        """Append the ``<...>`` arguments following *defn*, if any."""
        start = index
        index = self.skip_whitespace(index)
        if self._text(index) != "<":
            return start, defn
        index += 1
        defn += "<"

        nesting = 1
        count = len(self.tokens)
        while nesting > 0 and index < count:
            skipped = self.skip_whitespace(index)
            if skipped != index:
                defn += " "
                index = skipped
                continue
            token = self.tokens[index]
            if token.kind is TokenKind.STRING:
                defn += token.text
                index += 1
                continue
            if token.text == "<":
                nesting += 1
            elif token.text == ">":
                nesting -= 1
            elif token.text == ";":
                break
            defn += token.text
            index += 1

        return self.skip_whitespace(index), defn

    def get_linkage(self, index: int) -> Tuple[int, Optional[str]]:
        if self._text(index) != "extern":
            return index, None
        after = self.skip_whitespace(index + 1)
        if after >= len(self.tokens) or self.tokens[after].kind is not TokenKind.STRING:
            return index, None
        literal = self.tokens[after].text
        if not literal.startswith('"'):
            return index, None
        linkage = literal[1:-1] if len(literal) > 1 and literal.endswith('"') else literal[1:]
        if not linkage:
            return index, None
        return self.skip_whitespace(after + 1), linkage

    def get_attribute(self, index: int) -> int:
        start = index
        index = self.skip_whitespace(index)
        while self._text(index) in ("__attribute__", "__declspec"):
            index = self.skip_whitespace(index + 1)
            if self._text(index) == "(":
                index, closed = self.skip_terminator(index + 1, (")",))
                if closed is None:
                    return start
                index = self.skip_whitespace(index)
        return index

    def get_prototype(self, start: int, end: int, prototype: str = "") -> str:
        parts = [prototype]
        index = start
        while index < end:
            token = self.tokens[index]
            if token.is_blank:
                parts.append(" ")
                while index < end and self.tokens[index].is_blank:
                    index += 1
                continue
            parts.append(token.text)
            index += 1
        return normalize_prototype("".join(parts))

    def try_type(self, index: int) -> Tuple[int, Optional[str]]:
        """Read a type name, returning ``(index, None)`` when there is none."""
        start = index
        defn: Optional[str] = None
        token = self._text(index)
        if self._is_name(index):
            if token in TYPE_BUILTINS:
                kind = TYPE_BUILTINS[token]
                defn = token
                index += 1
                while kind == 2:
                    index = self.skip_whitespace(index)
                    token = self._text(index)
                    if token in TYPE_BUILTINS:
                        kind = TYPE_BUILTINS[token]
                        defn += " " + token
                        index += 1
                    else:
                        kind = 0
            elif token in TYPE_KEYWORDS:
                defn = token
                index, tag = self.get_identifier(index + 1)
                if tag is not None:
                    defn += " " + tag
            elif token not in RESERVED_WORDS:
                index, defn = self.get_identifier(index + 1, token)

        if defn is None:
            return start, None

        index, defn = self.get_template_arguments(index, defn)
        index = self.skip_whitespace(index)
        while self._text(index) in VARIABLE_STORAGE_CLASSES or self._text(index) in TYPE_MODIFIERS:
            defn += " " + self._text(index)
            index = self.skip_whitespace(index + 1)
        return index, defn

    def get_parameters(self, index: int) -> Tuple[int, Optional[List[_Declaration]]]:
        """Read a parameter list; *index* points just past the ``(``."""
        start = index
        decls: List[_Declaration] = []
        count = len(self.tokens)
        while index < count:
            index = self.skip_whitespace(index)
            if self._text(index) == ")":
                index += 1
                break
            first = index
            while self._is_name(index) and self._text(index) in VARIABLE_STORAGE_CLASSES:
                index = self.skip_whitespace(index + 1)
            index, defn = self.try_type(index)
            if defn is None:
                return start, None
            prefix = self.create_string(first, index)
            index, found = self.get_declarations(index, prefix, ",")
            if found is None:
                return start, None
            decls.extend(found)
        return index, decls

    def get_declarations(
        self, index: int, prefix: str, terminator: Optional[str] = None
    ) -> Tuple[int, Optional[List[_Declaration]]]:
        """Read the declarators that follow a type, up to ``;`` or *terminator*."""
        start = index
        count = len(self.tokens)
        decls: List[_Declaration] = []
        while index < count:
            defn = ""
            ident: Optional[str] = None
            level = 0
            desc: List[str] = []
            while True:
                index = self.skip_whitespace(index)
                token = self._text(index)
                if token == "(":
                    defn += token
                    index += 1
                    level += 1
                elif token == ")":
                    if level:
                        defn += token
                        index += 1
                    level -= 1
                elif token == ";" or (level == 0 and terminator is not None and token == terminator):
                    level = -1
                else:
                    while self._text(index) in VARIABLE_STORAGE_CLASSES or self._text(index) in TYPE_MODIFIERS:
                        defn += self._text(index)
                        index = self.skip_whitespace(index + 1)
                    index, name = self.get_identifier(index)
                    if name is None:
                        return start, None
                    ident = name
                    defn = f"{defn} {name}" if defn else name
                if not (level > 0 and index < count):
                    break

            index = self.skip_whitespace(index, desc)
            while self._text(index) in ("[", "("):
                opener = index
                closer = "]" if self._text(index) == "[" else ")"
                index, _ = self.skip_terminator(index + 1, (closer,))
                if closer == ")" and defn.startswith("("):
                    # Parameter list of a function pointer.
                    defn += self.create_string(opener, index)
                index = self.skip_whitespace(index, desc)
            index = self.get_attribute(index)

            if self._text(index) == "=":
                stops = {",", ";"}
                if terminator is not None:
                    stops.update({terminator, ")"})
                index += 1
                while index < count and self._text(index) not in stops:
                    index = self.skip_generic(index)

            token = self._text(index)
            if token in (";", ")") or (terminator is not None and token == terminator):
                if token != ")":
                    index = self.skip_whitespace(index + 1, desc)
                decls.append(_Declaration(f"{prefix} {defn}", ident, " ".join(desc)))
                return index, decls
            if token == ",":
                index = self.skip_whitespace(index + 1, desc)
                decls.append(_Declaration(f"{prefix} {defn}", ident, " ".join(desc)))
                continue
            return start, None
        return start, None

    # -- recognizers ---------------------------------------------------------

    def try_using(self, index: int) -> Optional[int]:
        """``using namespace name;``"""
        if self._text(index) != "using":
            return None
        index = self.skip_whitespace(index + 1)
        if self._text(index) != "namespace":
            return None
        index, name = self.get_identifier(index + 1)
        if name is None:
            return None
        index, _ = self.skip_terminator(index, (";",))
        self.scopes.add_using(symbol_from_text(name))
        return index

    def try_namespace(self, index: int) -> Optional[int]:
        """``namespace name { ... }``, ``namespace { ... }`` or ``namespace a = b;``"""
        if self._text(index) != "namespace":
            return None
        index, name = self.get_identifier(index + 1)
        token = self._text(index)
        brace = index
        index += 1
        if token == "=":
            if name is None:
                return None
            index, equivalent = self.get_identifier(index)
            if equivalent is None:
                return None
            index, _ = self.skip_terminator(index, (";",))
            return index
        if token != "{":
            return None
        if name is not None:
            package = join_symbols(self.scopes.current_package, symbol_from_text(" ".join(name.split())))
            self.sink.on_class(package)
            self.scopes.start_scope("}", self._line(brace), package, inherit_class=False)
        else:
            self.scopes.start_scope("}", self._line(brace), None, inherit_class=False)
        return index

    def try_linkage(self, index: int) -> Optional[int]:
        """``extern "C" { ... }``"""
        index, linkage = self.get_linkage(index)
        if linkage is None or self._text(index) != "{":
            return None
        frame = self.scopes.start_scope("}", self._line(index))
        frame.linkage = linkage
        return index + 1

    def try_typedefs(self, index: int) -> Optional[int]:
        # The declaration after "typedef" is recognized on its own.
        if self._text(index) != "typedef":
            return None
        return index + 1

    def try_friends(self, index: int) -> Optional[int]:
        if self._text(index) != "friend":
            return None
        return self.skip_rest_of_statement(index + 1)

    def try_class(self, index: int) -> Optional[int]:
        """``[template <...>] [modifiers] class|struct|union name [: parents] {``"""
        start = index
        index, _ = self.get_template(index)
        while (
            self._is_name(index)
            and self._text(index) in CLASS_MODIFIERS
            and self._text(index) not in CLASS_KEYWORDS
        ):
            index = self.skip_whitespace(index + 1)

        keyword = self._text(index)
        if keyword not in CLASS_KEYWORDS:
            return None
        index, name = self.get_identifier(index + 1)
        if name is None:
            return None
        if self._text(index) == "final":
            index = self.skip_whitespace(index + 1)

        parents: List[str] = []
        if self._text(index) == ":":
            while True:
                index = self.skip_whitespace(index + 1)
                while self._is_name(index) and self._text(index) in CLASS_MODIFIERS:
                    index = self.skip_whitespace(index + 1)
                index, parent = self.get_identifier(index)
                if parent is not None:
                    index, parent = self.get_template_arguments(index, parent)
                if parent is None:
                    return None
                parent_symbol = symbol_from_text(parent)
                if parent_symbol:
                    parents.append(parent_symbol)
                index = self.skip_whitespace(index)
                if self._text(index) != ",":
                    break

        if self._text(index) == ";":
            return index + 1
        if self._text(index) != "{":
            return None
        brace = index

        prototype = self.get_prototype(start, brace)
        scope = self.scopes.current_package
        title = ".".join(identifiers_of(scope) + [" ".join(name.split())])
        topic = Topic(
            TOPIC_CLASS,
            title,
            None,
            self.scopes.current_using,
            prototype,
            line_number=self._line(start),
        )
        if CLASS_KEYWORDS[keyword] == 1 and not parents:
            topic.add_attribute("struct")
        self.add_auto_topic(topic)

        self.sink.on_class(topic.package)
        for parent in parents:
            self.sink.on_class_parent(topic.package, parent, scope, None, RESOLVE_RELATIVE)
        self.scopes.start_scope("}", self._line(brace), topic.package, class_name=name)
        return brace + 1

    def try_scope(self, index: int) -> Optional[int]:
        """Access labels: ``public:``"""
        if not (self._is_name(index) and self._text(index) in CLASS_SCOPES):
            return None
        index = self.skip_whitespace(index + 1)
        if self._text(index) == ":" and self._text(index + 1) != ":":
            return index + 1
        return None

    def try_function(self, index: int) -> Optional[int]:
        """Functions, constructors, destructors and operators."""
        start = index
        attributes: List[str] = []

        index, linkage = self.get_linkage(index)
        index, _ = self.get_template(index)
        while self._is_name(index) and self._text(index) in FUNCTION_STORAGE_CLASSES:
            if self._text(index) == "static":
                attributes.append("static")
            index = self.skip_whitespace(index + 1)
            if self._text(index) == "(":
                index, _ = self.skip_terminator(index + 1, (")",))
                index = self.skip_whitespace(index)

        index, return_type = self.try_type(index)
        index, name = self.get_identifier(index)
        if name is not None:
            index, name = self.get_template_arguments(index, name)
            index, name = self.get_identifier(index, name)
        if name is None:
            if return_type is None:
                return None
            name, return_type = return_type, None
        index = self.skip_whitespace(index)

        parts = [part for part in name.split("::") if part]
        is_operator = self._text(index) == "operator"
        if is_operator:
            qualifier = parts if name.endswith("::") else []
            index = self.skip_whitespace(index + 1)
            symbol = ""
            once = True
            while True:
                token = self._text(index)
                if token in _OPERATOR_SYMBOLS or (once and token == "(") or token in ("new", "delete"):
                    symbol += token
                    index += 1
                    once = False
                else:
                    break
            if not symbol and self._is_name(index):
                index, conversion = self.try_type(index)
                symbol = conversion or ""
            name = f"operator {symbol}".rstrip()
            parts = qualifier + [name]
        else:
            match = _TRAILING_NAME.search(name)
            base_name = match.group(0) if match else ""
            if return_type is None and not self._names_constructor(base_name, parts):
                return None

        index = self.skip_whitespace(index)
        if self._text(index) != "(":
            return None
        after_paren = index + 1
        index, params = self.get_parameters(after_paren)
        if params is None:
            index, _ = self.skip_terminator(after_paren, (")",))

        index = self.skip_whitespace(index)
        while self._is_name(index) and self._text(index) in FUNCTION_ATTRIBUTES:
            index = self.skip_whitespace(index + 1)
            if self._text(index) == "(":
                index, _ = self.skip_terminator(index + 1, (")",))
                index = self.skip_whitespace(index)
        prototype_end = index
        if self._text(index) == "=":
            index = self.skip_whitespace(index + 1)
            if self._text(index) == "0":
                attributes.append("pure virtual")
                index += 1

        scope = self.scopes.current_package
        rescoped = scope
        title = name
        if len(parts) > 1:
            title = parts[-1]
            rescoped = join_symbols(scope, *(symbol_from_text(part) for part in parts[:-1]))

        prototype = self.get_prototype(start, prototype_end)
        if rescoped != scope:
            head = "operator" if is_operator else title
            qualifiers = parts[:-1]
            for first in range(len(qualifiers)):
                qualified = "::".join(qualifiers[first:]) + "::" + head
                if qualified in prototype:
                    prototype = prototype.replace(qualified, head, 1)
                    break

        if linkage is None and self.scopes.current.linkage == "C":
            prototype = f'extern "C" {prototype}'

        topic = Topic(TOPIC_FUNCTION, title, rescoped, None, prototype, line_number=self._line(start))
        for attribute in attributes:
            topic.add_attribute(attribute)
        self.add_auto_topic(topic)
        return self.skip_rest_of_statement(index)

    def _names_constructor(self, base_name: str, parts: Sequence[str]) -> bool:
        class_name = self.scopes.current.class_name
        if class_name:
            identifiers = identifiers_of(symbol_from_text(class_name))
            if identifiers and identifiers[-1] == base_name:
                return True
        if len(parts) > 1 and parts[-2].lstrip("~") == base_name:
            return True
        return False

    def try_enumeration(self, index: int) -> Optional[int]:
        """``enum [class] tag [: type] { a, b = 2 } [declarators];``"""
        start = index
        while self._is_name(index) and self._text(index) in VARIABLE_STORAGE_CLASSES:
            index = self.skip_whitespace(index + 1)
        if self._text(index) != "enum":
            return None
        index = self.skip_whitespace(index + 1)
        if self._text(index) in ("class", "struct"):
            index = self.skip_whitespace(index + 1)
        index, tag = self.get_identifier(index)
        tag = tag or "unnamed"
        index = self.skip_whitespace(index)
        if self._text(index) == ":" and self._text(index + 1) != ":":
            index, _ = self.try_type(self.skip_whitespace(index + 1))
            index = self.skip_whitespace(index)
        if self._text(index) != "{":
            return None
        brace = index
        index += 1

        elements: List[Element] = []
        while True:
            index = self.skip_whitespace(index)
            if self._text(index) == "}":
                index += 1
                break
            name = ""
            while self._is_name(index):
                name += self._text(index)
                index += 1
            if not name:
                return None
            desc: List[str] = []
            index, terminator = self.skip_terminator(index, (",", "}"), desc)
            if terminator == ",":
                index = self.skip_whitespace(index, desc)
            elif terminator != "}":
                return None
            elements.append(Element(name, " ".join(desc)))
            if terminator == "}":
                break

        topic = Topic(
            TOPIC_ENUMERATION,
            tag,
            self.scopes.current_package,
            self.scopes.current_using,
            self.get_prototype(start, brace),
            line_number=self._line(start),
            elements=elements,
        )
        self.add_auto_topic(topic)

        consumed = self.try_variable(self.skip_whitespace(index), f"enum {tag}")
        if consumed is None:
            consumed = self.skip_rest_of_statement(index)
        return consumed

    def try_variable(self, index: int, prefix: Optional[str] = None) -> Optional[int]:
        """Variables and constants, one auto-topic per declarator."""
        start = index
        topic_type = TOPIC_VARIABLE
        is_static = False
        if prefix is None:
            while self._is_name(index) and self._text(index) in VARIABLE_STORAGE_CLASSES:
                if self._text(index) in ("const", "constexpr"):
                    topic_type = TOPIC_CONSTANT
                elif self._text(index) == "static":
                    is_static = True
                index = self.skip_whitespace(index + 1)
            index, defn = self.try_type(index)
            if defn is None:
                return None
            prefix = self.create_string(start, index)

        index, decls = self.get_declarations(index, prefix)
        if decls is None:
            return None
        for decl in decls:
            if not decl.ident:
                continue
            body = f"<p>{convert_amp_chars(decl.desc)}</p>" if decl.desc else None
            topic = Topic(
                topic_type,
                decl.ident,
                self.scopes.current_package,
                None,
                normalize_prototype(decl.defn),
                body=body,
                line_number=self._line(start),
            )
            if is_static:
                topic.add_attribute("static")
            if decl.desc:
                self._member_descriptions[id(topic)] = decl.desc
            self.add_auto_topic(topic)
        return index

    # -- post pass -----------------------------------------------------------

    def convert_classes(self) -> None:
        """Fold structs and unions holding only plain variables into Type topics.

        A candidate opened by a struct-flagged class ends when a topic from a
        different package follows, when a scope-end topic follows, when a new
        scope outside the struct starts, or at the end of the file; it then
        folds. A non-variable member, or a nested scope, cancels it.
        """
        topics = self.auto_topics
        types = topic_types()
        start = -1
        start_package: Optional[str] = None
        index = 0
        while index <= len(topics):
            if index == len(topics):
                if start >= 0:
                    self._fold_struct(start, index)
                break

            topic = topics[index]
            scope = types.scope_of(topic.type)
            if scope is Scope.START:
                if start >= 0:
                    if _is_nested(topic.package, start_package):
                        start = -1
                    else:
                        self._fold_struct(start, index)
                        index = start + 1
                        start = -1
                        continue
                if topic.has_attribute("struct"):
                    start = index
                    start_package = topic.package
                else:
                    start = -1
            elif start >= 0:
                if scope is Scope.END or topic.package != start_package:
                    self._fold_struct(start, index)
                    index = start + 1
                    start = -1
                    continue
                if topic.type != TOPIC_VARIABLE:
                    start = -1
            index += 1

    def _fold_struct(self, start: int, end: int) -> None:
        struct = self.auto_topics[start]
        members = self.auto_topics[start + 1 : end]
        pieces = [struct.prototype or "", "{"]
        pieces.extend(f"{member.prototype};" for member in members)
        pieces.append("};")
        identifiers = identifiers_of(struct.symbol)
        struct.type = TOPIC_TYPE
        if identifiers:
            struct.title = identifiers[-1]
            struct.package = join_symbols(*identifiers[:-1])
        struct.prototype = " ".join(piece for piece in pieces if piece)
        struct.elements = [
            Element(member.title or "", self._member_descriptions.get(id(member), "")) for member in members
        ]
        del self.auto_topics[start + 1 : end]


def _is_nested(package: Optional[str], parent: Optional[str]) -> bool:
    if not package or not parent:
        return False
    return package.startswith(parent + ".")


__all__ = [
    "CLASS_KEYWORDS",
    "CppLanguage",
    "CppStatementParser",
    "RESERVED_WORDS",
    "TYPE_BUILTINS",
    "normalize_prototype",
]
