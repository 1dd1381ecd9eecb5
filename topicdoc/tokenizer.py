"""Source tokenizer shared by the language front ends.

The tokenizer turns raw text into a flat list of :class:`Token` objects and,
in the same pass, collects the stand-alone comments that may carry
documentation. Comments, strings and preprocessor lines are kept as single
tokens so the statement recognizers can step over them in one move; every
token records the line and column it starts on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

_IDENTIFIER_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")
_BLANK_CHARS = frozenset(" \t\f\v")


class TokenKind(str, Enum):
    IDENTIFIER = "identifier"
    SYMBOL = "symbol"
    WHITESPACE = "whitespace"
    NEWLINE = "newline"
    STRING = "string"
    COMMENT = "comment"
    PREPROCESSOR = "preprocessor"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int

    @property
    def is_blank(self) -> bool:
        """True for tokens the statement recognizers treat as whitespace."""
        return self.kind in (
            TokenKind.WHITESPACE,
            TokenKind.NEWLINE,
            TokenKind.COMMENT,
            TokenKind.PREPROCESSOR,
        )


@dataclass(frozen=True)
class CommentSyntax:
    """Comment and literal delimiters of a language.

    ``doc_line`` and ``doc_block`` list the documentation variants of the
    plain markers; ``member`` lists the trailing member-comment openers
    (``int x; //!< width``) which document the preceding declaration and are
    never handed out as stand-alone comments.
    """

    line: Tuple[str, ...] = ("//",)
    block: Tuple[Tuple[str, str], ...] = (("/*", "*/"),)
    doc_line: Tuple[str, ...] = ("///", "//!")
    doc_block: Tuple[Tuple[str, str], ...] = (("/**", "*/"), ("/*!", "*/"))
    member: Tuple[str, ...] = ("///<", "//!<", "//*<", "/**<", "/*!<", "/*/<")
    quotes: Tuple[str, ...] = ('"', "'")
    escape: str = "\\"
    preprocessor: Optional[str] = "#"


@dataclass
class Comment:
    """A stand-alone comment with its markers blanked out.

    ``lines`` keep their original columns: the comment markers are replaced by
    spaces so indentation inside the comment is preserved.
    """

    lines: List[str]
    line_number: int
    is_doc: bool = False
    token_index: int = 0
    is_line_comment: bool = field(default=False, repr=False)

    @property
    def last_line(self) -> int:
        return self.line_number + len(self.lines) - 1


@dataclass
class TokenStream:
    tokens: List[Token]
    comments: List[Comment]

    def __len__(self) -> int:
        return len(self.tokens)

    def texts(self) -> List[str]:
        return [token.text for token in self.tokens]


class Tokenizer:
    """Split text into tokens according to a :class:`CommentSyntax`."""

    def __init__(self, syntax: CommentSyntax | None = None) -> None:
        self.syntax = syntax or CommentSyntax()
        openers = [opener for opener, _ in self.syntax.block]
        openers.extend(opener for opener, _ in self.syntax.doc_block)
        self._block_closers = dict(self.syntax.block)
        self._block_closers.update(dict(self.syntax.doc_block))
        self._block_openers = sorted(set(openers), key=len, reverse=True)
        self._line_markers = sorted(set(self.syntax.line) | set(self.syntax.doc_line), key=len, reverse=True)

    # -- scanning ------------------------------------------------------------

    def tokenize(self, text: str) -> TokenStream:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        tokens: List[Token] = []
        length = len(text)
        index = 0
        line = 1
        line_start = 0
        only_blanks = True

        while index < length:
            char = text[index]
            column = index - line_start

            if char == "\n":
                tokens.append(Token(TokenKind.NEWLINE, "\n", line, column))
                index += 1
                line += 1
                line_start = index
                only_blanks = True
                continue

            if char in _BLANK_CHARS:
                end = index + 1
                while end < length and text[end] in _BLANK_CHARS:
                    end += 1
                tokens.append(Token(TokenKind.WHITESPACE, text[index:end], line, column))
                index = end
                continue

            if char in _IDENTIFIER_CHARS:
                end = index + 1
                while end < length and text[end] in _IDENTIFIER_CHARS:
                    end += 1
                kind = TokenKind.IDENTIFIER
            elif self._block_opener_at(text, index):
                opener = self._block_opener_at(text, index)
                closer = self._block_closers[opener]
                end = text.find(closer, index + self._opener_overlap(opener))
                end = length if end == -1 else end + len(closer)
                kind = TokenKind.COMMENT
            elif self._line_marker_at(text, index):
                end = text.find("\n", index)
                end = length if end == -1 else end
                kind = TokenKind.COMMENT
            elif char in self.syntax.quotes:
                end = self._string_end(text, index)
                kind = TokenKind.STRING
            elif only_blanks and self.syntax.preprocessor and text.startswith(self.syntax.preprocessor, index):
                end = self._directive_end(text, index)
                kind = TokenKind.PREPROCESSOR
            else:
                end = index + 1
                kind = TokenKind.SYMBOL

            value = text[index:end]
            tokens.append(Token(kind, value, line, column))
            only_blanks = False
            newlines = value.count("\n")
            if newlines:
                line += newlines
                line_start = index + value.rindex("\n") + 1
            index = end

        return TokenStream(tokens=tokens, comments=self._collect_comments(tokens))

    def _block_opener_at(self, text: str, index: int) -> Optional[str]:
        for opener in self._block_openers:
            if text.startswith(opener, index):
                return opener
        return None

    def _opener_overlap(self, opener: str) -> int:
        # "/**/" closes immediately: doc openers may share characters with the closer.
        return min(len(other) for other in self._block_openers if opener.startswith(other))

    def _line_marker_at(self, text: str, index: int) -> Optional[str]:
        for marker in self._line_markers:
            if text.startswith(marker, index):
                return marker
        return None

    def _string_end(self, text: str, index: int) -> int:
        # Unterminated literals stop at the end of their line.
        quote = text[index]
        escape = self.syntax.escape
        end = index + 1
        length = len(text)
        while end < length:
            char = text[end]
            if char == "\n":
                return end
            if escape and char == escape and end + 1 < length and text[end + 1] != "\n":
                end += 2
                continue
            end += 1
            if char == quote:
                return end
        return length

    @staticmethod
    def _directive_end(text: str, index: int) -> int:
        length = len(text)
        end = index
        while end < length:
            newline = text.find("\n", end)
            if newline == -1:
                return length
            if text[end:newline].rstrip(" \t").endswith("\\"):
                end = newline + 1
                continue
            return newline
        return length

    # -- comments ------------------------------------------------------------

    def is_member_comment(self, text: str) -> bool:
        return any(text.startswith(marker) for marker in self.syntax.member)

    def member_comment_text(self, text: str) -> str:
        """Return the description carried by a trailing member comment."""
        for marker in self.syntax.member:
            if text.startswith(marker):
                body = text[len(marker):]
                break
        else:
            body = text
        for _, closer in self.syntax.block + self.syntax.doc_block:
            if body.endswith(closer):
                body = body[: -len(closer)]
                break
        return " ".join(body.split())

    def _collect_comments(self, tokens: Sequence[Token]) -> List[Comment]:
        comments: List[Comment] = []
        pending: Optional[Comment] = None
        indent = ""
        at_line_start = True

        for index, token in enumerate(tokens):
            if token.kind is TokenKind.NEWLINE:
                at_line_start = True
                indent = ""
                continue
            if token.kind is TokenKind.WHITESPACE:
                if at_line_start:
                    indent = token.text
                continue

            if token.kind is TokenKind.COMMENT and at_line_start and not self.is_member_comment(token.text):
                comment = self._make_comment(token, index, indent)
                if (
                    comment.is_line_comment
                    and pending is not None
                    and pending.is_line_comment
                    and pending.last_line == token.line - 1
                ):
                    pending.lines.extend(comment.lines)
                else:
                    if pending is not None:
                        comments.append(pending)
                    pending = comment
                if not comment.is_line_comment:
                    comments.append(pending)
                    pending = None
                at_line_start = False
                continue

            at_line_start = False
            if pending is not None:
                comments.append(pending)
                pending = None

        if pending is not None:
            comments.append(pending)
        return comments

    def _make_comment(self, token: Token, index: int, indent: str) -> Comment:
        text = token.text
        opener = self._block_opener_at(text, 0)
        if opener is not None:
            closer = self._block_closers[opener]
            end = len(text) - len(closer) if text.endswith(closer) else len(text)
            body = text[len(opener):end] if end > len(opener) else ""
            is_doc = any(
                opener == doc_opener and not text[len(opener):].startswith((doc_opener[-1], "/"))
                for doc_opener, _ in self.syntax.doc_block
            )
            lines = body.split("\n")
            lines[0] = indent + " " * len(opener) + lines[0]
            return Comment(lines=lines, line_number=token.line, is_doc=is_doc, token_index=index)

        marker = self._line_marker_at(text, 0) or ""
        rest = text[len(marker):]
        is_doc = marker in self.syntax.doc_line and not rest.startswith(marker[-1])
        line = indent + " " * len(marker) + rest
        return Comment(
            lines=[line],
            line_number=token.line,
            is_doc=is_doc,
            token_index=index,
            is_line_comment=True,
        )


__all__ = ["Comment", "CommentSyntax", "Token", "TokenKind", "TokenStream", "Tokenizer"]
