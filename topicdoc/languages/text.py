"""Plain text front end: the whole file is a single comment."""

from __future__ import annotations

from .base import CommentSink, FileParse, Language


class TextLanguage(Language):
    """Documentation-only files written entirely in native markup."""

    name = "text"
    extensions = (".txt", ".text", ".nd")
    plaintext = True

    def parse_file(self, text: str, sink: CommentSink) -> FileParse:
        lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        if any(line.strip() for line in lines):
            sink.on_comment(lines, 1, False)
        return FileParse()


__all__ = ["TextLanguage"]
