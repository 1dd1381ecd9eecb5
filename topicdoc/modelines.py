"""Per-file override directives ("modelines").

Two forms are recognised anywhere within the first few and last lines of a
source file::

    // -ND- nd=yes, proto=yes, indent=4 -ND-
    /* -*- mode: cpp; indent-width: 2 -*- */

The ``-ND-`` form warns about unknown keys; the Emacs form silently ignores
keys it does not understand, since editors put their own settings there.
"""

from __future__ import annotations

import re
from typing import Dict, Iterator, List, Mapping, MutableSequence, Optional, Union

from .logging import source_logger

ModelineValue = Union[int, str]

_HEAD_LINES = 5
_TAIL_LINES = 25

_ND_STRICT = re.compile(r"^\s*-ND-(.+)-ND-\s*$")
_EMACS_STRICT = re.compile(r"^\s*-\*-(.+)-\*-\s*$")
_ND_EMBEDDED = re.compile(r"-ND-(.+)-ND-")
_EMACS_EMBEDDED = re.compile(r"-\*-(.+)-\*-")

_YES = re.compile(r"^(y|yes|true|1)$", re.IGNORECASE)
_NO = re.compile(r"^(n|no|false|0)$", re.IGNORECASE)

# Canonical language name first, followed by its aliases.
LANGUAGE_MODES = (
    ("applescript",),
    ("actionscript3", "as3"),
    ("bash", "shell", "sh", "ksh", "csh", "shebangscript"),
    ("coldfusion", "cf"),
    ("cpp", "c", "c++", "c/c++"),
    ("c#", "c-sharp", "csharp"),
    ("css",),
    ("delphi", "pascal"),
    ("diff", "patch", "pas"),
    ("erl", "erlang"),
    ("groovy",),
    ("java",),
    ("jfx", "javafx"),
    ("js", "jscript", "javascript"),
    ("perl", "pl", "pm"),
    ("php",),
    ("text", "plain", "textfile"),
    ("py", "python"),
    ("ruby", "rails", "ror", "rb"),
    ("sass", "scs", "s"),
    ("scala",),
    ("sql",),
    ("vb", "vbnet", "visualbasic"),
    ("xml", "xhtml", "xslt", "html"),
)

_YES_NO_KEYS = {
    "nd": "nd",
    "naturaldocs": "nd",
    "admon": "admon",
    "admonitions": "admon",
    "proto": "proto",
    "prototypes": "proto",
    "numlists": "numlists",
    "numericlists": "numlists",
    "bullists": "bullists",
    "bulletlists": "bullists",
    "deflists": "deflists",
    "definitionlists": "deflists",
    "lvl": "lvl",
    "leveling": "lvl",
    "auto": "auto",
}

_INDENT_KEYS = {"indent", "indent-width", "indent-offset"}
_LANGUAGE_KEYS = {"lang", "language", "mode"}
_BULLET_CHAR_KEYS = {"bulchar", "bulletchar"}


def language_mode(mode: str) -> Optional[str]:
    """Return the canonical language name for a mode alias."""
    wanted = mode.strip().lower()
    for aliases in LANGUAGE_MODES:
        if wanted in aliases:
            return aliases[0]
    return None


class Modelines(Mapping[str, ModelineValue]):
    """Parsed directives for one source file.

    Boolean options are stored as ``0``/``1``; ``code`` may also be ``2``
    (strict); ``indent`` is an int and ``lang`` the canonical language name.
    """

    def __init__(self, values: Optional[Mapping[str, ModelineValue]] = None, source: object | None = None) -> None:
        self._values: Dict[str, ModelineValue] = dict(values or {})
        self._logger = source_logger("modelines", source)

    def __getitem__(self, key: str) -> ModelineValue:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def value(self, key: str, default: Optional[ModelineValue] = None) -> Optional[ModelineValue]:
        return self._values.get(key, default)

    def enabled(self, key: str, default: bool = True) -> bool:
        """Return the boolean state of *key*, or *default* when not given."""
        value = self._values.get(key)
        if value is None:
            return default
        return bool(value)

    def is_disabled(self, key: str) -> bool:
        """True only when *key* was explicitly switched off."""
        return key in self._values and self._values[key] == 0

    # -- parsing -------------------------------------------------------------

    def parse_line(self, line: str, plaintext: bool = False) -> bool:
        """Apply the modeline on *line*, returning True when one was found."""
        if plaintext:
            nd_match = _ND_STRICT.match(line)
            emacs_match = None if nd_match else _EMACS_STRICT.match(line)
        else:
            nd_match = _ND_EMBEDDED.search(line)
            emacs_match = None if nd_match else _EMACS_EMBEDDED.search(line)

        if nd_match:
            self._apply_switches(re.split(r"\s*,\s*", nd_match.group(1)), quiet=False)
            return True
        if emacs_match:
            self._apply_switches(re.split(r"\s*;\s*", emacs_match.group(1)), quiet=True)
            return True
        return False

    def _apply_switches(self, switches: List[str], *, quiet: bool) -> None:
        for switch in switches:
            switch = switch.strip()
            if not switch:
                continue
            parts = re.split(r"\s*[=:]\s*", switch, maxsplit=1)
            if len(parts) == 1:
                self._set_language(parts[0], quiet)
                continue
            key, value = parts[0].strip(), parts[1].strip()
            lowered = key.lower()
            if lowered in _YES_NO_KEYS:
                canonical = _YES_NO_KEYS[lowered]
                self._yes_no(canonical, value, default=1 if canonical == "nd" else None)
            elif lowered == "code":
                if value.lower() == "strict":
                    self._values["code"] = 2
                else:
                    self._yes_no("code", value)
            elif lowered in _INDENT_KEYS:
                if value.isdigit():
                    self._values["indent"] = int(value)
            elif lowered in _LANGUAGE_KEYS:
                self._set_language(value, quiet)
            elif lowered in _BULLET_CHAR_KEYS:
                self._logger.debug("modeline option '%s' is accepted but has no effect", key)
            elif not quiet:
                self._logger.warning("unknown modeline option '%s=%s', ignored", key, value)

    def _set_language(self, mode: str, quiet: bool) -> None:
        name = language_mode(mode)
        if name is not None:
            self._values["lang"] = name
        elif not quiet:
            self._logger.warning("unknown modeline mode '%s', ignored", mode)

    def _yes_no(self, key: str, value: str, default: Optional[int] = None) -> int:
        if _YES.match(value):
            self._values[key] = 1
            return 1
        if _NO.match(value):
            self._values[key] = 0
            return 0
        if default is not None and key not in self._values:
            self._values[key] = default
        self._logger.warning("unsupported modeline '%s' option '%s', ignored", key, value)
        return -1

    def __repr__(self) -> str:
        return f"Modelines({self._values!r})"


def parse_modelines(
    lines: MutableSequence[str],
    *,
    plaintext: bool = False,
    source: object | None = None,
) -> Modelines:
    """Scan the head and tail of *lines* for modelines.

    The head window starts at five lines and grows by one for every modeline
    found in it. For plain text sources only whole-line modelines count, and
    they are blanked out in *lines* so they do not end up in the documentation.
    """
    modelines = Modelines(source=source)
    count = len(lines)

    index = 0
    limit = _HEAD_LINES
    while index < count and index < limit:
        if modelines.parse_line(lines[index], plaintext):
            if plaintext:
                lines[index] = ""
            limit += 1
        index += 1

    if index < count - _TAIL_LINES:
        index = count - _TAIL_LINES
    while index < count:
        if modelines.parse_line(lines[index], plaintext):
            if plaintext:
                lines[index] = ""
        index += 1

    return modelines


__all__ = ["LANGUAGE_MODES", "Modelines", "language_mode", "parse_modelines"]
