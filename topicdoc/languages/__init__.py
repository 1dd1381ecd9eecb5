"""Language front ends and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Set

from ..modelines import language_mode
from .base import CommentSink, FileParse, Language, ScopeFrame, ScopeTracker
from .cpp import CppLanguage
from .text import TextLanguage

_ENTRY_POINT_GROUP = "topicdoc.languages"

_BUILTIN_FACTORIES: dict[str, Callable[[], Language]] = {
    "cpp": CppLanguage,
    "text": TextLanguage,
}


def discover_languages(enabled: Sequence[str] | None = None) -> List[Language]:
    """Return instantiated front ends, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled:
        enabled_set = {name.lower() for name in enabled}

    languages: List[Language] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Language]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Language):
            raise TypeError(f"Language factory for '{name}' did not return a Language instance")
        languages.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Failed to load language entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Language:
            return _coerce_language(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown languages requested: {missing}")

    return languages


def language_for(
    path: Path,
    languages: Iterable[Language] | None = None,
    mode: Optional[str] = None,
) -> Optional[Language]:
    """Pick the front end for *path*, or for the modeline language *mode*."""
    candidates = list(languages) if languages is not None else discover_languages()
    if mode:
        wanted = language_mode(mode) or mode.lower()
        for language in candidates:
            if language.name == wanted:
                return language
    for language in candidates:
        if language.supports(path):
            return language
    return None


def _coerce_language(obj: object) -> Language:
    if isinstance(obj, Language):
        return obj
    if isinstance(obj, type) and issubclass(obj, Language):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Language):
            return instance
    raise TypeError("Language entry point must be a Language subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover
        return []

    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)  # type: ignore[return-value]

    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "CommentSink",
    "CppLanguage",
    "FileParse",
    "Language",
    "ScopeFrame",
    "ScopeTracker",
    "TextLanguage",
    "discover_languages",
    "language_for",
]
