"""Source tree scanning for files with a registered front end."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import CONFIG_FILENAME, ConfigError, load_config
from .languages import Language, discover_languages, language_for
from .logging import get_logger
from .models import SourceFile, SourceManifest

_LOGGER = get_logger("scanner")

_SKIPPED_DIRS = frozenset(
    {".git", ".hg", ".svn", "CVS", ".venv", "node_modules", "__pycache__", ".idea", ".vs", "build", "dist"}
)


@dataclass(frozen=True)
class IgnoreRule:
    """One gitignore style pattern.

    A pattern containing a slash is matched against the whole path relative to
    the scan root; any other pattern is matched against each path component.
    """

    pattern: str
    negate: bool = False
    directory_only: bool = False
    anchored: bool = False

    @classmethod
    def from_line(cls, line: str) -> Optional["IgnoreRule"]:
        """Parse a ``.gitignore`` line; comments and blank lines give ``None``."""
        line = line.strip()
        if not line or line.startswith("#"):
            return None
        if line.startswith("!"):
            return build_ignore_rule(line[1:], negate=True)
        return build_ignore_rule(line)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if not self.anchored:
            return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))
        if fnmatchcase(rel_path, self.pattern):
            return True
        return self.directory_only and rel_path.startswith(self.pattern + "/")


def build_ignore_rule(pattern: str, negate: bool = False) -> Optional[IgnoreRule]:
    pattern = pattern.strip()
    directory_only = pattern.endswith("/")
    pattern = pattern.rstrip("/")
    anchored = "/" in pattern
    pattern = pattern.lstrip("/")
    if not pattern:
        return None
    return IgnoreRule(pattern, negate, directory_only, anchored)


def should_ignore(rel_path: str, is_dir: bool, rules: Iterable[IgnoreRule]) -> bool:
    """Apply *rules* in order; the last matching rule decides."""
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class SourceScanner:
    """Walks a source tree and keeps the files some front end can parse."""

    def __init__(self, languages: Optional[Sequence[Language]] = None) -> None:
        self.languages = list(languages) if languages is not None else discover_languages()

    def scan(self, root: str | Path, exclude_paths: Optional[Sequence[str]] = None) -> SourceManifest:
        """Return the manifest of parseable files under *root*.

        *exclude_paths* defaults to the ``exclude_paths`` of the tree's
        ``.topicdoc.yml``; ``.gitignore`` rules always apply.
        """
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Source path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {root}")

        rules = self._gitignore_rules(root_path) + self._exclude_rules(root_path, exclude_paths)
        manifest = SourceManifest(root=str(root_path))

        for rel_path, path in self._walk(root_path, rules):
            language = language_for(path, self.languages)
            if language is None:
                continue
            try:
                size = path.stat().st_size
            except OSError as exc:
                _LOGGER.warning("Skipping unreadable source %s: %s", path, exc)
                continue
            manifest.files.append(SourceFile(rel_path, language.name, size))

        _LOGGER.debug("Scanner found %d source files under %s", len(manifest.files), root_path)
        return manifest

    # -- helpers -------------------------------------------------------------

    @staticmethod
    def _gitignore_rules(root: Path) -> List[IgnoreRule]:
        path = root / ".gitignore"
        if not path.is_file():
            return []
        rules = (IgnoreRule.from_line(line) for line in path.read_text(encoding="utf-8").splitlines())
        return [rule for rule in rules if rule is not None]

    @staticmethod
    def _exclude_rules(root: Path, exclude_paths: Optional[Sequence[str]]) -> List[IgnoreRule]:
        if exclude_paths is None:
            try:
                exclude_paths = load_config(root / CONFIG_FILENAME).exclude_paths
            except ConfigError as exc:
                _LOGGER.warning("Ignoring exclude_paths from %s: %s", root / CONFIG_FILENAME, exc)
                exclude_paths = []
        rules = (build_ignore_rule(pattern) for pattern in exclude_paths)
        return [rule for rule in rules if rule is not None]

    @staticmethod
    def _walk(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Tuple[str, Path]]:
        """Yield ``(relative posix path, path)`` in sorted order, pruning ignored directories."""
        for dirpath, dirnames, filenames in os.walk(root):
            base = Path(dirpath).relative_to(root).as_posix()
            prefix = "" if base == "." else base + "/"

            dirnames[:] = [
                name
                for name in sorted(dirnames)
                if name not in _SKIPPED_DIRS and not should_ignore(prefix + name, True, rules)
            ]
            for name in sorted(filenames):
                if not should_ignore(prefix + name, False, rules):
                    yield prefix + name, Path(dirpath) / name


__all__ = ["IgnoreRule", "SourceScanner", "build_ignore_rule", "should_ignore"]
