"""Configuration loading for topicdoc (.topicdoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

CONFIG_FILENAME = ".topicdoc.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ParserSettings:
    """Comment parsing and reconciliation switches."""

    tab_length: int = 4
    indent: Optional[int] = None
    documented_only: bool = False
    auto_group: bool = True
    only_file_titles: bool = False
    page_footer: Optional[str] = None


@dataclass
class LanguageConfig:
    """Front end enablement."""

    enabled: List[str] = field(default_factory=list)


@dataclass
class TopicDocConfig:
    """Represents the high-level settings defined in .topicdoc.yml."""

    root: Path
    parser: ParserSettings = field(default_factory=ParserSettings)
    languages: LanguageConfig = field(default_factory=LanguageConfig)
    topic_types_file: Optional[Path] = None
    exclude_paths: List[str] = field(default_factory=list)

    @property
    def project_name(self) -> str:
        return self.root.name or "project"


def load_config(config_path: Path) -> TopicDocConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TopicDocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    parser_data = _as_dict(data.get("parser"))
    parser = ParserSettings()
    if parser_data:
        tab_length = _as_int(parser_data.get("tab_length"))
        if tab_length is not None:
            if tab_length < 1:
                raise ConfigError("parser.tab_length must be a positive integer")
            parser.tab_length = tab_length
        parser.indent = _as_int(parser_data.get("indent"))
        parser.documented_only = _as_bool(parser_data.get("documented_only")) or False
        auto_group = _as_bool(parser_data.get("auto_group"))
        parser.auto_group = True if auto_group is None else auto_group
        parser.only_file_titles = _as_bool(parser_data.get("only_file_titles")) or False
        parser.page_footer = _as_str(parser_data.get("page_footer"))

    language_data = _as_dict(data.get("languages"))
    languages = LanguageConfig()
    if language_data:
        languages.enabled = _as_str_list(language_data.get("enabled"))

    topic_types_str = _as_str(data.get("topic_types"))
    topic_types_file = root / topic_types_str if topic_types_str else None

    exclude_paths = _as_str_list(data.get("exclude_paths"))

    return TopicDocConfig(
        root=root,
        parser=parser,
        languages=languages,
        topic_types_file=topic_types_file,
        exclude_paths=exclude_paths,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    if isinstance(value, int):
        return bool(value)
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "LanguageConfig",
    "ParserSettings",
    "TopicDocConfig",
    "load_config",
]
