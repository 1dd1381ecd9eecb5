"""Extract documentation topics from source comments."""

from __future__ import annotations

from .config import ConfigError, TopicDocConfig, load_config
from .models import Topic, TopicError
from .parser import Parser, ParserError

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "Parser",
    "ParserError",
    "Topic",
    "TopicDocConfig",
    "TopicError",
    "__version__",
    "load_config",
]
