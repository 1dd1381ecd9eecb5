"""Logging utilities for topicdoc parsing runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Tuple

_LOGGER_NAME = "topicdoc"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the topicdoc hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class SourceLogAdapter(logging.LoggerAdapter):
    """Suffix every message with the source file it concerns.

    Warnings about a file's content (modelines, dangling markup) are only useful
    when they say which file triggered them, so parsing code logs through one of
    these instead of the bare module logger.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        source = self.extra.get("source") if self.extra else None
        if source:
            return f"{msg} ({source})", kwargs
        return msg, kwargs


def source_logger(name: str, source: object | None) -> SourceLogAdapter:
    """Return a logger for *name* that tags messages with *source*."""
    return SourceLogAdapter(get_logger(name), {"source": str(source) if source is not None else None})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the topicdoc logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[topicdoc] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["SourceLogAdapter", "configure_logging", "get_logger", "source_logger"]
