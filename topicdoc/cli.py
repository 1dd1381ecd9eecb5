"""CLI entrypoints for topicdoc commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterator, List, Tuple

from .config import ConfigError, TopicDocConfig, load_config
from .languages import discover_languages, language_for
from .logging import configure_logging, get_logger
from .modelines import parse_modelines
from .parser import Parser, ParserError
from .source_scanner import SourceScanner

_LOGGER = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_json_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine readable JSON instead of text.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="topicdoc",
        description="Extract documentation topics from source comments.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser(
        "parse",
        help="Print the topics found in a file or source tree.",
    )
    _add_verbose_option(parse_parser, suppress_default=True)
    _add_json_option(parse_parser)
    parse_parser.add_argument(
        "--build",
        action="store_true",
        help="Apply group merging, sorting, summaries and the page footer.",
    )
    parse_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Source file or directory (defaults to current directory).",
    )

    symbols_parser = subparsers.add_parser(
        "symbols",
        help="Print the symbol definitions and references of a file or source tree.",
    )
    _add_verbose_option(symbols_parser, suppress_default=True)
    _add_json_option(symbols_parser)
    symbols_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Source file or directory (defaults to current directory).",
    )

    modelines_parser = subparsers.add_parser(
        "modelines",
        help="Print the modeline settings of a source file.",
    )
    _add_verbose_option(modelines_parser, suppress_default=True)
    modelines_parser.add_argument("file", help="Source file to inspect.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for topicdoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        if args.command == "parse":
            _run_parse(Path(args.path), as_json=bool(args.json), build=bool(args.build))
        elif args.command == "symbols":
            _run_symbols(Path(args.path), as_json=bool(args.json))
        elif args.command == "modelines":
            _run_modelines(Path(args.file))
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except (ConfigError, ParserError) as exc:
        parser.exit(1, f"topicdoc {args.command} failed: {exc}\nRun with --verbose for more details.\n")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _load_project(path: Path) -> Tuple[TopicDocConfig, Parser, List[str]]:
    if not path.exists():
        raise FileNotFoundError(f"Source path not found: {path}")
    root = path if path.is_dir() else path.parent
    config = load_config(root)
    parser = Parser(config)
    if path.is_dir():
        manifest = SourceScanner(parser.languages).scan(root, config.exclude_paths)
        sources = [file.path for file in manifest.files]
    else:
        sources = [path.name]
    return config, parser, sources


def _iter_loaded(path: Path) -> Iterator[Tuple[Parser, str]]:
    config, parser, sources = _load_project(path)
    for source in sources:
        source_path = config.root / source
        try:
            text = source_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            _LOGGER.warning("Skipping unreadable source %s: %s", source_path, exc)
            continue
        language = language_for(Path(source), parser.languages)
        parser.load(source, text=text, language=language)
        yield parser, source


def _run_parse(path: Path, *, as_json: bool, build: bool) -> None:
    results = []
    for parser, source in _iter_loaded(path):
        if build:
            topics = parser.parse_for_build(source).topics or []
        else:
            topics, _ = parser.topics(source)
        results.append(
            {
                "source": source,
                "menu_title": parser.default_menu_title(source),
                "topics": [topic.to_dict() for topic in topics],
            }
        )

    if as_json:
        print(json.dumps(results, indent=2))
        return

    for result in results:
        print(f"{result['source']} ({result['menu_title']})")
        for topic in result["topics"]:
            title = topic["title"] if topic["title"] is not None else "(untitled)"
            print(f"  {topic['line_number']:>5}  {topic['type']:<12} {title}")
            if topic["summary"]:
                print(f"         {topic['summary']}")


def _run_symbols(path: Path, *, as_json: bool) -> None:
    reports = [parser.parse_symbols(source) for parser, source in _iter_loaded(path)]

    if as_json:
        print(json.dumps([report.to_dict() for report in reports], indent=2))
        return

    for report in reports:
        print(report.source)
        for definition in report.definitions:
            print(f"  def  {definition.symbol}  ({definition.type})")
        for reference in report.references:
            print(f"  ref  {reference.symbol}")
        for image in report.images:
            print(f"  img  {image}")


def _run_modelines(path: Path) -> None:
    if not path.is_file():
        raise FileNotFoundError(f"Source file not found: {path}")
    language = language_for(path, discover_languages())
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    modelines = parse_modelines(lines, plaintext=bool(language and language.plaintext), source=path)
    for key in sorted(modelines):
        print(f"{key}={modelines[key]}")


if __name__ == "__main__":
    main(sys.argv[1:])
