"""CLI entrypoints for doclets commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, DocletsConfig, load_config
from .diagnostics import DocletError, Reporter
from .events import files_from_json
from .logging import configure_logging
from .pipeline import Pipeline
from .tags.builtin import DEFAULT_DICTIONARIES, available_dictionaries, build_dictionaries


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


def _add_dictionary_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dictionary",
        action="append",
        choices=available_dictionaries(),
        help="Tag dictionary to use; repeat to merge several (defaults to jsdoc and closure).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doclets",
        description="Build a doclet database from documentation comments reported by a source walker.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write the full log to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Run the doclet pipeline over a JSON file of walker events.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_dictionary_option(build_parser)
    build_parser.add_argument("events", help="Path to the walker events JSON file.")
    build_parser.add_argument(
        "--config",
        default=".",
        help="Path to .doclets.yml or the directory containing it (defaults to current directory).",
    )
    build_parser.add_argument(
        "--allow-unknown-tags",
        action="store_true",
        help="Keep tags the dictionary does not define instead of reporting them.",
    )
    build_parser.add_argument(
        "--prune",
        action="store_true",
        help="Drop undocumented, ignored and filtered-access doclets from the output.",
    )
    build_parser.add_argument(
        "--output",
        "-o",
        help="Write the doclet JSON here instead of standard output.",
    )

    tags_parser = subparsers.add_parser(
        "tags",
        help="List the tags recognized by the selected dictionaries.",
    )
    _add_verbose_option(tags_parser, suppress_default=True)
    _add_dictionary_option(tags_parser)

    return parser


def _effective_config(args: argparse.Namespace) -> DocletsConfig:
    config = load_config(Path(args.config))
    if args.dictionary:
        config.tags.dictionaries = list(args.dictionary)
    if args.allow_unknown_tags:
        config.tags.allow_unknown_tags = True
    return config


def _run_build(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        config = _effective_config(args)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    events_path = Path(args.events)
    try:
        files = files_from_json(json.loads(events_path.read_text(encoding="utf-8")))
    except FileNotFoundError:
        parser.exit(1, f"Walker events file not found: {events_path}\n")
    except ValueError as exc:
        parser.exit(1, f"Invalid walker events in {events_path}: {exc}\n")

    reporter = Reporter()
    try:
        pipeline = Pipeline.from_config(config, reporter)
        database = pipeline.run(files)
    except DocletError as exc:
        parser.exit(1, f"doclets build failed: {exc}\n")
    except ValueError as exc:
        parser.exit(1, f"doclets build failed: {exc}\nRun with --verbose for more details.\n")

    if args.prune:
        database = database.pruned(config.prune)
    payload = json.dumps(database.to_dicts(), indent=2)
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote {len(database)} doclet(s) to {args.output}")
    else:
        print(payload)

    if reporter.has_errors():
        parser.exit(1, "doclets build reported errors. Run with --verbose for details.\n")


def _run_tags(args: argparse.Namespace) -> None:
    dictionary = build_dictionaries(args.dictionary or DEFAULT_DICTIONARIES)
    for title in dictionary.titles():
        definition = dictionary.lookup(title)
        synonyms = sorted(definition.synonyms) if definition else []
        suffix = f" ({', '.join(synonyms)})" if synonyms else ""
        print(f"@{title}{suffix}")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for doclets commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=args.log_file)

    if args.command == "build":
        _run_build(parser, args)
    elif args.command == "tags":
        _run_tags(args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
