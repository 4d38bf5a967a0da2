"""CLI entrypoints for tocgen commands."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List

from .config import ConfigError, TocConfig, load_config
from .discovery import discover_documents
from .errors import DecodeError, MalformedTocBlock
from .logging import configure_logging, get_logger
from .patcher import InsertionPolicy
from .pipeline import TocGenerator, TocOptions, generate_toc
from .scanner import decode_document

EXIT_OK = 0
EXIT_STALE = 1
EXIT_MALFORMED = 3
EXIT_DECODE = 4
EXIT_IO = 5
EXIT_CONFIG = 6

STDIN_PATH = "-"


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


def _add_common_options(parser: argparse.ArgumentParser, *, multiple: bool = True) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .tocgen.yml file (defaults to the current directory).",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Omit headings deeper than this level.",
    )
    parser.add_argument(
        "--ordered",
        action="store_true",
        default=None,
        help="Render a numbered list instead of bullets.",
    )
    parser.add_argument(
        "--link-prefix",
        default=None,
        help="String prepended to each anchor (default '#').",
    )
    if multiple:
        parser.add_argument(
            "paths",
            nargs="*",
            default=["."],
            help="Files or directories to process; '-' reads standard input.",
        )
    else:
        parser.add_argument(
            "path",
            nargs="?",
            default=STDIN_PATH,
            help="Document to read ('-' for standard input, the default).",
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tocgen",
        description="Generate and maintain tables of contents in Markdown documents.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    update_parser = subparsers.add_parser(
        "update",
        help="Insert or refresh the TOC block in each document.",
    )
    _add_common_options(update_parser)
    update_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the changes as a unified diff without writing.",
    )
    update_parser.add_argument(
        "--insert",
        choices=[policy.value for policy in InsertionPolicy],
        default=None,
        help="Where to place a new TOC block when a document has none.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Exit non-zero when any document has a stale or missing TOC.",
    )
    _add_common_options(check_parser)

    print_parser = subparsers.add_parser(
        "print",
        help="Print the rendered TOC for a document without modifying it.",
    )
    _add_common_options(print_parser, multiple=False)

    return parser


def _resolve_options(args: argparse.Namespace, config: TocConfig) -> TocOptions:
    options = TocOptions.from_config(config)
    overrides: dict[str, object] = {}
    if args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    if args.ordered:
        overrides["ordered"] = True
    if args.link_prefix is not None:
        overrides["link_prefix"] = args.link_prefix
    if overrides:
        options.render = dataclasses.replace(options.render, **overrides)
    insert = getattr(args, "insert", None)
    if insert is not None:
        options.insert = InsertionPolicy.parse(insert)
    return options


def _read_stdin(options: TocOptions) -> str:
    return decode_document(sys.stdin.buffer.read(), encoding=options.encoding, source="<stdin>")


def _write_stdout(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _run_update(args: argparse.Namespace, config: TocConfig, options: TocOptions) -> int:
    generator = TocGenerator(options)
    logger = get_logger("cli")
    status = EXIT_OK
    file_args = [Path(raw) for raw in args.paths if raw != STDIN_PATH]
    if STDIN_PATH in args.paths:
        _write_stdout(generator.process(_read_stdin(options)).text)
    for path in discover_documents(file_args, include=config.include, exclude=config.exclude_paths):
        try:
            outcome = generator.update_file(path, dry_run=bool(args.dry_run))
        except (MalformedTocBlock, DecodeError, OSError) as exc:
            logger.error("%s", exc)
            status = status or _status_for(exc)
            continue
        if args.dry_run and outcome.changed:
            _write_stdout(outcome.diff)
    return status


def _run_check(args: argparse.Namespace, config: TocConfig, options: TocOptions) -> int:
    generator = TocGenerator(options)
    logger = get_logger("cli")
    status = EXIT_OK
    stale: List[str] = []
    file_args = [Path(raw) for raw in args.paths if raw != STDIN_PATH]
    if STDIN_PATH in args.paths:
        text = _read_stdin(options)
        if generator.process(text).text != text:
            stale.append(STDIN_PATH)
    for path in discover_documents(file_args, include=config.include, exclude=config.exclude_paths):
        try:
            current = generator.check_file(path)
        except (MalformedTocBlock, DecodeError, OSError) as exc:
            logger.error("%s", exc)
            status = status or _status_for(exc)
            continue
        if not current:
            stale.append(str(path))
    for name in stale:
        print(f"TOC out of date: {name}")
    if status:
        return status
    return EXIT_STALE if stale else EXIT_OK


def _run_print(args: argparse.Namespace, options: TocOptions) -> int:
    if args.path == STDIN_PATH:
        text = _read_stdin(options)
    else:
        text = TocGenerator(options).read(Path(args.path))
    _write_stdout(generate_toc(text, options))
    return EXIT_OK


def _status_for(exc: BaseException) -> int:
    if isinstance(exc, MalformedTocBlock):
        return EXIT_MALFORMED
    if isinstance(exc, DecodeError):
        return EXIT_DECODE
    if isinstance(exc, ConfigError):
        return EXIT_CONFIG
    return EXIT_IO


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tocgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file
    )

    try:
        config = load_config(args.config if args.config is not None else Path.cwd())
        options = _resolve_options(args, config)
        if args.command == "update":
            status = _run_update(args, config, options)
        elif args.command == "check":
            status = _run_check(args, config, options)
        elif args.command == "print":
            status = _run_print(args, options)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(2, "Unknown command\n")
    except (ConfigError, MalformedTocBlock, DecodeError, OSError) as exc:
        parser.exit(_status_for(exc), f"tocgen {args.command} failed: {exc}\n")

    if status:
        parser.exit(status)


if __name__ == "__main__":
    main(sys.argv[1:])
