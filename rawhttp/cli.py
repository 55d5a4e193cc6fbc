"""Command-line interface for rawhttp."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console

from . import __version__
from .config import ConfigError, Settings, load_environment, load_settings
from .errors import RequestParseError
from .logging_utils import configure_logging
from .parser import parse_request
from .render import render_json, rich_request
from .request import Request

FORMATS = ("text", "json", "raw")


def _add_format_argument(parser: argparse.ArgumentParser, default: str) -> None:
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default=default,
        help="Output rendering: summary text, JSON fields or raw request text",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rawhttp",
        description="Parse raw HTTP/1.1 request text or build it from fields.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-json", action="store_true", help="Emit structured JSON logs to the log file")
    parser.add_argument("--log-file", type=Path, help="Write logs to the specified path")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("--quiet", action="store_true", help="Reduce logging output")

    commands = parser.add_subparsers(dest="command", required=True)

    parse_cmd = commands.add_parser("parse", help="Parse a raw request from a file or stdin")
    parse_cmd.add_argument("file", nargs="?", type=Path, help="Request file (defaults to stdin)")
    parse_cmd.add_argument(
        "--strict",
        action="store_true",
        help="Fail when any line of the request is malformed",
    )
    _add_format_argument(parse_cmd, "text")
    parse_cmd.set_defaults(handler=_run_parse)

    build_cmd = commands.add_parser("build", help="Build raw request text from fields")
    build_cmd.add_argument("--method", default="GET", help="Request method token")
    build_cmd.add_argument("--path", default="/", help="Request path without query string")
    build_cmd.add_argument("--http-version", default="HTTP/1.1", help="HTTP version token")
    build_cmd.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Header line; repeated names update the earlier header",
    )
    build_cmd.add_argument(
        "-q",
        "--query",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Query parameter; repeated names update the earlier parameter",
    )
    build_cmd.add_argument("--body", default="", help="Request body")
    _add_format_argument(build_cmd, "raw")
    build_cmd.set_defaults(handler=_run_build)
    return parser


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(None if argv is None else list(argv))


def configure_cli_logging(args: argparse.Namespace, settings: Settings) -> None:
    level = settings.log_level
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    configure_logging(
        level=level,
        json_logs=args.log_json or settings.log_json,
        logfile=args.log_file or settings.log_file,
    )


def _emit(console: Console, request: Request, output_format: str) -> None:
    if output_format == "json":
        print(render_json(request))
    elif output_format == "raw":
        # rich strips carriage returns, so raw text bypasses the console
        sys.stdout.write(request.build())
    else:
        console.print(rich_request(request), soft_wrap=True)


def _read_source(path: Optional[Path]) -> str:
    if path is None:
        return sys.stdin.read()
    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def _run_parse(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    logger = logging.getLogger("rawhttp.cli")
    try:
        raw = _read_source(args.file)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Unable to read request: %s", exc)
        return 1

    try:
        result = parse_request(raw, strict=args.strict or settings.strict)
    except RequestParseError as exc:
        logger.error("Request rejected: %s", exc)
        return 1

    if not result.ok:
        logger.warning("Parsed with %d skipped item(s)", len(result.diagnostics))
    _emit(console, result.request, args.format)
    return 0


def _split_pair(value: str, separator: str, label: str) -> tuple[str, str]:
    name, found, rest = value.partition(separator)
    if not found or not name:
        raise ValueError(f"Invalid {label} argument: `{value}`")
    return name, rest


def _run_build(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    logger = logging.getLogger("rawhttp.cli")
    request = Request()
    try:
        request.set_method(args.method)
        for header in args.header:
            request.add_header(*_split_pair(header, ": ", "header"))
        for query in args.query:
            request.add_query(*_split_pair(query, "=", "query"))
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    request.set_path(args.path)
    request.set_version(args.http_version)
    request.set_body(args.body)
    _emit(console, request, args.format)
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    load_environment()
    args = parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        Console(stderr=True).print(f"rawhttp: {exc}", markup=False)
        return 2

    configure_cli_logging(args, settings)
    console = Console(highlight=False)
    return args.handler(args, settings, console)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
