"""Command line entry point for the blame language server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Iterable

from .config import BlameConfig, load_config
from .format import calendar_date, short_hash
from .lsp import BlameService, OpenUrl

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _resolve_config(args: argparse.Namespace) -> BlameConfig:
    config = load_config(args.config)
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_file is not None:
        config.log_file = args.log_file
    if args.git is not None:
        config.git_executable = args.git
    return config


def _configure_logging(config: BlameConfig) -> None:
    # stdout carries the protocol stream, so logs never go there.
    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(config.log_level.upper())


def _serve(args: argparse.Namespace, config: BlameConfig) -> int:
    """Start the language server on stdio."""
    from .lsp.server import create_server

    server = create_server(config)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Shutting down server")
    return 0


async def _describe_line(service: BlameService, path: str, line: int):
    record = await service.attribution(path, line)
    if record is None:
        return None, []
    # served from the cache filled just above
    offers = await service.offer_actions(path, line - 1)
    return record, list(offers)


def _blame(args: argparse.Namespace, config: BlameConfig) -> int:
    service = BlameService.from_config(config)
    path = os.path.abspath(args.file)
    record, offers = asyncio.run(_describe_line(service, path, args.line))
    if record is None:
        print(f"No blame info for {args.file}:{args.line}", file=sys.stderr)
        return 1

    for offer in offers:
        print(offer.title)
    date = calendar_date(record.authored_at) if record.authored_at is not None else "-"
    print(f"{short_hash(record.commit_id)} {date}")
    return 0


def _link(args: argparse.Namespace, config: BlameConfig) -> int:
    service = BlameService.from_config(config)
    outcome = asyncio.run(service.resolve_permalink(os.path.abspath(args.file), args.line))
    if isinstance(outcome, OpenUrl):
        print(outcome.url)
        return 0
    print(outcome.message, file=sys.stderr)
    return 1


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"line numbers start at 1, got {value}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blame-lsp", description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON config file (defaults to ~/.blamelsp/config.json)",
    )
    parser.add_argument("--log-level", help="Logging level, e.g. DEBUG or INFO")
    parser.add_argument("--log-file", type=Path, help="Write logs to this file instead of stderr")
    parser.add_argument("--git", help="Path to the git executable")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the language server on stdio")
    serve_parser.set_defaults(func=_serve)

    blame_parser = subparsers.add_parser("blame", help="Print the blame label of one line")
    blame_parser.add_argument("file", help="File to inspect")
    blame_parser.add_argument("line", type=_positive_int, help="One-based line number")
    blame_parser.set_defaults(func=_blame)

    link_parser = subparsers.add_parser("link", help="Print the permalink of one line")
    link_parser.add_argument("file", help="File to inspect")
    link_parser.add_argument("line", type=_positive_int, help="One-based line number")
    link_parser.set_defaults(func=_link)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    config = _resolve_config(args)
    _configure_logging(config)
    return args.func(args, config)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
