"""CLI entry and startup wiring."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from .constants import APP_NAME, DEFAULT_PREFIX, ERROR_PREFIX
from .errors import NixdocError
from .logging import log_event, setup_logging
from .path_mapping import map_path_argument
from .renderer import write_document
from .service import generate_document


@dataclass(frozen=True)
class AppArgs:
    source_file: Path
    category: str
    description: str
    prefix: str
    output_file: Path | None
    log_file: Path | None


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    started = time.monotonic()
    try:
        app_args = _resolve_args(args)
    except NixdocError as exc:
        print(f"{ERROR_PREFIX} {exc}", file=sys.stderr)
        return 1

    setup_logging(app_args.log_file)
    try:
        log_event(
            "app_start",
            source_file=app_args.source_file,
            output_file=app_args.output_file,
            log_file=app_args.log_file,
            category=app_args.category,
            prefix=app_args.prefix,
        )
        return _run(app_args, started)
    except NixdocError as exc:
        log_event(
            "app_stop",
            level=logging.ERROR,
            reason="error",
            elapsed_ms=_elapsed_ms(started),
            error_type=type(exc).__name__,
            error=str(exc),
        )
        print(f"{ERROR_PREFIX} {exc}", file=sys.stderr)
        return 1


def _run(app_args: AppArgs, started: float) -> int:
    document, entry_count = generate_document(
        app_args.source_file,
        app_args.category,
        app_args.description,
        app_args.prefix,
    )
    write_document(document, app_args.output_file)
    log_event(
        "document_written",
        output_file=app_args.output_file,
        entry_count=entry_count,
        output_bytes=len(document),
    )
    log_event("app_stop", reason="done", elapsed_ms=_elapsed_ms(started))
    return 0


def _resolve_args(args: argparse.Namespace) -> AppArgs:
    app_root_abs = Path(__file__).resolve().parent

    def _map(raw: str, argument_name: str) -> Path:
        return map_path_argument(
            raw_path=raw, app_root_abs=app_root_abs, argument_name=argument_name
        )

    return AppArgs(
        source_file=_map(args.file, "--file"),
        category=args.category,
        description=args.description,
        prefix=args.prefix,
        output_file=_map(args.output, "--output") if args.output is not None else None,
        log_file=_map(args.log, "--log") if args.log is not None else None,
    )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Generate DocBook from Nix library functions.",
    )
    parser.add_argument(
        "-f",
        "--file",
        required=True,
        help="Nix file to process (absolute, relative, or mapped with ~ / @).",
    )
    parser.add_argument(
        "-c",
        "--category",
        required=True,
        help="Name of the function category (e.g. 'strings', 'attrsets').",
    )
    parser.add_argument(
        "-d",
        "--description",
        required=True,
        help="Description of the function category.",
    )
    parser.add_argument(
        "--prefix",
        default=DEFAULT_PREFIX,
        help=f"Identifier prefix for generated ids (default: {DEFAULT_PREFIX}).",
    )
    parser.add_argument(
        "-o",
        "--output",
        required=False,
        help="Output file. Defaults to stdout.",
    )
    parser.add_argument(
        "--log",
        required=False,
        help="Optional structured log file. Logging is off without it.",
    )
    return parser
