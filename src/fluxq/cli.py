from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import polars as pl
import requests
from dotenv import load_dotenv

from .core.errors import FluxCsvError, FluxQueryError
from .io.config import ClientSettings
from .io.errors import IoError
from .io.frame import tables_to_frame
from .io.lines import LineReader
from .io.parser import FluxCsvParser
from .io.query_api import QueryApi
from .io.transport import FileResponseBody
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)

FORMATS = ("table", "csv", "json")

_FAILURES = (FluxCsvError, FluxQueryError, IoError, requests.RequestException, OSError)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--format", choices=FORMATS, default="table", help="Output format.")
    p.add_argument("--limit", type=int, default=None, help="Print at most N rows.")
    p.add_argument("--log-level", type=str, default="WARNING", help="Logging level.")


def _emit(df: pl.DataFrame, fmt: str, limit: int | None) -> None:
    """Print a DataFrame in the requested format.

    Args:
        df: Decoded result.
        fmt: One of FORMATS.
        limit: Optional row cap.
    """
    if limit is not None:
        df = df.head(limit)
    if fmt == "csv":
        print(df.write_csv(), end="")
    elif fmt == "json":
        print(df.write_json())
    else:
        with pl.Config(tbl_rows=-1):
            print(df)


def _cmd_query(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="fluxq query", description="Run a Flux query and print the result.")
    p.add_argument("flux", type=str, help="Flux script text.")
    p.add_argument("--org", type=str, default=None, help="Organization (overrides FLUXQ_ORG).")
    p.add_argument("--url", type=str, default=None, help="Server URL (overrides FLUXQ_URL).")
    p.add_argument("--raw", action="store_true", help="Print the undecoded response body.")
    p.add_argument(
        "--no-env",
        action="store_true",
        help="Do not auto-load .env (by default, .env is loaded if present).",
    )
    _add_common(p)
    args = p.parse_args(argv)

    setup_logging(args.log_level)
    if not args.no_env:
        load_dotenv()
    settings = ClientSettings.load()
    if args.url:
        settings = replace(settings, url=args.url)
    if args.org:
        settings = replace(settings, org=args.org)

    try:
        with QueryApi(settings) as api:
            if args.raw:
                text = api.query_raw(args.flux)
                lines = text.split("\n")
                if args.limit is not None:
                    lines = lines[: args.limit]
                print("\n".join(lines))
            else:
                _emit(api.query_data_frame(args.flux), args.format, args.limit)
    except _FAILURES as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    return 0


def _cmd_parse(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="fluxq parse", description="Decode a saved annotated CSV response file."
    )
    p.add_argument("path", type=str, help="Path to the response file.")
    _add_common(p)
    args = p.parse_args(argv)

    setup_logging(args.log_level)
    try:
        body = FileResponseBody(Path(args.path).open("rb"))
        try:
            tables = FluxCsvParser(LineReader(body.iter_chunks())).tables()
        finally:
            body.close()
    except _FAILURES as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    logger.info("decoded %d tables from %s", len(tables), args.path)
    _emit(tables_to_frame(tables), args.format, args.limit)
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fluxq", description="Flux query client CLI.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("query")
    sub.add_parser("parse")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    if cmd == "query":
        code = _cmd_query(rest)
    elif cmd == "parse":
        code = _cmd_parse(rest)
    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
