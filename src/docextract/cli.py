# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""docextract CLI: extract documentation text from rendered HTML snapshots.

Usage:
    docextract extract FILE [--json] [--debug] [--encoding ENC]
    docextract extract - < snapshot.html
    python -m docextract.cli extract FILE

Exit codes:
    0  content extracted (written to stdout)
    1  input error (unreadable file, empty or unparseable HTML, bad config)
    2  no tier produced acceptable content
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from docextract import logging_config
from docextract.config import Thresholds
from docextract.dom import parse_document
from docextract.errors import ConfigError, DocExtractError, DocumentParseError
from docextract.pipeline import ExtractionPipeline
from docextract.trace import ExtractionTrace

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_INSUFFICIENT = 2


def _read_input(source: str, encoding: str | None) -> str | bytes:
    """Read the snapshot from a path or ``-`` (stdin).

    Bytes are returned untouched unless an explicit encoding is requested.
    """
    if source == "-":
        data = sys.stdin.buffer.read()
    else:
        data = Path(source).read_bytes()
    if encoding:
        return data.decode(encoding, errors="replace")
    return data


def cmd_extract(args: argparse.Namespace) -> int:
    """Extract content from one snapshot and write it to stdout."""
    source = args.file
    logging_config.bind_source(source)
    try:
        try:
            raw = _read_input(source, args.encoding)
        except (OSError, LookupError) as e:
            print(f"Error: cannot read {source}: {e}", file=sys.stderr)
            return EXIT_INPUT_ERROR

        try:
            thresholds = Thresholds.from_env()
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_INPUT_ERROR

        try:
            root = parse_document(raw)
        except DocumentParseError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_INPUT_ERROR

        trace = ExtractionTrace()
        result = ExtractionPipeline(thresholds).extract(root, trace)

        if args.json:
            payload = {
                "content": result.content if result is not None else None,
                "tier": result.tier.label if result is not None else None,
            }
            if args.debug:
                payload["debug"] = trace.as_dict()
            print(json.dumps(payload, ensure_ascii=False, indent=2))
        else:
            if result is not None:
                print(result.content)
            if args.debug:
                for key, value in trace.as_dict().items():
                    print(f"{key}: {value}", file=sys.stderr)

        if result is None:
            if not args.json:
                print("Error: no acceptable content found.", file=sys.stderr)
            return EXIT_INSUFFICIENT
        return EXIT_OK
    finally:
        logging_config.clear_source()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract primary documentation text from rendered HTML snapshots",
        prog="docextract",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr diagnostics (default: WARNING)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    _extract_epilog = """\
examples:
  %(prog)s page.html                 Print extracted text
  %(prog)s page.html --json --debug  JSON with the extraction trace
  cat page.html | %(prog)s -         Read the snapshot from stdin
"""
    p_extract = subparsers.add_parser(
        "extract",
        help="Extract content from one HTML snapshot",
        epilog=_extract_epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p_extract.add_argument("file", metavar="FILE", help="Snapshot path, or - for stdin")
    p_extract.add_argument("--json", action="store_true", help="Write a JSON object instead of plain text")
    p_extract.add_argument("--debug", action="store_true", help="Include the extraction trace")
    p_extract.add_argument("--encoding", type=str, metavar="ENC", help="Decode input with ENC instead of UTF-8")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging_config.configure(json_output=args.json_logs, level=args.log_level)

    commands = {"extract": cmd_extract}
    try:
        code = commands[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except DocExtractError as e:
        logger.debug("Extraction failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)
    sys.exit(code)


if __name__ == "__main__":
    main()
