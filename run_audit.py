#!/usr/bin/env python3
"""
Command-line script to audit HTML files.

Loads each file, runs the full analysis, and prints one JSON entry per file.

Usage:
    python run_audit.py page.html
    python run_audit.py page1.html page2.html --current-host example.com
    python run_audit.py *.html --no-validate -o report.json
    python run_audit.py page.html --stats
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from html_audit.main import HTMLAnalysisEngine
from html_audit.loader import Loader
from html_audit.config import EngineConfig
from html_audit.exceptions import ValidationError
from html_audit.logger import setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Audit HTML files for structure, SEO, accessibility and performance"
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="HTML files to audit"
    )
    parser.add_argument(
        "--output", "-o",
        help="Output file for the report (default: print to stdout)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip structural validation"
    )
    parser.add_argument(
        "--preserve-whitespace",
        action="store_true",
        help="Keep whitespace in text nodes as written"
    )
    parser.add_argument(
        "--xml",
        action="store_true",
        help="Parse input as XML"
    )
    parser.add_argument(
        "--current-host",
        help="Host the pages are served from (decides which links are external)"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Append engine statistics to the output"
    )
    return parser


def audit_file(engine: HTMLAnalysisEngine, file_path: Path) -> dict:
    """Audit one file; failures are reported in the entry, never raised."""
    try:
        # Read bytes so the declared charset decides the decoding
        raw_bytes = file_path.read_bytes()
        charset = Loader.detect_charset_from_bytes(raw_bytes)
        try:
            html = raw_bytes.decode(charset, errors='replace')
        except LookupError:
            html = raw_bytes.decode('utf-8', errors='replace')

        result = engine.parse_html(html)
        print(
            f"  ✓ SEO {result.data.seo.score}, "
            f"accessibility {result.data.accessibility.score}, "
            f"performance {result.data.performance.score}",
            file=sys.stderr
        )
        return {
            "file": str(file_path),
            "status": "success",
            "duration_ms": round(result.duration, 2),
            "report": result.data.model_dump(),
        }

    except ValidationError as e:
        print(f"  ✗ Error: {e.message}", file=sys.stderr)
        return {
            "file": str(file_path),
            "status": "error",
            "error": e.to_response(),
        }

    except OSError as e:
        print(f"  ✗ Error: {e}", file=sys.stderr)
        return {
            "file": str(file_path),
            "status": "error",
            "error": {"error": type(e).__name__, "message": str(e)},
        }


def main(argv=None) -> int:
    # Load .env file so HTML_AUDIT_* settings apply
    load_dotenv()

    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logger(level=log_level)

    overrides = {}
    if args.no_validate:
        overrides["validate_html"] = False
    if args.preserve_whitespace:
        overrides["preserve_whitespace"] = True
    if args.xml:
        overrides["xml_mode"] = True
    if args.current_host:
        overrides["current_host"] = args.current_host

    engine = HTMLAnalysisEngine(EngineConfig.from_env(**overrides), log_level=log_level)

    results = []
    for file_path in map(Path, args.files):
        print(f"Auditing: {file_path.name}", file=sys.stderr)
        results.append(audit_file(engine, file_path))

    output = {"results": results}
    if args.stats:
        output["stats"] = engine.get_parsing_stats().model_dump()
    output_json = json.dumps(output if args.stats else results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output_json, encoding="utf-8")
        print(f"\nReport saved to: {args.output}", file=sys.stderr)
    else:
        print(output_json)

    return 0 if all(r["status"] == "success" for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
