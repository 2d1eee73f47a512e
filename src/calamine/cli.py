# src/calamine/cli.py
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from calamine.controllers.extraction_controller import ExtractionController
from calamine.engine import ContentExtractor
from calamine.managers.config_manager import config_manager
from calamine.model import ExtractionSettings
from calamine.utils.configure_logging import configure_from_settings

logger = logging.getLogger(__name__)

help_text = """
  calamine extract <FILE|-> [--base-url URL] [--annotate] [--row-scan-limit N]
                   [--signature SEL ...] [--content-only] [--output FILE]
      Extracts the main content of one HTML document.

  calamine batch <INPUT_DIR> <OUTPUT_DIR> [--workers N] [--pattern GLOB]
                 [--content-only] [--no-progress]
      Extracts every matching document of a directory in parallel.
""".strip()


def _build_settings(pargs: argparse.Namespace) -> Optional[ExtractionSettings]:
    """CLI > config > defaults. Prints and returns None on invalid values."""
    try:
        return ExtractionSettings.from_config(
            annotate=True if getattr(pargs, "annotate", False) else None,
            row_scan_limit=getattr(pargs, "row_scan_limit", None),
            signatures=getattr(pargs, "signature", None),
        )
    except ValidationError as e:
        print(f"❌ Invalid extraction settings: {e}")
        return None


def handle_extract(args: List[str], _stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="calamine extract", description="Extract the main content of a document.")
    parser.add_argument("source", metavar="FILE", help="HTML file to read, or '-' for stdin.")
    parser.add_argument("--base-url", dest="base_url", default=None, help="Base URL used to judge image URLs.")
    parser.add_argument("--annotate", action="store_true", help="Write score attributes onto elements.")
    parser.add_argument("--row-scan-limit", dest="row_scan_limit", type=int, default=None,
                        help="Rows inspected when classifying single-column tables.")
    parser.add_argument("--signature", action="append", default=None,
                        help="Content signature selector (repeatable, replaces the defaults).")
    parser.add_argument("--content-only", action="store_true", help="Output the body's inner HTML only.")
    parser.add_argument("--output", "-o", default=None, help="Write the result to a file instead of stdout.")

    try:
        pargs = parser.parse_args(args)
    except SystemExit:
        return 1

    try:
        if pargs.source == "-":
            html = _stdin if _stdin is not None else sys.stdin.read()
        else:
            html = Path(pargs.source).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"❌ Error: Could not read '{pargs.source}': {e}")
        return 1

    settings = _build_settings(pargs)
    if settings is None:
        return 1

    try:
        result = ContentExtractor(settings).extract(html, base_url=pargs.base_url)
    except Exception as e:
        logger.error("Extraction failed: %s", e, exc_info=True)
        print(f"❌ Extraction error: {e}")
        return 1

    output = result.content if pargs.content_only else result.html
    if pargs.output:
        try:
            Path(pargs.output).write_text(output, encoding="utf-8")
        except OSError as e:
            print(f"❌ Error: Could not write '{pargs.output}': {e}")
            return 1
        report = result.report
        print(f"✅ Extracted via {report.method}"
              + (f" (<{report.root_tag}>)" if report.root_tag else "")
              + f" into {pargs.output}.")
    else:
        sys.stdout.write(output + "\n")
    return 0


def handle_batch(args: List[str], _stdin: Optional[str] = None) -> int:
    default_workers = config_manager.get_nested("batch.workers", os.cpu_count() or 4)
    parser = argparse.ArgumentParser(prog="calamine batch", description="Extract a directory of documents.")
    parser.add_argument("input_dir", metavar="INPUT_DIR", type=Path)
    parser.add_argument("output_dir", metavar="OUTPUT_DIR", type=Path)
    parser.add_argument("--workers", type=int, default=default_workers,
                        help=f"Number of parallel processes (default: {default_workers}).")
    parser.add_argument("--pattern", default=config_manager.get_nested("batch.pattern", "*.html"),
                        help="Glob of the files to process.")
    parser.add_argument("--content-only", action="store_true", help="Write the body's inner HTML only.")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars.")

    try:
        pargs = parser.parse_args(args)
    except SystemExit:
        return 1

    if not pargs.input_dir.is_dir():
        print(f"❌ Error: '{pargs.input_dir}' is not a directory.")
        return 1
    if pargs.workers < 1:
        print("❌ Error: --workers must be at least 1.")
        return 1

    settings = _build_settings(pargs)
    if settings is None:
        return 1

    show_progress = not pargs.no_progress and bool(config_manager.get_nested("batch.show_progress", True))
    controller = ExtractionController(default_workers=pargs.workers)
    try:
        stats = controller.extract_directory(
            pargs.input_dir,
            pargs.output_dir,
            pattern=pargs.pattern,
            settings=settings,
            workers=pargs.workers,
            content_only=pargs.content_only,
            show_progress=show_progress,
        )
    except Exception as e:
        logger.error("Batch failed: %s", e, exc_info=True)
        print(f"❌ Batch error: {e}")
        return 1

    print(
        f"✅ Extracted {stats['documents_success']}/{stats['documents_total']} documents "
        f"into {pargs.output_dir} in {stats['duration_s']}s ({stats['documents_per_s']} d/s)."
    )
    if stats["failed"]:
        print(f"❌ Failed: {', '.join(stats['failed'])}")
    return 0 if not stats["documents_failed"] else 2


COMMANDS: Dict[str, Callable[..., int]] = {
    "extract": handle_extract,
    "batch": handle_batch,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    level = None
    if args[:1] == ["--log-level"] and len(args) > 1:
        level, args = args[1], args[2:]
    configure_from_settings(config_manager.get_nested("debug", {}), level_override=level)

    if not args or args[0] in ("-h", "--help", "help"):
        print(help_text)
        return 0

    handler = COMMANDS.get(args[0])
    if handler is None:
        print(f"Unknown command: {args[0]}")
        print(help_text)
        return 1
    return handler(args[1:])


if __name__ == "__main__":
    sys.exit(main())
