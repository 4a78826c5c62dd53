"""Standalone CLI for crawling a festival lineup.

Usage::

    python -m festival_scout.cli.crawl https://fest.example/lineup
    python -m festival_scout.cli.crawl https://fest.example/lineup --json
    python -m festival_scout.cli.crawl URL1 URL2 --output festival.json --save

The first source is parsed with a structured extraction plan; when that
fails every source is handed to the AI fallback.  ``--save`` persists the
result to the configured SQLite store.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

import structlog

from festival_scout.models.festival import Festival
from festival_scout.utils.errors import FestivalScoutError

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

_NO_DATE_YET = object()


def _format_text_output(festival: Festival) -> str:
    lines: list[str] = []
    sep = "=" * 60

    lines.append(sep)
    lines.append(f"  {festival.name}")
    lines.append(sep)
    lines.append(f"  Id:        {festival.id}")
    lines.append(f"  Location:  {festival.location or '-'}")
    if festival.start_date:
        lines.append(f"  Dates:     {festival.start_date} .. {festival.end_date or festival.start_date}")
    if festival.website:
        lines.append(f"  Website:   {festival.website}")
    if festival.stages:
        lines.append(f"  Stages:    {', '.join(festival.stages)}")
    lines.append(f"  Acts:      {len(festival.lineup)}")
    lines.append("")

    if festival.lineup:
        lines.append("LINEUP")
        lines.append("-" * 40)
        current_date: object = _NO_DATE_YET
        for act in festival.lineup:
            if act.date != current_date:
                current_date = act.date
                lines.append(f"\n  [{current_date or 'undated'}]")
            detail = " | ".join(part for part in (act.time, act.stage) if part)
            lines.append(f"    {act.artist_name}" + (f"  ({detail})" if detail else ""))
        lines.append("")

    return "\n".join(lines)


def _format_json_output(festival: Festival) -> str:
    return json.dumps(festival.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def _suppress_logs() -> None:
    """Send structlog and stdlib logging to stderr at WARNING and above.

    Must run before the application is built; structlog caches loggers on
    first use.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.WARNING)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _run(sources: list[str], json_output: bool, output_file: str | None, save: bool, quiet: bool) -> int:
    # Deferred: building the application reads settings and opens clients.
    from festival_scout.config.settings import Settings
    from festival_scout.main import assemble, build_application

    settings = Settings()
    if quiet:
        app = assemble(settings)
        await app.start()
    else:
        app = await build_application(settings)

    print(f"Crawling: {', '.join(sources)}", file=sys.stderr)
    start = time.monotonic()
    try:
        festival = await app.crawl_festival(sources)
        if save:
            festival_id = await app.festival_service.save_festival(festival)
            print(f"Saved festival: {festival_id}", file=sys.stderr)
    except (FestivalScoutError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await app.close()
    print(f"Done in {time.monotonic() - start:.1f}s", file=sys.stderr)

    text = _format_json_output(festival) if json_output else _format_text_output(festival)
    if output_file:
        Path(output_file).write_text(text, encoding="utf-8")
        print(f"Results written to: {output_file}", file=sys.stderr)
    else:
        print(text)
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m festival_scout.cli.crawl",
        description="Crawl a festival lineup from one or more web pages or documents.",
    )
    parser.add_argument(
        "sources",
        nargs="+",
        help="Festival URLs (the first is tried with structured parsing).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output the festival as JSON instead of formatted text.",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write results to a file instead of stdout.",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Persist the crawled festival to the configured store.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output (implied by --json).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # JSON mode implies quiet so stdout stays machine-readable.
    quiet = args.quiet or args.json_output
    if quiet:
        _suppress_logs()

    exit_code = asyncio.run(_run(args.sources, args.json_output, args.output, args.save, quiet))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
