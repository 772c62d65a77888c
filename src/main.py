# src/main.py — v2
"""CLI entry point: digest, focus, status, reset commands.

Usage:
    notedigest digest <notes.json>
    notedigest focus <notes.json> [--force] [--llm provider:model]
    notedigest status
    notedigest reset
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from notedigest.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from notedigest.config.settings import ConfigurationError, load_settings

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="notedigest",
        description=f"notedigest v{__version__}: note digests and cached AI focus reports",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- digest ---
    p_digest = subparsers.add_parser(
        "digest", help="Print the budgeted digest batch for an export file",
    )
    p_digest.add_argument("notes", type=Path, help="Notebook export (JSON)")
    p_digest.set_defaults(func=_cmd_digest)

    # --- focus ---
    p_focus = subparsers.add_parser(
        "focus", help="Generate the recent focus report if stale",
    )
    p_focus.add_argument("notes", type=Path, help="Notebook export (JSON)")
    p_focus.add_argument(
        "--force", action="store_true",
        help="Regenerate even if the cached report is fresh",
    )
    p_focus.add_argument(
        "--llm", default="",
        help="Provider override as provider[:model] (default: from settings)",
    )
    p_focus.set_defaults(func=_cmd_focus)

    # --- status ---
    p_status = subparsers.add_parser(
        "status", help="Show cached report state",
    )
    p_status.set_defaults(func=_cmd_status)

    # --- reset ---
    p_reset = subparsers.add_parser(
        "reset", help="Clear the cached report and its fingerprint",
    )
    p_reset.set_defaults(func=_cmd_reset)

    return parser


async def _cmd_digest(args: argparse.Namespace, settings) -> int:
    """Print digests as JSON."""
    from notedigest.core.notes_file import load_note_sources
    from notedigest.digest.budgeter import build_recent_digests, total_chars

    if not args.notes.exists():
        logger.error("File not found: %s", args.notes)
        return 1

    sources = load_note_sources(args.notes)
    digests = build_recent_digests(sources, settings.digest_budget())
    print(json.dumps(
        [d.model_dump(mode="json", by_alias=True) for d in digests],
        ensure_ascii=False, indent=2,
    ))
    logger.info("%d digests, %d chars", len(digests), total_chars(digests))
    return 0


async def _cmd_focus(args: argparse.Namespace, settings) -> int:
    """Generate (or reuse) the recent focus report."""
    from notedigest.core.notes_file import load_note_sources
    from notedigest.focus.generator import RecentFocusGenerator
    from notedigest.focus.service import RecentFocusService
    from notedigest.llm.client_factory import create_llm_client
    from notedigest.llm.config import resolve_llm

    if not args.notes.exists():
        logger.error("File not found: %s", args.notes)
        return 1

    sources = load_note_sources(args.notes)
    assignment = resolve_llm(settings, args.llm)
    llm = create_llm_client(assignment.provider, assignment.model, settings)
    generator = RecentFocusGenerator(
        llm,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
    )

    controller, store = _build_controller(settings)
    try:
        await controller.load()
        service = RecentFocusService(
            controller,
            generator,
            notes=lambda: sources,
            budget=settings.digest_budget(),
            digest_limit=settings.digest_limit,
            min_new_notes=settings.min_new_notes,
        )
        logger.info("Using %s", assignment.key)
        generated = await service.request_recent_focus(force=args.force)
    finally:
        store.close()

    state = controller.snapshot()
    if state.error_message:
        print(f"Generation failed: {state.error_message}", file=sys.stderr)
        return 1
    if not generated:
        logger.info("Cached report is still current")
    _print_state(state)
    return 0


async def _cmd_status(args: argparse.Namespace, settings) -> int:
    """Display cached report state."""
    controller, store = _build_controller(settings)
    try:
        await controller.load()
        updated_at = await controller.last_recent_focus_updated_at()
    finally:
        store.close()

    print(f"\nRecent focus cache ({settings.cache_backend}):")
    print(f"  Cached report: {'yes' if controller.has_cached_recent_focus else 'no'}")
    print(f"  Updated at:    {updated_at.isoformat() if updated_at else '-'}")
    return 0


async def _cmd_reset(args: argparse.Namespace, settings) -> int:
    """Clear the cached report and fingerprint."""
    controller, store = _build_controller(settings)
    try:
        await controller.reset_for_sign_out()
    finally:
        store.close()
    print("Recent focus cache cleared.")
    return 0


def _build_controller(settings):
    from notedigest.cache.cache_factory import create_cache_store
    from notedigest.cache.report_cache import ReportCache
    from notedigest.focus.controller import RecentFocusController

    store = create_cache_store(settings)
    controller = RecentFocusController(
        ReportCache(store), refresh_interval=settings.refresh_interval_s,
    )
    return controller, store


def _print_state(state) -> None:
    """Print the report, or the raw text when it could not be structured."""
    if state.report is not None:
        print(json.dumps(
            state.report.model_dump(mode="json", by_alias=True),
            ensure_ascii=False, indent=2,
        ))
    elif state.raw_markdown:
        print(state.raw_markdown)


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from notedigest.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
