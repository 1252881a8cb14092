"""Command-line interface for Temporal Prompt.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

import structlog

from temporal_prompt import __version__
from temporal_prompt.config import get_settings
from temporal_prompt.enhancer import PromptEnhancer
from temporal_prompt.exceptions import InvalidInstantError
from temporal_prompt.models import FormatOptions, FormatStyle, Strategy

logger = structlog.get_logger()


def _iso_instant(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 instant: {value!r}") from exc


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--timezone", default=None, help="IANA timezone (default: settings timezone)")
    common.add_argument("--locale", default=None, help="Locale tag (default: settings locale)")
    common.add_argument(
        "--reference",
        type=_iso_instant,
        default=None,
        help="Pinned reference instant as ISO-8601 (default: now)",
    )

    parser = argparse.ArgumentParser(prog="temporal-prompt", description="Temporal Prompt")
    subparsers = parser.add_subparsers(dest="command", required=True)

    enhance_parser = subparsers.add_parser(
        "enhance",
        parents=[common],
        help="Rewrite date expressions in a prompt",
    )
    enhance_parser.add_argument("text", help="Prompt text")
    enhance_parser.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=None,
        help="Rewriting strategy (default: settings strategy)",
    )
    enhance_parser.add_argument(
        "--no-context",
        action="store_true",
        help="Do not print the current-date header",
    )

    extract_parser = subparsers.add_parser(
        "extract",
        parents=[common],
        help="List the date expressions found in text",
    )
    extract_parser.add_argument("text", help="Text to scan")

    format_parser = subparsers.add_parser("format", parents=[common], help="Render an instant")
    format_parser.add_argument("instant", type=_iso_instant, help="ISO-8601 instant")
    format_parser.add_argument(
        "--style",
        choices=[s.value for s in FormatStyle],
        default=FormatStyle.HUMAN.value,
        help="Output style",
    )
    format_parser.add_argument("--weekday", action="store_true", help="Include the weekday (human style)")
    format_parser.add_argument("--time", action="store_true", help="Include the time (human style)")

    subparsers.add_parser("context", parents=[common], help="Print the current-date header")

    return parser


def _enhancer(args: argparse.Namespace, **overrides) -> PromptEnhancer:
    return PromptEnhancer(
        get_settings(),
        timezone=args.timezone,
        locale=args.locale,
        reference_instant=args.reference,
        **overrides,
    )


def _cmd_enhance(args: argparse.Namespace) -> int:
    include_context = False if args.no_context else None
    enhancer = _enhancer(args, include_context=include_context)
    result = enhancer.enhance(args.text, strategy=args.strategy)

    if result.context:
        print(result.context)
        print()
    print(result.enhanced_text)
    logger.info(
        "enhance_complete",
        extractions=len(result.extractions),
        tokens_added=result.tokens_added,
    )
    return 0


def _cmd_extract(args: argparse.Namespace) -> int:
    enhancer = _enhancer(args)
    for e in enhancer.extract_all(args.text):
        print(
            f"{e.start}-{e.end}\t{e.original_text}\t{e.resolved_date.isoformat()}"
            f"\t{e.type.value}\t{e.grain.value}\t{e.confidence:.2f}"
        )
    return 0


def _cmd_format(args: argparse.Namespace) -> int:
    enhancer = _enhancer(args)
    options = FormatOptions(include_weekday=args.weekday, include_time=args.time)
    try:
        print(enhancer.render(args.instant, args.style, options))
    except InvalidInstantError as exc:
        logger.error("format_failed", error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def _cmd_context(args: argparse.Namespace) -> int:
    print(_enhancer(args).formatter.context_header())
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Temporal Prompt CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )

    logger.debug("temporal_prompt_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    if parsed.command == "enhance":
        return _cmd_enhance(parsed)
    if parsed.command == "extract":
        return _cmd_extract(parsed)
    if parsed.command == "format":
        return _cmd_format(parsed)
    if parsed.command == "context":
        return _cmd_context(parsed)

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
