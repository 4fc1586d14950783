from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from reelsync.app import apply_proposal, match_title, plan_from_source, unlink_movie
from reelsync.config import configure_logging
from reelsync.domain.reconciliation import (
    ApplyOutcome,
    DestructiveActionError,
    render_apply_report,
    render_plan_report,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from reelsync.domain.reconciliation import MatchResult

log = logging.getLogger(__name__)


class _AbortFlag:
    """Set by the first Ctrl+C while an apply run is in progress."""

    def __init__(self) -> None:
        self.armed = False
        self.requested = False

    def __call__(self) -> bool:
        return self.requested


_ABORT = _AbortFlag()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile the movie catalog with its sources")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every matching and apply decision",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Diff a source file and write a proposal")
    source = plan.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", type=Path, help="Flat-file catalog export (CSV)")
    source.add_argument("--wordpress", type=Path, help="Scraped website dump (JSON)")
    plan.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Where to write the proposal document",
    )
    plan.add_argument("--report", type=Path, help="Also write the plan report to this file")

    apply = subparsers.add_parser("apply", help="Apply a reviewed proposal")
    apply.add_argument("proposal", type=Path, help="Proposal document written by 'plan'")
    apply.add_argument(
        "--execute",
        action="store_true",
        help="Write to the database (default: dry run on an in-memory copy)",
    )
    apply.add_argument(
        "--limit",
        type=int,
        help="Maximum number of intents to process before stopping",
    )
    apply.add_argument("--report", type=Path, help="Also write the apply report to this file")

    unlink = subparsers.add_parser("unlink", help="Remove one movie-experiment link")
    unlink.add_argument(
        "--movie",
        required=True,
        help="Movie key, e.g. tmdb:603 or 'title:the room|2003'",
    )
    unlink.add_argument("--experiment", required=True, help="Experiment number")
    unlink.add_argument(
        "--confirm",
        action="store_true",
        help="Confirm the destructive removal",
    )

    match = subparsers.add_parser("match", help="Match one title against the catalog")
    match.add_argument("title", help="Movie title as written in a source")
    match.add_argument("--year", help="Release year")

    args = parser.parse_args(list(argv))
    if getattr(args, "limit", None) is not None and args.limit < 0:
        raise ValueError("--limit must be non-negative")
    return args


def _describe_match(result: MatchResult) -> str:
    lines = [f"{result.candidate.label()}: {result.tier} (score {result.score:.2f})"]
    if result.best is not None:
        lines.append(f"  best: {result.best.label()}")
    lines.extend(
        f"  - {alternate.movie.label()} score={alternate.score:.2f} "
        f"year_difference={alternate.year_difference}"
        for alternate in result.alternates
    )
    return "\n".join(lines) + "\n"


def _run(args: argparse.Namespace) -> int:
    if args.command == "plan":
        plan = plan_from_source(
            csv_path=args.csv,
            wordpress_path=args.wordpress,
            output=args.output,
            report_path=args.report,
        )
        sys.stdout.write(render_plan_report(plan))
        return 0

    if args.command == "apply":
        _ABORT.armed = True
        try:
            result = apply_proposal(
                args.proposal,
                execute=args.execute,
                limit=args.limit,
                report_path=args.report,
                should_abort=_ABORT,
            )
        finally:
            _ABORT.armed = False
        sys.stdout.write(render_apply_report(result))
        return 1 if result.counts[ApplyOutcome.FAILED] else 0

    if args.command == "unlink":
        result = unlink_movie(args.movie, args.experiment, confirm=args.confirm)
        sys.stdout.write(render_apply_report(result))
        return 1 if result.counts[ApplyOutcome.FAILED] else 0

    if args.command == "match":
        sys.stdout.write(_describe_match(match_title(args.title, year=args.year)))
        return 0

    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    configure_logging()
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        status = _run(parsed_args)
    except DestructiveActionError:
        log.exception("Refusing destructive action")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    if status:
        sys.exit(status)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully.

    During an apply run the first Ctrl+C finishes the current intent and stops;
    otherwise the process exits immediately.
    """
    if _ABORT.armed and not _ABORT.requested:
        log.warning("Stopping after the current intent (Ctrl+C again to quit)")
        _ABORT.requested = True
        return
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
