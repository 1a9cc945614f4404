from __future__ import annotations

import argparse
import signal
import threading
from collections.abc import Iterable
from pathlib import Path
from types import FrameType

from agesweep import __version__
from agesweep.config import load_config
from agesweep.context import detect_context
from agesweep.engine import CleanupOptions, run_cleanup
from agesweep.errors import ConfigurationError
from agesweep.executor import PromptConfirm
from agesweep.locations import parse_location
from agesweep.logs import setup_logging
from agesweep.models import RunMode, RunSummary

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_ABORTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agesweep",
        description=(
            "Find files older than a cutoff and write a reviewable cleanup plan. "
            "Deleting requires --apply plus --yes, --interactive or --what-if."
        ),
    )
    parser.add_argument(
        "--days-old",
        type=int,
        default=None,
        help="Files last written more than this many days ago qualify (default: 14)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", action="store_true", help="Write a plan only (default)")
    mode.add_argument("--apply", action="store_true", help="Delete qualifying files")
    parser.add_argument("--yes", action="store_true", help="Approve every deletion")
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Ask before deleting each file",
    )
    parser.add_argument(
        "--what-if",
        action="store_true",
        help="Go through apply mode but skip every deletion",
    )
    parser.add_argument(
        "--location",
        action="append",
        default=[],
        metavar="PATH[=DESC][!]",
        help="Target directory (repeatable, replaces configured locations; "
        "trailing ! marks it as requiring elevated privilege)",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    parser.add_argument("--log-dir", type=Path, default=None, help="Audit log directory")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Scan this many locations in parallel",
    )
    parser.add_argument("--verbose", action="store_true", help="Log skipped items too")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.apply and not (args.yes or args.interactive or args.what_if):
        raise SystemExit(
            "Refusing to apply without --yes, --interactive or --what-if confirmation."
        )
    if args.what_if and not args.apply:
        raise SystemExit("--what-if only applies together with --apply.")

    try:
        cfg = load_config(args.config)
        if args.days_old is not None:
            cfg = cfg.model_copy(update={"days_old": args.days_old})
        if args.workers is not None:
            cfg = cfg.model_copy(update={"max_workers": args.workers})
        options = CleanupOptions.from_config(
            cfg,
            dry_run=not args.apply,
            what_if=args.what_if,
            assume_yes=args.yes,
        )
        locations = (
            [parse_location(spec) for spec in args.location]
            if args.location
            else cfg.to_locations()
        )
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    setup_logging(cfg.logging.level, verbose=args.verbose)
    context = detect_context(log_dir=args.log_dir or cfg.log_dir)
    confirm = PromptConfirm() if args.interactive and not args.yes else None

    cancel_event = threading.Event()
    previous = signal.getsignal(signal.SIGINT)

    def _on_sigint(signum: int, frame: FrameType | None) -> None:
        if cancel_event.is_set():
            raise KeyboardInterrupt
        print("\nCancellation requested; finishing the current file...")
        cancel_event.set()

    signal.signal(signal.SIGINT, _on_sigint)
    try:
        summary = run_cleanup(
            options,
            context=context,
            locations=locations,
            confirm=confirm,
            cancel_event=cancel_event,
        )
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc
    finally:
        signal.signal(signal.SIGINT, previous)

    print(render_summary(summary))
    if summary.aborted:
        return EXIT_ABORTED
    return EXIT_ERRORS if summary.errors else EXIT_OK


def render_summary(summary: RunSummary) -> str:
    title = "Dry-run complete." if summary.mode is RunMode.DRY_RUN else "Cleanup complete."
    if summary.aborted:
        title = "Cleanup aborted."
    lines = [
        title,
        f"Scanned: {summary.items_scanned}",
        f"Identified: {summary.items_identified}",
        f"Deleted: {summary.items_deleted}",
        f"Skipped: {summary.items_skipped}",
    ]
    if summary.plan_file_path is not None:
        lines.append(f"Plan written to {summary.plan_file_path}")
    if summary.log_file_path is not None:
        lines.append(f"Audit log: {summary.log_file_path}")
    if summary.errors:
        lines.append(f"Errors ({len(summary.errors)}):")
        lines.extend(f"- {error}" for error in summary.errors)
    return "\n".join(lines)


if __name__ == "__main__":
    raise SystemExit(main())
