from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from agesweep.audit import AuditLog, audit_log_name, identified_message
from agesweep.classifier import classify, compute_cutoff, validate_days_old
from agesweep.config import DEFAULT_DAYS_OLD, DEFAULT_PLAN_FILENAME, CleanupConfig
from agesweep.context import ExecutionContext, detect_context
from agesweep.errors import ConfigurationError, ErrorCategory
from agesweep.executor import ConfirmFn, Deleter, ExecutionGate, approve_all, deny_all
from agesweep.locations import LocationRegistry
from agesweep.models import CleanupCandidate, CleanupPlan, Location, RunMode, RunState, RunSummary
from agesweep.plan import write_plan
from agesweep.scanner import scan_all
from agesweep.summary import SummaryAggregator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupOptions:
    days_old: int = DEFAULT_DAYS_OLD
    dry_run: bool = False
    what_if: bool = False
    assume_yes: bool = False
    plan_filename: str = DEFAULT_PLAN_FILENAME
    max_workers: int = 1

    @property
    def mode(self) -> RunMode:
        return RunMode.DRY_RUN if self.dry_run else RunMode.LIVE

    @classmethod
    def from_config(
        cls,
        cfg: CleanupConfig,
        dry_run: bool = False,
        what_if: bool = False,
        assume_yes: bool = False,
    ) -> CleanupOptions:
        return cls(
            days_old=cfg.days_old,
            dry_run=dry_run,
            what_if=what_if,
            assume_yes=assume_yes,
            plan_filename=cfg.plan_filename,
            max_workers=cfg.max_workers,
        )


def validate_options(options: CleanupOptions) -> None:
    validate_days_old(options.days_old)
    if options.dry_run and options.assume_yes:
        raise ConfigurationError(
            "dry-run and pre-approved deletion are mutually exclusive"
        )
    if options.max_workers < 1:
        raise ConfigurationError(f"max_workers must be >= 1, got {options.max_workers}")
    name = options.plan_filename
    if not name or Path(name).name != name:
        raise ConfigurationError(f"plan_filename must be a bare file name, got {name!r}")


def run_cleanup(
    options: CleanupOptions,
    context: ExecutionContext | None = None,
    locations: Iterable[Location] | None = None,
    confirm: ConfirmFn | None = None,
    cancel_event: threading.Event | None = None,
) -> RunSummary:
    """Run one cleanup pass and return its summary.

    Only invalid options raise (``ConfigurationError``, before any filesystem
    access). Every other failure is recorded in ``RunSummary.errors``.
    ``locations=None`` selects the platform defaults; an empty iterable scans
    nothing.
    """
    validate_options(options)
    context = context if context is not None else detect_context()
    registry = LocationRegistry(locations)
    cancel_event = cancel_event if cancel_event is not None else threading.Event()

    mode = options.mode
    aggregator = SummaryAggregator(mode)
    now = context.clock()
    cutoff = compute_cutoff(now, options.days_old)
    logger.info(
        "Starting %s cleanup of %d location(s), cutoff %s",
        mode.value,
        len(registry),
        cutoff.isoformat(timespec="seconds"),
    )

    aggregator.transition(RunState.SCANNING)
    scanned = scan_all(
        registry.locations,
        context,
        mode,
        aggregator,
        max_workers=options.max_workers,
        cancel_event=cancel_event,
    )

    aggregator.transition(RunState.CLASSIFYING)
    candidates: list[CleanupCandidate] = []
    for location, files in scanned:
        candidates.extend(classify(files, cutoff, location.description))
    aggregator.add_identified(len(candidates))

    if cancel_event.is_set():
        return _finish_aborted(aggregator)

    if mode is RunMode.DRY_RUN:
        _plan(candidates, options, context, aggregator)
    else:
        audit_path = context.log_dir / audit_log_name(now)
        gate = ExecutionGate(_resolve_confirm(confirm, options), what_if=options.what_if)
        _execute(candidates, gate, audit_path, context, aggregator, cancel_event)

    aggregator.transition(RunState.DONE)
    summary = aggregator.snapshot()
    logger.info(
        "Finished: scanned=%d identified=%d deleted=%d skipped=%d errors=%d",
        summary.items_scanned,
        summary.items_identified,
        summary.items_deleted,
        summary.items_skipped,
        len(summary.errors),
    )
    return summary


def _resolve_confirm(confirm: ConfirmFn | None, options: CleanupOptions) -> ConfirmFn:
    if confirm is not None:
        return confirm
    return approve_all if options.assume_yes else deny_all


def _plan(
    candidates: list[CleanupCandidate],
    options: CleanupOptions,
    context: ExecutionContext,
    aggregator: SummaryAggregator,
) -> None:
    aggregator.transition(RunState.PLANNING)
    audit = AuditLog(None, aggregator, context.clock)
    for candidate in candidates:
        audit.log(identified_message(candidate))
    plan = CleanupPlan(candidates=tuple(candidates))
    try:
        path = write_plan(plan, context.working_dir, options.plan_filename)
    except OSError as exc:
        target = context.working_dir / options.plan_filename
        aggregator.record_error(
            ErrorCategory.PLAN_WRITE,
            str(target),
            f"Failed to write cleanup plan '{target}': {exc}",
        )
        return
    aggregator.set_plan_file(path)
    logger.info("Wrote cleanup plan with %d candidate(s) to %s", len(candidates), path)


def _execute(
    candidates: list[CleanupCandidate],
    gate: ExecutionGate,
    audit_path: Path,
    context: ExecutionContext,
    aggregator: SummaryAggregator,
    cancel_event: threading.Event,
) -> None:
    aggregator.transition(RunState.GATING)
    audit = AuditLog(audit_path, aggregator, context.clock)
    audit.prepare()
    deleter = Deleter(gate, audit, aggregator)
    for candidate in candidates:
        if cancel_event.is_set():
            aggregator.mark_aborted()
            logger.warning("Cancellation requested; stopping before %s", candidate.full_path)
            break
        audit.log(identified_message(candidate))
        deleter.process(candidate)
    aggregator.set_log_file(audit.path if audit.healthy else None)


def _finish_aborted(aggregator: SummaryAggregator) -> RunSummary:
    aggregator.mark_aborted()
    aggregator.transition(RunState.DONE)
    logger.warning("Cancellation requested; run aborted before acting on candidates")
    return aggregator.snapshot()
