from __future__ import annotations

import logging
import threading
from pathlib import Path

from agesweep.errors import ErrorCategory
from agesweep.models import RunMode, RunState, RunSummary

logger = logging.getLogger(__name__)


class ErrorLedger:
    """Ordered, deduplicating record of non-fatal errors.

    Entries are keyed by ``(category, target)``. Sink categories ignore the
    target so each sink failure type is recorded once per run.
    """

    def __init__(self) -> None:
        self._keys: set[tuple[ErrorCategory, str]] = set()
        self._messages: list[str] = []

    def add(self, category: ErrorCategory, target: str, message: str) -> bool:
        key = (category, "" if category.is_sink else target)
        if key in self._keys:
            return False
        self._keys.add(key)
        self._messages.append(message)
        return True

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


class SummaryAggregator:
    def __init__(self, mode: RunMode) -> None:
        self.mode = mode
        self._lock = threading.Lock()
        self._ledger = ErrorLedger()
        self._state = RunState.IDLE
        self._scanned = 0
        self._identified = 0
        self._deleted = 0
        self._skipped = 0
        self._log_file: Path | None = None
        self._plan_file: Path | None = None
        self._aborted = False

    @property
    def state(self) -> RunState:
        return self._state

    def transition(self, state: RunState) -> None:
        with self._lock:
            logger.debug("run state %s -> %s", self._state.value, state.value)
            self._state = state

    def add_scanned(self, count: int = 1) -> None:
        with self._lock:
            self._scanned += count

    def add_identified(self, count: int = 1) -> None:
        with self._lock:
            self._identified += count

    def add_deleted(self) -> None:
        with self._lock:
            self._deleted += 1

    def add_skipped(self) -> None:
        with self._lock:
            self._skipped += 1

    def set_log_file(self, path: Path | None) -> None:
        with self._lock:
            self._log_file = path

    def set_plan_file(self, path: Path | None) -> None:
        with self._lock:
            self._plan_file = path

    def mark_aborted(self) -> None:
        with self._lock:
            self._aborted = True

    @property
    def aborted(self) -> bool:
        return self._aborted

    def record_error(self, category: ErrorCategory, target: str, message: str) -> bool:
        with self._lock:
            added = self._ledger.add(category, target, message)
        if added:
            logger.warning(message)
        return added

    def snapshot(self) -> RunSummary:
        with self._lock:
            return RunSummary(
                mode=self.mode,
                items_scanned=self._scanned,
                items_identified=self._identified,
                items_deleted=self._deleted,
                items_skipped=self._skipped,
                log_file_path=self._log_file,
                plan_file_path=self._plan_file,
                errors=self._ledger.messages,
                aborted=self._aborted,
            )
