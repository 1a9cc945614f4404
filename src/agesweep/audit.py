from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from agesweep.errors import ErrorCategory
from agesweep.models import LOG_TIMESTAMP_FORMAT, CleanupCandidate, LogEntry
from agesweep.summary import SummaryAggregator

logger = logging.getLogger(__name__)


def audit_log_name(started: datetime) -> str:
    return f"agesweep_{started.strftime('%Y%m%d_%H%M%S')}.log"


def identified_message(candidate: CleanupCandidate) -> str:
    last_write = candidate.last_write_time.strftime(LOG_TIMESTAMP_FORMAT)
    return f"Identified for deletion: {candidate.full_path} (LastWrite: {last_write})"


def deleted_message(candidate: CleanupCandidate) -> str:
    return f"DELETED: {candidate.full_path}"


def skipped_message(candidate: CleanupCandidate, reason: str) -> str:
    return f"SKIPPED ({reason}): {candidate.full_path}"


def error_message(candidate: CleanupCandidate, cause: object) -> str:
    return f"ERROR deleting '{candidate.full_path}': {cause}"


class AuditLog:
    """Append-only record of cleanup decisions.

    With ``path`` set, each entry is appended to that file as it happens.
    Without it (dry-run), entries are only kept in memory and echoed to the
    operator logger.
    """

    def __init__(
        self,
        path: Path | None,
        aggregator: SummaryAggregator,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.path = path
        self._aggregator = aggregator
        self._clock = clock
        self._failed = False
        self._written = False
        self.entries: list[LogEntry] = []

    @property
    def healthy(self) -> bool:
        return self.path is not None and self._written and not self._failed

    def prepare(self) -> bool:
        if self.path is None:
            return True
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._failed = True
            self._aggregator.record_error(
                ErrorCategory.LOG_DIRECTORY,
                str(directory),
                f"Failed to create log directory '{directory}': {exc}",
            )
            return False
        return True

    def log(self, message: str) -> LogEntry:
        entry = LogEntry(timestamp=self._clock(), message=message)
        self.entries.append(entry)
        logger.info(message)
        if self.path is None:
            return entry
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(entry.format() + "\n")
            self._written = True
        except OSError as exc:
            self._failed = True
            self._aggregator.record_error(
                ErrorCategory.LOG_WRITE,
                str(self.path),
                f"Failed to write audit log '{self.path}': {exc}",
            )
        return entry
