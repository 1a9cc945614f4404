from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class RunMode(str, Enum):
    DRY_RUN = "dry_run"
    LIVE = "live"


class RunState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    CLASSIFYING = "classifying"
    PLANNING = "planning"
    GATING = "gating"
    DONE = "done"


@dataclass(frozen=True)
class Location:
    path: Path
    description: str
    requires_elevated_privilege: bool = False


@dataclass(frozen=True)
class ScannedFile:
    full_path: Path
    size_bytes: int
    last_write_time: datetime


@dataclass(frozen=True)
class CleanupCandidate:
    file: ScannedFile
    source_location_description: str

    @property
    def full_path(self) -> Path:
        return self.file.full_path

    @property
    def size_bytes(self) -> int:
        return self.file.size_bytes

    @property
    def last_write_time(self) -> datetime:
        return self.file.last_write_time

    @property
    def size_mb(self) -> float:
        return round(self.file.size_bytes / (1024 * 1024), 2)


@dataclass(frozen=True)
class CleanupPlan:
    candidates: tuple[CleanupCandidate, ...]

    @property
    def total_bytes(self) -> int:
        return sum(c.size_bytes for c in self.candidates)


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    message: str

    def format(self) -> str:
        return f"[{self.timestamp.strftime(LOG_TIMESTAMP_FORMAT)}] {self.message}"


@dataclass(frozen=True)
class RunSummary:
    mode: RunMode
    items_scanned: int
    items_identified: int
    items_deleted: int
    items_skipped: int
    log_file_path: Path | None
    plan_file_path: Path | None
    errors: tuple[str, ...]
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors and not self.aborted
