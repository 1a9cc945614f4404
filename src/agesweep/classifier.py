from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from agesweep.errors import ConfigurationError
from agesweep.models import CleanupCandidate, ScannedFile


def validate_days_old(days_old: object) -> int:
    if isinstance(days_old, bool) or not isinstance(days_old, int):
        raise ConfigurationError(f"days_old must be an integer, got {days_old!r}")
    if days_old < 0:
        raise ConfigurationError(f"days_old must be >= 0, got {days_old}")
    return days_old


def compute_cutoff(now: datetime, days_old: int) -> datetime:
    return now - timedelta(days=validate_days_old(days_old))


def classify(
    files: Iterable[ScannedFile],
    cutoff: datetime,
    source_location_description: str,
) -> list[CleanupCandidate]:
    """Keep files last written strictly before ``cutoff``, in input order."""
    return [
        CleanupCandidate(file=f, source_location_description=source_location_description)
        for f in files
        if f.last_write_time < cutoff
    ]
