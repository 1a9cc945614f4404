from __future__ import annotations

from enum import Enum


class AgesweepError(Exception):
    """Base class for errors raised by agesweep."""


class ConfigurationError(AgesweepError):
    """Invalid run parameters. Raised before any filesystem access."""


class ErrorCategory(str, Enum):
    LOCATION = "location"
    PRIVILEGE = "privilege"
    DELETION = "deletion"
    LOG_DIRECTORY = "log_directory"
    LOG_WRITE = "log_write"
    PLAN_WRITE = "plan_write"

    @property
    def is_sink(self) -> bool:
        return self in SINK_CATEGORIES


SINK_CATEGORIES = frozenset(
    {ErrorCategory.LOG_DIRECTORY, ErrorCategory.LOG_WRITE, ErrorCategory.PLAN_WRITE}
)
