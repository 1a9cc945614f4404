"""Age-based disk cleanup with reviewable dry-run plans and gated deletion."""

from agesweep.engine import CleanupOptions, run_cleanup
from agesweep.errors import ConfigurationError
from agesweep.models import Location, RunMode, RunSummary

__version__ = "0.1.0"

__all__ = [
    "CleanupOptions",
    "ConfigurationError",
    "Location",
    "RunMode",
    "RunSummary",
    "run_cleanup",
]
