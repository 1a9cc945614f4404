from __future__ import annotations

import os
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class ExecutionContext:
    """Process identity and base paths for a run.

    Passed explicitly to the scanner and deleter so nothing reads ambient
    process state mid-run.
    """

    is_elevated: bool
    log_dir: Path
    working_dir: Path
    clock: Callable[[], datetime] = field(default=datetime.now, compare=False)


def default_log_dir(
    platform: str = sys.platform, environ: Mapping[str, str] = os.environ
) -> Path:
    if platform.startswith("win"):
        base = environ.get("ProgramData", r"C:\ProgramData")
        return Path(base) / "agesweep" / "logs"
    return Path("/var/log/agesweep")


def is_elevated() -> bool:
    if sys.platform.startswith("win"):
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0


def detect_context(
    log_dir: Path | None = None, working_dir: Path | None = None
) -> ExecutionContext:
    return ExecutionContext(
        is_elevated=is_elevated(),
        log_dir=log_dir if log_dir is not None else default_log_dir(),
        working_dir=working_dir if working_dir is not None else Path.cwd(),
    )
