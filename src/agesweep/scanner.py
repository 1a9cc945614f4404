from __future__ import annotations

import logging
import os
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

from agesweep.context import ExecutionContext
from agesweep.errors import ErrorCategory
from agesweep.models import Location, RunMode, ScannedFile
from agesweep.summary import SummaryAggregator

logger = logging.getLogger(__name__)


def scan(
    location: Location,
    context: ExecutionContext,
    mode: RunMode,
    aggregator: SummaryAggregator,
    cancel_event: threading.Event | None = None,
) -> list[ScannedFile]:
    """Recursively enumerate the files under ``location``.

    Location-level problems are recorded on ``aggregator`` and yield an empty
    result. Unreadable files and subtrees are skipped and only logged at
    DEBUG. Every file name the walk yields counts as scanned, even when its
    metadata cannot be read.
    """
    root = location.path
    if (
        location.requires_elevated_privilege
        and not context.is_elevated
        and mode is RunMode.LIVE
    ):
        aggregator.record_error(
            ErrorCategory.PRIVILEGE,
            str(root),
            f"Skipping location requiring elevated privilege: {root} ({location.description})",
        )
        return []

    if not _is_accessible_dir(root):
        aggregator.record_error(
            ErrorCategory.LOCATION,
            str(root),
            f"Location not found or inaccessible: {root}",
        )
        return []

    logger.info("Scanning %s (%s)", root, location.description)
    results: list[ScannedFile] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        # Links to directories are not descended into; they are entries themselves.
        linked = [d for d in dirnames if os.path.islink(os.path.join(dirpath, d))]
        dirnames[:] = sorted(d for d in dirnames if d not in linked)
        for name in sorted(filenames + linked):
            if cancel_event is not None and cancel_event.is_set():
                return results
            aggregator.add_scanned()
            full_path = Path(dirpath) / name
            try:
                st = full_path.lstat()
            except OSError as exc:
                logger.debug("Skipping unreadable file %s: %s", full_path, exc)
                continue
            results.append(
                ScannedFile(
                    full_path=full_path,
                    size_bytes=st.st_size,
                    last_write_time=datetime.fromtimestamp(st.st_mtime),
                )
            )
    logger.debug("Scanned %d files under %s", len(results), root)
    return results


def scan_all(
    locations: Sequence[Location],
    context: ExecutionContext,
    mode: RunMode,
    aggregator: SummaryAggregator,
    max_workers: int = 1,
    cancel_event: threading.Event | None = None,
) -> list[tuple[Location, list[ScannedFile]]]:
    """Scan every location, returning results in registry order."""
    if max_workers <= 1 or len(locations) <= 1:
        results = []
        for location in locations:
            if cancel_event is not None and cancel_event.is_set():
                break
            results.append(
                (location, scan(location, context, mode, aggregator, cancel_event))
            )
        return results

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(scan, location, context, mode, aggregator, cancel_event)
            for location in locations
        ]
        return [(location, future.result()) for location, future in zip(locations, futures)]


def _is_accessible_dir(path: Path) -> bool:
    try:
        with os.scandir(path):
            return True
    except OSError:
        return False


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Skipping unreadable subtree %s: %s", exc.filename, exc)
