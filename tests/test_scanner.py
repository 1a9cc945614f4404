from __future__ import annotations

import os
import threading
from datetime import datetime
from pathlib import Path

from agesweep.context import ExecutionContext
from agesweep.models import Location, RunMode
from agesweep.scanner import scan, scan_all
from agesweep.summary import SummaryAggregator


def _write(path: Path, content: str = "x") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def _context(tmp_path: Path, elevated: bool = False) -> ExecutionContext:
    return ExecutionContext(
        is_elevated=elevated,
        log_dir=tmp_path / "logs",
        working_dir=tmp_path,
    )


def test_scan_is_recursive_and_sorted(tmp_path: Path) -> None:
    root = tmp_path / "target"
    _write(root / "b.txt", "bb")
    _write(root / "a.txt", "a")
    _write(root / "sub" / "c.txt", "ccc")
    aggregator = SummaryAggregator(RunMode.DRY_RUN)

    files = scan(Location(root, "Target"), _context(tmp_path), RunMode.DRY_RUN, aggregator)

    assert [f.full_path.relative_to(root).as_posix() for f in files] == [
        "a.txt",
        "b.txt",
        "sub/c.txt",
    ]
    assert [f.size_bytes for f in files] == [1, 2, 3]
    summary = aggregator.snapshot()
    assert summary.items_scanned == 3
    assert summary.errors == ()


def test_scan_reports_last_write_time(tmp_path: Path) -> None:
    root = tmp_path / "target"
    _write(root / "old.log")
    stamp = datetime(2020, 1, 2, 3, 4, 5).timestamp()
    os.utime(root / "old.log", (stamp, stamp))

    files = scan(
        Location(root, "Target"),
        _context(tmp_path),
        RunMode.DRY_RUN,
        SummaryAggregator(RunMode.DRY_RUN),
    )

    assert files[0].last_write_time == datetime(2020, 1, 2, 3, 4, 5)


def test_missing_location_records_one_error(tmp_path: Path) -> None:
    missing = tmp_path / "nope"
    aggregator = SummaryAggregator(RunMode.LIVE)

    files = scan(Location(missing, "Gone"), _context(tmp_path), RunMode.LIVE, aggregator)

    summary = aggregator.snapshot()
    assert files == []
    assert summary.items_scanned == 0
    assert summary.errors == (f"Location not found or inaccessible: {missing}",)


def test_file_path_is_not_a_location(tmp_path: Path) -> None:
    _write(tmp_path / "plain.txt")
    aggregator = SummaryAggregator(RunMode.DRY_RUN)

    files = scan(
        Location(tmp_path / "plain.txt", "File"), _context(tmp_path), RunMode.DRY_RUN, aggregator
    )

    assert files == []
    assert len(aggregator.snapshot().errors) == 1


def test_privileged_location_skipped_in_live_mode(tmp_path: Path) -> None:
    root = tmp_path / "system"
    _write(root / "a.tmp")
    aggregator = SummaryAggregator(RunMode.LIVE)

    files = scan(Location(root, "System temp", True), _context(tmp_path), RunMode.LIVE, aggregator)

    summary = aggregator.snapshot()
    assert files == []
    assert summary.items_scanned == 0
    assert len(summary.errors) == 1
    assert "elevated privilege" in summary.errors[0]
    assert str(root) in summary.errors[0]


def test_privileged_location_scanned_in_dry_run(tmp_path: Path) -> None:
    root = tmp_path / "system"
    _write(root / "a.tmp")
    aggregator = SummaryAggregator(RunMode.DRY_RUN)

    files = scan(
        Location(root, "System temp", True), _context(tmp_path), RunMode.DRY_RUN, aggregator
    )

    assert len(files) == 1
    assert aggregator.snapshot().errors == ()


def test_privileged_location_scanned_when_elevated(tmp_path: Path) -> None:
    root = tmp_path / "system"
    _write(root / "a.tmp")
    aggregator = SummaryAggregator(RunMode.LIVE)

    files = scan(
        Location(root, "System temp", True),
        _context(tmp_path, elevated=True),
        RunMode.LIVE,
        aggregator,
    )

    assert len(files) == 1


def test_unreadable_file_counts_as_scanned(tmp_path: Path, monkeypatch) -> None:
    root = tmp_path / "target"
    _write(root / "good.txt")
    _write(root / "bad.txt")
    original_lstat = Path.lstat

    def flaky_lstat(self: Path):
        if self.name == "bad.txt":
            raise PermissionError("denied")
        return original_lstat(self)

    monkeypatch.setattr(Path, "lstat", flaky_lstat)
    aggregator = SummaryAggregator(RunMode.DRY_RUN)

    files = scan(Location(root, "Target"), _context(tmp_path), RunMode.DRY_RUN, aggregator)

    summary = aggregator.snapshot()
    assert [f.full_path.name for f in files] == ["good.txt"]
    assert summary.items_scanned == 2
    assert summary.errors == ()


def test_scan_all_keeps_registry_order_in_parallel(tmp_path: Path) -> None:
    locations = []
    for name in ("one", "two", "three", "four"):
        root = tmp_path / name
        _write(root / f"{name}.txt")
        locations.append(Location(root, name))
    locations.insert(2, Location(tmp_path / "missing", "missing"))
    aggregator = SummaryAggregator(RunMode.DRY_RUN)

    results = scan_all(
        locations, _context(tmp_path), RunMode.DRY_RUN, aggregator, max_workers=3
    )

    assert [loc.description for loc, _ in results] == [
        "one",
        "two",
        "missing",
        "three",
        "four",
    ]
    assert [len(files) for _, files in results] == [1, 1, 0, 1, 1]
    summary = aggregator.snapshot()
    assert summary.items_scanned == 4
    assert len(summary.errors) == 1


def test_scan_all_stops_when_cancelled(tmp_path: Path) -> None:
    root = tmp_path / "target"
    _write(root / "a.txt")
    cancel = threading.Event()
    cancel.set()
    aggregator = SummaryAggregator(RunMode.DRY_RUN)

    results = scan_all(
        [Location(root, "Target")],
        _context(tmp_path),
        RunMode.DRY_RUN,
        aggregator,
        cancel_event=cancel,
    )

    assert results == []
    assert aggregator.snapshot().items_scanned == 0


def test_directory_symlink_is_an_entry_not_descended(tmp_path: Path) -> None:
    real = tmp_path / "real"
    _write(real / "inside.txt")
    root = tmp_path / "target"
    _write(root / "a.txt")
    (root / "link").symlink_to(real, target_is_directory=True)
    aggregator = SummaryAggregator(RunMode.LIVE)

    files = scan(Location(root, "Target"), _context(tmp_path), RunMode.LIVE, aggregator)

    assert [f.full_path.name for f in files] == ["a.txt", "link"]
    assert aggregator.snapshot().items_scanned == 2
