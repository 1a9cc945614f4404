from __future__ import annotations

import json
import os
import time
from pathlib import Path

import pytest

from agesweep import cli


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def _old_file(path: Path, days: int = 30) -> None:
    _write(path, "stale")
    stamp = time.time() - days * 86400
    os.utime(path, (stamp, stamp))


def test_apply_requires_confirmation(tmp_path: Path) -> None:
    _old_file(tmp_path / "target" / "old.tmp")
    with pytest.raises(SystemExit, match="--yes"):
        cli.main(["--location", str(tmp_path / "target"), "--apply"])


def test_what_if_requires_apply(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="--apply"):
        cli.main(["--location", str(tmp_path), "--what-if"])


def test_dry_run_with_yes_is_a_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="mutually exclusive"):
        cli.main(["--location", str(tmp_path), "--dry-run", "--yes"])


def test_negative_days_rejected(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="days_old"):
        cli.main(["--location", str(tmp_path), "--days-old", "-1"])


def test_default_is_dry_run(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    target = tmp_path / "target"
    _old_file(target / "old.tmp")
    _write(target / "fresh.tmp", "new")
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)

    result = cli.main(["--location", f"{target}=Scratch", "--days-old", "7"])

    assert result == 0
    out = capsys.readouterr().out
    assert "Dry-run complete." in out
    assert "Identified: 1" in out
    plan = json.loads((work / "cleanup_plan.json").read_text())
    assert [c["source_location"] for c in plan["candidates"]] == ["Scratch"]
    assert (target / "old.tmp").exists()


def test_apply_yes_deletes_and_writes_log(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "target"
    _old_file(target / "old.tmp")
    log_dir = tmp_path / "logs"

    result = cli.main(
        [
            "--location",
            str(target),
            "--apply",
            "--yes",
            "--days-old",
            "7",
            "--log-dir",
            str(log_dir),
        ]
    )

    assert result == 0
    assert not (target / "old.tmp").exists()
    logs = list(log_dir.glob("agesweep_*.log"))
    assert len(logs) == 1
    assert "DELETED:" in logs[0].read_text()
    assert "Deleted: 1" in capsys.readouterr().out


def test_what_if_keeps_files(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "target"
    _old_file(target / "old.tmp")

    result = cli.main(
        [
            "--location",
            str(target),
            "--apply",
            "--what-if",
            "--log-dir",
            str(tmp_path / "logs"),
        ]
    )

    assert result == 0
    assert (target / "old.tmp").exists()
    out = capsys.readouterr().out
    assert "Skipped: 1" in out
    assert "Deleted: 0" in out


def test_interactive_prompts_per_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "target"
    _old_file(target / "a.tmp")
    _old_file(target / "b.tmp")
    answers = iter(["y", "n"])
    monkeypatch.setattr("builtins.input", lambda _: next(answers))

    result = cli.main(
        [
            "--location",
            str(target),
            "--apply",
            "--interactive",
            "--log-dir",
            str(tmp_path / "logs"),
        ]
    )

    assert result == 0
    assert not (target / "a.tmp").exists()
    assert (target / "b.tmp").exists()


def test_errors_set_exit_code(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    missing = tmp_path / "missing"

    result = cli.main(["--location", str(missing)])

    assert result == 1
    assert f"Location not found or inaccessible: {missing}" in capsys.readouterr().out


def test_config_file_supplies_locations(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "target"
    _old_file(target / "old.tmp", days=3)
    _write(
        tmp_path / "agesweep.yaml",
        f"days_old: 2\nlocations:\n  - path: {target}\n    description: From config\n",
    )
    monkeypatch.chdir(tmp_path)

    result = cli.main(["--config", str(tmp_path / "agesweep.yaml")])

    assert result == 0
    plan = json.loads((tmp_path / "cleanup_plan.json").read_text())
    assert plan["candidates"][0]["source_location"] == "From config"


def test_help_exits_zero() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--help"])
    assert excinfo.value.code == 0
