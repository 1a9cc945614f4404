from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from agesweep.models import LOG_TIMESTAMP_FORMAT, CleanupCandidate, CleanupPlan


def plan_to_dict(plan: CleanupPlan) -> dict[str, Any]:
    return {
        "candidate_count": len(plan.candidates),
        "total_size_bytes": plan.total_bytes,
        "candidates": [_candidate_to_dict(c) for c in plan.candidates],
    }


def render_plan(plan: CleanupPlan) -> str:
    return json.dumps(plan_to_dict(plan), indent=2, sort_keys=True) + "\n"


def write_plan(
    plan: CleanupPlan, directory: Path, filename: str = "cleanup_plan.json"
) -> Path:
    json_path = directory / filename
    md_path = companion_path(json_path)

    # Companion first: a failure leaves no fresh plan behind.
    md_path.write_text(render_markdown(plan), encoding="utf-8")
    json_path.write_text(render_plan(plan), encoding="utf-8")
    return json_path


def companion_path(plan_path: Path) -> Path:
    md_path = plan_path.with_suffix(".md")
    if md_path == plan_path:
        return plan_path.with_name(f"{plan_path.stem}.review.md")
    return md_path


def _candidate_to_dict(candidate: CleanupCandidate) -> dict[str, Any]:
    return {
        "path": str(candidate.full_path),
        "size_bytes": candidate.size_bytes,
        "size_mb": candidate.size_mb,
        "last_write_time": candidate.last_write_time.isoformat(timespec="seconds"),
        "source_location": candidate.source_location_description,
    }


def render_markdown(plan: CleanupPlan) -> str:
    lines = [
        "# Cleanup Plan",
        "",
        "Dry-run: nothing has been deleted. Review before running with --apply.",
        "",
        f"Candidates: `{len(plan.candidates)}`",
        f"Total size: `{round(plan.total_bytes / (1024 * 1024), 2)} MB`",
        "",
        "## Summary",
    ]
    by_location: dict[str, int] = {}
    for candidate in plan.candidates:
        key = candidate.source_location_description
        by_location[key] = by_location.get(key, 0) + 1
    for description, count in by_location.items():
        lines.append(f"- {description}: {count}")
    lines.append("")
    lines.append("## Candidates")
    for candidate in plan.candidates:
        last_write = candidate.last_write_time.strftime(LOG_TIMESTAMP_FORMAT)
        lines.append(
            f"- {candidate.full_path} ({candidate.size_mb:.2f} MB, "
            f"last write {last_write}, {candidate.source_location_description})"
        )
    lines.append("")
    return "\n".join(lines)
