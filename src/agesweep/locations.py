from __future__ import annotations

import os
import sys
import tempfile
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

from agesweep.errors import ConfigurationError
from agesweep.models import Location


def default_locations(
    platform: str = sys.platform, environ: Mapping[str, str] = os.environ
) -> tuple[Location, ...]:
    if platform.startswith("win"):
        system_root = Path(environ.get("SystemRoot", r"C:\Windows"))
        user_temp = environ.get("TEMP") or tempfile.gettempdir()
        locations = [
            Location(Path(user_temp), "User temporary files"),
            Location(system_root / "Temp", "Windows temporary files", True),
            Location(
                system_root / "SoftwareDistribution" / "Download",
                "Windows Update download cache",
                True,
            ),
        ]
    else:
        locations = [
            Location(Path(tempfile.gettempdir()), "User temporary files"),
            Location(Path("/var/tmp"), "System temporary files", True),
        ]
    return _dedupe(locations)


def parse_location(spec: str) -> Location:
    """Parse ``PATH[=DESCRIPTION][!]``; a trailing ``!`` marks a privileged location."""
    text = spec.strip()
    privileged = text.endswith("!")
    if privileged:
        text = text[:-1]
    path_text, sep, description = text.partition("=")
    if not path_text:
        raise ConfigurationError(f"Empty location path in {spec!r}")
    path = Path(path_text).expanduser()
    return Location(
        path=path,
        description=description if sep and description else str(path),
        requires_elevated_privilege=privileged,
    )


class LocationRegistry:
    def __init__(self, locations: Iterable[Location] | None = None) -> None:
        if locations is None:
            self._locations = default_locations()
        else:
            self._locations = _dedupe(locations)

    @property
    def locations(self) -> tuple[Location, ...]:
        return self._locations

    def __len__(self) -> int:
        return len(self._locations)

    def __iter__(self) -> Iterator[Location]:
        return iter(self._locations)


def _dedupe(locations: Iterable[Location]) -> tuple[Location, ...]:
    seen: set[Path] = set()
    result: list[Location] = []
    for location in locations:
        if location.path in seen:
            continue
        seen.add(location.path)
        result.append(location)
    return tuple(result)
