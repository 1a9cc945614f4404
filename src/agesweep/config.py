from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from agesweep.errors import ConfigurationError
from agesweep.models import Location

DEFAULT_DAYS_OLD = 14
DEFAULT_PLAN_FILENAME = "cleanup_plan.json"


class LoggingCfg(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class LocationCfg(BaseModel):
    path: Path
    description: str = ""
    requires_elevated_privilege: bool = False

    def to_location(self) -> Location:
        return Location(
            path=self.path,
            description=self.description or str(self.path),
            requires_elevated_privilege=self.requires_elevated_privilege,
        )


class CleanupConfig(BaseModel):
    days_old: int = Field(default=DEFAULT_DAYS_OLD, ge=0)
    log_dir: Path | None = None
    plan_filename: str = DEFAULT_PLAN_FILENAME
    max_workers: int = Field(default=1, ge=1)
    logging: LoggingCfg = Field(default_factory=LoggingCfg)
    locations: list[LocationCfg] | None = None

    def to_locations(self) -> tuple[Location, ...] | None:
        if self.locations is None:
            return None
        return tuple(cfg.to_location() for cfg in self.locations)


def load_config(path: Path | None) -> CleanupConfig:
    data: dict[str, Any] = {}
    if path is not None and path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
    try:
        return CleanupConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc
