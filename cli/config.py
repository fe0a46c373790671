"""Configuration loader for the bpc CLI."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from core.models import PolicyVersion

FORMATS = ("json", "md", "table")

DEFAULTS = {
    "project_name": "bpc",
    "default_format": "json",
    "default_version": PolicyVersion.V2012_10_17.value,
    "endpoint_url": None,
    "region": None,
    "log_level": "WARNING",
}


@dataclass(slots=True)
class Settings:
    project_name: str = DEFAULTS["project_name"]
    default_format: str = DEFAULTS["default_format"]
    default_version: str = DEFAULTS["default_version"]
    endpoint_url: str | None = DEFAULTS["endpoint_url"]
    region: str | None = DEFAULTS["region"]
    log_level: str = DEFAULTS["log_level"]

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Settings":
        settings = cls(
            project_name=data.get("project_name", DEFAULTS["project_name"]),
            default_format=data.get("default_format", DEFAULTS["default_format"]),
            # An unquoted 2012-10-17 arrives from YAML as a date.
            default_version=str(data.get("default_version", DEFAULTS["default_version"])),
            endpoint_url=data.get("endpoint_url", DEFAULTS["endpoint_url"]),
            region=data.get("region", DEFAULTS["region"]),
            log_level=str(data.get("log_level", DEFAULTS["log_level"])).upper(),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.default_format not in FORMATS:
            raise ValueError(f"default_format must be one of {', '.join(FORMATS)}, got {self.default_format!r}")
        versions = [version.value for version in PolicyVersion]
        if self.default_version not in versions:
            raise ValueError(f"default_version must be one of {', '.join(versions)}, got {self.default_version!r}")

    def merge_cli(self, format_override: str | None = None, log_level: str | None = None) -> "Settings":
        return replace(
            self,
            default_format=format_override or self.default_format,
            log_level=(log_level or self.log_level).upper(),
        )


def load_settings(path: Path) -> Settings:
    if not path.exists():
        return Settings()

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ValueError("Configuration file must be a mapping of keys to values.")

    return Settings.from_mapping(data)


__all__ = ["FORMATS", "Settings", "load_settings"]
