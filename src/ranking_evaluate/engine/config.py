"""Run configuration: folders, metrics, output fields and platform."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..errors import ConfigurationError
from ..metrics import DEFAULT_METRICS

_FOLDER_KEYS = ("configurations_folder", "corpora_folder", "ratings_folder", "templates_folder")


@dataclass(frozen=True)
class EngineConfig:
    """Everything an evaluation run needs besides the platform instance."""
    configurations_folder: Path = Path("configurations")
    corpora_folder: Path = Path("corpora")
    ratings_folder: Path = Path("ratings")
    templates_folder: Path = Path("templates")
    metrics: List[str] = field(default_factory=lambda: list(DEFAULT_METRICS))
    fields: List[str] = field(default_factory=list)
    platform: str = "memory"
    platform_settings: Dict[str, Any] = field(default_factory=dict)

    def resolve(self, base: Path) -> "EngineConfig":
        """Make relative folders relative to base."""
        return replace(self, **{
            key: getattr(self, key) if getattr(self, key).is_absolute() else base / getattr(self, key)
            for key in _FOLDER_KEYS
        })

    def override(self, **values: Any) -> "EngineConfig":
        """Replace every value that is not None (or an empty tuple/list)."""
        changes = {k: v for k, v in values.items() if v is not None and v != () and v != []}
        for key in _FOLDER_KEYS:
            if key in changes:
                changes[key] = Path(changes[key])
        for key in ("metrics", "fields"):
            if key in changes:
                changes[key] = list(changes[key])
        return replace(self, **changes)


def load_config(path: Path) -> EngineConfig:
    """Load an EngineConfig from YAML; relative folders are resolved against the file's folder."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")

    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys in {path}: {unknown}")

    for key in ("metrics", "fields"):
        if key in data and not isinstance(data[key], list):
            raise ConfigurationError(f'"{key}" in {path} must be a list')

    config = EngineConfig().override(**data)
    return config.resolve(Path(path).parent)
