from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, cast

from .domain.errors import ConfigError
from .domain.schema_defs import ColumnHandling
from .types import ConfigOverrides, YamlConfig


STAGES = ("full", "headers")


@dataclass(frozen=True)
class Config:
    pipeline_version: str = "v1.0"
    max_errors: int = 50
    # Pipeline stage: 'full' (default) or 'headers' for headers-only validation
    stage: str = "full"
    # None keeps the policy declared in the importer file
    invalid_column_handling: Optional[ColumnHandling] = None


def _parse_handling(raw: object) -> Optional[ColumnHandling]:
    if raw is None or raw == "":
        return None
    try:
        return ColumnHandling(str(raw).strip().lower())
    except ValueError:
        valid = ", ".join(h.value for h in ColumnHandling)
        raise ConfigError("invalid_column_handling", f"'{raw}' is not one of: {valid}")


def load_config(path: Optional[Path], overrides: Optional[ConfigOverrides] = None) -> Config:
    import yaml

    data: YamlConfig = {}

    # Always load configs/config.yaml if it exists
    default_config = Path("configs/config.yaml")
    if default_config.exists():
        raw = yaml.safe_load(default_config.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            data.update(cast(YamlConfig, raw))

    # Then load custom config if provided (overrides default)
    if path is not None and path.exists():
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            data.update(cast(YamlConfig, raw))

    # Finally apply CLI overrides
    if overrides:
        data.update(cast(YamlConfig, {k: v for k, v in overrides.items() if v is not None}))

    defaults = Config()
    stage = str(data.get("stage", defaults.stage)).strip().lower()
    if stage not in STAGES:
        raise ConfigError("stage", f"'{stage}' is not one of: {', '.join(STAGES)}")
    try:
        max_errors = int(data.get("max_errors", defaults.max_errors))
    except (TypeError, ValueError):
        raise ConfigError("max_errors", f"'{data.get('max_errors')}' is not an integer")

    # Build Config explicitly with coercions for strict typing
    return Config(
        pipeline_version=str(data.get("pipeline_version", defaults.pipeline_version)),
        max_errors=max_errors,
        stage=stage,
        invalid_column_handling=_parse_handling(data.get("invalid_column_handling")),
    )
