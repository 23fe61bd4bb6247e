from __future__ import annotations

import logging
from pathlib import Path
from typing import cast

import pandas as pd

from ...config import Config
from ...domain.schema_defs import ColumnHandling
from .utils import sha256_file
from ...types import (
    Manifest,
    ManifestEnvironment,
    ManifestInputs,
    ManifestInputsEntry,
    ManifestOutcome,
    ManifestParameters,
)


def write_manifest(
    *,
    run_dir: Path,
    input_path: Path,
    schema_path: Path,
    started_at: str,
    finished_at: str,
    cfg: Config,
    handling: ColumnHandling,
    outcome: ManifestOutcome,
    logger: logging.Logger,
) -> Path:
    import platform
    import sys
    import yaml

    inputs: ManifestInputs = {
        "data": cast(
            ManifestInputsEntry, {"path": str(input_path), "sha256": sha256_file(input_path)}
        ),
        "schema": cast(
            ManifestInputsEntry, {"path": str(schema_path), "sha256": sha256_file(schema_path)}
        ),
    }

    params: ManifestParameters = {
        "stage": cfg.stage,
        "max_errors": cfg.max_errors,
        "invalid_column_handling": handling.value,
    }

    env: ManifestEnvironment = {
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "pandas": pd.__version__,
    }

    manifest: Manifest = {
        "pipeline_version": cfg.pipeline_version,
        "started_at": started_at,
        "finished_at": finished_at,
        "inputs": inputs,
        "parameters": params,
        "environment": env,
        "outcome": outcome,
    }

    out_path = run_dir / "run_manifest.yaml"
    logger.info("Writing run_manifest.yaml", extra={"path": str(out_path)})
    with out_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(manifest, f, sort_keys=False, allow_unicode=True)
    return out_path
