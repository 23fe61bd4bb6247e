from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

from ..config import Config
from ..domain.results import Row, ValidationResult
from ..domain.schema_defs import ColumnHandling, ColumnSchema, TypeConfig
from ..types import ManifestOutcome
from .output.formatting import HandledRows, apply_invalid_handling, format_rows
from .output.manifest_writer import write_manifest


class OutputService:
    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def apply_invalid_handling(
        self, rows: Sequence[Row], schema: Sequence[ColumnSchema], result: ValidationResult
    ) -> HandledRows:
        handled = apply_invalid_handling(rows, schema, result)
        if handled.blocked:
            self.logger.warning(
                "Rejected values block submission",
                extra={
                    "rejected": len(handled.rejected),
                    "columns": sorted({d.column for d in handled.rejected}),
                },
            )
        return handled

    def format_rows(
        self, rows: Sequence[Row], schema: Sequence[ColumnSchema], type_config: TypeConfig
    ) -> list[dict[str, Any]]:
        self.logger.info("Formatting rows for export", extra={"rows": len(rows)})
        return format_rows(rows, schema, type_config)

    def write_manifest(
        self,
        *,
        run_dir: Path,
        input_path: Path,
        schema_path: Path,
        started_at: str,
        finished_at: str,
        cfg: Config,
        handling: ColumnHandling,
        outcome: ManifestOutcome,
    ) -> Path:
        return write_manifest(
            run_dir=run_dir,
            input_path=input_path,
            schema_path=schema_path,
            started_at=started_at,
            finished_at=finished_at,
            cfg=cfg,
            handling=handling,
            outcome=outcome,
            logger=self.logger,
        )
