from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from ..config import Config
from ..domain.errors import ConfigError
from ..domain.results import HeaderReconciliationResult, SchemaDriftResult, ValidationResult
from ..domain.schema_defs import Predicate, column_names
from ..services.validate_service import ValidateService
from ..services.validation.headers import validate_file_format
from ..services.validation.schema_loader import load_importer_config
from ..types import ManifestOutcome
from .container import Container
from .run_manager import start_run, utc_iso, utc_stamp
from .steps.gate_reporting import report_diagnostics, report_drift, report_headers

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_CONFIG = 2
EXIT_FAILED = 3


def _outcome(
    exit_code: int,
    rows: int,
    headers: Optional[HeaderReconciliationResult] = None,
    drift: Optional[SchemaDriftResult] = None,
    data: Optional[ValidationResult] = None,
) -> ManifestOutcome:
    return {
        "valid": exit_code == EXIT_OK,
        "exit_code": exit_code,
        "rows": rows,
        "diagnostics": {} if data is None else data.counts(),
        "extra_columns": [] if drift is None else list(drift.extra_columns),
        "missing_required": [] if headers is None else list(headers.missing_required),
    }


@dataclass(frozen=True)
class Orchestrator:
    container: Container
    cfg: Config
    logger: logging.Logger
    predicates: Mapping[str, Predicate] = field(default_factory=dict)

    def run(self, input_path: Path, schema_path: Path, out_dir: Path) -> int:
        """
        Gate pipeline: file format -> headers -> schema drift -> cells,
        then invalid-data handling and report_<ts>.xlsx + run_manifest.yaml.
        """
        run_ctx = start_run(out_dir)
        val: ValidateService = self.container.validate

        try:
            # 1. Importer configuration
            try:
                importer = load_importer_config(schema_path, self.predicates)
            except ConfigError as e:
                self.logger.error(f"Invalid importer configuration: {e}")
                return EXIT_CONFIG
            handling = self.cfg.invalid_column_handling or importer.invalid_column_handling
            self.logger.info(
                f"Loaded schema with {len(importer.columns)} columns",
                extra={"schema": str(schema_path), "invalid_column_handling": handling.value},
            )

            def finish(outcome: ManifestOutcome) -> int:
                self.container.output.write_manifest(
                    run_dir=run_ctx.run_dir,
                    input_path=input_path,
                    schema_path=schema_path,
                    started_at=run_ctx.started_at,
                    finished_at=utc_iso(),
                    cfg=self.cfg,
                    handling=handling,
                    outcome=outcome,
                )
                code = outcome["exit_code"]
                if code == EXIT_OK:
                    self.logger.info("Validation passed")
                else:
                    self.logger.error("Validation blocked; see the report for details")
                return code

            # 2. File format gate
            if not validate_file_format(input_path.name, importer.accepted_formats):
                self.logger.error(
                    f"Unsupported file type '{input_path.suffix}'; accepted: "
                    + ", ".join(importer.accepted_formats)
                )
                return finish(_outcome(EXIT_BLOCKED, 0))

            # 3. Read table
            table = self.container.io.read_table(input_path)

            # 4a. Headers-only stage
            if self.cfg.stage == "headers":
                headers = val.reconcile_headers(table.headers, importer.columns)
                report_headers(headers, self.logger)
                code = EXIT_OK if headers.valid else EXIT_BLOCKED
                return finish(_outcome(code, len(table.rows), headers))

            # 4b. Full gates
            result = val.validate_file(
                table.name, table.headers, table.rows, importer, policy=handling
            )
            report_headers(result.headers, self.logger)
            if result.drift is not None:
                report_drift(result.drift, handling, self.logger)
            if result.data is None:
                return finish(
                    _outcome(EXIT_BLOCKED, len(table.rows), result.headers, result.drift)
                )
            report_diagnostics(result.data, self.logger, self.cfg.max_errors)

            # 5. Invalid-data handling and export
            out = self.container.output
            handled = out.apply_invalid_handling(result.cleaned_rows, importer.columns, result.data)
            export_rows = out.format_rows(handled.rows, importer.columns, importer.type_config)
            report_path = run_ctx.run_dir / f"report_{utc_stamp()}.xlsx"
            self.container.io.write_report(
                report_path,
                export_rows,
                column_names(importer.columns),
                result.data.diagnostics,
            )

            code = EXIT_OK if result.valid and not handled.blocked else EXIT_BLOCKED
            return finish(
                _outcome(code, len(table.rows), result.headers, result.drift, result.data)
            )

        except Exception as e:
            self.logger.error(f"Pipeline failed: {e}", exc_info=True)
            return EXIT_FAILED

