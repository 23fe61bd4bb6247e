from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..domain.errors import Category, Diagnostic
from ..domain.results import (
    FileValidationResult,
    HeaderReconciliationResult,
    Row,
    SchemaDriftResult,
    ValidationResult,
)
from ..domain.schema_defs import (
    ColumnHandling,
    ColumnSchema,
    ImporterConfig,
    RuleKind,
    TypeConfig,
)
from .validation.drift import blocks_progress, resolve_schema
from .validation.headers import reconcile_headers, validate_file_format
from .validation.lookup import display_row
from .validation.rules import evaluate_rules
from .validation.type_checks import check_format, check_type
from .validation.values import is_empty


def _missing(row: int, col: ColumnSchema, value: Any) -> Diagnostic:
    message = f'Required field "{col.label}" is missing or empty'
    for rule in col.validation_rules:
        if rule.kind is RuleKind.REQUIRED and rule.message:
            message = rule.message
            break
    return Diagnostic(
        row=row,
        column=col.name,
        value=value,
        message=message,
        category=Category.MISSING,
        suggestion=f'Add a value for the "{col.label}" field',
    )


def _validate_row(
    row_index: int,
    row: Row,
    schema: Sequence[ColumnSchema],
    by_name: dict[str, ColumnSchema],
    type_config: TypeConfig,
    out: list[Diagnostic],
) -> None:
    display = display_row(row_index)

    # 1. Required columns
    for col in schema:
        if col.is_required and is_empty(row.get(col.name)):
            out.append(_missing(display, col, row.get(col.name)))

    # 2. Cells present in the row, in row order
    for key, value in row.items():
        col = by_name.get(key)
        if col is None:
            # Undeclared column: drift is resolved before this gate
            continue
        if is_empty(value):
            # Already reported above when required
            continue

        failure = check_type(value, col.type, type_config)
        if failure is not None:
            out.append(failure.at(display, key, value))

        if col.format:
            fmt_failure = check_format(value, col.type, col.format)
            if fmt_failure is not None:
                out.append(fmt_failure.at(display, key, value))

        for outcome in evaluate_rules(value, col.validation_rules, col.type, type_config):
            out.append(
                Diagnostic(
                    row=display,
                    column=key,
                    value=value,
                    message=outcome.message,
                    category=outcome.category,
                    suggestion=outcome.suggestion,
                )
            )


def validate(
    rows: Sequence[Row], schema: Sequence[ColumnSchema], type_config: Optional[TypeConfig] = None
) -> ValidationResult:
    """Validate every cell of every row; diagnostics accumulate, nothing short-circuits."""
    cfg = type_config or TypeConfig()
    by_name = {c.name: c for c in schema}
    diagnostics: list[Diagnostic] = []
    for i, row in enumerate(rows):
        _validate_row(i, row, schema, by_name, cfg, diagnostics)
    return ValidationResult.from_diagnostics(diagnostics)


def validate_file(
    file_name: str,
    headers: Sequence[str],
    rows: Sequence[Row],
    importer: ImporterConfig,
    policy: Optional[ColumnHandling] = None,
) -> FileValidationResult:
    """Run the three gates in order: headers, schema drift, then cell validation.

    Data is validated (on drift-cleaned rows) only when the header gate passes
    and the drift policy did not reject the file.
    """
    handling = policy or importer.invalid_column_handling
    format_ok = validate_file_format(file_name, importer.accepted_formats)
    header_result = reconcile_headers(headers, importer.columns)

    drift: Optional[SchemaDriftResult] = None
    data: Optional[ValidationResult] = None
    cleaned: list[dict[str, Any]] = [dict(r) for r in rows]
    rejected = False

    if header_result.valid:
        drift = resolve_schema(rows, importer.columns, handling)
        cleaned = drift.cleaned_rows
        rejected = blocks_progress(drift, handling)
        if not rejected:
            data = validate(cleaned, importer.columns, importer.type_config)

    return FileValidationResult(
        valid=bool(format_ok and header_result.valid and not rejected and data and data.valid),
        format=format_ok,
        headers=header_result,
        drift=drift,
        data=data,
        cleaned_rows=cleaned,
    )


class ValidateService:
    """Logging front for the validation gates."""

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def reconcile_headers(
        self, headers: Sequence[str], schema: Sequence[ColumnSchema]
    ) -> HeaderReconciliationResult:
        result = reconcile_headers(headers, schema)
        self.logger.info(
            "Reconciled headers",
            extra={
                "present": len(result.present),
                "missing_required": list(result.missing_required),
                "unrecognized": list(result.unrecognized),
            },
        )
        return result

    def resolve_schema(
        self, rows: Sequence[Row], schema: Sequence[ColumnSchema], policy: ColumnHandling
    ) -> SchemaDriftResult:
        result = resolve_schema(rows, schema, policy)
        if result.extra_columns:
            self.logger.warning(
                "Schema drift: undeclared columns",
                extra={"extra_columns": list(result.extra_columns), "policy": policy.value},
            )
        return result

    def validate(
        self, rows: Sequence[Row], schema: Sequence[ColumnSchema], type_config: TypeConfig
    ) -> ValidationResult:
        self.logger.info("Validating rows", extra={"rows": len(rows), "columns": len(schema)})
        result = validate(rows, schema, type_config)
        counts = {f"{k}_errors": n for k, n in result.counts().items()}
        self.logger.info("Validated rows", extra={"valid": result.valid, **counts})
        return result

    def validate_file(
        self,
        file_name: str,
        headers: Sequence[str],
        rows: Sequence[Row],
        importer: ImporterConfig,
        policy: Optional[ColumnHandling] = None,
    ) -> FileValidationResult:
        self.logger.info(
            "Validating file", extra={"file": file_name, "rows": len(rows), "headers": len(headers)}
        )
        result = validate_file(file_name, headers, rows, importer, policy)
        if not result.format:
            self.logger.warning(
                "Unsupported file format",
                extra={"file": file_name, "accepted": list(importer.accepted_formats)},
            )
        self.logger.info(
            "File validation finished",
            extra={
                "valid": result.valid,
                "headers_valid": result.headers.valid,
                "drift_valid": None if result.drift is None else result.drift.valid,
                "diagnostics": 0 if result.data is None else len(result.data.diagnostics),
            },
        )
        return result
