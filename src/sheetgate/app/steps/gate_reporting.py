from __future__ import annotations

import logging

from ...domain.results import HeaderReconciliationResult, SchemaDriftResult, ValidationResult
from ...domain.schema_defs import ColumnHandling
from ...services.validation.lookup import rows_with_errors, suggestion_for


def report_headers(result: HeaderReconciliationResult, logger: logging.Logger) -> None:
    """Log the header gate: missing required columns block, unrecognized ones are a notice."""
    if result.missing_required:
        logger.error(
            f"Missing {len(result.missing_required)} required column(s): "
            + ", ".join(result.missing_required)
        )
    if result.unrecognized:
        logger.warning(
            f"{len(result.unrecognized)} unrecognized column(s): "
            + ", ".join(result.unrecognized)
        )
    if result.valid:
        logger.info(
            f"Headers OK ({len(result.present)} of {len(result.expected_columns)} columns present)"
        )


def report_drift(
    result: SchemaDriftResult, policy: ColumnHandling, logger: logging.Logger
) -> None:
    if result.report is None:
        return
    log = logger.error if policy is ColumnHandling.REJECT else logger.warning
    log(f"{result.report.message} (policy: {policy.value})")
    for detail in result.report.details[:5]:
        log(f"  {detail.message}")
    if policy in (ColumnHandling.IGNORE, ColumnHandling.WARN):
        logger.info(f"Removed {len(result.extra_columns)} column(s) before validation")


def report_diagnostics(
    result: ValidationResult, logger: logging.Logger, max_errors: int
) -> None:
    """Summarize diagnostics by category and echo the first ``max_errors`` of them."""
    if result.valid:
        logger.info("All rows passed validation")
        return

    counts = result.counts()
    summary = ", ".join(f"{name}: {n}" for name, n in counts.items() if n)
    logger.warning(
        f"{len(result.diagnostics)} issue(s) in {len(rows_with_errors(result))} row(s) ({summary})"
    )
    shown = result.diagnostics[: max(max_errors, 0)]
    for d in shown:
        logger.warning(
            f"  Row {d.row}, {d.column}: {d.message}",
            extra={"category": d.category.value, "suggestion": suggestion_for(d)},
        )
    hidden = len(result.diagnostics) - len(shown)
    if hidden > 0:
        logger.warning(f"  ... {hidden} more (see the Diagnostics sheet)")
