from __future__ import annotations

from typing import Any, Mapping, Sequence

from ...domain.results import DriftDetail, DriftReport, Row, SchemaDriftResult
from ...domain.schema_defs import ColumnHandling, ColumnSchema


def remove_columns(rows: Sequence[Row], columns: Sequence[str]) -> list[dict[str, Any]]:
    """Drop the given keys from every row; rows themselves are never dropped."""
    drop = set(columns)
    return [{k: v for k, v in row.items() if k not in drop} for row in rows]


def keep_only_columns(rows: Sequence[Row], columns: Sequence[str]) -> list[dict[str, Any]]:
    """Project every row onto ``columns`` (in that order), skipping keys a row lacks."""
    return [{c: row[c] for c in columns if c in row} for row in rows]


def rename_columns(rows: Sequence[Row], mapping: Mapping[str, str]) -> list[dict[str, Any]]:
    """Rename keys per ``mapping``; renamed keys move to the end of the row."""
    out: list[dict[str, Any]] = []
    for row in rows:
        new_row = dict(row)
        for old, new in mapping.items():
            if old in new_row:
                new_row[new] = new_row.pop(old)
        out.append(new_row)
    return out


def find_extra_columns(rows: Sequence[Row], schema: Sequence[ColumnSchema]) -> list[str]:
    """Keys of the first row that the schema does not declare, in row order."""
    if not rows:
        return []
    names = {c.name for c in schema}
    return [k for k in rows[0].keys() if k not in names]


def _drift_report(extra: Sequence[str]) -> DriftReport:
    return DriftReport(
        message=f"Found {len(extra)} column(s) not defined in the schema",
        details=tuple(
            DriftDetail(column=c, message=f'Column "{c}" is not defined in the schema')
            for c in extra
        ),
    )


def resolve_schema(
    rows: Sequence[Row], schema: Sequence[ColumnSchema], policy: ColumnHandling
) -> SchemaDriftResult:
    """Classify undeclared columns and apply the column-handling policy.

    - reject: rows unchanged, invalid when extras exist (caller blocks)
    - ignore: extras stripped, valid
    - warn: extras stripped, invalid when extras exist (caller shows a notice)
    - include: extras kept, valid
    The report is filled whenever extras exist, whatever the policy.
    """
    if not rows:
        return SchemaDriftResult(valid=True, extra_columns=(), cleaned_rows=[], report=None)

    extra = find_extra_columns(rows, schema)
    if not extra:
        return SchemaDriftResult(
            valid=True, extra_columns=(), cleaned_rows=[dict(r) for r in rows], report=None
        )

    if policy in (ColumnHandling.IGNORE, ColumnHandling.WARN):
        cleaned = remove_columns(rows, extra)
    else:
        cleaned = [dict(r) for r in rows]

    valid = policy in (ColumnHandling.IGNORE, ColumnHandling.INCLUDE)
    return SchemaDriftResult(
        valid=valid,
        extra_columns=tuple(extra),
        cleaned_rows=cleaned,
        report=_drift_report(extra),
    )


def blocks_progress(result: SchemaDriftResult, policy: ColumnHandling) -> bool:
    """Only the reject policy stops the pipeline; warn is a notice."""
    return policy is ColumnHandling.REJECT and not result.valid
