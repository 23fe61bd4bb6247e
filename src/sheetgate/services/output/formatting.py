from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from ...domain.errors import Diagnostic
from ...domain.results import Row, ValidationResult
from ...domain.schema_defs import ColumnSchema, InvalidHandling, TypeConfig, TypeTag
from ..validation.dates import to_iso
from ..validation.lookup import DISPLAY_ROW_OFFSET
from ..validation.values import ValueKind, as_text, is_empty, kind_of, to_number


def _format_number(value: Any, precision: int) -> Any:
    num = to_number(value)
    if num is None:
        return value
    if num.is_integer():
        return f"{int(num):,}"
    text = f"{num:,.{max(precision, 0)}f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def _format_boolean(value: Any, cfg: TypeConfig) -> Any:
    if kind_of(value) is ValueKind.BOOLEAN:
        return "Yes" if bool(value) else "No"
    if kind_of(value) is ValueKind.TEXT:
        bcfg = cfg.boolean
        if bcfg.case_sensitive:
            token, truthy, falsy = value, set(bcfg.true_tokens), set(bcfg.false_tokens)
        else:
            token = value.casefold()
            truthy = {t.casefold() for t in bcfg.true_tokens}
            falsy = {t.casefold() for t in bcfg.false_tokens}
        if token in truthy:
            return "Yes"
        if token in falsy:
            return "No"
    return value


def format_value(value: Any, column: ColumnSchema, type_config: Optional[TypeConfig] = None) -> Any:
    """Export-time rendering of a cell. Values that cannot be coerced pass through unchanged."""
    if is_empty(value):
        return ""
    cfg = type_config or TypeConfig()
    if column.type is TypeTag.NUMBER:
        return _format_number(value, cfg.number.precision)
    if column.type is TypeTag.DATE:
        return to_iso(value) or value
    if column.type is TypeTag.BOOLEAN:
        return _format_boolean(value, cfg)
    return as_text(value)


def format_rows(
    rows: Sequence[Row], schema: Sequence[ColumnSchema], type_config: Optional[TypeConfig] = None
) -> list[dict[str, Any]]:
    by_name = {c.name: c for c in schema}
    out: list[dict[str, Any]] = []
    for row in rows:
        out.append(
            {
                k: (format_value(v, by_name[k], type_config) if k in by_name else v)
                for k, v in row.items()
            }
        )
    return out


def handle_invalid_value(value: Any, column: ColumnSchema) -> Any:
    if column.invalid_handling is InvalidHandling.REMOVE:
        return None
    if column.invalid_handling is InvalidHandling.DEFAULT:
        return column.default_value or None
    # flag and reject leave the raw value for review
    return value


@dataclass(frozen=True)
class HandledRows:
    rows: list[dict[str, Any]]
    rejected: Tuple[Diagnostic, ...]

    @property
    def blocked(self) -> bool:
        return bool(self.rejected)


def apply_invalid_handling(
    rows: Sequence[Row], schema: Sequence[ColumnSchema], result: ValidationResult
) -> HandledRows:
    """Apply each column's invalid-data policy to the cells that carry diagnostics.

    Rows are copied; diagnostics under a ``reject`` column are returned so the
    caller can block submission.
    """
    by_name = {c.name: c for c in schema}
    out = [dict(r) for r in rows]
    rejected: list[Diagnostic] = []
    handled: set[Tuple[int, str]] = set()
    for d in result.diagnostics:
        col = by_name.get(d.column)
        idx = d.row - DISPLAY_ROW_OFFSET
        if col is None or not 0 <= idx < len(out):
            continue
        if col.invalid_handling is InvalidHandling.REJECT:
            rejected.append(d)
            continue
        if (idx, d.column) in handled:
            continue
        handled.add((idx, d.column))
        out[idx][d.column] = handle_invalid_value(out[idx].get(d.column), col)
    return HandledRows(rows=out, rejected=tuple(rejected))
