from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple

from .errors import Category, Diagnostic
from .schema_defs import ColumnSchema

Row = Mapping[str, Any]


@dataclass(frozen=True)
class HeaderReconciliationResult:
    valid: bool
    expected_columns: Tuple[ColumnSchema, ...]
    present: Tuple[str, ...]
    missing_required: Tuple[str, ...]
    unrecognized: Tuple[str, ...]


@dataclass(frozen=True)
class DriftDetail:
    column: str
    message: str


@dataclass(frozen=True)
class DriftReport:
    message: str
    details: Tuple[DriftDetail, ...]


@dataclass(frozen=True)
class SchemaDriftResult:
    valid: bool
    extra_columns: Tuple[str, ...]
    cleaned_rows: list[dict[str, Any]]
    report: Optional[DriftReport] = None


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    diagnostics: Tuple[Diagnostic, ...]
    by_category: Mapping[Category, Tuple[Diagnostic, ...]] = field(default_factory=dict)

    @classmethod
    def from_diagnostics(cls, diagnostics: Sequence[Diagnostic]) -> "ValidationResult":
        buckets: dict[Category, list[Diagnostic]] = {c: [] for c in Category}
        for d in diagnostics:
            buckets[d.category].append(d)
        return cls(
            valid=not diagnostics,
            diagnostics=tuple(diagnostics),
            by_category={c: tuple(items) for c, items in buckets.items()},
        )

    def counts(self) -> dict[str, int]:
        return {c.value: len(self.by_category.get(c, ())) for c in Category}


@dataclass(frozen=True)
class FileValidationResult:
    valid: bool
    format: bool
    headers: HeaderReconciliationResult
    drift: Optional[SchemaDriftResult]
    data: Optional[ValidationResult]
    cleaned_rows: list[dict[str, Any]]
