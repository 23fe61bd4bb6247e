from __future__ import annotations

from sheetgate.domain.errors import Category, Diagnostic
from sheetgate.domain.results import ValidationResult
from sheetgate.services.validation.lookup import (
    cell_category,
    cell_message,
    diagnostics_for_cell,
    display_row,
    rows_with_errors,
    suggestion_for,
)


def _result() -> ValidationResult:
    return ValidationResult.from_diagnostics(
        [
            Diagnostic(4, "age", "x", "Value must be a number", Category.FORMAT, "Enter a number"),
            Diagnostic(4, "age", "x", "too young", Category.INVALID, ""),
            Diagnostic(2, "email", "", "Required", Category.MISSING),
        ]
    )


def test_display_row_offset() -> None:
    assert display_row(0) == 2


def test_cell_lookups_use_zero_based_rows() -> None:
    result = _result()
    assert len(diagnostics_for_cell(result, 2, "age")) == 2
    assert cell_message(result, 2, "age") == "Value must be a number"
    assert cell_category(result, 0, "email") is Category.MISSING
    assert cell_message(result, 1, "age") is None
    assert cell_category(result, 0, "age") is None


def test_rows_with_errors_sorted_unique() -> None:
    assert rows_with_errors(_result()) == [0, 2]


def test_suggestion_fallback() -> None:
    blank = _result().diagnostics[1]
    assert suggestion_for(blank) == "Review and correct the data"
    assert suggestion_for(_result().diagnostics[0]) == "Enter a number"
