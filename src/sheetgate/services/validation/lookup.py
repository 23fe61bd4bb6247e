from __future__ import annotations

from typing import Optional

from ...domain.errors import DEFAULT_SUGGESTION, Category, Diagnostic
from ...domain.results import ValidationResult

# Header occupies spreadsheet row 1 and rows are 1-indexed for users
DISPLAY_ROW_OFFSET = 2


def display_row(row_index: int) -> int:
    return row_index + DISPLAY_ROW_OFFSET


def diagnostics_for_cell(
    result: ValidationResult, row_index: int, column: str
) -> list[Diagnostic]:
    row = display_row(row_index)
    return [d for d in result.diagnostics if d.row == row and d.column == column]


def cell_message(result: ValidationResult, row_index: int, column: str) -> Optional[str]:
    found = diagnostics_for_cell(result, row_index, column)
    return found[0].message if found else None


def cell_category(result: ValidationResult, row_index: int, column: str) -> Optional[Category]:
    found = diagnostics_for_cell(result, row_index, column)
    return found[0].category if found else None


def rows_with_errors(result: ValidationResult) -> list[int]:
    """0-based indices of rows carrying at least one diagnostic, ascending."""
    return sorted({d.row - DISPLAY_ROW_OFFSET for d in result.diagnostics})


def suggestion_for(diagnostic: Diagnostic) -> str:
    return diagnostic.suggestion or DEFAULT_SUGGESTION
