from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Category(str, Enum):
    MISSING = "missing"
    FORMAT = "format"
    INVALID = "invalid"
    OTHER = "other"


DEFAULT_SUGGESTION = "Review and correct the data"


@dataclass(frozen=True)
class Diagnostic:
    """A single row/column-addressed validation failure.

    ``row`` is the display row number (data index + 2, header is row 1).
    """

    row: int
    column: str
    value: Any
    message: str
    category: Category
    suggestion: str = DEFAULT_SUGGESTION


@dataclass(frozen=True)
class CheckFailure:
    """Outcome of a single type or format check, before it is addressed to a cell."""

    message: str
    category: Category
    suggestion: str

    def at(self, row: int, column: str, value: Any) -> Diagnostic:
        return Diagnostic(
            row=row,
            column=column,
            value=value,
            message=self.message,
            category=self.category,
            suggestion=self.suggestion,
        )


@dataclass(frozen=True)
class ConfigIssue:
    """Non-fatal configuration problem (e.g. a pattern that does not compile)."""

    path: str
    message: str
    pattern: Optional[str] = None


class ConfigError(ValueError):
    """Raised when importer or run configuration cannot be used."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message
