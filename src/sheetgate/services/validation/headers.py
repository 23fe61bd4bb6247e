from __future__ import annotations

from pathlib import PurePath
from typing import Sequence

from ...domain.results import HeaderReconciliationResult
from ...domain.schema_defs import ColumnSchema


def reconcile_headers(
    file_headers: Sequence[str], schema: Sequence[ColumnSchema]
) -> HeaderReconciliationResult:
    """
    Compare the file's header row with the declared columns:
    1. A column is present only on an exact, case-sensitive name match
    2. Absent required columns are reported as missing
    3. Headers matching no column are unrecognized (informational only)
    """
    header_set = set(file_headers)
    names = {c.name for c in schema}

    present: list[str] = []
    missing_required: list[str] = []
    for col in schema:
        if col.name in header_set:
            present.append(col.name)
        elif col.is_required:
            missing_required.append(col.name)

    unrecognized = [h for h in file_headers if h not in names]

    return HeaderReconciliationResult(
        valid=not missing_required,
        expected_columns=tuple(schema),
        present=tuple(present),
        missing_required=tuple(missing_required),
        unrecognized=tuple(unrecognized),
    )


def file_extension(file_name: str) -> str:
    return PurePath(file_name).suffix.lower()


def validate_file_format(file_name: str, accepted_formats: Sequence[str]) -> bool:
    """Extension check (e.g. ``.xlsx``), case-insensitive on the file name."""
    ext = file_extension(file_name)
    return bool(ext) and ext in {f.lower() for f in accepted_formats}
