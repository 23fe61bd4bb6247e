from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import pandas as pd

from ..domain.errors import Diagnostic


DIAGNOSTIC_COLUMNS = ["Row", "Column", "Category", "Message", "Suggestion", "Value"]


@dataclass(frozen=True)
class InputTable:
    name: str
    headers: list[str]
    rows: list[dict[str, Any]]


def _to_python(value: Any) -> Any:
    """Turn pandas/numpy cell values into plain Python values; blanks become None."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        # numpy scalar
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def frame_to_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    headers = [str(c) for c in df.columns]
    rows: list[dict[str, Any]] = []
    for record in df.itertuples(index=False, name=None):
        rows.append({h: _to_python(v) for h, v in zip(headers, record)})
    return rows


def _is_blank_row(row: Mapping[str, Any]) -> bool:
    return all(v is None or (isinstance(v, str) and v.strip() == "") for v in row.values())


def read_table(path: Path) -> InputTable:
    """Read the first sheet (or the CSV) into a header list and key->value rows.

    Fully blank rows are skipped. CSV cells stay text; workbook cells keep their
    native types (numbers, booleans, datetimes).
    """
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    else:
        df = pd.read_excel(path, sheet_name=0, dtype=object)
    headers = [str(c) for c in df.columns]
    rows = [r for r in frame_to_rows(df) if not _is_blank_row(r)]
    return InputTable(name=path.name, headers=headers, rows=rows)


def diagnostics_frame(diagnostics: Sequence[Diagnostic]) -> pd.DataFrame:
    records = [
        {
            "Row": d.row,
            "Column": d.column,
            "Category": d.category.value,
            "Message": d.message,
            "Suggestion": d.suggestion,
            "Value": "" if d.value is None else str(d.value),
        }
        for d in diagnostics
    ]
    return pd.DataFrame(records, columns=DIAGNOSTIC_COLUMNS)


def write_report(
    out_path: Path,
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
    diagnostics: Sequence[Diagnostic],
) -> None:
    """Write cleaned rows ('Data') and diagnostics ('Diagnostics') as native Excel Tables.

    - Data columns follow ``columns`` first, then any extra keys in row order
    - Each sheet gets an Excel Table with a default built-in style
    """
    from openpyxl.styles import Alignment, Font
    from openpyxl.utils import get_column_letter
    from openpyxl.worksheet.table import Table, TableStyleInfo

    order = list(columns)
    for row in rows:
        for key in row:
            if key not in order:
                order.append(key)
    data = pd.DataFrame(list(rows), columns=order)
    sheets = {"Data": data, "Diagnostics": diagnostics_frame(diagnostics)}

    out_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            ws = writer.sheets[sheet_name]
            max_col = len(df.columns)
            if max_col == 0:
                continue

            # An Excel Table needs at least one data row
            if len(df):
                max_row = len(df) + 1  # +1 for header
                table_ref = f"A1:{get_column_letter(max_col)}{max_row}"
                table = Table(displayName=f"{sheet_name}Table", ref=table_ref)
                table.tableStyleInfo = TableStyleInfo(
                    name="TableStyleMedium2",
                    showFirstColumn=False,
                    showLastColumn=False,
                    showRowStripes=True,
                    showColumnStripes=False,
                )
                ws.add_table(table)

            # Make columns slightly wider for readability (no fancy auto-fit)
            for idx, header in enumerate(df.columns, start=1):
                col = get_column_letter(idx)
                ws.column_dimensions[col].width = max(14, min(60, len(str(header)) + 4))
                cell = ws.cell(row=1, column=idx)
                cell.alignment = Alignment(horizontal="left")
                cell.font = Font(bold=True)


class IOService:
    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def read_table(self, path: Path) -> InputTable:
        self.logger.info("Reading table", extra={"path": str(path)})
        table = read_table(path)
        self.logger.info(
            "Parsed table", extra={"rows": len(table.rows), "header_count": len(table.headers)}
        )
        return table

    def write_report(
        self,
        out_path: Path,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[str],
        diagnostics: Sequence[Diagnostic],
    ) -> None:
        self.logger.info(
            f"Writing {out_path.name}",
            extra={"path": str(out_path), "rows": len(rows), "diagnostics": len(diagnostics)},
        )
        write_report(out_path, rows, columns, diagnostics)
