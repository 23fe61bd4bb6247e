from __future__ import annotations

from pathlib import Path

import pandas as pd
from openpyxl import load_workbook

from sheetgate.domain.errors import Category, Diagnostic
from sheetgate.services.io_excel import read_table, write_report


def test_read_table_xlsx_keeps_native_types(tmp_path: Path) -> None:
    wb = tmp_path / "people.xlsx"
    pd.DataFrame(
        [
            {"name": "Ann", "age": 30, "active": True},
            {"name": None, "age": None, "active": None},
            {"name": "Bob", "age": 41.5, "active": False},
        ]
    ).to_excel(wb, index=False)

    table = read_table(wb)
    assert table.name == "people.xlsx"
    assert table.headers == ["name", "age", "active"]
    # The fully blank row is dropped
    assert len(table.rows) == 2
    assert table.rows[0] == {"name": "Ann", "age": 30, "active": True}
    assert table.rows[1]["age"] == 41.5


def test_read_table_csv_keeps_text(tmp_path: Path) -> None:
    csv = tmp_path / "people.csv"
    csv.write_text("name,age,notes\nAnn,030,\n,,\nBob,x,hi\n", encoding="utf-8")

    table = read_table(csv)
    assert table.headers == ["name", "age", "notes"]
    assert table.rows == [
        {"name": "Ann", "age": "030", "notes": ""},
        {"name": "Bob", "age": "x", "notes": "hi"},
    ]


def test_write_report_sheets_and_tables(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "report.xlsx"
    rows = [{"name": "Ann", "age": "30", "extra": 1}]
    diagnostics = [Diagnostic(2, "age", "x", "Value must be a number", Category.FORMAT)]
    write_report(out, rows, ["age", "name"], diagnostics)

    data = pd.read_excel(out, sheet_name="Data", dtype=str)
    assert list(data.columns) == ["age", "name", "extra"]
    diag = pd.read_excel(out, sheet_name="Diagnostics")
    assert list(diag.columns) == ["Row", "Column", "Category", "Message", "Suggestion", "Value"]
    assert diag.loc[0, "Category"] == "format"
    assert int(diag.loc[0, "Row"]) == 2

    wb = load_workbook(out)
    assert "DataTable" in wb["Data"].tables
    assert "DiagnosticsTable" in wb["Diagnostics"].tables


def test_write_report_without_diagnostics(tmp_path: Path) -> None:
    out = tmp_path / "report.xlsx"
    write_report(out, [{"a": 1}], ["a"], [])
    wb = load_workbook(out)
    # An empty sheet gets headers but no Excel Table
    assert len(wb["Diagnostics"].tables) == 0
    assert wb["Diagnostics"]["A1"].value == "Row"
