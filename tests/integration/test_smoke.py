from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import yaml

from sheetgate.config import Config
from sheetgate.domain.schema_defs import ColumnHandling
from sheetgate.main import run_pipeline


IMPORTER = """
accepted_formats: [.xlsx, .csv]
invalid_column_handling: warn
columns:
  - name: email
    display_name: Email
    required: true
    type: email
  - name: age
    type: number
    invalid_handling: remove
    rules:
      - kind: min
        value: 18
        message: too young
  - name: active
    type: boolean
""".strip()


def write_excel(df: pd.DataFrame, path: Path) -> None:
    df.to_excel(path, index=False)


def write_importer(tmp_path: Path, text: str = IMPORTER) -> Path:
    path = tmp_path / "importer.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def only(pattern: str, base: Path) -> Path:
    found = list(base.glob(pattern))
    assert len(found) == 1, f"expected one {pattern} under {base}, got {found}"
    return found[0]


def test_valid_workbook_passes(tmp_path: Path) -> None:
    data = pd.DataFrame(
        [
            {"email": "ann@example.com", "age": 30, "active": True},
            {"email": "bob@example.com", "age": 1200, "active": "no"},
        ]
    )
    results_xlsx = tmp_path / "upload.xlsx"
    write_excel(data, results_xlsx)

    runs = tmp_path / "runs"
    code = run_pipeline(results_xlsx, write_importer(tmp_path), runs)
    assert code == 0

    report = only("*/report_*.xlsx", runs)
    df_out = pd.read_excel(report, sheet_name="Data", dtype=str)
    assert list(df_out.columns) == ["email", "age", "active"]
    assert df_out.loc[1, "age"] == "1,200"
    assert df_out.loc[0, "active"] == "Yes"
    assert df_out.loc[1, "active"] == "No"

    manifest = yaml.safe_load(only("*/run_manifest.yaml", runs).read_text(encoding="utf-8"))
    assert manifest["outcome"]["valid"] is True
    assert manifest["outcome"]["rows"] == 2
    assert manifest["parameters"]["invalid_column_handling"] == "warn"
    assert (report.parent / "latest_run.log").exists()


def test_cell_diagnostics_block_and_are_reported(tmp_path: Path) -> None:
    data = pd.DataFrame(
        [
            {"email": "", "age": 15, "active": "yes"},
            {"email": "carol@example.com", "age": "abc", "active": "maybe"},
        ]
    )
    csv = tmp_path / "upload.csv"
    data.to_csv(csv, index=False)

    runs = tmp_path / "runs"
    code = run_pipeline(csv, write_importer(tmp_path), runs, Config(max_errors=2))
    assert code == 1

    report = only("*/report_*.xlsx", runs)
    diag = pd.read_excel(report, sheet_name="Diagnostics")
    assert list(zip(diag["Row"], diag["Column"], diag["Category"])) == [
        (2, "email", "missing"),
        (2, "age", "invalid"),
        (3, "age", "format"),
        (3, "active", "format"),
    ]
    # Invalid ages are removed before export (invalid_handling: remove)
    df_out = pd.read_excel(report, sheet_name="Data")
    assert df_out["age"].isna().all()

    manifest = yaml.safe_load(only("*/run_manifest.yaml", runs).read_text(encoding="utf-8"))
    assert manifest["outcome"]["diagnostics"] == {
        "missing": 1,
        "format": 2,
        "invalid": 1,
        "other": 0,
    }

    # Only the first max_errors diagnostics are echoed to the log
    lines = (report.parent / "logs.jsonl").read_text(encoding="utf-8").splitlines()
    messages = [json.loads(line)["message"] for line in lines]
    assert "  Row 2, age: too young" in messages
    assert not any(m.startswith("  Row 3") for m in messages)


def test_missing_required_header_blocks(tmp_path: Path) -> None:
    results_xlsx = tmp_path / "upload.xlsx"
    write_excel(pd.DataFrame([{"age": 30}]), results_xlsx)

    runs = tmp_path / "runs"
    code = run_pipeline(results_xlsx, write_importer(tmp_path), runs)
    assert code == 1
    assert not list(runs.glob("*/report_*.xlsx"))
    manifest = yaml.safe_load(only("*/run_manifest.yaml", runs).read_text(encoding="utf-8"))
    assert manifest["outcome"]["missing_required"] == ["email"]


def test_reject_policy_blocks_extra_columns(tmp_path: Path) -> None:
    results_xlsx = tmp_path / "upload.xlsx"
    write_excel(pd.DataFrame([{"email": "a@example.com", "notes": "hi"}]), results_xlsx)
    importer = write_importer(tmp_path)

    rejected = run_pipeline(
        results_xlsx,
        importer,
        tmp_path / "runs_reject",
        Config(invalid_column_handling=ColumnHandling.REJECT),
    )
    assert rejected == 1

    # The importer's own policy (warn) strips the column and continues
    runs = tmp_path / "runs_warn"
    assert run_pipeline(results_xlsx, importer, runs) == 0
    df_out = pd.read_excel(only("*/report_*.xlsx", runs), sheet_name="Data")
    assert "notes" not in df_out.columns


def test_headers_stage_skips_cell_checks(tmp_path: Path) -> None:
    results_xlsx = tmp_path / "upload.xlsx"
    write_excel(pd.DataFrame([{"email": "not-an-email", "age": "old"}]), results_xlsx)

    runs = tmp_path / "runs"
    code = run_pipeline(results_xlsx, write_importer(tmp_path), runs, Config(stage="headers"))
    assert code == 0
    assert not list(runs.glob("*/report_*.xlsx"))
    assert list(runs.glob("*/run_manifest.yaml"))


def test_custom_predicates_are_wired_through(tmp_path: Path) -> None:
    importer = write_importer(
        tmp_path,
        """
columns:
  - name: code
    required: true
    rules:
      - kind: custom
        value: upper
""".strip(),
    )
    csv = tmp_path / "codes.csv"
    csv.write_text("code\nABC\nabc\n", encoding="utf-8")

    runs = tmp_path / "runs"
    code = run_pipeline(csv, importer, runs, predicates={"upper": lambda v: str(v).isupper()})
    assert code == 1
    diag = pd.read_excel(only("*/report_*.xlsx", runs), sheet_name="Diagnostics")
    assert list(diag["Row"]) == [3]
    assert diag.loc[0, "Category"] == "other"


def test_bad_importer_and_file_type(tmp_path: Path) -> None:
    csv = tmp_path / "upload.csv"
    csv.write_text("email\na@example.com\n", encoding="utf-8")

    bad = write_importer(tmp_path, "columns:\n  - name: email\n    type: money\n")
    assert run_pipeline(csv, bad, tmp_path / "runs_bad") == 2

    txt = tmp_path / "upload.txt"
    txt.write_text("email\na@example.com\n", encoding="utf-8")
    importer = write_importer(tmp_path)
    assert run_pipeline(txt, importer, tmp_path / "runs_txt") == 1


def test_unreadable_input_is_a_failure(tmp_path: Path) -> None:
    assert run_pipeline(tmp_path / "missing.xlsx", write_importer(tmp_path), tmp_path / "r") == 3
