from __future__ import annotations

from typing import TypedDict, Optional


class ManifestInputsEntry(TypedDict):
    path: str
    sha256: str


class ManifestInputs(TypedDict):
    data: ManifestInputsEntry
    schema: ManifestInputsEntry


class ManifestParameters(TypedDict):
    stage: str
    max_errors: int
    invalid_column_handling: str


class ManifestEnvironment(TypedDict):
    python: str
    platform: str
    pandas: str


class ManifestOutcome(TypedDict):
    valid: bool
    exit_code: int
    rows: int
    diagnostics: dict[str, int]
    extra_columns: list[str]
    missing_required: list[str]


class Manifest(TypedDict):
    pipeline_version: str
    started_at: str
    finished_at: str
    inputs: ManifestInputs
    parameters: ManifestParameters
    environment: ManifestEnvironment
    outcome: ManifestOutcome


class ConfigOverrides(TypedDict, total=False):
    pipeline_version: str
    max_errors: int
    stage: str
    invalid_column_handling: str


class YamlConfig(TypedDict, total=False):
    pipeline_version: str
    max_errors: int
    stage: str
    invalid_column_handling: Optional[str]
