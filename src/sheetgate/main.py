from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Mapping, Optional

from .config import Config, load_config
from .domain.errors import ConfigError
from .domain.schema_defs import ColumnHandling, Predicate
from .types import ConfigOverrides
from .app.container import build_container
from .app.orchestrator import EXIT_CONFIG, EXIT_FAILED, Orchestrator
from .app.run_manager import BASE_LOGGER


logger = logging.getLogger(__name__)


def _make_orchestrator(
    cfg: Config, predicates: Optional[Mapping[str, Predicate]] = None
) -> Orchestrator:
    container = build_container(BASE_LOGGER, cfg)
    return Orchestrator(
        container=container,
        cfg=cfg,
        logger=logging.getLogger(f"{BASE_LOGGER}.main"),
        predicates=dict(predicates or {}),
    )


def run_pipeline(
    input_path: Path,
    schema_path: Path,
    out_dir: Path,
    cfg: Config | None = None,
    predicates: Optional[Mapping[str, Predicate]] = None,
) -> int:
    orch = _make_orchestrator(cfg or Config(), predicates)
    return orch.run(input_path, schema_path, out_dir)


def main() -> int:
    ap = argparse.ArgumentParser(description="Sheetgate: validate tabular uploads against a schema")
    ap.add_argument("--input", required=True, type=Path, help="Path to data file (xlsx/xls/csv)")
    ap.add_argument("--schema", required=True, type=Path, help="Path to importer YAML")
    ap.add_argument(
        "--out", required=False, type=Path, default=Path("runs"), help="Output base dir"
    )
    ap.add_argument("--config", required=False, type=Path, help="Optional YAML config file")
    ap.add_argument(
        "--max-errors",
        required=False,
        type=int,
        default=None,
        help="Max diagnostics to echo to the log (default from config)",
    )
    ap.add_argument(
        "--stage",
        required=False,
        choices=["full", "headers"],
        default=None,
        help="Pipeline stage: 'headers' to validate headers only, or 'full' (default)",
    )
    ap.add_argument(
        "--columns",
        required=False,
        choices=[h.value for h in ColumnHandling],
        default=None,
        help="Policy for columns the schema does not declare (default from importer file)",
    )
    args = ap.parse_args()

    overrides: ConfigOverrides = {}
    # Optional overrides only when provided
    if args.max_errors is not None:
        overrides["max_errors"] = int(args.max_errors)
    if args.stage:
        overrides["stage"] = args.stage
    if args.columns:
        overrides["invalid_column_handling"] = args.columns

    try:
        cfg = load_config(args.config, overrides=overrides)
    except ConfigError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG

    try:
        return run_pipeline(args.input, args.schema, args.out, cfg)
    except Exception as exc:  # pragma: no cover
        logging.basicConfig(level=logging.ERROR)
        logging.exception("Unhandled exception: %s", exc)
        return EXIT_FAILED


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
