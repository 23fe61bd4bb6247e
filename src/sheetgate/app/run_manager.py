from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..utils.logging_setup import LogFiles, setup_logging


BASE_LOGGER = "sheetgate"


def utc_stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def utc_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class RunContext:
    run_dir: Path
    logger: logging.Logger
    log_files: LogFiles
    started_at: str


def start_run(out_dir: Path, base_logger_name: str = BASE_LOGGER) -> RunContext:
    run_dir = out_dir / utc_stamp()
    log_files = setup_logging(run_dir)
    logger = logging.getLogger(base_logger_name)
    logger.info("Run started", extra={"run_dir": str(run_dir)})
    return RunContext(run_dir=run_dir, logger=logger, log_files=log_files, started_at=utc_iso())
