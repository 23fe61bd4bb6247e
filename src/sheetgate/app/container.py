from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Config
from ..services.io_excel import IOService
from ..services.output_service import OutputService
from ..services.validate_service import ValidateService


@dataclass(frozen=True)
class Container:
    io: IOService
    validate: ValidateService
    output: OutputService


def build_container(base_logger_name: str, cfg: Config) -> Container:
    base = logging.getLogger(base_logger_name)
    io = IOService(base.getChild("io"))
    validate = ValidateService(base.getChild("validate"))
    output = OutputService(base.getChild("output"))
    return Container(io=io, validate=validate, output=output)
