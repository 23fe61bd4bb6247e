from __future__ import annotations

import logging
import re
from typing import Any, Optional, Pattern, Sequence

from ...domain.errors import ConfigIssue
from ...domain.schema_defs import ColumnSchema, RuleKind, TypeConfig, TypeTag


logger = logging.getLogger(__name__)


def compile_pattern(pattern: Any) -> Optional[Pattern[str]]:
    """Compile a configured regex; a pattern that does not compile is logged and yields None.

    Callers treat None as "always passes".
    """
    try:
        return re.compile(str(pattern))
    except re.error as exc:
        logger.warning("Invalid regex pattern", extra={"pattern": str(pattern), "error": str(exc)})
        return None


def matches(pattern: Any, text: str) -> bool:
    compiled = compile_pattern(pattern)
    if compiled is None:
        return True
    return compiled.search(text) is not None


def _check(path: str, pattern: Any, issues: list[ConfigIssue]) -> None:
    if pattern is None or pattern == "":
        return
    try:
        re.compile(str(pattern))
    except re.error as exc:
        issues.append(ConfigIssue(path=path, message=f"invalid regex: {exc}", pattern=str(pattern)))


def find_invalid_patterns(
    schema: Sequence[ColumnSchema], type_config: Optional[TypeConfig] = None
) -> list[ConfigIssue]:
    """List every configured pattern that does not compile (load-time report)."""
    issues: list[ConfigIssue] = []
    if type_config is not None:
        _check("types.email.pattern", type_config.email.pattern, issues)
        _check("types.phone.pattern", type_config.phone.pattern, issues)
    for col in schema:
        if col.type is TypeTag.TEXT:
            _check(f"columns.{col.name}.format", col.format, issues)
        for idx, rule in enumerate(col.validation_rules):
            if rule.kind is RuleKind.PATTERN:
                _check(f"columns.{col.name}.rules[{idx}]", rule.value, issues)
    return issues
