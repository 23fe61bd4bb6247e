from __future__ import annotations

import dataclasses
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Type, TypeVar

import yaml

from ...domain.errors import ConfigError
from ...domain.schema_defs import (
    DEFAULT_ACCEPTED_FORMATS,
    BooleanConfig,
    ColumnHandling,
    ColumnSchema,
    DateConfig,
    EmailConfig,
    ImporterConfig,
    InvalidHandling,
    NumberConfig,
    PhoneConfig,
    Predicate,
    Rule,
    RuleKind,
    TextConfig,
    TypeConfig,
    TypeTag,
)
from .dates import parse_date
from .patterns import find_invalid_patterns


logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_TYPE_SECTIONS: Mapping[str, type] = {
    "text": TextConfig,
    "number": NumberConfig,
    "date": DateConfig,
    "boolean": BooleanConfig,
    "email": EmailConfig,
    "phone": PhoneConfig,
}

_COLUMN_KEYS = {
    "name",
    "display_name",
    "description",
    "required",
    "type",
    "format",
    "invalid_handling",
    "default_value",
    "rules",
}
_RULE_KEYS = {"kind", "value", "message"}
_TOP_KEYS = {"accepted_formats", "invalid_column_handling", "types", "columns"}


def parse_enum(enum_class: Type[E], raw: Any, path: str) -> E:
    """Case-insensitive enum lookup by value; the error lists the valid options."""
    try:
        return enum_class(str(raw).strip().lower())
    except ValueError:
        valid = ", ".join(str(e.value) for e in enum_class)
        raise ConfigError(path, f"'{raw}' is not one of: {valid}")


def _as_bool(raw: Any, path: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        # Coerce booleans from strings if needed (hand-edited YAML friendliness)
        lowered = raw.strip().lower()
        if lowered in {"1", "true", "yes", "y"}:
            return True
        if lowered in {"0", "false", "no", "n", ""}:
            return False
    if isinstance(raw, int):
        return bool(raw)
    raise ConfigError(path, f"'{raw}' is not a boolean")


def _check_keys(raw: Mapping[str, Any], allowed: set[str], path: str) -> None:
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise ConfigError(path, f"unknown key(s): {', '.join(unknown)}")


def _coerce_field(value: Any, default: Any, path: str) -> Any:
    if isinstance(default, bool):
        return _as_bool(value, path)
    if isinstance(default, tuple):
        if isinstance(value, str):
            value = [v.strip() for v in value.split(",") if v.strip()]
        if not isinstance(value, (list, tuple)):
            raise ConfigError(path, "expected a list")
        # YAML turns unquoted yes/no/on/off into booleans; the spelling is lost
        if any(isinstance(v, bool) for v in value):
            raise ConfigError(path, "quote yes/no/on/off/true/false tokens in YAML lists")
        return tuple(str(v) for v in value)
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(path, f"'{value}' is not an integer")
    if value is None:
        return None
    if path.endswith((".min", ".max")):
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(path, f"'{value}' is not a number")
    return str(value)


def _parse_section(cls: type, raw: Any, path: str) -> Any:
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigError(path, "expected a mapping")
    defaults = cls()
    names = {f.name for f in dataclasses.fields(cls)}
    _check_keys(raw, names, path)
    kwargs = {
        key: _coerce_field(value, getattr(defaults, key), f"{path}.{key}")
        for key, value in raw.items()
    }
    if cls is DateConfig:
        for key in ("min_date", "max_date"):
            bound = kwargs.get(key)
            if bound is not None and parse_date(bound) is None:
                raise ConfigError(f"{path}.{key}", f"'{bound}' is not a date")
    return cls(**kwargs)


def parse_type_config(raw: Any) -> TypeConfig:
    if raw is None:
        return TypeConfig()
    if not isinstance(raw, dict):
        raise ConfigError("types", "expected a mapping")
    _check_keys(raw, set(_TYPE_SECTIONS), "types")
    sections = {
        name: _parse_section(cls, raw.get(name), f"types.{name}")
        for name, cls in _TYPE_SECTIONS.items()
    }
    return TypeConfig(**sections)


def _parse_rule(raw: Any, path: str, predicates: Mapping[str, Predicate]) -> Rule:
    if not isinstance(raw, dict):
        raise ConfigError(path, "expected a mapping")
    _check_keys(raw, _RULE_KEYS, path)
    if "kind" not in raw:
        raise ConfigError(path, "missing 'kind'")
    kind = parse_enum(RuleKind, raw["kind"], f"{path}.kind")
    value = raw.get("value")
    message = str(raw.get("message") or "")
    validator: Optional[Predicate] = None
    if kind is RuleKind.CUSTOM:
        name = str(value or "")
        if name not in predicates:
            known = ", ".join(sorted(predicates)) or "none registered"
            raise ConfigError(f"{path}.value", f"unknown predicate '{name}' ({known})")
        validator = predicates[name]
    return Rule(kind=kind, value=value, message=message, validator=validator)


def _parse_column(raw: Any, path: str, predicates: Mapping[str, Predicate]) -> ColumnSchema:
    if not isinstance(raw, dict):
        raise ConfigError(path, "expected a mapping")
    _check_keys(raw, _COLUMN_KEYS, path)
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError(f"{path}.name", "column name must be a non-empty string")
    rules_raw = raw.get("rules") or []
    if not isinstance(rules_raw, list):
        raise ConfigError(f"{path}.rules", "expected a list")
    default_value = raw.get("default_value")
    return ColumnSchema(
        name=name,
        display_name=str(raw.get("display_name") or name),
        description=str(raw.get("description") or ""),
        required=_as_bool(raw.get("required", False), f"{path}.required"),
        type=parse_enum(TypeTag, raw.get("type", "text"), f"{path}.type"),
        validation_rules=tuple(
            _parse_rule(r, f"{path}.rules[{i}]", predicates) for i, r in enumerate(rules_raw)
        ),
        format=raw.get("format") or None,
        invalid_handling=parse_enum(
            InvalidHandling, raw.get("invalid_handling", "flag"), f"{path}.invalid_handling"
        ),
        default_value=None if default_value is None else str(default_value),
    )


def parse_importer_config(
    raw: Any, predicates: Optional[Mapping[str, Predicate]] = None
) -> ImporterConfig:
    """Build an ImporterConfig from parsed YAML. Raises ConfigError on unusable input.

    Patterns that do not compile are only logged: at validation time they pass.
    """
    preds: Mapping[str, Predicate] = predicates or {}
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("<root>", "expected a mapping")
    _check_keys(raw, _TOP_KEYS, "<root>")

    columns_raw = raw.get("columns") or []
    if not isinstance(columns_raw, list):
        raise ConfigError("columns", "expected a list")
    columns = tuple(_parse_column(c, f"columns[{i}]", preds) for i, c in enumerate(columns_raw))

    seen: set[str] = set()
    for i, col in enumerate(columns):
        if col.name in seen:
            raise ConfigError(f"columns[{i}].name", f"duplicate column name '{col.name}'")
        seen.add(col.name)

    formats_raw = raw.get("accepted_formats") or list(DEFAULT_ACCEPTED_FORMATS)
    if not isinstance(formats_raw, list):
        raise ConfigError("accepted_formats", "expected a list")
    accepted = tuple(
        (f if str(f).startswith(".") else f".{f}").lower() for f in map(str, formats_raw)
    )

    importer = ImporterConfig(
        columns=columns,
        accepted_formats=accepted,
        invalid_column_handling=parse_enum(
            ColumnHandling, raw.get("invalid_column_handling", "warn"), "invalid_column_handling"
        ),
        type_config=parse_type_config(raw.get("types")),
    )

    for issue in find_invalid_patterns(importer.columns, importer.type_config):
        logger.warning(
            "Pattern does not compile; it will be treated as always passing",
            extra={"path": issue.path, "pattern": issue.pattern, "reason": issue.message},
        )
    return importer


def load_importer_config(
    path: Path, predicates: Optional[Mapping[str, Predicate]] = None
) -> ImporterConfig:
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return parse_importer_config(raw, predicates)
