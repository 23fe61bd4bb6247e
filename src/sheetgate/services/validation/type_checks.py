from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from ...domain.errors import Category, CheckFailure
from ...domain.schema_defs import TypeConfig, TypeTag
from .dates import parse_date
from .patterns import matches
from .values import ValueKind, as_text, kind_of, to_number, type_name


def _fmt_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _check_text(value: Any, cfg: TypeConfig) -> Optional[CheckFailure]:
    if kind_of(value) is not ValueKind.TEXT:
        return CheckFailure(
            f"Value must be text, got {type_name(value)}", Category.FORMAT, "Enter a text value"
        )
    text = value.strip() if cfg.text.trim_whitespace else value
    min_length, max_length = cfg.text.min_length, cfg.text.max_length
    if min_length > 0 and len(text) < min_length:
        return CheckFailure(
            f"Text is too short (minimum {min_length} characters)",
            Category.INVALID,
            f"Enter at least {min_length} characters",
        )
    if max_length > 0 and len(text) > max_length:
        return CheckFailure(
            f"Text is too long (maximum {max_length} characters)",
            Category.INVALID,
            f"Enter no more than {max_length} characters",
        )
    return None


def _check_number(value: Any, cfg: TypeConfig) -> Optional[CheckFailure]:
    num = to_number(value)
    if num is None:
        got = f'"{value}"' if kind_of(value) is ValueKind.TEXT else type_name(value)
        return CheckFailure(
            f"Value must be a number, got {got}", Category.FORMAT, "Enter a numeric value"
        )
    ncfg = cfg.number
    if ncfg.integer_only and not num.is_integer():
        return CheckFailure(
            f"Value must be an integer, got {as_text(num)}",
            Category.FORMAT,
            "Enter a whole number without decimals",
        )
    if ncfg.min is not None and num < ncfg.min:
        return CheckFailure(
            f"Value is too small (minimum {_fmt_bound(ncfg.min)})",
            Category.INVALID,
            f"Enter a value of at least {_fmt_bound(ncfg.min)}",
        )
    if ncfg.max is not None and num > ncfg.max:
        return CheckFailure(
            f"Value is too large (maximum {_fmt_bound(ncfg.max)})",
            Category.INVALID,
            f"Enter a value no greater than {_fmt_bound(ncfg.max)}",
        )
    return None


def _check_date(value: Any, cfg: TypeConfig) -> Optional[CheckFailure]:
    dcfg = cfg.date
    fmt = dcfg.format or "YYYY-MM-DD"
    parsed = parse_date(value)
    if parsed is None:
        got = f'"{value}"' if kind_of(value) is ValueKind.TEXT else type_name(value)
        return CheckFailure(
            f"Value must be a valid date, got {got}",
            Category.FORMAT,
            f"Enter a date in {fmt} format",
        )
    if dcfg.min_date:
        lower = parse_date(dcfg.min_date)
        if lower is not None and parsed < lower:
            return CheckFailure(
                f"Date is too early (minimum {dcfg.min_date})",
                Category.INVALID,
                f"Enter a date on or after {dcfg.min_date}",
            )
    if dcfg.max_date:
        upper = parse_date(dcfg.max_date)
        if upper is not None and parsed > upper:
            return CheckFailure(
                f"Date is too late (maximum {dcfg.max_date})",
                Category.INVALID,
                f"Enter a date on or before {dcfg.max_date}",
            )
    return None


def _check_boolean(value: Any, cfg: TypeConfig) -> Optional[CheckFailure]:
    bcfg = cfg.boolean
    kind = kind_of(value)
    if kind is ValueKind.BOOLEAN:
        return None
    accepted = ", ".join([*bcfg.true_tokens, *bcfg.false_tokens])
    if kind is not ValueKind.TEXT:
        return CheckFailure(
            f"Value must be a boolean, got {type_name(value)}",
            Category.FORMAT,
            f"Enter one of: {accepted}",
        )
    if bcfg.case_sensitive:
        token = value
        tokens = {*bcfg.true_tokens, *bcfg.false_tokens}
    else:
        token = value.casefold()
        tokens = {t.casefold() for t in (*bcfg.true_tokens, *bcfg.false_tokens)}
    if token not in tokens:
        truthy, falsy = "/".join(bcfg.true_tokens), "/".join(bcfg.false_tokens)
        return CheckFailure(
            f"Value must be a boolean ({truthy} or {falsy})",
            Category.FORMAT,
            f"Enter one of: {accepted}",
        )
    return None


def email_domain(value: str) -> Optional[str]:
    parts = value.split("@")
    return parts[1] if len(parts) > 1 else None


def _check_email(value: Any, cfg: TypeConfig) -> Optional[CheckFailure]:
    if kind_of(value) is not ValueKind.TEXT:
        return CheckFailure(
            f"Email must be text, got {type_name(value)}",
            Category.FORMAT,
            "Enter a valid email address",
        )
    ecfg = cfg.email
    if not matches(ecfg.pattern or r"^[^\s@]+@[^\s@]+\.[^\s@]+$", value):
        return CheckFailure(
            "Invalid email format",
            Category.FORMAT,
            "Enter a valid email address (e.g., user@example.com)",
        )
    if ecfg.allowed_domains and email_domain(value) not in ecfg.allowed_domains:
        return CheckFailure(
            "Email domain not allowed",
            Category.INVALID,
            f"Use an email with one of these domains: {', '.join(ecfg.allowed_domains)}",
        )
    return None


def _check_phone(value: Any, cfg: TypeConfig) -> Optional[CheckFailure]:
    if kind_of(value) not in (ValueKind.TEXT, ValueKind.NUMBER):
        return CheckFailure(
            f"Phone must be text or number, got {type_name(value)}",
            Category.FORMAT,
            "Enter a valid phone number",
        )
    pcfg = cfg.phone
    phone = as_text(value)
    if not matches(pcfg.pattern or r"^[\d+\- ()]{7,20}$", phone):
        suggestion = (
            f"Enter a phone number in {pcfg.display_format} format"
            if pcfg.display_format
            else "Enter a valid phone number"
        )
        return CheckFailure("Invalid phone number format", Category.FORMAT, suggestion)
    if not pcfg.allow_international and "+" in phone:
        return CheckFailure(
            "International phone numbers not allowed",
            Category.INVALID,
            "Enter a local phone number without country code",
        )
    return None


_CHECKERS: Mapping[TypeTag, Callable[[Any, TypeConfig], Optional[CheckFailure]]] = {
    TypeTag.TEXT: _check_text,
    TypeTag.NUMBER: _check_number,
    TypeTag.DATE: _check_date,
    TypeTag.BOOLEAN: _check_boolean,
    TypeTag.EMAIL: _check_email,
    TypeTag.PHONE: _check_phone,
}


def check_type(value: Any, type_tag: TypeTag, type_config: TypeConfig) -> Optional[CheckFailure]:
    """Coerce ``value`` to ``type_tag`` and evaluate the type-level constraints.

    Empty values always pass; emptiness is the required check's concern.
    """
    if kind_of(value) is ValueKind.EMPTY:
        return None
    return _CHECKERS[type_tag](value, type_config)


def check_format(value: Any, type_tag: TypeTag, fmt: Optional[str]) -> Optional[CheckFailure]:
    """Column-level ``format`` pattern. Only text columns interpret it (as a regex)."""
    if not fmt or kind_of(value) is ValueKind.EMPTY:
        return None
    if type_tag is TypeTag.TEXT and kind_of(value) is ValueKind.TEXT:
        if not matches(fmt, value):
            return CheckFailure(
                "Text does not match required format",
                Category.FORMAT,
                f"Format should match pattern: {fmt}",
            )
    # Number and date display formats are not enforced on input
    return None
