from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar

from ...domain.errors import Category
from ...domain.schema_defs import Rule, RuleKind, TypeConfig, TypeTag
from .dates import parse_date
from .patterns import compile_pattern
from .type_checks import email_domain
from .values import ValueKind, as_text, fraction_digits, kind_of, to_number


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RuleOutcome:
    valid: bool
    message: str = ""
    category: Category = Category.OTHER
    suggestion: str = ""


PASS = RuleOutcome(valid=True)


def _fail(rule: Rule, message: str, category: Category, suggestion: str) -> RuleOutcome:
    return RuleOutcome(
        valid=False, message=rule.message or message, category=category, suggestion=suggestion
    )


def _fmt(num: float) -> str:
    return str(int(num)) if float(num).is_integer() else str(num)


def split_list(raw: Any) -> list[Any]:
    """A literal list, or a comma-separated string."""
    if isinstance(raw, (list, tuple, set, frozenset)):
        return list(raw)
    return [part.strip() for part in str(raw).split(",")]


def split_bounds(raw: Any, parse: Callable[[Any], Optional[T]]) -> Optional[Tuple[T, T]]:
    """Parse ``"min-max"`` (or a two-item list) into a pair of bounds.

    The separator is the first ``-`` at which both sides parse, so negative
    numbers and ISO dates (``2024-01-01-2024-12-31``) split correctly.
    """
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        lo, hi = parse(raw[0]), parse(raw[1])
        return (lo, hi) if lo is not None and hi is not None else None
    text = str(raw).strip()
    for idx, ch in enumerate(text):
        if ch != "-" or idx == 0:
            continue
        lo, hi = parse(text[:idx].strip()), parse(text[idx + 1 :].strip())
        if lo is not None and hi is not None:
            return lo, hi
    return None


def _to_int(raw: Any) -> Optional[int]:
    num = to_number(raw) if not isinstance(raw, bool) else None
    return int(num) if num is not None else None


def _bad_config(rule: Rule, reason: str) -> RuleOutcome:
    logger.warning(
        "Unusable rule configuration; rule skipped",
        extra={"rule": rule.kind.value, "rule_value": repr(rule.value), "reason": reason},
    )
    return PASS


def _rule_min_max(value: Any, rule: Rule, column_type: TypeTag) -> RuleOutcome:
    bound = to_number(rule.value)
    if bound is None:
        return _bad_config(rule, "bound is not a number")
    is_min = rule.kind is RuleKind.MIN
    if column_type is TypeTag.NUMBER:
        num = to_number(value)
        if num is None:
            # Not a number: the type check already reports it
            return PASS
        if is_min and num < bound:
            return _fail(
                rule,
                f"Value must be at least {_fmt(bound)}",
                Category.INVALID,
                f"Enter a value of at least {_fmt(bound)}",
            )
        if not is_min and num > bound:
            return _fail(
                rule,
                f"Value must be at most {_fmt(bound)}",
                Category.INVALID,
                f"Enter a value no greater than {_fmt(bound)}",
            )
        return PASS
    if kind_of(value) is ValueKind.TEXT:
        if is_min and len(value) < bound:
            return _fail(
                rule,
                f"Text must be at least {_fmt(bound)} characters",
                Category.INVALID,
                f"Enter at least {_fmt(bound)} characters",
            )
        if not is_min and len(value) > bound:
            return _fail(
                rule,
                f"Text must be at most {_fmt(bound)} characters",
                Category.INVALID,
                f"Enter no more than {_fmt(bound)} characters",
            )
    return PASS


def _rule_pattern(value: Any, rule: Rule) -> RuleOutcome:
    compiled = compile_pattern(rule.value)
    if compiled is None:
        return PASS
    if compiled.search(as_text(value)) is None:
        return _fail(
            rule,
            "Value does not match required pattern",
            Category.FORMAT,
            f"Enter a value matching the pattern: {rule.value}",
        )
    return PASS


def _rule_enum(value: Any, rule: Rule) -> RuleOutcome:
    if rule.value is None or rule.value == "" or rule.value == []:
        return PASS
    allowed = split_list(rule.value)
    text = as_text(value).strip()
    if value in allowed or text in [as_text(a) for a in allowed]:
        return PASS
    listing = ", ".join(as_text(a) for a in allowed)
    return _fail(
        rule, f"Value must be one of: {listing}", Category.INVALID, f"Choose one of: {listing}"
    )


def _rule_range(value: Any, rule: Rule, column_type: TypeTag) -> RuleOutcome:
    if column_type is TypeTag.NUMBER:
        bounds = split_bounds(rule.value, to_number)
        if bounds is None:
            return _bad_config(rule, "range is not 'min-max'")
        num = to_number(value)
        if num is None:
            return PASS
        lo, hi = bounds
        if num < lo or num > hi:
            return _fail(
                rule,
                f"Value must be between {_fmt(lo)} and {_fmt(hi)}",
                Category.INVALID,
                f"Enter a value between {_fmt(lo)} and {_fmt(hi)}",
            )
        return PASS
    if column_type is TypeTag.DATE:
        date_bounds: Optional[Tuple[date, date]] = split_bounds(rule.value, parse_date)
        if date_bounds is None:
            return _bad_config(rule, "range is not 'start-end'")
        parsed = parse_date(value)
        if parsed is None:
            return PASS
        start, end = date_bounds
        if parsed < start or parsed > end:
            return _fail(
                rule,
                f"Date must be between {start.isoformat()} and {end.isoformat()}",
                Category.INVALID,
                f"Enter a date between {start.isoformat()} and {end.isoformat()}",
            )
    return PASS


def _rule_precision(value: Any, rule: Rule, column_type: TypeTag) -> RuleOutcome:
    if column_type is not TypeTag.NUMBER or to_number(value) is None:
        return PASS
    places = _to_int(rule.value)
    if places is None:
        return _bad_config(rule, "precision is not an integer")
    digits = fraction_digits(value)
    if digits is not None and digits > places:
        return _fail(
            rule,
            f"Value must have at most {places} decimal places",
            Category.FORMAT,
            f"Enter a number with at most {places} decimal places",
        )
    return PASS


def _rule_domain(value: Any, rule: Rule, column_type: TypeTag) -> RuleOutcome:
    if column_type is not TypeTag.EMAIL or kind_of(value) is not ValueKind.TEXT:
        return PASS
    allowed = [str(d) for d in split_list(rule.value)]
    if email_domain(value) not in allowed:
        listing = ", ".join(allowed)
        return _fail(
            rule,
            f"Email domain must be one of: {listing}",
            Category.INVALID,
            f"Use an email with one of these domains: {listing}",
        )
    return PASS


def _rule_length(value: Any, rule: Rule) -> RuleOutcome:
    if kind_of(value) is not ValueKind.TEXT:
        return PASS
    raw = rule.value
    if isinstance(raw, (list, tuple)) or "-" in str(raw):
        bounds = split_bounds(raw, _to_int)
        if bounds is None:
            return _bad_config(rule, "length is not 'min-max'")
        lo, hi = bounds
        if len(value) < lo or len(value) > hi:
            return _fail(
                rule,
                f"Text length must be between {lo} and {hi} characters",
                Category.INVALID,
                f"Enter text between {lo} and {hi} characters long",
            )
        return PASS
    exact = _to_int(raw)
    if exact is None:
        return _bad_config(rule, "length is not an integer")
    if len(value) != exact:
        return _fail(
            rule,
            f"Text must be exactly {exact} characters",
            Category.INVALID,
            f"Enter exactly {exact} characters",
        )
    return PASS


def _rule_custom(value: Any, rule: Rule) -> RuleOutcome:
    if rule.validator is None:
        return PASS
    try:
        ok = bool(rule.validator(value))
    except Exception as exc:
        logger.warning(
            "Custom rule raised; cell flagged", extra={"error": str(exc), "cell_value": repr(value)}
        )
        return _fail(
            rule,
            f"Custom validation failed: {exc}",
            Category.OTHER,
            "Review and correct the data",
        )
    if not ok:
        return _fail(
            rule, "Value failed custom validation", Category.OTHER, "Review and correct the data"
        )
    return PASS


def evaluate_rule(
    value: Any, rule: Rule, column_type: TypeTag, type_config: Optional[TypeConfig] = None
) -> RuleOutcome:
    """Evaluate one rule against one cell value.

    Empty values pass: required-ness is checked separately. ``type_config`` is
    accepted for parity with the type checker; no rule currently reads it.
    """
    if kind_of(value) is ValueKind.EMPTY:
        return PASS
    kind = rule.kind
    if kind in (RuleKind.MIN, RuleKind.MAX):
        return _rule_min_max(value, rule, column_type)
    if kind is RuleKind.PATTERN:
        return _rule_pattern(value, rule)
    if kind is RuleKind.ENUM:
        return _rule_enum(value, rule)
    if kind is RuleKind.RANGE:
        return _rule_range(value, rule, column_type)
    if kind is RuleKind.PRECISION:
        return _rule_precision(value, rule, column_type)
    if kind is RuleKind.DOMAIN:
        return _rule_domain(value, rule, column_type)
    if kind is RuleKind.LENGTH:
        return _rule_length(value, rule)
    if kind is RuleKind.CUSTOM:
        return _rule_custom(value, rule)
    # RuleKind.REQUIRED: handled by the row validator's missing check
    return PASS


def evaluate_rules(
    value: Any,
    rules: Sequence[Rule],
    column_type: TypeTag,
    type_config: Optional[TypeConfig] = None,
) -> list[RuleOutcome]:
    """Evaluate every rule (no early exit); returns failures in declaration order."""
    outcomes = [evaluate_rule(value, r, column_type, type_config) for r in rules]
    return [o for o in outcomes if not o.valid]
