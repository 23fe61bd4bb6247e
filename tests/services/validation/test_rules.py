from __future__ import annotations

from sheetgate.domain.errors import Category
from sheetgate.domain.schema_defs import Rule, RuleKind, TypeTag
from sheetgate.services.validation.rules import (
    evaluate_rule,
    evaluate_rules,
    split_bounds,
    split_list,
)
from sheetgate.services.validation.values import to_number


def test_min_on_number_uses_custom_message() -> None:
    out = evaluate_rule(15, Rule(RuleKind.MIN, 18, "too young"), TypeTag.NUMBER)
    assert not out.valid
    assert out.message == "too young"
    assert out.category is Category.INVALID
    assert evaluate_rule("18", Rule(RuleKind.MIN, 18), TypeTag.NUMBER).valid


def test_max_on_number_default_message() -> None:
    out = evaluate_rule(20, Rule(RuleKind.MAX, 10), TypeTag.NUMBER)
    assert out.message == "Value must be at most 10"


def test_min_on_text_measures_length() -> None:
    out = evaluate_rule("ab", Rule(RuleKind.MIN, 3), TypeTag.TEXT)
    assert out.message == "Text must be at least 3 characters"
    assert evaluate_rule("abc", Rule(RuleKind.MIN, 3), TypeTag.TEXT).valid


def test_min_skips_non_numbers_in_number_column() -> None:
    # The type check reports "abc"; the rule stays quiet
    assert evaluate_rule("abc", Rule(RuleKind.MIN, 3), TypeTag.NUMBER).valid


def test_pattern_uses_search_semantics() -> None:
    rule = Rule(RuleKind.PATTERN, r"^[A-Z]{3}$")
    out = evaluate_rule("abc", rule, TypeTag.TEXT)
    assert out.category is Category.FORMAT
    assert evaluate_rule("ABC", rule, TypeTag.TEXT).valid
    assert evaluate_rule("a1b", Rule(RuleKind.PATTERN, r"\d"), TypeTag.TEXT).valid


def test_invalid_pattern_always_passes() -> None:
    assert evaluate_rule("anything", Rule(RuleKind.PATTERN, "(["), TypeTag.TEXT).valid


def test_enum_list_and_comma_string() -> None:
    rule = Rule(RuleKind.ENUM, ["red", "green"])
    out = evaluate_rule("blue", rule, TypeTag.TEXT)
    assert out.message == "Value must be one of: red, green"
    assert evaluate_rule("red", rule, TypeTag.TEXT).valid
    assert evaluate_rule("green", Rule(RuleKind.ENUM, "red, green"), TypeTag.TEXT).valid


def test_enum_matches_stringified_numbers() -> None:
    rule = Rule(RuleKind.ENUM, [1, 2])
    assert evaluate_rule(2, rule, TypeTag.NUMBER).valid
    assert evaluate_rule("1", rule, TypeTag.NUMBER).valid
    assert not evaluate_rule(3, rule, TypeTag.NUMBER).valid


def test_numeric_range_including_negatives() -> None:
    out = evaluate_rule(11, Rule(RuleKind.RANGE, "1-10"), TypeTag.NUMBER)
    assert out.message == "Value must be between 1 and 10"
    neg = Rule(RuleKind.RANGE, "-5--1")
    assert evaluate_rule(-3, neg, TypeTag.NUMBER).valid
    assert not evaluate_rule(0, neg, TypeTag.NUMBER).valid


def test_date_range_with_iso_bounds() -> None:
    rule = Rule(RuleKind.RANGE, "2024-01-01-2024-12-31")
    out = evaluate_rule("2025-01-01", rule, TypeTag.DATE)
    assert out.message == "Date must be between 2024-01-01 and 2024-12-31"
    assert evaluate_rule("6/1/2024", rule, TypeTag.DATE).valid


def test_unusable_range_is_skipped() -> None:
    assert evaluate_rule(5, Rule(RuleKind.RANGE, "abc"), TypeTag.NUMBER).valid


def test_precision_counts_written_digits() -> None:
    rule = Rule(RuleKind.PRECISION, 2)
    out = evaluate_rule("1.234", rule, TypeTag.NUMBER)
    assert out.category is Category.FORMAT
    assert evaluate_rule("1.50", rule, TypeTag.NUMBER).valid
    assert evaluate_rule(1.5, rule, TypeTag.NUMBER).valid
    # Whole-number floats from a workbook column with blanks
    whole = Rule(RuleKind.PRECISION, 0)
    assert evaluate_rule(25.0, whole, TypeTag.NUMBER).valid
    assert not evaluate_rule("25.5", whole, TypeTag.NUMBER).valid


def test_domain_rule_on_email() -> None:
    rule = Rule(RuleKind.DOMAIN, "example.com, corp.com")
    assert not evaluate_rule("a@other.org", rule, TypeTag.EMAIL).valid
    assert evaluate_rule("a@corp.com", rule, TypeTag.EMAIL).valid


def test_length_exact_and_range() -> None:
    out = evaluate_rule("abcd", Rule(RuleKind.LENGTH, 5), TypeTag.TEXT)
    assert out.message == "Text must be exactly 5 characters"
    out2 = evaluate_rule("abcde", Rule(RuleKind.LENGTH, "2-4"), TypeTag.TEXT)
    assert out2.message == "Text length must be between 2 and 4 characters"
    assert evaluate_rule("abc", Rule(RuleKind.LENGTH, [2, 4]), TypeTag.TEXT).valid


def test_custom_predicate_false_and_raising() -> None:
    rule = Rule(RuleKind.CUSTOM, "starts_x", validator=lambda v: str(v).startswith("X"))
    out = evaluate_rule("Yes", rule, TypeTag.TEXT)
    assert out.category is Category.OTHER
    assert out.message == "Value failed custom validation"

    def boom(value: object) -> bool:
        raise RuntimeError("lookup service down")

    raised = evaluate_rule("X1", Rule(RuleKind.CUSTOM, "boom", validator=boom), TypeTag.TEXT)
    assert not raised.valid
    assert "lookup service down" in raised.message


def test_empty_value_passes_every_rule() -> None:
    for kind in RuleKind:
        assert evaluate_rule("", Rule(kind, 1), TypeTag.TEXT).valid
        assert evaluate_rule(None, Rule(kind, 1), TypeTag.NUMBER).valid


def test_evaluate_rules_has_no_early_exit() -> None:
    rules = (Rule(RuleKind.MIN, 10, "low"), Rule(RuleKind.ENUM, [1, 2], "not listed"))
    failures = evaluate_rules(7, rules, TypeTag.NUMBER)
    assert [f.message for f in failures] == ["low", "not listed"]


def test_split_helpers() -> None:
    assert split_list("a, b ,c") == ["a", "b", "c"]
    assert split_list(("x",)) == ["x"]
    assert split_bounds("1.5-3", to_number) == (1.5, 3.0)
    assert split_bounds([1, 2], to_number) == (1.0, 2.0)
    assert split_bounds("nope", to_number) is None
