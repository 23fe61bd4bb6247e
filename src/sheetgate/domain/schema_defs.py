from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Tuple


class TypeTag(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    EMAIL = "email"
    PHONE = "phone"


class RuleKind(str, Enum):
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    ENUM = "enum"
    RANGE = "range"
    PRECISION = "precision"
    DOMAIN = "domain"
    LENGTH = "length"
    CUSTOM = "custom"
    REQUIRED = "required"


class InvalidHandling(str, Enum):
    """What happens to a cell that carries a diagnostic when data is handed off."""

    FLAG = "flag"
    REMOVE = "remove"
    DEFAULT = "default"
    REJECT = "reject"


class ColumnHandling(str, Enum):
    """Policy for columns present in the data but not declared in the schema."""

    REJECT = "reject"
    IGNORE = "ignore"
    WARN = "warn"
    INCLUDE = "include"


Predicate = Callable[[Any], bool]


@dataclass(frozen=True)
class Rule:
    kind: RuleKind
    value: Any = None
    message: str = ""
    validator: Optional[Predicate] = None


@dataclass(frozen=True)
class ColumnSchema:
    name: str
    display_name: str = ""
    required: bool = False
    type: TypeTag = TypeTag.TEXT
    validation_rules: Tuple[Rule, ...] = ()
    format: Optional[str] = None
    invalid_handling: InvalidHandling = InvalidHandling.FLAG
    default_value: Optional[str] = None
    description: str = ""

    @property
    def label(self) -> str:
        return self.display_name or self.name

    @property
    def is_required(self) -> bool:
        # A "required" rule is equivalent to the flag
        return self.required or any(r.kind is RuleKind.REQUIRED for r in self.validation_rules)


@dataclass(frozen=True)
class TextConfig:
    min_length: int = 0
    max_length: int = 255
    trim_whitespace: bool = True


@dataclass(frozen=True)
class NumberConfig:
    min: Optional[float] = None
    max: Optional[float] = None
    precision: int = 2
    integer_only: bool = False


@dataclass(frozen=True)
class DateConfig:
    min_date: Optional[str] = None
    max_date: Optional[str] = None
    format: str = "YYYY-MM-DD"


@dataclass(frozen=True)
class BooleanConfig:
    true_tokens: Tuple[str, ...] = ("true", "yes", "1", "y")
    false_tokens: Tuple[str, ...] = ("false", "no", "0", "n")
    case_sensitive: bool = False


DEFAULT_EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
DEFAULT_PHONE_PATTERN = r"^[\d+\- ()]{7,20}$"


@dataclass(frozen=True)
class EmailConfig:
    pattern: str = DEFAULT_EMAIL_PATTERN
    allowed_domains: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PhoneConfig:
    pattern: str = DEFAULT_PHONE_PATTERN
    display_format: str = "(###) ###-####"
    allow_international: bool = True


@dataclass(frozen=True)
class TypeConfig:
    text: TextConfig = field(default_factory=TextConfig)
    number: NumberConfig = field(default_factory=NumberConfig)
    date: DateConfig = field(default_factory=DateConfig)
    boolean: BooleanConfig = field(default_factory=BooleanConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    phone: PhoneConfig = field(default_factory=PhoneConfig)


DEFAULT_ACCEPTED_FORMATS: Tuple[str, ...] = (".xlsx", ".xls", ".csv")


@dataclass(frozen=True)
class ImporterConfig:
    columns: Tuple[ColumnSchema, ...] = ()
    accepted_formats: Tuple[str, ...] = DEFAULT_ACCEPTED_FORMATS
    invalid_column_handling: ColumnHandling = ColumnHandling.WARN
    type_config: TypeConfig = field(default_factory=TypeConfig)

    def column(self, name: str) -> Optional[ColumnSchema]:
        for col in self.columns:
            if col.name == name:
                return col
        return None


def create_default_column(name: str) -> ColumnSchema:
    return ColumnSchema(name=name, display_name=name)


def column_names(schema: Sequence[ColumnSchema]) -> list[str]:
    return [c.name for c in schema]
