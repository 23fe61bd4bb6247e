from __future__ import annotations

import math
import numbers
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


class ValueKind(str, Enum):
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OTHER = "other"


def is_empty(value: Any) -> bool:
    """None, empty string and NaN (pandas blank cells) count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def kind_of(value: Any) -> ValueKind:
    if is_empty(value):
        return ValueKind.EMPTY
    # bool is checked before numbers: it is an int subclass
    if isinstance(value, bool) or type(value).__name__ == "bool_":
        return ValueKind.BOOLEAN
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (date, datetime)):
        return ValueKind.DATE
    if isinstance(value, numbers.Real):
        return ValueKind.NUMBER
    return ValueKind.OTHER


def type_name(value: Any) -> str:
    """Short, user-facing name of a raw value's kind."""
    kind = kind_of(value)
    if kind is ValueKind.OTHER:
        return type(value).__name__
    return kind.value


def to_number(value: Any) -> Optional[float]:
    kind = kind_of(value)
    if kind is ValueKind.NUMBER:
        num = float(value)
        return None if math.isnan(num) else num
    if kind is ValueKind.TEXT:
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            num = float(text)
        except ValueError:
            return None
        if math.isnan(num) or math.isinf(num):
            return None
        return num
    return None


def as_text(value: Any) -> str:
    """Stringify a raw value the way it reads in a spreadsheet cell."""
    kind = kind_of(value)
    if kind is ValueKind.EMPTY:
        return ""
    if kind is ValueKind.NUMBER:
        if isinstance(value, numbers.Integral):
            return str(int(value))
        num = float(value)
        if num.is_integer() and abs(num) < 1e15:
            return str(int(num))
        return repr(num)
    if kind is ValueKind.DATE:
        return value.isoformat()
    if kind is ValueKind.BOOLEAN:
        return "true" if bool(value) else "false"
    return str(value)


def fraction_digits(value: Any) -> Optional[int]:
    """Count digits after the decimal point, as written (text) or as repr'd (number)."""
    kind = kind_of(value)
    if kind is ValueKind.TEXT:
        text = value.strip().replace(",", "")
    elif kind is ValueKind.NUMBER:
        if isinstance(value, float):
            # Whole floats (25.0 from a workbook column with blanks) have no decimals
            if value.is_integer():
                return 0
            text = repr(value)
        else:
            text = str(value)
    else:
        return None
    try:
        exponent = Decimal(text).as_tuple().exponent
    except InvalidOperation:
        return None
    if not isinstance(exponent, int):
        return None
    return -exponent if exponent < 0 else 0
