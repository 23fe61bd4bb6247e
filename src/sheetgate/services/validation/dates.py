from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional

from .values import ValueKind, kind_of


_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T\s].+)?$")
_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s.+)?$")


def _safe_date(yy: int, mm: int, dd: int) -> Optional[date]:
    try:
        return date(yy, mm, dd)
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[date]:
    """
    Coerce a raw cell value to a calendar date.
    Accepts: date/datetime objects, YYYY-MM-DD (optionally followed by a time) or M/D/YYYY
    Returns None when the value is not a date.
    """
    kind = kind_of(value)
    if kind is ValueKind.DATE:
        return value.date() if isinstance(value, datetime) else value
    if kind is not ValueKind.TEXT:
        return None

    v = value.strip()
    if not v:
        return None

    # Accept YYYY-MM-DD (ISO format)
    m1 = _ISO_DATE_RE.match(v)
    if m1:
        return _safe_date(int(m1.group(1)), int(m1.group(2)), int(m1.group(3)))

    # Accept M/D/YYYY
    m2 = _US_DATE_RE.match(v)
    if m2:
        return _safe_date(int(m2.group(3)), int(m2.group(1)), int(m2.group(2)))

    return None


def to_iso(value: Any) -> Optional[str]:
    d = parse_date(value)
    return d.isoformat() if d is not None else None
