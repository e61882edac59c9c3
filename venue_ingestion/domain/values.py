"""
Parsed values: the tagged result of converting one raw CSV string.

Each logical field is converted exactly once, at mapping time, into one of
``DateValue``, ``AmountValue``, ``TimeValue`` or ``TextValue``.  Upserters
consume these types instead of re-parsing strings.

ZERO I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

# Tried in order.  Day-first wins for ambiguous dd/mm vs mm/dd dates.
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
)
TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M",
)
TIME_FORMATS: tuple[str, ...] = (
    "%H:%M",
    "%H:%M:%S",
    "%I:%M %p",
    "%I:%M%p",
    "%I:%M:%S %p",
)

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥\s]")


@dataclass(frozen=True)
class DateValue:
    raw: str
    value: date
    time_of_day: time | None = None  # set when the raw value was a timestamp


@dataclass(frozen=True)
class AmountValue:
    raw: str
    value: Decimal


@dataclass(frozen=True)
class TimeValue:
    raw: str
    value: time


@dataclass(frozen=True)
class TextValue:
    raw: str
    value: str


ParsedValue = DateValue | AmountValue | TimeValue | TextValue


def parse_amount(raw: str) -> Decimal:
    """
    Parse a currency amount: strip currency symbols and thousands separators.

    ``"$1,234.50"`` -> ``Decimal("1234.50")``; ``"(12.00)"`` -> ``Decimal("-12.00")``.

    Raises:
        ValueError: if the remainder is not a finite number.
    """
    s = _CURRENCY_SYMBOLS.sub("", raw.strip()).replace(",", "")
    negative = s.startswith("(") and s.endswith(")")
    if negative:
        s = s[1:-1]
    try:
        value = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"not a number: {raw!r}") from None
    if not value.is_finite():
        raise ValueError(f"not a finite number: {raw!r}")
    return -value if negative else value


def parse_date(raw: str) -> tuple[date, time | None]:
    """
    Parse a date or timestamp.  Returns the date and, for timestamps, the
    time of day.

    Raises:
        ValueError: if no recognized format matches.
    """
    s = raw.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date(), None
        except ValueError:
            continue
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(s, fmt)
            return parsed.date(), parsed.time()
        except ValueError:
            continue
    raise ValueError(f"unrecognized date: {raw!r}")


def parse_time(raw: str) -> time:
    """
    Parse a time of day (``13:30``, ``13:30:00``, ``1:30 PM``).

    Raises:
        ValueError: if no recognized format matches.
    """
    s = raw.strip().upper()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(s, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"unrecognized time: {raw!r}")
