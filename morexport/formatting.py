"""
morexport/formatting.py
Cell formatting shared by the reports: durations, average price per
minute, nullable columns, database values to text.
"""

from __future__ import annotations

import struct
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

AVERAGE_MAX_CHARS  = 4
FLOAT32_MAX_DIGITS = 9


# ── DURATIONS ────────────────────────────────────────────────

def seconds_to_hours(seconds: int) -> str:
    """3661 -> '1 h 1 m'"""
    hours, rem = divmod(int(seconds), 3600)
    return f"{hours} h {rem // 60} m"


def minutes_to_hours(minutes: int) -> str:
    """125 -> '2 h 5 m'"""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours} h {mins} m"


# ── PRICES ───────────────────────────────────────────────────

def parse_price(price: str) -> float:
    """'12,50' -> 12.5. Raises ValueError on anything else."""
    return float((price or '').strip().replace(',', '.', 1))


def average_price_per_minute(price: str, minutes: int,
                             decimals: Optional[int] = None) -> str:
    """
    Price / minutes, 0 unless both are positive.

    Default rendering keeps the historical export format: shortest positional
    notation at single (float32) precision, cut to 4 characters ('2.5', '0.83', '0'). Note the cut is on
    characters, not decimals: 12.5 renders '12.5', 123.4 renders '123.'.
    With `decimals` set, fixed-point rounding is used instead.
    """
    value = parse_price(price)
    average = value / minutes if value > 0 and minutes > 0 else 0.0

    if decimals is not None:
        return f"{average:.{decimals}f}"
    return _positional(average)[:AVERAGE_MAX_CHARS]


def _positional(value: float) -> str:
    if value == 0:
        return '0'
    # Decimal drops the exponent of the shortest digits.
    return format(Decimal(_shortest_float32(value)).normalize(), 'f')


def _to_float32(value: float) -> float:
    return struct.unpack('<f', struct.pack('<f', value))[0]


def _shortest_float32(value: float) -> str:
    """Fewest significant digits that read back as the same float32."""
    single = _to_float32(value)
    for digits in range(1, FLOAT32_MAX_DIGITS + 1):
        text = f"{single:.{digits}g}"
        if _to_float32(float(text)) == single:
            return text
    return repr(single)


# ── TEXT CELLS ───────────────────────────────────────────────

def nullable(value: Optional[str]) -> str:
    return '' if value is None else value


def db_text(value: Any) -> Optional[str]:
    """Database value -> text as the MySQL client would print it; None stays None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    if isinstance(value, Decimal):
        return format(value, 'f')
    return str(value)


def db_int(value: Any) -> int:
    """Database numeric (int, Decimal, numeric string, NULL) -> int."""
    if value is None:
        return 0
    try:
        return int(Decimal(str(value)))
    except InvalidOperation as e:
        raise ValueError(f"not a number: {value!r}") from e
