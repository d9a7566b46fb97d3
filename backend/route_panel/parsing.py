from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

import pandas as pd
from dateutil import parser as dateparser

from .constants import NO_TIME

# Spreadsheet time-of-day cells arrive as fractions of a day; anything above
# this is taken to be minutes already.
DAY_FRACTION_MAX = 2.5

_HOURS_MINUTES = re.compile(r"([0-9]{1,2})\s*h\s*([0-9]{1,2})\s*(?:minutos|mins|min|ms|m)?")
_DECIMAL_HOURS = re.compile(r"([0-9]{1,2})([.,][0-9]+)?\s*h")
_PLAIN_MINUTES = re.compile(r"([0-9]{1,4})\s*(?:minutos|mins|min|ms|m)")
_CLOCK = re.compile(r"([0-9]{1,2}):([0-5][0-9])(?::([0-5][0-9]))?\s*(am|pm)?")
_DECIMAL = re.compile(r"[0-9]+(?:\.[0-9]+)?")


def round_half_up(x: float) -> int:
    # Half up, so 30 seconds counts as a minute
    return int(math.floor(x + 0.5))


def _wall_clock_minutes(value: datetime | time) -> int:
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone()
    return value.hour * 60 + value.minute + round_half_up(value.second / 60)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def parse_minutes(value: Any) -> Optional[int]:
    """Best-effort conversion of a delivery-time cell to whole minutes.

    Accepts datetimes/times (wall-clock fields), spreadsheet day fractions,
    plain minute counts and free text such as ``3h50``, ``3,5h``, ``45min``,
    ``15:30`` or ``3:15pm``. Returns None when nothing can be recovered
    or the value is negative.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, (datetime, time)):
        return _wall_clock_minutes(value)
    if isinstance(value, date):
        return 0
    if isinstance(value, timedelta):
        if value < timedelta(0):
            return None
        return round_half_up(value.total_seconds() / 60)
    if _is_number(value):
        v = float(value)
        # Durations are never negative
        if not math.isfinite(v) or v < 0:
            return None
        if v <= DAY_FRACTION_MAX:
            return round_half_up(v * 1440)
        return round_half_up(v)

    s = str(value).lower().replace("\u00a0", " ").strip()
    if not s:
        return None

    m = _HOURS_MINUTES.fullmatch(s)
    if m:
        return int(m.group(1)) * 60 + int(m.group(2))

    m = _DECIMAL_HOURS.fullmatch(s)
    if m:
        hours = float((m.group(1) + (m.group(2) or "")).replace(",", "."))
        return round_half_up(hours * 60)

    m = _PLAIN_MINUTES.fullmatch(s)
    if m:
        return int(m.group(1))

    m = _CLOCK.fullmatch(s)
    if m:
        h = int(m.group(1))
        mm = int(m.group(2))
        ss = int(m.group(3)) if m.group(3) else 0
        ampm = m.group(4)
        if ampm == "pm" and h != 12:
            h += 12
        if ampm == "am" and h == 12:
            h = 0
        return h * 60 + mm + round_half_up(ss / 60)

    try:
        return _wall_clock_minutes(dateparser.parse(s))
    except (ValueError, OverflowError):
        pass

    # Bare numbers the date parser rejects are hours
    decimal = s.replace(",", ".", 1)
    if _DECIMAL.fullmatch(decimal):
        return round_half_up(float(decimal) * 60)
    return None


def parse_int(value: Any) -> Optional[int]:
    """Integer from a cell: numbers truncate, text keeps only digits and '-'."""
    if value is None:
        return None
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        return int(value)
    if _is_number(value):
        v = float(value)
        if not math.isfinite(v):
            return None
        return int(v)
    s = re.sub(r"[^0-9-]", "", str(value).strip())
    m = re.match(r"-?[0-9]+", s)
    if not m:
        return None
    return int(m.group(0))


def format_minutes(minutes: Optional[int]) -> str:
    if minutes is None:
        return NO_TIME
    return f"{minutes // 60}h{minutes % 60:02d}"


def time_ago(epoch_ms: Optional[int], now_ms: int) -> str:
    if not epoch_ms:
        return ""
    m = (now_ms - epoch_ms) // 60000
    if m < 1:
        return "now"
    if m < 60:
        return f"{m} min ago"
    h = m // 60
    if h < 24:
        return f"{h} h ago"
    return f"{h // 24} d ago"
