"""
Utility functions for SplitSettle
"""
from __future__ import annotations
import math
import uuid
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal


def now_iso() -> str:
    """Current local time as ISO timestamp (seconds precision)"""
    return datetime.now().replace(microsecond=0).isoformat()


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string, or the date part of an ISO timestamp"""
    s = s.strip()
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()


def round_half_up(x: float, places: int = 0) -> float:
    """
    Round half away from zero, the way money is usually rounded
    (the builtin round() rounds half to even).
    NaN and infinities are returned unchanged.
    """
    if math.isnan(x) or math.isinf(x):
        return x
    q = Decimal(1).scaleb(-places)
    return float(Decimal(repr(x)).quantize(q, rounding=ROUND_HALF_UP))


def round_cents(x: float) -> float:
    """Round to 2 decimal places"""
    return round_half_up(x, 2)


def round_units(x: float) -> int:
    """Round to whole currency units"""
    return int(round_half_up(x, 0))


def generate_id() -> str:
    """Short random identifier"""
    return uuid.uuid4().hex[:9]
