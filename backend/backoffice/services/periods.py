from __future__ import annotations

import calendar
import re
from datetime import date, datetime

_BR_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


def parse_date(v) -> date | None:
    """Best-effort date parsing; anything unreadable is None (i.e. "not in any period")."""
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if not isinstance(v, str):
        return None

    t = v.strip()
    if not t:
        return None

    try:
        m = _BR_DATE.match(t)
        if m:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
        return date.fromisoformat(t[:10])
    except ValueError:
        return None


def valid_period(month, year) -> bool:
    if isinstance(month, bool) or isinstance(year, bool):
        return False
    if not isinstance(month, int) or not isinstance(year, int):
        return False
    return 1 <= month <= 12 and 1 <= year <= 9999


def in_period(d: date | None, month: int, year: int) -> bool:
    if d is None:
        return False
    return d.month == month and d.year == year


def days_in_month(month: int, year: int) -> int:
    return calendar.monthrange(year, month)[1]


def competence_month(month: int, year: int) -> str:
    return f"{year:04d}-{month:02d}"
