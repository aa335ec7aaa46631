"""Month view of check-ins."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from ..schemas import CheckInRecord
from ..utils import get_date_key, local_datetime


GRID_DAYS = 42  # 6 weeks x 7 days


@dataclass
class CalendarDay:
    date: date
    is_current_month: bool
    is_today: bool
    status: str  # "checked" | "unchecked" | "future"
    mood: Optional[str] = None


def month_calendar(
    check_ins: Iterable[CheckInRecord],
    year: int,
    month: int,
    today: Optional[date] = None,
) -> List[CalendarDay]:
    """
    Six-week grid for the month, weeks starting on Sunday, padded with the
    neighbouring months' days.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}.")
    today = today or local_datetime().date()

    by_day: Dict[str, CheckInRecord] = {get_date_key(c.date): c for c in check_ins}

    first = date(year, month, 1)
    # date.weekday(): Monday=0 ... Sunday=6; shift so the grid starts on Sunday.
    leading = (first.weekday() + 1) % 7
    start = first - timedelta(days=leading)

    days: List[CalendarDay] = []
    for offset in range(GRID_DAYS):
        day = start + timedelta(days=offset)
        check_in = by_day.get(day.isoformat())
        if day > today:
            status = "future"
        elif check_in:
            status = "checked"
        else:
            status = "unchecked"
        days.append(
            CalendarDay(
                date=day,
                is_current_month=(day.month == month and day.year == year),
                is_today=(day == today),
                status=status,
                mood=check_in.mood if check_in else None,
            )
        )
    return days
