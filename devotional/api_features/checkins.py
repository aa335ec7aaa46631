from __future__ import annotations

from typing import List, Optional

from asgiref.sync import sync_to_async
from fastapi import HTTPException

from ..schemas import CalendarDayOut, CheckInIn, CheckInRecord, CheckInRecordsOut, MoodOptionOut
from ..services.calendar import month_calendar
from ..services.repository import MOOD_OPTIONS, RecordRepository
from ..utils import get_check_in_for_date, local_datetime


# -------------------------
# Endpoints: Check-ins
# -------------------------

async def _list_check_ins(repo: RecordRepository, uid: Optional[str]) -> CheckInRecordsOut:
    """
    Check-ins newest first; merged with the cloud copy when signed in.
    """
    outcome = await sync_to_async(repo.read_check_ins, thread_sensitive=True)(uid)
    return CheckInRecordsOut(
        records=outcome.records,
        cloud_synced=outcome.cloud_synced,
        warning=outcome.warning,
    )


async def _today_check_in(repo: RecordRepository, uid: Optional[str]) -> Optional[CheckInRecord]:
    records = await sync_to_async(repo.load_check_ins, thread_sensitive=True)(uid)
    return get_check_in_for_date(records)


async def _check_in(repo: RecordRepository, payload: CheckInIn, uid: Optional[str]) -> CheckInRecordsOut:
    """
    Check in for today. Only today can be checked in; a second check-in on
    the same day replaces the first one's mood and note.
    """
    try:
        outcome = await sync_to_async(repo.check_in, thread_sensitive=True)(
            mood=payload.mood, note=payload.note, uid=uid
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CheckInRecordsOut(
        records=outcome.records,
        cloud_synced=outcome.cloud_synced,
        warning=outcome.warning,
    )


async def _calendar(
    repo: RecordRepository,
    uid: Optional[str],
    year: Optional[int],
    month: Optional[int],
) -> List[CalendarDayOut]:
    """
    42-day month grid (weeks start on Sunday) with each day's check-in status.
    """
    today = local_datetime().date()
    records = await sync_to_async(repo.load_check_ins, thread_sensitive=True)(uid)
    try:
        days = month_calendar(records, year or today.year, month or today.month, today=today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [
        CalendarDayOut(
            date=d.date,
            is_current_month=d.is_current_month,
            is_today=d.is_today,
            status=d.status,
            mood=d.mood,
        )
        for d in days
    ]


def _mood_options() -> List[MoodOptionOut]:
    return [MoodOptionOut(value=value, label=label) for value, label in MOOD_OPTIONS]
