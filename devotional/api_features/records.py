from __future__ import annotations

from typing import Optional

from asgiref.sync import sync_to_async
from django.utils import timezone
from fastapi import HTTPException

from ..schemas import DevotionRecord, DevotionRecordIn, DevotionRecordsOut
from ..services.repository import RecordNotFound, RecordRepository, SyncOutcome
from ..utils import new_record_id


# -------------------------
# Helpers (serialization)
# -------------------------

def outcome_to_out(outcome: SyncOutcome) -> DevotionRecordsOut:
    return DevotionRecordsOut(
        records=outcome.records,
        cloud_synced=outcome.cloud_synced,
        warning=outcome.warning,
    )


# -------------------------
# Endpoints: DevotionRecord
# -------------------------

async def _list_records(repo: RecordRepository, uid: Optional[str]) -> DevotionRecordsOut:
    """
    Devotion records, newest first. Signed-in users get the cloud list
    (local storage if the cloud cannot be reached).
    """
    outcome = await sync_to_async(repo.read_devotions, thread_sensitive=True)(uid)
    return outcome_to_out(outcome)


async def _create_record(
    repo: RecordRepository,
    payload: DevotionRecordIn,
    uid: Optional[str],
) -> DevotionRecordsOut:
    """
    Save a completed devotion. Records are immutable afterwards; posting an
    existing id replaces that record.
    """
    if not payload.scripture:
        raise HTTPException(status_code=400, detail="scripture cannot be empty")

    now = timezone.now()
    record = DevotionRecord(
        id=(payload.id or "").strip() or new_record_id("devotion", now),
        date=payload.date or now,
        scripture=payload.scripture,
        observation=payload.observation.strip(),
        application=payload.application.strip(),
        prayer_text=payload.prayer_text.strip(),
    )

    outcome = await sync_to_async(repo.add_devotion, thread_sensitive=True)(record, uid)
    return outcome_to_out(outcome)


async def _delete_record(
    repo: RecordRepository,
    record_id: str,
    uid: Optional[str],
) -> DevotionRecordsOut:
    """
    Delete a devotion record by id.
    """
    try:
        outcome = await sync_to_async(repo.delete_devotion, thread_sensitive=True)(record_id, uid)
    except RecordNotFound:
        raise HTTPException(status_code=404, detail="Devotion record not found")
    return outcome_to_out(outcome)
