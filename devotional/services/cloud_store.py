"""
Per-user cloud document store on the Django ORM.

Each user owns two collections ("records" and "checkins") with one document
per record id. Saving a list upserts every record and deletes the user's
documents that are no longer present; the last writer wins.
"""
from __future__ import annotations

import logging
from typing import List, Sequence

from django.db import DatabaseError, transaction

from ..models import CheckInDocument, DevotionDocument
from ..schemas import CheckInRecord, DevotionRecord


logger = logging.getLogger(__name__)


class CloudStoreError(RuntimeError):
    """Raised when the cloud document store cannot be read or written."""


# -------------------------
# Helpers (serialization)
# -------------------------

def devotion_from_document(d: DevotionDocument) -> DevotionRecord:
    return DevotionRecord(
        id=d.record_id,
        date=d.date,
        scripture=d.scripture,
        observation=d.observation,
        application=d.application,
        prayer_text=d.prayer_text,
    )


def check_in_from_document(c: CheckInDocument) -> CheckInRecord:
    return CheckInRecord(
        id=c.record_id,
        date=c.date,
        mood=c.mood,
        note=c.note,
    )


class DjangoCloudStore:
    """Cloud store backed by the configured database."""

    def list_devotions(self, uid: str) -> List[DevotionRecord]:
        try:
            docs = list(DevotionDocument.objects.filter(owner_uid=uid).order_by("-date"))
        except DatabaseError as e:
            raise CloudStoreError(f"Failed to load devotion records: {e}") from e
        return [devotion_from_document(d) for d in docs]

    def list_check_ins(self, uid: str) -> List[CheckInRecord]:
        try:
            docs = list(CheckInDocument.objects.filter(owner_uid=uid).order_by("-date"))
        except DatabaseError as e:
            raise CloudStoreError(f"Failed to load check-in records: {e}") from e
        return [check_in_from_document(c) for c in docs]

    def replace_devotions(self, uid: str, records: Sequence[DevotionRecord]) -> None:
        try:
            with transaction.atomic():
                for r in records:
                    DevotionDocument.objects.update_or_create(
                        owner_uid=uid,
                        record_id=r.id,
                        defaults={
                            "date": r.date,
                            "scripture": [p.model_dump(exclude_none=True) for p in r.scripture],
                            "observation": r.observation,
                            "application": r.application,
                            "prayer_text": r.prayer_text,
                        },
                    )
                (
                    DevotionDocument.objects
                    .filter(owner_uid=uid)
                    .exclude(record_id__in=[r.id for r in records])
                    .delete()
                )
        except DatabaseError as e:
            raise CloudStoreError(f"Failed to save devotion records: {e}") from e
        logger.info("Synced %d devotion records to the cloud store for %s", len(records), uid)

    def replace_check_ins(self, uid: str, records: Sequence[CheckInRecord]) -> None:
        try:
            with transaction.atomic():
                for r in records:
                    CheckInDocument.objects.update_or_create(
                        owner_uid=uid,
                        record_id=r.id,
                        defaults={"date": r.date, "mood": r.mood, "note": r.note},
                    )
                (
                    CheckInDocument.objects
                    .filter(owner_uid=uid)
                    .exclude(record_id__in=[r.id for r in records])
                    .delete()
                )
        except DatabaseError as e:
            raise CloudStoreError(f"Failed to save check-in records: {e}") from e
        logger.info("Synced %d check-in records to the cloud store for %s", len(records), uid)
