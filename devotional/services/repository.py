"""
Load/save flows for devotion and check-in records.

Local storage is always written first so nothing is lost offline. When a user
id is given (and a cloud store is configured) the cloud is read/written too;
cloud failures fall back to local data and are reported as a warning instead
of an error.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, List, Optional, Protocol, Sequence, TypeVar

from django.conf import settings
from django.utils import timezone

from ..schemas import CheckInRecord, DevotionRecord
from ..utils import get_date_key, new_record_id, strip_or_none
from .cloud_store import CloudStoreError, DjangoCloudStore
from .local_storage import STORAGE_CHECKINS, STORAGE_RECORDS, LocalStorage
from .merge import merge_by_date_key, sort_newest_first


logger = logging.getLogger(__name__)

CLOUD_SYNC_WARNING = "Cloud sync failed; your records were saved on this device only."
CLOUD_READ_WARNING = "Cloud records could not be loaded; showing the records saved on this device."

MOOD_OPTIONS = [
    ("😊", "Happy"),
    ("😌", "Calm"),
    ("🙏", "Grateful"),
    ("😔", "Sad"),
    ("😰", "Anxious"),
    ("😴", "Tired"),
    ("🤔", "Thoughtful"),
    ("💪", "Strong"),
]
MOOD_VALUES = {value for value, _ in MOOD_OPTIONS}

R = TypeVar("R")


class RecordNotFound(LookupError):
    pass


class CloudStore(Protocol):
    def list_devotions(self, uid: str) -> List[DevotionRecord]: ...
    def list_check_ins(self, uid: str) -> List[CheckInRecord]: ...
    def replace_devotions(self, uid: str, records: Sequence[DevotionRecord]) -> None: ...
    def replace_check_ins(self, uid: str, records: Sequence[CheckInRecord]) -> None: ...


@dataclass
class SyncOutcome(Generic[R]):
    records: List[R]
    cloud_synced: bool = False
    warning: Optional[str] = field(default=None)


class RecordRepository:
    def __init__(self, local: LocalStorage, cloud: Optional[CloudStore] = None) -> None:
        self.local = local
        self.cloud = cloud

    @classmethod
    def from_settings(cls) -> "RecordRepository":
        cloud = DjangoCloudStore() if settings.CLOUD_SYNC_ENABLED else None
        return cls(LocalStorage.from_settings(), cloud)

    def _use_cloud(self, uid: Optional[str]) -> bool:
        return bool(uid) and self.cloud is not None

    # -------------------------
    # Devotion records
    # -------------------------

    def read_devotions(self, uid: Optional[str] = None) -> SyncOutcome[DevotionRecord]:
        """
        Signed in: the cloud list is authoritative, even when empty.
        Otherwise (or if the cloud fails): local storage, with
        ``cloud_synced`` left False.
        """
        local_warning = None
        if self._use_cloud(uid):
            try:
                cloud = self.cloud.list_devotions(uid)
            except CloudStoreError:
                logger.exception("Loading devotion records from the cloud failed; using local records")
                local_warning = CLOUD_READ_WARNING
            else:
                logger.info("Loaded %d devotion records from the cloud store", len(cloud))
                return SyncOutcome(sort_newest_first(cloud), cloud_synced=True)
        local = self.local.load_list(STORAGE_RECORDS, DevotionRecord)
        return SyncOutcome(sort_newest_first(local), warning=local_warning)

    def load_devotions(self, uid: Optional[str] = None) -> List[DevotionRecord]:
        return self.read_devotions(uid).records

    def save_devotions(
        self, records: Sequence[DevotionRecord], uid: Optional[str] = None
    ) -> SyncOutcome[DevotionRecord]:
        records = list(records)
        self.local.save_list(STORAGE_RECORDS, records)
        if not self._use_cloud(uid):
            return SyncOutcome(records)
        try:
            self.cloud.replace_devotions(uid, records)
        except CloudStoreError:
            logger.exception("Cloud sync of devotion records failed; saved locally")
            return SyncOutcome(records, warning=CLOUD_SYNC_WARNING)
        return SyncOutcome(records, cloud_synced=True)

    def add_devotion(self, record: DevotionRecord, uid: Optional[str] = None) -> SyncOutcome[DevotionRecord]:
        current = [r for r in self.load_devotions(uid) if r.id != record.id]
        return self.save_devotions([record, *current], uid)

    def delete_devotion(self, record_id: str, uid: Optional[str] = None) -> SyncOutcome[DevotionRecord]:
        current = self.load_devotions(uid)
        remaining = [r for r in current if r.id != record_id]
        if len(remaining) == len(current):
            raise RecordNotFound(f"Devotion record {record_id!r} not found")
        return self.save_devotions(remaining, uid)

    # -------------------------
    # Check-ins
    # -------------------------

    def read_check_ins(self, uid: Optional[str] = None) -> SyncOutcome[CheckInRecord]:
        """
        Local check-ins, merged with the cloud ones when signed in so that
        several devices converge on one record per day.
        """
        local = self.local.load_list(STORAGE_CHECKINS, CheckInRecord)
        if not self._use_cloud(uid):
            return SyncOutcome(sort_newest_first(local))
        try:
            cloud = self.cloud.list_check_ins(uid)
        except CloudStoreError:
            logger.exception("Loading check-ins from the cloud failed; using local records")
            return SyncOutcome(sort_newest_first(local), warning=CLOUD_READ_WARNING)

        merged = merge_by_date_key(cloud, local)
        if merged:
            self.local.save_list(STORAGE_CHECKINS, merged)
        logger.info(
            "Check-ins synced: %d cloud, %d local, %d merged", len(cloud), len(local), len(merged)
        )
        return SyncOutcome(merged, cloud_synced=True)

    def load_check_ins(self, uid: Optional[str] = None) -> List[CheckInRecord]:
        return self.read_check_ins(uid).records

    def save_check_ins(
        self, records: Sequence[CheckInRecord], uid: Optional[str] = None
    ) -> SyncOutcome[CheckInRecord]:
        """
        Signed in: pull the latest cloud list first and write back the merge,
        so that two devices do not overwrite each other.
        """
        records = list(records)
        self.local.save_list(STORAGE_CHECKINS, records)
        if not self._use_cloud(uid):
            return SyncOutcome(records)
        try:
            cloud = self.cloud.list_check_ins(uid)
            merged = merge_by_date_key(cloud, records)
            self.cloud.replace_check_ins(uid, merged)
        except CloudStoreError:
            logger.exception("Cloud sync of check-ins failed; saved locally")
            return SyncOutcome(records, warning=CLOUD_SYNC_WARNING)

        self.local.save_list(STORAGE_CHECKINS, merged)
        logger.info("Check-in saved and synced: %d cloud -> %d merged", len(cloud), len(merged))
        return SyncOutcome(merged, cloud_synced=True)

    def check_in(
        self,
        mood: Optional[str] = None,
        note: Optional[str] = None,
        uid: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SyncOutcome[CheckInRecord]:
        """
        Record today's check-in, replacing the mood and note of an existing
        check-in for the same day (its id is kept).

        Raises:
            ValueError: If the mood is not one of MOOD_OPTIONS.
        """
        now = now or timezone.now()
        mood = strip_or_none(mood)
        if mood is not None and mood not in MOOD_VALUES:
            raise ValueError(f"Unknown mood {mood!r}.")

        check_ins = self.load_check_ins(uid)
        today = get_date_key(now)
        existing = next((c for c in check_ins if get_date_key(c.date) == today), None)

        record = CheckInRecord(
            id=existing.id if existing else new_record_id("checkin", now),
            date=now,
            mood=mood,
            note=strip_or_none(note),
        )
        if existing:
            updated = [record if c is existing else c for c in check_ins]
        else:
            updated = [record, *check_ins]
        return self.save_check_ins(updated, uid)
