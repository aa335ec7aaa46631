"""Pytest configuration.

Django is configured by pytest-django (DJANGO_SETTINGS_MODULE in pyproject.toml).
"""
from __future__ import annotations

from typing import Dict, List, Sequence

import pytest

from devotional.schemas import CheckInRecord, DevotionRecord
from devotional.services.cloud_store import CloudStoreError
from devotional.services.local_storage import LocalStorage
from devotional.services.repository import RecordRepository


@pytest.fixture(autouse=True)
def _isolated_settings(settings, tmp_path):
    """Deterministic zone, throwaway local storage, no real API keys."""
    settings.TIME_ZONE = "Asia/Taipei"
    settings.LOCAL_STORAGE_DIR = tmp_path / "local_storage"
    settings.CLOUD_SYNC_ENABLED = True
    settings.SCRIPTURE_API_KEY = ""
    settings.SCRIPTURE_BIBLE_IDS = []
    settings.GEMINI_API_KEY = ""
    settings.HUGGINGFACE_API_KEY = ""
    settings.OPENAI_API_KEY = ""
    settings.COHERE_API_KEY = ""
    return settings


class FakeCloudStore:
    """In-memory stand-in for DjangoCloudStore."""

    def __init__(self) -> None:
        self.devotions: Dict[str, List[DevotionRecord]] = {}
        self.check_ins: Dict[str, List[CheckInRecord]] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def _read(self, bucket, uid):
        if self.fail_reads:
            raise CloudStoreError("permission-denied")
        return list(bucket.get(uid, []))

    def _write(self, bucket, uid, records):
        if self.fail_writes:
            raise CloudStoreError("permission-denied")
        self.writes += 1
        bucket[uid] = list(records)

    def list_devotions(self, uid: str) -> List[DevotionRecord]:
        return self._read(self.devotions, uid)

    def list_check_ins(self, uid: str) -> List[CheckInRecord]:
        return self._read(self.check_ins, uid)

    def replace_devotions(self, uid: str, records: Sequence[DevotionRecord]) -> None:
        self._write(self.devotions, uid, records)

    def replace_check_ins(self, uid: str, records: Sequence[CheckInRecord]) -> None:
        self._write(self.check_ins, uid, records)


@pytest.fixture
def local_storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "device")


@pytest.fixture
def cloud() -> FakeCloudStore:
    return FakeCloudStore()


@pytest.fixture
def repo(local_storage, cloud) -> RecordRepository:
    return RecordRepository(local_storage, cloud)
