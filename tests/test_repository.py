from __future__ import annotations

import pytest

from devotional.schemas import CheckInRecord, DevotionRecord
from devotional.services.local_storage import STORAGE_CHECKINS, STORAGE_RECORDS
from devotional.services.repository import (
    CLOUD_READ_WARNING,
    CLOUD_SYNC_WARNING,
    RecordNotFound,
    RecordRepository,
)
from devotional.utils import parse_timestamp

from tests.factories import make_check_in, make_devotion


# -------------------------
# Devotion records
# -------------------------

def test_signed_out_devotions_come_from_local_storage(repo, local_storage, cloud) -> None:
    local_storage.save_list(STORAGE_RECORDS, [
        make_devotion("d1", "2024-01-01T10:00:00+08:00"),
        make_devotion("d2", "2024-01-02T10:00:00+08:00"),
    ])
    cloud.devotions["alice"] = [make_devotion("cloud", "2024-01-03T10:00:00+08:00")]

    assert [r.id for r in repo.load_devotions(None)] == ["d2", "d1"]


def test_signed_in_cloud_list_is_authoritative_even_when_empty(repo, local_storage) -> None:
    local_storage.save_list(STORAGE_RECORDS, [make_devotion("d1", "2024-01-01T10:00:00+08:00")])

    assert repo.load_devotions("alice") == []


def test_cloud_read_failure_falls_back_to_local(repo, local_storage, cloud) -> None:
    local_storage.save_list(STORAGE_RECORDS, [make_devotion("d1", "2024-01-01T10:00:00+08:00")])
    cloud.fail_reads = True

    assert [r.id for r in repo.load_devotions("alice")] == ["d1"]


def test_save_devotions_writes_local_then_cloud(repo, local_storage, cloud) -> None:
    records = [make_devotion("d1", "2024-01-01T10:00:00+08:00")]

    outcome = repo.save_devotions(records, "alice")

    assert outcome.cloud_synced is True
    assert outcome.warning is None
    assert local_storage.load_list(STORAGE_RECORDS, DevotionRecord) == records
    assert cloud.devotions["alice"] == records


def test_cloud_write_failure_keeps_local_copy_and_warns(repo, local_storage, cloud) -> None:
    cloud.fail_writes = True
    records = [make_devotion("d1", "2024-01-01T10:00:00+08:00")]

    outcome = repo.save_devotions(records, "alice")

    assert outcome.cloud_synced is False
    assert outcome.warning == CLOUD_SYNC_WARNING
    assert local_storage.load_list(STORAGE_RECORDS, DevotionRecord) == records


def test_add_and_delete_devotion(repo, cloud) -> None:
    repo.add_devotion(make_devotion("d1", "2024-01-01T10:00:00+08:00"), "alice")
    outcome = repo.add_devotion(make_devotion("d2", "2024-01-02T10:00:00+08:00"), "alice")

    assert [r.id for r in outcome.records] == ["d2", "d1"]

    outcome = repo.delete_devotion("d1", "alice")

    assert [r.id for r in outcome.records] == ["d2"]
    assert [r.id for r in cloud.devotions["alice"]] == ["d2"]


def test_delete_unknown_devotion(repo) -> None:
    with pytest.raises(RecordNotFound):
        repo.delete_devotion("missing", None)


def test_no_cloud_store_means_local_only(local_storage) -> None:
    repo = RecordRepository(local_storage, cloud=None)

    outcome = repo.save_devotions([make_devotion("d1", "2024-01-01T10:00:00+08:00")], "alice")

    assert outcome.cloud_synced is False
    assert outcome.warning is None
    assert [r.id for r in repo.load_devotions("alice")] == ["d1"]


# -------------------------
# Check-ins
# -------------------------

def test_load_check_ins_merges_and_persists_locally(repo, local_storage, cloud) -> None:
    local_storage.save_list(STORAGE_CHECKINS, [
        make_check_in("l1", "2024-01-01T09:00:00+08:00", note="short"),
        make_check_in("l2", "2024-01-02T09:00:00+08:00"),
    ])
    cloud.check_ins["alice"] = [
        make_check_in("c1", "2024-01-01T08:00:00+08:00", note="a longer note here"),
        make_check_in("c3", "2024-01-03T08:00:00+08:00"),
    ]

    merged = repo.load_check_ins("alice")

    assert [c.id for c in merged] == ["c3", "l2", "c1"]
    assert local_storage.load_list(STORAGE_CHECKINS, CheckInRecord) == merged


def test_load_check_ins_cloud_failure_returns_local(repo, local_storage, cloud) -> None:
    local_storage.save_list(STORAGE_CHECKINS, [make_check_in("l1", "2024-01-01T09:00:00+08:00")])
    cloud.fail_reads = True

    assert [c.id for c in repo.load_check_ins("alice")] == ["l1"]


def test_save_check_ins_merges_with_latest_cloud(repo, local_storage, cloud) -> None:
    # Another device checked in yesterday.
    cloud.check_ins["alice"] = [make_check_in("phone", "2024-01-01T08:00:00+08:00", mood="😌")]

    outcome = repo.save_check_ins([make_check_in("laptop", "2024-01-02T08:00:00+08:00")], "alice")

    assert outcome.cloud_synced is True
    assert [c.id for c in outcome.records] == ["laptop", "phone"]
    assert [c.id for c in cloud.check_ins["alice"]] == ["laptop", "phone"]
    assert [c.id for c in local_storage.load_list(STORAGE_CHECKINS, CheckInRecord)] == ["laptop", "phone"]


def test_save_check_ins_failure_returns_given_records(repo, local_storage, cloud) -> None:
    cloud.fail_reads = True
    records = [make_check_in("l1", "2024-01-01T09:00:00+08:00")]

    outcome = repo.save_check_ins(records, "alice")

    assert outcome.records == records
    assert outcome.warning == CLOUD_SYNC_WARNING
    assert local_storage.load_list(STORAGE_CHECKINS, CheckInRecord) == records


def test_check_in_creates_todays_record(repo) -> None:
    now = parse_timestamp("2024-04-01T07:30:00+08:00")

    outcome = repo.check_in(mood="🙏", note="  early start ", now=now)

    [record] = outcome.records
    assert record.id == "checkin-1711927800000"
    assert (record.mood, record.note) == ("🙏", "early start")


def test_second_check_in_same_day_keeps_id(repo) -> None:
    repo.check_in(mood="😔", now=parse_timestamp("2024-04-01T07:30:00+08:00"))
    repo.check_in(mood="😊", note="better", now=parse_timestamp("2024-04-01T21:00:00+08:00"))
    outcome = repo.check_in(mood="💪", now=parse_timestamp("2024-04-02T06:00:00+08:00"))

    assert [c.id for c in outcome.records] == ["checkin-1712008800000", "checkin-1711927800000"]
    yesterday = outcome.records[1]
    assert (yesterday.mood, yesterday.note) == ("😊", "better")


def test_check_in_rejects_unknown_mood(repo) -> None:
    with pytest.raises(ValueError):
        repo.check_in(mood="🦄")


def test_read_outcomes_report_whether_the_cloud_answered(repo, local_storage, cloud) -> None:
    local_storage.save_list(STORAGE_RECORDS, [make_devotion("d1", "2024-01-01T10:00:00+08:00")])
    local_storage.save_list(STORAGE_CHECKINS, [make_check_in("l1", "2024-01-01T09:00:00+08:00")])

    assert repo.read_devotions("alice").cloud_synced is True
    assert repo.read_check_ins("alice").cloud_synced is True
    assert repo.read_devotions(None).cloud_synced is False

    cloud.fail_reads = True
    devotions = repo.read_devotions("alice")
    check_ins = repo.read_check_ins("alice")

    assert ([r.id for r in devotions.records], devotions.cloud_synced) == (["d1"], False)
    assert devotions.warning == CLOUD_READ_WARNING
    assert ([c.id for c in check_ins.records], check_ins.cloud_synced) == (["l1"], False)
    assert check_ins.warning == CLOUD_READ_WARNING
