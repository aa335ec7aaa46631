"""
Merge-by-date-key reconciliation of local and cloud record lists.

Both lists are grouped by calendar day (local zone). Within the cloud list the
last record for a day wins. A local record then replaces the cloud one for
its day when it has more optional-field content, or the same amount and a
later timestamp. This is a best-effort heuristic: when two devices edit the
same day, the shorter text is dropped.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, TypeVar

from ..utils import get_date_key, parse_timestamp


R = TypeVar("R")

CHECK_IN_CONTENT_FIELDS = ("mood", "note")


def text_length(value) -> int:
    """Length in UTF-16 code units, so an emoji outside the BMP counts 2."""
    if not value:
        return 0
    return len(str(value).encode("utf-16-le")) // 2


def content_length(record, fields: Sequence[str]) -> int:
    """Combined length of the record's optional text fields."""
    return sum(text_length(getattr(record, f, None)) for f in fields)


def _prefer(challenger, incumbent, fields: Sequence[str]) -> bool:
    challenger_len = content_length(challenger, fields)
    incumbent_len = content_length(incumbent, fields)
    if challenger_len != incumbent_len:
        return challenger_len > incumbent_len
    return parse_timestamp(challenger.date) > parse_timestamp(incumbent.date)


def merge_by_date_key(
    cloud: Iterable[R],
    local: Iterable[R],
    content_fields: Sequence[str] = CHECK_IN_CONTENT_FIELDS,
) -> List[R]:
    """
    Reconcile two record lists into at most one record per calendar day.

    Args:
        cloud: Records from the cloud store. A later entry for the same day
            overwrites an earlier one; an exact tie with a local record keeps
            the cloud record.
        local: Records from local storage. Each one challenges whatever
            record holds its day.
        content_fields: Optional text fields whose lengths are compared.

    Returns:
        Merged records sorted by timestamp, newest first.
    """
    by_day: Dict[str, R] = {}
    for record in cloud:
        by_day[get_date_key(record.date)] = record

    for record in local:
        key = get_date_key(record.date)
        existing = by_day.get(key)
        if existing is None or _prefer(record, existing, content_fields):
            by_day[key] = record

    return sort_newest_first(by_day.values())


def sort_newest_first(records: Iterable[R]) -> List[R]:
    return sorted(records, key=lambda r: parse_timestamp(r.date), reverse=True)
