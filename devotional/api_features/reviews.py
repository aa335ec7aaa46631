from __future__ import annotations

from typing import Optional

from asgiref.sync import sync_to_async
from fastapi import HTTPException

from ..schemas import ReviewIn, ReviewOut
from ..services.repository import RecordRepository
from ..services.review import ReviewGenerationError, generate_ai_review, prepare_review_data


def _generate_review(repo: RecordRepository, payload: ReviewIn, uid: Optional[str]) -> ReviewOut:
    """
    Sync-only block:
    - Load devotions and check-ins (cloud or local)
    - Keep the ones inside the week / month
    - Ask the first configured provider for the review
    """
    data = prepare_review_data(
        repo.load_devotions(uid),
        repo.load_check_ins(uid),
        payload.period,
        payload.date,
    )
    try:
        result = generate_ai_review(data, payload.provider)
    except ReviewGenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ReviewOut(
        period=data.period,
        start_date=data.start_date,
        end_date=data.end_date,
        devotion_count=len(data.devotion_records),
        check_in_count=len(data.check_in_records),
        provider=result.provider,
        review=result.review,
    )


async def _create_review(repo: RecordRepository, payload: ReviewIn, uid: Optional[str]) -> ReviewOut:
    return await sync_to_async(_generate_review, thread_sensitive=True)(repo, payload, uid)
