from __future__ import annotations

from typing import List, Optional

import django
django.setup()  # Ensures Django is initialized when FastAPI imports models.

from django.conf import settings

from fastapi import Body, Depends, FastAPI, Header, Query
from fastapi.middleware.cors import CORSMiddleware

from .schemas import (
    BookOut,
    CalendarDayOut,
    CheckInIn,
    CheckInRecord,
    CheckInRecordsOut,
    DevotionRecordIn,
    DevotionRecordsOut,
    MoodOptionOut,
    ReviewIn,
    ReviewOut,
    ScripturePassage,
    SessionJournalIn,
    SessionOut,
)
from .services.repository import RecordRepository
from .services.session import SessionRegistry
from .api_features.records import _create_record, _delete_record, _list_records
from .api_features.checkins import (
    _calendar,
    _check_in,
    _list_check_ins,
    _mood_options,
    _today_check_in,
)
from .api_features.scripture import _list_books, _lookup_scripture
from .api_features.reviews import _create_review
from .api_features.sessions import (
    _cancel_session,
    _complete_session,
    _set_session_scripture,
    _show_session,
    _start_session,
    _step_session,
    _update_session_journal,
)


api = FastAPI(title="Quiet Time API")
# ----------------------------------------
# CORS
# ----------------------------------------
api.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],   # GET, POST, PUT, DELETE
    allow_headers=["*"],   # X-User-Id, Content-Type, etc.
)


# -------------------------
# Dependencies
# -------------------------

_sessions = SessionRegistry()


def get_repository() -> RecordRepository:
    return RecordRepository.from_settings()


def get_session_registry() -> SessionRegistry:
    return _sessions


def get_uid(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Signed-in user id; absent means local-only storage."""
    return (x_user_id or "").strip() or None


# -------------------------
# Endpoints: DevotionRecord
# -------------------------

@api.get("/records", response_model=DevotionRecordsOut)
async def list_records(
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _list_records(repo, uid)


@api.post("/records", response_model=DevotionRecordsOut, status_code=201)
async def create_record(
    payload: DevotionRecordIn,
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _create_record(repo, payload, uid)


@api.delete("/records/{record_id}", response_model=DevotionRecordsOut)
async def delete_record(
    record_id: str,
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _delete_record(repo, record_id, uid)


# -------------------------
# Endpoints: Check-ins
# -------------------------

@api.get("/checkins", response_model=CheckInRecordsOut)
async def list_check_ins(
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _list_check_ins(repo, uid)


@api.post("/checkins", response_model=CheckInRecordsOut)
async def check_in(
    payload: CheckInIn,
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _check_in(repo, payload, uid)


@api.get("/checkins/today", response_model=Optional[CheckInRecord])
async def today_check_in(
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _today_check_in(repo, uid)


@api.get("/checkins/calendar", response_model=List[CalendarDayOut])
async def check_in_calendar(
    year: Optional[int] = Query(default=None),
    month: Optional[int] = Query(default=None),
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _calendar(repo, uid, year, month)


@api.get("/checkins/moods", response_model=List[MoodOptionOut])
def mood_options():
    return _mood_options()


# -------------------------
# Endpoints: Scripture
# -------------------------

@api.get("/scripture/books", response_model=List[BookOut])
def list_books():
    return _list_books()


@api.get("/scripture", response_model=List[ScripturePassage])
def lookup_scripture(
    book: str = Query(...),
    chapter: int = Query(..., ge=1),
    verse_from: Optional[int] = Query(default=None),
    verse_to: Optional[int] = Query(default=None),
):
    return _lookup_scripture(book, chapter, verse_from, verse_to)


# -------------------------
# Endpoints: AI review
# -------------------------

@api.post("/reviews", response_model=ReviewOut)
async def create_review(
    payload: ReviewIn,
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _create_review(repo, payload, uid)


# -------------------------
# Endpoints: Guided session
# -------------------------

@api.post("/sessions", response_model=SessionOut, status_code=201)
def start_session(
    scripture: Optional[List[ScripturePassage]] = Body(default=None, embed=True),
    registry: SessionRegistry = Depends(get_session_registry),
):
    return _start_session(registry, scripture)


@api.get("/sessions/{session_id}", response_model=SessionOut)
def show_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return _show_session(registry, session_id)


@api.post("/sessions/{session_id}/advance", response_model=SessionOut)
def advance_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return _step_session(registry, session_id, "advance")


@api.post("/sessions/{session_id}/back", response_model=SessionOut)
def back_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return _step_session(registry, session_id, "back")


@api.post("/sessions/{session_id}/skip-prayer", response_model=SessionOut)
def skip_prayer(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return _step_session(registry, session_id, "skip-prayer")


@api.put("/sessions/{session_id}/scripture", response_model=SessionOut)
def set_session_scripture(
    session_id: str,
    passages: List[ScripturePassage],
    registry: SessionRegistry = Depends(get_session_registry),
):
    return _set_session_scripture(registry, session_id, passages)


@api.put("/sessions/{session_id}/journal", response_model=SessionOut)
def update_session_journal(
    session_id: str,
    payload: SessionJournalIn,
    registry: SessionRegistry = Depends(get_session_registry),
):
    return _update_session_journal(registry, session_id, payload)


@api.post("/sessions/{session_id}/complete", response_model=DevotionRecordsOut, status_code=201)
async def complete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
    repo: RecordRepository = Depends(get_repository),
    uid: Optional[str] = Depends(get_uid),
):
    return await _complete_session(registry, repo, session_id, uid)


@api.delete("/sessions/{session_id}")
def cancel_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return _cancel_session(registry, session_id)
