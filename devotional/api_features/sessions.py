from __future__ import annotations

from typing import List, Optional

from asgiref.sync import sync_to_async
from fastapi import HTTPException

from ..schemas import DevotionRecordsOut, ScripturePassage, SessionJournalIn, SessionOut
from ..services.repository import RecordRepository
from ..services.session import DevotionSession, SessionRegistry, SessionStateError
from .records import outcome_to_out


# -------------------------
# Helpers (serialization)
# -------------------------

def session_to_out(s: DevotionSession) -> SessionOut:
    return SessionOut(
        id=s.id,
        phase=s.phase.value,
        prayer_ends_at=s.prayer_ends_at,
        scripture=s.scripture,
        observation=s.observation,
        application=s.application,
        prayer_text=s.prayer_text,
    )


def _get_session(registry: SessionRegistry, session_id: str) -> DevotionSession:
    try:
        session = registry.get(session_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Session not found")
    # The prayer timer runs out between requests.
    session.tick()
    return session


# -------------------------
# Endpoints: guided session
# -------------------------

def _start_session(registry: SessionRegistry, scripture: Optional[List[ScripturePassage]]) -> SessionOut:
    """
    Open a session and start the prayer timer. Without scripture the
    default passage is used.
    """
    session = registry.create(scripture=scripture or None)
    session.start()
    return session_to_out(session)


def _show_session(registry: SessionRegistry, session_id: str) -> SessionOut:
    return session_to_out(_get_session(registry, session_id))


def _step_session(registry: SessionRegistry, session_id: str, step: str) -> SessionOut:
    """
    step is one of: advance, back, skip-prayer.
    """
    session = _get_session(registry, session_id)
    actions = {
        "advance": session.advance,
        "back": session.back,
        "skip-prayer": session.skip_prayer,
    }
    try:
        actions[step]()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session_to_out(session)


def _set_session_scripture(
    registry: SessionRegistry, session_id: str, passages: List[ScripturePassage]
) -> SessionOut:
    session = _get_session(registry, session_id)
    try:
        session.set_scripture(passages)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session_to_out(session)


def _update_session_journal(
    registry: SessionRegistry, session_id: str, payload: SessionJournalIn
) -> SessionOut:
    session = _get_session(registry, session_id)
    session.update_journal(
        observation=payload.observation,
        application=payload.application,
        prayer_text=payload.prayer_text,
    )
    return session_to_out(session)


async def _complete_session(
    registry: SessionRegistry,
    repo: RecordRepository,
    session_id: str,
    uid: Optional[str],
) -> DevotionRecordsOut:
    """
    Save the session as a devotion record and close it.
    """
    session = _get_session(registry, session_id)
    try:
        record = session.complete()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    registry.discard(session_id)
    outcome = await sync_to_async(repo.add_devotion, thread_sensitive=True)(record, uid)
    return outcome_to_out(outcome)


def _cancel_session(registry: SessionRegistry, session_id: str) -> dict:
    try:
        registry.discard(session_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": True, "id": session_id}
