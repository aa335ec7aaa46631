"""
Guided daily devotion: prayer timer, scripture, observation, application,
written prayer. Completing the last step produces a DevotionRecord.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from django.utils import timezone

from ..schemas import DevotionRecord, ScripturePassage
from ..utils import new_record_id
from .scripture import DEFAULT_SCRIPTURE


PRAYER_MINUTES = 5


class Phase(str, Enum):
    IDLE = "idle"
    PRAYER = "prayer"
    SCRIPTURE = "scripture"
    OBSERVATION = "observation"
    APPLICATION = "application"
    PRAYER_WRITE = "prayer-write"


FLOW: List[Phase] = [
    Phase.IDLE,
    Phase.PRAYER,
    Phase.SCRIPTURE,
    Phase.OBSERVATION,
    Phase.APPLICATION,
    Phase.PRAYER_WRITE,
]


class SessionStateError(RuntimeError):
    """The requested step is not allowed in the current phase."""


class DevotionSession:
    def __init__(
        self,
        scripture: Optional[List[ScripturePassage]] = None,
        prayer_minutes: int = PRAYER_MINUTES,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.phase = Phase.IDLE
        self.prayer_minutes = prayer_minutes
        self.prayer_ends_at: Optional[datetime] = None
        self.scripture: List[ScripturePassage] = list(scripture or [DEFAULT_SCRIPTURE])
        self.observation = ""
        self.application = ""
        self.prayer_text = ""

    def start(self, now: Optional[datetime] = None) -> None:
        """Begin the prayer phase and set its timer."""
        if self.phase is not Phase.IDLE:
            raise SessionStateError(f"Session already started (phase: {self.phase.value}).")
        now = now or timezone.now()
        self._enter(Phase.PRAYER)
        self.prayer_ends_at = now + timedelta(minutes=self.prayer_minutes)

    def tick(self, now: Optional[datetime] = None) -> Phase:
        """Move on to the scripture once the prayer timer has run out."""
        now = now or timezone.now()
        if self.phase is Phase.PRAYER and self.prayer_ends_at and now >= self.prayer_ends_at:
            self._enter(Phase.SCRIPTURE)
        return self.phase

    def skip_prayer(self) -> None:
        if self.phase is not Phase.PRAYER:
            raise SessionStateError("Prayer can only be skipped during the prayer phase.")
        self._enter(Phase.SCRIPTURE)

    def advance(self) -> Phase:
        index = FLOW.index(self.phase)
        if self.phase is Phase.IDLE or index == len(FLOW) - 1:
            raise SessionStateError(f"Cannot advance from {self.phase.value}.")
        self._enter(FLOW[index + 1])
        return self.phase

    def back(self, now: Optional[datetime] = None) -> Phase:
        index = FLOW.index(self.phase)
        if index <= 1:
            raise SessionStateError(f"Cannot go back from {self.phase.value}.")
        self._enter(FLOW[index - 1])
        if self.phase is Phase.PRAYER:
            # Returning to prayer restarts the timer.
            self.prayer_ends_at = (now or timezone.now()) + timedelta(minutes=self.prayer_minutes)
        return self.phase

    def cancel(self) -> None:
        self._enter(Phase.IDLE)

    def _enter(self, phase: Phase) -> None:
        self.phase = phase
        if phase is not Phase.PRAYER:
            self.prayer_ends_at = None

    def set_scripture(self, passages: List[ScripturePassage]) -> None:
        if not passages:
            raise ValueError("At least one scripture passage is required.")
        self.scripture = list(passages)

    def update_journal(
        self,
        observation: Optional[str] = None,
        application: Optional[str] = None,
        prayer_text: Optional[str] = None,
    ) -> None:
        if observation is not None:
            self.observation = observation
        if application is not None:
            self.application = application
        if prayer_text is not None:
            self.prayer_text = prayer_text

    def complete(self, now: Optional[datetime] = None) -> DevotionRecord:
        """
        Turn the session into a devotion record and reset the journal fields.

        Raises:
            SessionStateError: If the session has not reached the written prayer.
        """
        if self.phase is not Phase.PRAYER_WRITE:
            raise SessionStateError("A devotion can only be saved after the written prayer step.")
        now = now or timezone.now()
        record = DevotionRecord(
            id=new_record_id("devotion", now),
            date=now,
            scripture=[p.model_copy() for p in self.scripture],
            observation=self.observation,
            application=self.application,
            prayer_text=self.prayer_text,
        )
        self.observation = self.application = self.prayer_text = ""
        self._enter(Phase.IDLE)
        return record


class SessionRegistry:
    """In-process store of active sessions."""

    def __init__(self) -> None:
        self._sessions: Dict[str, DevotionSession] = {}

    def create(self, **kwargs) -> DevotionSession:
        session = DevotionSession(**kwargs)
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> DevotionSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise LookupError(f"Session {session_id!r} not found")

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise LookupError(f"Session {session_id!r} not found")
