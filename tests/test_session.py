from __future__ import annotations

from datetime import timedelta

import pytest

from devotional.schemas import ScripturePassage
from devotional.services.scripture import DEFAULT_SCRIPTURE
from devotional.services.session import (
    Phase,
    SessionRegistry,
    SessionStateError,
    DevotionSession,
)
from devotional.utils import parse_timestamp


NOW = parse_timestamp("2024-04-01T07:00:00+08:00")


def _at_prayer_write() -> DevotionSession:
    session = DevotionSession()
    session.start(NOW)
    session.skip_prayer()
    session.advance()
    session.advance()
    session.advance()
    assert session.phase is Phase.PRAYER_WRITE
    return session


def test_new_session_is_idle_with_default_scripture() -> None:
    session = DevotionSession()

    assert session.phase is Phase.IDLE
    assert session.scripture == [DEFAULT_SCRIPTURE]
    assert session.prayer_ends_at is None


def test_start_sets_five_minute_timer() -> None:
    session = DevotionSession()
    session.start(NOW)

    assert session.phase is Phase.PRAYER
    assert session.prayer_ends_at == NOW + timedelta(minutes=5)

    with pytest.raises(SessionStateError):
        session.start(NOW)


def test_tick_moves_to_scripture_when_timer_expires() -> None:
    session = DevotionSession()
    session.start(NOW)

    assert session.tick(NOW + timedelta(minutes=4, seconds=59)) is Phase.PRAYER
    assert session.tick(NOW + timedelta(minutes=5)) is Phase.SCRIPTURE
    assert session.prayer_ends_at is None


def test_skip_prayer_only_during_prayer() -> None:
    session = DevotionSession()
    with pytest.raises(SessionStateError):
        session.skip_prayer()

    session.start(NOW)
    session.skip_prayer()

    assert session.phase is Phase.SCRIPTURE


def test_advance_walks_the_flow_and_stops_at_the_end() -> None:
    session = DevotionSession()
    with pytest.raises(SessionStateError):
        session.advance()

    session.start(NOW)
    assert session.advance() is Phase.SCRIPTURE
    assert session.advance() is Phase.OBSERVATION
    assert session.advance() is Phase.APPLICATION
    assert session.advance() is Phase.PRAYER_WRITE

    with pytest.raises(SessionStateError):
        session.advance()


def test_back_to_prayer_restarts_the_timer() -> None:
    session = DevotionSession()
    session.start(NOW)
    session.skip_prayer()
    later = NOW + timedelta(minutes=2)

    assert session.back(later) is Phase.PRAYER
    assert session.prayer_ends_at == later + timedelta(minutes=5)

    with pytest.raises(SessionStateError):
        session.back(later)


def test_back_keeps_journal_text() -> None:
    session = _at_prayer_write()
    session.update_journal(observation="obs", application="app")

    assert session.back() is Phase.APPLICATION
    assert (session.observation, session.application) == ("obs", "app")


def test_cancel_returns_to_idle() -> None:
    session = DevotionSession()
    session.start(NOW)
    session.cancel()

    assert session.phase is Phase.IDLE
    assert session.prayer_ends_at is None


def test_set_scripture_requires_a_passage() -> None:
    session = DevotionSession()
    with pytest.raises(ValueError):
        session.set_scripture([])

    passage = ScripturePassage(reference="John 3:16", text="For God so loved the world")
    session.set_scripture([passage])

    assert session.scripture == [passage]


def test_update_journal_ignores_missing_fields() -> None:
    session = DevotionSession()
    session.update_journal(observation="first")
    session.update_journal(prayer_text="amen")

    assert (session.observation, session.application, session.prayer_text) == ("first", "", "amen")


def test_complete_requires_the_written_prayer_step() -> None:
    session = DevotionSession()
    session.start(NOW)
    session.skip_prayer()

    with pytest.raises(SessionStateError):
        session.complete(NOW)


def test_complete_builds_record_and_resets() -> None:
    session = _at_prayer_write()
    session.update_journal(observation="God is near", application="Slow down", prayer_text="Thank you")
    done_at = NOW + timedelta(minutes=20)

    record = session.complete(done_at)

    assert record.id == f"devotion-{int(done_at.timestamp() * 1000)}"
    assert record.date == done_at
    assert record.scripture == [DEFAULT_SCRIPTURE]
    assert (record.observation, record.application, record.prayer_text) == (
        "God is near",
        "Slow down",
        "Thank you",
    )
    assert session.phase is Phase.IDLE
    assert (session.observation, session.application, session.prayer_text) == ("", "", "")


def test_registry_lookup_and_discard() -> None:
    registry = SessionRegistry()
    session = registry.create()

    assert registry.get(session.id) is session

    registry.discard(session.id)

    with pytest.raises(LookupError):
        registry.get(session.id)
    with pytest.raises(LookupError):
        registry.discard(session.id)
