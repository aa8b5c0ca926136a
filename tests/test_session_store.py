"""Tests for the in-memory session registry."""

from datetime import datetime, timedelta, timezone

from movie_booking_system.config import settings
from movie_booking_system.services.session_store import SessionStore


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 11, 1, 19, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def make_store(clock, minutes=30):
    return SessionStore(lifetime=timedelta(minutes=minutes), clock=clock)


class TestSessionStore:
    def test_create_and_get(self):
        store = make_store(FakeClock())
        marker = object()

        session_id, controller = store.create(lambda: marker)

        assert controller is marker
        assert store.get(session_id) is marker
        assert len(store) == 1

    def test_unknown_session(self):
        assert make_store(FakeClock()).get("nope") is None

    def test_session_alive_until_token_expires(self):
        clock = FakeClock()
        store = make_store(clock)
        session_id, controller = store.create(object)

        clock.advance(minutes=29, seconds=59)

        assert store.get(session_id) is controller

    def test_expired_session_is_dropped(self):
        clock = FakeClock()
        store = make_store(clock)
        session_id, _ = store.create(object)

        clock.advance(minutes=30)

        assert store.get(session_id) is None
        assert len(store) == 0

    def test_abandoned_sessions_are_reclaimed(self):
        clock = FakeClock()
        store = make_store(clock)
        for _ in range(1000):
            store.create(object)

        clock.advance(hours=1)
        session_id, controller = store.create(object)

        assert len(store) == 1
        assert store.get(session_id) is controller

    def test_purge_keeps_younger_sessions(self):
        clock = FakeClock()
        store = make_store(clock)
        old_id, _ = store.create(object)
        clock.advance(minutes=20)
        young_id, young = store.create(object)
        clock.advance(minutes=15)

        assert store.purge_expired() == 1
        assert store.get(old_id) is None
        assert store.get(young_id) is young

    def test_discard(self):
        store = make_store(FakeClock())
        session_id, _ = store.create(object)

        store.discard(session_id)
        store.discard(session_id)

        assert store.get(session_id) is None

    def test_default_lifetime_matches_token_lifetime(self):
        store = SessionStore()

        assert store.lifetime == timedelta(minutes=settings.SESSION_TOKEN_EXPIRE_MINUTES)
