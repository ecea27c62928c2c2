from __future__ import annotations

from app.modules.engagement.service import SESSION_ID_KEY, ActionThrottle, EngagementRecorder
from app.modules.intents.storage import MemoryStorage
from app.modules.profiles.models import UserRole
from tests.utils.factories import BrokenStorage, make_session
from tests.utils.fake_supabase import FakeSupabase


def test_track_writes_enriched_row() -> None:
    db = FakeSupabase()
    recorder = EngagementRecorder(db, MemoryStorage(), "client-1")

    assert recorder.track(
        "cta_click", {"cta": "book_now"}, feature_name="booking",
        session=make_session(role=UserRole.PROFESSIONAL), profile_complete=True,
    ) is True

    [row] = db.rows("cta_engagement_tracking")
    assert row["user_id"] == "user-1"
    assert row["action_type"] == "cta_click"
    assert row["feature_name"] == "booking"
    assert row["additional_data"] == {
        "cta": "book_now",
        "user_role": "professional",
        "user_profile_complete": True,
    }


def test_anonymous_event_has_no_user() -> None:
    db = FakeSupabase()
    EngagementRecorder(db, MemoryStorage(), "client-1").track("page_view")
    [row] = db.rows("cta_engagement_tracking")
    assert row["user_id"] is None
    assert row["additional_data"]["user_role"] == "anonymous"
    assert "feature_name" not in row


def test_session_id_is_reused_per_client() -> None:
    db = FakeSupabase()
    storage = MemoryStorage()
    EngagementRecorder(db, storage, "client-1").track("a")
    EngagementRecorder(db, storage, "client-1").track("b")
    EngagementRecorder(db, storage, "client-2").track("c")

    ids = [row["session_id"] for row in db.rows("cta_engagement_tracking")]
    assert ids[0] == ids[1] == storage.get_item("client-1", SESSION_ID_KEY)
    assert ids[2] != ids[0]


def test_track_never_raises() -> None:
    db = FakeSupabase()
    db.failing_tables.add("cta_engagement_tracking")
    assert EngagementRecorder(db, MemoryStorage(), "client-1").track("cta_click") is False


def test_unavailable_storage_uses_ephemeral_session_id() -> None:
    db = FakeSupabase()
    recorder = EngagementRecorder(db, BrokenStorage(), "client-1")
    first = recorder.session_correlation_id()
    assert first == recorder.session_correlation_id()
    assert recorder.track("cta_click") is True


def test_disabled_tracking_writes_nothing() -> None:
    db = FakeSupabase()
    assert EngagementRecorder(db, MemoryStorage(), "client-1", enabled=False).track("cta_click") is False
    assert db.rows("cta_engagement_tracking") == []


def test_throttle_suppresses_repeats_within_cooldown() -> None:
    now = [100.0]
    throttle = ActionThrottle(cooldown_seconds=1.0, clock=lambda: now[0])

    assert throttle.try_acquire("client-1:book") is True
    now[0] += 0.5
    assert throttle.try_acquire("client-1:book") is False
    assert throttle.try_acquire("client-1:vote") is True
    now[0] += 0.6
    assert throttle.try_acquire("client-1:book") is True


def test_throttle_reset() -> None:
    throttle = ActionThrottle(cooldown_seconds=60)
    throttle.try_acquire("k")
    throttle.reset()
    assert throttle.try_acquire("k") is True
