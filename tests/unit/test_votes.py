from __future__ import annotations

import pytest
from fastapi import HTTPException

from app.modules.votes.feed import VoteFeed
from app.modules.votes.service import DuplicateVoteError, VoteService
from tests.utils.factories import seed_feature
from tests.utils.fake_supabase import FakeSupabase


def _service() -> tuple[VoteService, FakeSupabase, VoteFeed]:
    db = FakeSupabase()
    seed_feature(db, "F1")
    feed = VoteFeed()
    return VoteService(db, feed=feed), db, feed


def test_cast_vote_records_one_row() -> None:
    service, db, _ = _service()
    vote = service.cast_vote("F1", "u1")
    assert (vote.feature_id, vote.user_id) == ("F1", "u1")
    assert service.count_votes("F1") == 1
    assert service.has_voted("F1", "u1") is True
    assert service.has_voted("F1", "u2") is False


def test_second_vote_by_same_user_is_rejected() -> None:
    service, db, _ = _service()
    service.cast_vote("F1", "u1")
    with pytest.raises(DuplicateVoteError) as exc:
        service.cast_vote("F1", "u1")
    assert exc.value.status_code == 409
    assert exc.value.detail == "You have already voted for this feature"
    assert len(db.rows("feature_upvotes")) == 1


def test_backend_failure_is_500() -> None:
    service, db, _ = _service()
    db.failing_tables.add("feature_upvotes")
    with pytest.raises(HTTPException) as exc:
        service.cast_vote("F1", "u1")
    assert exc.value.status_code == 500


def test_retract_vote() -> None:
    service, _, _ = _service()
    service.cast_vote("F1", "u1")
    assert service.retract_vote("F1", "u1") is True
    assert service.retract_vote("F1", "u1") is False
    assert service.count_votes("F1") == 0


def test_list_features_includes_counts() -> None:
    service, db, _ = _service()
    seed_feature(db, "F2", "Shift swap")
    service.cast_vote("F1", "u1")
    service.cast_vote("F1", "u2")
    counts = {f.id: f.votes for f in service.list_features()}
    assert counts == {"F1": 2, "F2": 0}


def test_get_unknown_feature_is_404() -> None:
    service, _, _ = _service()
    with pytest.raises(HTTPException) as exc:
        service.get_feature("nope")
    assert exc.value.status_code == 404


def test_feed_notifies_subscribers_of_changes() -> None:
    service, _, feed = _service()
    changes = []
    unsubscribe = feed.subscribe("F1", lambda feature_id, change: changes.append((feature_id, change)))

    service.cast_vote("F1", "u1")
    service.retract_vote("F1", "u1")
    service.retract_vote("F1", "u1")
    unsubscribe()
    service.cast_vote("F1", "u2")

    assert changes == [("F1", "insert"), ("F1", "delete")]
    assert feed.subscriber_count("F1") == 0


def test_failing_listener_does_not_break_the_vote() -> None:
    service, _, feed = _service()

    def boom(feature_id: str, change: str) -> None:
        raise RuntimeError("listener crashed")

    feed.subscribe("F1", boom)
    service.cast_vote("F1", "u1")
    assert service.count_votes("F1") == 1
