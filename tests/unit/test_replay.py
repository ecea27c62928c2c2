from __future__ import annotations

from app.modules.intents.schemas import ActionKind, PendingIntent
from app.modules.intents.service import IntentStore
from app.modules.intents.storage import MemoryStorage
from app.modules.replay.handlers import ActionHandlers
from app.modules.replay.schemas import OutcomeStatus, ReplayStatus
from app.modules.replay.service import ReplayDispatcher
from app.modules.session.effects import EffectOutbox
from app.modules.votes.feed import VoteFeed
from app.modules.votes.service import VoteService
from tests.utils.factories import make_session, seed_feature
from tests.utils.fake_supabase import FakeSupabase


def _dispatcher(db: FakeSupabase) -> tuple[ReplayDispatcher, IntentStore, EffectOutbox]:
    store = IntentStore(MemoryStorage(), "client-1")
    effects = EffectOutbox()
    return ReplayDispatcher(store, ActionHandlers(VoteService(db, feed=VoteFeed())), effects), store, effects


def _pending_vote(store: IntentStore, feature_id: str = "F1") -> PendingIntent:
    intent = PendingIntent(kind=ActionKind.VOTE, target_id=feature_id, return_path=f"/features/{feature_id}")
    store.set_pending_intent(ActionKind.VOTE, intent)
    return intent


def test_nothing_pending() -> None:
    dispatcher, _, _ = _dispatcher(FakeSupabase())
    assert dispatcher.replay(ActionKind.VOTE, "F1", make_session()).status == ReplayStatus.NONE


def test_intent_only_replays_on_its_own_subject() -> None:
    db = FakeSupabase()
    seed_feature(db, "F1")
    seed_feature(db, "F2")
    dispatcher, store, effects = _dispatcher(db)
    _pending_vote(store, "F1")

    other = dispatcher.replay(ActionKind.VOTE, "F2", make_session())
    assert other.status == ReplayStatus.SKIPPED
    assert store.get_pending_intent(ActionKind.VOTE) is not None
    assert db.rows("feature_upvotes") == []

    own = dispatcher.replay(ActionKind.VOTE, "F1", make_session())
    assert own.status == ReplayStatus.REPLAYED
    assert own.outcome.status == OutcomeStatus.DONE
    assert store.get_pending_intent(ActionKind.VOTE) is None
    assert [(r["feature_id"], r["user_id"]) for r in db.rows("feature_upvotes")] == [("F1", "user-1")]
    assert [n.message for n in effects.notifications] == ["Thank you for voting!"]


def test_replay_happens_at_most_once() -> None:
    db = FakeSupabase()
    seed_feature(db, "F1")
    dispatcher, store, _ = _dispatcher(db)
    _pending_vote(store)

    first = dispatcher.replay(ActionKind.VOTE, "F1", make_session())
    second = dispatcher.replay(ActionKind.VOTE, "F1", make_session())

    assert first.status == ReplayStatus.REPLAYED
    assert second.status == ReplayStatus.NONE
    assert len(db.rows("feature_upvotes")) == 1


def test_anonymous_replay_is_skipped() -> None:
    dispatcher, store, _ = _dispatcher(FakeSupabase())
    _pending_vote(store)
    assert dispatcher.replay(ActionKind.VOTE, "F1", None).status == ReplayStatus.SKIPPED
    assert store.get_pending_intent(ActionKind.VOTE) is not None


def test_failed_replay_still_clears_intent() -> None:
    db = FakeSupabase()
    db.failing_tables.add("feature_upvotes")
    dispatcher, store, effects = _dispatcher(db)
    _pending_vote(store)

    result = dispatcher.replay(ActionKind.VOTE, "F1", make_session())

    assert result.status == ReplayStatus.FAILED
    assert result.error
    assert store.get_pending_intent(ActionKind.VOTE) is None
    assert effects.notifications[-1].level == "error"
    assert effects.notifications[-1].message == "We could not finish your vote. Please try again."


def test_duplicate_vote_on_replay_is_reported_not_retried() -> None:
    db = FakeSupabase()
    seed_feature(db, "F1")
    db.seed("feature_upvotes", {"id": "v1", "feature_id": "F1", "user_id": "user-1"})
    dispatcher, store, effects = _dispatcher(db)
    _pending_vote(store)

    result = dispatcher.replay(ActionKind.VOTE, "F1", make_session())

    assert result.outcome.status == OutcomeStatus.DUPLICATE
    assert effects.notifications[-1].message == "You have already voted for this feature"
    assert store.get_pending_intent(ActionKind.VOTE) is None
    assert len(db.rows("feature_upvotes")) == 1


def test_replay_does_not_clear_intent_written_meanwhile() -> None:
    db = FakeSupabase()
    seed_feature(db, "F1")
    dispatcher, store, effects = _dispatcher(db)
    _pending_vote(store, "F1")
    newer = PendingIntent(kind=ActionKind.VOTE, target_id="F3", return_path="/features/F3")

    def vote_then_overwrite(action, session, outbox, replay):
        store.set_pending_intent(ActionKind.VOTE, newer)
        return ActionHandlers(VoteService(db, feed=VoteFeed())).perform(action, session, outbox, replay)

    dispatcher.handlers.register(ActionKind.VOTE, vote_then_overwrite)
    dispatcher.replay(ActionKind.VOTE, "F1", make_session())

    assert store.get_pending_intent(ActionKind.VOTE) == newer


def test_non_vote_kind_navigates_back_to_return_path() -> None:
    dispatcher, store, effects = _dispatcher(FakeSupabase())
    store.set_pending_intent(
        ActionKind.BOOKING, PendingIntent(kind=ActionKind.BOOKING, target_id="P1", return_path="/professionals/P1")
    )

    result = dispatcher.replay(ActionKind.BOOKING, "P1", make_session())

    assert result.outcome.status == OutcomeStatus.NAVIGATED
    assert effects.navigation.path == "/professionals/P1"
    assert effects.navigation.state["replay"] is True


def test_profile_gated_intent_waits_for_complete_profile() -> None:
    dispatcher, store, effects = _dispatcher(FakeSupabase())
    store.set_pending_intent(
        ActionKind.STORY, PendingIntent(kind=ActionKind.STORY, target_id="new", return_path="/stories")
    )

    waiting = dispatcher.replay(ActionKind.STORY, "new", make_session(), profile_complete=False)
    assert waiting.status == ReplayStatus.SKIPPED
    assert store.get_pending_intent(ActionKind.STORY) is not None

    done = dispatcher.replay(ActionKind.STORY, "new", make_session(), profile_complete=True)
    assert done.status == ReplayStatus.REPLAYED
    assert store.get_pending_intent(ActionKind.STORY) is None
