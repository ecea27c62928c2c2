from __future__ import annotations

import pytest

from app.modules.gate.schemas import Disposition
from app.modules.gate.service import GateEvaluator
from app.modules.intents.schemas import ActionKind, GatedAction
from app.modules.intents.service import IntentStore
from app.modules.intents.storage import MemoryStorage
from app.modules.profiles.models import UserRole
from tests.utils.factories import BrokenStorage, make_session


def _gate(storage=None) -> tuple[GateEvaluator, IntentStore]:
    store = IntentStore(storage if storage is not None else MemoryStorage(), "client-1")
    return GateEvaluator(store, auth_route="/auth"), store


@pytest.mark.parametrize("kind", list(ActionKind))
def test_anonymous_action_redirects_to_auth_and_persists_intent(kind: ActionKind) -> None:
    gate, store = _gate()
    action = GatedAction(kind=kind, target_id="T1", return_path="/somewhere/T1")

    decision = gate.evaluate(action, session=None, profile_complete=False)

    assert decision.disposition == Disposition.REDIRECT_TO_AUTH
    assert decision.redirect_to == "/auth"
    assert decision.state == {"returnPath": "/somewhere/T1"}
    assert decision.message.startswith("Please sign in to ")
    assert decision.intent_persisted is True
    stored = store.get_pending_intent(kind)
    assert (stored.target_id, stored.return_path) == ("T1", "/somewhere/T1")


def test_anonymous_vote_message() -> None:
    gate, _ = _gate()
    decision = gate.evaluate(GatedAction(kind=ActionKind.VOTE, target_id="F1"), None, False)
    assert decision.message == "Please sign in to vote for this feature"


def test_authenticated_complete_user_is_allowed_without_writes() -> None:
    gate, store = _gate()
    action = GatedAction(kind=ActionKind.BOOKING, target_id="P1", return_path="/professionals/P1")

    decision = gate.evaluate(action, make_session(), profile_complete=True)

    assert decision.allowed
    assert decision.redirect_to is None
    assert store.pending_intents() == []


def test_incomplete_profile_redirects_to_registration_with_action_state() -> None:
    gate, store = _gate()
    action = GatedAction(kind=ActionKind.STORY, target_id="new", return_path="/stories")

    decision = gate.evaluate(action, make_session(role=UserRole.PROFESSIONAL), profile_complete=False)

    assert decision.disposition == Disposition.REDIRECT_TO_PROFILE_COMPLETION
    assert decision.redirect_to == "/registration/professional"
    assert decision.state["returnPath"] == "/stories"
    assert decision.state["action"]["kind"] == "story"
    # Profile completion carries the action in navigation state, not in storage
    assert store.pending_intents() == []


def test_incomplete_profile_with_unknown_role_uses_generic_registration() -> None:
    gate, _ = _gate()
    decision = gate.evaluate(
        GatedAction(kind=ActionKind.MESSAGE, target_id="P2"), make_session(role=None), profile_complete=False
    )
    assert decision.redirect_to == "/registration"


def test_vote_does_not_require_complete_profile() -> None:
    gate, _ = _gate()
    decision = gate.evaluate(GatedAction(kind=ActionKind.VOTE, target_id="F1"), make_session(), profile_complete=False)
    assert decision.allowed


def test_anonymous_redirect_survives_unavailable_storage() -> None:
    gate, _ = _gate(BrokenStorage())
    decision = gate.evaluate(GatedAction(kind=ActionKind.VOTE, target_id="F1"), None, False)
    assert decision.disposition == Disposition.REDIRECT_TO_AUTH
    assert decision.intent_persisted is False
