from app.modules.intents.schemas import ActionKind
from app.modules.intents.service import IntentStore
from app.modules.replay.handlers import ActionHandlers
from app.modules.replay.schemas import ActionOutcome, OutcomeStatus, ReplayResult, ReplayStatus
from app.modules.session.effects import EffectOutbox
from app.modules.session.schemas import Session
from app.modules.votes.service import DuplicateVoteError
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class ReplayDispatcher:
    """
    Re-invokes a deferred action once its gate has opened.

    A matching intent is cleared after the handler has been attempted,
    whether or not it succeeded: replay is at-most-once and never retried.
    The clear is conditional on the slot still holding the replayed intent.
    """

    def __init__(self, intent_store: IntentStore, handlers: ActionHandlers, effects: EffectOutbox):
        self.intent_store = intent_store
        self.handlers = handlers
        self.effects = effects

    def replay(
        self,
        kind: ActionKind,
        subject_id: str,
        session: Optional[Session],
        profile_complete: bool = True,
    ) -> ReplayResult:
        kind = ActionKind(kind)
        intent = self.intent_store.get_pending_intent(kind)
        if intent is None:
            return ReplayResult(kind=kind, subject_id=subject_id, status=ReplayStatus.NONE)

        # The gate is still closed: wait for sign-in or for the profile to complete
        gate_closed = session is None or (kind.requires_complete_profile and not profile_complete)
        if gate_closed or intent.target_id != subject_id:
            return ReplayResult(kind=kind, subject_id=subject_id, status=ReplayStatus.SKIPPED, intent=intent)

        logger.info(f"Replaying pending {kind.value} intent on {subject_id} for user {session.user_id}")
        try:
            outcome = self.handlers.perform(intent.to_action(), session, self.effects, replay=True)
            return ReplayResult(kind=kind, subject_id=subject_id, status=ReplayStatus.REPLAYED,
                                intent=intent, outcome=outcome)
        except DuplicateVoteError as e:
            self.effects.notify("info", e.detail)
            return ReplayResult(kind=kind, subject_id=subject_id, status=ReplayStatus.REPLAYED, intent=intent,
                                outcome=ActionOutcome(status=OutcomeStatus.DUPLICATE, message=e.detail))
        except Exception as e:
            detail = getattr(e, "detail", None) or str(e)
            logger.error(f"Replay of {kind.value} intent on {subject_id} failed: {detail}")
            self.effects.notify("error", f"We could not finish your {kind.value.replace('_', ' ')}. Please try again.")
            return ReplayResult(kind=kind, subject_id=subject_id, status=ReplayStatus.FAILED,
                                intent=intent, error=str(detail))
        finally:
            self.intent_store.clear_pending_intent(kind, expected=intent)
