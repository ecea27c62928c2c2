from app.modules.intents.schemas import ActionKind, GatedAction
from app.modules.replay.schemas import ActionOutcome, OutcomeStatus
from app.modules.session.effects import EffectOutbox
from app.modules.session.schemas import Session
from app.modules.votes.service import VoteService
from typing import Callable, Dict
import logging

logger = logging.getLogger(__name__)

ActionHandler = Callable[[GatedAction, Session, EffectOutbox, bool], ActionOutcome]


class ActionHandlers:
    """
    Executes a gated action once its gate is open. Used both for direct
    execution and for replay; replay=True only changes what is logged,
    handlers never write pending intents themselves.
    """

    def __init__(self, vote_service: VoteService):
        self.vote_service = vote_service
        self._handlers: Dict[ActionKind, ActionHandler] = {
            ActionKind.VOTE: self._vote,
        }

    def register(self, kind: ActionKind, handler: ActionHandler) -> None:
        self._handlers[kind] = handler

    def perform(self, action: GatedAction, session: Session, effects: EffectOutbox, replay: bool = False) -> ActionOutcome:
        handler = self._handlers.get(action.kind, self._navigate)
        return handler(action, session, effects, replay)

    def _vote(self, action: GatedAction, session: Session, effects: EffectOutbox, replay: bool) -> ActionOutcome:
        # DuplicateVoteError propagates; callers report it as "already voted"
        self.vote_service.cast_vote(action.target_id, session.user_id)
        if replay:
            logger.info(f"Replayed vote for feature {action.target_id} by user {session.user_id}")
        message = "Thank you for voting!"
        effects.notify("success", message)
        return ActionOutcome(status=OutcomeStatus.DONE, message=message)

    def _navigate(self, action: GatedAction, session: Session, effects: EffectOutbox, replay: bool) -> ActionOutcome:
        effects.navigate(action.return_path, state={"action": action.model_dump(mode="json"), "replay": replay})
        return ActionOutcome(status=OutcomeStatus.NAVIGATED, navigate_to=action.return_path)
