from app.modules.gate.schemas import Disposition, GateDecision
from app.modules.intents.schemas import GatedAction, PendingIntent
from app.modules.intents.service import IntentStore
from app.modules.profiles.models import UserRole
from app.modules.session.schemas import Session
from app.config.roles_config import get_registration_route
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class GateEvaluator:
    """
    Decides what happens to an action that needs a signed-in user and,
    for some kinds, a complete profile. Returns a decision; never raises
    for control flow.
    """

    def __init__(self, intent_store: IntentStore, auth_route: str = "/auth"):
        self.intent_store = intent_store
        self.auth_route = auth_route

    def evaluate(
        self,
        action: GatedAction,
        session: Optional[Session],
        profile_complete: bool,
        role: Optional[UserRole] = None,
    ) -> GateDecision:
        if session is None:
            # Persist before the caller navigates away
            persisted = self.intent_store.set_pending_intent(action.kind, PendingIntent.from_action(action))
            logger.info(f"Gate closed for anonymous {action.kind.value} on {action.target_id}, redirecting to auth")
            return GateDecision(
                disposition=Disposition.REDIRECT_TO_AUTH,
                action=action,
                redirect_to=self.auth_route,
                state={"returnPath": action.return_path},
                message=f"Please sign in to {action.kind.sign_in_prompt}",
                intent_persisted=persisted,
            )

        if action.kind.requires_complete_profile and not profile_complete:
            role = role or session.role
            logger.info(f"Gate closed for user {session.user_id}: profile incomplete for {action.kind.value}")
            return GateDecision(
                disposition=Disposition.REDIRECT_TO_PROFILE_COMPLETION,
                action=action,
                redirect_to=get_registration_route(role),
                state={
                    "returnPath": action.return_path,
                    "action": action.model_dump(mode="json"),
                },
                message="Please complete your profile to continue",
            )

        return GateDecision(disposition=Disposition.ALLOW, action=action)
