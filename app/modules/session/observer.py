"""
Session observer: the single source of truth for one client's auth session.

States: uninitialized -> loading -> authenticated | anonymous. The observer
lives for as long as the client context does; there is no terminal state.
"""
import threading
import logging
from typing import Callable, List, Optional, Set, Tuple

from app.config.roles_config import get_dashboard_route, get_registration_route
from app.modules.intents.schemas import ActionKind
from app.modules.intents.service import IntentStore
from app.modules.profiles.models import UserRole
from app.modules.profiles.service import ProfileService
from app.modules.replay.schemas import ReplayResult, ReplayStatus
from app.modules.replay.service import ReplayDispatcher
from app.modules.session.effects import EffectOutbox
from app.modules.session.schemas import AuthEvent, Session, SessionSnapshot, SessionState

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionSnapshot], None]
SignOutFn = Callable[[Optional[str]], bool]


class SessionObserver:
    def __init__(
        self,
        client_id: str,
        profile_service: ProfileService,
        intent_store: IntentStore,
        dispatcher: ReplayDispatcher,
        effects: EffectOutbox,
        sign_out_fn: Optional[SignOutFn] = None,
    ):
        self.client_id = client_id
        self.profile_service = profile_service
        self.intent_store = intent_store
        self.dispatcher = dispatcher
        self.effects = effects
        self.sign_out_fn = sign_out_fn

        self.state = SessionState.UNINITIALIZED
        self.session: Optional[Session] = None
        self.role: Optional[UserRole] = None
        self.profile_complete = False

        self._lock = threading.RLock()
        self._listeners: List[SessionListener] = []
        self._subjects: Set[Tuple[ActionKind, str]] = set()

    # -- subscriptions -------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def watch(self, kind: ActionKind, subject_id: str) -> Callable[[], None]:
        """Declare that the client's current page is the subject for kind."""
        kind = ActionKind(kind)
        with self._lock:
            self._subjects.add((kind, subject_id))
        return lambda: self.unwatch(kind, subject_id)

    def unwatch(self, kind: ActionKind, subject_id: str) -> None:
        with self._lock:
            self._subjects.discard((ActionKind(kind), subject_id))

    @property
    def subjects(self) -> List[Tuple[ActionKind, str]]:
        with self._lock:
            return sorted(self._subjects, key=lambda s: (s[0].value, s[1]))

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"Session listener failed for client {self.client_id}: {e}")

    def snapshot(self, drain: bool = False) -> SessionSnapshot:
        with self._lock:
            if drain:
                navigation, notifications = self.effects.drain()
            else:
                navigation, notifications = self.effects.navigation, self.effects.notifications
            return SessionSnapshot(
                client_id=self.client_id,
                state=self.state,
                user_id=self.session.user_id if self.session else None,
                email=self.session.email if self.session else None,
                role=self.role,
                profile_complete=self.profile_complete,
                navigation=navigation,
                notifications=notifications,
            )

    # -- transitions ---------------------------------------------------

    def load(self, session: Optional[Session]) -> SessionSnapshot:
        """Initial load with whatever session the client already holds."""
        with self._lock:
            self.state = SessionState.LOADING
            if session is None:
                self._enter_anonymous()
            else:
                self._enter_authenticated(session)
                self._replay_watched()
        self._emit()
        return self.snapshot()

    def handle_auth_event(self, event: AuthEvent, session: Optional[Session]) -> SessionSnapshot:
        event = AuthEvent(event)
        logger.info(f"Auth state changed for client {self.client_id}: {event.value}")
        with self._lock:
            if event == AuthEvent.SIGNED_OUT:
                self._enter_anonymous()
                self.effects.navigate("/")
                self.effects.notify("success", "You have been signed out successfully")
            elif session is None:
                logger.warning(f"Ignoring {event.value} without a session for client {self.client_id}")
            elif event == AuthEvent.SIGNED_IN:
                genuine = (
                    self.state != SessionState.AUTHENTICATED
                    or self.session is None
                    or self.session.user_id != session.user_id
                )
                self.state = SessionState.LOADING
                self._enter_authenticated(session)
                if genuine:
                    self._after_sign_in()
                    self.effects.notify("success", "You have successfully logged in!")
            else:
                # token_refreshed, user_updated
                if self.state != SessionState.AUTHENTICATED:
                    self._enter_authenticated(session)
                    self._replay_watched()
                else:
                    self.role = self._fetch_role(session.user_id)
                    self.session = session.model_copy(update={"role": self.role})
        self._emit()
        return self.snapshot()

    def sign_out(self, token: Optional[str] = None) -> bool:
        if self.sign_out_fn is not None:
            try:
                ok = self.sign_out_fn(token)
            except Exception as e:
                logger.error(f"Sign out error for client {self.client_id}: {e}")
                ok = False
            if not ok:
                self.effects.notify("error", "Failed to sign out")
                return False
        self.handle_auth_event(AuthEvent.SIGNED_OUT, None)
        return True

    def refresh_profile(self) -> bool:
        """Recompute completeness; a false -> true flip replays declared subjects."""
        with self._lock:
            if self.state != SessionState.AUTHENTICATED or self.session is None:
                return False
            was_complete = self.profile_complete
            self.profile_complete = self._compute_completeness(self.session.user_id, self.role)
            if self.profile_complete and not was_complete:
                logger.info(f"Profile became complete for user {self.session.user_id}")
                self._replay_watched()
            complete = self.profile_complete
        self._emit()
        return complete

    def replay(self, kind: ActionKind, subject_id: str, session: Optional[Session]) -> ReplayResult:
        """Replay for the caller's own session; a missing or foreign session leaves the intent alone."""
        with self._lock:
            current = self.session
            if session is None or current is None or current.user_id != session.user_id:
                current = None
            return self.dispatcher.replay(kind, subject_id, current, self.profile_complete)

    def expire(self) -> SessionSnapshot:
        """The client no longer holds a valid session: go anonymous without sign-out effects."""
        with self._lock:
            if self.state == SessionState.AUTHENTICATED:
                logger.info(f"Session expired for client {self.client_id}")
            self._enter_anonymous()
        self._emit()
        return self.snapshot()

    # -- internals -----------------------------------------------------

    def _fetch_role(self, user_id: str) -> Optional[UserRole]:
        try:
            return self.profile_service.get_role(user_id)
        except Exception as e:
            logger.error(f"Error fetching role for user {user_id}: {e}")
            return None

    def _compute_completeness(self, user_id: str, role: Optional[UserRole]) -> bool:
        try:
            return self.profile_service.is_profile_complete(user_id, role)
        except Exception as e:
            logger.error(f"Error checking profile completion for user {user_id}: {e}")
            return False

    def _enter_authenticated(self, session: Session) -> None:
        self.role = self._fetch_role(session.user_id)
        self.session = session.model_copy(update={"role": self.role})
        self.profile_complete = self._compute_completeness(session.user_id, self.role)
        self.state = SessionState.AUTHENTICATED

    def _enter_anonymous(self) -> None:
        # Pending intents are kept: they exist for the sign-in that follows
        self.session = None
        self.role = None
        self.profile_complete = False
        self.state = SessionState.ANONYMOUS

    def _replay_watched(self) -> List[ReplayResult]:
        results = []
        for kind, subject_id in self.subjects:
            results.append(self.dispatcher.replay(kind, subject_id, self.session, self.profile_complete))
        return results

    def _after_sign_in(self) -> None:
        pending = self.intent_store.pending_intents()
        if pending:
            results = self._replay_watched()
            consumed = {r.kind for r in results if r.status in (ReplayStatus.REPLAYED, ReplayStatus.FAILED)}
            leftovers = [i for i in pending if i.kind not in consumed]
            if leftovers:
                # Send the client back to the page that owns the intent; it replays there
                latest = max(leftovers, key=lambda i: i.created_at)
                self.effects.navigate(latest.return_path, state={"pendingIntent": latest.kind.value})
            return

        if not self.profile_complete and self.role is not None and self.role != UserRole.ADMIN:
            self.effects.navigate(get_registration_route(self.role))
            self.effects.notify("info", "Please complete your profile to continue")
            return

        dashboard = get_dashboard_route(self.role)
        if dashboard:
            self.effects.navigate(dashboard)
            self.effects.notify("success", f"Welcome to your {self.role.value} dashboard!")
