import threading
import time
import uuid
import logging
from typing import Any, Callable, Dict, Optional

from supabase import Client

from app.modules.engagement.models import ENGAGEMENT_TABLE
from app.modules.intents.storage import ClientStorage
from app.modules.session.schemas import Session

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "session_id"


class EngagementRecorder:
    """Best-effort telemetry. track() never raises; a failed write only gets logged."""

    def __init__(self, supabase: Client, storage: ClientStorage, client_id: str, enabled: bool = True):
        self.supabase = supabase
        self.storage = storage
        self.client_id = client_id
        self.enabled = enabled
        self._fallback_session_id: Optional[str] = None

    def session_correlation_id(self) -> str:
        """Created once per client context and reused for every event."""
        try:
            session_id = self.storage.get_item(self.client_id, SESSION_ID_KEY)
            if session_id:
                return session_id
            session_id = str(uuid.uuid4())
            self.storage.set_item(self.client_id, SESSION_ID_KEY, session_id)
            return session_id
        except Exception as e:
            logger.warning(f"Client storage unavailable for session id, using an ephemeral one: {e}")
            if self._fallback_session_id is None:
                self._fallback_session_id = str(uuid.uuid4())
            return self._fallback_session_id

    def track(
        self,
        action_type: str,
        additional_data: Optional[Dict[str, Any]] = None,
        feature_name: Optional[str] = None,
        session: Optional[Session] = None,
        profile_complete: bool = False,
    ) -> bool:
        if not self.enabled:
            logger.debug(f"[Tracking disabled] {action_type} {additional_data or {}}")
            return False
        try:
            enhanced_data = {
                **(additional_data or {}),
                "user_role": session.role.value if session and session.role else "anonymous",
                "user_profile_complete": bool(profile_complete),
            }
            row = {
                "user_id": session.user_id if session else None,
                "action_type": action_type,
                "session_id": self.session_correlation_id(),
                "additional_data": enhanced_data,
            }
            if feature_name:
                row["feature_name"] = feature_name
            self.supabase.table(ENGAGEMENT_TABLE).insert(row).execute()
            return True
        except Exception as e:
            logger.error(f"Error tracking engagement {action_type}: {e}")
            return False


class ActionThrottle:
    """
    Advisory cooldown per key (client + element). Suppresses double clicks and
    double submits from the same element; different elements never block each other.
    """

    def __init__(self, cooldown_seconds: float = 1.0, clock: Callable[[], float] = time.monotonic):
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._last_fired: Dict[str, float] = {}

    def try_acquire(self, key: str) -> bool:
        now = self.clock()
        with self._lock:
            last = self._last_fired.get(key)
            if last is not None and now - last < self.cooldown_seconds:
                return False
            self._last_fired[key] = now
            if len(self._last_fired) > 10000:
                self._prune(now)
            return True

    def _prune(self, now: float) -> None:
        expired = [k for k, t in self._last_fired.items() if now - t >= self.cooldown_seconds]
        for k in expired:
            del self._last_fired[k]

    def reset(self) -> None:
        with self._lock:
            self._last_fired.clear()
