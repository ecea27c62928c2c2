from app.modules.intents.schemas import ActionKind, PendingIntent
from app.modules.intents.storage import ClientStorage
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from pydantic import ValidationError
import logging

logger = logging.getLogger(__name__)

INTENT_KEY_PREFIX = "pending_intent:"


def _intent_key(kind: ActionKind) -> str:
    return f"{INTENT_KEY_PREFIX}{ActionKind(kind).value}"


class IntentStore:
    """
    At most one pending intent per action kind for one client context.

    Storage failures never reach the caller: reads return None and writes are
    dropped, so a gated action still redirects but cannot resume afterwards.
    """

    def __init__(self, storage: ClientStorage, client_id: str, ttl_hours: int = 0):
        self.storage = storage
        self.client_id = client_id
        self.ttl = timedelta(hours=ttl_hours) if ttl_hours and ttl_hours > 0 else None

    def _is_expired(self, intent: PendingIntent) -> bool:
        if self.ttl is None:
            return False
        created_at = intent.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) - created_at > self.ttl

    def set_pending_intent(self, kind: ActionKind, intent: PendingIntent) -> bool:
        """Overwrite the slot for kind. Returns False when storage is unavailable."""
        kind = ActionKind(kind)
        if intent.kind != kind:
            intent = intent.model_copy(update={"kind": kind})
        try:
            self.storage.set_item(self.client_id, _intent_key(kind), intent.model_dump_json())
            logger.debug(f"Stored pending {kind.value} intent for client {self.client_id}: {intent.target_id}")
            return True
        except Exception as e:
            logger.warning(f"Pending intent storage unavailable, dropping {kind.value} intent: {e}")
            return False

    def get_pending_intent(self, kind: ActionKind) -> Optional[PendingIntent]:
        kind = ActionKind(kind)
        try:
            raw = self.storage.get_item(self.client_id, _intent_key(kind))
        except Exception as e:
            logger.warning(f"Pending intent storage unavailable, reading {kind.value} as empty: {e}")
            return None
        if raw is None:
            return None
        try:
            intent = PendingIntent.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Discarding unreadable {kind.value} intent for client {self.client_id}")
            self._remove(kind, raw)
            return None
        if self._is_expired(intent):
            logger.info(f"Discarding stale {kind.value} intent for client {self.client_id} (created {intent.created_at})")
            self._remove(kind, raw)
            return None
        return intent

    def clear_pending_intent(self, kind: ActionKind, expected: Optional[PendingIntent] = None) -> bool:
        """
        Remove the slot for kind. Clearing an empty slot is a no-op.
        With expected, the slot is removed only if it still holds that intent,
        so a newer intent written by another tab survives.
        """
        kind = ActionKind(kind)
        raw_expected = expected.model_dump_json() if expected is not None else None
        return self._remove(kind, raw_expected)

    def _remove(self, kind: ActionKind, expected_raw: Optional[str] = None) -> bool:
        try:
            return self.storage.remove_item(self.client_id, _intent_key(kind), expected=expected_raw)
        except Exception as e:
            logger.warning(f"Pending intent storage unavailable, could not clear {kind.value}: {e}")
            return False

    def pending_intents(self) -> List[PendingIntent]:
        try:
            keys = self.storage.keys(self.client_id, INTENT_KEY_PREFIX)
        except Exception as e:
            logger.warning(f"Pending intent storage unavailable, listing as empty: {e}")
            return []
        intents = []
        for key in keys:
            try:
                kind = ActionKind(key[len(INTENT_KEY_PREFIX):])
            except ValueError:
                continue
            intent = self.get_pending_intent(kind)
            if intent is not None:
                intents.append(intent)
        return intents

    def has_pending_intent(self) -> bool:
        return bool(self.pending_intents())
