"""Per-client key/value storage backing pending intents and the session correlation id."""
import threading
import logging
from typing import Dict, Optional, Tuple

from supabase import Client

from app.modules.intents.models import CLIENT_STORAGE_TABLE

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so a prefix such as "pending_intent:" matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class StorageUnavailable(Exception):
    """Raised by a backend when it cannot serve reads or writes."""


class ClientStorage:
    """Key/value store namespaced by client context. Values are strings."""

    def get_item(self, client_id: str, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, client_id: str, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, client_id: str, key: str, expected: Optional[str] = None) -> bool:
        """Remove key. With expected, remove only if the stored value still equals it."""
        raise NotImplementedError

    def keys(self, client_id: str, prefix: str = "") -> list:
        raise NotImplementedError


class MemoryStorage(ClientStorage):
    """Thread-safe process-local storage."""

    def __init__(self):
        self._lock = threading.Lock()
        self._data: Dict[Tuple[str, str], str] = {}

    def get_item(self, client_id: str, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get((client_id, key))

    def set_item(self, client_id: str, key: str, value: str) -> None:
        with self._lock:
            self._data[(client_id, key)] = value

    def remove_item(self, client_id: str, key: str, expected: Optional[str] = None) -> bool:
        with self._lock:
            current = self._data.get((client_id, key))
            if current is None:
                return False
            if expected is not None and current != expected:
                return False
            del self._data[(client_id, key)]
            return True

    def keys(self, client_id: str, prefix: str = "") -> list:
        with self._lock:
            return sorted(k for (cid, k) in self._data if cid == client_id and k.startswith(prefix))

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class SupabaseStorage(ClientStorage):
    """Storage in the client_storage table, survives process restarts."""

    TABLE = CLIENT_STORAGE_TABLE

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_item(self, client_id: str, key: str) -> Optional[str]:
        try:
            result = self.supabase.table(self.TABLE)\
                .select("value")\
                .eq("client_id", client_id)\
                .eq("key", key)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise StorageUnavailable(str(e)) from e
        if not result or not result.data:
            return None
        return result.data.get("value")

    def set_item(self, client_id: str, key: str, value: str) -> None:
        try:
            self.supabase.table(self.TABLE).upsert({
                "client_id": client_id,
                "key": key,
                "value": value,
            }, on_conflict="client_id,key").execute()
        except Exception as e:
            raise StorageUnavailable(str(e)) from e

    def remove_item(self, client_id: str, key: str, expected: Optional[str] = None) -> bool:
        try:
            query = self.supabase.table(self.TABLE)\
                .delete()\
                .eq("client_id", client_id)\
                .eq("key", key)
            if expected is not None:
                query = query.eq("value", expected)
            result = query.execute()
        except Exception as e:
            raise StorageUnavailable(str(e)) from e
        return bool(result.data)

    def keys(self, client_id: str, prefix: str = "") -> list:
        try:
            query = self.supabase.table(self.TABLE)\
                .select("key")\
                .eq("client_id", client_id)
            if prefix:
                query = query.like("key", f"{_escape_like(prefix)}%")
            result = query.execute()
        except Exception as e:
            raise StorageUnavailable(str(e)) from e
        return sorted(row["key"] for row in (result.data or []) if row["key"].startswith(prefix))


_memory_storage = MemoryStorage()


def get_memory_storage() -> MemoryStorage:
    return _memory_storage
