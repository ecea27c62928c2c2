"""Thread-safe registry of client_id -> SessionObserver for the lifetime of the process."""
import threading
import logging
from typing import Callable, Dict, Optional

from app.modules.session.observer import SessionObserver

logger = logging.getLogger(__name__)
_lock = threading.Lock()
_registry: Dict[str, SessionObserver] = {}


def get_or_create(client_id: str, factory: Callable[[], SessionObserver]) -> SessionObserver:
    with _lock:
        observer = _registry.get(client_id)
        if observer is None:
            observer = factory()
            _registry[client_id] = observer
            logger.debug(f"Registered session observer for client {client_id}")
        return observer


def get_observer(client_id: str) -> Optional[SessionObserver]:
    with _lock:
        return _registry.get(client_id)


def unregister(client_id: str) -> None:
    with _lock:
        _registry.pop(client_id, None)
        logger.debug(f"Unregistered session observer for client {client_id}")


def clear() -> None:
    with _lock:
        _registry.clear()
