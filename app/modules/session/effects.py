"""Per-client outbox of UI effects (navigation, toasts) that the client performs."""
import threading
from typing import Any, Dict, List, Optional, Tuple

from app.modules.session.schemas import NavigationEffect, Notification


class EffectOutbox:
    def __init__(self):
        self._lock = threading.Lock()
        self._navigation: Optional[NavigationEffect] = None
        self._notifications: List[Notification] = []

    def navigate(self, path: str, state: Optional[Dict[str, Any]] = None, replace: bool = False) -> None:
        """Only the latest navigation survives."""
        with self._lock:
            self._navigation = NavigationEffect(path=path, state=state, replace=replace)

    def notify(self, level: str, message: str) -> None:
        with self._lock:
            self._notifications.append(Notification(level=level, message=message))

    @property
    def navigation(self) -> Optional[NavigationEffect]:
        with self._lock:
            return self._navigation

    @property
    def notifications(self) -> List[Notification]:
        with self._lock:
            return list(self._notifications)

    def drain(self) -> Tuple[Optional[NavigationEffect], List[Notification]]:
        with self._lock:
            navigation, notifications = self._navigation, self._notifications
            self._navigation = None
            self._notifications = []
        return navigation, notifications
