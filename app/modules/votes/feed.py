"""Thread-safe in-process change feed: feature_id -> subscribers notified after vote writes."""
import threading
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

VoteListener = Callable[[str, str], None]  # (feature_id, change) where change is "insert" | "delete"


class VoteFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: Dict[str, List[VoteListener]] = {}

    def subscribe(self, feature_id: str, listener: VoteListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.setdefault(feature_id, []).append(listener)
            logger.debug(f"Subscribed to vote changes for feature {feature_id}")

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(feature_id, [])
                if listener in listeners:
                    listeners.remove(listener)
                if not listeners:
                    self._listeners.pop(feature_id, None)

        return unsubscribe

    def publish(self, feature_id: str, change: str) -> None:
        with self._lock:
            listeners = list(self._listeners.get(feature_id, []))
        for listener in listeners:
            try:
                listener(feature_id, change)
            except Exception as e:
                logger.warning(f"Vote feed listener failed for feature {feature_id}: {e}")

    def subscriber_count(self, feature_id: str) -> int:
        with self._lock:
            return len(self._listeners.get(feature_id, []))


vote_feed = VoteFeed()
