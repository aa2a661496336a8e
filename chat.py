# chat.py
import logging
import threading
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

Callback = Callable[[Dict], None]


class ChatHub:
    """
    Live delivery channel keyed by recipient id.

    Delivery is at-most-once and only while the recipient has a live session;
    nothing is queued for offline users (the message store is the record).
    """

    def __init__(self):
        self._sessions: Dict[str, Callback] = {}
        self._lock = threading.Lock()

    def connect(self, user_id: str, callback: Callback) -> None:
        with self._lock:
            # newest session replaces any older one
            self._sessions[user_id] = callback

    def disconnect(self, user_id: str, callback: Optional[Callback] = None) -> None:
        with self._lock:
            current = self._sessions.get(user_id)
            if current is None:
                return
            if callback is None or current is callback:
                del self._sessions[user_id]

    def is_online(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._sessions

    def deliver(self, user_id: str, message: Dict) -> bool:
        with self._lock:
            callback = self._sessions.get(user_id)
        if callback is None:
            return False

        try:
            callback(message)
        except Exception:
            logger.warning("Dropping chat session for %s after delivery failure", user_id, exc_info=True)
            self.disconnect(user_id, callback)
            return False
        return True
