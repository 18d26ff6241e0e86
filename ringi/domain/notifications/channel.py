from typing import Protocol

from .entities import Notification


class NotificationChannel(Protocol):
    def send(self, notification: Notification) -> bool:
        """Deliver ``notification``; return False on failure instead of raising."""
        ...
