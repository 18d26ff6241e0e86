from ringi.domain.notifications import Notification


class RecordingNotificationChannel:
    def __init__(self):
        self.sent: list[Notification] = []

    def send(self, notification: Notification) -> bool:
        self.sent.append(notification)
        return True

    @property
    def last(self) -> Notification:
        return self.sent[-1]


class ExplodingNotificationChannel:
    """Channel that breaks its own contract by raising."""

    def send(self, notification: Notification) -> bool:
        raise ConnectionError("SMTP relay is down")
