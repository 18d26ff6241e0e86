from ringi.observability.tracing import log_event

from .entities import Notification


class LoggingNotificationChannel:
    """Writes notifications to the event log instead of sending them."""

    def send(self, notification: Notification) -> bool:
        log_event(
            "notification.sent",
            channel="log",
            kind=notification.kind.value,
            to=notification.to,
            cc=list(notification.cc),
            subject=notification.subject,
            body=notification.body,
        )
        return True
