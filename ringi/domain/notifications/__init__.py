"""This module composes and delivers e-mail notifications for workflow transitions."""
from .entities import Notification, NotificationKind
from .composer import NotificationComposer
from .channel import NotificationChannel
from .logging_channel import LoggingNotificationChannel
from .http_email_channel import HttpEmailChannel
