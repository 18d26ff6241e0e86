from dataclasses import dataclass, field
from enum import Enum


class NotificationKind(str, Enum):
    SUBMITTED = "submitted"
    UPDATED = "updated"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    to: str
    subject: str
    body: str
    cc: tuple[str, ...] = field(default_factory=tuple)
