# ============================================================
# Business/domain entities
# ============================================================
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    # Legacy soft-delete marker. Never produced, only filtered out.
    DELETED = "deleted"


DECISION_STATUSES = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})


@dataclass(frozen=True)
class PageMeta:
    total: int
    limit: int
    offset: int
    has_next: bool
    has_previous: bool


@dataclass(frozen=True)
class PageResult:
    data: list["ApprovalRequestEntity"]
    meta: PageMeta

    @property
    def total(self) -> int:
        return self.meta.total


@dataclass(frozen=True)
class ApprovalRequestEntity:
    id: str
    title: str
    applicant: str
    approver: str
    status: ApprovalStatus = ApprovalStatus.PENDING
    amount: Optional[float] = None
    description: str = ""
    benefits: str = ""
    avoidable_risks: str = ""
    created_at: str = ""
    approved_at: str = ""
    rejection_reason: str = ""
    approver_comment: str = ""

    def with_changes(self, **changes) -> "ApprovalRequestEntity":
        return replace(self, **changes)
