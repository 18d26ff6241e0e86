from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ringi.domain.approval.entities import ApprovalRequestEntity, PageResult

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApprovalRequestOut(CamelModel):
    id: str
    title: str
    applicant: str
    approver: str
    status: str
    amount: Optional[float] = None
    description: str = ""
    benefits: str = ""
    avoidable_risks: str = ""
    created_at: str = ""
    approved_at: str = ""
    rejection_reason: str = ""
    approver_comment: str = ""

    @classmethod
    def from_entity(cls, entity: ApprovalRequestEntity) -> "ApprovalRequestOut":
        return cls(
            id=entity.id,
            title=entity.title,
            applicant=entity.applicant,
            approver=entity.approver,
            status=entity.status.value,
            amount=entity.amount,
            description=entity.description,
            benefits=entity.benefits,
            avoidable_risks=entity.avoidable_risks,
            created_at=entity.created_at,
            approved_at=entity.approved_at,
            rejection_reason=entity.rejection_reason,
            approver_comment=entity.approver_comment,
        )


class StatusUpdateIn(CamelModel):
    status: Literal["approved", "rejected"]
    reason: Optional[str] = Field(default=None, description="Rejection reason")
    comment: Optional[str] = Field(default=None, description="Approver comment")


class PaginationMeta(CamelModel):
    total: int
    limit: int
    offset: int
    has_next: bool
    has_previous: bool


class ApprovalPage(CamelModel):
    data: List[ApprovalRequestOut]
    total: int
    meta: PaginationMeta

    @classmethod
    def from_page(cls, page: PageResult) -> "ApprovalPage":
        return cls(
            data=[ApprovalRequestOut.from_entity(r) for r in page.data],
            total=page.meta.total,
            meta=PaginationMeta(
                total=page.meta.total,
                limit=page.meta.limit,
                offset=page.meta.offset,
                has_next=page.meta.has_next,
                has_previous=page.meta.has_previous,
            ),
        )


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: str
    code: str
