from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ringi.api.core.container import Container, get_container
from ringi.api.identity import get_current_user
from ringi.api.schemas import (
    ApprovalPage,
    ApprovalRequestOut,
    Envelope,
    StatusUpdateIn,
)
from ringi.domain.approval import ApprovalForm

router = APIRouter(prefix="/approvals", tags=["Approvals"])


@router.post(
    "",
    summary="Submit an approval request",
    response_model=Envelope[ApprovalRequestOut],
    status_code=201,
)
def create_approval_request(
    form: ApprovalForm,
    user: str = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    """Create a pending request with the caller as applicant and notify the approver."""
    record = container.workflow.create(user, form)
    return Envelope[ApprovalRequestOut](data=ApprovalRequestOut.from_entity(record))


@router.get(
    "",
    summary="List approval requests",
    description="Returns requests where the caller is applicant or approver, newest first.",
    response_model=Envelope[ApprovalPage],
)
def get_approval_requests(
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    user: str = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    """
    List approval requests visible to the caller.

    Query Parameters:
    - limit: Page size (default: configured page size, capped at the maximum)
    - offset: Pagination offset (default: 0)
    """
    page = container.workflow.list_requests(
        user,
        limit=limit or container.settings.default_page_size,
        offset=offset,
    )
    return Envelope[ApprovalPage](data=ApprovalPage.from_page(page))


@router.get(
    "/approvers",
    summary="Recently used approvers",
    response_model=Envelope[List[str]],
)
def get_approvers(
    limit: Optional[int] = Query(default=None, ge=1),
    user: str = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    """Distinct approver e-mails from the caller's own requests, for autocomplete."""
    approvers = container.workflow.approvers(
        user,
        limit=limit or container.settings.approvers_limit,
    )
    return Envelope[List[str]](data=approvers)


@router.get("/{request_id}", response_model=Envelope[ApprovalRequestOut])
def get_approval_request(
    request_id: str,
    user: str = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    """Get a specific approval request."""
    record = container.workflow.get(user, request_id)
    return Envelope[ApprovalRequestOut](data=ApprovalRequestOut.from_entity(record))


@router.put("/{request_id}", response_model=Envelope[ApprovalRequestOut])
def edit_approval_request(
    request_id: str,
    form: ApprovalForm,
    user: str = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    """Edit a pending request. Applicant only."""
    record = container.workflow.edit(user, request_id, form)
    return Envelope[ApprovalRequestOut](data=ApprovalRequestOut.from_entity(record))


@router.post("/{request_id}/status", response_model=Envelope[ApprovalRequestOut])
def update_approval_status(
    request_id: str,
    payload: StatusUpdateIn,
    user: str = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    """Approve or reject a pending request. Designated approver only."""
    record = container.workflow.update_status(
        user,
        request_id,
        payload.status,
        reason=payload.reason,
        comment=payload.comment,
    )
    return Envelope[ApprovalRequestOut](data=ApprovalRequestOut.from_entity(record))


@router.post("/{request_id}/withdraw", response_model=Envelope[ApprovalRequestOut])
def withdraw_approval_request(
    request_id: str,
    user: str = Depends(get_current_user),
    container: Container = Depends(get_container),
):
    """Withdraw a pending request. Applicant only."""
    record = container.workflow.withdraw(user, request_id)
    return Envelope[ApprovalRequestOut](data=ApprovalRequestOut.from_entity(record))
