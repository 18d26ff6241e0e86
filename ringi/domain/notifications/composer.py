"""Plain-text e-mails for each workflow transition.

Recipient policy:
- submitted / updated / withdrawn: to the approver, cc the applicant
- approved / rejected: to the applicant, cc the approver
"""

from __future__ import annotations

from ringi.domain.approval.entities import ApprovalRequestEntity, ApprovalStatus

from .entities import Notification, NotificationKind

_SEPARATOR = "-" * 35

_SUBJECTS = {
    NotificationKind.SUBMITTED: "[Approval Request] New request received: {title}",
    NotificationKind.UPDATED: "[Approval Update] Request updated: {title}",
    NotificationKind.APPROVED: "[Approval Approved] {title}",
    NotificationKind.REJECTED: "[Approval Rejected] {title}",
    NotificationKind.WITHDRAWN: "[Approval Withdrawn] {title} was withdrawn",
}

_STATUS_LABELS = {
    NotificationKind.UPDATED: "pending (updated)",
}


class NotificationComposer:
    def __init__(self, *, base_url: str | None = None) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None

    def link_for(self, request_id: str) -> str | None:
        if not self._base_url:
            return None
        return f"{self._base_url}?id={request_id}"

    def body(self, kind: NotificationKind, request: ApprovalRequestEntity) -> str:
        status = _STATUS_LABELS.get(kind, request.status.value)
        lines = [
            "The status of an approval request has been updated.",
            "",
            _SEPARATOR,
            "[Request details]",
            f"ID: {request.id}",
            f"Title: {request.title}",
            f"Applicant: {request.applicant}",
            f"Approver: {request.approver or '(not specified)'}",
            f"Current status: {status}",
        ]
        if request.status is ApprovalStatus.APPROVED and request.approver_comment:
            lines.append(f"Approver comment: {request.approver_comment}")
        if request.status is ApprovalStatus.REJECTED and request.rejection_reason:
            lines.append(f"Rejection reason: {request.rejection_reason}")
        link = self.link_for(request.id)
        if link:
            lines.append(f"Link: {link}")
        lines.append(_SEPARATOR)
        return "\n".join(lines)

    def compose(self, kind: NotificationKind, request: ApprovalRequestEntity) -> Notification:
        if kind in (NotificationKind.APPROVED, NotificationKind.REJECTED):
            to, cc = request.applicant, request.approver
        else:
            to, cc = request.approver, request.applicant
        return Notification(
            kind=kind,
            to=to,
            cc=(cc,) if cc and cc != to else (),
            subject=_SUBJECTS[kind].format(title=request.title),
            body=self.body(kind, request),
        )
