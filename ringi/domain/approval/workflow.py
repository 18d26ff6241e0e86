"""Approval workflow: creation, edits, listing and the status state machine.

    pending --approve--> approved
    pending --reject---> rejected
    pending --withdraw-> withdrawn

Every read-modify-write against the request table happens inside one
exclusive section: the row is scanned, checked and written before the lock is
released, so no check can pass against a snapshot that a concurrent caller
has already changed. Notifications go out after the lock is released.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable

from ringi.core.errors import (
    Forbidden,
    InvalidState,
    NotFound,
    RequestValidationError,
    StoreUnavailable,
)
from ringi.domain.locking import ExclusiveSection
from ringi.domain.notifications import (
    NotificationChannel,
    NotificationComposer,
    NotificationKind,
)
from ringi.observability.tracing import log_event

from .entities import (
    DECISION_STATUSES,
    ApprovalRequestEntity,
    ApprovalStatus,
    PageMeta,
    PageResult,
)
from .forms import ApprovalForm, validate_form
from .ids import IdGenerator
from .layout import ColumnLayout
from .request_table import RequestTable

_MAX_ID_ATTEMPTS = 5

_DECISION_KINDS = {
    ApprovalStatus.APPROVED: NotificationKind.APPROVED,
    ApprovalStatus.REJECTED: NotificationKind.REJECTED,
}


def _same_user(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


class ApprovalWorkflow:
    """Coordinates authorization, state transitions and notifications."""

    def __init__(
        self,
        *,
        table: RequestTable,
        section: ExclusiveSection,
        channel: NotificationChannel,
        composer: NotificationComposer | None = None,
        id_generator: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
        tz: tzinfo = timezone.utc,
        timestamp_format: str = "%Y/%m/%d %H:%M:%S",
        allow_self_approval: bool = False,
        max_page_size: int = 100,
    ) -> None:
        self._table = table
        self._section = section
        self._channel = channel
        self._composer = composer or NotificationComposer()
        self._new_id = id_generator or IdGenerator()
        self._tz = tz
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._timestamp_format = timestamp_format
        self._allow_self_approval = allow_self_approval
        self._max_page_size = max_page_size

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _identity(requester: str | None) -> str:
        email = (requester or "").strip().lower()
        if not email:
            raise Forbidden("An authenticated user is required.")
        return email

    def _now(self) -> str:
        return self._clock().strftime(self._timestamp_format)

    def _sort_timestamp(self, value: str) -> float:
        try:
            parsed = datetime.strptime(value, self._timestamp_format)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return float("-inf")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self._tz)
        return parsed.timestamp()

    def _newest_first(self, records: list[ApprovalRequestEntity]) -> list[ApprovalRequestEntity]:
        return sorted(
            records,
            key=lambda r: (self._sort_timestamp(r.created_at), r.id),
            reverse=True,
        )

    def _check_self_approval(self, applicant: str, approver: str) -> None:
        if not self._allow_self_approval and _same_user(applicant, approver):
            raise RequestValidationError("The approver must be someone other than the applicant.")

    def _records(self, layout: ColumnLayout) -> list[ApprovalRequestEntity]:
        records = []
        for position, row in enumerate(self._table.scan()):
            try:
                records.append(layout.to_entity(row))
            except StoreUnavailable as exc:
                log_event(
                    "store.bad_row",
                    level=logging.WARNING,
                    position=position,
                    id=str(layout.cell(row, "id") or ""),
                    error=str(exc),
                )
        return records

    def _locate(
        self,
        layout: ColumnLayout,
        request_id: str,
    ) -> tuple[int, list[Any], ApprovalRequestEntity]:
        for position, row in enumerate(self._table.scan()):
            if str(layout.cell(row, "id")) == request_id:
                return position, row, layout.to_entity(row)
        raise NotFound(request_id)

    def _unique_id(self, layout: ColumnLayout) -> str:
        existing = {str(layout.cell(row, "id")) for row in self._table.scan()}
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = self._new_id()
            if candidate not in existing:
                return candidate
        raise RuntimeError(f"Could not generate an unused id after {_MAX_ID_ATTEMPTS} attempts")

    def _notify(self, kind: NotificationKind, record: ApprovalRequestEntity) -> None:
        notification = self._composer.compose(kind, record)
        try:
            self._channel.send(notification)
        except Exception as exc:  # noqa: BLE001 - delivery never undoes a committed transition
            log_event(
                "notification.failed",
                level=logging.WARNING,
                kind=kind.value,
                id=record.id,
                to=notification.to,
                error=str(exc),
            )

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def create(self, requester: str, form: ApprovalForm | dict[str, Any]) -> ApprovalRequestEntity:
        """Submit a new request on behalf of ``requester``.

        Returns:
            The stored record, status ``pending``.

        Raises:
            RequestValidationError: Missing title, malformed approver, negative amount,
                or self-approval while it is disabled.
            LockTimeout: The table lock was not acquired in time.
        """
        applicant = self._identity(requester)
        form = validate_form(form)
        self._check_self_approval(applicant, form.approver)

        def action() -> ApprovalRequestEntity:
            layout = self._table.layout
            record = ApprovalRequestEntity(
                id=self._unique_id(layout),
                title=form.title,
                applicant=applicant,
                approver=form.approver,
                status=ApprovalStatus.PENDING,
                amount=form.amount,
                description=form.description,
                benefits=form.benefits,
                avoidable_risks=form.avoidable_risks,
                created_at=self._now(),
            )
            self._table.append(layout.to_row(record))
            return record

        record = self._section.with_exclusive(action)
        log_event("approval.created", id=record.id, actor=applicant, approver=record.approver)
        self._notify(NotificationKind.SUBMITTED, record)
        return record

    def edit(
        self,
        requester: str,
        request_id: str,
        form: ApprovalForm | dict[str, Any],
    ) -> ApprovalRequestEntity:
        """Overwrite the mutable fields of a pending request owned by ``requester``."""
        actor = self._identity(requester)
        form = validate_form(form)

        def action() -> ApprovalRequestEntity:
            layout = self._table.layout
            position, row, current = self._locate(layout, request_id)
            if not _same_user(current.applicant, actor):
                raise Forbidden("Only the applicant can edit this request.")
            if current.status is not ApprovalStatus.PENDING:
                raise InvalidState(
                    f"Request '{request_id}' is {current.status.value} and can no longer be edited."
                )
            self._check_self_approval(current.applicant, form.approver)
            updated = current.with_changes(
                title=form.title,
                approver=form.approver,
                amount=form.amount,
                description=form.description,
                benefits=form.benefits,
                avoidable_risks=form.avoidable_risks,
            )
            self._table.update(position, layout.to_row(updated, base=row))
            return updated

        record = self._section.with_exclusive(action)
        log_event("approval.updated", id=record.id, actor=actor, approver=record.approver)
        self._notify(NotificationKind.UPDATED, record)
        return record

    def get(self, requester: str, request_id: str) -> ApprovalRequestEntity:
        actor = self._identity(requester)

        def action() -> ApprovalRequestEntity:
            _, _, record = self._locate(self._table.layout, request_id)
            return record

        record = self._section.with_exclusive(action)
        if record.status is ApprovalStatus.DELETED:
            raise NotFound(request_id)
        if not (_same_user(record.applicant, actor) or _same_user(record.approver, actor)):
            raise Forbidden("You are not a party to this request.")
        return record

    def list_requests(self, requester: str, limit: int = 10, offset: int = 0) -> PageResult:
        """Requests where ``requester`` is applicant or approver, newest first.

        ``meta.total`` counts the whole filtered set, independent of paging.
        """
        actor = self._identity(requester)
        if limit < 1:
            raise RequestValidationError("limit must be at least 1.")
        if offset < 0:
            raise RequestValidationError("offset must not be negative.")
        limit = min(limit, self._max_page_size)

        records = self._section.with_exclusive(lambda: self._records(self._table.layout))
        visible = [
            r
            for r in records
            if r.status is not ApprovalStatus.DELETED
            and (_same_user(r.applicant, actor) or _same_user(r.approver, actor))
        ]
        ordered = self._newest_first(visible)
        total = len(ordered)

        return PageResult(
            data=ordered[offset:offset + limit],
            meta=PageMeta(
                total=total,
                limit=limit,
                offset=offset,
                has_next=(offset + limit) < total,
                has_previous=offset > 0,
            ),
        )

    def approvers(self, requester: str, limit: int = 100) -> list[str]:
        """Distinct approvers of the caller's own requests, most recent first."""
        actor = self._identity(requester)
        if limit < 1:
            raise RequestValidationError("limit must be at least 1.")

        records = self._section.with_exclusive(lambda: self._records(self._table.layout))
        own = [
            r
            for r in records
            if r.status is not ApprovalStatus.DELETED and _same_user(r.applicant, actor) and r.approver
        ]
        seen: list[str] = []
        for record in self._newest_first(own):
            approver = record.approver.lower()
            if approver not in seen:
                seen.append(approver)
            if len(seen) >= limit:
                break
        return seen

    def update_status(
        self,
        requester: str,
        request_id: str,
        new_status: ApprovalStatus | str,
        reason: str | None = None,
        comment: str | None = None,
    ) -> ApprovalRequestEntity:
        """Record the approver's decision on a pending request.

        Approval stores ``comment`` and clears the rejection reason; rejection
        stores ``reason`` and clears the comment. Both stamp ``approved_at``.
        """
        actor = self._identity(requester)
        try:
            status = ApprovalStatus(new_status)
        except ValueError as exc:
            raise RequestValidationError(f"Unknown status '{new_status}'.") from exc
        if status not in DECISION_STATUSES:
            raise RequestValidationError("Status must be either 'approved' or 'rejected'.")

        def action() -> ApprovalRequestEntity:
            layout = self._table.layout
            position, row, current = self._locate(layout, request_id)
            if not _same_user(current.approver, actor):
                raise Forbidden("Only the designated approver can approve or reject this request.")
            if not self._allow_self_approval and _same_user(current.applicant, actor):
                raise Forbidden("Applicants cannot decide their own requests.")
            if current.status is not ApprovalStatus.PENDING:
                raise InvalidState(
                    f"Request '{request_id}' is already {current.status.value}."
                )
            if status is ApprovalStatus.APPROVED:
                decision = {"approver_comment": comment or "", "rejection_reason": ""}
            else:
                decision = {"rejection_reason": reason or "", "approver_comment": ""}
            updated = current.with_changes(status=status, approved_at=self._now(), **decision)
            self._table.update(position, layout.to_row(updated, base=row))
            return updated

        record = self._section.with_exclusive(action)
        log_event("approval.decided", id=record.id, actor=actor, status=record.status.value)
        self._notify(_DECISION_KINDS[status], record)
        return record

    def withdraw(self, requester: str, request_id: str) -> ApprovalRequestEntity:
        actor = self._identity(requester)

        def action() -> ApprovalRequestEntity:
            layout = self._table.layout
            position, row, current = self._locate(layout, request_id)
            if not _same_user(current.applicant, actor):
                raise Forbidden("Only the applicant can withdraw this request.")
            if current.status is not ApprovalStatus.PENDING:
                raise InvalidState(
                    f"Request '{request_id}' is {current.status.value} and cannot be withdrawn."
                )
            updated = current.with_changes(status=ApprovalStatus.WITHDRAWN)
            self._table.update(position, layout.to_row(updated, base=row))
            return updated

        record = self._section.with_exclusive(action)
        log_event("approval.withdrawn", id=record.id, actor=actor)
        self._notify(NotificationKind.WITHDRAWN, record)
        return record
