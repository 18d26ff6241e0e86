"""Mapping between positional table rows and ``ApprovalRequestEntity``.

The backing table is a grid of cells. Which column holds which field is
configuration: either a fixed offset list or the sheet's own header row.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Sequence

from ringi.core.errors import StoreUnavailable

from .entities import ApprovalRequestEntity, ApprovalStatus

FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "applicant",
    "approver",
    "status",
    "amount",
    "description",
    "benefits",
    "avoidable_risks",
    "created_at",
    "approved_at",
    "rejection_reason",
    "approver_comment",
)

REQUIRED_FIELDS = frozenset({"id", "title", "applicant", "approver", "status"})

# Header labels written by ``header_row``.
HEADER_LABELS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "applicant": "applicant",
    "approver": "approver",
    "status": "status",
    "amount": "amount",
    "description": "description",
    "benefits": "benefits",
    "avoidable_risks": "avoidableRisks",
    "created_at": "createdAt",
    "approved_at": "approvedAt",
    "rejection_reason": "rejectionReason",
    "approver_comment": "approverComment",
}


def _normalize_label(label: Any) -> str:
    return re.sub(r"[^a-z0-9]", "", str(label).lower())


_LABEL_TO_FIELD = {_normalize_label(f): f for f in FIELDS}


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _cell_amount(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class ColumnLayout:
    """Field name to zero-based column offset."""

    def __init__(self, offsets: dict[str, int], width: int | None = None) -> None:
        unknown = set(offsets) - set(FIELDS)
        if unknown:
            raise StoreUnavailable(f"Unknown columns in layout: {', '.join(sorted(unknown))}")
        missing = REQUIRED_FIELDS - set(offsets)
        if missing:
            raise StoreUnavailable(
                f"Request table is missing required columns: {', '.join(sorted(missing))}"
            )
        self._offsets = dict(offsets)
        self._width = max(width or 0, max(offsets.values()) + 1)

    @classmethod
    def default(cls) -> "ColumnLayout":
        return cls.from_order(FIELDS)

    @classmethod
    def from_order(cls, order: Iterable[str]) -> "ColumnLayout":
        offsets: dict[str, int] = {}
        for index, name in enumerate(order):
            field = _LABEL_TO_FIELD.get(_normalize_label(name))
            if field is None:
                raise StoreUnavailable(f"Unknown column '{name}' in column order")
            offsets[field] = index
        return cls(offsets)

    @classmethod
    def from_header(cls, header: Sequence[Any]) -> "ColumnLayout":
        offsets: dict[str, int] = {}
        for index, label in enumerate(header):
            field = _LABEL_TO_FIELD.get(_normalize_label(label))
            if field is not None and field not in offsets:
                offsets[field] = index
        return cls(offsets, width=len(header))

    @property
    def width(self) -> int:
        return self._width

    def offset(self, field: str) -> int | None:
        return self._offsets.get(field)

    def header_row(self) -> list[str]:
        row = [""] * self._width
        for field, index in self._offsets.items():
            row[index] = HEADER_LABELS[field]
        return row

    def cell(self, row: Sequence[Any], field: str) -> Any:
        index = self._offsets.get(field)
        if index is None or index >= len(row):
            return None
        return row[index]

    def to_entity(self, row: Sequence[Any]) -> ApprovalRequestEntity:
        values = {f: self.cell(row, f) for f in FIELDS}
        status = _cell_text(values["status"]).strip().lower() or ApprovalStatus.PENDING.value
        try:
            parsed_status = ApprovalStatus(status)
        except ValueError as exc:
            raise StoreUnavailable(
                f"Row '{values['id']}' has an unknown status '{status}'"
            ) from exc
        return ApprovalRequestEntity(
            id=_cell_text(values["id"]),
            title=_cell_text(values["title"]),
            applicant=_cell_text(values["applicant"]),
            approver=_cell_text(values["approver"]),
            status=parsed_status,
            amount=_cell_amount(values["amount"]),
            description=_cell_text(values["description"]),
            benefits=_cell_text(values["benefits"]),
            avoidable_risks=_cell_text(values["avoidable_risks"]),
            created_at=_cell_text(values["created_at"]),
            approved_at=_cell_text(values["approved_at"]),
            rejection_reason=_cell_text(values["rejection_reason"]),
            approver_comment=_cell_text(values["approver_comment"]),
        )

    def to_row(
        self,
        entity: ApprovalRequestEntity,
        base: Sequence[Any] | None = None,
    ) -> list[Any]:
        """Render ``entity`` as cells, keeping any unmapped cells of ``base``."""
        row: list[Any] = list(base or [])
        if len(row) < self._width:
            row.extend([""] * (self._width - len(row)))
        for field, index in self._offsets.items():
            value = getattr(entity, field)
            if field == "status":
                value = value.value
            elif field == "amount":
                value = "" if value is None else value
            row[index] = value
        return row
