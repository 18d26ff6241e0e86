"""Input validation for the approval form.

The same form is used for creation and edits; the workflow decides which of
its fields are written.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ringi.core.errors import RequestValidationError


class ApprovalForm(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    title: str = Field(min_length=1, max_length=200)
    approver: EmailStr
    amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    description: str = ""
    benefits: str = ""
    avoidable_risks: str = ""

    @field_validator("approver")
    @classmethod
    def _normalize_approver(cls, value: str) -> str:
        return value.lower()

    @field_validator("description", "benefits", "avoidable_risks", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"]) or "form"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


def validate_form(payload: ApprovalForm | dict[str, Any]) -> ApprovalForm:
    """Coerce a raw mapping into an ``ApprovalForm``.

    Raises:
        RequestValidationError: With one readable message covering every field error.
    """
    if isinstance(payload, ApprovalForm):
        return payload
    try:
        return ApprovalForm.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(f"Invalid approval form: {_describe(exc)}") from exc
