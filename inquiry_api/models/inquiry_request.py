from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from inquiry_api.core.exceptions import ValidationError

REQUIRED_FIELDS = ("fullName", "companyName", "email", "phone")


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


class Inquiry(BaseModel):
    full_name: str = Field(..., alias="fullName")
    company_name: str = Field(..., alias="companyName")
    email: str
    phone: str
    question: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def from_payload(cls, payload: Any) -> "Inquiry":
        """Build an inquiry from a decoded JSON body, trimming every value.

        Anything that is not a JSON object counts as an empty submission.
        Raises :class:`ValidationError` when a required field is missing,
        not a string, or blank after trimming.
        """
        if not isinstance(payload, dict):
            payload = {}

        values = {name: _clean(payload.get(name)) for name in REQUIRED_FIELDS}
        if not all(values.values()):
            raise ValidationError()

        return cls(**values, question=_clean(payload.get("question")))
