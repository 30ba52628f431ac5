from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

DATE_FORMAT = "%Y-%m-%d"
MIN_DATE = date(1, 1, 2)
MAX_DATE = date(9999, 12, 31)


def validate_date(value: str) -> str:
    """Check a YYYY-MM-DD string and return it stripped."""
    value = value.strip()
    if not value:
        raise ValueError("Date string is empty")
    try:
        parsed = datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise ValueError(f"Invalid date format, must be YYYY-MM-DD: {e}") from e
    if parsed < MIN_DATE or parsed > MAX_DATE:
        raise ValueError("Date is out of range, must be between 0001-01-02 and 9999-12-31")
    return value


class Record(BaseModel):
    """A sick-leave record as stored by the registry service."""

    id: str = Field(..., min_length=1)
    full_name: Optional[str] = Field(None, alias="fullName", max_length=50)
    patient_id: str = Field(
        ..., alias="patientId", pattern=r"^\d{1,10}$", description="Only digits, max length 10"
    )
    employer: str = Field(..., max_length=50)
    reason: str

    # Dates stay string-encoded in the document
    issued: str
    valid_from: str = Field(..., alias="validFrom")
    valid_until: str = Field(..., alias="validUntil")
    check_up: Optional[str] = Field(None, alias="checkUp")
    check_up_done: bool = Field(False, alias="checkUpDone")

    model_config = {"populate_by_name": True}

    @field_validator("issued", "valid_from", "valid_until", "check_up")
    @classmethod
    def _check_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return validate_date(value)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


SAMPLE_RECORD = Record(
    id="e0ec1244-4ae4-419c-87aa-a1ae856f5cd6",
    full_name="Matúš Bojko",
    patient_id="1123134223",
    employer="FIIT STU",
    reason="choroba",
    issued="2024-01-31",
    valid_from="2024-01-31",
    valid_until="2024-01-31",
    check_up="2024-01-31",
    check_up_done=False,
)
