import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from .services.clients import normalize_phone

_PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")
_DAY_RE = r"^\d{4}-\d{2}-\d{2}$"
_HHMM_RE = r"^\d{2}:\d{2}$"


class ClientPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=100)
    phone: str = Field(..., min_length=1, max_length=32)
    email: EmailStr | None = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str):
        v = normalize_phone(v)
        if not _PHONE_RE.match(v):
            raise ValueError("Invalid phone format")
        return v


class CreateReservationRequest(BaseModel):
    """Guest range and start time are checked by the booking service so that
    every reason is reported together."""

    model_config = ConfigDict(str_strip_whitespace=True)

    start_time: str = Field(..., min_length=1)
    guests: int
    client_id: int | None = None
    client: ClientPayload | None = None
    notes: str | None = Field(None, max_length=500)

    @model_validator(mode="after")
    def one_client_reference(self):
        if self.client_id is None and self.client is None:
            raise ValueError("Either client_id or client is required.")
        if self.client_id is not None and self.client is not None:
            raise ValueError("Provide client_id or client, not both.")
        return self


class AvailabilityQuery(BaseModel):
    datetime: str = Field(..., min_length=10)
    guests: int


class AvailableTablesQuery(BaseModel):
    date: str = Field(..., pattern=_DAY_RE)
    time: str = Field(..., pattern=_HHMM_RE)
    guests: int


class DayListingQuery(BaseModel):
    date: str = Field(..., pattern=_DAY_RE)
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)
