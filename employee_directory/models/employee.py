"""Employee models shared by the store client, the cache and the HTTP surface.

Field names are snake_case in Python and camelCase on the wire, matching the
employee API (``fullName``, ``dateOfJoining``...).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Provenance = Literal["remote", "local"]

EDITABLE_FIELDS: tuple[str, ...] = (
    "full_name",
    "job_title",
    "department",
    "date_of_joining",
    "profile_picture",
)


def _check_joining_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as e:
        raise ValueError("dateOfJoining must be a YYYY-MM-DD date") from e
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Employee(_CamelModel):
    """An employee record as returned by the API."""

    id: int
    full_name: str
    job_title: str
    department: str
    date_of_joining: str
    profile_picture: str | None = None

    @field_validator("profile_picture")
    @classmethod
    def _blank_picture_is_none(cls, value: str | None) -> str | None:
        return value or None


class EmployeeCreate(_CamelModel):
    """Payload for a new employee; the id is assigned on creation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    full_name: str = Field(..., min_length=1)
    job_title: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    date_of_joining: str
    profile_picture: str | None = None

    @field_validator("date_of_joining")
    @classmethod
    def _valid_date(cls, value: str) -> str:
        return _check_joining_date(value)

    @field_validator("profile_picture")
    @classmethod
    def _blank_picture_is_none(cls, value: str | None) -> str | None:
        return value or None


class EmployeeUpdate(_CamelModel):
    """Partial changes; only the fields that were set are sent and merged."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    full_name: str | None = Field(default=None, min_length=1)
    job_title: str | None = Field(default=None, min_length=1)
    department: str | None = Field(default=None, min_length=1)
    date_of_joining: str | None = None
    profile_picture: str | None = None

    @field_validator("full_name", "job_title", "department", "date_of_joining", mode="before")
    @classmethod
    def _not_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value

    @field_validator("date_of_joining")
    @classmethod
    def _valid_date(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_joining_date(value)

    def changes(self) -> dict[str, object]:
        """Wire-format dict of the fields the caller actually set."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class CachedEmployee(Employee):
    """A cache entry: the record plus where it last came from."""

    source: Provenance = "remote"
    cached_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_employee(cls, employee: Employee, source: Provenance) -> CachedEmployee:
        return cls(**employee.model_dump(), source=source)

    def to_employee(self) -> Employee:
        return Employee(**self.model_dump(exclude={"source", "cached_at"}))
