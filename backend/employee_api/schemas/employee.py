from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union
from uuid import UUID

from pydantic import Field, field_validator

from employee_api.schemas.common import APIModel, UpstreamModel, _strip_or_none


MIN_AGE = 16
MAX_AGE = 75

T = TypeVar("T")


class Employee(UpstreamModel):
    """
    Employee as returned by the upstream service (wire names kept as-is).

    Parsed leniently: one incomplete record must not fail a whole list.
    Input bounds live on CreateEmployeeInput.
    """

    id: UUID
    employee_name: str | None = None
    employee_salary: int | None = None
    employee_age: int | None = None
    employee_title: str | None = None
    employee_email: str | None = None


class CreateEmployeeInput(APIModel):
    name: str = Field(min_length=1, max_length=256)
    salary: int = Field(gt=0)
    age: int = Field(ge=MIN_AGE, le=MAX_AGE)
    title: str = Field(min_length=1, max_length=256)
    email: str | None = Field(default=None, max_length=320)

    _strip_all = field_validator("name", "title", "email", mode="before")(_strip_or_none)


class DeleteEmployeeInput(APIModel):
    name: str


class EnvelopeStatus(str, Enum):
    HANDLED = "Successfully processed request."
    ERROR = "Failed to process request."


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: str


Result = Union[Ok[T], Err]


class Envelope(UpstreamModel, Generic[T]):
    """
    Upstream's uniform response wrapper: {data, status, error}.

    `status` is free text upstream; anything other than the known error text
    (or the bare enum name) is treated as handled.
    """

    data: T | None = None
    status: str | None = None
    error: str | None = None

    @property
    def status_kind(self) -> EnvelopeStatus:
        s = (self.status or "").strip()
        if s in (EnvelopeStatus.ERROR.value, EnvelopeStatus.ERROR.name):
            return EnvelopeStatus.ERROR
        return EnvelopeStatus.HANDLED

    def to_result(self) -> Result[T | None]:
        if self.error or self.status_kind is EnvelopeStatus.ERROR:
            return Err(self.error or "Upstream failed to process request")
        return Ok(self.data)
