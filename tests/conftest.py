"""Shared pytest fixtures for the employee API test suite.

Guidelines
----------
* No network access in any test: upstream is faked with ``httpx.MockTransport``
  or a ``MagicMock`` client.
* Retry sleeps are captured, never slept.
"""

from __future__ import annotations

import uuid
from typing import Any, Callable

import pytest

from employee_api.schemas.employee import Employee, EnvelopeStatus


@pytest.fixture()
def employee_payload() -> Callable[..., dict[str, Any]]:
    """Factory for a raw employee dict in the upstream wire shape."""

    def _make(
        name: str = "Employee X",
        salary: int = 75000,
        age: int = 30,
        title: str = "Developer",
        email: str | None = "x@company.com",
        employee_id: str | None = None,
    ) -> dict[str, Any]:
        return {
            "id": employee_id or str(uuid.uuid4()),
            "employee_name": name,
            "employee_salary": salary,
            "employee_age": age,
            "employee_title": title,
            "employee_email": email,
        }

    return _make


@pytest.fixture()
def make_employee(employee_payload) -> Callable[..., Employee]:
    def _make(**kwargs: Any) -> Employee:
        return Employee.model_validate(employee_payload(**kwargs))

    return _make


@pytest.fixture()
def envelope() -> Callable[..., dict[str, Any]]:
    """Factory for an upstream envelope body."""

    def _make(data: Any = None, *, error: str | None = None) -> dict[str, Any]:
        status = EnvelopeStatus.ERROR if error else EnvelopeStatus.HANDLED
        body: dict[str, Any] = {"data": data, "status": status.value}
        if error:
            body["error"] = error
        return body

    return _make
