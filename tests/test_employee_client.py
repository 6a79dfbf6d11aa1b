"""Tests for EmployeeClient (services/employee_client.py).

Upstream is an ``httpx.MockTransport``. These tests verify:

* request shape (method, URL, JSON body) per operation
* envelope -> Ok/Err unwrapping
* 404 on get-by-id is "no data", not an error
* 429 is retried; other failures surface immediately as UpstreamFailure
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from employee_api.config import Settings
from employee_api.errors import UpstreamFailure, UpstreamRateLimited
from employee_api.schemas.employee import CreateEmployeeInput, Err, Ok
from employee_api.services.employee_client import EmployeeClient, default_retry_policy, is_rate_limited
from employee_api.services.retry import RetryPolicy, exponential_backoff

BASE_URL = "http://upstream.test/api/v1/employee"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _Recorder:
    """MockTransport handler that replays queued responses and records requests."""

    def __init__(self, *responses: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        nxt = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if callable(nxt):
            return nxt(request)
        # fresh Response per request; the same template may be replayed
        return httpx.Response(nxt.status_code, headers=nxt.headers, content=nxt.content)


def _client(recorder: _Recorder, sleeps: list[float] | None = None, max_attempts: int = 3) -> EmployeeClient:
    policy = RetryPolicy(
        max_attempts=max_attempts,
        backoff=exponential_backoff(1.0, 2.0),
        retry_on=is_rate_limited,
        sleep=(sleeps.append if sleeps is not None else (lambda _: None)),
    )
    return EmployeeClient(BASE_URL, retry_policy=policy, transport=httpx.MockTransport(recorder))


def _json(request: httpx.Request) -> Any:
    return json.loads(request.content.decode("utf-8"))


# ---------------------------------------------------------------------------
# Happy paths
# ---------------------------------------------------------------------------

def test_list_employees_unwraps_envelope(employee_payload, envelope) -> None:
    rows = [employee_payload(name="A"), employee_payload(name="B")]
    rec = _Recorder(httpx.Response(200, json=envelope(rows)))

    with _client(rec) as client:
        result = client.list_employees()

    assert isinstance(result, Ok)
    assert [e.employee_name for e in result.value] == ["A", "B"]
    assert rec.requests[0].method == "GET"
    assert str(rec.requests[0].url) == BASE_URL


def test_list_employees_without_data_is_ok_none(envelope) -> None:
    rec = _Recorder(httpx.Response(200, json=envelope(None)))
    result = _client(rec).list_employees()
    assert result == Ok(None)


def test_get_employee_hits_id_path(employee_payload, envelope) -> None:
    row = employee_payload(name="Employee Z", salary=90000)
    rec = _Recorder(httpx.Response(200, json=envelope(row)))

    result = _client(rec).get_employee(row["id"])

    assert isinstance(result, Ok)
    assert result.value.employee_salary == 90000
    assert str(rec.requests[0].url) == f"{BASE_URL}/{row['id']}"


def test_get_employee_404_is_no_data() -> None:
    rec = _Recorder(httpx.Response(404))
    assert _client(rec).get_employee("6b3a4d1c-1c5f-4c49-9d4c-2f4bba7a0d11") == Ok(None)


def test_create_employee_posts_input_fields(employee_payload, envelope) -> None:
    row = employee_payload(name="New Hire", salary=80000, age=25, title="Engineer", email="n@company.com")
    rec = _Recorder(httpx.Response(200, json=envelope(row)))
    employee_input = CreateEmployeeInput(name="New Hire", salary=80000, age=25, title="Engineer", email="n@company.com")

    result = _client(rec).create_employee(employee_input)

    assert isinstance(result, Ok)
    assert result.value.employee_name == "New Hire"
    req = rec.requests[0]
    assert req.method == "POST"
    assert _json(req) == {"name": "New Hire", "salary": 80000, "age": 25, "title": "Engineer", "email": "n@company.com"}


def test_delete_employee_sends_name_in_body(envelope) -> None:
    rec = _Recorder(httpx.Response(200, json=envelope(True)))

    result = _client(rec).delete_employee("Employee X")

    assert result == Ok(True)
    req = rec.requests[0]
    assert req.method == "DELETE"
    assert str(req.url) == BASE_URL
    assert _json(req) == {"name": "Employee X"}


def test_error_envelope_becomes_err(envelope) -> None:
    rec = _Recorder(httpx.Response(200, json=envelope(error="Employee name already taken")))
    result = _client(rec).list_employees()
    assert result == Err("Employee name already taken")


# ---------------------------------------------------------------------------
# Retry / failure handling
# ---------------------------------------------------------------------------

def test_rate_limit_is_retried_then_succeeds(envelope) -> None:
    sleeps: list[float] = []
    rec = _Recorder(
        httpx.Response(429),
        httpx.Response(429),
        httpx.Response(200, json=envelope([])),
    )

    result = _client(rec, sleeps=sleeps).list_employees()

    assert result == Ok([])
    assert len(rec.requests) == 3
    assert sleeps == [1.0, 2.0]


def test_rate_limit_exhausts_attempts() -> None:
    rec = _Recorder(httpx.Response(429))

    with pytest.raises(UpstreamRateLimited) as exc_info:
        _client(rec, max_attempts=4).list_employees()

    assert exc_info.value.status_code == 429
    assert len(rec.requests) == 4


def test_server_error_is_not_retried() -> None:
    rec = _Recorder(httpx.Response(500, text="boom"))

    with pytest.raises(UpstreamFailure) as exc_info:
        _client(rec).list_employees()

    assert not isinstance(exc_info.value, UpstreamRateLimited)
    assert exc_info.value.status_code == 500
    assert len(rec.requests) == 1


def test_transport_error_is_wrapped() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    rec = _Recorder(_refuse)

    with pytest.raises(UpstreamFailure, match="ConnectError") as exc_info:
        _client(rec).list_employees()

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert len(rec.requests) == 1


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b'{"data": [{"id": "not-a-uuid", "employee_name": "A"}]}',
    ],
)
def test_malformed_body_is_upstream_failure(body: bytes) -> None:
    rec = _Recorder(httpx.Response(200, content=body))
    with pytest.raises(UpstreamFailure, match="malformed"):
        _client(rec).list_employees()


def test_client_from_settings_uses_configured_retry() -> None:
    settings = Settings(employee_server_url=BASE_URL + "/", retry_max_attempts=7, retry_initial_delay_seconds=0.5)
    policy = default_retry_policy(settings)
    assert policy.max_attempts == 7
    assert policy.backoff(1) == 0.5

    client = EmployeeClient.from_settings(settings, transport=httpx.MockTransport(_Recorder(httpx.Response(404))))
    assert client.base_url == BASE_URL
    client.close()


def test_incomplete_records_do_not_fail_the_list(employee_payload, envelope) -> None:
    rows = [
        employee_payload(name="Good"),
        employee_payload(name="Retiree", age=80),
        {**employee_payload(name="Unpaid"), "employee_salary": None},
        {"id": employee_payload()["id"]},
    ]
    rec = _Recorder(httpx.Response(200, json=envelope(rows)))

    result = _client(rec).list_employees()

    assert isinstance(result, Ok)
    assert [e.employee_name for e in result.value] == ["Good", "Retiree", "Unpaid", None]
    assert result.value[1].employee_age == 80
    assert result.value[2].employee_salary is None
