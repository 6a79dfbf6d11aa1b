from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from employee_api.config import Settings
from employee_api.errors import UpstreamFailure, UpstreamRateLimited
from employee_api.schemas.employee import CreateEmployeeInput, DeleteEmployeeInput, Employee, Envelope, Ok, Result
from employee_api.services.retry import RetryPolicy, exponential_backoff

logger = logging.getLogger(__name__)

_EmployeeListEnvelope = Envelope[List[Employee]]
_EmployeeEnvelope = Envelope[Employee]
_BoolEnvelope = Envelope[bool]


def is_rate_limited(e: BaseException) -> bool:
    return isinstance(e, UpstreamRateLimited)


def default_retry_policy(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        backoff=exponential_backoff(
            settings.retry_initial_delay_seconds,
            settings.retry_multiplier,
            settings.retry_max_delay_seconds,
        ),
        retry_on=is_rate_limited,
    )


class EmployeeClient:
    """
    Thin wrapper around the upstream mock employee API.

    Every call is one HTTP request (plus retries on 429) whose body is the
    upstream envelope {data, status, error}; the envelope is unwrapped into a
    Result. Transport errors, non-2xx responses and malformed bodies raise
    UpstreamFailure.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        retry_policy: Optional[RetryPolicy] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy(retry_on=is_rate_limited)
        self._http = httpx.Client(
            timeout=float(timeout_seconds),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @staticmethod
    def from_settings(settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> "EmployeeClient":
        return EmployeeClient(
            base_url=settings.employee_server_url,
            timeout_seconds=settings.http_timeout_seconds,
            retry_policy=default_retry_policy(settings),
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "EmployeeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- upstream operations ------------------------------------------------

    def list_employees(self) -> Result[List[Employee]]:
        return self._call("list_employees", "GET", self.base_url, _EmployeeListEnvelope)

    def get_employee(self, employee_id: str) -> Result[Optional[Employee]]:
        return self._call(
            "get_employee",
            "GET",
            f"{self.base_url}/{employee_id}",
            _EmployeeEnvelope,
            not_found_is_empty=True,
        )

    def create_employee(self, employee_input: CreateEmployeeInput) -> Result[Employee]:
        return self._call(
            "create_employee",
            "POST",
            self.base_url,
            _EmployeeEnvelope,
            json=employee_input.model_dump(),
        )

    def delete_employee(self, name: str) -> Result[bool]:
        return self._call(
            "delete_employee",
            "DELETE",
            self.base_url,
            _BoolEnvelope,
            json=DeleteEmployeeInput(name=name).model_dump(),
        )

    # -- plumbing -----------------------------------------------------------

    def _send(self, method: str, url: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            resp = self._http.request(method, url, json=json)
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"{method} {url} failed: {type(e).__name__}: {e}") from e

        if resp.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise UpstreamRateLimited(f"{method} {url} was rate limited (HTTP 429)", status_code=429)
        return resp

    def _call(
        self,
        operation: str,
        method: str,
        url: str,
        envelope_type: type,
        json: Optional[Dict[str, Any]] = None,
        not_found_is_empty: bool = False,
    ) -> Result:
        policy = dataclasses.replace(self.retry_policy, name=operation)
        resp = policy.call(self._send, method, url, json=json)

        if not_found_is_empty and resp.status_code == httpx.codes.NOT_FOUND:
            logger.info(f"[CLIENT] {operation}: upstream has no such resource ({url})")
            return Ok(None)

        if resp.is_error:
            raise UpstreamFailure(
                f"{method} {url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            envelope = envelope_type.model_validate_json(resp.content)
        except ValidationError as e:
            raise UpstreamFailure(
                f"{method} {url} returned a malformed body: {e.error_count()} validation error(s)",
                status_code=resp.status_code,
            ) from e

        logger.debug(f"[CLIENT] {operation}: HTTP {resp.status_code}, status={envelope.status!r}")
        return envelope.to_result()
