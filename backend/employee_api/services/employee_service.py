from __future__ import annotations

import logging
import re
from typing import List, Optional
from uuid import UUID

from employee_api.errors import InvalidInput, NotFound, UpstreamFailure
from employee_api.schemas.employee import CreateEmployeeInput, Employee, Err, Result
from employee_api.services.cache import RefreshingCache
from employee_api.services.employee_client import EmployeeClient

logger = logging.getLogger(__name__)

ALL_EMPLOYEES_KEY = "all"
TOP_EARNERS_LIMIT = 10

_SEARCH_RE = re.compile(r"^[A-Za-z]+$")


def _unwrap(result: Result, operation: str):
    if isinstance(result, Err):
        raise UpstreamFailure(f"{operation}: {result.error}")
    return result.value


def _canonical_uuid(value: str) -> Optional[str]:
    """Return the 8-4-4-4-12 lowercase form of `value`, or None if it isn't a UUID."""
    try:
        return str(UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        return None


class EmployeeService:
    """
    Derived views over the upstream employee list.

    The full list is cached under ALL_EMPLOYEES_KEY; create/delete invalidate it.
    """

    def __init__(self, client: EmployeeClient, cache: RefreshingCache) -> None:
        self.client = client
        self.cache = cache

    def get_all_employees(self) -> List[Employee]:
        return list(self.cache.get_or_refresh(ALL_EMPLOYEES_KEY, self._fetch_all_employees))

    def _fetch_all_employees(self) -> tuple:
        logger.info("[EMPLOYEE] Fetching employees from upstream (cache miss)")
        employees = _unwrap(self.client.list_employees(), "list_employees")
        return tuple(employees or ())

    def get_employees_by_name_search(self, search_string: str) -> List[Employee]:
        s = (search_string or "").strip()
        if not s:
            raise InvalidInput("Search string cannot be empty")
        if not _SEARCH_RE.match(s):
            raise InvalidInput("Search string must contain only letters")

        needle = s.lower()
        return [
            e for e in self.get_all_employees()
            if e.employee_name is not None and needle in e.employee_name.lower()
        ]

    def get_employee_by_id(self, employee_id: str) -> Optional[Employee]:
        canonical_id = _canonical_uuid(employee_id)
        if canonical_id is None:
            logger.info(f"[EMPLOYEE] Rejecting non-UUID id {employee_id!r} as not found")
            return None
        return _unwrap(self.client.get_employee(canonical_id), "get_employee")

    def get_highest_salary_of_employees(self) -> int:
        salaries = (e.employee_salary for e in self.get_all_employees() if e.employee_salary is not None)
        return max(salaries, default=0)

    def get_top_ten_highest_earning_employee_names(self) -> List[str]:
        ranked = [
            e for e in self.get_all_employees()
            if e.employee_salary is not None and e.employee_name is not None
        ]
        # sorted() is stable, so equal salaries keep upstream order
        ranked.sort(key=lambda e: e.employee_salary, reverse=True)
        return [e.employee_name for e in ranked[:TOP_EARNERS_LIMIT]]

    def create_employee(self, employee_input: CreateEmployeeInput) -> Employee:
        created = _unwrap(self.client.create_employee(employee_input), "create_employee")
        if created is None:
            raise UpstreamFailure("Employee creation failed: upstream returned no data")

        self.cache.invalidate(ALL_EMPLOYEES_KEY)
        logger.info(f"[EMPLOYEE] Created employee {created.employee_name} ({created.id})")
        return created

    def delete_employee_by_id(self, employee_id: str) -> str:
        employee = self.get_employee_by_id(employee_id)
        if employee is None:
            raise NotFound(f"Employee not found: {employee_id}")

        name = employee.employee_name
        if not name:
            raise UpstreamFailure(f"Employee {employee_id} has no name to delete by")
        deleted = _unwrap(self.client.delete_employee(name), "delete_employee")
        if deleted is not True:
            raise UpstreamFailure(f"Failed to delete employee: {name}")

        self.cache.invalidate(ALL_EMPLOYEES_KEY)
        logger.info(f"[EMPLOYEE] Deleted employee {name} ({employee_id})")
        return name

    def invalidate_cache(self) -> None:
        self.cache.invalidate(ALL_EMPLOYEES_KEY)
