from __future__ import annotations

import logging
import threading
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from employee_api.config import Settings, configure_logging
from employee_api.errors import EmployeeApiError, InvalidInput, NotFound
from employee_api.schemas.employee import CreateEmployeeInput, Employee
from employee_api.services.cache import RefreshingCache
from employee_api.services.employee_client import EmployeeClient
from employee_api.services.employee_service import EmployeeService

logger = logging.getLogger(__name__)

app = FastAPI(title="Employee API")
router = APIRouter(prefix="/api/v1/employee", tags=["employee"])

_SERVICE: Optional[EmployeeService] = None
_SERVICE_LOCK = threading.Lock()


def build_service(settings: Settings) -> EmployeeService:
    client = EmployeeClient.from_settings(settings)
    cache = RefreshingCache(ttl_seconds=settings.cache_ttl_seconds, name="employees")
    return EmployeeService(client=client, cache=cache)


def get_employee_service() -> EmployeeService:
    """Lazily build one service (and one upstream client) per process."""
    global _SERVICE
    if _SERVICE is None:
        with _SERVICE_LOCK:
            if _SERVICE is None:
                _SERVICE = build_service(Settings.from_env())
    return _SERVICE


@app.on_event("startup")
def _configure_logging() -> None:
    configure_logging(Settings.from_env().log_level)


@app.on_event("shutdown")
def _close_upstream_client() -> None:
    global _SERVICE
    with _SERVICE_LOCK:
        if _SERVICE is not None:
            _SERVICE.client.close()
            _SERVICE = None


@app.exception_handler(RequestValidationError)
async def _request_validation_as_bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Bad payloads are InvalidInput -> 400 (FastAPI defaults to 422)
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def _to_http_error(e: Exception, action: str) -> HTTPException:
    if isinstance(e, InvalidInput):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, EmployeeApiError):
        logger.error(f"[API] Error {action}: {e}")
        return HTTPException(status_code=500, detail=f"Error {action}: {e}")
    logger.exception(f"[API] Unexpected error {action}: {e}")
    return HTTPException(status_code=500, detail=f"Unexpected error {action}")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("", response_model=List[Employee])
@router.get("/", response_model=List[Employee], include_in_schema=False)
def get_all_employees(service: EmployeeService = Depends(get_employee_service)):
    try:
        employees = service.get_all_employees()
    except Exception as e:
        raise _to_http_error(e, "getting all employees")
    logger.info(f"[API] Retrieved {len(employees)} employees")
    return employees


@router.get("/search/{search_string}", response_model=List[Employee])
def get_employees_by_name_search(search_string: str, service: EmployeeService = Depends(get_employee_service)):
    try:
        return service.get_employees_by_name_search(search_string)
    except Exception as e:
        raise _to_http_error(e, "searching employees")


# Fixed paths must be registered before /{employee_id}.
@router.get("/highestSalary", response_model=int)
def get_highest_salary_of_employees(service: EmployeeService = Depends(get_employee_service)):
    try:
        highest = service.get_highest_salary_of_employees()
    except Exception as e:
        raise _to_http_error(e, "getting highest salary")
    logger.info(f"[API] Highest salary calculated: {highest}")
    return highest


@router.get("/topTenHighestEarningEmployeeNames", response_model=List[str])
def get_top_ten_highest_earning_employee_names(service: EmployeeService = Depends(get_employee_service)):
    try:
        return service.get_top_ten_highest_earning_employee_names()
    except Exception as e:
        raise _to_http_error(e, "getting top earning employees")


@router.get("/{employee_id}", response_model=Employee)
def get_employee_by_id(employee_id: str, service: EmployeeService = Depends(get_employee_service)):
    try:
        employee = service.get_employee_by_id(employee_id)
    except Exception as e:
        raise _to_http_error(e, "getting employee by id")
    if employee is None:
        raise HTTPException(status_code=404, detail=f"Employee not found: {employee_id}")
    return employee


@router.post("", response_model=Employee, status_code=201)
@router.post("/", response_model=Employee, status_code=201, include_in_schema=False)
def create_employee(employee_input: CreateEmployeeInput, service: EmployeeService = Depends(get_employee_service)):
    try:
        created = service.create_employee(employee_input)
    except Exception as e:
        raise _to_http_error(e, "creating employee")
    return created


@router.delete("/{employee_id}", response_model=str)
def delete_employee_by_id(employee_id: str, service: EmployeeService = Depends(get_employee_service)):
    try:
        return service.delete_employee_by_id(employee_id)
    except Exception as e:
        raise _to_http_error(e, "deleting employee")


app.include_router(router)
