"""
Pydantic schemas used by the FastAPI API layer and the upstream client.

Keep request/response validation here (not in `main.py`) so it can be reused by
scripts, tests, and the client.
"""

from employee_api.schemas.employee import (
    CreateEmployeeInput,
    DeleteEmployeeInput,
    Employee,
    Envelope,
    EnvelopeStatus,
    Err,
    Ok,
    Result,
)

__all__ = [
    "CreateEmployeeInput",
    "DeleteEmployeeInput",
    "Employee",
    "Envelope",
    "EnvelopeStatus",
    "Err",
    "Ok",
    "Result",
]
