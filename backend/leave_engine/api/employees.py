# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from leave_engine.api.deps import AdminDep, AuthDep, validate_organisation_scope
from leave_engine.exceptions import NotFoundError
from leave_engine.schemas.employee import EmployeeListResponse, EmployeeResponse, UpsertEmployeeRequest
from leave_engine.services.employee import EmployeeInfo, get_employee_directory

employees_router = APIRouter(
    prefix="/organisations/{organisation_id}/employees",
    tags=["employees"],
    dependencies=[Depends(validate_organisation_scope)],
)


def _build_employee_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        organisation_id=employee.organisation_id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        employment_type=employee.employment_type,
        status=employee.status,
        start_date=employee.start_date,
    )


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
async def upsert_employee(
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    auth: AdminDep,
) -> EmployeeResponse:
    """Create or update an employee in the stub directory (admin only)."""
    employee = EmployeeInfo(
        id=employee_id,
        organisation_id=organisation_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        employment_type=payload.employment_type,
        status=payload.status,
        start_date=payload.start_date,
    )
    get_employee_directory().seed(employee)  # type: ignore[attr-defined]
    return _build_employee_response(employee)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get employee info from the directory."""
    employee = await get_employee_directory().get_employee(organisation_id, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return _build_employee_response(employee)


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    organisation_id: uuid.UUID,
    auth: AuthDep,
) -> EmployeeListResponse:
    """List all employees for an organisation."""
    employees = await get_employee_directory().list_employees(organisation_id)
    items = [_build_employee_response(e) for e in employees]
    return EmployeeListResponse(items=items, total=len(items))
