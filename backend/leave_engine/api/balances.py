# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from leave_engine.api.deps import AuthDep, validate_organisation_scope
from leave_engine.db import SessionDep
from leave_engine.schemas.balance import BalanceListResponse, BalanceVerificationResponse, LedgerListResponse
from leave_engine.services import balance as balance_service

organisation_balance_router = APIRouter(
    prefix="/organisations/{organisation_id}/balances",
    tags=["balances"],
    dependencies=[Depends(validate_organisation_scope)],
)

employee_balance_router = APIRouter(
    prefix="/organisations/{organisation_id}/employees/{employee_id}/balances",
    tags=["balances"],
    dependencies=[Depends(validate_organisation_scope)],
)


@organisation_balance_router.get("", response_model=BalanceListResponse)
async def get_organisation_balances(
    session: SessionDep,
    auth: AuthDep,
    leave_type_id: uuid.UUID | None = Query(default=None),
) -> BalanceListResponse:
    """Balance grid for every employee in the organisation."""
    return await balance_service.get_organisation_balances(session, auth.organisation_id, leave_type_id)


@employee_balance_router.get("", response_model=BalanceListResponse)
async def get_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceListResponse:
    """Get all leave balances for an employee."""
    return await balance_service.get_employee_balances(session, auth.organisation_id, employee_id)


@employee_balance_router.get("/{leave_type_id}/ledger", response_model=LedgerListResponse)
async def get_balance_ledger(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LedgerListResponse:
    """Get paginated ledger entries for one balance."""
    return await balance_service.get_balance_ledger(
        session, auth.organisation_id, employee_id, leave_type_id, offset, limit
    )


@employee_balance_router.get("/{leave_type_id}/verify", response_model=BalanceVerificationResponse)
async def verify_balance(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceVerificationResponse:
    """Check the stored balance against the sum of its ledger."""
    return await balance_service.verify_balance(session, auth.organisation_id, employee_id, leave_type_id)
