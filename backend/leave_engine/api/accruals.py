# ruff: noqa: B008, TC001, TC003
"""Admin trigger for the accrual engine."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from leave_engine.api.deps import AdminDep, validate_organisation_scope
from leave_engine.db import SessionDep
from leave_engine.schemas.accrual import AccrualFailureResponse, AccrualRunResponse
from leave_engine.services.accrual import run_accruals

accruals_router = APIRouter(
    prefix="/organisations/{organisation_id}/accruals",
    tags=["accruals"],
    dependencies=[Depends(validate_organisation_scope)],
)


@accruals_router.post("/run", response_model=AccrualRunResponse)
async def run_organisation_accruals(
    session: SessionDep,
    auth: AdminDep,
    as_of: date | None = Query(default=None),
) -> AccrualRunResponse:
    """Run accruals for the organisation through ``as_of`` (admin only).

    Safe to repeat: a second run for the same date credits nothing.
    """
    result = await run_accruals(session, auth.organisation_id, as_of)
    return AccrualRunResponse(
        organisation_id=result.organisation_id,
        as_of=result.as_of,
        employees_credited=result.employees_credited,
        total_hours_credited=result.total_hours_credited,
        pairs_processed=result.pairs_processed,
        pairs_credited=result.pairs_credited,
        failures=[
            AccrualFailureResponse(
                employee_id=f.employee_id,
                leave_type_id=f.leave_type_id,
                error=f.error,
                detail=f.detail,
            )
            for f in result.failures
        ],
    )
