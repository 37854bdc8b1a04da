# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from leave_engine.api.deps import AdminDep, AuthDep, validate_organisation_scope
from leave_engine.db import SessionDep
from leave_engine.schemas.adjustment import AdjustmentListResponse, AdjustmentResponse, CreateAdjustmentPayload
from leave_engine.services import adjustment as adjustment_service

adjustments_router = APIRouter(
    prefix="/organisations/{organisation_id}/adjustments",
    tags=["adjustments"],
    dependencies=[Depends(validate_organisation_scope)],
)


@adjustments_router.post("", response_model=AdjustmentResponse, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    payload: CreateAdjustmentPayload,
    session: SessionDep,
    auth: AdminDep,
) -> AdjustmentResponse:
    """Record a manual balance correction (admin only)."""
    return await adjustment_service.record_adjustment(
        session,
        auth,
        payload.employee_id,
        payload.leave_type_id,
        payload.delta_hours,
        payload.reason,
    )


@adjustments_router.get("", response_model=AdjustmentListResponse)
async def list_adjustments(
    session: SessionDep,
    auth: AuthDep,
    employee_id: uuid.UUID | None = Query(default=None),
    leave_type_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AdjustmentListResponse:
    return await adjustment_service.list_adjustments(
        session, auth.organisation_id, employee_id, leave_type_id, offset, limit
    )
