# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from leave_engine.api.deps import ApproverDep, AuthDep, validate_organisation_scope
from leave_engine.db import SessionDep
from leave_engine.models.enums import RequestStatus
from leave_engine.schemas.request import (
    ApprovePayload,
    CreateLeaveRequestPayload,
    DecisionPayload,
    LeaveRequestListResponse,
    LeaveRequestResponse,
)
from leave_engine.services import request as request_service

requests_router = APIRouter(
    prefix="/organisations/{organisation_id}/requests",
    tags=["requests"],
    dependencies=[Depends(validate_organisation_scope)],
)


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: CreateLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Submit a new leave request."""
    return await request_service.create_request(session, auth, payload)


@requests_router.get("", response_model=LeaveRequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    leave_type_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests with optional filters."""
    return await request_service.list_requests(
        session,
        auth.organisation_id,
        status_filter,
        employee_id,
        leave_type_id,
        start_date,
        end_date,
        offset,
        limit,
    )


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    return await request_service.get_request(session, auth.organisation_id, request_id)


@requests_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ApproverDep,
    payload: ApprovePayload | None = None,
) -> LeaveRequestResponse:
    """Approve a pending request and deduct its hours (manager or admin)."""
    return await request_service.approve_request(session, auth, request_id, payload)


@requests_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ApproverDep,
    payload: DecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Reject a pending request (manager or admin)."""
    return await request_service.reject_request(session, auth, request_id, payload)


@requests_router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    payload: DecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Cancel an approved request and restore its hours."""
    return await request_service.cancel_request(session, auth, request_id, payload)
