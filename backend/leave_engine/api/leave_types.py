# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from leave_engine.api.deps import AdminDep, AuthDep, validate_organisation_scope
from leave_engine.db import SessionDep
from leave_engine.schemas.leave_type import (
    CreateLeaveTypeRequest,
    LeaveTypeListResponse,
    LeaveTypeResponse,
    UpdateLeaveTypeRequest,
)
from leave_engine.services import leave_type as leave_type_service

leave_types_router = APIRouter(
    prefix="/organisations/{organisation_id}/leave-types",
    tags=["leave-types"],
    dependencies=[Depends(validate_organisation_scope)],
)


@leave_types_router.post("", response_model=LeaveTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_type(
    payload: CreateLeaveTypeRequest,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveTypeResponse:
    """Create a leave type (admin only)."""
    return await leave_type_service.create_leave_type(session, auth, payload)


@leave_types_router.get("", response_model=LeaveTypeListResponse)
async def list_leave_types(
    session: SessionDep,
    auth: AuthDep,
    include_inactive: bool = Query(default=False),
) -> LeaveTypeListResponse:
    return await leave_type_service.list_leave_types(session, auth.organisation_id, include_inactive)


@leave_types_router.post("/seed-defaults", response_model=LeaveTypeListResponse, status_code=status.HTTP_201_CREATED)
async def seed_default_leave_types(
    session: SessionDep,
    auth: AdminDep,
) -> LeaveTypeListResponse:
    """Install the standard leave catalog for the organisation (admin only)."""
    return await leave_type_service.seed_default_leave_types(session, auth)


@leave_types_router.get("/{leave_type_id}", response_model=LeaveTypeResponse)
async def get_leave_type(
    leave_type_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveTypeResponse:
    return await leave_type_service.get_leave_type_response(session, auth.organisation_id, leave_type_id)


@leave_types_router.patch("/{leave_type_id}", response_model=LeaveTypeResponse)
async def update_leave_type(
    leave_type_id: uuid.UUID,
    payload: UpdateLeaveTypeRequest,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveTypeResponse:
    """Update a leave type; set is_active=false to retire it (admin only)."""
    return await leave_type_service.update_leave_type(session, auth, leave_type_id, payload)
