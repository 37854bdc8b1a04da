# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field

from leave_engine.models.enums import EmployeeStatus, EmploymentType


class UpsertEmployeeRequest(BaseModel):
    """Request body for creating or updating an employee in the directory stub."""

    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=1, max_length=255)
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    start_date: date | None = None


class EmployeeResponse(BaseModel):
    """Response schema for a single employee."""

    id: uuid.UUID
    organisation_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    employment_type: EmploymentType
    status: EmployeeStatus
    start_date: date | None


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int
