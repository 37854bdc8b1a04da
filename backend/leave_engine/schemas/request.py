# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_engine.models.enums import RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeaveRequestPayload(BaseModel):
    """Request body for creating a leave request.

    When ``hours`` is omitted it is estimated from the business days in range.
    """

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    hours: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    reason: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must be on or after start_date"
            raise ValueError(msg)
        return self


class ApprovePayload(BaseModel):
    """Request body for approving a pending request."""

    reason: str | None = Field(default=None, max_length=1000)
    override: bool = False


class DecisionPayload(BaseModel):
    """Request body for reject/cancel actions."""

    reason: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    organisation_id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID | None
    start_date: date
    end_date: date
    hours: Decimal
    reason: str | None
    status: RequestStatus
    decided_by: uuid.UUID | None
    decided_at: datetime | None
    decision_reason: str | None
    cancelled_by: uuid.UUID | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    balance_deducted: bool
    override_reason: str | None
    created_at: datetime


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int
