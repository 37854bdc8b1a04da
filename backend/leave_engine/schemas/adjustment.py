# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CreateAdjustmentPayload(BaseModel):
    """Request body for a manual balance adjustment.

    Zero deltas and short reasons are rejected by the service so the
    configured minimum reason length applies.
    """

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    delta_hours: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Signed hours: positive to add, negative to deduct",
    )
    reason: str = Field(max_length=1000)


class AdjustmentResponse(BaseModel):
    """A recorded adjustment."""

    id: uuid.UUID
    organisation_id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    delta_hours: Decimal
    reason: str
    actor_id: uuid.UUID
    balance_id: uuid.UUID
    balance_version: int
    balance_after_hours: Decimal
    created_at: datetime


class AdjustmentListResponse(BaseModel):
    """List of adjustments, newest first."""

    items: list[AdjustmentResponse]
    total: int
