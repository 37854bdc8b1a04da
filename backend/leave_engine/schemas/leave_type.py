# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_engine.models.enums import AccrualFrequency, EmploymentType

_ALL_EMPLOYMENT_TYPES = list(EmploymentType)


class CreateLeaveTypeRequest(BaseModel):
    """Request body for configuring a new leave type."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    paid: bool = True
    accrues: bool = False
    accrual_rate_hours: Decimal = Field(default=Decimal(0), ge=0, max_digits=10, decimal_places=2)
    accrual_frequency: AccrualFrequency = AccrualFrequency.FORTNIGHTLY
    max_balance_hours: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    applicable_employment_types: list[EmploymentType] = Field(
        default_factory=lambda: list(_ALL_EMPLOYMENT_TYPES), min_length=1
    )
    is_active: bool = True
    display_order: int = 0

    @model_validator(mode="after")
    def _validate_accrual(self) -> Self:
        if self.accrues and self.accrual_rate_hours <= 0:
            msg = "accrual_rate_hours must be positive for an accruing leave type"
            raise ValueError(msg)
        return self


class UpdateLeaveTypeRequest(BaseModel):
    """Partial update; only fields that are set are changed.

    Changes apply to future accrual runs only.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    paid: bool | None = None
    accrues: bool | None = None
    accrual_rate_hours: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    accrual_frequency: AccrualFrequency | None = None
    max_balance_hours: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    applicable_employment_types: list[EmploymentType] | None = Field(default=None, min_length=1)
    is_active: bool | None = None
    display_order: int | None = None


class LeaveTypeResponse(BaseModel):
    """Response schema for a leave type."""

    id: uuid.UUID
    organisation_id: uuid.UUID
    name: str
    description: str | None
    paid: bool
    accrues: bool
    accrual_rate_hours: Decimal
    accrual_frequency: AccrualFrequency
    max_balance_hours: Decimal | None
    applicable_employment_types: list[EmploymentType]
    is_active: bool
    display_order: int
    created_at: datetime
    updated_at: datetime


class LeaveTypeListResponse(BaseModel):
    """List of leave types."""

    items: list[LeaveTypeResponse]
    total: int
