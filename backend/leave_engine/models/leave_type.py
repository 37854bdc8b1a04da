# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from leave_engine.models.enums import AccrualFrequency, EmploymentType

ALL_EMPLOYMENT_TYPES = [t.value for t in EmploymentType]


class LeaveType(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """A leave category configured for one organisation."""

    __tablename__ = "leave_type"
    __table_args__ = (sa.UniqueConstraint("organisation_id", "name", name="uq_leave_type_org_name"),)

    organisation_id: uuid.UUID = Field(index=True)
    name: str = Field(max_length=255)
    description: str | None = None
    paid: bool = True
    accrues: bool = True
    accrual_rate_hours: Decimal = Field(default=Decimal(0), max_digits=10, decimal_places=2)
    accrual_frequency: str = Field(default=AccrualFrequency.FORTNIGHTLY, max_length=50)
    max_balance_hours: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    applicable_employment_types: list[str] = Field(
        default_factory=lambda: list(ALL_EMPLOYMENT_TYPES),
        sa_type=sa.JSON,
    )
    is_active: bool = Field(default=True, index=True)
    display_order: int = 0
