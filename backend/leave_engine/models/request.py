# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from leave_engine.models.enums import RequestStatus


class LeaveRequest(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """An employee's leave request and its approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_org_status", "organisation_id", "status"),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_request_dates"),
        sa.CheckConstraint("hours > 0", name="ck_leave_request_hours"),
    )

    organisation_id: uuid.UUID = Field(index=True)
    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="SET NULL"), nullable=True, index=True),
    )
    start_date: date
    end_date: date
    hours: Decimal = Field(max_digits=10, decimal_places=2)
    reason: str | None = None
    status: str = Field(
        default=RequestStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    decided_by: uuid.UUID | None = None
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decision_reason: str | None = None
    cancelled_by: uuid.UUID | None = None
    cancelled_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    cancellation_reason: str | None = None
    balance_deducted: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    override_reason: str | None = None
