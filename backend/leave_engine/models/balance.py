# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase


class LeaveBalance(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """Current hours for one (employee, leave type) pair.

    Written only by the ledger service. ``version`` increments on every applied
    delta and is the compare-and-swap token for concurrent writers.
    """

    __tablename__ = "leave_balance"
    __table_args__ = (sa.UniqueConstraint("employee_id", "leave_type_id", name="uq_balance_employee_leave_type"),)

    organisation_id: uuid.UUID = Field(index=True)
    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id"), nullable=False, index=True),
    )
    balance_hours: Decimal = Field(default=Decimal(0), max_digits=10, decimal_places=2)
    last_accrual_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    # Day of month monthly/annual periods fall on; survives clamping to short months.
    accrual_anchor_day: int | None = None
    version: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
