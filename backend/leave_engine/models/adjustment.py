# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UUIDBase


class LeaveAdjustment(UUIDBase, TimestampMixin, table=True):
    """Immutable manual correction of a balance.

    Corrected only by recording an offsetting adjustment.
    """

    __tablename__ = "leave_adjustment"
    __table_args__ = (sa.CheckConstraint("delta_hours <> 0", name="ck_leave_adjustment_nonzero"),)

    organisation_id: uuid.UUID = Field(index=True)
    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id"), nullable=False, index=True),
    )
    delta_hours: Decimal = Field(max_digits=10, decimal_places=2)
    reason: str
    actor_id: uuid.UUID
    balance_id: uuid.UUID
    balance_version: int
    balance_after_hours: Decimal = Field(max_digits=10, decimal_places=2)
