# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UUIDBase


class LeaveLedgerEntry(UUIDBase, TimestampMixin, table=True):
    """Append-only record of every delta applied to a balance row.

    One entry per balance version; the sum of ``delta_hours`` for a balance
    equals its ``balance_hours``.
    """

    __tablename__ = "leave_ledger_entry"
    __table_args__ = (
        sa.UniqueConstraint("balance_id", "version", name="uq_ledger_balance_version"),
        sa.UniqueConstraint("balance_id", "cause_type", "cause_ref", name="uq_ledger_cause"),
        sa.Index("ix_ledger_employee_leave_type", "employee_id", "leave_type_id"),
    )

    organisation_id: uuid.UUID = Field(index=True)
    balance_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_balance.id"), nullable=False, index=True),
    )
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    version: int
    delta_hours: Decimal = Field(max_digits=10, decimal_places=2)
    balance_after_hours: Decimal = Field(max_digits=10, decimal_places=2)
    cause_type: str = Field(max_length=50)
    cause_ref: str = Field(max_length=255)
