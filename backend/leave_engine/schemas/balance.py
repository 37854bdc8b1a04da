# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from leave_engine.models.enums import LedgerCauseType

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    """Balance for one (employee, leave type) pair with leave type details joined."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    leave_type_name: str
    paid: bool
    accrues: bool
    balance_hours: Decimal
    last_accrual_at: datetime | None
    version: int
    updated_at: datetime


class BalanceListResponse(BaseModel):
    """A list of balances."""

    items: list[BalanceResponse]
    total: int


# ---------------------------------------------------------------------------
# Ledger response schemas
# ---------------------------------------------------------------------------


class LedgerEntryResponse(BaseModel):
    """A single applied delta."""

    id: uuid.UUID
    balance_id: uuid.UUID
    version: int
    delta_hours: Decimal
    balance_after_hours: Decimal
    cause_type: LedgerCauseType
    cause_ref: str
    created_at: datetime


class LedgerListResponse(BaseModel):
    """Paginated ledger entries."""

    items: list[LedgerEntryResponse]
    total: int


class BalanceVerificationResponse(BaseModel):
    """Result of reconciling a balance against its ledger."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    balance_hours: Decimal
    ledger_total_hours: Decimal
    entry_count: int
    consistent: bool
