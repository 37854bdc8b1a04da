# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class AccrualFailureResponse(BaseModel):
    """One (employee, leave type) pair that failed during a run."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    error: str
    detail: str


class AccrualRunResponse(BaseModel):
    """Summary returned by the accrual run endpoint."""

    organisation_id: uuid.UUID
    as_of: date
    employees_credited: int
    total_hours_credited: Decimal
    pairs_processed: int
    pairs_credited: int
    failures: list[AccrualFailureResponse]
