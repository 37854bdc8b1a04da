# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_engine.models.balance import LeaveBalance
from leave_engine.models.enums import LedgerCauseType
from leave_engine.models.leave_type import LeaveType
from leave_engine.models.ledger import LeaveLedgerEntry
from leave_engine.schemas.balance import (
    BalanceListResponse,
    BalanceResponse,
    BalanceVerificationResponse,
    LedgerEntryResponse,
    LedgerListResponse,
)
from leave_engine.services.leave_type import get_leave_type
from leave_engine.services.ledger import get_balance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_balance_response(balance: LeaveBalance, leave_type: LeaveType) -> BalanceResponse:
    """Assemble a balance with its leave type joined in."""
    return BalanceResponse(
        id=balance.id,
        employee_id=balance.employee_id,
        leave_type_id=balance.leave_type_id,
        leave_type_name=leave_type.name,
        paid=leave_type.paid,
        accrues=leave_type.accrues,
        balance_hours=balance.balance_hours,
        last_accrual_at=balance.last_accrual_at,
        version=balance.version,
        updated_at=balance.updated_at,
    )


def _build_ledger_entry_response(entry: LeaveLedgerEntry) -> LedgerEntryResponse:
    """Map a ledger entry model to its response schema."""
    return LedgerEntryResponse(
        id=entry.id,
        balance_id=entry.balance_id,
        version=entry.version,
        delta_hours=entry.delta_hours,
        balance_after_hours=entry.balance_after_hours,
        cause_type=LedgerCauseType(entry.cause_type),
        cause_ref=entry.cause_ref,
        created_at=entry.created_at,
    )


async def _list_balances(session: AsyncSession, *filters: object) -> BalanceListResponse:
    result = await session.execute(
        select(LeaveBalance, LeaveType)
        .join(LeaveType, col(LeaveBalance.leave_type_id) == col(LeaveType.id))
        .where(*filters)  # type: ignore[arg-type]
        .order_by(col(LeaveBalance.employee_id), col(LeaveType.display_order), col(LeaveType.name))
    )
    items = [_build_balance_response(balance, leave_type) for balance, leave_type in result.all()]
    return BalanceListResponse(items=items, total=len(items))


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_employee_balances(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID,
) -> BalanceListResponse:
    """All balances held by one employee."""
    return await _list_balances(
        session,
        col(LeaveBalance.organisation_id) == organisation_id,
        col(LeaveBalance.employee_id) == employee_id,
    )


async def get_organisation_balances(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    leave_type_id: uuid.UUID | None = None,
) -> BalanceListResponse:
    """Balance grid for the whole organisation, optionally for one leave type."""
    filters = [col(LeaveBalance.organisation_id) == organisation_id]
    if leave_type_id is not None:
        filters.append(col(LeaveBalance.leave_type_id) == leave_type_id)
    return await _list_balances(session, *filters)


async def get_balance_ledger(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    offset: int = 0,
    limit: int = 50,
) -> LedgerListResponse:
    """Paginated ledger entries for one balance, newest version first."""
    await get_leave_type(session, organisation_id, leave_type_id)

    base_filter = [
        col(LeaveLedgerEntry.organisation_id) == organisation_id,
        col(LeaveLedgerEntry.employee_id) == employee_id,
        col(LeaveLedgerEntry.leave_type_id) == leave_type_id,
    ]

    count_result = await session.execute(select(func.count()).select_from(LeaveLedgerEntry).where(*base_filter))
    total = count_result.scalar_one()

    entries_result = await session.execute(
        select(LeaveLedgerEntry)
        .where(*base_filter)
        .order_by(col(LeaveLedgerEntry.version).desc())
        .offset(offset)
        .limit(limit)
    )
    entries = list(entries_result.scalars().all())

    return LedgerListResponse(
        items=[_build_ledger_entry_response(e) for e in entries],
        total=total,
    )


async def verify_balance(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> BalanceVerificationResponse:
    """Reconcile the stored balance with the sum of its ledger deltas.

    A pair that was never written has no row and no entries, and is consistent
    at zero.
    """
    await get_leave_type(session, organisation_id, leave_type_id)

    balance = await get_balance(session, employee_id, leave_type_id)
    result = await session.execute(
        select(
            func.coalesce(func.sum(col(LeaveLedgerEntry.delta_hours)), 0),
            func.count(),
        ).where(
            col(LeaveLedgerEntry.employee_id) == employee_id,
            col(LeaveLedgerEntry.leave_type_id) == leave_type_id,
        )
    )
    ledger_total, entry_count = result.one()
    ledger_total_hours = Decimal(str(ledger_total)).quantize(Decimal("0.01"))
    balance_hours = balance.balance_hours if balance is not None else Decimal("0.00")

    return BalanceVerificationResponse(
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        balance_hours=balance_hours,
        ledger_total_hours=ledger_total_hours,
        entry_count=entry_count,
        consistent=balance_hours == ledger_total_hours and (balance is None or balance.version == entry_count),
    )
