# ruff: noqa: TC003
"""Ledger operations: the only code path that writes leave balances.

Every mutation goes through :func:`apply_delta`, which creates the balance row
on first use, applies the delta with a version-checked compare-and-swap and
appends one ledger entry per resulting balance version. On PostgreSQL the row
is additionally locked with ``SELECT ... FOR UPDATE`` so writers on the same
(employee, leave type) pair serialize while unrelated pairs proceed in parallel.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_engine.exceptions import ConcurrentModificationError
from leave_engine.models.balance import LeaveBalance
from leave_engine.models.base import now_utc
from leave_engine.models.ledger import LeaveLedgerEntry
from leave_engine.services.leave_type import get_leave_type

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.models.enums import LedgerCauseType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cause:
    """Identifies the event a delta is attributed to."""

    type: LedgerCauseType
    ref: str


@dataclass
class DeltaResult:
    """Outcome of apply_delta.

    ``replayed`` is True when the same cause had already been applied to this
    balance; nothing was written and ``entry`` is the original ledger entry.
    """

    balance: LeaveBalance
    entry: LeaveLedgerEntry
    replayed: bool = False

    @property
    def new_balance(self) -> Decimal:
        return self.balance.balance_hours


async def get_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveBalance | None:
    """Read the balance row for a pair, optionally taking a row lock."""
    query = select(LeaveBalance).where(
        col(LeaveBalance.employee_id) == employee_id,
        col(LeaveBalance.leave_type_id) == leave_type_id,
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def _get_or_create_balance_for_update(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> LeaveBalance:
    """Lock the balance row, creating it at zero if the pair has never been written."""
    balance = await get_balance(session, employee_id, leave_type_id, for_update=True)
    if balance is not None:
        return balance

    balance = LeaveBalance(
        organisation_id=organisation_id,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        balance_hours=Decimal(0),
        version=0,
    )
    session.add(balance)
    try:
        await session.flush()
    except IntegrityError:
        # Another writer created the row between our read and insert.
        raise ConcurrentModificationError("Balance was created concurrently; retry the operation") from None
    return balance


async def _find_entry_for_cause(
    session: AsyncSession,
    balance_id: uuid.UUID,
    cause: Cause,
) -> LeaveLedgerEntry | None:
    result = await session.execute(
        select(LeaveLedgerEntry).where(
            col(LeaveLedgerEntry.balance_id) == balance_id,
            col(LeaveLedgerEntry.cause_type) == cause.type.value,
            col(LeaveLedgerEntry.cause_ref) == cause.ref,
        )
    )
    return result.scalar_one_or_none()


async def apply_delta(
    session: AsyncSession,
    *,
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    delta_hours: Decimal,
    cause: Cause,
    expected_version: int | None = None,
    accrued_through: datetime | None = None,
    accrual_anchor_day: int | None = None,
) -> DeltaResult:
    """Apply a signed delta to the (employee, leave type) balance.

    The new balance is always balance-before + delta, written as a single
    compare-and-swap on the row version. The caller owns the transaction and
    its own record of why the delta was applied; after an error the caller's
    transaction (or savepoint) must be rolled back, never committed.

    Args:
        expected_version: If given, the write only succeeds when the balance is
            still at this version (i.e. nothing changed since the caller read
            it to make a decision).
        accrued_through: Accrual marker to store as ``last_accrual_at``.
        accrual_anchor_day: Day of month calendar accrual periods fall on.

    Raises:
        UnknownLeaveTypeError: leave type is not part of the organisation.
        ConcurrentModificationError: another writer got there first; retry.
    """
    await get_leave_type(session, organisation_id, leave_type_id)

    balance = await _get_or_create_balance_for_update(session, organisation_id, employee_id, leave_type_id)

    existing = await _find_entry_for_cause(session, balance.id, cause)
    if existing is not None:
        logger.info(
            "Ledger cause %s:%s already applied to balance %s; skipping",
            cause.type.value,
            cause.ref,
            balance.id,
        )
        return DeltaResult(balance=balance, entry=existing, replayed=True)

    if expected_version is not None and balance.version != expected_version:
        raise ConcurrentModificationError("Balance changed since it was read; retry the operation")

    current_version = balance.version
    new_version = current_version + 1
    values: dict[str, object] = {
        "balance_hours": LeaveBalance.balance_hours + delta_hours,
        "version": new_version,
        "updated_at": now_utc(),
    }
    if accrued_through is not None:
        values["last_accrual_at"] = accrued_through
    if accrual_anchor_day is not None:
        values["accrual_anchor_day"] = accrual_anchor_day

    result = await session.execute(
        update(LeaveBalance)
        .where(
            col(LeaveBalance.id) == balance.id,
            col(LeaveBalance.version) == current_version,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        raise ConcurrentModificationError("Balance was modified concurrently; retry the operation")

    await session.refresh(balance)

    entry = LeaveLedgerEntry(
        organisation_id=organisation_id,
        balance_id=balance.id,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        version=balance.version,
        delta_hours=delta_hours,
        balance_after_hours=balance.balance_hours,
        cause_type=cause.type.value,
        cause_ref=cause.ref,
    )
    session.add(entry)
    try:
        await session.flush()
    except IntegrityError:
        raise ConcurrentModificationError("Balance version already recorded; retry the operation") from None

    logger.debug(
        "Applied %s hours to balance %s (v%d -> %s) for %s:%s",
        delta_hours,
        balance.id,
        balance.version,
        balance.balance_hours,
        cause.type.value,
        cause.ref,
    )
    return DeltaResult(balance=balance, entry=entry)
