"""Accrual engine: credits periodic leave hours per leave type rules."""

from __future__ import annotations

import logging
import uuid
from calendar import monthrange
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_engine.exceptions import AppError
from leave_engine.models.enums import AccrualFrequency, AuditAction, AuditEntityType, LedgerCauseType
from leave_engine.models.leave_type import LeaveType
from leave_engine.services.audit import SYSTEM_ACTOR_ID, model_to_audit_dict, write_audit_log
from leave_engine.services.employee import EmployeeInfo, get_employee_directory
from leave_engine.services.leave_type import list_active_for_employment_type
from leave_engine.services.ledger import Cause, apply_delta, get_balance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_FIXED_PERIOD_DAYS = {
    AccrualFrequency.WEEKLY: 7,
    AccrualFrequency.FORTNIGHTLY: 14,
}
_PERIOD_MONTHS = {
    AccrualFrequency.MONTHLY: 1,
    AccrualFrequency.ANNUALLY: 12,
}

# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass
class AccrualFailure:
    """A pair that could not be processed; the run carried on without it."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    error: str
    detail: str


@dataclass
class AccrualRunResult:
    """Summary of one accrual run."""

    organisation_id: uuid.UUID
    as_of: date
    pairs_processed: int = 0
    pairs_credited: int = 0
    total_hours_credited: Decimal = Decimal(0)
    credited_employee_ids: set[uuid.UUID] = field(default_factory=set)
    failures: list[AccrualFailure] = field(default_factory=list)

    @property
    def employees_credited(self) -> int:
        return len(self.credited_employee_ids)


# ---------------------------------------------------------------------------
# Pure computation helpers (no DB)
# ---------------------------------------------------------------------------


def _add_months(start: date, months: int, day: int | None = None) -> date:
    """Shift a date by whole months, clamping ``day`` (default: the start's day) to the month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    _, days_in_month = monthrange(year, month)
    return date(year, month, min(day or start.day, days_in_month))


def advance_periods(frequency: AccrualFrequency, anchor: date, periods: int, day: int | None = None) -> date:
    """Return the date ``periods`` whole accrual periods after ``anchor``.

    ``day`` is the day of month calendar periods fall on. An anchor already
    clamped to a short month (31 Jan -> 28 Feb) passes its original day so
    later periods land back on the 31st.
    """
    if frequency in _FIXED_PERIOD_DAYS:
        return anchor + timedelta(days=_FIXED_PERIOD_DAYS[frequency] * periods)
    return _add_months(anchor, _PERIOD_MONTHS[frequency] * periods, day)


def elapsed_periods(frequency: AccrualFrequency, anchor: date, as_of: date, day: int | None = None) -> int:
    """Number of whole accrual periods between anchor and as_of (never negative).

    WEEKLY/FORTNIGHTLY are fixed 7/14-day periods. MONTHLY/ANNUALLY count
    calendar months/years on ``day`` (default: the anchor's day).
    """
    if as_of <= anchor:
        return 0

    if frequency in _FIXED_PERIOD_DAYS:
        return (as_of - anchor).days // _FIXED_PERIOD_DAYS[frequency]

    step = _PERIOD_MONTHS[frequency]
    months = (as_of.year - anchor.year) * 12 + (as_of.month - anchor.month)
    periods = months // step
    if periods > 0 and advance_periods(frequency, anchor, periods, day) > as_of:
        periods -= 1
    return periods


def compute_credit(
    rate_hours: Decimal,
    periods: int,
    current_balance: Decimal,
    cap_hours: Decimal | None,
) -> Decimal:
    """Hours to credit for ``periods`` periods, clamped so the balance stays within the cap.

    Returns 0 (never negative) when the balance is already at or above the cap.
    """
    amount = rate_hours * periods
    if amount <= 0:
        return Decimal(0)
    if cap_hours is None:
        return amount
    headroom = cap_hours - current_balance
    if headroom <= 0:
        return Decimal(0)
    return min(amount, headroom)


def _marker(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=UTC)


def _build_accrual_cause_ref(employee_id: uuid.UUID, leave_type_id: uuid.UUID, through: date) -> str:
    """Idempotency reference for one accrual step of a pair."""
    return f"accrual:{employee_id}:{leave_type_id}:{through.isoformat()}"


# ---------------------------------------------------------------------------
# DB-backed processing
# ---------------------------------------------------------------------------


async def _accrue_pair(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    employee: EmployeeInfo,
    leave_type: LeaveType,
    as_of: date,
) -> Decimal:
    """Accrue one (employee, leave type) pair. Returns hours credited."""
    frequency = AccrualFrequency(leave_type.accrual_frequency)
    balance = await get_balance(session, employee.id, leave_type.id, for_update=True)

    if balance is not None and balance.last_accrual_at is not None:
        anchor = balance.last_accrual_at.date()
        anchor_day = balance.accrual_anchor_day or anchor.day
    elif employee.start_date is not None:
        anchor = employee.start_date
        anchor_day = anchor.day
    else:
        anchor = as_of  # no start date: the clock starts now
        anchor_day = anchor.day

    periods = elapsed_periods(frequency, anchor, as_of, anchor_day)
    if periods == 0 and balance is not None and balance.last_accrual_at is not None:
        return Decimal(0)

    through = advance_periods(frequency, anchor, periods, anchor_day)
    current = balance.balance_hours if balance is not None else Decimal(0)
    credit = compute_credit(leave_type.accrual_rate_hours, periods, current, leave_type.max_balance_hours)

    result = await apply_delta(
        session,
        organisation_id=organisation_id,
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        delta_hours=credit,
        cause=Cause(LedgerCauseType.ACCRUAL, _build_accrual_cause_ref(employee.id, leave_type.id, through)),
        expected_version=balance.version if balance is not None else None,
        accrued_through=_marker(through),
        accrual_anchor_day=anchor_day,
    )
    if result.replayed:
        return Decimal(0)

    if credit > 0:
        await write_audit_log(
            session,
            organisation_id=organisation_id,
            actor_id=SYSTEM_ACTOR_ID,
            entity_type=AuditEntityType.ACCRUAL,
            entity_id=result.entry.id,
            action=AuditAction.CREATE,
            after_json={
                **model_to_audit_dict(result.entry),
                "periods": periods,
                "computed_hours": str(leave_type.accrual_rate_hours * periods),
            },
        )
    return credit


async def run_accruals(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    as_of: date | None = None,
) -> AccrualRunResult:
    """Run accruals for every active employee and applicable accruing leave type.

    Re-running is safe: a second run in the same period finds no elapsed whole
    periods and credits nothing. A failing pair is rolled back to its own
    savepoint, recorded in the result and skipped.

    Args:
        session: Database session; committed at the end of the run.
        organisation_id: Organisation to process.
        as_of: Date to accrue through (defaults to today).
    """
    if as_of is None:
        as_of = date.today()

    result = AccrualRunResult(organisation_id=organisation_id, as_of=as_of)
    employees = await get_employee_directory().list_employees(organisation_id)

    for employee in employees:
        if not employee.is_active:
            continue

        leave_types = await list_active_for_employment_type(session, organisation_id, employee.employment_type)
        for leave_type in leave_types:
            if not leave_type.accrues:
                continue

            result.pairs_processed += 1
            try:
                async with session.begin_nested():
                    credited = await _accrue_pair(session, organisation_id, employee, leave_type, as_of)
            except AppError as exc:
                logger.warning(
                    "Accrual failed for employee=%s leave_type=%s: %s",
                    employee.id,
                    leave_type.id,
                    exc.message,
                )
                result.failures.append(AccrualFailure(employee.id, leave_type.id, exc.code, exc.message))
                continue
            except Exception as exc:
                logger.exception(
                    "Error processing accrual for employee=%s leave_type=%s",
                    employee.id,
                    leave_type.id,
                )
                result.failures.append(AccrualFailure(employee.id, leave_type.id, type(exc).__name__, str(exc)))
                continue

            if credited > 0:
                result.pairs_credited += 1
                result.total_hours_credited += credited
                result.credited_employee_ids.add(employee.id)

    await session.commit()
    logger.info(
        "Accrual run for organisation=%s as_of=%s: pairs=%d credited=%d hours=%s failures=%d",
        organisation_id,
        as_of,
        result.pairs_processed,
        result.pairs_credited,
        result.total_hours_credited,
        len(result.failures),
    )
    return result


async def list_accruing_organisations(session: AsyncSession) -> list[uuid.UUID]:
    """Organisations that have at least one active accruing leave type."""
    result = await session.execute(
        select(col(LeaveType.organisation_id))
        .where(col(LeaveType.accrues).is_(True), col(LeaveType.is_active).is_(True))
        .distinct()
    )
    return [row[0] for row in result.all()]
