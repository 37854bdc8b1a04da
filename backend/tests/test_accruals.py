"""Tests for the accrual engine: period math, cap clamping, re-runs and failures."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select
from sqlmodel import col

from conftest import ADMIN_HEADERS, EMPLOYEE_HEADERS, EMPLOYEE_ID, ORG_ID
from leave_engine.models.enums import AccrualFrequency, EmployeeStatus, EmploymentType, LedgerCauseType
from leave_engine.models.leave_type import LeaveType
from leave_engine.models.ledger import LeaveLedgerEntry
from leave_engine.services.accrual import (
    advance_periods,
    compute_credit,
    elapsed_periods,
    list_accruing_organisations,
    run_accruals,
)
from leave_engine.services.ledger import get_balance

if TYPE_CHECKING:
    from collections.abc import Callable

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.services.employee import EmployeeInfo, InMemoryEmployeeDirectory

AS_OF = date(2026, 3, 2)
START = AS_OF - timedelta(days=28)


# ---------------------------------------------------------------------------
# Period math (no DB)
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("frequency", "anchor", "as_of", "expected"),
    [
        (AccrualFrequency.WEEKLY, date(2026, 1, 1), date(2026, 1, 15), 2),
        (AccrualFrequency.WEEKLY, date(2026, 1, 1), date(2026, 1, 14), 1),
        (AccrualFrequency.FORTNIGHTLY, date(2026, 1, 1), date(2026, 1, 29), 2),
        (AccrualFrequency.FORTNIGHTLY, date(2026, 1, 1), date(2026, 1, 14), 0),
        (AccrualFrequency.MONTHLY, date(2026, 1, 15), date(2026, 2, 14), 0),
        (AccrualFrequency.MONTHLY, date(2026, 1, 15), date(2026, 4, 15), 3),
        (AccrualFrequency.MONTHLY, date(2026, 1, 31), date(2026, 2, 28), 1),
        (AccrualFrequency.ANNUALLY, date(2024, 2, 29), date(2025, 2, 28), 1),
        (AccrualFrequency.ANNUALLY, date(2025, 7, 1), date(2026, 6, 30), 0),
        (AccrualFrequency.MONTHLY, date(2026, 3, 1), date(2026, 1, 1), 0),
    ],
)
def test_elapsed_periods(frequency: AccrualFrequency, anchor: date, as_of: date, expected: int) -> None:
    assert elapsed_periods(frequency, anchor, as_of) == expected


def test_advance_periods_clamps_month_end() -> None:
    assert advance_periods(AccrualFrequency.MONTHLY, date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert advance_periods(AccrualFrequency.MONTHLY, date(2026, 11, 30), 3) == date(2027, 2, 28)
    assert advance_periods(AccrualFrequency.ANNUALLY, date(2024, 2, 29), 1) == date(2025, 2, 28)
    assert advance_periods(AccrualFrequency.FORTNIGHTLY, date(2026, 1, 1), 2) == date(2026, 1, 29)


def test_month_end_day_survives_short_month() -> None:
    feb = advance_periods(AccrualFrequency.MONTHLY, date(2025, 1, 31), 1)
    assert feb == date(2025, 2, 28)
    assert advance_periods(AccrualFrequency.MONTHLY, feb, 1, day=31) == date(2025, 3, 31)
    assert elapsed_periods(AccrualFrequency.MONTHLY, feb, date(2025, 3, 30), day=31) == 0
    assert elapsed_periods(AccrualFrequency.MONTHLY, feb, date(2025, 3, 31), day=31) == 1
    assert advance_periods(AccrualFrequency.ANNUALLY, date(2025, 2, 28), 3, day=29) == date(2028, 2, 29)


def test_compute_credit_without_cap() -> None:
    assert compute_credit(Decimal("6.08"), 3, Decimal(100), None) == Decimal("18.24")


def test_compute_credit_clamped_to_cap() -> None:
    assert compute_credit(Decimal("6.08"), 3, Decimal(300), Decimal(304)) == Decimal(4)


@pytest.mark.parametrize("current", [Decimal(304), Decimal(320)])
def test_compute_credit_never_negative(current: Decimal) -> None:
    assert compute_credit(Decimal("6.08"), 2, current, Decimal(304)) == Decimal(0)


def test_compute_credit_zero_periods() -> None:
    assert compute_credit(Decimal("6.08"), 0, Decimal(0), None) == Decimal(0)


# ---------------------------------------------------------------------------
# Engine (DB)
# ---------------------------------------------------------------------------


async def _leave_type(session: AsyncSession, **overrides: Any) -> LeaveType:
    data: dict[str, Any] = {
        "organisation_id": ORG_ID,
        "name": f"Annual {uuid.uuid4().hex[:6]}",
        "accrues": True,
        "accrual_rate_hours": Decimal("6.08"),
        "accrual_frequency": AccrualFrequency.FORTNIGHTLY.value,
    }
    data.update(overrides)
    leave_type = LeaveType(**data)
    session.add(leave_type)
    await session.commit()
    return leave_type


@pytest.fixture
async def started_employee(directory: InMemoryEmployeeDirectory) -> EmployeeInfo:
    """The default employee with a start date four weeks before AS_OF."""
    employee = await directory.get_employee(ORG_ID, EMPLOYEE_ID)
    assert employee is not None
    started = employee.model_copy(update={"start_date": START})
    directory.seed(started)
    return started


@pytest.mark.usefixtures("started_employee")
async def test_credits_elapsed_periods_since_start(db_session: AsyncSession) -> None:
    leave_type = await _leave_type(db_session)

    result = await run_accruals(db_session, ORG_ID, AS_OF)

    assert result.employees_credited == 1
    assert result.total_hours_credited == Decimal("12.16")
    assert result.failures == []
    balance = await get_balance(db_session, EMPLOYEE_ID, leave_type.id)
    assert balance is not None
    assert balance.balance_hours == Decimal("12.16")
    assert balance.last_accrual_at is not None
    assert balance.last_accrual_at.date() == AS_OF


@pytest.mark.usefixtures("started_employee")
async def test_second_run_same_period_credits_nothing(db_session: AsyncSession) -> None:
    leave_type = await _leave_type(db_session)
    await run_accruals(db_session, ORG_ID, AS_OF)

    result = await run_accruals(db_session, ORG_ID, AS_OF + timedelta(days=3))

    assert result.total_hours_credited == Decimal(0)
    assert result.employees_credited == 0
    balance = await get_balance(db_session, EMPLOYEE_ID, leave_type.id)
    assert balance is not None
    assert balance.balance_hours == Decimal("12.16")
    assert balance.version == 1


@pytest.mark.usefixtures("started_employee")
async def test_marker_advances_by_whole_periods_only(db_session: AsyncSession) -> None:
    leave_type = await _leave_type(db_session)

    await run_accruals(db_session, ORG_ID, AS_OF + timedelta(days=10))
    balance = await get_balance(db_session, EMPLOYEE_ID, leave_type.id)
    assert balance is not None
    assert balance.last_accrual_at is not None
    assert balance.last_accrual_at.date() == AS_OF

    # Four more days completes the third fortnight counted from the marker.
    result = await run_accruals(db_session, ORG_ID, AS_OF + timedelta(days=14))
    assert result.total_hours_credited == Decimal("6.08")


@pytest.mark.usefixtures("started_employee")
async def test_cap_clamps_credit(db_session: AsyncSession) -> None:
    leave_type = await _leave_type(db_session, max_balance_hours=Decimal(10))

    result = await run_accruals(db_session, ORG_ID, AS_OF)

    assert result.total_hours_credited == Decimal(10)
    balance = await get_balance(db_session, EMPLOYEE_ID, leave_type.id)
    assert balance is not None
    assert balance.balance_hours == Decimal(10)
    assert balance.last_accrual_at is not None
    assert balance.last_accrual_at.date() == AS_OF

    result = await run_accruals(db_session, ORG_ID, AS_OF + timedelta(days=14))
    assert result.total_hours_credited == Decimal(0)
    balance = await get_balance(db_session, EMPLOYEE_ID, leave_type.id, for_update=True)
    assert balance is not None
    assert balance.balance_hours == Decimal(10)


async def test_monthly_marker_returns_to_month_end(
    db_session: AsyncSession,
    directory: InMemoryEmployeeDirectory,
) -> None:
    employee = await directory.get_employee(ORG_ID, EMPLOYEE_ID)
    assert employee is not None
    directory.seed(employee.model_copy(update={"start_date": date(2025, 1, 31)}))
    leave_type = await _leave_type(
        db_session,
        accrual_frequency=AccrualFrequency.MONTHLY.value,
        accrual_rate_hours=Decimal(10),
    )

    expected_markers = [
        (date(2025, 2, 28), date(2025, 2, 28), Decimal(10)),
        # The March period is not complete until the 31st.
        (date(2025, 3, 30), date(2025, 2, 28), Decimal(0)),
        (date(2025, 3, 31), date(2025, 3, 31), Decimal(10)),
        (date(2025, 4, 30), date(2025, 4, 30), Decimal(10)),
        (date(2025, 5, 30), date(2025, 4, 30), Decimal(0)),
        (date(2025, 5, 31), date(2025, 5, 31), Decimal(10)),
    ]
    for run_date, marker, credited in expected_markers:
        result = await run_accruals(db_session, ORG_ID, run_date)
        assert result.total_hours_credited == credited, run_date
        balance = await get_balance(db_session, EMPLOYEE_ID, leave_type.id, for_update=True)
        assert balance is not None
        assert balance.last_accrual_at is not None
        assert balance.last_accrual_at.date() == marker, run_date

    assert balance.balance_hours == Decimal(40)
    assert balance.accrual_anchor_day == 31


async def test_employee_without_start_date_starts_clock(
    db_session: AsyncSession,
    directory: InMemoryEmployeeDirectory,
) -> None:
    leave_type = await _leave_type(db_session)

    first = await run_accruals(db_session, ORG_ID, AS_OF)
    assert first.total_hours_credited == Decimal(0)
    balance = await get_balance(db_session, EMPLOYEE_ID, leave_type.id)
    assert balance is not None
    assert balance.balance_hours == Decimal(0)

    second = await run_accruals(db_session, ORG_ID, AS_OF + timedelta(days=14))
    assert second.total_hours_credited == Decimal("6.08")


@pytest.mark.usefixtures("started_employee")
async def test_skips_ineligible_pairs(
    db_session: AsyncSession,
    add_employee: Callable[..., EmployeeInfo],
) -> None:
    eligible = await _leave_type(db_session)
    await _leave_type(db_session, accrues=False)
    await _leave_type(db_session, is_active=False)
    await _leave_type(db_session, applicable_employment_types=[EmploymentType.CASUAL.value])
    add_employee(status=EmployeeStatus.INACTIVE, start_date=START)

    result = await run_accruals(db_session, ORG_ID, AS_OF)

    assert result.pairs_processed == 1
    assert result.employees_credited == 1
    rows = await db_session.execute(select(LeaveLedgerEntry))
    entries = list(rows.scalars().all())
    assert [e.leave_type_id for e in entries] == [eligible.id]


@pytest.mark.usefixtures("started_employee")
async def test_accrual_entry_cause(db_session: AsyncSession) -> None:
    leave_type = await _leave_type(db_session)
    await run_accruals(db_session, ORG_ID, AS_OF)

    rows = await db_session.execute(select(LeaveLedgerEntry).where(col(LeaveLedgerEntry.leave_type_id) == leave_type.id))
    entry = rows.scalar_one()
    assert entry.cause_type == LedgerCauseType.ACCRUAL
    assert entry.cause_ref == f"accrual:{EMPLOYEE_ID}:{leave_type.id}:{AS_OF.isoformat()}"


@pytest.mark.usefixtures("started_employee")
async def test_failed_pair_is_reported_and_run_continues(db_session: AsyncSession) -> None:
    broken = await _leave_type(db_session, accrual_frequency="hourly", display_order=0)
    healthy = await _leave_type(db_session, display_order=1)

    result = await run_accruals(db_session, ORG_ID, AS_OF)

    assert len(result.failures) == 1
    assert result.failures[0].leave_type_id == broken.id
    assert result.failures[0].error == "ValueError"
    assert result.total_hours_credited == Decimal("12.16")
    balance = await get_balance(db_session, EMPLOYEE_ID, healthy.id)
    assert balance is not None
    assert balance.balance_hours == Decimal("12.16")
    assert await get_balance(db_session, EMPLOYEE_ID, broken.id) is None


async def test_list_accruing_organisations(db_session: AsyncSession) -> None:
    other_org = uuid.uuid4()
    await _leave_type(db_session)
    await _leave_type(db_session, organisation_id=other_org, accrues=False)

    assert await list_accruing_organisations(db_session) == [ORG_ID]


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


@pytest.mark.usefixtures("started_employee")
async def test_run_endpoint_returns_summary(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await _leave_type(db_session)

    resp = await async_client.post(
        f"/organisations/{ORG_ID}/accruals/run",
        params={"as_of": AS_OF.isoformat()},
        headers=ADMIN_HEADERS,
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["as_of"] == AS_OF.isoformat()
    assert data["employees_credited"] == 1
    assert Decimal(data["total_hours_credited"]) == Decimal("12.16")
    assert data["failures"] == []


async def test_run_endpoint_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(f"/organisations/{ORG_ID}/accruals/run", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403
