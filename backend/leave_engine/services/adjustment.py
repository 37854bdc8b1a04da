# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_engine.config import get_settings
from leave_engine.exceptions import NotFoundError, ValidationError
from leave_engine.models.adjustment import LeaveAdjustment
from leave_engine.models.enums import AuditAction, AuditEntityType, LedgerCauseType
from leave_engine.schemas.adjustment import AdjustmentListResponse, AdjustmentResponse
from leave_engine.services.audit import model_to_audit_dict, write_audit_log
from leave_engine.services.employee import get_employee_directory
from leave_engine.services.leave_type import get_leave_type
from leave_engine.services.ledger import Cause, apply_delta, get_balance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.schemas.auth import AuthContext

logger = logging.getLogger(__name__)


def _build_adjustment_response(adjustment: LeaveAdjustment) -> AdjustmentResponse:
    """Map an adjustment model to its response schema."""
    return AdjustmentResponse(
        id=adjustment.id,
        organisation_id=adjustment.organisation_id,
        employee_id=adjustment.employee_id,
        leave_type_id=adjustment.leave_type_id,
        delta_hours=adjustment.delta_hours,
        reason=adjustment.reason,
        actor_id=adjustment.actor_id,
        balance_id=adjustment.balance_id,
        balance_version=adjustment.balance_version,
        balance_after_hours=adjustment.balance_after_hours,
        created_at=adjustment.created_at,
    )


def validate_adjustment(delta_hours: Decimal, reason: str | None) -> str:
    """Check an adjustment before anything is written. Returns the trimmed reason."""
    if delta_hours == 0:
        raise ValidationError("Adjustment hours cannot be zero")
    min_length = get_settings().adjustment_min_reason_length
    cleaned = (reason or "").strip()
    if len(cleaned) < min_length:
        raise ValidationError(f"Reason must be at least {min_length} characters")
    return cleaned


async def record_adjustment(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    delta_hours: Decimal,
    reason: str,
) -> AdjustmentResponse:
    """Apply a manual correction and persist its immutable adjustment record.

    Flow:
    1. Validate delta and reason (nothing written on failure)
    2. Confirm the employee exists in the directory
    3. Refuse to take the balance below zero, then apply the delta
    4. Insert the adjustment row referencing the resulting balance version
    5. Write audit log with before/after balance
    6. Commit
    """
    # 1. Validate.
    cleaned_reason = validate_adjustment(delta_hours, reason)

    # 2. Employee must be known; inactive employees can still be corrected.
    employee = await get_employee_directory().get_employee(auth.organisation_id, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")

    # 3. Balance floor, then the ledger write. The adjustment id doubles as the cause reference.
    await get_leave_type(session, auth.organisation_id, leave_type_id)
    balance = await get_balance(session, employee_id, leave_type_id, for_update=True)
    current = balance.balance_hours if balance is not None else Decimal(0)
    if delta_hours < 0 and current + delta_hours < 0:
        raise ValidationError(f"Adjustment would take the balance below zero ({current} hours available)")

    adjustment_id = uuid.uuid4()
    result = await apply_delta(
        session,
        organisation_id=auth.organisation_id,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        delta_hours=delta_hours,
        cause=Cause(LedgerCauseType.ADJUSTMENT, str(adjustment_id)),
        expected_version=balance.version if balance is not None else None,
    )

    # 4. Adjustment record.
    adjustment = LeaveAdjustment(
        id=adjustment_id,
        organisation_id=auth.organisation_id,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        delta_hours=delta_hours,
        reason=cleaned_reason,
        actor_id=auth.user_id,
        balance_id=result.balance.id,
        balance_version=result.balance.version,
        balance_after_hours=result.new_balance,
    )
    session.add(adjustment)
    await session.flush()

    # 5. Audit.
    await write_audit_log(
        session,
        organisation_id=auth.organisation_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_ADJUSTMENT,
        entity_id=adjustment.id,
        action=AuditAction.CREATE,
        before_json={"balance_hours": str(result.new_balance - delta_hours)},
        after_json=model_to_audit_dict(adjustment),
    )

    # 6. Commit.
    await session.commit()
    logger.info(
        "Adjusted balance %s by %s hours (actor=%s): %s",
        result.balance.id,
        delta_hours,
        auth.user_id,
        cleaned_reason,
    )
    return _build_adjustment_response(adjustment)


async def list_adjustments(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID | None = None,
    leave_type_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AdjustmentListResponse:
    """Adjustment history, newest first."""
    filters = [col(LeaveAdjustment.organisation_id) == organisation_id]
    if employee_id is not None:
        filters.append(col(LeaveAdjustment.employee_id) == employee_id)
    if leave_type_id is not None:
        filters.append(col(LeaveAdjustment.leave_type_id) == leave_type_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveAdjustment).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveAdjustment)
        .where(*filters)
        .order_by(col(LeaveAdjustment.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return AdjustmentListResponse(
        items=[_build_adjustment_response(a) for a in result.scalars().all()],
        total=total,
    )
