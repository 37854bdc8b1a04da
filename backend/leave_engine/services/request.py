# ruff: noqa: TC003
"""Leave request workflow.

States: pending -> approved | rejected, approved -> cancelled. Rejected and
cancelled are terminal. Balance is only touched on approve (deduct) and on
cancel of a request whose hours were deducted (restore).
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_engine.config import get_settings
from leave_engine.exceptions import (
    ForbiddenError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from leave_engine.models.base import now_utc
from leave_engine.models.enums import AuditAction, AuditEntityType, LedgerCauseType, RequestStatus
from leave_engine.models.request import LeaveRequest
from leave_engine.schemas.request import LeaveRequestListResponse, LeaveRequestResponse
from leave_engine.services.audit import model_to_audit_dict, write_audit_log
from leave_engine.services.duration import estimate_request_hours
from leave_engine.services.employee import EmployeeInfo, get_employee_directory
from leave_engine.services.leave_type import get_leave_type, is_applicable
from leave_engine.services.ledger import Cause, apply_delta, get_balance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.schemas.auth import AuthContext
    from leave_engine.schemas.request import ApprovePayload, CreateLeaveRequestPayload, DecisionPayload

logger = logging.getLogger(__name__)

# Legal transitions: action -> status it must be in.
_REQUIRED_STATUS = {
    AuditAction.APPROVE: RequestStatus.PENDING,
    AuditAction.REJECT: RequestStatus.PENDING,
    AuditAction.CANCEL: RequestStatus.APPROVED,
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        organisation_id=request.organisation_id,
        employee_id=request.employee_id,
        leave_type_id=request.leave_type_id,
        start_date=request.start_date,
        end_date=request.end_date,
        hours=request.hours,
        reason=request.reason,
        status=RequestStatus(request.status),
        decided_by=request.decided_by,
        decided_at=request.decided_at,
        decision_reason=request.decision_reason,
        cancelled_by=request.cancelled_by,
        cancelled_at=request.cancelled_at,
        cancellation_reason=request.cancellation_reason,
        balance_deducted=request.balance_deducted,
        override_reason=request.override_reason,
        created_at=request.created_at,
    )


async def _get_request_or_404(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a request by ID scoped to the organisation. Raises 404 if not found."""
    query = select(LeaveRequest).where(
        col(LeaveRequest.id) == request_id,
        col(LeaveRequest.organisation_id) == organisation_id,
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Leave request not found")
    return request


def _require_status(request: LeaveRequest, action: AuditAction) -> None:
    required = _REQUIRED_STATUS[action]
    if request.status != required.value:
        raise InvalidTransitionError(
            f"Cannot {action.value.lower()} a request that is {request.status}; it must be {required.value}"
        )


async def _get_active_employee(
    organisation_id: uuid.UUID,
    employee_id: uuid.UUID,
) -> EmployeeInfo:
    employee = await get_employee_directory().get_employee(organisation_id, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    if not employee.is_active:
        raise ValidationError(f"Employee is {employee.status.value}; only active employees can take leave")
    return employee


async def _finish_transition(
    session: AsyncSession,
    auth: AuthContext,
    request: LeaveRequest,
    action: AuditAction,
    before: dict[str, object],
) -> LeaveRequestResponse:
    request.updated_at = now_utc()
    await session.flush()

    await write_audit_log(
        session,
        organisation_id=auth.organisation_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=request.id,
        action=action,
        before_json=before,
        after_json=model_to_audit_dict(request),
    )

    await session.commit()
    logger.info("Leave request %s: %s -> %s by %s", request.id, before["status"], request.status, auth.user_id)
    return _build_request_response(request)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """Create a pending leave request. The balance is not touched.

    Employees may only create requests for themselves; managers and admins
    may create them on anyone's behalf.
    """
    if not auth.is_approver and auth.user_id != payload.employee_id:
        raise ForbiddenError("Employees can only request leave for themselves")

    if payload.end_date < payload.start_date:
        raise ValidationError("end_date must be on or after start_date")

    employee = await _get_active_employee(auth.organisation_id, payload.employee_id)

    leave_type = await get_leave_type(session, auth.organisation_id, payload.leave_type_id)
    if not leave_type.is_active:
        raise ValidationError(f"Leave type '{leave_type.name}' is not active")
    if not is_applicable(leave_type, employee.employment_type):
        raise ValidationError(
            f"Leave type '{leave_type.name}' does not apply to {employee.employment_type.value} employees"
        )

    hours = payload.hours
    if hours is None:
        hours = estimate_request_hours(payload.start_date, payload.end_date, get_settings().default_workday_hours)
    if hours <= 0:
        raise ValidationError("Requested hours must be greater than zero")

    request = LeaveRequest(
        organisation_id=auth.organisation_id,
        employee_id=payload.employee_id,
        leave_type_id=leave_type.id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        hours=hours,
        reason=payload.reason,
        status=RequestStatus.PENDING.value,
    )
    session.add(request)
    await session.flush()

    await write_audit_log(
        session,
        organisation_id=auth.organisation_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=request.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(request),
    )

    await session.commit()
    logger.info("Created leave request %s for employee %s (%s hours)", request.id, request.employee_id, hours)
    return _build_request_response(request)


async def approve_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: ApprovePayload | None = None,
) -> LeaveRequestResponse:
    """Approve a pending request and deduct its hours.

    If the current balance is below the requested hours the approval is
    refused with InsufficientBalanceError unless ``override`` is set together
    with a non-empty reason; an override may take the balance negative and
    its reason is stored on the request.
    """
    reason = payload.reason.strip() if payload and payload.reason else None
    override = payload.override if payload else False
    if override and not reason:
        raise ValidationError("A reason is required to override an insufficient balance")

    request = await _get_request_or_404(session, auth.organisation_id, request_id, for_update=True)
    _require_status(request, AuditAction.APPROVE)
    await _get_active_employee(auth.organisation_id, request.employee_id)

    before = model_to_audit_dict(request)
    now = now_utc()
    action = AuditAction.APPROVE

    if request.leave_type_id is not None:
        await get_leave_type(session, auth.organisation_id, request.leave_type_id)
        balance = await get_balance(session, request.employee_id, request.leave_type_id, for_update=True)
        current = balance.balance_hours if balance is not None else Decimal(0)

        if current < request.hours:
            if not override:
                raise InsufficientBalanceError(
                    f"Insufficient balance: {current} hours available, {request.hours} requested"
                )
            request.override_reason = reason
            action = AuditAction.OVERRIDE
            logger.warning(
                "Approving leave request %s over balance (%s < %s): %s",
                request.id,
                current,
                request.hours,
                reason,
            )

        await apply_delta(
            session,
            organisation_id=auth.organisation_id,
            employee_id=request.employee_id,
            leave_type_id=request.leave_type_id,
            delta_hours=-request.hours,
            cause=Cause(LedgerCauseType.REQUEST_DEDUCTION, str(request.id)),
            expected_version=balance.version if balance is not None else None,
        )
        request.balance_deducted = True

    request.status = RequestStatus.APPROVED.value
    request.decided_by = auth.user_id
    request.decided_at = now
    request.decision_reason = reason

    return await _finish_transition(session, auth, request, action, before)


async def reject_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: DecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Reject a pending request. No balance effect."""
    request = await _get_request_or_404(session, auth.organisation_id, request_id, for_update=True)
    _require_status(request, AuditAction.REJECT)

    before = model_to_audit_dict(request)
    request.status = RequestStatus.REJECTED.value
    request.decided_by = auth.user_id
    request.decided_at = now_utc()
    request.decision_reason = payload.reason if payload else None

    return await _finish_transition(session, auth, request, AuditAction.REJECT, before)


async def cancel_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: DecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Cancel an approved request, restoring deducted hours.

    The employee who owns the request, a manager or an admin can cancel.
    """
    request = await _get_request_or_404(session, auth.organisation_id, request_id, for_update=True)

    if auth.user_id != request.employee_id and not auth.is_approver:
        raise ForbiddenError("Not authorized to cancel this request")

    _require_status(request, AuditAction.CANCEL)

    before = model_to_audit_dict(request)

    if request.balance_deducted and request.leave_type_id is not None:
        await apply_delta(
            session,
            organisation_id=auth.organisation_id,
            employee_id=request.employee_id,
            leave_type_id=request.leave_type_id,
            delta_hours=request.hours,
            cause=Cause(LedgerCauseType.REQUEST_RESTORATION, str(request.id)),
        )
        request.balance_deducted = False

    request.status = RequestStatus.CANCELLED.value
    request.cancelled_by = auth.user_id
    request.cancelled_at = now_utc()
    request.cancellation_reason = payload.reason if payload else None

    return await _finish_transition(session, auth, request, AuditAction.CANCEL, before)


async def get_request(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single request by ID."""
    request = await _get_request_or_404(session, organisation_id, request_id)
    return _build_request_response(request)


async def list_requests(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    status_filter: RequestStatus | None = None,
    employee_id: uuid.UUID | None = None,
    leave_type_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List requests with optional filters, newest first.

    ``start_date``/``end_date`` keep requests that start on/after and end
    on/before the given dates.
    """
    base_filters = [col(LeaveRequest.organisation_id) == organisation_id]

    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)
    if employee_id is not None:
        base_filters.append(col(LeaveRequest.employee_id) == employee_id)
    if leave_type_id is not None:
        base_filters.append(col(LeaveRequest.leave_type_id) == leave_type_id)
    if start_date is not None:
        base_filters.append(col(LeaveRequest.start_date) >= start_date)
    if end_date is not None:
        base_filters.append(col(LeaveRequest.end_date) <= end_date)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return LeaveRequestListResponse(
        items=[_build_request_response(r) for r in requests],
        total=total,
    )
