# ruff: noqa: TC003
"""Leave type registry: the per-organisation catalog of leave categories."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from leave_engine.exceptions import ConflictError, UnknownLeaveTypeError, ValidationError
from leave_engine.models.base import now_utc
from leave_engine.models.enums import AccrualFrequency, AuditAction, AuditEntityType, EmploymentType
from leave_engine.models.leave_type import LeaveType
from leave_engine.schemas.leave_type import LeaveTypeListResponse, LeaveTypeResponse
from leave_engine.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.schemas.auth import AuthContext
    from leave_engine.schemas.leave_type import CreateLeaveTypeRequest, UpdateLeaveTypeRequest

logger = logging.getLogger(__name__)

_PERMANENT = [EmploymentType.FULL_TIME.value, EmploymentType.PART_TIME.value]
_EVERYONE = [t.value for t in EmploymentType]

# Standard catalog installed by seed_default_leave_types.
DEFAULT_LEAVE_TYPES: list[dict[str, Any]] = [
    {
        "name": "Annual Leave",
        "description": "Standard annual leave entitlement",
        "accrues": True,
        "accrual_rate_hours": Decimal("6.08"),
        "max_balance_hours": Decimal("304.00"),
        "paid": True,
        "applicable_employment_types": _PERMANENT,
    },
    {
        "name": "Personal/Sick Leave",
        "description": "Personal/carer's leave",
        "accrues": True,
        "accrual_rate_hours": Decimal("3.08"),
        "max_balance_hours": Decimal("152.00"),
        "paid": True,
        "applicable_employment_types": _PERMANENT,
    },
    {
        "name": "Compassionate Leave",
        "description": "Leave for bereavement or family emergency",
        "accrues": False,
        "paid": True,
        "applicable_employment_types": _EVERYONE,
    },
    {
        "name": "Parental Leave",
        "description": "Maternity/paternity/adoption leave",
        "accrues": False,
        "paid": True,
        "applicable_employment_types": _PERMANENT,
    },
    {
        "name": "Unpaid Leave",
        "description": "Leave without pay",
        "accrues": False,
        "paid": False,
        "applicable_employment_types": _EVERYONE,
    },
    {
        "name": "Other",
        "description": "Other leave types",
        "accrues": False,
        "paid": False,
        "applicable_employment_types": _EVERYONE,
    },
]


def _build_leave_type_response(leave_type: LeaveType) -> LeaveTypeResponse:
    """Map a leave type model to its response schema."""
    return LeaveTypeResponse(
        id=leave_type.id,
        organisation_id=leave_type.organisation_id,
        name=leave_type.name,
        description=leave_type.description,
        paid=leave_type.paid,
        accrues=leave_type.accrues,
        accrual_rate_hours=leave_type.accrual_rate_hours,
        accrual_frequency=AccrualFrequency(leave_type.accrual_frequency),
        max_balance_hours=leave_type.max_balance_hours,
        applicable_employment_types=[EmploymentType(t) for t in leave_type.applicable_employment_types],
        is_active=leave_type.is_active,
        display_order=leave_type.display_order,
        created_at=leave_type.created_at,
        updated_at=leave_type.updated_at,
    )


async def _ensure_unique_name(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    name: str,
    exclude_id: uuid.UUID | None = None,
) -> None:
    query = select(LeaveType).where(
        col(LeaveType.organisation_id) == organisation_id,
        col(LeaveType.name) == name,
    )
    if exclude_id is not None:
        query = query.where(col(LeaveType.id) != exclude_id)
    result = await session.execute(query)
    if result.scalar_one_or_none() is not None:
        raise ConflictError("A leave type with this name already exists")


# ---------------------------------------------------------------------------
# Read contract
# ---------------------------------------------------------------------------


async def get_leave_type(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> LeaveType:
    """Fetch a leave type scoped to the organisation.

    Raises UnknownLeaveTypeError if it does not exist or belongs to another
    organisation. Inactive types are returned; callers decide what that means.
    """
    result = await session.execute(
        select(LeaveType).where(
            col(LeaveType.id) == leave_type_id,
            col(LeaveType.organisation_id) == organisation_id,
        )
    )
    leave_type = result.scalar_one_or_none()
    if leave_type is None:
        raise UnknownLeaveTypeError(f"Leave type {leave_type_id} not found")
    return leave_type


async def list_active_for_employment_type(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    employment_type: EmploymentType | str,
) -> list[LeaveType]:
    """Active leave types that apply to the given employment type, in display order."""
    result = await session.execute(
        select(LeaveType)
        .where(
            col(LeaveType.organisation_id) == organisation_id,
            col(LeaveType.is_active).is_(True),
        )
        .order_by(col(LeaveType.display_order), col(LeaveType.name))
    )
    wanted = str(employment_type)
    return [lt for lt in result.scalars().all() if wanted in lt.applicable_employment_types]


def is_applicable(leave_type: LeaveType, employment_type: EmploymentType | str) -> bool:
    return str(employment_type) in leave_type.applicable_employment_types


async def list_leave_types(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    include_inactive: bool = False,
) -> LeaveTypeListResponse:
    """List the organisation's leave types ordered by display order."""
    query = select(LeaveType).where(col(LeaveType.organisation_id) == organisation_id)
    if not include_inactive:
        query = query.where(col(LeaveType.is_active).is_(True))
    result = await session.execute(query.order_by(col(LeaveType.display_order), col(LeaveType.name)))
    items = [_build_leave_type_response(lt) for lt in result.scalars().all()]
    return LeaveTypeListResponse(items=items, total=len(items))


async def get_leave_type_response(
    session: AsyncSession,
    organisation_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> LeaveTypeResponse:
    return _build_leave_type_response(await get_leave_type(session, organisation_id, leave_type_id))


# ---------------------------------------------------------------------------
# Admin writes
# ---------------------------------------------------------------------------


async def create_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Create a leave type for the caller's organisation."""
    await _ensure_unique_name(session, auth.organisation_id, payload.name)

    leave_type = LeaveType(
        organisation_id=auth.organisation_id,
        name=payload.name,
        description=payload.description,
        paid=payload.paid,
        accrues=payload.accrues,
        accrual_rate_hours=payload.accrual_rate_hours,
        accrual_frequency=payload.accrual_frequency.value,
        max_balance_hours=payload.max_balance_hours,
        applicable_employment_types=[t.value for t in payload.applicable_employment_types],
        is_active=payload.is_active,
        display_order=payload.display_order,
    )
    session.add(leave_type)
    await session.flush()

    await write_audit_log(
        session,
        organisation_id=auth.organisation_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    logger.info("Created leave type %s (%s) for organisation %s", leave_type.id, leave_type.name, auth.organisation_id)
    return _build_leave_type_response(leave_type)


async def update_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    leave_type_id: uuid.UUID,
    payload: UpdateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Apply a partial update. Existing balances and requests are untouched."""
    leave_type = await get_leave_type(session, auth.organisation_id, leave_type_id)
    before = model_to_audit_dict(leave_type)

    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] != leave_type.name:
        await _ensure_unique_name(session, auth.organisation_id, changes["name"], exclude_id=leave_type.id)

    for field_name, value in changes.items():
        if field_name == "accrual_frequency" and value is not None:
            value = AccrualFrequency(value).value
        elif field_name == "applicable_employment_types" and value is not None:
            value = [EmploymentType(t).value for t in value]
        elif value is None and field_name not in ("description", "max_balance_hours"):
            continue
        setattr(leave_type, field_name, value)

    if leave_type.accrues and leave_type.accrual_rate_hours <= 0:
        raise ValidationError("accrual_rate_hours must be positive for an accruing leave type")

    leave_type.updated_at = now_utc()
    await session.flush()

    await write_audit_log(
        session,
        organisation_id=auth.organisation_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    return _build_leave_type_response(leave_type)


async def seed_default_leave_types(
    session: AsyncSession,
    auth: AuthContext,
) -> LeaveTypeListResponse:
    """Install the standard leave catalog. Names that already exist are skipped."""
    existing = await session.execute(
        select(col(LeaveType.name)).where(col(LeaveType.organisation_id) == auth.organisation_id)
    )
    existing_names = {row[0] for row in existing.all()}

    for order, template in enumerate(DEFAULT_LEAVE_TYPES, start=1):
        if template["name"] in existing_names:
            continue
        leave_type = LeaveType(
            organisation_id=auth.organisation_id,
            accrual_frequency=AccrualFrequency.FORTNIGHTLY.value,
            display_order=order,
            **template,
        )
        session.add(leave_type)
        await session.flush()
        await write_audit_log(
            session,
            organisation_id=auth.organisation_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.LEAVE_TYPE,
            entity_id=leave_type.id,
            action=AuditAction.CREATE,
            after_json=model_to_audit_dict(leave_type),
        )

    await session.commit()
    return await list_leave_types(session, auth.organisation_id)
