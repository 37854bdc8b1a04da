from sqlmodel import SQLModel

from leave_engine.models.adjustment import LeaveAdjustment
from leave_engine.models.audit import AuditLog
from leave_engine.models.balance import LeaveBalance
from leave_engine.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from leave_engine.models.enums import (
    AccrualFrequency,
    AuditAction,
    AuditEntityType,
    EmployeeStatus,
    EmploymentType,
    LedgerCauseType,
    RequestStatus,
)
from leave_engine.models.ledger import LeaveLedgerEntry
from leave_engine.models.leave_type import LeaveType
from leave_engine.models.request import LeaveRequest

__all__ = [
    "AccrualFrequency",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "EmployeeStatus",
    "EmploymentType",
    "LeaveAdjustment",
    "LeaveBalance",
    "LeaveLedgerEntry",
    "LeaveRequest",
    "LeaveType",
    "LedgerCauseType",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "UpdatedAtMixin",
]
