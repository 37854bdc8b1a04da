from __future__ import annotations

import enum


class AccrualFrequency(enum.StrEnum):
    """How often an accruing leave type credits hours."""

    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    ANNUALLY = "annually"


class EmploymentType(enum.StrEnum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CASUAL = "casual"
    CONTRACTOR = "contractor"


class EmployeeStatus(enum.StrEnum):
    """Status reported by the Employee Directory."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ONBOARDING = "onboarding"
    OFFBOARDING = "offboarding"
    TERMINATED = "terminated"


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LedgerCauseType(enum.StrEnum):
    """What caused a balance delta."""

    REQUEST_DEDUCTION = "REQUEST_DEDUCTION"
    REQUEST_RESTORATION = "REQUEST_RESTORATION"
    ADJUSTMENT = "ADJUSTMENT"
    ACCRUAL = "ACCRUAL"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_TYPE = "LEAVE_TYPE"
    LEAVE_REQUEST = "LEAVE_REQUEST"
    LEAVE_ADJUSTMENT = "LEAVE_ADJUSTMENT"
    ACCRUAL = "ACCRUAL"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    OVERRIDE = "OVERRIDE"
