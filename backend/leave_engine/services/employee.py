# ruff: noqa: TC003
"""Employee Directory client.

The directory is owned by another system. The engine reads identity,
employment type and status from it; it never writes. The in-memory directory
stands in until a real client is wired with ``set_employee_directory``.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from leave_engine.models.enums import EmployeeStatus, EmploymentType


class EmployeeInfo(BaseModel):
    """Directory record for one employee of one organisation."""

    id: uuid.UUID
    organisation_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    employment_type: EmploymentType
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    start_date: date | None = None  # accrual anchor for never-accrued balances

    @property
    def is_active(self) -> bool:
        """Only active employees may take leave or accrue it."""
        return self.status == EmployeeStatus.ACTIVE


@runtime_checkable
class EmployeeDirectory(Protocol):
    async def get_employee(self, organisation_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None: ...

    async def list_employees(self, organisation_id: uuid.UUID) -> list[EmployeeInfo]: ...


class InMemoryEmployeeDirectory:
    """Directory held in process memory, keyed by organisation."""

    def __init__(self) -> None:
        self._by_organisation: defaultdict[uuid.UUID, dict[uuid.UUID, EmployeeInfo]] = defaultdict(dict)

    def seed(self, employee: EmployeeInfo) -> None:
        """Insert or replace a record."""
        self._by_organisation[employee.organisation_id][employee.id] = employee

    async def get_employee(self, organisation_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None:
        members = self._by_organisation.get(organisation_id)
        return members.get(employee_id) if members else None

    async def list_employees(self, organisation_id: uuid.UUID) -> list[EmployeeInfo]:
        """Employees of one organisation, ordered by surname then first name."""
        members = self._by_organisation.get(organisation_id, {})
        return sorted(members.values(), key=lambda e: (e.last_name, e.first_name, str(e.id)))


_directory: EmployeeDirectory = InMemoryEmployeeDirectory()


def get_employee_directory() -> EmployeeDirectory:
    return _directory


def set_employee_directory(directory: EmployeeDirectory) -> None:
    """Swap in another directory implementation (tests, production client)."""
    global _directory
    _directory = directory
