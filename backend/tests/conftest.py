from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING

import pytest

# Tests default to an in-memory SQLite database; set DATABASE_URL to run them against PostgreSQL.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leave_engine.config import get_settings
from leave_engine.db import get_session
from leave_engine.main import app
from leave_engine.models import SQLModel
from leave_engine.models.enums import EmploymentType
from leave_engine.services.employee import EmployeeInfo, InMemoryEmployeeDirectory, set_employee_directory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

ORG_ID = uuid.uuid4()
ADMIN_ID = uuid.uuid4()
MANAGER_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()


def headers(user_id: uuid.UUID, role: str, organisation_id: uuid.UUID = ORG_ID) -> dict[str, str]:
    return {
        "X-Organisation-Id": str(organisation_id),
        "X-User-Id": str(user_id),
        "X-Role": role,
    }


ADMIN_HEADERS = headers(ADMIN_ID, "admin")
MANAGER_HEADERS = headers(MANAGER_ID, "manager")
EMPLOYEE_HEADERS = headers(EMPLOYEE_ID, "employee")


def is_sqlite() -> bool:
    return get_settings().database_url.startswith("sqlite")


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLite honour SAVEPOINT by taking over BEGIN from the driver."""

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection: object, connection_record: object) -> None:
        dbapi_connection.isolation_level = None  # type: ignore[attr-defined]

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn: object) -> None:
        conn.exec_driver_sql("BEGIN")  # type: ignore[attr-defined]


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create a fresh schema for each test and drop it afterwards."""
    settings = get_settings()
    if is_sqlite():
        _engine = create_async_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        _enable_sqlite_savepoints(_engine)
    else:
        _engine = create_async_engine(settings.database_url)

    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        try:
            yield db_session
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def directory() -> Iterator[InMemoryEmployeeDirectory]:
    """A fresh in-memory directory holding one active full-time employee."""
    svc = InMemoryEmployeeDirectory()
    svc.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID,
            organisation_id=ORG_ID,
            first_name="Test",
            last_name="Employee",
            email="test@example.com",
            employment_type=EmploymentType.FULL_TIME,
        )
    )
    set_employee_directory(svc)
    yield svc
    set_employee_directory(InMemoryEmployeeDirectory())


@pytest.fixture
def add_employee(directory: InMemoryEmployeeDirectory) -> Callable[..., EmployeeInfo]:
    """Seed another employee into the directory and return it."""

    def _add(**overrides: object) -> EmployeeInfo:
        data: dict[str, object] = {
            "id": uuid.uuid4(),
            "organisation_id": ORG_ID,
            "first_name": "Other",
            "last_name": "Person",
            "email": "other@example.com",
            "employment_type": EmploymentType.FULL_TIME,
        }
        data.update(overrides)
        employee = EmployeeInfo(**data)  # type: ignore[arg-type]
        directory.seed(employee)
        return employee

    return _add
