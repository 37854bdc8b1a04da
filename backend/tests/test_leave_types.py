"""Tests for the leave type registry endpoints."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from conftest import ADMIN_HEADERS, EMPLOYEE_HEADERS, ORG_ID, headers

if TYPE_CHECKING:
    from httpx import AsyncClient

LEAVE_TYPES_URL = f"/organisations/{ORG_ID}/leave-types"


async def _create(client: AsyncClient, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": "Annual Leave",
        "accrues": True,
        "accrual_rate_hours": "6.08",
        "accrual_frequency": "fortnightly",
        "max_balance_hours": "304",
        "applicable_employment_types": ["full_time", "part_time"],
    }
    payload.update(overrides)
    resp = await client.post(LEAVE_TYPES_URL, json=payload, headers=ADMIN_HEADERS)
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def test_create_leave_type(async_client: AsyncClient) -> None:
    data = await _create(async_client)
    assert data["organisation_id"] == str(ORG_ID)
    assert data["name"] == "Annual Leave"
    assert data["accrues"] is True
    assert Decimal(data["accrual_rate_hours"]) == Decimal("6.08")
    assert data["accrual_frequency"] == "fortnightly"
    assert Decimal(data["max_balance_hours"]) == Decimal(304)
    assert data["applicable_employment_types"] == ["full_time", "part_time"]
    assert data["is_active"] is True


async def test_create_defaults_to_all_employment_types(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        LEAVE_TYPES_URL,
        json={"name": "Unpaid", "paid": False},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert set(data["applicable_employment_types"]) == {"full_time", "part_time", "casual", "contractor"}
    assert data["accrues"] is False


async def test_create_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(LEAVE_TYPES_URL, json={"name": "Sneaky"}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403
    assert resp.json()["error"] == "Forbidden"


async def test_create_duplicate_name_conflicts(async_client: AsyncClient) -> None:
    await _create(async_client)
    resp = await async_client.post(
        LEAVE_TYPES_URL,
        json={"name": "Annual Leave"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"


async def test_rename_to_existing_name_conflicts(async_client: AsyncClient) -> None:
    await _create(async_client)
    sick = await _create(async_client, name="Sick Leave")
    resp = await async_client.patch(
        f"{LEAVE_TYPES_URL}/{sick['id']}",
        json={"name": "Annual Leave"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"


async def test_accruing_type_requires_positive_rate(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        LEAVE_TYPES_URL,
        json={"name": "Broken", "accrues": True, "accrual_rate_hours": "0"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"


async def test_negative_cap_rejected(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        LEAVE_TYPES_URL,
        json={"name": "Capped", "max_balance_hours": "-1"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


async def test_get_leave_type(async_client: AsyncClient) -> None:
    created = await _create(async_client)
    resp = await async_client.get(f"{LEAVE_TYPES_URL}/{created['id']}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]


async def test_get_unknown_leave_type(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{LEAVE_TYPES_URL}/{uuid.uuid4()}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 404
    assert resp.json()["error"] == "UnknownLeaveType"


async def test_leave_type_of_another_organisation_is_unknown(async_client: AsyncClient) -> None:
    other_org = uuid.uuid4()
    other_admin = headers(uuid.uuid4(), "admin", other_org)
    resp = await async_client.post(
        f"/organisations/{other_org}/leave-types",
        json={"name": "Foreign"},
        headers=other_admin,
    )
    assert resp.status_code == 201
    foreign_id = resp.json()["id"]

    resp = await async_client.get(f"{LEAVE_TYPES_URL}/{foreign_id}", headers=ADMIN_HEADERS)
    assert resp.status_code == 404
    assert resp.json()["error"] == "UnknownLeaveType"


async def test_organisation_mismatch_forbidden(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/organisations/{uuid.uuid4()}/leave-types", headers=ADMIN_HEADERS)
    assert resp.status_code == 403


async def test_missing_auth_headers_rejected(async_client: AsyncClient) -> None:
    resp = await async_client.get(LEAVE_TYPES_URL)
    assert resp.status_code == 422


async def test_list_hides_inactive_by_default(async_client: AsyncClient) -> None:
    await _create(async_client, name="B", display_order=2)
    await _create(async_client, name="A", display_order=1)
    retired = await _create(async_client, name="Retired", display_order=3)
    resp = await async_client.patch(
        f"{LEAVE_TYPES_URL}/{retired['id']}",
        json={"is_active": False},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200

    resp = await async_client.get(LEAVE_TYPES_URL, headers=EMPLOYEE_HEADERS)
    assert [lt["name"] for lt in resp.json()["items"]] == ["A", "B"]

    resp = await async_client.get(LEAVE_TYPES_URL, params={"include_inactive": True}, headers=EMPLOYEE_HEADERS)
    assert resp.json()["total"] == 3


# ---------------------------------------------------------------------------
# Update and seed
# ---------------------------------------------------------------------------


async def test_partial_update_keeps_other_fields(async_client: AsyncClient) -> None:
    created = await _create(async_client)
    resp = await async_client.patch(
        f"{LEAVE_TYPES_URL}/{created['id']}",
        json={"accrual_rate_hours": "7.5"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert Decimal(data["accrual_rate_hours"]) == Decimal("7.5")
    assert data["name"] == "Annual Leave"
    assert Decimal(data["max_balance_hours"]) == Decimal(304)


async def test_update_rejects_zero_rate_on_accruing_type(async_client: AsyncClient) -> None:
    created = await _create(async_client)
    resp = await async_client.patch(
        f"{LEAVE_TYPES_URL}/{created['id']}",
        json={"accrual_rate_hours": "0"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 422


async def test_update_requires_admin(async_client: AsyncClient) -> None:
    created = await _create(async_client)
    resp = await async_client.patch(
        f"{LEAVE_TYPES_URL}/{created['id']}",
        json={"is_active": False},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 403


async def test_seed_defaults_is_repeatable(async_client: AsyncClient) -> None:
    resp = await async_client.post(f"{LEAVE_TYPES_URL}/seed-defaults", headers=ADMIN_HEADERS)
    assert resp.status_code == 201
    first = resp.json()
    names = [lt["name"] for lt in first["items"]]
    assert names[0] == "Annual Leave"
    assert "Personal/Sick Leave" in names
    assert "Unpaid Leave" in names

    resp = await async_client.post(f"{LEAVE_TYPES_URL}/seed-defaults", headers=ADMIN_HEADERS)
    assert resp.json()["total"] == first["total"]
