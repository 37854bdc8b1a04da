# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated, Literal

from fastapi import Depends, Header, Path

from leave_engine.exceptions import ForbiddenError
from leave_engine.schemas.auth import AuthContext


async def get_auth_context(
    x_organisation_id: uuid.UUID = Header(),
    x_user_id: uuid.UUID = Header(),
    x_role: Literal["employee", "manager", "admin"] = Header(default="employee"),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(organisation_id=x_organisation_id, user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if not auth.is_admin:
        raise ForbiddenError("Admin access required")
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]


async def require_approver(
    auth: AuthDep,
) -> AuthContext:
    """Require a manager or admin to decide on requests."""
    if not auth.is_approver:
        raise ForbiddenError("Manager or admin access required")
    return auth


ApproverDep = Annotated[AuthContext, Depends(require_approver)]


async def validate_organisation_scope(
    organisation_id: uuid.UUID = Path(),
    auth: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Ensure the path organisation_id matches the auth header organisation_id."""
    if organisation_id != auth.organisation_id:
        raise ForbiddenError("Organisation ID mismatch")
    return auth
