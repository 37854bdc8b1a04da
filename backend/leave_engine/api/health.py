import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from leave_engine.config import get_settings
from leave_engine.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded"]
    version: str
    environment: str


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report service health, degraded when the database is unreachable."""
    settings = get_settings()
    status: Literal["ok", "degraded"] = "ok"

    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.exception("Health check: database connectivity failed")
        status = "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        environment=settings.environment,
    )
