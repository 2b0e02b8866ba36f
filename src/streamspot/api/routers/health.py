"""Liveness endpoint with a cheap database probe."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from streamspot.api.dependencies import (
    get_daily_update_service,
    get_database,
    get_settings,
)
from streamspot.api.schemas import HealthResponse
from streamspot.application.services import DailyUpdateService
from streamspot.config import Settings
from streamspot.infrastructure.persistence import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health(
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
    service: DailyUpdateService = Depends(get_daily_update_service),
) -> HealthResponse:
    database = "ok"
    try:
        async with db.session_scope() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Health check database probe failed: %s", e)
        database = "unavailable"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        app_name=settings.app_name,
        database=database,
        daily_update_running=service.is_running,
    )
