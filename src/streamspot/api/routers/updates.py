"""Manual trigger and status of the daily update."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from streamspot.api.dependencies import get_daily_update_service, get_daily_update_worker
from streamspot.api.schemas import DailyUpdateStatusResponse
from streamspot.application.services import DailyUpdateService
from streamspot.application.workers import DailyUpdateWorker
from streamspot.domain.exceptions import SyncAbortedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/updates", tags=["Updates"])


async def _run_in_background(service: DailyUpdateService) -> None:
    try:
        elapsed = await service.run()
    except SyncAbortedError as e:
        logger.error("Manual daily update aborted: %s", e.message)
    except Exception:
        logger.exception("Manual daily update crashed")
    else:
        logger.info("Manual daily update completed in %s", elapsed)


# Hey future me - a run takes hours (the status gate alone may wait for the roll-over),
# so we start it as a task and answer 202 right away. The task handle lives on app.state,
# otherwise the event loop only keeps a weak reference and it could be garbage collected.
@router.post(
    "/daily",
    response_model=DailyUpdateStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def trigger_daily_update(
    request: Request,
    service: DailyUpdateService = Depends(get_daily_update_service),
) -> DailyUpdateStatusResponse:
    """Start one daily update run in the background."""
    pending = getattr(request.app.state, "daily_update_task", None)
    if service.is_running or (pending is not None and not pending.done()):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A daily update is already running",
        )
    request.app.state.daily_update_task = asyncio.create_task(
        _run_in_background(service)
    )
    return DailyUpdateStatusResponse(running=True, message="Daily update started")


@router.get("/daily", response_model=DailyUpdateStatusResponse)
async def daily_update_status(
    service: DailyUpdateService = Depends(get_daily_update_service),
    worker: DailyUpdateWorker | None = Depends(get_daily_update_worker),
) -> DailyUpdateStatusResponse:
    return DailyUpdateStatusResponse(
        running=service.is_running,
        message="Daily update running" if service.is_running else "Idle",
        worker=worker.get_status() if worker else None,
    )
