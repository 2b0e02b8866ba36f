"""Response schemas for the daily update trigger and health check."""

from pydantic import BaseModel, Field


class DailyUpdateStatusResponse(BaseModel):
    running: bool = Field(..., description="Whether a daily update is in progress")
    message: str
    worker: dict[str, object] | None = Field(
        None, description="In-process scheduler status, if enabled"
    )


class HealthResponse(BaseModel):
    status: str
    app_name: str
    database: str
    daily_update_running: bool
