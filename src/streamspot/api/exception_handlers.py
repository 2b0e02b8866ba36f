"""Exception handlers mapping domain exceptions onto JSON responses.

| exception                  | status |
|----------------------------|--------|
| EntityNotFoundException    | 404    |
| BusinessRuleViolation      | 400    |
| InvalidSpotifyUriError     | 400    |
| ExternalServiceError       | 502    |
| ConfigurationError         | 500    |
| SyncAbortedError           | 500    |
| SQLAlchemy OperationalError| 503    |
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from streamspot.domain.exceptions import (
    BusinessRuleViolation,
    ConfigurationError,
    EntityNotFoundException,
    ExternalServiceError,
    InvalidSpotifyUriError,
    SyncAbortedError,
)
from streamspot.infrastructure.persistence.retry import is_lock_error

logger = logging.getLogger(__name__)


# Register these BEFORE the app serves requests (create_app does). Without them a domain
# exception leaks out as a bare 500 with a stack trace.
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain and store exceptions."""

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
        )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": exc.message},
        )

    @app.exception_handler(BusinessRuleViolation)
    async def business_rule_handler(
        request: Request, exc: BusinessRuleViolation
    ) -> JSONResponse:
        logger.warning("Business rule violated at %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message},
        )

    @app.exception_handler(InvalidSpotifyUriError)
    async def invalid_uri_handler(
        request: Request, exc: InvalidSpotifyUriError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message},
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        logger.warning(
            "Upstream %s failed at %s: %s",
            exc.service or "service",
            request.url.path,
            exc.message,
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": exc.message, "service": exc.service},
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error("Configuration error at %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message},
        )

    @app.exception_handler(SyncAbortedError)
    async def sync_aborted_handler(
        request: Request, exc: SyncAbortedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message, "stage": exc.stage},
        )

    # Hey future me - during a daily update on SQLite the album tasks hold the write lock
    # most of the time. A lock error that survived with_db_retry is "try again", not a crash.
    @app.exception_handler(OperationalError)
    async def operational_error_handler(
        request: Request, exc: OperationalError
    ) -> JSONResponse:
        if is_lock_error(exc):
            logger.warning("Database busy at %s", request.url.path)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": "Database is busy, retry shortly"},
                headers={"Retry-After": "5"},
            )
        logger.error("Database error at %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Database error"},
        )
