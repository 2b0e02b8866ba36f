"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message is kept as an attribute so handlers can read it without
    # parsing str(exc). Never raise this directly, always a specific subclass.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidSpotifyUriError(DomainException, ValueError):
    """Raised when a resource locator does not have the namespace:type:id shape.

    Locators come from trusted API payloads, so this signals a contract break
    with the upstream source rather than bad user input.
    """

    def __init__(self, uri: str) -> None:
        super().__init__(f"Malformed resource locator: {uri!r}")
        self.uri = uri


class BusinessRuleViolation(DomainException):
    """A business rule was violated (e.g. deleting a protected artist).

    HTTP Status: 400
    """


class ConfigurationError(DomainException):
    """A required setting is missing or invalid.

    HTTP Status: 500
    """


class ExternalServiceError(DomainException):
    """An external source (Spotify Web API, web player scraper) failed.

    Covers network errors, non-200 responses and timeouts. The sync layers
    treat it as transient and retry the affected id on their next iteration.

    HTTP Status: 502
    """

    def __init__(
        self,
        message: str,
        service: str | None = None,
        resource_id: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.resource_id = resource_id
        self.status_code = status_code


class PayloadValidationError(ExternalServiceError):
    """A response arrived but did not match the expected payload schema.

    Handled exactly like a transport failure by the retry layers: the id did
    not yield usable data this attempt.
    """


class SyncAbortedError(DomainException):
    """The daily update cannot continue in this invocation.

    Raised for status gate failures and artist refresh failures. Propagates
    to the caller (CLI or worker) which decides when to run again.
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"Daily update aborted during {stage}: {message}")
        self.stage = stage


__all__ = [
    "BusinessRuleViolation",
    "ConfigurationError",
    "DomainException",
    "EntityNotFoundException",
    "ExternalServiceError",
    "InvalidSpotifyUriError",
    "PayloadValidationError",
    "SyncAbortedError",
]
