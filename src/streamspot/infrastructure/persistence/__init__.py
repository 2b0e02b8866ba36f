"""Persistence layer: ORM models, engine/session management and the catalog repository."""

from streamspot.infrastructure.persistence.database import Database
from streamspot.infrastructure.persistence.repositories import CatalogRepository

__all__ = ["CatalogRepository", "Database"]
