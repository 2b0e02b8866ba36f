"""Application services."""

from streamspot.application.services.album_discovery_service import (
    AlbumDiscoveryService,
)
from streamspot.application.services.album_ingest_service import (
    AlbumIngestService,
    IngestResult,
)
from streamspot.application.services.artist_service import ArtistService
from streamspot.application.services.daily_update_service import DailyUpdateService
from streamspot.application.services.readiness import (
    ReadinessOracle,
    evaluate_readiness,
)
from streamspot.application.services.report_service import ReportService

__all__ = [
    "AlbumDiscoveryService",
    "AlbumIngestService",
    "ArtistService",
    "DailyUpdateService",
    "IngestResult",
    "ReadinessOracle",
    "ReportService",
    "evaluate_readiness",
]
