"""Domain value objects."""

from streamspot.domain.value_objects.readiness import Readiness
from streamspot.domain.value_objects.spotify_id import id_from_uri
from streamspot.domain.value_objects.sync_day import SyncDay

__all__ = ["Readiness", "SyncDay", "id_from_uri"]
