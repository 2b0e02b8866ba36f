"""Readiness oracle: has a track's play count moved on since the last stored day?

Hey future me - the web player's play counts roll over once a day, but not at a
fixed time. Recording a value before the roll-over would store yesterday's
figure twice and make the day look like zero plays. So before writing we look
at the latest stored values:

- nothing stored yet                  -> READY (first observation)
- live value differs from latest row  -> READY (it moved)
- latest two rows are <= threshold apart -> READY (a quiet track, equal values
  are believable; we'd otherwise wait forever on tracks nobody plays)
- otherwise                            -> NOT_READY (busy track, unchanged value
  means the source hasn't rolled over yet)

Tracks with no store row at all are UNKNOWN_TRACK. The status gate lets that
pass, ingestion just skips them.
"""

from collections.abc import Sequence

from streamspot.domain.value_objects import Readiness
from streamspot.infrastructure.persistence.repositories import CatalogRepository

DEFAULT_SETTLE_THRESHOLD = 100
DEFAULT_HISTORY_DEPTH = 3


def evaluate_readiness(
    history: Sequence[int],
    playcount: int,
    settle_threshold: int = DEFAULT_SETTLE_THRESHOLD,
) -> Readiness:
    """Decide whether ``playcount`` should be recorded.

    Args:
        history: Stored stream values of the track, most recent date first
        playcount: The live value just fetched
        settle_threshold: Largest day-over-day gain still treated as "quiet"
    """
    if not history:
        return Readiness.READY
    if history[0] != playcount:
        return Readiness.READY
    if len(history) >= 2 and history[0] - history[1] <= settle_threshold:
        return Readiness.READY
    return Readiness.NOT_READY


class ReadinessOracle:
    """Runs ``evaluate_readiness`` against the catalog store."""

    def __init__(
        self,
        repository: CatalogRepository,
        settle_threshold: int = DEFAULT_SETTLE_THRESHOLD,
        history_depth: int = DEFAULT_HISTORY_DEPTH,
    ) -> None:
        self.repository = repository
        self.settle_threshold = settle_threshold
        self.history_depth = history_depth

    async def check(self, track_id: str, playcount: int) -> Readiness:
        if await self.repository.get_track(track_id) is None:
            return Readiness.UNKNOWN_TRACK
        history = await self.repository.recent_streams(track_id, self.history_depth)
        return evaluate_readiness(history, playcount, self.settle_threshold)
