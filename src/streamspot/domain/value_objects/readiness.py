"""Outcome of comparing a fresh play count with stored history."""

from enum import Enum


class Readiness(str, Enum):
    """Whether an observed play count should be recorded for the day."""

    READY = "ready"
    """Record the observation."""

    NOT_READY = "not_ready"
    """Latest stored value already matches and is stable."""

    UNKNOWN_TRACK = "unknown_track"
    """The track has no store row; nothing to compare against."""

    @property
    def should_record(self) -> bool:
        """True only for READY."""
        return self is Readiness.READY
