"""Hold the current FamilySnapshot for concurrent readers."""

from __future__ import annotations

import time
from typing import NamedTuple, Optional

from family_dashboard.calendar.models import FamilySnapshot


class PublishedSnapshot(NamedTuple):
    snapshot: FamilySnapshot
    version: int
    published_at: Optional[float]


class SnapshotPublisher:
    """Owns the snapshot visible to HTTP handlers.

    ``publish`` replaces the whole published state with a single reference
    assignment, so ``current`` always returns a complete snapshot and never
    waits on a refresh. Snapshots are frozen; readers may hold the returned
    reference for as long as they need it.
    """

    def __init__(self, initial: Optional[FamilySnapshot] = None) -> None:
        self._state = PublishedSnapshot(initial or FamilySnapshot(), 0, None)

    def publish(self, snapshot: FamilySnapshot) -> int:
        """Make ``snapshot`` the current one.

        Returns:
            The new snapshot version
        """
        if not isinstance(snapshot, FamilySnapshot):
            raise TypeError(f"expected FamilySnapshot, got {type(snapshot).__name__}")
        version = self._state.version + 1
        self._state = PublishedSnapshot(snapshot, version, time.time())
        return version

    def current(self) -> FamilySnapshot:
        return self._state.snapshot

    def state(self) -> PublishedSnapshot:
        """Snapshot with its version and publish time, read together."""
        return self._state

    @property
    def version(self) -> int:
        return self._state.version
