"""In-memory snapshot source for callers that already hold snapshots."""

from __future__ import annotations

import threading

from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.exceptions import SnapshotNotFoundError
from rack_capacity.domain.services.hierarchy import normalize_hierarchy


class InMemorySnapshotSource:
    """Holds the latest snapshot per site.

    Publishing replaces the stored snapshot; readers keep whichever one
    they already obtained.
    """

    def __init__(self, *snapshots: FacilitySnapshot) -> None:
        self._snapshots: dict[str, FacilitySnapshot] = {}
        self._lock = threading.Lock()
        for snapshot in snapshots:
            self.publish(snapshot)

    def publish(self, snapshot: FacilitySnapshot) -> None:
        normalized = normalize_hierarchy(snapshot)
        with self._lock:
            self._snapshots[normalized.site_id] = normalized

    def load_snapshot(self, site_id: str) -> FacilitySnapshot:
        with self._lock:
            snapshot = self._snapshots.get(site_id)
        if snapshot is None:
            raise SnapshotNotFoundError(f"No snapshot published for site {site_id}")
        return snapshot

    def invalidate(self, site_id: str | None = None) -> None:
        """Nothing is cached; published snapshots are the source of truth."""
        return None
