"""Outbound port for obtaining facility snapshots.

The persistence collaborator is the sole writer of facility state. The
engine only asks it for an immutable snapshot per operation.
"""

from __future__ import annotations

from typing import Protocol

from rack_capacity.domain.entities.snapshot import FacilitySnapshot


class SnapshotSource(Protocol):
    """Provides normalized facility snapshots by site."""

    def load_snapshot(self, site_id: str) -> FacilitySnapshot:
        """Load the current snapshot of a site.

        Args:
            site_id: Site to load.

        Returns:
            Normalized facility snapshot.

        Raises:
            SnapshotNotFoundError: If the site is unknown.
            SnapshotFormatError: If the stored document is malformed.
        """
        ...

    def invalidate(self, site_id: str | None = None) -> None:
        """Drop cached snapshots for one site, or all sites when None."""
        ...
