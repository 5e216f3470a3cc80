"""Outbound ports - interfaces the engine requires from collaborators."""

from rack_capacity.ports.outbound.snapshot_source import SnapshotSource

__all__ = [
    "SnapshotSource",
]
