"""Outbound adapters: snapshot sources and metrics export."""

from rack_capacity.adapters.outbound.json_snapshot_source import JsonSnapshotSource
from rack_capacity.adapters.outbound.memory_snapshot_source import InMemorySnapshotSource
from rack_capacity.adapters.outbound.metrics import PrometheusExporter

__all__ = [
    "JsonSnapshotSource",
    "InMemorySnapshotSource",
    "PrometheusExporter",
]
