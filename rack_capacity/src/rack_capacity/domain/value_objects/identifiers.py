"""Facility-related type-safe identifiers.

These value objects provide type safety for the identifiers that tie the
facility hierarchy together, using Python's NewType for zero-runtime overhead.
"""

from __future__ import annotations

import uuid
from typing import NewType

# Hierarchy identifiers (site -> building -> floor -> room -> rack -> device)
SiteId = NewType("SiteId", str)
BuildingId = NewType("BuildingId", str)
FloorId = NewType("FloorId", str)
RoomId = NewType("RoomId", str)
RackId = NewType("RackId", str)
DeviceId = NewType("DeviceId", str)

# Catalog entry identifier
DeviceTypeId = NewType("DeviceTypeId", str)

# Stable identity of a physical asset across relocations and phases
LogicalEquipmentId = NewType("LogicalEquipmentId", str)

# Synthetic hierarchy records for legacy snapshots
DEFAULT_BUILDING_ID = BuildingId("default-building")
DEFAULT_FLOOR_ID = FloorId("default-floor")


def create_device_id(prefix: str = "dev") -> DeviceId:
    """Create a fresh device identifier."""
    return DeviceId(f"{prefix}-{uuid.uuid4().hex[:12]}")


def create_logical_equipment_id(device_id: str) -> LogicalEquipmentId:
    """Derive a logical equipment identifier for a device that has none."""
    return LogicalEquipmentId(f"logical-{device_id}")
