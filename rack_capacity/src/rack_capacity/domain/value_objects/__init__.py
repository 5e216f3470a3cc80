"""Domain value objects for the rack capacity engine.

Value objects are immutable objects without identity that represent
core concepts like facility identifiers, life-cycle statuses and
rack-unit ranges.
"""

from rack_capacity.domain.value_objects.identifiers import (
    DEFAULT_BUILDING_ID,
    DEFAULT_FLOOR_ID,
    BuildingId,
    DeviceId,
    DeviceTypeId,
    FloorId,
    LogicalEquipmentId,
    RackId,
    RoomId,
    SiteId,
    create_device_id,
    create_logical_equipment_id,
)
from rack_capacity.domain.value_objects.lifecycle import (
    STATUS_LABELS,
    MoveType,
    Phase,
    SiteStatus,
    Status4D,
)
from rack_capacity.domain.value_objects.transform import IDENTITY_TRANSFORM, Transform
from rack_capacity.domain.value_objects.unit_range import UnitRange

__all__ = [
    # Identifiers
    "SiteId",
    "BuildingId",
    "FloorId",
    "RoomId",
    "RackId",
    "DeviceId",
    "DeviceTypeId",
    "LogicalEquipmentId",
    "DEFAULT_BUILDING_ID",
    "DEFAULT_FLOOR_ID",
    "create_device_id",
    "create_logical_equipment_id",
    # Life-cycle
    "Status4D",
    "Phase",
    "MoveType",
    "SiteStatus",
    "STATUS_LABELS",
    # Geometry
    "Transform",
    "IDENTITY_TRANSFORM",
    "UnitRange",
]
