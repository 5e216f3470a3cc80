"""Device entities: installed equipment and its catalog type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rack_capacity.domain.value_objects.identifiers import (
    DeviceId,
    DeviceTypeId,
    LogicalEquipmentId,
    RackId,
)
from rack_capacity.domain.value_objects.lifecycle import Status4D
from rack_capacity.domain.value_objects.unit_range import UnitRange


class DeviceCategory(str, Enum):
    """Catalog category of a device type."""
    RACK = "RACK"
    SERVER = "SERVER"
    SWITCH = "SWITCH"
    STORAGE = "STORAGE"
    NETWORK = "NETWORK"
    GPU_SERVER = "GPU_SERVER"
    PDU = "PDU"
    UPS = "UPS"
    BLADE = "BLADE"


@dataclass(frozen=True)
class DeviceType:
    """Catalog entry describing a model of equipment."""
    id: DeviceTypeId
    category: DeviceCategory
    model_ref: str
    u_height: int = 1
    name: Optional[str] = None
    description: Optional[str] = None
    power_kw: Optional[float] = None
    btu_hr: Optional[float] = None
    gpu_slots: Optional[int] = None


@dataclass(frozen=True)
class Device:
    """A device record occupying a span of units in a rack.

    Several records may share a ``logical_equipment_id`` when they describe
    the same physical asset in different phases or locations.
    """
    id: DeviceId
    rack_id: RackId
    device_type_id: DeviceTypeId
    logical_equipment_id: Optional[LogicalEquipmentId]
    name: str
    u_start: int
    u_height: int = 1
    status_4d: Status4D = Status4D.EXISTING_RETAINED
    power_kw: float = 0.0

    @property
    def effective_u_height(self) -> int:
        """Slot span, clamped to at least one unit."""
        return max(self.u_height, 1)

    @property
    def u_end(self) -> int:
        """Last occupied unit (inclusive)."""
        return self.u_start + self.effective_u_height - 1

    @property
    def unit_range(self) -> UnitRange:
        return UnitRange.from_span(self.u_start, self.u_height)

    @property
    def is_removed(self) -> bool:
        """Removed devices are logically absent from their rack."""
        return self.status_4d is Status4D.EXISTING_REMOVED
