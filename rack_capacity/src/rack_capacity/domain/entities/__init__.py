"""Domain entities for the rack capacity engine.

Entities represent the facility hierarchy and the equipment it holds:
- Site, Building, Floor, Room, Rack: physical containment
- Device, DeviceType: installed equipment and its catalog entry
- FacilitySnapshot: immutable view handed to every engine operation
"""

from rack_capacity.domain.entities.device import (
    Device,
    DeviceCategory,
    DeviceType,
)
from rack_capacity.domain.entities.facility import (
    DEFAULT_RACK_U_HEIGHT,
    Building,
    Floor,
    Rack,
    Room,
    Site,
)
from rack_capacity.domain.entities.snapshot import FacilitySnapshot

__all__ = [
    # Facility
    "Site",
    "Building",
    "Floor",
    "Room",
    "Rack",
    "DEFAULT_RACK_U_HEIGHT",
    # Equipment
    "Device",
    "DeviceType",
    "DeviceCategory",
    # Snapshot
    "FacilitySnapshot",
]
