"""Immutable facility snapshot handed to the engine for each operation.

The persistence collaborator produces snapshots; the engine only reads them.
Writers build a new snapshot rather than mutating one in use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from rack_capacity.domain.entities.device import Device, DeviceType
from rack_capacity.domain.entities.facility import Building, Floor, Rack, Room, Site
from rack_capacity.domain.value_objects.identifiers import (
    DeviceId,
    DeviceTypeId,
    RackId,
    RoomId,
    SiteId,
)


@dataclass(frozen=True)
class FacilitySnapshot:
    """Point-in-time view of one site's physical space and equipment."""
    site_id: SiteId
    racks: tuple[Rack, ...] = ()
    devices: tuple[Device, ...] = ()
    rooms: tuple[Room, ...] = ()
    buildings: tuple[Building, ...] = ()
    floors: tuple[Floor, ...] = ()
    sites: tuple[Site, ...] = ()
    device_types: tuple[DeviceType, ...] = ()

    _rack_index: dict[RackId, Rack] = field(init=False, repr=False, compare=False)
    _device_index: dict[DeviceId, Device] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Frozen dataclass: indexes are attached once at construction
        object.__setattr__(self, "_rack_index", {r.id: r for r in self.racks})
        object.__setattr__(self, "_device_index", {d.id: d for d in self.devices})

    @classmethod
    def build(
        cls,
        site_id: str,
        racks: Iterable[Rack] = (),
        devices: Iterable[Device] = (),
        rooms: Iterable[Room] = (),
        buildings: Iterable[Building] = (),
        floors: Iterable[Floor] = (),
        sites: Iterable[Site] = (),
        device_types: Iterable[DeviceType] = (),
    ) -> FacilitySnapshot:
        """Build a snapshot from any iterables."""
        return cls(
            site_id=SiteId(site_id),
            racks=tuple(racks),
            devices=tuple(devices),
            rooms=tuple(rooms),
            buildings=tuple(buildings),
            floors=tuple(floors),
            sites=tuple(sites),
            device_types=tuple(device_types),
        )

    def rack(self, rack_id: str) -> Optional[Rack]:
        return self._rack_index.get(RackId(rack_id))

    def device(self, device_id: str) -> Optional[Device]:
        return self._device_index.get(DeviceId(device_id))

    def device_type(self, device_type_id: str) -> Optional[DeviceType]:
        for device_type in self.device_types:
            if device_type.id == device_type_id:
                return device_type
        return None

    def device_type_index(self) -> dict[DeviceTypeId, DeviceType]:
        return {t.id: t for t in self.device_types}

    def racks_by_room(self) -> dict[RoomId, list[Rack]]:
        """Group racks by their room, preserving snapshot order within a room."""
        grouped: dict[RoomId, list[Rack]] = {}
        for rack in self.racks:
            grouped.setdefault(rack.room_id, []).append(rack)
        return grouped

    def with_devices(self, devices: Iterable[Device]) -> FacilitySnapshot:
        """Return a copy of this snapshot with a different device set."""
        return FacilitySnapshot(
            site_id=self.site_id,
            racks=self.racks,
            devices=tuple(devices),
            rooms=self.rooms,
            buildings=self.buildings,
            floors=self.floors,
            sites=self.sites,
            device_types=self.device_types,
        )
