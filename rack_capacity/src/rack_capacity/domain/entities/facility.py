"""Facility hierarchy entities: site, building, floor, room, rack.

Each level references its parent by identity, never by embedding, so a
snapshot can be sliced and indexed without walking object graphs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rack_capacity.domain.value_objects.identifiers import (
    BuildingId,
    FloorId,
    RackId,
    RoomId,
    SiteId,
)
from rack_capacity.domain.value_objects.lifecycle import SiteStatus
from rack_capacity.domain.value_objects.transform import IDENTITY_TRANSFORM, Transform

DEFAULT_RACK_U_HEIGHT = 42


@dataclass(frozen=True)
class Site:
    """A data-center campus."""
    id: SiteId
    name: str
    region: str = ""
    lat: float = 0.0
    lon: float = 0.0
    rack_count: int = 0
    ai_ready_racks: int = 0
    status: SiteStatus = SiteStatus.LEGACY
    scene_config_uri: str = ""


@dataclass(frozen=True)
class Building:
    """A building placed in world space."""
    id: BuildingId
    site_id: SiteId
    name: str
    transform_world: Transform = IDENTITY_TRANSFORM
    glb_uri: str = ""
    floors: Optional[int] = None
    area: Optional[float] = None   # square meters


@dataclass(frozen=True)
class Floor:
    """A building level. 0 = ground, negative = below grade."""
    id: FloorId
    building_id: BuildingId
    name: str
    level: int = 0
    elevation: Optional[float] = None  # meters


@dataclass(frozen=True)
class Room:
    """A room inside a floor."""
    id: RoomId
    name: str
    floor_id: Optional[FloorId] = None  # Missing on legacy data
    transform_in_building: Transform = IDENTITY_TRANSFORM
    area: Optional[float] = None


@dataclass(frozen=True)
class Rack:
    """A rack with vertical unit capacity and an electrical budget."""
    id: RackId
    room_id: RoomId
    name: str
    u_height: int = DEFAULT_RACK_U_HEIGHT
    power_kw_limit: float = 0.0
    current_power_kw: float = 0.0  # Cached aggregate, owned by persistence
    position_in_room: Transform = IDENTITY_TRANSFORM

    @property
    def effective_u_height(self) -> int:
        """Unit capacity, falling back to the 42U standard for unset racks."""
        return self.u_height if self.u_height > 0 else DEFAULT_RACK_U_HEIGHT

    @property
    def has_power_limit(self) -> bool:
        return self.power_kw_limit > 0

    @property
    def power_headroom_kw(self) -> float:
        """Configured limit minus current draw."""
        return self.power_kw_limit - self.current_power_kw
