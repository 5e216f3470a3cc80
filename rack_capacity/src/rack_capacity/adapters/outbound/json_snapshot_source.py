"""JSON document snapshot source.

Reads scene documents exported by the twin viewer (camelCase keys) and
turns them into normalized facility snapshots:

    <data_dir>/<site_id>.json     scene: rooms, racks, devices, ...
    <data_dir>/device-types.json  optional catalog {"deviceTypes": [...]}
    <data_dir>/sites.json         optional site list {"sites": [...]}

Parsed snapshots are cached for a short TTL so interactive validation does
not re-read the disk on every drag.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from rack_capacity.domain.entities.device import Device, DeviceCategory, DeviceType
from rack_capacity.domain.entities.facility import (
    DEFAULT_RACK_U_HEIGHT,
    Building,
    Floor,
    Rack,
    Room,
    Site,
)
from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.exceptions import SnapshotFormatError, SnapshotNotFoundError
from rack_capacity.domain.services.hierarchy import normalize_hierarchy
from rack_capacity.domain.value_objects.identifiers import (
    DEFAULT_BUILDING_ID,
    BuildingId,
    DeviceId,
    DeviceTypeId,
    FloorId,
    LogicalEquipmentId,
    RackId,
    RoomId,
    SiteId,
)
from rack_capacity.domain.value_objects.lifecycle import SiteStatus, Status4D
from rack_capacity.domain.value_objects.transform import Transform

logger = logging.getLogger(__name__)

DEVICE_TYPES_FILE = "device-types.json"
SITES_FILE = "sites.json"


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )


class TransformDoc(_Document):
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation_euler: tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def to_domain(self) -> Transform:
        return Transform(
            position=self.position,
            rotation_euler=self.rotation_euler,
            scale=self.scale,
        )


class SiteDoc(_Document):
    id: str
    name: str
    region: str = ""
    lat: float = 0.0
    lon: float = 0.0
    rack_count: int = 0
    ai_ready_racks: int = 0
    status: SiteStatus = SiteStatus.LEGACY
    scene_config_uri: str = ""

    def to_domain(self) -> Site:
        return Site(
            id=SiteId(self.id),
            name=self.name,
            region=self.region,
            lat=self.lat,
            lon=self.lon,
            rack_count=self.rack_count,
            ai_ready_racks=self.ai_ready_racks,
            status=self.status,
            scene_config_uri=self.scene_config_uri,
        )


class LegacyBuildingDoc(_Document):
    glb_uri: str = ""
    transform_world: TransformDoc = Field(default_factory=TransformDoc)


class BuildingDoc(_Document):
    id: str
    site_id: Optional[str] = None
    name: str
    glb_uri: str = ""
    transform_world: TransformDoc = Field(default_factory=TransformDoc)
    floors: Optional[int] = None
    area: Optional[float] = None

    def to_domain(self, site_id: str) -> Building:
        return Building(
            id=BuildingId(self.id),
            site_id=SiteId(self.site_id or site_id),
            name=self.name,
            transform_world=self.transform_world.to_domain(),
            glb_uri=self.glb_uri,
            floors=self.floors,
            area=self.area,
        )


class FloorDoc(_Document):
    id: str
    building_id: str
    name: str
    level: int = 0
    elevation: Optional[float] = None

    def to_domain(self) -> Floor:
        return Floor(
            id=FloorId(self.id),
            building_id=BuildingId(self.building_id),
            name=self.name,
            level=self.level,
            elevation=self.elevation,
        )


class RoomDoc(_Document):
    id: str
    name: str
    floor_id: Optional[str] = None
    transform_in_building: TransformDoc = Field(default_factory=TransformDoc)
    area: Optional[float] = None

    def to_domain(self) -> Room:
        return Room(
            id=RoomId(self.id),
            name=self.name,
            floor_id=FloorId(self.floor_id) if self.floor_id else None,
            transform_in_building=self.transform_in_building.to_domain(),
            area=self.area,
        )


class RackDoc(_Document):
    id: str
    room_id: str
    name: str
    u_height: int = DEFAULT_RACK_U_HEIGHT
    position_in_room: TransformDoc = Field(default_factory=TransformDoc)
    power_kw_limit: float = 0.0
    current_power_kw: float = 0.0

    def to_domain(self) -> Rack:
        return Rack(
            id=RackId(self.id),
            room_id=RoomId(self.room_id),
            name=self.name,
            u_height=self.u_height,
            power_kw_limit=self.power_kw_limit,
            current_power_kw=self.current_power_kw,
            position_in_room=self.position_in_room.to_domain(),
        )


class DeviceDoc(_Document):
    id: str
    rack_id: str
    device_type_id: str
    logical_equipment_id: Optional[str] = None
    name: str
    u_start: int
    u_height: int = 1
    status_4d: Status4D = Field(default=Status4D.EXISTING_RETAINED, alias="status4D")
    power_kw: float = 0.0

    def to_domain(self) -> Device:
        return Device(
            id=DeviceId(self.id),
            rack_id=RackId(self.rack_id),
            device_type_id=DeviceTypeId(self.device_type_id),
            logical_equipment_id=(
                LogicalEquipmentId(self.logical_equipment_id) if self.logical_equipment_id else None
            ),
            name=self.name,
            u_start=self.u_start,
            u_height=self.u_height,
            status_4d=self.status_4d,
            power_kw=self.power_kw,
        )


class DeviceTypeDoc(_Document):
    id: str
    category: DeviceCategory
    model_ref: str
    u_height: int = 1
    name: Optional[str] = None
    description: Optional[str] = None
    power_kw: Optional[float] = None
    btu_hr: Optional[float] = None
    gpu_slots: Optional[int] = None

    def to_domain(self) -> DeviceType:
        return DeviceType(
            id=DeviceTypeId(self.id),
            category=self.category,
            model_ref=self.model_ref,
            u_height=self.u_height,
            name=self.name,
            description=self.description,
            power_kw=self.power_kw,
            btu_hr=self.btu_hr,
            gpu_slots=self.gpu_slots,
        )


class SceneDoc(_Document):
    """Scene configuration document for one site."""
    site_id: Optional[str] = None
    building: Optional[LegacyBuildingDoc] = None
    buildings: list[BuildingDoc] = Field(default_factory=list)
    floors: list[FloorDoc] = Field(default_factory=list)
    rooms: list[RoomDoc] = Field(default_factory=list)
    racks: list[RackDoc] = Field(default_factory=list)
    devices: list[DeviceDoc] = Field(default_factory=list)


class DeviceTypeCatalogDoc(_Document):
    device_types: list[DeviceTypeDoc] = Field(default_factory=list)


class SiteListDoc(_Document):
    sites: list[SiteDoc] = Field(default_factory=list)


def scene_to_snapshot(
    site_id: str,
    scene: SceneDoc,
    device_types: list[DeviceTypeDoc] | None = None,
    sites: list[SiteDoc] | None = None,
) -> FacilitySnapshot:
    """Convert parsed documents into a normalized snapshot."""
    buildings = [b.to_domain(site_id) for b in scene.buildings]
    if not buildings and scene.building is not None:
        # Single legacy building: keep its model and placement
        buildings = [
            Building(
                id=DEFAULT_BUILDING_ID,
                site_id=SiteId(site_id),
                name="Main Building",
                transform_world=scene.building.transform_world.to_domain(),
                glb_uri=scene.building.glb_uri,
            )
        ]

    snapshot = FacilitySnapshot.build(
        site_id=site_id,
        racks=(r.to_domain() for r in scene.racks),
        devices=(d.to_domain() for d in scene.devices),
        rooms=(r.to_domain() for r in scene.rooms),
        buildings=buildings,
        floors=(f.to_domain() for f in scene.floors),
        sites=(s.to_domain() for s in (sites or []) if s.id == site_id),
        device_types=(t.to_domain() for t in (device_types or [])),
    )
    return normalize_hierarchy(snapshot)


class JsonSnapshotSource:
    """Loads snapshots from JSON documents with a TTL cache."""

    def __init__(
        self,
        data_dir: Path,
        cache_ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the source.

        Args:
            data_dir: Directory holding the scene documents.
            cache_ttl_seconds: How long a parsed snapshot stays fresh.
            clock: Monotonic time source (injectable for tests).
        """
        self._data_dir = Path(data_dir)
        self._ttl = cache_ttl_seconds
        self._clock = clock
        self._cache: dict[str, tuple[float, FacilitySnapshot]] = {}
        self._lock = threading.Lock()

    def load_snapshot(self, site_id: str) -> FacilitySnapshot:
        now = self._clock()
        with self._lock:
            cached = self._cache.get(site_id)
            if cached is not None and cached[0] > now:
                return cached[1]

        snapshot = self._read_snapshot(site_id)

        with self._lock:
            self._cache[site_id] = (now + self._ttl, snapshot)
        return snapshot

    def invalidate(self, site_id: str | None = None) -> None:
        with self._lock:
            if site_id is None:
                self._cache.clear()
            else:
                self._cache.pop(site_id, None)

    def _read_snapshot(self, site_id: str) -> FacilitySnapshot:
        scene_path = self._data_dir / f"{Path(site_id).name}.json"
        if not scene_path.is_file():
            raise SnapshotNotFoundError(f"No scene document for site {site_id}")

        scene = self._parse(scene_path, SceneDoc)
        catalog = self._parse_optional(self._data_dir / DEVICE_TYPES_FILE, DeviceTypeCatalogDoc)
        site_list = self._parse_optional(self._data_dir / SITES_FILE, SiteListDoc)

        snapshot = scene_to_snapshot(
            site_id,
            scene,
            device_types=catalog.device_types if catalog else None,
            sites=site_list.sites if site_list else None,
        )
        logger.info(
            f"Loaded site {site_id}: {len(snapshot.racks)} racks, {len(snapshot.devices)} devices"
        )
        return snapshot

    def _parse_optional(self, path: Path, model: type[_Document]) -> Any:
        if not path.is_file():
            return None
        return self._parse(path, model)

    @staticmethod
    def _parse(path: Path, model: type[_Document]) -> Any:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return model.model_validate(payload)
        except (json.JSONDecodeError, ValidationError) as e:
            raise SnapshotFormatError(f"Malformed document {path.name}: {e}") from e
