"""Unit tests for snapshot sources."""

import json

import pytest
from rack_capacity.adapters.outbound.json_snapshot_source import JsonSnapshotSource
from rack_capacity.adapters.outbound.memory_snapshot_source import InMemorySnapshotSource
from rack_capacity.domain.entities.device import DeviceCategory
from rack_capacity.domain.exceptions import SnapshotFormatError, SnapshotNotFoundError
from rack_capacity.domain.value_objects.identifiers import DEFAULT_BUILDING_ID, DEFAULT_FLOOR_ID
from rack_capacity.domain.value_objects.lifecycle import SiteStatus, Status4D

SCENE = {
    "siteId": "site-1",
    "rooms": [{"id": "room1", "name": "Server Room 1"}],
    "racks": [
        {
            "id": "rack1",
            "roomId": "room1",
            "name": "Rack 01",
            "uHeight": 42,
            "powerKwLimit": 10,
            "currentPowerKw": 4,
            "positionInRoom": {"position": [1, 0, 2], "rotationEuler": [0, 0, 0], "scale": [1, 1, 1]},
        },
    ],
    "devices": [
        {
            "id": "device1",
            "rackId": "rack1",
            "deviceTypeId": "gpu-h100",
            "logicalEquipmentId": "eq1",
            "name": "Server 1",
            "uStart": 1,
            "uHeight": 2,
            "status4D": "MODIFIED",
            "powerKw": 2.5,
        },
    ],
}


class FakeClock:
    """Manually advanced monotonic clock."""
    
    def __init__(self):
        self.now = 0.0
    
    def __call__(self) -> float:
        return self.now


def write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.mark.unit
class TestJsonSnapshotSource:
    """Test loading snapshots from scene documents."""
    
    def test_load_scene(self, tmp_path):
        """Test camelCase documents map onto the domain model."""
        write_json(tmp_path / "site-1.json", SCENE)
        
        snapshot = JsonSnapshotSource(tmp_path).load_snapshot("site-1")
        
        rack = snapshot.rack("rack1")
        assert rack.power_kw_limit == 10.0
        assert rack.current_power_kw == 4.0
        assert rack.position_in_room.position == (1.0, 0.0, 2.0)
        device = snapshot.device("device1")
        assert device.status_4d is Status4D.MODIFIED
        assert device.logical_equipment_id == "eq1"
        assert device.u_height == 2
        assert device.power_kw == 2.5
    
    def test_hierarchy_normalized(self, tmp_path):
        """Test legacy scenes without buildings or floors get defaults."""
        write_json(tmp_path / "site-1.json", SCENE)
        
        snapshot = JsonSnapshotSource(tmp_path).load_snapshot("site-1")
        
        assert [b.id for b in snapshot.buildings] == [DEFAULT_BUILDING_ID]
        assert [f.id for f in snapshot.floors] == [DEFAULT_FLOOR_ID]
        assert snapshot.rooms[0].floor_id == DEFAULT_FLOOR_ID
    
    def test_legacy_building_object(self, tmp_path):
        """Test a single legacy building keeps its model and transform."""
        scene = {
            **SCENE,
            "building": {"glbUri": "/models/hall.glb", "transformWorld": {"position": [5, 0, 5]}},
        }
        write_json(tmp_path / "site-1.json", scene)
        
        snapshot = JsonSnapshotSource(tmp_path).load_snapshot("site-1")
        
        (building,) = snapshot.buildings
        assert building.id == DEFAULT_BUILDING_ID
        assert building.glb_uri == "/models/hall.glb"
        assert building.transform_world.position == (5.0, 0.0, 5.0)
    
    def test_defaults_for_missing_fields(self, tmp_path):
        """Test omitted optional fields take their defaults."""
        scene = {
            "racks": [{"id": "rack1", "roomId": "room1", "name": "Rack 01"}],
            "devices": [
                {"id": "d1", "rackId": "rack1", "deviceTypeId": "srv", "name": "D1", "uStart": 3},
            ],
        }
        write_json(tmp_path / "site-1.json", scene)
        
        snapshot = JsonSnapshotSource(tmp_path).load_snapshot("site-1")
        
        assert snapshot.rack("rack1").u_height == 42
        assert snapshot.rack("rack1").power_kw_limit == 0.0
        device = snapshot.device("d1")
        assert device.u_height == 1
        assert device.status_4d is Status4D.EXISTING_RETAINED
        assert device.logical_equipment_id is None
    
    def test_catalog_and_site_list(self, tmp_path):
        """Test the optional device type catalog and site list are attached."""
        write_json(tmp_path / "site-1.json", SCENE)
        write_json(tmp_path / "device-types.json", {
            "deviceTypes": [
                {
                    "id": "gpu-h100",
                    "category": "GPU_SERVER",
                    "modelRef": "/models/h100.glb",
                    "uHeight": 8,
                    "powerKw": 10.2,
                    "gpuSlots": 8,
                },
            ],
        })
        write_json(tmp_path / "sites.json", {
            "sites": [
                {"id": "site-1", "name": "Ashburn", "status": "AI_READY", "rackCount": 120},
                {"id": "site-2", "name": "Dublin"},
            ],
        })
        
        snapshot = JsonSnapshotSource(tmp_path).load_snapshot("site-1")
        
        device_type = snapshot.device_type("gpu-h100")
        assert device_type.category is DeviceCategory.GPU_SERVER
        assert device_type.gpu_slots == 8
        (site,) = snapshot.sites
        assert site.name == "Ashburn"
        assert site.status is SiteStatus.AI_READY
        assert site.rack_count == 120
    
    def test_missing_site(self, tmp_path):
        """Test an unknown site raises not found."""
        with pytest.raises(SnapshotNotFoundError):
            JsonSnapshotSource(tmp_path).load_snapshot("site-9")
    
    def test_site_id_cannot_escape_data_dir(self, tmp_path):
        """Test path components in the site id are ignored."""
        data_dir = tmp_path / "sites"
        data_dir.mkdir()
        write_json(tmp_path / "secret.json", SCENE)
        
        with pytest.raises(SnapshotNotFoundError):
            JsonSnapshotSource(data_dir).load_snapshot("../secret")
    
    def test_malformed_json(self, tmp_path):
        """Test unparsable documents raise a format error."""
        (tmp_path / "site-1.json").write_text("{not json", encoding="utf-8")
        
        with pytest.raises(SnapshotFormatError):
            JsonSnapshotSource(tmp_path).load_snapshot("site-1")
    
    def test_schema_violation(self, tmp_path):
        """Test documents missing required fields raise a format error."""
        write_json(tmp_path / "site-1.json", {"racks": [{"id": "rack1"}]})
        
        with pytest.raises(SnapshotFormatError):
            JsonSnapshotSource(tmp_path).load_snapshot("site-1")
    
    def test_cache_ttl(self, tmp_path):
        """Test snapshots are reused until the TTL expires."""
        clock = FakeClock()
        source = JsonSnapshotSource(tmp_path, cache_ttl_seconds=300, clock=clock)
        write_json(tmp_path / "site-1.json", SCENE)
        first = source.load_snapshot("site-1")
        
        write_json(tmp_path / "site-1.json", {**SCENE, "devices": []})
        clock.now = 299.0
        assert source.load_snapshot("site-1") is first
        
        clock.now = 301.0
        refreshed = source.load_snapshot("site-1")
        assert refreshed is not first
        assert refreshed.devices == ()
    
    def test_invalidate(self, tmp_path):
        """Test invalidation forces a reload."""
        source = JsonSnapshotSource(tmp_path, clock=FakeClock())
        write_json(tmp_path / "site-1.json", SCENE)
        first = source.load_snapshot("site-1")
        
        source.invalidate("site-1")
        assert source.load_snapshot("site-1") is not first
        
        second = source.load_snapshot("site-1")
        source.invalidate()
        assert source.load_snapshot("site-1") is not second


@pytest.mark.unit
class TestInMemorySnapshotSource:
    """Test the in-memory snapshot source."""
    
    def test_publish_normalizes(self, three_rack_snapshot):
        """Test published snapshots are normalized."""
        source = InMemorySnapshotSource(three_rack_snapshot)
        
        snapshot = source.load_snapshot("site-1")
        
        assert [b.id for b in snapshot.buildings] == [DEFAULT_BUILDING_ID]
        assert snapshot.racks == three_rack_snapshot.racks
    
    def test_publish_replaces(self, three_rack_snapshot):
        """Test publishing again swaps the snapshot."""
        source = InMemorySnapshotSource(three_rack_snapshot)
        source.publish(three_rack_snapshot.with_devices([]))
        assert source.load_snapshot("site-1").devices == ()
    
    def test_unknown_site(self):
        """Test loading an unpublished site raises not found."""
        with pytest.raises(SnapshotNotFoundError):
            InMemorySnapshotSource().load_snapshot("site-1")
