"""Unit tests for move planning, hierarchy normalization and facility audits."""

import pytest
from rack_capacity.domain.entities.facility import Building, Floor, Room
from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.services.facility_audit import (
    FindingCode,
    FindingSeverity,
    audit_facility,
)
from rack_capacity.domain.services.hierarchy import normalize_hierarchy
from rack_capacity.domain.services.move_planner import (
    ModificationType,
    RackLocation,
    StatusChange,
    plan_move,
    plan_removal,
)
from rack_capacity.domain.value_objects.identifiers import (
    DEFAULT_BUILDING_ID,
    DEFAULT_FLOOR_ID,
    BuildingId,
    FloorId,
    RoomId,
)
from rack_capacity.domain.value_objects.lifecycle import MoveType, Phase, Status4D


def _apply(snapshot: FacilitySnapshot, plan) -> FacilitySnapshot:
    """Write an accepted plan's records back into the snapshot."""
    changed = {d.id: d for d in plan.changed_devices}
    kept = [changed.pop(d.id, d) for d in snapshot.devices]
    return snapshot.with_devices([*kept, *changed.values()])


@pytest.mark.unit
class TestMovePlanner:
    """Test relocation planning."""
    
    def test_modified_move(self, three_rack_snapshot: FacilitySnapshot):
        """Test an in-place move updates the record and marks it MODIFIED."""
        device = three_rack_snapshot.device("device1")
        
        plan = plan_move(device, "rack3", 10, MoveType.MODIFIED, three_rack_snapshot)
        
        assert plan.accepted
        assert plan.new_device is None
        assert plan.updated_device.id == "device1"
        assert plan.updated_device.rack_id == "rack3"
        assert plan.updated_device.u_start == 10
        assert plan.updated_device.status_4d is Status4D.MODIFIED
        assert plan.changed_devices == (plan.updated_device,)
        
        (record,) = plan.history
        assert record.type is ModificationType.MOVE
        assert record.from_location == RackLocation("rack1", 1)
        assert record.to_location == RackLocation("rack3", 10)
        assert record.status_change == StatusChange(Status4D.EXISTING_RETAINED, Status4D.MODIFIED)
        assert record.target_phase is Phase.TO_BE
        assert record.id.startswith("mod_")
    
    def test_create_proposed_move(self, three_rack_snapshot: FacilitySnapshot):
        """Test a proposed relocation retires the original and links a copy."""
        device = three_rack_snapshot.device("device1")
        
        plan = plan_move(device, "rack3", 10, MoveType.CREATE_PROPOSED, three_rack_snapshot)
        
        assert plan.accepted
        retired, proposed = plan.updated_device, plan.new_device
        assert retired.id == "device1"
        assert retired.rack_id == "rack1"
        assert retired.status_4d is Status4D.EXISTING_REMOVED
        assert proposed.id != device.id
        assert proposed.rack_id == "rack3"
        assert proposed.u_start == 10
        assert proposed.status_4d is Status4D.PROPOSED
        assert proposed.logical_equipment_id == retired.logical_equipment_id == "eq1"
        assert [r.type for r in plan.history] == [ModificationType.MOVE, ModificationType.ADD]
        assert plan.history[1].device_id == proposed.id
    
    def test_create_proposed_assigns_logical_id(self, make_rack, make_device):
        """Test a device without a logical id gets one derived from its id."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            racks=[make_rack("rack1"), make_rack("rack2")],
            devices=[make_device("d1", "rack1", u_start=1)],
        )
        
        plan = plan_move(snapshot.device("d1"), "rack2", 1, MoveType.CREATE_PROPOSED, snapshot)
        
        assert plan.updated_device.logical_equipment_id == "logical-d1"
        assert plan.new_device.logical_equipment_id == "logical-d1"
    
    def test_create_proposed_each_visible_in_its_phase(self, three_rack_snapshot):
        """Test the retired record shows in AS_IS and the copy in TO_BE."""
        device = three_rack_snapshot.device("device1")
        plan = plan_move(device, "rack3", 10, MoveType.CREATE_PROPOSED, three_rack_snapshot)
        
        report_as_is = audit_facility(
            three_rack_snapshot.with_devices(plan.changed_devices), Phase.AS_IS
        )
        report_to_be = audit_facility(
            three_rack_snapshot.with_devices(plan.changed_devices), Phase.TO_BE
        )
        
        assert report_as_is.by_code(FindingCode.DUPLICATE_VISIBLE_ASSET) == []
        assert report_to_be.by_code(FindingCode.DUPLICATE_VISIBLE_ASSET) == []
    
    def test_rejected_move(self, three_rack_snapshot: FacilitySnapshot):
        """Test a conflicting move produces no records."""
        device = three_rack_snapshot.device("device1")
        
        plan = plan_move(device, "rack2", 3, MoveType.MODIFIED, three_rack_snapshot)
        
        assert not plan.accepted
        assert plan.validation.errors == ("Conflict with Server 2 at U1-U4",)
        assert plan.updated_device is None
        assert plan.history == ()
        assert plan.changed_devices == ()
    
    def test_future_reservation_blocks_every_phase(self, three_rack_snapshot, make_device):
        """Test a FUTURE reservation blocks a TO_BE move as well as a FUTURE one."""
        snapshot = three_rack_snapshot.with_devices([
            *three_rack_snapshot.devices,
            make_device("reserved", "rack3", u_start=10, u_height=4, status=Status4D.FUTURE),
        ])
        device = snapshot.device("device1")
        
        for phase in (Phase.TO_BE, Phase.FUTURE):
            plan = plan_move(device, "rack3", 10, MoveType.MODIFIED, snapshot, target_phase=phase)
            assert not plan.accepted
            assert plan.validation.errors == ("Conflict with reserved at U10-U13",)
            assert plan.history == ()
    
    def test_applied_plans_never_overlap(self, three_rack_snapshot, make_device):
        """Test applying accepted plans one after another keeps every rack overlap-free."""
        snapshot = three_rack_snapshot.with_devices([
            *three_rack_snapshot.devices,
            make_device("reserved", "rack3", u_start=10, u_height=4, status=Status4D.FUTURE),
        ])
        requests = [
            ("device1", "rack3", 10, MoveType.MODIFIED, Phase.TO_BE),
            ("device1", "rack3", 20, MoveType.MODIFIED, Phase.TO_BE),
            ("device2", "rack3", 21, MoveType.CREATE_PROPOSED, Phase.TO_BE),
            ("device2", "rack3", 22, MoveType.CREATE_PROPOSED, Phase.FUTURE),
            ("device1", "rack2", 1, MoveType.MODIFIED, Phase.TO_BE),
        ]
        
        accepted = []
        for device_id, rack_id, u_start, move_type, phase in requests:
            plan = plan_move(snapshot.device(device_id), rack_id, u_start, move_type, snapshot, target_phase=phase)
            accepted.append(plan.accepted)
            if plan.accepted:
                snapshot = _apply(snapshot, plan)
        
        assert accepted == [False, True, False, True, True]
        assert snapshot.device("device1").rack_id == "rack2"
        for phase in Phase:
            assert audit_facility(snapshot, phase).by_code(FindingCode.U_OVERLAP) == []
    
    def test_move_within_rack(self, three_rack_snapshot: FacilitySnapshot):
        """Test a device can shift inside its own rack."""
        device = three_rack_snapshot.device("device1")
        plan = plan_move(device, "rack1", 2, MoveType.MODIFIED, three_rack_snapshot)
        assert plan.accepted
        assert plan.updated_device.u_start == 2


@pytest.mark.unit
class TestRemovalPlanner:
    """Test soft-delete planning."""
    
    def test_retained_becomes_removed(self, three_rack_snapshot: FacilitySnapshot):
        """Test an installed device is marked for removal."""
        plan = plan_removal(three_rack_snapshot.device("device2"))
        
        assert plan.updated_device.status_4d is Status4D.EXISTING_REMOVED
        assert plan.updated_device.rack_id == "rack2"
        (record,) = plan.history
        assert record.type is ModificationType.REMOVE
        assert record.status_change.to_status is Status4D.EXISTING_REMOVED
    
    def test_planning_status_kept(self, make_device):
        """Test a proposed device keeps its status."""
        device = make_device("d1", "rack1", u_start=1, status=Status4D.PROPOSED)
        assert plan_removal(device).updated_device.status_4d is Status4D.PROPOSED


@pytest.mark.unit
class TestHierarchyNormalization:
    """Test legacy hierarchy normalization."""
    
    def test_defaults_added(self, three_rack_snapshot: FacilitySnapshot):
        """Test missing building and floor are synthesized."""
        normalized = normalize_hierarchy(three_rack_snapshot)
        
        assert [b.id for b in normalized.buildings] == [DEFAULT_BUILDING_ID]
        assert normalized.buildings[0].name == "Main Building"
        (floor,) = normalized.floors
        assert floor.id == DEFAULT_FLOOR_ID
        assert floor.building_id == DEFAULT_BUILDING_ID
        assert floor.level == 0
        assert all(room.floor_id == DEFAULT_FLOOR_ID for room in normalized.rooms)
        assert normalized.racks == three_rack_snapshot.racks
        assert normalized.devices == three_rack_snapshot.devices
    
    def test_idempotent(self, three_rack_snapshot: FacilitySnapshot):
        """Test normalizing twice changes nothing."""
        once = normalize_hierarchy(three_rack_snapshot)
        assert normalize_hierarchy(once) is once
    
    def test_existing_floors_kept(self):
        """Test rooms without a floor go to the default floor beside existing ones."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            buildings=[Building(id=BuildingId("b1"), site_id="site-1", name="Hall")],
            floors=[
                Floor(id=FloorId("f1"), building_id=BuildingId("b1"), name="L1", level=1),
                Floor(id=FloorId("f0"), building_id=BuildingId("b1"), name="L0"),
            ],
            rooms=[
                Room(id=RoomId("r1"), name="Room 1"),
                Room(id=RoomId("r2"), name="Room 2", floor_id=FloorId("f0")),
            ],
        )
        
        normalized = normalize_hierarchy(snapshot)
        
        assert [b.id for b in normalized.buildings] == ["b1"]
        assert [f.id for f in normalized.floors] == ["f1", "f0", DEFAULT_FLOOR_ID]
        assert normalized.floors[-1].building_id == "b1"
        assert [r.floor_id for r in normalized.rooms] == [DEFAULT_FLOOR_ID, "f0"]
        assert normalize_hierarchy(normalized) is normalized
    
    def test_default_floor_reused(self):
        """Test an existing default floor is reused rather than duplicated."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            buildings=[Building(id=BuildingId("b1"), site_id="site-1", name="Hall")],
            floors=[
                Floor(id=FloorId("f1"), building_id=BuildingId("b1"), name="L1", level=1),
                Floor(id=DEFAULT_FLOOR_ID, building_id=BuildingId("b1"), name="Ground Floor"),
            ],
            rooms=[Room(id=RoomId("r1"), name="Room 1")],
        )
        
        normalized = normalize_hierarchy(snapshot)
        
        assert normalized.floors == snapshot.floors
        assert [r.floor_id for r in normalized.rooms] == [DEFAULT_FLOOR_ID]
    
    def test_floored_rooms_untouched(self):
        """Test no default floor is added when every room already has one."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            buildings=[Building(id=BuildingId("b1"), site_id="site-1", name="Hall")],
            floors=[Floor(id=FloorId("f1"), building_id=BuildingId("b1"), name="L1", level=1)],
            rooms=[Room(id=RoomId("r1"), name="Room 1", floor_id=FloorId("f1"))],
        )
        assert normalize_hierarchy(snapshot) is snapshot


@pytest.mark.unit
class TestFacilityAudit:
    """Test facility consistency audits."""
    
    def test_clean_snapshot(self, make_rack, make_device):
        """Test a consistent snapshot has no findings."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            racks=[make_rack("rack1", current_power_kw=1.5)],
            devices=[
                make_device("d1", "rack1", u_start=1, u_height=2, power_kw=1.0),
                make_device("d2", "rack1", u_start=3, power_kw=0.5),
            ],
        )
        report = audit_facility(snapshot, Phase.AS_IS)
        assert report.is_clean
    
    def test_overlap_detected(self, make_rack, make_device):
        """Test overlapping present devices are reported."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            racks=[make_rack("rack1")],
            devices=[
                make_device("d1", "rack1", u_start=1, u_height=2),
                make_device("d2", "rack1", u_start=2, u_height=2),
                make_device("d3", "rack1", u_start=1, u_height=4, status=Status4D.EXISTING_REMOVED),
            ],
        )
        
        report = audit_facility(snapshot, Phase.AS_IS)
        
        (finding,) = report.by_code(FindingCode.U_OVERLAP)
        assert finding.severity is FindingSeverity.ERROR
        assert finding.context["device_ids"] == ["d1", "d2"]
    
    def test_out_of_bounds(self, make_rack, make_device):
        """Test devices extending past the rack top are reported."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            racks=[make_rack("rack1")],
            devices=[make_device("d1", "rack1", u_start=41, u_height=4)],
        )
        report = audit_facility(snapshot, Phase.AS_IS)
        assert len(report.by_code(FindingCode.OUT_OF_BOUNDS)) == 1
    
    def test_unknown_rack(self, make_device):
        """Test dangling rack references are reported."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            devices=[make_device("d1", "ghost", u_start=1)],
        )
        report = audit_facility(snapshot, Phase.AS_IS)
        assert [f.code for f in report.findings] == [FindingCode.UNKNOWN_RACK]
    
    def test_power_drift(self, three_rack_snapshot: FacilitySnapshot):
        """Test cached rack draw is compared with device power."""
        report = audit_facility(three_rack_snapshot, Phase.AS_IS)
        
        drift = report.by_code(FindingCode.POWER_DRIFT)
        assert len(drift) == 3
        assert report.count(FindingSeverity.WARNING) == 3
        assert drift[0].context == {"rack_id": "rack1", "drift_kw": 4.0}
    
    def test_power_drift_tolerance(self, make_rack, make_device):
        """Test drift within tolerance is ignored."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            racks=[make_rack("rack1", current_power_kw=1.05)],
            devices=[make_device("d1", "rack1", u_start=1, power_kw=1.0)],
        )
        assert audit_facility(snapshot, Phase.AS_IS, tolerance_kw=0.1).is_clean
        assert not audit_facility(snapshot, Phase.AS_IS, tolerance_kw=0.01).is_clean
    
    def test_duplicate_visible_asset(self, make_rack, make_device):
        """Test one logical asset shown twice in a phase is flagged."""
        snapshot = FacilitySnapshot.build(
            site_id="site-1",
            racks=[make_rack("rack1"), make_rack("rack2")],
            devices=[
                make_device("d1", "rack1", u_start=1, status=Status4D.MODIFIED, logical_id="eq1"),
                make_device("d2", "rack2", u_start=1, status=Status4D.MODIFIED, logical_id="eq1"),
            ],
        )
        
        to_be = audit_facility(snapshot, Phase.TO_BE)
        as_is = audit_facility(snapshot, Phase.AS_IS)
        
        (finding,) = to_be.by_code(FindingCode.DUPLICATE_VISIBLE_ASSET)
        assert finding.severity is FindingSeverity.INFO
        assert finding.context["device_ids"] == ["d1", "d2"]
        assert as_is.is_clean
