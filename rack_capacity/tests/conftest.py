"""Pytest configuration and shared fixtures for rack capacity tests."""

import pytest

from rack_capacity.domain.entities.device import Device
from rack_capacity.domain.entities.facility import Rack, Room
from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.value_objects.identifiers import (
    DeviceId,
    DeviceTypeId,
    LogicalEquipmentId,
    RackId,
    RoomId,
)
from rack_capacity.domain.value_objects.lifecycle import Status4D
from rack_capacity.infrastructure.config import Config, get_config
from rack_capacity.infrastructure.container import Container


def build_rack(
    rack_id: str,
    name: str | None = None,
    room_id: str = "room1",
    u_height: int = 42,
    power_kw_limit: float = 10.0,
    current_power_kw: float = 0.0,
) -> Rack:
    """Build a rack with test defaults."""
    return Rack(
        id=RackId(rack_id),
        room_id=RoomId(room_id),
        name=name or rack_id,
        u_height=u_height,
        power_kw_limit=power_kw_limit,
        current_power_kw=current_power_kw,
    )


def build_device(
    device_id: str,
    rack_id: str,
    u_start: int,
    u_height: int = 1,
    status: Status4D = Status4D.EXISTING_RETAINED,
    power_kw: float = 0.0,
    device_type_id: str = "server-1u",
    logical_id: str | None = None,
    name: str | None = None,
) -> Device:
    """Build a device with test defaults."""
    return Device(
        id=DeviceId(device_id),
        rack_id=RackId(rack_id),
        device_type_id=DeviceTypeId(device_type_id),
        logical_equipment_id=LogicalEquipmentId(logical_id) if logical_id else None,
        name=name or device_id,
        u_start=u_start,
        u_height=u_height,
        status_4d=status,
        power_kw=power_kw,
    )


@pytest.fixture
def make_rack():
    """Factory for racks with test defaults."""
    return build_rack


@pytest.fixture
def make_device():
    """Factory for devices with test defaults."""
    return build_device


@pytest.fixture(autouse=True)
def reset_container():
    """Reset the DI container and cached config before each test."""
    Container.reset()
    get_config.cache_clear()
    yield
    Container.reset()
    get_config.cache_clear()


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration."""
    return Config()


@pytest.fixture
def three_rack_snapshot() -> FacilitySnapshot:
    """Three 42U racks, 10kW limit, drawing 4/3/8kW; 2U and 4U devices in the first two."""
    return FacilitySnapshot.build(
        site_id="site-1",
        rooms=[Room(id=RoomId("room1"), name="Server Room 1")],
        racks=[
            build_rack("rack1", "Rack 01", current_power_kw=4.0),
            build_rack("rack2", "Rack 02", current_power_kw=3.0),
            build_rack("rack3", "Rack 03", current_power_kw=8.0),
        ],
        devices=[
            build_device("device1", "rack1", u_start=1, u_height=2, logical_id="eq1", name="Server 1"),
            build_device("device2", "rack2", u_start=1, u_height=4, logical_id="eq2", name="Server 2"),
        ],
    )


@pytest.fixture
def five_rack_snapshot(three_rack_snapshot: FacilitySnapshot) -> FacilitySnapshot:
    """The three-rack room extended with two lightly loaded racks."""
    return FacilitySnapshot.build(
        site_id="site-1",
        rooms=three_rack_snapshot.rooms,
        racks=[
            *three_rack_snapshot.racks,
            build_rack("rack4", "Rack 04", current_power_kw=2.0),
            build_rack("rack5", "Rack 05", current_power_kw=2.0),
        ],
        devices=three_rack_snapshot.devices,
    )


# Pytest markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "property: mark test as property-based test")
