"""Free-slot enumeration for a rack.

Lists every legal starting unit for a device of a given height. Racks are
small (tens of units, tens of occupants), so a direct scan of every
position against every occupied range is enough; no index is kept.
"""

from __future__ import annotations

from typing import Iterable

from rack_capacity.domain.entities.device import Device
from rack_capacity.domain.entities.facility import Rack
from rack_capacity.domain.services.placement_validator import find_rack
from rack_capacity.domain.value_objects.unit_range import UnitRange


def occupied_ranges(rack_id: str, all_devices: Iterable[Device]) -> list[UnitRange]:
    """Unit ranges held by present (non-removed) devices in a rack."""
    return [
        device.unit_range
        for device in all_devices
        if device.rack_id == rack_id and not device.is_removed
    ]


def available_slots(
    rack_id: str,
    device_height: int,
    all_devices: Iterable[Device],
    all_racks: Iterable[Rack],
) -> list[int]:
    """Starting units, ascending, where a device of ``device_height`` fits.

    An unknown or full rack yields an empty list, which callers treat as
    "no placement possible" rather than a failure.
    """
    rack = find_rack(rack_id, all_racks)
    if rack is None:
        return []

    height = max(device_height, 1)
    occupied = occupied_ranges(rack.id, all_devices)

    slots = []
    for u in range(1, rack.effective_u_height - height + 2):
        candidate = UnitRange.from_span(u, height)
        if not any(candidate.overlaps(taken) for taken in occupied):
            slots.append(u)
    return slots


def free_unit_count(rack: Rack, devices: Iterable[Device]) -> int:
    """Rack capacity minus the units claimed by ``devices`` in that rack."""
    used = sum(d.effective_u_height for d in devices if d.rack_id == rack.id)
    return rack.effective_u_height - used
