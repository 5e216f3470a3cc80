"""Phase/status visibility projection.

Maps a planning phase to the set of 4D statuses visible in it:

    AS_IS   -> EXISTING_RETAINED, EXISTING_REMOVED
    TO_BE   -> EXISTING_RETAINED, PROPOSED, MODIFIED
    FUTURE  -> EXISTING_RETAINED, PROPOSED, FUTURE, MODIFIED

A device is visible iff its status is allowed by the phase AND the
operator's toggle for that status is enabled. The projector holds no state;
renderers and the capacity search both consult it.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, assert_never

from rack_capacity.domain.entities.device import Device
from rack_capacity.domain.value_objects.lifecycle import Phase, Status4D

StatusToggles = Mapping[Status4D, bool]


def visible_statuses(phase: Phase) -> frozenset[Status4D]:
    """Statuses considered present in ``phase``."""
    match phase:
        case Phase.AS_IS:
            return frozenset({Status4D.EXISTING_RETAINED, Status4D.EXISTING_REMOVED})
        case Phase.TO_BE:
            return frozenset({
                Status4D.EXISTING_RETAINED,
                Status4D.PROPOSED,
                Status4D.MODIFIED,
            })
        case Phase.FUTURE:
            return frozenset({
                Status4D.EXISTING_RETAINED,
                Status4D.PROPOSED,
                Status4D.FUTURE,
                Status4D.MODIFIED,
            })
        case _:
            assert_never(phase)


def is_status_visible(
    status: Status4D,
    phase: Phase,
    toggles: Optional[StatusToggles] = None,
) -> bool:
    """Check a status against the phase and the per-status toggles.

    Statuses missing from ``toggles`` count as enabled.
    """
    if status not in visible_statuses(phase):
        return False
    if toggles is None:
        return True
    return toggles.get(status, True)


def is_device_visible(
    device: Device,
    phase: Phase,
    toggles: Optional[StatusToggles] = None,
) -> bool:
    return is_status_visible(device.status_4d, phase, toggles)


def visible_devices(
    devices: Iterable[Device],
    phase: Phase,
    toggles: Optional[StatusToggles] = None,
) -> list[Device]:
    """Filter ``devices`` down to the ones visible in ``phase``."""
    allowed = visible_statuses(phase)
    return [
        d for d in devices
        if d.status_4d in allowed and (toggles is None or toggles.get(d.status_4d, True))
    ]
