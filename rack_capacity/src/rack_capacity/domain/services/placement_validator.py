"""Placement validation for slotting a device into a rack.

The validator decides whether a device may start at a given unit of a
target rack and explains why not. Checks run in order:

1. Target rack exists (fatal)
2. Starting unit lies inside the rack (fatal)
3. Device height fits below the top of the rack (fatal)
4. No overlap with other present devices (one error per conflict)
5. Power headroom advisory (warning only)
6. GPU cooling/power advisory (warning only)

Fatal checks short-circuit. Conflicts are all reported together so a
planner sees the complete picture. Warnings never affect validity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from rack_capacity.domain.entities.device import Device, DeviceCategory, DeviceType
from rack_capacity.domain.entities.facility import Rack
from rack_capacity.domain.value_objects.identifiers import DeviceTypeId
from rack_capacity.domain.value_objects.unit_range import UnitRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementPolicy:
    """Tunable thresholds for placement advisories."""
    power_warning_margin: float = 0.10     # Warn when within 10% of the limit
    gpu_keywords: tuple[str, ...] = ("gpu",)


DEFAULT_PLACEMENT_POLICY = PlacementPolicy()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a placement check."""
    valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass
class _ResultBuilder:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def build(self) -> ValidationResult:
        return ValidationResult(
            valid=not self.errors,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
        )


def find_rack(rack_id: str, all_racks: Iterable[Rack]) -> Optional[Rack]:
    for rack in all_racks:
        if rack.id == rack_id:
            return rack
    return None


def validate_placement(
    device: Device,
    target_rack_id: str,
    target_u_start: int,
    all_devices: Iterable[Device],
    all_racks: Iterable[Rack],
    device_types: Optional[Mapping[DeviceTypeId, DeviceType]] = None,
    policy: PlacementPolicy = DEFAULT_PLACEMENT_POLICY,
) -> ValidationResult:
    """Validate placing ``device`` at ``target_u_start`` in ``target_rack_id``.

    Args:
        device: Device being placed or moved.
        target_rack_id: Rack that should receive the device.
        target_u_start: 1-based starting unit.
        all_devices: Every device in the snapshot.
        all_racks: Every rack in the snapshot.
        device_types: Optional catalog used by the GPU advisory.
        policy: Advisory thresholds.

    Returns:
        ValidationResult; ``valid`` is True iff no error was recorded.
    """
    result = _ResultBuilder()

    rack = find_rack(target_rack_id, all_racks)
    if rack is None:
        result.error("Target rack not found")
        return result.build()

    max_u = rack.effective_u_height
    if target_u_start < 1 or target_u_start > max_u:
        result.error(f"U position must be between 1 and {max_u}")
        return result.build()

    device_height = device.effective_u_height
    candidate = UnitRange.from_span(target_u_start, device_height)
    if candidate.end > max_u:
        result.error(
            f"Device requires {device_height}U but would exceed rack height ({max_u}U)"
        )
        return result.build()

    for existing in all_devices:
        if existing.rack_id != rack.id or existing.id == device.id or existing.is_removed:
            continue
        occupied = existing.unit_range
        if occupied.overlaps(candidate):
            result.error(f"Conflict with {existing.name} at {occupied}")

    _check_power(device, rack, policy, result)

    if _is_gpu_device(device, device_types, policy):
        result.warn(
            "GPU servers require high power and cooling redundancy - verify rack capacity"
        )

    outcome = result.build()
    if not outcome.valid:
        logger.debug(
            f"Placement of {device.id} at {rack.id}/U{target_u_start} rejected: "
            f"{len(outcome.errors)} error(s)"
        )
    return outcome


def _check_power(
    device: Device,
    rack: Rack,
    policy: PlacementPolicy,
    result: _ResultBuilder,
) -> None:
    """Append power advisories for the load after the hypothetical move."""
    if not rack.has_power_limit:
        result.warn(f"Rack {rack.name} power capacity is not configured")
        return

    projected = rack.current_power_kw
    if device.rack_id == rack.id:
        projected -= device.power_kw
    projected += device.power_kw

    limit = rack.power_kw_limit
    if projected > limit:
        result.warn(
            f"Projected load {projected:.1f}kW exceeds rack power capacity ({limit:.1f}kW)"
        )
    elif projected >= limit * (1.0 - policy.power_warning_margin):
        margin_pct = round(policy.power_warning_margin * 100)
        result.warn(
            f"Projected load {projected:.1f}kW is within {margin_pct}% of power limit "
            f"({limit:.1f}kW)"
        )


def _is_gpu_device(
    device: Device,
    device_types: Optional[Mapping[DeviceTypeId, DeviceType]],
    policy: PlacementPolicy,
) -> bool:
    """Heuristic: the type id, catalog name or category hints at GPU compute."""
    haystacks = [device.device_type_id.lower()]
    if device_types is not None:
        device_type = device_types.get(device.device_type_id)
        if device_type is not None:
            if device_type.category is DeviceCategory.GPU_SERVER:
                return True
            if device_type.name:
                haystacks.append(device_type.name.lower())
            haystacks.append(device_type.model_ref.lower())
    return any(keyword in text for keyword in policy.gpu_keywords for text in haystacks)
