"""Relocation and removal planning.

Planning never writes anything. It validates the move against the target
phase and builds the candidate device records plus the history entries the
persistence layer should commit. Two relocation styles exist:

- MODIFIED: the record moves in place and is marked MODIFIED.
- CREATE_PROPOSED: the original is marked EXISTING_REMOVED and a PROPOSED
  copy sharing its logical equipment id appears at the target.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, assert_never

from rack_capacity.domain.entities.device import Device
from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.services.placement_validator import (
    DEFAULT_PLACEMENT_POLICY,
    PlacementPolicy,
    ValidationResult,
    validate_placement,
)
from rack_capacity.domain.value_objects.identifiers import (
    DeviceId,
    RackId,
    create_device_id,
    create_logical_equipment_id,
)
from rack_capacity.domain.value_objects.lifecycle import MoveType, Phase, Status4D

logger = logging.getLogger(__name__)


class ModificationType(str, Enum):
    MOVE = "move"
    ADD = "add"
    REMOVE = "remove"
    EDIT = "edit"


@dataclass(frozen=True)
class RackLocation:
    rack_id: RackId
    u_position: int


@dataclass(frozen=True)
class StatusChange:
    from_status: Optional[Status4D]
    to_status: Status4D


@dataclass(frozen=True)
class ModificationRecord:
    """Equipment history entry produced by a plan."""
    type: ModificationType
    device_id: DeviceId
    device_name: str
    id: str = field(default_factory=lambda: f"mod_{uuid.uuid4().hex[:12]}")
    timestamp: float = field(default_factory=time.time)
    from_location: Optional[RackLocation] = None
    to_location: Optional[RackLocation] = None
    status_change: Optional[StatusChange] = None
    target_phase: Optional[Phase] = None
    notes: str = ""


@dataclass(frozen=True)
class MovePlan:
    """Result of planning a relocation.

    ``updated_device`` is the original record as it should be stored after
    the move; ``new_device`` is only set for CREATE_PROPOSED moves.
    """
    validation: ValidationResult
    move_type: MoveType
    updated_device: Optional[Device] = None
    new_device: Optional[Device] = None
    history: tuple[ModificationRecord, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.validation.valid

    @property
    def changed_devices(self) -> tuple[Device, ...]:
        return tuple(d for d in (self.updated_device, self.new_device) if d is not None)


@dataclass(frozen=True)
class RemovalPlan:
    updated_device: Device
    history: tuple[ModificationRecord, ...]


def plan_move(
    device: Device,
    target_rack_id: str,
    target_u_start: int,
    move_type: MoveType,
    snapshot: FacilitySnapshot,
    target_phase: Phase = Phase.TO_BE,
    policy: PlacementPolicy = DEFAULT_PLACEMENT_POLICY,
) -> MovePlan:
    """Validate and build the records for relocating ``device``.

    Occupancy is judged against every record in the rack whatever its
    phase, so a future reservation blocks a TO_BE move as well; only
    removed devices and ``device`` itself leave their units free.
    ``target_phase`` is recorded in the history entries.
    """
    validation = validate_placement(
        device,
        target_rack_id,
        target_u_start,
        snapshot.devices,
        snapshot.racks,
        device_types=snapshot.device_type_index(),
        policy=policy,
    )
    if not validation.valid:
        return MovePlan(validation=validation, move_type=move_type)

    rack_id = RackId(target_rack_id)
    origin = RackLocation(rack_id=device.rack_id, u_position=device.u_start)
    target = RackLocation(rack_id=rack_id, u_position=target_u_start)

    match move_type:
        case MoveType.MODIFIED:
            updated = replace(
                device,
                rack_id=rack_id,
                u_start=target_u_start,
                status_4d=Status4D.MODIFIED,
            )
            record = ModificationRecord(
                type=ModificationType.MOVE,
                device_id=device.id,
                device_name=device.name,
                from_location=origin,
                to_location=target,
                status_change=StatusChange(device.status_4d, Status4D.MODIFIED),
                target_phase=target_phase,
                notes=f"Device moved from rack {device.rack_id} to {rack_id}",
            )
            logger.info(f"Planned in-place move of {device.id} to {rack_id}/U{target_u_start}")
            return MovePlan(
                validation=validation,
                move_type=move_type,
                updated_device=updated,
                history=(record,),
            )
        case MoveType.CREATE_PROPOSED:
            logical_id = device.logical_equipment_id or create_logical_equipment_id(device.id)
            retired = replace(
                device,
                status_4d=Status4D.EXISTING_REMOVED,
                logical_equipment_id=logical_id,
            )
            proposed = replace(
                device,
                id=create_device_id(),
                rack_id=rack_id,
                u_start=target_u_start,
                status_4d=Status4D.PROPOSED,
                logical_equipment_id=logical_id,
            )
            history = (
                ModificationRecord(
                    type=ModificationType.MOVE,
                    device_id=device.id,
                    device_name=device.name,
                    from_location=origin,
                    status_change=StatusChange(device.status_4d, Status4D.EXISTING_REMOVED),
                    target_phase=target_phase,
                    notes="Original device marked for removal (relocation planned)",
                ),
                ModificationRecord(
                    type=ModificationType.ADD,
                    device_id=proposed.id,
                    device_name=proposed.name,
                    to_location=target,
                    status_change=StatusChange(None, Status4D.PROPOSED),
                    target_phase=target_phase,
                    notes=f"New device created for planned relocation (linked: {logical_id})",
                ),
            )
            logger.info(
                f"Planned relocation of {device.id} as {proposed.id} at {rack_id}/U{target_u_start}"
            )
            return MovePlan(
                validation=validation,
                move_type=move_type,
                updated_device=retired,
                new_device=proposed,
                history=history,
            )
        case _:
            assert_never(move_type)


def plan_removal(device: Device) -> RemovalPlan:
    """Soft-delete a device.

    Retained devices become EXISTING_REMOVED; any other status is kept, as
    the record is already a planning artifact.
    """
    new_status = (
        Status4D.EXISTING_REMOVED
        if device.status_4d is Status4D.EXISTING_RETAINED
        else device.status_4d
    )
    updated = replace(device, status_4d=new_status)
    record = ModificationRecord(
        type=ModificationType.REMOVE,
        device_id=device.id,
        device_name=device.name,
        from_location=RackLocation(rack_id=device.rack_id, u_position=device.u_start),
        status_change=StatusChange(device.status_4d, new_status),
        notes="Device soft-deleted",
    )
    return RemovalPlan(updated_device=updated, history=(record,))
