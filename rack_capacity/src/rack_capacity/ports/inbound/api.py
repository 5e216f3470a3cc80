"""Inbound port interfaces for the rack capacity engine.

Inbound ports define what the engine offers to external clients such as
the scene renderer, planning dialogs and the REST adapter.
"""

from __future__ import annotations

from typing import Optional, Protocol

from rack_capacity.domain.entities.device import Device
from rack_capacity.domain.services.capacity_search import CapacityRequest, CapacitySuggestion
from rack_capacity.domain.services.facility_audit import AuditReport
from rack_capacity.domain.services.move_planner import MovePlan, RemovalPlan
from rack_capacity.domain.services.placement_validator import ValidationResult
from rack_capacity.domain.value_objects.lifecycle import MoveType, Phase, Status4D


class PlacementPlanningAPI(Protocol):
    """Main API offered by the rack capacity engine."""

    def validate_placement(
        self, site_id: str, device_id: str, target_rack_id: str, target_u_start: int
    ) -> ValidationResult:
        """Check whether a device may start at a unit of a target rack.

        Args:
            site_id: Site whose snapshot to use.
            device_id: Device being placed.
            target_rack_id: Receiving rack.
            target_u_start: 1-based starting unit.

        Returns:
            Validation result with errors and warnings.
        """
        ...

    def validate_candidate(
        self, site_id: str, device: Device, target_rack_id: str, target_u_start: int
    ) -> ValidationResult:
        """Check a device that is not part of the snapshot, e.g. a catalog item."""
        ...

    def available_slots(self, site_id: str, rack_id: str, u_height: int) -> list[int]:
        """List legal starting units for a device height in a rack."""
        ...

    def find_capacity(self, site_id: str, phase: Phase) -> Optional[CapacitySuggestion]:
        """Find the best AI-ready block of racks, or None."""
        ...

    def find_capacity_with_alternatives(
        self, site_id: str, phase: Phase, alternatives: int
    ) -> tuple[Optional[CapacitySuggestion], list[CapacitySuggestion]]:
        """Best block and up to `alternatives` runners-up, judged on one snapshot."""
        ...

    def rank_capacity(
        self, site_id: str, phase: Phase, limit: Optional[int] = None
    ) -> list[CapacitySuggestion]:
        """Top scored capacity blocks."""
        ...

    def find_capacity_for_request(
        self, site_id: str, phase: Phase, request: CapacityRequest
    ) -> Optional[CapacitySuggestion]:
        """Best block matching an explicit planner request, or None."""
        ...

    def plan_move(
        self,
        site_id: str,
        device_id: str,
        target_rack_id: str,
        target_u_start: int,
        move_type: MoveType,
        target_phase: Phase,
    ) -> MovePlan:
        """Validate a relocation and build the candidate records."""
        ...

    def plan_removal(self, site_id: str, device_id: str) -> RemovalPlan:
        """Build the soft-delete candidate for a device."""
        ...

    def audit(self, site_id: str, phase: Phase) -> AuditReport:
        """Report inconsistencies in the site snapshot."""
        ...

    def visible_statuses(self, phase: Phase) -> frozenset[Status4D]:
        """Statuses shown in a phase."""
        ...
