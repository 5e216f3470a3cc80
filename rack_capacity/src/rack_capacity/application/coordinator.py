"""Rack capacity application coordinator.

Implements the PlacementPlanningAPI by fetching a snapshot from the
snapshot source for each request and handing it to the pure domain
services, with logging, metrics and tracing around every call.
"""

from __future__ import annotations

import time
from typing import Optional

from opentelemetry import trace

from rack_capacity.adapters.outbound.metrics import PrometheusExporter
from rack_capacity.domain.entities.device import Device
from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.exceptions import DeviceNotFoundError
from rack_capacity.domain.services.capacity_search import (
    DEFAULT_SEARCH_POLICY,
    CapacityRequest,
    CapacitySearchPolicy,
    CapacitySuggestion,
    find_best_capacity_block,
    find_capacity_for_request,
    rank_capacity_blocks,
)
from rack_capacity.domain.services.facility_audit import AuditReport, audit_facility
from rack_capacity.domain.services.move_planner import (
    MovePlan,
    RemovalPlan,
    plan_move,
    plan_removal,
)
from rack_capacity.domain.services.placement_validator import (
    DEFAULT_PLACEMENT_POLICY,
    PlacementPolicy,
    ValidationResult,
    validate_placement,
)
from rack_capacity.domain.services.slot_finder import available_slots
from rack_capacity.domain.services.visibility import visible_statuses
from rack_capacity.domain.value_objects.lifecycle import MoveType, Phase, Status4D
from rack_capacity.infrastructure.logging import get_logger
from rack_capacity.ports.outbound.snapshot_source import SnapshotSource

logger = get_logger(__name__)


class PlanningCoordinator:
    """Coordinates placement and capacity planning with full observability."""

    def __init__(
        self,
        snapshot_source: SnapshotSource,
        placement_policy: PlacementPolicy = DEFAULT_PLACEMENT_POLICY,
        search_policy: CapacitySearchPolicy = DEFAULT_SEARCH_POLICY,
        ranking_limit: int = 5,
        power_drift_tolerance_kw: float = 0.1,
        metrics: Optional[PrometheusExporter] = None,
        tracer: Optional[trace.Tracer] = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            snapshot_source: Provider of facility snapshots.
            placement_policy: Thresholds for placement advisories.
            search_policy: Bounds and weights of the capacity search.
            ranking_limit: Default number of ranked blocks returned.
            power_drift_tolerance_kw: Audit tolerance for cached rack draw.
            metrics: Prometheus exporter, or None to skip metrics.
            tracer: OpenTelemetry tracer; defaults to the global one.
        """
        self._source = snapshot_source
        self._placement_policy = placement_policy
        self._search_policy = search_policy
        self._ranking_limit = ranking_limit
        self._drift_tolerance = power_drift_tolerance_kw
        self._metrics = metrics
        self._tracer = tracer or trace.get_tracer("rack_capacity")

    def snapshot(self, site_id: str) -> FacilitySnapshot:
        """Current snapshot of a site."""
        return self._source.load_snapshot(site_id)

    def validate_placement(
        self, site_id: str, device_id: str, target_rack_id: str, target_u_start: int
    ) -> ValidationResult:
        with self._tracer.start_as_current_span(
            "placement.validate",
            attributes={"site_id": site_id, "device_id": device_id, "rack_id": target_rack_id},
        ):
            snapshot = self.snapshot(site_id)
            device = self._require_device(snapshot, device_id)
            result = validate_placement(
                device,
                target_rack_id,
                target_u_start,
                snapshot.devices,
                snapshot.racks,
                device_types=snapshot.device_type_index(),
                policy=self._placement_policy,
            )

        if self._metrics:
            self._metrics.record_validation(result)
        logger.info(
            "placement_validated",
            site_id=site_id,
            device_id=device_id,
            rack_id=target_rack_id,
            u_start=target_u_start,
            valid=result.valid,
            errors=len(result.errors),
            warnings=len(result.warnings),
        )
        return result

    def validate_candidate(
        self, site_id: str, device: Device, target_rack_id: str, target_u_start: int
    ) -> ValidationResult:
        """Validate a device that is not (yet) part of the snapshot."""
        with self._tracer.start_as_current_span(
            "placement.validate_candidate",
            attributes={"site_id": site_id, "device_id": device.id, "rack_id": target_rack_id},
        ):
            snapshot = self.snapshot(site_id)
            result = validate_placement(
                device,
                target_rack_id,
                target_u_start,
                snapshot.devices,
                snapshot.racks,
                device_types=snapshot.device_type_index(),
                policy=self._placement_policy,
            )

        if self._metrics:
            self._metrics.record_validation(result)
        logger.info(
            "candidate_validated",
            site_id=site_id,
            device_id=device.id,
            rack_id=target_rack_id,
            u_start=target_u_start,
            valid=result.valid,
            errors=len(result.errors),
            warnings=len(result.warnings),
        )
        return result

    def available_slots(self, site_id: str, rack_id: str, u_height: int) -> list[int]:
        snapshot = self.snapshot(site_id)
        slots = available_slots(rack_id, u_height, snapshot.devices, snapshot.racks)
        if self._metrics:
            self._metrics.record_slot_query()
        logger.debug("slots_listed", site_id=site_id, rack_id=rack_id, count=len(slots))
        return slots

    def find_capacity(self, site_id: str, phase: Phase) -> Optional[CapacitySuggestion]:
        with self._tracer.start_as_current_span(
            "capacity.search", attributes={"site_id": site_id, "phase": phase.value}
        ):
            snapshot = self.snapshot(site_id)
            return self._search_best(snapshot, phase)

    def find_capacity_with_alternatives(
        self, site_id: str, phase: Phase, alternatives: int
    ) -> tuple[Optional[CapacitySuggestion], list[CapacitySuggestion]]:
        """Best block plus up to ``alternatives`` runners-up from one snapshot."""
        with self._tracer.start_as_current_span(
            "capacity.search",
            attributes={"site_id": site_id, "phase": phase.value, "alternatives": alternatives},
        ):
            snapshot = self.snapshot(site_id)
            suggestion = self._search_best(snapshot, phase)
            if suggestion is None or alternatives <= 0:
                return suggestion, []
            ranked = rank_capacity_blocks(
                snapshot, phase, self._search_policy, limit=alternatives + 1
            )
        return suggestion, ranked[1:]

    def _search_best(
        self, snapshot: FacilitySnapshot, phase: Phase
    ) -> Optional[CapacitySuggestion]:
        started = time.perf_counter()
        suggestion = find_best_capacity_block(snapshot, phase, self._search_policy)
        elapsed = time.perf_counter() - started

        if self._metrics:
            self._metrics.record_capacity_search(phase.value, suggestion, elapsed)
        if suggestion is None:
            logger.info("capacity_not_found", site_id=snapshot.site_id, phase=phase.value)
        else:
            logger.info(
                "capacity_found",
                site_id=snapshot.site_id,
                phase=phase.value,
                rack_ids=list(suggestion.rack_ids),
                free_u=suggestion.total_free_u,
                headroom_kw=round(suggestion.total_power_headroom_kw, 2),
            )
        return suggestion

    def rank_capacity(
        self, site_id: str, phase: Phase, limit: Optional[int] = None
    ) -> list[CapacitySuggestion]:
        snapshot = self.snapshot(site_id)
        return rank_capacity_blocks(
            snapshot,
            phase,
            self._search_policy,
            limit=limit if limit is not None else self._ranking_limit,
        )

    def find_capacity_for_request(
        self, site_id: str, phase: Phase, request: CapacityRequest
    ) -> Optional[CapacitySuggestion]:
        with self._tracer.start_as_current_span(
            "capacity.request",
            attributes={"site_id": site_id, "phase": phase.value, "rack_count": request.rack_count},
        ):
            snapshot = self.snapshot(site_id)
            suggestion = find_capacity_for_request(snapshot, phase, request, self._search_policy)

        logger.info(
            "capacity_request_evaluated",
            site_id=site_id,
            phase=phase.value,
            rack_count=request.rack_count,
            found=suggestion is not None,
        )
        return suggestion

    def plan_move(
        self,
        site_id: str,
        device_id: str,
        target_rack_id: str,
        target_u_start: int,
        move_type: MoveType,
        target_phase: Phase,
    ) -> MovePlan:
        with self._tracer.start_as_current_span(
            "move.plan",
            attributes={
                "site_id": site_id,
                "device_id": device_id,
                "move_type": move_type.value,
            },
        ):
            snapshot = self.snapshot(site_id)
            device = self._require_device(snapshot, device_id)
            plan = plan_move(
                device,
                target_rack_id,
                target_u_start,
                move_type,
                snapshot,
                target_phase=target_phase,
                policy=self._placement_policy,
            )

        if self._metrics:
            self._metrics.record_move_plan(move_type.value, plan.accepted)
        logger.info(
            "move_planned",
            site_id=site_id,
            device_id=device_id,
            move_type=move_type.value,
            accepted=plan.accepted,
        )
        return plan

    def plan_removal(self, site_id: str, device_id: str) -> RemovalPlan:
        snapshot = self.snapshot(site_id)
        device = self._require_device(snapshot, device_id)
        plan = plan_removal(device)
        logger.info("removal_planned", site_id=site_id, device_id=device_id)
        return plan

    def audit(self, site_id: str, phase: Phase) -> AuditReport:
        snapshot = self.snapshot(site_id)
        report = audit_facility(snapshot, phase, tolerance_kw=self._drift_tolerance)
        if self._metrics:
            self._metrics.record_audit(report)
        if not report.is_clean:
            logger.warning(
                "audit_findings",
                site_id=site_id,
                phase=phase.value,
                findings=len(report.findings),
            )
        return report

    def visible_statuses(self, phase: Phase) -> frozenset[Status4D]:
        return visible_statuses(phase)

    @staticmethod
    def _require_device(snapshot: FacilitySnapshot, device_id: str) -> Device:
        device = snapshot.device(device_id)
        if device is None:
            raise DeviceNotFoundError(f"Device {device_id} not found in site {snapshot.site_id}")
        return device
