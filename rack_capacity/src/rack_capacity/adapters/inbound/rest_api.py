"""FastAPI REST adapter for the rack capacity engine.

Provides HTTP endpoints for placement validation, free-slot lookup,
capacity search, move planning and facility audits.

Usage:
    from rack_capacity.adapters.inbound.rest_api import create_app

    app = create_app(coordinator)
    # Or: python -m rack_capacity.adapters.inbound.rest_api
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, HTTPException, Query, status
from pydantic import BaseModel, Field

from rack_capacity.domain.entities.device import Device
from rack_capacity.domain.exceptions import (
    DeviceNotFoundError,
    RackCapacityError,
    SnapshotFormatError,
    SnapshotNotFoundError,
)
from rack_capacity.domain.services.capacity_search import CapacityRequest, CapacitySuggestion
from rack_capacity.domain.services.move_planner import ModificationRecord
from rack_capacity.domain.value_objects.lifecycle import MoveType, Phase


# Pydantic models for request/response serialization

class PlacementRequest(BaseModel):
    """Request to validate a placement."""

    device_id: str = Field(..., min_length=1, description="Device being placed")
    target_rack_id: str = Field(..., min_length=1, description="Receiving rack")
    target_u_start: int = Field(..., description="1-based starting unit")


class ValidationResponse(BaseModel):
    """Placement validation outcome."""

    valid: bool
    errors: list[str]
    warnings: list[str]


class SlotsResponse(BaseModel):
    """Free starting units in a rack."""

    rack_id: str
    u_height: int
    slots: list[int]


class SuggestionResponse(BaseModel):
    """Recommended capacity block."""

    rack_ids: list[str]
    total_free_u: int
    total_power_headroom_kw: float
    summary: str
    room_id: Optional[str] = None
    score: float


class CapacityResponse(BaseModel):
    """Capacity search result; ``suggestion`` is null when nothing qualifies."""

    phase: str
    suggestion: Optional[SuggestionResponse]
    alternatives: list[SuggestionResponse] = Field(default_factory=list)


class CapacitySearchRequest(BaseModel):
    """Planner request for N contiguous racks with per-rack minimums."""

    phase: Phase = Phase.TO_BE
    rack_count: int = Field(default=5, ge=1, le=20)
    min_power_headroom_kw: float = Field(default=0.0, ge=0.0)
    min_free_u: int = Field(default=0, ge=0)


class MoveRequest(BaseModel):
    """Request to plan a relocation."""

    device_id: str = Field(..., min_length=1)
    target_rack_id: str = Field(..., min_length=1)
    target_u_start: int
    move_type: MoveType = MoveType.MODIFIED
    target_phase: Phase = Phase.TO_BE


class DeviceResponse(BaseModel):
    """Candidate device record."""

    id: str
    rack_id: str
    device_type_id: str
    logical_equipment_id: Optional[str]
    name: str
    u_start: int
    u_height: int
    status_4d: str
    power_kw: float


class ModificationResponse(BaseModel):
    """History entry to commit alongside a plan."""

    id: str
    type: str
    device_id: str
    device_name: str
    from_location: Optional[dict] = None
    to_location: Optional[dict] = None
    status_change: Optional[dict] = None
    target_phase: Optional[str] = None
    notes: str = ""


class MovePlanResponse(BaseModel):
    """Relocation plan."""

    accepted: bool
    validation: ValidationResponse
    move_type: str
    updated_device: Optional[DeviceResponse] = None
    new_device: Optional[DeviceResponse] = None
    history: list[ModificationResponse] = Field(default_factory=list)


class FindingResponse(BaseModel):
    severity: str
    code: str
    message: str
    context: dict


class AuditResponse(BaseModel):
    """Facility audit report."""

    phase: str
    clean: bool
    findings: list[FindingResponse]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


def _suggestion(suggestion: CapacitySuggestion) -> SuggestionResponse:
    return SuggestionResponse(
        rack_ids=[str(r) for r in suggestion.rack_ids],
        total_free_u=suggestion.total_free_u,
        total_power_headroom_kw=suggestion.total_power_headroom_kw,
        summary=suggestion.summary,
        room_id=suggestion.room_id,
        score=suggestion.score,
    )


def _device(device: Optional[Device]) -> Optional[DeviceResponse]:
    if device is None:
        return None
    return DeviceResponse(
        id=device.id,
        rack_id=device.rack_id,
        device_type_id=device.device_type_id,
        logical_equipment_id=device.logical_equipment_id,
        name=device.name,
        u_start=device.u_start,
        u_height=device.u_height,
        status_4d=device.status_4d.value,
        power_kw=device.power_kw,
    )


def _record(record: ModificationRecord) -> ModificationResponse:
    def location(loc) -> Optional[dict]:
        if loc is None:
            return None
        return {"rack_id": loc.rack_id, "u_position": loc.u_position}

    change = None
    if record.status_change is not None:
        from_status = record.status_change.from_status
        change = {
            "from": from_status.value if from_status else None,
            "to": record.status_change.to_status.value,
        }

    return ModificationResponse(
        id=record.id,
        type=record.type.value,
        device_id=record.device_id,
        device_name=record.device_name,
        from_location=location(record.from_location),
        to_location=location(record.to_location),
        status_change=change,
        target_phase=record.target_phase.value if record.target_phase else None,
        notes=record.notes,
    )


def _http_error(error: RackCapacityError) -> HTTPException:
    if isinstance(error, (SnapshotNotFoundError, DeviceNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, SnapshotFormatError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def create_app(coordinator) -> FastAPI:
    """Create FastAPI application with rack capacity endpoints.

    Args:
        coordinator: PlanningCoordinator instance.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Rack Capacity API",
        description="Rack placement validation and AI-ready capacity search",
        version="0.1.0",
    )

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check():
        """Check service health."""
        return HealthResponse(status="healthy")

    @app.get("/phases/{phase}/statuses", response_model=list[str], tags=["Phases"])
    async def get_visible_statuses(phase: Phase):
        """List the 4D statuses visible in a phase."""
        return sorted(s.value for s in coordinator.visible_statuses(phase))

    @app.post(
        "/sites/{site_id}/placements/validate",
        response_model=ValidationResponse,
        tags=["Placement"],
    )
    async def validate_placement(site_id: str, request: PlacementRequest):
        """Validate placing a device at a rack unit."""
        try:
            result = coordinator.validate_placement(
                site_id, request.device_id, request.target_rack_id, request.target_u_start
            )
        except RackCapacityError as e:
            raise _http_error(e)
        return ValidationResponse(
            valid=result.valid,
            errors=list(result.errors),
            warnings=list(result.warnings),
        )

    @app.get(
        "/sites/{site_id}/racks/{rack_id}/slots",
        response_model=SlotsResponse,
        tags=["Placement"],
    )
    async def get_available_slots(site_id: str, rack_id: str, u_height: int = Query(default=1, ge=1)):
        """List free starting units for a device height."""
        try:
            slots = coordinator.available_slots(site_id, rack_id, u_height)
        except RackCapacityError as e:
            raise _http_error(e)
        return SlotsResponse(rack_id=rack_id, u_height=u_height, slots=slots)

    @app.get("/sites/{site_id}/capacity", response_model=CapacityResponse, tags=["Capacity"])
    async def get_capacity(
        site_id: str,
        phase: Phase = Phase.AS_IS,
        alternatives: int = Query(default=0, ge=0, le=20),
    ):
        """Find the best AI-ready rack block for a phase."""
        try:
            suggestion, ranked = coordinator.find_capacity_with_alternatives(site_id, phase, alternatives)
        except RackCapacityError as e:
            raise _http_error(e)
        return CapacityResponse(
            phase=phase.value,
            suggestion=_suggestion(suggestion) if suggestion else None,
            alternatives=[_suggestion(s) for s in ranked],
        )

    @app.post("/sites/{site_id}/capacity/search", response_model=CapacityResponse, tags=["Capacity"])
    async def search_capacity(site_id: str, request: CapacitySearchRequest):
        """Find N contiguous racks meeting per-rack minimums."""
        capacity_request = CapacityRequest(
            rack_count=request.rack_count,
            min_power_headroom_kw=request.min_power_headroom_kw,
            min_free_u=request.min_free_u,
        )
        try:
            suggestion = coordinator.find_capacity_for_request(site_id, request.phase, capacity_request)
        except RackCapacityError as e:
            raise _http_error(e)
        return CapacityResponse(
            phase=request.phase.value,
            suggestion=_suggestion(suggestion) if suggestion else None,
        )

    @app.post("/sites/{site_id}/moves/plan", response_model=MovePlanResponse, tags=["Planning"])
    async def plan_move(site_id: str, request: MoveRequest):
        """Validate a relocation and return the candidate records."""
        try:
            plan = coordinator.plan_move(
                site_id,
                request.device_id,
                request.target_rack_id,
                request.target_u_start,
                request.move_type,
                request.target_phase,
            )
        except RackCapacityError as e:
            raise _http_error(e)
        return MovePlanResponse(
            accepted=plan.accepted,
            validation=ValidationResponse(
                valid=plan.validation.valid,
                errors=list(plan.validation.errors),
                warnings=list(plan.validation.warnings),
            ),
            move_type=plan.move_type.value,
            updated_device=_device(plan.updated_device),
            new_device=_device(plan.new_device),
            history=[_record(r) for r in plan.history],
        )

    @app.post(
        "/sites/{site_id}/devices/{device_id}/removal",
        response_model=MovePlanResponse,
        tags=["Planning"],
    )
    async def plan_removal(site_id: str, device_id: str):
        """Build the soft-delete candidate for a device."""
        try:
            plan = coordinator.plan_removal(site_id, device_id)
        except RackCapacityError as e:
            raise _http_error(e)
        return MovePlanResponse(
            accepted=True,
            validation=ValidationResponse(valid=True, errors=[], warnings=[]),
            move_type="REMOVE",
            updated_device=_device(plan.updated_device),
            history=[_record(r) for r in plan.history],
        )

    @app.get("/sites/{site_id}/audit", response_model=AuditResponse, tags=["Audit"])
    async def audit(site_id: str, phase: Phase = Phase.AS_IS):
        """Report inconsistencies in the site snapshot."""
        try:
            report = coordinator.audit(site_id, phase)
        except RackCapacityError as e:
            raise _http_error(e)
        return AuditResponse(
            phase=report.phase.value,
            clean=report.is_clean,
            findings=[
                FindingResponse(
                    severity=f.severity.value,
                    code=f.code.value,
                    message=f.message,
                    context=f.context,
                )
                for f in report.findings
            ],
        )

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the REST API server with the container-wired coordinator.

    Args:
        host: Host to bind to; defaults to the configured server host.
        port: Port to bind to; defaults to the configured HTTP port.
    """
    import uvicorn

    from rack_capacity.infrastructure.container import get_container

    container = get_container()
    server_config = container.config.server
    container.metrics.serve(server_config.metrics_port)

    app = create_app(container.coordinator)
    uvicorn.run(app, host=host or server_config.host, port=port or server_config.http_port)


if __name__ == "__main__":
    run_server()
