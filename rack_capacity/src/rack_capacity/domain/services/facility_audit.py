"""Facility consistency audit.

The placement checks guard new moves; the audit inspects a whole snapshot
for data already out of line. Findings are informational and never block a
placement:

- OUT_OF_BOUNDS: device extends outside its rack
- U_OVERLAP: two present devices share units
- UNKNOWN_RACK: device points at a rack missing from the snapshot
- POWER_DRIFT: cached rack draw disagrees with the sum of its devices
- DUPLICATE_VISIBLE_ASSET: one logical asset visible more than once in a phase
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations

from rack_capacity.domain.entities.device import Device
from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.services.visibility import visible_devices
from rack_capacity.domain.value_objects.lifecycle import Phase

logger = logging.getLogger(__name__)


class FindingSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class FindingCode(str, Enum):
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    U_OVERLAP = "U_OVERLAP"
    UNKNOWN_RACK = "UNKNOWN_RACK"
    POWER_DRIFT = "POWER_DRIFT"
    DUPLICATE_VISIBLE_ASSET = "DUPLICATE_VISIBLE_ASSET"


@dataclass(frozen=True)
class AuditFinding:
    severity: FindingSeverity
    code: FindingCode
    message: str
    context: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class AuditReport:
    phase: Phase
    findings: tuple[AuditFinding, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.findings

    def by_code(self, code: FindingCode) -> list[AuditFinding]:
        return [f for f in self.findings if f.code is code]

    def count(self, severity: FindingSeverity) -> int:
        return sum(1 for f in self.findings if f.severity is severity)


def audit_facility(
    snapshot: FacilitySnapshot,
    phase: Phase,
    tolerance_kw: float = 0.1,
) -> AuditReport:
    """Inspect ``snapshot`` and report every inconsistency found."""
    findings: list[AuditFinding] = []
    findings.extend(_check_placements(snapshot))
    findings.extend(_check_power_drift(snapshot, tolerance_kw))
    findings.extend(_check_logical_assets(snapshot, phase))

    if findings:
        logger.info(f"Audit of site {snapshot.site_id} ({phase.value}): {len(findings)} finding(s)")
    return AuditReport(phase=phase, findings=tuple(findings))


def _check_placements(snapshot: FacilitySnapshot) -> list[AuditFinding]:
    findings = []
    present_by_rack: dict[str, list[Device]] = defaultdict(list)

    for device in snapshot.devices:
        rack = snapshot.rack(device.rack_id)
        if rack is None:
            findings.append(AuditFinding(
                severity=FindingSeverity.ERROR,
                code=FindingCode.UNKNOWN_RACK,
                message=f"{device.name} references unknown rack {device.rack_id}",
                context={"device_id": device.id, "rack_id": device.rack_id},
            ))
            continue
        if device.u_start < 1 or device.u_end > rack.effective_u_height:
            findings.append(AuditFinding(
                severity=FindingSeverity.ERROR,
                code=FindingCode.OUT_OF_BOUNDS,
                message=(
                    f"{device.name} at {device.unit_range} is outside rack "
                    f"{rack.name} (1-{rack.effective_u_height})"
                ),
                context={"device_id": device.id, "rack_id": rack.id},
            ))
        if not device.is_removed:
            present_by_rack[rack.id].append(device)

    for rack_id, devices in present_by_rack.items():
        for a, b in combinations(devices, 2):
            if a.unit_range.overlaps(b.unit_range):
                findings.append(AuditFinding(
                    severity=FindingSeverity.ERROR,
                    code=FindingCode.U_OVERLAP,
                    message=f"{a.name} ({a.unit_range}) overlaps {b.name} ({b.unit_range})",
                    context={"rack_id": rack_id, "device_ids": [a.id, b.id]},
                ))
    return findings


def _check_power_drift(snapshot: FacilitySnapshot, tolerance_kw: float) -> list[AuditFinding]:
    findings = []
    draw: dict[str, float] = defaultdict(float)
    for device in snapshot.devices:
        if not device.is_removed:
            draw[device.rack_id] += device.power_kw

    for rack in snapshot.racks:
        expected = draw.get(rack.id, 0.0)
        drift = rack.current_power_kw - expected
        if abs(drift) > tolerance_kw:
            findings.append(AuditFinding(
                severity=FindingSeverity.WARNING,
                code=FindingCode.POWER_DRIFT,
                message=(
                    f"Rack {rack.name} reports {rack.current_power_kw:.1f}kW but its devices "
                    f"draw {expected:.1f}kW"
                ),
                context={"rack_id": rack.id, "drift_kw": round(drift, 3)},
            ))
    return findings


def _check_logical_assets(snapshot: FacilitySnapshot, phase: Phase) -> list[AuditFinding]:
    groups: dict[str, list[Device]] = defaultdict(list)
    for device in visible_devices(snapshot.devices, phase):
        if device.logical_equipment_id:
            groups[device.logical_equipment_id].append(device)

    return [
        AuditFinding(
            severity=FindingSeverity.INFO,
            code=FindingCode.DUPLICATE_VISIBLE_ASSET,
            message=f"Logical asset {logical_id} is visible {len(devices)} times in {phase.value}",
            context={"logical_equipment_id": logical_id, "device_ids": [d.id for d in devices]},
        )
        for logical_id, devices in groups.items()
        if len(devices) > 1
    ]
