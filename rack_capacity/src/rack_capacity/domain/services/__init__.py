"""Domain services for rack capacity business logic.

Services implement the planning workflows:
- visibility: which 4D statuses a phase shows
- placement_validator / slot_finder: slotting a device into a rack
- capacity_search: AI-ready contiguous rack blocks
- move_planner: relocation and removal candidates
- hierarchy / facility_audit: snapshot normalization and consistency checks
"""

from rack_capacity.domain.services.capacity_search import (
    CapacityRequest,
    CapacitySearchPolicy,
    CapacitySuggestion,
    find_best_capacity_block,
    find_capacity_for_request,
    rank_capacity_blocks,
)
from rack_capacity.domain.services.facility_audit import (
    AuditFinding,
    AuditReport,
    FindingCode,
    FindingSeverity,
    audit_facility,
)
from rack_capacity.domain.services.hierarchy import normalize_hierarchy
from rack_capacity.domain.services.move_planner import (
    ModificationRecord,
    ModificationType,
    MovePlan,
    RemovalPlan,
    plan_move,
    plan_removal,
)
from rack_capacity.domain.services.placement_validator import (
    PlacementPolicy,
    ValidationResult,
    validate_placement,
)
from rack_capacity.domain.services.slot_finder import available_slots, occupied_ranges
from rack_capacity.domain.services.visibility import (
    is_device_visible,
    is_status_visible,
    visible_devices,
    visible_statuses,
)

__all__ = [
    # Visibility
    "visible_statuses",
    "is_status_visible",
    "is_device_visible",
    "visible_devices",
    # Placement
    "PlacementPolicy",
    "ValidationResult",
    "validate_placement",
    "available_slots",
    "occupied_ranges",
    # Capacity
    "CapacityRequest",
    "CapacitySearchPolicy",
    "CapacitySuggestion",
    "find_best_capacity_block",
    "find_capacity_for_request",
    "rank_capacity_blocks",
    # Planning
    "ModificationRecord",
    "ModificationType",
    "MovePlan",
    "RemovalPlan",
    "plan_move",
    "plan_removal",
    # Snapshot hygiene
    "normalize_hierarchy",
    "AuditFinding",
    "AuditReport",
    "FindingCode",
    "FindingSeverity",
    "audit_facility",
]
