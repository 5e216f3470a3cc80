"""4D life-cycle vocabulary: device statuses, planning phases, move types.

The status and phase sets are closed enumerations. Consumers that branch on
them use exhaustive ``match`` statements terminated by ``assert_never`` so a
new member surfaces in the type checker at every call site.
"""

from __future__ import annotations

from enum import Enum


class Status4D(str, Enum):
    """Life-cycle state of a device record across project phases."""
    EXISTING_RETAINED = "EXISTING_RETAINED"  # Installed and staying
    EXISTING_REMOVED = "EXISTING_REMOVED"    # Installed, planned for removal
    PROPOSED = "PROPOSED"                    # Planned installation
    FUTURE = "FUTURE"                        # Long-range reservation
    MODIFIED = "MODIFIED"                    # Existing asset being changed/moved

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


class Phase(str, Enum):
    """Named point in the facility planning timeline."""
    AS_IS = "AS_IS"
    TO_BE = "TO_BE"
    FUTURE = "FUTURE"


class MoveType(str, Enum):
    """How a relocation is recorded."""
    MODIFIED = "MODIFIED"                # Update in place, mark MODIFIED
    CREATE_PROPOSED = "CREATE_PROPOSED"  # Retire original, create PROPOSED copy


class SiteStatus(str, Enum):
    AI_READY = "AI_READY"
    IN_PROGRESS = "IN_PROGRESS"
    LEGACY = "LEGACY"


STATUS_LABELS: dict[Status4D, str] = {
    Status4D.EXISTING_RETAINED: "Existing To Be Retained",
    Status4D.EXISTING_REMOVED: "Existing To Be Removed",
    Status4D.PROPOSED: "Proposed",
    Status4D.FUTURE: "Future",
    Status4D.MODIFIED: "Modified",
}
