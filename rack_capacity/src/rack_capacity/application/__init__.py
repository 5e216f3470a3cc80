"""Application layer for the rack capacity engine.

Orchestrates domain services to provide high-level functionality.
"""

from rack_capacity.application.coordinator import PlanningCoordinator

__all__ = [
    "PlanningCoordinator",
]
