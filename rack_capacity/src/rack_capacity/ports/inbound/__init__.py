"""Inbound ports - interfaces offered by the rack capacity engine."""

from rack_capacity.ports.inbound.api import PlacementPlanningAPI

__all__ = [
    "PlacementPlanningAPI",
]
