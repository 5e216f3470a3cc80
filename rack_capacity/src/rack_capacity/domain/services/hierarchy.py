"""Snapshot normalization for legacy hierarchies.

Older scene documents carry rooms and racks but no buildings or floors.
Normalization runs once at ingestion and fills the gap with synthetic
``default-building`` / ``default-floor`` records so consumers never need to
special-case a missing level.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from rack_capacity.domain.entities.facility import Building, Floor
from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.value_objects.identifiers import (
    DEFAULT_BUILDING_ID,
    DEFAULT_FLOOR_ID,
)

logger = logging.getLogger(__name__)


def normalize_hierarchy(snapshot: FacilitySnapshot) -> FacilitySnapshot:
    """Return a snapshot where every room sits on a floor inside a building.

    Rooms without a floor land on ``default-floor``, which is added under
    the first building when the snapshot lacks it. Idempotent: a normalized
    snapshot comes back unchanged.
    """
    buildings = snapshot.buildings
    if not buildings:
        buildings = (
            Building(id=DEFAULT_BUILDING_ID, site_id=snapshot.site_id, name="Main Building"),
        )

    floors = snapshot.floors
    orphaned = any(not room.floor_id for room in snapshot.rooms)
    if not floors or (orphaned and all(f.id != DEFAULT_FLOOR_ID for f in floors)):
        floors = (
            *floors,
            Floor(id=DEFAULT_FLOOR_ID, building_id=buildings[0].id, name="Ground Floor", level=0),
        )

    rooms = tuple(
        room if room.floor_id else replace(room, floor_id=DEFAULT_FLOOR_ID)
        for room in snapshot.rooms
    )

    if buildings is snapshot.buildings and floors is snapshot.floors and rooms == snapshot.rooms:
        return snapshot

    logger.debug(f"Normalized hierarchy for site {snapshot.site_id}")
    return FacilitySnapshot(
        site_id=snapshot.site_id,
        racks=snapshot.racks,
        devices=snapshot.devices,
        rooms=rooms,
        buildings=buildings,
        floors=floors,
        sites=snapshot.sites,
        device_types=snapshot.device_types,
    )
