"""AI-ready capacity search over contiguous rack blocks.

The search recommends a group of adjacent racks within one room that can
host a dense deployment (e.g. a GPU cluster), trading free rack units
against electrical headroom:

1. Racks are partitioned by room and sorted by name within the room.
   Name order stands in for physical adjacency.
2. Every contiguous window of 3 to 6 racks is a candidate block.
3. A block's free units count only devices visible in the phase; its
   headroom is the sum of (limit - current draw) per rack.
4. Blocks averaging below 2.0 kW of headroom per rack are rejected.
5. Score = free units + 5 x headroom (power is usually the binding limit).

Tie-break: rooms are visited in ascending room id, then block size
ascending, then start index ascending; a candidate replaces the best only
with a strictly higher score, so the first block found wins a tie.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from rack_capacity.domain.entities.facility import Rack
from rack_capacity.domain.entities.snapshot import FacilitySnapshot
from rack_capacity.domain.services.slot_finder import free_unit_count
from rack_capacity.domain.services.visibility import visible_devices
from rack_capacity.domain.value_objects.identifiers import RackId, RoomId
from rack_capacity.domain.value_objects.lifecycle import Phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapacitySearchPolicy:
    """Bounds and weights of the block search."""
    min_block_size: int = 3
    max_block_size: int = 6
    min_avg_headroom_kw: float = 2.0
    power_weight: float = 5.0


DEFAULT_SEARCH_POLICY = CapacitySearchPolicy()


@dataclass(frozen=True)
class CapacityRequest:
    """Explicit planner request: N adjacent racks, each meeting minimums."""
    rack_count: int
    min_power_headroom_kw: float = 0.0
    min_free_u: int = 0


@dataclass(frozen=True)
class RackCapacity:
    """Free space and headroom of one rack under a phase."""
    rack: Rack
    free_u: int
    power_headroom_kw: float


@dataclass(frozen=True)
class CapacitySuggestion:
    """A recommended block of contiguous racks."""
    rack_ids: tuple[RackId, ...]
    total_free_u: int
    total_power_headroom_kw: float
    summary: str
    room_id: Optional[RoomId] = None
    score: float = 0.0

    @property
    def rack_count(self) -> int:
        return len(self.rack_ids)


def rack_capacities(snapshot: FacilitySnapshot, phase: Phase) -> dict[RoomId, list[RackCapacity]]:
    """Per-room rack capacities, rooms keyed in ascending id, racks sorted by name."""
    present = visible_devices(snapshot.devices, phase)
    by_rack: dict[RackId, list] = {}
    for device in present:
        by_rack.setdefault(device.rack_id, []).append(device)

    grouped = snapshot.racks_by_room()
    result: dict[RoomId, list[RackCapacity]] = {}
    for room_id in sorted(grouped):
        room_racks = sorted(grouped[room_id], key=lambda r: (r.name, r.id))
        result[room_id] = [
            RackCapacity(
                rack=rack,
                free_u=free_unit_count(rack, by_rack.get(rack.id, [])),
                power_headroom_kw=rack.power_headroom_kw,
            )
            for rack in room_racks
        ]
    return result


def _windows(
    capacities: dict[RoomId, list[RackCapacity]],
    min_size: int,
    max_size: int,
) -> Iterator[tuple[RoomId, list[RackCapacity]]]:
    """Contiguous windows in room / size / start order."""
    for room_id, room_racks in capacities.items():
        for size in range(min_size, min(max_size, len(room_racks)) + 1):
            for start in range(0, len(room_racks) - size + 1):
                yield room_id, room_racks[start:start + size]


def _suggest(room_id: RoomId, block: list[RackCapacity], score: float) -> CapacitySuggestion:
    total_free_u = sum(c.free_u for c in block)
    total_headroom = sum(c.power_headroom_kw for c in block)
    return CapacitySuggestion(
        rack_ids=tuple(c.rack.id for c in block),
        total_free_u=total_free_u,
        total_power_headroom_kw=total_headroom,
        summary=(
            f"{len(block)} racks can host {total_free_u}U of AI servers with "
            f"{total_headroom:.1f}kW power headroom available."
        ),
        room_id=room_id,
        score=score,
    )


def _scored_blocks(
    snapshot: FacilitySnapshot,
    phase: Phase,
    policy: CapacitySearchPolicy,
) -> Iterator[CapacitySuggestion]:
    capacities = rack_capacities(snapshot, phase)
    for room_id, block in _windows(capacities, policy.min_block_size, policy.max_block_size):
        total_free_u = sum(c.free_u for c in block)
        total_headroom = sum(c.power_headroom_kw for c in block)
        if total_headroom / len(block) < policy.min_avg_headroom_kw:
            continue
        score = total_free_u + policy.power_weight * total_headroom
        yield _suggest(room_id, block, score)


def find_best_capacity_block(
    snapshot: FacilitySnapshot,
    phase: Phase,
    policy: CapacitySearchPolicy = DEFAULT_SEARCH_POLICY,
) -> Optional[CapacitySuggestion]:
    """Highest-scoring contiguous block, or None when nothing clears the floor.

    None is the "no suitable capacity" outcome, not an error.
    """
    best: Optional[CapacitySuggestion] = None
    for candidate in _scored_blocks(snapshot, phase, policy):
        if best is None or candidate.score > best.score:
            best = candidate

    if best is None:
        logger.info(f"No capacity block clears {policy.min_avg_headroom_kw}kW/rack in {phase.value}")
    return best


def rank_capacity_blocks(
    snapshot: FacilitySnapshot,
    phase: Phase,
    policy: CapacitySearchPolicy = DEFAULT_SEARCH_POLICY,
    limit: int = 5,
) -> list[CapacitySuggestion]:
    """Top ``limit`` blocks by score; equal scores keep enumeration order."""
    candidates = list(_scored_blocks(snapshot, phase, policy))
    # sorted() is stable, so ties stay in first-found order
    ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
    return ranked[:max(limit, 0)]


def find_capacity_for_request(
    snapshot: FacilitySnapshot,
    phase: Phase,
    request: CapacityRequest,
    policy: CapacitySearchPolicy = DEFAULT_SEARCH_POLICY,
) -> Optional[CapacitySuggestion]:
    """Best block of exactly ``request.rack_count`` racks meeting per-rack minimums."""
    if request.rack_count < 1:
        return None

    capacities = rack_capacities(snapshot, phase)
    best: Optional[CapacitySuggestion] = None
    for room_id, block in _windows(capacities, request.rack_count, request.rack_count):
        if any(
            c.power_headroom_kw < request.min_power_headroom_kw or c.free_u < request.min_free_u
            for c in block
        ):
            continue
        score = (
            sum(c.free_u for c in block)
            + policy.power_weight * sum(c.power_headroom_kw for c in block)
        )
        if best is None or score > best.score:
            best = _suggest(room_id, block, score)
    return best
