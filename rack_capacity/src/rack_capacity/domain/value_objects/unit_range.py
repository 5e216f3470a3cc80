"""Closed rack-unit interval arithmetic."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UnitRange:
    """Inclusive range of rack units ``[start, end]``, 1-based."""
    start: int
    end: int

    @classmethod
    def from_span(cls, u_start: int, u_height: int) -> UnitRange:
        """Build the range occupied by ``u_height`` units from ``u_start``.

        Heights below 1 are clamped to 1, so malformed source data still
        occupies its starting slot.
        """
        height = max(u_height, 1)
        return cls(start=u_start, end=u_start + height - 1)

    @property
    def height(self) -> int:
        return self.end - self.start + 1

    def overlaps(self, other: UnitRange) -> bool:
        """Two closed ranges intersect iff each starts before the other ends."""
        return self.start <= other.end and other.start <= self.end

    def __str__(self) -> str:
        return f"U{self.start}-U{self.end}"
