"""Placement transform shared by buildings, rooms and racks."""

from __future__ import annotations

from dataclasses import dataclass

Vector3 = tuple[float, float, float]


@dataclass(frozen=True)
class Transform:
    """Position / rotation (Euler, radians) / scale relative to the parent."""
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation_euler: Vector3 = (0.0, 0.0, 0.0)
    scale: Vector3 = (1.0, 1.0, 1.0)


IDENTITY_TRANSFORM = Transform()
