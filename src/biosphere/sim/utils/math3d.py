from __future__ import annotations

from pygame.math import Vector3


def clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def clamp_position(position: Vector3, half_extent: float) -> Vector3:
    return Vector3(
        clamp_value(position.x, -half_extent, half_extent),
        clamp_value(position.y, -half_extent, half_extent),
        clamp_value(position.z, -half_extent, half_extent),
    )


def distance(a: Vector3, b: Vector3) -> float:
    return a.distance_to(b)
