"""Small geometry helpers for drawing rotated polygons."""

from __future__ import annotations

import math

Point = tuple[float, float]


def rotate_about(
    x: float, y: float, center_x: float, center_y: float, theta: float
) -> Point:
    """Rotate the point (x, y) by theta radians about the given centre."""
    tx = x - center_x
    ty = y - center_y
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return (
        tx * cos_t - ty * sin_t + center_x,
        tx * sin_t + ty * cos_t + center_y,
    )


def polygon_vertices(
    center_x: float, center_y: float, sides: int, radius: float, rotation: float
) -> list[Point]:
    """Corners of a regular polygon, followed by its centre."""
    points = []
    for i in range(max(sides, 0)):
        angle = 2 * math.pi * (i / sides)
        x = radius * math.cos(angle) + center_x
        y = radius * math.sin(angle) + center_y
        points.append(rotate_about(x, y, center_x, center_y, rotation))
    points.append((center_x, center_y))
    return points


def polygon_indices(sides: int) -> list[int]:
    """Triangle indices fanning each edge of a polygon out to its centre."""
    indices: list[int] = []
    for i in range(max(sides, 0)):
        indices.extend((i, (i + 1) % sides, sides))
    return indices