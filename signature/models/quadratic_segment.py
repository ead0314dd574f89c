# signature/models/quadratic_segment.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import List

from .point import Point

_MIN_STEPS = 4
_MAX_STEPS = 64


@dataclass(frozen=True)
class QuadraticSegment:
    """Quadratic Bezier curve from ``start`` to ``end`` pulled towards ``control``."""
    start: Point
    control: Point
    end: Point

    def point_at(self, t: float) -> Point:
        u = 1.0 - t
        x = u * u * self.start.x + 2 * u * t * self.control.x + t * t * self.end.x
        y = u * u * self.start.y + 2 * u * t * self.control.y + t * t * self.end.y
        return Point(x, y)

    def control_length(self) -> float:
        """Length of the control polygon (upper bound of the arc length)."""
        return (math.hypot(self.control.x - self.start.x, self.control.y - self.start.y)
                + math.hypot(self.end.x - self.control.x, self.end.y - self.control.y))

    def flatten(self, device_scale: float = 1.0) -> List[Point]:
        """Polyline approximation, one vertex every ~2 physical pixels."""
        steps = int(self.control_length() * device_scale / 2) + 1
        steps = max(_MIN_STEPS, min(_MAX_STEPS, steps))
        return [self.point_at(i / steps) for i in range(steps + 1)]
