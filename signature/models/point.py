# signature/models/point.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Point:
    """Logical pixel coordinate relative to the surface's top-left corner."""
    x: float
    y: float

    def midpoint(self, other: "Point") -> "Point":
        return Point((self.x + other.x) / 2, (self.y + other.y) / 2)

    def scaled(self, factor: float) -> Tuple[float, float]:
        return (self.x * factor, self.y * factor)


@dataclass(frozen=True)
class PointerEvent:
    """
    One pointer sample as delivered by the host toolkit.

    Touch devices may report several simultaneous contacts in ``touches``;
    only the first (primary) one is ever used.
    """
    x: float = 0.0
    y: float = 0.0
    touches: Tuple[Point, ...] = field(default_factory=tuple)

    def primary(self) -> Point:
        if self.touches:
            return self.touches[0]
        return Point(self.x, self.y)
