# signature/logic/stroke_capture.py
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from ..models.bitmap_surface import BitmapSurface
from ..models.point import Point
from ..models.quadratic_segment import QuadraticSegment

logger = logging.getLogger(__name__)

MIN_POINTS = 3


def smooth_path(points: Sequence[Point]) -> List[QuadraticSegment]:
    """
    Midpoint-chained quadratic path through ``points``.

    Starts at points[0]; every interior point i (1 .. n-3) is the control of a
    curve ending at midpoint(points[i], points[i+1]); a final curve uses
    points[n-2] as control and ends exactly at points[n-1].
    Fewer than three points yield no path.
    """
    n = len(points)
    if n < MIN_POINTS:
        return []
    segments: List[QuadraticSegment] = []
    cursor = points[0]
    for i in range(1, n - 2):
        end = points[i].midpoint(points[i + 1])
        segments.append(QuadraticSegment(cursor, points[i], end))
        cursor = end
    segments.append(QuadraticSegment(cursor, points[n - 2], points[n - 1]))
    return segments


class StrokeCapture:
    """
    Turns pointer samples into smoothed ink on a surface, one session at a time.

    Each ``extend`` only rasterizes what the new sample reveals (the next
    midpoint curve plus the new tail curve), so the cost per sample stays
    constant. The union of those draws equals re-stroking ``smooth_path``
    after every sample, because tails from earlier samples stay on the
    surface either way.
    """

    def __init__(self, surface: Optional[BitmapSurface] = None, *,
                 color: str = "#000000", width: float = 3) -> None:
        self.surface = surface
        self.color = color
        self.width = width
        self._points: Optional[List[Point]] = None
        self._committed = 0   # interior curves already drawn
        self._cursor: Optional[Point] = None

    @property
    def active(self) -> bool:
        return self._points is not None

    @property
    def points(self) -> List[Point]:
        return list(self._points or [])

    def begin(self, point: Point) -> None:
        self._points = [point]
        self._committed = 0
        self._cursor = point

    def extend(self, point: Point) -> List[QuadraticSegment]:
        """Add a sample; returns the segments stroked for it (possibly none)."""
        if self._points is None:
            return []
        self._points.append(point)
        if len(self._points) < MIN_POINTS:
            return []
        segments = self._revealed_segments()
        if self.surface is None:
            # rendering context not available yet
            return []
        self.surface.stroke_segments(segments, self.color, self.width)
        return segments

    def end(self) -> None:
        if self._points is not None:
            logger.debug("stroke closed after %d samples", len(self._points))
        self._points = None
        self._committed = 0
        self._cursor = None

    # ------------------------------------------------------------------ internals
    def _revealed_segments(self) -> List[QuadraticSegment]:
        pts = self._points
        n = len(pts)
        new: List[QuadraticSegment] = []
        # interior curves i in 1..n-3 that have not been drawn yet
        while self._committed < n - 3:
            i = self._committed + 1
            end = pts[i].midpoint(pts[i + 1])
            new.append(QuadraticSegment(self._cursor, pts[i], end))
            self._cursor = end
            self._committed += 1
        new.append(QuadraticSegment(self._cursor, pts[n - 2], pts[n - 1]))
        return new
