"""Midpoint smoothing and incremental stroke capture."""
from __future__ import annotations

import pytest

from signature.logic.stroke_capture import StrokeCapture, smooth_path
from signature.models.bitmap_surface import BitmapSurface
from signature.models.point import Point, PointerEvent

ZIGZAG = [Point(10 + 12 * i, 40 + (15 if i % 2 else -15)) for i in range(12)]


def test_smooth_path_needs_three_points() -> None:
    assert smooth_path([]) == []
    assert smooth_path(ZIGZAG[:2]) == []


def test_smooth_path_three_points_is_single_curve() -> None:
    a, b, c = ZIGZAG[:3]
    (seg,) = smooth_path([a, b, c])
    assert (seg.start, seg.control, seg.end) == (a, b, c)


def test_smooth_path_chains_midpoints() -> None:
    pts = ZIGZAG[:6]
    segs = smooth_path(pts)
    # interior curves for i = 1..n-3 plus one tail curve
    assert len(segs) == len(pts) - 2
    assert segs[0].start == pts[0]
    for i, seg in enumerate(segs[:-1], start=1):
        assert seg.control == pts[i]
        assert seg.end == pts[i].midpoint(pts[i + 1])
    for prev, nxt in zip(segs, segs[1:]):
        assert prev.end == nxt.start
    assert segs[-1].control == pts[-2]
    assert segs[-1].end == pts[-1]


def test_fewer_than_three_points_leave_surface_untouched() -> None:
    surface = BitmapSurface(100, 80)
    cap = StrokeCapture(surface, width=3)
    cap.begin(Point(10, 10))
    assert cap.extend(Point(20, 20)) == []
    assert surface.is_blank()
    assert len(cap.extend(Point(30, 10))) == 1
    assert not surface.is_blank()


def test_incremental_matches_full_restroke() -> None:
    incremental = BitmapSurface(200, 80)
    cap = StrokeCapture(incremental, color="#0000FF", width=4)
    cap.begin(ZIGZAG[0])
    for p in ZIGZAG[1:]:
        cap.extend(p)
    cap.end()

    full = BitmapSurface(200, 80)
    for n in range(3, len(ZIGZAG) + 1):
        full.stroke_segments(smooth_path(ZIGZAG[:n]), "#0000FF", 4)

    assert incremental.image.tobytes() == full.image.tobytes()


def test_each_extend_emits_constant_work() -> None:
    cap = StrokeCapture(BitmapSurface(200, 80))
    cap.begin(ZIGZAG[0])
    counts = [len(cap.extend(p)) for p in ZIGZAG[1:]]
    assert counts[:2] == [0, 1]
    assert all(c == 2 for c in counts[2:])


def test_extend_without_session_is_ignored() -> None:
    surface = BitmapSurface(50, 50)
    cap = StrokeCapture(surface)
    for p in ZIGZAG[:4]:
        assert cap.extend(p) == []
    assert surface.is_blank()


def test_missing_surface_is_a_silent_noop() -> None:
    cap = StrokeCapture(None)
    cap.begin(Point(0, 0))
    for p in ZIGZAG[:5]:
        assert cap.extend(p) == []
    cap.end()
    assert not cap.active


def test_end_discards_points() -> None:
    cap = StrokeCapture(BitmapSurface(50, 50))
    cap.begin(Point(1, 1))
    cap.extend(Point(2, 2))
    cap.end()
    assert cap.points == []


def test_device_scale_is_applied_by_the_surface() -> None:
    surface = BitmapSurface(600, 350, device_scale=2)
    assert surface.pixel_size == (1200, 700)
    cap = StrokeCapture(surface, width=2)
    cap.begin(Point(50, 50))
    cap.extend(Point(51, 50))
    cap.extend(Point(52, 50))
    left, top, right, bottom = surface.image.getbbox()
    assert 96 <= left <= 100 and 96 <= top <= 100
    assert 102 <= right <= 108


def test_multi_touch_resolves_to_primary_contact() -> None:
    ev = PointerEvent(touches=(Point(1, 2), Point(50, 60)))
    assert ev.primary() == Point(1, 2)
    assert PointerEvent(7, 8).primary() == Point(7, 8)


@pytest.mark.parametrize("scale", [0, -1])
def test_surface_rejects_bad_device_scale(scale) -> None:
    with pytest.raises(ValueError):
        BitmapSurface(10, 10, device_scale=scale)
