# signature/models/bitmap_surface.py
from __future__ import annotations
import io
from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw

from .quadratic_segment import QuadraticSegment

TRANSPARENT = (0, 0, 0, 0)


class BitmapSurface:
    """
    Fixed-size RGBA pixel grid with a device-scale factor.

    ``width``/``height`` are logical pixels. The backing image is
    ``round(width * device_scale) x round(height * device_scale)`` physical
    pixels; the logical -> physical transform is fixed here, once, so callers
    always draw in logical coordinates.
    """

    def __init__(self, width: float, height: float, device_scale: float = 1.0,
                 *, image: Optional[Image.Image] = None) -> None:
        if device_scale <= 0:
            raise ValueError("device_scale must be positive")
        self.width = width
        self.height = height
        self.device_scale = float(device_scale)
        if image is None:
            size = (max(1, round(width * device_scale)), max(1, round(height * device_scale)))
            image = Image.new("RGBA", size, TRANSPARENT)
        elif image.mode != "RGBA":
            image = image.convert("RGBA")
        self.image = image
        self._draw = ImageDraw.Draw(self.image)

    # ---------------------------------------------------------------- factories
    @classmethod
    def from_image(cls, image: Image.Image, device_scale: float = 1.0) -> "BitmapSurface":
        w, h = image.size
        return cls(w / device_scale, h / device_scale, device_scale, image=image)

    def snapshot(self) -> "BitmapSurface":
        """Independent copy; later drawing on ``self`` does not affect it."""
        return BitmapSurface(self.width, self.height, self.device_scale, image=self.image.copy())

    # ---------------------------------------------------------------- geometry
    @property
    def pixel_size(self) -> Tuple[int, int]:
        return self.image.size

    # ---------------------------------------------------------------- drawing
    def clear(self) -> None:
        self._draw.rectangle([(0, 0), self.image.size], fill=TRANSPARENT)

    def stroke_segments(self, segments: Iterable[QuadraticSegment], color: str, width: float) -> None:
        """
        Stroke each curve independently with round caps.

        Because every segment is rasterized on its own, drawing a set of
        segments in one call or across several calls gives identical pixels.
        """
        s = self.device_scale
        px_width = max(1, int(round(width * s)))
        radius = px_width / 2
        for seg in segments:
            poly = [p.scaled(s) for p in seg.flatten(s)]
            self._draw.line(poly, fill=color, width=px_width, joint="curve")
            for x, y in (poly[0], poly[-1]):
                self._draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=color)

    # ---------------------------------------------------------------- encoding
    def to_png_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()

    def is_blank(self) -> bool:
        return self.image.getbbox() is None
