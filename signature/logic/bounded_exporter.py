# signature/logic/bounded_exporter.py
"""
Size-bounded raster export.

Searches (scale x quality) for the first encoding whose size fits
MAX_FILE_SIZE_BYTES. Quality is lowered before dimensions because ink on a
light background survives JPEG quantization better than repeated
downsampling. The search is greedy and deterministic: larger dimensions win
over higher quality, higher quality over lower.
"""
from __future__ import annotations
import base64
import io
import logging
from typing import Callable, Optional, Tuple

from PIL import Image

from ..models.bitmap_surface import BitmapSurface
from ..models.export_models import MAX_FILE_SIZE_BYTES, EncodedArtifact, ExportRequest
from ..models.signature_enums import ImageFormat, SizeMeasurement

logger = logging.getLogger(__name__)

INITIAL_QUALITY = 0.9
MIN_QUALITY = 0.1
QUALITY_STEP = 0.1
SCALE_STEP = 0.15
SCALE_FLOOR = 0.05
FALLBACK_QUALITY = 0.1
DATA_URL_OVERHEAD = 22  # len("data:image/png;base64,")

WHITE = (255, 255, 255, 255)


def scale_levels() -> Tuple[float, ...]:
    """1.0, 0.85, ... while > SCALE_FLOOR; integer steps avoid float drift."""
    levels = []
    level = 0
    while True:
        scale = round(1.0 - SCALE_STEP * level, 10)
        if scale <= SCALE_FLOOR:
            break
        levels.append(scale)
        level += 1
    return tuple(levels)


def quality_steps(start: float = INITIAL_QUALITY) -> Tuple[float, ...]:
    """start, start-0.1, ... down to and including 0.1."""
    top = int(round(start * 10))
    bottom = int(round(MIN_QUALITY * 10))
    return tuple(q / 10 for q in range(top, bottom - 1, -1))


def estimate_size(data: bytes, fmt: ImageFormat) -> int:
    """
    Approximate binary size from the data-URL form: (len(url) - 22) * 3/4.

    Never smaller than ``len(data)``: base-64 rounds up to whole quads and
    the mime prefix is at least 22 characters long.
    """
    url_len = len(f"data:{fmt.mime_type};base64,") + len(base64.b64encode(data))
    return round((url_len - DATA_URL_OVERHEAD) * 3 / 4)


def encode(image: Image.Image, fmt: ImageFormat, quality: Optional[float] = None) -> bytes:
    buf = io.BytesIO()
    if fmt.is_lossy:
        q = INITIAL_QUALITY if quality is None else quality
        image.convert("RGB").save(buf, format=fmt.pil_format, quality=max(1, int(round(q * 100))))
    else:
        image.save(buf, format=fmt.pil_format)
    return buf.getvalue()


class BoundedExporter:
    """Produces the best-fitting EncodedArtifact for an ExportRequest."""

    def __init__(self, *, max_bytes: int = MAX_FILE_SIZE_BYTES,
                 measurement: SizeMeasurement = SizeMeasurement.ESTIMATE) -> None:
        self.max_bytes = max_bytes
        self.measurement = SizeMeasurement(measurement)

    # ------------------------------------------------------------------ API
    def export(self, request: ExportRequest) -> EncodedArtifact:
        fmt = request.format
        source = request.surface.image
        measure = self._measure_fn(fmt)
        attempts = 0
        work: Optional[Image.Image] = None
        last_scale = 1.0

        for scale in scale_levels():
            last_scale = scale
            work = self._working_image(source, scale, request.wants_background)

            qualities = quality_steps() if fmt.is_lossy else (None,)
            for q in qualities:
                attempts += 1
                data = encode(work, fmt, q)
                size = measure(data)
                if size <= self.max_bytes:
                    logger.debug("fit %s at scale=%.2f quality=%s size=%d after %d attempts",
                                 fmt.value, scale, q, size, attempts)
                    return EncodedArtifact(data=data, format=fmt, scale=scale, quality=q,
                                           estimated_size=size, attempts=attempts)
            logger.debug("no fit at scale=%.2f, shrinking", scale)

        # Best effort: may exceed the ceiling.
        if work is None:
            work = self._working_image(source, last_scale, request.wants_background)
        attempts += 1
        data = encode(work, fmt, FALLBACK_QUALITY)
        logger.debug("fallback %s at scale=%.2f size=%d", fmt.value, last_scale, len(data))
        return EncodedArtifact(data=data, format=fmt, scale=last_scale,
                               quality=FALLBACK_QUALITY if fmt.is_lossy else None,
                               estimated_size=measure(data), attempts=attempts, fallback=True)

    def export_surface(self, surface: BitmapSurface, fmt: "ImageFormat | str",
                       fill_background: Optional[bool] = None) -> EncodedArtifact:
        return self.export(ExportRequest(surface, ImageFormat.parse(fmt), fill_background))

    # ------------------------------------------------------------------ helpers
    def _measure_fn(self, fmt: ImageFormat) -> Callable[[bytes], int]:
        if self.measurement is SizeMeasurement.EXACT:
            return len
        return lambda data: estimate_size(data, fmt)

    @staticmethod
    def _working_image(source: Image.Image, scale: float, background: bool) -> Image.Image:
        src = source if source.mode == "RGBA" else source.convert("RGBA")
        w = max(1, int(src.width * scale))
        h = max(1, int(src.height * scale))
        work = Image.new("RGBA", (w, h), WHITE if background else (0, 0, 0, 0))
        resized = src if (w, h) == src.size else src.resize((w, h), Image.Resampling.LANCZOS)
        work.alpha_composite(resized)
        return work
