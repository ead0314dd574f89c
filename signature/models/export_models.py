# signature/models/export_models.py
from __future__ import annotations
import base64
from dataclasses import dataclass
from typing import Optional

from .bitmap_surface import BitmapSurface
from .signature_enums import ImageFormat

MAX_FILE_SIZE_BYTES = 25 * 1024  # legacy ingestion limit, not user-configurable


@dataclass(frozen=True)
class ExportRequest:
    """
    What to export and how.

    ``fill_background`` defaults to True for the lossy format: JPEG has no
    alpha channel, so transparent pixels must be composited onto white first.
    """
    surface: BitmapSurface
    format: ImageFormat
    fill_background: Optional[bool] = None

    @property
    def wants_background(self) -> bool:
        if self.fill_background is None:
            return self.format.is_lossy
        return bool(self.fill_background)


@dataclass(frozen=True)
class EncodedArtifact:
    data: bytes
    format: ImageFormat
    scale: float
    quality: Optional[float]
    estimated_size: int
    attempts: int
    fallback: bool = False

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def within_limit(self) -> bool:
        return self.size <= MAX_FILE_SIZE_BYTES

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"
