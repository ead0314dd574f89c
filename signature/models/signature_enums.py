# signature/models/signature_enums.py
from __future__ import annotations
from enum import Enum


class ImageFormat(str, Enum):
    """Raster formats the exporter can produce."""
    PNG = "png"     # lossless, keeps transparency
    JPEG = "jpg"    # lossy, no alpha channel

    @property
    def mime_type(self) -> str:
        return "image/png" if self is ImageFormat.PNG else "image/jpeg"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def pil_format(self) -> str:
        return "PNG" if self is ImageFormat.PNG else "JPEG"

    @property
    def is_lossy(self) -> bool:
        return self is ImageFormat.JPEG

    @classmethod
    def parse(cls, value: "str | ImageFormat") -> "ImageFormat":
        if isinstance(value, ImageFormat):
            return value
        s = str(value).strip().lower().lstrip(".")
        if s == "jpeg":
            s = "jpg"
        return cls(s)


class SizeMeasurement(str, Enum):
    """How the exporter decides whether an encoding fits the byte ceiling."""
    ESTIMATE = "estimate"   # data-URL length based approximation
    EXACT = "exact"         # len() of the encoded bytes


class ExportKind(str, Enum):
    DRAWN = "drawn"
    TYPED = "typed"
