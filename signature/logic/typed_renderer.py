# signature/logic/typed_renderer.py
from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from PIL import ImageDraw, ImageFont

from ..models.bitmap_surface import BitmapSurface

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Signature"
TYPED_WIDTH = 1200
TYPED_HEIGHT = 400
TYPED_SCALE = 2
BASE_FONT_PX = 160

KNOWN_TYPEFACES = (
    "Dancing Script",
    "Pacifico",
    "Great Vibes",
    "Caveat",
    "Sacramento",
    "Monsieur La Doulaise",
)

# Tried after the font directory, before Pillow's bundled font.
SYSTEM_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSerif-Italic.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
    "/usr/share/fonts/TTF/DejaVuSerif.ttf",
    "C:\\Windows\\Fonts\\segoesc.ttf",
    "C:\\Windows\\Fonts\\times.ttf",
]

_FONT_SUFFIXES = (".ttf", ".otf")


def _normalize(name: str) -> str:
    return re.sub(r"[\s_\-]+", "", name).lower()


class FontResolver:
    """Maps a typeface identifier to a loaded FreeType font."""

    def __init__(self, font_dirs: Iterable[Path] = (), system_paths: Optional[List[str]] = None) -> None:
        self.font_dirs = [Path(d) for d in font_dirs]
        self.system_paths = SYSTEM_FONT_PATHS if system_paths is None else list(system_paths)

    def find_file(self, typeface: str) -> Optional[Path]:
        wanted = _normalize(typeface)
        for d in self.font_dirs:
            if not d.is_dir():
                continue
            for candidate in sorted(d.iterdir()):
                if candidate.suffix.lower() not in _FONT_SUFFIXES:
                    continue
                stem = _normalize(candidate.stem)
                family = _normalize(candidate.stem.split("-")[0])
                # "DancingScript-Regular.ttf" should match "Dancing Script"
                if wanted in (stem, family):
                    return candidate
        return None

    def load(self, typeface: str, size: int) -> ImageFont.FreeTypeFont:
        path = self.find_file(typeface)
        candidates = ([str(path)] if path else []) + self.system_paths
        for font_path in candidates:
            try:
                font = ImageFont.truetype(font_path, size)
                logger.debug("typeface %r -> %s", typeface, font_path)
                return font
            except OSError:
                continue
        logger.debug("typeface %r not found, using bundled default", typeface)
        return ImageFont.load_default(size=size)


class TypedRenderer:
    """
    Rasterizes a name in a script typeface onto a fresh, oversized surface.

    The surface is 1200x400 logical at 2x so edges stay crisp after the
    exporter downsamples. With ``weight > 0`` an outline pass is drawn
    before the fill so the outline thickens the glyphs without hiding them.
    """

    def __init__(self, fonts: Optional[FontResolver] = None) -> None:
        self.fonts = fonts or FontResolver()

    def render(self, name: str, typeface: str, weight: float = 0.0, color: str = "#000000") -> BitmapSurface:
        text = name.strip() if name and name.strip() else PLACEHOLDER_NAME
        surface = BitmapSurface(TYPED_WIDTH, TYPED_HEIGHT, TYPED_SCALE)
        w, h = surface.pixel_size
        center = (w / 2, h / 2)
        font = self.fonts.load(typeface, BASE_FONT_PX * TYPED_SCALE)
        draw = ImageDraw.Draw(surface.image)

        weight = max(0.0, float(weight))
        if weight > 0:
            # canvas line width is weight*scale*2, centred on the outline
            self._stroke_text(draw, center, text, font, color, max(1, int(round(weight * TYPED_SCALE))))
        self._fill_text(draw, center, text, font, color)
        return surface

    @staticmethod
    def _stroke_text(draw: ImageDraw.ImageDraw, center, text: str, font, color: str, radius: int) -> None:
        draw.text(center, text, font=font, anchor="mm", fill=color,
                  stroke_width=radius, stroke_fill=color)

    @staticmethod
    def _fill_text(draw: ImageDraw.ImageDraw, center, text: str, font, color: str) -> None:
        draw.text(center, text, font=font, anchor="mm", fill=color)
