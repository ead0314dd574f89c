# signature/logic/signature_service.py
from __future__ import annotations
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from core.config.config_service import ConfigService, config_service
from core.logging.logic.logger import logger as event_logger

from ..exceptions.errors import FileSaveError
from ..models.bitmap_surface import BitmapSurface
from ..models.export_models import EncodedArtifact, ExportRequest
from ..models.point import Point, PointerEvent
from ..models.quadratic_segment import QuadraticSegment
from ..models.signature_config import SignatureConfig, clamp_pen_width, snap_typed_weight
from ..models.signature_enums import ExportKind, ImageFormat, SizeMeasurement

from .advisory_service import ANALYSIS_FAILED, ANALYSIS_UNAVAILABLE, AdvisoryService, build_advisory_client
from .bounded_exporter import BoundedExporter
from .file_saver import FileSaver
from .naming_strategy import ExportNamingStrategy, NamingContext, NamingStrategy
from .stroke_capture import StrokeCapture
from .typed_renderer import FontResolver, TypedRenderer

_FEATURE_ID = "Signature"
_UNSET: Any = object()

Pointer = Union[PointerEvent, Point]


def _primary(event: Pointer) -> Point:
    return event.primary() if isinstance(event, PointerEvent) else event


class SignatureService:
    """
    Owns the state of one signing session (no UI).

    The GUI forwards pointer and button events here. The pad surface only
    exists after ``setup_surface``; until then drawing, clearing, exporting
    the drawing and analysis are silent no-ops.

    Only one export may run at a time. The guard is a non-blocking lock so
    a second click (possibly from another thread) is rejected instead of
    queued, and it is released on every exit path.
    """

    # -------- Construction ---------------------------------------------------
    def __init__(self, *, config: Optional[ConfigService] = None,
                 exporter: Optional[BoundedExporter] = None,
                 renderer: Optional[TypedRenderer] = None,
                 saver: Optional[FileSaver] = None,
                 advisory: Optional[AdvisoryService] = _UNSET,
                 naming: Optional[NamingStrategy] = None,
                 logger: Optional[Any] = None) -> None:
        cfg = config or config_service
        self._cfg = cfg
        self._logger = logger or event_logger
        self.config = SignatureConfig(
            ink_color=cfg.pad.ink_color,
            pen_width=clamp_pen_width(cfg.pad.pen_width),
        )
        self.exporter = exporter or BoundedExporter(measurement=SizeMeasurement(cfg.export.size_measurement))
        self.renderer = renderer or TypedRenderer(FontResolver([cfg.typed.font_dir]))
        self.saver = saver or FileSaver(cfg.export.output_dir)
        self.advisory = build_advisory_client(cfg.advisory) if advisory is _UNSET else advisory
        self.naming = naming or ExportNamingStrategy()

        self.surface: Optional[BitmapSurface] = None
        self.capture = StrokeCapture(None, color=self.config.ink_color, width=self.config.pen_width)
        self.analysis: Optional[str] = None
        self.last_artifact: Optional[EncodedArtifact] = None

        self._export_lock = threading.Lock()
        self._analyze_lock = threading.Lock()

    # -------- Pad surface ----------------------------------------------------
    def pad_size(self, viewport_width: Optional[int] = None) -> tuple[int, int]:
        pad = self._cfg.pad
        width = pad.width
        if viewport_width is not None and viewport_width < pad.narrow_breakpoint:
            width = max(1, viewport_width - pad.narrow_margin)
        return width, pad.height

    def setup_surface(self, viewport_width: Optional[int] = None, device_scale: float = 1.0) -> BitmapSurface:
        """(Re)create the pad; the device scale is fixed here, not per point."""
        w, h = self.pad_size(viewport_width)
        self.surface = BitmapSurface(w, h, device_scale)
        self.capture.end()
        self.capture.surface = self.surface
        return self.surface

    # -------- Pen / ink ------------------------------------------------------
    def set_ink_color(self, color: str) -> None:
        self.config.ink_color = color
        self.capture.color = color

    def set_pen_width(self, width: float) -> None:
        self.config.pen_width = clamp_pen_width(width)
        self.capture.width = self.config.pen_width

    def set_typed_weight(self, weight: float) -> None:
        self.config.typed_weight = snap_typed_weight(weight)

    # -------- Pointer dispatch -----------------------------------------------
    def pointer_down(self, event: Pointer) -> None:
        self.capture.begin(_primary(event))

    def pointer_move(self, event: Pointer) -> List[QuadraticSegment]:
        if not self.capture.active or self.surface is None:
            return []
        return self.capture.extend(_primary(event))

    def pointer_up(self) -> None:
        self.capture.end()

    pointer_leave = pointer_up

    def clear(self) -> None:
        if self.surface is None:
            return
        self.capture.end()
        self.surface.clear()
        self.analysis = None
        self._logger.log(_FEATURE_ID, "PadCleared")

    # -------- Export ---------------------------------------------------------
    @property
    def is_optimizing(self) -> bool:
        return self._export_lock.locked()

    def export_drawing(self, fmt: Union[ImageFormat, str]) -> Optional[Path]:
        """Export the pad as ``signature.<ext>``; None when skipped or not saved."""
        if self.surface is None:
            return None
        surface = self.surface
        return self._export(ExportKind.DRAWN, ImageFormat.parse(fmt), surface.snapshot)

    def export_typed(self, name: str, typeface: Optional[str] = None,
                     fmt: Union[ImageFormat, str] = ImageFormat.PNG) -> Optional[Path]:
        """Render ``name`` and export it as ``typed-signature.<ext>``."""
        face = typeface or self._cfg.typed.default_typeface
        color, weight = self.config.ink_color, self.config.typed_weight
        return self._export(ExportKind.TYPED, ImageFormat.parse(fmt),
                            lambda: self.renderer.render(name, face, weight, color))

    def _export(self, kind: ExportKind, fmt: ImageFormat,
                make_surface: Callable[[], BitmapSurface]) -> Optional[Path]:
        if not self._export_lock.acquire(blocking=False):
            self._logger.log(_FEATURE_ID, "ExportRejected", message=f"{kind.value} export already running")
            return None
        try:
            surface = make_surface()
            artifact = self.exporter.export(ExportRequest(surface, fmt))
            self.last_artifact = artifact
            if artifact.fallback:
                self._logger.log(_FEATURE_ID, "ExportFallback", level="WARNING",
                                 message=f"{fmt.value} {artifact.size} bytes at scale {artifact.scale:.2f}")
            filename = self.naming.propose_filename(NamingContext(kind=kind, format=fmt))
            try:
                path = self.saver.save(filename, artifact.data)
            except FileSaveError as e:
                self._logger.log(_FEATURE_ID, "SaveFailed", level="ERROR", reference_id=filename, message=str(e))
                return None
            self._logger.log(
                _FEATURE_ID, "ExportCompleted", reference_id=str(path),
                message=(f"{kind.value} {fmt.value} {artifact.size} bytes, scale {artifact.scale:.2f}, "
                         f"quality {artifact.quality}, {artifact.attempts} attempts"),
            )
            return path
        finally:
            self._export_lock.release()

    # -------- Advisory -------------------------------------------------------
    @property
    def is_analyzing(self) -> bool:
        return self._analyze_lock.locked()

    def analyze(self) -> Optional[str]:
        """Ask the advisory service about the pad; never raises."""
        if self.surface is None:
            return None
        if not self._analyze_lock.acquire(blocking=False):
            return self.analysis
        try:
            self.analysis = None
            if self.advisory is None:
                self.analysis = ANALYSIS_FAILED
                return self.analysis
            try:
                text = self.advisory.describe(self.surface.snapshot().to_png_bytes())
            except Exception as e:  # provider boundary: nothing may escape
                self._logger.log(_FEATURE_ID, "AdvisoryFailed", level="WARNING", message=str(e))
                text = ANALYSIS_FAILED
            self.analysis = text or ANALYSIS_UNAVAILABLE
            return self.analysis
        finally:
            self._analyze_lock.release()
