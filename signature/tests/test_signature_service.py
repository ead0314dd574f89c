"""Session behaviour: pad lifecycle, export guard, save failures, analysis."""
from __future__ import annotations

import threading
from pathlib import Path

import pytest
from PIL import Image

from core.config.config_service import config_service
from signature.exceptions.errors import AdvisoryError, FileSaveError
from signature.logic.advisory_service import ANALYSIS_FAILED, ANALYSIS_UNAVAILABLE, AdvisoryService
from signature.logic.bounded_exporter import BoundedExporter
from signature.logic.file_saver import FileSaver
from signature.logic.signature_service import SignatureService
from signature.logic.typed_renderer import FontResolver, TypedRenderer
from signature.models.export_models import MAX_FILE_SIZE_BYTES
from signature.models.point import Point, PointerEvent
from signature.models.signature_enums import ImageFormat


class _EventLog:
    def __init__(self) -> None:
        self.events = []

    def log(self, feature, event, **kw) -> None:
        self.events.append((event, kw.get("level", "INFO")))

    def names(self):
        return [e for e, _ in self.events]


class _Advisor(AdvisoryService):
    def __init__(self, text: str = "", exc: Exception | None = None) -> None:
        self.text, self.exc, self.seen = text, exc, []

    def describe(self, image_png: bytes) -> str:
        self.seen.append(image_png)
        if self.exc:
            raise self.exc
        return self.text


class _BrokenSaver:
    def save(self, filename, data):
        raise FileSaveError("disk full")


def _service(tmp_path: Path, **kw) -> SignatureService:
    kw.setdefault("saver", FileSaver(tmp_path))
    kw.setdefault("advisory", None)
    kw.setdefault("logger", _EventLog())
    return SignatureService(
        renderer=TypedRenderer(FontResolver(font_dirs=[])),
        **kw,
    )


def _scribble(svc: SignatureService) -> None:
    svc.pointer_down(Point(40, 60))
    for i in range(1, 30):
        svc.pointer_move(Point(40 + i * 15, 60 + (i % 5) * 30))
    svc.pointer_up()


def test_everything_is_a_no_op_before_setup(tmp_path) -> None:
    svc = _service(tmp_path)
    svc.pointer_down(Point(1, 1))
    assert svc.pointer_move(Point(5, 5)) == []
    assert svc.pointer_move(Point(9, 9)) == []
    svc.pointer_up()
    svc.clear()
    assert svc.export_drawing("png") is None
    assert svc.analyze() is None
    assert list(tmp_path.iterdir()) == []
    assert svc._logger.events == []


def test_pad_size_follows_viewport(tmp_path) -> None:
    svc = _service(tmp_path)
    pad = config_service.pad
    assert svc.pad_size() == (pad.width, pad.height)
    assert svc.pad_size(1024) == (pad.width, pad.height)
    assert svc.pad_size(500) == (500 - pad.narrow_margin, pad.height)
    surface = svc.setup_surface(500, device_scale=2.0)
    assert surface.pixel_size == ((500 - pad.narrow_margin) * 2, pad.height * 2)


def test_drawing_and_exporting(tmp_path) -> None:
    svc = _service(tmp_path)
    svc.setup_surface()
    _scribble(svc)
    assert not svc.surface.is_blank()

    path = svc.export_drawing(ImageFormat.PNG)
    assert path == tmp_path / "signature.png"
    assert path.stat().st_size <= MAX_FILE_SIZE_BYTES
    assert svc.last_artifact.within_limit
    assert not svc.is_optimizing
    with Image.open(path) as img:
        assert img.format == "PNG"
    assert "ExportCompleted" in svc._logger.names()

    again = svc.export_drawing("jpg")
    assert again.name == "signature.jpg"


def test_moves_use_primary_touch(tmp_path) -> None:
    svc = _service(tmp_path)
    svc.setup_surface()
    svc.pointer_down(PointerEvent(10, 10, touches=(Point(20, 20), Point(300, 300))))
    svc.pointer_move(PointerEvent(30, 30, touches=(Point(30, 30), Point(310, 310))))
    drawn = svc.pointer_move(PointerEvent(40, 40, touches=(Point(40, 40), Point(320, 320))))
    assert drawn[-1].end == Point(40, 40)
    assert drawn[0].start == Point(20, 20)


def test_pen_and_ink_settings(tmp_path) -> None:
    svc = _service(tmp_path)
    svc.set_pen_width(50)
    assert svc.config.pen_width == 10 and svc.capture.width == 10
    svc.set_pen_width(0)
    assert svc.capture.width == 1
    svc.set_ink_color("#1D4ED8")
    assert svc.capture.color == "#1D4ED8"
    svc.set_typed_weight(1.3)
    assert svc.config.typed_weight == 1.5


def test_typed_export(tmp_path) -> None:
    svc = _service(tmp_path)
    path = svc.export_typed("Ada Lovelace", "Pacifico", ImageFormat.JPEG)
    assert path.name == "typed-signature.jpg"
    assert path.stat().st_size <= MAX_FILE_SIZE_BYTES
    with Image.open(path) as img:
        assert img.format == "JPEG"
    assert svc.export_typed("", fmt="png").name == "typed-signature.png"


def test_second_export_is_rejected_while_one_runs(tmp_path) -> None:
    svc = _service(tmp_path)
    svc.setup_surface()
    _scribble(svc)
    assert svc._export_lock.acquire(blocking=False)
    try:
        assert svc.is_optimizing
        assert svc.export_drawing("png") is None
        assert svc.export_typed("x") is None
    finally:
        svc._export_lock.release()
    assert list(tmp_path.iterdir()) == []
    assert svc._logger.names() == ["ExportRejected", "ExportRejected"]


def test_concurrent_exports_never_overlap(tmp_path) -> None:
    svc = _service(tmp_path)
    svc.setup_surface()
    _scribble(svc)
    start = threading.Barrier(4)
    results = []

    def worker():
        start.wait()
        results.append(svc.export_drawing("png"))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    saved = [r for r in results if r is not None]
    names = svc._logger.names()
    assert len(saved) == names.count("ExportCompleted")
    assert len(saved) + names.count("ExportRejected") == 4
    assert not svc.is_optimizing


def test_save_failure_is_reported_and_releases_guard(tmp_path) -> None:
    svc = _service(tmp_path, saver=_BrokenSaver())
    svc.setup_surface()
    _scribble(svc)
    assert svc.export_drawing("png") is None
    assert ("SaveFailed", "ERROR") in svc._logger.events
    assert not svc.is_optimizing


def test_oversized_export_is_saved_as_flagged_fallback(tmp_path) -> None:
    svc = _service(tmp_path, exporter=BoundedExporter(max_bytes=1))
    svc.setup_surface()
    _scribble(svc)
    path = svc.export_drawing("jpg")
    assert path == tmp_path / "signature.jpg"
    assert svc.last_artifact.fallback
    assert ("ExportFallback", "WARNING") in svc._logger.events
    assert svc._logger.names()[-1] == "ExportCompleted"


def test_exporter_errors_propagate_but_release_guard(tmp_path) -> None:
    svc = _service(tmp_path)
    svc.setup_surface()

    class _Boom:
        def export(self, request):
            raise RuntimeError("encoder crashed")

    svc.exporter = _Boom()
    with pytest.raises(RuntimeError):
        svc.export_drawing("png")
    assert not svc.is_optimizing


def test_analysis_without_client(tmp_path) -> None:
    svc = _service(tmp_path)
    svc.setup_surface()
    assert svc.analyze() == ANALYSIS_FAILED


def test_analysis_texts(tmp_path) -> None:
    advisor = _Advisor("Confident and legible.")
    svc = _service(tmp_path, advisory=advisor)
    svc.setup_surface()
    _scribble(svc)
    assert svc.analyze() == "Confident and legible."
    assert advisor.seen[0].startswith(b"\x89PNG")

    advisor.text = ""
    assert svc.analyze() == ANALYSIS_UNAVAILABLE

    advisor.exc = AdvisoryError("quota")
    assert svc.analyze() == ANALYSIS_FAILED
    assert ("AdvisoryFailed", "WARNING") in svc._logger.events
    assert not svc.is_analyzing


def test_clear_wipes_pad_and_analysis(tmp_path) -> None:
    svc = _service(tmp_path, advisory=_Advisor("ok"))
    svc.setup_surface()
    _scribble(svc)
    svc.analyze()
    svc.clear()
    assert svc.surface.is_blank()
    assert svc.analysis is None
    assert svc._logger.names()[-1] == "PadCleared"
