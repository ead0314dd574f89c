"""Worker error paths of the Tk views, without a display."""
from __future__ import annotations

import queue

import pytest

pytest.importorskip("tkinter")

from signature.gui import signature_pad_view, typed_signature_view
from signature.gui.signature_pad_view import SignaturePadView
from signature.gui.typed_signature_view import TypedSignatureView
from signature.models.signature_enums import ImageFormat


class _Button:
    def __init__(self) -> None:
        self.last = None

    def state(self, spec) -> None:
        self.last = spec[0]


class _Var:
    def __init__(self, value="") -> None:
        self.value = value

    def get(self):
        return self.value

    def set(self, value) -> None:
        self.value = value


class _InlineThread:
    def __init__(self, target, daemon=False) -> None:
        self._target = target

    def start(self) -> None:
        self._target()


class _CrashingService:
    is_optimizing = False
    is_analyzing = False

    def export_typed(self, name, face, fmt):
        raise RuntimeError("encoder crashed")

    def export_drawing(self, fmt):
        raise RuntimeError("encoder crashed")


@pytest.fixture()
def ui(monkeypatch):
    errors = []
    for module in (typed_signature_view, signature_pad_view):
        monkeypatch.setattr(module.threading, "Thread", _InlineThread)
        monkeypatch.setattr(module.messagebox, "showerror", lambda title, msg, **kw: errors.append(msg))
    return errors


def _drain(scheduled) -> int:
    calls = 0
    while scheduled and calls < 10:
        scheduled.pop(0)()
        calls += 1
    return calls


def _wire(view, buttons_attr: str):
    scheduled = []
    buttons = [_Button(), _Button()]
    view._service = _CrashingService()
    view._results = queue.Queue()
    setattr(view, buttons_attr, buttons)
    view.after = lambda ms, fn: scheduled.append(fn)
    return scheduled, buttons


def test_typed_export_crash_restores_buttons(ui) -> None:
    view = object.__new__(TypedSignatureView)
    scheduled, buttons = _wire(view, "_buttons")
    view.name_var = _Var("Ada")

    view._export("Pacifico", ImageFormat.PNG)

    assert _drain(scheduled) == 1
    assert [b.last for b in buttons] == ["!disabled", "!disabled"]
    assert ui == ["encoder crashed"]
    assert view._results.empty()


def test_pad_export_crash_restores_buttons(ui) -> None:
    view = object.__new__(SignaturePadView)
    scheduled, buttons = _wire(view, "_busy_buttons")
    view._analyze_btn = _Button()

    view._export(ImageFormat.JPEG)

    assert _drain(scheduled) == 1
    assert [b.last for b in buttons] == ["!disabled", "!disabled"]
    assert ui == ["encoder crashed"]
