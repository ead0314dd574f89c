# signature/gui/signature_pad_view.py
from __future__ import annotations
import queue
import threading
import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable, Optional

from ..logic.signature_service import SignatureService
from ..models.point import PointerEvent
from ..models.signature_config import INK_BLACK, INK_BLUE, PEN_WIDTH_MAX, PEN_WIDTH_MIN
from ..models.signature_enums import ImageFormat


class SignaturePadView(ttk.Frame):
    """
    Freehand pad: ink controls, the drawing canvas and export/analysis buttons.

    The Tk canvas only mirrors the ink for display; the pixels that get
    exported live in the service's BitmapSurface. Exports and analysis run
    on a worker thread, results are picked up with ``after`` polling.
    """

    POLL_MS = 50

    def __init__(self, parent: tk.Misc, *, service: SignatureService, **kwargs) -> None:
        super().__init__(parent, **kwargs)
        self._service = service
        self._results: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._busy_buttons: list[ttk.Button] = []

        dpr = max(1.0, float(self.tk.call("tk", "scaling")) * 72 / 96)
        surface = service.setup_surface(self.winfo_screenwidth(), device_scale=dpr)

        self.columnconfigure(0, weight=1)
        self._make_toolbar()
        self.canvas = tk.Canvas(
            self, width=surface.width, height=surface.height, bg="white",
            highlightthickness=1, highlightbackground="#888",
        )
        self.canvas.grid(row=1, column=0, padx=10, pady=4)
        self.canvas.bind("<ButtonPress-1>", self._on_down)
        self.canvas.bind("<B1-Motion>", self._on_move)
        self.canvas.bind("<ButtonRelease-1>", self._on_up)
        self.canvas.bind("<Leave>", self._on_up)
        self._make_footer()

    # ------------------------------------------------------------------ UI
    def _make_toolbar(self) -> None:
        bar = ttk.Frame(self)
        bar.grid(row=0, column=0, sticky="ew", padx=10, pady=(10, 4))
        ttk.Label(bar, text="Ink").pack(side="left")
        ttk.Button(bar, text="Black", command=lambda: self._service.set_ink_color(INK_BLACK)).pack(side="left", padx=2)
        ttk.Button(bar, text="Blue", command=lambda: self._service.set_ink_color(INK_BLUE)).pack(side="left", padx=2)

        ttk.Label(bar, text="Size").pack(side="left", padx=(12, 0))
        self.width_var = tk.IntVar(value=self._service.config.pen_width)
        ttk.Scale(bar, from_=PEN_WIDTH_MIN, to=PEN_WIDTH_MAX, variable=self.width_var, orient="horizontal",
                  length=120, command=lambda v: self._service.set_pen_width(float(v))).pack(side="left", padx=6)
        ttk.Button(bar, text="Clear", command=self._clear).pack(side="left", padx=(12, 0))

    def _make_footer(self) -> None:
        foot = ttk.Frame(self)
        foot.grid(row=2, column=0, sticky="ew", padx=10, pady=(4, 10))
        analyze = ttk.Button(foot, text="AI Analysis", command=self._analyze)
        analyze.pack(side="left")
        for fmt in (ImageFormat.JPEG, ImageFormat.PNG):
            btn = ttk.Button(foot, text=fmt.value.upper(), command=lambda f=fmt: self._export(f))
            btn.pack(side="right", padx=(6, 0))
            self._busy_buttons.append(btn)
        self._analyze_btn = analyze
        self.analysis_var = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.analysis_var, wraplength=560, justify="left").grid(
            row=3, column=0, sticky="ew", padx=10, pady=(0, 10))

    # ------------------------------------------------------------------ Canvas handlers
    def _on_down(self, e) -> None:
        self._service.pointer_down(PointerEvent(e.x, e.y))

    def _on_move(self, e) -> None:
        color, width = self._service.config.ink_color, self._service.config.pen_width
        for seg in self._service.pointer_move(PointerEvent(e.x, e.y)):
            coords = [c for p in seg.flatten() for c in (p.x, p.y)]
            self.canvas.create_line(*coords, fill=color, width=width, capstyle="round", joinstyle="round")

    def _on_up(self, _e=None) -> None:
        self._service.pointer_up()

    # ------------------------------------------------------------------ Actions
    def _clear(self) -> None:
        self.canvas.delete("all")
        self._service.clear()
        self.analysis_var.set("")

    def _export(self, fmt: ImageFormat) -> None:
        if self._service.is_optimizing:
            return
        self._set_busy(True)
        self._run(lambda: self._service.export_drawing(fmt), self._export_done)

    def _export_done(self, path) -> None:
        self._set_busy(False)
        if path is None:
            messagebox.showerror("Export", "The signature could not be saved.", parent=self)
        else:
            messagebox.showinfo("Export", f"Saved {path}", parent=self)

    def _analyze(self) -> None:
        if self._service.is_analyzing:
            return
        self._analyze_btn.state(["disabled"])
        self.analysis_var.set("Analyzing...")
        self._run(self._service.analyze, self._analyze_done)

    def _analyze_done(self, text: Optional[str]) -> None:
        self._analyze_btn.state(["!disabled"])
        self.analysis_var.set(text or "")

    # ------------------------------------------------------------------ Worker plumbing
    def _set_busy(self, busy: bool) -> None:
        for btn in self._busy_buttons:
            btn.state(["disabled"] if busy else ["!disabled"])

    def _run(self, work: Callable[[], object], done: Callable[[object], None]) -> None:
        def _worker() -> None:
            try:
                result = work()
            except Exception as e:
                self._results.put(lambda err=e: self._worker_failed(err))
                return
            self._results.put(lambda: done(result))

        threading.Thread(target=_worker, daemon=True).start()
        self.after(self.POLL_MS, self._poll)

    def _worker_failed(self, error: Exception) -> None:
        self._set_busy(False)
        self._analyze_btn.state(["!disabled"])
        messagebox.showerror("Error", str(error), parent=self)

    def _poll(self) -> None:
        try:
            callback = self._results.get_nowait()
        except queue.Empty:
            self.after(self.POLL_MS, self._poll)
            return
        callback()
