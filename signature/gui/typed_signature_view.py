# signature/gui/typed_signature_view.py
from __future__ import annotations
import queue
import threading
import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable

from ..logic.signature_service import SignatureService
from ..logic.typed_renderer import KNOWN_TYPEFACES, PLACEHOLDER_NAME
from ..models.signature_config import TYPED_WEIGHT_MAX
from ..models.signature_enums import ImageFormat


class TypedSignatureView(ttk.Frame):
    """Name entry, weight slider and one PNG/JPG export pair per typeface."""

    POLL_MS = 50

    def __init__(self, parent: tk.Misc, *, service: SignatureService, **kwargs) -> None:
        super().__init__(parent, **kwargs)
        self._service = service
        self._results: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._buttons: list[ttk.Button] = []

        self.columnconfigure(1, weight=1)
        ttk.Label(self, text="Name").grid(row=0, column=0, sticky="w", padx=10, pady=(10, 4))
        self.name_var = tk.StringVar(value="")
        ttk.Entry(self, textvariable=self.name_var).grid(row=0, column=1, sticky="ew", padx=10, pady=(10, 4))

        ttk.Label(self, text="Weight").grid(row=1, column=0, sticky="w", padx=10)
        self.weight_var = tk.DoubleVar(value=service.config.typed_weight)
        ttk.Scale(self, from_=0, to=TYPED_WEIGHT_MAX, variable=self.weight_var, orient="horizontal",
                  command=lambda v: service.set_typed_weight(float(v))).grid(row=1, column=1, sticky="ew", padx=10)

        for row, face in enumerate(KNOWN_TYPEFACES, start=2):
            ttk.Label(self, text=face).grid(row=row, column=0, sticky="w", padx=10, pady=2)
            cell = ttk.Frame(self)
            cell.grid(row=row, column=1, sticky="e", padx=10, pady=2)
            for fmt in (ImageFormat.PNG, ImageFormat.JPEG):
                btn = ttk.Button(cell, text=fmt.value.upper(), command=lambda f=face, x=fmt: self._export(f, x))
                btn.pack(side="left", padx=(6, 0))
                self._buttons.append(btn)

    def _export(self, face: str, fmt: ImageFormat) -> None:
        if self._service.is_optimizing:
            return
        name = self.name_var.get() or PLACEHOLDER_NAME
        self._set_busy(True)

        def _worker() -> None:
            try:
                path = self._service.export_typed(name, face, fmt)
            except Exception as e:
                self._results.put(lambda err=e: self._export_failed(err))
                return
            self._results.put(lambda: self._export_done(path))

        threading.Thread(target=_worker, daemon=True).start()
        self.after(self.POLL_MS, self._poll)

    def _set_busy(self, busy: bool) -> None:
        for btn in self._buttons:
            btn.state(["disabled"] if busy else ["!disabled"])

    def _export_done(self, path) -> None:
        self._set_busy(False)
        if path is None:
            messagebox.showerror("Export", "The typed signature could not be saved.", parent=self)
        else:
            messagebox.showinfo("Export", f"Saved {path}", parent=self)

    def _export_failed(self, error: Exception) -> None:
        self._set_busy(False)
        messagebox.showerror("Export", str(error), parent=self)

    def _poll(self) -> None:
        try:
            callback = self._results.get_nowait()
        except queue.Empty:
            self.after(self.POLL_MS, self._poll)
            return
        callback()
