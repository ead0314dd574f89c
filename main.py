import tkinter as tk
from tkinter import ttk

from core.config.config_service import config_service
from signature.gui.signature_pad_view import SignaturePadView
from signature.gui.typed_signature_view import TypedSignatureView
from signature.logic.signature_service import SignatureService


class MainWindow(tk.Tk):
    def __init__(self):
        super().__init__()
        general = config_service.general
        self.title(f"{general.app_name} {general.version}".strip())
        self.resizable(False, False)

        service = SignatureService()
        tabs = ttk.Notebook(self)
        tabs.pack(fill="both", expand=True)
        tabs.add(SignaturePadView(tabs, service=service), text="Draw")
        tabs.add(TypedSignatureView(tabs, service=service), text="Type")

        # status line
        ttk.Label(self, text="Files are kept under 25KB for legacy document systems.",
                  anchor="w").pack(side="bottom", fill="x", padx=10, pady=4)


def main() -> None:
    MainWindow().mainloop()


if __name__ == "__main__":
    main()
