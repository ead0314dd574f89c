# signature/logic/file_saver.py
from __future__ import annotations
from pathlib import Path

from ..exceptions.errors import FileSaveError


class FileSaver:
    """
    Local stand-in for a browser download: writes into ``output_dir``.

    Existing files are kept; like a browser, a " (n)" suffix is added.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def save(self, filename: str, data: bytes) -> Path:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            target = self._free_path(self.output_dir / filename)
            self._atomic_write(target, data)
        except OSError as e:
            raise FileSaveError(f"Cannot save {filename}: {e}") from e
        return target

    @staticmethod
    def _free_path(path: Path) -> Path:
        if not path.exists():
            return path
        n = 1
        while True:
            candidate = path.with_name(f"{path.stem} ({n}){path.suffix}")
            if not candidate.exists():
                return candidate
            n += 1

    @staticmethod
    def _atomic_write(path: Path, data: bytes) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with tmp.open("wb") as f:
                f.write(data)
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
