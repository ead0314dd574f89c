from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol

from ..models.signature_enums import ExportKind, ImageFormat


@dataclass(frozen=True)
class NamingContext:
    kind: ExportKind
    format: ImageFormat


class NamingStrategy(Protocol):
    def propose_filename(self, ctx: NamingContext) -> str: ...


class ExportNamingStrategy:
    """Default: signature.<ext> for drawn, typed-signature.<ext> for typed."""

    def propose_filename(self, ctx: NamingContext) -> str:
        base = "typed-signature" if ctx.kind is ExportKind.TYPED else "signature"
        return f"{base}.{ctx.format.extension}"
