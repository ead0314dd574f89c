# signature/models/signature_config.py
from __future__ import annotations
from dataclasses import dataclass

INK_BLACK = "#000000"
INK_BLUE = "#0000FF"

PEN_WIDTH_MIN = 1
PEN_WIDTH_MAX = 10
TYPED_WEIGHT_MAX = 5.0
TYPED_WEIGHT_STEP = 0.5


@dataclass
class SignatureConfig:
    """
    Pen and ink settings of the current session (not persisted).
    """
    ink_color: str = INK_BLACK
    pen_width: int = 3
    typed_weight: float = 0.0


def clamp_pen_width(value: float) -> int:
    return max(PEN_WIDTH_MIN, min(PEN_WIDTH_MAX, int(round(value))))


def snap_typed_weight(value: float) -> float:
    """Clamp to 0..5 and snap to the slider's 0.5 steps."""
    v = max(0.0, min(TYPED_WEIGHT_MAX, float(value)))
    return round(v / TYPED_WEIGHT_STEP) * TYPED_WEIGHT_STEP
