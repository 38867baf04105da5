"""
Modal State for the Instruction Builder.

ZPL is modal: fonts, barcode defaults and colors set by one command stay
in effect for every later field until overwritten. The builder keeps all
of that in a single ModalState, grouped by role.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Coordinates are unsigned 32-bit dots
U32_MAX = 0xFFFFFFFF


def saturating_add(a: int, b: int) -> int:
    """Add two dot values, clamping to the unsigned 32-bit range."""
    return max(0, min(a + b, U32_MAX))


class InstructionKind(Enum):
    """Which instruction a field separator should emit."""
    TEXT = "text"
    GRAPHIC_BOX = "graphic_box"
    GRAPHIC_CIRCLE = "graphic_circle"
    GRAPHIC_ELLIPSE = "graphic_ellipse"
    GRAPHIC_FIELD = "graphic_field"
    CODE128 = "code128"
    CODE39 = "code39"
    QR_CODE = "qr_code"
    CUSTOM_IMAGE = "custom_image"


@dataclass
class Position:
    """Absolute field position in dots."""
    x: int = 0
    y: int = 0


@dataclass
class Metrics:
    """Sizes; thickness doubles as module width or magnification."""
    width: int = 0
    height: int = 0
    thickness: int = 0


@dataclass
class Attributes:
    """Qualitative field settings, kept until overwritten."""
    orientation: Optional[str] = None
    interpretation_line: Optional[str] = None
    interpretation_above: Optional[str] = None
    check_digit: Optional[str] = None
    mode: Optional[str] = None
    error_correction: Optional[str] = None
    line_color: Optional[str] = None  # B or W
    custom_line_color: Optional[str] = None  # hex, e.g. #FF0000


@dataclass
class Params:
    """Algorithm parameters."""
    rounding: int = 0
    model: int = 0
    mask: int = 0
    ratio: Optional[float] = None


@dataclass
class FontState:
    """Active font."""
    font_name: str = "A"
    orientation: Optional[str] = None
    height: Optional[int] = None
    width: Optional[int] = None
    color: Optional[str] = None


@dataclass
class ModalState:
    """Everything the builder accumulates across commands."""
    position: Position = field(default_factory=Position)
    typeset: Position = field(default_factory=Position)
    metrics: Metrics = field(default_factory=Metrics)
    barcode_metrics: Metrics = field(default_factory=Metrics)
    attributes: Attributes = field(default_factory=Attributes)
    params: Params = field(default_factory=Params)
    font: FontState = field(default_factory=FontState)
    reverse: bool = False
    value: Optional[str] = None
    graphic_data: Optional[bytes] = None
    kind: Optional[InstructionKind] = None

    def end_field(self):
        """Drop per-field state; modal groups are kept."""
        self.value = None
        self.kind = None
        self.graphic_data = None
        self.reverse = False
