"""
ZPL Command Records.

The parser turns raw ZPL text into an ordered list of these records.
Each record mirrors one caret command; optional numeric parameters are
None when omitted. Records are immutable and carry no behavior.

Reference: ZPL II Programming Guide
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union


class YesNo(Enum):
    """Boolean-like ZPL flag."""
    Y = "Y"
    N = "N"

    @classmethod
    def from_char(cls, value: str,
                  log: Optional[Callable[[str], None]] = None) -> "YesNo":
        """Convert a parameter character, falling back to N."""
        try:
            return cls(value)
        except ValueError:
            if log:
                log(f"{value!r} is not a valid YesNo value, using N")
            return cls.N


class Justification(Enum):
    """Text block justification."""
    LEFT = "L"     # Default
    CENTER = "C"
    RIGHT = "R"
    JUSTIFIED = "J"

    @classmethod
    def from_char(cls, value: str,
                  log: Optional[Callable[[str], None]] = None) -> "Justification":
        """Convert a parameter character, falling back to LEFT."""
        try:
            return cls(value)
        except ValueError:
            if log:
                log(f"{value!r} is not a valid Justification value, using L")
            return cls.LEFT


# ---- Format Commands ----


@dataclass(frozen=True)
class StartFormat:
    """^XA - start of a label format."""


@dataclass(frozen=True)
class EndFormat:
    """^XZ - end of a label format."""


@dataclass(frozen=True)
class LabelHome:
    """^LH - label home position."""
    x: Optional[int] = None
    y: Optional[int] = None


@dataclass(frozen=True)
class LabelLength:
    """^LL - label length in dots."""
    length: Optional[int] = None


@dataclass(frozen=True)
class LabelReverse:
    """^LR - reverse the whole label."""
    reverse: Optional[YesNo] = None


@dataclass(frozen=True)
class Comment:
    """^FX - comment, never printed."""
    text: str = ""


@dataclass(frozen=True)
class ChangeInternationalFont:
    """^CI - character set selection."""
    charset: Optional[int] = None


# ---- Field Commands ----


@dataclass(frozen=True)
class FieldOrigin:
    """^FO - field origin."""
    x: Optional[int] = None
    y: Optional[int] = None


@dataclass(frozen=True)
class FieldTypeset:
    """^FT - field typeset (baseline) position."""
    x: Optional[int] = None
    y: Optional[int] = None


@dataclass(frozen=True)
class FieldSeparator:
    """^FS - end of a field."""


@dataclass(frozen=True)
class FieldData:
    """^FD - field payload."""
    data: str = ""


@dataclass(frozen=True)
class FieldBlock:
    """^FB - text block layout."""
    width: Optional[int] = None
    max_lines: Optional[int] = None
    line_spacing: Optional[int] = None
    justification: Optional[Justification] = None
    indent: Optional[int] = None


@dataclass(frozen=True)
class FieldReverse:
    """^FR - print the next field white on black."""


# ---- Font Commands ----


@dataclass(frozen=True)
class FontSpecFull:
    """^A - scalable/bitmapped font for the following fields."""
    font_name: str
    orientation: Optional[str] = None  # N, R, I, B
    height: Optional[int] = None
    width: Optional[int] = None


@dataclass(frozen=True)
class FontSpec:
    """^CF - change default font."""
    font_name: str
    height: Optional[int] = None
    width: Optional[int] = None


# ---- Graphic Commands ----


@dataclass(frozen=True)
class GraphicBox:
    """^GB - box or line."""
    width: int
    height: int
    border_thickness: Optional[int] = None
    line_color: Optional[str] = None  # B or W
    corner_rounding: Optional[int] = None  # 0-8


@dataclass(frozen=True)
class GraphicCircle:
    """^GC - circle."""
    diameter: Optional[int] = None
    border_thickness: Optional[int] = None
    line_color: Optional[str] = None


@dataclass(frozen=True)
class GraphicEllipse:
    """^GE - ellipse."""
    width: Optional[int] = None
    height: Optional[int] = None
    border_thickness: Optional[int] = None
    line_color: Optional[str] = None


@dataclass(frozen=True)
class GraphicField:
    """^GF - raw bitmap download."""
    compression_type: Optional[str] = None  # A (ASCII hex), B, C, Z
    binary_byte_count: Optional[int] = None
    graphic_field_count: Optional[int] = None
    bytes_per_row: Optional[int] = None
    data: str = ""


# ---- Color Extensions ----


@dataclass(frozen=True)
class CustomImage:
    """^GIC - base64 color image (extension)."""
    width: int
    height: int
    data: str


@dataclass(frozen=True)
class GraphicTextColor:
    """^GTC - text color for following fields (extension)."""
    color: str = ""


@dataclass(frozen=True)
class GraphicLineColor:
    """^GLC - line color for following graphics (extension)."""
    color: str = ""


# ---- Barcode Commands ----


@dataclass(frozen=True)
class Code128:
    """^BC - Code 128."""
    orientation: Optional[str] = None
    height: Optional[int] = None
    interpretation_line: Optional[str] = None
    interpretation_line_above: Optional[str] = None
    check_digit: Optional[str] = None
    mode: Optional[str] = None  # N, U, A, D


@dataclass(frozen=True)
class Code39:
    """^B3 - Code 39."""
    orientation: Optional[str] = None
    check_digit: Optional[str] = None
    height: Optional[int] = None
    interpretation_line: Optional[str] = None
    interpretation_line_above: Optional[str] = None


@dataclass(frozen=True)
class QRCode:
    """^BQ - QR code."""
    orientation: Optional[str] = None
    model: Optional[int] = None  # 1=original, 2=enhanced
    magnification: Optional[int] = None  # 1-10
    error_correction: Optional[str] = None  # H, Q, M, L
    mask: Optional[int] = None  # 0-7


@dataclass(frozen=True)
class DataMatrix:
    """^BX - Data Matrix."""
    orientation: Optional[str] = None
    height: Optional[int] = None
    quality: Optional[int] = None
    columns: Optional[int] = None
    rows: Optional[int] = None


@dataclass(frozen=True)
class BarcodeDefault:
    """^BY - barcode field defaults."""
    module_width: Optional[int] = None
    ratio: Optional[float] = None
    height: Optional[int] = None


# ---- Fallback ----


@dataclass(frozen=True)
class UnsupportedCommand:
    """Any caret command the parser does not model."""
    command: str  # e.g. "^PW"
    args: str = ""


Command = Union[
    StartFormat, EndFormat, LabelHome, LabelLength, LabelReverse, Comment,
    ChangeInternationalFont, FieldOrigin, FieldTypeset, FieldSeparator,
    FieldData, FieldBlock, FieldReverse, FontSpecFull, FontSpec, GraphicBox,
    GraphicCircle, GraphicEllipse, GraphicField, CustomImage,
    GraphicTextColor, GraphicLineColor, Code128, Code39, QRCode, DataMatrix,
    BarcodeDefault, UnsupportedCommand,
]
