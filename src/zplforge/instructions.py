"""
Drawing Instructions.

Instructions are what the builder emits and what backends draw. Unlike
commands, every coordinate is absolute and every default has been
applied, so a backend can draw an instruction without knowing anything
about the commands that produced it.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Text:
    """Text field. Height/width left unset fall back in the backend."""
    x: int
    y: int
    font: str
    height: Optional[int]
    width: Optional[int]
    text: str
    reverse_print: bool = False
    color: Optional[str] = None


@dataclass(frozen=True)
class GraphicBox:
    x: int
    y: int
    width: int
    height: int
    thickness: int
    color: str
    custom_color: Optional[str]
    rounding: int
    reverse_print: bool = False


@dataclass(frozen=True)
class GraphicCircle:
    x: int
    y: int
    diameter: int
    thickness: int
    color: str
    custom_color: Optional[str]
    reverse_print: bool = False


@dataclass(frozen=True)
class GraphicEllipse:
    x: int
    y: int
    width: int
    height: int
    thickness: int
    color: str
    custom_color: Optional[str]
    reverse_print: bool = False


@dataclass(frozen=True)
class GraphicField:
    """Decoded 1-bit bitmap, MSB first, set bit = black."""
    x: int
    y: int
    width: int
    height: int
    data: bytes
    reverse_print: bool = False


@dataclass(frozen=True)
class CustomImage:
    """Base64 color image; a zero dimension keeps the aspect ratio."""
    x: int
    y: int
    width: int
    height: int
    data: str


@dataclass(frozen=True)
class Code128:
    x: int
    y: int
    orientation: str
    height: int
    module_width: int
    interpretation_line: str
    interpretation_line_above: str
    check_digit: str
    mode: str
    data: str
    reverse_print: bool = False


@dataclass(frozen=True)
class Code39:
    x: int
    y: int
    orientation: str
    check_digit: str
    height: int
    module_width: int
    interpretation_line: str
    interpretation_line_above: str
    data: str
    reverse_print: bool = False


@dataclass(frozen=True)
class QRCode:
    x: int
    y: int
    orientation: str
    model: int
    magnification: int
    error_correction: str
    mask: int
    data: str
    reverse_print: bool = False


Instruction = Union[
    Text, GraphicBox, GraphicCircle, GraphicEllipse, GraphicField,
    CustomImage, Code128, Code39, QRCode,
]
