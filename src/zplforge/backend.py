"""
Rendering Backend Interface.

A backend turns instructions into output (an image, a page description,
a test recording). The engine calls these methods in instruction order
with fully resolved values; it never draws anything itself.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .fonts import FontManager


class ZplBackend(ABC):
    """Capability set a rendering target must implement."""

    @abstractmethod
    def setup_page(self, width: int, height: int, resolution: float):
        """Initialize the drawing surface (dots, dots, dpi)."""

    @abstractmethod
    def setup_font_manager(self, font_manager: FontManager):
        """Provide the shared font registry."""

    @abstractmethod
    def draw_text(self, x: int, y: int, font: str, height: Optional[int],
                  width: Optional[int], text: str, reverse_print: bool,
                  color: Optional[str]):
        """Draw a text field."""

    @abstractmethod
    def draw_graphic_box(self, x: int, y: int, width: int, height: int,
                         thickness: int, color: str, custom_color: Optional[str],
                         rounding: int, reverse_print: bool):
        """Draw a box or line."""

    @abstractmethod
    def draw_graphic_circle(self, x: int, y: int, diameter: int, thickness: int,
                            color: str, custom_color: Optional[str],
                            reverse_print: bool):
        """Draw a circle."""

    @abstractmethod
    def draw_graphic_ellipse(self, x: int, y: int, width: int, height: int,
                             thickness: int, color: str,
                             custom_color: Optional[str], reverse_print: bool):
        """Draw an ellipse."""

    @abstractmethod
    def draw_graphic_field(self, x: int, y: int, width: int, height: int,
                           data: bytes, reverse_print: bool):
        """Draw a 1-bit bitmap (MSB first, set bit = black)."""

    @abstractmethod
    def draw_graphic_image_custom(self, x: int, y: int, width: int, height: int,
                                  data: str):
        """
        Draw a base64 encoded color image.

        A zero width and height keep the natural size; a single zero
        dimension is derived from the other to keep the aspect ratio.
        """

    @abstractmethod
    def draw_code128(self, x: int, y: int, orientation: str, height: int,
                     module_width: int, interpretation_line: str,
                     interpretation_line_above: str, check_digit: str,
                     mode: str, data: str, reverse_print: bool):
        """Draw a Code 128 barcode."""

    @abstractmethod
    def draw_code39(self, x: int, y: int, orientation: str, check_digit: str,
                    height: int, module_width: int, interpretation_line: str,
                    interpretation_line_above: str, data: str,
                    reverse_print: bool):
        """Draw a Code 39 barcode."""

    @abstractmethod
    def draw_qr_code(self, x: int, y: int, orientation: str, model: int,
                     magnification: int, error_correction: str, mask: int,
                     data: str, reverse_print: bool):
        """Draw a QR code."""

    @abstractmethod
    def finalize(self) -> bytes:
        """Finish rendering and return the output."""
