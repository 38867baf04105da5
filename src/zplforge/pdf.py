"""
PDF Rendering Backend.

Renders the label with the PNG backend and embeds the resulting raster in a
single-page PDF of the label's physical size.
"""

from io import BytesIO

from .backend import ZplBackend
from .errors import BackendError
from .fonts import FontManager
from .png import PngBackend


class PdfBackend(ZplBackend):
    """Backend producing a one-page PDF document."""

    def __init__(self, debug: bool = False):
        self.png = PngBackend(debug=debug)
        self.resolution: float = 0.0
        self._debug = debug

    def set_debug(self, enabled: bool):
        """Enable/disable debug output."""
        self._debug = enabled
        self.png.set_debug(enabled)

    def _log(self, message: str):
        """Print debug message if enabled."""
        if self._debug:
            print(f"[ZPL] {message}")

    def setup_page(self, width: int, height: int, resolution: float):
        self.resolution = resolution
        self.png.setup_page(width, height, resolution)

    def setup_font_manager(self, font_manager: FontManager):
        self.png.setup_font_manager(font_manager)

    def draw_text(self, x, y, font, height, width, text, reverse_print, color):
        self.png.draw_text(x, y, font, height, width, text, reverse_print, color)

    def draw_graphic_box(self, x, y, width, height, thickness, color,
                         custom_color, rounding, reverse_print):
        self.png.draw_graphic_box(x, y, width, height, thickness, color,
                                  custom_color, rounding, reverse_print)

    def draw_graphic_circle(self, x, y, diameter, thickness, color,
                            custom_color, reverse_print):
        self.png.draw_graphic_circle(x, y, diameter, thickness, color,
                                     custom_color, reverse_print)

    def draw_graphic_ellipse(self, x, y, width, height, thickness, color,
                             custom_color, reverse_print):
        self.png.draw_graphic_ellipse(x, y, width, height, thickness, color,
                                      custom_color, reverse_print)

    def draw_graphic_field(self, x, y, width, height, data, reverse_print):
        self.png.draw_graphic_field(x, y, width, height, data, reverse_print)

    def draw_graphic_image_custom(self, x, y, width, height, data):
        self.png.draw_graphic_image_custom(x, y, width, height, data)

    def draw_code128(self, x, y, orientation, height, module_width,
                     interpretation_line, interpretation_line_above,
                     check_digit, mode, data, reverse_print):
        self.png.draw_code128(x, y, orientation, height, module_width,
                              interpretation_line, interpretation_line_above,
                              check_digit, mode, data, reverse_print)

    def draw_code39(self, x, y, orientation, check_digit, height, module_width,
                    interpretation_line, interpretation_line_above, data,
                    reverse_print):
        self.png.draw_code39(x, y, orientation, check_digit, height,
                             module_width, interpretation_line,
                             interpretation_line_above, data, reverse_print)

    def draw_qr_code(self, x, y, orientation, model, magnification,
                     error_correction, mask, data, reverse_print):
        self.png.draw_qr_code(x, y, orientation, model, magnification,
                              error_correction, mask, data, reverse_print)

    def finalize(self) -> bytes:
        """
        Write the rendered page as PDF.

        The page measures the canvas size at the page resolution, so one
        dot keeps its physical size.
        """
        canvas = self.png._require_canvas()
        if canvas.width == 0 or canvas.height == 0:
            raise BackendError("Cannot write an empty page as PDF")

        buffer = BytesIO()
        try:
            canvas.save(buffer, format="PDF", resolution=self.resolution or 72.0)
        except (OSError, ValueError) as e:
            raise BackendError(f"Failed to write PDF: {e}") from e
        self._log(f"PDF page {canvas.width}x{canvas.height} dots at {self.resolution} dpi")
        return buffer.getvalue()
