"""
PNG Rendering Backend.

Draws instructions onto an RGB canvas with Pillow and encodes the result
as PNG. One dot is one pixel.
"""

import base64
import binascii
import math
from io import BytesIO
from typing import Callable, Optional, Tuple

from PIL import Image, ImageChops, ImageDraw

from . import barcodes
from .backend import ZplBackend
from .codec import load_image
from .errors import BackendError, FontError, ImageError
from .fonts import FontManager

# Largest canvas side in dots; bigger pages are clipped
MAX_CANVAS_DIMENSION = 8192

# Text height used when a field has none
DEFAULT_TEXT_HEIGHT = 9

# Human readable line under/over 1D barcodes
INTERPRETATION_FONT = "0"
INTERPRETATION_HEIGHT = 18
INTERPRETATION_GAP = 6

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)

# Field orientation -> transpose applied to an upright symbol
ROTATIONS = {
    "R": Image.Transpose.ROTATE_270,  # 90 degrees clockwise
    "I": Image.Transpose.ROTATE_180,
    "B": Image.Transpose.ROTATE_90,  # 270 degrees clockwise
}

Color = Tuple[int, int, int]


def parse_hex_color(value: Optional[str]) -> Optional[Color]:
    """Parse #RRGGBB or #RGB; None when absent or malformed."""
    if not value:
        return None
    digits = value.strip().lstrip("#")
    try:
        if len(digits) == 6:
            return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))
        if len(digits) == 3:
            return tuple(int(d, 16) * 17 for d in digits)
    except ValueError:
        return None
    return None


def _line_color(color: str, custom_color: Optional[str]) -> Color:
    if custom_color is not None:
        return parse_hex_color(custom_color) or BLACK
    return WHITE if color == "W" else BLACK


class PngBackend(ZplBackend):
    """Pillow based backend producing a PNG image."""

    def __init__(self, debug: bool = False):
        self.canvas: Optional[Image.Image] = None
        self.resolution: float = 0.0
        self.fonts: Optional[FontManager] = None
        self._debug = debug

    def set_debug(self, enabled: bool):
        """Enable/disable debug output."""
        self._debug = enabled

    def _log(self, message: str):
        """Print debug message if enabled."""
        if self._debug:
            print(f"[ZPL] {message}")

    # ---- Setup ----

    def setup_page(self, width: int, height: int, resolution: float):
        w = min(max(int(width), 0), MAX_CANVAS_DIMENSION)
        h = min(max(int(height), 0), MAX_CANVAS_DIMENSION)
        if (w, h) != (width, height):
            self._log(f"Page {width}x{height} clipped to {w}x{h}")
        self.canvas = Image.new("RGB", (w, h), WHITE)
        self.resolution = resolution

    def setup_font_manager(self, font_manager: FontManager):
        self.fonts = font_manager

    def _require_canvas(self) -> Image.Image:
        if self.canvas is None:
            raise BackendError("Page not set up, call setup_page() first")
        return self.canvas

    # ---- Compositing ----

    def _visible(self, x: int, y: int) -> bool:
        canvas = self._require_canvas()
        return x < canvas.width and y < canvas.height

    def _draw_shape(self, x: int, y: int, width: int, height: int,
                    reverse_print: bool,
                    draw_op: Callable[[ImageDraw.ImageDraw, int, int], None]):
        """
        Run a drawing operation at (x, y).

        Reverse print draws onto a white scratch image first and inverts the
        canvas wherever the scratch image is not white.
        """
        canvas = self._require_canvas()
        if not self._visible(x, y):
            return

        if not reverse_print:
            draw_op(ImageDraw.Draw(canvas), x, y)
            return

        w = min(width, canvas.width - x)
        h = min(height, canvas.height - y)
        if w <= 0 or h <= 0:
            return
        scratch = Image.new("RGB", (w, h), WHITE)
        draw_op(ImageDraw.Draw(scratch), 0, 0)

        diff = ImageChops.difference(scratch, Image.new("RGB", (w, h), WHITE))
        r, g, b = diff.split()
        mask = ImageChops.lighter(ImageChops.lighter(r, g), b)
        mask = mask.point(lambda v: 255 if v else 0)
        self._invert(mask, x, y)

    def _invert(self, mask: Image.Image, x: int, y: int):
        canvas = self._require_canvas()
        region = canvas.crop((x, y, x + mask.width, y + mask.height))
        canvas.paste(ImageChops.invert(region), (x, y), mask)

    def _stamp(self, mask: Image.Image, x: int, y: int, reverse_print: bool,
               color: Color = BLACK):
        """Paint color where mask is set, or invert there for reverse print."""
        if not self._visible(x, y):
            return
        if reverse_print:
            self._invert(mask, x, y)
        else:
            canvas = self._require_canvas()
            canvas.paste(color, (x, y, x + mask.width, y + mask.height), mask)

    # ---- Text ----

    def _font(self, identifier: str, size: int):
        if self.fonts is None:
            raise FontError("Font manager not initialized")
        if not self.fonts.has_font(identifier):
            self._log(f"Font {identifier!r} not registered, using fallback")
        return self.fonts.get_font(identifier, size)

    def _text_mask(self, x: int, y: int, font: str, height: Optional[int],
                   width: Optional[int], text: str) -> Optional[Image.Image]:
        canvas = self._require_canvas()
        # Glyphs larger than the page are drawn at page size
        limit = max(canvas.width, canvas.height, 1)
        size_y = min(height or DEFAULT_TEXT_HEIGHT, limit)
        size_x = min(width or size_y, limit)
        pil_font = self._font(font, size_y)

        try:
            left, top, right, bottom = pil_font.getbbox(text)
            if right <= 0 or bottom <= 0:
                return None
            # Only the part of the text that lands on the canvas is drawn
            room_x = int(math.ceil((canvas.width - x) * size_y / size_x)) + 1
            clip_w = min(right, room_x)
            clip_h = min(bottom, canvas.height - y)
            mask = Image.new("L", (clip_w, clip_h), 0)
            ImageDraw.Draw(mask).text((0, 0), text, font=pil_font, fill=255)
        except (OSError, ValueError) as e:
            raise BackendError(
                f"Failed to draw text {text!r} at size {size_y}: {e}"
            ) from e

        # Width is a separate scale factor from height
        if size_x != size_y:
            scaled = max(int(round(clip_w * size_x / size_y)), 1)
            mask = mask.resize((scaled, clip_h), Image.Resampling.LANCZOS)
        return mask

    def draw_text(self, x, y, font, height, width, text, reverse_print, color):
        if not text or not self._visible(x, y):
            return
        mask = self._text_mask(x, y, font, height, width, text)
        if mask is None:
            return
        fill = parse_hex_color(color) or BLACK
        self._stamp(mask, x, y, reverse_print, fill)

    # ---- Graphics ----

    def draw_graphic_box(self, x, y, width, height, thickness, color,
                         custom_color, rounding, reverse_print):
        t = max(thickness, 1)
        # A zero side draws a line as thick as the border
        w = max(width, t)
        h = max(height, t)
        line = _line_color(color, custom_color)
        # Rounding 0-8 is a fraction of half the shorter side
        radius = min(max(rounding, 0), 8) * min(w, h) // 16

        def draw_op(draw, px, py):
            box = [px, py, px + w - 1, py + h - 1]
            if t * 2 >= w or t * 2 >= h:
                draw.rounded_rectangle(box, radius=radius, fill=line)
            else:
                draw.rounded_rectangle(box, radius=radius, outline=line, width=t)

        self._draw_shape(x, y, w, h, reverse_print, draw_op)

    def draw_graphic_circle(self, x, y, diameter, thickness, color,
                            custom_color, reverse_print):
        self.draw_graphic_ellipse(
            x, y, diameter, diameter, thickness, color, custom_color, reverse_print
        )

    def draw_graphic_ellipse(self, x, y, width, height, thickness, color,
                             custom_color, reverse_print):
        if width <= 0 or height <= 0:
            return
        t = max(thickness, 1)
        line = _line_color(color, custom_color)

        def draw_op(draw, px, py):
            box = [px, py, px + width - 1, py + height - 1]
            if t * 2 >= width or t * 2 >= height:
                draw.ellipse(box, fill=line)
            else:
                draw.ellipse(box, outline=line, width=t)

        self._draw_shape(x, y, width, height, reverse_print, draw_op)

    def draw_graphic_field(self, x, y, width, height, data, reverse_print):
        canvas = self._require_canvas()
        if width <= 0 or height <= 0 or not self._visible(x, y):
            return

        row_bytes = (width + 7) // 8
        # Only the rows and columns that land on the canvas are unpacked
        rows = min(height, canvas.height - y)
        visible_bytes = min(row_bytes, (canvas.width - x + 7) // 8)
        packed = bytearray()
        for row in range(rows):
            start = row * row_bytes
            chunk = data[start:start + visible_bytes]
            packed += chunk.ljust(visible_bytes, b"\x00")

        mask = Image.frombytes("1", (visible_bytes * 8, rows), bytes(packed))
        self._stamp(mask, x, y, reverse_print)

    def draw_graphic_image_custom(self, x, y, width, height, data):
        self._require_canvas()
        try:
            raw = base64.b64decode(data.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageError(f"Failed to decode base64: {e}") from e

        img = load_image(raw).convert("RGBA")
        orig_w, orig_h = img.size
        if width == 0 and height == 0:
            target = (orig_w, orig_h)
        elif height == 0:
            target = (width, max(int(round(orig_h * width / orig_w)), 1))
        elif width == 0:
            target = (max(int(round(orig_w * height / orig_h)), 1), height)
        else:
            target = (width, height)

        if target != img.size:
            img = img.resize(target, Image.Resampling.LANCZOS)
        self._require_canvas().paste(img, (x, y), img)

    # ---- Barcodes ----

    def _place_symbol(self, symbol: Image.Image, x: int, y: int,
                      orientation: str, reverse_print: bool) -> Image.Image:
        transpose = ROTATIONS.get(orientation)
        if transpose is not None:
            symbol = symbol.transpose(transpose)
        self._stamp(symbol, x, y, reverse_print)
        return symbol

    def _draw_1d(self, x: int, y: int, orientation: str, height: int,
                 module_width: int, pattern: str, text: str,
                 interpretation_line: str, interpretation_line_above: str,
                 reverse_print: bool):
        mw = max(module_width, 1)
        full_w = len(pattern) * mw
        full_h = height
        if full_w > 0 and height > 0:
            row = bytes(255 if bar == "1" else 0 for bar in pattern for _ in range(mw))
            symbol = Image.frombytes("L", (full_w, 1), row)
            symbol = symbol.resize((full_w, height), Image.Resampling.NEAREST)
            symbol = self._place_symbol(symbol, x, y, orientation, reverse_print)
            full_w, full_h = symbol.size

        if interpretation_line != "Y":
            return

        if interpretation_line_above == "Y":
            text_y = max(y - INTERPRETATION_HEIGHT, 0) + INTERPRETATION_GAP
        else:
            text_y = y + full_h + INTERPRETATION_GAP
        font = self._font(INTERPRETATION_FONT, INTERPRETATION_HEIGHT)
        text_width = int(math.ceil(font.getlength(text)))
        text_x = x + (full_w - text_width) // 2 if full_w > text_width else x
        self.draw_text(text_x, text_y, INTERPRETATION_FONT,
                       INTERPRETATION_HEIGHT, None, text, False, None)

    def draw_code128(self, x, y, orientation, height, module_width,
                     interpretation_line, interpretation_line_above,
                     check_digit, mode, data, reverse_print):
        if not data:
            self._log("Empty Code 128 field skipped")
            return
        self._require_canvas()
        pattern = barcodes.code128_modules(data)
        self._draw_1d(x, y, orientation, height, module_width, pattern,
                      barcodes.strip_subset_prefix(data), interpretation_line,
                      interpretation_line_above, reverse_print)

    def draw_code39(self, x, y, orientation, check_digit, height, module_width,
                    interpretation_line, interpretation_line_above, data,
                    reverse_print):
        if not data:
            self._log("Empty Code 39 field skipped")
            return
        self._require_canvas()
        pattern = barcodes.code39_modules(data, check_digit == "Y")
        self._draw_1d(x, y, orientation, height, module_width, pattern, data,
                      interpretation_line, interpretation_line_above,
                      reverse_print)

    def draw_qr_code(self, x, y, orientation, model, magnification,
                     error_correction, mask, data, reverse_print):
        if not data:
            self._log("Empty QR code field skipped")
            return
        self._require_canvas()
        matrix = barcodes.qr_matrix(data, error_correction)
        size = len(matrix)
        mag = max(magnification, 1)

        symbol = Image.new("L", (size, size), 0)
        symbol.putdata([255 if dark else 0 for row in matrix for dark in row])
        symbol = symbol.resize((size * mag, size * mag), Image.Resampling.NEAREST)
        self._place_symbol(symbol, x, y, orientation, reverse_print)

    # ---- Output ----

    def finalize(self) -> bytes:
        canvas = self._require_canvas()
        buffer = BytesIO()
        try:
            canvas.save(buffer, format="PNG")
        except OSError as e:
            raise BackendError(f"Failed to write PNG: {e}") from e
        return buffer.getvalue()
