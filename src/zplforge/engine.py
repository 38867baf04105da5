"""
ZPL Engine.

Ties the pipeline together: parse ZPL text into commands, build drawing
instructions, and replay them against a backend.
"""

import re
from typing import Dict, List, Optional

from . import instructions as intr
from .backend import ZplBackend
from .builder import InstructionBuilder
from .errors import EmptyInputError
from .fonts import FontManager
from .parser import ZplParser
from .units import DPI_203, Resolution, Unit

# {{name}} placeholders in field data
_PLACEHOLDER = re.compile(r"\{\{([^{}]*)\}\}")


def compile_zpl(text: str, debug: bool = False) -> List[intr.Instruction]:
    """
    Compile ZPL text into drawing instructions.

    Args:
        text: Raw ZPL document
        debug: Print parse/build progress

    Returns:
        Instructions in draw order

    Raises:
        ParseError: If the text is not valid ZPL
        EmptyInputError: If the text contains no commands
    """
    commands = ZplParser(debug=debug).parse(text)
    if not commands:
        raise EmptyInputError()
    return InstructionBuilder(commands, debug=debug).build()


def substitute_variables(text: str, variables: Optional[Dict[str, str]]) -> str:
    """Replace {{name}} placeholders; unknown names are left as they are."""
    if not variables or "{{" not in text:
        return text
    return _PLACEHOLDER.sub(
        lambda m: str(variables.get(m.group(1), m.group(0))), text
    )


class ZplEngine:
    """
    A compiled label ready to be rendered.

    The label is compiled once, on construction; render() can then be
    called any number of times with different backends or variables.
    """

    def __init__(self, zpl: str, width: Unit, height: Unit,
                 resolution: Resolution = DPI_203, debug: bool = False):
        """
        Initialize engine.

        Args:
            zpl: Raw ZPL document
            width: Label width
            height: Label height
            resolution: Printer resolution used for unit conversion

        Raises:
            ParseError: If the text is not valid ZPL
            EmptyInputError: If the text contains no commands
        """
        self.width = width
        self.height = height
        self.resolution = resolution
        self.fonts: Optional[FontManager] = None
        self._debug = debug
        self._instructions = compile_zpl(zpl, debug=debug)

    @property
    def instructions(self) -> List[intr.Instruction]:
        return list(self._instructions)

    def set_debug(self, enabled: bool):
        """Enable/disable debug output."""
        self._debug = enabled

    def _log(self, message: str):
        """Print debug message if enabled."""
        if self._debug:
            print(f"[ZPL] {message}")

    def set_fonts(self, fonts: FontManager):
        """Use a shared font registry instead of the default one."""
        self.fonts = fonts

    def render(self, backend: ZplBackend,
               variables: Optional[Dict[str, str]] = None) -> bytes:
        """
        Draw every instruction on a backend.

        Args:
            backend: Rendering target
            variables: Values for {{name}} placeholders in text and barcodes

        Returns:
            Whatever the backend's finalize() produces
        """
        if self.fonts is None:
            self.fonts = FontManager()

        width = self.width.to_dots(self.resolution)
        height = self.height.to_dots(self.resolution)
        self._log(
            f"Rendering {len(self._instructions)} instruction(s) on "
            f"{width}x{height} dots at {self.resolution.dpi} dpi"
        )

        backend.setup_page(width, height, self.resolution.dpi)
        backend.setup_font_manager(self.fonts)

        for instruction in self._instructions:
            self._draw(backend, instruction, variables)

        output = backend.finalize()
        self._log(f"Render finished, {len(output)} bytes")
        return output

    def _draw(self, backend: ZplBackend, i: intr.Instruction,
              variables: Optional[Dict[str, str]]):
        if isinstance(i, intr.Text):
            backend.draw_text(
                i.x, i.y, i.font, i.height, i.width,
                substitute_variables(i.text, variables), i.reverse_print, i.color,
            )
        elif isinstance(i, intr.GraphicBox):
            backend.draw_graphic_box(
                i.x, i.y, i.width, i.height, i.thickness, i.color,
                i.custom_color, i.rounding, i.reverse_print,
            )
        elif isinstance(i, intr.GraphicCircle):
            backend.draw_graphic_circle(
                i.x, i.y, i.diameter, i.thickness, i.color, i.custom_color,
                i.reverse_print,
            )
        elif isinstance(i, intr.GraphicEllipse):
            backend.draw_graphic_ellipse(
                i.x, i.y, i.width, i.height, i.thickness, i.color,
                i.custom_color, i.reverse_print,
            )
        elif isinstance(i, intr.GraphicField):
            backend.draw_graphic_field(
                i.x, i.y, i.width, i.height, i.data, i.reverse_print
            )
        elif isinstance(i, intr.CustomImage):
            backend.draw_graphic_image_custom(i.x, i.y, i.width, i.height, i.data)
        elif isinstance(i, intr.Code128):
            backend.draw_code128(
                i.x, i.y, i.orientation, i.height, i.module_width,
                i.interpretation_line, i.interpretation_line_above,
                i.check_digit, i.mode, substitute_variables(i.data, variables),
                i.reverse_print,
            )
        elif isinstance(i, intr.Code39):
            backend.draw_code39(
                i.x, i.y, i.orientation, i.check_digit, i.height,
                i.module_width, i.interpretation_line,
                i.interpretation_line_above,
                substitute_variables(i.data, variables), i.reverse_print,
            )
        elif isinstance(i, intr.QRCode):
            backend.draw_qr_code(
                i.x, i.y, i.orientation, i.model, i.magnification,
                i.error_correction, i.mask,
                substitute_variables(i.data, variables), i.reverse_print,
            )
