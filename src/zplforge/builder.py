"""
Instruction Builder.

Walks the command list once, folding modal commands into a ModalState
and emitting one instruction at every ^FS that closes a field with a
payload or a pending graphic/barcode.
"""

from typing import Callable, Dict, List, Optional, Sequence

from . import commands as cmd
from . import instructions as intr
from .codec import decode
from .state import InstructionKind, ModalState, saturating_add

# Fallbacks applied when a field is flushed
DEFAULT_LINE_COLOR = "B"
DEFAULT_ORIENTATION = "N"
DEFAULT_INTERPRETATION_LINE = "Y"
DEFAULT_INTERPRETATION_ABOVE = "N"
DEFAULT_CHECK_DIGIT = "N"
DEFAULT_MODE = "N"
DEFAULT_ERROR_CORRECTION = "M"
DEFAULT_BARCODE_HEIGHT = 10
DEFAULT_MODULE_WIDTH = 2
DEFAULT_QR_MAGNIFICATION = 2
DEFAULT_QR_MODEL = 2
DEFAULT_QR_MASK = 7


class _StopBuild(Exception):
    """Raised by a handler to end the walk over the command list."""


class InstructionBuilder:
    """
    Converts command records into drawing instructions.

    A builder is single-use: build() consumes the commands it was created
    with and owns its ModalState for the duration of the walk.
    """

    def __init__(self, commands: Sequence[cmd.Command], debug: bool = False):
        self.commands = list(commands)
        self.state = ModalState()
        self._debug = debug
        self._instructions: List[intr.Instruction] = []
        self._handlers: Dict[type, Callable] = {
            cmd.FieldOrigin: self._field_origin,
            cmd.FieldTypeset: self._field_typeset,
            cmd.FieldReverse: self._field_reverse,
            cmd.FontSpec: self._font_spec,
            cmd.FontSpecFull: self._font_spec,
            cmd.FieldData: self._field_data,
            cmd.GraphicBox: self._graphic_box,
            cmd.GraphicCircle: self._graphic_circle,
            cmd.GraphicEllipse: self._graphic_ellipse,
            cmd.GraphicTextColor: self._text_color,
            cmd.GraphicLineColor: self._line_color,
            cmd.GraphicField: self._graphic_field,
            cmd.BarcodeDefault: self._barcode_default,
            cmd.Code128: self._code128,
            cmd.Code39: self._code39,
            cmd.QRCode: self._qr_code,
            cmd.CustomImage: self._custom_image,
            cmd.FieldSeparator: self._flush,
        }

    def set_debug(self, enabled: bool):
        """Enable/disable debug output."""
        self._debug = enabled

    def _log(self, message: str):
        """Print debug message if enabled."""
        if self._debug:
            print(f"[ZPL] {message}")

    def build(self) -> List[intr.Instruction]:
        """
        Process every command and return the instructions in draw order.

        A ^GF with a compression scheme other than A ends processing:
        commands after it are ignored and the instructions emitted so far
        are returned.
        """
        for command in self.commands:
            handler = self._handlers.get(type(command))
            if handler is None:
                continue
            try:
                handler(command)
            except _StopBuild:
                break

        self._log(
            f"Built {len(self._instructions)} instruction(s) "
            f"from {len(self.commands)} command(s)"
        )
        return self._instructions

    # ---- Position and Font ----

    def _field_origin(self, command: cmd.FieldOrigin):
        if command.x is not None:
            self.state.position.x = command.x
        if command.y is not None:
            self.state.position.y = command.y

    def _field_typeset(self, command: cmd.FieldTypeset):
        typeset = self.state.typeset
        if command.x is not None:
            typeset.x = saturating_add(typeset.x, command.x)
        if command.y is not None:
            typeset.y = saturating_add(typeset.y, command.y)

    def _field_reverse(self, command: cmd.FieldReverse):
        self.state.reverse = not self.state.reverse

    def _font_spec(self, command):
        font = self.state.font
        font.font_name = command.font_name
        if getattr(command, "orientation", None) is not None:
            font.orientation = command.orientation
        if command.height is not None:
            font.height = command.height
        if command.width is not None:
            font.width = command.width

    def _field_data(self, command: cmd.FieldData):
        self.state.value = command.data

    # ---- Graphics ----

    def _graphic_box(self, command: cmd.GraphicBox):
        state = self.state
        state.metrics.width = command.width
        state.metrics.height = command.height
        state.metrics.thickness = _or(command.border_thickness, 1)
        state.attributes.line_color = command.line_color
        state.params.rounding = _or(command.corner_rounding, 0)
        state.kind = InstructionKind.GRAPHIC_BOX

    def _graphic_circle(self, command: cmd.GraphicCircle):
        state = self.state
        state.metrics.width = _or(command.diameter, 0)
        state.metrics.thickness = _or(command.border_thickness, 1)
        state.attributes.line_color = command.line_color
        state.kind = InstructionKind.GRAPHIC_CIRCLE

    def _graphic_ellipse(self, command: cmd.GraphicEllipse):
        state = self.state
        state.metrics.width = _or(command.width, 0)
        state.metrics.height = _or(command.height, 0)
        state.metrics.thickness = _or(command.border_thickness, 1)
        state.attributes.line_color = command.line_color
        state.kind = InstructionKind.GRAPHIC_ELLIPSE

    def _text_color(self, command: cmd.GraphicTextColor):
        self.state.font.color = command.color

    def _line_color(self, command: cmd.GraphicLineColor):
        self.state.attributes.custom_line_color = command.color

    def _graphic_field(self, command: cmd.GraphicField):
        compression = command.compression_type or "A"
        if compression != "A":
            # TODO: decode B (base64) and C/Z (compressed) payloads instead of
            # dropping the rest of the label
            self._log(
                f"Unsupported ^GF compression type {compression!r}, "
                f"ignoring remaining commands"
            )
            raise _StopBuild()

        bytes_per_row = command.bytes_per_row
        data = decode(command.data, bytes_per_row or 0)

        state = self.state
        if bytes_per_row is not None:
            state.metrics.width = min(bytes_per_row * 8, 0xFFFFFFFF)
            if command.graphic_field_count is not None and bytes_per_row > 0:
                state.metrics.height = command.graphic_field_count // bytes_per_row
        state.graphic_data = data
        state.kind = InstructionKind.GRAPHIC_FIELD

    def _custom_image(self, command: cmd.CustomImage):
        state = self.state
        state.metrics.width = command.width
        state.metrics.height = command.height
        state.value = command.data
        state.kind = InstructionKind.CUSTOM_IMAGE

    # ---- Barcodes ----

    def _barcode_default(self, command: cmd.BarcodeDefault):
        defaults = self.state.barcode_metrics
        if command.module_width is not None:
            defaults.thickness = command.module_width
        if command.height is not None:
            defaults.height = command.height
        if command.ratio is not None:
            self.state.params.ratio = command.ratio

    def _barcode_height(self, height: Optional[int]) -> int:
        if height is not None:
            return height
        return self.state.barcode_metrics.height or DEFAULT_BARCODE_HEIGHT

    def _code128(self, command: cmd.Code128):
        state = self.state
        state.attributes.orientation = command.orientation
        state.metrics.height = self._barcode_height(command.height)
        state.attributes.interpretation_line = command.interpretation_line
        state.attributes.interpretation_above = command.interpretation_line_above
        state.attributes.check_digit = command.check_digit
        state.attributes.mode = command.mode
        state.kind = InstructionKind.CODE128

    def _code39(self, command: cmd.Code39):
        state = self.state
        state.attributes.orientation = command.orientation
        state.attributes.check_digit = command.check_digit
        state.metrics.height = self._barcode_height(command.height)
        state.attributes.interpretation_line = command.interpretation_line
        state.attributes.interpretation_above = command.interpretation_line_above
        state.kind = InstructionKind.CODE39

    def _qr_code(self, command: cmd.QRCode):
        state = self.state
        state.attributes.orientation = command.orientation
        state.params.model = _or(command.model, DEFAULT_QR_MODEL)
        if command.magnification is not None:
            state.metrics.thickness = command.magnification
        else:
            state.metrics.thickness = (
                state.barcode_metrics.thickness or DEFAULT_QR_MAGNIFICATION
            )
        state.attributes.error_correction = command.error_correction
        state.params.mask = _or(command.mask, DEFAULT_QR_MASK)
        state.kind = InstructionKind.QR_CODE

    # ---- Field Flush ----

    def _flush(self, command: cmd.FieldSeparator):
        state = self.state
        instruction = None

        if state.kind is not None:
            instruction = self._emit(state.kind)
        elif state.value is not None:
            instruction = self._text(state.value)

        if instruction is not None:
            self._instructions.append(instruction)
        state.end_field()

    def _emit(self, kind: InstructionKind) -> Optional[intr.Instruction]:
        state = self.state
        x, y = state.position.x, state.position.y
        data = state.value or ""
        reverse = state.reverse
        metrics = state.metrics
        attrs = state.attributes
        line_color = attrs.line_color or DEFAULT_LINE_COLOR

        if kind is InstructionKind.TEXT:
            return self._text(data)

        if kind is InstructionKind.GRAPHIC_BOX:
            return intr.GraphicBox(
                x=x, y=y,
                width=metrics.width,
                height=metrics.height,
                thickness=metrics.thickness,
                color=line_color,
                custom_color=attrs.custom_line_color,
                rounding=state.params.rounding,
                reverse_print=reverse,
            )

        if kind is InstructionKind.GRAPHIC_CIRCLE:
            return intr.GraphicCircle(
                x=x, y=y,
                diameter=metrics.width,
                thickness=metrics.thickness,
                color=line_color,
                custom_color=attrs.custom_line_color,
                reverse_print=reverse,
            )

        if kind is InstructionKind.GRAPHIC_ELLIPSE:
            return intr.GraphicEllipse(
                x=x, y=y,
                width=metrics.width,
                height=metrics.height,
                thickness=metrics.thickness,
                color=line_color,
                custom_color=attrs.custom_line_color,
                reverse_print=reverse,
            )

        if kind is InstructionKind.GRAPHIC_FIELD:
            if state.graphic_data is None:
                return None
            return intr.GraphicField(
                x=x, y=y,
                width=metrics.width,
                height=metrics.height,
                data=state.graphic_data,
                reverse_print=reverse,
            )

        if kind is InstructionKind.CUSTOM_IMAGE:
            return intr.CustomImage(
                x=x, y=y, width=metrics.width, height=metrics.height, data=data
            )

        module_width = state.barcode_metrics.thickness or DEFAULT_MODULE_WIDTH
        orientation = attrs.orientation or DEFAULT_ORIENTATION

        if kind is InstructionKind.CODE128:
            return intr.Code128(
                x=x, y=y,
                orientation=orientation,
                height=metrics.height,
                module_width=module_width,
                interpretation_line=attrs.interpretation_line or DEFAULT_INTERPRETATION_LINE,
                interpretation_line_above=attrs.interpretation_above or DEFAULT_INTERPRETATION_ABOVE,
                check_digit=attrs.check_digit or DEFAULT_CHECK_DIGIT,
                mode=attrs.mode or DEFAULT_MODE,
                data=data,
                reverse_print=reverse,
            )

        if kind is InstructionKind.CODE39:
            return intr.Code39(
                x=x, y=y,
                orientation=orientation,
                check_digit=attrs.check_digit or DEFAULT_CHECK_DIGIT,
                height=metrics.height,
                module_width=module_width,
                interpretation_line=attrs.interpretation_line or DEFAULT_INTERPRETATION_LINE,
                interpretation_line_above=attrs.interpretation_above or DEFAULT_INTERPRETATION_ABOVE,
                data=data,
                reverse_print=reverse,
            )

        if kind is InstructionKind.QR_CODE:
            return intr.QRCode(
                x=x, y=y,
                orientation=orientation,
                model=state.params.model,
                magnification=metrics.thickness,
                error_correction=attrs.error_correction or DEFAULT_ERROR_CORRECTION,
                mask=state.params.mask,
                data=data,
                reverse_print=reverse,
            )

        return None

    def _text(self, text: str) -> intr.Text:
        state = self.state
        return intr.Text(
            x=state.position.x,
            y=state.position.y,
            font=state.font.font_name,
            height=state.font.height,
            width=state.font.width,
            text=text,
            reverse_print=state.reverse,
            color=state.font.color,
        )


def _or(value: Optional[int], default: int) -> int:
    return default if value is None else value


def build_instructions(commands: Sequence[cmd.Command],
                       debug: bool = False) -> List[intr.Instruction]:
    """Build instructions from a command list."""
    return InstructionBuilder(commands, debug=debug).build()
