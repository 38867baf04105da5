"""
ZPL Grammar.

Turns raw ZPL text into an ordered list of command records.

The grammar is a flat alternation: at every position an ordered list of
command matchers is tried and the first one that matches wins. Standard
commands come before the color extensions, and both come before the
catch-all that accepts any two-character code. A matcher can fail in two
ways:

- no match: the next matcher in the list is tried
- cut: a mandatory parameter is missing or malformed, parsing stops and
  the error is reported at that exact position

Parameters are comma-delimited and positional. The first parameter of a
command has no leading comma and is absent when the next character is a
comma, a caret or the end of input. Later parameters need their comma;
when the comma is missing, or the value after it does not match, the
parameter is absent and parsing carries on from the same position.
"""

import re
from typing import Callable, List, Optional, Tuple

from . import commands as cmd
from .errors import ParseError

# Characters that can never be a single-character parameter
PARAM_DELIMITERS = ",^\r\n \t"

# Whitespace allowed between commands
WHITESPACE = " \t\r\n"

# Largest value a numeric parameter may hold (unsigned 32-bit)
MAX_PARAM_VALUE = 0xFFFFFFFF

_DIGITS = re.compile(r"[0-9]+")
_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]+)?")


class _Failure(Exception):
    """Internal parse failure at a given offset."""

    def __init__(self, pos: int, expected: str):
        super().__init__(expected)
        self.pos = pos
        self.expected = expected


class _NoMatch(_Failure):
    """Recoverable: the next matcher is tried."""


class _Cut(_Failure):
    """Fatal: no other matcher is tried."""


class _Cursor:
    """Left-to-right position over a piece of ZPL text."""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def peek(self) -> str:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_whitespace(self):
        while self.peek() and self.peek() in WHITESPACE:
            self.pos += 1

    def tag(self, literal: str):
        if not self.text.startswith(literal, self.pos):
            raise _NoMatch(self.pos, repr(literal))
        self.pos += len(literal)

    def take(self, count: int) -> str:
        if self.pos + count > len(self.text):
            raise _NoMatch(self.pos, "character")
        value = self.text[self.pos:self.pos + count]
        self.pos += count
        return value

    def uint(self) -> int:
        match = _DIGITS.match(self.text, self.pos)
        if not match or int(match.group()) > MAX_PARAM_VALUE:
            raise _NoMatch(self.pos, "digit")
        self.pos = match.end()
        return int(match.group())

    def number(self) -> float:
        match = _NUMBER.match(self.text, self.pos)
        if not match:
            raise _NoMatch(self.pos, "digit")
        self.pos = match.end()
        return float(match.group())

    def char(self) -> str:
        c = self.peek()
        if not c or c in PARAM_DELIMITERS:
            raise _NoMatch(self.pos, "character")
        self.pos += 1
        return c

    def rest(self) -> str:
        """Consume everything up to the next caret (or end of input)."""
        end = self.text.find("^", self.pos)
        if end == -1:
            end = len(self.text)
        value = self.text[self.pos:end]
        self.pos = end
        return value

    def leading(self, primitive: Callable):
        """First parameter: absent before a comma, a caret or end of input."""
        c = self.peek()
        if not c or c in ",^":
            return None
        return primitive()

    def param(self, primitive: Callable):
        """Later parameter: needs its comma, absent on any mismatch."""
        start = self.pos
        try:
            self.tag(",")
            return self.leading(primitive)
        except _NoMatch:
            self.pos = start
            return None

    def required(self, primitive: Callable, *args):
        """Turn a recoverable mismatch into a cut."""
        try:
            return primitive(*args)
        except _NoMatch as e:
            raise _Cut(e.pos, e.expected) from None


class ZplParser:
    """
    Parser for a complete ZPL document.

    Stateless between calls to parse(); each call walks the text once.
    """

    def __init__(self, debug: bool = False):
        self._debug = debug
        # Priority order matters: prefixes overlap (e.g. ^GC / ^GIC, and
        # the two-character fallback would otherwise shadow everything)
        self._matchers: List[Callable[[_Cursor], cmd.Command]] = [
            self._cmd_xa,
            self._cmd_xz,
            self._cmd_lh,
            self._cmd_ll,
            self._cmd_fo,
            self._cmd_ft,
            self._cmd_fs,
            self._cmd_lr,
            self._cmd_fx,
            self._cmd_a,
            self._cmd_cf,
            self._cmd_fd,
            self._cmd_fb,
            self._cmd_ci,
            self._cmd_fr,
            self._cmd_gb,
            self._cmd_gc,
            self._cmd_ge,
            self._cmd_gf,
            self._cmd_bq,
            self._cmd_b3,
            self._cmd_by,
            self._cmd_bx,
            self._cmd_bc,
            self._cmd_gic,
            self._cmd_gtc,
            self._cmd_glc,
            self._cmd_unsupported,
        ]

    def set_debug(self, enabled: bool):
        """Enable/disable debug output."""
        self._debug = enabled

    def _log(self, message: str):
        """Print debug message if enabled."""
        if self._debug:
            print(f"[ZPL] {message}")

    def parse(self, text: str) -> List[cmd.Command]:
        """
        Parse ZPL text into command records.

        Args:
            text: Raw ZPL document

        Returns:
            Commands in source order (empty for blank input)

        Raises:
            ParseError: On a failed mandatory parameter or unparsable input
        """
        cursor = _Cursor(text)
        commands: List[cmd.Command] = []

        try:
            while True:
                cursor.skip_whitespace()
                if cursor.at_end():
                    break
                commands.append(self._next_command(cursor))
        except _Cut as e:
            raise ParseError(
                line_number(text, e.pos),
                f"Invalid or malformed ZPL command (expected {e.expected})",
            ) from None

        self._log(f"Parsed {len(commands)} command(s)")
        return commands

    def _next_command(self, cursor: _Cursor) -> cmd.Command:
        start = cursor.pos
        for matcher in self._matchers:
            cursor.pos = start
            try:
                return matcher(cursor)
            except _NoMatch:
                continue
        raise _Cut(start, "command")

    # ---- Shared Parameter Shapes ----

    def _xy(self, c: _Cursor) -> Tuple[Optional[int], Optional[int]]:
        x = c.leading(c.uint)
        y = c.param(c.uint)
        return x, y

    def _arguments(self, c: _Cursor) -> _Cursor:
        """Barcode commands parse their parameters from the text up to ^."""
        return _Cursor(c.rest())

    # ---- Format and Field Commands ----

    def _cmd_xa(self, c: _Cursor) -> cmd.Command:
        c.tag("^XA")
        return cmd.StartFormat()

    def _cmd_xz(self, c: _Cursor) -> cmd.Command:
        c.tag("^XZ")
        return cmd.EndFormat()

    def _cmd_lh(self, c: _Cursor) -> cmd.Command:
        c.tag("^LH")
        x, y = c.required(self._xy, c)
        return cmd.LabelHome(x=x, y=y)

    def _cmd_ll(self, c: _Cursor) -> cmd.Command:
        c.tag("^LL")
        length = c.required(c.leading, c.uint)
        return cmd.LabelLength(length=length)

    def _cmd_fo(self, c: _Cursor) -> cmd.Command:
        c.tag("^FO")
        x, y = c.required(self._xy, c)
        return cmd.FieldOrigin(x=x, y=y)

    def _cmd_ft(self, c: _Cursor) -> cmd.Command:
        c.tag("^FT")
        x, y = c.required(self._xy, c)
        return cmd.FieldTypeset(x=x, y=y)

    def _cmd_fs(self, c: _Cursor) -> cmd.Command:
        c.tag("^FS")
        return cmd.FieldSeparator()

    def _cmd_lr(self, c: _Cursor) -> cmd.Command:
        c.tag("^LR")
        value = c.required(c.leading, c.char)
        reverse = cmd.YesNo.from_char(value, self._log) if value else None
        return cmd.LabelReverse(reverse=reverse)

    def _cmd_fx(self, c: _Cursor) -> cmd.Command:
        c.tag("^FX")
        return cmd.Comment(text=c.rest().strip())

    def _cmd_fd(self, c: _Cursor) -> cmd.Command:
        c.tag("^FD")
        return cmd.FieldData(data=c.rest().strip())

    def _cmd_fb(self, c: _Cursor) -> cmd.Command:
        c.tag("^FB")
        width = c.required(c.leading, c.uint)
        max_lines = c.param(c.uint)
        line_spacing = c.param(c.uint)
        justification = c.param(c.char)
        indent = c.param(c.uint)
        return cmd.FieldBlock(
            width=width,
            max_lines=max_lines,
            line_spacing=line_spacing,
            justification=(
                cmd.Justification.from_char(justification, self._log)
                if justification else None
            ),
            indent=indent,
        )

    def _cmd_ci(self, c: _Cursor) -> cmd.Command:
        c.tag("^CI")
        args = self._arguments(c)
        return cmd.ChangeInternationalFont(charset=args.leading(args.uint))

    def _cmd_fr(self, c: _Cursor) -> cmd.Command:
        c.tag("^FR")
        return cmd.FieldReverse()

    # ---- Font Commands ----

    def _cmd_a(self, c: _Cursor) -> cmd.Command:
        c.tag("^A")
        font = c.required(c.char)
        orientation = c.leading(c.char)
        height = c.param(c.uint)
        width = c.param(c.uint)
        return cmd.FontSpecFull(
            font_name=font, orientation=orientation, height=height, width=width
        )

    def _cmd_cf(self, c: _Cursor) -> cmd.Command:
        c.tag("^CF")
        font = c.required(c.char)
        height = c.param(c.uint)
        width = c.param(c.uint)
        return cmd.FontSpec(font_name=font, height=height, width=width)

    # ---- Graphic Commands ----

    def _cmd_gb(self, c: _Cursor) -> cmd.Command:
        c.tag("^GB")
        width = c.required(c.uint)
        c.required(c.tag, ",")
        height = c.required(c.uint)
        thickness = c.param(c.uint)
        color = c.param(c.char)
        rounding = c.param(c.uint)
        return cmd.GraphicBox(
            width=width,
            height=height,
            border_thickness=thickness,
            line_color=color,
            corner_rounding=rounding,
        )

    def _cmd_gc(self, c: _Cursor) -> cmd.Command:
        c.tag("^GC")
        diameter = c.required(c.leading, c.uint)
        thickness = c.param(c.uint)
        color = c.param(c.char)
        return cmd.GraphicCircle(
            diameter=diameter, border_thickness=thickness, line_color=color
        )

    def _cmd_ge(self, c: _Cursor) -> cmd.Command:
        c.tag("^GE")
        width = c.required(c.leading, c.uint)
        height = c.param(c.uint)
        thickness = c.param(c.uint)
        color = c.param(c.char)
        return cmd.GraphicEllipse(
            width=width, height=height, border_thickness=thickness, line_color=color
        )

    def _cmd_gf(self, c: _Cursor) -> cmd.Command:
        c.tag("^GF")
        compression = c.required(c.leading, c.char)
        binary_count = c.param(c.uint)
        field_count = c.param(c.uint)
        bytes_per_row = c.param(c.uint)
        if c.peek() == ",":
            c.pos += 1
        return cmd.GraphicField(
            compression_type=compression,
            binary_byte_count=binary_count,
            graphic_field_count=field_count,
            bytes_per_row=bytes_per_row,
            data=c.rest().strip(),
        )

    # ---- Barcode Commands ----

    def _cmd_bq(self, c: _Cursor) -> cmd.Command:
        c.tag("^BQ")
        args = self._arguments(c)
        orientation = args.leading(args.char)
        return cmd.QRCode(
            orientation=orientation,
            model=args.param(args.uint),
            magnification=args.param(args.uint),
            error_correction=args.param(args.char),
            mask=args.param(args.uint),
        )

    def _cmd_b3(self, c: _Cursor) -> cmd.Command:
        c.tag("^B3")
        args = self._arguments(c)
        orientation = args.leading(args.char)
        return cmd.Code39(
            orientation=orientation,
            check_digit=args.param(args.char),
            height=args.param(args.uint),
            interpretation_line=args.param(args.char),
            interpretation_line_above=args.param(args.char),
        )

    def _cmd_by(self, c: _Cursor) -> cmd.Command:
        c.tag("^BY")
        args = self._arguments(c)
        module_width = args.leading(args.uint)
        return cmd.BarcodeDefault(
            module_width=module_width,
            ratio=args.param(args.number),
            height=args.param(args.uint),
        )

    def _cmd_bx(self, c: _Cursor) -> cmd.Command:
        c.tag("^BX")
        args = self._arguments(c)
        orientation = args.leading(args.char)
        return cmd.DataMatrix(
            orientation=orientation,
            height=args.param(args.uint),
            quality=args.param(args.uint),
            columns=args.param(args.uint),
            rows=args.param(args.uint),
        )

    def _cmd_bc(self, c: _Cursor) -> cmd.Command:
        c.tag("^BC")
        args = self._arguments(c)
        orientation = args.leading(args.char)
        return cmd.Code128(
            orientation=orientation,
            height=args.param(args.uint),
            interpretation_line=args.param(args.char),
            interpretation_line_above=args.param(args.char),
            check_digit=args.param(args.char),
            mode=args.param(args.char),
        )

    # ---- Color Extensions ----

    def _cmd_gic(self, c: _Cursor) -> cmd.Command:
        # ^GIC<width>,<height>,<base64>, every part mandatory
        c.tag("^GIC")
        width = c.required(c.uint)
        c.required(c.tag, ",")
        height = c.required(c.uint)
        c.required(c.tag, ",")
        start = c.pos
        data = c.rest().strip()
        if not data:
            raise _Cut(start, "base64 data")
        return cmd.CustomImage(width=width, height=height, data=data)

    def _cmd_gtc(self, c: _Cursor) -> cmd.Command:
        c.tag("^GTC")
        return cmd.GraphicTextColor(color=c.rest().strip())

    def _cmd_glc(self, c: _Cursor) -> cmd.Command:
        c.tag("^GLC")
        return cmd.GraphicLineColor(color=c.rest().strip())

    # ---- Fallback ----

    def _cmd_unsupported(self, c: _Cursor) -> cmd.Command:
        c.tag("^")
        code = c.take(2)
        args = c.rest().strip()
        self._log(f"Unsupported command ^{code} passed through")
        return cmd.UnsupportedCommand(command=f"^{code}", args=args)


def line_number(text: str, offset: int) -> int:
    """1-indexed line of a character offset."""
    return text.count("\n", 0, offset) + 1


def parse_zpl(text: str, debug: bool = False) -> List[cmd.Command]:
    """Parse a ZPL document into command records."""
    return ZplParser(debug=debug).parse(text)
