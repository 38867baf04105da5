"""Tests for the ZPL grammar."""

import pytest

from zplforge import commands as cmd
from zplforge.errors import ParseError
from zplforge.parser import ZplParser, line_number, parse_zpl


class TestBasicParsing:
    """Test parsing of common label structure."""

    def test_simple_label(self):
        """Test a minimal text label."""
        result = parse_zpl("^XA^FO50,60^A0N,30,20^FDHello^FS^XZ")

        assert result == [
            cmd.StartFormat(),
            cmd.FieldOrigin(x=50, y=60),
            cmd.FontSpecFull(font_name="0", orientation="N", height=30, width=20),
            cmd.FieldData(data="Hello"),
            cmd.FieldSeparator(),
            cmd.EndFormat(),
        ]

    def test_whitespace_between_commands_ignored(self):
        """Test that newlines and indentation between commands are skipped."""
        result = parse_zpl("  ^XA\r\n\t^FO1,2\n\n^XZ  \n")
        assert result == [cmd.StartFormat(), cmd.FieldOrigin(1, 2), cmd.EndFormat()]

    def test_empty_input(self):
        """Test that blank input parses to no commands."""
        assert parse_zpl("") == []
        assert parse_zpl(" \n\t ") == []

    def test_field_data_keeps_commas(self):
        """Test that field data runs to the next caret."""
        result = parse_zpl("^FDHello, World ^FS")
        assert result[0] == cmd.FieldData(data="Hello, World")

    def test_comment(self):
        """Test ^FX comment text is trimmed."""
        result = parse_zpl("^FX  shipping block \n^XA")
        assert result == [cmd.Comment(text="shipping block"), cmd.StartFormat()]

    def test_parser_is_reusable(self):
        """Test that one parser instance gives identical results twice."""
        parser = ZplParser()
        text = "^XA^FO1,1^FDx^FS^XZ"
        assert parser.parse(text) == parser.parse(text)


class TestParameters:
    """Test leading and subsequent parameter handling."""

    def test_origin_x_only(self):
        """Test ^FO with only the first parameter."""
        assert parse_zpl("^FO10") == [cmd.FieldOrigin(x=10, y=None)]

    def test_origin_y_only(self):
        """Test ^FO with an empty first parameter."""
        assert parse_zpl("^FO,20") == [cmd.FieldOrigin(x=None, y=20)]

    def test_origin_no_parameters(self):
        """Test ^FO directly followed by another command."""
        result = parse_zpl("^FO^FS")
        assert result == [cmd.FieldOrigin(None, None), cmd.FieldSeparator()]

    def test_typeset_and_home(self):
        """Test ^FT and ^LH coordinates."""
        result = parse_zpl("^FT5,6^LH7,8")
        assert result == [cmd.FieldTypeset(5, 6), cmd.LabelHome(7, 8)]

    def test_label_length(self):
        """Test ^LL."""
        assert parse_zpl("^LL1200") == [cmd.LabelLength(length=1200)]

    def test_font_without_orientation(self):
        """Test ^A with an empty orientation."""
        result = parse_zpl("^AD,36,20")
        assert result == [cmd.FontSpecFull("D", None, 36, 20)]

    def test_change_font(self):
        """Test ^CF."""
        assert parse_zpl("^CF0,60") == [cmd.FontSpec("0", 60, None)]

    def test_field_block(self):
        """Test ^FB with every parameter."""
        result = parse_zpl("^FB300,2,5,C,10")
        assert result == [
            cmd.FieldBlock(300, 2, 5, cmd.Justification.CENTER, 10)
        ]

    def test_field_block_unknown_justification(self):
        """Test that an unknown justification falls back to left."""
        result = parse_zpl("^FB300,,,Q")
        assert result[0].justification == cmd.Justification.LEFT
        assert result[0].max_lines is None

    def test_label_reverse(self):
        """Test ^LR yes/no values."""
        assert parse_zpl("^LRY") == [cmd.LabelReverse(cmd.YesNo.Y)]
        assert parse_zpl("^LRX") == [cmd.LabelReverse(cmd.YesNo.N)]

    def test_international_font(self):
        """Test ^CI charset."""
        assert parse_zpl("^CI28") == [cmd.ChangeInternationalFont(charset=28)]

    def test_missing_comma_means_absent(self):
        """Test that a parameter without its comma is absent, not an error."""
        result = parse_zpl("^BY3 2^FS")
        assert result == [cmd.BarcodeDefault(3, None, None), cmd.FieldSeparator()]


class TestGraphicCommands:
    """Test graphic command parsing."""

    def test_box_minimal(self):
        """Test ^GB with only the mandatory parameters."""
        assert parse_zpl("^GB100,50") == [cmd.GraphicBox(100, 50)]

    def test_box_full(self):
        """Test ^GB with every parameter."""
        result = parse_zpl("^GB100,50,3,W,2")
        assert result == [cmd.GraphicBox(100, 50, 3, "W", 2)]

    def test_circle(self):
        """Test ^GC."""
        assert parse_zpl("^GC80,4,B") == [cmd.GraphicCircle(80, 4, "B")]

    def test_ellipse(self):
        """Test ^GE."""
        assert parse_zpl("^GE100,40,2") == [cmd.GraphicEllipse(100, 40, 2, None)]

    def test_graphic_field(self):
        """Test ^GF header and payload."""
        result = parse_zpl("^GFA,4,4,2,FFFF0000^FS")
        assert result[0] == cmd.GraphicField("A", 4, 4, 2, "FFFF0000")

    def test_custom_image(self):
        """Test ^GIC is not shadowed by ^GC."""
        result = parse_zpl("^GIC10,20,iVBORw0KGgo=")
        assert result == [cmd.CustomImage(10, 20, "iVBORw0KGgo=")]

    def test_color_extensions(self):
        """Test ^GTC and ^GLC."""
        result = parse_zpl("^GTC#FF0000^GLC #00ff00 ")
        assert result == [
            cmd.GraphicTextColor("#FF0000"),
            cmd.GraphicLineColor("#00ff00"),
        ]


class TestBarcodeCommands:
    """Test barcode command parsing."""

    def test_code128(self):
        """Test ^BC with every parameter."""
        result = parse_zpl("^BCN,100,Y,N,N,A")
        assert result == [cmd.Code128("N", 100, "Y", "N", "N", "A")]

    def test_code128_orientation_only(self):
        """Test ^BC with only an orientation."""
        assert parse_zpl("^BCR") == [cmd.Code128(orientation="R")]

    def test_code128_malformed_height(self):
        """Test that a malformed parameter is dropped without failing."""
        result = parse_zpl("^BCN,abc^FD1^FS")
        assert result[0].orientation == "N"
        assert result[0].height is None
        assert result[1] == cmd.FieldData("1")

    def test_code128_newline_falls_back(self):
        """Test that ^BC followed by a newline is passed through unsupported."""
        result = parse_zpl("^BC\n^FD1^FS")
        assert result[0] == cmd.UnsupportedCommand(command="^BC", args="")

    def test_code39(self):
        """Test ^B3."""
        result = parse_zpl("^B3N,Y,80,Y,N")
        assert result == [cmd.Code39("N", "Y", 80, "Y", "N")]

    def test_qr_code(self):
        """Test ^BQ."""
        assert parse_zpl("^BQN,2,10") == [cmd.QRCode("N", 2, 10, None, None)]

    def test_barcode_defaults(self):
        """Test ^BY with a fractional ratio."""
        assert parse_zpl("^BY3,2.5,80") == [cmd.BarcodeDefault(3, 2.5, 80)]

    def test_barcode_defaults_skipped_ratio(self):
        """Test ^BY with an empty ratio."""
        assert parse_zpl("^BY3,,80") == [cmd.BarcodeDefault(3, None, 80)]

    def test_data_matrix(self):
        """Test ^BX."""
        result = parse_zpl("^BXN,10,200")
        assert result == [cmd.DataMatrix("N", 10, 200, None, None)]


class TestUnsupportedCommands:
    """Test the catch-all fallback."""

    def test_unknown_command_passes_through(self):
        """Test that an unknown command does not abort parsing."""
        result = parse_zpl("^ZZfoo^FS")
        assert result == [
            cmd.UnsupportedCommand(command="^ZZ", args="foo"),
            cmd.FieldSeparator(),
        ]

    def test_known_but_unmodeled_command(self):
        """Test a real ZPL command without a model."""
        result = parse_zpl("^XA^PQ1,0,1,Y^XZ")
        assert result[1] == cmd.UnsupportedCommand("^PQ", "1,0,1,Y")

    def test_font_without_orientation_before_newline(self):
        """Test that ^A0 followed by a newline is passed through unsupported."""
        result = parse_zpl("^A0\n^FDx^FS")
        assert result[0] == cmd.UnsupportedCommand("^A0", "")


class TestParseErrors:
    """Test line-accurate error reporting."""

    @pytest.mark.parametrize(
        "text",
        [
            "^XA\n^A\n^XZ",
            "^XA\n^CF\n^XZ",
            "^XA\n^GB100\n^XZ",
            "^XA\n^FOA,10\n^XZ",
            "^XA\n^LLABC\n^XZ",
        ],
    )
    def test_error_on_line_two(self, text):
        """Test errors in the second line cite line 2."""
        with pytest.raises(ParseError) as exc_info:
            parse_zpl(text)
        assert exc_info.value.line == 2
        assert "line 2" in str(exc_info.value)

    def test_error_later_in_document(self):
        """Test that earlier lenient commands do not shift the reported line."""
        text = "^XA\n^FO100,100\n^A0\n^FDHello\n^FS\n^GB200\n^XZ"
        with pytest.raises(ParseError, match="line 6"):
            parse_zpl(text)

    def test_error_names_expected_token(self):
        """Test that the message names the expected token category."""
        with pytest.raises(ParseError, match=r"expected digit"):
            parse_zpl("^LLABC")
        with pytest.raises(ParseError, match=r"expected ','"):
            parse_zpl("^GB100")

    def test_leftover_text(self):
        """Test that text outside any command is an error."""
        with pytest.raises(ParseError, match="expected command"):
            parse_zpl("^XA\nhello")

    def test_truncated_command(self):
        """Test a caret without a two-character code."""
        with pytest.raises(ParseError, match="line 1"):
            parse_zpl("^XA^")

    def test_custom_image_requires_data(self):
        """Test that ^GIC needs its base64 payload."""
        with pytest.raises(ParseError, match="base64 data"):
            parse_zpl("^GIC10,20,^FS")

    def test_custom_image_requires_height(self):
        """Test that ^GIC needs both dimensions."""
        with pytest.raises(ParseError):
            parse_zpl("^GIC10")

    def test_value_out_of_range(self):
        """Test that coordinates beyond 32 bits are rejected."""
        with pytest.raises(ParseError):
            parse_zpl("^FO99999999999,1")


class TestLineNumber:
    """Test offset to line conversion."""

    def test_first_line(self):
        """Test offsets before any newline."""
        assert line_number("abc\ndef", 0) == 1
        assert line_number("abc\ndef", 3) == 1

    def test_later_lines(self):
        """Test offsets after newlines."""
        assert line_number("abc\ndef", 4) == 2
        assert line_number("a\n\n\nb", 4) == 4
