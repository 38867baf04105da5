"""Tests for the compile/render pipeline."""

from io import BytesIO

import pytest
from PIL import Image

from zplforge import instructions as intr
from zplforge.engine import ZplEngine, compile_zpl, substitute_variables
from zplforge.errors import EmptyInputError, ParseError
from zplforge.png import PngBackend
from zplforge.units import DPI_300, Unit


class TestCompile:
    """Test compile_zpl."""

    def test_sample_label(self, sample_label):
        """Test the instruction kinds of a multi-field label."""
        result = compile_zpl(sample_label)

        assert [type(i) for i in result] == [
            intr.Text,
            intr.GraphicBox,
            intr.Code128,
            intr.QRCode,
            intr.GraphicCircle,
        ]
        assert result[0].text == "Acme Shipping"
        assert result[2].data == ">:ORDER-{{order}}"
        assert result[3].data == "MA,https://example.com"

    def test_deterministic(self, sample_label):
        """Test compiling twice gives equal results."""
        assert compile_zpl(sample_label) == compile_zpl(sample_label)

    def test_empty_input(self):
        """Test input without commands is rejected."""
        with pytest.raises(EmptyInputError):
            compile_zpl("")

    def test_unknown_commands_pass_through(self):
        """Test unsupported commands are accepted and draw nothing."""
        assert compile_zpl("^ZZfoo^FS") == []

    def test_parse_error_propagates(self):
        """Test the line number reaches the caller."""
        with pytest.raises(ParseError) as exc_info:
            compile_zpl("^XA\n^GB100\n^XZ")
        assert exc_info.value.line == 2

    def test_debug_output(self, capsys):
        """Test debug mode prints progress."""
        compile_zpl("^FDx^FS", debug=True)
        assert "[ZPL]" in capsys.readouterr().out


class TestSubstituteVariables:
    """Test {{name}} placeholders."""

    def test_known_name(self):
        """Test a placeholder is replaced by its value."""
        assert substitute_variables("Hello {{name}}", {"name": "Ann"}) == "Hello Ann"

    def test_unknown_name_kept(self):
        """Test unknown placeholders stay in the text."""
        assert substitute_variables("{{missing}}!", {"name": "Ann"}) == "{{missing}}!"

    def test_repeated_placeholder(self):
        """Test every occurrence is replaced."""
        assert substitute_variables("{{a}}-{{a}}", {"a": "1"}) == "1-1"

    def test_no_variables(self):
        """Test None leaves text unchanged."""
        assert substitute_variables("{{a}}", None) == "{{a}}"

    def test_name_not_trimmed(self):
        """Test names match exactly, including spaces."""
        assert substitute_variables("{{ a }}", {"a": "1"}) == "{{ a }}"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Hello {{{name}}", "Hello {Ann"),
            ("{{{{name}}}}", "{{Ann}}"),
            ("{{name}}}", "Ann}"),
        ],
    )
    def test_extra_braces(self, text, expected):
        """Test surrounding braces do not hide a placeholder."""
        assert substitute_variables(text, {"name": "Ann"}) == expected


class TestZplEngine:
    """Test rendering through a backend."""

    def test_instructions_copy(self):
        """Test the instruction list cannot be changed from outside."""
        engine = ZplEngine("^FDx^FS", Unit.dots(100), Unit.dots(100))
        engine.instructions.clear()
        assert len(engine.instructions) == 1

    def test_parse_error_on_construction(self):
        """Test invalid labels fail before rendering."""
        with pytest.raises(ParseError, match="line 2"):
            ZplEngine("^XA\n^FOA,10\n^XZ", Unit.inches(4), Unit.inches(6))

    def test_render_call_order(self, recording_backend, fonts):
        """Test page setup, drawing and finalize happen in order."""
        engine = ZplEngine(
            "^FO10,20^FDHello^FS^FO0,0^GB50,10,2^FS",
            Unit.inches(4),
            Unit.inches(6),
        )
        engine.set_fonts(fonts)

        assert engine.render(recording_backend) == b"rendered"
        assert [c[0] for c in recording_backend.method_calls] == [
            "setup_page",
            "setup_font_manager",
            "draw_text",
            "draw_graphic_box",
            "finalize",
        ]
        recording_backend.setup_page.assert_called_once_with(813, 1219, 203.2)
        recording_backend.setup_font_manager.assert_called_once_with(fonts)
        recording_backend.draw_text.assert_called_once_with(
            10, 20, "A", None, None, "Hello", False, None
        )
        recording_backend.draw_graphic_box.assert_called_once_with(
            0, 0, 50, 10, 2, "B", None, 0, False
        )

    def test_resolution_used_for_page(self, recording_backend, fonts):
        """Test millimeters convert with the engine's resolution."""
        engine = ZplEngine("^FDx^FS", Unit.millimeters(50), Unit.millimeters(25),
                           resolution=DPI_300)
        engine.set_fonts(fonts)
        engine.render(recording_backend)

        recording_backend.setup_page.assert_called_once_with(600, 300, 304.8)

    def test_variables_in_text(self, recording_backend, fonts):
        """Test placeholders are filled at render time."""
        engine = ZplEngine("^FDHello {{name}} {{missing}}^FS",
                           Unit.dots(100), Unit.dots(100))
        engine.set_fonts(fonts)
        engine.render(recording_backend, variables={"name": "Ann"})

        args = recording_backend.draw_text.call_args[0]
        assert args[5] == "Hello Ann {{missing}}"

    def test_variables_in_barcodes(self, recording_backend, fonts):
        """Test placeholders are filled in barcode data."""
        engine = ZplEngine(
            "^BCN,50^FD{{id}}^FS^B3N,N,40^FD{{id}}^FS^BQN,2,3^FDMA,{{id}}^FS",
            Unit.dots(400),
            Unit.dots(400),
        )
        engine.set_fonts(fonts)
        engine.render(recording_backend, variables={"id": "42"})

        assert recording_backend.draw_code128.call_args[0][9] == "42"
        assert recording_backend.draw_code39.call_args[0][8] == "42"
        assert recording_backend.draw_qr_code.call_args[0][7] == "MA,42"

    def test_compiled_once(self, recording_backend, fonts):
        """Test one engine renders repeatedly with different values."""
        engine = ZplEngine("^FD{{n}}^FS", Unit.dots(100), Unit.dots(100))
        engine.set_fonts(fonts)

        engine.render(recording_backend, variables={"n": "1"})
        engine.render(recording_backend, variables={"n": "2"})

        texts = [c[0][5] for c in recording_backend.draw_text.call_args_list]
        assert texts == ["1", "2"]

    def test_default_fonts_created(self, recording_backend):
        """Test a font registry is created when none was set."""
        engine = ZplEngine("^FDx^FS", Unit.dots(10), Unit.dots(10))
        engine.render(recording_backend)
        assert engine.fonts is not None

    def test_unsupported_only_label(self, recording_backend, fonts):
        """Test a label of unknown commands renders an empty page."""
        engine = ZplEngine("^ZZfoo^FS", Unit.dots(10), Unit.dots(10))
        engine.set_fonts(fonts)
        engine.render(recording_backend)

        assert [c[0] for c in recording_backend.method_calls] == [
            "setup_page",
            "setup_font_manager",
            "finalize",
        ]


class TestPngRender:
    """Test rendering to PNG end to end."""

    def test_graphics_only(self, fonts):
        """Test a box lands at its field origin."""
        engine = ZplEngine("^XA^FO10,5^GB20,20,20^FS^XZ", Unit.dots(50), Unit.dots(40))
        engine.set_fonts(fonts)

        img = Image.open(BytesIO(engine.render(PngBackend())))
        assert img.size == (50, 40)
        assert img.convert("RGB").getpixel((15, 10)) == (0, 0, 0)
        assert img.convert("RGB").getpixel((5, 5)) == (255, 255, 255)

    def test_oversized_font(self, fonts):
        """Test a font far larger than the page still renders."""
        engine = ZplEngine("^XA^FO0,0^A0N,60000,60000^FDHello^FS^XZ",
                           Unit.dots(100), Unit.dots(100))
        engine.set_fonts(fonts)

        data = engine.render(PngBackend())
        assert Image.open(BytesIO(data)).size == (100, 100)

    @pytest.mark.barcodes
    def test_sample_label(self, sample_label, fonts):
        """Test the sample label renders at 4x6 inches."""
        engine = ZplEngine(sample_label, Unit.inches(4), Unit.inches(6))
        engine.set_fonts(fonts)

        data = engine.render(PngBackend(), variables={"order": "1234"})
        assert Image.open(BytesIO(data)).size == (813, 1219)
