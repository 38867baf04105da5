"""
Pytest configuration for zplforge tests.

Provides shared labels, a recording backend and in-memory images.
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from zplforge import FontManager, ZplBackend

# A small shipping label touching most command families
SAMPLE_LABEL = """^XA
^FX Top section
^CF0,40
^FO50,50^FDAcme Shipping^FS
^FO50,100^GB700,3,3^FS
^BY2,3,60
^FO50,130^BCN,,Y,N^FD>:ORDER-{{order}}^FS
^FO50,260^BQN,2,4^FDMA,https://example.com^FS
^FO400,260^GC80,4,B^FS
^PW812
^XZ"""


def png_base64(width: int = 4, height: int = 2, color: str = "red") -> str:
    """Base64 encoded PNG of a solid color."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def sample_label():
    """Multi-field label text."""
    return SAMPLE_LABEL


@pytest.fixture
def fonts():
    """Registry without system fonts (falls back to Pillow's default)."""
    return FontManager.empty()


@pytest.fixture
def recording_backend(mocker):
    """Backend mock that records every call."""
    backend = mocker.create_autospec(ZplBackend, instance=True)
    backend.finalize.return_value = b"rendered"
    return backend


@pytest.fixture
def checkerboard():
    """10x3 grayscale image: dark pixels where x + y is even."""
    img = Image.new("L", (10, 3), 255)
    for y in range(3):
        for x in range(10):
            if (x + y) % 2 == 0:
                img.putpixel((x, y), 0)
    return img


@pytest.fixture
def make_png():
    """Factory for base64 encoded solid color PNGs."""
    return png_base64
