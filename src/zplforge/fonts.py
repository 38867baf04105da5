"""
Font Registry.

Maps the single-character ZPL font identifiers (A-Z, 0-9) to TrueType or
OpenType font data. A registry is filled once and then only read while
rendering, so one instance can be shared by any number of engines.
"""

from io import BytesIO
from typing import Dict, Optional

from PIL import ImageFont

from .errors import FontError

# Valid ZPL font identifiers, in range order
FONT_IDENTIFIERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# System fonts tried, in order, for the default registry
DEFAULT_FONT_FAMILIES = (
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
    "Roboto-Regular.ttf",
    "Arial.ttf",
    "Helvetica.ttc",
)

# Identifier used when the requested one is not registered
FALLBACK_IDENTIFIER = "0"


class FontManager:
    """Registry of fonts addressed by ZPL identifier."""

    def __init__(self, load_system_font: bool = True):
        """
        Initialize registry.

        Args:
            load_system_font: Register the first available system sans-serif
                font for every identifier
        """
        self._font_map: Dict[str, str] = {}
        self._font_data: Dict[str, bytes] = {}

        if load_system_font:
            self._load_default()

    @classmethod
    def empty(cls) -> "FontManager":
        """Registry with no fonts; text falls back to Pillow's default."""
        return cls(load_system_font=False)

    def _load_default(self):
        for family in DEFAULT_FONT_FAMILIES:
            try:
                # Pillow searches the platform font directories for bare names
                font = ImageFont.truetype(family, 10)
            except OSError:
                continue
            with open(font.path, "rb") as f:
                data = f.read()
            self.register_font(family, data, "A", "9")
            return

    def register_font(self, name: str, data: bytes, start: str, end: str):
        """
        Register a font for a range of ZPL identifiers.

        Args:
            name: Internal name of the font
            data: Raw TrueType/OpenType bytes
            start: First identifier of the range (A-Z, 0-9)
            end: Last identifier of the range, inclusive

        Raises:
            FontError: If the font data cannot be loaded
        """
        try:
            ImageFont.truetype(BytesIO(data), 10)
        except OSError as e:
            raise FontError(f"Invalid font data for {name!r}: {e}") from e

        self._font_data[name] = data

        start_idx = FONT_IDENTIFIERS.find(start)
        end_idx = FONT_IDENTIFIERS.find(end)
        # Unknown identifiers or a reversed range map nothing
        if start_idx < 0 or end_idx < 0 or start_idx > end_idx:
            return
        for identifier in FONT_IDENTIFIERS[start_idx:end_idx + 1]:
            self._font_map[identifier] = name

    def font_name(self, identifier: str) -> Optional[str]:
        """Name of the font registered for an identifier."""
        return self._font_map.get(identifier)

    def has_font(self, identifier: str) -> bool:
        return identifier in self._font_map

    def get_font(self, identifier: str, size: int) -> ImageFont.ImageFont:
        """
        Get a font for an identifier at a pixel size.

        Falls back to identifier 0, then to Pillow's built-in font.
        """
        size = max(int(size), 1)
        name = self._font_map.get(identifier) or self._font_map.get(FALLBACK_IDENTIFIER)
        if name is None:
            return ImageFont.load_default(size)
        return ImageFont.truetype(BytesIO(self._font_data[name]), size)
