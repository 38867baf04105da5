"""
Label Units and Printer Resolutions.

All ZPL coordinates are in dots. Label sizes can be given in inches,
millimeters or centimeters and are converted using the printer's
resolution.
"""

import math
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Resolution:
    """Printer resolution."""
    dpi: float   # Dots per inch
    dpmm: float  # Dots per millimeter

    @classmethod
    def custom(cls, dpi: float) -> "Resolution":
        """Resolution for an arbitrary DPI value."""
        return cls(dpi=float(dpi), dpmm=dpi / 25.4)

    @classmethod
    def from_dpi(cls, dpi: float) -> "Resolution":
        """Standard resolution for a nominal DPI, or a custom one."""
        return STANDARD_RESOLUTIONS.get(dpi) or cls.custom(dpi)


# Zebra standard print heads
DPI_152 = Resolution(dpi=152.0, dpmm=6.0)
DPI_203 = Resolution(dpi=203.2, dpmm=8.0)   # Default
DPI_300 = Resolution(dpi=304.8, dpmm=12.0)
DPI_600 = Resolution(dpi=609.6, dpmm=24.0)

STANDARD_RESOLUTIONS = {
    152: DPI_152,
    203: DPI_203,
    300: DPI_300,
    600: DPI_600,
}


class UnitKind(Enum):
    """Unit of a physical length."""
    DOTS = "dots"
    INCHES = "in"
    MILLIMETERS = "mm"
    CENTIMETERS = "cm"


@dataclass(frozen=True)
class Unit:
    """A length in one of the supported units."""
    value: float
    kind: UnitKind = UnitKind.DOTS

    @classmethod
    def dots(cls, value: int) -> "Unit":
        return cls(value, UnitKind.DOTS)

    @classmethod
    def inches(cls, value: float) -> "Unit":
        return cls(value, UnitKind.INCHES)

    @classmethod
    def millimeters(cls, value: float) -> "Unit":
        return cls(value, UnitKind.MILLIMETERS)

    @classmethod
    def centimeters(cls, value: float) -> "Unit":
        return cls(value, UnitKind.CENTIMETERS)

    def to_dots(self, resolution: Resolution) -> int:
        """Convert to dots; negative lengths clamp to zero."""
        value = max(self.value, 0)
        if self.kind is UnitKind.DOTS:
            return int(value)
        if self.kind is UnitKind.INCHES:
            dots = value * resolution.dpi
        elif self.kind is UnitKind.MILLIMETERS:
            dots = value * resolution.dpmm
        else:
            dots = value * 10.0 * resolution.dpmm
        # Round half away from zero
        return int(math.floor(dots + 0.5))
