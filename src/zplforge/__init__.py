"""ZPL Label Compiler and Renderer."""

__version__ = "0.1.0"

from .backend import ZplBackend
from .builder import InstructionBuilder, build_instructions
from .codec import (
    MAX_DECODED_SIZE,
    compress,
    decode,
    decode_strict,
    encode,
    to_graphic_field,
)
from .engine import ZplEngine, compile_zpl, substitute_variables
from .errors import (
    BackendError,
    BuilderError,
    EmptyInputError,
    FontError,
    ImageError,
    ParseError,
    SecurityLimitExceeded,
    ZplError,
)
from .fonts import FontManager
from .parser import ZplParser, parse_zpl
from .pdf import PdfBackend
from .png import PngBackend
from .units import DPI_152, DPI_203, DPI_300, DPI_600, Resolution, Unit, UnitKind

__all__ = [
    "ZplEngine",
    "compile_zpl",
    "substitute_variables",
    "ZplParser",
    "parse_zpl",
    "InstructionBuilder",
    "build_instructions",
    "ZplBackend",
    "PngBackend",
    "PdfBackend",
    "FontManager",
    "Resolution",
    "Unit",
    "UnitKind",
    "DPI_152",
    "DPI_203",
    "DPI_300",
    "DPI_600",
    "MAX_DECODED_SIZE",
    "decode",
    "decode_strict",
    "encode",
    "compress",
    "to_graphic_field",
    "ZplError",
    "ParseError",
    "EmptyInputError",
    "BuilderError",
    "SecurityLimitExceeded",
    "ImageError",
    "FontError",
    "BackendError",
]
