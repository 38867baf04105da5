"""
Barcode and QR Code Symbol Generation.

Produces bare module patterns (no quiet zone, no text) that a backend
scales by module width or magnification and places itself.

Requires optional dependencies:
    pip install zplforge[barcodes]
"""

from typing import List

from .errors import BackendError

# ZPL ^FD subset prefixes for Code 128 (>: subset B, >; subset C, >9 subset A)
CODE128_SUBSET_PREFIXES = (">:", ">;", ">9")

# QR error correction levels accepted by ^BQ
QR_ERROR_LEVELS = ("L", "M", "Q", "H")


def _check_barcode_dependency() -> None:
    """Check that python-barcode is installed."""
    try:
        import barcode  # noqa: F401
    except ImportError:
        raise ImportError(
            "python-barcode is required for barcode rendering. "
            "Install with: pip install zplforge[barcodes]"
        ) from None


def _check_qrcode_dependency() -> None:
    """Check that qrcode is installed."""
    try:
        import qrcode  # noqa: F401
    except ImportError:
        raise ImportError(
            "qrcode is required for QR code rendering. Install with: pip install zplforge[barcodes]"
        ) from None


def strip_subset_prefix(data: str) -> str:
    """Remove a leading Code 128 subset selector from field data."""
    for prefix in CODE128_SUBSET_PREFIXES:
        if data.startswith(prefix):
            return data[len(prefix):]
    return data


def _modules(barcode_name: str, data: str, **options) -> str:
    import barcode
    from barcode.errors import BarcodeError

    barcode_class = barcode.get_barcode_class(barcode_name)
    try:
        symbol = barcode_class(data, writer=None, **options)
        pattern = symbol.build()[0]
    except (BarcodeError, KeyError, ValueError) as e:
        raise BackendError(f"Cannot encode {data!r} as {barcode_name}: {e}") from e
    return pattern


def code128_modules(data: str) -> str:
    """
    Module pattern for a Code 128 symbol.

    Args:
        data: Field data, optionally starting with a subset prefix

    Returns:
        String of '1' (bar) and '0' (space), one character per module

    Raises:
        ImportError: If python-barcode is not installed
        BackendError: If the data cannot be encoded
    """
    _check_barcode_dependency()
    return _modules("code128", strip_subset_prefix(data))


def code39_modules(data: str, check_digit: bool = False) -> str:
    """
    Module pattern for a Code 39 symbol.

    Args:
        data: Field data (digits, uppercase letters, - . $ / + % space)
        check_digit: Append the mod 43 check character

    Raises:
        ImportError: If python-barcode is not installed
        BackendError: If the data cannot be encoded
    """
    _check_barcode_dependency()
    return _modules("code39", data, add_checksum=check_digit)


def qr_matrix(data: str, error_correction: str = "M") -> List[List[bool]]:
    """
    Module matrix for a QR code, without quiet zone.

    Args:
        data: The data to encode
        error_correction: Level L, M, Q or H (anything else uses M)

    Returns:
        Rows of modules, True = dark

    Raises:
        ImportError: If qrcode is not installed
        BackendError: If the data does not fit in a QR code
    """
    _check_qrcode_dependency()

    import qrcode
    from qrcode.constants import (
        ERROR_CORRECT_H,
        ERROR_CORRECT_L,
        ERROR_CORRECT_M,
        ERROR_CORRECT_Q,
    )
    from qrcode.exceptions import DataOverflowError

    ec_map = {
        "L": ERROR_CORRECT_L,
        "M": ERROR_CORRECT_M,
        "Q": ERROR_CORRECT_Q,
        "H": ERROR_CORRECT_H,
    }

    qr = qrcode.QRCode(
        version=None,  # Smallest version that fits
        error_correction=ec_map.get(error_correction, ERROR_CORRECT_M),
        box_size=1,
        border=0,
    )
    try:
        qr.add_data(data)
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        raise BackendError(f"QR generation failed: {e}") from e

    return qr.get_matrix()
