"""
ZPL ASCII Bitmap Codec.

Decodes and encodes the compressed hexadecimal payload used by the ^GF
(graphic field) command with compression type A.

Alphabet:
    0-9 A-F   hex nibbles, two per byte, high nibble first
    G-Y       repeat the next nibble 1-19 times (repeat letters add up)
    g-z       repeat the next nibble 20-400 times, in steps of 20
    :         repeat the previous row
    ,         fill the rest of the row with 0x00
    !         fill the rest of the row with 0xFF

Decoding never raises on content: unknown characters are skipped and the
output is capped at MAX_DECODED_SIZE bytes so malformed or hostile input
cannot exhaust memory.
"""

from io import BytesIO
from pathlib import Path
from typing import Tuple, Union

from PIL import Image, UnidentifiedImageError

from .errors import ImageError, SecurityLimitExceeded

# Safety limits for decoding
MAX_DECODED_SIZE = 10 * 1024 * 1024  # 10 MiB per graphic field
MAX_REPEAT_COUNT = 10_000  # Nibble repeats honored per hex digit
MAX_ROW_REPEAT = 1_000  # Row copies honored per ':' token

# Image size limits for encoding (same bounds as the printer driver)
MAX_IMAGE_DIMENSION = 10000  # Maximum width or height in pixels
MAX_IMAGE_PIXELS = 10_000_000  # Maximum total pixels (10 megapixels)

# Longest run a single set of repeat letters can express
MAX_RUN = 400

# Luminance below this is a black (set) pixel
LUMA_THRESHOLD = 128

HEX_DIGITS = frozenset("0123456789ABCDEFabcdef")


def _decode(data: str, bytes_per_row: int) -> Tuple[bytes, bool]:
    """Decode a payload, reporting whether the size cap cut it short."""
    output = bytearray()
    multiplier = 0
    high_nibble = None
    last_was_row_terminator = False
    truncated = False

    for ch in data:
        if len(output) > MAX_DECODED_SIZE:
            truncated = True
            break

        if "G" <= ch <= "Y":
            multiplier += ord(ch) - ord("G") + 1

        elif "g" <= ch <= "z":
            multiplier += (ord(ch) - ord("g") + 1) * 20

        elif ch == ":":
            if high_nibble is not None:
                output.append(high_nibble << 4)
                high_nibble = None

            if bytes_per_row > 0:
                row_pos = len(output) % bytes_per_row
                total_repeats = multiplier or 1
                repeats_done = 0

                # Finish the current row from the row above it
                if row_pos > 0:
                    row_start = len(output) - row_pos
                    if row_start >= bytes_per_row:
                        prev_start = row_start - bytes_per_row
                        output += output[prev_start + row_pos:prev_start + bytes_per_row]
                    else:
                        missing = bytes_per_row - row_pos
                        room = max(0, MAX_DECODED_SIZE - len(output))
                        if missing > room:
                            truncated = True
                        output += bytes(min(missing, room))
                    repeats_done += 1

                remaining = min(total_repeats - repeats_done, MAX_ROW_REPEAT)
                if remaining > 0:
                    if len(output) + bytes_per_row > MAX_DECODED_SIZE:
                        truncated = True
                    else:
                        if len(output) >= bytes_per_row:
                            row = bytes(output[-bytes_per_row:])
                        else:
                            row = bytes(bytes_per_row)
                        for _ in range(remaining):
                            if len(output) + len(row) > MAX_DECODED_SIZE:
                                truncated = True
                                break
                            output += row

            multiplier = 0
            last_was_row_terminator = True

        elif ch in HEX_DIGITS:
            value = int(ch, 16)
            count = min(multiplier or 1, MAX_REPEAT_COUNT)
            multiplier = 0

            for _ in range(count):
                if len(output) >= MAX_DECODED_SIZE:
                    truncated = True
                    break
                if high_nibble is None:
                    high_nibble = value
                else:
                    output.append((high_nibble << 4) | value)
                    high_nibble = None
            last_was_row_terminator = False

        elif ch in ",!":
            fill = 0x00 if ch == "," else 0xFF
            if high_nibble is not None:
                output.append((high_nibble << 4) | (fill & 0x0F))
                high_nibble = None

            if bytes_per_row > 0:
                row_pos = len(output) % bytes_per_row
                if row_pos:
                    padding = bytes_per_row - row_pos
                elif last_was_row_terminator:
                    # Back-to-back terminators each still make a row
                    padding = bytes_per_row
                else:
                    padding = 0
                room = max(0, MAX_DECODED_SIZE - len(output))
                if padding > room:
                    truncated = True
                    padding = room
                output += bytes([fill]) * padding

            multiplier = 0
            last_was_row_terminator = True

    if high_nibble is not None:
        output.append(high_nibble << 4)

    return bytes(output), truncated


def decode(data: str, bytes_per_row: int) -> bytes:
    """
    Decode a compressed ^GF payload into raw bitmap bytes.

    Args:
        data: Compressed payload text
        bytes_per_row: Bytes in one bitmap row (0 disables row markers)

    Returns:
        Row-major bitmap bytes, at most MAX_DECODED_SIZE (+1) long
    """
    return _decode(data, bytes_per_row)[0]


def decode_strict(data: str, bytes_per_row: int) -> bytes:
    """
    Decode a payload, refusing output that would pass the size cap.

    Raises:
        SecurityLimitExceeded: If decoding hit MAX_DECODED_SIZE
    """
    output, truncated = _decode(data, bytes_per_row)
    if truncated:
        raise SecurityLimitExceeded(
            f"Decoded graphic data exceeds {MAX_DECODED_SIZE:,} bytes"
        )
    return output


def compress(hex_text: str) -> str:
    """
    Run-length compress an uppercase hex string.

    Each run of two or more identical characters becomes its repeat
    letters (g-z for multiples of 20, then G-Y for the remainder)
    followed by the character once.
    """
    parts = []
    i = 0
    length = len(hex_text)

    while i < length:
        char = hex_text[i]
        count = 1
        while i + count < length and hex_text[i + count] == char and count < MAX_RUN:
            count += 1

        if count > 1:
            remaining = count
            while remaining >= 20:
                factor = min(remaining // 20, 20)
                parts.append(chr(ord("g") + factor - 1))
                remaining -= factor * 20
            if remaining > 0:
                parts.append(chr(ord("G") + remaining - 1))

        parts.append(char)
        i += count

    return "".join(parts)


def load_image(source: Union[str, Path, bytes, Image.Image]) -> Image.Image:
    """
    Load an image from various sources.

    Args:
        source: File path, bytes, or PIL Image

    Returns:
        PIL Image object

    Raises:
        ImageError: If the image cannot be read or exceeds the size limits
    """
    try:
        if isinstance(source, Image.Image):
            img = source
        elif isinstance(source, (str, Path)):
            img = Image.open(source)
        elif isinstance(source, bytes):
            img = Image.open(BytesIO(source))
        else:
            raise ImageError(f"Unsupported source type: {type(source)}")
    except (OSError, UnidentifiedImageError,
            Image.DecompressionBombError) as e:
        raise ImageError(f"Failed to load image: {e}") from e

    # Validate image dimensions to prevent memory exhaustion
    if img.width > MAX_IMAGE_DIMENSION or img.height > MAX_IMAGE_DIMENSION:
        raise ImageError(
            f"Image dimensions ({img.width}x{img.height}) exceed maximum "
            f"({MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION})"
        )
    if img.width * img.height > MAX_IMAGE_PIXELS:
        raise ImageError(
            f"Image pixel count ({img.width * img.height:,}) exceeds "
            f"maximum ({MAX_IMAGE_PIXELS:,})"
        )

    return img


def to_bitmap(image: Image.Image) -> Tuple[bytes, int]:
    """
    Convert an image to a packed 1-bit bitmap.

    Dark pixels (luminance < 128) become set bits, MSB is the leftmost
    pixel and every row is padded to a whole byte.

    Returns:
        (bitmap bytes, bytes per row)
    """
    if image.mode != "L":
        image = image.convert("L")

    # Set bits mark dark pixels, so map dark to 255 before packing
    mono = image.point(lambda x: 255 if x < LUMA_THRESHOLD else 0, mode="1")
    bytes_per_row = (image.width + 7) // 8
    return mono.tobytes(), bytes_per_row


def encode(source: Union[str, Path, bytes, Image.Image]) -> Tuple[str, int, int]:
    """
    Encode an image as a compressed ^GF payload.

    Args:
        source: File path, bytes, or PIL Image

    Returns:
        (compressed payload, total byte count, bytes per row)

    Raises:
        ImageError: If the image cannot be loaded
    """
    image = load_image(source)
    try:
        bitmap, bytes_per_row = to_bitmap(image)
    except OSError as e:
        raise ImageError(f"Failed to convert image: {e}") from e
    return compress(bitmap.hex().upper()), len(bitmap), bytes_per_row


def to_graphic_field(source: Union[str, Path, bytes, Image.Image]) -> str:
    """Build a complete ^GFA command for an image."""
    data, total, bytes_per_row = encode(source)
    return f"^GFA,{total},{total},{bytes_per_row},{data}"
