"""Loading and saving of RGBA PNG images."""

from __future__ import annotations

import enum
from typing import BinaryIO, Iterable, Sequence

from PIL import Image, UnidentifiedImageError

Pixel = tuple[int, int, int, int]


class Origin(enum.Enum):
    """Which image row the first row of pixel data holds."""

    LOWER_LEFT = "lower_left"
    UPPER_LEFT = "upper_left"


def _pixel_bytes(pixels: Iterable[Sequence[int]] | bytes, count: int) -> bytes:
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        data = bytes(pixels)
    else:
        chunks = []
        for pixel in pixels:
            if len(pixel) != 4:
                raise ValueError(f"pixel {tuple(pixel)!r} is not RGBA")
            chunks.append(bytes(pixel))
        data = b"".join(chunks)
    if len(data) != count * 4:
        raise ValueError(f"expected {count} RGBA pixels, got {len(data) // 4}")
    return data


def read_png(stream: BinaryIO, origin: Origin) -> tuple[tuple[int, int], list[Pixel]]:
    """Read a PNG from ``stream`` as ((width, height), RGBA pixels).

    Palette and grey images are expanded to RGB and a missing alpha channel is
    filled with 255.
    """
    try:
        with Image.open(stream) as image:
            if image.format != "PNG":
                raise ValueError("stream does not hold a PNG image")
            rgba = image.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValueError(f"Failed to read PNG image: {exc}") from exc
    if origin is Origin.LOWER_LEFT:
        rgba = rgba.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    raw = rgba.tobytes()
    pixels = [tuple(raw[i : i + 4]) for i in range(0, len(raw), 4)]
    return rgba.size, pixels  # type: ignore[return-value]


def write_png(
    stream: BinaryIO,
    size: tuple[int, int],
    pixels: Iterable[Sequence[int]] | bytes,
    origin: Origin,
) -> None:
    """Write ``width * height`` RGBA pixels to ``stream`` as an 8-bit RGBA PNG."""
    width, height = size
    if width <= 0 or height <= 0:
        raise ValueError(f"image size must be positive, got {width}x{height}")
    data = _pixel_bytes(pixels, width * height)
    image = Image.frombytes("RGBA", (width, height), data)
    if origin is Origin.LOWER_LEFT:
        image = image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    image.save(stream, format="PNG")


def load_png(path, origin: Origin) -> tuple[tuple[int, int], list[Pixel]]:
    """Load a PNG file; raises OSError if it cannot be opened, ValueError if unreadable."""
    with open(path, "rb") as file:
        try:
            return read_png(file, origin)
        except ValueError as exc:
            raise ValueError(f"Failed to read PNG image from '{path}'.") from exc


def save_png(
    path,
    size: tuple[int, int],
    pixels: Iterable[Sequence[int]] | bytes,
    origin: Origin,
) -> None:
    """Save RGBA pixels to a PNG file."""
    with open(path, "wb") as file:
        write_png(file, size, pixels, origin)