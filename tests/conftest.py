"""
Shared BMP builders for the test suite.

Rows are always given top-to-bottom as lists of (b, g, r) tuples; the
builder stores them bottom-up unless ``top_down`` is set.
"""

import struct

import pytest

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


def make_bmp(
    rows,
    *,
    top_down=False,
    bits_per_pixel=24,
    compression=0,
    pad_byte=0,
    declared_image_size=None,
) -> bytes:
    height = len(rows)
    width = len(rows[0])
    stride = ((width * 3 + 3) // 4) * 4

    stored = rows if top_down else list(reversed(rows))
    pixels = bytearray()
    for row in stored:
        line = bytearray()
        for b, g, r in row:
            line += bytes((b, g, r))
        line += bytes([pad_byte]) * (stride - len(line))
        pixels += line

    data_offset = 14 + 40
    image_size = len(pixels) if declared_image_size is None else declared_image_size
    file_header = struct.pack("<2sIHHI", b"BM", data_offset + len(pixels), 0, 0, data_offset)
    dib_header = struct.pack(
        "<IiiHHIIiiII",
        40,
        width,
        -height if top_down else height,
        1,
        bits_per_pixel,
        compression,
        image_size,
        2835,
        2835,
        0,
        0,
    )
    return file_header + dib_header + bytes(pixels)


def solid_rows(width, height, color):
    return [[color] * width for _ in range(height)]


@pytest.fixture
def white_4x4() -> bytes:
    return make_bmp(solid_rows(4, 4, WHITE))


@pytest.fixture
def write_bmp(tmp_path):
    """Write BMP bytes to a temp file and return its path."""

    def _write(data, name="input_image.bmp"):
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
