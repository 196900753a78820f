import logging
import math
from dataclasses import dataclass

from bmp_parser import (
    AllocationError,
    BYTES_PER_PIXEL,
    BitmapHeader,
    InvalidHeightError,
    InvalidWidthError,
    TruncatedError,
    parse_header,
    read_pixel_data,
    validate_header,
)

logger = logging.getLogger("bmp_ascii.renderer")

NEW_MAX_WIDTH = 200
NEW_MAX_HEIGHT = 200

# Darkest glyph first, blank last
ASCII_RAMP = "@%#*+=-:. "


@dataclass(frozen=True)
class RenderConfig:
    target_width: int = NEW_MAX_WIDTH
    target_height: int = NEW_MAX_HEIGHT
    ramp: str = ASCII_RAMP
    # Terminal cells are taller than wide, so only every other row is kept.
    skip_alternate_rows: bool = True

    def __post_init__(self):
        if self.target_width <= 0 or self.target_height <= 0:
            raise ValueError("Target dimensions must be positive")
        if not self.ramp:
            raise ValueError("Glyph ramp must not be empty")


DEFAULT_CONFIG = RenderConfig()


def greyscale_to_glyph(value: int, ramp: str = ASCII_RAMP) -> str:
    last = len(ramp) - 1
    index = int(value / 255.0 * last)
    return ramp[max(0, min(last, index))]


def scale_factor(header: BitmapHeader, config: RenderConfig = DEFAULT_CONFIG) -> float:
    width_ratio = config.target_width / header.width
    height_ratio = config.target_height / header.abs_height
    # Whichever is lower keeps the image inside the target box
    return min(width_ratio, height_ratio)


def target_dimensions(header: BitmapHeader, config: RenderConfig = DEFAULT_CONFIG):
    """Return ``(scale, new_width, new_height)`` for the given header."""
    _check_dimensions(header)
    scale = scale_factor(header, config)
    new_width = math.floor(header.width * scale)
    new_height = math.floor(header.abs_height * scale)
    return scale, new_width, new_height


def _check_dimensions(header):
    if header.height == 0:
        raise InvalidHeightError("Height of 0 has no row order", header)
    if header.width <= 0:
        raise InvalidWidthError(f"Width must be positive, got {header.width}", header)


def render(header: BitmapHeader, pixel_bytes, config: RenderConfig = DEFAULT_CONFIG):
    """Downscale the pixel array with nearest-neighbor sampling and map it to glyphs.

    Returns a list of text lines, each terminated by ``"\\n"``.
    """
    scale, new_width, new_height = target_dimensions(header, config)
    logger.debug(
        "scale w: %f  scale h: %f  best scale: %f",
        config.target_width / header.width,
        config.target_height / header.abs_height,
        scale,
    )
    logger.debug("New w: %d  New h: %d", new_width, new_height)

    src_stride = header.row_stride
    needed = src_stride * header.abs_height
    if len(pixel_bytes) < needed:
        raise TruncatedError(
            f"Pixel buffer holds {len(pixel_bytes)} bytes, need {needed}", header
        )

    ramp = config.ramp
    last_col = header.width - 1
    last_row = header.abs_height - 1

    try:
        # Source column offsets are the same for every row
        x_offsets = [
            min(int(j / scale), last_col) * BYTES_PER_PIXEL for j in range(new_width)
        ]
        lines = []
        for i in range(new_height):
            if config.skip_alternate_rows and not i & 1:
                continue

            # Bottom-up images store the last row first, flip it back
            if header.is_bottom_up:
                y_src = int((new_height - i - 1) / scale)
            else:
                y_src = int(i / scale)
            base = min(y_src, last_row) * src_stride

            row = []
            for x in x_offsets:
                p = base + x
                grey = (pixel_bytes[p] + pixel_bytes[p + 1] + pixel_bytes[p + 2]) // 3
                row.append(greyscale_to_glyph(grey, ramp))
            row.append("\n")
            lines.append("".join(row))
    except MemoryError as exc:
        raise AllocationError(
            f"Could not allocate a {new_width}x{new_height} canvas", header
        ) from exc

    return lines


def convert(source, config: RenderConfig = DEFAULT_CONFIG):
    """Run parse, validate, read and render on one BMP source.

    Returns ``(header, lines)``.
    """
    header = parse_header(source)
    validate_header(header)
    pixel_bytes = read_pixel_data(source, header)
    return header, render(header, pixel_bytes, config)
