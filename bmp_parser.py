import io
import logging
from dataclasses import dataclass

logger = logging.getLogger("bmp_ascii.parser")

# Fixed byte offsets into the header (measured from file start)
FILE_HEADER_SIZE = 14
BMP_SIZE_OFFSET = 2
IMG_START_OFFSET = 10
IMG_WIDTH_OFFSET = 18
IMG_HEIGHT_OFFSET = 22
BPP_OFFSET = 28
COMPRESSION_OFFSET = 30
IMG_DATA_SIZE_OFFSET = 34

# Supported image parameters
SUPPORTED_BPP = 24
SUPPORTED_COMPRESSION = 0
SUPPORTED_MAX_WIDTH = 2000
SUPPORTED_MAX_HEIGHT = 2000

BYTES_PER_PIXEL = 3


class BMPError(ValueError):
    """Base class for every conversion failure."""

    kind = "BMPError"
    exit_code = 1

    def __init__(self, message, header=None):
        super().__init__(message)
        self.header = header


class TruncatedError(BMPError):
    kind = "Truncated"
    exit_code = 5


class AllocationError(BMPError):
    kind = "AllocationError"
    exit_code = 8


class UnsupportedError(BMPError):
    """Header parsed fine but describes an image we cannot convert."""


class UnsupportedCompressionError(UnsupportedError):
    kind = "UnsupportedCompression"
    exit_code = 1


class UnsupportedBitDepthError(UnsupportedError):
    kind = "UnsupportedBitDepth"
    exit_code = 2


class WidthTooLargeError(UnsupportedError):
    kind = "WidthTooLarge"
    exit_code = 3


class HeightTooLargeError(UnsupportedError):
    kind = "HeightTooLarge"
    exit_code = 4


class InvalidHeightError(UnsupportedError):
    kind = "InvalidHeight"
    exit_code = 6


class InvalidWidthError(UnsupportedError):
    kind = "InvalidWidth"
    exit_code = 7


def _check_bounds(buf, offset, size):
    if offset < 0 or offset + size > len(buf):
        raise TruncatedError(
            f"Need {size} byte(s) at offset {offset}, header has {len(buf)}"
        )


def read_u8(buf, offset: int) -> int:
    _check_bounds(buf, offset, 1)
    return buf[offset]


def read_u32_le(buf, offset: int) -> int:
    _check_bounds(buf, offset, 4)
    return int.from_bytes(buf[offset:offset + 4], "little")


def read_i32_le(buf, offset: int) -> int:
    _check_bounds(buf, offset, 4)
    return int.from_bytes(buf[offset:offset + 4], "little", signed=True)


def row_stride(width: int) -> int:
    # Each row is padded to a multiple of 4 bytes
    return ((width * BYTES_PER_PIXEL + 3) // 4) * 4


@dataclass(frozen=True)
class BitmapHeader:
    file_size: int
    pixel_data_offset: int
    width: int
    height: int             # positive: rows stored bottom-up, negative: top-down
    bits_per_pixel: int
    compression: int
    pixel_data_size: int
    signature: bytes = b"BM"

    @property
    def abs_height(self) -> int:
        return abs(self.height)

    @property
    def is_bottom_up(self) -> bool:
        return self.height > 0

    @property
    def row_stride(self) -> int:
        return row_stride(self.width)

    @property
    def pixel_array_size(self) -> int:
        return self.row_stride * self.abs_height


@dataclass(frozen=True)
class ValidationLimits:
    bits_per_pixel: int = SUPPORTED_BPP
    compression: int = SUPPORTED_COMPRESSION
    max_width: int = SUPPORTED_MAX_WIDTH
    max_height: int = SUPPORTED_MAX_HEIGHT


DEFAULT_LIMITS = ValidationLimits()


def _as_stream(source):
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(source)
    return source


def _read_exact(stream, size, what):
    try:
        chunk = stream.read(size)
    except MemoryError as exc:
        raise AllocationError(f"Could not allocate {size} bytes for {what}") from exc
    if chunk is None or len(chunk) < size:
        got = 0 if chunk is None else len(chunk)
        raise TruncatedError(f"Expected {size} bytes of {what}, got {got}")
    return chunk


def parse_header(source) -> BitmapHeader:
    """Read the file header and DIB header from ``source``.

    ``source`` may be bytes or a binary file object. Seekable sources are
    rewound first; on success the cursor sits at ``pixel_data_offset``.
    """
    stream = _as_stream(source)
    if stream.seekable():
        stream.seek(0)

    # File header is always 14 bytes, read it first to learn the total header size
    header_bytes = bytearray(_read_exact(stream, FILE_HEADER_SIZE, "file header"))
    file_size = read_u32_le(header_bytes, BMP_SIZE_OFFSET)
    data_offset = read_u32_le(header_bytes, IMG_START_OFFSET)

    if data_offset < FILE_HEADER_SIZE:
        raise TruncatedError(
            f"Pixel data offset {data_offset} lies inside the {FILE_HEADER_SIZE}-byte file header"
        )

    # Everything up to the pixel data belongs to the header
    header_bytes += _read_exact(stream, data_offset - FILE_HEADER_SIZE, "DIB header")

    header = BitmapHeader(
        file_size=file_size,
        pixel_data_offset=data_offset,
        width=read_i32_le(header_bytes, IMG_WIDTH_OFFSET),
        height=read_i32_le(header_bytes, IMG_HEIGHT_OFFSET),
        bits_per_pixel=read_u8(header_bytes, BPP_OFFSET),
        compression=read_u32_le(header_bytes, COMPRESSION_OFFSET),
        pixel_data_size=read_u32_le(header_bytes, IMG_DATA_SIZE_OFFSET),
        signature=bytes(header_bytes[0:2]),
    )
    if header.signature != b"BM":
        logger.warning("Unexpected BMP signature %r", header.signature)
    logger.debug("Parsed header: %s", header)
    return header


def validate_header(header: BitmapHeader, limits: ValidationLimits = DEFAULT_LIMITS) -> None:
    """Raise the first applicable UnsupportedError, or return None if supported."""
    if header.bits_per_pixel != limits.bits_per_pixel:
        raise UnsupportedBitDepthError(
            f"Unsupported bpp: {header.bits_per_pixel} (only {limits.bits_per_pixel} is supported)",
            header,
        )
    if header.compression != limits.compression:
        raise UnsupportedCompressionError(
            f"Unsupported compression type: {header.compression}", header
        )
    if header.width > limits.max_width:
        raise WidthTooLargeError(
            f"Width {header.width} exceeds maximum of {limits.max_width}", header
        )
    # Signed comparison: top-down images (negative height) always pass
    if header.height > limits.max_height:
        raise HeightTooLargeError(
            f"Height {header.height} exceeds maximum of {limits.max_height}", header
        )
    if header.height == 0:
        raise InvalidHeightError("Height of 0 has no row order", header)
    if header.width <= 0:
        raise InvalidWidthError(f"Width must be positive, got {header.width}", header)


def read_pixel_data(source, header: BitmapHeader) -> bytes:
    """Read the padded pixel array that starts at ``header.pixel_data_offset``."""
    stream = _as_stream(source)
    if stream.seekable():
        stream.seek(header.pixel_data_offset)

    size = header.pixel_array_size
    if header.pixel_data_size and header.pixel_data_size != size:
        logger.warning(
            "Declared image size %d differs from computed size %d",
            header.pixel_data_size, size,
        )
    return bytes(_read_exact(stream, size, "pixel data"))


def describe(header: BitmapHeader) -> dict:
    return {
        "BMP Size (in Bytes)": header.file_size,
        "Offset to start image": header.pixel_data_offset,
        "Width": header.width,
        "Height": header.height,
        "Bits per pixel": header.bits_per_pixel,
        "Compression": header.compression,
        "Image Size with padding (in Bytes)": header.pixel_data_size,
    }


def format_description(header: BitmapHeader) -> str:
    return "".join(f"{k}: {v}\n" for k, v in describe(header).items())


class BMPParser:
    def __init__(self, filepath=None, source=None):
        self.filepath = filepath
        self.source = source
        self.header = None
        self.metadata = {}      # Human readable header fields
        self.pixel_data = b""   # Raw padded pixel array

    def load(self, limits: ValidationLimits = DEFAULT_LIMITS):
        if self.source is not None:
            self._load_from(self.source, limits)
        else:
            with open(self.filepath, "rb") as f:
                self._load_from(f, limits)
        return self

    def _load_from(self, stream, limits):
        stream = _as_stream(stream)
        self.header = parse_header(stream)
        self.metadata = describe(self.header)
        validate_header(self.header, limits)
        self.pixel_data = read_pixel_data(stream, self.header)
