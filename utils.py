"""Shared helpers for the CLI and viewer: logging setup and canvas output.

Usage:
    from utils import setup_logging, write_canvas

    setup_logging(debug=True)
    write_canvas("ascii_art_out.txt", lines)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

MAX_BYTES = 1024 * 1024  # 1 MB
BACKUP_COUNT = 3

DEFAULT_INPUT = "input_image.bmp"
DEFAULT_OUTPUT = "ascii_art_out.txt"

EXIT_OK = 0
EXIT_IO_ERROR = 9


def setup_logging(
    level: int = logging.WARNING,
    log_file: str | None = None,
    fmt: str = DEFAULT_FORMAT,
    *,
    debug: bool = False,
) -> None:
    """Configure the root logger once per entry point."""
    if debug:
        level = logging.DEBUG

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT)
        )
    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)


def write_canvas(path, lines) -> None:
    # Create or truncate the output file
    with open(path, "w", encoding="ascii", newline="\n") as f:
        f.writelines(lines)
