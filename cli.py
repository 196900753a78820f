#!/usr/bin/env python3
"""
cli.py

Convert a 24-bit uncompressed BMP into ASCII art.

Usage:
    python cli.py [input.bmp] [-o ascii_art_out.txt] [--width 200] [--height 200]
                  [--all-rows] [--quiet] [--debug] [--log-file path]

The header fields are printed first. On success the art is written to the
output file and echoed to the console; on failure the error kind is printed
and the process exits with that error's code. No output file is written
for a failed conversion.
"""

import argparse
import logging
import sys

from ascii_renderer import NEW_MAX_HEIGHT, NEW_MAX_WIDTH, RenderConfig, render
from bmp_parser import BMPError, format_description, parse_header, read_pixel_data, validate_header
from utils import DEFAULT_INPUT, DEFAULT_OUTPUT, EXIT_IO_ERROR, EXIT_OK, setup_logging, write_canvas

logger = logging.getLogger("bmp_ascii.cli")


def build_parser():
    p = argparse.ArgumentParser(description="Convert a 24-bit BMP -> ASCII art")
    p.add_argument("input", nargs="?", default=DEFAULT_INPUT, help=f"Input BMP path (default {DEFAULT_INPUT})")
    p.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help=f"Output text file (default {DEFAULT_OUTPUT})")
    p.add_argument("--width", type=int, default=NEW_MAX_WIDTH, help="Maximum output width in characters")
    p.add_argument("--height", type=int, default=NEW_MAX_HEIGHT, help="Maximum output height before row skipping")
    p.add_argument("--all-rows", action="store_true", help="Keep every row instead of every other one")
    p.add_argument("--quiet", action="store_true", help="Do not echo the art to the console")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", default=None, help="Also write logs to this file")
    return p


def run(args, out=None) -> int:
    out = out or sys.stdout
    config = RenderConfig(
        target_width=args.width,
        target_height=args.height,
        skip_alternate_rows=not args.all_rows,
    )

    try:
        with open(args.input, "rb") as f:
            header = parse_header(f)
            out.write(format_description(header))
            validate_header(header)
            lines = render(header, read_pixel_data(f, header), config)
    except BMPError as e:
        print(f"Error: {e.kind} (code {e.exit_code}): {e}", file=out)
        return e.exit_code
    except OSError as e:
        logger.error("Cannot read %s: %s", args.input, e)
        print(f"Error: cannot read {args.input}: {e}", file=out)
        return EXIT_IO_ERROR

    try:
        write_canvas(args.output, lines)
    except OSError as e:
        logger.error("Cannot write %s: %s", args.output, e)
        print(f"Error: cannot write {args.output}: {e}", file=out)
        return EXIT_IO_ERROR

    if not args.quiet:
        out.write("\n")
        out.writelines(lines)
    logger.info("Wrote %d lines to %s", len(lines), args.output)
    return EXIT_OK


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.width <= 0 or args.height <= 0:
        parser.error("--width and --height must be positive")
    setup_logging(log_file=args.log_file, debug=args.debug)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
