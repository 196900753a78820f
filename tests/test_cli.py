"""Tests for the command line converter."""

import pytest

from cli import main
from conftest import BLACK, WHITE, make_bmp, solid_rows
from utils import EXIT_IO_ERROR


class TestCli:
    def test_converts_and_writes_output(self, write_bmp, tmp_path, capsys):
        src = write_bmp(make_bmp(solid_rows(4, 4, WHITE)))
        out = tmp_path / "ascii_art_out.txt"
        assert main([str(src), "-o", str(out), "--quiet"]) == 0

        text = out.read_text()
        assert text.splitlines() == [" " * 200] * 100
        printed = capsys.readouterr().out
        assert "Width: 4\n" in printed
        assert "Bits per pixel: 24\n" in printed
        assert " " * 200 not in printed

    def test_echoes_art_by_default(self, write_bmp, tmp_path, capsys):
        src = write_bmp(make_bmp(solid_rows(4, 2, BLACK)))
        out = tmp_path / "art.txt"
        assert main([str(src), "-o", str(out)]) == 0
        assert "@" * 200 + "\n" in capsys.readouterr().out

    def test_all_rows_and_size_flags(self, write_bmp, tmp_path):
        src = write_bmp(make_bmp(solid_rows(4, 4, WHITE)))
        out = tmp_path / "art.txt"
        assert main([str(src), "-o", str(out), "--quiet", "--all-rows", "--width", "8", "--height", "8"]) == 0
        assert out.read_text().splitlines() == [" " * 8] * 8

    def test_unsupported_image_reports_kind(self, write_bmp, tmp_path, capsys):
        src = write_bmp(make_bmp(solid_rows(4, 4, WHITE), bits_per_pixel=8))
        out = tmp_path / "art.txt"
        assert main([str(src), "-o", str(out), "--quiet"]) == 2

        printed = capsys.readouterr().out
        assert "Bits per pixel: 8\n" in printed
        assert "UnsupportedBitDepth" in printed
        assert not out.exists()

    def test_compressed_image(self, write_bmp, tmp_path):
        src = write_bmp(make_bmp(solid_rows(4, 4, WHITE), compression=1))
        assert main([str(src), "-o", str(tmp_path / "art.txt"), "--quiet"]) == 1

    def test_truncated_file(self, write_bmp, tmp_path, capsys):
        src = write_bmp(b"BM\x00\x00\x00\x00\x00\x00\x00\x00")
        out = tmp_path / "art.txt"
        assert main([str(src), "-o", str(out), "--quiet"]) == 5
        assert "Truncated" in capsys.readouterr().out
        assert not out.exists()

    def test_missing_input(self, tmp_path, capsys):
        out = tmp_path / "art.txt"
        assert main([str(tmp_path / "nope.bmp"), "-o", str(out)]) == EXIT_IO_ERROR
        assert "cannot read" in capsys.readouterr().out

    def test_non_positive_size_is_usage_error(self, write_bmp):
        src = write_bmp(make_bmp(solid_rows(4, 4, WHITE)))
        with pytest.raises(SystemExit) as exc_info:
            main([str(src), "--width", "0"])
        assert exc_info.value.code == 2
