import pytest

from agbkit.gbagfx.image import Color, Palette
from agbkit.gbagfx.jasc import (
    format_jasc_palette,
    parse_jasc_palette,
    read_jasc_palette,
    write_jasc_palette,
)
from agbkit.gbagfx.util import GfxError

SAMPLE = b"JASC-PAL\r\n0100\r\n3\r\n0 0 0\r\n0 0 255\r\n150 75 0\r\n"


def _palette_file(*color_lines, count=None):
    count = len(color_lines) if count is None else count
    body = "".join(f"{line}\r\n" for line in color_lines)
    return f"JASC-PAL\r\n0100\r\n{count}\r\n{body}".encode("latin-1")


def test_parse_sample():
    palette = parse_jasc_palette(SAMPLE)
    assert palette.colors == [Color(0, 0, 0), Color(0, 0, 255), Color(150, 75, 0)]


def test_format_round_trip():
    assert format_jasc_palette(parse_jasc_palette(SAMPLE)) == SAMPLE


def test_parse_format_round_trip_full_palette():
    palette = Palette([Color(i, 255 - i, (i * 7) % 256) for i in range(256)])
    assert parse_jasc_palette(format_jasc_palette(palette)) == palette


@pytest.mark.parametrize(
    "data",
    [
        SAMPLE.replace(b"\r\n", b"\n"),
        SAMPLE.replace(b"\r\n", b"\r"),
        b"JASC-PAX\r\n0100\r\n1\r\n0 0 0\r\n",
        b"JASC-PAL\r\n0200\r\n1\r\n0 0 0\r\n",
        b"JASC-PAL\r\n0100\r\nx\r\n0 0 0\r\n",
        b"JASC-PAL\r\n0100\r\n1\r\n0 0 0",
        b"JASC-PAL\r\n0100\r\n1\r\n0 0\x00 0\r\n",
        b"JASC-PAL\r\n0100\r\n1\r\n000 000 0000\r\n",
        SAMPLE + b"x",
    ],
)
def test_malformed_files(data):
    with pytest.raises(GfxError):
        parse_jasc_palette(data)


@pytest.mark.parametrize("count", [0, 257])
def test_bad_color_count(count):
    with pytest.raises(GfxError):
        parse_jasc_palette(_palette_file("0 0 0", count=count))


@pytest.mark.parametrize(
    "line",
    ["256 0 0", "0 256 0", "0 0 256", "-1 0 0", "0  0 0", "0 0 0 ", "0 0", "0,0,0", "a 0 0"],
)
def test_bad_color_line(line):
    with pytest.raises(GfxError):
        parse_jasc_palette(_palette_file(line))


def test_file_round_trip(tmp_path):
    palette = Palette([Color(1, 2, 3), Color(255, 255, 255)])
    path = tmp_path / "p.pal"
    write_jasc_palette(path, palette)
    assert read_jasc_palette(path) == palette


def test_read_missing_file(tmp_path):
    with pytest.raises(GfxError):
        read_jasc_palette(tmp_path / "missing.pal")