import random

import pytest

from agbkit.gbagfx.image import (
    Color,
    Image,
    Palette,
    decode_gba_palette,
    encode_gba_palette,
    image_to_tiles,
    read_gba_palette,
    read_image,
    tiles_to_image,
    write_gba_palette,
    write_image,
)
from agbkit.gbagfx.util import GfxError


def _random_bytes(size, seed=1):
    rng = random.Random(seed)
    return bytes(rng.randrange(256) for _ in range(size))


@pytest.mark.parametrize("bit_depth", [1, 4, 8])
@pytest.mark.parametrize("invert", [False, True])
@pytest.mark.parametrize("metatile", [(1, 1), (2, 2), (2, 1)])
def test_tiles_round_trip(bit_depth, invert, metatile):
    mw, mh = metatile
    tiles_width = 4
    num_tiles = 8
    data = _random_bytes(num_tiles * bit_depth * 8, seed=bit_depth)
    image = tiles_to_image(data, tiles_width, bit_depth, mw, mh, invert)
    assert image.width == tiles_width * 8
    assert image.height == (num_tiles // tiles_width) * 8
    assert image.bit_depth == bit_depth
    assert image_to_tiles(image, 0, bit_depth, mw, mh, invert) == data


def test_4bpp_nibbles_swapped():
    data = bytes([0x12]) + bytes(31)
    image = tiles_to_image(data, 1, 4, 1, 1, False)
    assert image.pixels[0] == 0x21


def test_8bpp_inverted():
    image = tiles_to_image(bytes(64), 1, 8, 1, 1, True)
    assert image.pixels[0] == 0xFF
    assert set(image.pixels) == {0xFF}


def test_1bpp_bits_reversed():
    data = bytes([0x01]) + bytes(7)
    image = tiles_to_image(data, 1, 1, 1, 1, False)
    assert image.pixels[0] == 0x80


def test_partial_last_row_is_zero_filled():
    data = _random_bytes(3 * 32)
    image = tiles_to_image(data, 2, 4, 1, 1, False)
    assert len(image.pixels) == image.width * image.height * 4 // 8
    out = image_to_tiles(image, 0, 4, 1, 1, False)
    assert out[: len(data)] == data
    assert out[len(data) :] == bytes(32)


def test_num_tiles_limits_output():
    data = _random_bytes(4 * 32)
    image = tiles_to_image(data, 2, 4, 1, 1, False)
    out = image_to_tiles(image, 3, 4, 1, 1, False)
    assert out == data[: 3 * 32]


def test_num_tiles_too_large():
    image = tiles_to_image(bytes(4 * 32), 2, 4, 1, 1, False)
    with pytest.raises(GfxError):
        image_to_tiles(image, 5, 4, 1, 1, False)


def test_read_metatile_width_mismatch():
    with pytest.raises(GfxError):
        tiles_to_image(bytes(3 * 32), 3, 4, 2, 1, False)


def test_read_metatile_height_mismatch():
    with pytest.raises(GfxError):
        tiles_to_image(bytes(3 * 32), 1, 4, 1, 2, False)


@pytest.mark.parametrize("size", [(12, 8), (8, 12)])
def test_write_requires_multiple_of_8(size):
    width, height = size
    image = Image(width=width, height=height, bit_depth=8, pixels=bytearray(width * height))
    with pytest.raises(GfxError):
        image_to_tiles(image, 0, 8, 1, 1, False)


def test_unsupported_bit_depth():
    with pytest.raises(GfxError):
        tiles_to_image(bytes(16), 1, 2, 1, 1, False)


def test_image_file_round_trip(tmp_path):
    data = _random_bytes(6 * 32)
    src = tmp_path / "in.4bpp"
    src.write_bytes(data)
    image = read_image(src, 2, 4, 1, 1, True)
    dest = tmp_path / "out.4bpp"
    write_image(dest, 0, 4, 1, 1, image, True)
    assert dest.read_bytes() == data


def test_palette_white():
    palette = decode_gba_palette(b"\xff\x7f")
    assert palette.colors == [Color(255, 255, 255)]
    assert palette.num_colors == 1


def test_palette_round_trip_all_components():
    data = b"".join(
        ((b << 10) | (g << 5) | r).to_bytes(2, "little")
        for r in range(32)
        for g in (0, 17, 31)
        for b in (0, 9, 31)
    )
    assert encode_gba_palette(decode_gba_palette(data)) == data


def test_palette_odd_size():
    with pytest.raises(GfxError):
        decode_gba_palette(b"\x00\x00\x00")


def test_palette_file_round_trip(tmp_path):
    palette = Palette([Color(0, 0, 0), Color(255, 255, 255)])
    path = tmp_path / "p.gbapal"
    write_gba_palette(path, palette)
    assert read_gba_palette(path) == palette