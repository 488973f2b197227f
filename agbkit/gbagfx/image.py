"""Tiled GBA images and 15-bit GBA palettes."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count, islice
from typing import Iterator

from .util import GfxError, PathLike, read_whole_file, write_whole_file


@dataclass
class Color:
    red: int
    green: int
    blue: int


@dataclass
class Palette:
    colors: list[Color] = field(default_factory=list)

    @property
    def num_colors(self) -> int:
        return len(self.colors)


@dataclass
class Image:
    width: int = 0
    height: int = 0
    bit_depth: int = 0
    pixels: bytearray = field(default_factory=bytearray)
    has_palette: bool = False
    palette: Palette = field(default_factory=Palette)
    has_transparency: bool = False


def _reverse_bits(byte: int) -> int:
    return int(f"{byte:08b}"[::-1], 2)


def _byte_table(bit_depth: int, invert_colors: bool) -> bytes:
    """Per-byte mapping between tile order and linear image order.

    Each mapping is its own inverse, so one table serves both directions.
    """
    mask = 0xFF if invert_colors else 0x00
    if bit_depth == 1:
        return bytes(_reverse_bits(b) ^ mask for b in range(256))
    if bit_depth == 4:
        return bytes((((b << 4) | (b >> 4)) & 0xFF) ^ mask for b in range(256))
    if bit_depth == 8:
        return bytes(b ^ mask for b in range(256))
    raise GfxError(f"Unsupported bit depth ({bit_depth}).")


def _tile_positions(metatiles_wide: int, metatile_width: int, metatile_height: int) -> Iterator[tuple[int, int]]:
    """Yield (tile column, tile row) in metatile order, without end."""
    for metatile_y in count():
        for metatile_x in range(metatiles_wide):
            for sub_y in range(metatile_height):
                for sub_x in range(metatile_width):
                    yield (
                        metatile_x * metatile_width + sub_x,
                        metatile_y * metatile_height + sub_y,
                    )


def _row_offsets(
    num_tiles: int,
    tiles_width: int,
    bit_depth: int,
    metatile_width: int,
    metatile_height: int,
) -> Iterator[int]:
    """Yield the image offset of every tile row, in tile data order."""
    pitch = tiles_width * bit_depth
    metatiles_wide = tiles_width // metatile_width
    positions = _tile_positions(metatiles_wide, metatile_width, metatile_height)
    for column, row in islice(positions, num_tiles):
        for line in range(8):
            yield (row * 8 + line) * pitch + column * bit_depth


def _check_metatiles(tiles_width: int, tiles_height: int, metatile_width: int, metatile_height: int) -> None:
    if tiles_width % metatile_width != 0:
        raise GfxError(
            f"The width in tiles ({tiles_width}) isn't a multiple of the "
            f"specified metatile width ({metatile_width})"
        )
    if tiles_height % metatile_height != 0:
        raise GfxError(
            f"The height in tiles ({tiles_height}) isn't a multiple of the "
            f"specified metatile height ({metatile_height})"
        )


def tiles_to_image(
    data: bytes,
    tiles_width: int,
    bit_depth: int,
    metatile_width: int,
    metatile_height: int,
    invert_colors: bool,
) -> Image:
    """Lay out raw tile data as a linear image."""
    table = _byte_table(bit_depth, invert_colors)
    data = bytes(data)
    tile_size = bit_depth * 8
    num_tiles = len(data) // tile_size
    tiles_height = -(-num_tiles // tiles_width)

    _check_metatiles(tiles_width, tiles_height, metatile_width, metatile_height)

    pixels = bytearray(tiles_width * tiles_height * tile_size)
    offsets = _row_offsets(num_tiles, tiles_width, bit_depth, metatile_width, metatile_height)
    for src, offset in zip(range(0, num_tiles * tile_size, bit_depth), offsets):
        pixels[offset : offset + bit_depth] = data[src : src + bit_depth].translate(table)

    return Image(width=tiles_width * 8, height=tiles_height * 8, bit_depth=bit_depth, pixels=pixels)


def image_to_tiles(
    image: Image,
    num_tiles: int,
    bit_depth: int,
    metatile_width: int,
    metatile_height: int,
    invert_colors: bool,
) -> bytes:
    """Cut a linear image into raw tile data; ``num_tiles`` 0 means all."""
    if image.width % 8 != 0:
        raise GfxError(f"The width in pixels ({image.width}) isn't a multiple of 8.")
    if image.height % 8 != 0:
        raise GfxError(f"The height in pixels ({image.height}) isn't a multiple of 8.")

    tiles_width = image.width // 8
    tiles_height = image.height // 8
    _check_metatiles(tiles_width, tiles_height, metatile_width, metatile_height)

    max_num_tiles = tiles_width * tiles_height
    if num_tiles == 0:
        num_tiles = max_num_tiles
    elif num_tiles > max_num_tiles:
        raise GfxError(
            f"The specified number of tiles ({num_tiles}) is greater than "
            f"the maximum possible value ({max_num_tiles})."
        )

    table = _byte_table(bit_depth, invert_colors)
    pixels = bytes(image.pixels)
    out = bytearray()
    for offset in _row_offsets(num_tiles, tiles_width, bit_depth, metatile_width, metatile_height):
        out += pixels[offset : offset + bit_depth].translate(table)
    return bytes(out)


def read_image(
    path: PathLike,
    tiles_width: int,
    bit_depth: int,
    metatile_width: int,
    metatile_height: int,
    invert_colors: bool,
) -> Image:
    """Read a raw tile file into an image."""
    return tiles_to_image(
        read_whole_file(path), tiles_width, bit_depth, metatile_width, metatile_height, invert_colors
    )


def write_image(
    path: PathLike,
    num_tiles: int,
    bit_depth: int,
    metatile_width: int,
    metatile_height: int,
    image: Image,
    invert_colors: bool,
) -> None:
    """Write an image as a raw tile file."""
    data = image_to_tiles(image, num_tiles, bit_depth, metatile_width, metatile_height, invert_colors)
    write_whole_file(path, data)


def _upconvert(component: int) -> int:
    return (component * 255) // 31


def decode_gba_palette(data: bytes) -> Palette:
    """Decode little-endian 15-bit BGR entries into 8-bit colours."""
    if len(data) % 2 != 0:
        raise GfxError(f"The file size ({len(data)}) is not a multiple of 2.")
    colors = []
    for low, high in zip(data[0::2], data[1::2]):
        entry = (high << 8) | low
        colors.append(
            Color(
                red=_upconvert(entry & 0x1F),
                green=_upconvert((entry >> 5) & 0x1F),
                blue=_upconvert((entry >> 10) & 0x1F),
            )
        )
    return Palette(colors)


def encode_gba_palette(palette: Palette) -> bytes:
    """Encode 8-bit colours as little-endian 15-bit BGR entries."""
    out = bytearray()
    for color in palette.colors:
        entry = ((color.blue // 8) << 10) | ((color.green // 8) << 5) | (color.red // 8)
        out += (entry & 0xFFFF).to_bytes(2, "little")
    return bytes(out)


def read_gba_palette(path: PathLike) -> Palette:
    return decode_gba_palette(read_whole_file(path))


def write_gba_palette(path: PathLike, palette: Palette) -> None:
    try:
        with open(path, "wb") as fp:
            fp.write(encode_gba_palette(palette))
    except OSError as exc:
        raise GfxError(f'Failed to open "{path}" for writing.') from exc