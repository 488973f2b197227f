"""Reading and writing grayscale and paletted PNG images."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import Iterator

from .image import Color, Image, Palette
from .util import GfxError, PathLike

_SIGNATURE = b"\x89PNG\r\n\x1a\n"

_COLOR_GRAY = 0
_COLOR_PALETTE = 3

_ALLOWED_DEPTHS = {
    0: (1, 2, 4, 8, 16),
    2: (8, 16),
    3: (1, 2, 4, 8),
    4: (8, 16),
    6: (8, 16),
}

_CHANNELS = {0: 1, 2: 3, 3: 1, 4: 2, 6: 4}

# (x start, y start, x step, y step) of each Adam7 pass.
_ADAM7 = (
    (0, 0, 8, 8),
    (4, 0, 8, 8),
    (0, 4, 4, 8),
    (2, 0, 4, 4),
    (0, 2, 2, 4),
    (1, 0, 2, 2),
    (0, 1, 1, 2),
)


@dataclass(frozen=True)
class _Header:
    width: int
    height: int
    bit_depth: int
    color_type: int
    interlace: int

    @property
    def bits_per_pixel(self) -> int:
        return self.bit_depth * _CHANNELS[self.color_type]

    def row_bytes(self, width: int) -> int:
        return (width * self.bits_per_pixel + 7) // 8


def _unpack(data: bytes, depth: int) -> list[int]:
    """Split packed samples into a list of values, most significant first."""
    if depth == 16:
        return [int.from_bytes(data[i : i + 2], "big") for i in range(0, len(data) - 1, 2)]
    if depth == 8:
        return list(data)
    mask = (1 << depth) - 1
    shifts = range(8 - depth, -1, -depth)
    return [(byte >> shift) & mask for byte in data for shift in shifts]


def _pack(values: list[int], depth: int) -> bytes:
    """Pack values into bytes, most significant first, zero-filling the tail."""
    if depth == 16:
        return b"".join(value.to_bytes(2, "big") for value in values)
    if depth == 8:
        return bytes(values)
    per_byte = 8 // depth
    out = bytearray()
    for start in range(0, len(values), per_byte):
        byte = 0
        group = values[start : start + per_byte]
        for index, value in enumerate(group):
            byte |= value << (8 - depth * (index + 1))
        out.append(byte)
    return bytes(out)


def convert_bit_depth(data: bytes, src_bit_depth: int, dest_bit_depth: int, num_pixels: int) -> bytes:
    """Repack ``num_pixels`` packed pixels from one bit depth to another."""
    if dest_bit_depth not in (1, 2, 4, 8):
        raise GfxError(f"Unsupported bit depth ({dest_bit_depth}).")
    src_size = (num_pixels * src_bit_depth + 7) // 8
    dest_size = (num_pixels * dest_bit_depth + 7) // 8

    values = _unpack(bytes(data[:src_size]), src_bit_depth)
    if any(value >= 1 << dest_bit_depth for value in values):
        raise GfxError(f"Image exceeds the maximum color value for a {dest_bit_depth}bpp image.")

    return _pack(values, dest_bit_depth)[:dest_size].ljust(dest_size, b"\x00")


def _iter_chunks(data: bytes, name: str) -> Iterator[tuple[bytes, bytes]]:
    if len(data) < len(_SIGNATURE):
        raise GfxError(f'Failed to read PNG signature from "{name}".')
    if data[: len(_SIGNATURE)] != _SIGNATURE:
        raise GfxError(f'"{name}" does not have a valid PNG signature.')

    pos = len(_SIGNATURE)
    while pos < len(data):
        if pos + 8 > len(data):
            raise GfxError(f'Error reading from "{name}".')
        length, chunk_type = struct.unpack(">I4s", data[pos : pos + 8])
        body = data[pos + 8 : pos + 8 + length]
        crc = data[pos + 8 + length : pos + 12 + length]
        if len(body) < length or len(crc) < 4:
            raise GfxError(f'Error reading from "{name}".')
        critical = not chunk_type[0] & 0x20
        if critical and zlib.crc32(chunk_type + body) != int.from_bytes(crc, "big"):
            raise GfxError(
                f'CRC error in {chunk_type.decode("latin-1")} chunk of "{name}".'
            )
        yield chunk_type, body
        pos += 12 + length
        if chunk_type == b"IEND":
            return


def _parse_header(body: bytes, name: str) -> _Header:
    if len(body) != 13:
        raise GfxError(f'Failed to init I/O for reading "{name}".')
    width, height, depth, color_type, compression, filtering, interlace = struct.unpack(
        ">IIBBBBB", body
    )
    valid = (
        width > 0
        and height > 0
        and depth in _ALLOWED_DEPTHS.get(color_type, ())
        and compression == 0
        and filtering == 0
        and interlace in (0, 1)
    )
    if not valid:
        raise GfxError(f'Failed to init I/O for reading "{name}".')
    return _Header(width, height, depth, color_type, interlace)


def _parse(data: bytes, name: str) -> tuple[_Header, bytes | None, bytes]:
    header: _Header | None = None
    plte: bytes | None = None
    idat = bytearray()
    for chunk_type, body in _iter_chunks(bytes(data), name):
        if header is None:
            if chunk_type != b"IHDR":
                raise GfxError(f'Failed to init I/O for reading "{name}".')
            header = _parse_header(body, name)
        elif chunk_type == b"IHDR":
            raise GfxError(f'Error reading from "{name}".')
        elif chunk_type == b"PLTE":
            plte = body
        elif chunk_type == b"IDAT":
            idat += body
    if header is None:
        raise GfxError(f'Failed to init I/O for reading "{name}".')
    return header, plte, bytes(idat)


def _paeth(left: int, up: int, up_left: int) -> int:
    estimate = left + up - up_left
    dist_left = abs(estimate - left)
    dist_up = abs(estimate - up)
    dist_up_left = abs(estimate - up_left)
    if dist_left <= dist_up and dist_left <= dist_up_left:
        return left
    if dist_up <= dist_up_left:
        return up
    return up_left


def _unfilter(raw: bytes, offset: int, rows: int, row_bytes: int, bpp: int, name: str) -> tuple[bytes, int]:
    """Undo the per-row filters of ``rows`` rows starting at ``offset``."""
    out = bytearray()
    prev = bytes(row_bytes)
    for _ in range(rows):
        if offset + 1 + row_bytes > len(raw):
            raise GfxError(f'Error reading from "{name}".')
        filter_type = raw[offset]
        line = bytearray(raw[offset + 1 : offset + 1 + row_bytes])
        offset += 1 + row_bytes

        if filter_type == 1:
            for i in range(bpp, row_bytes):
                line[i] = (line[i] + line[i - bpp]) & 0xFF
        elif filter_type == 2:
            for i in range(row_bytes):
                line[i] = (line[i] + prev[i]) & 0xFF
        elif filter_type == 3:
            for i in range(row_bytes):
                left = line[i - bpp] if i >= bpp else 0
                line[i] = (line[i] + ((left + prev[i]) >> 1)) & 0xFF
        elif filter_type == 4:
            for i in range(row_bytes):
                left = line[i - bpp] if i >= bpp else 0
                up_left = prev[i - bpp] if i >= bpp else 0
                line[i] = (line[i] + _paeth(left, prev[i], up_left)) & 0xFF
        elif filter_type != 0:
            raise GfxError(f'Error reading from "{name}".')

        out += line
        prev = line
    return bytes(out), offset


def _decode_rows(header: _Header, raw: bytes, name: str) -> bytes:
    bpp = max(1, header.bits_per_pixel // 8)
    if not header.interlace:
        pixels, _ = _unfilter(raw, 0, header.height, header.row_bytes(header.width), bpp, name)
        return pixels

    width, height, depth = header.width, header.height, header.bit_depth
    values = [0] * (width * height)
    offset = 0
    for x_start, y_start, x_step, y_step in _ADAM7:
        pass_width = (width - x_start + x_step - 1) // x_step if x_start < width else 0
        pass_height = (height - y_start + y_step - 1) // y_step if y_start < height else 0
        if not pass_width or not pass_height:
            continue
        row_bytes = header.row_bytes(pass_width)
        rows, offset = _unfilter(raw, offset, pass_height, row_bytes, bpp, name)
        for pass_row in range(pass_height):
            line = _unpack(rows[pass_row * row_bytes : (pass_row + 1) * row_bytes], depth)
            y = y_start + pass_row * y_step
            for column, value in enumerate(line[:pass_width]):
                values[y * width + x_start + column * x_step] = value

    return b"".join(_pack(values[y * width : (y + 1) * width], depth) for y in range(height))


def _decode(data: bytes, bit_depth: int, name: str) -> Image:
    header, plte, idat = _parse(data, name)

    if header.color_type not in (_COLOR_GRAY, _COLOR_PALETTE):
        raise GfxError(f'"{name}" has an unsupported color type.')
    if not idat or (header.color_type == _COLOR_PALETTE and plte is None):
        raise GfxError(f'Error reading from "{name}".')

    try:
        raw = zlib.decompressobj().decompress(idat)
    except zlib.error as exc:
        raise GfxError(f'Error reading from "{name}".') from exc

    pixels = _decode_rows(header, raw, name)

    image = Image(
        width=header.width,
        height=header.height,
        bit_depth=header.bit_depth,
        pixels=bytearray(pixels),
        has_palette=header.color_type == _COLOR_PALETTE,
    )

    if header.bit_depth != bit_depth:
        if header.bit_depth not in (1, 2, 4, 8):
            raise GfxError("Bit depth of image must be 1, 2, 4, or 8.")
        image.pixels = bytearray(
            convert_bit_depth(pixels, header.bit_depth, bit_depth, header.width * header.height)
        )
        image.bit_depth = bit_depth

    return image


def decode_png(data: bytes, bit_depth: int) -> Image:
    """Decode PNG bytes into packed pixels of the requested bit depth."""
    return _decode(data, bit_depth, "<png data>")


def _palette_from_png(data: bytes, name: str) -> Palette:
    header, plte, _ = _parse(data, name)
    if header.color_type != _COLOR_PALETTE:
        raise GfxError(f'The image "{name}" does not contain a palette.')
    if plte is None or len(plte) % 3 != 0 or not plte:
        raise GfxError(f'Failed to retrieve palette from "{name}".')
    if len(plte) // 3 > 256:
        raise GfxError("Images with more than 256 colors are not supported.")
    return Palette([Color(*plte[i : i + 3]) for i in range(0, len(plte), 3)])


def decode_png_palette(data: bytes) -> Palette:
    """Return the palette stored in PNG bytes."""
    return _palette_from_png(data, "<png data>")


def _chunk(chunk_type: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + chunk_type + body + crc.to_bytes(4, "big")


def encode_png(image: Image) -> bytes:
    """Encode an image as a non-interlaced grayscale or paletted PNG."""
    color_type = _COLOR_PALETTE if image.has_palette else _COLOR_GRAY
    width, height, depth = image.width, image.height, image.bit_depth

    if width <= 0 or height <= 0 or depth not in _ALLOWED_DEPTHS[color_type]:
        raise GfxError(f"Invalid image header ({width}x{height}, {depth}bpp).")

    chunks = [
        _chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, depth, color_type, 0, 0, 0))
    ]

    if image.has_palette:
        colors = image.palette.colors
        if not colors or len(colors) > min(256, 1 << depth):
            raise GfxError("Invalid palette length.")
        chunks.append(_chunk(b"PLTE", bytes(c for color in colors for c in (color.red, color.green, color.blue))))
        if image.has_transparency:
            chunks.append(_chunk(b"tRNS", b"\x00"))

    row_bytes = (width * depth + 7) // 8
    pixels = bytes(image.pixels)
    if len(pixels) < row_bytes * height:
        raise GfxError("Pixel data is too short for the image size.")

    raw = b"".join(
        b"\x00" + pixels[y * row_bytes : (y + 1) * row_bytes] for y in range(height)
    )
    chunks.append(_chunk(b"IDAT", zlib.compress(raw)))
    chunks.append(_chunk(b"IEND", b""))
    return _SIGNATURE + b"".join(chunks)


def _read_bytes(path: PathLike) -> bytes:
    try:
        with open(path, "rb") as fp:
            return fp.read()
    except OSError as exc:
        raise GfxError(f'Failed to open "{path}" for reading.') from exc


def read_png(path: PathLike, bit_depth: int) -> Image:
    """Read a PNG file into packed pixels of the requested bit depth."""
    return _decode(_read_bytes(path), bit_depth, str(path))


def write_png(path: PathLike, image: Image) -> None:
    """Write an image to a PNG file."""
    data = encode_png(image)
    try:
        with open(path, "wb") as fp:
            fp.write(data)
    except OSError as exc:
        raise GfxError(f'Failed to open "{path}" for writing.') from exc


def read_png_palette(path: PathLike) -> Palette:
    """Read the palette of a paletted PNG file."""
    return _palette_from_png(_read_bytes(path), str(path))