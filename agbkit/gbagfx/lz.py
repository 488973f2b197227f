"""LZ77 compression in the GBA BIOS format (type 0x10)."""

from __future__ import annotations

import warnings

from .util import GfxError

_MAX_DISTANCE = 0x1000
_MAX_BLOCK = 18
_MIN_BLOCK = 3


def _read_header_size(src: bytes) -> int:
    return int.from_bytes(src[1:4], "little")


def lz_decompress(data: bytes) -> bytes:
    """Decompress LZ77 data.

    A back-reference that runs past the size in the header is cut short
    with a ``RuntimeWarning``, as some existing tilesets need.
    """
    src = bytes(data)
    if len(src) < 4:
        raise GfxError("Fatal error while decompressing LZ file.")

    dest_size = _read_header_size(src)
    dest = bytearray()
    pos = 4

    while True:
        if pos >= len(src):
            raise GfxError("Fatal error while decompressing LZ file.")

        flags = src[pos]
        pos += 1

        for _ in range(8):
            if flags & 0x80:
                if pos + 1 >= len(src):
                    raise GfxError("Fatal error while decompressing LZ file.")

                block_size = (src[pos] >> 4) + 3
                distance = (((src[pos] & 0xF) << 8) | src[pos + 1]) + 1
                pos += 2

                block_pos = len(dest) - distance

                if len(dest) + block_size > dest_size:
                    block_size = dest_size - len(dest)
                    warnings.warn("Destination buffer overflow.", RuntimeWarning, stacklevel=2)

                if block_pos < 0:
                    raise GfxError("Fatal error while decompressing LZ file.")

                # Byte by byte: the block may overlap the bytes it produces.
                for offset in range(block_pos, block_pos + block_size):
                    dest.append(dest[offset])
            else:
                if pos >= len(src) or len(dest) >= dest_size:
                    raise GfxError("Fatal error while decompressing LZ file.")
                dest.append(src[pos])
                pos += 1

            if len(dest) == dest_size:
                return bytes(dest)

            flags = (flags << 1) & 0xFF


def _find_match(src: bytes, pos: int, min_distance: int) -> tuple[int, int]:
    """Return ``(distance, size)`` of the longest earlier match at ``pos``."""
    size = len(src)
    best_distance = 0
    best_size = 0
    for distance in range(min_distance, min(pos, _MAX_DISTANCE) + 1):
        start = pos - distance
        length = 0
        while (
            length < _MAX_BLOCK
            and pos + length < size
            and src[start + length] == src[pos + length]
        ):
            length += 1
        if length > best_size:
            best_distance = distance
            best_size = length
            if length == _MAX_BLOCK:
                break
    return best_distance, best_size


def lz_compress(data: bytes, min_distance: int = 2) -> bytes:
    """Compress ``data`` as LZ77.

    ``min_distance`` is the shortest back-reference distance searched; the
    default of 2 keeps the output safe for VRAM decompression.
    """
    src = bytes(data)
    size = len(src)
    if size <= 0 or min_distance < 1:
        raise GfxError("Fatal error while compressing LZ file.")

    dest = bytearray([0x10]) + (size & 0xFFFFFF).to_bytes(3, "little")
    pos = 0

    while True:
        flags_index = len(dest)
        dest.append(0)

        for i in range(8):
            distance, block_size = _find_match(src, pos, min_distance)

            if block_size >= _MIN_BLOCK:
                dest[flags_index] |= 0x80 >> i
                pos += block_size
                encoded_size = block_size - _MIN_BLOCK
                encoded_distance = distance - 1
                dest.append(((encoded_size << 4) | (encoded_distance >> 8)) & 0xFF)
                dest.append(encoded_distance & 0xFF)
            else:
                dest.append(src[pos])
                pos += 1

            if pos == size:
                dest += bytes(-len(dest) % 4)
                return bytes(dest)