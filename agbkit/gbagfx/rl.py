"""Run-length compression in the GBA BIOS format (type 0x30)."""

from __future__ import annotations

from .util import GfxError

_MAX_LITERAL = 0x7F + 1
_MIN_RUN = 3
_MAX_RUN = 0x7F + 3


def rl_decompress(data: bytes) -> bytes:
    """Decompress run-length encoded data."""
    src = bytes(data)
    if len(src) < 4:
        raise GfxError("Fatal error while decompressing RL file.")

    dest_size = int.from_bytes(src[1:4], "little")
    dest = bytearray()
    pos = 4

    while True:
        if pos >= len(src):
            raise GfxError("Fatal error while decompressing RL file.")

        flags = src[pos]
        pos += 1

        if flags & 0x80:
            length = (flags & 0x7F) + _MIN_RUN
            if pos >= len(src) or len(dest) + length > dest_size:
                raise GfxError("Fatal error while decompressing RL file.")
            dest += bytes([src[pos]]) * length
            pos += 1
        else:
            length = (flags & 0x7F) + 1
            chunk = src[pos : pos + length]
            if len(chunk) < length or len(dest) + length > dest_size:
                raise GfxError("Fatal error while decompressing RL file.")
            dest += chunk
            pos += length

        if len(dest) == dest_size:
            return bytes(dest)


def _starts_run(src: bytes, pos: int) -> bool:
    return pos + 2 < len(src) and src[pos] == src[pos + 1] == src[pos + 2]


def rl_compress(data: bytes) -> bytes:
    """Compress ``data`` with run-length encoding."""
    src = bytes(data)
    size = len(src)
    if size <= 0:
        raise GfxError("Fatal error while compressing RL file.")

    dest = bytearray([0x30]) + (size & 0xFFFFFF).to_bytes(3, "little")
    pos = 0

    while True:
        start = pos
        compress = False

        while pos < size and pos - start < _MAX_LITERAL:
            compress = _starts_run(src, pos)
            if compress:
                break
            pos += 1

        if pos > start:
            dest.append(pos - start - 1)
            dest += src[start:pos]

        if compress:
            value = src[pos]
            run = 0
            while run < _MAX_RUN and pos + run < size and src[pos + run] == value:
                run += 1
            dest.append(0x80 | (run - _MIN_RUN))
            dest.append(value)
            pos += run

        if pos == size:
            dest += bytes(-len(dest) % 4)
            return bytes(dest)