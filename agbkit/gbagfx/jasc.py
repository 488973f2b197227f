"""Paint Shop Pro (JASC-PAL) palette files.

The format is CRLF-terminated lines: the signature ``JASC-PAL``, the
version ``0100``, the colour count, then one ``R G B`` line per colour.
"""

from __future__ import annotations

from .image import Color, Palette
from .util import GfxError, PathLike, parse_number

MAX_LINE_LENGTH = 11

_CR = 0x0D
_LF = 0x0A
_DIGITS = "0123456789"


class _LineReader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def _next(self) -> int | None:
        if self._pos >= len(self._data):
            return None
        byte = self._data[self._pos]
        self._pos += 1
        return byte

    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def read_line(self) -> str:
        chars = bytearray()
        while True:
            byte = self._next()
            if byte == _CR:
                if self._next() != _LF:
                    raise GfxError("CR line endings aren't supported.")
                return chars.decode("latin-1")
            if byte == _LF:
                raise GfxError("LF line endings aren't supported.")
            if byte is None:
                raise GfxError("Unexpected EOF. No CRLF at end of file.")
            if byte == 0:
                raise GfxError("NUL character in file.")
            if len(chars) == MAX_LINE_LENGTH:
                raise GfxError(f'The line "{chars.decode("latin-1")}" is too long.')
            chars.append(byte)


def _parse_color(line: str) -> Color:
    names = ("red", "green", "blue")
    values = []
    pos = 0
    for index, name in enumerate(names):
        try:
            value, length = parse_number(line[pos:], 10)
        except ValueError:
            raise GfxError(f"Failed to parse {name} color component.") from None
        pos += length
        values.append(value)
        if index + 1 < len(names):
            following = names[index + 1]
            if line[pos : pos + 1] != " ":
                raise GfxError(f"Expected a space after {name} color component.")
            pos += 1
            if pos >= len(line) or line[pos] not in _DIGITS:
                raise GfxError(
                    f"Expected only a space between {name} and {following} color components."
                )
    if pos != len(line):
        raise GfxError("Garbage after blue color component.")

    for name, value in zip(names, values):
        if not 0 <= value <= 255:
            raise GfxError(
                f"{name.capitalize()} color component ({value}) is outside the range [0, 255]."
            )
    return Color(*values)


def parse_jasc_palette(data: bytes) -> Palette:
    """Parse the bytes of a JASC-PAL file."""
    reader = _LineReader(data)

    if reader.read_line() != "JASC-PAL":
        raise GfxError("Invalid JASC-PAL signature.")
    if reader.read_line() != "0100":
        raise GfxError("Unsupported JASC-PAL version.")

    try:
        num_colors, _ = parse_number(reader.read_line(), 10)
    except ValueError:
        raise GfxError("Failed to parse number of colors.") from None

    if not 1 <= num_colors <= 256:
        raise GfxError(
            f"{num_colors} is an invalid number of colors. "
            "The number of colors must be in the range [1, 256]."
        )

    colors = [_parse_color(reader.read_line()) for _ in range(num_colors)]

    if not reader.at_end():
        raise GfxError("Garbage after color data.")

    return Palette(colors)


def format_jasc_palette(palette: Palette) -> bytes:
    """Render a palette as JASC-PAL file bytes."""
    lines = ["JASC-PAL", "0100", str(palette.num_colors)]
    lines.extend(f"{c.red} {c.green} {c.blue}" for c in palette.colors)
    return "".join(f"{line}\r\n" for line in lines).encode("ascii")


def read_jasc_palette(path: PathLike) -> Palette:
    try:
        with open(path, "rb") as fp:
            data = fp.read()
    except OSError as exc:
        raise GfxError(f'Failed to open JASC-PAL file "{path}" for reading.') from exc
    return parse_jasc_palette(data)


def write_jasc_palette(path: PathLike, palette: Palette) -> None:
    with open(path, "wb") as fp:
        fp.write(format_jasc_palette(palette))