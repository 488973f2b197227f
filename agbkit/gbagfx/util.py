"""Shared helpers: number parsing, file extensions and whole-file I/O."""

from __future__ import annotations

import os
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

_WHITESPACE = " \t\n\v\f\r"


class GfxError(Exception):
    """Raised when a graphics conversion cannot be carried out."""


def _digit_value(char: str, radix: int) -> int | None:
    if "0" <= char <= "9":
        digit = ord(char) - ord("0")
    elif "a" <= char <= "z":
        digit = ord(char) - ord("a") + 10
    elif "A" <= char <= "Z":
        digit = ord(char) - ord("A") + 10
    else:
        return None
    return digit if digit < radix else None


def parse_number(text: str, radix: int = 10) -> tuple[int, int]:
    """Parse a leading integer from ``text`` the way ``strtol`` does.

    Returns ``(value, end)`` where ``end`` is the index just past the number.
    Raises ``ValueError`` if there is no number or it does not fit in a
    32-bit signed integer.
    """
    if not 2 <= radix <= 36:
        raise ValueError(f"unsupported radix {radix}")

    length = len(text)
    pos = 0
    while pos < length and text[pos] in _WHITESPACE:
        pos += 1

    sign = 1
    if pos < length and text[pos] in "+-":
        if text[pos] == "-":
            sign = -1
        pos += 1

    if (
        radix == 16
        and text[pos : pos + 2] in ("0x", "0X")
        and pos + 2 < length
        and _digit_value(text[pos + 2], 16) is not None
    ):
        pos += 2

    start = pos
    value = 0
    while pos < length and (digit := _digit_value(text[pos], radix)) is not None:
        value = value * radix + digit
        pos += 1

    if pos == start:
        raise ValueError(f"not a number: {text!r}")

    value *= sign
    if not INT_MIN <= value <= INT_MAX:
        raise ValueError(f"number out of range: {text!r}")

    return value, pos


def get_file_extension(path: str) -> str | None:
    """Return the text after the last dot, or None if there is none."""
    dot = path.rfind(".")
    if dot <= 0:
        return None
    extension = path[dot + 1 :]
    return extension or None


def read_whole_file(path: PathLike) -> bytes:
    """Read a whole file; an empty or unreadable file is an error."""
    try:
        with open(path, "rb") as fp:
            data = fp.read()
    except OSError as exc:
        raise GfxError(f'Failed to open "{os.fspath(path)}" for reading.') from exc
    if not data:
        raise GfxError(f'Failed to read "{os.fspath(path)}".')
    return data


def read_whole_file_zero_padded(path: PathLike, pad_amount: int) -> bytes:
    """Read a whole file and append ``pad_amount`` zero bytes."""
    return read_whole_file(path) + bytes(pad_amount)


def write_whole_file(path: PathLike, data: bytes) -> None:
    """Write ``data`` to ``path``; writing nothing is an error."""
    try:
        with open(path, "wb") as fp:
            if not data:
                raise GfxError(f'Failed to write to "{os.fspath(path)}".')
            fp.write(data)
    except OSError as exc:
        raise GfxError(f'Failed to open "{os.fspath(path)}" for writing.') from exc