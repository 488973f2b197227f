"""Finds ``.include`` and ``.incbin`` directives in assembly sources."""

from __future__ import annotations

import enum
import os
from typing import Optional, Union

PathLike = Union[str, "os.PathLike[str]"]

MAX_PATH = 255

_TAB, _SPACE, _LF, _CR, _QUOTE, _BACKSLASH = b'\t \n\r"\\'
_DOT, _HASH, _SEMICOLON, _SLASH, _STAR = b".#;/*"


class ScanincError(Exception):
    """Raised when a source file cannot be read or scanned."""


class IncDirectiveType(enum.Enum):
    NONE = enum.auto()
    INCLUDE = enum.auto()
    INCBIN = enum.auto()


def _load_source(path: str) -> bytes:
    """Read a whole source file; an empty file counts as unreadable."""
    try:
        with open(path, "rb") as fp:
            data = fp.read()
    except OSError as exc:
        raise ScanincError(f'Failed to open "{path}" for reading.') from exc
    if not data:
        raise ScanincError(f'Failed to read "{path}".')
    return data


def _decode_path(raw: bytes) -> str:
    return raw.decode("utf-8", "surrogateescape")


class AsmFile:
    """An assembly source file read line by line for include directives."""

    def __init__(self, path: PathLike) -> None:
        self.path = os.fspath(path)
        self._buffer = _load_source(self.path)
        self._pos = 0
        self._line_num = 1

    def _error(self, message: str) -> ScanincError:
        return ScanincError(f"{self.path}:{self._line_num} {message}")

    def _get_char(self) -> Optional[int]:
        """Return the next character, folding CRLF into LF; None at the end."""
        if self._pos >= len(self._buffer):
            return None
        char = self._buffer[self._pos]
        self._pos += 1
        if char == _CR:
            if self._pos < len(self._buffer) and self._buffer[self._pos] == _LF:
                self._pos += 1
                self._line_num += 1
                return _LF
            raise self._error("CR line endings are not supported")
        if char == _LF:
            self._line_num += 1
        return char

    def _peek_char(self) -> Optional[int]:
        if self._pos >= len(self._buffer):
            return None
        return self._buffer[self._pos]

    def _skip_tabs_and_spaces(self) -> None:
        while self._pos < len(self._buffer) and self._buffer[self._pos] in (_TAB, _SPACE):
            self._pos += 1

    def _match_inc_directive(self, name: bytes) -> Optional[str]:
        if not self._buffer.startswith(name, self._pos):
            return None
        self._pos += len(name)
        self._skip_tabs_and_spaces()
        if self._get_char() != _QUOTE:
            raise self._error(f'no path after ".{name.decode("ascii")}" directive')
        return self._read_path()

    def _read_path(self) -> str:
        start = self._pos
        length = 0
        while True:
            char = self._get_char()
            if char == _QUOTE:
                break
            if char is None:
                raise self._error("unexpected EOF in include string")
            if char == 0:
                raise self._error("unexpected NUL character in include string")
            if char == _LF:
                raise self._error("unexpected end of line character in include string")
            if char == _BACKSLASH:
                raise self._error("unexpected escape in include string")
            length += 1
            if length > MAX_PATH:
                raise self._error("path is too long")
        return _decode_path(self._buffer[start : start + length])

    def _skip_end_of_line_comment(self) -> None:
        while True:
            char = self._get_char()
            if char is None or char == _LF:
                return

    def _skip_multi_line_comment(self) -> None:
        while True:
            char = self._get_char()
            if char is None:
                return
            if char == _STAR and self._peek_char() == _SLASH:
                self._pos += 1
                return

    def _skip_string(self) -> None:
        while True:
            char = self._get_char()
            if char == _QUOTE:
                return
            if char is None:
                raise self._error("unexpected EOF in string")
            if char == _BACKSLASH:
                self._get_char()

    def _skip_rest_of_line(self) -> bool:
        """Consume the rest of the line; return True if the file ended."""
        while True:
            char = self._get_char()
            if char is None:
                return True
            if char == _SEMICOLON:
                self._skip_end_of_line_comment()
                return False
            if char == _SLASH and self._peek_char() == _STAR:
                self._pos += 1
                self._skip_multi_line_comment()
            elif char == _QUOTE:
                self._skip_string()
            elif char == _LF:
                return False

    def read_until_inc_directive(self) -> tuple[IncDirectiveType, str]:
        """Return the next directive and its path.

        ``(IncDirectiveType.NONE, "")`` means the end of the file was reached.
        """
        while True:
            self._skip_tabs_and_spaces()
            found = IncDirectiveType.NONE
            path = ""

            if self._peek_char() in (_DOT, _HASH):
                self._pos += 1
                for directive, name in (
                    (IncDirectiveType.INCBIN, b"incbin"),
                    (IncDirectiveType.INCLUDE, b"include"),
                ):
                    matched = self._match_inc_directive(name)
                    if matched is not None:
                        found, path = directive, matched
                        break

            if self._skip_rest_of_line() or found is not IncDirectiveType.NONE:
                return found, path