"""Finds ``#include`` lines and ``INCBIN_*`` macros in C sources."""

from __future__ import annotations

import os

from .asm_file import PathLike, ScanincError, _decode_path, _load_source

_TAB, _SPACE, _LF, _CR, _DQUOTE, _SQUOTE, _BACKSLASH = b'\t \n\r"\'\\'
_HASH, _SLASH, _STAR, _LPAREN, _RPAREN, _COMMA, _LT = b"#/*(),<"

_INCBIN_IDENTS = (
    b"INCBIN_S8",
    b"INCBIN_U8",
    b"INCBIN_S16",
    b"INCBIN_U16",
    b"INCBIN_S32",
    b"INCBIN_U32",
)


class CFile:
    """A C source or header scanned for the files it depends on."""

    def __init__(self, path: PathLike) -> None:
        self.path = os.fspath(path)
        self._buffer = _load_source(self.path)
        self._size = len(self._buffer)
        self._pos = 0
        self._line_num = 1
        self.incbins: set[str] = set()
        self.includes: set[str] = set()

    def _error(self, message: str) -> ScanincError:
        return ScanincError(f"{self.path}:{self._line_num} {message}")

    def _at(self, offset: int = 0) -> int:
        index = self._pos + offset
        return self._buffer[index] if index < self._size else 0

    def find_incbins(self) -> None:
        """Scan the file, filling ``includes`` and ``incbins``."""
        string_char = 0
        while self._pos < self._size:
            char = self._at()
            if string_char:
                if char == string_char:
                    self._pos += 1
                    string_char = 0
                elif char == _BACKSLASH and self._at(1) == string_char:
                    self._pos += 2
                else:
                    if char == _LF:
                        self._line_num += 1
                    self._pos += 1
                continue

            self._skip_whitespace()
            self._check_include()
            self._check_incbin()

            if self._pos >= self._size:
                break

            char = self._at()
            self._pos += 1
            if char == _LF:
                self._line_num += 1
            elif char in (_DQUOTE, _SQUOTE):
                string_char = char
            elif char == 0:
                raise self._error("unexpected null character")

    def _consume_horizontal_whitespace(self) -> bool:
        if self._at() in (_TAB, _SPACE):
            self._pos += 1
            return True
        return False

    def _consume_newline(self) -> bool:
        if self._at() == _LF:
            self._pos += 1
            self._line_num += 1
            return True
        if self._at() == _CR and self._at(1) == _LF:
            self._pos += 2
            self._line_num += 1
            return True
        return False

    def _consume_comment(self) -> bool:
        if self._at() == _SLASH and self._at(1) == _STAR:
            self._pos += 2
            while not (self._at() == _STAR and self._at(1) == _SLASH):
                if self._at() == 0:
                    return False
                if not self._consume_newline():
                    self._pos += 1
            self._pos += 2
            return True
        if self._at() == _SLASH and self._at(1) == _SLASH:
            self._pos += 2
            while not self._consume_newline():
                if self._at() == 0:
                    return False
                self._pos += 1
            return True
        return False

    def _skip_whitespace(self) -> None:
        while (
            self._consume_horizontal_whitespace()
            or self._consume_newline()
            or self._consume_comment()
        ):
            pass

    def _check_identifier(self, ident: bytes) -> bool:
        return self._buffer.startswith(ident, self._pos)

    def _check_include(self) -> None:
        if self._at() != _HASH or not self._check_identifier(b"#include"):
            return
        self._pos += len(b"#include")
        self._consume_horizontal_whitespace()
        path = self._read_path()
        if path:
            self.includes.add(path)

    def _check_incbin(self) -> None:
        if not self._check_identifier(b"INCBIN_"):
            return
        ident = next((i for i in _INCBIN_IDENTS if self._check_identifier(i)), None)
        if ident is None:
            return

        old_pos, old_line_num = self._pos, self._line_num
        self._pos += len(ident)
        self._skip_whitespace()

        if self._at() != _LPAREN:
            self._pos, self._line_num = old_pos, old_line_num
            return
        self._pos += 1

        while True:
            self._skip_whitespace()
            path = self._read_path()
            self._skip_whitespace()
            self.incbins.add(path)
            if self._at() != _COMMA:
                break
            self._pos += 1

        if self._at() != _RPAREN:
            raise self._error("expected ')'")
        self._pos += 1

    def _read_path(self) -> str:
        if self._at() != _DQUOTE:
            if self._at() == _LT:
                return ""
            raise self._error("expected '\"' or '<'")
        self._pos += 1
        start = self._pos

        while self._at() != _DQUOTE:
            char = self._at()
            if char == 0:
                if self._pos >= self._size:
                    raise self._error("unexpected EOF in path string")
                raise self._error("unexpected null character in path string")
            if char in (_CR, _LF):
                raise self._error("unexpected end of line character in path string")
            if char == _BACKSLASH:
                raise self._error("unexpected escape in path string")
            self._pos += 1

        self._pos += 1
        return _decode_path(self._buffer[start : self._pos - 1])