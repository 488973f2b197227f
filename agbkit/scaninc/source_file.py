"""A source file of any supported kind, with the files it depends on."""

from __future__ import annotations

import enum
import os

from .asm_file import AsmFile, IncDirectiveType, PathLike, ScanincError
from .c_file import CFile


class SourceFileType(enum.Enum):
    CPP = enum.auto()
    HEADER = enum.auto()
    ASM = enum.auto()
    INC = enum.auto()


_EXTENSIONS = {
    "c": SourceFileType.CPP,
    "s": SourceFileType.ASM,
    "h": SourceFileType.HEADER,
    "inc": SourceFileType.INC,
}


def get_file_type(path: str) -> SourceFileType:
    """Classify a source file by the text after the last dot in its path."""
    dot = path.rfind(".")
    if dot == -1:
        raise ScanincError(f'no file extension in path "{path}"')
    extension = path[dot + 1 :]
    try:
        return _EXTENSIONS[extension]
    except KeyError:
        raise ScanincError(f'Unrecognized extension "{extension}"') from None


def get_dir(path: str) -> str:
    """Return the directory part of ``path`` with its trailing slash, or ""."""
    slash = path.rfind("/")
    return path[: slash + 1] if slash != -1 else ""


class SourceFile:
    """Scans a C, header or assembly file for its includes and incbins."""

    def __init__(self, path: PathLike) -> None:
        self.path = os.fspath(path)
        self.file_type = get_file_type(self.path)
        self.src_dir = get_dir(self.path)
        self.incbins: set[str] = set()
        self.includes: set[str] = set()

        if self.file_type in (SourceFileType.CPP, SourceFileType.HEADER):
            c_file = CFile(self.path)
            c_file.find_incbins()
            self.incbins = set(c_file.incbins)
            self.includes = set(c_file.includes)
        else:
            asm_file = AsmFile(self.path)
            while True:
                directive, found = asm_file.read_until_inc_directive()
                if directive is IncDirectiveType.NONE:
                    break
                if directive is IncDirectiveType.INCLUDE:
                    self.includes.add(found)
                else:
                    self.incbins.add(found)