"""Lists every file a source file depends on, following includes."""

from __future__ import annotations

import sys
from collections import deque
from typing import Iterable, Optional, Sequence

from .asm_file import ScanincError
from .source_file import SourceFile, SourceFileType

USAGE = "Usage: scaninc [-I INCLUDE_PATH] FILE_PATH"


def can_open_file(path: str) -> bool:
    """Return whether ``path`` can be opened for reading."""
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def scan_dependencies(path: str, include_dirs: Iterable[str] = ()) -> list[str]:
    """Return the sorted dependencies of ``path``, searched in ``include_dirs``.

    Each include directory is used as a plain prefix, so it should end in "/".
    """
    search_dirs = list(include_dirs)
    dependencies: set[str] = set()
    to_process = deque([path])

    while to_process:
        source = SourceFile(to_process.popleft())
        search_dirs.append(source.src_dir)

        dependencies.update(source.incbins)

        for include in sorted(source.includes):
            exists = False
            candidate = ""
            for include_dir in search_dirs:
                candidate = include_dir + include
                if can_open_file(candidate):
                    exists = True
                    break
            if not exists and source.file_type in (SourceFileType.ASM, SourceFileType.INC):
                candidate = include
            if candidate not in dependencies:
                dependencies.add(candidate)
                if exists:
                    to_process.append(candidate)

        search_dirs.pop()

    return sorted(dependencies)


def _parse_args(args: Sequence[str]) -> tuple[list[str], str]:
    include_dirs: list[str] = []
    index = 0
    while len(args) - index > 1:
        arg = args[index]
        if not arg.startswith("-I"):
            raise ScanincError(USAGE)
        include_dir = arg[2:]
        if not include_dir:
            index += 1
            include_dir = args[index]
        if include_dir and not include_dir.endswith("/"):
            include_dir += "/"
        include_dirs.append(include_dir)
        index += 1

    if len(args) - index != 1:
        raise ScanincError(USAGE)
    return include_dirs, args[index]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the dependencies of a source file, one per line."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        include_dirs, path = _parse_args(args)
        dependencies = scan_dependencies(path, include_dirs)
    except ScanincError as exc:
        print(exc, file=sys.stderr)
        return 1
    for dependency in dependencies:
        print(dependency)
    return 0


if __name__ == "__main__":
    sys.exit(main())