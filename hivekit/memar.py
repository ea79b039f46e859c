"""Build a memory archive from a directory tree."""

from __future__ import annotations

import getopt
import os
import struct
import sys
from collections.abc import Callable, Iterator
from typing import BinaryIO, Optional, Union

__all__ = [
    "MEMAR_MAGIC",
    "FILE_NAME_MAX",
    "FILE_ALIGN",
    "DEFAULT_OUTPUT",
    "HEADER_FIXED_SIZE",
    "MemarError",
    "file_header",
    "iter_tree",
    "write_archive",
    "main",
]

PathLike = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]

MEMAR_MAGIC = b"LORD"
FILE_NAME_MAX = 99
FILE_ALIGN = 8
DEFAULT_OUTPUT = "initrd.mr"

# magic, header size and file size, packed little-endian.
_HEADER_PREFIX = struct.Struct("<4sQQ")
HEADER_FIXED_SIZE = _HEADER_PREFIX.size

_HELP = (
    "memar - generate a memory archive\n"
    "------------------------------------\n"
    "[-h]   Display this help menu\n"
    "[-i]   Input directory to generate from\n"
    "[-o]   Output archive file\n"
)


class MemarError(Exception):
    """Raised when an archive cannot be built."""


def _archive_name(path: bytes) -> bytes:
    slash = path.find(b"/")
    if slash < 0:
        raise MemarError(f"path has no root component: {path!r}")
    return path[slash + 1:][:FILE_NAME_MAX - 1]


def file_header(path: PathLike, file_size: int) -> bytes:
    """Encode the header that precedes a file in the archive.

    The stored name is ``path`` without its first component, truncated to
    ``FILE_NAME_MAX - 1`` bytes and written without a terminator.
    """
    if file_size < 0:
        raise ValueError("file size must not be negative")
    name = _archive_name(os.fsencode(path))
    hdr_size = HEADER_FIXED_SIZE + len(name)
    return _HEADER_PREFIX.pack(MEMAR_MAGIC, hdr_size, file_size) + name


def _walk(path: str) -> Iterator[tuple[str, str]]:
    with os.scandir(path) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        if entry.name.startswith("."):
            continue
        child = f"{path}/{entry.name}"
        if entry.is_dir(follow_symlinks=False):
            yield "d", child
            yield from _walk(child)
        elif entry.is_file(follow_symlinks=False):
            yield "f", child


def iter_tree(root: PathLike) -> Iterator[tuple[str, str]]:
    """Yield ``("d", path)`` and ``("f", path)`` for everything under ``root``.

    Hidden entries are skipped, directories are entered right after they
    are yielded, and symbolic links and special files are ignored.
    """
    yield from _walk(os.fsdecode(root))


def _write_file(out: BinaryIO, path: str, log: Callable[[str], object]) -> bool:
    try:
        with open(path, "rb") as src:
            data = src.read()
    except OSError as exc:
        log(f'could not open "{path}": {exc.strerror}')
        return False

    out.write(file_header(path, len(data)))
    out.write(data)
    pad = -len(data) % FILE_ALIGN
    if pad:
        out.write(bytes(pad))
    return True


def write_archive(
    input_dir: PathLike,
    output: PathLike = DEFAULT_OUTPUT,
    log: Optional[Callable[[str], object]] = print,
) -> int:
    """Concatenate every file under ``input_dir`` into ``output``.

    Returns the number of files stored.
    """
    emit: Callable[[str], object] = log if log is not None else (lambda line: None)
    root = os.fsdecode(input_dir)
    if not os.path.exists(root):
        raise MemarError(f'cannot open "{root}"')
    if not os.path.isdir(root):
        raise MemarError(f'"{root}" is not a directory')

    count = 0
    with open(output, "wb") as out:
        for kind, path in iter_tree(root):
            emit(f"[{kind}] {path}")
            if kind == "f" and _write_file(out, path, emit):
                count += 1
    return count


def main(argv: Optional[list[str]] = None) -> int:
    """Command-line entry point."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        opts, _ = getopt.getopt(args, "hi:o:")
    except getopt.GetoptError as exc:
        print(f"error: {exc}")
        print(_HELP, end="")
        return -1

    input_dir: Optional[str] = None
    output = DEFAULT_OUTPUT
    for opt, value in opts:
        if opt == "-h":
            print(_HELP, end="")
            return -1
        if opt == "-i":
            input_dir = value
        elif opt == "-o":
            output = value

    if input_dir is None:
        print("error: expected input file")
        print(_HELP, end="")
        return -1

    try:
        write_archive(input_dir, output)
    except (MemarError, OSError) as exc:
        print(f"error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())