"""Lookup of files inside an in-memory archive image."""

from __future__ import annotations

import os
import struct
from typing import Optional, Union

__all__ = ["INITRD_PATH", "MEMAR_MAGIC", "FILE_NAME_MAX", "Initrd"]

INITRD_PATH = "/boot/initrd.mr"
MEMAR_MAGIC = b"LORD"
FILE_NAME_MAX = 99

# magic, header size, file size and name length, packed little-endian.
_HEADER = struct.Struct("<4sQQB")


def _name_matches(name: bytes, fname_size: int, path: bytes) -> bool:
    probe = (path + b"\0")[:fname_size]
    return len(probe) == fname_size and probe == name


class Initrd:
    """An archive image whose entries can be found by path."""

    def __init__(self, data: Union[bytes, bytearray, memoryview] = b"") -> None:
        self._data = bytes(data)

    def lookup(self, path: Union[str, bytes]) -> Optional[bytes]:
        """Return the contents of the entry named ``path``, or None.

        A single leading slash is ignored. An entry matches when its stored
        name equals the first bytes of ``path``. The search stops at the
        first header without the archive magic.
        """
        wanted = os.fsencode(path)
        if wanted.startswith(b"/"):
            wanted = wanted[1:]

        data = self._data
        end = len(data)
        pos = 0
        while pos < end:
            if end - pos < _HEADER.size:
                return None
            magic, hdr_size, file_size, fname_size = _HEADER.unpack_from(data, pos)
            if magic != MEMAR_MAGIC:
                return None

            name_start = pos + _HEADER.size
            name = data[name_start:name_start + fname_size]
            if len(name) == fname_size and _name_matches(name, fname_size, wanted):
                start = pos + hdr_size
                return data[start:start + file_size]

            step = hdr_size + file_size
            if step == 0:
                return None
            pos += step
        return None