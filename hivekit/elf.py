"""Verification and loading of executable ELF64 images."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol, Union

from hivekit.elfdefs import (
    EI_MAG0,
    ELFMAG,
    EV_CURRENT,
    SELFMAG,
    ElfHeader,
    ElfType,
    ProgramHeader,
    ProgramType,
    SegmentFlag,
)
from hivekit.prot import Prot, align_up

__all__ = [
    "PAGE_SIZE",
    "Region",
    "LoadedElf",
    "ElfError",
    "elf_verify",
    "program_headers",
    "segment_prot",
    "load_elf",
]

BytesLike = Union[bytes, bytearray, memoryview]

PAGE_SIZE = 4096


class ElfError(Exception):
    """Raised when an image cannot be verified or loaded."""


@dataclass(frozen=True)
class Region:
    """A span of virtual memory backed by physical pages.

    ``data`` holds the bytes copied to the start of the physical range.
    """

    vma: int
    pma: int
    length: int
    prot: Prot = Prot.READ
    data: bytes = b""


@dataclass(frozen=True)
class LoadedElf:
    """The outcome of loading an image: its entry point and mapped regions."""

    entrypoint: int
    regions: tuple[Region, ...] = ()


class _VirtualSpace(Protocol):
    def map_region(self, region: Region, prot: Prot) -> object: ...


def elf_verify(header: ElfHeader | None) -> bool:
    """Return True if ``header`` describes a loadable executable."""
    if header is None:
        return False
    if header.ident[EI_MAG0:EI_MAG0 + SELFMAG] != ELFMAG:
        return False
    if header.type != ElfType.EXEC:
        return False
    if header.version != EV_CURRENT:
        return False
    return True


def program_headers(image: BytesLike, header: ElfHeader) -> Iterator[ProgramHeader]:
    """Yield each program header of ``image`` in table order."""
    view = memoryview(image)
    for index in range(header.phnum):
        offset = header.phoff + header.phentsize * index
        try:
            yield ProgramHeader.from_bytes(view[offset:])
        except ValueError as exc:
            raise ElfError(f"program header {index} is truncated") from exc


def segment_prot(phdr: ProgramHeader) -> Prot:
    """Protection flags for a user mapping of the segment ``phdr``."""
    prot = Prot.READ | Prot.USER
    if phdr.flags & SegmentFlag.W:
        prot |= Prot.WRITE
    if phdr.flags & SegmentFlag.X:
        prot |= Prot.EXEC
    return prot


def _segment_data(image: BytesLike, offset: int, size: int) -> bytes:
    chunk = bytes(memoryview(image)[offset:offset + size])
    return chunk.ljust(size, b"\0")


def load_elf(
    image: BytesLike,
    vas: _VirtualSpace,
    alloc_pages: Callable[[int], int],
) -> LoadedElf:
    """Map every loadable segment of ``image`` into ``vas``.

    ``alloc_pages(count)`` returns the physical base of ``count`` fresh
    pages, or 0 when memory is exhausted. Each segment is copied
    ``memsz`` bytes long from its file offset.
    """
    try:
        header = ElfHeader.from_bytes(image)
    except ValueError as exc:
        raise ElfError("image is too short for an ELF header") from exc

    if not elf_verify(header):
        raise ElfError("image is not a valid executable")

    regions = []
    for phdr in program_headers(image, header):
        if phdr.type != ProgramType.LOAD or phdr.memsz == 0:
            continue

        prot = segment_prot(phdr)
        misalign = phdr.vaddr & (PAGE_SIZE - 1)
        length = align_up(phdr.memsz + misalign, PAGE_SIZE)
        pma = alloc_pages(length // PAGE_SIZE)
        if pma == 0:
            raise ElfError("out of physical memory")

        region = Region(
            vma=phdr.vaddr,
            pma=pma,
            length=length,
            prot=prot,
            data=_segment_data(image, phdr.offset, phdr.memsz),
        )
        vas.map_region(region, prot)
        regions.append(region)

    return LoadedElf(entrypoint=header.entry, regions=tuple(regions))