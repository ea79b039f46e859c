"""Four- and five-level page tables for a simulated amd64 address space."""

from __future__ import annotations

import enum
from collections.abc import Callable
from typing import Optional

from hivekit.elf import PAGE_SIZE, Region
from hivekit.prot import UNIT_GIB, UNIT_MIB, Prot, align_down

__all__ = [
    "PTE_ADDR_MASK",
    "PTE_P",
    "PTE_RW",
    "PTE_US",
    "PTE_PWT",
    "PTE_PCD",
    "PTE_ACC",
    "PTE_DIRTY",
    "PTE_PS",
    "PTE_GLOBAL",
    "PTE_NX",
    "LOWER_HALF_ENTRIES",
    "Level",
    "PageSize",
    "PmapError",
    "AddressSpace",
    "level_index",
    "prot_to_pte",
]

PTE_ADDR_MASK = 0x000FFFFFFFFFF000
PTE_P = 1 << 0
PTE_RW = 1 << 1
PTE_US = 1 << 2
PTE_PWT = 1 << 3
PTE_PCD = 1 << 4
PTE_ACC = 1 << 5
PTE_DIRTY = 1 << 6
PTE_PS = 1 << 7
PTE_GLOBAL = 1 << 8
PTE_NX = 1 << 63

# Top-level entries that cover the lower (user) half of the address space.
LOWER_HALF_ENTRIES = 256

_TABLE_FLAGS = PTE_P | PTE_RW | PTE_US


class PmapError(Exception):
    """Raised when a mapping cannot be created."""


class Level(enum.IntEnum):
    """Paging structure levels, from the page table up to PML5."""

    PML1 = 0
    PML2 = 1
    PML3 = 2
    PML4 = 3
    PML5 = 4


_INDEX_FIELDS = {
    Level.PML5: (47, 0x3FF),
    Level.PML4: (39, 0x1FF),
    Level.PML3: (30, 0x1FF),
    Level.PML2: (21, 0x1FF),
    Level.PML1: (12, 0x1FF),
}


class PageSize(enum.IntEnum):
    """Page sizes a mapping may request."""

    SIZE_4K = 0
    SIZE_2M = 1
    SIZE_1G = 2

    @property
    def alignment(self) -> int:
        """The boundary a mapping of this size is aligned to."""
        return _PAGE_ALIGNMENT[self]


_PAGE_ALIGNMENT = {
    PageSize.SIZE_4K: 4096,
    PageSize.SIZE_2M: UNIT_MIB * 2,
    PageSize.SIZE_1G: UNIT_GIB,
}

# Huge pages are not supported yet.
_SUPPORTED_SIZES = frozenset({PageSize.SIZE_4K})


def level_index(vma: int, level: Level) -> int:
    """Index into the paging structure at ``level`` used to translate ``vma``."""
    try:
        shift, mask = _INDEX_FIELDS[Level(level)]
    except ValueError:
        raise ValueError(f"unknown paging level: {level}") from None
    return (vma >> shift) & mask


def prot_to_pte(prot: Prot) -> int:
    """Convert protection flags into page table entry bits."""
    flags = PTE_P | PTE_NX
    if prot & Prot.WRITE:
        flags |= PTE_RW
    if prot & Prot.EXEC:
        flags &= ~PTE_NX
    if prot & Prot.USER:
        flags |= PTE_US
    return flags


class _BumpAllocator:
    """Hands out ever-increasing physical page ranges."""

    def __init__(self, start: int = 0x100000) -> None:
        self._next = start

    def __call__(self, count: int) -> int:
        base = self._next
        self._next += count * PAGE_SIZE
        return base


class AddressSpace:
    """A virtual address space backed by simulated paging structures.

    ``alloc_pages(count)`` returns the physical base of ``count`` fresh pages,
    or 0 when memory is exhausted. Without one, pages come from a private
    allocator that never runs out.
    """

    def __init__(
        self,
        alloc_pages: Optional[Callable[[int], int]] = None,
        *,
        five_level: bool = False,
    ) -> None:
        self._alloc = alloc_pages if alloc_pages is not None else _BumpAllocator()
        self._tables: dict[int, dict[int, int]] = {}
        self.top_level = Level.PML5 if five_level else Level.PML4
        self.cr3 = self._new_table()

    def _new_table(self) -> int:
        phys = self._alloc(1)
        if phys == 0:
            raise PmapError("out of physical memory for a paging structure")
        phys &= PTE_ADDR_MASK
        self._tables[phys] = {}
        return phys

    def _level_base(
        self, vma: int, level: Level, alloc: bool
    ) -> Optional[dict[int, int]]:
        table = self._tables[self.cr3 & PTE_ADDR_MASK]
        current = self.top_level
        while current > level:
            index = level_index(vma, current)
            entry = table.get(index, 0)
            if entry & PTE_P:
                table = self._tables[entry & PTE_ADDR_MASK]
            elif not alloc:
                return None
            else:
                phys = self._new_table()
                table[index] = phys | _TABLE_FLAGS
                table = self._tables[phys]
            current = Level(current - 1)
        return table

    def map(self, vma: int, pma: int, prot: Prot, pagesize: PageSize) -> None:
        """Map the page holding ``vma`` to the physical address ``pma``."""
        if pagesize not in _SUPPORTED_SIZES:
            raise PmapError(f"unsupported page size: {pagesize!r}")
        vma = align_down(vma, PageSize(pagesize).alignment)
        table = self._level_base(vma, Level.PML1, alloc=True)
        if table is None:
            raise PmapError(f"no page table for {vma:#x}")
        table[level_index(vma, Level.PML1)] = pma | prot_to_pte(prot)

    def map_region(self, region: Region, prot: Prot) -> None:
        """Map every page of ``region`` with ``prot``."""
        for offset in range(0, region.length, PAGE_SIZE):
            self.map(
                region.vma + offset,
                region.pma + offset,
                prot,
                PageSize.SIZE_4K,
            )

    def translate(self, vma: int) -> Optional[int]:
        """Return the physical address ``vma`` maps to, or None if unmapped."""
        table = self._level_base(vma, Level.PML1, alloc=False)
        if table is None:
            return None
        entry = table.get(level_index(vma, Level.PML1), 0)
        if not entry & PTE_P:
            return None
        return (entry & PTE_ADDR_MASK) | (vma & (PAGE_SIZE - 1))

    def clear_lower_half(self) -> None:
        """Drop every top-level entry that covers the lower half."""
        top = self._tables[self.cr3 & PTE_ADDR_MASK]
        for index in range(LOWER_HALF_ENTRIES):
            top.pop(index, None)