"""Memory protection flags, alignment helpers and storage units."""

from __future__ import annotations

import enum

__all__ = ["Prot", "align_up", "align_down", "UNIT_GIB", "UNIT_MIB"]

UNIT_GIB = 0x40000000
UNIT_MIB = 0x100000


class Prot(enum.IntFlag):
    """Protection flags for a memory mapping.

    ``READ`` is zero: every mapping is readable, so it adds no bits.
    """

    READ = 0x00
    WRITE = 1 << 0
    EXEC = 1 << 1
    USER = 1 << 2


def _check_align(align: int) -> None:
    if align <= 0 or align & (align - 1):
        raise ValueError(f"alignment must be a positive power of two: {align}")


def align_up(value: int, align: int) -> int:
    """Round ``value`` up to the nearest multiple of ``align``."""
    _check_align(align)
    return (value + align - 1) & ~(align - 1)


def align_down(value: int, align: int) -> int:
    """Round ``value`` down to the nearest multiple of ``align``."""
    _check_align(align)
    return value & ~(align - 1)