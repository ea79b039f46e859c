"""Memory archives, archive lookup, ELF64 loading, amd64 page-table modelling and small formatting helpers."""

__version__ = "0.1.0"
__all__ = ["fmt", "prot", "elfdefs", "elf", "pmap", "memar", "initrd"]