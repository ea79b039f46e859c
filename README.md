# hivekit

Tools for building and inspecting the boot-time pieces of a small x86-64 kernel.

| Module | What it does |
| --- | --- |
| `hivekit.memar` | Packs a directory tree into one flat memory archive file. |
| `hivekit.initrd` | Finds files by path inside an archive image held in memory. |
| `hivekit.elfdefs` | ELF64 constants, enumerations and the `ElfHeader` / `ProgramHeader` records. |
| `hivekit.elf` | Checks an ELF64 executable and loads its `PT_LOAD` segments into an address space. |
| `hivekit.pmap` | A model of amd64 four- or five-level page tables. |
| `hivekit.prot` | The `Prot` protection flags, `align_up` / `align_down`, `UNIT_MIB` / `UNIT_GIB`. |
| `hivekit.fmt` | A small `itoa` / `snprintf` formatter plus `strcmp` and `memcmp`. |

No library beyond the standard library is needed.

## Installation

```
pip install .
```

The tests need the `test` extra: `pip install .[test]`, then `pytest`.

## Building an archive

```
memar -i root -o initrd.mr
```

`-i` names the input directory and is required. `-o` names the output file;
the default is `initrd.mr`. `-h` prints the help text. The command prints each
directory it enters as `[d] path` and each file it stores as `[f] path`.

Entries are visited in name order. A directory's contents come right after the
directory itself. Names starting with `.` are skipped, and so are symbolic
links and special files. A stored name is the path without everything up to
and including its first `/`, so `root/sbin/rts` is stored as `sbin/rts`. Names
longer than 98 bytes are cut to 98.

Each file is written as:

| Field | Size |
| --- | --- |
| magic `LORD` | 4 bytes |
| header size (`20 + len(name)`) | 8 bytes, little-endian |
| file size | 8 bytes, little-endian |
| name, no terminator | `len(name)` bytes |
| file contents | file size |
| zero padding to a multiple of 8 | 0 to 7 bytes |

The same work from Python:

```python
from hivekit.memar import write_archive, file_header, iter_tree

count = write_archive("root", "initrd.mr", print)   # number of files stored
```

`write_archive` raises `MemarError` when the input does not exist or is not a
directory. A file that cannot be opened is reported through `log` and left
out. Pass `log=None` for silence.

## Looking up files in an image

```python
from hivekit.initrd import Initrd

rd = Initrd(image_bytes)
data = rd.lookup("/sbin/rts")   # bytes, or None if not found
```

`Initrd` reads a header laid out as the archive header above with one extra
byte: after the two 8-byte sizes comes a one-byte name length, then the name.
The file contents start `header size` bytes after the start of the header, and
the next entry starts `header size + file size` bytes after it. `Initrd` does
not skip padding. This layout is not the one `memar` writes, so an archive
from `memar` cannot be read by `Initrd` as it stands.

A single leading `/` in the path is ignored. An entry matches when its stored
name equals the first bytes of the path. The search stops, returning `None`,
at the first header without the `LORD` magic or at a truncated header.

## Loading an ELF image

```python
from hivekit.elf import load_elf
from hivekit.pmap import AddressSpace

vas = AddressSpace()
elf = load_elf(image_bytes, vas, alloc_pages)
print(hex(elf.entrypoint))
for region in elf.regions:
    print(hex(region.vma), hex(region.pma), region.length, region.prot)
```

`alloc_pages(count)` returns the physical base of `count` fresh pages, or `0`
when memory has run out. `load_elf` accepts only images whose magic is correct,
whose type is `ET_EXEC` and whose version is `EV_CURRENT`. It raises
`ElfError` for any other image, for a truncated header or program header, and
for a failed allocation. Each loadable, non-empty segment becomes a `Region`
rounded up to whole 4 KiB pages. It is mapped readable and user-accessible,
and writable or executable as its flags say (`segment_prot`). Its `memsz`
bytes from the file offset are kept in `Region.data`, zero-filled past the end
of the image.

`elf_verify(header)` and `program_headers(image, header)` can be used on
their own.

## Page tables

```python
from hivekit.pmap import AddressSpace, PageSize
from hivekit.prot import Prot

vas = AddressSpace(five_level=False)
vas.map(0x400000, 0x200000, Prot.WRITE | Prot.USER, PageSize.SIZE_4K)
vas.translate(0x400123)   # 0x200123
vas.clear_lower_half()    # drops top-level entries 0-255
```

Only `PageSize.SIZE_4K` is accepted; other sizes raise `PmapError`.
`prot_to_pte(prot)` gives the entry bits: present and no-execute always,
`RW` for `Prot.WRITE`, no-execute cleared for `Prot.EXEC`, `US` for
`Prot.USER`. `level_index(vma, level)` gives the table index at a `Level`.
Without an allocator, `AddressSpace` takes pages from a private one that never
runs out.

## Formatting

```python
from hivekit.fmt import itoa, snprintf, strcmp, memcmp

itoa(255, 16)                    # '0xFF'
itoa(-42, 10)                    # '-42'
snprintf(64, "%04d-%x", 7, 255)  # '0007-FF'
```

`snprintf(size, fmt, *args)` returns at most `size - 1` characters. It knows
`%c`, `%d`, `%p`, `%x`, `%s` and `%%`. A `%0N` width zero-pads the next `%d`.

## What this package does not do

The page tables, address spaces and physical memory here are models held in
Python objects. Nothing is written to real memory, and nothing boots or runs a
kernel. `load_elf` records segment contents in its `Region` values instead of
copying them anywhere.