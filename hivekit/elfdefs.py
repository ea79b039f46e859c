"""ELF64 identification constants, enumerations and header records."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import ClassVar, Union

__all__ = [
    "ELFMAG",
    "SELFMAG",
    "EI_NIDENT",
    "EI_MAG0",
    "EI_CLASS",
    "EI_DATA",
    "EI_VERSION",
    "EI_OSABI",
    "EI_ABIVERSION",
    "EI_PAD",
    "EV_NONE",
    "EV_CURRENT",
    "ElfClass",
    "ElfData",
    "ElfType",
    "Machine",
    "ProgramType",
    "SegmentFlag",
    "ElfHeader",
    "ProgramHeader",
]

BytesLike = Union[bytes, bytearray, memoryview]

ELFMAG = b"\x7fELF"
SELFMAG = 4
EI_NIDENT = 16

EI_MAG0 = 0
EI_CLASS = 4
EI_DATA = 5
EI_VERSION = 6
EI_OSABI = 7
EI_ABIVERSION = 8
EI_PAD = 9

EV_NONE = 0
EV_CURRENT = 1


class ElfClass(enum.IntEnum):
    """File class stored at ``EI_CLASS``."""

    NONE = 0
    ELF32 = 1
    ELF64 = 2


class ElfData(enum.IntEnum):
    """Data encoding stored at ``EI_DATA``."""

    NONE = 0
    LSB = 1
    MSB = 2


class ElfType(enum.IntEnum):
    """Object file type."""

    NONE = 0
    REL = 1
    EXEC = 2
    DYN = 3
    CORE = 4
    LOOS = 0xFE00
    HIOS = 0xFEFF
    LOPROC = 0xFF00
    HIPROC = 0xFFFF


class Machine(enum.IntEnum):
    """Target architecture."""

    NONE = 0
    M32 = 1
    SPARC = 2
    I386 = 3
    M68K = 4
    M88K = 5
    IAMCU = 6
    I860 = 7
    MIPS = 8
    S370 = 9
    MIPS_RS3_LE = 10
    PARISC = 15
    VPP500 = 17
    SPARC32PLUS = 18
    I960 = 19
    PPC = 20
    PPC64 = 21
    S390 = 22
    SPU = 23
    V800 = 36
    FR20 = 37
    RH32 = 38
    RCE = 39
    ARM = 40
    FAKE_ALPHA = 41
    SH = 42
    SPARCV9 = 43
    TRICORE = 44
    ARC = 45
    H8_300 = 46
    H8_300H = 47
    H8S = 48
    H8_500 = 49
    IA_64 = 50
    MIPS_X = 51
    COLDFIRE = 52
    M68HC12 = 53
    MMA = 54
    PCP = 55
    NCPU = 56
    NDR1 = 57
    STARCORE = 58
    ME16 = 59
    ST100 = 60
    TINYJ = 61
    X86_64 = 62
    PDSP = 63
    PDP10 = 64
    PDP11 = 65
    FX66 = 66
    ST9PLUS = 67
    ST7 = 68
    M68HC16 = 69
    M68HC11 = 70
    M68HC08 = 71
    M68HC05 = 72
    SVX = 73
    ST19 = 74
    VAX = 75
    CRIS = 76
    JAVELIN = 77
    FIREPATH = 78
    ZSP = 79
    MMIX = 80
    HUANY = 81
    PRISM = 82
    AVR = 83
    FR30 = 84
    D10V = 85
    D30V = 86
    V850 = 87
    M32R = 88
    MN10300 = 89
    MN10200 = 90
    PJ = 91
    OPENRISC = 92
    ARC_COMPACT = 93
    XTENSA = 94
    VIDEOCORE = 95
    TMM_GPP = 96
    NS32K = 97
    TPC = 98
    SNP1K = 99
    ST200 = 100
    IP2K = 101
    MAX = 102
    CR = 103
    F2MC16 = 104
    MSP430 = 105
    BLACKFIN = 106
    SE_C33 = 107
    SEP = 108
    ARCA = 109
    UNICORE = 110
    EXCESS = 111
    DXP = 112
    ALTERA_NIOS2 = 113
    CRX = 114
    XGATE = 115
    C166 = 116
    M16C = 117
    DSPIC30F = 118
    CE = 119
    M32C = 120
    TSK3000 = 131
    RS08 = 132
    SHARC = 133
    ECOG2 = 134
    SCORE7 = 135
    DSP24 = 136
    VIDEOCORE3 = 137
    LATTICEMICO32 = 138
    SE_C17 = 139
    TI_C6000 = 140
    TI_C2000 = 141
    TI_C5500 = 142
    TI_ARP32 = 143
    TI_PRU = 144
    MMDSP_PLUS = 160
    CYPRESS_M8C = 161
    R32C = 162
    TRIMEDIA = 163
    QDSP6 = 164
    I8051 = 165
    STXP7X = 166
    NDS32 = 167
    ECOG1X = 168
    MAXQ30 = 169
    XIMO16 = 170
    MANIK = 171
    CRAYNV2 = 172
    RX = 173
    METAG = 174
    MCST_ELBRUS = 175
    ECOG16 = 176
    CR16 = 177
    ETPU = 178
    SLE9X = 179
    L10M = 180
    K10M = 181
    AARCH64 = 183
    AVR32 = 185
    STM8 = 186
    TILE64 = 187
    TILEPRO = 188
    MICROBLAZE = 189
    CUDA = 190
    TILEGX = 191
    CLOUDSHIELD = 192
    COREA_1ST = 193
    COREA_2ND = 194
    ARC_COMPACT2 = 195
    OPEN8 = 196
    RL78 = 197
    VIDEOCORE5 = 198
    R78KOR = 199
    M56800EX = 200
    BA1 = 201
    BA2 = 202
    XCORE = 203
    MCHP_PIC = 204
    KM32 = 210
    KMX32 = 211
    EMX16 = 212
    EMX8 = 213
    KVARC = 214
    CDP = 215
    COGE = 216
    COOL = 217
    NORC = 218
    CSR_KALIMBA = 219
    Z80 = 220
    VISIUM = 221
    FT32 = 222
    MOXIE = 223
    AMDGPU = 224
    RISCV = 243
    BPF = 247
    ARC_A5 = 93
    ALPHA = 0x9026


class ProgramType(enum.IntEnum):
    """Program header segment type."""

    NULL = 0
    LOAD = 1
    DYNAMIC = 2
    INTERP = 3
    NOTE = 4
    SHLIB = 5
    PHDR = 6
    TLS = 7
    LOOS = 0x60000000
    GNU_EH_FRAME = 0x6474E550
    GNU_STACK = 0x6474E551
    GNU_RELRO = 0x6474E552
    LOSUNW = 0x6FFFFFFA
    SUNWBSS = 0x6FFFFFFA
    SUNWSTACK = 0x6FFFFFFB
    HISUNW = 0x6FFFFFFF
    HIOS = 0x6FFFFFFF
    LOPROC = 0x70000000
    HIPROC = 0x7FFFFFFF


class SegmentFlag(enum.IntFlag):
    """Program header segment permission flags."""

    X = 1 << 0
    W = 1 << 1
    R = 1 << 2
    MASKOS = 0x0FF00000
    MASKPROC = 0xF0000000


def _default_ident() -> bytes:
    head = ELFMAG + bytes((ElfClass.ELF64, ElfData.LSB, EV_CURRENT))
    return head.ljust(EI_NIDENT, b"\0")


def _unpack(layout: struct.Struct, data: BytesLike, what: str) -> tuple:
    if len(data) < layout.size:
        raise ValueError(
            f"{what} needs {layout.size} bytes, got {len(data)}"
        )
    return layout.unpack_from(data, 0)


def _pack(layout: struct.Struct, values: tuple, what: str) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise ValueError(f"cannot encode {what}: {exc}") from None


@dataclass(frozen=True)
class ProgramHeader:
    """One little-endian ELF64 program header entry."""

    type: int = ProgramType.NULL
    flags: int = 0
    offset: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<IIQQQQQQ")
    SIZE: ClassVar[int] = _LAYOUT.size

    @classmethod
    def from_bytes(cls, data: BytesLike) -> ProgramHeader:
        """Decode a program header from the start of ``data``."""
        return cls(*_unpack(cls._LAYOUT, data, "program header"))

    def to_bytes(self) -> bytes:
        """Encode this program header."""
        values = (
            self.type,
            self.flags,
            self.offset,
            self.vaddr,
            self.paddr,
            self.filesz,
            self.memsz,
            self.align,
        )
        return _pack(self._LAYOUT, values, "program header")


@dataclass(frozen=True)
class ElfHeader:
    """The little-endian ELF64 file header."""

    ident: bytes = _default_ident()
    type: int = ElfType.NONE
    machine: int = Machine.NONE
    version: int = EV_CURRENT
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 64
    phentsize: int = ProgramHeader.SIZE
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<16sHHIQQQIHHHHHH")
    SIZE: ClassVar[int] = _LAYOUT.size

    def __post_init__(self) -> None:
        ident = bytes(self.ident)
        if len(ident) != EI_NIDENT:
            raise ValueError(
                f"ident must be {EI_NIDENT} bytes, got {len(ident)}"
            )
        object.__setattr__(self, "ident", ident)

    @classmethod
    def from_bytes(cls, data: BytesLike) -> ElfHeader:
        """Decode a file header from the start of ``data``."""
        return cls(*_unpack(cls._LAYOUT, data, "ELF header"))

    def to_bytes(self) -> bytes:
        """Encode this file header."""
        values = (
            self.ident,
            self.type,
            self.machine,
            self.version,
            self.entry,
            self.phoff,
            self.shoff,
            self.flags,
            self.ehsize,
            self.phentsize,
            self.phnum,
            self.shentsize,
            self.shnum,
            self.shstrndx,
        )
        return _pack(self._LAYOUT, values, "ELF header")