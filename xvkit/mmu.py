"""x86 segment and gate descriptors and paging address arithmetic."""

import struct
from dataclasses import dataclass
from typing import ClassVar

UINT_MASK = 0xFFFFFFFF

# Eflags register.
FL_IF = 0x00000200

# Control register flags.
CR0_PE = 0x00000001
CR0_WP = 0x00010000
CR0_PG = 0x80000000
CR4_PSE = 0x00000010

# Segment selectors.
SEG_KCODE = 1
SEG_KDATA = 2
SEG_UCODE = 3
SEG_UDATA = 4
SEG_TSS = 5
NSEGS = 6

DPL_USER = 0x3

# Application segment type bits.
STA_X = 0x8
STA_W = 0x2
STA_R = 0x2

# System segment type bits.
STS_T32A = 0x9
STS_IG32 = 0xE
STS_TG32 = 0xF

# Paging.
NPDENTRIES = 1024
NPTENTRIES = 1024
PGSIZE = 4096
PTXSHIFT = 12
PDXSHIFT = 22

PTE_P = 0x001
PTE_W = 0x002
PTE_U = 0x004
PTE_PS = 0x080


def _check_fields(obj, layout):
    for name, width in layout:
        value = getattr(obj, name)
        if not 0 <= value < (1 << width):
            raise ValueError(f"{name}={value:#x} does not fit in {width} bits")


def _pack(obj, layout):
    value = 0
    shift = 0
    for name, width in layout:
        value |= getattr(obj, name) << shift
        shift += width
    return value.to_bytes(8, "little")


def _unpack(layout, data):
    if len(data) != 8:
        raise ValueError(f"a descriptor is 8 bytes, got {len(data)}")
    value = int.from_bytes(data, "little")
    values = {}
    for name, width in layout:
        values[name] = value & ((1 << width) - 1)
        value >>= width
    return values


@dataclass(frozen=True)
class SegDesc:
    """A segment descriptor as held in the GDT."""

    lim_15_0: int
    base_15_0: int
    base_23_16: int
    type: int
    s: int
    dpl: int
    p: int
    lim_19_16: int
    avl: int
    rsv1: int
    db: int
    g: int
    base_31_24: int

    _LAYOUT: ClassVar[tuple] = (
        ("lim_15_0", 16),
        ("base_15_0", 16),
        ("base_23_16", 8),
        ("type", 4),
        ("s", 1),
        ("dpl", 2),
        ("p", 1),
        ("lim_19_16", 4),
        ("avl", 1),
        ("rsv1", 1),
        ("db", 1),
        ("g", 1),
        ("base_31_24", 8),
    )

    def __post_init__(self):
        _check_fields(self, self._LAYOUT)

    def to_bytes(self):
        """Return the 8-byte in-memory form of the descriptor."""
        return _pack(self, self._LAYOUT)

    @classmethod
    def from_bytes(cls, data):
        """Decode a descriptor from its 8-byte in-memory form."""
        return cls(**_unpack(cls._LAYOUT, bytes(data)))


@dataclass(frozen=True)
class GateDesc:
    """An interrupt or trap gate descriptor as held in the IDT."""

    off_15_0: int
    cs: int
    args: int
    rsv1: int
    type: int
    s: int
    dpl: int
    p: int
    off_31_16: int

    _LAYOUT: ClassVar[tuple] = (
        ("off_15_0", 16),
        ("cs", 16),
        ("args", 5),
        ("rsv1", 3),
        ("type", 4),
        ("s", 1),
        ("dpl", 2),
        ("p", 1),
        ("off_31_16", 16),
    )

    def __post_init__(self):
        _check_fields(self, self._LAYOUT)

    def to_bytes(self):
        """Return the 8-byte in-memory form of the gate."""
        return _pack(self, self._LAYOUT)


def seg(type_, base, lim, dpl):
    """Build a normal segment with a limit in 4 KiB units."""
    base &= UINT_MASK
    lim &= UINT_MASK
    return SegDesc(
        lim_15_0=(lim >> 12) & 0xFFFF,
        base_15_0=base & 0xFFFF,
        base_23_16=(base >> 16) & 0xFF,
        type=type_,
        s=1,
        dpl=dpl,
        p=1,
        lim_19_16=lim >> 28,
        avl=0,
        rsv1=0,
        db=1,
        g=1,
        base_31_24=base >> 24,
    )


def seg16(type_, base, lim, dpl):
    """Build a segment with a byte-granular limit."""
    base &= UINT_MASK
    lim &= UINT_MASK
    return SegDesc(
        lim_15_0=lim & 0xFFFF,
        base_15_0=base & 0xFFFF,
        base_23_16=(base >> 16) & 0xFF,
        type=type_,
        s=1,
        dpl=dpl,
        p=1,
        lim_19_16=(lim >> 16) & 0xF,
        avl=0,
        rsv1=0,
        db=1,
        g=0,
        base_31_24=base >> 24,
    )


def seg_asm(type_, base, lim):
    """Return the raw bytes the boot assembler emits for a segment."""
    return struct.pack(
        "<HHBBBB",
        (lim >> 12) & 0xFFFF,
        base & 0xFFFF,
        (base >> 16) & 0xFF,
        0x90 | type_,
        0xC0 | ((lim >> 28) & 0xF),
        (base >> 24) & 0xFF,
    )


def set_gate(istrap, sel, off, dpl):
    """Build an interrupt gate, or a trap gate when istrap is true."""
    off &= UINT_MASK
    return GateDesc(
        off_15_0=off & 0xFFFF,
        cs=sel,
        args=0,
        rsv1=0,
        type=STS_TG32 if istrap else STS_IG32,
        s=0,
        dpl=dpl,
        p=1,
        off_31_16=off >> 16,
    )


def pdx(va):
    """Page directory index of a virtual address."""
    return ((va & UINT_MASK) >> PDXSHIFT) & 0x3FF


def ptx(va):
    """Page table index of a virtual address."""
    return ((va & UINT_MASK) >> PTXSHIFT) & 0x3FF


def pgaddr(d, t, o):
    """Build a virtual address from directory index, table index and offset."""
    return (d << PDXSHIFT | t << PTXSHIFT | o) & UINT_MASK


def pgroundup(sz):
    """Round up to the next page boundary."""
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1) & UINT_MASK


def pgrounddown(a):
    """Round down to a page boundary."""
    return a & ~(PGSIZE - 1) & UINT_MASK


def pte_addr(pte):
    """Physical address held in a page table entry."""
    return pte & UINT_MASK & ~0xFFF


def pte_flags(pte):
    """Flag bits of a page table entry."""
    return pte & 0xFFF