"""Reading ELF executable headers and program headers."""

import struct
from dataclasses import dataclass

ELF_MAGIC = 0x464C457F

ELF_PROG_LOAD = 1

ELF_PROG_FLAG_EXEC = 1
ELF_PROG_FLAG_WRITE = 2
ELF_PROG_FLAG_READ = 4

_ELFHDR = struct.Struct("<I12sHHIIIIIHHHHHH")
_PROGHDR = struct.Struct("<8I")

ELFHDR_SIZE = _ELFHDR.size
PROGHDR_SIZE = _PROGHDR.size


class ElfFormatError(ValueError):
    """Raised when data is not a well-formed ELF image."""


@dataclass(frozen=True)
class ElfHeader:
    """The ELF file header."""

    magic: int
    elf: bytes
    type: int
    machine: int
    version: int
    entry: int
    phoff: int
    shoff: int
    flags: int
    ehsize: int
    phentsize: int
    phnum: int
    shentsize: int
    shnum: int
    shstrndx: int

    @classmethod
    def parse(cls, data):
        """Decode the file header at the start of data."""
        if len(data) < ELFHDR_SIZE:
            raise ElfFormatError(f"ELF header needs {ELFHDR_SIZE} bytes, got {len(data)}")
        header = cls(*_ELFHDR.unpack_from(bytes(data[:ELFHDR_SIZE])))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError(f"bad ELF magic {header.magic:#x}")
        return header


@dataclass(frozen=True)
class ProgHeader:
    """An ELF program section header."""

    type: int
    off: int
    vaddr: int
    paddr: int
    filesz: int
    memsz: int
    flags: int
    align: int

    @classmethod
    def parse(cls, data):
        """Decode a program header at the start of data."""
        if len(data) < PROGHDR_SIZE:
            raise ElfFormatError(f"program header needs {PROGHDR_SIZE} bytes, got {len(data)}")
        return cls(*_PROGHDR.unpack_from(bytes(data[:PROGHDR_SIZE])))


def program_headers(data):
    """Yield the program headers of an ELF image in table order."""
    header = ElfHeader.parse(data)
    for i in range(header.phnum):
        start = header.phoff + i * PROGHDR_SIZE
        yield ProgHeader.parse(data[start:start + PROGHDR_SIZE])