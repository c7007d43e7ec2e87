"""Fetching system call arguments from user memory and dispatching calls."""

import struct
import sys
from dataclasses import dataclass

from .constants import Syscall

__all__ = [
    "BadAddress",
    "Process",
    "SyscallTable",
    "fetchint",
    "fetchstr",
    "argint",
    "argptr",
    "argstr",
]

UINT_MASK = 0xFFFFFFFF
_NSYSCALLS = max(Syscall) + 1

_TRACE_NAMES = {
    1: "fork",
    2: "exti",
    3: "wait",
    4: "pipe",
    5: "read",
    7: "exec",
    10: "dup",
    15: "open",
    16: "write",
    21: "close",
}


class BadAddress(ValueError):
    """Raised when a user address lies outside the process's memory."""


@dataclass
class Process:
    """A process's user memory and the registers a system call reads."""

    pid: int
    name: str
    memory: bytearray
    esp: int = 0
    eax: int = 0

    @property
    def sz(self):
        """Size of the user address space in bytes."""
        return len(self.memory)


def fetchint(proc, addr):
    """Read the signed 32-bit integer at user address addr."""
    addr &= UINT_MASK
    if addr >= proc.sz or addr + 4 > proc.sz:
        raise BadAddress(f"int at {addr:#x} outside {proc.sz} bytes")
    return struct.unpack_from("<i", proc.memory, addr)[0]


def fetchstr(proc, addr):
    """Read the NUL-terminated string at user address addr, without the NUL."""
    addr &= UINT_MASK
    if addr >= proc.sz:
        raise BadAddress(f"string at {addr:#x} outside {proc.sz} bytes")
    end = proc.memory.find(0, addr)
    if end < 0:
        raise BadAddress(f"string at {addr:#x} is not terminated")
    return bytes(proc.memory[addr:end])


def argint(proc, n):
    """The nth 32-bit system call argument."""
    return fetchint(proc, proc.esp + 4 + 4 * n)


def argptr(proc, n, size):
    """The nth argument as the address of size bytes of user memory."""
    addr = argint(proc, n) & UINT_MASK
    if size < 0 or addr >= proc.sz or addr + size > proc.sz:
        raise BadAddress(f"{size} bytes at {addr:#x} outside {proc.sz} bytes")
    return addr


def argstr(proc, n):
    """The nth argument as a NUL-terminated user string."""
    return fetchstr(proc, argint(proc, n))


class SyscallTable:
    """Maps system call numbers to handlers taking the calling process."""

    def __init__(self, handlers):
        self.handlers = {}
        for num, handler in dict(handlers).items():
            if not 0 < num < _NSYSCALLS:
                raise ValueError(f"no system call number {num}")
            self.handlers[int(num)] = handler

    def dispatch(self, proc, out=None):
        """Run the call numbered in proc.eax, store its result there, trace it."""
        if out is None:
            out = sys.stdout
        num = proc.eax
        handler = self.handlers.get(num) if 0 < num < _NSYSCALLS else None
        if handler is None:
            out.write(f"{proc.pid} {proc.name}: unknown sys call {num}\n")
            proc.eax = -1
            return proc.eax
        try:
            proc.eax = handler(proc)
        except BadAddress:
            proc.eax = -1
        out.write(f"{_TRACE_NAMES.get(num, '')} -> {num}\n")
        return proc.eax