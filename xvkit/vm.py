"""Two-level x86 page tables over a simulated physical memory."""

from .constants import KERNBASE
from .mmu import (
    NPDENTRIES,
    PGSIZE,
    PTE_P,
    PTE_U,
    PTE_W,
    UINT_MASK,
    pdx,
    pgaddr,
    pgrounddown,
    pgroundup,
    pte_addr,
    pte_flags,
    ptx,
)

__all__ = ["VmError", "PhysicalMemory", "AddressSpace"]

_ENTRY = 4


class VmError(RuntimeError):
    """Raised when a mapping operation is inconsistent or an address is bad."""


class PhysicalMemory:
    """A fixed number of physical pages handed out one at a time.

    Physical addresses start at PGSIZE, so address 0 never names a page.
    """

    def __init__(self, npages):
        if npages <= 0:
            raise ValueError("physical memory needs at least one page")
        self.npages = npages
        self.base = PGSIZE
        self.end = self.base + npages * PGSIZE
        self._data = bytearray(npages * PGSIZE)
        self._free = [self.base + i * PGSIZE for i in reversed(range(npages))]
        self._free_set = set(self._free)

    def kalloc(self):
        """Take one free page and return its physical address."""
        if not self._free:
            raise MemoryError("out of physical pages")
        pa = self._free.pop()
        self._free_set.discard(pa)
        return pa

    def kfree(self, pa):
        """Return the page at physical address pa to the free pool."""
        if pa % PGSIZE or not self.base <= pa < self.end:
            raise VmError(f"kfree: bad address {pa:#x}")
        if pa in self._free_set:
            raise VmError(f"kfree: page {pa:#x} already free")
        self._free.append(pa)
        self._free_set.add(pa)

    def _offset(self, pa, n):
        if n < 0 or pa < self.base or pa + n > self.end:
            raise VmError(f"physical range {pa:#x}+{n} outside memory")
        return pa - self.base

    def read(self, pa, n):
        """Read n bytes starting at physical address pa."""
        off = self._offset(pa, n)
        return bytes(self._data[off:off + n])

    def write(self, pa, data):
        """Write data starting at physical address pa."""
        data = bytes(data)
        off = self._offset(pa, len(data))
        self._data[off:off + len(data)] = data

    def free_pages(self):
        """Number of pages not currently allocated."""
        return len(self._free)

    def _word(self, pa):
        return int.from_bytes(self.read(pa, _ENTRY), "little")

    def _set_word(self, pa, value):
        self.write(pa, (value & UINT_MASK).to_bytes(_ENTRY, "little"))


class AddressSpace:
    """The user part of a process's page directory and its page tables."""

    def __init__(self, mem):
        self.mem = mem
        self.pgdir = mem.kalloc()
        mem.write(self.pgdir, bytes(PGSIZE))

    def _check(self):
        if self.pgdir is None:
            raise VmError("address space already freed")

    def walk(self, va, alloc):
        """Physical address of the PTE for va, creating its table if alloc.

        Returns None when the table is missing and alloc is false.
        """
        self._check()
        mem = self.mem
        pde_pa = self.pgdir + _ENTRY * pdx(va)
        pde = mem._word(pde_pa)
        if pde & PTE_P:
            pgtab = pte_addr(pde)
        else:
            if not alloc:
                return None
            pgtab = mem.kalloc()
            mem.write(pgtab, bytes(PGSIZE))
            mem._set_word(pde_pa, pgtab | PTE_P | PTE_W | PTE_U)
        return pgtab + _ENTRY * ptx(va)

    def _pte(self, va):
        addr = self.walk(va, False)
        return addr, (None if addr is None else self.mem._word(addr))

    def map_pages(self, va, size, pa, perm):
        """Map the pages covering [va, va+size) to physical pages from pa."""
        a = pgrounddown(va)
        last = pgrounddown(va + size - 1)
        while True:
            pte_pa = self.walk(a, True)
            if self.mem._word(pte_pa) & PTE_P:
                raise VmError(f"remap of {a:#x}")
            self.mem._set_word(pte_pa, pa | perm | PTE_P)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def inituvm(self, init):
        """Load init, less than a page, at virtual address 0."""
        init = bytes(init)
        if len(init) >= PGSIZE:
            raise VmError("inituvm: more than a page")
        mem = self.mem.kalloc()
        self.mem.write(mem, bytes(PGSIZE))
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_U)
        self.mem.write(mem, init)

    def alloc(self, oldsz, newsz):
        """Grow user memory from oldsz to newsz with zeroed pages; return newsz."""
        if newsz >= KERNBASE:
            raise VmError(f"size {newsz:#x} reaches kernel space")
        if newsz < oldsz:
            return oldsz
        a = pgroundup(oldsz)
        while a < newsz:
            try:
                page = self.mem.kalloc()
            except MemoryError:
                self.dealloc(newsz, oldsz)
                raise
            self.mem.write(page, bytes(PGSIZE))
            try:
                self.map_pages(a, PGSIZE, page, PTE_W | PTE_U)
            except MemoryError:
                self.dealloc(newsz, oldsz)
                self.mem.kfree(page)
                raise
            a += PGSIZE
        return newsz

    def dealloc(self, oldsz, newsz):
        """Shrink user memory from oldsz to newsz; return the new size."""
        self._check()
        if newsz >= oldsz:
            return oldsz
        a = pgroundup(newsz)
        while a < oldsz:
            pte_pa, pte = self._pte(a)
            if pte_pa is None:
                a = (pgaddr(pdx(a) + 1, 0, 0) - PGSIZE) & UINT_MASK
            elif pte & PTE_P:
                pa = pte_addr(pte)
                if pa == 0:
                    raise VmError("kfree")
                self.mem.kfree(pa)
                self.mem._set_word(pte_pa, 0)
            a += PGSIZE
        return newsz

    def copy(self, sz):
        """Return a new address space holding a copy of the first sz bytes."""
        child = AddressSpace(self.mem)
        try:
            for i in range(0, sz, PGSIZE):
                pte_pa, pte = self._pte(i)
                if pte_pa is None:
                    raise VmError("copyuvm: pte should exist")
                if not pte & PTE_P:
                    raise VmError("copyuvm: page not present")
                page = self.mem.kalloc()
                self.mem.write(page, self.mem.read(pte_addr(pte), PGSIZE))
                try:
                    child.map_pages(i, PGSIZE, page, pte_flags(pte))
                except MemoryError:
                    self.mem.kfree(page)
                    raise
        except (MemoryError, VmError):
            child.free()
            raise
        return child

    def clear_pte_u(self, va):
        """Make the page at va inaccessible to user code."""
        pte_pa, pte = self._pte(va)
        if pte_pa is None:
            raise VmError("clearpteu")
        self.mem._set_word(pte_pa, pte & ~PTE_U)

    def uva2ka(self, va):
        """Physical address of the user page holding va, or None."""
        pte_pa, pte = self._pte(va)
        if pte_pa is None or not pte & PTE_P or not pte & PTE_U:
            return None
        return pte_addr(pte)

    def _user_chunks(self, va, length):
        while length > 0:
            va0 = pgrounddown(va)
            pa0 = self.uva2ka(va0)
            if pa0 is None:
                raise VmError(f"user address {va:#x} not accessible")
            n = min(PGSIZE - (va - va0), length)
            yield pa0 + (va - va0), n
            length -= n
            va = va0 + PGSIZE

    def copyout(self, va, data):
        """Copy data into user memory at va."""
        data = bytes(data)
        pos = 0
        for pa, n in self._user_chunks(va, len(data)):
            self.mem.write(pa, data[pos:pos + n])
            pos += n

    def read_user(self, va, n):
        """Read n bytes of user memory starting at va."""
        return b"".join(self.mem.read(pa, k) for pa, k in self._user_chunks(va, n))

    def free(self):
        """Release all user pages, the page tables and the directory."""
        if self.pgdir is None:
            raise VmError("freevm: no pgdir")
        self.dealloc(KERNBASE, 0)
        for i in range(NPDENTRIES):
            pde = self.mem._word(self.pgdir + _ENTRY * i)
            if pde & PTE_P:
                self.mem.kfree(pte_addr(pde))
        self.mem.kfree(self.pgdir)
        self.pgdir = None