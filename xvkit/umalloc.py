"""A first-fit free-list allocator over a simulated, growable heap."""

HEADER_SIZE = 8
MIN_UNITS = 4096

_BASE = -1


class Heap:
    """An address-ordered circular free list grown with sbrk.

    Addresses are byte offsets in the simulated data segment, which
    starts at 0 and may grow up to ``limit`` bytes.
    """

    def __init__(self, limit):
        self.limit = limit
        self.brk = 0
        self._next = {}
        self._size = {}
        self._allocated = set()
        self._freep = None

    def sbrk(self, n):
        """Move the break by n bytes and return the old break."""
        old = self.brk
        new = old + n
        if new < 0 or new > self.limit:
            raise MemoryError(f"cannot move break from {old} by {n}")
        self.brk = new
        return old

    def _end(self, p):
        return p + self._size[p] * HEADER_SIZE

    def _release(self, bp):
        nxt = self._next
        p = self._freep
        while not (p < bp < nxt[p]):
            if p >= nxt[p] and (bp > p or bp < nxt[p]):
                break
            p = nxt[p]
        q = nxt[p]
        if self._end(bp) == q:
            self._size[bp] += self._size[q]
            nxt[bp] = nxt[q]
            del self._size[q]
            del nxt[q]
        else:
            nxt[bp] = q
        if self._end(p) == bp:
            self._size[p] += self._size[bp]
            nxt[p] = nxt[bp]
            del self._size[bp]
            del nxt[bp]
        else:
            nxt[p] = bp
        self._freep = p

    def _morecore(self, nunits):
        nunits = max(nunits, MIN_UNITS)
        p = self.sbrk(nunits * HEADER_SIZE)
        self._size[p] = nunits
        self._release(p)
        return self._freep

    def malloc(self, nbytes):
        """Allocate nbytes and return the address of the usable space."""
        if nbytes < 0:
            raise ValueError("cannot allocate a negative size")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        nxt = self._next
        size = self._size
        if self._freep is None:
            nxt[_BASE] = _BASE
            size[_BASE] = 0
            self._freep = _BASE
        prevp = self._freep
        p = nxt[prevp]
        while True:
            if size[p] >= nunits:
                if size[p] == nunits:
                    nxt[prevp] = nxt[p]
                    del nxt[p]
                else:
                    size[p] -= nunits
                    p += size[p] * HEADER_SIZE
                    size[p] = nunits
                self._freep = prevp
                self._allocated.add(p)
                return p + HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
            prevp, p = p, nxt[p]

    def free(self, addr):
        """Return a block obtained from malloc to the free list."""
        bp = addr - HEADER_SIZE
        if bp not in self._allocated:
            raise ValueError(f"address {addr} was not allocated")
        self._allocated.discard(bp)
        self._release(bp)

    def free_blocks(self):
        """List (header address, size in bytes) of free blocks by address."""
        if self._freep is None:
            return []
        blocks = []
        p = self._next[_BASE]
        while p != _BASE:
            blocks.append((p, self._size[p] * HEADER_SIZE))
            p = self._next[p]
        return blocks