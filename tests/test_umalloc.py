import pytest

from xvkit.umalloc import HEADER_SIZE, MIN_UNITS, Heap


def test_sbrk_moves_break():
    heap = Heap(100)
    assert heap.sbrk(10) == 0
    assert heap.sbrk(5) == 10
    assert heap.sbrk(0) == 15
    with pytest.raises(MemoryError):
        heap.sbrk(-16)
    with pytest.raises(MemoryError):
        heap.sbrk(86)


def test_first_malloc_grows_by_minimum():
    heap = Heap(1 << 20)
    heap.malloc(1)
    assert heap.sbrk(0) == MIN_UNITS * HEADER_SIZE


def test_allocations_disjoint_and_aligned():
    heap = Heap(1 << 20)
    sizes = [1, 10, 100, 1000, 40000]
    addrs = [heap.malloc(n) for n in sizes]
    spans = sorted((a, a + n) for a, n in zip(addrs, sizes))
    for a, _ in spans:
        assert a % HEADER_SIZE == 0
        assert a >= HEADER_SIZE
    for (_, end), (start, _) in zip(spans, spans[1:]):
        assert end <= start - HEADER_SIZE
    assert spans[-1][1] <= heap.sbrk(0)


def test_free_all_coalesces_into_one_block():
    heap = Heap(1 << 20)
    start = heap.sbrk(0)
    addrs = [heap.malloc(n) for n in (7, 300, 5000, 64)]
    for a in addrs[::2] + addrs[1::2]:
        heap.free(a)
    assert heap.free_blocks() == [(start, heap.sbrk(0) - start)]


def test_free_blocks_sorted_and_coalesced():
    heap = Heap(1 << 20)
    addrs = [heap.malloc(100) for _ in range(10)]
    for a in addrs[::2]:
        heap.free(a)
    blocks = heap.free_blocks()
    for (a, size), (b, _) in zip(blocks, blocks[1:]):
        assert a + size < b
    assert sum(size for _, size in blocks) < heap.sbrk(0)


def test_freed_block_is_reused():
    heap = Heap(1 << 20)
    a = heap.malloc(100)
    heap.free(a)
    assert heap.malloc(100) == a


def test_out_of_memory():
    heap = Heap(1 << 16)
    with pytest.raises(MemoryError):
        heap.malloc(1 << 17)
    with pytest.raises(MemoryError):
        Heap(100).malloc(1)


def test_free_unknown_or_twice():
    heap = Heap(1 << 20)
    a = heap.malloc(10)
    with pytest.raises(ValueError):
        heap.free(a + HEADER_SIZE)
    heap.free(a)
    with pytest.raises(ValueError):
        heap.free(a)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Heap(1 << 20).malloc(-1)