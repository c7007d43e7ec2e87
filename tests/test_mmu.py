import pytest

from xvkit.mmu import (
    DPL_USER,
    PGSIZE,
    PTE_P,
    PTE_U,
    PTE_W,
    STA_R,
    STA_W,
    STA_X,
    STS_IG32,
    STS_TG32,
    SegDesc,
    pdx,
    pgaddr,
    pgrounddown,
    pgroundup,
    pte_addr,
    pte_flags,
    ptx,
    seg,
    seg16,
    seg_asm,
    set_gate,
)

ADDRESSES = [0, 1, PGSIZE - 1, PGSIZE, 0x80000000, 0x80100000, 0xFE000000, 0xFFFFFFFF]


@pytest.mark.parametrize("va", ADDRESSES)
def test_pgaddr_rebuilds_address(va):
    assert pgaddr(pdx(va), ptx(va), va & (PGSIZE - 1)) == va


@pytest.mark.parametrize("sz", [1, 100, PGSIZE - 1, PGSIZE + 1, 0x12345])
def test_pgroundup_properties(sz):
    r = pgroundup(sz)
    assert r % PGSIZE == 0
    assert sz <= r < sz + PGSIZE


def test_round_on_boundary_is_identity():
    assert pgroundup(PGSIZE) == PGSIZE
    assert pgrounddown(PGSIZE) == PGSIZE
    assert pgrounddown(PGSIZE + 1) == PGSIZE
    assert pgroundup(0) == 0


@pytest.mark.parametrize("va", ADDRESSES)
def test_pgrounddown_properties(va):
    r = pgrounddown(va)
    assert r % PGSIZE == 0
    assert r <= va < r + PGSIZE


def test_pte_split():
    pte = 0x80100000 | PTE_P | PTE_W | PTE_U
    assert pte_addr(pte) == 0x80100000
    assert pte_flags(pte) == PTE_P | PTE_W | PTE_U
    assert pte_addr(pte) | pte_flags(pte) == pte


def test_kernel_code_segment_bytes():
    desc = seg(STA_X | STA_R, 0, 0xFFFFFFFF, 0)
    assert desc.to_bytes() == bytes.fromhex("ffff0000009acf00")


@pytest.mark.parametrize(
    "type_,base,lim",
    [(STA_X | STA_R, 0, 0xFFFFFFFF), (STA_W, 0, 0xFFFFFFFF), (STA_W, 0x12345678, 0x00FFFFFF)],
)
def test_seg_asm_matches_seg(type_, base, lim):
    assert seg_asm(type_, base, lim) == seg(type_, base, lim, 0).to_bytes()


def test_segment_round_trip():
    desc = seg(STA_W, 0x12345678, 0xFFFFFFFF, DPL_USER)
    decoded = SegDesc.from_bytes(desc.to_bytes())
    assert decoded == desc
    assert decoded.dpl == DPL_USER


def test_seg16_uses_byte_granularity():
    desc = seg16(STA_W, 0xABCD0000, 0x67, 0)
    assert desc.g == 0
    assert desc.lim_15_0 == 0x67
    assert desc.base_31_24 == 0xAB


def test_from_bytes_rejects_wrong_length():
    with pytest.raises(ValueError):
        SegDesc.from_bytes(b"\x00" * 7)


def test_field_overflow_rejected():
    with pytest.raises(ValueError):
        seg(STA_W, 0, 0xFFFFFFFF, 4)


@pytest.mark.parametrize("istrap,expected", [(True, STS_TG32), (False, STS_IG32)])
def test_gate_type(istrap, expected):
    assert set_gate(istrap, 8, 0x80105000, 0).type == expected


def test_gate_bytes_hold_offset_and_selector():
    off = 0x80105ABC
    raw = set_gate(True, 8, off, DPL_USER).to_bytes()
    assert int.from_bytes(raw[2:4], "little") == 8
    assert int.from_bytes(raw[0:2], "little") | int.from_bytes(raw[6:8], "little") << 16 == off