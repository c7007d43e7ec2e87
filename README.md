# xvkit

In-memory models of the pieces of a small x86 teaching kernel and its
user-space library. Everything runs in Python memory; nothing touches
hardware.

## Modules

- `xvkit.constants`: kernel parameters (`NPROC`, `NOFILE`, `MAXARG`, ...),
  the memory layout (`KERNBASE`, `PHYSTOP`, `DEVSPACE`, ...), and the enums
  `Syscall`, `Trap`, `FileType` and `OpenFlag`. `v2p` and `p2v` convert
  between kernel virtual and physical addresses, modulo 2**32.
- `xvkit.mmu`: the `SegDesc` and `GateDesc` descriptors. Each one checks that
  its fields fit their bit widths and has `to_bytes`. `SegDesc` also has
  `from_bytes`. The builders are `seg`, `seg16`, `set_gate`, and `seg_asm`,
  which returns the raw 8 bytes. The paging helpers are `pdx`, `ptx`,
  `pgaddr`, `pgroundup`, `pgrounddown`, `pte_addr` and `pte_flags`.
- `xvkit.elf`: `ElfHeader.parse`, `ProgHeader.parse`, and `program_headers`,
  which yields every program header of an image. Short data and a bad magic
  number raise `ElfFormatError`.
- `xvkit.cstring`: the C string and memory routines over `bytes`, `str` and
  `bytearray`:
  - `memset` and `memmove` change a `bytearray` in place.
  - `memcmp`, `strcmp` and `strncmp` return the byte difference.
  - `strlen` and `atoi` work as in C.
  - `strchr` returns an index or `None`.
  - `strncpy` and `safestrcpy` return the bytes they would write.
  - `gets` reads one line from a stream.
- `xvkit.umalloc`: `Heap(limit)`, a first-fit, address-ordered free-list
  allocator. It has `sbrk`, `malloc`, `free` and `free_blocks`. Moving the
  break past `limit` raises `MemoryError`. Freeing an address that was not
  allocated raises `ValueError`.
- `xvkit.locks`: `SpinLock` and `SleepLock`, both usable as context managers.
  A `SpinLock` raises `LockError` when its holder acquires it again, or when
  a thread that does not hold it releases it. A `SleepLock` makes waiters
  block until it is released.
- `xvkit.shell`: the shell grammar. `Scanner` tokenises a line. `parse_cmd`
  builds a tree of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`,
  and raises `ShellSyntaxError` on bad input. `cd_target` extracts the
  directory from a `cd ` line.
- `xvkit.syscall`: `Process` holds a user memory image and its registers.
  - `fetchint`, `fetchstr`, `argint`, `argptr` and `argstr` read system call
    arguments. An out-of-range address raises `BadAddress`.
  - `SyscallTable(handlers).dispatch(proc)` runs the handler numbered in
    `proc.eax` and stores the result there (`-1` on `BadAddress` or an
    unknown number). It also writes a trace line.
- `xvkit.vm`: `PhysicalMemory(npages)` hands out pages with `kalloc` and
  `kfree`. `AddressSpace` builds two-level page tables in that memory. Its
  methods are:
  - `walk`, `map_pages` and `inituvm`;
  - `alloc` and `dealloc`;
  - `copy` and `clear_pte_u`;
  - `uva2ka`, `copyout` and `read_user`;
  - `free`.

  Running out of pages raises `MemoryError`. Inconsistent mappings raise
  `VmError`.
- `xvkit.wc`: `count` returns line, word and byte counts as `Counts`.
  `format_counts` renders them. `main` is the `xvkit-wc` command.

## Install

```
pip install .
```

## Examples

Parse a shell line:

```python
from xvkit.shell import parse_cmd

tree = parse_cmd("cat < in | wc > out &")
```

Map and copy user memory:

```python
from xvkit.vm import PhysicalMemory, AddressSpace

mem = PhysicalMemory(64)
space = AddressSpace(mem)
space.alloc(0, 8192)
space.copyout(100, b"hello")
assert space.read_user(100, 5) == b"hello"
```

Count lines, words and bytes:

```
xvkit-wc README.md
```

With no file names, `xvkit-wc` reads standard input.

## What it does not do

- The shell module only parses command lines. It does not run programs,
  open files or set up pipes.
- There is no file system, process scheduler or device model.
- System call handlers are functions you supply to `SyscallTable`. Only
  argument fetching and dispatch are provided.
- `AddressSpace` models the user half of a page directory only; kernel
  mappings are not built.

## Tests

```
pip install .[test]
pytest
```