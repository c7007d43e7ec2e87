"""C-style byte string and memory helpers used by kernel and user code."""

from itertools import count as _count

__all__ = [
    "memset",
    "memcmp",
    "memmove",
    "strncmp",
    "strncpy",
    "safestrcpy",
    "strlen",
    "strcmp",
    "strchr",
    "atoi",
    "gets",
]


def _as_bytes(s):
    if isinstance(s, str):
        return s.encode("latin-1")
    return bytes(s)


def _cstr(s):
    """Return the bytes of s up to, not including, the first NUL."""
    data = _as_bytes(s)
    end = data.find(0)
    return data if end < 0 else data[:end]


def _char(c):
    if isinstance(c, int):
        return c & 0xFF
    data = _as_bytes(c)
    if len(data) != 1:
        raise ValueError(f"expected a single character, got {c!r}")
    return data[0]


def _at(data, i):
    return data[i] if i < len(data) else 0


def memset(buf, c, n):
    """Fill the first n bytes of buf with the byte c and return buf."""
    if n < 0 or n > len(buf):
        raise IndexError(f"cannot set {n} bytes of a {len(buf)}-byte buffer")
    buf[:n] = bytes([_char(c)]) * n
    return buf


def memcmp(a, b, n):
    """Compare n bytes; return the difference of the first unequal pair, or 0."""
    a = _as_bytes(a)
    b = _as_bytes(b)
    if n < 0 or n > len(a) or n > len(b):
        raise IndexError(f"cannot compare {n} bytes")
    for x, y in zip(a[:n], b[:n]):
        if x != y:
            return x - y
    return 0


def memmove(buf, dst, src, n):
    """Copy n bytes within buf from offset src to offset dst; overlap is safe."""
    if n < 0 or min(dst, src) < 0 or max(dst, src) + n > len(buf):
        raise IndexError("memmove outside the buffer")
    buf[dst:dst + n] = bytes(buf[src:src + n])
    return buf


def strncmp(p, q, n):
    """Compare at most n characters of two NUL-terminated strings."""
    p = _as_bytes(p)
    q = _as_bytes(q)
    for i in range(n):
        a, b = _at(p, i), _at(q, i)
        if not a or a != b:
            return a - b
    return 0


def strcmp(p, q):
    """Compare two NUL-terminated strings."""
    p = _as_bytes(p)
    q = _as_bytes(q)
    for i in _count():
        a, b = _at(p, i), _at(q, i)
        if not a or a != b:
            return a - b
    return 0  # pragma: no cover


def strncpy(t, n):
    """Return the n bytes strncpy writes: t up to its NUL, padded with NULs."""
    if n <= 0:
        return b""
    return _cstr(t)[:n].ljust(n, b"\0")


def safestrcpy(t, n):
    """Return t truncated so that it and its terminating NUL fit in n bytes."""
    if n <= 0:
        return b""
    return _cstr(t)[:n - 1]


def strlen(s):
    """Length of s up to the first NUL."""
    return len(_cstr(s))


def strchr(s, c):
    """Index of the first c in s before its NUL, or None."""
    target = _char(c)
    for i, ch in enumerate(_cstr(s)):
        if ch == target:
            return i
    return None


def atoi(s):
    """Value of the leading decimal digits of s; no sign or spaces accepted."""
    n = 0
    for ch in _as_bytes(s):
        if not 0x30 <= ch <= 0x39:
            break
        n = n * 10 + ch - 0x30
    return n


def gets(stream, max):
    """Read a line of at most max-1 bytes, ending after a newline or return."""
    out = bytearray()
    while len(out) + 1 < max:
        c = stream.read(1)
        if not c:
            break
        c = _as_bytes(c)
        out += c
        if c in (b"\n", b"\r"):
            break
    return bytes(out)