"""Count lines, words and bytes."""

import sys
from dataclasses import dataclass

_WHITESPACE = frozenset(b" \r\t\n\v")
_CHUNK = 512


@dataclass(frozen=True)
class Counts:
    """Line, word and byte counts of a stream."""

    lines: int
    words: int
    chars: int


def count(stream):
    """Count lines, words and bytes read from a binary stream."""
    lines = words = chars = 0
    inword = False
    while True:
        chunk = stream.read(_CHUNK)
        if not chunk:
            break
        if isinstance(chunk, str):
            chunk = chunk.encode("latin-1")
        for ch in chunk:
            chars += 1
            if ch == 0x0A:
                lines += 1
            if ch in _WHITESPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return Counts(lines, words, chars)


def format_counts(counts, name):
    """Render counts the way wc prints them."""
    return f"{counts.lines} {counts.words} {counts.chars} {name}"


def main(argv=None):
    """Print counts for each named file, or for standard input."""
    if argv is None:
        argv = sys.argv[1:]
    out = sys.stdout
    if not argv:
        try:
            counts = count(sys.stdin.buffer)
        except OSError:
            print("wc: read error", file=out)
            return 1
        print(format_counts(counts, ""), file=out)
        return 0
    for name in argv:
        try:
            stream = open(name, "rb")
        except OSError:
            print(f"wc: cannot open {name}", file=out)
            return 1
        with stream:
            try:
                counts = count(stream)
            except OSError:
                print("wc: read error", file=out)
                return 1
        print(format_counts(counts, name), file=out)
    return 0