"""In-memory models of a small x86 teaching kernel and its user library."""

__version__ = "0.1.0"