"""Table of platform libraries a project can request with ``"stdlib"``.

The position of each entry is its bit in a project's stdlib mask, so the
order of StandardLibrary members is part of the descriptor format and must
not change.
"""

from enum import Enum
from typing import Iterator


class StandardLibrary(Enum):
    """Platform libraries known to the descriptor format, in bit order."""

    THREADS = "threads"
    MATH = "math"
    SOCKETS = "sockets"

    @property
    def index(self) -> int:
        return list(StandardLibrary).index(self)

    @property
    def bit(self) -> int:
        return 1 << self.index


def parse_stdlib_name(name: str) -> StandardLibrary | None:
    """Look up a library by its descriptor name.

    Returns:
        The matching StandardLibrary, or None for an unknown name
    """
    try:
        return StandardLibrary(name)
    except ValueError:
        return None


def iter_mask(mask: int) -> Iterator[StandardLibrary]:
    """Yield the libraries whose bits are set in mask, in table order."""
    for library in StandardLibrary:
        if mask & library.bit:
            yield library
