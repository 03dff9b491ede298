"""
Disk graph: the arena of placed disks and their link share counts.

Disks are addressed by integer handles (their index in the arena). Each
disk keeps an insertion-ordered map of neighbor handle -> share count,
the number of triangles (0, 1 or 2) that already use that pair.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

import numpy as np

MAX_SHARE = 2


class TessellationError(RuntimeError):
    """Raised when the mesh bookkeeping invariants are violated."""


@dataclass
class Disk:
    """A placed circle. Position and radius never change after placement."""

    handle: int
    x: float
    y: float
    radius: float
    links: Dict[int, int] = field(default_factory=dict)

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Triangle:
    """Ordered triple of disk handles, emitted once."""

    a: int
    b: int
    c: int

    @property
    def handles(self) -> Tuple[int, int, int]:
        return (self.a, self.b, self.c)

    def pairs(self) -> Tuple[Tuple[int, int], ...]:
        return ((self.a, self.b), (self.b, self.c), (self.c, self.a))


class DiskGraph:
    """Growable store of disks plus the pairwise share counts."""

    def __init__(self):
        self.disks: List[Disk] = []

    def __len__(self) -> int:
        return len(self.disks)

    def __getitem__(self, handle: int) -> Disk:
        return self.disks[handle]

    def __iter__(self) -> Iterator[Disk]:
        return iter(self.disks)

    def add(self, x: float, y: float, radius: float) -> int:
        """Append a disk and return its handle."""
        if radius <= 0:
            raise ValueError(f"Disk radius must be positive, got {radius}")
        handle = len(self.disks)
        self.disks.append(Disk(handle=handle, x=x, y=y, radius=radius))
        return handle

    def center(self, handle: int) -> Tuple[float, float]:
        disk = self.disks[handle]
        return (disk.x, disk.y)

    def link(self, a: int, b: int) -> None:
        """Connect two disks with a zero share count (no-op if linked)."""
        if a == b:
            raise TessellationError(f"Cannot link disk {a} to itself")
        self.disks[a].links.setdefault(b, 0)
        self.disks[b].links.setdefault(a, 0)

    def is_linked(self, a: int, b: int) -> bool:
        return b in self.disks[a].links

    def share_count(self, a: int, b: int) -> int:
        """Triangles using the pair (0 for unlinked pairs)."""
        return self.disks[a].links.get(b, 0)

    def increment(self, a: int, b: int, c: int) -> None:
        """
        Record a triangle over three linked disks.

        Raises:
            TessellationError: if a pair is unlinked or already shared twice
        """
        pairs = ((a, b), (b, c), (c, a))
        for p, q in pairs:
            if not self.is_linked(p, q):
                raise TessellationError(f"Triangle uses unlinked pair ({p}, {q})")
            if self.share_count(p, q) >= MAX_SHARE:
                raise TessellationError(
                    f"Pair ({p}, {q}) is already shared by {MAX_SHARE} triangles"
                )
        for p, q in pairs:
            self.disks[p].links[q] += 1
            self.disks[q].links[p] += 1

    def add_triangle(self, a: int, b: int, c: int) -> Triangle:
        """Link all three pairs, bump their share counts and return the triangle."""
        self.link(a, b)
        self.link(b, c)
        self.link(c, a)
        self.increment(a, b, c)
        return Triangle(a, b, c)

    def pairs(self) -> Iterator[Tuple[int, int, int]]:
        """Each linked unordered pair once, as (low, high, share_count)."""
        for disk in self.disks:
            for other, count in disk.links.items():
                if disk.handle < other:
                    yield disk.handle, other, count

    def as_array(self) -> np.ndarray:
        """(n, 3) array of x, y, radius."""
        if not self.disks:
            return np.zeros((0, 3))
        return np.array([(d.x, d.y, d.radius) for d in self.disks], dtype=float)
