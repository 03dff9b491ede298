"""Uniform bucket index over the canvas for nearby-disk queries."""

import math
from typing import List, Tuple

import numpy as np


class SpatialGrid:
    """
    Buckets disk handles by the cell their center falls in.

    Cells are `cell_size` wide (the maximum disk radius), so every disk whose
    center lies within k * cell_size of a point is found in the
    (2k+1) x (2k+1) block around that point's cell. Coordinates outside the
    canvas are clamped into the border cells; clamping never separates two
    nearby points, so queries stay conservative. Results are a superset of
    the true neighbors and callers do the exact distance checks.
    """

    def __init__(self, width: float, height: float, cell_size: float):
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.cells_x = max(int(width / cell_size), 1)
        self.cells_y = max(int(height / cell_size), 1)
        self._cells: List[List[List[int]]] = [
            [[] for _ in range(self.cells_y)] for _ in range(self.cells_x)
        ]
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def cell_of(self, x: float, y: float) -> Tuple[int, int]:
        """Bucket coordinates for a point, clamped to the grid."""
        cx = min(max(math.floor(x / self.cell_size), 0), self.cells_x - 1)
        cy = min(max(math.floor(y / self.cell_size), 0), self.cells_y - 1)
        return int(cx), int(cy)

    def ring_for(self, distance: float) -> int:
        """Smallest ring radius whose block covers every point within distance."""
        return max(int(math.ceil(distance / self.cell_size)), 0)

    def index(self, handle: int, x: float, y: float) -> None:
        """Insert a disk handle at its center's bucket."""
        cx, cy = self.cell_of(x, y)
        self._cells[cx][cy].append(handle)
        self._count += 1

    def neighbors(self, x: float, y: float, ring: int) -> List[int]:
        """
        Handles in the (2*ring+1)^2 block of cells around (x, y).

        Args:
            x, y: Query point
            ring: Ring radius in cells

        Returns:
            Disk handles in ascending (placement) order
        """
        cx, cy = self.cell_of(x, y)
        x0, x1 = max(cx - ring, 0), min(cx + ring, self.cells_x - 1)
        y0, y1 = max(cy - ring, 0), min(cy + ring, self.cells_y - 1)

        found: List[int] = []
        for i in range(x0, x1 + 1):
            column = self._cells[i]
            for j in range(y0, y1 + 1):
                found.extend(column[j])
        found.sort()
        return found

    def occupancy(self) -> np.ndarray:
        """Disk count per cell as a (cells_x, cells_y) array."""
        counts = np.zeros((self.cells_x, self.cells_y), dtype=np.int32)
        for i, column in enumerate(self._cells):
            for j, bucket in enumerate(column):
                counts[i, j] = len(bucket)
        return counts
