"""Top-level tessellation run: frontier packing followed by loop closing."""

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .disk_graph import DiskGraph, Triangle
from .frontier import ExposedEdge, FrontierEngine, TessellationConfig
from .geometry import Coord
from .loop_closer import LoopCloser
from .spatial_grid import SpatialGrid
from ..utils.random import get_prng, set_random_seed

logger = structlog.get_logger()


@dataclass
class Tessellation:
    """Read-only snapshot of a finished run handed to coloring and rendering."""

    config: TessellationConfig
    seed: Union[str, int, None]
    graph: DiskGraph
    grid: SpatialGrid
    triangles: List[Triangle]
    loops: List[List[ExposedEdge]] = field(default_factory=list)
    open_edges: List[ExposedEdge] = field(default_factory=list)
    dead_edge_count: int = 0
    frontier_triangle_count: int = 0
    iterations: int = 0
    edges_pushed: int = 0
    outcomes: Counter = field(default_factory=Counter)

    def triangle_coordinates(self) -> np.ndarray:
        """(n, 3, 2) array of triangle vertex positions, in emission order."""
        if not self.triangles:
            return np.zeros((0, 3, 2))
        return np.array(
            [[self.graph.center(h) for h in tri.handles] for tri in self.triangles],
            dtype=float,
        )

    def disk_array(self) -> np.ndarray:
        """(m, 3) array of disk x, y, radius."""
        return self.graph.as_array()

    def loop_segments(self) -> List[List[Tuple[Coord, Coord]]]:
        """Segments of each closed loop, grouped per loop."""
        return [
            [(self.graph.center(e.origin), self.graph.center(e.target)) for e in loop]
            for loop in self.loops
        ]

    def open_segments(self) -> List[Tuple[Coord, Coord]]:
        """Segments of dead edges that did not close into a loop."""
        return [(self.graph.center(e.origin), self.graph.center(e.target)) for e in self.open_edges]


def generate_tessellation(
    config: Optional[TessellationConfig] = None,
    seed: Union[str, int, None] = None,
    prng: Optional[AleaPRNG] = None,
) -> Tessellation:
    """
    Generate a complete triangulation of the canvas.

    Runs the frontier engine to exhaustion, then fills the loops formed by
    its dead edges. Both stages append to the same triangle list.

    Args:
        config: Tessellation configuration (defaults if omitted)
        seed: Seed for the default PRNG, used when prng is not given
        prng: Explicit random stream

    Returns:
        Tessellation snapshot

    Raises:
        LoopClosureError: if a dead-edge loop cannot be triangulated
    """
    config = config or TessellationConfig()
    if prng is None:
        prng = set_random_seed(seed) if seed is not None else get_prng()

    logger.info("Generating tessellation", seed=prng.seed)

    triangles: List[Triangle] = []
    engine = FrontierEngine(config, prng=prng, triangles=triangles)
    engine.populate()
    frontier_triangles = len(triangles)

    closer = LoopCloser(engine.graph, angle_tolerance=config.angle_tolerance)
    closure = closer.close(engine.dead_edges, triangles)

    logger.info(
        "Tessellation complete",
        disks=len(engine.graph),
        triangles=len(triangles),
        loops=len(closure.loops),
    )

    return Tessellation(
        config=config,
        seed=prng.seed,
        graph=engine.graph,
        grid=engine.grid,
        triangles=triangles,
        loops=closure.loops,
        open_edges=closure.open_edges,
        dead_edge_count=closure.edge_count,
        frontier_triangle_count=frontier_triangles,
        iterations=engine.iterations,
        edges_pushed=engine.edges_pushed,
        outcomes=Counter(engine.outcomes),
    )
