"""
Advancing-front circle packing.

Grows a triangulated packing of disks outward from a seed pair. Every
frontier edge (a, b) proposes a disk tangent to both endpoints on its
outward side; the proposal either closes a triangle with an existing
nearby disk, is deferred because it would overlap the packing, or is
placed as a new disk. Edges that keep failing after their retry budget is
spent are parked as dead edges for the loop closer.
"""

import math
from collections import Counter, deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterable, List, Optional, Tuple

import structlog

from .alea_prng import AleaPRNG
from .disk_graph import MAX_SHARE, DiskGraph, Triangle
from .geometry import Coord, cross, dist2, in_bounds, tangent_point
from .spatial_grid import SpatialGrid
from ..utils.random import get_prng, set_random_seed

logger = structlog.get_logger()

DEFAULT_RETRY_BUDGET = 10


@dataclass
class TessellationConfig:
    """Run configuration for the tessellation engine."""

    canvas_width: float = 1024.0
    canvas_height: float = 1024.0
    min_radius: float = 16.0
    max_radius: float = 64.0
    retry_budget: int = DEFAULT_RETRY_BUDGET
    overlap_tolerance: float = 2.0  # allowed penetration between placed disks
    angle_tolerance: float = 1e-3  # loop interior-angle sum check, radians

    def __post_init__(self):
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError("Canvas dimensions must be positive")
        if self.min_radius <= 0:
            raise ValueError("min_radius must be positive")
        if self.min_radius > self.max_radius:
            raise ValueError(
                f"min_radius ({self.min_radius}) exceeds max_radius ({self.max_radius})"
            )
        if self.retry_budget < 0:
            raise ValueError("retry_budget cannot be negative")
        if self.overlap_tolerance < 0:
            raise ValueError("overlap_tolerance cannot be negative")


@dataclass(eq=False)
class ExposedEdge:
    """Directed frontier edge; its triangle is grown on the outward side."""

    origin: int
    target: int
    retries: int = DEFAULT_RETRY_BUDGET

    @property
    def key(self) -> Tuple[int, int]:
        return (self.origin, self.target)


class StepOutcome(str, Enum):
    """What happened to the edge consumed by one engine step."""

    STALE = "stale"          # pair already shared by two triangles
    SKIPPED = "skipped"      # degenerate edge, no tangent position
    MERGED = "merged"        # closed a triangle with an existing disk
    DEFERRED = "deferred"    # overlap, requeued with one retry less
    DEAD = "dead"            # overlap, retries exhausted
    PLACED = "placed"        # new disk added


class FrontierEngine:
    """
    Owns the frontier queue, dead edges, disk graph and spatial grid of one run.

    The engine is single-threaded and deterministic: replaying the same PRNG
    stream reproduces the same disks and triangles in the same order.
    """

    def __init__(
        self,
        config: TessellationConfig,
        prng: Optional[AleaPRNG] = None,
        seed: Optional[str] = None,
        triangles: Optional[List[Triangle]] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Tessellation configuration
            prng: Random stream to draw radii and angles from
            seed: Reseeds the default PRNG when no stream is given
            triangles: Output list triangles are appended to
        """
        self.config = config
        if prng is not None:
            self.prng = prng
        elif seed is not None:
            self.prng = set_random_seed(seed)
        else:
            self.prng = get_prng()

        self.graph = DiskGraph()
        self.grid = SpatialGrid(config.canvas_width, config.canvas_height, config.max_radius)
        self.frontier: Deque[ExposedEdge] = deque()
        self.dead_edges: List[ExposedEdge] = []
        self.triangles: List[Triangle] = triangles if triangles is not None else []

        # directed edge -> copies queued in the frontier or parked as dead
        self._pending: Counter = Counter()

        self.outcomes: Counter = Counter()
        self.iterations = 0
        self.edges_pushed = 0

        # Ring radii covering each distance threshold used below
        self._merge_ring = self.grid.ring_for(config.min_radius)
        self._overlap_ring = self.grid.ring_for(2 * config.max_radius)
        self._link_ring = self.grid.ring_for(2 * config.max_radius + config.min_radius)

    # ------------------------------------------------------------------
    # Disks and edges
    # ------------------------------------------------------------------

    def add_disk(self, x: float, y: float, radius: float) -> int:
        """Place a disk in the graph and the grid, returning its handle."""
        handle = self.graph.add(x, y, radius)
        self.grid.index(handle, x, y)
        return handle

    def push_edge(self, origin: int, target: int, retries: Optional[int] = None) -> ExposedEdge:
        """Append a directed edge to the back of the frontier."""
        if retries is None:
            retries = self.config.retry_budget
        edge = ExposedEdge(origin, target, retries)
        self.frontier.append(edge)
        self._pending[edge.key] += 1
        self.edges_pushed += 1
        return edge

    def in_bounds(self, handle: int) -> bool:
        disk = self.graph[handle]
        return in_bounds(self.config.canvas_width, self.config.canvas_height, disk.x, disk.y)

    def is_pending(self, origin: int, target: int) -> bool:
        """True if the directed edge is queued or already dead."""
        return self._pending[(origin, target)] > 0

    def _withdraw(self, origin: int, target: int) -> None:
        """Remove every copy of a directed edge from the frontier and dead list."""
        key = (origin, target)
        if not self._pending[key]:
            return
        del self._pending[key]
        self.frontier = deque(e for e in self.frontier if e.key != key)
        self.dead_edges = [e for e in self.dead_edges if e.key != key]

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def bootstrap(self) -> Tuple[int, int]:
        """Place the seed pair at the canvas center and queue both directions."""
        cx = self.config.canvas_width / 2
        cy = self.config.canvas_height / 2

        first_radius = self._draw_radius()
        first = self.add_disk(cx, cy, first_radius)

        second_radius = self._draw_radius()
        angle = self.prng.angle()
        reach = first_radius + second_radius
        second = self.add_disk(cx + reach * math.cos(angle), cy + reach * math.sin(angle), second_radius)

        self.graph.link(first, second)
        self.push_edge(first, second)
        self.push_edge(second, first)
        logger.debug("Seed pair placed", first=first, second=second)
        return first, second

    def run(self) -> int:
        """Consume the frontier until it is empty. Returns the iteration count."""
        while self.frontier:
            self.step()
        return self.iterations

    def populate(self) -> List[Triangle]:
        """Bootstrap a fresh engine and run it to exhaustion."""
        logger.info(
            "Starting frontier packing",
            width=self.config.canvas_width,
            height=self.config.canvas_height,
            min_radius=self.config.min_radius,
            max_radius=self.config.max_radius,
            retry_budget=self.config.retry_budget,
        )
        self.bootstrap()
        self.run()
        logger.info(
            "Frontier exhausted",
            iterations=self.iterations,
            disks=len(self.graph),
            triangles=len(self.triangles),
            dead_edges=len(self.dead_edges),
            outcomes={k.value: v for k, v in self.outcomes.items()},
        )
        return self.triangles

    def step(self) -> StepOutcome:
        """Resolve the edge at the front of the frontier."""
        edge = self.frontier.popleft()
        self._pending[edge.key] -= 1
        self.iterations += 1
        a, b = edge.origin, edge.target

        if self.graph.share_count(a, b) >= MAX_SHARE:
            return self._record(StepOutcome.STALE)

        radius = self._draw_radius()
        disk_a, disk_b = self.graph[a], self.graph[b]
        candidate = tangent_point(disk_a.center, disk_a.radius, disk_b.center, disk_b.radius, radius)
        if candidate is None:
            logger.debug("Degenerate frontier edge skipped", origin=a, target=b)
            return self._record(StepOutcome.SKIPPED)

        partner = self._find_merge_partner(a, b, candidate)
        if partner is not None:
            self._emit(partner, a, b)
            self._settle(a, b, ((partner, a), (b, partner)), partner)
            return self._record(StepOutcome.MERGED)

        if self._overlaps(candidate, radius):
            if edge.retries > 0:
                edge.retries -= 1
                self.frontier.append(edge)
                self._pending[edge.key] += 1
                return self._record(StepOutcome.DEFERRED)
            self.dead_edges.append(edge)
            self._pending[edge.key] += 1
            logger.debug("Frontier edge retired as dead", origin=a, target=b)
            return self._record(StepOutcome.DEAD)

        new = self.add_disk(candidate[0], candidate[1], radius)
        self._emit(new, a, b)
        self._settle(a, b, ((new, a), (b, new)), new)
        if self.in_bounds(new):
            self._link_nearby(new)
        return self._record(StepOutcome.PLACED)

    # ------------------------------------------------------------------
    # Step helpers
    # ------------------------------------------------------------------

    def _draw_radius(self) -> float:
        return self.prng.uniform(self.config.min_radius, self.config.max_radius)

    def _record(self, outcome: StepOutcome) -> StepOutcome:
        self.outcomes[outcome] += 1
        return outcome

    def _side_open(self, origin: int, target: int) -> bool:
        """
        Whether a triangle may still be grown on the outward side of origin -> target.

        An unused pair is open on both sides. A pair carrying one triangle is
        open only in the direction still queued or parked as dead, since the
        other direction faces the existing triangle.
        """
        shared = self.graph.share_count(origin, target)
        if shared == 0:
            return True
        return shared < MAX_SHARE and self.is_pending(origin, target)

    def _find_merge_partner(self, a: int, b: int, candidate: Coord) -> Optional[int]:
        """
        First disk near the candidate that can close a triangle with a and b.

        The partner must be linked to a or b, lie on the outward side of
        a -> b, and both new sides (p -> a, b -> p) must face open space.
        """
        limit = self.config.min_radius ** 2
        for p in self.grid.neighbors(candidate[0], candidate[1], self._merge_ring):
            if p == a or p == b:
                continue
            if dist2(self.graph.center(p), candidate) >= limit:
                continue
            if not (self.graph.is_linked(p, a) or self.graph.is_linked(p, b)):
                continue
            if cross(self.graph.center(a), self.graph.center(b), self.graph.center(p)) >= 0:
                continue
            if self._side_open(p, a) and self._side_open(b, p):
                return p
        return None

    def _overlaps(self, candidate: Coord, radius: float) -> bool:
        """True if a disk of this radius at candidate would overlap the packing."""
        tolerance = self.config.overlap_tolerance
        for p in self.grid.neighbors(candidate[0], candidate[1], self._overlap_ring):
            disk = self.graph[p]
            reach = disk.radius + radius - tolerance
            if reach > 0 and dist2(disk.center, candidate) < reach * reach:
                return True
        return False

    def _emit(self, apex: int, a: int, b: int) -> Triangle:
        triangle = self.graph.add_triangle(apex, a, b)
        self.triangles.append(triangle)
        return triangle

    def _settle(
        self, a: int, b: int, facing: Iterable[Tuple[int, int]], apex: int
    ) -> None:
        """
        Update the frontier around a triangle just grown on edge (a, b).

        `facing` lists the triangle's other two sides, each directed so the
        triangle lies on its outward side. Those directions are consumed.
        A side now shared twice is interior and both directions go; a side
        shared once exposes its reverse direction, queued when the apex is
        on the canvas.
        """
        if self.graph.share_count(a, b) >= MAX_SHARE:
            self._withdraw(b, a)

        expose = self.in_bounds(apex)
        for origin, target in facing:
            self._withdraw(origin, target)
            if self.graph.share_count(origin, target) >= MAX_SHARE:
                self._withdraw(target, origin)
            elif expose and not self.is_pending(target, origin):
                self.push_edge(target, origin)

    def _link_nearby(self, new: int) -> None:
        """Link a fresh disk to close on-canvas disks it may triangulate with later."""
        disk = self.graph[new]
        reach = disk.radius + self.config.min_radius
        for p in self.grid.neighbors(disk.x, disk.y, self._link_ring):
            if p == new or self.graph.is_linked(new, p) or not self.in_bounds(p):
                continue
            other = self.graph[p]
            limit = other.radius + reach
            if dist2(other.center, disk.center) < limit * limit:
                self.graph.link(p, new)
                self.push_edge(p, new)
                self.push_edge(new, p)
