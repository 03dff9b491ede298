"""
Closing the gaps left behind by the frontier.

Dead edges (frontier edges that could not be resolved by placing a disk)
bound the holes of the packing. This module chains them into closed
loops, checks that each loop is a simple polygon traversed with the hole
on its outward side, and triangulates every accepted loop by repeatedly
clipping the ear with the shortest diagonal.
"""

import math
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Tuple

import numpy as np
import structlog

from .disk_graph import MAX_SHARE, DiskGraph, TessellationError, Triangle
from .frontier import ExposedEdge
from .geometry import cross, dist2, heading, normalize_angle

logger = structlog.get_logger()

EdgeMap = Dict[int, List[ExposedEdge]]


class LoopClosureError(TessellationError):
    """A loop that cannot be triangulated; the frontier bookkeeping is broken."""


@dataclass
class ClosureResult:
    """Loops closed by the loop closer and the dead edges left over."""

    loops: List[List[ExposedEdge]] = field(default_factory=list)
    open_edges: List[ExposedEdge] = field(default_factory=list)
    triangles: List[Triangle] = field(default_factory=list)
    edge_count: int = 0  # dead edges that entered the search


def _pair(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a < b else (b, a)


def group_by_origin(dead_edges: Iterable[ExposedEdge], graph: DiskGraph) -> EdgeMap:
    """
    Build the origin -> outgoing dead edges map.

    Duplicate directed edges are collapsed and edges whose pair is already
    shared by two triangles are dropped, since they no longer bound a hole.
    """
    edge_map: EdgeMap = {}
    seen = set()
    for edge in dead_edges:
        if edge.key in seen:
            continue
        seen.add(edge.key)
        if graph.share_count(edge.origin, edge.target) >= MAX_SHARE:
            continue
        edge_map.setdefault(edge.origin, []).append(edge)
    return edge_map


def interior_angle_sum(loop: List[ExposedEdge], graph: DiskGraph) -> float:
    """
    Sum of interior angles of a loop whose interior is on the outward side.

    The interior angle at the vertex joining two consecutive edges is
    pi plus the signed turn between them, with the turn wrapped into
    (-pi, pi]. A simple polygon traversed this way sums to (n - 2) * pi.
    """
    n = len(loop)
    total = 0.0
    for i, edge in enumerate(loop):
        nxt = loop[(i + 1) % n]
        h1 = heading(graph.center(edge.origin), graph.center(edge.target))
        h2 = heading(graph.center(nxt.origin), graph.center(nxt.target))
        total += math.pi + normalize_angle(h2 - h1)
    return total


def is_valid_loop(loop: List[ExposedEdge], graph: DiskGraph, tolerance: float = 1e-3) -> bool:
    """Check length, chaining, vertex uniqueness and the interior-angle sum."""
    n = len(loop)
    if n < 3:
        return False
    for i, edge in enumerate(loop):
        if edge.target != loop[(i + 1) % n].origin:
            return False
    if len({edge.origin for edge in loop}) != n:
        return False
    expected = (n - 2) * math.pi
    return abs(interior_angle_sum(loop, graph) - expected) <= tolerance


def encloses_disk(loop: List[ExposedEdge], graph: DiskGraph, centers: Optional[np.ndarray] = None) -> bool:
    """
    Whether a disk outside the loop lies inside the loop polygon.

    Such a loop walks around a patch that is already covered, so filling
    it would stack triangles on top of the existing ones. Uses an even-odd
    ray cast over all disk centers at once.
    """
    if centers is None:
        centers = graph.as_array()[:, :2]
    handles = [edge.origin for edge in loop]
    poly = np.array([graph.center(h) for h in handles], dtype=float)
    lo, hi = poly.min(axis=0), poly.max(axis=0)

    mask = np.all((centers > lo) & (centers < hi), axis=1)
    mask[handles] = False
    points = centers[mask]
    if len(points) == 0:
        return False

    x, y = points[:, 0:1], points[:, 1:2]
    x1, y1 = poly[:, 0], poly[:, 1]
    x2, y2 = np.roll(x1, -1), np.roll(y1, -1)
    straddles = (y1 > y) != (y2 > y)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
    hits = straddles & (x < x_cross)
    return bool(np.any(hits.sum(axis=1) % 2 == 1))


def _search_loop(
    origin: int,
    edge_map: EdgeMap,
    graph: DiskGraph,
    tolerance: float,
    claimed: Counter,
    centers: Optional[np.ndarray] = None,
) -> Optional[List[ExposedEdge]]:
    """
    Breadth-first search for one acceptable loop through origin.

    Shorter loops are tried before longer ones, so a hole is closed along
    its own rim rather than along a detour around neighbouring patches.
    """
    queue: Deque[Tuple[List[ExposedEdge], FrozenSet[int]]] = deque(
        ([edge], frozenset((origin, edge.target))) for edge in edge_map.get(origin, [])
    )
    while queue:
        path, visited = queue.popleft()
        for nxt in edge_map.get(path[-1].target, []):
            if nxt.target == origin:
                if len(path) == 1:
                    continue  # two-edge loops are not polygons
                candidate = path + [nxt]
                if not _fits_share_budget(candidate, graph, claimed):
                    continue
                if not is_valid_loop(candidate, graph, tolerance):
                    logger.debug("Loop rejected by angle check", origin=origin, size=len(candidate))
                    continue
                if encloses_disk(candidate, graph, centers):
                    logger.debug("Loop rejected, encloses a disk", origin=origin, size=len(candidate))
                    continue
                return candidate
            if nxt.target in visited:
                continue  # path would cross itself
            queue.append((path + [nxt], visited | {nxt.target}))
    return None


def _fits_share_budget(loop: List[ExposedEdge], graph: DiskGraph, claimed: Counter) -> bool:
    for edge in loop:
        pair = _pair(edge.origin, edge.target)
        if graph.share_count(*pair) + claimed[pair] >= MAX_SHARE:
            return False
    return True


def find_loops(edge_map: EdgeMap, graph: DiskGraph, tolerance: float = 1e-3) -> List[List[ExposedEdge]]:
    """
    Extract every closed loop from the edge map.

    Accepted loops have their edges removed from edge_map, so an edge is
    used by at most one loop. Whatever remains in edge_map afterwards could
    not be closed.
    """
    loops: List[List[ExposedEdge]] = []
    claimed: Counter = Counter()
    centers = graph.as_array()[:, :2]
    for origin in list(edge_map):
        while edge_map.get(origin):
            loop = _search_loop(origin, edge_map, graph, tolerance, claimed, centers)
            if loop is None:
                break
            for edge in loop:
                remaining = [e for e in edge_map[edge.origin] if e is not edge]
                if remaining:
                    edge_map[edge.origin] = remaining
                else:
                    del edge_map[edge.origin]
                claimed[_pair(edge.origin, edge.target)] += 1
            loops.append(loop)
            logger.debug("Loop closed", origin=origin, size=len(loop))
    return loops


def _is_ear(
    loop: List[ExposedEdge], i: int, graph: DiskGraph, reserved: FrozenSet[Tuple[int, int]] = frozenset()
) -> bool:
    """
    Whether the vertex between loop[i] and loop[i + 1] can be clipped.

    The vertex must be convex towards the hole, no other loop vertex may lie
    inside the clipped triangle, and the new diagonal must neither carry a
    triangle already nor be an edge of a loop still waiting to be filled.
    """
    cur = loop[i]
    nxt = loop[(i + 1) % len(loop)]
    a, b, c = cur.origin, cur.target, nxt.target
    pa, pb, pc = graph.center(a), graph.center(b), graph.center(c)

    if cross(pa, pb, pc) >= 0:
        return False
    if graph.share_count(a, c) > 0 or _pair(a, c) in reserved:
        return False

    for edge in loop:
        v = edge.origin
        if v in (a, b, c):
            continue
        q = graph.center(v)
        if cross(pa, pb, q) < 0 and cross(pb, pc, q) < 0 and cross(pc, pa, q) < 0:
            return False
    return True


def triangulate_loop(
    loop: List[ExposedEdge],
    graph: DiskGraph,
    reserved: FrozenSet[Tuple[int, int]] = frozenset(),
) -> List[Triangle]:
    """
    Triangulate a closed loop by ear removal.

    Each round clips the ear with the shortest diagonal (start of edge i to
    end of edge i + 1), links the diagonal and splices the loop, until three
    edges remain and form the last triangle. A loop of n edges yields
    n - 2 triangles. Pairs in `reserved` are never used as diagonals.

    Raises:
        LoopClosureError: if the loop has fewer than 3 edges or no ear exists
    """
    if len(loop) < 3:
        raise LoopClosureError(f"Loop should not be less than size 3, got {len(loop)}")

    loop = list(loop)
    triangles: List[Triangle] = []
    while len(loop) > 3:
        best = None
        best_dist = math.inf
        for i, cur in enumerate(loop):
            nxt = loop[(i + 1) % len(loop)]
            d = dist2(graph.center(cur.origin), graph.center(nxt.target))
            if d < best_dist and _is_ear(loop, i, graph, reserved):
                best = i
                best_dist = d

        if best is None:
            raise LoopClosureError(
                f"No clippable ear in a loop of {len(loop)} edges "
                f"starting at disk {loop[0].origin}"
            )

        cur = loop[best]
        j = (best + 1) % len(loop)
        nxt = loop[j]
        triangles.append(graph.add_triangle(cur.origin, cur.target, nxt.target))
        loop[best] = ExposedEdge(cur.origin, nxt.target, retries=0)
        del loop[j]

    first, second = loop[0], loop[1]
    triangles.append(graph.add_triangle(first.origin, first.target, second.target))
    return triangles


class LoopCloser:
    """Turns the dead edges of a finished frontier run into triangles."""

    def __init__(self, graph: DiskGraph, angle_tolerance: float = 1e-3):
        self.graph = graph
        self.angle_tolerance = angle_tolerance

    def close(
        self, dead_edges: Iterable[ExposedEdge], triangles: Optional[List[Triangle]] = None
    ) -> ClosureResult:
        """
        Find and fill all loops among the dead edges.

        Args:
            dead_edges: Dead edges collected by the frontier engine
            triangles: Output list the new triangles are appended to

        Returns:
            ClosureResult with accepted loops, unclosed edges and new triangles
        """
        edge_map = group_by_origin(dead_edges, self.graph)
        dead_count = sum(len(edges) for edges in edge_map.values())

        loops = find_loops(edge_map, self.graph, self.angle_tolerance)
        open_edges = [edge for edges in edge_map.values() for edge in edges]

        result = ClosureResult(loops=loops, open_edges=open_edges, edge_count=dead_count)
        reserved = frozenset(_pair(e.origin, e.target) for loop in loops for e in loop)
        for loop in loops:
            result.triangles.extend(triangulate_loop(loop, self.graph, reserved))
        if triangles is not None:
            triangles.extend(result.triangles)

        logger.info(
            "Loop closing complete",
            dead_edges=dead_count,
            loops=len(loops),
            loop_triangles=len(result.triangles),
            open_edges=len(open_edges),
        )
        return result
