"""
Post-run audits of a tessellation.

These checks re-derive the mesh invariants from scratch (pairwise disk
distances, triangle pair usage) so they are independent of the engine's
own bookkeeping.
"""

from collections import Counter
from typing import Dict, Iterable, List, Tuple

import numpy as np
import structlog
from scipy.spatial.distance import pdist, squareform

from .disk_graph import MAX_SHARE, DiskGraph, Triangle

logger = structlog.get_logger()


def find_overlaps(graph: DiskGraph, tolerance: float) -> List[Tuple[int, int, float]]:
    """
    Disk pairs whose centers are closer than the sum of radii minus tolerance.

    Returns:
        List of (handle_a, handle_b, center_distance)
    """
    disks = graph.as_array()
    if len(disks) < 2:
        return []
    distances = squareform(pdist(disks[:, :2]))
    radii = disks[:, 2]
    reach = radii[:, None] + radii[None, :] - tolerance
    rows, cols = np.nonzero(np.triu(distances < reach, k=1))
    return [(int(i), int(j), float(distances[i, j])) for i, j in zip(rows, cols)]


def triangle_pair_usage(triangles: Iterable[Triangle]) -> Counter:
    """Number of triangles using each unordered disk pair."""
    usage: Counter = Counter()
    for tri in triangles:
        for p, q in tri.pairs():
            usage[(p, q) if p < q else (q, p)] += 1
    return usage


def share_count_violations(triangles: Iterable[Triangle]) -> Dict[Tuple[int, int], int]:
    """Pairs referenced by more than two triangles."""
    return {pair: n for pair, n in triangle_pair_usage(triangles).items() if n > MAX_SHARE}


def share_count_mismatches(graph: DiskGraph, triangles: Iterable[Triangle]) -> List[Tuple[int, int]]:
    """Linked pairs whose recorded share count disagrees with the triangle list."""
    usage = triangle_pair_usage(triangles)
    mismatches = [(a, b) for a, b, count in graph.pairs() if usage.get((a, b), 0) != count]
    # Pairs used by triangles but never linked
    mismatches.extend(pair for pair in usage if not graph.is_linked(*pair))
    return mismatches


def degenerate_triangles(triangles: Iterable[Triangle]) -> List[int]:
    """Indices of triangles that repeat a vertex."""
    return [i for i, tri in enumerate(triangles) if len(set(tri.handles)) != 3]


def overlapping_triangles(graph: DiskGraph, triangles: List[Triangle], eps: float = 1e-6) -> List[Tuple[int, int]]:
    """
    Triangle pairs (i, j) where the centroid of triangle i lies strictly inside triangle j.

    Two triangles of a planar mesh only meet along edges and corners, so
    any hit means the mesh folds over itself.
    """
    if len(triangles) < 2:
        return []
    corners = np.array([[graph.center(h) for h in tri.handles] for tri in triangles], dtype=float)
    centroids = corners.mean(axis=1)
    a, b, c = corners[:, 0], corners[:, 1], corners[:, 2]

    def side(p, q):
        # cross(p, q, centroid) for every centroid (rows) against every triangle edge (cols)
        return (
            (q[None, :, 0] - p[None, :, 0]) * (centroids[:, None, 1] - p[None, :, 1])
            - (q[None, :, 1] - p[None, :, 1]) * (centroids[:, None, 0] - p[None, :, 0])
        )

    orientation = np.sign((b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0]))
    inside = np.ones((len(triangles), len(triangles)), dtype=bool)
    for p, q in ((a, b), (b, c), (c, a)):
        inside &= side(p, q) * orientation[None, :] > eps
    np.fill_diagonal(inside, False)
    rows, cols = np.nonzero(inside)
    return [(int(i), int(j)) for i, j in zip(rows, cols)]


def validate(tessellation) -> List[str]:
    """
    Run every audit and describe the violations found.

    Args:
        tessellation: Tessellation snapshot

    Returns:
        Human readable problem descriptions (empty when the mesh is valid)
    """
    graph = tessellation.graph
    triangles = tessellation.triangles
    problems: List[str] = []

    for a, b, d in find_overlaps(graph, tessellation.config.overlap_tolerance):
        problems.append(f"disks {a} and {b} overlap (center distance {d:.3f})")
    for (a, b), n in share_count_violations(triangles).items():
        problems.append(f"pair ({a}, {b}) used by {n} triangles")
    for a, b in share_count_mismatches(graph, triangles):
        problems.append(f"pair ({a}, {b}) share count does not match triangles")
    for i in degenerate_triangles(triangles):
        problems.append(f"triangle {i} repeats a vertex")
    for i, j in overlapping_triangles(graph, triangles):
        problems.append(f"triangle {i} lies inside triangle {j}")

    if problems:
        logger.warning("Tessellation audit failed", problems=len(problems))
    else:
        logger.info("Tessellation audit passed")
    return problems


def summarize(tessellation) -> Dict[str, object]:
    """Headline statistics for logging."""
    disks = tessellation.disk_array()
    radii = disks[:, 2] if len(disks) else np.zeros(0)
    occupancy = tessellation.grid.occupancy()
    return {
        "seed": tessellation.seed,
        "disks": int(len(disks)),
        "triangles": len(tessellation.triangles),
        "frontier_triangles": tessellation.frontier_triangle_count,
        "loop_triangles": len(tessellation.triangles) - tessellation.frontier_triangle_count,
        "loops": len(tessellation.loops),
        "dead_edges": tessellation.dead_edge_count,
        "open_edges": len(tessellation.open_edges),
        "iterations": tessellation.iterations,
        "mean_radius": round(float(radii.mean()), 2) if len(radii) else 0.0,
        "max_cell_load": int(occupancy.max()) if occupancy.size else 0,
        "outcomes": {k.value: v for k, v in tessellation.outcomes.items()},
    }
