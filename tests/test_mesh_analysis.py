"""Tests for post-run mesh audits."""

from py_tessellator.core.disk_graph import DiskGraph, Triangle
from py_tessellator.core.mesh_analysis import (
    degenerate_triangles,
    find_overlaps,
    overlapping_triangles,
    share_count_mismatches,
    share_count_violations,
    triangle_pair_usage,
)


class TestAudits:
    """Test each audit against hand-built meshes."""

    def test_find_overlaps(self):
        """Test that only pairs closer than the tolerance allows are reported."""
        graph = DiskGraph()
        graph.add(0, 0, 10)
        graph.add(19, 0, 10)   # 1 unit of overlap, within tolerance 2
        graph.add(0, 15, 10)   # 5 units of overlap with disk 0
        overlaps = find_overlaps(graph, 2.0)

        assert [(a, b) for a, b, _ in overlaps] == [(0, 2)]
        assert overlaps[0][2] == 15.0

    def test_no_disks(self):
        """Test that an empty graph has no overlaps."""
        assert find_overlaps(DiskGraph(), 2.0) == []

    def test_pair_usage(self):
        """Test counting of unordered pairs over triangles."""
        usage = triangle_pair_usage([Triangle(0, 1, 2), Triangle(1, 0, 3)])
        assert usage[(0, 1)] == 2
        assert usage[(1, 2)] == 1

    def test_violations(self):
        """Test that a pair in three triangles is flagged."""
        tris = [Triangle(0, 1, 2), Triangle(1, 0, 3), Triangle(0, 1, 4)]
        assert share_count_violations(tris) == {(0, 1): 3}

    def test_mismatches(self):
        """Test that bookkeeping out of step with triangles is found."""
        graph = DiskGraph()
        for x in range(4):
            graph.add(x * 20, 0, 10)
        tri = graph.add_triangle(0, 1, 2)
        assert share_count_mismatches(graph, [tri]) == []
        assert share_count_mismatches(graph, []) == [(0, 1), (0, 2), (1, 2)]
        assert share_count_mismatches(graph, [tri, Triangle(1, 2, 3)]) != []

    def test_degenerate(self):
        """Test detection of repeated vertices."""
        assert degenerate_triangles([Triangle(0, 1, 2), Triangle(3, 3, 4)]) == [1]

    def test_overlapping_triangles(self):
        """Test that a triangle folded over its neighbor is reported."""
        graph = DiskGraph()
        for x, y in [(0, 0), (10, 0), (0, 10), (10, 10), (5, 2)]:
            graph.add(x, y, 1)
        quad = [Triangle(0, 1, 2), Triangle(1, 3, 2)]
        assert overlapping_triangles(graph, quad) == []
        assert overlapping_triangles(graph, [Triangle(0, 1, 2), Triangle(0, 1, 4)]) == [(1, 0)]
        assert overlapping_triangles(graph, quad[:1]) == []
