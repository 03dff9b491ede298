"""Tests for dead-edge loop search and ear-clipping triangulation."""

import math

import pytest

from py_tessellator.core.disk_graph import MAX_SHARE, DiskGraph, Triangle
from py_tessellator.core.frontier import ExposedEdge
from py_tessellator.core.geometry import triangle_area
from py_tessellator.core.loop_closer import (
    LoopCloser,
    LoopClosureError,
    encloses_disk,
    find_loops,
    group_by_origin,
    interior_angle_sum,
    is_valid_loop,
    triangulate_loop,
)

HEXAGON = [(0, 0), (0, 10), (10, 20), (20, 10), (20, 0), (10, -5), (10, 5)]


def make_graph(points, radius=5):
    graph = DiskGraph()
    for x, y in points:
        graph.add(x, y, radius)
    return graph


def make_loop(handles):
    """Directed edges h0 -> h1 -> ... -> h0."""
    return [ExposedEdge(a, b, retries=0) for a, b in zip(handles, handles[1:] + handles[:1])]


def loop_area(tris, graph):
    return sum(triangle_area(*(graph.center(h) for h in tri.handles)) for tri in tris)


@pytest.fixture
def square():
    # Traversed with the interior on the outward (right-hand) side
    return make_graph([(0, 0), (0, 10), (10, 10), (10, 0)])


@pytest.fixture
def hexagon():
    # Convex hexagon 0-5 with disk 6 inside it, next to the edge (0, 1)
    return make_graph(HEXAGON)


@pytest.fixture
def notched():
    # Pentagon with a reflex vertex at (10, 10)
    return make_graph([(0, 0), (0, 20), (20, 20), (10, 10), (20, 0)])


class TestLoopValidation:
    """Test the angle-sum acceptance check."""

    def test_square_angle_sum(self, square):
        """Test that a correctly oriented square sums to 2*pi."""
        loop = make_loop([0, 1, 2, 3])
        assert interior_angle_sum(loop, square) == pytest.approx(2 * math.pi)
        assert is_valid_loop(loop, square)

    def test_reverse_orientation_rejected(self, square):
        """Test that a loop enclosing the hole on the wrong side fails."""
        loop = make_loop([0, 3, 2, 1])
        assert interior_angle_sum(loop, square) == pytest.approx(6 * math.pi)
        assert not is_valid_loop(loop, square)

    def test_reflex_polygon(self, notched):
        """Test that a simple polygon with a reflex vertex passes."""
        assert is_valid_loop(make_loop([0, 1, 2, 3, 4]), notched)

    def test_short_and_broken_loops(self, square):
        """Test length, chaining and repeated-vertex rejections."""
        assert not is_valid_loop(make_loop([0, 1]), square)
        broken = [ExposedEdge(0, 1), ExposedEdge(2, 3), ExposedEdge(3, 0)]
        assert not is_valid_loop(broken, square)
        assert not is_valid_loop(make_loop([0, 1, 2, 0, 3]), square)

    def test_collinear_loop_rejected(self):
        """Test that a degenerate loop fails the angle check."""
        graph = make_graph([(0, 0), (10, 0), (20, 0), (30, 0)])
        assert not is_valid_loop(make_loop([0, 1, 2, 3]), graph)


class TestTriangulateLoop:
    """Test ear removal."""

    def test_triangle_loop(self, square):
        """Test that a three-edge loop is a single triangle."""
        tris = triangulate_loop(make_loop([0, 1, 2]), square)
        assert tris == [Triangle(0, 1, 2)]

    def test_square(self, square):
        """Test that a square yields two triangles covering its area."""
        tris = triangulate_loop(make_loop([0, 1, 2, 3]), square)

        assert tris == [Triangle(0, 1, 2), Triangle(0, 2, 3)]
        assert loop_area(tris, square) == pytest.approx(100.0)
        assert square.share_count(0, 2) == 2
        assert square.share_count(0, 1) == 1

    def test_reflex_vertex_not_clipped(self, notched):
        """Test that ears are only cut at convex, empty vertices."""
        tris = triangulate_loop(make_loop([0, 1, 2, 3, 4]), notched)

        assert len(tris) == 3
        assert tris[0] == Triangle(1, 2, 3)
        assert loop_area(tris, notched) == pytest.approx(300.0)
        for a, b, count in notched.pairs():
            assert count <= MAX_SHARE

    def test_reserved_diagonal_avoided(self, square):
        """Test that a pair reserved for another loop is not used as a diagonal."""
        tris = triangulate_loop(make_loop([0, 1, 2, 3]), square, reserved=frozenset({(0, 2)}))
        assert tris == [Triangle(1, 2, 3), Triangle(0, 1, 3)]

    def test_too_short(self, square):
        """Test that loops under three edges are fatal."""
        with pytest.raises(LoopClosureError):
            triangulate_loop(make_loop([0, 1]), square)

    def test_collinear_has_no_ear(self):
        """Test that a loop with no convex vertex is fatal."""
        graph = make_graph([(0, 0), (10, 0), (20, 0), (30, 0)])
        with pytest.raises(LoopClosureError):
            triangulate_loop(make_loop([0, 1, 2, 3]), graph)


class TestLoopSearch:
    """Test grouping and breadth-first loop extraction."""

    def test_group_by_origin_dedupes(self, square):
        """Test that duplicate and fully shared edges are dropped."""
        square.add(5, -10, 5)
        square.add_triangle(0, 3, 4)
        square.add(5, 20, 5)
        square.add_triangle(3, 0, 5)
        dead = make_loop([0, 1, 2, 3]) + [ExposedEdge(0, 1), ExposedEdge(0, 3)]

        edge_map = group_by_origin(dead, square)

        assert [e.key for e in edge_map[0]] == [(0, 1)]
        # (0, 3) is shared by two triangles, so both of its directions go
        assert sorted(edge_map) == [0, 1, 2]
        assert sum(len(v) for v in edge_map.values()) == 3

    def test_find_loop_with_branch(self, square):
        """Test that a dangling branch does not stop the loop from closing."""
        square.add(30, 30, 5)
        dead = make_loop([0, 1, 2, 3]) + [ExposedEdge(2, 4)]
        edge_map = group_by_origin(dead, square)

        loops = find_loops(edge_map, square)

        assert len(loops) == 1
        assert [e.key for e in loops[0]] == [(0, 1), (1, 2), (2, 3), (3, 0)]
        assert [e.key for edges in edge_map.values() for e in edges] == [(2, 4)]

    def test_shortest_loop_first(self, hexagon):
        """Test that a hole is closed along its own rim rather than around a neighbor."""
        dead = [ExposedEdge(0, 1), ExposedEdge(1, 2), ExposedEdge(1, 6)]
        dead += make_loop([2, 3, 4, 5, 0])[:-1] + [ExposedEdge(6, 0)]
        edge_map = group_by_origin(dead, hexagon)

        loops = find_loops(edge_map, hexagon)

        assert [[e.key for e in loop] for loop in loops] == [[(0, 1), (1, 6), (6, 0)]]
        assert sorted(e.key for edges in edge_map.values() for e in edges) == [
            (1, 2), (2, 3), (3, 4), (4, 5), (5, 0)
        ]

    def test_loop_around_disk_rejected(self, hexagon):
        """Test that a loop with a disk inside it is not accepted."""
        loop = make_loop([0, 1, 2, 3, 4, 5])
        assert is_valid_loop(loop, hexagon)
        assert encloses_disk(loop, hexagon)
        assert find_loops(group_by_origin(loop, hexagon), hexagon) == []

    def test_empty_hexagon_closes(self):
        """Test that the same loop closes once nothing sits inside it."""
        graph = make_graph(HEXAGON[:6])
        loop = make_loop([0, 1, 2, 3, 4, 5])
        assert not encloses_disk(loop, graph)
        assert len(find_loops(group_by_origin(loop, graph), graph)) == 1

    def test_two_loops(self):
        """Test that separate holes are both found."""
        graph = make_graph([(0, 0), (0, 10), (10, 10), (10, 0),
                            (50, 0), (50, 10), (60, 10), (60, 0)])
        dead = make_loop([0, 1, 2, 3]) + make_loop([4, 5, 6, 7])
        loops = find_loops(group_by_origin(dead, graph), graph)
        assert len(loops) == 2


class TestLoopCloser:
    """Test the full closing pass."""

    def test_close(self, square):
        """Test that loop and open edges account for every dead edge."""
        square.add(30, 30, 5)
        dead = make_loop([0, 1, 2, 3]) + [ExposedEdge(2, 4), ExposedEdge(0, 1)]
        triangles = [Triangle(9, 9, 9)]

        result = LoopCloser(square).close(dead, triangles)

        assert result.edge_count == 5
        assert len(result.loops) == 1
        assert [e.key for e in result.open_edges] == [(2, 4)]
        assert len(result.triangles) == 2
        assert triangles[1:] == result.triangles
        assert sum(len(loop) for loop in result.loops) + len(result.open_edges) == result.edge_count

    def test_close_prefers_short_loop(self, hexagon):
        """Test that closing next to a detour fills only the real hole."""
        dead = [ExposedEdge(0, 1), ExposedEdge(1, 2), ExposedEdge(1, 6)]
        dead += make_loop([2, 3, 4, 5, 0])[:-1] + [ExposedEdge(6, 0)]

        result = LoopCloser(hexagon).close(dead)

        assert len(result.loops) == 1
        assert result.triangles == [Triangle(0, 1, 6)]
        assert len(result.open_edges) == 5

    def test_wrong_orientation_left_open(self, square):
        """Test that an unclosable cycle is reported as open edges."""
        result = LoopCloser(square).close(make_loop([0, 3, 2, 1]))
        assert result.loops == []
        assert len(result.open_edges) == 4
        assert result.triangles == []

    def test_empty(self):
        """Test that no dead edges means nothing to do."""
        result = LoopCloser(DiskGraph()).close([])
        assert result.edge_count == 0
        assert result.loops == [] and result.open_edges == []
