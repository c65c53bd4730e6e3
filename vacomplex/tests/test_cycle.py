"""Tests for AnimatedCycle sampling, boundary rewrites and string form."""
import pytest
import numpy

from vacomplex._complex import Complex
from vacomplex._cycle import AnimatedCycle, CycleNode
from vacomplex._exceptions import ParseError
from vacomplex._key_cells import KeyHalfedge
from vacomplex.tests._builders import build_square, build_key_square


@pytest.fixture
def vac():
    return Complex()


class TestCycleNodes:
    """Tests for the node conversions of the AnimatedCycle constructor."""

    def test_bare_edge_is_forward(self, vac):
        """A bare edge is traversed in its own direction."""
        sq = build_key_square(vac)
        cycle = AnimatedCycle([sq.ke[0]])
        assert cycle.nodes == [CycleNode(sq.ke[0], True)]

    def test_halfedge_and_tuple(self, vac):
        """KeyHalfedge and (cell, side) tuples give edge nodes."""
        sq = build_key_square(vac)
        cycle = AnimatedCycle([KeyHalfedge(sq.ke[0], False), (sq.ke[1], 1)])
        assert cycle.nodes[0] == CycleNode(sq.ke[0], False)
        assert cycle.nodes[1] == CycleNode(sq.ke[1], True)

    def test_vertex_has_no_side(self, vac):
        sq = build_key_square(vac)
        cycle = AnimatedCycle([(sq.kv[0], True)])
        assert cycle.nodes[0].side is None
        assert not cycle.nodes[0].is_edge()

    def test_invalid_node(self):
        with pytest.raises(TypeError):
            AnimatedCycle([42])

    def test_backward_node_reverses_vertices(self, vac):
        """A backward node starts at the end vertex of its edge."""
        sq = build_key_square(vac)
        node = CycleNode(sq.ke[0], False)
        assert node.start_vertex() is sq.kv[1]
        assert node.end_vertex() is sq.kv[0]
        numpy.testing.assert_allclose(node.sample(0.0),
                                      [[1.0, 0.0], [0.0, 0.0]])


class TestCycleSampling:
    """Tests for AnimatedCycle.sample() and closure."""

    def test_key_square(self, vac):
        """Every halfedge contributes its points minus the last one."""
        sq = build_key_square(vac)
        points = sq.cycle.sample(0.0)
        assert len(points) == 4
        numpy.testing.assert_allclose(points, [[0.0, 0.0], [1.0, 0.0],
                                               [1.0, 1.0], [0.0, 1.0]])

    def test_animated_square_moves(self, vac):
        """Inbetween edges interpolate linearly between key edges."""
        sq = build_square(vac, shift=(2.0, 0.0))
        points = numpy.array(sq.cycle.sample(5.0))
        numpy.testing.assert_allclose(points, [[1.0, 0.0], [2.0, 0.0],
                                               [2.0, 1.0], [1.0, 1.0]])

    def test_appends_to_out(self, vac):
        sq = build_key_square(vac)
        out = [numpy.array([9.0, 9.0])]
        res = sq.cycle.sample(0.0, out)
        assert res is out
        assert len(out) == 5

    def test_nothing_outside_lifetime(self, vac):
        """Cells not existing at time are filtered out."""
        sq = build_square(vac)
        assert sq.cycle.sample(20.0) == []
        key_sq = build_key_square(vac, time=3.0)
        assert key_sq.cycle.sample(4.0) == []

    def test_steiner_cycle(self, vac):
        """Without edges a cycle samples to its vertex positions."""
        sq = build_square(vac, shift=(0.0, 4.0))
        cycle = AnimatedCycle([sq.iv[0]])
        points = cycle.sample(5.0)
        assert len(points) == 1
        numpy.testing.assert_allclose(points[0], [0.0, 2.0])

    def test_empty_cycle(self):
        cycle = AnimatedCycle()
        assert cycle.is_empty()
        assert cycle.sample(0.0) == []
        assert cycle.is_closed(0.0)

    def test_closed(self, vac):
        sq = build_square(vac)
        for t in (0.5, 5.0, 9.5):
            assert sq.cycle.is_closed(t)

    def test_not_closed(self, vac):
        """Two opposite sides of the square do not chain."""
        sq = build_square(vac)
        cycle = AnimatedCycle([(sq.ie[0], True), (sq.ie[2], True)])
        assert not cycle.is_closed(5.0)

    def test_closed_with_backward_nodes(self, vac):
        """The square traversed clockwise is closed too."""
        sq = build_key_square(vac)
        cycle = AnimatedCycle([(edge, False) for edge in reversed(sq.ke)])
        assert cycle.is_closed(0.0)
        numpy.testing.assert_allclose(cycle.sample(0.0),
                                      [[0.0, 0.0], [0.0, 1.0],
                                       [1.0, 1.0], [1.0, 0.0]])


class TestCycleBoundary:
    """Tests for the cells, before cells and after cells of a cycle."""

    def test_cells(self, vac):
        sq = build_square(vac)
        assert sq.cycle.cells() == set(sq.ie)

    def test_before_after_cells(self, vac):
        """Before cells are the key edges and vertices the cycle starts
        from; after cells those it ends at."""
        sq = build_square(vac)
        assert sq.cycle.before_cells() == set(sq.ke0) | set(sq.kv0)
        assert sq.cycle.after_cells() == set(sq.ke1) | set(sq.kv1)

    def test_key_cycle_has_no_temporal_boundary(self, vac):
        sq = build_key_square(vac)
        assert sq.cycle.before_cells() == set()
        assert sq.cycle.after_cells() == set()

    def test_earliest_cells_only(self, vac):
        """Inbetween nodes starting later do not contribute before cells."""
        sq = build_square(vac, t0=0.0, t1=10.0)
        late = build_square(vac, origin=(5.0, 0.0), t0=2.0, t1=10.0)
        cycle = AnimatedCycle([(sq.ie[0], True), (late.ie[0], True)])
        assert cycle.before_cells() == sq.ie[0].before_cells()


class TestCycleRewrites:
    """Tests for replace_vertex, replace_halfedge and replace_edges."""

    def test_replace_vertex(self, vac):
        sq = build_square(vac)
        cycle = AnimatedCycle([sq.iv[0]])
        cycle.replace_vertex(sq.iv[0], sq.iv[1])
        assert cycle.nodes == [CycleNode(sq.iv[1])]

    def test_replace_vertex_with_itself(self, vac):
        sq = build_square(vac)
        before = sq.cycle.copy()
        sq.cycle.replace_vertex(sq.iv[0], sq.iv[0])
        assert sq.cycle == before

    def test_replace_halfedge_same_side(self, vac):
        sq = build_key_square(vac)
        other = vac.new_key_edge(0.0, sq.kv[1], sq.kv[0])
        sq.cycle.replace_halfedge(KeyHalfedge(sq.ke[0], True),
                                  KeyHalfedge(other, False))
        assert sq.cycle.nodes[0] == CycleNode(other, False)
        assert sq.cycle.is_closed(0.0)

    def test_replace_halfedge_opposite_side(self, vac):
        """A node on the opposite side of the old halfedge gets the
        opposite side of the new one."""
        sq = build_key_square(vac)
        other = vac.new_key_edge(0.0, sq.kv[1], sq.kv[0])
        sq.cycle.replace_halfedge(KeyHalfedge(sq.ke[0], False),
                                  KeyHalfedge(other, True))
        assert sq.cycle.nodes[0] == CycleNode(other, False)

    def test_replace_edges_forward(self, vac):
        """A forward node is replaced by the new edges in order."""
        sq = build_key_square(vac)
        mid = vac.new_key_vertex(0.0, (0.5, 0.0))
        e1 = vac.new_key_edge(0.0, sq.kv[0], mid)
        e2 = vac.new_key_edge(0.0, mid, sq.kv[1])
        sq.cycle.replace_edges(sq.ke[0], [e1, e2])
        assert len(sq.cycle) == 5
        assert sq.cycle.nodes[:2] == [CycleNode(e1, True),
                                      CycleNode(e2, True)]
        assert sq.cycle.is_closed(0.0)

    def test_replace_edges_backward(self, vac):
        """A backward node is replaced by the new edges in reverse order,
        each one backward."""
        sq = build_key_square(vac)
        cycle = AnimatedCycle([(edge, False) for edge in reversed(sq.ke)])
        mid = vac.new_key_vertex(0.0, (0.5, 0.0))
        e1 = vac.new_key_edge(0.0, sq.kv[0], mid)
        e2 = vac.new_key_edge(0.0, mid, sq.kv[1])
        cycle.replace_edges(sq.ke[0], [e1, e2])
        assert cycle.nodes[-2:] == [CycleNode(e2, False),
                                    CycleNode(e1, False)]
        assert cycle.is_closed(0.0)
        assert len(cycle.sample(0.0)) == 5

    def test_copy_is_independent(self, vac):
        """Copies share cells but not nodes."""
        sq = build_square(vac)
        cycle = sq.cycle.copy()
        assert cycle == sq.cycle
        cycle.replace_vertex(sq.iv[0], sq.iv[1])
        cycle.nodes[0].side = False
        assert sq.cycle.nodes[0].side is True


class TestCycleString:
    """Tests for the compact string form."""

    def test_to_string(self, vac):
        sq = build_key_square(vac)
        cycle = AnimatedCycle([(sq.ke[0], True), (sq.ke[1], False),
                               sq.kv[2]])
        expected = f"[{sq.ke[0].id}+ {sq.ke[1].id}- {sq.kv[2].id}]"
        assert cycle.to_string() == expected

    def test_empty(self):
        assert AnimatedCycle().to_string() == '[]'
        assert AnimatedCycle.from_string('[]').is_empty()

    def test_from_string_keeps_ids(self):
        """Unresolved cycles write back their ids unchanged."""
        cycle = AnimatedCycle.from_string('[3+ 5- 7]')
        assert cycle.to_string() == '[3+ 5- 7]'
        assert cycle.nodes == []

    def test_from_string_whitespace(self):
        cycle = AnimatedCycle.from_string('  [ 3+   5- ]  ')
        assert cycle.to_string() == '[3+ 5-]'

    @pytest.mark.parametrize("string", ['3+ 5-', '[3+ 5-', '[3* 5-]',
                                        '[+3]', '[a]'])
    def test_from_string_malformed(self, string):
        with pytest.raises(ParseError):
            AnimatedCycle.from_string(string)

    def test_convert_temp_ids(self, vac):
        sq = build_key_square(vac)
        string = sq.cycle.to_string()
        cycle = AnimatedCycle.from_string(string)
        cycle.convert_temp_ids_to_pointers(vac)
        assert cycle == sq.cycle

    def test_convert_wrong_kind(self, vac):
        """An edge token must reference an edge, a vertex token a vertex."""
        sq = build_key_square(vac)
        cycle = AnimatedCycle.from_string(f"[{sq.kv[0].id}+]")
        with pytest.raises(ParseError):
            cycle.convert_temp_ids_to_pointers(vac)
        cycle = AnimatedCycle.from_string(f"[{sq.ke[0].id}]")
        with pytest.raises(ParseError):
            cycle.convert_temp_ids_to_pointers(vac)
