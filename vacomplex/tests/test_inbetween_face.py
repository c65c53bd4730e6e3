"""Tests for InbetweenFace: cycles, before/after faces, star bookkeeping,
boundary hooks, sampling and invariant checks."""
import logging

import pytest
import numpy

from vacomplex._complex import Complex
from vacomplex._cycle import AnimatedCycle
from vacomplex._key_cells import KeyHalfedge
from vacomplex._triangulate import Triangles
from vacomplex.tests._builders import (build_square, build_key_square,
                                       registered_cells)


@pytest.fixture
def vac():
    return Complex()


@pytest.fixture
def square(vac):
    return build_square(vac)


@pytest.fixture
def face(vac, square):
    return vac.new_inbetween_face([square.cycle])


class TestCycles:
    """Tests for the cycle accessors and mutators."""

    def test_cycles_are_copied(self, square, face):
        """The face owns copies of the cycles it is given and returns."""
        assert face.num_animated_cycles() == 1
        cycle = face.animated_cycle(0)
        assert cycle == square.cycle
        cycle.nodes.pop()
        assert face.animated_cycle(0) == square.cycle
        square.cycle.nodes.pop()
        assert len(face.animated_cycle(0)) == 4

    def test_add_placeholder(self, face):
        """Adding without argument appends an empty placeholder."""
        face.add_animated_cycle()
        assert face.num_animated_cycles() == 2
        assert face.animated_cycle(1).is_empty()

    def test_add_cycle(self, vac, face):
        hole = build_square(vac, origin=(0.25, 0.25), size=0.5)
        face.add_animated_cycle(hole.cycle)
        assert face.num_animated_cycles() == 2
        assert face in hole.ie[0].spatial_star

    def test_set_cycle(self, vac, square, face):
        other = build_square(vac, origin=(3.0, 0.0))
        face.set_cycle(0, other.cycle)
        assert face.animated_cycle(0) == other.cycle
        assert face.spatial_boundary() == set(other.ie)

    def test_remove_cycle(self, square, face):
        face.remove_cycle(0)
        assert face.num_animated_cycles() == 0
        assert face.spatial_boundary() == set()

    @pytest.mark.parametrize("i", [-1, 1, 5])
    def test_index_out_of_range(self, square, face, i):
        with pytest.raises(IndexError):
            face.animated_cycle(i)
        with pytest.raises(IndexError):
            face.set_cycle(i, square.cycle)
        with pytest.raises(IndexError):
            face.remove_cycle(i)


class TestBeforeAfterFaces:
    """Tests for the explicit before and after key faces."""

    def test_bulk_setters(self, vac, face):
        kf0 = vac.new_key_face(0.0)
        kf1 = vac.new_key_face(10.0)
        face.set_before_faces([kf0])
        face.set_after_faces([kf1])
        assert face.before_faces() == {kf0}
        assert face.after_faces() == {kf1}
        assert face in kf0.temporal_star_after
        assert face in kf1.temporal_star_before

    def test_incremental(self, vac, face):
        """Incremental changes register in the temporal star of the key
        face itself."""
        kf = vac.new_key_face(0.0)
        face.add_before_face(kf)
        assert face in kf.temporal_star_after
        face.remove_before_face(kf)
        assert face not in kf.temporal_star_after
        assert face.before_faces() == set()

        kf1 = vac.new_key_face(10.0)
        face.add_after_face(kf1)
        assert face in kf1.temporal_star_before
        face.remove_after_face(kf1)
        assert face not in kf1.temporal_star_before

    def test_accessors_return_copies(self, vac, face):
        kf = vac.new_key_face(0.0)
        face.add_before_face(kf)
        face.before_faces().clear()
        assert face.before_faces() == {kf}

    def test_before_cells_union(self, vac, square, face):
        """Before cells gather the explicit faces and the cells the cycles
        start from."""
        kf = vac.new_key_face(0.0)
        face.add_before_face(kf)
        assert face.before_cells() == ({kf} | set(square.ke0)
                                       | set(square.kv0))
        assert face.after_cells() == set(square.ke1) | set(square.kv1)

    def test_lifetime(self, face):
        assert face.before_time() == 0.0
        assert face.after_time() == 10.0
        assert face.exists(5.0)
        assert not face.exists(0.0)
        assert not face.exists(10.0)
        assert not face.exists(11.0)

    def test_unbounded_lifetime(self, vac):
        """Without before or after cells a face exists at all times."""
        face = vac.new_inbetween_face()
        assert face.exists(-1e9)
        assert face.exists(1e9)


class TestStarInvariant:
    """The cells listing a face in their star are exactly its boundary."""

    def test_after_creation(self, vac, face):
        assert registered_cells(vac, face) == face.boundary()

    def test_after_edit_sequence(self, vac, square, face):
        kf0 = vac.new_key_face(0.0)
        kf1 = vac.new_key_face(10.0)
        hole = build_square(vac, origin=(0.25, 0.25), size=0.5)
        other = build_square(vac, origin=(3.0, 0.0))

        face.add_before_face(kf0)
        assert registered_cells(vac, face) == face.boundary()
        face.add_after_face(kf1)
        assert registered_cells(vac, face) == face.boundary()
        face.add_animated_cycle(hole.cycle)
        assert registered_cells(vac, face) == face.boundary()
        face.set_cycle(0, other.cycle)
        assert registered_cells(vac, face) == face.boundary()
        assert not registered_cells(vac, face) & set(square.ie)
        face.remove_after_face(kf1)
        assert registered_cells(vac, face) == face.boundary()
        face.remove_cycle(1)
        assert registered_cells(vac, face) == face.boundary()
        face.remove_before_face(kf0)
        assert registered_cells(vac, face) == face.boundary()
        face.set_before_faces([kf0])
        face.set_after_faces([])
        assert registered_cells(vac, face) == face.boundary()

    def test_removed_face_still_boundary_through_cycle(self, vac, square,
                                                       face):
        """Removing an explicit before face keeps the face registered when
        a cycle still starts from that cell."""
        kv = square.kv0[0]
        face.add_before_face(kv)
        face.remove_before_face(kv)
        assert face in kv.temporal_star_after
        assert registered_cells(vac, face) == face.boundary()

    def test_destroy(self, vac, face):
        face.destroy()
        assert registered_cells(vac, face) == set()


class TestBoundaryHooks:
    """Tests for the boundary update hooks of the face."""

    def test_replace_vertex_with_itself(self, square, face):
        """Replacing a vertex with itself leaves every sampling unchanged."""
        times = numpy.linspace(0.5, 9.5, 7)
        before = [face.get_sampling(t) for t in times]
        for v in square.iv:
            face.update_boundary_vertex(v, v)
        after = [face.get_sampling(t) for t in times]
        for a, b in zip(before, after):
            numpy.testing.assert_array_equal(a[0], b[0])

    def test_vertex_hook(self, vac, square):
        """The vertex hook forwards to every cycle."""
        face = vac.new_inbetween_face([AnimatedCycle([square.iv[0]])])
        face.update_boundary_vertex(square.iv[0], square.iv[1])
        assert face.animated_cycle(0).cells() == {square.iv[1]}
        assert face in square.iv[1].spatial_star
        assert face not in square.iv[0].spatial_star

    def test_halfedge_hook(self, vac):
        sq = build_key_square(vac)
        face = vac.new_inbetween_face([sq.cycle])
        other = vac.new_key_edge(0.0, sq.kv[1], sq.kv[0])
        face.update_boundary_halfedge(KeyHalfedge(sq.ke[0], True),
                                      KeyHalfedge(other, False))
        assert face.spatial_boundary() == {other} | set(sq.ke[1:])
        assert face.animated_cycle(0).is_closed(0.0)

    def test_edges_hook_inside_lifetime(self, vac):
        """An edge existing while the face exists is spliced."""
        sq = build_key_square(vac)
        face = vac.new_inbetween_face([sq.cycle])
        mid = vac.new_key_vertex(0.0, (0.5, 0.0))
        e1 = vac.new_key_edge(0.0, sq.kv[0], mid)
        e2 = vac.new_key_edge(0.0, mid, sq.kv[1])
        face.update_boundary_edges(sq.ke[0], [e1, e2])
        assert len(face.animated_cycle(0)) == 5
        assert face in e1.spatial_star
        assert face not in sq.ke[0].spatial_star

    def test_edges_hook_temporal_boundary_only(self, vac, square, face):
        """An edge of the temporal boundary only leaves the cycles
        unmodified."""
        edge = square.ke0[0]
        mid = vac.new_key_vertex(0.0, (0.5, 0.0))
        e1 = vac.new_key_edge(0.0, edge.start_vertex, mid)
        e2 = vac.new_key_edge(0.0, mid, edge.end_vertex)
        cycle = face.animated_cycle(0)
        face.update_boundary_edges(edge, [e1, e2])
        assert face.animated_cycle(0) == cycle
        assert registered_cells(vac, face) == face.boundary()

    def test_hooks_fire_geometry_changed(self, vac, square, face):
        changed = []
        vac.add_geometry_listener(changed.append)
        face.update_boundary_vertex(square.iv[0], square.iv[0])
        assert face in changed


class TestSampling:
    """Tests for InbetweenFace.triangulate() and get_sampling()."""

    def test_unit_square(self, face):
        """A stationary unit square samples to its 4 corners and gives 2
        triangles of total area 1."""
        for t in (0.5, 5.0, 9.5):
            loops = face.get_sampling(t)
            assert len(loops) == 1
            numpy.testing.assert_allclose(loops[0], [[0.0, 0.0], [1.0, 0.0],
                                                     [1.0, 1.0], [0.0, 1.0]])
            triangles = face.triangulate(t)
            assert len(triangles) == 2
            assert triangles.area() == pytest.approx(1.0)

    def test_square_with_hole(self, vac):
        """The area of a face with a hole is the outer area minus the hole
        area."""
        outer = build_square(vac, size=4.0)
        hole = build_square(vac, origin=(1.0, 1.0), size=2.0)
        face = vac.new_inbetween_face([outer.cycle, hole.cycle])
        triangles = face.triangulate(5.0)
        assert triangles.area() == pytest.approx(12.0)

    def test_moving_square(self, vac):
        sq = build_square(vac, shift=(2.0, 0.0))
        face = vac.new_inbetween_face([sq.cycle])
        triangles = face.triangulate(5.0)
        assert triangles.area() == pytest.approx(1.0)
        assert triangles.as_array()[:, :, 0].min() == pytest.approx(1.0)

    @pytest.mark.parametrize("t", [-1.0, 0.0, 10.0, 20.0])
    def test_existence_guard(self, face, t):
        """Triangulating outside the lifetime yields nothing, and clears
        the output."""
        out = Triangles()
        out.append((0, 0), (1, 0), (0, 1))
        res = face.triangulate(t, out)
        assert res is out
        assert len(out) == 0

    def test_no_cycle(self, vac):
        face = vac.new_inbetween_face()
        assert face.get_sampling(0.0) == []
        assert len(face.triangulate(0.0)) == 0

    def test_placeholder_cycle_samples_empty(self, face):
        face.add_animated_cycle()
        loops = face.get_sampling(5.0)
        assert len(loops) == 2
        assert loops[1].shape == (0, 2)
        assert face.triangulate(5.0).area() == pytest.approx(1.0)

    def test_cached_triangles(self, face):
        assert face.triangles(5.0) is face.triangles(5.0)

    @pytest.mark.parametrize("edit", [
        lambda face, kf: face.set_after_faces([kf]),
        lambda face, kf: face.add_after_face(kf),
    ])
    def test_cached_triangles_follow_lifetime(self, vac, face, edit):
        """Shortening the lifetime drops triangles cached at times where
        the face no longer exists."""
        assert face.triangles(5.0).area() == pytest.approx(1.0)
        edit(face, vac.new_key_face(4.0))
        assert not face.exists(5.0)
        assert len(face.triangles(5.0)) == 0

    def test_cached_triangles_after_removed_before_face(self, vac):
        ks = build_key_square(vac)
        kf = vac.new_key_face(1.0)
        face = vac.new_inbetween_face([ks.cycle], before_faces=[kf])
        assert len(face.triangles(0.0)) == 0
        face.remove_before_face(kf)
        assert face.triangles(0.0).area() == pytest.approx(1.0)

    def test_triangles_cache_is_bounded(self, face):
        """Only the most recently used times stay cached."""
        face.TRIANGLES_CACHE_SIZE = 2
        first = face.triangles(1.0)
        face.triangles(2.0)
        assert face.triangles(1.0) is first
        face.triangles(3.0)
        assert list(face._triangles) == [1.0, 3.0]


class TestCheck:
    """Tests for InbetweenFace.check()."""

    def test_valid(self, vac, face):
        assert face.check()
        assert vac.check()

    def test_disagreeing_after_times_fail(self, vac, face, caplog):
        """An after face earlier than the end of the cycles bounds the
        lifetime, and is reported."""
        face.add_after_face(vac.new_key_face(4.0))
        assert face.after_time() == 4.0
        with caplog.at_level(logging.WARNING):
            assert not face.check()
        assert 'after cells disagree' in caplog.text

    def test_disagreeing_before_times_fail(self, vac, face, caplog):
        face.set_before_faces([vac.new_key_face(2.0)])
        assert face.before_time() == 2.0
        with caplog.at_level(logging.WARNING):
            assert not face.check()
        assert 'before cells disagree' in caplog.text

    def test_placeholder_fails(self, face, caplog):
        face.add_animated_cycle()
        with caplog.at_level(logging.WARNING):
            assert not face.check()
        assert 'empty' in caplog.text

    def test_open_cycle_fails(self, vac, square):
        face = vac.new_inbetween_face([AnimatedCycle([(square.ie[0], True),
                                                      (square.ie[2], True)])])
        assert not face.check()

    def test_missing_star_entry_fails(self, square, face):
        square.ie[0].spatial_star.discard(face)
        assert not face.check()

    def test_foreign_cell_fails(self, vac, face):
        other = Complex()
        kf = other.new_key_face(0.0)
        face.add_before_face(kf)
        assert not face.check()


class TestClone:
    """Tests for InbetweenFace.clone()."""

    def test_clone_is_independent(self, vac, square, face):
        kf = vac.new_key_face(0.0)
        face.add_before_face(kf)
        clone = face.clone()
        assert clone is not face
        assert clone.animated_cycle(0) == face.animated_cycle(0)
        assert clone._cycles[0] is not face._cycles[0]
        assert clone.before_faces() == {kf}

        clone.remove_cycle(0)
        assert face.num_animated_cycles() == 1

    def test_clone_not_registered(self, square, face):
        clone = face.clone()
        assert clone not in square.ie[0].spatial_star
