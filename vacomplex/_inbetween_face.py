"""
Inbetween faces: faces whose boundary topology changes over time.

The boundary of an inbetween face is a list of animated cycles, the first
one being conventionally the outer boundary and the others holes. The order
of the cycles is the render order. Independently of the cycles, the face
keeps two sets of key faces, the faces it interpolates from (before faces)
and to (after faces).

Every method changing the cells referenced by the face brackets the change
by removing the face from the star of all its boundary cells and adding it
back afterwards, so that the star of every boundary cell lists the face.
"""
import logging
import math

from vacomplex._cell import InbetweenCell, FaceCell, KeyCell
from vacomplex._cycle import AnimatedCycle
from vacomplex._key_cells import KeyFace, resolve
from vacomplex._persistence import (new_field, format_list, get_attribute,
                                    parse_int, split_bracketed)
from vacomplex._triangulate import (Triangles, create_polygon_data,
                                    tesselate_polygon)


class InbetweenFace(InbetweenCell, FaceCell):
    TYPE_NAME = 'InbetweenFace'
    XML_TYPE = 'inbetweenface'

    def __init__(self, vac, cycles=(), before_faces=(), after_faces=()):
        """
        :param vac: Complex, the owner of the face
        :param cycles: iterable of AnimatedCycle, copied
        :param before_faces: iterable of KeyFace
        :param after_faces: iterable of KeyFace
        """
        super().__init__(vac)
        self._cycles = [cycle.copy() for cycle in cycles]
        self._before_faces = set(before_faces)
        self._after_faces = set(after_faces)
        self._temp_before_faces = []
        self._temp_after_faces = []
        self._add_me_to_star_of_boundary()

    # %% Cycles
    def _check_index(self, i):
        if not 0 <= i < len(self._cycles):
            raise IndexError(f"Cycle index {i} out of range for a face with "
                             f"{len(self._cycles)} cycles")

    def add_animated_cycle(self, cycle=None):
        """
        Append a cycle. Without argument an empty placeholder is appended,
        which must be filled with set_cycle() before the face is valid.
        """
        self._cycles.append(AnimatedCycle())
        if cycle is not None:
            self.set_cycle(len(self._cycles) - 1, cycle)

    def set_cycle(self, i, cycle):
        self._check_index(i)
        self._remove_me_from_star_of_boundary()
        self._cycles[i] = cycle.copy()
        self._add_me_to_star_of_boundary()
        self.process_geometry_changed()

    def remove_cycle(self, i):
        self._check_index(i)
        self._remove_me_from_star_of_boundary()
        del self._cycles[i]
        self._add_me_to_star_of_boundary()
        self.process_geometry_changed()

    def num_animated_cycles(self):
        return len(self._cycles)

    def animated_cycle(self, i):
        """Copy of the i-th cycle."""
        self._check_index(i)
        return self._cycles[i].copy()

    # %% Before and after faces
    def set_before_faces(self, before_faces):
        self._remove_me_from_star_of_boundary()
        self._before_faces = set(before_faces)
        self._add_me_to_star_of_boundary()
        self.process_geometry_changed()

    def set_after_faces(self, after_faces):
        self._remove_me_from_star_of_boundary()
        self._after_faces = set(after_faces)
        self._add_me_to_star_of_boundary()
        self.process_geometry_changed()

    def add_before_face(self, before_face):
        self._before_faces.add(before_face)
        self._add_me_to_temporal_star_after_of(before_face)
        self.process_geometry_changed()

    def add_after_face(self, after_face):
        self._after_faces.add(after_face)
        self._add_me_to_temporal_star_before_of(after_face)
        self.process_geometry_changed()

    def remove_before_face(self, before_face):
        self._before_faces.discard(before_face)
        # Still a before cell through a cycle: stays in the temporal star
        if before_face not in self.before_cells():
            self._remove_me_from_temporal_star_after_of(before_face)
        self.process_geometry_changed()

    def remove_after_face(self, after_face):
        self._after_faces.discard(after_face)
        if after_face not in self.after_cells():
            self._remove_me_from_temporal_star_before_of(after_face)
        self.process_geometry_changed()

    def before_faces(self):
        return set(self._before_faces)

    def after_faces(self):
        return set(self._after_faces)

    # %% Boundary
    def before_cells(self):
        res = set(self._before_faces)
        for cycle in self._cycles:
            res |= cycle.before_cells()
        return res

    def after_cells(self):
        res = set(self._after_faces)
        for cycle in self._cycles:
            res |= cycle.after_cells()
        return res

    def spatial_boundary(self):
        res = set()
        for cycle in self._cycles:
            res |= cycle.cells()
        return res

    def _update_boundary_vertex_impl(self, old_vertex, new_vertex):
        for cycle in self._cycles:
            cycle.replace_vertex(old_vertex, new_vertex)

    def _update_boundary_halfedge_impl(self, old_halfedge, new_halfedge):
        for cycle in self._cycles:
            cycle.replace_halfedge(old_halfedge, new_halfedge)

    def _update_boundary_edges_impl(self, old_edge, new_edges):
        # An edge in the temporal boundary only is not affected
        if not self.exists(old_edge.time):
            return
        for cycle in self._cycles:
            cycle.replace_edges(old_edge, new_edges)

    # %% Sampling
    def triangulate(self, time, out=None):
        """
        Triangulate the face at time, holes included.

        :param time: float
        :param out: Triangles, optional, cleared then filled
        :return: out, empty when the face does not exist at time
        """
        if out is None:
            out = Triangles()
        out.clear()
        if self.exists(time):
            tesselate_polygon(create_polygon_data(self._cycles, time), out)
        return out

    def get_sampling(self, time):
        """Point loops of every cycle at time, as a list of (N, 2) arrays."""
        return create_polygon_data(self._cycles, time)

    # %% Copy
    def _detach_copy(self):
        super()._detach_copy()
        self._cycles = [cycle.copy() for cycle in self._cycles]
        self._before_faces = set(self._before_faces)
        self._after_faces = set(self._after_faces)
        self._temp_before_faces = list(self._temp_before_faces)
        self._temp_after_faces = list(self._temp_after_faces)

    def remap_pointers(self, new_vac):
        super().remap_pointers(new_vac)
        for cycle in self._cycles:
            cycle.remap_pointers(new_vac)
        self._before_faces = {new_vac.get_cell(face.id)
                              for face in self._before_faces}
        self._after_faces = {new_vac.get_cell(face.id)
                             for face in self._after_faces}

    # %% Persistence
    def _read_fields(self, reader):
        super()._read_fields(reader)
        reader.read_field('Cycles')
        self._cycles = [AnimatedCycle.from_string(s)
                        for s in reader.read_list()]
        reader.read_field('BeforeFaces')
        self._temp_before_faces = reader.read_id_list()
        reader.read_field('AfterFaces')
        self._temp_after_faces = reader.read_id_list()

    def _save_fields(self, out):
        super()._save_fields(out)
        out.write(new_field('Cycles')
                  + format_list(cycle.to_string() for cycle in self._cycles))
        out.write(new_field('BeforeFaces')
                  + format_list(sorted(f.id for f in self._before_faces)))
        out.write(new_field('AfterFaces')
                  + format_list(sorted(f.id for f in self._after_faces)))

    def _read_attributes(self, element):
        super()._read_attributes(element)
        self._cycles = [AnimatedCycle.from_string(s) for s in
                        split_bracketed(get_attribute(element, 'cycles'))]
        self._temp_before_faces = [
            parse_int(t) for t in get_attribute(element, 'beforefaces').split()]
        self._temp_after_faces = [
            parse_int(t) for t in get_attribute(element, 'afterfaces').split()]

    def _write_attributes(self, element):
        super()._write_attributes(element)
        element.set('cycles', ' '.join(cycle.to_string()
                                       for cycle in self._cycles))
        element.set('beforefaces', ' '.join(
            str(i) for i in sorted(f.id for f in self._before_faces)))
        element.set('afterfaces', ' '.join(
            str(i) for i in sorted(f.id for f in self._after_faces)))

    def read_2nd_pass(self):
        super().read_2nd_pass()
        for cycle in self._cycles:
            cycle.convert_temp_ids_to_pointers(self.vac)
        self._before_faces = {resolve(self.vac, i, KeyFace)
                              for i in self._temp_before_faces}
        self._after_faces = {resolve(self.vac, i, KeyFace)
                             for i in self._temp_after_faces}
        self._temp_before_faces = []
        self._temp_after_faces = []

    # %% Invariants
    def _check_times(self):
        """Times at which the cycles are checked for closure: key times of
        the cycle cells inside the face lifetime, and midpoints between
        consecutive such times."""
        anchors = sorted({cell.time for cycle in self._cycles
                          for cell in cycle.cells()
                          if isinstance(cell, KeyCell)
                          and self.exists(cell.time)})
        bounds = [self.before_time()] + anchors + [self.after_time()]
        return anchors + [_midpoint(a, b) for a, b in zip(bounds, bounds[1:])]

    def check(self):
        """
        Check the invariants of the face:

        - no cycle is an empty placeholder,
        - every referenced cell belongs to the complex of the face,
        - the face is in the star of every cell of its boundary,
        - the before cells share one time, and so do the after cells,
        - every cycle is closed throughout the lifetime of the face.

        :return: bool, failures are logged
        """
        ok = True
        for side, cells in (('before', self.before_cells()),
                            ('after', self.after_cells())):
            times = sorted({cell.time for cell in cells})
            if len(times) > 1:
                logging.warning(f"{self!r}: {side} cells disagree in time "
                                f"{times}")
                ok = False

        for i, cycle in enumerate(self._cycles):
            if cycle.is_empty():
                logging.warning(f"{self!r}: cycle {i} is empty")
                ok = False

        for cell in self.boundary():
            if self.vac is None or self.vac.cells.get(cell.id) is not cell:
                logging.warning(f"{self!r}: {cell!r} is not in the complex")
                ok = False
        stars = ((self.spatial_boundary(), 'spatial_star'),
                 (self.before_cells(), 'temporal_star_after'),
                 (self.after_cells(), 'temporal_star_before'))
        for cells, star in stars:
            for cell in cells:
                if self not in getattr(cell, star):
                    logging.warning(f"{self!r} is missing from the {star} "
                                    f"of {cell!r}")
                    ok = False

        for time in self._check_times():
            for i, cycle in enumerate(self._cycles):
                if not cycle.is_closed(time):
                    logging.warning(f"{self!r}: cycle {i} is not closed at "
                                    f"time {time}")
                    ok = False
        return ok


def _midpoint(a, b):
    if math.isinf(a) and math.isinf(b):
        return 0.0
    if math.isinf(a):
        return b - 1.0
    if math.isinf(b):
        return a + 1.0
    return 0.5 * (a + b)
