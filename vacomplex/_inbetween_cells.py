"""Inbetween vertices and edges: cells moving continuously between two
key cells."""
import numpy

from vacomplex._cell import InbetweenCell, VertexCell, EdgeCell
from vacomplex._key_cells import KeyVertex, KeyEdge, KeyHalfedge, resolve
from vacomplex._persistence import (new_field, format_halfedge,
                                    get_attribute, parse_int, parse_halfedge)


def _interpolation_parameter(t0, t1, time):
    if t1 == t0:
        return 0.0
    return (time - t0) / (t1 - t0)


def resample_polyline(points, n):
    """
    Resample a polyline to n points evenly spaced by arc length.

    :param points: (M, 2) array, M >= 2
    :param n: int, number of output points, n >= 2
    :return: (n, 2) array with the same end points
    """
    points = numpy.asarray(points, dtype=float)
    lengths = numpy.linalg.norm(numpy.diff(points, axis=0), axis=1)
    s = numpy.concatenate([[0.0], numpy.cumsum(lengths)])
    if s[-1] == 0.0:  # Degenerate polyline
        return numpy.repeat(points[:1], n, axis=0)
    s_new = numpy.linspace(0.0, s[-1], n)
    return numpy.column_stack([numpy.interp(s_new, s, points[:, 0]),
                               numpy.interp(s_new, s, points[:, 1])])


class InbetweenVertex(InbetweenCell, VertexCell):
    """Vertex moving linearly from a key vertex to a later key vertex."""
    TYPE_NAME = 'InbetweenVertex'
    XML_TYPE = 'inbetweenvertex'

    def __init__(self, vac, before_vertex=None, after_vertex=None):
        super().__init__(vac)
        self.before_vertex = before_vertex
        self.after_vertex = after_vertex
        self._temp_before_vertex = None
        self._temp_after_vertex = None
        self._add_me_to_star_of_boundary()

    def before_cells(self):
        return {self.before_vertex} if self.before_vertex is not None else set()

    def after_cells(self):
        return {self.after_vertex} if self.after_vertex is not None else set()

    def pos(self, time):
        u = _interpolation_parameter(self.before_vertex.time,
                                     self.after_vertex.time, time)
        return (1.0 - u) * self.before_vertex.x_a + u * self.after_vertex.x_a

    def _update_boundary_vertex_impl(self, old_vertex, new_vertex):
        if self.before_vertex is old_vertex:
            self.before_vertex = new_vertex
        if self.after_vertex is old_vertex:
            self.after_vertex = new_vertex

    def remap_pointers(self, new_vac):
        super().remap_pointers(new_vac)
        self.before_vertex = new_vac.get_cell(self.before_vertex.id)
        self.after_vertex = new_vac.get_cell(self.after_vertex.id)

    def _read_fields(self, reader):
        super()._read_fields(reader)
        reader.read_field('BeforeVertex')
        self._temp_before_vertex = reader.read_int()
        reader.read_field('AfterVertex')
        self._temp_after_vertex = reader.read_int()

    def _save_fields(self, out):
        super()._save_fields(out)
        out.write(new_field('BeforeVertex') + str(self.before_vertex.id))
        out.write(new_field('AfterVertex') + str(self.after_vertex.id))

    def _read_attributes(self, element):
        super()._read_attributes(element)
        self._temp_before_vertex = parse_int(
            get_attribute(element, 'beforevertex'))
        self._temp_after_vertex = parse_int(
            get_attribute(element, 'aftervertex'))

    def _write_attributes(self, element):
        super()._write_attributes(element)
        element.set('beforevertex', str(self.before_vertex.id))
        element.set('aftervertex', str(self.after_vertex.id))

    def read_2nd_pass(self):
        super().read_2nd_pass()
        self.before_vertex = resolve(self.vac, self._temp_before_vertex,
                                     KeyVertex)
        self.after_vertex = resolve(self.vac, self._temp_after_vertex,
                                    KeyVertex)
        self._temp_before_vertex = self._temp_after_vertex = None


class InbetweenEdge(InbetweenCell, EdgeCell):
    """
    Edge morphing from a key halfedge to a later key halfedge.

    The spatial boundary is made of the two inbetween vertices that the edge
    goes through; the temporal boundary is made of the before and after key
    edges together with their end vertices.
    """
    TYPE_NAME = 'InbetweenEdge'
    XML_TYPE = 'inbetweenedge'

    def __init__(self, vac, before_halfedge=None, after_halfedge=None,
                 start_vertex=None, end_vertex=None):
        super().__init__(vac)
        self.before_halfedge = before_halfedge
        self.after_halfedge = after_halfedge
        self.start_vertex = start_vertex
        self.end_vertex = end_vertex
        self._temp_before_halfedge = None
        self._temp_after_halfedge = None
        self._temp_start_vertex = None
        self._temp_end_vertex = None
        self._add_me_to_star_of_boundary()

    def spatial_boundary(self):
        return {v for v in (self.start_vertex, self.end_vertex)
                if v is not None}

    def before_cells(self):
        return _halfedge_cells(self.before_halfedge)

    def after_cells(self):
        return _halfedge_cells(self.after_halfedge)

    def sample(self, time):
        """Polyline of the edge at time, as an (N, 2) array."""
        p0 = self.before_halfedge.sample()
        p1 = self.after_halfedge.sample()
        if len(p0) != len(p1):
            n = self.vac.inbetween_edge_samples if self.vac is not None else None
            n = n or max(len(p0), len(p1))
            p0 = resample_polyline(p0, n)
            p1 = resample_polyline(p1, n)
        u = _interpolation_parameter(self.before_halfedge.time,
                                     self.after_halfedge.time, time)
        return (1.0 - u) * p0 + u * p1

    def _update_boundary_vertex_impl(self, old_vertex, new_vertex):
        if self.start_vertex is old_vertex:
            self.start_vertex = new_vertex
        if self.end_vertex is old_vertex:
            self.end_vertex = new_vertex

    def _update_boundary_halfedge_impl(self, old_halfedge, new_halfedge):
        self.before_halfedge = _replace_halfedge(self.before_halfedge,
                                                 old_halfedge, new_halfedge)
        self.after_halfedge = _replace_halfedge(self.after_halfedge,
                                                old_halfedge, new_halfedge)

    def remap_pointers(self, new_vac):
        super().remap_pointers(new_vac)
        self.before_halfedge = KeyHalfedge(
            new_vac.get_cell(self.before_halfedge.edge.id),
            self.before_halfedge.side)
        self.after_halfedge = KeyHalfedge(
            new_vac.get_cell(self.after_halfedge.edge.id),
            self.after_halfedge.side)
        self.start_vertex = new_vac.get_cell(self.start_vertex.id)
        self.end_vertex = new_vac.get_cell(self.end_vertex.id)

    def _read_fields(self, reader):
        super()._read_fields(reader)
        reader.read_field('BeforeHalfedge')
        self._temp_before_halfedge = reader.read_halfedge()
        reader.read_field('AfterHalfedge')
        self._temp_after_halfedge = reader.read_halfedge()
        reader.read_field('StartVertex')
        self._temp_start_vertex = reader.read_int()
        reader.read_field('EndVertex')
        self._temp_end_vertex = reader.read_int()

    def _save_fields(self, out):
        super()._save_fields(out)
        out.write(new_field('BeforeHalfedge')
                  + _format_halfedge(self.before_halfedge))
        out.write(new_field('AfterHalfedge')
                  + _format_halfedge(self.after_halfedge))
        out.write(new_field('StartVertex') + str(self.start_vertex.id))
        out.write(new_field('EndVertex') + str(self.end_vertex.id))

    def _read_attributes(self, element):
        super()._read_attributes(element)
        self._temp_before_halfedge = parse_halfedge(
            get_attribute(element, 'beforehalfedge'))
        self._temp_after_halfedge = parse_halfedge(
            get_attribute(element, 'afterhalfedge'))
        self._temp_start_vertex = parse_int(
            get_attribute(element, 'startvertex'))
        self._temp_end_vertex = parse_int(get_attribute(element, 'endvertex'))

    def _write_attributes(self, element):
        super()._write_attributes(element)
        element.set('beforehalfedge', _format_halfedge(self.before_halfedge))
        element.set('afterhalfedge', _format_halfedge(self.after_halfedge))
        element.set('startvertex', str(self.start_vertex.id))
        element.set('endvertex', str(self.end_vertex.id))

    def read_2nd_pass(self):
        super().read_2nd_pass()
        edge_id, side = self._temp_before_halfedge
        self.before_halfedge = KeyHalfedge(resolve(self.vac, edge_id, KeyEdge),
                                           side)
        edge_id, side = self._temp_after_halfedge
        self.after_halfedge = KeyHalfedge(resolve(self.vac, edge_id, KeyEdge),
                                          side)
        self.start_vertex = resolve(self.vac, self._temp_start_vertex,
                                    InbetweenVertex)
        self.end_vertex = resolve(self.vac, self._temp_end_vertex,
                                  InbetweenVertex)
        self._temp_before_halfedge = self._temp_after_halfedge = None
        self._temp_start_vertex = self._temp_end_vertex = None


def _halfedge_cells(halfedge):
    if halfedge is None:
        return set()
    edge = halfedge.edge
    return {edge} | edge.spatial_boundary()


def _replace_halfedge(halfedge, old_halfedge, new_halfedge):
    if halfedge is None or halfedge.edge is not old_halfedge.edge:
        return halfedge
    if halfedge.side == old_halfedge.side:
        return KeyHalfedge(new_halfedge.edge, new_halfedge.side)
    return KeyHalfedge(new_halfedge.edge, not new_halfedge.side)


def _format_halfedge(halfedge):
    return format_halfedge(halfedge.edge.id, halfedge.side)
