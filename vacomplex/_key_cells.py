"""Key cells: vertices, edges and faces existing at a single time."""
import numpy

from vacomplex._cell import KeyCell, VertexCell, EdgeCell, FaceCell
from vacomplex._exceptions import ParseError
from vacomplex._triangulate import Triangles
from vacomplex._persistence import (new_field, format_list, format_float,
                                    get_attribute, parse_int, parse_float)


class KeyVertex(KeyCell, VertexCell):
    TYPE_NAME = 'KeyVertex'
    XML_TYPE = 'vertex'

    def __init__(self, vac, time=0.0, pos=(0.0, 0.0)):
        super().__init__(vac, time=time)
        self.x_a = numpy.array(pos, dtype=float)  # Position in the plane

    def pos(self, time=None):
        return self.x_a.copy()

    def set_pos(self, pos):
        self.x_a = numpy.array(pos, dtype=float)

    def _detach_copy(self):
        super()._detach_copy()
        self.x_a = self.x_a.copy()

    def _read_fields(self, reader):
        super()._read_fields(reader)
        reader.read_field('Position')
        self.x_a = _read_point(reader.read_float_list())

    def _save_fields(self, out):
        super()._save_fields(out)
        out.write(new_field('Position')
                  + format_list(format_float(x) for x in self.x_a))

    def _read_attributes(self, element):
        super()._read_attributes(element)
        values = [parse_float(t)
                  for t in get_attribute(element, 'position').split()]
        self.x_a = _read_point(values)

    def _write_attributes(self, element):
        super()._write_attributes(element)
        element.set('position', ' '.join(format_float(x) for x in self.x_a))


def _read_point(values):
    if len(values) != 2:
        raise ParseError(f"Expected 2 coordinates, got {len(values)}")
    return numpy.array(values, dtype=float)


class KeyEdge(KeyCell, EdgeCell):
    """
    Open edge between two key vertices.

    The edge geometry is the polyline through its start vertex, the interior
    points in ``geometry`` and its end vertex, so moving a vertex moves the
    end of every incident edge.
    """
    TYPE_NAME = 'KeyEdge'
    XML_TYPE = 'edge'

    def __init__(self, vac, time=0.0, start_vertex=None, end_vertex=None,
                 geometry=()):
        super().__init__(vac, time=time)
        self.start_vertex = start_vertex
        self.end_vertex = end_vertex
        self.geometry = numpy.array(geometry, dtype=float).reshape(-1, 2)
        self._temp_start_vertex = None
        self._temp_end_vertex = None
        self._add_me_to_star_of_boundary()

    def spatial_boundary(self):
        return {v for v in (self.start_vertex, self.end_vertex)
                if v is not None}

    def sample(self, time=None):
        """Polyline of the edge as an (N, 2) array, N >= 2."""
        return numpy.vstack([self.start_vertex.x_a, self.geometry,
                             self.end_vertex.x_a])

    def _update_boundary_vertex_impl(self, old_vertex, new_vertex):
        if self.start_vertex is old_vertex:
            self.start_vertex = new_vertex
        if self.end_vertex is old_vertex:
            self.end_vertex = new_vertex

    def _detach_copy(self):
        super()._detach_copy()
        self.geometry = self.geometry.copy()

    def remap_pointers(self, new_vac):
        super().remap_pointers(new_vac)
        self.start_vertex = new_vac.get_cell(self.start_vertex.id)
        self.end_vertex = new_vac.get_cell(self.end_vertex.id)

    def _read_fields(self, reader):
        super()._read_fields(reader)
        reader.read_field('StartVertex')
        self._temp_start_vertex = reader.read_int()
        reader.read_field('EndVertex')
        self._temp_end_vertex = reader.read_int()
        reader.read_field('Geometry')
        self.geometry = _read_points(reader.read_float_list())

    def _save_fields(self, out):
        super()._save_fields(out)
        out.write(new_field('StartVertex') + str(self.start_vertex.id))
        out.write(new_field('EndVertex') + str(self.end_vertex.id))
        out.write(new_field('Geometry') + format_list(
            format_float(x) for x in self.geometry.ravel()))

    def _read_attributes(self, element):
        super()._read_attributes(element)
        self._temp_start_vertex = parse_int(
            get_attribute(element, 'startvertex'))
        self._temp_end_vertex = parse_int(get_attribute(element, 'endvertex'))
        self.geometry = _read_points(
            [parse_float(t) for t in get_attribute(element, 'geometry').split()])

    def _write_attributes(self, element):
        super()._write_attributes(element)
        element.set('startvertex', str(self.start_vertex.id))
        element.set('endvertex', str(self.end_vertex.id))
        element.set('geometry', ' '.join(format_float(x)
                                         for x in self.geometry.ravel()))

    def read_2nd_pass(self):
        super().read_2nd_pass()
        self.start_vertex = resolve(self.vac, self._temp_start_vertex,
                                    KeyVertex)
        self.end_vertex = resolve(self.vac, self._temp_end_vertex, KeyVertex)
        self._temp_start_vertex = self._temp_end_vertex = None


def _read_points(values):
    if len(values) % 2:
        raise ParseError(f"Odd number of coordinates in edge geometry: "
                         f"{len(values)}")
    return numpy.array(values, dtype=float).reshape(-1, 2)


def resolve(vac, cell_id, cell_type):
    """Look up a cell read from a file and check its kind."""
    cell = vac.get_cell(cell_id)
    if not isinstance(cell, cell_type):
        raise ParseError(f"Cell {cell_id} is a {type(cell).__name__}, "
                         f"expected a {cell_type.__name__}")
    return cell


class KeyHalfedge:
    """A key edge together with a traversal direction.

    ``side`` is True when the halfedge goes from the start to the end vertex
    of the edge. Halfedges are values: two halfedges are equal when they
    share edge and side.
    """
    __slots__ = ('edge', 'side')

    def __init__(self, edge=None, side=True):
        self.edge = edge
        self.side = bool(side)

    def __eq__(self, other):
        if not isinstance(other, KeyHalfedge):
            return NotImplemented
        return self.edge is other.edge and self.side == other.side

    def __hash__(self):
        return hash((id(self.edge), self.side))

    def __repr__(self):
        return f"KeyHalfedge({self.edge!r}, {self.side})"

    def is_valid(self):
        return self.edge is not None

    @property
    def time(self):
        return self.edge.time

    def start_vertex(self):
        return self.edge.start_vertex if self.side else self.edge.end_vertex

    def end_vertex(self):
        return self.edge.end_vertex if self.side else self.edge.start_vertex

    def opposite(self):
        return KeyHalfedge(self.edge, not self.side)

    def sample(self, time=None):
        points = self.edge.sample(time)
        return points if self.side else points[::-1]


class KeyFace(KeyCell, FaceCell):
    """
    Key face. In this core key faces only anchor the temporal neighbourhood
    of inbetween faces (their before and after faces); they carry no
    boundary of their own and triangulate to nothing.
    """
    TYPE_NAME = 'KeyFace'
    XML_TYPE = 'face'

    def __init__(self, vac, time=0.0):
        super().__init__(vac, time=time)

    def triangulate(self, time, out=None):
        if out is None:
            out = Triangles()
        out.clear()
        return out
