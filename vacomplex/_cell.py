"""
Cell base classes.

A cell is identified by an integer id, unique in the Complex that owns it.
Cells are classified twice: by temporal kind (a KeyCell exists at a single
time, an InbetweenCell over an open time interval) and by dimension (vertex,
edge, face). Concrete cells combine one class of each kind, e.g.
``class KeyVertex(KeyCell, VertexCell)``.

The star of a cell is the set of cells that have it in their boundary. It
is stored in three parts: the spatial star, and the temporal stars before
and after (inbetween cells that end, respectively start, at a key cell).
Cells never own each other: the Complex owns every cell and cells only keep
references to their boundary and star.
"""
import collections
import copy
import math

from vacomplex._persistence import (new_field, get_attribute, parse_int,
                                    parse_float, format_float)


class Cell:
    TYPE_NAME = None  # Type line in the text format
    XML_TYPE = None  # Element tag in the XML format

    def __init__(self, vac):
        self.vac = vac
        self.id = -1  # assigned by the Complex
        self.spatial_star = set()
        self.temporal_star_before = set()
        self.temporal_star_after = set()

    def __repr__(self):
        return f"{type(self).__name__}({self.id})"

    # %% Time
    def exists(self, time):
        raise NotImplementedError("This method is only implemented with an "
                                  "associated child of the base class.")

    # %% Boundary and star
    def spatial_boundary(self):
        return set()

    def before_cells(self):
        return set()

    def after_cells(self):
        return set()

    def boundary(self):
        """Full boundary: spatial boundary plus the before and after cells."""
        return self.spatial_boundary() | self.before_cells() | self.after_cells()

    def star(self):
        return (self.spatial_star | self.temporal_star_before
                | self.temporal_star_after)

    def _add_me_to_star_of_boundary(self):
        for cell in self.spatial_boundary():
            cell.spatial_star.add(self)
        for cell in self.before_cells():
            cell.temporal_star_after.add(self)
        for cell in self.after_cells():
            cell.temporal_star_before.add(self)

    def _remove_me_from_star_of_boundary(self):
        for cell in self.spatial_boundary():
            cell.spatial_star.discard(self)
        for cell in self.before_cells():
            cell.temporal_star_after.discard(self)
        for cell in self.after_cells():
            cell.temporal_star_before.discard(self)

    def _add_me_to_temporal_star_after_of(self, cell):
        cell.temporal_star_after.add(self)

    def _add_me_to_temporal_star_before_of(self, cell):
        cell.temporal_star_before.add(self)

    def _remove_me_from_temporal_star_after_of(self, cell):
        cell.temporal_star_after.discard(self)

    def _remove_me_from_temporal_star_before_of(self, cell):
        cell.temporal_star_before.discard(self)

    def destroy(self):
        """Deregister from the star of every boundary cell."""
        self._remove_me_from_star_of_boundary()

    # %% Boundary updates
    def update_boundary_vertex(self, old_vertex, new_vertex):
        """A key vertex of the boundary has been replaced by another one."""
        self._update_boundary(self._update_boundary_vertex_impl,
                              old_vertex, new_vertex)

    def update_boundary_halfedge(self, old_halfedge, new_halfedge):
        """A key halfedge of the boundary has been replaced by another one."""
        self._update_boundary(self._update_boundary_halfedge_impl,
                              old_halfedge, new_halfedge)

    def update_boundary_edges(self, old_edge, new_edges):
        """A key edge of the boundary has been replaced by a sequence of
        edges."""
        self._update_boundary(self._update_boundary_edges_impl,
                              old_edge, list(new_edges))

    def _update_boundary(self, impl, old, new):
        self._remove_me_from_star_of_boundary()
        impl(old, new)
        self._add_me_to_star_of_boundary()
        self.process_geometry_changed()

    def _update_boundary_vertex_impl(self, old_vertex, new_vertex):
        pass

    def _update_boundary_halfedge_impl(self, old_halfedge, new_halfedge):
        pass

    def _update_boundary_edges_impl(self, old_edge, new_edges):
        pass

    # %% Geometry
    def process_geometry_changed(self):
        """Invalidate cached geometry of this cell and of its whole star."""
        self._clear_cached_geometry()
        if self.vac is not None:
            self.vac._notify_geometry_changed(self)
        for cell in self.star():
            cell.process_geometry_changed()

    def _clear_cached_geometry(self):
        pass

    # %% Copy
    def clone(self):
        """Copy of this cell. Referenced cells are shared, not cloned."""
        other = copy.copy(self)
        other._detach_copy()
        return other

    def _detach_copy(self):
        # Give a shallow copy its own containers
        self.spatial_star = set(self.spatial_star)
        self.temporal_star_before = set(self.temporal_star_before)
        self.temporal_star_after = set(self.temporal_star_after)

    def remap_pointers(self, new_vac):
        """Point every cell reference to the cell with the same id in
        new_vac."""
        self.vac = new_vac
        self.spatial_star = {new_vac.get_cell(c.id) for c in self.spatial_star}
        self.temporal_star_before = {new_vac.get_cell(c.id)
                                     for c in self.temporal_star_before}
        self.temporal_star_after = {new_vac.get_cell(c.id)
                                    for c in self.temporal_star_after}

    # %% Persistence
    @classmethod
    def read(cls, vac, reader):
        """First loading pass from a text stream. References to other cells
        are kept as ids until read_2nd_pass()."""
        cell = cls(vac)
        cell._read_fields(reader)
        return cell

    @classmethod
    def read_xml(cls, vac, element):
        """First loading pass from an XML element."""
        cell = cls(vac)
        cell._read_attributes(element)
        return cell

    def read_2nd_pass(self):
        """Resolve the ids read in the first pass, once every cell exists."""
        pass

    def save(self, out):
        out.write(self.TYPE_NAME)
        self._save_fields(out)
        out.write('\n')

    def write(self, parent):
        """Append this cell as an XML element of parent."""
        element = parent.makeelement(self.XML_TYPE, {})
        self._write_attributes(element)
        parent.append(element)
        return element

    def _read_fields(self, reader):
        reader.read_field('ID')
        self.id = reader.read_int()

    def _save_fields(self, out):
        out.write(new_field('ID') + str(self.id))

    def _read_attributes(self, element):
        self.id = parse_int(get_attribute(element, 'id'))

    def _write_attributes(self, element):
        element.set('id', str(self.id))

    def check(self):
        return True


class KeyCell(Cell):
    """Cell existing at a single time."""

    def __init__(self, vac, time=0.0, **kwargs):
        super().__init__(vac, **kwargs)
        self.time = float(time)

    def exists(self, time):
        return time == self.time

    def _read_fields(self, reader):
        super()._read_fields(reader)
        reader.read_field('Time')
        self.time = reader.read_float()

    def _save_fields(self, out):
        super()._save_fields(out)
        out.write(new_field('Time') + format_float(self.time))

    def _read_attributes(self, element):
        super()._read_attributes(element)
        self.time = parse_float(get_attribute(element, 'frame'))

    def _write_attributes(self, element):
        super()._write_attributes(element)
        element.set('frame', format_float(self.time))


class InbetweenCell(Cell):
    """
    Cell existing over the open interval (before_time, after_time).

    The interval bounds are the times of the before and after cells, which
    should be key cells sharing one time. When they do not, the interval is
    the one where the cell exists after all of its before cells and before
    all of its after cells. Without before (after) cells the interval is
    unbounded on that side.
    """

    def before_time(self):
        return max((cell.time for cell in self.before_cells()),
                   default=-math.inf)

    def after_time(self):
        return min((cell.time for cell in self.after_cells()),
                   default=math.inf)

    def exists(self, time):
        return self.before_time() < time < self.after_time()


class VertexCell(Cell):
    pass


class EdgeCell(Cell):
    pass


class FaceCell(Cell):
    """
    Face cells cache their triangulation per time. The cache keeps the
    TRIANGLES_CACHE_SIZE most recently used times.
    """
    TRIANGLES_CACHE_SIZE = 128

    def __init__(self, vac, **kwargs):
        super().__init__(vac, **kwargs)
        self._triangles = collections.OrderedDict()

    def triangulate(self, time, out=None):
        raise NotImplementedError("This method is only implemented with an "
                                  "associated child of the base class.")

    def triangles(self, time):
        """Cached triangulation at time, invalidated when geometry changes."""
        try:
            self._triangles.move_to_end(time)
        except KeyError:
            self._triangles[time] = self.triangulate(time)
            if len(self._triangles) > self.TRIANGLES_CACHE_SIZE:
                self._triangles.popitem(last=False)
        return self._triangles[time]

    def _clear_cached_geometry(self):
        super()._clear_cached_geometry()
        self._triangles = collections.OrderedDict()

    def _detach_copy(self):
        super()._detach_copy()
        self._triangles = collections.OrderedDict()
