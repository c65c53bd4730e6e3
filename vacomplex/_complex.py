"""
The vector animation complex: the container owning every cell.

Cells reference each other (faces reference edges, edges reference
vertices, and every cell references the cells of its star), but only the
Complex owns them. It is an arena keyed by cell id: cells are created and
deleted through it, and deleting a cell first deletes every cell depending
on it.

Loading is done in two passes, since cells reference each other cyclically
and may appear in any order in a file: every cell is first built with its
references stored as ids, then, once all cells exist, every id is resolved
(read_2nd_pass) and each cell registers itself in the star of its boundary.
"""
# Std. Library
import io
import logging
import os
import xml.etree.ElementTree as ET

# Module specific imports
from vacomplex._exceptions import ParseError, DanglingReferenceError
from vacomplex._key_cells import KeyVertex, KeyEdge, KeyFace
from vacomplex._inbetween_cells import InbetweenVertex, InbetweenEdge
from vacomplex._inbetween_face import InbetweenFace
from vacomplex._persistence import TextReader

CELL_TYPES = (KeyVertex, KeyEdge, KeyFace,
              InbetweenVertex, InbetweenEdge, InbetweenFace)
_TEXT_TYPES = {cell_type.TYPE_NAME: cell_type for cell_type in CELL_TYPES}
_XML_TYPES = {cell_type.XML_TYPE: cell_type for cell_type in CELL_TYPES}


class Complex:
    def __init__(self, inbetween_edge_samples=None):
        """
        A vector animation complex, described as a cache of cells keyed by
        id together with their boundary and star relations.

        Important methods:
            Cell creation:
                    Complex.new_key_vertex, Complex.new_key_edge, ...
            Edits propagated to the boundary of dependent cells:
                    Complex.replace_vertex, Complex.replace_halfedge,
                    Complex.replace_edge, Complex.cut_edge,
                    Complex.move_vertex, Complex.delete_cell
            Persistence:
                    Complex.to_text, Complex.from_text, Complex.to_xml,
                    Complex.from_xml, Complex.save_complex,
                    Complex.load_complex

        :param inbetween_edge_samples: int, optional
                Number of points of an inbetween edge whose before and after
                key edges have polylines of different lengths. By default
                the longer of the two lengths is used.
        """
        self.cells = {}  # id -> cell
        self.index = -1  # Last issued id
        self.inbetween_edge_samples = inbetween_edge_samples
        self._geometry_listeners = []

    def __repr__(self):
        return f"Complex({len(self.cells)} cells)"

    def __len__(self):
        return len(self.cells)

    def __iter__(self):
        """Cells in increasing id order."""
        return iter([self.cells[i] for i in sorted(self.cells)])

    def __contains__(self, cell):
        return self.cells.get(cell.id) is cell

    def get_cell(self, cell_id):
        try:
            return self.cells[cell_id]
        except KeyError:
            raise DanglingReferenceError(
                f"No cell with id {cell_id} in the complex") from None

    def _of_type(self, cell_type):
        return [cell for cell in self if type(cell) is cell_type]

    def key_vertices(self):
        return self._of_type(KeyVertex)

    def key_edges(self):
        return self._of_type(KeyEdge)

    def key_faces(self):
        return self._of_type(KeyFace)

    def inbetween_vertices(self):
        return self._of_type(InbetweenVertex)

    def inbetween_edges(self):
        return self._of_type(InbetweenEdge)

    def inbetween_faces(self):
        return self._of_type(InbetweenFace)

    # %% Cell creation
    def _insert_cell(self, cell):
        self.index += 1
        cell.id = self.index
        cell.vac = self
        self.cells[cell.id] = cell
        return cell

    def new_key_vertex(self, time, pos):
        return self._insert_cell(KeyVertex(self, time, pos))

    def new_key_edge(self, time, start_vertex, end_vertex, geometry=()):
        return self._insert_cell(KeyEdge(self, time, start_vertex, end_vertex,
                                         geometry))

    def new_key_face(self, time):
        return self._insert_cell(KeyFace(self, time))

    def new_inbetween_vertex(self, before_vertex, after_vertex):
        return self._insert_cell(InbetweenVertex(self, before_vertex,
                                                 after_vertex))

    def new_inbetween_edge(self, before_halfedge, after_halfedge,
                           start_vertex, end_vertex):
        return self._insert_cell(InbetweenEdge(self, before_halfedge,
                                               after_halfedge, start_vertex,
                                               end_vertex))

    def new_inbetween_face(self, cycles=(), before_faces=(), after_faces=()):
        return self._insert_cell(InbetweenFace(self, cycles, before_faces,
                                               after_faces))

    # %% Edits
    @staticmethod
    def _dependents(cell):
        return sorted(cell.star(), key=lambda c: c.id)

    def _update_dependents(self, cell, impl_name, old, new):
        # The boundary of a dependent may be computed through another
        # dependent (e.g. the before cells of an inbetween edge are the
        # vertices of its key edge), so every dependent leaves the stars
        # before any boundary is modified.
        dependents = self._dependents(cell)
        for dependent in dependents:
            dependent._remove_me_from_star_of_boundary()
        for dependent in dependents:
            getattr(dependent, impl_name)(old, new)
        for dependent in dependents:
            dependent._add_me_to_star_of_boundary()
        for dependent in dependents:
            dependent.process_geometry_changed()

    def replace_vertex(self, old_vertex, new_vertex):
        """Make every cell depending on old_vertex use new_vertex instead."""
        if old_vertex is new_vertex:
            return
        self._update_dependents(old_vertex, '_update_boundary_vertex_impl',
                                old_vertex, new_vertex)

    def replace_halfedge(self, old_halfedge, new_halfedge):
        if old_halfedge == new_halfedge:
            return
        self._update_dependents(old_halfedge.edge,
                                '_update_boundary_halfedge_impl',
                                old_halfedge, new_halfedge)

    def replace_edge(self, old_edge, new_edges):
        """Make every cell depending on old_edge go through the chain of
        edges new_edges instead."""
        self._update_dependents(old_edge, '_update_boundary_edges_impl',
                                old_edge, list(new_edges))

    def move_vertex(self, vertex, pos):
        vertex.set_pos(pos)
        vertex.process_geometry_changed()

    def cut_edge(self, edge, pos):
        """
        Split a key edge in two at a new vertex.

        Cells depending on the edge are re-targeted to the two new edges
        before the old edge is deleted. The interior geometry of the old
        edge is not kept: both new edges are straight.

        Inbetween edges interpolating from or to the cut edge cannot follow
        the split, so they are deleted together with every cell depending
        on them. Cutting an edge at the first or last keyframe of an
        animated face therefore deletes that inbetween face too.

        :return: (vertex, edge1, edge2), the new cells
        """
        vertex = self.new_key_vertex(edge.time, pos)
        edge1 = self.new_key_edge(edge.time, edge.start_vertex, vertex)
        edge2 = self.new_key_edge(edge.time, vertex, edge.end_vertex)
        self.replace_edge(edge, [edge1, edge2])
        self.delete_cell(edge)
        return vertex, edge1, edge2

    def delete_cell(self, cell):
        """Delete a cell together with every cell depending on it."""
        if cell not in self:
            raise DanglingReferenceError(f"{cell!r} is not in the complex")
        for dependent in self._dependents(cell):
            if dependent in self:
                self.delete_cell(dependent)
        cell.destroy()
        del self.cells[cell.id]
        logging.debug(f"Deleted {cell!r}")

    # %% Geometry listeners
    def add_geometry_listener(self, callback):
        """callback(cell) is called whenever the geometry of a cell changes."""
        self._geometry_listeners.append(callback)

    def remove_geometry_listener(self, callback):
        self._geometry_listeners.remove(callback)

    def _notify_geometry_changed(self, cell):
        for callback in list(self._geometry_listeners):
            callback(cell)

    # %% Copy and checks
    def clone(self):
        """Deep copy of the complex: every cell is cloned and its references
        are remapped by id to the cells of the new complex."""
        vac = Complex(inbetween_edge_samples=self.inbetween_edge_samples)
        vac.index = self.index
        for cell_id, cell in self.cells.items():
            vac.cells[cell_id] = cell.clone()
        for cell in vac.cells.values():
            cell.remap_pointers(vac)
        return vac

    def check(self):
        """Check the invariants of every cell, logging the failures."""
        return all([cell.check() for cell in self])

    # %% Data persistence
    def to_text(self):
        out = io.StringIO()
        for cell in self:
            cell.save(out)
        return out.getvalue()

    def to_xml(self):
        root = ET.Element('vac')
        for cell in self:
            cell.write(root)
        ET.indent(root)
        return ET.tostring(root, encoding='unicode') + '\n'

    @classmethod
    def from_text(cls, text, **kwargs):
        """
        Load a complex from the text format.

        :param text: str
        :param kwargs: passed to the Complex constructor
        :return: a new Complex
        :raises ParseError: if the text is malformed
        """
        vac = cls(**kwargs)
        reader = TextReader(text)
        while not reader.at_end():
            type_name = reader.read_token()
            try:
                cell_type = _TEXT_TYPES[type_name]
            except KeyError:
                raise ParseError(f"Unknown cell type {type_name!r}") from None
            vac._insert_loaded_cell(cell_type.read(vac, reader))
        vac._read_2nd_pass()
        return vac

    @classmethod
    def from_xml(cls, text, **kwargs):
        """Load a complex from the XML format, see from_text()."""
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise ParseError(f"Malformed XML: {e}") from e
        if root.tag != 'vac':
            raise ParseError(f"Expected a <vac> root element, got "
                             f"<{root.tag}>")
        vac = cls(**kwargs)
        for element in root:
            try:
                cell_type = _XML_TYPES[element.tag]
            except KeyError:
                raise ParseError(f"Unknown cell element "
                                 f"<{element.tag}>") from None
            vac._insert_loaded_cell(cell_type.read_xml(vac, element))
        vac._read_2nd_pass()
        return vac

    def _insert_loaded_cell(self, cell):
        if cell.id < 0 or cell.id in self.cells:
            raise ParseError(f"Invalid or duplicate cell id {cell.id}")
        self.cells[cell.id] = cell
        self.index = max(self.index, cell.id)

    def _read_2nd_pass(self):
        try:
            for cell in self:
                cell.read_2nd_pass()
        except DanglingReferenceError as e:
            # An id without cell in a file is malformed data
            raise ParseError(str(e)) from e
        for cell in self:
            cell._add_me_to_star_of_boundary()
        logging.debug(f"Loaded {len(self)} cells")

    def save_complex(self, fn):
        """
        Save the complex to file, in XML for a ``.xml`` file name and in the
        text format otherwise.

        :param fn: str, filename
        """
        data = self.to_xml() if _is_xml(fn) else self.to_text()
        with open(fn, 'w', encoding='utf-8') as f:
            f.write(data)
        logging.debug(f"Saved {len(self)} cells to {fn}")

    def load_complex(self, fn):
        """
        Replace the content of the complex by the one of a file saved with
        save_complex(). On failure the complex is left untouched.

        :param fn: str, filename
        :raises ParseError: if the file is malformed
        """
        with open(fn, encoding='utf-8') as f:
            try:
                data = f.read()
            except UnicodeDecodeError as e:
                raise ParseError(f"{fn} is not valid UTF-8: {e}") from e
        load = Complex.from_xml if _is_xml(fn) else Complex.from_text
        vac = load(data, inbetween_edge_samples=self.inbetween_edge_samples)

        self.cells = vac.cells
        self.index = vac.index
        for cell in self.cells.values():
            cell.vac = self


def _is_xml(fn):
    return os.path.splitext(fn)[1].lower() == '.xml'
