"""
Animated cycles: boundaries of inbetween faces.

An AnimatedCycle is an ordered list of nodes, each referencing a vertex or
an edge (key or inbetween). Edge nodes also carry a side telling in which
direction the cycle traverses the edge. At a given time, the nodes whose
cell exists at that time form a closed loop: either a chain of halfedges
whose end vertex is the start vertex of the next one, or, when no edge
exists at that time, a single point (Steiner cycle).

Key cells in a cycle act as keyframe anchors inside the lifetime of the
face; inbetween cells provide the motion between anchors.
"""
import re

from vacomplex._cell import EdgeCell, VertexCell, InbetweenCell
from vacomplex._exceptions import ParseError
from vacomplex._key_cells import KeyHalfedge

_NODE_TOKEN = re.compile(r'^(\d+)([+-]?)$')


class CycleNode:
    __slots__ = ('cell', 'side')

    def __init__(self, cell, side=None):
        self.cell = cell
        self.side = side  # None for vertex nodes

    def __eq__(self, other):
        if not isinstance(other, CycleNode):
            return NotImplemented
        return self.cell is other.cell and self.side == other.side

    def __repr__(self):
        return f"CycleNode({self.cell!r}, {self.side})"

    def is_edge(self):
        return self.side is not None

    def start_vertex(self):
        return self.cell.start_vertex if self.side else self.cell.end_vertex

    def end_vertex(self):
        return self.cell.end_vertex if self.side else self.cell.start_vertex

    def sample(self, time):
        points = self.cell.sample(time)
        return points if self.side else points[::-1]

    def to_token(self):
        return _format_node_token(self.cell.id, self.side)


def _format_node_token(cell_id, side):
    if side is None:
        return str(cell_id)
    return '{}{}'.format(cell_id, '+' if side else '-')


def _parse_node_token(token):
    match = _NODE_TOKEN.match(token)
    if match is None:
        raise ParseError(f"Invalid cycle element {token!r}")
    sign = match.group(2)
    return int(match.group(1)), (sign == '+') if sign else None


class AnimatedCycle:
    def __init__(self, nodes=()):
        """
        :param nodes: iterable of CycleNode, KeyHalfedge, (cell, side)
                      tuples or bare cells. A bare edge is traversed in its
                      own direction, a bare vertex gets no side.
        """
        self.nodes = [self._as_node(n) for n in nodes]
        self._temp_nodes = None  # (id, side) pairs awaiting read_2nd_pass

    @staticmethod
    def _as_node(item):
        if isinstance(item, CycleNode):
            return CycleNode(item.cell, item.side)
        if isinstance(item, KeyHalfedge):
            return CycleNode(item.edge, item.side)
        if isinstance(item, tuple):
            cell, side = item
            return CycleNode(cell, bool(side) if isinstance(cell, EdgeCell)
                             else None)
        if isinstance(item, EdgeCell):
            return CycleNode(item, True)
        if isinstance(item, VertexCell):
            return CycleNode(item, None)
        raise TypeError(f"Cannot build a cycle node from {item!r}")

    def copy(self):
        other = AnimatedCycle(self.nodes)
        if self._temp_nodes is not None:
            other._temp_nodes = list(self._temp_nodes)
        return other

    def __eq__(self, other):
        if not isinstance(other, AnimatedCycle):
            return NotImplemented
        return (self.nodes == other.nodes
                and self._temp_nodes == other._temp_nodes)

    def __len__(self):
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __repr__(self):
        return f"AnimatedCycle({self.to_string()})"

    def is_empty(self):
        """An empty cycle is the placeholder added by
        InbetweenFace.add_animated_cycle(), not a valid boundary."""
        return not self.nodes and not self._temp_nodes

    # %% Cells
    def cells(self):
        return {node.cell for node in self.nodes}

    def _inbetween_cells(self):
        return [node.cell for node in self.nodes
                if isinstance(node.cell, InbetweenCell)]

    def before_cells(self):
        """Key cells from which the cycle starts: the before cells of the
        inbetween cells starting at the earliest time of the cycle."""
        cells = self._inbetween_cells()
        if not cells:
            return set()
        t0 = min(cell.before_time() for cell in cells)
        res = set()
        for cell in cells:
            if cell.before_time() == t0:
                res |= cell.before_cells()
        return res

    def after_cells(self):
        cells = self._inbetween_cells()
        if not cells:
            return set()
        t1 = max(cell.after_time() for cell in cells)
        res = set()
        for cell in cells:
            if cell.after_time() == t1:
                res |= cell.after_cells()
        return res

    # %% Sampling
    def nodes_at(self, time):
        return [node for node in self.nodes if node.cell.exists(time)]

    def sample(self, time, out=None):
        """
        Append the points of the cycle at time to out.

        Every halfedge contributes its polyline without its last point, which
        is the first point of the next halfedge. The loop is implicitly
        closed: the last point connects back to the first.

        :param time: float
        :param out: list, optional, list of points to append to
        :return: out, a list of numpy 2-vectors
        """
        if out is None:
            out = []
        nodes = self.nodes_at(time)
        halfedges = [node for node in nodes if node.is_edge()]
        if halfedges:
            for node in halfedges:
                out.extend(node.sample(time)[:-1])
        else:
            for node in nodes:
                out.append(node.cell.pos(time))
        return out

    def is_closed(self, time):
        """Whether the halfedges existing at time chain into a loop."""
        halfedges = [node for node in self.nodes_at(time) if node.is_edge()]
        for node, next_node in zip(halfedges, halfedges[1:] + halfedges[:1]):
            if node.end_vertex() is not next_node.start_vertex():
                return False
        return True

    # %% Boundary updates
    def replace_vertex(self, old_vertex, new_vertex):
        for node in self.nodes:
            if node.cell is old_vertex:
                node.cell = new_vertex

    def replace_halfedge(self, old_halfedge, new_halfedge):
        for node in self.nodes:
            if node.cell is old_halfedge.edge:
                if node.side == old_halfedge.side:
                    node.side = new_halfedge.side
                else:
                    node.side = not new_halfedge.side
                node.cell = new_halfedge.edge

    def replace_edges(self, old_edge, new_edges):
        """Splice new_edges in place of old_edge, keeping orientation: a node
        traversing old_edge backwards traverses new_edges in reverse order,
        each one backwards."""
        new_edges = list(new_edges)
        nodes = []
        for node in self.nodes:
            if node.cell is old_edge:
                edges = new_edges if node.side else reversed(new_edges)
                nodes.extend(CycleNode(edge, node.side) for edge in edges)
            else:
                nodes.append(node)
        self.nodes = nodes

    # %% Persistence
    def to_string(self):
        """Compact form, e.g. ``'[3+ 5- 7]'``: ``<id>`` for a vertex node,
        ``<id>+`` or ``<id>-`` for an edge node."""
        if self._temp_nodes is not None:
            tokens = [_format_node_token(cell_id, side)
                      for cell_id, side in self._temp_nodes]
        else:
            tokens = [node.to_token() for node in self.nodes]
        return '[' + ' '.join(tokens) + ']'

    @classmethod
    def from_string(cls, string):
        """Parse the compact form. Cells are kept as ids until
        convert_temp_ids_to_pointers() is called."""
        string = string.strip()
        if len(string) < 2 or string[0] != '[' or string[-1] != ']':
            raise ParseError(f"Expected a bracketed cycle, got {string!r}")
        cycle = cls()
        cycle._temp_nodes = [_parse_node_token(token)
                             for token in string[1:-1].split()]
        return cycle

    def convert_temp_ids_to_pointers(self, vac):
        if self._temp_nodes is None:
            return
        nodes = []
        for cell_id, side in self._temp_nodes:
            cell = vac.get_cell(cell_id)
            expected = VertexCell if side is None else EdgeCell
            if not isinstance(cell, expected):
                raise ParseError(f"Cycle element {cell_id} is a "
                                 f"{type(cell).__name__}, expected a "
                                 f"{expected.__name__}")
            nodes.append(CycleNode(cell, side))
        self.nodes = nodes
        self._temp_nodes = None

    def remap_pointers(self, new_vac):
        for node in self.nodes:
            node.cell = new_vac.get_cell(node.cell.id)
