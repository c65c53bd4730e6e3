"""
vacomplex: vector animation complexes.

A vector animation complex describes 2D vector graphics animated over time
as a cell complex: key cells exist at a single time and inbetween cells
interpolate between key cells. Inbetween faces are bounded by animated
cycles and triangulated at any time for rendering.
"""
from vacomplex._exceptions import VACError, ParseError, DanglingReferenceError
from vacomplex._cell import (Cell, KeyCell, InbetweenCell, VertexCell,
                             EdgeCell, FaceCell)
from vacomplex._key_cells import KeyVertex, KeyEdge, KeyHalfedge, KeyFace
from vacomplex._inbetween_cells import InbetweenVertex, InbetweenEdge
from vacomplex._cycle import AnimatedCycle, CycleNode
from vacomplex._inbetween_face import InbetweenFace
from vacomplex._triangulate import (Triangles, create_polygon_data,
                                    tesselate_polygon)
from vacomplex._complex import Complex

__all__ = ['Complex',
           'Cell', 'KeyCell', 'InbetweenCell', 'VertexCell', 'EdgeCell',
           'FaceCell', 'KeyVertex', 'KeyEdge', 'KeyHalfedge', 'KeyFace',
           'InbetweenVertex', 'InbetweenEdge', 'InbetweenFace',
           'AnimatedCycle', 'CycleNode',
           'Triangles', 'create_polygon_data', 'tesselate_polygon',
           'VACError', 'ParseError', 'DanglingReferenceError']
