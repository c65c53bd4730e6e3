"""
Polygon builder and triangulator used to render faces.

A face sampled at one time gives one closed point loop per cycle. Loops are
filled with the odd winding rule: a loop nested inside an odd number of
other loops is a hole of its innermost container, any other loop is an
outer boundary. Each outer loop is merged with its holes into a single
polygon by bridge edges (Eberly, "Triangulation by Ear Clipping"), which is
then triangulated by ear clipping.

Degenerate loops (fewer than three distinct points, or zero area) are
dropped and may legitimately produce no triangle at all.
"""
from __future__ import annotations

import logging

import numpy

EPS = 1e-12  # Area tolerance of the ear and degeneracy tests


class Triangles:
    """A triangle soup: list of (3, 2) arrays."""

    def __init__(self):
        self._triangles = []

    def append(self, a, b, c):
        self._triangles.append(numpy.array([a, b, c], dtype=float))

    def clear(self):
        self._triangles = []

    def __len__(self):
        return len(self._triangles)

    def __iter__(self):
        return iter(self._triangles)

    def __getitem__(self, i):
        return self._triangles[i]

    def as_array(self) -> numpy.ndarray:
        return numpy.array(self._triangles, dtype=float).reshape(-1, 3, 2)

    def area(self) -> float:
        """Total (unsigned) area covered by the triangles."""
        t = self.as_array()
        if len(t) == 0:
            return 0.0
        e1 = t[:, 1] - t[:, 0]
        e2 = t[:, 2] - t[:, 0]
        return float(0.5 * numpy.abs(e1[:, 0] * e2[:, 1]
                                     - e1[:, 1] * e2[:, 0]).sum())


# %% Polygon builder
def create_polygon_data(cycles, time) -> list[numpy.ndarray]:
    """
    Sample every cycle at time.

    :param cycles: list of AnimatedCycle
    :param time: float
    :return: list of (N, 2) arrays, one per cycle, in cycle order
    """
    polygon = []
    for cycle in cycles:
        sampling = cycle.sample(time)
        polygon.append(numpy.array(sampling, dtype=float).reshape(-1, 2))
    return polygon


# %% Geometry helpers
def signed_area(loop) -> float:
    loop = numpy.asarray(loop, dtype=float)
    if len(loop) < 3:
        return 0.0
    x, y = loop[:, 0], loop[:, 1]
    return float(0.5 * (x * numpy.roll(y, -1) - numpy.roll(x, -1) * y).sum())


def point_in_polygon(point, loop) -> bool:
    """Even-odd ray casting test."""
    x, y = point
    inside = False
    n = len(loop)
    for i in range(n):
        x1, y1 = loop[i]
        x2, y2 = loop[(i + 1) % n]
        if (y1 > y) != (y2 > y):
            xc = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
            if x < xc:
                inside = not inside
    return inside


def _cross(o, a, b):
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _clean_loop(loop):
    """Drop consecutive duplicate points, including across the wrap."""
    points = [tuple(map(float, p)) for p in loop]
    res = []
    for p in points:
        if not res or p != res[-1]:
            res.append(p)
    while len(res) > 1 and res[0] == res[-1]:
        res.pop()
    return res


def _loop_inside(loop, other):
    inside = sum(point_in_polygon(p, other) for p in loop)
    return 2 * inside > len(loop)


# %% Hole bridging
def _in_cone(prev, vertex, next_, target):
    """Whether target is seen from vertex inside the polygon, the interior
    being on the left of prev -> vertex -> next_."""
    a = (prev[0] - vertex[0], prev[1] - vertex[1])
    b = (next_[0] - vertex[0], next_[1] - vertex[1])
    d = (target[0] - vertex[0], target[1] - vertex[1])
    b_d = b[0] * d[1] - b[1] * d[0]
    d_a = d[0] * a[1] - d[1] * a[0]
    if b[0] * a[1] - b[1] * a[0] > 0:  # Convex vertex
        return b_d > 0 and d_a > 0
    return b_d > 0 or d_a > 0


def _segments_cross(p1, p2, q1, q2):
    """Proper intersection test, touching end points do not count."""
    d1 = _cross(q1, q2, p1)
    d2 = _cross(q1, q2, p2)
    d3 = _cross(p1, p2, q1)
    d4 = _cross(p1, p2, q2)
    return d1 * d2 < 0 and d3 * d4 < 0


def _visible(m, v, loops):
    for loop in loops:
        n = len(loop)
        for i in range(n):
            a, b = loop[i], loop[(i + 1) % n]
            if a in (m, v) or b in (m, v):
                continue
            if _segments_cross(m, v, a, b):
                return False
    return True


def _bridge_hole(outer, hole, other_holes):
    """
    Merge hole into outer through a bridge from the rightmost hole vertex M
    to the closest outer vertex visible from M.

    :return: the merged loop, or None if no bridge could be found
    """
    mi = max(range(len(hole)), key=lambda i: hole[i][0])
    m = hole[mi]
    m_prev, m_next = hole[mi - 1], hole[(mi + 1) % len(hole)]
    n = len(outer)
    candidates = sorted(range(n), key=lambda i: (outer[i][0] - m[0]) ** 2
                        + (outer[i][1] - m[1]) ** 2)
    for vi in candidates:
        v = outer[vi]
        if not _in_cone(outer[vi - 1], v, outer[(vi + 1) % n], m):
            continue
        if not _in_cone(m_prev, m, m_next, v):
            continue
        if not _visible(m, v, [outer, hole] + other_holes):
            continue
        return outer[:vi + 1] + hole[mi:] + hole[:mi + 1] + outer[vi:]
    return None


# %% Ear clipping
def _point_in_triangle(p, a, b, c):
    """Inside or on the boundary of the counterclockwise triangle abc."""
    return (_cross(a, b, p) >= 0 and _cross(b, c, p) >= 0
            and _cross(c, a, p) >= 0)


def _is_ear(points, i0, i1, i2, indices):
    p0, p1, p2 = points[i0], points[i1], points[i2]
    if _cross(p0, p1, p2) <= EPS:
        return False
    for j in indices:
        if j in (i0, i1, i2):
            continue
        p = points[j]
        if p in (p0, p1, p2):  # Duplicated bridge end points
            continue
        if _point_in_triangle(p, p0, p1, p2):
            return False
    return True


def _ear_clip(points, out):
    """Triangulate a counterclockwise, weakly simple polygon."""
    indices = list(range(len(points)))
    while len(indices) > 3:
        n = len(indices)
        for k in range(n):
            i0, i1, i2 = indices[k - 1], indices[k], indices[(k + 1) % n]
            if _is_ear(points, i0, i1, i2, indices):
                out.append(points[i0], points[i1], points[i2])
                del indices[k]
                break
        else:
            # No ear: drop a flat vertex if there is one, else give up
            for k in range(n):
                i0, i1, i2 = indices[k - 1], indices[k], indices[(k + 1) % n]
                if abs(_cross(points[i0], points[i1], points[i2])) <= EPS:
                    del indices[k]
                    break
            else:
                logging.warning(f"Ear clipping stopped with {n} vertices "
                                f"left, the polygon is likely self "
                                f"intersecting")
                return
    if len(indices) == 3:
        i0, i1, i2 = indices
        if _cross(points[i0], points[i1], points[i2]) > EPS:
            out.append(points[i0], points[i1], points[i2])


def tesselate_polygon(polygon, out: Triangles) -> Triangles:
    """
    Triangulate a set of loops with the odd winding rule.

    :param polygon: list of (N, 2) point loops
    :param out: Triangles, triangles are appended to it
    :return: out
    """
    loops = [_clean_loop(loop) for loop in polygon]
    loops = [loop for loop in loops
             if len(loop) >= 3 and abs(signed_area(loop)) > EPS]

    # Nesting depth of every loop, and innermost container of holes
    containers = [[j for j in range(len(loops))
                   if j != i and _loop_inside(loops[i], loops[j])]
                  for i in range(len(loops))]
    depth = [len(c) for c in containers]
    holes = {i: [] for i in range(len(loops)) if depth[i] % 2 == 0}
    for i in range(len(loops)):
        if depth[i] % 2 == 1:
            parent = max(containers[i], key=lambda j: depth[j])
            if parent in holes:
                holes[parent].append(i)

    for i, hole_indices in holes.items():
        outer = loops[i]
        if signed_area(outer) < 0:
            outer = outer[::-1]
        hole_loops = []
        for j in hole_indices:
            hole = loops[j]
            if signed_area(hole) > 0:
                hole = hole[::-1]
            hole_loops.append(hole)
        hole_loops.sort(key=lambda h: max(p[0] for p in h), reverse=True)

        for k, hole in enumerate(hole_loops):
            merged = _bridge_hole(outer, hole, hole_loops[k + 1:])
            if merged is None:
                logging.warning("Could not bridge a hole to its outer "
                                "boundary, the hole is ignored")
                continue
            outer = merged

        _ear_clip(outer, out)
    return out
