"""Matplotlib views of face samplings and triangulations."""
import logging

import numpy

try:
    from matplotlib import pyplot
    from matplotlib.patches import Polygon
except ImportError:
    logging.warning("Plotting functions are unavailable. To use install "
                    "matplotlib, install using ex. `pip install matplotlib` ")
    matplotlib_available = False
else:
    matplotlib_available = True

# Define colours:
lo = numpy.array([242, 189, 138]) / 255  # light orange
do = numpy.array([235, 129, 27]) / 255  # Dark alert orange
db = numpy.array([129, 160, 189]) / 255  # Dark blue


def _new_axes(ax):
    if ax is None:
        fig = pyplot.figure()
        ax = fig.add_subplot(1, 1, 1)
        ax.set_aspect('equal')
    return ax


def plot_sampling(face, time, ax=None, fill=True, show=False):
    """
    Plot an inbetween face at time: the triangles of its triangulation
    and the point loop of every cycle.

    :param face: InbetweenFace
    :param time: float
    :param ax: matplotlib Axes, optional, a new figure is created if None
    :param fill: bool, draw the triangles
    :param show: bool, call pyplot.show()
    :return: ax, or None if matplotlib is not installed

    Example
    -------
    >>> ax = plot_sampling(face, 5.0)
    >>> ax.figure.savefig('face.png')
    """
    if not matplotlib_available:
        logging.warning("Plotting functions are unavailable. To "
                        "install matplotlib install using ex. `pip install "
                        "matplotlib` ")
        return
    ax = _new_axes(ax)

    if fill:
        for triangle in face.triangulate(time):
            ax.add_patch(Polygon(triangle, closed=True, facecolor=lo,
                                 edgecolor=lo, linewidth=0.5))

    for loop in face.get_sampling(time):
        if len(loop) == 0:
            continue
        closed = numpy.vstack([loop, loop[:1]])
        ax.plot(closed[:, 0], closed[:, 1], '-', color=do, linewidth=1)
        ax.plot(loop[:, 0], loop[:, 1], 'o', color=do, markersize=3)

    ax.autoscale_view()
    if show:
        pyplot.show()
    return ax


def plot_complex(vac, time, ax=None, show=False):
    """
    Plot every cell of a complex existing at time: inbetween faces filled,
    edges as polylines and vertices as points.

    :param vac: Complex
    :param time: float
    :return: ax, or None if matplotlib is not installed
    """
    if not matplotlib_available:
        logging.warning("Plotting functions are unavailable. To "
                        "install matplotlib install using ex. `pip install "
                        "matplotlib` ")
        return
    ax = _new_axes(ax)

    for face in vac.inbetween_faces():
        if face.exists(time):
            plot_sampling(face, time, ax=ax, fill=True)
    for edge in vac.key_edges() + vac.inbetween_edges():
        if edge.exists(time):
            points = edge.sample(time)
            ax.plot(points[:, 0], points[:, 1], '-', color=db, linewidth=1.5)
    for vertex in vac.key_vertices() + vac.inbetween_vertices():
        if vertex.exists(time):
            x = vertex.pos(time)
            ax.plot(x[0], x[1], 'o', color=db, markersize=5)

    ax.autoscale_view()
    if show:
        pyplot.show()
    return ax
