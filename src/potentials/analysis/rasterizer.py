"""
Shape Rasterization
===================
Converts a shape's geometry into the set of grid nodes it covers and writes
the shape's electrical role onto those nodes.

Node enumeration is dispatched on the geometry type through a small
registry, so adding a geometry kind means registering one function; the
role (conductor, dielectric, charge sheet) is applied the same way for all
of them.

Write policy, applied node by node in shape-insertion order:
    Conductor   -> overwrite fixed_voltage (last writer wins)
    Dielectric  -> accumulate into epsilon_r
    ChargeSheet -> accumulate into rho
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable
import logging
import math

import numpy as np

from potentials.analysis.clipping import clip_line
from potentials.model.geometry_primitives import Point, Line, Circle, Rectangle, Geometry
from potentials.model.materials import Role, Conductor, Dielectric, ChargeSheet
from potentials.utils import nearest_index

if TYPE_CHECKING:
    from potentials.analysis.grid_space import GridSpace
    from potentials.model.shapes import Shape

logger = logging.getLogger(__name__)

Node = tuple[int, int]
NodeEnumerator = Callable[[Geometry, bool, "GridSpace"], list[Node]]

# Slack for nodes sitting exactly on a shape's boundary, in grid spacings
_EDGE_TOLERANCE = 1e-9

_REGISTRY: dict[type, NodeEnumerator] = {}


def register_geometry(geometry_type: type) -> Callable[[NodeEnumerator], NodeEnumerator]:
    """Decorator registering the node enumerator for a geometry type."""
    def decorator(func: NodeEnumerator) -> NodeEnumerator:
        _REGISTRY[geometry_type] = func
        return func
    return decorator


def nodes_for(geometry: Geometry, solid: bool, grid: GridSpace) -> list[Node]:
    """
    Grid nodes covered by a geometry, in row-major order for area shapes and
    start-to-end order for lines.
    """
    enumerator = _REGISTRY.get(type(geometry))
    if enumerator is None:
        raise KeyError(f"No node enumerator registered for {type(geometry).__name__}")
    return enumerator(geometry, solid, grid)


def _index_span(lo: float, hi: float, origin: float, delta: float) -> tuple[int, int]:
    """Unclamped index range [first, last] of the nodes inside [lo, hi] on one axis."""
    first = math.ceil((lo - origin) / delta - _EDGE_TOLERANCE)
    last = math.floor((hi - origin) / delta + _EDGE_TOLERANCE)
    return first, last


def _clamped(first: int, last: int, count: int) -> tuple[int, int]:
    return max(first, 0), min(last, count - 1)


def _box_nodes(
    grid: GridSpace,
    r_first: int,
    r_last: int,
    c_first: int,
    c_last: int,
    keep: Callable[[np.ndarray, np.ndarray, np.ndarray, np.ndarray], np.ndarray],
) -> list[Node]:
    """
    Evaluate `keep(rows, cols, xs, ys)` over the clamped index box and return
    the nodes where it holds, in row-major order.
    """
    r0, r1 = _clamped(r_first, r_last, grid.row_count)
    c0, c1 = _clamped(c_first, c_last, grid.col_count)
    if r0 > r1 or c0 > c1:
        return []

    cols, rows = np.meshgrid(np.arange(c0, c1 + 1), np.arange(r0, r1 + 1))
    xs = grid.origin.x + cols * grid.delta_x
    ys = grid.origin.y + rows * grid.delta_y
    selected = keep(rows, cols, xs, ys)
    return [(int(r), int(c)) for r, c in zip(rows[selected], cols[selected])]


@register_geometry(Point)
def _point_nodes(point: Point, solid: bool, grid: GridSpace) -> list[Node]:
    r, c = grid.node_for_point(point)
    if r < 0:
        return []
    return [(r, c)]


@register_geometry(Line)
def _line_nodes(line: Line, solid: bool, grid: GridSpace) -> list[Node]:
    # A line is one node wide whether solid or hollow
    clipped = clip_line(line, grid.rect)
    if clipped is None:
        return []

    r0, c0 = grid.node_for_point(clipped.start)
    r1, c1 = grid.node_for_point(clipped.end)
    if r0 < 0 or r1 < 0:
        logger.warning(f"Clipped {line} still maps off the grid; skipping it.")
        return []

    steps = max(abs(r1 - r0), abs(c1 - c0))
    if steps == 0:
        return [(r0, c0)]

    nodes: list[Node] = []
    for i in range(steps + 1):
        node = (
            r0 + nearest_index(i * (r1 - r0) / steps),
            c0 + nearest_index(i * (c1 - c0) / steps),
        )
        if not nodes or nodes[-1] != node:
            nodes.append(node)
    return nodes


@register_geometry(Circle)
def _circle_nodes(circle: Circle, solid: bool, grid: GridSpace) -> list[Node]:
    if not (math.isfinite(circle.center.x) and math.isfinite(circle.center.y) and math.isfinite(circle.radius)):
        logger.warning(f"{circle} is not finite; no nodes covered.")
        return []
    if not circle.radius >= 0.0:
        logger.warning(f"{circle} has a negative radius; no nodes covered.")
        return []

    dx, dy = grid.delta_x, grid.delta_y
    half_spacing = 0.5 * min(dx, dy)
    slack = _EDGE_TOLERANCE * min(dx, dy)
    reach = circle.radius + (0.0 if solid else half_spacing)
    cx, cy = circle.center.x, circle.center.y

    r_first, r_last = _index_span(cy - reach, cy + reach, grid.origin.y, dy)
    c_first, c_last = _index_span(cx - reach, cx + reach, grid.origin.x, dx)

    def keep(rows, cols, xs, ys):
        distance = np.hypot(xs - cx, ys - cy)
        if solid:
            return distance <= circle.radius + slack
        # One-node-thick ring
        return np.abs(distance - circle.radius) <= half_spacing + slack

    return _box_nodes(grid, r_first, r_last, c_first, c_last, keep)


@register_geometry(Rectangle)
def _rectangle_nodes(rectangle: Rectangle, solid: bool, grid: GridSpace) -> list[Node]:
    extent = (rectangle.center.x, rectangle.center.y, rectangle.size.width, rectangle.size.height)
    if not all(math.isfinite(v) for v in extent):
        logger.warning(f"{rectangle} is not finite; no nodes covered.")
        return []
    if not (rectangle.size.width >= 0.0 and rectangle.size.height >= 0.0):
        logger.warning(f"{rectangle} has a negative size; no nodes covered.")
        return []

    r_first, r_last = _index_span(rectangle.min_y, rectangle.max_y, grid.origin.y, grid.delta_y)
    c_first, c_last = _index_span(rectangle.min_x, rectangle.max_x, grid.origin.x, grid.delta_x)
    if r_first > r_last or c_first > c_last:
        return []

    def keep(rows, cols, xs, ys):
        if solid:
            return np.ones(rows.shape, dtype=np.bool_)
        # Perimeter of the full box; edges clipped away by the grid are not drawn
        return (rows == r_first) | (rows == r_last) | (cols == c_first) | (cols == c_last)

    return _box_nodes(grid, r_first, r_last, c_first, c_last, keep)


class ShapeRasterizer:
    """
    Places shapes onto a GridSpace.

    Placing takes a snapshot of the shape: the nodes and the role value are
    read once, so moving or editing the shape afterwards leaves the grid alone.
    """

    def __init__(self, grid: GridSpace) -> None:
        self.grid = grid

    def rasterize(self, shape: Shape) -> bool:
        """
        Write a shape's role onto every node it covers.

        Returns:
            False if the grid is not configured (nothing written), True otherwise,
            including for shapes that fall entirely outside the workspace.
        """
        if not self.grid.fields_match():
            logger.error(f"Cannot place {shape!r}: the workspace grid is not configured.")
            return False

        nodes = nodes_for(shape.geometry, shape.solid, self.grid)
        write = self._writer_for(shape.role)
        value = shape.role.value
        for r, c in nodes:
            write(r, c, value)

        logger.debug(f"Placed {shape!r} on {len(nodes)} node(s).")
        return True

    def rasterize_all(self, shapes) -> int:
        """Place shapes in order; returns how many were placed."""
        return sum(1 for shape in shapes if self.rasterize(shape))

    def _writer_for(self, role: Role) -> Callable[[int, int, float], bool]:
        if isinstance(role, Conductor):
            return self.grid.set_voltage
        if isinstance(role, Dielectric):
            return self.grid.add_epsilon_r
        if isinstance(role, ChargeSheet):
            return self.grid.add_rho
        raise TypeError(f"Unsupported role: {type(role).__name__}")
