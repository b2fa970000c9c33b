"""
Grid Space (Simulation Workspace)
=================================
Owns the simulation grid: its size, the real-space rectangle it covers, the
mapping between real coordinates and grid nodes, and one MaskedField per
node property.

Why is this file needed?
------------------------
1. Coordinates: Shapes are measured in real-space units while the solver
   works on (row, col) nodes. Everything that crosses that boundary goes
   through the mapping defined here.
2. Ownership: The property fields are private; shapes and the solver mutate
   them only through the methods below.

Classes:
    GridProperty: Enum naming the six per-node fields.
    GridSpace: The workspace itself.
"""
from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Optional
import logging
import math

import numpy as np

from potentials import config
from potentials.analysis.masked_field import MaskedField
from potentials.model.geometry_primitives import Point, Rect, Size
from potentials.utils import nearest_index

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class InvalidConfigurationError(ValueError):
    """Raised when a grid is given non-positive dimensions or too few nodes."""


class GridProperty(StrEnum):
    RHO = "rho"
    EPSILON_R = "epsilon_r"
    FIXED_VOLTAGE = "fixed_voltage"
    RESULTANT_VOLTAGE = "resultant_voltage"
    FIELD_MAGNITUDE = "field_magnitude"
    FIELD_DIRECTION = "field_direction"


OUTPUT_PROPERTIES = (GridProperty.RESULTANT_VOLTAGE, GridProperty.FIELD_MAGNITUDE, GridProperty.FIELD_DIRECTION)

# What an unset node reads as. An unset fixed voltage is a free node, not 0 V.
READ_DEFAULTS: dict[GridProperty, float] = {
    GridProperty.RHO: config.DEFAULT_RHO,
    GridProperty.EPSILON_R: config.DEFAULT_EPSILON_R,
    GridProperty.FIXED_VOLTAGE: math.nan,
    GridProperty.RESULTANT_VOLTAGE: math.nan,
    GridProperty.FIELD_MAGNITUDE: math.nan,
    GridProperty.FIELD_DIRECTION: math.nan,
}

MIN_NODES_PER_AXIS = 2


def _validate(rect: Rect, rows: int, cols: int) -> None:
    if not (math.isfinite(rect.x) and math.isfinite(rect.y)):
        raise InvalidConfigurationError(f"Workspace origin must be finite, got ({rect.x}, {rect.y}).")
    if not (math.isfinite(rect.width) and rect.width > 0.0):
        raise InvalidConfigurationError(f"Workspace width must be positive, got {rect.width}.")
    if not (math.isfinite(rect.height) and rect.height > 0.0):
        raise InvalidConfigurationError(f"Workspace height must be positive, got {rect.height}.")
    if rows < MIN_NODES_PER_AXIS or cols < MIN_NODES_PER_AXIS:
        raise InvalidConfigurationError(
            f"Grid needs at least {MIN_NODES_PER_AXIS} rows and columns, got {rows} x {cols}."
        )


class GridSpace:
    """
    Structured finite-difference grid over an axis-aligned real-space rectangle.

    Node (r, c) sits at (x + c * delta_x, y + r * delta_y): columns run along
    the x-axis, rows along the y-axis.
    """

    def __init__(self, rect: Optional[Rect] = None, rows: int = 0, cols: int = 0) -> None:
        """
        Initialize the workspace, configuring it right away if a rectangle is given.

        Args:
            rect: Real-space extent of the workspace.
            rows: Number of grid rows (>= 2).
            cols: Number of grid columns (>= 2).

        Raises:
            InvalidConfigurationError: If the rectangle or node counts are invalid.
        """
        self._rect: Optional[Rect] = None
        self._row_count: int = 0
        self._col_count: int = 0
        self._fields: dict[GridProperty, MaskedField] = {
            prop: MaskedField(name=prop.value) for prop in GridProperty
        }
        if rect is not None:
            self.configure(rect, rows, cols)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rect={self._rect}, rows={self._row_count}, cols={self._col_count})"

    # ---- Configuration ------------------------------------------------

    def configure(self, rect: Rect, rows: int, cols: int) -> None:
        """
        Size the grid and allocate every property field. All prior values,
        inputs and outputs alike, are discarded.
        """
        _validate(rect, rows, cols)
        self._rect = Rect(rect.x, rect.y, rect.width, rect.height)
        self._row_count = rows
        self._col_count = cols
        for masked in self._fields.values():
            masked.allocate(rows, cols)
        logger.debug(f"Configured {self!r}.")

    @property
    def is_configured(self) -> bool:
        return self._rect is not None

    def fields_match(self) -> bool:
        """True if every property field is allocated to the grid size."""
        shape = (self._row_count, self._col_count)
        return self.is_configured and all(f.shape == shape for f in self._fields.values())

    def set_workspace_rect(self, rect: Rect) -> None:
        """
        Move or stretch the real-space rectangle, keeping the node counts and
        the node-level inputs. Results computed for the old extent are discarded.
        """
        if not self.is_configured:
            raise InvalidConfigurationError("Configure the grid before changing its workspace rectangle.")
        _validate(rect, self._row_count, self._col_count)
        self._rect = Rect(rect.x, rect.y, rect.width, rect.height)
        self.discard_results()

    def set_workspace_origin(self, origin: Point) -> None:
        self.set_workspace_rect(Rect.from_origin_and_size(origin, self.size))

    def set_workspace_size(self, size: Size) -> None:
        self.set_workspace_rect(Rect.from_origin_and_size(self.origin, size))

    @property
    def row_count(self) -> int:
        return self._row_count

    @property
    def col_count(self) -> int:
        return self._col_count

    @property
    def rect(self) -> Optional[Rect]:
        if self._rect is None:
            return None
        return Rect(self._rect.x, self._rect.y, self._rect.width, self._rect.height)

    @property
    def origin(self) -> Point:
        if self._rect is None:
            return Point(math.nan, math.nan)
        return self._rect.origin

    @property
    def size(self) -> Size:
        if self._rect is None:
            return Size(math.nan, math.nan)
        return self._rect.size

    @property
    def delta_x(self) -> float:
        """Real-space distance between neighbouring columns (NaN if unconfigured)."""
        if self._rect is None:
            return math.nan
        return self._rect.width / (self._col_count - 1)

    @property
    def delta_y(self) -> float:
        """Real-space distance between neighbouring rows (NaN if unconfigured)."""
        if self._rect is None:
            return math.nan
        return self._rect.height / (self._row_count - 1)

    # ---- Coordinate mapping -------------------------------------------

    def col_for_x(self, x: float) -> int:
        """Nearest column to the real-space x, or -1 if it is off the grid."""
        if self._rect is None or not math.isfinite(x):
            return -1
        c = nearest_index((x - self._rect.x) / self.delta_x)
        return c if 0 <= c < self._col_count else -1

    def row_for_y(self, y: float) -> int:
        """Nearest row to the real-space y, or -1 if it is off the grid."""
        if self._rect is None or not math.isfinite(y):
            return -1
        r = nearest_index((y - self._rect.y) / self.delta_y)
        return r if 0 <= r < self._row_count else -1

    def x_for_col(self, c: int) -> float:
        """Real-space x of column c, or NaN if there is no such column."""
        if self._rect is None or not 0 <= c < self._col_count:
            return math.nan
        return self._rect.x + c * self.delta_x

    def y_for_row(self, r: int) -> float:
        """Real-space y of row r, or NaN if there is no such row."""
        if self._rect is None or not 0 <= r < self._row_count:
            return math.nan
        return self._rect.y + r * self.delta_y

    def node_for_point(self, point: Point) -> tuple[int, int]:
        """
        Map a real-space point to its nearest (row, col) node.
        Returns (-1, -1) if the point falls off the grid on either axis.
        """
        r = self.row_for_y(point.y)
        c = self.col_for_x(point.x)
        if r < 0 or c < 0:
            return -1, -1
        return r, c

    def point_for_node(self, r: int, c: int) -> Point:
        """Inverse of node_for_point; NaN coordinates for a node off the grid."""
        if not self.contains_node(r, c):
            return Point(math.nan, math.nan)
        return Point(self.x_for_col(c), self.y_for_row(r))

    def contains_node(self, r: int, c: int) -> bool:
        return 0 <= r < self._row_count and 0 <= c < self._col_count

    def node_coordinates(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Real-space (x, y) of every node as two (rows, cols) arrays."""
        if self._rect is None:
            empty = np.empty((0, 0), dtype=np.float64)
            return empty, empty.copy()
        xs = self._rect.x + np.arange(self._col_count) * self.delta_x
        ys = self._rect.y + np.arange(self._row_count) * self.delta_y
        return np.meshgrid(xs, ys)

    # ---- Input properties ---------------------------------------------

    def set_rho(self, r: int, c: int, rho: float) -> bool:
        return self._fields[GridProperty.RHO].set(r, c, rho)

    def add_rho(self, r: int, c: int, rho: float) -> bool:
        """Accumulate fixed charge density, as for overlapping charge sheets."""
        return self._fields[GridProperty.RHO].add(r, c, rho)

    def set_epsilon_r(self, r: int, c: int, epsilon_r: float) -> bool:
        return self._fields[GridProperty.EPSILON_R].set(r, c, epsilon_r)

    def add_epsilon_r(self, r: int, c: int, epsilon_r: float) -> bool:
        """Accumulate relative permittivity, as for overlapping dielectrics."""
        return self._fields[GridProperty.EPSILON_R].add(r, c, epsilon_r)

    def set_voltage(self, r: int, c: int, voltage: float) -> bool:
        """Clamp the node to a fixed voltage, making it part of a conductor."""
        return self._fields[GridProperty.FIXED_VOLTAGE].set(r, c, voltage)

    def is_conductor(self, r: int, c: int) -> bool:
        return self._fields[GridProperty.FIXED_VOLTAGE].has_value(r, c)

    # ---- Reads --------------------------------------------------------

    def has_value_at(self, prop: GridProperty, r: int, c: int) -> bool:
        return self._fields[prop].has_value(r, c)

    def value_at(self, prop: GridProperty, r: int, c: int) -> float:
        """
        Value of a property at node (r, c). Unset nodes read as the property's
        default (1.0 for epsilon_r, 0.0 for rho, NaN otherwise); nodes off the
        grid read as NaN.
        """
        value, valid = self._fields[prop].get(r, c)
        if valid:
            return value
        if not self.contains_node(r, c):
            return math.nan
        return READ_DEFAULTS[prop]

    def value_at_point(self, prop: GridProperty, point: Point) -> float:
        """Value of a property at the node nearest a real-space point."""
        r, c = self.node_for_point(point)
        if r < 0:
            logger.warning(f"Point ({point.x}, {point.y}) lies outside the workspace.")
            return math.nan
        return self.value_at(prop, r, c)

    def min(self, prop: GridProperty) -> float:
        """Smallest set value of a property, NaN if nothing is set."""
        return self._fields[prop].min()

    def max(self, prop: GridProperty) -> float:
        """Largest set value of a property, NaN if nothing is set."""
        return self._fields[prop].max()

    def as_array(self, prop: GridProperty) -> npt.NDArray[np.float64]:
        """Copy of a property over the whole grid, unset nodes filled with their default."""
        return self._fields[prop].to_array(default=READ_DEFAULTS[prop])

    def conductor_mask(self) -> npt.NDArray[np.bool_]:
        """Boolean (rows, cols) array of the nodes held at a fixed voltage."""
        return self._fields[GridProperty.FIXED_VOLTAGE].valid_mask()

    # ---- Results ------------------------------------------------------

    @property
    def is_solved(self) -> bool:
        return self.is_configured and self._fields[GridProperty.RESULTANT_VOLTAGE].count() > 0

    def store_results(
        self,
        voltage: npt.NDArray[np.float64],
        magnitude: npt.NDArray[np.float64],
        direction: npt.NDArray[np.float64],
    ) -> None:
        """Publish full-grid solver outputs, overwriting any previous ones."""
        self._fields[GridProperty.RESULTANT_VOLTAGE].assign(voltage)
        self._fields[GridProperty.FIELD_MAGNITUDE].assign(magnitude)
        self._fields[GridProperty.FIELD_DIRECTION].assign(direction)

    def discard_results(self) -> None:
        for prop in OUTPUT_PROPERTIES:
            self._fields[prop].discard_all()

    def clear(self) -> None:
        """Remove every shape and result from the workspace, keeping its geometry."""
        for masked in self._fields.values():
            masked.discard_all()
        logger.info("Workspace has been cleared.")
