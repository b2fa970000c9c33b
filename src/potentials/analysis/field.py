"""
Electric Field Derivation
=========================
Post-solve computation of E = -grad(V) from the resultant voltage.

Along each axis the voltage around a node is fitted with a parabola
V(x) = a*x^2 + b*x + c through three neighbouring nodes, and the field
component is -b at the node: a central difference inside the grid and a
second-order one-sided difference on the domain boundary. An axis with only
two nodes falls back to a plain first-order difference.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from potentials.utils import TWO_PI

if TYPE_CHECKING:
    import numpy.typing as npt


def _axis_derivative(voltage: npt.NDArray[np.float64], spacing: float, axis: int) -> npt.NDArray[np.float64]:
    edge_order = 2 if voltage.shape[axis] >= 3 else 1
    return np.gradient(voltage, spacing, axis=axis, edge_order=edge_order)


def derive_field(
    voltage: npt.NDArray[np.float64],
    delta_x: float,
    delta_y: float,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Field components at every node.

    Args:
        voltage: (rows, cols) solved potential; rows run along y, columns along x.
        delta_x: Column spacing.
        delta_y: Row spacing.

    Returns:
        (ex, ey) arrays with the shape of `voltage`.
    """
    voltage = np.asarray(voltage, dtype=np.float64)
    ex = -_axis_derivative(voltage, delta_x, axis=1)
    ey = -_axis_derivative(voltage, delta_y, axis=0)
    return ex, ey


def field_magnitude(ex: npt.NDArray[np.float64], ey: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return np.hypot(ex, ey)


def field_direction(ex: npt.NDArray[np.float64], ey: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Direction of the field in radians on the unit circle, in [0, 2*pi)."""
    angle = np.mod(np.arctan2(ey, ex), TWO_PI)
    # mod can round a tiny negative angle up to exactly 2*pi
    angle[angle >= TWO_PI] = 0.0
    return angle
