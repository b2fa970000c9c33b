"""
Masked Field
============
A matrix of doubles bonded to a matrix of booleans. Floating point values
have no "not set yet" value, so the boolean mask records which cells hold a
meaningful value and which are unset.

The workspace keeps one of these per node property (charge density,
permittivity, fixed voltage and the solved outputs).
"""
from __future__ import annotations

from typing import TYPE_CHECKING
import logging

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class MaskedField:
    """
    2D store where every cell is either unset or holds a float value.
    """

    def __init__(self, rows: int = 0, cols: int = 0, name: str = "field") -> None:
        """
        Initialize the field, allocating storage if a size is given.

        Args:
            rows: Number of rows (y-dimension).
            cols: Number of columns (x-dimension).
            name: Label used in log messages.
        """
        self.name = name
        self._data: npt.NDArray[np.float64] = np.empty((0, 0), dtype=np.float64)
        self._mask: npt.NDArray[np.bool_] = np.zeros((0, 0), dtype=np.bool_)
        if rows > 0 and cols > 0:
            self.allocate(rows, cols)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, shape={self.shape}, valid={self.count()})"

    # ---- Storage ------------------------------------------------------

    def allocate(self, rows: int, cols: int) -> None:
        """(Re)allocate storage. Every prior value is discarded."""
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Cannot allocate {self.name} with shape ({rows}, {cols}).")
        self._data = np.zeros((rows, cols), dtype=np.float64)
        self._mask = np.zeros((rows, cols), dtype=np.bool_)

    @property
    def row_count(self) -> int:
        return self._data.shape[0]

    @property
    def col_count(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self._data.shape

    @property
    def is_allocated(self) -> bool:
        return self._data.size > 0

    def in_range(self, r: int, c: int) -> bool:
        return 0 <= r < self.row_count and 0 <= c < self.col_count

    def _check(self, r: int, c: int, action: str) -> bool:
        if self.in_range(r, c):
            return True
        logger.warning(
            f"Cannot {action} {self.name} at ({r}, {c}): outside of {self.row_count} x {self.col_count}."
        )
        return False

    # ---- Cell access --------------------------------------------------

    def get(self, r: int, c: int) -> tuple[float, bool]:
        """
        Returns:
            (value, is_valid). The value is meaningless when is_valid is False.
            Out-of-range indices read as (0.0, False).
        """
        if not self._check(r, c, "read"):
            return 0.0, False
        return float(self._data[r, c]), bool(self._mask[r, c])

    def has_value(self, r: int, c: int) -> bool:
        return self.in_range(r, c) and bool(self._mask[r, c])

    def set(self, r: int, c: int, value: float) -> bool:
        if not self._check(r, c, "set"):
            return False
        self._data[r, c] = value
        self._mask[r, c] = True
        return True

    def add(self, r: int, c: int, value: float) -> bool:
        """
        Accumulate `value` into the cell. An unset cell simply takes the value,
        so overlapping contributions sum up instead of blending with a default.
        """
        if not self._check(r, c, "add to"):
            return False
        if self._mask[r, c]:
            self._data[r, c] += value
        else:
            self._data[r, c] = value
            self._mask[r, c] = True
        return True

    def discard(self, r: int, c: int) -> bool:
        """Mark the cell unset. The stored value is left as it is."""
        if not self._check(r, c, "discard"):
            return False
        self._mask[r, c] = False
        return True

    def discard_all(self) -> None:
        self._mask[:] = False

    # ---- Bulk access --------------------------------------------------

    def count(self) -> int:
        """Number of valid cells."""
        return int(np.count_nonzero(self._mask))

    def min(self) -> float:
        if not self._mask.any():
            return float("nan")
        return float(self._data[self._mask].min())

    def max(self) -> float:
        if not self._mask.any():
            return float("nan")
        return float(self._data[self._mask].max())

    def valid_mask(self) -> npt.NDArray[np.bool_]:
        """Copy of the validity grid."""
        return self._mask.copy()

    def to_array(self, default: float = np.nan) -> npt.NDArray[np.float64]:
        """Copy of the values with `default` in every unset cell."""
        return np.where(self._mask, self._data, default)

    def assign(self, values: npt.NDArray[np.float64]) -> None:
        """Overwrite every cell from a full array and mark all of them valid."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != self.shape:
            raise ValueError(f"Shape mismatch for {self.name}: expected {self.shape}, got {values.shape}.")
        self._data[:] = values
        self._mask[:] = True
