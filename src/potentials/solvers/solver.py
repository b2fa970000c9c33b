from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Callable, Optional
import logging
import math

import numba as nb
import numpy as np

from potentials import config
from potentials.analysis.field import derive_field, field_magnitude, field_direction
from potentials.analysis.grid_space import GridProperty

if TYPE_CHECKING:
    import numpy.typing as npt

    from potentials.analysis.grid_space import GridSpace

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, float], None]


class SolverState(StrEnum):
    UNCONFIGURED = "unconfigured"
    READY = "ready"
    SOLVING = "solving"
    SOLVED = "solved"
    NOT_CONVERGED = "not_converged"


@dataclass
class SolverSettings:
    """
    Numeric policy of the relaxation.

    Attributes:
        tolerance: Largest per-sweep voltage change accepted as converged [V].
        max_iterations: Sweep cap; reaching it ends the solve as NOT_CONVERGED.
        relaxation: Over-relaxation factor in (0, 2); 1.0 is plain Gauss-Seidel.
        epsilon_0: Permittivity of free space in the unit system of rho.
        progress_interval: Sweeps between progress log records and callbacks.
    """
    tolerance: float = config.DEFAULT_TOLERANCE
    max_iterations: int = config.DEFAULT_MAX_ITERATIONS
    relaxation: float = config.DEFAULT_RELAXATION
    epsilon_0: float = config.EPSILON_0
    progress_interval: int = config.PROGRESS_LOG_INTERVAL

    def __post_init__(self) -> None:
        if not self.tolerance > 0.0:
            raise ValueError(f"Tolerance must be positive, got {self.tolerance}.")
        if self.max_iterations < 1:
            raise ValueError(f"At least one iteration is required, got {self.max_iterations}.")
        if not 0.0 < self.relaxation < 2.0:
            raise ValueError(f"Relaxation factor must lie in (0, 2), got {self.relaxation}.")
        if not self.epsilon_0 > 0.0:
            raise ValueError(f"epsilon_0 must be positive, got {self.epsilon_0}.")
        if self.progress_interval < 1:
            raise ValueError(f"Progress interval must be at least 1, got {self.progress_interval}.")


@dataclass(frozen=True)
class SolveResult:
    state: SolverState
    iterations: int
    residual: float

    @property
    def converged(self) -> bool:
        return self.state == SolverState.SOLVED


@nb.njit(cache=True)
def _sweep(
    voltage: npt.NDArray[np.float64],
    epsilon_r: npt.NDArray[np.float64],
    source: npt.NDArray[np.float64],
    fixed: npt.NDArray[np.bool_],
    inv_dx2: float,
    inv_dy2: float,
    relaxation: float,
) -> float:
    """
    One in-place Gauss-Seidel sweep over the interior nodes in row-major order.

    Each free node takes the value satisfying the 5-point stencil of
    div(eps_r grad V) = -rho / eps0, with the permittivity between two
    neighbours taken as their average. Boundary rows and columns are never
    touched.

    Returns:
        The largest absolute change of any node during the sweep.
    """
    rows, cols = voltage.shape
    max_change = 0.0
    for r in range(1, rows - 1):
        for c in range(1, cols - 1):
            if fixed[r, c]:
                continue
            e = epsilon_r[r, c]
            a_e = 0.5 * (e + epsilon_r[r, c + 1]) * inv_dx2
            a_w = 0.5 * (e + epsilon_r[r, c - 1]) * inv_dx2
            a_n = 0.5 * (e + epsilon_r[r + 1, c]) * inv_dy2
            a_s = 0.5 * (e + epsilon_r[r - 1, c]) * inv_dy2
            target = (
                a_e * voltage[r, c + 1]
                + a_w * voltage[r, c - 1]
                + a_n * voltage[r + 1, c]
                + a_s * voltage[r - 1, c]
                + source[r, c]
            ) / (a_e + a_w + a_n + a_s)
            old = voltage[r, c]
            new = old + relaxation * (target - old)
            change = abs(new - old)
            if change > max_change:
                max_change = change
            voltage[r, c] = new
    return max_change


class RelaxationSolver:
    """
    Iterative finite-difference solver for the electrostatic potential on a GridSpace.

    Lifecycle: UNCONFIGURED -> READY (prepare) -> SOLVING (step) -> SOLVED,
    or NOT_CONVERGED once the iteration cap is hit. Both terminal states
    publish the voltage and the derived field to the grid.

    The solver can be driven sweep by sweep with step() so a caller can poll
    `iteration` and `residual`, or run to completion with solve(). There is no
    cancellation: a caller that wants to stop simply stops calling step().
    """

    def __init__(self, grid: GridSpace, settings: Optional[SolverSettings] = None) -> None:
        """
        Initialize the solver for a grid.

        Args:
            grid: The workspace to solve. It must not be solved concurrently by another solver.
            settings: Numeric policy; defaults from potentials.config.
        """
        self.grid = grid
        self.settings = settings or SolverSettings()

        self._state = SolverState.UNCONFIGURED
        self._iteration: int = 0
        self._residual: float = math.inf

        self._voltage: npt.NDArray[np.float64] = np.empty((0, 0), dtype=np.float64)
        self._epsilon_r: npt.NDArray[np.float64] = np.empty((0, 0), dtype=np.float64)
        self._source: npt.NDArray[np.float64] = np.empty((0, 0), dtype=np.float64)
        self._fixed: npt.NDArray[np.bool_] = np.empty((0, 0), dtype=np.bool_)

    @property
    def state(self) -> SolverState:
        return self._state

    @property
    def iteration(self) -> int:
        """Number of sweeps done since the last prepare()."""
        return self._iteration

    @property
    def residual(self) -> float:
        """Largest nodal change of the last sweep (inf before the first one)."""
        return self._residual

    @property
    def result(self) -> SolveResult:
        return SolveResult(state=self._state, iterations=self._iteration, residual=self._residual)

    @property
    def is_finished(self) -> bool:
        return self._state in (SolverState.SOLVED, SolverState.NOT_CONVERGED)

    def prepare(self) -> bool:
        """
        Snapshot the grid's input fields and reset the iteration.

        Free nodes start at the boundary voltage and conductor nodes at their
        fixed voltage, so every solve of the same inputs starts from the same
        state and reproduces the same result.

        Returns:
            False (state UNCONFIGURED) if the grid is not configured or holds
            a non-positive permittivity.
        """
        if not self.grid.fields_match():
            logger.error("Cannot solve: the workspace grid is not configured.")
            self._state = SolverState.UNCONFIGURED
            return False

        epsilon_r = self.grid.as_array(GridProperty.EPSILON_R)
        if not np.all(np.isfinite(epsilon_r) & (epsilon_r > 0.0)):
            logger.error(
                f"Cannot solve: relative permittivity must be positive and finite, "
                f"found a minimum of {np.nanmin(epsilon_r):.4g}."
            )
            self._state = SolverState.UNCONFIGURED
            return False

        self._fixed = np.ascontiguousarray(self.grid.conductor_mask())
        fixed_voltage = self.grid.as_array(GridProperty.FIXED_VOLTAGE)
        self._voltage = np.ascontiguousarray(
            np.where(self._fixed, fixed_voltage, config.BOUNDARY_VOLTAGE), dtype=np.float64
        )
        self._epsilon_r = np.ascontiguousarray(epsilon_r, dtype=np.float64)
        self._source = np.ascontiguousarray(
            self.grid.as_array(GridProperty.RHO) / self.settings.epsilon_0, dtype=np.float64
        )

        self._iteration = 0
        self._residual = math.inf
        self._state = SolverState.READY
        logger.info(
            f"Prepared {self.grid.row_count} x {self.grid.col_count} grid "
            f"with {int(self._fixed.sum())} conductor node(s)."
        )
        return True

    def step(self) -> float:
        """
        Perform one relaxation sweep.

        Prepares the solver first if needed. Once a terminal state is reached
        further calls do nothing and return the last residual; after changing
        the grid's inputs call prepare() (or solve()) to take a new snapshot.

        Returns:
            The largest nodal voltage change of the sweep, NaN if the grid is not configured.
        """
        if self._state == SolverState.UNCONFIGURED and not self.prepare():
            return math.nan
        if self.is_finished:
            return self._residual

        self._state = SolverState.SOLVING
        self._residual = _sweep(
            self._voltage,
            self._epsilon_r,
            self._source,
            self._fixed,
            1.0 / self.grid.delta_x ** 2,
            1.0 / self.grid.delta_y ** 2,
            self.settings.relaxation,
        )
        self._iteration += 1

        if self._residual < self.settings.tolerance:
            self._state = SolverState.SOLVED
            logger.info(f"Converged after {self._iteration} iteration(s), residual {self._residual:.3e}.")
            self._publish()
        elif self._iteration >= self.settings.max_iterations:
            self._state = SolverState.NOT_CONVERGED
            logger.warning(
                f"Not converged after {self._iteration} iteration(s), residual {self._residual:.3e} "
                f"(tolerance {self.settings.tolerance:.3e}). Keeping the best-effort result."
            )
            self._publish()
        return self._residual

    def solve(self, progress: Optional[ProgressCallback] = None) -> SolveResult:
        """
        Relax the grid until convergence or the iteration cap.

        Args:
            progress: Optional callback(iteration, residual), called every
                `settings.progress_interval` sweeps and once at the end.

        Returns:
            The final state, iteration count and residual.
        """
        if not self.prepare():
            return self.result

        while not self.is_finished:
            self.step()
            if self._iteration % self.settings.progress_interval == 0 and not self.is_finished:
                logger.info(f"Iteration {self._iteration} - Residual: {self._residual:.3e}")
                if progress is not None:
                    progress(self._iteration, self._residual)

        if progress is not None:
            progress(self._iteration, self._residual)
        return self.result

    def _publish(self) -> None:
        """Store the voltage and the field derived from it on the grid."""
        ex, ey = derive_field(self._voltage, self.grid.delta_x, self.grid.delta_y)
        self.grid.store_results(
            voltage=self._voltage.copy(),
            magnitude=field_magnitude(ex, ey),
            direction=field_direction(ex, ey),
        )
