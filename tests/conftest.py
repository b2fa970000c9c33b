import pytest

from potentials.analysis.grid_space import GridSpace
from potentials.model.geometry_primitives import Rect
from potentials.solvers.solver import SolverSettings


@pytest.fixture
def grid() -> GridSpace:
    """10 x 10 workspace at the origin with 11 x 11 nodes (unit spacing)."""
    return GridSpace(Rect(0.0, 0.0, 10.0, 10.0), rows=11, cols=11)


@pytest.fixture
def fine_grid() -> GridSpace:
    """10 x 10 workspace at the origin with 21 x 21 nodes (half-unit spacing)."""
    return GridSpace(Rect(0.0, 0.0, 10.0, 10.0), rows=21, cols=21)


@pytest.fixture
def fast_settings() -> SolverSettings:
    """Over-relaxed, unit-free settings that converge quickly on small grids."""
    return SolverSettings(tolerance=1e-10, max_iterations=20_000, relaxation=1.8, epsilon_0=1.0)
