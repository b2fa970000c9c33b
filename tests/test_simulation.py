import logging

import pytest

from potentials.analysis.grid_space import GridSpace, GridProperty
from potentials.controller import Simulation
from potentials.main import main, SCENES
from potentials.model.geometry_primitives import Point, Circle, Rect
from potentials.model.inventory import ShapeInventory
from potentials.model.shapes import Shape
from potentials.solvers import SolverState


@pytest.fixture
def restore_logging():
    """main() installs its own handlers on the package logger; undo that after the test."""
    logger = logging.getLogger("potentials")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_run_places_every_shape_and_solves(grid, fast_settings):
    inventory = ShapeInventory([
        Shape.conductor(Circle(Point(5.0, 5.0), 1.0), voltage=2.0),
        Shape.charge_sheet(Point(2.0, 2.0), rho=1.0),
    ])
    simulation = Simulation(grid, inventory, fast_settings)

    result = simulation.run()

    assert result.state == SolverState.SOLVED
    assert grid.is_solved
    assert grid.value_at(GridProperty.RESULTANT_VOLTAGE, 5, 5) == 2.0
    assert grid.value_at(GridProperty.RHO, 2, 2) == 1.0


def test_populate_starts_from_a_clean_grid(grid, fast_settings):
    grid.set_voltage(1, 1, 5.0)
    simulation = Simulation(grid, ShapeInventory([Shape.conductor(Point(8.0, 8.0), voltage=1.0)]), fast_settings)
    assert simulation.populate() == 1
    assert not grid.is_conductor(1, 1)
    assert grid.is_conductor(8, 8)

    # Repopulating does not double the accumulated values
    simulation.inventory.add(Shape.dielectric(Point(3.0, 3.0), epsilon_r=2.0))
    simulation.populate()
    simulation.populate()
    assert grid.value_at(GridProperty.EPSILON_R, 3, 3) == 2.0


def test_later_conductor_wins(grid, fast_settings):
    inventory = ShapeInventory([
        Shape.conductor(Circle(Point(5.0, 5.0), 2.0), voltage=1.0),
        Shape.conductor(Point(5.0, 5.0), voltage=-1.0),
    ])
    Simulation(grid, inventory, fast_settings).run()
    assert grid.value_at(GridProperty.RESULTANT_VOLTAGE, 5, 5) == -1.0
    assert grid.value_at(GridProperty.RESULTANT_VOLTAGE, 5, 6) == 1.0


def test_empty_scene_is_all_zero(grid, fast_settings):
    result = Simulation(grid, settings=fast_settings).run()
    assert result.converged
    assert grid.max(GridProperty.RESULTANT_VOLTAGE) == 0.0
    assert grid.min(GridProperty.RESULTANT_VOLTAGE) == 0.0
    assert grid.max(GridProperty.FIELD_MAGNITUDE) == 0.0


def test_unconfigured_grid(caplog):
    simulation = Simulation(GridSpace(), ShapeInventory([Shape.conductor(Point(0.0, 0.0), voltage=1.0)]))
    assert simulation.populate() == 0
    result = simulation.run()
    assert result.state == SolverState.UNCONFIGURED
    assert "unconfigured" in caplog.text


def test_moving_the_workspace_between_runs(fast_settings):
    grid = GridSpace(Rect(0.0, 0.0, 10.0, 10.0), rows=11, cols=11)
    simulation = Simulation(grid, ShapeInventory([Shape.conductor(Point(5.0, 5.0), voltage=1.0)]), fast_settings)
    simulation.run()
    assert grid.is_conductor(5, 5)

    grid.set_workspace_origin(Point(5.0, 5.0))
    assert not grid.is_solved
    simulation.run()
    assert grid.is_conductor(0, 0)
    assert not grid.is_conductor(5, 5)


@pytest.mark.parametrize("scene", sorted(SCENES))
def test_cli_scenes_converge(scene, restore_logging):
    assert main(["--scene", scene, "--rows", "21", "--cols", "21", "--log-level", "WARNING"]) == 0


def test_cli_reports_non_convergence(restore_logging):
    assert main(["--rows", "21", "--cols", "21", "--max-iterations", "2", "--log-level", "ERROR"]) == 1


def test_cli_rejects_unknown_scene(restore_logging):
    with pytest.raises(SystemExit):
        main(["--scene", "nope"])
