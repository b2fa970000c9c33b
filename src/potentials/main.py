"""
Demo Runner
===========
Builds one of the built-in scenes, solves it and logs a summary.

Why is this file needed?
------------------------
It acts as the composition root for command-line use. It:
1. Sets up logging.
2. Instantiates the workspace grid and the shape inventory.
3. Hands both to a Simulation and runs it.
"""
from __future__ import annotations

import argparse
import logging
from typing import Callable, Optional, Sequence

from potentials import config
from potentials.analysis.grid_space import GridSpace, GridProperty
from potentials.controller.simulation import Simulation
from potentials.logging_config import setup_logging
from potentials.model.geometry_primitives import Point, Line, Circle, Rectangle, Rect, Size
from potentials.model.inventory import ShapeInventory
from potentials.model.shapes import Shape
from potentials.solvers.solver import SolverSettings

logger = logging.getLogger(__name__)


def capacitor_scene() -> tuple[Rect, ShapeInventory]:
    """Two parallel plates with a dielectric slab half filling the gap."""
    inventory = ShapeInventory([
        Shape.dielectric(Rectangle(center=Point(3.0, 5.0), size=Size(2.0, 6.0)), epsilon_r=4.0),
        Shape.conductor(Line(Point(2.0, 2.0), Point(2.0, 8.0)), voltage=1.0),
        Shape.conductor(Line(Point(8.0, 2.0), Point(8.0, 8.0)), voltage=-1.0),
    ])
    return Rect(0.0, 0.0, 10.0, 10.0), inventory


def coax_scene() -> tuple[Rect, ShapeInventory]:
    """Solid inner conductor inside a grounded hollow shield, with a charged ring between."""
    inventory = ShapeInventory([
        Shape.conductor(Circle(center=Point(5.0, 5.0), radius=4.0), voltage=0.0, solid=False),
        Shape.charge_sheet(Circle(center=Point(5.0, 5.0), radius=2.5), rho=-0.5, solid=False),
        Shape.conductor(Circle(center=Point(5.0, 5.0), radius=1.0), voltage=1.0),
    ])
    return Rect(0.0, 0.0, 10.0, 10.0), inventory


SCENES: dict[str, Callable[[], tuple[Rect, ShapeInventory]]] = {
    "capacitor": capacitor_scene,
    "coax": coax_scene,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="potentials",
        description="Solve a built-in 2D electrostatics scene on a finite-difference grid.",
    )
    parser.add_argument("--scene", choices=sorted(SCENES), default="capacitor")
    parser.add_argument("--rows", type=int, default=101, help="grid rows (>= 2)")
    parser.add_argument("--cols", type=int, default=101, help="grid columns (>= 2)")
    parser.add_argument("--tolerance", type=float, default=config.DEFAULT_TOLERANCE)
    parser.add_argument("--max-iterations", type=int, default=config.DEFAULT_MAX_ITERATIONS)
    parser.add_argument("--relaxation", type=float, default=1.9,
                        help="over-relaxation factor in (0, 2); 1.0 is plain Gauss-Seidel")
    parser.add_argument("--epsilon-0", type=float, default=1.0,
                        help="free-space permittivity in the scene's units")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)

    rect, inventory = SCENES[args.scene]()
    grid = GridSpace(rect, rows=args.rows, cols=args.cols)
    settings = SolverSettings(
        tolerance=args.tolerance,
        max_iterations=args.max_iterations,
        relaxation=args.relaxation,
        epsilon_0=args.epsilon_0,
    )

    simulation = Simulation(grid, inventory, settings)
    result = simulation.run()

    logger.info(
        f"Scene '{args.scene}': {result.state} after {result.iterations} iteration(s), "
        f"residual {result.residual:.3e}"
    )
    center = Point(rect.x + 0.5 * rect.width, rect.y + 0.5 * rect.height)
    logger.info(
        f"At the workspace center: V = {grid.value_at_point(GridProperty.RESULTANT_VOLTAGE, center):.4g}, "
        f"|E| = {grid.value_at_point(GridProperty.FIELD_MAGNITUDE, center):.4g}, "
        f"direction = {grid.value_at_point(GridProperty.FIELD_DIRECTION, center):.4g} rad"
    )
    return 0 if result.converged else 1


if __name__ == "__main__":
    raise SystemExit(main())
