"""
Simulation Coordinator
======================
Ties a shape inventory, a workspace grid and the relaxation solver together.

Why is this file needed?
------------------------
1. Ownership: The coordinator holds explicit references to both the inventory
   and the grid; nothing in the engine reaches for a global instance.
2. Ordering: Shapes are stamped onto a freshly cleared grid in inventory
   order, which is what makes "last conductor wins" well defined.

Classes:
    Simulation: Populates the grid from the inventory and runs the solver.
"""
from __future__ import annotations

from typing import Optional
import logging

from potentials.analysis.grid_space import GridSpace, GridProperty
from potentials.analysis.rasterizer import ShapeRasterizer
from potentials.model.inventory import ShapeInventory
from potentials.solvers.solver import RelaxationSolver, SolverSettings, SolveResult, ProgressCallback

logger = logging.getLogger(__name__)


class Simulation:
    """
    One scene on one grid.
    """

    def __init__(
        self,
        grid: GridSpace,
        inventory: Optional[ShapeInventory] = None,
        settings: Optional[SolverSettings] = None,
    ) -> None:
        self.grid = grid
        self.inventory = inventory if inventory is not None else ShapeInventory()
        self.solver = RelaxationSolver(grid, settings)

    def populate(self) -> int:
        """
        Clear the grid and place every shape of the inventory on it, in order.

        Returns:
            Number of shapes placed.
        """
        if not self.grid.is_configured:
            logger.error("Cannot populate an unconfigured workspace.")
            return 0

        self.grid.clear()
        placed = ShapeRasterizer(self.grid).rasterize_all(self.inventory)
        if placed < len(self.inventory):
            logger.warning(f"Only {placed} of {len(self.inventory)} shapes were placed.")
        else:
            logger.info(f"Placed {placed} shape(s) on the workspace.")
        return placed

    def run(self, progress: Optional[ProgressCallback] = None) -> SolveResult:
        """Populate the grid from the inventory and solve it."""
        self.populate()
        result = self.solver.solve(progress=progress)
        if self.grid.is_solved:
            logger.info(
                f"Voltage range [{self.grid.min(GridProperty.RESULTANT_VOLTAGE):.4g}, "
                f"{self.grid.max(GridProperty.RESULTANT_VOLTAGE):.4g}] V, "
                f"max |E| {self.grid.max(GridProperty.FIELD_MAGNITUDE):.4g}"
            )
        return result
