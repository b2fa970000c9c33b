"""
Shape Inventory
===============
Holds the shapes that are currently in play for a simulation.

Why is this file needed?
------------------------
The coordinator needs one ordered place to keep the scene objects so it can
stamp them onto a workspace in insertion order. The inventory is owned by
whoever creates it and handed around explicitly; there is no global copy.
"""
from __future__ import annotations

from typing import Iterator, List
import logging

from potentials.model.shapes import Shape

logger = logging.getLogger(__name__)


class ShapeInventory:
    """Ordered collection of shapes; insertion order is placement order."""

    def __init__(self, shapes: List[Shape] | None = None) -> None:
        self._shapes: List[Shape] = []
        for shape in shapes or []:
            self.add(shape)

    def add(self, shape: Shape) -> bool:
        """
        Append a shape. The same object is only held once.

        Returns:
            True if the shape was added, False if it was already present.
        """
        if shape in self:
            logger.debug(f"{shape!r} is already in the inventory.")
            return False
        self._shapes.append(shape)
        return True

    def remove(self, shape: Shape) -> bool:
        for i, held in enumerate(self._shapes):
            if held is shape:
                del self._shapes[i]
                return True
        logger.warning(f"Cannot remove {shape!r}: not in the inventory.")
        return False

    def clear(self) -> None:
        self._shapes.clear()
        logger.info("Shape inventory has been cleared.")

    def __contains__(self, shape: object) -> bool:
        # Identity, not equality: two equal shapes may be placed twice on purpose
        return any(held is shape for held in self._shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(list(self._shapes))

    def __len__(self) -> int:
        return len(self._shapes)
