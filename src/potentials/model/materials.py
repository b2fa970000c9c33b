"""
Electrical Roles
================
Defines the electrical parameters a shape carries onto the workspace.

The material of a shape is a parameter, not a subclass of the shape: the
same circle can be a conductor in one run and a dielectric in the next just
by swapping its role.
"""
from __future__ import annotations

from dataclasses import dataclass
from abc import ABC, abstractmethod
from enum import StrEnum
import math


class RoleType(StrEnum):
    CONDUCTOR = "conductor"
    DIELECTRIC = "dielectric"
    CHARGE_SHEET = "charge_sheet"


@dataclass
class Role(ABC):
    """
    Abstract base class for the electrical role of a shape.
    """

    @property
    @abstractmethod
    def type(self) -> RoleType:
        pass

    @property
    @abstractmethod
    def value(self) -> float:
        """The single physical parameter the role writes onto grid nodes."""
        pass


@dataclass
class Conductor(Role):
    """
    Ideal conductor held at a fixed potential [V].
    There is no electric field inside its boundaries.
    """
    voltage: float = 0.0

    @property
    def type(self) -> RoleType: return RoleType.CONDUCTOR

    @property
    def value(self) -> float: return self.voltage


@dataclass
class Dielectric(Role):
    """
    Region contributing additively to the relative permittivity of its nodes.
    """
    epsilon_r: float = 1.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.epsilon_r) and self.epsilon_r > 0.0):
            raise ValueError(f"Relative permittivity must be positive and finite, got {self.epsilon_r}.")

    @property
    def type(self) -> RoleType: return RoleType.DIELECTRIC

    @property
    def value(self) -> float: return self.epsilon_r


@dataclass
class ChargeSheet(Role):
    """
    Region contributing additively to the fixed charge density of its nodes.
    The density is per unit of grid area, in the unit system chosen for eps0.
    """
    rho: float = 0.0

    @property
    def type(self) -> RoleType: return RoleType.CHARGE_SHEET

    @property
    def value(self) -> float: return self.rho
