"""
Shape Descriptor
================
A shape is a geometry variant (Point, Line, Circle, Rectangle) paired with an
electrical role (Conductor, Dielectric, ChargeSheet) and a solid/hollow flag.

Shapes are set up first and *then* placed on a workspace. Placing takes a
snapshot: moving the shape afterwards and placing it again stamps a second
copy, which is a convenient way to lay out arrays of identical objects.

Classes:
    GeometryKind: Enum naming the geometry variants.
    Shape: The mutable scene object.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from potentials.model.geometry_primitives import Point, Vector, Line, Circle, Rectangle, Geometry
from potentials.model.materials import Role, Conductor, Dielectric, ChargeSheet, RoleType


class GeometryKind(StrEnum):
    POINT = "point"
    LINE = "line"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"


_KIND_BY_TYPE: dict[type, GeometryKind] = {
    Point: GeometryKind.POINT,
    Line: GeometryKind.LINE,
    Circle: GeometryKind.CIRCLE,
    Rectangle: GeometryKind.RECTANGLE,
}


@dataclass
class Shape:
    """
    Scene object placed on the workspace.

    A hollow shape is only one grid node thick. Lines and points have no
    interior, so the flag does not change how they are rasterized.
    """
    geometry: Geometry
    role: Role
    solid: bool = True

    def __post_init__(self) -> None:
        if type(self.geometry) not in _KIND_BY_TYPE:
            raise TypeError(f"Unsupported geometry: {type(self.geometry).__name__}")

    # ---- Constructors -------------------------------------------------

    @classmethod
    def conductor(cls, geometry: Geometry, voltage: float, solid: bool = True) -> Shape:
        return cls(geometry=geometry, role=Conductor(voltage=voltage), solid=solid)

    @classmethod
    def dielectric(cls, geometry: Geometry, epsilon_r: float, solid: bool = True) -> Shape:
        return cls(geometry=geometry, role=Dielectric(epsilon_r=epsilon_r), solid=solid)

    @classmethod
    def charge_sheet(cls, geometry: Geometry, rho: float, solid: bool = True) -> Shape:
        return cls(geometry=geometry, role=ChargeSheet(rho=rho), solid=solid)

    # ---- Properties ---------------------------------------------------

    @property
    def kind(self) -> GeometryKind:
        return _KIND_BY_TYPE[type(self.geometry)]

    @property
    def role_type(self) -> RoleType:
        return self.role.type

    @property
    def is_conductor(self) -> bool:
        return self.role.type == RoleType.CONDUCTOR

    @property
    def location(self) -> Point:
        """
        Reference point of the shape: the center for circles and rectangles,
        the start point for lines.
        """
        return self.geometry.reference

    # ---- Manipulation -------------------------------------------------

    def make_hollow(self) -> None:
        self.solid = False

    def make_solid(self) -> None:
        self.solid = True

    def move_relative(self, dx: float, dy: float) -> None:
        """Shift the whole shape by (dx, dy), keeping its extent."""
        self.geometry = self.geometry.translate(Vector(dx, dy))

    def locate_at(self, point: Point) -> None:
        """Move the shape so that its reference point lands on `point`."""
        delta = point - self.location
        self.move_relative(delta.x, delta.y)

    def __repr__(self) -> str:
        style = "solid" if self.solid else "hollow"
        return f"{self.__class__.__name__}({style} {self.kind} {self.role.type}={self.role.value})"
