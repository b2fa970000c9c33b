"""
Geometric Primitives for scene description and grid rasterization.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Union
import math

@dataclass
class Vector:
    """
    A vector in the workspace plane representing direction and magnitude.
    """
    x: float
    y: float

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)


@dataclass
class Point:
    """A simple geometric point in the workspace plane."""
    x: float
    y: float

    def __add__(self, other: Vector) -> Point:
        # Point + Vector = Point (Translation)
        if isinstance(other, Vector):
            return Point(self.x + other.x, self.y + other.y)
        raise TypeError("Can only add a Vector to a Point.")

    def __sub__(self, other: Union[Vector, Point]) -> Union[Vector, Point]:
        # Point - Point = Vector (Direction)
        if isinstance(other, Point):
            return Vector(self.x - other.x, self.y - other.y)
        # Point - Vector = Point (Inverse translation)
        if isinstance(other, Vector):
            return Point(self.x - other.x, self.y - other.y)
        raise TypeError("Can only subtract a Vector or Point from a Point.")

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def translate(self, vector: Vector) -> Point:
        return self + vector

    @property
    def reference(self) -> Point:
        return self


@dataclass
class Size:
    """Width and height of an axis-aligned box."""
    width: float
    height: float


@dataclass
class Rect:
    """
    Axis-aligned rectangle given by its lower-left origin and its size.
    Used for the real-space extent of the simulation workspace.
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_origin_and_size(cls, origin: Point, size: Size) -> Rect:
        return cls(x=origin.x, y=origin.y, width=size.width, height=size.height)

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_y(self) -> float:
        return self.y + self.height


@dataclass
class Line:
    """A straight line between two points."""
    start: Point
    end: Point

    def translate(self, vector: Vector) -> Line:
        return Line(start=self.start + vector, end=self.end + vector)

    @property
    def reference(self) -> Point:
        """The start point doubles as the reference point of a line."""
        return self.start


@dataclass
class Circle:
    """A circle given by its center and radius."""
    center: Point
    radius: float

    def translate(self, vector: Vector) -> Circle:
        return Circle(center=self.center + vector, radius=self.radius)

    @property
    def reference(self) -> Point:
        return self.center


@dataclass
class Rectangle:
    """An axis-aligned rectangle given by its center and its size."""
    center: Point
    size: Size

    def translate(self, vector: Vector) -> Rectangle:
        return Rectangle(center=self.center + vector, size=Size(self.size.width, self.size.height))

    @property
    def reference(self) -> Point:
        return self.center

    @property
    def min_x(self) -> float:
        return self.center.x - 0.5 * self.size.width

    @property
    def max_x(self) -> float:
        return self.center.x + 0.5 * self.size.width

    @property
    def min_y(self) -> float:
        return self.center.y - 0.5 * self.size.height

    @property
    def max_y(self) -> float:
        return self.center.y + 0.5 * self.size.height


# Union type for the geometry variants a shape may carry
Geometry = Union[Point, Line, Circle, Rectangle]
