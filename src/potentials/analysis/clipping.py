"""
Cohen-Sutherland line clipping against the workspace rectangle.

Each endpoint gets a 4-bit outcode telling on which side(s) of the rectangle
it lies. Segments whose endpoints share an outside bit are rejected at once;
otherwise the outside endpoint is pulled onto the boundary it violates until
both endpoints are inside.
"""
from __future__ import annotations

from enum import IntFlag
from typing import Optional

from potentials.model.geometry_primitives import Point, Line, Rect


class OutCode(IntFlag):
    INSIDE = 0
    LEFT = 1
    RIGHT = 2
    BOTTOM = 4
    TOP = 8


def compute_outcode(point: Point, rect: Rect) -> OutCode:
    """Classify a point against the rectangle, boundary counting as inside."""
    code = OutCode.INSIDE
    if point.x < rect.min_x:
        code |= OutCode.LEFT
    elif point.x > rect.max_x:
        code |= OutCode.RIGHT
    if point.y < rect.min_y:
        code |= OutCode.BOTTOM
    elif point.y > rect.max_y:
        code |= OutCode.TOP
    return code


def clip_line(line: Line, rect: Rect) -> Optional[Line]:
    """
    Trim a segment to the part that lies inside `rect`.

    Returns:
        The clipped segment, or None if no part of it is inside.
    """
    p0, p1 = line.start, line.end
    code0 = compute_outcode(p0, rect)
    code1 = compute_outcode(p1, rect)

    while True:
        if not (code0 | code1):
            return Line(start=p0, end=p1)
        if code0 & code1:
            return None

        # At least one endpoint is outside; move that one onto the boundary
        outside = code0 if code0 else code1
        dx = p1.x - p0.x
        dy = p1.y - p0.y

        # dy (dx) cannot be zero below: both endpoints would share the bit
        if outside & OutCode.TOP:
            x, y = p0.x + dx * (rect.max_y - p0.y) / dy, rect.max_y
        elif outside & OutCode.BOTTOM:
            x, y = p0.x + dx * (rect.min_y - p0.y) / dy, rect.min_y
        elif outside & OutCode.RIGHT:
            x, y = rect.max_x, p0.y + dy * (rect.max_x - p0.x) / dx
        else:
            x, y = rect.min_x, p0.y + dy * (rect.min_x - p0.x) / dx

        if outside == code0:
            p0 = Point(x, y)
            code0 = compute_outcode(p0, rect)
        else:
            p1 = Point(x, y)
            code1 = compute_outcode(p1, rect)
