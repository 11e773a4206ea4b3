"""Radial projection for place settings around the table.

Screen coordinates: x to the right, y downwards, so a positive angle turns
clockwise, the same way a CSS ``rotate()`` does.

Each ring placement is kept as separate stages instead of one matrix:

1. container rotation by the seat angle,
2. translation along the rotated x axis by the ring radius,
3. content rotation by 90 degrees so the dish or plate faces its guest,

plus a uniform content scale used while a plate is hovered.
"""

from __future__ import annotations

from dataclasses import dataclass
import math

from fenzi_table.config import TableConfig


Point = tuple[float, float]

UPRIGHT_DEGREES = 90.0


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2

    @classmethod
    def from_bbox(cls, x0: float, y0: float, x1: float, y1: float) -> "Rect":
        return cls(left=float(x0), top=float(y0), width=float(x1 - x0), height=float(y1 - y0))


@dataclass(frozen=True)
class Rotation:
    degrees: float

    def apply(self, point: Point) -> Point:
        rad = math.radians(self.degrees)
        c, s = math.cos(rad), math.sin(rad)
        x, y = point
        return (x * c - y * s, x * s + y * c)

    def then(self, other: "Rotation") -> "Rotation":
        return Rotation(self.degrees + other.degrees)


@dataclass(frozen=True)
class Translation:
    dx: float
    dy: float = 0.0

    def apply(self, point: Point) -> Point:
        return (point[0] + self.dx, point[1] + self.dy)


@dataclass(frozen=True)
class RingPlacement:
    container: Rotation
    offset: Translation
    content: Rotation
    scale: float = 1.0

    def map_point(self, point: Point) -> Point:
        """Map a point in the content's own frame to table-centered coordinates."""
        x, y = point
        scaled = (x * self.scale, y * self.scale)
        return self.container.apply(self.offset.apply(self.content.apply(scaled)))

    def map_points(self, points: list[Point]) -> list[Point]:
        return [self.map_point(p) for p in points]

    @property
    def center(self) -> Point:
        return self.map_point((0.0, 0.0))

    @property
    def content_angle(self) -> float:
        return self.container.then(self.content).degrees % 360.0


@dataclass(frozen=True)
class PlaceSetting:
    angle: float
    dish: RingPlacement
    plate: RingPlacement


def project(angle: float, radius: float) -> Point:
    rad = math.radians(angle)
    return (radius * math.cos(rad), radius * math.sin(rad))


def place_ring(angle: float, radius: float, *, scale: float = 1.0) -> RingPlacement:
    return RingPlacement(
        container=Rotation(float(angle)),
        offset=Translation(float(radius)),
        content=Rotation(UPRIGHT_DEGREES),
        scale=float(scale),
    )


def place_setting(angle: float, config: TableConfig, *, hovered: bool = False) -> PlaceSetting:
    # Only the plate grows on hover; the shared dish stays put.
    return PlaceSetting(
        angle=float(angle),
        dish=place_ring(angle, config.dish_radius),
        plate=place_ring(angle, config.plate_radius, scale=config.hover_scale if hovered else 1.0),
    )


def circle_points(radius: float, *, segments: int = 24) -> list[Point]:
    """Polygon approximation of a circle centered on the local origin."""
    return [
        (radius * math.cos(2 * math.pi * i / segments), radius * math.sin(2 * math.pi * i / segments))
        for i in range(segments)
    ]


def rect_points(width: float, height: float, *, tilt: float = 0.0) -> list[Point]:
    hw, hh = width / 2, height / 2
    corners = [(-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)]
    if not tilt:
        return corners
    rot = Rotation(tilt)
    return [rot.apply(p) for p in corners]
