"""
Geometry primitives shared by detection and rectification.

Points are in image pixel space: x grows to the right, y grows downwards.
"""

import math
from typing import Iterable, List, NamedTuple, Sequence

import numpy as np


class Point(NamedTuple):
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


class Bounds:
    def __init__(self, left, top, width, height):
        self.left = left
        self.top = top
        self.width = width
        self.height = height

    def __str__(self) -> str:
        return f"Bounds({self.left}, {self.top}, {self.width}, {self.height})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return (self.left, self.top, self.width, self.height) == (other.left, other.top, other.width, other.height)

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> "Bounds":
        """Smallest axis-aligned Bounds containing all the given points."""
        xs, ys = zip(*((float(p[0]), float(p[1])) for p in points))
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    def is_inside(self, other: "Bounds") -> bool:
        """
        Check if the current Bounds object is completely inside another Bounds object.

        Parameters:
        - other (Bounds): The other Bounds object to compare against. Edges may touch.

        Returns:
        - bool: True if the current Bounds object is inside the other Bounds object, False otherwise.
        """
        return (
            self.left >= other.left
            and self.left + self.width <= other.left + other.width
            and self.top >= other.top
            and self.top + self.height <= other.top + other.height
        )

    def aspect_ratio(self) -> float:
        """Width divided by height; 0 for a zero-height box."""
        if self.height == 0:
            return 0.0
        return self.width / self.height


def polygon_area(points: Sequence[Sequence[float]]) -> float:
    """Absolute enclosed area of a simple polygon (shoelace formula)."""
    n = len(points)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        x1, y1 = points[i][0], points[i][1]
        x2, y2 = points[(i + 1) % n][0], points[(i + 1) % n][1]
        total += x1 * y2 - x2 * y1
    return abs(total) / 2.0


def order_corners(points: Sequence[Sequence[float]]) -> List[Point]:
    """
    Order four points as [top-left, top-right, bottom-right, bottom-left].

    The two points with the smallest y form the top pair and the other two
    the bottom pair; each pair is then split left/right by x. Sorting is
    done on (y, x) so the result does not depend on the input order.
    """
    if len(points) != 4:
        raise ValueError(f"Expected 4 points, got {len(points)}")

    pts = sorted((Point(float(p[0]), float(p[1])) for p in points), key=lambda p: (p.y, p.x))
    top_left, top_right = sorted(pts[:2], key=lambda p: (p.x, p.y))
    bottom_left, bottom_right = sorted(pts[2:], key=lambda p: (p.x, p.y))

    return [top_left, top_right, bottom_right, bottom_left]


class Quadrilateral(NamedTuple):
    """
    Four corners of a document candidate.

    The labels are only hypotheses: detection output may carry rotated or
    swapped roles. Use `ordered()` when true corner roles matter.
    """

    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]]) -> "Quadrilateral":
        if len(points) != 4:
            raise ValueError(f"Expected 4 points, got {len(points)}")
        return cls(*(Point(float(p[0]), float(p[1])) for p in points))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Quadrilateral":
        return cls.from_points(np.asarray(array, dtype=np.float64).reshape(4, 2).tolist())

    @classmethod
    def from_dict(cls, data: dict) -> "Quadrilateral":
        """Build from the {topLeft: {x, y}, ...} wire format."""
        try:
            return cls(
                *(
                    Point(float(data[key]["x"]), float(data[key]["y"]))
                    for key in ("topLeft", "topRight", "bottomRight", "bottomLeft")
                )
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid corners payload: {e}") from e

    def to_dict(self) -> dict:
        return {
            "topLeft": {"x": self.top_left.x, "y": self.top_left.y},
            "topRight": {"x": self.top_right.x, "y": self.top_right.y},
            "bottomRight": {"x": self.bottom_right.x, "y": self.bottom_right.y},
            "bottomLeft": {"x": self.bottom_left.x, "y": self.bottom_left.y},
        }

    def points(self) -> List[Point]:
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]

    def as_array(self) -> np.ndarray:
        return np.array(self.points(), dtype=np.float32)

    def ordered(self) -> "Quadrilateral":
        return Quadrilateral(*order_corners(self.points()))

    def bounds(self) -> Bounds:
        return Bounds.from_points(self.points())

    def scaled(self, factor: float) -> "Quadrilateral":
        return Quadrilateral(*(Point(p.x * factor, p.y * factor) for p in self.points()))
