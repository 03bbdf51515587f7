# src/game/geometry.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]


@dataclass
class Rectangle:
    """
    Axis-aligned box in normalized stage units (0..100), origin at the
    lower-left corner, y growing upwards.
    """
    origin_x: float = 0.0
    origin_y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Rectangle size must be >= 0, got {self.width}x{self.height}")

    @property
    def right(self) -> float:
        return self.origin_x + self.width

    @property
    def top(self) -> float:
        return self.origin_y + self.height

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        """(lower-left, upper-left, lower-right, upper-right)."""
        return (
            (self.origin_x, self.origin_y),
            (self.origin_x, self.top),
            (self.right, self.origin_y),
            (self.right, self.top),
        )

    def contains_point(self, p: Point) -> bool:
        """Closed-box containment: edges count as inside."""
        x, y = p
        return (self.origin_x <= x <= self.right) and (self.origin_y <= y <= self.top)

    def overlaps(self, other: "Rectangle") -> bool:
        return overlaps(self, other)


def make_rect(x: float, y: float, w: float, h: float) -> Rectangle:
    return Rectangle(float(x), float(y), float(w), float(h))


def overlaps(a: Rectangle, b: Rectangle) -> bool:
    """
    True if any corner of `a` lies inside the closed box of `b`.

    Corner-only and one-sided: a small `b` fully inside a larger `a` is NOT
    detected. Only use it with `b` the larger box (flyer vs obstacle span);
    the gate randomization margins are tuned against this exact test.
    """
    return any(b.contains_point(p) for p in a.corners())
