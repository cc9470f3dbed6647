from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel


class Vec2(BaseModel):
    x: float = 0.0
    y: float = 0.0


class Vec3(BaseModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned box in canvas pixels (origin top-left, y grows downward)."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def overlaps(self, other: Rect) -> bool:
        """Strict overlap: touching edges do not count."""

        return self.x < other.right and self.right > other.x and self.y < other.bottom and self.bottom > other.y

    def touches(self, other: Rect) -> bool:
        """Inclusive overlap: shared edges count as contact."""

        return self.x <= other.right and self.right >= other.x and self.y <= other.bottom and self.bottom >= other.y


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
