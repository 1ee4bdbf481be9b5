"""
Rectangle Primitive

Axis-aligned rectangles in image pixel coordinates. These are what the
region detector produces and what the area preparation crops with.

Design Decisions:
- Origin is top-left (image convention), y grows downwards
- Stored as top-left corner plus width/height, like cv::Rect
- Right and bottom edges are exclusive: a 10x10 box at (0, 0) covers
  pixels 0..9 and its bottom-right corner is (10, 10)
- Immutable value type, safe to share between threads
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Iterable, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Rectangle:
    """
    Immutable axis-aligned rectangle.

    Example:
        box = Rectangle(x=10, y=20, width=100, height=30)
        print(box.tl, box.br)      # (10, 20) (110, 50)

        if box.contains_box(other):
            ...
    """
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        """Normalize negative extents so width/height are never negative."""
        if self.width < 0:
            object.__setattr__(self, 'x', self.x + self.width)
            object.__setattr__(self, 'width', -self.width)
        if self.height < 0:
            object.__setattr__(self, 'y', self.y + self.height)
            object.__setattr__(self, 'height', -self.height)

    @property
    def x1(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.width

    @property
    def y1(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.height

    @property
    def tl(self) -> Tuple[int, int]:
        """Top-left corner."""
        return (self.x, self.y)

    @property
    def br(self) -> Tuple[int, int]:
        """Bottom-right corner."""
        return (self.x1, self.y1)

    @cached_property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def contains_point(self, x: int, y: int) -> bool:
        """Check if a corner point lies within the box, edges included."""
        return self.x <= x <= self.x1 and self.y <= y <= self.y1

    def contains_box(self, other: 'Rectangle') -> bool:
        """Check if both opposite corners of other lie within this box."""
        return self.contains_point(*other.tl) and self.contains_point(*other.br)

    def intersection(self, other: 'Rectangle') -> Optional['Rectangle']:
        """
        Get the intersection of two boxes.

        Returns:
            Intersection Rectangle, or None if the boxes don't overlap
            with positive area
        """
        x0 = max(self.x, other.x)
        y0 = max(self.y, other.y)
        x1 = min(self.x1, other.x1)
        y1 = min(self.y1, other.y1)

        if x1 <= x0 or y1 <= y0:
            return None

        return Rectangle(x=x0, y=y0, width=x1 - x0, height=y1 - y0)

    def intersection_area(self, other: 'Rectangle') -> int:
        """Area shared by two boxes (0 when they only touch or are apart)."""
        overlap = self.intersection(other)
        return overlap.area if overlap is not None else 0

    def clip(self, width: int, height: int) -> Optional['Rectangle']:
        """Clip to an image of the given size. None if nothing is left."""
        return self.intersection(Rectangle(x=0, y=0, width=width, height=height))

    def to_slices(self) -> Tuple[slice, slice]:
        """Row and column slices for cropping a numpy image."""
        return (slice(self.y, self.y1), slice(self.x, self.x1))

    def to_tuple(self) -> Tuple[int, int, int, int]:
        """Return as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def to_dict(self) -> Dict[str, int]:
        return {
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
        }

    @classmethod
    def from_xywh(cls, rect: Sequence[int]) -> 'Rectangle':
        """Create from an (x, y, w, h) sequence such as OpenCV returns."""
        x, y, w, h = (int(v) for v in rect)
        return cls(x=x, y=y, width=w, height=h)

    @classmethod
    def from_corners(cls, x0: int, y0: int, x1: int, y1: int) -> 'Rectangle':
        """Create from top-left and bottom-right corners."""
        return cls(x=x0, y=y0, width=x1 - x0, height=y1 - y0)


def total_area(boxes: Iterable[Rectangle]) -> int:
    """Sum of box areas. Overlaps are counted once per box."""
    return sum(box.area for box in boxes)
