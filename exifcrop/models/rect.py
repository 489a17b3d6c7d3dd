from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Rect:
    """
    Integer rectangle (left, top, right, bottom), right/bottom exclusive.
    Used both in display space and in raw (as-stored) space.
    """
    left: int
    top: int
    right: int
    bottom: int

    @classmethod
    def from_size(cls, width: int, height: int) -> "Rect":
        return cls(0, 0, width, height)

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def is_empty(self) -> bool:
        return self.left >= self.right or self.top >= self.bottom

    def is_within(self, width: int, height: int) -> bool:
        return (0 <= self.left and 0 <= self.top
                and self.right <= width and self.bottom <= height)

    def scaled(self, factor: float) -> "Rect":
        """Multiply every bound by factor, truncating toward zero."""
        return Rect(int(self.left * factor), int(self.top * factor),
                    int(self.right * factor), int(self.bottom * factor))

    def as_box(self) -> Tuple[int, int, int, int]:
        """PIL-style box tuple."""
        return self.left, self.top, self.right, self.bottom

    def __str__(self) -> str:
        return f"Rect({self.left}, {self.top} - {self.right}, {self.bottom})"
