"""Basic geometry types shared by the video wall mapping modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

Point = Tuple[float, float]
Matrix3 = Tuple[Tuple[float, float, float], Tuple[float, float, float], Tuple[float, float, float]]


@dataclass(frozen=True)
class Rect:
    """Rectangle in normalised UV space (0-1 range)."""

    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0

    def min(self) -> Point:
        """Top-left corner."""
        return (self.x, self.y)

    def max(self) -> Point:
        """Bottom-right corner."""
        return (self.x + self.width, self.y + self.height)


@dataclass(frozen=True)
class GridSize:
    """Column and row count of a display grid."""

    columns: int = 2
    rows: int = 2

    def total_displays(self) -> int:
        """Number of cells in the grid."""
        return self.columns * self.rows

    def position_from_id(self, display_id: int) -> Tuple[int, int]:
        """Return ``(col, row)`` for a row-major display id."""
        row, col = divmod(display_id, self.columns)
        return (col, row)

    def id_from_position(self, col: int, row: int) -> int:
        """Return the row-major display id for ``(col, row)``."""
        return row * self.columns + col

    @classmethod
    def two_by_two(cls) -> "GridSize":
        return cls(2, 2)

    @classmethod
    def three_by_three(cls) -> "GridSize":
        return cls(3, 3)

    @classmethod
    def four_by_four(cls) -> "GridSize":
        return cls(4, 4)


@dataclass
class DisplayQuad:
    """A detected display with its grid position and destination corners.

    ``dest_corners`` are in normalised output coordinates, ordered
    top-left, top-right, bottom-right, bottom-left.
    """

    display_id: int
    grid_position: Tuple[int, int]
    source_rect: Rect
    dest_corners: Tuple[Point, Point, Point, Point]
    perspective_matrix: Optional[Matrix3] = field(default=None)