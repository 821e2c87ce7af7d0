"""Grid-based video matrix mapping.

The input texture is subdivided into an N x M grid of cells; each cell can be
mapped to a position in an output grid with its own aspect ratio and
orientation. Unmapped cells render as background (black by default).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, List, Optional, Sequence, Tuple

from .geometry import GridSize, Point, Rect

_U32_MAX = 2**32 - 1


@dataclass(frozen=True)
class AspectRatio:
    """Aspect ratio of a mapped display.

    The standard ratios are available as class attributes; any other ratio is
    a custom one, which compares unequal to a standard ratio of the same
    proportions.
    """

    w: int
    h: int
    custom: bool = True

    RATIO_4_3: ClassVar["AspectRatio"]
    RATIO_16_9: ClassVar["AspectRatio"]
    RATIO_16_10: ClassVar["AspectRatio"]
    RATIO_1_1: ClassVar["AspectRatio"]
    RATIO_21_9: ClassVar["AspectRatio"]

    def as_float(self) -> float:
        """Width divided by height."""
        return self.w / max(self.h, 1)

    def name(self) -> str:
        """Human-readable name such as ``"16:9"``."""
        return f"{self.w}:{self.h}"

    @classmethod
    def detect(cls, width: float, height: float) -> "AspectRatio":
        """Pick the closest standard ratio, or a custom one if none is close."""
        if width <= 0.0 or height <= 0.0:
            return cls.RATIO_16_9
        ratio = width / height
        closest, min_diff = cls.RATIO_16_9, math.inf
        for candidate in _STANDARD_RATIOS:
            diff = abs(ratio - candidate.as_float())
            if diff < min_diff:
                closest, min_diff = candidate, diff
        if min_diff < 0.1:
            return closest
        return cls(
            min(int(width * 100.0), _U32_MAX),
            min(int(height * 100.0), _U32_MAX),
        )


AspectRatio.RATIO_4_3 = AspectRatio(4, 3, custom=False)
AspectRatio.RATIO_16_9 = AspectRatio(16, 9, custom=False)
AspectRatio.RATIO_16_10 = AspectRatio(16, 10, custom=False)
AspectRatio.RATIO_1_1 = AspectRatio(1, 1, custom=False)
AspectRatio.RATIO_21_9 = AspectRatio(21, 9, custom=False)

_STANDARD_RATIOS = (
    AspectRatio.RATIO_4_3,
    AspectRatio.RATIO_16_9,
    AspectRatio.RATIO_16_10,
    AspectRatio.RATIO_1_1,
    AspectRatio.RATIO_21_9,
)


class Orientation(Enum):
    """Clockwise rotation of a display."""

    NORMAL = 0
    ROTATED_90 = 90
    ROTATED_180 = 180
    ROTATED_270 = 270

    def degrees(self) -> int:
        return self.value

    def radians(self) -> float:
        return math.radians(self.value)

    @classmethod
    def detect_from_corners(cls, corners: Sequence[Point]) -> "Orientation":
        """Detect orientation from tag corners.

        Corners are in image coordinates (y down), ordered top-right,
        top-left, bottom-left, bottom-right; the top edge runs from
        ``corners[1]`` to ``corners[0]``.
        """
        (tr_x, tr_y), (tl_x, tl_y) = corners[0], corners[1]
        angle = math.degrees(math.atan2(tr_y - tl_y, tr_x - tl_x))
        normalized = angle % 360.0
        if normalized < 45.0 or normalized >= 315.0:
            return cls.NORMAL
        if normalized < 135.0:
            return cls.ROTATED_90
        if normalized < 225.0:
            return cls.ROTATED_180
        return cls.ROTATED_270

    def apply_to_uv(self, u: float, v: float) -> Point:
        """Rotate a UV coordinate according to this orientation."""
        if self is Orientation.ROTATED_90:
            return (1.0 - v, u)
        if self is Orientation.ROTATED_180:
            return (1.0 - u, 1.0 - v)
        if self is Orientation.ROTATED_270:
            return (v, 1.0 - u)
        return (u, v)


@dataclass(frozen=True)
class GridPosition:
    """Position and size in output grid cells (may be fractional)."""

    col: float = 0.0
    row: float = 0.0
    width: float = 1.0
    height: float = 1.0

    def center(self) -> Point:
        return (self.col + self.width / 2.0, self.row + self.height / 2.0)

    def to_normalized_rect(self, total_cols: int, total_rows: int) -> Rect:
        """Convert to a 0-1 rectangle for a grid of the given size."""
        cols = float(max(total_cols, 1))
        rows = float(max(total_rows, 1))
        return Rect(self.col / cols, self.row / rows, self.width / cols, self.height / rows)


@dataclass
class GridCellMapping:
    """Mapping from an input grid cell (row-major index) to an output position."""

    input_cell: int
    output_position: GridPosition = field(default_factory=GridPosition)
    aspect_ratio: AspectRatio = AspectRatio.RATIO_16_9
    orientation: Orientation = Orientation.NORMAL
    enabled: bool = True
    display_id: Optional[int] = None
    custom_source_rect: Optional[Rect] = None

    def with_aspect_ratio(self, ratio: AspectRatio) -> "GridCellMapping":
        return replace(self, aspect_ratio=ratio)

    def with_orientation(self, orientation: Orientation) -> "GridCellMapping":
        return replace(self, orientation=orientation)

    def with_display_id(self, display_id: int) -> "GridCellMapping":
        return replace(self, display_id=display_id)

    def with_source_rect(self, rect: Rect) -> "GridCellMapping":
        return replace(self, custom_source_rect=rect)

    def get_source_rect(self, input_grid: GridSize) -> Rect:
        """Source rectangle in the input texture.

        A custom source rectangle, if set, takes precedence over the cell.
        """
        if self.custom_source_rect is not None:
            return self.custom_source_rect
        row, col = divmod(self.input_cell, input_grid.columns)
        cols = float(input_grid.columns)
        rows = float(input_grid.rows)
        return Rect(col / cols, row / rows, 1.0 / cols, 1.0 / rows)

    def get_dest_rect(self, output_grid: GridSize) -> Rect:
        """Destination rectangle in normalised output coordinates."""
        return self.output_position.to_normalized_rect(output_grid.columns, output_grid.rows)


@dataclass
class InputGridConfig:
    """Subdivision of the input texture and its cell mappings."""

    grid_size: GridSize = field(default_factory=GridSize.three_by_three)
    input_source: int = 1
    mappings: List[GridCellMapping] = field(default_factory=list)

    def with_input_source(self, source: int) -> "InputGridConfig":
        """Copy with the input source clamped to 1 or 2."""
        return replace(self, input_source=min(max(source, 1), 2), mappings=list(self.mappings))

    def add_mapping(self, mapping: GridCellMapping) -> None:
        self.mappings.append(mapping)

    def remove_mapping(self, input_cell: int) -> Optional[GridCellMapping]:
        """Remove and return the first mapping for ``input_cell``, if any."""
        for idx, mapping in enumerate(self.mappings):
            if mapping.input_cell == input_cell:
                return self.mappings.pop(idx)
        return None

    def get_mapping(self, input_cell: int) -> Optional[GridCellMapping]:
        return next((m for m in self.mappings if m.input_cell == input_cell), None)

    def clear_mappings(self) -> None:
        self.mappings.clear()

    def total_cells(self) -> int:
        return self.grid_size.columns * self.grid_size.rows

    def cell_position(self, index: int) -> Tuple[int, int]:
        """Return ``(col, row)`` for a cell index."""
        row, col = divmod(index, self.grid_size.columns)
        return (col, row)

    def cell_index(self, col: int, row: int) -> int:
        return row * self.grid_size.columns + col

    def unmapped_cells(self) -> List[int]:
        mapped = {m.input_cell for m in self.mappings}
        return [i for i in range(self.total_cells()) if i not in mapped]

    def is_cell_mapped(self, input_cell: int) -> bool:
        return any(m.input_cell == input_cell for m in self.mappings)

    def create_default_mapping(self) -> None:
        """Map every cell to the matching output position."""
        self.mappings = [
            GridCellMapping(i, GridPosition(float(col), float(row), 1.0, 1.0))
            for i, (col, row) in ((i, self.cell_position(i)) for i in range(self.total_cells()))
        ]

    def calculate_output_grid_size(self) -> GridSize:
        """Smallest output grid (at least 1x1) holding every mapping."""
        max_col = max_row = 0
        for mapping in self.mappings:
            pos = mapping.output_position
            max_col = max(max_col, math.ceil(pos.col + pos.width))
            max_row = max(max_row, math.ceil(pos.row + pos.height))
        return GridSize(max(max_col, 1), max(max_row, 1))


@dataclass
class DetectedScreenRegion:
    """A screen region found by auto-detection, in normalised coordinates.

    Corners are ordered top-left, top-right, bottom-right, bottom-left.
    """

    screen_id: int
    corners: Tuple[Point, Point, Point, Point]
    center: Point
    width: float
    height: float
    aspect_ratio: AspectRatio = AspectRatio.RATIO_16_9
    orientation: Orientation = Orientation.NORMAL


@dataclass
class VideoMatrixConfig:
    """Input grid, output grid and rendering options for the video matrix.

    The output grid defaults to the input grid's size.
    """

    input_grid: InputGridConfig = field(default_factory=InputGridConfig)
    output_grid: Optional[GridSize] = None
    background_color: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    auto_detect: bool = True
    detected_screens: List[DetectedScreenRegion] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.output_grid is None:
            self.output_grid = self.input_grid.grid_size

    def with_output_grid(self, grid: GridSize) -> "VideoMatrixConfig":
        return replace(self, output_grid=grid)

    def with_background_color(self, color: Sequence[float]) -> "VideoMatrixConfig":
        r, g, b, a = color
        return replace(self, background_color=(float(r), float(g), float(b), float(a)))

    def update_output_grid(self) -> None:
        self.output_grid = self.input_grid.calculate_output_grid_size()

    def active_mappings(self) -> List[GridCellMapping]:
        return [m for m in self.input_grid.mappings if m.enabled]

    def get_mapping_at_output(self, col: float, row: float) -> Optional[GridCellMapping]:
        """First enabled mapping whose output area contains ``(col, row)``."""
        for m in self.input_grid.mappings:
            pos = m.output_position
            if (
                m.enabled
                and pos.col <= col < pos.col + pos.width
                and pos.row <= row < pos.row + pos.height
            ):
                return m
        return None