"""Build display quads from detected calibration markers.

Each detected marker gives a centre, a size and an orientation. From those a
display region is extrapolated, normalised to the camera frame and paired
with the source rectangle of its grid cell.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .geometry import DisplayQuad, GridSize, Matrix3, Point, Rect

Corners = Tuple[Point, Point, Point, Point]


@dataclass(frozen=True)
class MarkerDetection:
    """A marker found in a camera frame for one display.

    Corners are in pixel coordinates, ordered top-left, top-right,
    bottom-right, bottom-left.
    """

    display_id: int
    corners: Corners
    confidence: float = 1.0
    frame_width: int = 0
    frame_height: int = 0


@dataclass(frozen=True)
class QuadMapConfig:
    """Options controlling how marker geometry becomes display quads."""

    display_scale_factor: float = 1.5
    min_confidence: float = 0.5
    use_neighbor_scaling: bool = True
    bezel_compensation: float = 0.1


@dataclass(frozen=True)
class MarkerGeometry:
    """Centre, size and orientation derived from a marker detection."""

    display_id: int
    center: Point
    size: float
    orientation: float
    corners: Corners
    confidence: float


@dataclass
class QuadMapResult:
    """Mapped quads, display ids that were not found, and warnings."""

    quads: List[DisplayQuad] = field(default_factory=list)
    missing_displays: List[int] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def compute_geometry(detection: MarkerDetection) -> MarkerGeometry:
    """Derive centre, size (mean diagonal) and top-edge angle of a marker."""
    corners = tuple((float(x), float(y)) for x, y in detection.corners)
    if len(corners) != 4:
        raise ValueError("a marker detection needs exactly four corners")
    center = (
        sum(x for x, _ in corners) / 4.0,
        sum(y for _, y in corners) / 4.0,
    )
    size = (_distance(corners[2], corners[0]) + _distance(corners[3], corners[1])) / 2.0
    top_x = corners[1][0] - corners[0][0]
    top_y = corners[1][1] - corners[0][1]
    return MarkerGeometry(
        display_id=detection.display_id,
        center=center,
        size=size,
        orientation=math.atan2(top_y, top_x),
        corners=corners,  # type: ignore[arg-type]
        confidence=detection.confidence,
    )


def compute_corners_from_center(center: Point, size: float, orientation: float) -> Corners:
    """Corners of a square of side ``size`` rotated by ``orientation`` radians.

    Returned in the order top-left, top-right, bottom-right, bottom-left.
    """
    half = size / 2.0
    cos_o, sin_o = math.cos(orientation), math.sin(orientation)
    cx, cy = center
    base = ((-half, -half), (half, -half), (half, half), (-half, half))
    return tuple(  # type: ignore[return-value]
        (x * cos_o - y * sin_o + cx, x * sin_o + y * cos_o + cy) for x, y in base
    )


def _extrapolate_with_neighbors(
    geom: MarkerGeometry, all_geoms: Sequence[MarkerGeometry], config: QuadMapConfig
) -> Corners:
    others = [g for g in all_geoms if g.display_id != geom.display_id]
    if others:
        neighbor = min(others, key=lambda g: _distance(g.center, geom.center))
        reference = (geom.size + neighbor.size) / 2.0 * config.display_scale_factor
    else:
        reference = geom.size * config.display_scale_factor
    return compute_corners_from_center(geom.center, reference, geom.orientation)


def _extrapolate_isolated(
    geom: MarkerGeometry, avg_marker_size: float, config: QuadMapConfig
) -> Corners:
    display_size = avg_marker_size * config.display_scale_factor
    return compute_corners_from_center(geom.center, display_size, geom.orientation)


def _source_rect(grid_size: GridSize, display_id: int) -> Rect:
    col, row = grid_size.position_from_id(display_id)
    return Rect(
        col / grid_size.columns,
        row / grid_size.rows,
        1.0 / grid_size.columns,
        1.0 / grid_size.rows,
    )


def _perspective_matrix(dest: Corners, grid_size: GridSize, display_id: int) -> Matrix3:
    """Translation-only approximation mapping the source cell onto ``dest``.

    Rows of the returned matrix act on column vectors ``(x, y, 1)``.
    """
    src = _source_rect(grid_size, display_id)
    src_cx = src.x + src.width / 2.0
    src_cy = src.y + src.height / 2.0
    dst_cx = sum(x for x, _ in dest) / 4.0
    dst_cy = sum(y for _, y in dest) / 4.0
    tx, ty = dst_cx - src_cx, dst_cy - src_cy
    return ((1.0, 0.0, tx), (0.0, 1.0, ty), (0.0, 0.0, 1.0))


def is_convex(corners: Sequence[Point]) -> bool:
    """True if every turn along the quad has a non-negative cross product."""
    for i in range(4):
        p0, p1, p2 = corners[i], corners[(i + 1) % 4], corners[(i + 2) % 4]
        e1 = (p1[0] - p0[0], p1[1] - p0[1])
        e2 = (p2[0] - p1[0], p2[1] - p1[1])
        if e1[0] * e2[1] - e1[1] * e2[0] < -1e-6:
            return False
    return True


def _edges(corners: Sequence[Point]) -> Iterable[Tuple[Point, Point]]:
    return zip(corners, list(corners[1:]) + [corners[0]])


def quad_area(corners: Sequence[Point]) -> float:
    """Area of a quad by the shoelace formula."""
    total = sum(a[0] * b[1] - b[0] * a[1] for a, b in _edges(corners))
    return abs(total) / 2.0


def _is_winding_wrong(corners: Sequence[Point]) -> bool:
    signed = sum((b[0] - a[0]) * (b[1] + a[1]) for a, b in _edges(corners))
    return abs(signed) < 1e-6


def _validate(quads: Sequence[DisplayQuad]) -> List[str]:
    warnings = []
    for quad in quads:
        if not is_convex(quad.dest_corners):
            warnings.append(f"Display {quad.display_id} quad is not convex")
        area = quad_area(quad.dest_corners)
        if area < 0.001:
            warnings.append(f"Display {quad.display_id} has very small area ({area:.4f})")
        if _is_winding_wrong(quad.dest_corners):
            warnings.append(f"Display {quad.display_id} corners may be in wrong order")
    return warnings


def build_quads(
    detections: Sequence[MarkerDetection],
    grid_size: GridSize,
    camera_resolution: Tuple[int, int],
    config: Optional[QuadMapConfig] = None,
) -> QuadMapResult:
    """Build normalised display quads from marker detections."""
    config = config or QuadMapConfig()
    warnings: List[str] = []

    valid = [d for d in detections if d.confidence >= config.min_confidence]
    if len(valid) != len(detections):
        warnings.append(f"Filtered {len(detections) - len(valid)} low-confidence detections")

    geometries = [compute_geometry(d) for d in valid]
    if not geometries:
        return QuadMapResult(
            quads=[],
            missing_displays=list(range(grid_size.total_displays())),
            warnings=["No valid marker detections"],
        )

    avg_size = sum(g.size for g in geometries) / len(geometries)
    cam_w, cam_h = float(camera_resolution[0]), float(camera_resolution[1])

    quads: List[DisplayQuad] = []
    found = set()
    for geom in geometries:
        found.add(geom.display_id)
        if config.use_neighbor_scaling:
            corners = _extrapolate_with_neighbors(geom, geometries, config)
        else:
            corners = _extrapolate_isolated(geom, avg_size, config)
        normalized = tuple((x / cam_w, y / cam_h) for x, y in corners)
        quads.append(
            DisplayQuad(
                display_id=geom.display_id,
                grid_position=grid_size.position_from_id(geom.display_id),
                source_rect=_source_rect(grid_size, geom.display_id),
                dest_corners=normalized,  # type: ignore[arg-type]
                perspective_matrix=_perspective_matrix(
                    normalized, grid_size, geom.display_id  # type: ignore[arg-type]
                ),
            )
        )

    missing = [i for i in range(grid_size.total_displays()) if i not in found]
    if missing:
        warnings.append(f"Missing {len(missing)} displays: {missing}")

    warnings.extend(_validate(quads))
    return QuadMapResult(quads=quads, missing_displays=missing, warnings=warnings)