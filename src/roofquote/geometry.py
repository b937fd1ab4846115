"""Polygon validation and measurement for tapped roof outlines.

Points arrive in pixel space; a calibration scale (metres per pixel) turns
pixel lengths and areas into metric and imperial figures.  Every function
here is pure: it reads its arguments and returns new values.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .config import DEFAULT_CONFIG, EngineConfig
from .models import (
    AreaMeasure,
    BoundingBox,
    GeometryErrorCode,
    LengthMeasure,
    Measurement,
    MeasurementError,
    MeasurementResult,
    Pitch,
    Point,
    as_point,
    as_points,
)

logger = logging.getLogger(__name__)

FEET_PER_METER = 3.28084

ERROR_MESSAGES = {
    GeometryErrorCode.INSUFFICIENT_POINTS: "At least 3 points required.",
    GeometryErrorCode.POLYGON_NOT_CLOSED: "Polygon not closed.",
    GeometryErrorCode.SELF_INTERSECTING: "Polygon self-intersects.",
    GeometryErrorCode.DEGENERATE_CALIBRATION: "Points must not be identical.",
}


class CalibrationError(ValueError):
    """Raised when a calibration scale cannot be derived."""


class DegenerateCalibrationError(CalibrationError):
    """Raised when both calibration reference points coincide."""

    code = GeometryErrorCode.DEGENERATE_CALIBRATION


def _coords(points: Sequence[object]) -> tuple[np.ndarray, np.ndarray]:
    points = as_points(points)
    xs = np.fromiter((p.x for p in points), dtype=float, count=len(points))
    ys = np.fromiter((p.y for p in points), dtype=float, count=len(points))
    return xs, ys


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def compute_scale(point_a: object, point_b: object, real_distance_meters: float) -> float:
    """Return metres per pixel for a reference segment of known length.

    Raises :class:`DegenerateCalibrationError` when the two points coincide
    and :class:`CalibrationError` when the real distance is not positive.
    """

    a = as_point(point_a)
    b = as_point(point_b)
    pixel_distance = distance(a, b)
    if pixel_distance == 0:
        raise DegenerateCalibrationError(ERROR_MESSAGES[GeometryErrorCode.DEGENERATE_CALIBRATION])
    real = float(real_distance_meters)
    if not real > 0:
        raise CalibrationError("Reference distance must be greater than zero.")
    scale = real / pixel_distance
    logger.debug("calibration: %.3f m over %.3f px => %.6f m/px", real, pixel_distance, scale)
    return scale


def polygon_area_px(points: Sequence[Point]) -> float:
    """Shoelace area in px²; zero for fewer than three points."""

    if not points or len(points) < 3:
        return 0.0
    xs, ys = _coords(points)
    signed = np.dot(xs, np.roll(ys, -1)) - np.dot(np.roll(xs, -1), ys)
    return float(abs(signed) / 2.0)


def edge_lengths_px(points: Sequence[Point]) -> List[float]:
    """Length of every cyclic edge ``points[i] -> points[i + 1]``."""

    if not points:
        return []
    xs, ys = _coords(points)
    return np.hypot(np.roll(xs, -1) - xs, np.roll(ys, -1) - ys).tolist()


def polygon_perimeter_px(points: Sequence[Point]) -> float:
    if not points or len(points) < 2:
        return 0.0
    return float(sum(edge_lengths_px(points)))


def polygon_centroid(points: Sequence[Point]) -> Point:
    """Mean of the vertices (not the area-weighted polygon centroid)."""

    xs, ys = _coords(points)
    return Point(float(xs.mean()), float(ys.mean()))


def bounding_box(points: Sequence[Point]) -> BoundingBox:
    xs, ys = _coords(points)
    min_x, max_x = float(xs.min()), float(xs.max())
    min_y, max_y = float(ys.min()), float(ys.max())
    return BoundingBox(
        min_x=min_x,
        min_y=min_y,
        max_x=max_x,
        max_y=max_y,
        width=max_x - min_x,
        height=max_y - min_y,
    )


def is_closed(points: Sequence[Point], tolerance: float = 10.0) -> bool:
    """True when the last point lands within ``tolerance`` px of the first."""

    points = as_points(points)
    if len(points) < 3:
        return False
    return distance(points[0], points[-1]) <= tolerance


def _ccw(p1: Point, p2: Point, p3: Point) -> bool:
    return (p3.y - p1.y) * (p2.x - p1.x) > (p2.y - p1.y) * (p3.x - p1.x)


def _segments_cross(a: Point, b: Point, c: Point, d: Point) -> bool:
    return _ccw(a, c, d) != _ccw(b, c, d) and _ccw(a, b, c) != _ccw(a, b, d)


def is_self_intersecting(points: Sequence[Point]) -> bool:
    """Pairwise test of non-adjacent edges.

    Index-adjacent edges, the wrap-around pair and edges whose endpoints
    coincide are skipped; the latter covers a closing tap placed exactly on
    the first point.
    """

    points = as_points(points)
    n = len(points)
    for i in range(n):
        a, b = points[i], points[(i + 1) % n]
        for j in range(i + 1, n):
            if j - i <= 1 or (i == 0 and j == n - 1):
                continue
            c, d = points[j], points[(j + 1) % n]
            if {a, b} & {c, d}:
                continue
            if _segments_cross(a, b, c, d):
                return True
    return False


def polygons_overlap(poly_a: Sequence[object], poly_b: Sequence[object]) -> bool:
    """Bounding-box overlap between two outlines."""

    box_a = bounding_box(as_points(poly_a))
    box_b = bounding_box(as_points(poly_b))
    return not (
        box_a.max_x < box_b.min_x
        or box_a.min_x > box_b.max_x
        or box_a.max_y < box_b.min_y
        or box_a.min_y > box_b.max_y
    )


def convert_length(value_px: float, meters_per_px: float) -> LengthMeasure:
    meters = value_px * meters_per_px
    return LengthMeasure(px=value_px, meters=meters, feet=meters * FEET_PER_METER)


def convert_area(value_px: float, meters_per_px: float) -> AreaMeasure:
    return AreaMeasure(
        px=value_px,
        sqm=value_px * meters_per_px ** 2,
        sqft=value_px * (meters_per_px * FEET_PER_METER) ** 2,
    )


def roof_pitch(base_meters: float, height_meters: float) -> Pitch:
    ratio = height_meters / base_meters
    return Pitch(ratio=ratio, degrees=math.degrees(math.atan(ratio)))


def pitch_height(run: float, pitch_degrees: float) -> float:
    """Rise over ``run`` for a roof pitched at ``pitch_degrees``."""

    return run * math.tan(math.radians(pitch_degrees))


def gable_roof_area(length: float, width: float, pitch_degrees: float) -> float:
    """Sloped surface of a symmetric gable roof over a ``length`` x ``width`` plan."""

    half_width = width / 2
    rise = pitch_height(half_width, pitch_degrees)
    slope_length = math.hypot(rise, half_width)
    return 2 * length * slope_length


def calculate_price(
    area: AreaMeasure,
    price_per_sqm: Optional[float] = None,
    price_per_sqft: Optional[float] = None,
) -> float:
    """Imperial pricing wins when both rates are given."""

    if price_per_sqft:
        return area.sqft * price_per_sqft
    if price_per_sqm:
        return area.sqm * price_per_sqm
    return 0.0


def _failure(code: GeometryErrorCode, points: tuple[Point, ...]) -> MeasurementError:
    logger.debug("measurement rejected: %s (%d points)", code.value, len(points))
    return MeasurementError(code=code, message=ERROR_MESSAGES[code], points=points)


def measure(
    points: Optional[Iterable[object]],
    scale: float,
    *,
    price_per_sqm: Optional[float] = None,
    price_per_sqft: Optional[float] = None,
    base_meters: Optional[float] = None,
    height_meters: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> MeasurementResult:
    """Validate and measure a tapped polygon.

    Validation short-circuits in order: point count, closure, then
    self-intersection.  Failures come back as :class:`MeasurementError`
    rather than being raised; a non-positive ``scale`` raises
    :class:`CalibrationError`.  Pitch is reported only when both
    ``base_meters`` and ``height_meters`` are non-zero, price only when a
    per-area rate is supplied.
    """

    if not scale > 0:
        raise CalibrationError("Scale must be greater than zero.")
    cfg = config or DEFAULT_CONFIG
    pts = as_points(points)
    if len(pts) < 3:
        return _failure(GeometryErrorCode.INSUFFICIENT_POINTS, pts)
    if not is_closed(pts, cfg.closure_tolerance_px):
        return _failure(GeometryErrorCode.POLYGON_NOT_CLOSED, pts)
    if is_self_intersecting(pts):
        return _failure(GeometryErrorCode.SELF_INTERSECTING, pts)

    area = convert_area(polygon_area_px(pts), scale)
    edges_px = edge_lengths_px(pts)
    perimeter = convert_length(float(sum(edges_px)), scale)
    pitch = roof_pitch(base_meters, height_meters) if base_meters and height_meters else None
    price = (
        calculate_price(area, price_per_sqm, price_per_sqft)
        if price_per_sqm or price_per_sqft
        else None
    )
    result = Measurement(
        area=area,
        perimeter=perimeter,
        bbox=bounding_box(pts),
        centroid=polygon_centroid(pts),
        edges_px=tuple(edges_px),
        edges_meters=tuple(edge * scale for edge in edges_px),
        points=pts,
        scale=scale,
        pitch=pitch,
        price=price,
    )
    logger.debug(
        "measured %d points: area=%.2f sqm perimeter=%.2f m",
        len(pts),
        area.sqm,
        perimeter.meters,
    )
    return result


__all__ = [
    "CalibrationError",
    "DegenerateCalibrationError",
    "FEET_PER_METER",
    "bounding_box",
    "calculate_price",
    "compute_scale",
    "convert_area",
    "convert_length",
    "distance",
    "edge_lengths_px",
    "gable_roof_area",
    "is_closed",
    "is_self_intersecting",
    "measure",
    "pitch_height",
    "polygon_area_px",
    "polygon_centroid",
    "polygon_perimeter_px",
    "polygons_overlap",
    "roof_pitch",
]
