from __future__ import annotations

import logging
from typing import List, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .geometry import CalibrationError, compute_scale, measure
from .models import MeasurementResult, Point, as_point

logger = logging.getLogger(__name__)


class CaptureSession:
    """Accumulates tapped points and holds the current calibration.

    The first two taps after a reset mark the reference segment; calling
    :meth:`calibrate` consumes them and replaces any earlier scale.  One
    session belongs to one capture screen and is not shared.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._points: List[Point] = []
        self._scale: Optional[float] = None

    @property
    def points(self) -> tuple[Point, ...]:
        return tuple(self._points)

    @property
    def scale(self) -> Optional[float]:
        return self._scale

    @property
    def is_calibrated(self) -> bool:
        return self._scale is not None

    def add_point(self, point: object) -> Point:
        tapped = as_point(point)
        self._points.append(tapped)
        return tapped

    def reset(self) -> None:
        self._points.clear()
        self._scale = None

    def set_scale(self, scale: float) -> None:
        if not scale > 0:
            raise CalibrationError("Scale must be greater than zero.")
        self._scale = float(scale)

    def calibrate(self, real_distance_meters: float) -> float:
        if len(self._points) < 2:
            raise CalibrationError("Mark two points for reference and enter real length.")
        first, second = self._points[0], self._points[1]
        self._scale = compute_scale(first, second, real_distance_meters)
        del self._points[:2]
        logger.debug("session calibrated at %.6f m/px", self._scale)
        return self._scale

    def measure(self, **options) -> MeasurementResult:
        if self._scale is None:
            raise CalibrationError("Calibrate first: mark two points and enter reference length (meters).")
        options.setdefault("config", self.config)
        return measure(self._points, self._scale, **options)
