from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple, Union


class GeometryErrorCode(str, Enum):
    INSUFFICIENT_POINTS = "InsufficientPoints"
    POLYGON_NOT_CLOSED = "PolygonNotClosed"
    SELF_INTERSECTING = "SelfIntersecting"
    DEGENERATE_CALIBRATION = "DegenerateCalibration"


class PricingErrorCode(str, Enum):
    INVALID_AREA = "InvalidArea"
    INVALID_BASE_PRICE = "InvalidBasePrice"
    UNSUPPORTED_CURRENCY = "UnsupportedCurrency"


@dataclass(frozen=True)
class Point:
    """A tapped pixel coordinate."""

    x: float
    y: float


def as_point(value: object) -> Point:
    """Coerce a ``Point``, ``(x, y)`` pair or ``{"x": .., "y": ..}`` mapping."""

    if isinstance(value, Point):
        return value
    if isinstance(value, Mapping):
        return Point(float(value["x"]), float(value["y"]))
    x, y = value  # type: ignore[misc]
    return Point(float(x), float(y))


def as_points(values: Optional[Iterable[object]]) -> Tuple[Point, ...]:
    if not values:
        return ()
    return tuple(as_point(value) for value in values)


@dataclass(frozen=True)
class AreaMeasure:
    px: float
    sqm: float
    sqft: float


@dataclass(frozen=True)
class LengthMeasure:
    px: float
    meters: float
    feet: float


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    width: float
    height: float


@dataclass(frozen=True)
class Pitch:
    ratio: float
    degrees: float


@dataclass(frozen=True)
class Measurement:
    """Successful measurement of a closed, simple polygon."""

    area: AreaMeasure
    perimeter: LengthMeasure
    bbox: BoundingBox
    centroid: Point
    edges_px: Tuple[float, ...]
    edges_meters: Tuple[float, ...]
    points: Tuple[Point, ...]
    scale: float
    pitch: Optional[Pitch] = None
    price: Optional[float] = None

    ok = True
    error = None


@dataclass(frozen=True)
class MeasurementError:
    """Failed measurement; carries no numeric fields."""

    code: GeometryErrorCode
    message: str
    points: Tuple[Point, ...] = ()

    ok = False

    @property
    def error(self) -> str:
        return self.message


MeasurementResult = Union[Measurement, MeasurementError]


@dataclass(frozen=True)
class Tier:
    minimum: float
    value: float


@dataclass(frozen=True)
class FixedDiscount:
    value: float
    label: str = ""

    type = "fixed"


@dataclass(frozen=True)
class PercentDiscount:
    value: float
    label: str = ""

    type = "percent"


@dataclass(frozen=True)
class TieredDiscount:
    tiers: Tuple[Tier, ...]
    label: str = ""

    type = "tiered"


Discount = Union[FixedDiscount, PercentDiscount, TieredDiscount]


@dataclass(frozen=True)
class TaxRate:
    value: float
    label: str = ""


@dataclass(frozen=True)
class AddOn:
    price: float
    quantity: float = 1
    name: str = ""


@dataclass(frozen=True)
class QuoteInputs:
    """Copy of the pricing inputs embedded in a breakdown for auditing."""

    area: float
    base_price: float
    add_ons: Tuple[AddOn, ...] = ()
    discounts: Tuple[Discount, ...] = ()
    tax_rates: Tuple[TaxRate, ...] = ()


@dataclass(frozen=True)
class PriceBreakdown:
    base: float
    add_on_total: float
    discount_total: float
    tax_total: float
    total: float
    currency: str
    unit: str
    inputs: QuoteInputs


@dataclass(frozen=True)
class ValidationIssue:
    code: PricingErrorCode
    message: str

    def __str__(self) -> str:
        return self.message
