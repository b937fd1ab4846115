"""CSV and JSON payloads handed to storage / sync collaborators.

Key names follow the mobile app's export format so downstream consumers
keep working: the CSV key strings and the camelCase JSON keys must not
change.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Any, Dict, Optional

from jsonschema import Draft7Validator

from .models import (
    AddOn,
    AreaMeasure,
    BoundingBox,
    Discount,
    FixedDiscount,
    GeometryErrorCode,
    LengthMeasure,
    Measurement,
    MeasurementError,
    MeasurementResult,
    PercentDiscount,
    Pitch,
    Point,
    PriceBreakdown,
    TaxRate,
    TieredDiscount,
    as_points,
)

_NUMBER = {"type": "number"}
_POINT = {
    "type": "object",
    "required": ["x", "y"],
    "properties": {"x": _NUMBER, "y": _NUMBER},
}

MEASUREMENT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Roof measurement",
    "type": "object",
    "oneOf": [
        {
            "required": [
                "areaPx",
                "perimeterPx",
                "area",
                "perimeter",
                "bbox",
                "centroid",
                "edgesPx",
                "edgesMeters",
                "points",
                "scale",
            ],
            "properties": {
                "areaPx": _NUMBER,
                "perimeterPx": _NUMBER,
                "area": {
                    "type": "object",
                    "required": ["sqm", "sqft"],
                    "properties": {"sqm": _NUMBER, "sqft": _NUMBER},
                },
                "perimeter": {
                    "type": "object",
                    "required": ["meters", "feet"],
                    "properties": {"meters": _NUMBER, "feet": _NUMBER},
                },
                "bbox": {
                    "type": "object",
                    "required": ["minX", "minY", "maxX", "maxY", "width", "height"],
                    "additionalProperties": _NUMBER,
                },
                "centroid": _POINT,
                "edgesPx": {"type": "array", "items": _NUMBER},
                "edgesMeters": {"type": "array", "items": _NUMBER},
                "pitch": {
                    "oneOf": [
                        {"type": "null"},
                        {
                            "type": "object",
                            "required": ["pitchRatio", "pitchDegrees"],
                            "properties": {"pitchRatio": _NUMBER, "pitchDegrees": _NUMBER},
                        },
                    ]
                },
                "price": {"type": ["number", "null"]},
                "points": {"type": "array", "items": _POINT},
                "scale": {"type": "number", "exclusiveMinimum": 0},
                "error": {"type": "null"},
            },
        },
        {
            "required": ["error", "code"],
            "properties": {
                "error": {"type": "string"},
                "code": {"enum": [code.value for code in GeometryErrorCode]},
                "points": {"type": "array", "items": _POINT},
            },
        },
    ],
}

_VALIDATOR = Draft7Validator(MEASUREMENT_SCHEMA)


def _num(value: float) -> str:
    """Render numbers the way the app did: integral floats without ``.0``."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def to_csv(result: MeasurementResult) -> str:
    """Point rows under an ``x,y`` header followed by ``key,value`` rows."""

    if not result.ok:
        return ""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["x", "y"])
    for point in result.points:
        writer.writerow([_num(point.x), _num(point.y)])
    writer.writerows(
        [
            ["Area(m2)", _num(result.area.sqm)],
            ["Area(ft2)", _num(result.area.sqft)],
            ["Perimeter(m)", _num(result.perimeter.meters)],
            ["Perimeter(ft)", _num(result.perimeter.feet)],
            ["BBox(minX)", _num(result.bbox.min_x)],
            ["BBox(minY)", _num(result.bbox.min_y)],
            ["BBox(maxX)", _num(result.bbox.max_x)],
            ["BBox(maxY)", _num(result.bbox.max_y)],
        ]
    )
    return buffer.getvalue()


def _point_dict(point: Point) -> Dict[str, float]:
    return {"x": point.x, "y": point.y}


def measurement_to_dict(result: MeasurementResult) -> Dict[str, Any]:
    points = [_point_dict(p) for p in result.points]
    if not result.ok:
        return {"error": result.message, "code": result.code.value, "points": points}
    return {
        "areaPx": result.area.px,
        "perimeterPx": result.perimeter.px,
        "area": {"sqm": result.area.sqm, "sqft": result.area.sqft},
        "perimeter": {"meters": result.perimeter.meters, "feet": result.perimeter.feet},
        "bbox": {
            "minX": result.bbox.min_x,
            "minY": result.bbox.min_y,
            "maxX": result.bbox.max_x,
            "maxY": result.bbox.max_y,
            "width": result.bbox.width,
            "height": result.bbox.height,
        },
        "centroid": _point_dict(result.centroid),
        "edgesPx": list(result.edges_px),
        "edgesMeters": list(result.edges_meters),
        "pitch": (
            {"pitchRatio": result.pitch.ratio, "pitchDegrees": result.pitch.degrees}
            if result.pitch is not None
            else None
        ),
        "price": result.price,
        "points": points,
        "scale": result.scale,
        "error": None,
    }


def validate_payload(payload: Dict[str, Any]) -> None:
    """Raise ``jsonschema.ValidationError`` if ``payload`` is malformed."""

    _VALIDATOR.validate(payload)


def measurement_from_dict(payload: Dict[str, Any]) -> MeasurementResult:
    validate_payload(payload)
    points = as_points(payload.get("points") or ())
    if payload.get("error"):
        return MeasurementError(
            code=GeometryErrorCode(payload["code"]),
            message=payload["error"],
            points=points,
        )
    area = payload["area"]
    perimeter = payload["perimeter"]
    bbox = payload["bbox"]
    pitch = payload.get("pitch")
    return Measurement(
        area=AreaMeasure(px=payload["areaPx"], sqm=area["sqm"], sqft=area["sqft"]),
        perimeter=LengthMeasure(
            px=payload["perimeterPx"], meters=perimeter["meters"], feet=perimeter["feet"]
        ),
        bbox=BoundingBox(
            min_x=bbox["minX"],
            min_y=bbox["minY"],
            max_x=bbox["maxX"],
            max_y=bbox["maxY"],
            width=bbox["width"],
            height=bbox["height"],
        ),
        centroid=Point(payload["centroid"]["x"], payload["centroid"]["y"]),
        edges_px=tuple(payload["edgesPx"]),
        edges_meters=tuple(payload["edgesMeters"]),
        points=points,
        scale=payload["scale"],
        pitch=Pitch(pitch["pitchRatio"], pitch["pitchDegrees"]) if pitch else None,
        price=payload.get("price"),
    )


def to_json(result: MeasurementResult, indent: Optional[int] = 2) -> str:
    return json.dumps(measurement_to_dict(result), indent=indent, ensure_ascii=False)


def from_json(text: str) -> MeasurementResult:
    """Parse a payload produced by :func:`to_json`."""

    return measurement_from_dict(json.loads(text))


def discount_to_dict(discount: Discount) -> Dict[str, Any]:
    if isinstance(discount, TieredDiscount):
        payload: Dict[str, Any] = {
            "type": discount.type,
            "tiers": [{"min": tier.minimum, "value": tier.value} for tier in discount.tiers],
        }
    elif isinstance(discount, (FixedDiscount, PercentDiscount)):
        payload = {"type": discount.type, "value": discount.value}
    else:
        raise TypeError(f"Unknown discount type: {type(discount).__name__}")
    if discount.label:
        payload["label"] = discount.label
    return payload


def _tax_rate_dict(rate: TaxRate) -> Dict[str, Any]:
    return {"value": rate.value, "label": rate.label}


def _add_on_dict(add_on: AddOn) -> Dict[str, Any]:
    return {"name": add_on.name, "price": add_on.price, "quantity": add_on.quantity}


def breakdown_to_dict(details: PriceBreakdown) -> Dict[str, Any]:
    inputs = details.inputs
    return {
        "base": details.base,
        "addOnTotal": details.add_on_total,
        "discountTotal": details.discount_total,
        "taxTotal": details.tax_total,
        "total": details.total,
        "currency": details.currency,
        "unit": details.unit,
        "breakdown": {
            "area": inputs.area,
            "basePrice": inputs.base_price,
            "addOns": [_add_on_dict(a) for a in inputs.add_ons],
            "discounts": [discount_to_dict(d) for d in inputs.discounts],
            "taxRates": [_tax_rate_dict(t) for t in inputs.tax_rates],
        },
    }


def breakdown_to_json(details: PriceBreakdown, indent: Optional[int] = 2) -> str:
    return json.dumps(breakdown_to_dict(details), indent=indent)


__all__ = [
    "MEASUREMENT_SCHEMA",
    "breakdown_to_dict",
    "breakdown_to_json",
    "discount_to_dict",
    "from_json",
    "measurement_from_dict",
    "measurement_to_dict",
    "to_csv",
    "to_json",
    "validate_payload",
]
