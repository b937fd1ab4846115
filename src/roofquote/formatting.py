"""Plain-text renderings of measurements and quotes."""

from __future__ import annotations

from typing import Optional

from .models import MeasurementResult, PriceBreakdown

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "AUD": "A$",
    "CAD": "CA$",
}


def format_measurement(result: MeasurementResult) -> str:
    if not result.ok:
        return f"Error: {result.error}"
    lines = [
        f"Area: {result.area.sqm:.2f} m² ({result.area.sqft:.2f} ft²)",
        f"Perimeter: {result.perimeter.meters:.2f} m ({result.perimeter.feet:.2f} ft)",
        f"Bounding box: {result.bbox.width:.2f} px × {result.bbox.height:.2f} px",
        f"Centroid: x={result.centroid.x:.2f}, y={result.centroid.y:.2f}",
    ]
    if result.pitch is not None:
        lines.append(f"Pitch: {result.pitch.ratio:.2f} ({result.pitch.degrees:.2f}°)")
    if result.price:
        lines.append(f"Estimated Price: ${result.price:.2f}")
    return "\n".join(lines) + "\n"


def format_quote_details(details: Optional[PriceBreakdown]) -> str:
    """Summary lines; add-on, discount and tax lines only appear when non-zero."""

    if details is None:
        return "No quote details."
    lines = [f"Base: {details.currency} ${details.base:.2f}"]
    if details.add_on_total > 0:
        lines.append(f"Add-ons: ${details.add_on_total:.2f}")
    if details.discount_total > 0:
        lines.append(f"Discounts: -${details.discount_total:.2f}")
    if details.tax_total > 0:
        lines.append(f"Tax: +${details.tax_total:.2f}")
    lines.append(f"Total: ${details.total:.2f}")
    return "\n".join(lines)


def format_currency(amount: float, currency: str = "USD") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{currency} {amount:.2f}"
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_dimension(area: Optional[float], unit: str = "sqm", perimeter: Optional[float] = None) -> str:
    metric = unit == "sqm"
    parts = []
    if area:
        parts.append(f"Area: {area:.2f} {'m²' if metric else 'ft²'}")
    if perimeter is not None:
        parts.append(f"Perimeter: {perimeter:.2f} {'m' if metric else 'ft'}")
    return " | ".join(parts)


def format_error(error: object) -> str:
    if not error:
        return ""
    if isinstance(error, str):
        return error
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    message = getattr(error, "message", None)
    if message:
        return str(message)
    return str(error)


__all__ = [
    "format_currency",
    "format_dimension",
    "format_error",
    "format_measurement",
    "format_quote_details",
]
