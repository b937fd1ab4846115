"""Roof outline measurement and quote pricing."""

from .config import EngineConfig, load_config
from .export import from_json, to_csv, to_json
from .formatting import format_measurement, format_quote_details
from .geometry import CalibrationError, DegenerateCalibrationError, compute_scale, measure
from .models import (
    AddOn,
    FixedDiscount,
    Measurement,
    MeasurementError,
    PercentDiscount,
    Point,
    PriceBreakdown,
    TaxRate,
    Tier,
    TieredDiscount,
)
from .pricing import (
    UnsupportedCurrencyError,
    calculate_add_ons,
    calculate_discounts,
    calculate_price_details,
    calculate_taxes,
    convert_currency,
    validate_quote_input,
)
from .session import CaptureSession

__all__ = [
    "AddOn",
    "CalibrationError",
    "CaptureSession",
    "DegenerateCalibrationError",
    "EngineConfig",
    "FixedDiscount",
    "Measurement",
    "MeasurementError",
    "PercentDiscount",
    "Point",
    "PriceBreakdown",
    "TaxRate",
    "Tier",
    "TieredDiscount",
    "UnsupportedCurrencyError",
    "calculate_add_ons",
    "calculate_discounts",
    "calculate_price_details",
    "calculate_taxes",
    "compute_scale",
    "convert_currency",
    "format_measurement",
    "format_quote_details",
    "from_json",
    "load_config",
    "measure",
    "to_csv",
    "to_json",
    "validate_quote_input",
]
