from __future__ import annotations

from roofquote.formatting import (
    format_currency,
    format_dimension,
    format_error,
    format_measurement,
    format_quote_details,
)
from roofquote.geometry import measure
from roofquote.models import FixedDiscount, PercentDiscount, TaxRate
from roofquote.pricing import UnsupportedCurrencyError, calculate_price_details

SQUARE_10M = [(0, 0), (10, 0), (10, 10), (0, 10)]


def test_format_measurement_summary():
    text = format_measurement(measure(SQUARE_10M, 1.0))
    assert text == (
        "Area: 100.00 m² (1076.39 ft²)\n"
        "Perimeter: 40.00 m (131.23 ft)\n"
        "Bounding box: 10.00 px × 10.00 px\n"
        "Centroid: x=5.00, y=5.00\n"
    )


def test_format_measurement_optional_lines():
    result = measure(SQUARE_10M, 1.0, base_meters=4, height_meters=3, price_per_sqm=65)
    lines = format_measurement(result).splitlines()
    assert lines[4] == "Pitch: 0.75 (36.87°)"
    assert lines[5] == "Estimated Price: $6500.00"


def test_format_measurement_omits_zero_price():
    result = measure([(0, 0), (5, 0), (0, 0)], 1.0, price_per_sqm=65)
    assert result.ok
    assert result.price == 0
    assert "Estimated Price" not in format_measurement(result)


def test_format_measurement_error():
    assert format_measurement(measure([(0, 0)], 1.0)) == "Error: At least 3 points required."


def test_format_quote_details_skips_zero_lines():
    details = calculate_price_details({"sqm": 100, "sqft": 1076.39}, 10)
    assert format_quote_details(details) == "Base: USD $1000.00\nTotal: $1000.00"


def test_format_quote_details_full():
    details = calculate_price_details(
        {"sqm": 100, "sqft": 1076.39},
        10,
        discounts=[PercentDiscount(10), FixedDiscount(50)],
        tax_rates=[TaxRate(7.5), TaxRate(2)],
    )
    assert format_quote_details(details) == (
        "Base: USD $1000.00\n"
        "Discounts: -$150.00\n"
        "Tax: +$80.75\n"
        "Total: $930.75"
    )


def test_format_quote_details_none():
    assert format_quote_details(None) == "No quote details."


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-12, "EUR") == "-€12.00"
    assert format_currency(7, "JPY") == "JPY 7.00"


def test_format_dimension():
    assert format_dimension(12, "sqm", 14) == "Area: 12.00 m² | Perimeter: 14.00 m"
    assert format_dimension(12, "sqft") == "Area: 12.00 ft²"
    assert format_dimension(None, "sqft", 3) == "Perimeter: 3.00 ft"


def test_format_error():
    assert format_error(None) == ""
    assert format_error("boom") == "boom"
    assert format_error(UnsupportedCurrencyError("JPY")) == "Unsupported currency: JPY"
    assert format_error(measure([], 1.0)) == "At least 3 points required."
