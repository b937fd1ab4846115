from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from roofquote.geometry import measure
from roofquote.models import AddOn, FixedDiscount, TaxRate
from roofquote.pricing import calculate_price_details
from roofquote.reporting import build_quote_record, make_summary_text, quote_table, write_quote_pdf

SQUARE_10M = [(0, 0), (10, 0), (10, 10), (0, 10)]


def _details(**kwargs):
    return calculate_price_details({"sqm": 100, "sqft": 1076.39}, 10, **kwargs)


def test_quote_table_lines():
    table = quote_table(_details(discounts=[FixedDiscount(100)], tax_rates=[TaxRate(10)]))
    assert table["LINE"].tolist() == ["Base", "Discounts", "Tax", "Total"]
    assert table["AMOUNT"].tolist() == pytest.approx([1000.0, -100.0, 90.0, 990.0])
    assert set(table["CURRENCY"]) == {"USD"}


def test_summary_text_lists_add_ons():
    text = make_summary_text(_details(add_ons=[AddOn(price=25, quantity=2)]))
    assert "Quoted area: 100.00 sqm at 10.00 per sqm." in text
    assert "$50.00" in text
    assert "$1,050.00" in text


def test_build_quote_record():
    result = measure(SQUARE_10M, 1.0)
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    record = build_quote_record("Ada Roofer", "ada@example.com", result, _details(), created_at=stamp)
    assert record["customerName"] == "Ada Roofer"
    assert record["measurement"]["area"]["sqm"] == pytest.approx(100.0)
    assert record["quoteDetails"]["total"] == pytest.approx(1000.0)
    assert record["date"] == "2024-05-01T12:00:00+00:00"


@pytest.mark.parametrize("name,email,with_details", [("", "a@b.c", True), ("A", "", True), ("A", "a@b.c", False)])
def test_build_quote_record_requires_details(name, email, with_details):
    details = _details() if with_details else None
    with pytest.raises(ValueError, match="customer and quote details"):
        build_quote_record(name, email, measure(SQUARE_10M, 1.0), details)


def test_write_quote_pdf(tmp_path: Path):
    target = tmp_path / "out" / "quote.pdf"
    written = write_quote_pdf(
        target,
        _details(tax_rates=[TaxRate(5)]),
        measure(SQUARE_10M, 1.0),
        customer_name="Ada Roofer",
        email="ada@example.com",
    )
    assert written == target
    assert target.read_bytes().startswith(b"%PDF")
