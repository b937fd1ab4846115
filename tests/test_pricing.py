from __future__ import annotations

import pytest

from roofquote.config import EngineConfig
from roofquote.models import (
    AddOn,
    AreaMeasure,
    FixedDiscount,
    PercentDiscount,
    PricingErrorCode,
    TaxRate,
    Tier,
    TieredDiscount,
)
from roofquote.pricing import (
    UnsupportedCurrencyError,
    calculate_add_ons,
    calculate_discounts,
    calculate_price_details,
    calculate_taxes,
    convert_currency,
    validate_quote_input,
)

AREA = AreaMeasure(px=100.0, sqm=100.0, sqft=1076.39)


def test_no_adjustments_total_equals_base():
    details = calculate_price_details(AREA, 10.0)
    assert details.base == pytest.approx(100.0 * 10.0)
    assert details.total == pytest.approx(details.base)
    assert details.add_on_total == details.discount_total == details.tax_total == 0
    assert details.currency == "USD" and details.unit == "sqm"


def test_unit_selects_imperial_area():
    details = calculate_price_details(AREA, 2.0, unit="sqft")
    assert details.base == pytest.approx(1076.39 * 2.0)
    assert details.inputs.area == pytest.approx(1076.39)


def test_area_may_be_a_mapping():
    details = calculate_price_details({"sqm": 20.0, "sqft": 215.0}, 5.0)
    assert details.base == pytest.approx(100.0)


def test_tiered_discount_is_additive():
    tiered = TieredDiscount(tiers=(Tier(100, 5), Tier(200, 10), Tier(300, 20)))
    assert calculate_discounts(250.0, [tiered]) == pytest.approx(37.5)


def test_fixed_and_percent_discounts_share_the_subtotal():
    discounts = [PercentDiscount(10), FixedDiscount(50)]
    assert calculate_discounts(1000.0, discounts) == pytest.approx(150.0)


def test_unknown_discount_type_is_rejected():
    with pytest.raises(TypeError):
        calculate_discounts(100.0, [object()])


def test_taxes_are_not_compounded():
    assert calculate_taxes(850.0, [TaxRate(7.5), TaxRate(2)]) == pytest.approx(63.75 + 17.0)


def test_add_on_quantity_defaults_to_one():
    assert calculate_add_ons([AddOn(price=100, quantity=2), AddOn(price=50)]) == pytest.approx(250.0)
    assert calculate_add_ons([]) == 0


def test_full_breakdown_order():
    details = calculate_price_details(
        AREA,
        9.0,
        discounts=[PercentDiscount(10, label="Summer Promo"), FixedDiscount(50)],
        tax_rates=[TaxRate(7.5), TaxRate(2)],
        add_ons=[AddOn(price=50, quantity=2, name="Gutters")],
    )
    # subtotal = 900 + 100; discounts = 100 + 50; taxes on 850.
    assert details.base == pytest.approx(900.0)
    assert details.add_on_total == pytest.approx(100.0)
    assert details.discount_total == pytest.approx(150.0)
    assert details.tax_total == pytest.approx(80.75)
    assert details.total == pytest.approx(930.75)
    assert details.inputs.base_price == 9.0
    assert details.inputs.add_ons[0].name == "Gutters"
    assert details.inputs.discounts[0].label == "Summer Promo"


def test_discounts_larger_than_subtotal_go_negative():
    details = calculate_price_details(AREA, 10.0, discounts=[FixedDiscount(2000)], tax_rates=[TaxRate(10)])
    assert details.tax_total == pytest.approx(-100.0)
    assert details.total == pytest.approx(-1100.0)


def test_each_figure_is_converted_once():
    usd = calculate_price_details(AREA, 10.0, discounts=[PercentDiscount(10)], tax_rates=[TaxRate(5)])
    eur = calculate_price_details(
        AREA, 10.0, discounts=[PercentDiscount(10)], tax_rates=[TaxRate(5)], currency="EUR"
    )
    for field in ("base", "add_on_total", "discount_total", "tax_total", "total"):
        assert getattr(eur, field) == pytest.approx(getattr(usd, field) * 0.93)
    assert eur.currency == "EUR"


def test_convert_currency():
    assert convert_currency(100, "USD", "EUR") == pytest.approx(93.0)
    assert convert_currency(93, "EUR", "GBP") == pytest.approx(79.0)


@pytest.mark.parametrize("amount", [0, 1.5, -20, 1e9])
def test_convert_currency_identity(amount):
    assert convert_currency(amount, "USD", "USD") == amount


def test_convert_currency_unknown_code():
    with pytest.raises(UnsupportedCurrencyError) as excinfo:
        convert_currency(10, "USD", "JPY")
    assert excinfo.value.currency == "JPY"
    assert excinfo.value.code is PricingErrorCode.UNSUPPORTED_CURRENCY


def test_alternate_rate_table():
    cfg = EngineConfig(currency_rates={"USD": 1.0, "JPY": 150.0})
    details = calculate_price_details(AREA, 1.0, currency="JPY", config=cfg)
    assert details.total == pytest.approx(15000.0)
    assert convert_currency(300, "JPY", "USD", rates=cfg.currency_rates) == pytest.approx(2.0)


def test_validate_quote_input():
    assert validate_quote_input(AREA, 65, "USD") is None
    assert validate_quote_input({"sqm": 0, "sqft": 0}, 65, "USD").code is PricingErrorCode.INVALID_AREA
    assert validate_quote_input(None, 65, "USD").message == "Area must be greater than zero."
    assert validate_quote_input(AREA, 0, "USD").code is PricingErrorCode.INVALID_BASE_PRICE
    assert validate_quote_input(AREA, -3, "USD").message == "Base price must be positive."
    issue = validate_quote_input(AREA, 65, "JPY")
    assert issue.code is PricingErrorCode.UNSUPPORTED_CURRENCY
    assert str(issue) == "Unsupported currency."


def test_validate_quote_input_uses_configured_rates():
    cfg = EngineConfig(currency_rates={"USD": 1.0, "JPY": 150.0})
    assert validate_quote_input(AREA, 65, "JPY", config=cfg) is None
    assert validate_quote_input(AREA, 65, "EUR", config=cfg) is not None


def test_validate_quote_input_accepts_plain_area():
    assert validate_quote_input(100.0, 65, "USD") is None
    assert validate_quote_input(100, 65, "USD") is None
    assert validate_quote_input(0.0, 65, "USD").code is PricingErrorCode.INVALID_AREA
    assert calculate_price_details(100.0, 65).total == pytest.approx(6500.0)
