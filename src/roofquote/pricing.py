"""Quote pricing for a measured roof area.

The computation order is fixed: base, add-ons, discounts, taxes, then a
single conversion of each figure out of the reference currency.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence

from .config import DEFAULT_CONFIG, REFERENCE_CURRENCY, EngineConfig
from .models import (
    AddOn,
    AreaMeasure,
    Discount,
    FixedDiscount,
    PercentDiscount,
    PriceBreakdown,
    PricingErrorCode,
    QuoteInputs,
    TaxRate,
    TieredDiscount,
    ValidationIssue,
)
from .formatting import format_quote_details

logger = logging.getLogger(__name__)


class UnsupportedCurrencyError(ValueError):
    """Raised when a currency code is missing from the rate table."""

    code = PricingErrorCode.UNSUPPORTED_CURRENCY

    def __init__(self, currency: str) -> None:
        super().__init__(f"Unsupported currency: {currency}")
        self.currency = currency


def convert_currency(
    amount: float,
    from_currency: str = REFERENCE_CURRENCY,
    to_currency: str = REFERENCE_CURRENCY,
    *,
    rates: Optional[Mapping[str, float]] = None,
) -> float:
    """Convert ``amount`` by way of the reference currency."""

    if from_currency == to_currency:
        return amount
    table = DEFAULT_CONFIG.currency_rates if rates is None else rates
    for code in (from_currency, to_currency):
        if not table.get(code):
            raise UnsupportedCurrencyError(code)
    reference_amount = amount / table[from_currency]
    return reference_amount * table[to_currency]


def calculate_discounts(subtotal: float, discounts: Iterable[Discount] = ()) -> float:
    """Sum every discount against the same ``subtotal``.

    All satisfied tiers of a tiered discount contribute, not only the
    highest one.
    """

    total = 0.0
    for discount in discounts:
        if isinstance(discount, FixedDiscount):
            total += discount.value
        elif isinstance(discount, PercentDiscount):
            total += subtotal * (discount.value / 100)
        elif isinstance(discount, TieredDiscount):
            for tier in discount.tiers:
                if subtotal >= tier.minimum:
                    total += subtotal * (tier.value / 100)
        else:
            raise TypeError(f"Unknown discount type: {type(discount).__name__}")
    return total


def calculate_taxes(subtotal: float, tax_rates: Iterable[TaxRate] = ()) -> float:
    return sum((subtotal * (rate.value / 100) for rate in tax_rates), 0.0)


def calculate_add_ons(add_ons: Iterable[AddOn] = ()) -> float:
    total = 0.0
    for add_on in add_ons:
        quantity = add_on.quantity if add_on.quantity else 1
        total += (add_on.price or 0) * quantity
    return total


def _area_value(area: object, unit: str) -> float:
    if isinstance(area, Mapping):
        return float(area["sqm"] if unit == "sqm" else area["sqft"])
    if isinstance(area, (int, float)):
        return float(area)
    return float(area.sqm if unit == "sqm" else area.sqft)  # type: ignore[attr-defined]


def calculate_price_details(
    area: AreaMeasure | Mapping[str, float] | float,
    base_price: float,
    discounts: Sequence[Discount] = (),
    tax_rates: Sequence[TaxRate] = (),
    add_ons: Sequence[AddOn] = (),
    currency: str = REFERENCE_CURRENCY,
    unit: str = "sqm",
    *,
    config: Optional[EngineConfig] = None,
) -> PriceBreakdown:
    """Itemise a quote for ``area`` priced at ``base_price`` per ``unit``.

    Inputs are not validated here; call :func:`validate_quote_input`
    first.  Invalid input still yields arithmetic results, e.g. discounts
    larger than the subtotal produce a negative pre-tax amount.  A plain
    number for ``area`` is taken as already expressed in ``unit``.
    """

    cfg = config or DEFAULT_CONFIG
    area_value = _area_value(area, unit)
    base = area_value * base_price
    add_on_total = calculate_add_ons(add_ons)
    subtotal = base + add_on_total
    discount_total = calculate_discounts(subtotal, discounts)
    subtotal_after_discount = subtotal - discount_total
    tax_total = calculate_taxes(subtotal_after_discount, tax_rates)
    total = subtotal_after_discount + tax_total

    def _convert(amount: float) -> float:
        return convert_currency(amount, cfg.reference_currency, currency, rates=cfg.currency_rates)

    breakdown = PriceBreakdown(
        base=_convert(base),
        add_on_total=_convert(add_on_total),
        discount_total=_convert(discount_total),
        tax_total=_convert(tax_total),
        total=_convert(total),
        currency=currency,
        unit=unit,
        inputs=QuoteInputs(
            area=area_value,
            base_price=base_price,
            add_ons=tuple(add_ons),
            discounts=tuple(discounts),
            tax_rates=tuple(tax_rates),
        ),
    )
    logger.debug(
        "quote: area=%.2f %s base=%.2f discounts=%.2f taxes=%.2f total=%.2f %s",
        area_value,
        unit,
        breakdown.base,
        breakdown.discount_total,
        breakdown.tax_total,
        breakdown.total,
        currency,
    )
    return breakdown


def validate_quote_input(
    area: object,
    base_price: Optional[float],
    currency: str,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[ValidationIssue]:
    """Return the first problem with the quote inputs, or ``None``.

    The area check always looks at the metric value.  A plain number is
    checked as is, matching how :func:`calculate_price_details` reads it.
    """

    cfg = config or DEFAULT_CONFIG
    sqm: Optional[float]
    if area is None:
        sqm = None
    elif isinstance(area, Mapping):
        sqm = area.get("sqm")
    elif isinstance(area, (int, float)):
        sqm = float(area)
    else:
        sqm = getattr(area, "sqm", None)
    if sqm is None or sqm <= 0:
        return ValidationIssue(PricingErrorCode.INVALID_AREA, "Area must be greater than zero.")
    if not base_price or base_price <= 0:
        return ValidationIssue(PricingErrorCode.INVALID_BASE_PRICE, "Base price must be positive.")
    if not cfg.currency_rates.get(currency):
        return ValidationIssue(PricingErrorCode.UNSUPPORTED_CURRENCY, "Unsupported currency.")
    return None


__all__ = [
    "UnsupportedCurrencyError",
    "calculate_add_ons",
    "calculate_discounts",
    "calculate_price_details",
    "calculate_taxes",
    "convert_currency",
    "format_quote_details",
    "validate_quote_input",
]
