from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .config import EngineConfig, load_config
from .formatting import format_measurement, format_quote_details
from .geometry import CalibrationError, compute_scale, measure
from .models import AddOn
from .policy import load_pricing_policy
from .pricing import calculate_price_details, validate_quote_input


@dataclass
class EstimateOptions:
    points: Sequence[object]
    scale: Optional[float] = None
    ref_points: Optional[Sequence[object]] = None
    ref_distance_meters: Optional[float] = None
    base_price: Optional[float] = None
    currency: Optional[str] = None
    unit: Optional[str] = None
    policy_path: Optional[Path] = None
    add_ons: Sequence[AddOn] = field(default_factory=tuple)
    price_per_sqm: Optional[float] = None
    price_per_sqft: Optional[float] = None
    base_meters: Optional[float] = None
    height_meters: Optional[float] = None


def resolve_scale(options: EstimateOptions) -> float:
    if options.scale is not None:
        if not options.scale > 0:
            raise CalibrationError("Scale must be greater than zero.")
        return float(options.scale)
    if not options.ref_points or options.ref_distance_meters is None:
        raise CalibrationError("Provide a scale or two reference points with their real distance.")
    if len(options.ref_points) != 2:
        raise CalibrationError("Exactly two reference points are required.")
    first, second = options.ref_points
    return compute_scale(first, second, options.ref_distance_meters)


def estimate(options: EstimateOptions, config: Optional[EngineConfig] = None) -> Dict[str, Any]:
    """Measure the outline and, when it is valid, price it.

    Returns a dict with keys: measurement, measurement_text, issue, quote,
    quote_text.  ``quote`` is ``None`` when measurement or input
    validation fails; ``issue`` then holds the reason.
    """

    cfg = config or load_config(os.environ, None)
    scale = resolve_scale(options)
    result = measure(
        options.points,
        scale,
        price_per_sqm=options.price_per_sqm,
        price_per_sqft=options.price_per_sqft,
        base_meters=options.base_meters,
        height_meters=options.height_meters,
        config=cfg,
    )
    payload: Dict[str, Any] = {
        "measurement": result,
        "measurement_text": format_measurement(result),
        "issue": None,
        "quote": None,
        "quote_text": None,
    }
    if not result.ok:
        payload["issue"] = result.error
        return payload

    base_price = cfg.default_base_price if options.base_price is None else options.base_price
    currency = options.currency or cfg.default_currency
    unit = options.unit or cfg.default_unit
    issue = validate_quote_input(result.area, base_price, currency, config=cfg)
    if issue is not None:
        payload["issue"] = issue.message
        return payload

    policy = load_pricing_policy(options.policy_path or cfg.policy_path)
    details = calculate_price_details(
        result.area,
        base_price,
        discounts=policy.discounts,
        tax_rates=policy.tax_rates,
        add_ons=tuple(policy.add_ons) + tuple(options.add_ons),
        currency=currency,
        unit=unit,
        config=cfg,
    )
    payload["quote"] = details
    payload["quote_text"] = format_quote_details(details)
    return payload


__all__ = ["EstimateOptions", "estimate", "resolve_scale"]
