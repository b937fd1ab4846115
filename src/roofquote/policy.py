"""Pricing metadata: the active discounts, tax rates and standard add-ons.

Without a policy file the defaults mirror the promotions the field app
shipped with.  A JSON policy replaces each list it names.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from .models import AddOn, Discount, FixedDiscount, PercentDiscount, TaxRate, Tier, TieredDiscount

logger = logging.getLogger(__name__)


class PolicyError(ValueError):
    """Raised when a pricing policy entry cannot be interpreted."""


DEFAULT_DISCOUNTS: Tuple[Discount, ...] = (
    PercentDiscount(10, label="Summer Promo"),
    FixedDiscount(50, label="Referral Bonus"),
)

DEFAULT_TAX_RATES: Tuple[TaxRate, ...] = (
    TaxRate(7.5, label="Sales Tax"),
    TaxRate(2, label="Environmental Fee"),
)


@dataclass(frozen=True)
class PricingPolicy:
    discounts: Tuple[Discount, ...] = DEFAULT_DISCOUNTS
    tax_rates: Tuple[TaxRate, ...] = DEFAULT_TAX_RATES
    add_ons: Tuple[AddOn, ...] = field(default_factory=tuple)
    source: Optional[Path] = None


def _number(entry: Mapping[str, Any], key: str) -> float:
    try:
        return float(entry[key])
    except KeyError:
        raise PolicyError(f"Missing {key!r} in {entry!r}") from None
    except (TypeError, ValueError):
        raise PolicyError(f"Invalid {key!r} in {entry!r}") from None


def discount_from_dict(entry: Mapping[str, Any]) -> Discount:
    kind = str(entry.get("type", "")).strip().lower()
    label = str(entry.get("label") or "")
    if kind == "fixed":
        return FixedDiscount(_number(entry, "value"), label=label)
    if kind == "percent":
        return PercentDiscount(_number(entry, "value"), label=label)
    if kind == "tiered":
        tiers = entry.get("tiers")
        if not isinstance(tiers, list):
            raise PolicyError(f"Tiered discount needs a 'tiers' list: {entry!r}")
        return TieredDiscount(
            tiers=tuple(Tier(minimum=_number(t, "min"), value=_number(t, "value")) for t in tiers),
            label=label,
        )
    raise PolicyError(f"Unknown discount type: {entry.get('type')!r}")


def tax_rate_from_dict(entry: Mapping[str, Any]) -> TaxRate:
    return TaxRate(_number(entry, "value"), label=str(entry.get("label") or ""))


def add_on_from_dict(entry: Mapping[str, Any]) -> AddOn:
    price = _number(entry, "price") if entry.get("price") is not None else 0.0
    quantity = entry.get("quantity") or 1
    try:
        quantity = float(quantity)
    except (TypeError, ValueError):
        raise PolicyError(f"Invalid 'quantity' in {entry!r}") from None
    return AddOn(price=price, quantity=quantity, name=str(entry.get("name") or ""))


def _parse_list(raw: object, key: str, parser) -> Optional[List]:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise PolicyError(f"{key!r} must be a list")
    return [parser(entry) for entry in raw]


def policy_from_dict(payload: Mapping[str, Any], source: Optional[Path] = None) -> PricingPolicy:
    discounts = _parse_list(payload.get("discounts"), "discounts", discount_from_dict)
    tax_rates = _parse_list(payload.get("tax_rates"), "tax_rates", tax_rate_from_dict)
    add_ons = _parse_list(payload.get("add_ons"), "add_ons", add_on_from_dict)
    ignored = set(payload) - {"discounts", "tax_rates", "add_ons"}
    if ignored:
        logger.warning("Ignoring unknown pricing policy keys: %s", ", ".join(sorted(ignored)))
    return PricingPolicy(
        discounts=tuple(discounts) if discounts is not None else DEFAULT_DISCOUNTS,
        tax_rates=tuple(tax_rates) if tax_rates is not None else DEFAULT_TAX_RATES,
        add_ons=tuple(add_ons) if add_ons is not None else (),
        source=source,
    )


def load_pricing_policy(path: Optional[Path] = None) -> PricingPolicy:
    """Return the pricing policy stored at ``path`` or the built-in defaults."""

    if path is None:
        return PricingPolicy()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pricing policy not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PolicyError(f"Invalid pricing policy JSON in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise PolicyError(f"Pricing policy in {path} must be a JSON object")
    policy = policy_from_dict(payload, source=path)
    logger.debug(
        "Loaded pricing policy %s: %d discounts, %d tax rates, %d add-ons",
        path,
        len(policy.discounts),
        len(policy.tax_rates),
        len(policy.add_ons),
    )
    return policy



__all__ = [
    "DEFAULT_DISCOUNTS",
    "DEFAULT_TAX_RATES",
    "PolicyError",
    "PricingPolicy",
    "add_on_from_dict",
    "discount_from_dict",
    "load_pricing_policy",
    "policy_from_dict",
    "tax_rate_from_dict",
]
