from __future__ import annotations

import json
from pathlib import Path

import pytest

from roofquote.models import FixedDiscount, PercentDiscount, TieredDiscount
from roofquote.policy import (
    DEFAULT_DISCOUNTS,
    DEFAULT_TAX_RATES,
    PolicyError,
    discount_from_dict,
    load_pricing_policy,
)


def test_default_policy():
    policy = load_pricing_policy()
    assert policy.discounts == DEFAULT_DISCOUNTS
    assert [d.label for d in policy.discounts] == ["Summer Promo", "Referral Bonus"]
    assert [t.value for t in policy.tax_rates] == [7.5, 2]
    assert policy.add_ons == ()


def test_policy_file_replaces_named_lists(tmp_path: Path):
    path = tmp_path / "policy.json"
    path.write_text(
        json.dumps(
            {
                "discounts": [
                    {"type": "tiered", "label": "Volume", "tiers": [{"min": 100, "value": 5}, {"min": 200, "value": 10}]}
                ],
                "add_ons": [{"name": "Gutters", "price": 12.5, "quantity": 4}, {"name": "Warranty", "price": 300}],
            }
        ),
        encoding="utf-8",
    )
    policy = load_pricing_policy(path)
    assert policy.source == path
    assert isinstance(policy.discounts[0], TieredDiscount)
    assert [t.minimum for t in policy.discounts[0].tiers] == [100, 200]
    assert policy.tax_rates == DEFAULT_TAX_RATES
    assert [(a.name, a.price, a.quantity) for a in policy.add_ons] == [("Gutters", 12.5, 4), ("Warranty", 300, 1)]


def test_discount_from_dict():
    assert discount_from_dict({"type": "fixed", "value": "50"}) == FixedDiscount(50.0)
    assert discount_from_dict({"type": "Percent", "value": 10, "label": "Promo"}) == PercentDiscount(10, "Promo")


@pytest.mark.parametrize(
    "entry",
    [
        {"type": "bogo", "value": 1},
        {"type": "fixed"},
        {"type": "percent", "value": "lots"},
        {"type": "tiered", "tiers": "none"},
    ],
)
def test_bad_discounts_raise(entry):
    with pytest.raises(PolicyError):
        discount_from_dict(entry)


def test_invalid_policy_files(tmp_path: Path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(PolicyError):
        load_pricing_policy(broken)
    with pytest.raises(FileNotFoundError):
        load_pricing_policy(tmp_path / "missing.json")
