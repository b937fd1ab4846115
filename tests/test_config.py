from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from roofquote.config import DEFAULT_CURRENCY_RATES, load_config, validate_rate_table


def test_defaults_without_environment():
    cfg = load_config({})
    assert cfg.closure_tolerance_px == 10.0
    assert cfg.reference_currency == "USD"
    assert dict(cfg.currency_rates) == dict(DEFAULT_CURRENCY_RATES)
    assert cfg.default_unit == "sqm"
    assert cfg.default_base_price == 65.0
    assert cfg.policy_path is None


def test_environment_overrides(tmp_path: Path):
    rates = tmp_path / "rates.json"
    rates.write_text(json.dumps({"usd": 1, "JPY": "150"}), encoding="utf-8")
    cfg = load_config(
        {
            "ROOFQUOTE_CLOSURE_TOLERANCE_PX": "15",
            "ROOFQUOTE_CURRENCY_RATES_FILE": str(rates),
            "ROOFQUOTE_DEFAULT_CURRENCY": "jpy",
            "ROOFQUOTE_DEFAULT_UNIT": "SQFT",
            "ROOFQUOTE_BASE_PRICE": "$7.50",
            "ROOFQUOTE_VERBOSE": "yes",
        }
    )
    assert cfg.closure_tolerance_px == 15.0
    assert dict(cfg.currency_rates) == {"USD": 1.0, "JPY": 150.0}
    assert cfg.default_currency == "JPY"
    assert cfg.default_unit == "sqft"
    assert cfg.default_base_price == 7.5
    assert cfg.verbose is True


def test_garbage_values_fall_back_to_defaults():
    cfg = load_config({"ROOFQUOTE_CLOSURE_TOLERANCE_PX": "wide", "ROOFQUOTE_DEFAULT_UNIT": "acre"})
    assert cfg.closure_tolerance_px == 10.0
    assert cfg.default_unit == "sqm"


def test_cli_options_win_over_environment(tmp_path: Path):
    policy = tmp_path / "policy.json"
    args = SimpleNamespace(closure_tolerance=3, currency="eur", unit="sqft", base_price=12.0, policy=str(policy))
    cfg = load_config({"ROOFQUOTE_CLOSURE_TOLERANCE_PX": "15"}, args)
    assert cfg.closure_tolerance_px == 3.0
    assert cfg.default_currency == "EUR"
    assert cfg.default_unit == "sqft"
    assert cfg.default_base_price == 12.0
    assert cfg.policy_path == policy.resolve()


def test_rate_table_needs_reference_currency():
    with pytest.raises(ValueError):
        validate_rate_table({"EUR": 0.93})
    with pytest.raises(ValueError):
        validate_rate_table({"USD": 1, "EUR": 0})
