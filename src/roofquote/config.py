from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional


_BOOLEAN_TRUE = {"1", "true", "yes", "on"}

REFERENCE_CURRENCY = "USD"

DEFAULT_CURRENCY_RATES: Mapping[str, float] = {
    "USD": 1.0,
    "EUR": 0.93,
    "GBP": 0.79,
    "AUD": 1.5,
    "CAD": 1.34,
}

SUPPORTED_UNITS = ("sqm", "sqft")


@dataclass(frozen=True)
class EngineConfig:
    """Tunables shared by the geometry and pricing engines."""

    closure_tolerance_px: float = 10.0
    reference_currency: str = REFERENCE_CURRENCY
    currency_rates: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_CURRENCY_RATES))
    default_currency: str = REFERENCE_CURRENCY
    default_unit: str = "sqm"
    default_base_price: float = 65.0
    policy_path: Optional[Path] = None
    verbose: bool = False

    def rate_for(self, code: str) -> Optional[float]:
        return self.currency_rates.get(code)


def _to_path(value: object | None) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser().resolve()
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser().resolve()


def _to_float(value: object | None) -> Optional[float]:
    if value is None:
        return None
    text = str(value).replace("$", "").replace(",", "").strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _flag(value: object | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOLEAN_TRUE


def _namespace(cli_args: object | None) -> SimpleNamespace:
    if cli_args is None:
        return SimpleNamespace()
    if isinstance(cli_args, SimpleNamespace):
        return cli_args
    if hasattr(cli_args, "__dict__"):
        return SimpleNamespace(**{k: v for k, v in vars(cli_args).items()})
    return SimpleNamespace()


def validate_rate_table(rates: Mapping[str, object], reference: str = REFERENCE_CURRENCY) -> dict[str, float]:
    """Return a normalized copy of ``rates`` or raise ``ValueError``.

    Codes are upper-cased, every rate must be a positive number and the
    reference currency must be present at exactly 1.
    """

    table: dict[str, float] = {}
    for code, raw in rates.items():
        rate = _to_float(raw)
        if rate is None or rate <= 0:
            raise ValueError(f"Invalid conversion rate for {code!r}: {raw!r}")
        table[str(code).strip().upper()] = rate
    if table.get(reference) != 1.0:
        raise ValueError(f"Rate table must contain {reference} at rate 1")
    return table


def load_rate_table(path: Path, reference: str = REFERENCE_CURRENCY) -> dict[str, float]:
    """Load a JSON object of ``code -> rate`` from ``path``."""

    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict) and isinstance(payload.get("rates"), dict):
        payload = payload["rates"]
    if not isinstance(payload, dict):
        raise ValueError(f"Rate table in {path} must be a JSON object")
    return validate_rate_table(payload, reference)


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> EngineConfig:
    """Build an :class:`EngineConfig` from environment variables and CLI options."""

    closure_tolerance = _to_float(env.get("ROOFQUOTE_CLOSURE_TOLERANCE_PX"))
    if closure_tolerance is None or closure_tolerance < 0:
        closure_tolerance = 10.0
    rates: dict[str, float] = dict(DEFAULT_CURRENCY_RATES)
    rates_path = _to_path(env.get("ROOFQUOTE_CURRENCY_RATES_FILE"))
    if rates_path is not None:
        rates = load_rate_table(rates_path)
    default_currency = (env.get("ROOFQUOTE_DEFAULT_CURRENCY") or REFERENCE_CURRENCY).strip().upper()
    default_unit = (env.get("ROOFQUOTE_DEFAULT_UNIT") or "sqm").strip().lower()
    if default_unit not in SUPPORTED_UNITS:
        default_unit = "sqm"
    base_price = _to_float(env.get("ROOFQUOTE_BASE_PRICE"))
    if base_price is None:
        base_price = 65.0
    policy_path = _to_path(env.get("ROOFQUOTE_PRICING_POLICY"))
    verbose = _flag(env.get("ROOFQUOTE_VERBOSE"))

    cli_ns = _namespace(cli_args)
    if getattr(cli_ns, "closure_tolerance", None) is not None:
        closure_tolerance = max(0.0, float(cli_ns.closure_tolerance))
    if getattr(cli_ns, "rates_file", None):
        rates = load_rate_table(_to_path(cli_ns.rates_file))
    if getattr(cli_ns, "currency", None):
        default_currency = str(cli_ns.currency).strip().upper()
    if getattr(cli_ns, "unit", None):
        default_unit = str(cli_ns.unit).strip().lower()
    if getattr(cli_ns, "base_price", None) is not None:
        base_price = float(cli_ns.base_price)
    if getattr(cli_ns, "policy", None):
        policy_path = _to_path(cli_ns.policy)
    if getattr(cli_ns, "verbose", False):
        verbose = True

    return EngineConfig(
        closure_tolerance_px=closure_tolerance,
        reference_currency=REFERENCE_CURRENCY,
        currency_rates=rates,
        default_currency=default_currency,
        default_unit=default_unit,
        default_base_price=base_price,
        policy_path=policy_path,
        verbose=verbose,
    )


DEFAULT_CONFIG = EngineConfig()


__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CURRENCY_RATES",
    "EngineConfig",
    "REFERENCE_CURRENCY",
    "SUPPORTED_UNITS",
    "load_config",
    "load_rate_table",
    "validate_rate_table",
]
