import argparse
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd
from dotenv import load_dotenv

from .api import EstimateOptions, estimate, resolve_scale
from .config import EngineConfig, load_config
from .export import to_csv, to_json
from .formatting import format_measurement
from .geometry import measure
from .models import Point
from .reporting import build_quote_record, make_summary_text, write_quote_pdf

logger = logging.getLogger(__name__)


def load_points(path: Path) -> List[Point]:
    """Read tapped points from a CSV with ``x`` and ``y`` columns."""

    frame = pd.read_csv(path)
    frame.columns = [str(col).strip().lower() for col in frame.columns]
    missing = {"x", "y"} - set(frame.columns)
    if missing:
        raise ValueError(f"{path} is missing column(s): {', '.join(sorted(missing))}")
    coords = frame[["x", "y"]].apply(pd.to_numeric, errors="coerce").dropna()
    if len(coords) != len(frame):
        logger.warning("Skipped %d non-numeric point row(s) in %s", len(frame) - len(coords), path)
    return [Point(float(x), float(y)) for x, y in coords.itertuples(index=False)]


def _parse_ref_points(value: Optional[str]) -> Optional[List[Point]]:
    if not value:
        return None
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 4:
        raise ValueError("--ref-points expects x1,y1,x2,y2")
    x1, y1, x2, y2 = (float(part) for part in parts)
    return [Point(x1, y1), Point(x2, y2)]


def _options(args: argparse.Namespace) -> EstimateOptions:
    return EstimateOptions(
        points=load_points(Path(args.points)),
        scale=args.scale,
        ref_points=_parse_ref_points(args.ref_points),
        ref_distance_meters=args.ref_distance,
        base_price=getattr(args, "base_price", None),
        currency=getattr(args, "currency", None),
        unit=getattr(args, "unit", None),
        policy_path=Path(args.policy) if getattr(args, "policy", None) else None,
        price_per_sqm=args.price_per_sqm,
        price_per_sqft=args.price_per_sqft,
        base_meters=args.base_meters,
        height_meters=args.height_meters,
    )


def _write(path: Optional[str], text: str) -> None:
    if not path:
        return
    target = Path(path).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", target)


def run_measure(args: argparse.Namespace, cfg: EngineConfig) -> int:
    options = _options(args)
    result = measure(
        options.points,
        resolve_scale(options),
        price_per_sqm=options.price_per_sqm,
        price_per_sqft=options.price_per_sqft,
        base_meters=options.base_meters,
        height_meters=options.height_meters,
        config=cfg,
    )
    logger.info("%s", format_measurement(result).rstrip("\n"))
    if not result.ok:
        return 2
    _write(args.csv, to_csv(result))
    _write(args.json, to_json(result))
    if args.plot:
        from .visuals import plot_polygon

        logger.info("Wrote %s", plot_polygon(result, Path(args.plot)))
    return 0


def run_quote(args: argparse.Namespace, cfg: EngineConfig) -> int:
    outcome = estimate(_options(args), config=cfg)
    logger.info("%s", outcome["measurement_text"].rstrip("\n"))
    if outcome["quote"] is None:
        logger.error("Unable to quote: %s", outcome["issue"])
        return 2
    details = outcome["quote"]
    logger.info("")
    logger.info("%s", outcome["quote_text"])
    logger.debug("%s", make_summary_text(details))
    if args.pdf:
        pdf_path = write_quote_pdf(
            Path(args.pdf),
            details,
            outcome["measurement"],
            customer_name=args.customer or "",
            email=args.email or "",
        )
        logger.info("Wrote %s", pdf_path)
    if args.record:
        record = build_quote_record(args.customer, args.email, outcome["measurement"], details)
        _write(args.record, json.dumps(record, indent=2, ensure_ascii=False))
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("points", help="CSV of tapped points with x,y columns")
    parser.add_argument("--scale", type=float, help="Calibrated metres per pixel")
    parser.add_argument("--ref-points", help="Reference segment as x1,y1,x2,y2 (pixels)")
    parser.add_argument("--ref-distance", type=float, help="Real length of the reference segment in metres")
    parser.add_argument("--price-per-sqm", type=float, help="Estimate price per square metre")
    parser.add_argument("--price-per-sqft", type=float, help="Estimate price per square foot (wins over sqm)")
    parser.add_argument("--base-meters", type=float, help="Roof run for pitch (metres)")
    parser.add_argument("--height-meters", type=float, help="Roof rise for pitch (metres)")
    parser.add_argument("--closure-tolerance", type=float, help="Max first/last point gap in pixels")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Measure tapped roof outlines and price quotes")
    sub = parser.add_subparsers(dest="command", required=True)

    measure_parser = sub.add_parser("measure", help="Measure a tapped outline")
    _add_common(measure_parser)
    measure_parser.add_argument("--csv", help="Write the CSV export here")
    measure_parser.add_argument("--json", help="Write the JSON export here")
    measure_parser.add_argument("--plot", help="Write an outline plot (needs matplotlib)")

    quote_parser = sub.add_parser("quote", help="Measure an outline and price a quote")
    _add_common(quote_parser)
    quote_parser.add_argument("--base-price", type=float, help="Price per unit of area")
    quote_parser.add_argument("--currency", help="Target currency code")
    quote_parser.add_argument("--unit", choices=["sqm", "sqft"], help="Area unit the base price refers to")
    quote_parser.add_argument("--policy", help="Pricing policy JSON (discounts, tax rates, add-ons)")
    quote_parser.add_argument("--rates-file", help="JSON currency rate table relative to USD")
    quote_parser.add_argument("--pdf", help="Write a printable quote PDF here")
    quote_parser.add_argument("--record", help="Write the CRM quote record JSON here")
    quote_parser.add_argument("--customer", help="Customer name for the quote record")
    quote_parser.add_argument("--email", help="Customer email for the quote record")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    runtime_cfg = load_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    handlers = {"measure": run_measure, "quote": run_quote}
    try:
        return handlers[args.command](args, runtime_cfg)
    except (ValueError, FileNotFoundError) as exc:
        logger.error("Error: %s", exc)
        return 1
    except Exception:  # pragma: no cover
        logger.exception("Fatal error while processing %s", args.command)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
