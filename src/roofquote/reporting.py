"""Quote tables, export records and printable PDF quotes."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from .export import breakdown_to_dict, measurement_to_dict
from .formatting import format_currency, format_measurement
from .models import MeasurementResult, PriceBreakdown


def quote_table(details: PriceBreakdown) -> pd.DataFrame:
    """Line items with signed amounts; zero add-on/discount/tax rows are dropped."""

    rows = [
        ("Base", details.base),
        ("Add-ons", details.add_on_total),
        ("Discounts", -details.discount_total),
        ("Tax", details.tax_total),
    ]
    table = pd.DataFrame(rows, columns=["LINE", "AMOUNT"])
    keep = (table["LINE"] == "Base") | (table["AMOUNT"] != 0)
    table = table.loc[keep].reset_index(drop=True)
    table.loc[len(table)] = ["Total", details.total]
    table["CURRENCY"] = details.currency
    return table


def make_summary_text(details: PriceBreakdown) -> str:
    table = quote_table(details).assign(
        AMOUNT=lambda df: df["AMOUNT"].map(lambda v: format_currency(float(v), details.currency))
    )
    inputs = details.inputs
    return (
        f"Quoted area: {inputs.area:,.2f} {details.unit} at {inputs.base_price:,.2f} per {details.unit}.\n"
        f"{table[['LINE', 'AMOUNT']].to_string(index=False)}\n"
    )


def build_quote_record(
    customer_name: str,
    email: str,
    measurement: MeasurementResult,
    details: Optional[PriceBreakdown],
    created_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Assemble the payload handed to CRM / cloud sync."""

    if not customer_name or not email or details is None:
        raise ValueError("Please enter customer and quote details.")
    stamp = created_at or datetime.now(timezone.utc)
    return {
        "customerName": customer_name,
        "email": email,
        "measurement": measurement_to_dict(measurement),
        "quoteDetails": breakdown_to_dict(details),
        "date": stamp.isoformat(),
    }


def write_quote_pdf(
    path: Path,
    details: PriceBreakdown,
    measurement: Optional[MeasurementResult] = None,
    customer_name: str = "",
    email: str = "",
) -> Path:
    """Write a single-page printable quote to ``path``."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    page_width, page_height = letter
    margin = 54
    c = canvas.Canvas(str(path), pagesize=letter)
    c.setFont("Helvetica-Bold", 18)
    y = page_height - margin
    c.drawString(margin, y, "Roof Quote")
    y -= 28

    c.setFont("Helvetica", 11)
    for label, value in (("Customer", customer_name), ("Email", email)):
        if value:
            c.drawString(margin, y, f"{label}: {value}")
            y -= 16
    if measurement is not None:
        y -= 8
        for line in format_measurement(measurement).splitlines():
            c.drawString(margin, y, line)
            y -= 14

    y -= 12
    c.setFont("Helvetica-Bold", 12)
    c.drawString(margin, y, "Line item")
    c.drawRightString(page_width - margin, y, f"Amount ({details.currency})")
    y -= 6
    c.line(margin, y, page_width - margin, y)
    y -= 16
    for row in quote_table(details).itertuples(index=False):
        c.setFont("Helvetica-Bold" if row.LINE == "Total" else "Helvetica", 11)
        c.drawString(margin, y, row.LINE)
        c.drawRightString(page_width - margin, y, format_currency(float(row.AMOUNT), details.currency))
        y -= 16
    c.showPage()
    c.save()
    return path


__all__ = ["build_quote_record", "make_summary_text", "quote_table", "write_quote_pdf"]
