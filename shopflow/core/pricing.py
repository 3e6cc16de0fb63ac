# file: shopflow/core/pricing.py
"""
Pricing of quote lines, after the inspection mapper has produced them.

Idea:
- line price = labor_hours * labor_rate + part.price
- totals: labor, parts, subtotal, tax on subtotal, total
- amounts are rounded to cents

Works on QuoteLineItem models and returns NEW models, the input list is
left as is. Also builds the plain-text inspection summary shown on a quote.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple, Union

from shopflow.server.schemas.inspection import InspectionItem, InspectionSection
from shopflow.server.schemas.quote import QuoteLineItem


@dataclass
class PricingConfig:
    labor_rate: float = 0.0   # per hour
    tax_rate: float = 0.0     # 0.05 = 5 %

    def __post_init__(self) -> None:
        if self.labor_rate < 0:
            raise ValueError("labor_rate must be >= 0")
        if self.tax_rate < 0:
            raise ValueError("tax_rate must be >= 0")


def _cents(amount: float) -> float:
    return round(amount, 2)


def price_quote_lines(
    lines: List[QuoteLineItem],
    config: PricingConfig,
) -> Tuple[List[QuoteLineItem], Dict[str, float]]:
    """
    Returns (priced_lines, totals).

    totals keys: labor_total, parts_total, subtotal, tax, total, labor_hours
    """
    priced: List[QuoteLineItem] = []
    labor_total = 0.0
    parts_total = 0.0
    hours_total = 0.0

    for line in lines:
        labor_cost = line.labor_hours * config.labor_rate
        part_price = line.part.price
        labor_total += labor_cost
        parts_total += part_price
        hours_total += line.labor_hours
        priced.append(line.model_copy(update={"price": _cents(labor_cost + part_price)}))

    subtotal = labor_total + parts_total
    tax = subtotal * config.tax_rate

    totals = {
        "labor_hours": round(hours_total, 2),
        "labor_total": _cents(labor_total),
        "parts_total": _cents(parts_total),
        "subtotal": _cents(subtotal),
        "tax": _cents(tax),
        "total": _cents(subtotal + tax),
    }
    return priced, totals


def build_inspection_summary(
    source: Iterable[Union[InspectionSection, Dict[str, Any]]],
) -> str:
    """
    Short text for the quote header, e.g.:

        Inspection found 1 failed and 1 recommended item(s).
        - FAIL: LF Brake Pad - pads worn
        - RECOMMEND: Wiper blades
    """
    failed: List[InspectionItem] = []
    recommended: List[InspectionItem] = []

    for section in source:
        if not isinstance(section, InspectionSection):
            section = InspectionSection.model_validate(section)
        for item in section.items:
            if item.status == "fail":
                failed.append(item)
            elif item.status == "recommend":
                recommended.append(item)

    if not failed and not recommended:
        return "Inspection complete. No failed or recommended items."

    lines = [
        f"Inspection found {len(failed)} failed and {len(recommended)} recommended item(s)."
    ]
    for tag, group in (("FAIL", failed), ("RECOMMEND", recommended)):
        for item in group:
            text = item.label or "Unnamed item"
            if item.notes and item.notes.strip():
                text = f"{text} - {item.notes.strip()}"
            lines.append(f"- {tag}: {text}")
    return "\n".join(lines)
