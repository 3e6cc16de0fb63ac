# file: shopflow/core/quote_mapper.py
"""
Inspection findings -> quote lines.

Rules:
  - one QuoteLineItem per item with status fail/recommend, in input order
  - ok / na / unmarked items give no line at all
  - description: the item notes when present, else the item label
  - labor_hours: 0.5, unless an estimate is supplied
  - price and part.price: 0. Pricing is done later (see core/pricing.py);
    this module never invents prices.
  - every line gets a fresh id; nothing is reused from the source item
"""

from __future__ import annotations

import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from shopflow.server.schemas.inspection import ACTIONABLE_STATUSES, InspectionItem, InspectionSection
from shopflow.server.schemas.quote import QuoteLineItem, QuotePart

DEFAULT_LABOR_HOURS = 0.5

LaborSource = Union[float, int, Callable[[InspectionItem], Optional[float]], None]


def _new_line_id() -> str:
    return str(uuid.uuid4())


def flatten_items(
    source: Iterable[Union[InspectionSection, InspectionItem, Dict[str, Any]]],
) -> List[InspectionItem]:
    """
    Accepts sections, items or raw dicts of either and returns the items in
    order. A dict with an "items" key is treated as a section.
    """
    items: List[InspectionItem] = []
    for entry in source:
        if isinstance(entry, InspectionSection):
            items.extend(entry.items)
        elif isinstance(entry, InspectionItem):
            items.append(entry)
        elif isinstance(entry, dict) and "items" in entry:
            items.extend(InspectionSection.model_validate(entry).items)
        else:
            items.append(InspectionItem.model_validate(entry))
    return items


def _describe(item: InspectionItem) -> str:
    notes = (item.notes or "").strip()
    return notes or item.label


def _labor_for(item: InspectionItem, labor_hours: LaborSource) -> float:
    if labor_hours is None:
        return DEFAULT_LABOR_HOURS

    value: Optional[float]
    if callable(labor_hours):
        value = labor_hours(item)
    else:
        value = labor_hours

    if value is None:
        return DEFAULT_LABOR_HOURS
    try:
        v = float(value)
    except (TypeError, ValueError):
        return DEFAULT_LABOR_HOURS
    if v != v or v < 0:
        return DEFAULT_LABOR_HOURS
    return v


def map_inspection_to_quote(
    source: Iterable[Union[InspectionSection, InspectionItem, Dict[str, Any]]],
    labor_hours: LaborSource = None,
) -> List[QuoteLineItem]:
    """
    Builds quote lines from inspection items (optionally grouped in sections).

    labor_hours:
        - None: 0.5 h per line
        - a number: used for every line (e.g. a structural estimate)
        - a callable item -> hours|None: per-line estimate, None -> 0.5 h
    """
    lines: List[QuoteLineItem] = []

    for item in flatten_items(source):
        if item.status not in ACTIONABLE_STATUSES:
            continue

        lines.append(
            QuoteLineItem(
                id=_new_line_id(),
                description=_describe(item),
                status=item.status,
                part=QuotePart(name="", price=0.0),
                labor_hours=_labor_for(item, labor_hours),
                price=0.0,
                source="inspection",
                inspection_item=item.label or None,
            )
        )

    return lines
