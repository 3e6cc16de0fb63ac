from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from shopflow.core.job_classifier import classify_job_type, load_job_rules
from shopflow.core.labor import LaborEstimator, compute_default_labor_hours
from shopflow.core.pricing import PricingConfig, build_inspection_summary, price_quote_lines
from shopflow.core.quote_mapper import map_inspection_to_quote
from shopflow.server.schemas.inspection import InspectionItem, InspectionSection

log = logging.getLogger(__name__)


def _ai_labor_for_items(ai_client: LaborEstimator):
    """
    Per-item labor callable for the quote mapper. Returns None (-> mapper
    default) whenever the AI has no usable answer.
    """
    rules = load_job_rules()

    def _estimate(item: InspectionItem) -> Optional[float]:
        complaint = (item.notes or "").strip() or item.label
        try:
            return ai_client.estimate_labor_hours(complaint, classify_job_type(item, rules))
        except Exception as e:  # noqa: BLE001
            log.warning("AI labor estimate failed for %r: %s", complaint, e)
            return None

    return _estimate


def generate_quote_from_inspection(
    *,
    sections: Sequence[InspectionSection],
    vehicle_type: Optional[str] = None,
    labor_rate: Optional[float] = None,
    tax_rate: float = 0.0,
    ai_client: Optional[LaborEstimator] = None,
    use_ai_labor: bool = False,
) -> Dict[str, Any]:
    """
    Inspection -> quote.

    Flow:
      - fail/recommend items -> quote lines (core/quote_mapper)
      - per-line labor from the AI when asked for, else 0.5 h
      - summary text
      - structural labor for the whole visit when the vehicle type is known
      - with a labor_rate: priced lines + totals (core/pricing)
    """
    labor = _ai_labor_for_items(ai_client) if (use_ai_labor and ai_client is not None) else None
    lines = map_inspection_to_quote(sections, labor_hours=labor)

    result: Dict[str, Any] = {
        "lines": lines,
        "summary": build_inspection_summary(sections),
        "totals": None,
        "visit_labor_hours": None,
    }

    if vehicle_type:
        result["visit_labor_hours"] = compute_default_labor_hours(vehicle_type, sections)

    if labor_rate is not None:
        priced, totals = price_quote_lines(lines, PricingConfig(labor_rate=labor_rate, tax_rate=tax_rate))
        result["lines"] = priced
        result["totals"] = totals

    return result


def sections_from_payload(sections: List[InspectionSection], items: List[InspectionItem]) -> List[InspectionSection]:
    # a flat item list is treated as one untitled section
    if sections:
        return list(sections)
    if items:
        return [InspectionSection(title="", items=list(items))]
    return []
