# file: shopflow/core/labor.py
"""
Labor-hour estimation for work-order jobs.

Default (structural) estimate:

- car:   2.0 h if any section is titled "Oil Change", else 1.5 h
- other: 1.0 h per distinct axle label found in the item labels
         (Steer N / Drive N / Tag / Trailer N), at least 1 axle

The default never fails: every input, including empty sections and items
without labels, has a value.

AI estimate:

- optional, via an AI client with estimate_labor_hours(complaint, job_type)
- any failure there gives None and we use the default instead
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Protocol

log = logging.getLogger(__name__)

CAR_BASE_HOURS = 1.5
CAR_OIL_CHANGE_HOURS = 2.0
HOURS_PER_AXLE = 1.0
OIL_CHANGE_SECTION = "oil change"

AXLE_LABEL_RE = re.compile(r"(steer\s+\d+|drive\s+\d+|tag|trailer\s+\d+)\b", re.IGNORECASE)


class LaborEstimator(Protocol):
    def estimate_labor_hours(self, complaint: str, job_type: str) -> Optional[float]:
        ...


@dataclass
class LaborEstimate:
    """
    Hours for one job plus where they came from ("ai" or "default").
    """

    hours: float
    source: str


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _item_label(item: Any) -> str:
    label = _get(item, "item") or _get(item, "name") or ""
    return label if isinstance(label, str) else ""


def _has_oil_change_section(sections: Iterable[Any]) -> bool:
    for section in sections:
        title = _get(section, "title")
        if isinstance(title, str) and title.strip().lower() == OIL_CHANGE_SECTION:
            return True
    return False


def find_axle_labels(sections: Iterable[Any]) -> List[str]:
    """
    Distinct axle labels (lower-cased, whitespace collapsed) in first-seen order.
    Only a match at the start of the item label counts.
    """
    seen: List[str] = []
    for section in sections:
        for item in _get(section, "items") or []:
            m = AXLE_LABEL_RE.match(_item_label(item).strip())
            if not m:
                continue
            key = " ".join(m.group(1).lower().split())
            if key not in seen:
                seen.append(key)
    return seen


def compute_default_labor_hours(vehicle_type: Optional[str], sections: Optional[Iterable[Any]]) -> float:
    """
    Structural default for a job/vehicle combination.

    Sections may be InspectionSection models or plain dicts with
    "title" and "items" (items with "item" or "name").
    """
    sections = list(sections or [])
    vt = (vehicle_type or "").strip().lower()

    if vt == "car":
        return CAR_OIL_CHANGE_HOURS if _has_oil_change_section(sections) else CAR_BASE_HOURS

    # truck / bus / trailer / unknown: heavy-duty, billed per axle group
    axle_count = len(find_axle_labels(sections))
    return max(1, axle_count) * HOURS_PER_AXLE


def estimate_labor(
    *,
    complaint: str,
    job_type: Optional[str],
    vehicle_type: Optional[str] = None,
    sections: Optional[Iterable[Any]] = None,
    ai_client: Optional[LaborEstimator] = None,
) -> LaborEstimate:
    """
    Strategy:
      - with an AI client: ask it; a non-negative number wins
      - otherwise, or when the AI gave nothing: structural default
    """
    if ai_client is not None:
        hours: Optional[float] = None
        try:
            hours = ai_client.estimate_labor_hours(complaint, job_type or "")
        except Exception as e:  # noqa: BLE001
            log.warning("AI labor estimate failed for %r: %s", complaint, e)
            hours = None

        if hours is not None:
            try:
                h = float(hours)
            except (TypeError, ValueError):
                h = float("nan")
            if h == h and h >= 0:
                return LaborEstimate(hours=h, source="ai")

        log.info("Using default labor hours for %r", complaint)

    return LaborEstimate(hours=compute_default_labor_hours(vehicle_type, sections), source="default")
