# file: shopflow/core/job_classifier.py
"""
Inspection item -> job classification.

- Reads knowledge/job_rules.yaml (keyword lists)
- Decides a job type per inspection item
- Decides whether the item becomes a work-order job at all
- Builds the complaint text for the job

Usage:

    from shopflow.core.job_classifier import jobs_from_sections

    jobs = jobs_from_sections(inspection_sections)

Returns a list of ClassifiedJob objects, in inspection order (not sorted).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from shopflow.server.schemas.inspection import InspectionItem, InspectionSection
from shopflow.server.schemas.jobs import JobInput

# Default path for the YAML rules
DEFAULT_RULES_PATH = Path(__file__).resolve().parents[1] / "knowledge" / "job_rules.yaml"

_KEYWORD_LISTS = ("diagnosis_keywords", "maintenance_keywords", "parts_keywords")


@dataclass
class ClassifiedJob:
    """
    Result of classifying one inspection item.
    """

    job_type: str
    complaint: str
    item_label: str
    status: str
    matched_keywords: List[str] = field(default_factory=list)

    def to_job_input(self, labor_hours: Optional[float] = None) -> JobInput:
        return JobInput(complaint=self.complaint, job_type=self.job_type, labor_hours=labor_hours)


def load_job_rules(rules_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Reads job_rules.yaml and returns the whole config as a dict.

    rules_path:
        - None: DEFAULT_RULES_PATH (cached after the first read)
    """
    if rules_path is None:
        return _load_default_rules()
    return _read_rules(Path(rules_path))


@lru_cache(maxsize=1)
def _load_default_rules() -> Dict[str, Any]:
    return _read_rules(DEFAULT_RULES_PATH)


def _read_rules(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Job rules missing: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Bad YAML structure in {path}: root object must be a mapping")

    for key in _KEYWORD_LISTS:
        value = data.get(key, [])
        if not isinstance(value, list):
            raise ValueError(f"Bad YAML structure in {path}: '{key}' must be a list")
        data[key] = [str(k).strip().lower() for k in value if k is not None and str(k).strip()]

    return data


def find_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    """
    Case-insensitive substring match. Returns the keywords found, in rule order.
    """
    if not text:
        return []
    lower = text.lower()
    return [k for k in keywords if k and k in lower]


def classify_job_type(item: InspectionItem, rules: Optional[Dict[str, Any]] = None) -> str:
    """
    Job type for one inspection item.

    Rules, first hit wins:
      1) label contains a diagnosis keyword -> "diagnosis"
      2) status == "fail"                   -> "inspection-fail"
      3) label contains a maintenance keyword -> "maintenance"
      4) otherwise                          -> "repair"
    """
    rules = rules if rules is not None else load_job_rules()
    label = item.label

    if find_keywords(label, rules.get("diagnosis_keywords", [])):
        return "diagnosis"
    if item.status == "fail":
        return "inspection-fail"
    if find_keywords(label, rules.get("maintenance_keywords", [])):
        return "maintenance"
    return "repair"


def should_create_job(item: InspectionItem, job_type: str) -> bool:
    """
    Failed and recommended items always become jobs. Other items only when
    their label put them in a non-repair tier (diagnosis / maintenance).
    """
    return item.status in ("fail", "recommend") or job_type != "repair"


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_complaint(item: InspectionItem) -> str:
    """
    "<label> (<value><unit>) - <notes>", leaving out the parts that are empty.

    Example:
        LF Brake Pad (3mm) - pads worn
    """
    parts: List[str] = []
    if item.label:
        parts.append(item.label)
    if item.value is not None and str(item.value).strip():
        parts.append(f"({_format_value(item.value)}{item.unit or ''})")
    if item.notes and item.notes.strip():
        parts.append(f"- {item.notes.strip()}")
    return " ".join(parts)


def classify_item(item: InspectionItem, rules: Optional[Dict[str, Any]] = None) -> Optional[ClassifiedJob]:
    """
    Returns a ClassifiedJob, or None when the item should not become a job.
    """
    rules = rules if rules is not None else load_job_rules()
    job_type = classify_job_type(item, rules)
    if not should_create_job(item, job_type):
        return None

    complaint = build_complaint(item)
    if not complaint:
        # nothing to describe the job with
        return None

    matched = find_keywords(
        item.label,
        rules.get("diagnosis_keywords", []) + rules.get("maintenance_keywords", []),
    )
    return ClassifiedJob(
        job_type=job_type,
        complaint=complaint,
        item_label=item.label,
        status=item.status,
        matched_keywords=matched,
    )


def jobs_from_sections(
    sections: Iterable[Union[InspectionSection, Dict[str, Any]]],
    rules: Optional[Dict[str, Any]] = None,
) -> List[ClassifiedJob]:
    """
    Walks every section/item in order and collects the items that become jobs.
    Raw dicts (stored inspection JSON) are validated into InspectionSection first.
    """
    rules = rules if rules is not None else load_job_rules()
    jobs: List[ClassifiedJob] = []

    for section in sections:
        if not isinstance(section, InspectionSection):
            section = InspectionSection.model_validate(section)
        for item in section.items:
            job = classify_item(item, rules)
            if job is not None:
                jobs.append(job)

    return jobs


def needs_parts_request(complaint: Optional[str], rules: Optional[Dict[str, Any]] = None) -> bool:
    rules = rules if rules is not None else load_job_rules()
    return bool(find_keywords(complaint or "", rules.get("parts_keywords", [])))
