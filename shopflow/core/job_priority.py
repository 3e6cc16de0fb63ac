# file: shopflow/core/job_priority.py
"""
Priority tiers for work-order jobs.

    diagnosis        -> 1
    inspection-fail  -> 2
    maintenance      -> 3
    repair           -> 4
    anything else    -> 5 (after repair)

sort_jobs() is a pure, stable reordering: nothing is dropped, added or
changed, and jobs in the same tier keep their input order.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, TypeVar

JOB_TYPES = ("diagnosis", "inspection-fail", "maintenance", "repair")

JOB_PRIORITY: Dict[str, int] = {
    "diagnosis": 1,
    "inspection-fail": 2,
    "maintenance": 3,
    "repair": 4,
}

UNKNOWN_PRIORITY = max(JOB_PRIORITY.values()) + 1

J = TypeVar("J")


def normalize_job_type(job_type: Optional[str]) -> Optional[str]:
    if not isinstance(job_type, str):
        return None
    jt = job_type.strip().lower()
    return jt or None


def is_known_job_type(job_type: Optional[str]) -> bool:
    return normalize_job_type(job_type) in JOB_PRIORITY


def priority_rank(job_type: Optional[str]) -> int:
    return JOB_PRIORITY.get(normalize_job_type(job_type) or "", UNKNOWN_PRIORITY)


def _job_type_of(job: Any) -> Optional[str]:
    # JobInput models and raw dicts (snake_case or camelCase from the frontend)
    if isinstance(job, Mapping):
        return job.get("job_type", job.get("jobType"))
    return getattr(job, "job_type", None)


def sort_jobs(jobs: Sequence[J]) -> List[J]:
    """
    Returns a new list ordered by priority tier.

    Python's sort is stable, so equal tiers keep their relative order and
    sorting an already sorted list gives back the same order.
    """
    return sorted(jobs, key=lambda j: priority_rank(_job_type_of(j)))
