from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from shopflow.core.errors import NotFoundError, PersistenceError, ValidationError
from shopflow.core.job_priority import JOB_TYPES, is_known_job_type, normalize_job_type
from shopflow.server.models import WorkOrderLine
from shopflow.server.schemas.jobs import JobInput

log = logging.getLogger(__name__)

LINE_STATUSES = ("awaiting", "in_progress", "on_hold", "paused", "completed")

# Forward-moving, with hold/resume as the way back.
ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "awaiting": frozenset({"in_progress", "on_hold"}),
    "in_progress": frozenset({"paused", "on_hold", "completed"}),
    "paused": frozenset({"in_progress", "on_hold"}),
    "on_hold": frozenset({"awaiting", "in_progress"}),
    "completed": frozenset(),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = value.strip()
    return v or None


def validate_target(work_order_id: Optional[str], vehicle_id: Optional[str]) -> None:
    if not _clean(work_order_id):
        raise ValidationError("work_order_id is required")
    if not _clean(vehicle_id):
        raise ValidationError("vehicle_id is required")


def validate_batch(work_order_id: Optional[str], vehicle_id: Optional[str], jobs: Sequence[JobInput]) -> None:
    """
    Rejects the whole batch before anything is written:
      - work_order_id / vehicle_id must be non-empty
      - every job needs a non-empty complaint and a known job_type
    """
    validate_target(work_order_id, vehicle_id)

    problems: List[Dict[str, object]] = []
    for idx, job in enumerate(jobs):
        if not _clean(job.complaint):
            problems.append({"index": idx, "field": "complaint", "problem": "empty"})
        if not job.job_type:
            problems.append({"index": idx, "field": "job_type", "problem": "missing"})
        elif not is_known_job_type(job.job_type):
            problems.append({"index": idx, "field": "job_type", "problem": f"unknown: {job.job_type}"})

    if problems:
        raise ValidationError(
            f"{len(problems)} invalid field(s) in job batch",
            details={"problems": problems, "allowed_job_types": list(JOB_TYPES)},
        )


def find_idempotent_batch(session: Session, work_order_id: str, idempotency_key: str) -> List[WorkOrderLine]:
    stmt = (
        select(WorkOrderLine)
        .where(WorkOrderLine.work_order_id == work_order_id)
        .where(WorkOrderLine.idempotency_key == idempotency_key)
        .order_by(WorkOrderLine.line_no)
    )
    return list(session.exec(stmt).all())


def build_lines(
    work_order_id: str,
    vehicle_id: str,
    jobs: Sequence[JobInput],
    idempotency_key: Optional[str] = None,
) -> List[WorkOrderLine]:
    """
    One new line per job, in the given order: fresh id, status "awaiting",
    no punches / hold / technician, complaint/cause/job_type as given.
    """
    now = _now()
    return [
        WorkOrderLine(
            work_order_id=work_order_id.strip(),
            vehicle_id=vehicle_id.strip(),
            complaint=job.complaint,
            cause=job.cause,
            job_type=normalize_job_type(job.job_type) or "",
            status="awaiting",
            punched_in_at=None,
            punched_out_at=None,
            hold_reason=None,
            assigned_tech_id=None,
            labor_time=job.labor_hours,
            line_no=idx,
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )
        for idx, job in enumerate(jobs)
    ]


def write_work_order_lines(
    *,
    session: Session,
    work_order_id: str,
    vehicle_id: str,
    jobs: Sequence[JobInput],
    idempotency_key: Optional[str] = None,
) -> List[WorkOrderLine]:
    """
    Persists a (already sorted) job batch as work-order lines.

    Flow:
      - validate everything first, nothing is written on a bad batch
      - idempotency_key given and already used for this work order:
            return the lines written back then, insert nothing
      - add all lines and commit once
      - any store error: rollback, PersistenceError for the whole batch
    """
    validate_batch(work_order_id, vehicle_id, jobs)
    key = _clean(idempotency_key)

    if key:
        existing = find_idempotent_batch(session, work_order_id.strip(), key)
        if existing:
            log.info("Idempotent replay for work order %s (key %s): %d line(s)", work_order_id, key, len(existing))
            return existing

    if not jobs:
        return []

    lines = build_lines(work_order_id, vehicle_id, jobs, key)

    try:
        session.add_all(lines)
        session.commit()
        for line in lines:
            session.refresh(line)
    except SQLAlchemyError as e:
        session.rollback()
        log.error("Inserting %d line(s) for work order %s failed: %s", len(lines), work_order_id, e)
        raise PersistenceError(
            f"Could not insert job lines for work order {work_order_id}",
            details={"work_order_id": work_order_id, "batch_size": len(lines)},
        ) from e

    return lines


def list_work_order_lines(session: Session, work_order_id: str) -> List[WorkOrderLine]:
    stmt = (
        select(WorkOrderLine)
        .where(WorkOrderLine.work_order_id == work_order_id)
        .order_by(WorkOrderLine.created_at, WorkOrderLine.line_no)
    )
    return list(session.exec(stmt).all())


def check_transition(current: str, target: str) -> None:
    if target not in LINE_STATUSES:
        raise ValidationError(f"Unknown line status: {target}", details={"allowed": list(LINE_STATUSES)})
    if current == target:
        return
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise ValidationError(f"Cannot move line from {current} to {target}")


def update_line_status(
    *,
    session: Session,
    line_id: str,
    status: str,
    hold_reason: Optional[str] = None,
) -> WorkOrderLine:
    """
    Single-row status update by id.

    - in_progress stamps punched_in_at (first time only)
    - completed stamps punched_out_at
    - on_hold keeps hold_reason; leaving on_hold clears it
    """
    line = session.get(WorkOrderLine, line_id)
    if line is None:
        raise NotFoundError(f"Work-order line not found: {line_id}")

    target = (status or "").strip().lower()
    check_transition(line.status, target)
    if line.status == target:
        return line

    now = _now()
    if target == "in_progress" and line.punched_in_at is None:
        line.punched_in_at = now
    if target == "completed":
        line.punched_out_at = now
    line.hold_reason = _clean(hold_reason) if target == "on_hold" else None
    line.status = target
    line.updated_at = now

    try:
        session.add(line)
        session.commit()
        session.refresh(line)
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Could not update work-order line {line_id}") from e

    return line
