from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from shopflow.core.errors import NotFoundError, PersistenceError, ValidationError
from shopflow.core.job_classifier import jobs_from_sections, load_job_rules, needs_parts_request
from shopflow.core.job_priority import sort_jobs
from shopflow.core.labor import LaborEstimator, estimate_labor
from shopflow.server.models import Inspection, PartsRequest, WorkOrderLine
from shopflow.server.schemas.inspection import InspectionSection, InspectionUpsertIn
from shopflow.services.work_order_lines import find_idempotent_batch, validate_target, write_work_order_lines

log = logging.getLogger(__name__)


@dataclass
class ImportResult:
    inserted_count: int
    parts_requests_count: int
    lines: List[WorkOrderLine] = field(default_factory=list)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def inspection_sections(inspection: Inspection) -> List[InspectionSection]:
    """
    Sections stored in inspection.result. Raises ValidationError when the
    stored result has no section list.
    """
    result = inspection.result or {}
    raw = result.get("sections") if isinstance(result, dict) else None
    if not isinstance(raw, list):
        raise ValidationError("Invalid inspection format: missing sections", details={"inspection_id": inspection.id})
    return [InspectionSection.model_validate(s) for s in raw]


def get_inspection(session: Session, inspection_id: str) -> Inspection:
    inspection = session.get(Inspection, inspection_id)
    if inspection is None:
        raise NotFoundError(f"Inspection not found: {inspection_id}")
    return inspection


def upsert_inspection(session: Session, inspection_id: str, payload: InspectionUpsertIn) -> Inspection:
    """
    Insert or replace an inspection by id. Fields left out of the payload
    (None) keep their stored value on update.
    """
    if not (inspection_id or "").strip():
        raise ValidationError("inspection id is required")

    sections = [s.model_dump(by_alias=True) for s in payload.sections]
    inspection = session.get(Inspection, inspection_id)

    if inspection is None:
        inspection = Inspection(
            id=inspection_id,
            work_order_id=payload.work_order_id,
            vehicle_id=payload.vehicle_id,
            vehicle_type=payload.vehicle_type,
            result={"sections": sections},
            summary=payload.summary,
        )
    else:
        for name in ("work_order_id", "vehicle_id", "vehicle_type", "summary"):
            value = getattr(payload, name)
            if value is not None:
                setattr(inspection, name, value)
        inspection.result = {"sections": sections}
        inspection.updated_at = _now()

    try:
        session.add(inspection)
        session.commit()
        session.refresh(inspection)
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Could not save inspection {inspection_id}") from e

    return inspection


def create_parts_requests(
    *,
    session: Session,
    lines: List[WorkOrderLine],
    item_labels: List[str],
    work_order_id: str,
    user_id: Optional[str],
    rules: Optional[Dict[str, Any]] = None,
) -> int:
    """
    One parts request per line whose complaint mentions a parts keyword.

    Not fatal: a failed insert is logged and counts as 0 requests, the
    lines themselves are already written.
    """
    rules = rules if rules is not None else load_job_rules()
    defaults = rules.get("parts_request") or {}

    requests: List[PartsRequest] = []
    for line, label in zip(lines, item_labels):
        if not label or not needs_parts_request(line.complaint, rules):
            continue
        requests.append(
            PartsRequest(
                job_id=line.id,
                work_order_id=work_order_id,
                part_name=label,
                quantity=int(defaults.get("quantity", 1) or 1),
                urgency=str(defaults.get("urgency", "medium")),
                notes=defaults.get("notes"),
                requested_by=user_id,
            )
        )

    if not requests:
        return 0

    try:
        session.add_all(requests)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        log.warning("Parts requests for work order %s not created: %s", work_order_id, e)
        return 0

    return len(requests)


def count_parts_requests(session: Session, lines: List[WorkOrderLine]) -> int:
    ids = [line.id for line in lines]
    if not ids:
        return 0
    stmt = select(PartsRequest).where(PartsRequest.job_id.in_(ids))
    return len(session.exec(stmt).all())


def import_jobs_from_inspection(
    *,
    session: Session,
    inspection_id: str,
    work_order_id: str,
    vehicle_id: str,
    user_id: Optional[str] = None,
    ai_client: Optional[LaborEstimator] = None,
    auto_generate_parts: bool = True,
    idempotency_key: Optional[str] = None,
) -> ImportResult:
    """
    Inspection -> prioritized work-order lines (+ parts requests).

    Flow:
      0) work_order_id / vehicle_id checked before anything else; a replayed
         idempotency_key returns the earlier import as is (no AI, no writes)
      1) load the inspection and its sections
      2) classify items into jobs (core/job_classifier)
      3) sort by priority tier (core/job_priority)
      4) labor per job: AI estimate, else structural default (core/labor)
      5) write the batch (services/work_order_lines)
      6) optional parts requests, non-fatal
    """
    validate_target(work_order_id, vehicle_id)

    key = (idempotency_key or "").strip() or None
    if key:
        existing = find_idempotent_batch(session, work_order_id.strip(), key)
        if existing:
            log.info("Idempotent replay of inspection %s import (key %s)", inspection_id, key)
            return ImportResult(
                inserted_count=len(existing),
                parts_requests_count=count_parts_requests(session, existing),
                lines=existing,
            )

    inspection = get_inspection(session, inspection_id)
    sections = inspection_sections(inspection)
    rules = load_job_rules()

    classified = sort_jobs(jobs_from_sections(sections, rules))
    if not classified:
        return ImportResult(inserted_count=0, parts_requests_count=0)

    jobs = []
    for c in classified:
        labor = estimate_labor(
            complaint=c.complaint,
            job_type=c.job_type,
            vehicle_type=inspection.vehicle_type,
            sections=sections,
            ai_client=ai_client,
        )
        jobs.append(c.to_job_input(labor_hours=labor.hours))

    lines = write_work_order_lines(
        session=session,
        work_order_id=work_order_id,
        vehicle_id=vehicle_id,
        jobs=jobs,
        idempotency_key=key,
    )

    parts_count = 0
    if auto_generate_parts and lines:
        parts_count = create_parts_requests(
            session=session,
            lines=lines,
            item_labels=[c.item_label for c in classified],
            work_order_id=work_order_id,
            user_id=user_id,
            rules=rules,
        )

    return ImportResult(inserted_count=len(lines), parts_requests_count=parts_count, lines=lines)
