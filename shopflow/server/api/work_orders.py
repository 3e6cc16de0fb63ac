from typing import List, Optional

from fastapi import APIRouter, Depends, Header
from sqlmodel import Session

from shopflow.core.job_priority import sort_jobs
from shopflow.server.api.deps import verify_api_key
from shopflow.server.db.session import get_session
from shopflow.server.schemas.jobs import LineStatusIn, WorkOrderLineOut, WorkOrderLinesIn
from shopflow.services.work_order_lines import list_work_order_lines, update_line_status, write_work_order_lines

router = APIRouter(
    prefix="/work-orders",
    tags=["work-orders"],
    dependencies=[Depends(verify_api_key)],
)


@router.post("/{work_order_id}/lines", response_model=List[WorkOrderLineOut], status_code=201)
def create_lines(
    work_order_id: str,
    payload: WorkOrderLinesIn,
    idempotency_key: Optional[str] = Header(None),
    session: Session = Depends(get_session),
):
    jobs = sort_jobs(payload.jobs) if payload.sort else list(payload.jobs)
    lines = write_work_order_lines(
        session=session,
        work_order_id=work_order_id,
        vehicle_id=payload.vehicle_id,
        jobs=jobs,
        idempotency_key=idempotency_key,
    )
    return [WorkOrderLineOut.model_validate(l) for l in lines]


@router.get("/{work_order_id}/lines", response_model=List[WorkOrderLineOut])
def get_lines(work_order_id: str, session: Session = Depends(get_session)):
    return [WorkOrderLineOut.model_validate(l) for l in list_work_order_lines(session, work_order_id)]


@router.patch("/lines/{line_id}/status", response_model=WorkOrderLineOut)
def set_line_status(line_id: str, payload: LineStatusIn, session: Session = Depends(get_session)):
    line = update_line_status(
        session=session,
        line_id=line_id,
        status=payload.status,
        hold_reason=payload.hold_reason,
    )
    return WorkOrderLineOut.model_validate(line)
