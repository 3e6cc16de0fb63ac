from typing import List, Optional

from fastapi import APIRouter, Depends, Header
from sqlmodel import Session

from shopflow.core.axle_layout import build_inspection_from_selections
from shopflow.core.inspection_items import apply_session_update
from shopflow.server.api.deps import CurrentUser, get_ai_client, get_current_user, get_session_cache, verify_api_key
from shopflow.server.db.session import get_session
from shopflow.server.models import Inspection
from shopflow.server.schemas.inspection import (
    ImportJobsIn,
    InspectionGenerateIn,
    InspectionItemUpdateIn,
    InspectionOut,
    InspectionSection,
    InspectionSessionOut,
    InspectionTemplateIn,
    InspectionUpsertIn,
)
from shopflow.server.schemas.jobs import ImportJobsOut, WorkOrderLineOut
from shopflow.services.ai_client import AIClient
from shopflow.services.inspection_service import (
    get_inspection,
    import_jobs_from_inspection,
    inspection_sections,
    upsert_inspection,
)
from shopflow.services.session_cache import InspectionSessionCache

router = APIRouter(
    prefix="/inspections",
    tags=["inspections"],
    dependencies=[Depends(verify_api_key)],
)


def _inspection_out(inspection: Inspection) -> InspectionOut:
    return InspectionOut(
        id=inspection.id,
        work_order_id=inspection.work_order_id,
        vehicle_id=inspection.vehicle_id,
        vehicle_type=inspection.vehicle_type,
        sections=inspection_sections(inspection),
        summary=inspection.summary,
    )


# ==============================
# TEMPLATES / AI
# ==============================

@router.post("/template", response_model=List[InspectionSection], response_model_by_alias=False)
def inspection_template(payload: InspectionTemplateIn):
    return build_inspection_from_selections(
        payload.selections,
        vehicle_type=payload.vehicle_type,
        extra_service_items=payload.extra_service_items,
    )


@router.post("/generate", response_model=List[InspectionSection], response_model_by_alias=False)
def generate_inspection(payload: InspectionGenerateIn, ai: AIClient = Depends(get_ai_client)):
    # empty list when the AI is unavailable; the caller falls back to templates
    return ai.generate_inspection_list(payload.prompt)


# ==============================
# STORED INSPECTIONS
# ==============================

@router.put("/{inspection_id}", response_model=InspectionOut, response_model_by_alias=False)
def put_inspection(
    inspection_id: str,
    payload: InspectionUpsertIn,
    session: Session = Depends(get_session),
    cache: InspectionSessionCache = Depends(get_session_cache),
):
    inspection = upsert_inspection(session, inspection_id, payload)
    # the stored result is now the truth; drop any in-progress edits
    cache.pop(inspection_id)
    return _inspection_out(inspection)


@router.get("/{inspection_id}", response_model=InspectionOut, response_model_by_alias=False)
def read_inspection(inspection_id: str, session: Session = Depends(get_session)):
    return _inspection_out(get_inspection(session, inspection_id))


@router.post("/{inspection_id}/import-jobs", response_model=ImportJobsOut)
def import_jobs(
    inspection_id: str,
    payload: ImportJobsIn,
    idempotency_key: Optional[str] = Header(None),
    session: Session = Depends(get_session),
    ai: AIClient = Depends(get_ai_client),
    user: CurrentUser = Depends(get_current_user),
):
    result = import_jobs_from_inspection(
        session=session,
        inspection_id=inspection_id,
        work_order_id=payload.work_order_id,
        vehicle_id=payload.vehicle_id,
        user_id=user.id,
        ai_client=ai,
        auto_generate_parts=payload.auto_generate_parts,
        idempotency_key=idempotency_key,
    )
    return ImportJobsOut(
        inserted_count=result.inserted_count,
        parts_requests_count=result.parts_requests_count,
        lines=[WorkOrderLineOut.model_validate(l) for l in result.lines],
    )


# ==============================
# IN-PROGRESS SESSION
# ==============================

def _session_sections(
    inspection_id: str,
    session: Session,
    cache: InspectionSessionCache,
) -> List[InspectionSection]:
    cached = cache.get(inspection_id)
    if cached is not None:
        return cached
    return inspection_sections(get_inspection(session, inspection_id))


@router.get("/{inspection_id}/session", response_model=InspectionSessionOut, response_model_by_alias=False)
def read_session(
    inspection_id: str,
    session: Session = Depends(get_session),
    cache: InspectionSessionCache = Depends(get_session_cache),
):
    return InspectionSessionOut(inspection_id=inspection_id, sections=_session_sections(inspection_id, session, cache))


@router.patch("/{inspection_id}/session", response_model=InspectionSessionOut, response_model_by_alias=False)
def update_session_item(
    inspection_id: str,
    payload: InspectionItemUpdateIn,
    session: Session = Depends(get_session),
    cache: InspectionSessionCache = Depends(get_session_cache),
):
    """
    Edits one item of the cached session (loaded from the stored inspection
    on first use). Nothing is persisted until the inspection is PUT.
    """
    updates = payload.model_dump(exclude_unset=True, exclude={"section_index", "item_index"})
    sections = apply_session_update(
        _session_sections(inspection_id, session, cache),
        payload.section_index,
        payload.item_index,
        **updates,
    )
    cache.put(inspection_id, sections)
    return InspectionSessionOut(inspection_id=inspection_id, sections=sections)
