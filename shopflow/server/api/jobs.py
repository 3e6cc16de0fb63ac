from fastapi import APIRouter, Depends

from shopflow.core.job_priority import sort_jobs
from shopflow.core.labor import compute_default_labor_hours, estimate_labor
from shopflow.server.api.deps import get_ai_client, verify_api_key
from shopflow.server.schemas.jobs import JobSortIn, JobSortOut
from shopflow.server.schemas.quote import LaborIn, LaborOut
from shopflow.services.ai_client import AIClient

router = APIRouter(
    tags=["jobs"],
    dependencies=[Depends(verify_api_key)],
)


@router.post("/jobs/sort", response_model=JobSortOut, response_model_by_alias=False)
def sort_jobs_endpoint(payload: JobSortIn):
    return JobSortOut(jobs=sort_jobs(payload.jobs))


@router.post("/labor/default", response_model=LaborOut)
def default_labor(payload: LaborIn):
    return LaborOut(hours=compute_default_labor_hours(payload.vehicle_type, payload.sections))


@router.post("/labor/estimate", response_model=LaborOut)
def estimate_labor_endpoint(payload: LaborIn, ai: AIClient = Depends(get_ai_client)):
    """
    AI estimate for one complaint, structural default when there is no
    complaint or the AI has no usable answer.
    """
    complaint = (payload.complaint or "").strip()
    est = estimate_labor(
        complaint=complaint,
        job_type=payload.job_type,
        vehicle_type=payload.vehicle_type,
        sections=payload.sections,
        ai_client=ai if complaint else None,
    )
    return LaborOut(hours=est.hours, source=est.source)
