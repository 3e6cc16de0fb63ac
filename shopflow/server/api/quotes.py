from fastapi import APIRouter, Depends

from shopflow.server.api.deps import get_ai_client, verify_api_key
from shopflow.server.schemas.quote import QuoteFromInspectionIn, QuoteOut
from shopflow.server.settings.config import settings
from shopflow.services.ai_client import AIClient
from shopflow.services.quote_service import generate_quote_from_inspection, sections_from_payload

router = APIRouter(
    prefix="/quotes",
    tags=["quotes"],
    dependencies=[Depends(verify_api_key)],
)


@router.post("/from-inspection", response_model=QuoteOut, response_model_by_alias=False)
def quote_from_inspection(payload: QuoteFromInspectionIn, ai: AIClient = Depends(get_ai_client)):
    result = generate_quote_from_inspection(
        sections=sections_from_payload(payload.sections, payload.items),
        vehicle_type=payload.vehicle_type,
        labor_rate=payload.labor_rate if payload.labor_rate is not None else settings.default_labor_rate,
        tax_rate=payload.tax_rate,
        ai_client=ai,
        use_ai_labor=payload.use_ai_labor,
    )
    return QuoteOut(**result)
