# file: shopflow/server/schemas/quote.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from shopflow.server.schemas.inspection import InspectionItem, InspectionSection, InspectionStatus


class QuotePart(BaseModel):
    name: str = ""
    price: float = Field(default=0.0, ge=0)


class QuoteLineItem(BaseModel):
    """
    Priced recommendation derived from one fail/recommend inspection item.

    inspection_item is the label text of the source item, for display only;
    no reference back to the item itself is kept.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    description: str
    status: InspectionStatus
    part: QuotePart = Field(default_factory=QuotePart)
    labor_hours: float = Field(default=0.5, ge=0, alias="laborHours")
    price: float = Field(default=0.0, ge=0)
    source: str = "inspection"
    inspection_item: Optional[str] = Field(default=None, alias="inspectionItem")


class QuoteFromInspectionIn(BaseModel):
    vehicle_type: Optional[str] = None
    sections: List[InspectionSection] = Field(default_factory=list)
    # flat list; used when the caller has no sections
    items: List[InspectionItem] = Field(default_factory=list)
    # when set, lines are priced with this hourly rate
    labor_rate: Optional[float] = Field(default=None, ge=0)
    tax_rate: float = Field(default=0.0, ge=0)
    use_ai_labor: bool = False


class QuoteOut(BaseModel):
    lines: List[QuoteLineItem]
    summary: str
    totals: Optional[Dict[str, float]] = None
    # structural estimate for the whole visit (needs vehicle_type)
    visit_labor_hours: Optional[float] = None


class LaborIn(BaseModel):
    vehicle_type: Optional[str] = None
    sections: List[InspectionSection] = Field(default_factory=list)
    complaint: Optional[str] = None
    job_type: Optional[str] = None


class LaborOut(BaseModel):
    hours: float
    source: str = "default"
