# file: shopflow/server/schemas/inspection.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

InspectionStatus = Literal["ok", "fail", "na", "recommend", "unmarked"]

# Statuses that warrant action: they produce quote lines and may carry photos.
ACTIONABLE_STATUSES = ("fail", "recommend")


class InspectionItem(BaseModel):
    """
    One checklist entry.

    Label lives in `item` or `name` depending on where the item came from
    (templates use `item`, stored inspection results use `name`); `label`
    returns whichever is set.

    Photos are only kept while the status is fail/recommend.
    """

    model_config = ConfigDict(populate_by_name=True)

    item: Optional[str] = None
    name: Optional[str] = None
    status: InspectionStatus = "unmarked"
    notes: Optional[str] = Field(default=None, validation_alias=AliasChoices("notes", "note"))
    value: Optional[Union[float, str]] = None
    unit: Optional[str] = None
    photo_urls: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("photoUrls", "photo_urls"),
        serialization_alias="photoUrls",
    )

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: Any) -> Any:
        if v is None:
            return "unmarked"
        if isinstance(v, str):
            v = v.strip().lower()
            return v or "unmarked"
        return v

    @model_validator(mode="after")
    def _drop_photos_unless_actionable(self) -> "InspectionItem":
        if self.status not in ACTIONABLE_STATUSES and self.photo_urls:
            self.photo_urls = []
        return self

    @property
    def label(self) -> str:
        return (self.item or self.name or "").strip()


class InspectionSection(BaseModel):
    title: str = ""
    items: List[InspectionItem] = Field(default_factory=list)


class InspectionUpsertIn(BaseModel):
    work_order_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    vehicle_type: Optional[str] = None
    sections: List[InspectionSection] = Field(default_factory=list)
    summary: Optional[str] = None


class InspectionOut(BaseModel):
    id: str
    work_order_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    vehicle_type: Optional[str] = None
    sections: List[InspectionSection] = Field(default_factory=list)
    summary: Optional[str] = None


class InspectionTemplateIn(BaseModel):
    vehicle_type: Optional[str] = None
    # section title -> chosen item labels from the master list
    selections: Dict[str, List[str]] = Field(default_factory=dict)
    extra_service_items: List[str] = Field(default_factory=list)


class InspectionGenerateIn(BaseModel):
    prompt: str


class ImportJobsIn(BaseModel):
    work_order_id: str
    vehicle_id: str
    auto_generate_parts: bool = True


class InspectionItemUpdateIn(BaseModel):
    """Edit of one item in an in-progress session. Only the fields sent are changed."""

    model_config = ConfigDict(populate_by_name=True)

    section_index: int = 0
    item_index: int = 0
    status: Optional[InspectionStatus] = None
    notes: Optional[str] = None
    value: Optional[Union[float, str]] = None
    unit: Optional[str] = None
    photo_urls: Optional[List[str]] = Field(default=None, validation_alias=AliasChoices("photoUrls", "photo_urls"))


class InspectionSessionOut(BaseModel):
    inspection_id: str
    sections: List[InspectionSection] = Field(default_factory=list)
