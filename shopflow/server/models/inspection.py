from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class Inspection(SQLModel, table=True):
    __tablename__ = "inspections"

    id: str = Field(primary_key=True)
    work_order_id: Optional[str] = Field(default=None, index=True)
    vehicle_id: Optional[str] = None
    vehicle_type: Optional[str] = None   # car | truck | bus | trailer
    # {"sections": [{"title": ..., "items": [...]}]}
    result: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    summary: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
