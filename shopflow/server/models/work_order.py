from datetime import datetime, timezone
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class WorkOrderLine(SQLModel, table=True):
    __tablename__ = "work_order_lines"

    id: str = Field(default_factory=_new_id, primary_key=True)
    work_order_id: str = Field(index=True)
    vehicle_id: str
    complaint: Optional[str] = None
    cause: Optional[str] = None
    job_type: str                       # diagnosis | inspection-fail | maintenance | repair
    status: str = "awaiting"            # awaiting | in_progress | on_hold | paused | completed
    punched_in_at: Optional[datetime] = None
    punched_out_at: Optional[datetime] = None
    hold_reason: Optional[str] = None
    assigned_tech_id: Optional[str] = None
    labor_time: Optional[float] = None
    # position in the batch it was written with (keeps priority order on read)
    line_no: int = 0
    idempotency_key: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class PartsRequest(SQLModel, table=True):
    __tablename__ = "parts_requests"

    id: str = Field(default_factory=_new_id, primary_key=True)
    job_id: str = Field(foreign_key="work_order_lines.id", index=True)
    work_order_id: str
    part_name: str
    quantity: int = 1
    urgency: str = "medium"
    notes: Optional[str] = None
    requested_by: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    archived: bool = False
