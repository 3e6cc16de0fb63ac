# file: shopflow/server/schemas/jobs.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class JobInput(BaseModel):
    """
    A requested unit of work before it becomes a work-order line.

    job_type is kept as a plain string here so the sorter can take
    anything (unknown types sort last). The line writer checks it against
    the known job types.
    """

    model_config = ConfigDict(populate_by_name=True)

    complaint: str
    job_type: Optional[str] = Field(default=None, alias="jobType")
    cause: Optional[str] = None
    labor_hours: Optional[float] = Field(default=None, alias="laborHours", ge=0)


class JobSortIn(BaseModel):
    jobs: List[JobInput] = Field(default_factory=list)


class JobSortOut(BaseModel):
    jobs: List[JobInput]


class WorkOrderLinesIn(BaseModel):
    vehicle_id: str
    jobs: List[JobInput] = Field(default_factory=list)
    # sort by priority tier before writing (the writer itself keeps input order)
    sort: bool = True


class WorkOrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    work_order_id: str
    vehicle_id: str
    complaint: Optional[str] = None
    cause: Optional[str] = None
    job_type: str
    status: str
    punched_in_at: Optional[datetime] = None
    punched_out_at: Optional[datetime] = None
    hold_reason: Optional[str] = None
    assigned_tech_id: Optional[str] = None
    labor_time: Optional[float] = None


class LineStatusIn(BaseModel):
    status: str
    hold_reason: Optional[str] = None


class ImportJobsOut(BaseModel):
    inserted_count: int
    parts_requests_count: int
    lines: List[WorkOrderLineOut] = Field(default_factory=list)
