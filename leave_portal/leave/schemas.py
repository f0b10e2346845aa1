"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create  → request bodies (write)
  - *Out     → response bodies (read)
"""

from __future__ import annotations

import re
import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leave_portal.common.constants import (
    INPUT_DATE_HINT,
    INPUT_DATE_PATTERN,
    LeaveStatus,
    LeaveType,
)

_INPUT_DATE_RE = re.compile(INPUT_DATE_PATTERN)

_REQUIRED_MESSAGES = {
    "employee_name": "Employee name is required",
    "staff_id": "Staff ID is required",
    "start_date": "Start date is required",
    "end_date": "End date is required",
}


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """New-request form payload. Dates are kept as typed; the service
    normalizes them."""

    employee_name: str = Field(default="", max_length=200, validate_default=True)
    staff_id: str = Field(default="", max_length=50, validate_default=True)
    leave_type: LeaveType = LeaveType.annual
    start_date: str = Field(
        default="", validate_default=True,
        description=f"{INPUT_DATE_HINT}, e.g. 25-05-2025 or 25/5/2025",
    )
    end_date: str = Field(
        default="", validate_default=True,
        description=f"{INPUT_DATE_HINT}, e.g. 25-05-2025 or 25/5/2025",
    )
    status: LeaveStatus = LeaveStatus.pending

    @field_validator("employee_name", "staff_id", "start_date", "end_date", mode="before")
    @classmethod
    def required(cls, v, info):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError(_REQUIRED_MESSAGES[info.field_name])
        return v.strip() if isinstance(v, str) else v

    @field_validator("start_date", "end_date")
    @classmethod
    def date_shape(cls, v: str) -> str:
        if not _INPUT_DATE_RE.match(v):
            raise ValueError(f"Please use {INPUT_DATE_HINT} format")
        return v


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    """Full leave request response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_name: str
    staff_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    status: LeaveStatus
    created_at: Optional[datetime] = None
