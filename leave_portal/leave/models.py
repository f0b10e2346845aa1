"""Leave ORM models: LeaveRequest."""

from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from leave_portal.common.constants import LEAVE_REQUESTS_TABLE, LeaveStatus, LeaveType
from leave_portal.database import Base


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class LeaveRequest(Base):
    __tablename__ = LEAVE_REQUESTS_TABLE
    __table_args__ = (
        # Duplicate-check lookup; not unique.
        sa.Index("ix_leave_requests_staff_dates", "staff_id", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    staff_id: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    leave_type: Mapped[LeaveType] = mapped_column(
        sa.Enum(
            LeaveType,
            name="leave_type",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=LeaveType.annual,
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(
            LeaveStatus,
            name="leave_status",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=LeaveStatus.pending,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
