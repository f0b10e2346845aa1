"""Leave service layer — intake, listing, deletion.

Business logic:
  - Free-form dates are normalized to ISO and must form a start ≤ end range
  - A request may not repeat an existing (staff_id, start_date, end_date)
    triple; the check runs before the insert and is not atomic with it
  - Listing returns every request newest first; filtering happens in memory
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.common.exceptions import (
    DuplicateLeaveRequestError,
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
)
from leave_portal.common.filters import apply_filters, apply_sorting
from leave_portal.leave.dates import check_date_order, parse_leave_date
from leave_portal.leave.filters import LeaveRequestFilter
from leave_portal.leave.models import LeaveRequest
from leave_portal.leave.schemas import LeaveRequestCreate, LeaveRequestOut

logger = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch leave requests. Please try again."
SUBMIT_FAILED = "An error occurred while submitting the leave request."
DELETE_FAILED = "Failed to delete leave request. Please try again."


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave-request operations: submit, list, delete."""

    # ─────────────────────────────────────────────────────────────────
    # Duplicate check
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def find_duplicate(
        db: AsyncSession,
        staff_id: str,
        start_date: date,
        end_date: date,
    ) -> Optional[uuid.UUID]:
        """Return the id of a request with the same staff id and dates, if any."""

        query = apply_filters(
            select(LeaveRequest.id),
            LeaveRequest,
            {"staff_id": staff_id, "start_date": start_date, "end_date": end_date},
        ).limit(1)
        result = await db.execute(query)
        return result.scalars().first()

    # ─────────────────────────────────────────────────────────────────
    # Submit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_leave_request(
        db: AsyncSession,
        data: LeaveRequestCreate,
    ) -> LeaveRequestOut:
        """Normalize dates, reject bad ranges and duplicates, then insert."""

        try:
            start = parse_leave_date(data.start_date, "start_date")
            end = parse_leave_date(data.end_date, "end_date")
            check_date_order(start, end)
        except ValidationException as exc:
            logger.info("Rejected leave request for staff_id=%s: %s", data.staff_id, exc.detail)
            raise

        try:
            if await LeaveService.find_duplicate(db, data.staff_id, start, end):
                logger.info(
                    "Duplicate leave request for staff_id=%s %s..%s",
                    data.staff_id, start, end,
                )
                raise DuplicateLeaveRequestError(data.staff_id)

            leave_request = LeaveRequest(
                employee_name=data.employee_name,
                staff_id=data.staff_id,
                leave_type=data.leave_type,
                start_date=start,
                end_date=end,
                status=data.status,
            )
            db.add(leave_request)
            await db.flush()
            await db.refresh(leave_request)
        except SQLAlchemyError:
            logger.exception("Error submitting leave request for staff_id=%s", data.staff_id)
            await db.rollback()
            raise ServiceUnavailableException(SUBMIT_FAILED)

        logger.info("Leave request %s submitted for staff_id=%s", leave_request.id, data.staff_id)
        return LeaveRequestOut.model_validate(leave_request)

    # ─────────────────────────────────────────────────────────────────
    # List
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_leave_requests(
        db: AsyncSession,
        filters: Optional[LeaveRequestFilter] = None,
    ) -> list[LeaveRequestOut]:
        """Fetch every request newest first, then apply *filters* in memory."""

        query = apply_sorting(select(LeaveRequest), LeaveRequest, "-created_at")
        try:
            result = await db.execute(query)
            rows = [LeaveRequestOut.model_validate(r) for r in result.scalars().all()]
        except SQLAlchemyError:
            logger.exception("Error fetching leave requests")
            await db.rollback()
            raise ServiceUnavailableException(FETCH_FAILED)

        if filters is None:
            return rows
        return filters.apply(rows)

    @staticmethod
    async def get_leave_request(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> LeaveRequestOut:
        """Return one request or raise 404."""

        try:
            result = await db.execute(
                select(LeaveRequest).where(LeaveRequest.id == request_id)
            )
            leave_request = result.scalars().first()
        except SQLAlchemyError:
            logger.exception("Error fetching leave request %s", request_id)
            await db.rollback()
            raise ServiceUnavailableException(FETCH_FAILED)

        if leave_request is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return LeaveRequestOut.model_validate(leave_request)

    # ─────────────────────────────────────────────────────────────────
    # Delete
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def delete_leave_request(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> None:
        """Delete exactly one request by id or raise 404."""

        try:
            result = await db.execute(
                select(LeaveRequest).where(LeaveRequest.id == request_id)
            )
            leave_request = result.scalars().first()
            if leave_request is None:
                raise NotFoundException("LeaveRequest", str(request_id))
            await db.delete(leave_request)
            await db.flush()
        except SQLAlchemyError:
            logger.exception("Error deleting leave request %s", request_id)
            await db.rollback()
            raise ServiceUnavailableException(DELETE_FAILED)

        logger.info("Leave request %s deleted", request_id)
