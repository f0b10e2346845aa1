"""Leave router — submit, list/filter, delete.

All endpoints require a signed-in session.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.auth.dependencies import get_current_user
from leave_portal.auth.models import StaffUser
from leave_portal.database import get_db
from leave_portal.leave.filters import LeaveRequestFilter
from leave_portal.leave.schemas import LeaveRequestCreate, LeaveRequestOut
from leave_portal.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[LeaveRequestOut])
async def list_leave_requests(
    search: Optional[str] = Query(None, description="Employee name contains (case-insensitive)"),
    start_date: Optional[date] = Query(None, description="Leave starts on or after"),
    end_date: Optional[date] = Query(None, description="Leave ends on or before"),
    user: StaffUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All leave requests, newest first, narrowed by the optional filters."""
    filters = LeaveRequestFilter(search=search or "", start_date=start_date, end_date=end_date)
    return await LeaveService.list_leave_requests(db, filters)


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=201)
async def submit_leave_request(
    body: LeaveRequestCreate,
    user: StaffUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request. Dates accept DD-MM-YYYY with - / or . separators."""
    return await LeaveService.create_leave_request(db, body)


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{request_id}", status_code=204)
async def delete_leave_request(
    request_id: uuid.UUID,
    user: StaffUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a leave request permanently."""
    await LeaveService.delete_leave_request(db, request_id)
    return Response(status_code=204)
