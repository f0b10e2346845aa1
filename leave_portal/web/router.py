"""Page routes — sign-in gate, dashboard tabs, request form, delete confirmation.

Every dashboard page requires a live session; signed-out browsers are sent
back to ``/``. Data access goes through ``LeaveService`` so the pages and the
JSON API share one set of rules.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.auth.dependencies import get_optional_session
from leave_portal.auth.models import UserSession
from leave_portal.common.constants import INPUT_DATE_HINT, LeaveStatus, LeaveType
from leave_portal.common.exceptions import AppException, field_errors_from
from leave_portal.database import get_db
from leave_portal.leave.filters import LeaveRequestFilter
from leave_portal.leave.schemas import LeaveRequestCreate
from leave_portal.leave.service import LeaveService
from leave_portal.web.templating import notice_toast, render, toast

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"], include_in_schema=False)

TAB_LIST = "list"
TAB_NEW = "new"

_FORM_FIELDS = (
    "employee_name", "staff_id", "leave_type", "start_date", "end_date", "status",
)

_FORM_DEFAULTS = {
    "leave_type": LeaveType.annual.value,
    "status": LeaveStatus.pending.value,
}


def _to_signin() -> RedirectResponse:
    return RedirectResponse("/", status_code=303)


def _parse_filter_date(value: Optional[str]) -> Optional[date]:
    """Filter inputs come from ``<input type=date>``; ignore anything else."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _build_filter(
    search: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
) -> LeaveRequestFilter:
    return (
        LeaveRequestFilter(search=(search or "").strip())
        .set_start_date(_parse_filter_date(start_date))
        .set_end_date(_parse_filter_date(end_date))
    )


async def _dashboard_context(
    db: AsyncSession,
    session: UserSession,
    tab: str,
    filters: LeaveRequestFilter,
) -> dict:
    context = {
        "user": session.user,
        "tab": tab,
        "filters": filters,
        "requests": [],
        "leave_types": list(LeaveType),
        "statuses": list(LeaveStatus),
        "date_hint": INPUT_DATE_HINT,
        "form": dict(_FORM_DEFAULTS),
        "errors": {},
        "toast": None,
    }
    if tab == TAB_LIST:
        try:
            context["requests"] = await LeaveService.list_leave_requests(db, filters)
        except AppException as exc:
            context["toast"] = toast("Error", exc.detail, "destructive")
    return context


# ── GET / — sign-in gate ────────────────────────────────────────────

@router.get("/")
async def index(
    request: Request,
    session: Optional[UserSession] = Depends(get_optional_session),
):
    if session is not None:
        return RedirectResponse("/dashboard", status_code=303)
    return render(request, "signin.html", {"error": None})


# ── GET /dashboard — list / new-request tabs ────────────────────────

@router.get("/dashboard")
async def dashboard(
    request: Request,
    tab: str = TAB_LIST,
    search: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    notice: Optional[str] = None,
    session: Optional[UserSession] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db),
):
    if session is None:
        return _to_signin()

    tab = TAB_NEW if tab == TAB_NEW else TAB_LIST
    filters = _build_filter(search, start_date, end_date)
    context = await _dashboard_context(db, session, tab, filters)
    context["toast"] = context["toast"] or notice_toast(notice)
    return render(request, "dashboard.html", context)


# ── POST /dashboard/requests — new-request form ────────────────────

@router.post("/dashboard/requests")
async def submit_request(
    request: Request,
    session: Optional[UserSession] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db),
):
    if session is None:
        return _to_signin()

    submitted = await request.form()
    form = {name: str(submitted.get(name, "")) for name in _FORM_FIELDS}
    for name, default in _FORM_DEFAULTS.items():
        form[name] = form[name] or default

    context = await _dashboard_context(db, session, TAB_NEW, LeaveRequestFilter())
    context["form"] = form

    try:
        data = LeaveRequestCreate.model_validate(form)
        await LeaveService.create_leave_request(db, data)
    except PydanticValidationError as exc:
        context["errors"] = field_errors_from(exc)
        return render(request, "dashboard.html", context, status_code=422)
    except AppException as exc:
        context["errors"] = exc.errors or {}
        context["toast"] = toast("Error", exc.detail, "destructive")
        return render(request, "dashboard.html", context, status_code=exc.status_code)

    return RedirectResponse(f"/dashboard?tab={TAB_LIST}&notice=submitted", status_code=303)


# ── GET/POST /dashboard/requests/{id}/delete — confirmation ────────

@router.get("/dashboard/requests/{request_id}/delete")
async def confirm_delete(
    request: Request,
    request_id: uuid.UUID,
    session: Optional[UserSession] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db),
):
    if session is None:
        return _to_signin()

    try:
        leave_request = await LeaveService.get_leave_request(db, request_id)
    except AppException as exc:
        logger.info("Delete confirmation unavailable for %s: %s", request_id, exc.detail)
        return RedirectResponse(f"/dashboard?tab={TAB_LIST}&notice=delete_failed", status_code=303)

    return render(
        request, "delete_confirm.html",
        {"user": session.user, "leave_request": leave_request},
    )


@router.post("/dashboard/requests/{request_id}/delete")
async def delete_request(
    request: Request,
    request_id: uuid.UUID,
    session: Optional[UserSession] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db),
):
    if session is None:
        return _to_signin()

    try:
        await LeaveService.delete_leave_request(db, request_id)
    except AppException as exc:
        logger.info("Delete of %s failed: %s", request_id, exc.detail)
        return RedirectResponse(f"/dashboard?tab={TAB_LIST}&notice=delete_failed", status_code=303)

    return RedirectResponse(f"/dashboard?tab={TAB_LIST}&notice=deleted", status_code=303)
