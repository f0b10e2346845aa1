"""Jinja2 environment shared by the page routes."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from leave_portal.common.constants import DISPLAY_DATE_FORMAT, LeaveStatus

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# Redirect-carried toasts: ?notice=<key> → (title, description, variant)
NOTICES: dict[str, tuple[str, str, str]] = {
    "submitted": (
        "Leave request submitted",
        "The leave request has been successfully submitted.",
        "default",
    ),
    "deleted": ("Success", "Leave request deleted successfully.", "default"),
    "delete_failed": (
        "Error",
        "Failed to delete leave request. Please try again.",
        "destructive",
    ),
}

_STATUS_CLASSES = {
    LeaveStatus.approved: "badge-approved",
    LeaveStatus.rejected: "badge-rejected",
}


def display_date(value: Optional[date]) -> str:
    return value.strftime(DISPLAY_DATE_FORMAT) if value else ""


def status_class(status: LeaveStatus) -> str:
    return _STATUS_CLASSES.get(status, "badge-pending")


templates.env.filters["display_date"] = display_date
templates.env.filters["status_class"] = status_class


def toast(title: str, description: str, variant: str = "default") -> dict[str, str]:
    return {"title": title, "description": description, "variant": variant}


def notice_toast(key: Optional[str]) -> Optional[dict[str, str]]:
    """Toast for a ``?notice=`` key, or ``None`` for unknown keys."""
    if key not in NOTICES:
        return None
    return toast(*NOTICES[key])


def render(
    request: Request,
    name: str,
    context: Optional[dict[str, Any]] = None,
    *,
    status_code: int = 200,
):
    return templates.TemplateResponse(
        request, name, context or {}, status_code=status_code,
    )
