"""Enums and constants for the leave portal."""

from __future__ import annotations

import enum


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    annual = "Annual"
    sick = "Sick"
    emergency = "Emergency"


class LeaveStatus(str, enum.Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


# ── Misc constants ──────────────────────────────────────────────────

LEAVE_REQUESTS_TABLE = "leave_requests"

# Accepted shape of a user-typed date: D-M-YY … DD-MM-YYYY, with - / or .
INPUT_DATE_PATTERN = r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})$"
INPUT_DATE_HINT = "DD-MM-YYYY"

DISPLAY_DATE_FORMAT = "%d/%m/%Y"        # en-GB: 25/05/2025
