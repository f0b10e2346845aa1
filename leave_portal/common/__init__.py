"""Common module — shared utilities for the leave portal."""

from leave_portal.common.constants import (
    DISPLAY_DATE_FORMAT,
    INPUT_DATE_HINT,
    INPUT_DATE_PATTERN,
    LEAVE_REQUESTS_TABLE,
    LeaveStatus,
    LeaveType,
)
from leave_portal.common.exceptions import (
    AppException,
    ConflictError,
    DuplicateLeaveRequestError,
    ForbiddenException,
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
    field_errors_from,
    register_exception_handlers,
)
from leave_portal.common.filters import apply_filters, apply_sorting
from leave_portal.common.rate_limit import SIGN_IN_LIMIT, limiter

__all__ = [
    # Constants / Enums
    "LeaveStatus",
    "LeaveType",
    "LEAVE_REQUESTS_TABLE",
    "INPUT_DATE_PATTERN",
    "INPUT_DATE_HINT",
    "DISPLAY_DATE_FORMAT",
    # Exceptions
    "AppException",
    "ConflictError",
    "DuplicateLeaveRequestError",
    "ForbiddenException",
    "NotFoundException",
    "ServiceUnavailableException",
    "ValidationException",
    "field_errors_from",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_sorting",
    # Rate limiting
    "SIGN_IN_LIMIT",
    "limiter",
]
