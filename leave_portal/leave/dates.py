"""Free-form date entry → ISO calendar dates.

Staff type dates the way they write them on paper: day first, month second,
year last, separated by ``-``, ``/`` or ``.`` (``25-05-2025``, ``1/2/25``,
``25.5.2025``).  ``normalize_date`` rewrites those into ``YYYY-MM-DD``;
anything it cannot read is handed back untouched so that
``parse_leave_date`` reports it as a validation error.
"""

from __future__ import annotations

import re
from datetime import date

from leave_portal.common.constants import INPUT_DATE_HINT
from leave_portal.common.exceptions import ValidationException

_NON_DIGITS = re.compile(r"\D+")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_FIELD_LABELS = {
    "start_date": "start date",
    "end_date": "end date",
}


def normalize_date(value: str) -> str:
    """Return *value* as ``YYYY-MM-DD``, or unchanged if it is not D-M-Y."""
    parts = [p for p in _NON_DIGITS.split(value) if p]
    if len(parts) != 3:
        return value

    day, month, year = parts[0].zfill(2), parts[1].zfill(2), parts[2]
    if len(year) == 2:
        year = f"20{year}"

    if 1 <= int(day) <= 31 and 1 <= int(month) <= 12:
        return f"{year}-{month}-{day}"
    return value


def parse_leave_date(value: str, field: str) -> date:
    """Normalize and parse *value*; raise a field-scoped 422 on failure."""
    normalized = normalize_date(value.strip())
    try:
        if not _ISO_DATE.match(normalized):
            raise ValueError(normalized)
        return date.fromisoformat(normalized)
    except ValueError:
        label = _FIELD_LABELS.get(field, field.replace("_", " "))
        raise ValidationException(
            {field: [f"Invalid {label} format. Please use {INPUT_DATE_HINT} format."]}
        )


def check_date_order(start: date, end: date) -> None:
    """Reject a range whose end precedes its start."""
    if start > end:
        raise ValidationException(
            {"end_date": ["End date cannot be before start date."]}
        )
