"""In-memory filtering of the leave-request list."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, Sequence, TypeVar


class _Filterable(Protocol):
    employee_name: str
    start_date: date
    end_date: date


T = TypeVar("T", bound=_Filterable)


@dataclass
class LeaveRequestFilter:
    """Name search plus an inclusive start-date floor and end-date ceiling.

    ``set_start_date`` / ``set_end_date`` keep the two bounds consistent:
    picking a floor past the ceiling drops the ceiling, and vice versa.
    """

    search: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return bool(self.search or self.start_date or self.end_date)

    def set_start_date(self, value: Optional[date]) -> LeaveRequestFilter:
        self.start_date = value
        if value and self.end_date and value > self.end_date:
            self.end_date = None
        return self

    def set_end_date(self, value: Optional[date]) -> LeaveRequestFilter:
        self.end_date = value
        if value and self.start_date and value < self.start_date:
            self.start_date = None
        return self

    def clear(self) -> LeaveRequestFilter:
        self.search = ""
        self.start_date = None
        self.end_date = None
        return self

    def apply(self, requests: Sequence[T]) -> list[T]:
        """Return the requests matching every active filter, order preserved."""
        filtered = list(requests)

        if self.search:
            needle = self.search.lower()
            filtered = [r for r in filtered if needle in r.employee_name.lower()]

        if self.start_date:
            filtered = [r for r in filtered if r.start_date >= self.start_date]

        if self.end_date:
            filtered = [r for r in filtered if r.end_date <= self.end_date]

        return filtered
