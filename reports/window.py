"""Reporting windows expressed as ``yyyy-MM-dd HH:mm:ss`` strings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from reports.errors import ValidationError

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_date(value: Optional[str], field: str = "date") -> Optional[datetime]:
    if value is None:
        return None
    candidate = value.strip()
    try:
        return datetime.strptime(candidate, DATE_FORMAT)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid {field} {value!r}; expected format yyyy-MM-dd HH:mm:ss.",
            details=str(exc),
        ) from exc


def format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)


@dataclass(frozen=True)
class ReportWindow:
    """Inclusive time bounds of a report, keeping the caller's raw strings."""

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def parse(cls, start_date: Optional[str], end_date: Optional[str]) -> "ReportWindow":
        start = parse_date(start_date, "start_date")
        end = parse_date(end_date, "end_date")
        if start is not None and end is not None and end < start:
            raise ValidationError(
                "end_date must not precede start_date.",
                details=f"start_date={start_date!r} end_date={end_date!r}",
            )
        return cls(start_date=start_date, end_date=end_date, start=start, end=end)

    def contains(self, timestamp: datetime) -> bool:
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp > self.end:
            return False
        return True
