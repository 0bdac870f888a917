# services/clock.py
"""
Date helpers shared by the lease and payment services.

Timestamps are derived here and passed explicitly to the rows that need
them, instead of being filled in by model save hooks.
"""
from datetime import date, datetime, timezone
from typing import Tuple

# Every month has a 28th
MAX_RENT_DUE_DAY = 28


def utcnow() -> datetime:
     """Naive UTC timestamp, matching the DateTime columns."""
     return datetime.now(timezone.utc).replace(tzinfo=None)


def period_of(day: date) -> Tuple[int, int]:
     """(year, month) of the calendar month containing ``day``."""
     return day.year, day.month


def month_bounds(year: int, month: int) -> Tuple[date, date]:
     """First day of the month and first day of the following month."""
     first_day = date(year, month, 1)
     if month == 12:
          return first_day, date(year + 1, 1, 1)
     return first_day, date(year, month + 1, 1)


def due_date_for(year: int, month: int, rent_due_day: int) -> date:
     """Rent due date of a period. rent_due_day is capped at 28 so it always exists."""
     return date(year, month, min(rent_due_day, MAX_RENT_DUE_DAY))


def add_note(existing, line: str, on: date) -> str:
     """Append a dated line to a free-text notes field."""
     entry = f"[{on.isoformat()}] {line}"
     return f"{existing}\n{entry}" if existing else entry
