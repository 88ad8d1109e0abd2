"""Month grid used by the calendar date picker."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

DAYS_OF_WEEK = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True)
class CalendarDay:
    date: date
    selected: bool = False
    today: bool = False
    disabled: bool = False
    has_events: bool = False

    @property
    def label(self) -> str:
        """Accessible label, e.g. ``Saturday, December 20, 2025``."""

        return f"{self.date:%A}, {self.date:%B} {self.date.day}, {self.date.year}"


@dataclass(frozen=True)
class CalendarMonth:
    year: int
    month: int
    weeks: list[list[CalendarDay | None]] = field(default_factory=list)

    @property
    def week_days(self) -> tuple[str, ...]:
        return DAYS_OF_WEEK

    @property
    def title(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def previous_key(self) -> str:
        year, month = (self.year - 1, 12) if self.month == 1 else (self.year, self.month - 1)
        return f"{year:04d}-{month:02d}"

    @property
    def next_key(self) -> str:
        year, month = (self.year + 1, 1) if self.month == 12 else (self.year, self.month + 1)
        return f"{year:04d}-{month:02d}"


def parse_month(raw: str | None, default: date) -> date:
    """Return the first day of the ``YYYY-MM`` month in ``raw``, or of ``default``."""

    if raw:
        try:
            year, month = (int(part) for part in raw.split("-", 1))
            return date(year, month, 1)
        except ValueError:
            pass
    return default.replace(day=1)


def parse_day(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def build_month(
    view: date,
    *,
    today: date,
    selected: date | None = None,
    min_date: date | None = None,
    event_dates: Iterable[date] = (),
) -> CalendarMonth:
    """Lay out the month containing ``view`` as Sunday-first weeks.

    Slots outside the month are ``None``. Days before ``min_date`` are
    disabled.
    """

    marked = set(event_dates)
    weeks = []
    for week in calendar.Calendar(firstweekday=6).monthdayscalendar(view.year, view.month):
        row: list[CalendarDay | None] = []
        for day_number in week:
            if day_number == 0:
                row.append(None)
                continue
            day = date(view.year, view.month, day_number)
            row.append(
                CalendarDay(
                    date=day,
                    selected=day == selected,
                    today=day == today,
                    disabled=bool(min_date and day < min_date),
                    has_events=day in marked,
                )
            )
        weeks.append(row)
    return CalendarMonth(year=view.year, month=view.month, weeks=weeks)
