from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

END_OF_DAY = time(23, 59, 59, 999000)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


@dataclass(frozen=True)
class Clock:
    """Source of "now" for the attendance engine.

    With ``tz`` unset, times are naive host-local (``datetime.now()``).
    With a zone, times are aware and "today" is the calendar day in that zone.
    """

    tz: Optional[tzinfo] = None

    @classmethod
    def from_name(cls, name: Optional[str]) -> "Clock":
        return cls(ZoneInfo(name) if name else None)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self, now: Optional[datetime] = None) -> date:
        return self.localize(now or self.now()).date()

    def localize(self, value: datetime) -> datetime:
        if self.tz is None or value.tzinfo is None:
            return value
        return value.astimezone(self.tz)

    def end_of_previous_day(self, now: Optional[datetime] = None) -> datetime:
        current = self.localize(now or self.now())
        yesterday = current.date() - timedelta(days=1)
        return datetime.combine(yesterday, END_OF_DAY, tzinfo=current.tzinfo)


@dataclass(frozen=True)
class FixedClock(Clock):
    """Clock pinned to one instant."""

    fixed: Optional[datetime] = None

    def now(self) -> datetime:
        if self.fixed is None:
            return super().now()
        return self.fixed
