from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

# A cycle opens on the 5th at 00:00:01 UTC and closes on the 4th of the
# following month at 23:59:59 UTC, leaving a 2 second gap between cycles.
CYCLE_START_DAY = 5
CYCLE_END_DAY = 4


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeWindow bounds must be timezone-aware")
        if self.start >= self.end:
            raise ValueError(f"TimeWindow start {self.start} is not before end {self.end}")

    @property
    def start_ms(self) -> int:
        return int(self.start.timestamp()) * 1000

    @property
    def end_ms(self) -> int:
        return int(self.end.timestamp()) * 1000

    @property
    def start_date(self) -> str:
        return ymd(self.start)

    @property
    def end_date(self) -> str:
        return ymd(self.end)

    def describe(self) -> Dict[str, str]:
        return {
            "startISO": iso(self.start),
            "endISO": iso(self.end),
            "startYMD": self.start_date,
            "endYMD": self.end_date,
        }


def _shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    total = year * 12 + (month - 1) + offset
    shifted_year, shifted_month = divmod(total, 12)
    return shifted_year, shifted_month + 1


def period_bounds(offset: int = 0, now: Optional[datetime] = None) -> TimeWindow:
    """
    Return the UTC bounds of a billing cycle.

    offset = 0 current cycle, -1 previous cycle, +1 next cycle.
    Before the 5th the current cycle is still the one that opened last month.
    """
    now = datetime.now(timezone.utc) if now is None else now.astimezone(timezone.utc)

    anchor_year, anchor_month = now.year, now.month
    if now.day < CYCLE_START_DAY:
        anchor_year, anchor_month = _shift_month(anchor_year, anchor_month, -1)

    start_year, start_month = _shift_month(anchor_year, anchor_month, offset)
    end_year, end_month = _shift_month(start_year, start_month, 1)

    start = datetime(start_year, start_month, CYCLE_START_DAY, 0, 0, 1, tzinfo=timezone.utc)
    end = datetime(end_year, end_month, CYCLE_END_DAY, 23, 59, 59, tzinfo=timezone.utc)
    return TimeWindow(start=start, end=end)


def ymd(instant: datetime) -> str:
    """Calendar date of a UTC instant; the time of day is dropped."""
    return instant.astimezone(timezone.utc).strftime("%Y-%m-%d")


def iso(instant: datetime) -> str:
    return instant.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")
