import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, List, Literal, Optional, get_args

from models.schema import WEEKDAY_CODES

OverrideMode = Literal["day", "week", "month"]
OVERRIDE_MODES = get_args(OverrideMode)


def weekday_code(day: date) -> str:
    # date.weekday() is Monday-based, the codes are Sunday-based
    return WEEKDAY_CODES[(day.weekday() + 1) % 7]


def each_day(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def time_to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def day_bounds(start: date, end: date):
    """Inclusive timestamp bounds covering every instant of [start, end]."""
    return datetime.combine(start, time.min), datetime.combine(end, time.max)


def expand_dates(reference: date, mode: str) -> List[date]:
    """
    Dates an override applies to for a reference date.

    ``day`` is the reference itself, ``week`` the Sunday-to-Saturday week
    containing it and ``month`` its whole calendar month.
    """
    if mode == "day":
        return [reference]
    if mode == "week":
        sunday = reference - timedelta(days=(reference.weekday() + 1) % 7)
        return list(each_day(sunday, sunday + timedelta(days=6)))
    if mode == "month":
        last = calendar.monthrange(reference.year, reference.month)[1]
        return list(each_day(reference.replace(day=1), reference.replace(day=last)))
    raise ValueError(f"Unknown override mode: {mode}, expected one of {OVERRIDE_MODES}")


def month_bounds(year: int, month: int):
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def format_duration(minutes: float) -> str:
    total = int(abs(minutes))
    return f"{total // 60}h {total % 60:02d}m"


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are converted to naive local time, the form punches are stored in."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
