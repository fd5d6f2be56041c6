from datetime import date
from typing import Optional

from models.schema import ScheduleConfig, ScheduleType, ShiftOverride
from models.verdict import DayTarget
from utils.dates import time_to_minutes, weekday_code


def resolve_target(day: date, schedule: ScheduleConfig, override: Optional[ShiftOverride] = None) -> DayTarget:
    """
    Expected start and duration for a day.

    An override always makes the day a work day. Without one the weekly
    pattern decides; a fixed schedule missing either end of its window is
    treated as flexible.
    """
    if override is not None:
        return DayTarget(
            is_work_day=True,
            target_start=override.start_time,
            target_minutes=override.duration_minutes,
        )

    if weekday_code(day) not in schedule.work_days:
        return DayTarget(is_work_day=False)

    if (schedule.type == ScheduleType.FIXED
            and schedule.fixed_start is not None and schedule.fixed_end is not None):
        # Gross interval, pauses are not subtracted
        minutes = time_to_minutes(schedule.fixed_end) - time_to_minutes(schedule.fixed_start)
        return DayTarget(is_work_day=True, target_start=schedule.fixed_start, target_minutes=minutes)

    return DayTarget(is_work_day=True, target_minutes=schedule.fallback_daily_minutes)
