from datetime import date, datetime, time
from typing import Optional, Sequence

from engine.duration import compute_worked_minutes, first_punch, has_punch, whole_minutes
from engine.target import resolve_target
from models.schema import Justification, JustificationStatus, Punch, PunchKind, ScheduleConfig, ShiftOverride
from models.verdict import (
    AbsentDay,
    DayVerdict,
    FutureDay,
    InProgressDay,
    IncompleteDay,
    JustifiedDay,
    LateDay,
    NotYetJoinedDay,
    OffDay,
    OnTrackDay,
    PendingReviewDay,
)


def lateness_minutes(first_in: datetime, target_start: time) -> int:
    scheduled = datetime.combine(first_in.date(), target_start)
    return int((first_in - scheduled).total_seconds() / 60)


def evaluate_day(
    day: date,
    schedule: ScheduleConfig,
    punches: Sequence[Punch],
    *,
    as_of: datetime,
    override: Optional[ShiftOverride] = None,
    justification: Optional[Justification] = None,
) -> DayVerdict:
    """
    Classify one day into exactly one attendance status.

    ``punches`` are the punches recorded on ``day``; ``as_of`` is the instant
    the evaluation is made for and decides whether the day is past, today or
    in the future. An open interval is only counted up to ``as_of`` for today.
    """
    if day < schedule.joined_on:
        return NotYetJoinedDay(date=day)

    target = resolve_target(day, schedule, override)
    if not target.is_work_day:
        return OffDay(date=day)

    if justification is not None and justification.status == JustificationStatus.APPROVED:
        return JustifiedDay(date=day, justification=justification)

    today = as_of.date()
    is_today = day == today
    is_past = day < today

    if not is_past and not is_today:
        return FutureDay(
            date=day,
            label=target.window_label(),
            target_start=target.target_start,
            target_minutes=target.target_minutes,
        )

    worked = compute_worked_minutes(punches, as_of if is_today else None)
    first_in = first_punch(punches, PunchKind.IN)
    has_exit = has_punch(punches, PunchKind.OUT)
    tolerance = schedule.tolerance_minutes

    is_absent = not punches and is_past

    late_minutes = 0
    is_late = False
    if first_in is not None and target.target_start is not None:
        late_minutes = lateness_minutes(first_in.timestamp, target.target_start)
        is_late = late_minutes > tolerance

    deficit = target.target_minutes - worked
    is_incomplete = worked < target.target_minutes - tolerance

    figures = dict(
        date=day,
        worked_minutes=whole_minutes(worked),
        target_start=target.target_start,
        target_minutes=target.target_minutes,
        late_minutes=max(late_minutes, 0),
        deficit_minutes=max(whole_minutes(deficit), 0),
        is_late=is_late,
        is_incomplete=is_incomplete,
        first_in=first_in.timestamp if first_in is not None else None,
        has_exit=has_exit,
        justification=justification,
    )

    if justification is not None and justification.status == JustificationStatus.PENDING:
        return PendingReviewDay(**figures)

    # A rejected justification is kept for display but excuses nothing
    if is_absent:
        return AbsentDay(
            date=day,
            target_start=target.target_start,
            target_minutes=target.target_minutes,
            justification=justification,
        )
    if is_today and is_incomplete and not has_exit:
        # Still open: a shortfall is not judged yet, lateness already is
        return LateDay(**figures) if is_late else InProgressDay(**figures)
    if is_incomplete:
        return IncompleteDay(**figures)
    if is_late:
        return LateDay(**figures)
    return OnTrackDay(**figures)
