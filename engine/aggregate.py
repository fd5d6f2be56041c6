import logging
import threading
from collections import defaultdict
from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from engine.day import evaluate_day
from models.schema import Employee, Justification, Punch, ScheduleConfig, ShiftOverride
from models.verdict import (
    REALIZED_STATUSES,
    DayStatus,
    DayVerdict,
    Inconsistency,
    InconsistencyKind,
    RangeSummary,
)
from utils.dates import each_day, format_duration

logger = logging.getLogger(__name__)


class RangeMode(str, Enum):
    # Personal calendar: upcoming days are shown as FUTURE
    CALENDAR = "calendar"
    # Inconsistency report: only days up to as_of are evaluated
    REPORT = "report"


class EmployeeBatch(BaseModel):
    """One employee with the records fetched for the evaluated range."""

    employee: Employee
    punches: List[Punch] = Field(default_factory=list)
    overrides: List[ShiftOverride] = Field(default_factory=list)
    justifications: List[Justification] = Field(default_factory=list)


def punches_by_day(punches: Iterable[Punch]) -> Dict[date, List[Punch]]:
    buckets = defaultdict(list)
    for punch in sorted(punches, key=lambda p: p.timestamp):
        buckets[punch.timestamp.date()].append(punch)
    return buckets


def overrides_by_day(overrides: Iterable[ShiftOverride]) -> Dict[date, ShiftOverride]:
    return {o.date: o for o in overrides}


def justifications_by_day(justifications: Iterable[Justification]) -> Dict[date, Justification]:
    index = {}
    for justification in justifications:
        existing = index.get(justification.date)
        if existing is not None:
            logger.error(
                f"Duplicate justification for employee_id: {justification.employee_id} on {justification.date} "
                f"(keeping {existing.id}, ignoring {justification.id})"
            )
            continue
        index[justification.date] = justification
    return index


def evaluate_range(
    schedule: ScheduleConfig,
    punches: Iterable[Punch],
    start: date,
    end: date,
    *,
    as_of: datetime,
    overrides: Iterable[ShiftOverride] = (),
    justifications: Iterable[Justification] = (),
    mode: RangeMode = RangeMode.CALENDAR,
) -> List[DayVerdict]:
    day_punches = punches_by_day(punches)
    day_overrides = overrides_by_day(overrides)
    day_justifications = justifications_by_day(justifications)
    today = as_of.date()

    verdicts = []
    for day in each_day(start, end):
        if mode == RangeMode.REPORT and day > today:
            continue
        verdicts.append(evaluate_day(
            day,
            schedule,
            day_punches.get(day, []),
            as_of=as_of,
            override=day_overrides.get(day),
            justification=day_justifications.get(day),
        ))
    return verdicts


def verdict_inconsistencies(employee: Employee, verdict: DayVerdict) -> List[Inconsistency]:
    common = dict(employee_id=employee.id, employee_name=employee.full_name, date=verdict.date)

    if verdict.status == DayStatus.ABSENT:
        return [Inconsistency(kind=InconsistencyKind.ABSENT, details="No punches on a work day.", **common)]

    if verdict.status not in (DayStatus.LATE, DayStatus.INCOMPLETE):
        return []

    issues = []
    if verdict.is_late:
        details = f"Arrived at {verdict.first_in:%H:%M} ({format_duration(verdict.late_minutes)} late)"
        issues.append(Inconsistency(
            kind=InconsistencyKind.LATE, details=details, minutes=verdict.late_minutes, **common
        ))
    if verdict.status == DayStatus.INCOMPLETE:
        if verdict.has_exit:
            details = (f"Worked {format_duration(verdict.worked_minutes)} "
                       f"(target {format_duration(verdict.target_minutes)})")
        else:
            details = "Shift not closed (no exit punch)."
        issues.append(Inconsistency(
            kind=InconsistencyKind.INCOMPLETE, details=details, minutes=verdict.deficit_minutes, **common
        ))
    return issues


def build_inconsistency_report(
    batches: Sequence[EmployeeBatch],
    start: date,
    end: date,
    *,
    as_of: datetime,
    should_stop: Optional[threading.Event] = None,
) -> List[Inconsistency]:
    """
    Realized attendance problems of many employees, most recent first.

    Every employee is evaluated on its own records only. ``should_stop`` is
    checked between employees; the issues gathered so far are returned.
    """
    issues = []
    for batch in batches:
        if should_stop is not None and should_stop.is_set():
            logger.info("Inconsistency report cancelled")
            break
        verdicts = evaluate_range(
            batch.employee.schedule,
            batch.punches,
            start,
            end,
            as_of=as_of,
            overrides=batch.overrides,
            justifications=batch.justifications,
            mode=RangeMode.REPORT,
        )
        for verdict in verdicts:
            issues.extend(verdict_inconsistencies(batch.employee, verdict))

    issues.sort(key=lambda issue: issue.date, reverse=True)
    return issues


def summarize_range(verdicts: Iterable[DayVerdict]) -> RangeSummary:
    summary = RangeSummary()
    for verdict in verdicts:
        summary.days += 1
        summary.counts[verdict.status] = summary.counts.get(verdict.status, 0) + 1
        if verdict.status not in REALIZED_STATUSES:
            continue
        summary.target_minutes += verdict.target_minutes
        if verdict.status != DayStatus.ABSENT:
            summary.worked_minutes += verdict.worked_minutes
    summary.balance_minutes = summary.worked_minutes - summary.target_minutes
    return summary
