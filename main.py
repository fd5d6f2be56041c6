import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

import config
from engine.aggregate import (
    EmployeeBatch,
    RangeMode,
    build_inconsistency_report,
    evaluate_range,
    justifications_by_day,
    summarize_range,
)
from engine.day import evaluate_day, lateness_minutes
from engine.duration import compute_worked_minutes
from engine.target import resolve_target
from models.schema import (
    Employee,
    Justification,
    JustificationStatus,
    Punch,
    PunchKind,
    PunchResult,
    ScheduleConfig,
    ScheduleType,
    ShiftOverride,
)
from models.verdict import DayVerdict, Inconsistency, InconsistencyKind
from utils.dates import OverrideMode, expand_dates, month_bounds
from utils.errors import EmployeeNotFoundError, InvalidPunchError, ScheduleConfigError
from utils.helper import (
    fetch_justifications,
    fetch_overrides,
    fetch_punches,
    fetch_schedule,
    get_employee,
    insert_punch,
    list_company_employees,
    set_justification_status,
    submit_justification,
    update_schedule,
    upsert_override,
)

# Next punch kinds allowed after the last punch of the day
NEXT_PUNCH_KINDS = {
    None: {PunchKind.IN},
    PunchKind.IN: {PunchKind.PAUSE, PunchKind.OUT},
    PunchKind.RESUME: {PunchKind.PAUSE, PunchKind.OUT},
    PunchKind.PAUSE: {PunchKind.RESUME},
    PunchKind.OUT: set(),
}

LATE_WARNING = "LATE"
INCOMPLETE_WARNING = "INCOMPLETE"


def _require_employee(employee_id: str, company_id: str) -> Employee:
    employee = get_employee(employee_id, company_id)
    if not employee or not employee.is_active:
        logging.error(f"Unknown or inactive employee_id: {employee_id} in company {company_id}")
        raise EmployeeNotFoundError(f"Unknown or inactive employee: {employee_id}")
    return employee


def _override_for(employee_id: str, company_id: str, day: date) -> Optional[ShiftOverride]:
    overrides = fetch_overrides(employee_id, company_id, day, day)
    return overrides[0] if overrides else None


def process_punch(employee_id: str, company_id: str, kind: PunchKind, timestamp: datetime) -> PunchResult:
    _require_employee(employee_id, company_id)
    day = timestamp.date()
    todays_punches = fetch_punches(employee_id, company_id, day, day)

    last_kind = todays_punches[-1].kind if todays_punches else None
    if last_kind is not None and todays_punches[-1].timestamp > timestamp:
        raise InvalidPunchError("Punch is older than the last recorded punch")
    if kind not in NEXT_PUNCH_KINDS[last_kind]:
        if last_kind == PunchKind.OUT:
            message = "The working day is already closed, only one shift per day is allowed"
        else:
            message = f"Cannot register {kind.value} after {last_kind.value if last_kind else 'no punch'}"
        logging.warning(f"Rejected {kind.value} punch for employee_id: {employee_id}: {message}")
        raise InvalidPunchError(message)

    punch = Punch(employee_id=employee_id, company_id=company_id, timestamp=timestamp, kind=kind)
    schedule = fetch_schedule(employee_id, company_id)
    target = resolve_target(day, schedule, _override_for(employee_id, company_id, day))

    warnings = []
    if target.is_work_day and kind == PunchKind.IN and last_kind is None and target.target_start is not None:
        if lateness_minutes(timestamp, target.target_start) > schedule.tolerance_minutes:
            warnings.append(LATE_WARNING)
            logging.warning(f"Late entry for employee_id: {employee_id} at {timestamp:%H:%M}")
    if target.is_work_day and kind == PunchKind.OUT:
        worked = compute_worked_minutes(todays_punches + [punch])
        if worked < target.target_minutes - schedule.tolerance_minutes:
            warnings.append(INCOMPLETE_WARNING)
            logging.warning(f"Incomplete shift for employee_id: {employee_id} ({int(worked)} min worked)")

    insert_punch(punch)
    return PunchResult(punch=punch, warnings=warnings)


def get_day_verdict(employee_id: str, company_id: str, day: date, as_of: datetime) -> DayVerdict:
    _require_employee(employee_id, company_id)
    justifications = justifications_by_day(fetch_justifications(employee_id, company_id, day, day))
    return evaluate_day(
        day,
        fetch_schedule(employee_id, company_id),
        fetch_punches(employee_id, company_id, day, day),
        as_of=as_of,
        override=_override_for(employee_id, company_id, day),
        justification=justifications.get(day),
    )


def get_month_calendar(employee_id: str, company_id: str, year: int, month: int, as_of: datetime) -> Dict:
    _require_employee(employee_id, company_id)
    start, end = month_bounds(year, month)
    verdicts = evaluate_range(
        fetch_schedule(employee_id, company_id),
        fetch_punches(employee_id, company_id, start, end),
        start,
        end,
        as_of=as_of,
        overrides=fetch_overrides(employee_id, company_id, start, end),
        justifications=fetch_justifications(employee_id, company_id, start, end),
        mode=RangeMode.CALENDAR,
    )
    return {"days": verdicts, "summary": summarize_range(verdicts)}


def get_inconsistency_report(
    company_id: str,
    as_of: datetime,
    days: int = config.REPORT_WINDOW_DAYS,
    kind: Optional[InconsistencyKind] = None,
) -> List[Inconsistency]:
    end = as_of.date()
    start = end - timedelta(days=days)
    batches = [
        EmployeeBatch(
            employee=emp,
            punches=fetch_punches(emp.id, company_id, start, end),
            overrides=fetch_overrides(emp.id, company_id, start, end),
            justifications=fetch_justifications(emp.id, company_id, start, end),
        )
        for emp in list_company_employees(company_id)
    ]
    logging.info(f"Building inconsistency report for company {company_id} over {len(batches)} employees")
    issues = build_inconsistency_report(batches, start, end, as_of=as_of)
    if kind is not None:
        issues = [issue for issue in issues if issue.kind == kind]
    return issues


def save_shift_overrides(
    employee_id: str,
    company_id: str,
    reference: date,
    mode: OverrideMode,
    start_time: time,
    duration_minutes: int,
) -> List[ShiftOverride]:
    _require_employee(employee_id, company_id)

    overrides = []
    for day in expand_dates(reference, mode):
        override = ShiftOverride(
            employee_id=employee_id,
            company_id=company_id,
            date=day,
            start_time=start_time,
            duration_minutes=duration_minutes,
        )
        upsert_override(override)
        overrides.append(override)
    logging.info(f"Shift applied to {len(overrides)} days for employee_id: {employee_id}")
    return overrides


def save_schedule(employee_id: str, company_id: str, schedule: ScheduleConfig) -> Employee:
    _require_employee(employee_id, company_id)
    if schedule.type == ScheduleType.FIXED:
        if schedule.fixed_start is None or schedule.fixed_end is None:
            raise ScheduleConfigError("A fixed schedule needs both a start and an end time")
        if schedule.fixed_end <= schedule.fixed_start:
            raise ScheduleConfigError("A fixed schedule must end after it starts")
    return update_schedule(employee_id, company_id, schedule)


def submit_day_justification(
    employee_id: str,
    company_id: str,
    day: date,
    reason: str,
    attachment_ref: Optional[str] = None,
) -> Justification:
    _require_employee(employee_id, company_id)
    justification = submit_justification(employee_id, company_id, day, reason, attachment_ref)
    logging.info(f"Justification submitted by employee_id: {employee_id} for {day}")
    return justification


def review_justification(
    justification_id: str,
    status: JustificationStatus,
    admin_notes: Optional[str] = None,
) -> Justification:
    return set_justification_status(justification_id, status, admin_notes)
