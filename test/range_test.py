import logging
import threading
from datetime import date, datetime, time, timedelta

from engine.aggregate import (
    EmployeeBatch,
    RangeMode,
    build_inconsistency_report,
    evaluate_range,
    summarize_range,
)
from models.schema import (
    Employee,
    Justification,
    JustificationStatus,
    Punch,
    PunchKind,
    ScheduleConfig,
    ScheduleType,
)
from models.verdict import DayStatus, InconsistencyKind

MONDAY = date(2025, 7, 21)
TUESDAY = date(2025, 7, 22)
WEDNESDAY = date(2025, 7, 23)
WEDNESDAY_MORNING = datetime(2025, 7, 23, 9, 0)

FIXED = ScheduleConfig(
    type=ScheduleType.FIXED,
    work_days={"mon", "tue", "wed", "thu", "fri"},
    fixed_start=time(8, 0),
    fixed_end=time(17, 0),
    tolerance_minutes=10,
    joined_on=date(2025, 7, 2),
)
FLEXIBLE = ScheduleConfig(
    type=ScheduleType.FLEXIBLE,
    fallback_daily_minutes=480,
    joined_on=date(2025, 7, 1),
)


def punch(employee_id, day, kind, hour, minute=0):
    return Punch(
        employee_id=employee_id,
        company_id="acme",
        timestamp=datetime.combine(day, time(hour, minute)),
        kind=kind,
    )


def justification(justification_id, day, status):
    return Justification(
        id=justification_id,
        employee_id="emp-a",
        company_id="acme",
        date=day,
        reason="Traffic",
        status=status,
        created_at=datetime(2025, 7, 22, 18, 0),
    )


def batch_a():
    return EmployeeBatch(
        employee=Employee(id="emp-a", company_id="acme", full_name="Ana", schedule=FIXED),
        punches=[
            punch("emp-a", MONDAY, PunchKind.IN, 8),
            punch("emp-a", MONDAY, PunchKind.OUT, 17),
            punch("emp-a", TUESDAY, PunchKind.IN, 8, 30),
            punch("emp-a", TUESDAY, PunchKind.OUT, 15),
            punch("emp-a", WEDNESDAY, PunchKind.IN, 8),
        ],
    )


def batch_b():
    return EmployeeBatch(
        employee=Employee(id="emp-b", company_id="acme", full_name="Bruno", schedule=FLEXIBLE),
        punches=[
            punch("emp-b", TUESDAY, PunchKind.IN, 9),
            punch("emp-b", TUESDAY, PunchKind.OUT, 17),
        ],
    )


def test_calendar_mode_covers_every_day_in_order():
    verdicts = evaluate_range(
        FIXED, batch_a().punches, date(2025, 7, 1), date(2025, 7, 31), as_of=WEDNESDAY_MORNING
    )

    assert len(verdicts) == 31
    assert [v.date for v in verdicts] == sorted(v.date for v in verdicts)
    assert verdicts[0].status == DayStatus.NOT_YET_JOINED
    assert verdicts[MONDAY.day - 1].status == DayStatus.ON_TRACK
    assert verdicts[TUESDAY.day - 1].status == DayStatus.INCOMPLETE
    assert verdicts[WEDNESDAY.day - 1].status == DayStatus.IN_PROGRESS
    assert verdicts[24 - 1].status == DayStatus.FUTURE
    assert verdicts[26 - 1].status == DayStatus.OFF


def test_report_mode_omits_days_after_as_of():
    verdicts = evaluate_range(
        FIXED, batch_a().punches, MONDAY, date(2025, 7, 27), as_of=WEDNESDAY_MORNING, mode=RangeMode.REPORT
    )

    assert [v.date for v in verdicts] == [MONDAY, TUESDAY, WEDNESDAY]
    assert all(v.status != DayStatus.FUTURE for v in verdicts)


def test_justifications_are_matched_by_date():
    verdicts = evaluate_range(
        FIXED,
        batch_a().punches,
        MONDAY,
        TUESDAY,
        as_of=WEDNESDAY_MORNING,
        justifications=[justification("j-1", TUESDAY, JustificationStatus.APPROVED)],
    )
    assert [v.status for v in verdicts] == [DayStatus.ON_TRACK, DayStatus.JUSTIFIED]


def test_duplicate_justification_is_logged_and_first_wins(caplog):
    duplicates = [
        justification("j-1", TUESDAY, JustificationStatus.PENDING),
        justification("j-2", TUESDAY, JustificationStatus.APPROVED),
    ]
    with caplog.at_level(logging.ERROR):
        verdicts = evaluate_range(
            FIXED, batch_a().punches, TUESDAY, TUESDAY, as_of=WEDNESDAY_MORNING, justifications=duplicates
        )

    assert verdicts[0].status == DayStatus.PENDING_REVIEW
    assert verdicts[0].justification.id == "j-1"
    assert "Duplicate justification" in caplog.text


def test_inconsistency_report_is_most_recent_first():
    issues = build_inconsistency_report([batch_a(), batch_b()], MONDAY, WEDNESDAY, as_of=WEDNESDAY_MORNING)

    assert [(i.date, i.employee_id, i.kind) for i in issues] == [
        (TUESDAY, "emp-a", InconsistencyKind.LATE),
        (TUESDAY, "emp-a", InconsistencyKind.INCOMPLETE),
        (MONDAY, "emp-b", InconsistencyKind.ABSENT),
    ]
    late, incomplete, absent = issues
    assert late.minutes == 30
    assert late.details == "Arrived at 08:30 (0h 30m late)"
    assert incomplete.minutes == 150
    assert incomplete.details == "Worked 6h 30m (target 9h 00m)"
    assert absent.employee_name == "Bruno"


def test_report_skips_excused_days():
    batch = batch_a()
    batch.justifications = [justification("j-1", TUESDAY, JustificationStatus.APPROVED)]

    issues = build_inconsistency_report([batch], MONDAY, WEDNESDAY, as_of=WEDNESDAY_MORNING)
    assert issues == []


def test_report_flags_missing_exit():
    batch = batch_a()
    as_of = WEDNESDAY_MORNING + timedelta(days=1)

    issues = build_inconsistency_report([batch], WEDNESDAY, WEDNESDAY, as_of=as_of)

    assert [i.kind for i in issues] == [InconsistencyKind.INCOMPLETE]
    assert issues[0].details == "Shift not closed (no exit punch)."


def test_report_stops_when_cancelled():
    stop = threading.Event()
    stop.set()

    assert build_inconsistency_report([batch_a(), batch_b()], MONDAY, WEDNESDAY,
                                      as_of=WEDNESDAY_MORNING, should_stop=stop) == []


def test_summary_balances_realized_days():
    verdicts = evaluate_range(FIXED, batch_a().punches, MONDAY, date(2025, 7, 27), as_of=WEDNESDAY_MORNING)
    summary = summarize_range(verdicts)

    assert summary.days == 7
    assert summary.worked_minutes == 540 + 390 + 60
    assert summary.target_minutes == 540 * 3
    assert summary.balance_minutes == 990 - 1620
    assert summary.counts[DayStatus.ON_TRACK] == 1
    assert summary.counts[DayStatus.INCOMPLETE] == 1
    assert summary.counts[DayStatus.IN_PROGRESS] == 1
    assert summary.counts[DayStatus.FUTURE] == 2
    assert summary.counts[DayStatus.OFF] == 2
