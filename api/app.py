from datetime import date, datetime, time
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, status
from pydantic import BaseModel, Field

import config
import main
from models.schema import (
    Employee,
    Justification,
    JustificationStatus,
    PunchKind,
    PunchResult,
    ScheduleConfig,
    ShiftOverride,
)
from models.verdict import Inconsistency, InconsistencyKind
from utils.dates import OverrideMode, to_local_naive
from utils.errors import (
    AttendanceError,
    DuplicateJustificationError,
    EmployeeNotFoundError,
    InvalidPunchError,
    InvalidStatusTransitionError,
    JustificationNotFoundError,
    ScheduleConfigError,
)

app = FastAPI(title="Attendance evaluation")

_STATUS_BY_ERROR = {
    EmployeeNotFoundError: status.HTTP_404_NOT_FOUND,
    JustificationNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidPunchError: status.HTTP_409_CONFLICT,
    DuplicateJustificationError: status.HTTP_409_CONFLICT,
    InvalidStatusTransitionError: status.HTTP_409_CONFLICT,
    ScheduleConfigError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _clock(value: Optional[datetime]) -> datetime:
    return to_local_naive(value) if value is not None else datetime.now()


def _http_error(exc: AttendanceError) -> HTTPException:
    code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=str(exc))


class JustificationIn(BaseModel):
    date: date
    reason: str = Field(..., min_length=1)
    attachment_ref: Optional[str] = None


class JustificationReview(BaseModel):
    status: JustificationStatus
    admin_notes: Optional[str] = None


class ShiftIn(BaseModel):
    reference: date
    mode: OverrideMode = "day"
    start_time: time
    duration_minutes: int = Field(..., gt=0)


@app.post("/companies/{company_id}/employees/{employee_id}/punches", response_model=PunchResult)
def receive_punch(company_id: str, employee_id: str, kind: PunchKind, timestamp: Optional[datetime] = None):
    try:
        return main.process_punch(employee_id, company_id, kind, _clock(timestamp))
    except AttendanceError as exc:
        raise _http_error(exc)


@app.get("/companies/{company_id}/employees/{employee_id}/days/{day}")
def day_verdict(company_id: str, employee_id: str, day: date, as_of: Optional[datetime] = None):
    try:
        return main.get_day_verdict(employee_id, company_id, day, _clock(as_of))
    except AttendanceError as exc:
        raise _http_error(exc)


@app.get("/companies/{company_id}/employees/{employee_id}/calendar")
def month_calendar(
    company_id: str,
    employee_id: str,
    year: int = Query(..., ge=1),
    month: int = Query(..., ge=1, le=12),
    as_of: Optional[datetime] = None,
):
    try:
        return main.get_month_calendar(employee_id, company_id, year, month, _clock(as_of))
    except AttendanceError as exc:
        raise _http_error(exc)


@app.get("/companies/{company_id}/inconsistencies", response_model=List[Inconsistency])
def inconsistencies(
    company_id: str,
    days: int = Query(config.REPORT_WINDOW_DAYS, ge=1, le=366),
    kind: Optional[InconsistencyKind] = None,
    as_of: Optional[datetime] = None,
):
    return main.get_inconsistency_report(company_id, _clock(as_of), days=days, kind=kind)


@app.post(
    "/companies/{company_id}/employees/{employee_id}/justifications",
    response_model=Justification,
    status_code=status.HTTP_201_CREATED,
)
def submit_justification(company_id: str, employee_id: str, payload: JustificationIn):
    try:
        return main.submit_day_justification(
            employee_id, company_id, payload.date, payload.reason, payload.attachment_ref
        )
    except AttendanceError as exc:
        raise _http_error(exc)


@app.patch("/justifications/{justification_id}", response_model=Justification)
def review_justification(justification_id: str, payload: JustificationReview):
    try:
        return main.review_justification(justification_id, payload.status, payload.admin_notes)
    except AttendanceError as exc:
        raise _http_error(exc)


@app.put("/companies/{company_id}/employees/{employee_id}/shifts", response_model=List[ShiftOverride])
def save_shifts(company_id: str, employee_id: str, payload: ShiftIn):
    try:
        return main.save_shift_overrides(
            employee_id, company_id, payload.reference, payload.mode, payload.start_time, payload.duration_minutes
        )
    except AttendanceError as exc:
        raise _http_error(exc)


@app.put("/companies/{company_id}/employees/{employee_id}/schedule", response_model=Employee)
def save_schedule(company_id: str, employee_id: str, payload: ScheduleConfig):
    try:
        return main.save_schedule(employee_id, company_id, payload)
    except AttendanceError as exc:
        raise _http_error(exc)
