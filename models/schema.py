from datetime import datetime, time, date
from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from config import DEFAULT_DAILY_MINUTES

WEEKDAY_CODES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


class PunchKind(str, Enum):
    IN = "IN"
    PAUSE = "PAUSE"
    RESUME = "RESUME"
    OUT = "OUT"


class ScheduleType(str, Enum):
    FIXED = "FIXED"
    FLEXIBLE = "FLEXIBLE"


class JustificationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Punch(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_id: str
    company_id: str
    timestamp: datetime
    kind: PunchKind


class ScheduleConfig(BaseModel):
    type: ScheduleType = ScheduleType.FLEXIBLE
    work_days: Set[str] = Field(default_factory=lambda: {"mon", "tue", "wed", "thu", "fri"})
    fixed_start: Optional[time] = None
    fixed_end: Optional[time] = None
    tolerance_minutes: int = Field(0, ge=0)
    fallback_daily_minutes: int = DEFAULT_DAILY_MINUTES
    joined_on: date = date.min


class ShiftOverride(BaseModel):
    employee_id: str
    company_id: str
    date: date
    start_time: time
    duration_minutes: int


class Justification(BaseModel):
    id: str
    employee_id: str
    company_id: str
    date: date
    reason: str
    status: JustificationStatus = JustificationStatus.PENDING
    created_at: datetime
    attachment_ref: Optional[str] = None
    admin_notes: Optional[str] = None


class Employee(BaseModel):
    id: str
    company_id: str
    full_name: str
    email: Optional[str] = None
    is_active: bool = True
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)


class PunchResult(BaseModel):
    punch: Punch
    warnings: List[str] = Field(default_factory=list)
