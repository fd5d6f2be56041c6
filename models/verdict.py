from datetime import datetime, time, date
from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field

from models.schema import Justification


class DayStatus(str, Enum):
    NOT_YET_JOINED = "not_joined"
    OFF = "off"
    FUTURE = "future"
    ABSENT = "absent"
    LATE = "late"
    INCOMPLETE = "incomplete"
    ON_TRACK = "success"
    JUSTIFIED = "justified"
    PENDING_REVIEW = "pending"
    IN_PROGRESS = "in_progress"


# Statuses of days that were expected to be worked and have already started
REALIZED_STATUSES = frozenset({
    DayStatus.ABSENT,
    DayStatus.LATE,
    DayStatus.INCOMPLETE,
    DayStatus.ON_TRACK,
    DayStatus.PENDING_REVIEW,
    DayStatus.IN_PROGRESS,
})


class DayTarget(BaseModel):
    is_work_day: bool
    target_start: Optional[time] = None
    target_minutes: Optional[int] = None

    def window_label(self) -> str:
        if not self.is_work_day:
            return ""
        if self.target_start is None:
            return "Flexible"
        start_minutes = self.target_start.hour * 60 + self.target_start.minute
        end_minutes = (start_minutes + (self.target_minutes or 0)) % (24 * 60)
        return f"{self.target_start:%H:%M} - {end_minutes // 60:02d}:{end_minutes % 60:02d}"


class NotYetJoinedDay(BaseModel):
    status: Literal[DayStatus.NOT_YET_JOINED] = DayStatus.NOT_YET_JOINED
    date: date
    label: str = ""


class OffDay(BaseModel):
    status: Literal[DayStatus.OFF] = DayStatus.OFF
    date: date
    label: str = "Day off"


class FutureDay(BaseModel):
    status: Literal[DayStatus.FUTURE] = DayStatus.FUTURE
    date: date
    label: str
    target_start: Optional[time] = None
    target_minutes: int


class JustifiedDay(BaseModel):
    status: Literal[DayStatus.JUSTIFIED] = DayStatus.JUSTIFIED
    date: date
    label: str = "Justified"
    justification: Justification


class AbsentDay(BaseModel):
    status: Literal[DayStatus.ABSENT] = DayStatus.ABSENT
    date: date
    label: str = "Absent"
    target_start: Optional[time] = None
    target_minutes: int
    justification: Optional[Justification] = None


class _WorkedDay(BaseModel):
    """Figures shared by every verdict computed from the day's punches."""

    date: date
    label: str
    worked_minutes: int
    target_start: Optional[time] = None
    target_minutes: int
    late_minutes: int = 0
    deficit_minutes: int = 0
    is_late: bool = False
    is_incomplete: bool = False
    first_in: Optional[datetime] = None
    has_exit: bool = False
    justification: Optional[Justification] = None


class LateDay(_WorkedDay):
    status: Literal[DayStatus.LATE] = DayStatus.LATE
    label: str = "Late"


class IncompleteDay(_WorkedDay):
    status: Literal[DayStatus.INCOMPLETE] = DayStatus.INCOMPLETE
    label: str = "Incomplete"


class OnTrackDay(_WorkedDay):
    status: Literal[DayStatus.ON_TRACK] = DayStatus.ON_TRACK
    label: str = "Completed"


class InProgressDay(_WorkedDay):
    status: Literal[DayStatus.IN_PROGRESS] = DayStatus.IN_PROGRESS
    label: str = "In progress"


class PendingReviewDay(_WorkedDay):
    status: Literal[DayStatus.PENDING_REVIEW] = DayStatus.PENDING_REVIEW
    label: str = "Under review"
    justification: Justification


DayVerdict = Annotated[
    Union[
        NotYetJoinedDay,
        OffDay,
        FutureDay,
        JustifiedDay,
        AbsentDay,
        LateDay,
        IncompleteDay,
        OnTrackDay,
        InProgressDay,
        PendingReviewDay,
    ],
    Field(discriminator="status"),
]


class InconsistencyKind(str, Enum):
    ABSENT = "ABSENT"
    LATE = "LATE"
    INCOMPLETE = "INCOMPLETE"


class Inconsistency(BaseModel):
    employee_id: str
    employee_name: str
    date: date
    kind: InconsistencyKind
    details: str
    minutes: int = 0


class RangeSummary(BaseModel):
    days: int = 0
    worked_minutes: int = 0
    target_minutes: int = 0
    balance_minutes: int = 0
    counts: Dict[DayStatus, int] = Field(default_factory=dict)
