from datetime import datetime
from typing import Iterable, List, Optional

from models.schema import Punch, PunchKind

OPENING_KINDS = (PunchKind.IN, PunchKind.RESUME)
CLOSING_KINDS = (PunchKind.PAUSE, PunchKind.OUT)


def ordered(punches: Iterable[Punch]) -> List[Punch]:
    return sorted(punches, key=lambda p: p.timestamp)


def compute_worked_minutes(punches: Iterable[Punch], now_if_open: Optional[datetime] = None) -> float:
    """
    Sum the minutes between each IN/RESUME and the next PAUSE/OUT.

    A closing punch with nothing open is ignored. When the last interval is
    still open and ``now_if_open`` is given, it is counted up to that instant.
    """
    total = 0.0
    open_since = None

    for punch in ordered(punches):
        if punch.kind in OPENING_KINDS:
            open_since = punch.timestamp
        elif punch.kind in CLOSING_KINDS and open_since is not None:
            total += (punch.timestamp - open_since).total_seconds() / 60.0
            open_since = None

    if open_since is not None and now_if_open is not None and now_if_open > open_since:
        total += (now_if_open - open_since).total_seconds() / 60.0

    return total


def whole_minutes(minutes: float) -> int:
    return int(minutes)


def first_punch(punches: Iterable[Punch], kind: PunchKind) -> Optional[Punch]:
    for punch in ordered(punches):
        if punch.kind == kind:
            return punch
    return None


def has_punch(punches: Iterable[Punch], kind: PunchKind) -> bool:
    return any(p.kind == kind for p in punches)
