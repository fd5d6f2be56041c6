class AttendanceError(Exception):
    """Base class for errors raised on the write path."""


class EmployeeNotFoundError(AttendanceError):
    pass


class InvalidPunchError(AttendanceError):
    pass


class DuplicateJustificationError(AttendanceError):
    pass


class JustificationNotFoundError(AttendanceError):
    pass


class InvalidStatusTransitionError(AttendanceError):
    pass


class ScheduleConfigError(AttendanceError):
    pass
