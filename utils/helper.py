import logging
import uuid
from datetime import date, datetime
from typing import Dict, List, Optional

from models.schema import (
    Employee,
    Justification,
    JustificationStatus,
    Punch,
    ScheduleConfig,
    ShiftOverride,
)
from utils.dates import day_bounds
from utils.errors import (
    DuplicateJustificationError,
    InvalidStatusTransitionError,
    JustificationNotFoundError,
)

# In-memory data stores
mock_employees: List[Employee] = []
mock_punches: List[Punch] = []
mock_overrides: Dict[tuple, ShiftOverride] = {}
mock_justifications: List[Justification] = []


def reset_stores() -> None:
    mock_employees.clear()
    mock_punches.clear()
    mock_overrides.clear()
    mock_justifications.clear()


def add_employee(employee: Employee) -> Employee:
    mock_employees.append(employee)
    return employee


def get_employee(employee_id: str, company_id: str) -> Optional[Employee]:
    for emp in mock_employees:
        if emp.id == employee_id and emp.company_id == company_id:
            return emp
    return None


def list_company_employees(company_id: str) -> List[Employee]:
    return [emp for emp in mock_employees if emp.company_id == company_id and emp.is_active]


def fetch_schedule(employee_id: str, company_id: str) -> Optional[ScheduleConfig]:
    emp = get_employee(employee_id, company_id)
    return emp.schedule if emp else None


def update_schedule(employee_id: str, company_id: str, schedule: ScheduleConfig) -> Optional[Employee]:
    for index, emp in enumerate(mock_employees):
        if emp.id == employee_id and emp.company_id == company_id:
            mock_employees[index] = emp.model_copy(update={"schedule": schedule})
            return mock_employees[index]
    return None


def fetch_punches(employee_id: str, company_id: str, start: date, end: date) -> List[Punch]:
    lower, upper = day_bounds(start, end)
    return sorted([
        p for p in mock_punches
        if p.employee_id == employee_id and p.company_id == company_id and lower <= p.timestamp <= upper
    ], key=lambda p: p.timestamp)


def insert_punch(punch: Punch) -> None:
    mock_punches.append(punch)


def fetch_overrides(employee_id: str, company_id: str, start: date, end: date) -> List[ShiftOverride]:
    return [
        o for (emp_id, comp_id, day), o in mock_overrides.items()
        if emp_id == employee_id and comp_id == company_id and start <= day <= end
    ]


def upsert_override(override: ShiftOverride) -> None:
    mock_overrides[(override.employee_id, override.company_id, override.date)] = override


def fetch_justifications(employee_id: str, company_id: str, start: date, end: date) -> List[Justification]:
    return [
        j for j in mock_justifications
        if j.employee_id == employee_id and j.company_id == company_id and start <= j.date <= end
    ]


def submit_justification(
    employee_id: str,
    company_id: str,
    day: date,
    reason: str,
    attachment_ref: Optional[str] = None,
) -> Justification:
    if fetch_justifications(employee_id, company_id, day, day):
        raise DuplicateJustificationError(
            f"A justification already exists for employee_id: {employee_id} on {day}"
        )
    justification = Justification(
        id=str(uuid.uuid4()),
        employee_id=employee_id,
        company_id=company_id,
        date=day,
        reason=reason,
        created_at=datetime.now(),
        attachment_ref=attachment_ref,
    )
    mock_justifications.append(justification)
    return justification


def set_justification_status(
    justification_id: str,
    status: JustificationStatus,
    admin_notes: Optional[str] = None,
) -> Justification:
    for index, j in enumerate(mock_justifications):
        if j.id != justification_id:
            continue
        if j.status != JustificationStatus.PENDING or status == JustificationStatus.PENDING:
            raise InvalidStatusTransitionError(f"Cannot move justification from {j.status.value} to {status.value}")
        update = {"status": status}
        if admin_notes is not None:
            update["admin_notes"] = admin_notes
        mock_justifications[index] = j.model_copy(update=update)
        logging.info(f"Justification {justification_id} set to {status.value}")
        return mock_justifications[index]
    raise JustificationNotFoundError(f"Unknown justification: {justification_id}")
