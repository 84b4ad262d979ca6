import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kpi_dashboard.core.exceptions import DuplicateEmployeeError, InvalidPositionError, NotFoundError
from kpi_dashboard.models.employee import Employee, Position
from kpi_dashboard.models.weekly_kpi import WeeklyKPI
from kpi_dashboard.schemas.admin import EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)


def parse_position(value: str) -> Position:
    try:
        return Position(value)
    except ValueError:
        raise InvalidPositionError(value)


def list_employees(db: Session) -> List[Employee]:
    return db.query(Employee).order_by(Employee.position, Employee.name).all()


def get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


def get_recent_records(db: Session, employee_id: int, weeks: int = 12) -> List[WeeklyKPI]:
    return (
        db.query(WeeklyKPI)
        .filter(WeeklyKPI.employee_id == employee_id)
        .order_by(WeeklyKPI.week_start.desc())
        .limit(weeks)
        .all()
    )


def _commit_or_duplicate(db: Session, name: Optional[str]) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmployeeError(name or "")


def create_employee(db: Session, data: EmployeeCreate) -> Employee:
    position = parse_position(data.position)
    name = data.name.strip()
    employee = Employee(name=name, position=position, is_active=True)
    db.add(employee)
    _commit_or_duplicate(db, name)
    db.refresh(employee)
    logger.info(f"Employee created: {name} ({position.value})")
    return employee


def update_employee(db: Session, employee_id: int, data: EmployeeUpdate) -> Employee:
    employee = get_employee(db, employee_id)
    position = parse_position(data.position) if data.position is not None else None
    if data.name is not None:
        employee.name = data.name.strip()
    if position is not None:
        employee.position = position
    if data.is_active is not None:
        employee.is_active = data.is_active
    _commit_or_duplicate(db, data.name)
    db.refresh(employee)
    return employee


def deactivate_employee(db: Session, employee_id: int) -> Employee:
    """Soft delete: the employee and their history stay, but drop out of every view."""
    employee = get_employee(db, employee_id)
    employee.is_active = False
    db.commit()
    logger.info(f"Employee deactivated: {employee.name}")
    return employee
