"""
KPI Aggregation Service

Derives weekly, monthly and yearly views from raw weekly records:
per-day rates, target achievement and the composite point score.

Targets:
- Sourcer: 4 verifications per working day
- Rekruter: 5 CVs per working day
- TAC: 1 placement per month (12 per year); a week counts as met with any placement
"""
import math
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from kpi_dashboard.models.employee import Employee, Position
from kpi_dashboard.models.weekly_kpi import WeeklyKPI, METRIC_FIELDS
from kpi_dashboard.schemas.kpi import WeeklyKPIRow, MonthlyKPIRow, YearlyKPIRow

SOURCER_DAILY_VERIFICATIONS = 4
REKRUTER_DAILY_CVS = 5
TAC_MONTHLY_PLACEMENTS = 1
TAC_YEARLY_PLACEMENTS = 12

POINTS_PER_PLACEMENT = 100
POINTS_PER_INTERVIEW = 10
POINTS_PER_RECOMMENDATION = 2
POINTS_PER_VERIFICATION = 1
POINTS_PER_CV = 1


def round_half_up(value: float) -> int:
    """0.5 rounds away from zero, unlike the builtin round()."""
    return int(math.floor(value + 0.5))


def per_day(value: int, days_worked: int) -> float:
    if days_worked <= 0:
        return 0.0
    return round(value / days_worked, 2)


def percentage(value: float, target: float) -> int:
    if target <= 0:
        return 0
    return round_half_up(value / target * 100)


def calculate_points(
    placements: int = 0,
    interviews: int = 0,
    recommendations: int = 0,
    verifications: int = 0,
    cv_added: int = 0,
) -> int:
    return (
        (placements or 0) * POINTS_PER_PLACEMENT
        + (interviews or 0) * POINTS_PER_INTERVIEW
        + (recommendations or 0) * POINTS_PER_RECOMMENDATION
        + (verifications or 0) * POINTS_PER_VERIFICATION
        + (cv_added or 0) * POINTS_PER_CV
    )


def weekly_target_achievement(
    position: Position, days_worked: int, verifications: int, cv_added: int, placements: int
) -> int:
    if position == Position.SOURCER:
        return percentage(verifications, days_worked * SOURCER_DAILY_VERIFICATIONS)
    if position == Position.REKRUTER:
        return percentage(cv_added, days_worked * REKRUTER_DAILY_CVS)
    return 100 if placements > 0 else 0


def period_target_achievement(
    position: Position,
    total_days_worked: int,
    verifications: int,
    cv_added: int,
    placements: int,
    tac_placement_target: int = TAC_MONTHLY_PLACEMENTS,
) -> int:
    """
    Achievement over a month or year. Days are floored at 1 so an employee
    with no recorded days is measured against a one-day target.
    """
    days = max(total_days_worked, 1)
    if position == Position.SOURCER:
        return percentage(verifications, days * SOURCER_DAILY_VERIFICATIONS)
    if position == Position.REKRUTER:
        return percentage(cv_added, days * REKRUTER_DAILY_CVS)
    return min(100, percentage(placements, tac_placement_target))


def resolve_period(year: Optional[int], month: Optional[int], today: Optional[date] = None) -> Tuple[int, int]:
    today = today or date.today()
    return year or today.year, month or today.month


def latest_week_start(db: Session) -> Optional[date]:
    return db.query(func.max(WeeklyKPI.week_start)).scalar()


def totals_columns():
    """SUM() of every metric plus days_worked, zero when the outer join found nothing."""
    return [
        func.coalesce(func.sum(getattr(WeeklyKPI, field)), 0).label(f"total_{field}")
        for field in METRIC_FIELDS + ("days_worked",)
    ]


def active_employee_totals(db: Session, *join_conditions):
    """
    One row per active employee with metric totals over the weekly records
    matching `join_conditions`. Employees without matching records get zeros.
    """
    return (
        db.query(Employee.id, Employee.name, Employee.position, *totals_columns())
        .outerjoin(WeeklyKPI, and_(WeeklyKPI.employee_id == Employee.id, *join_conditions))
        .filter(Employee.is_active.is_(True))
        .group_by(Employee.id, Employee.name, Employee.position)
        .order_by(Employee.position, Employee.name)
        .all()
    )


def _period_fields(row, tac_placement_target: int) -> dict:
    days = max(row.total_days_worked, 1)
    return {
        "employee_id": row.id,
        "name": row.name,
        "position": row.position,
        "total_verifications": row.total_verifications,
        "total_cv_added": row.total_cv_added,
        "total_recommendations": row.total_recommendations,
        "total_interviews": row.total_interviews,
        "total_placements": row.total_placements,
        "total_days_worked": row.total_days_worked,
        "verifications_per_day": per_day(row.total_verifications, days),
        "cv_per_day": per_day(row.total_cv_added, days),
        "recommendations_per_day": per_day(row.total_recommendations, days),
        "target_achievement": period_target_achievement(
            row.position,
            row.total_days_worked,
            row.total_verifications,
            row.total_cv_added,
            row.total_placements,
            tac_placement_target,
        ),
        "points": calculate_points(
            row.total_placements,
            row.total_interviews,
            row.total_recommendations,
            row.total_verifications,
            row.total_cv_added,
        ),
    }


def get_weekly_kpi(db: Session, week_start: Optional[date] = None) -> List[WeeklyKPIRow]:
    """Weekly view for `week_start`, or for the most recent week on record."""
    target_week = week_start or latest_week_start(db)
    if target_week is None:
        return []

    rows = (
        db.query(Employee, WeeklyKPI)
        .join(WeeklyKPI, WeeklyKPI.employee_id == Employee.id)
        .filter(Employee.is_active.is_(True), WeeklyKPI.week_start == target_week)
        .order_by(Employee.position, Employee.name)
        .all()
    )

    return [
        WeeklyKPIRow(
            employee_id=employee.id,
            name=employee.name,
            position=employee.position,
            week_start=record.week_start,
            week_end=record.week_end,
            year=record.year,
            week_number=record.week_number,
            verifications=record.verifications,
            cv_added=record.cv_added,
            recommendations=record.recommendations,
            interviews=record.interviews,
            placements=record.placements,
            days_worked=record.days_worked,
            verifications_per_day=per_day(record.verifications, record.days_worked),
            cv_per_day=per_day(record.cv_added, record.days_worked),
            recommendations_per_day=per_day(record.recommendations, record.days_worked),
            target_achievement=weekly_target_achievement(
                employee.position,
                record.days_worked,
                record.verifications,
                record.cv_added,
                record.placements,
            ),
            points=calculate_points(
                record.placements,
                record.interviews,
                record.recommendations,
                record.verifications,
                record.cv_added,
            ),
        )
        for employee, record in rows
    ]


def get_monthly_kpi(
    db: Session, year: Optional[int] = None, month: Optional[int] = None, today: Optional[date] = None
) -> List[MonthlyKPIRow]:
    """Monthly totals for every active employee; idle employees get a zero-filled row."""
    year, month = resolve_period(year, month, today)
    rows = active_employee_totals(db, WeeklyKPI.year == year, WeeklyKPI.month == month)
    return [
        MonthlyKPIRow(year=year, month=month, **_period_fields(row, TAC_MONTHLY_PLACEMENTS))
        for row in rows
    ]


def get_yearly_kpi(db: Session, year: Optional[int] = None, today: Optional[date] = None) -> List[YearlyKPIRow]:
    year = year or (today or date.today()).year
    rows = active_employee_totals(db, WeeklyKPI.year == year)
    return [
        YearlyKPIRow(year=year, **_period_fields(row, TAC_YEARLY_PLACEMENTS))
        for row in rows
    ]
