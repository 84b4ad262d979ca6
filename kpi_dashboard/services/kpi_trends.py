"""
Trend, summary and all-time views built on the same weekly records
as the period aggregations.
"""
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from kpi_dashboard.models.employee import Employee
from kpi_dashboard.models.weekly_kpi import WeeklyKPI
from kpi_dashboard.schemas.kpi import (
    AllTimePlacementRow,
    AllTimeVerificationRow,
    AvailableMonth,
    AvailableWeek,
    DashboardSummary,
    MetricTotals,
    MonthlyTrendPoint,
    PositionBreakdown,
    TrendPoint,
    WeeklyChange,
    WeeklyVerificationPoint,
)
from kpi_dashboard.services.kpi_calculator import (
    active_employee_totals,
    latest_week_start,
    per_day,
    totals_columns,
)

MAX_AVAILABLE_WEEKS = 52
MAX_AVAILABLE_MONTHS = 24
MONTHLY_TREND_MONTHS = 12


def get_trends(db: Session, weeks: Optional[int] = None) -> List[TrendPoint]:
    """
    Per-week, per-position totals. With `weeks` the series is windowed to
    the last N weeks before the most recent week on record.
    """
    query = (
        db.query(
            WeeklyKPI.week_start,
            WeeklyKPI.week_number,
            WeeklyKPI.year,
            Employee.position,
            *totals_columns(),
            func.count(func.distinct(Employee.id)).label("employee_count"),
        )
        .join(Employee, WeeklyKPI.employee_id == Employee.id)
        .filter(Employee.is_active.is_(True))
    )

    if weeks is not None:
        latest = latest_week_start(db)
        if latest is None:
            return []
        query = query.filter(WeeklyKPI.week_start >= latest - timedelta(weeks=weeks))

    rows = (
        query.group_by(WeeklyKPI.week_start, WeeklyKPI.week_number, WeeklyKPI.year, Employee.position)
        .order_by(WeeklyKPI.week_start, Employee.position)
        .all()
    )
    return [TrendPoint.model_validate(row._asdict()) for row in rows]


def get_available_weeks(db: Session) -> List[AvailableWeek]:
    rows = (
        db.query(WeeklyKPI.week_start, WeeklyKPI.week_end, WeeklyKPI.year, WeeklyKPI.week_number)
        .distinct()
        .order_by(WeeklyKPI.week_start.desc())
        .limit(MAX_AVAILABLE_WEEKS)
        .all()
    )
    return [AvailableWeek.model_validate(row._asdict()) for row in rows]


def get_available_months(db: Session) -> List[AvailableMonth]:
    rows = (
        db.query(WeeklyKPI.year, WeeklyKPI.month)
        .distinct()
        .order_by(WeeklyKPI.year.desc(), WeeklyKPI.month.desc())
        .limit(MAX_AVAILABLE_MONTHS)
        .all()
    )
    return [AvailableMonth.model_validate(row._asdict()) for row in rows]


def _week_totals(db: Session, week_start: Optional[date]) -> MetricTotals:
    if week_start is None:
        return MetricTotals()
    row = (
        db.query(*totals_columns())
        .filter(WeeklyKPI.week_start == week_start)
        .one()
    )
    return MetricTotals(
        verifications=row.total_verifications,
        cv_added=row.total_cv_added,
        placements=row.total_placements,
    )


def get_summary(db: Session, today: Optional[date] = None) -> DashboardSummary:
    """Current-month totals, per-position breakdown and week-over-week change."""
    today = today or date.today()
    year, month = today.year, today.month

    totals = (
        db.query(*totals_columns())
        .filter(WeeklyKPI.year == year, WeeklyKPI.month == month)
        .one()
    )
    monthly_totals = MetricTotals(
        verifications=totals.total_verifications,
        cv_added=totals.total_cv_added,
        recommendations=totals.total_recommendations,
        interviews=totals.total_interviews,
        placements=totals.total_placements,
        days_worked=totals.total_days_worked,
    )

    breakdown_rows = (
        db.query(
            Employee.position,
            func.count(func.distinct(Employee.id)).label("employee_count"),
            *totals_columns(),
        )
        .outerjoin(
            WeeklyKPI,
            and_(WeeklyKPI.employee_id == Employee.id, WeeklyKPI.year == year, WeeklyKPI.month == month),
        )
        .filter(Employee.is_active.is_(True))
        .group_by(Employee.position)
        .order_by(Employee.position)
        .all()
    )
    position_breakdown = [
        PositionBreakdown(
            position=row.position,
            employee_count=row.employee_count,
            verifications=row.total_verifications,
            cv_added=row.total_cv_added,
            recommendations=row.total_recommendations,
            interviews=row.total_interviews,
            placements=row.total_placements,
        )
        for row in breakdown_rows
    ]

    current_week = latest_week_start(db)
    previous_week = None
    if current_week is not None:
        previous_week = (
            db.query(func.max(WeeklyKPI.week_start))
            .filter(WeeklyKPI.week_start < current_week)
            .scalar()
        )
    current = _week_totals(db, current_week)
    previous = _week_totals(db, previous_week)

    return DashboardSummary(
        year=year,
        month=month,
        monthly_totals=monthly_totals,
        position_breakdown=position_breakdown,
        weekly_change=WeeklyChange(
            current_verifications=current.verifications,
            current_cv=current.cv_added,
            current_placements=current.placements,
            previous_verifications=previous.verifications,
            previous_cv=previous.cv_added,
            previous_placements=previous.placements,
        ),
    )


def get_monthly_trend(db: Session) -> List[MonthlyTrendPoint]:
    """Last 12 months with data, oldest first, with conversion ratios per placement."""
    rows = (
        db.query(WeeklyKPI.year, WeeklyKPI.month, *totals_columns())
        .group_by(WeeklyKPI.year, WeeklyKPI.month)
        .order_by(WeeklyKPI.year.desc(), WeeklyKPI.month.desc())
        .limit(MONTHLY_TREND_MONTHS)
        .all()
    )

    points = []
    for row in reversed(rows):
        placements = row.total_placements
        points.append(MonthlyTrendPoint(
            year=row.year,
            month=row.month,
            total_verifications=row.total_verifications,
            total_interviews=row.total_interviews,
            total_placements=placements,
            verifications_per_placement=round(row.total_verifications / placements, 1) if placements else None,
            interviews_per_placement=round(row.total_interviews / placements, 1) if placements else None,
        ))
    return points


def get_weekly_verification_trend(db: Session) -> List[WeeklyVerificationPoint]:
    rows = (
        db.query(
            WeeklyKPI.week_start,
            WeeklyKPI.year,
            WeeklyKPI.week_number,
            func.coalesce(func.sum(WeeklyKPI.verifications), 0).label("total_verifications"),
            func.count(func.distinct(WeeklyKPI.employee_id)).label("employee_count"),
        )
        .group_by(WeeklyKPI.week_start, WeeklyKPI.year, WeeklyKPI.week_number)
        .order_by(WeeklyKPI.week_start)
        .all()
    )
    return [
        WeeklyVerificationPoint(
            week_start=row.week_start,
            year=row.year,
            week_number=row.week_number,
            total_verifications=row.total_verifications,
            employee_count=row.employee_count,
            avg_verifications_per_person=(
                round(row.total_verifications / row.employee_count, 1) if row.employee_count else 0.0
            ),
        )
        for row in rows
    ]


def get_all_time_placements(db: Session) -> List[AllTimePlacementRow]:
    rows = (
        db.query(
            Employee.id,
            Employee.name,
            Employee.position,
            *totals_columns(),
            func.min(WeeklyKPI.week_start).label("first_week"),
            func.max(WeeklyKPI.week_start).label("last_week"),
        )
        .outerjoin(WeeklyKPI, WeeklyKPI.employee_id == Employee.id)
        .filter(Employee.is_active.is_(True))
        .group_by(Employee.id, Employee.name, Employee.position)
        .all()
    )
    result = [
        AllTimePlacementRow(
            employee_id=row.id,
            name=row.name,
            position=row.position,
            total_placements=row.total_placements,
            total_interviews=row.total_interviews,
            total_recommendations=row.total_recommendations,
            first_week=row.first_week,
            last_week=row.last_week,
        )
        for row in rows
    ]
    result.sort(key=lambda r: (-r.total_placements, -r.total_interviews, r.name))
    return result


def get_all_time_verifications(db: Session) -> List[AllTimeVerificationRow]:
    """Lifetime verification rates, best verifications-per-day first."""
    result = []
    for row in active_employee_totals(db):
        days = max(row.total_days_worked, 1)
        result.append(AllTimeVerificationRow(
            employee_id=row.id,
            name=row.name,
            position=row.position,
            total_verifications=row.total_verifications,
            total_cv_added=row.total_cv_added,
            total_days_worked=row.total_days_worked,
            verifications_per_day=per_day(row.total_verifications, days),
            cv_per_day=per_day(row.total_cv_added, days),
        ))
    result.sort(key=lambda r: -r.verifications_per_day)
    return result
