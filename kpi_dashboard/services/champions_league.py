"""
Champions League: the monthly point-based leaderboard.

Ranking is a total order: total_points descending, then name ascending,
then employee id, so equal scores always come back in the same order.
"""
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from kpi_dashboard.models.employee import Employee
from kpi_dashboard.models.weekly_kpi import WeeklyKPI
from kpi_dashboard.schemas.kpi import ChampionEntry
from kpi_dashboard.services.kpi_calculator import (
    POINTS_PER_CV,
    POINTS_PER_INTERVIEW,
    POINTS_PER_PLACEMENT,
    POINTS_PER_RECOMMENDATION,
    POINTS_PER_VERIFICATION,
    resolve_period,
    totals_columns,
)


def rank_entries(entries: List[ChampionEntry]) -> List[ChampionEntry]:
    ordered = sorted(entries, key=lambda e: (-e.total_points, e.name, e.employee_id))
    for index, entry in enumerate(ordered, start=1):
        entry.rank = index
    return ordered


def get_champions_league(
    db: Session, year: Optional[int] = None, month: Optional[int] = None, today: Optional[date] = None
) -> List[ChampionEntry]:
    """Rank active employees with at least one record in the month."""
    year, month = resolve_period(year, month, today)

    rows = (
        db.query(Employee.id, Employee.name, Employee.position, *totals_columns())
        .join(WeeklyKPI, WeeklyKPI.employee_id == Employee.id)
        .filter(
            Employee.is_active.is_(True),
            WeeklyKPI.year == year,
            WeeklyKPI.month == month,
        )
        .group_by(Employee.id, Employee.name, Employee.position)
        .all()
    )

    entries = []
    for row in rows:
        placement_points = row.total_placements * POINTS_PER_PLACEMENT
        interview_points = row.total_interviews * POINTS_PER_INTERVIEW
        recommendation_points = row.total_recommendations * POINTS_PER_RECOMMENDATION
        verification_points = row.total_verifications * POINTS_PER_VERIFICATION
        cv_points = row.total_cv_added * POINTS_PER_CV
        entries.append(ChampionEntry(
            rank=0,
            employee_id=row.id,
            name=row.name,
            position=row.position,
            placements=row.total_placements,
            interviews=row.total_interviews,
            recommendations=row.total_recommendations,
            verifications=row.total_verifications,
            cv_added=row.total_cv_added,
            placement_points=placement_points,
            interview_points=interview_points,
            recommendation_points=recommendation_points,
            verification_points=verification_points,
            cv_points=cv_points,
            total_points=(
                placement_points + interview_points + recommendation_points
                + verification_points + cv_points
            ),
        ))

    return rank_entries(entries)
