from datetime import date, datetime
from typing import List, Optional

from kpi_dashboard.models.employee import Position
from kpi_dashboard.schemas.common import CamelModel


class WeeklyKPIRow(CamelModel):
    employee_id: int
    name: str
    position: Position
    week_start: date
    week_end: date
    year: int
    week_number: int
    verifications: int
    cv_added: int
    recommendations: int
    interviews: int
    placements: int
    days_worked: int
    verifications_per_day: float
    cv_per_day: float
    recommendations_per_day: float
    target_achievement: int
    points: int


class PeriodTotals(CamelModel):
    employee_id: int
    name: str
    position: Position
    year: int
    total_verifications: int
    total_cv_added: int
    total_recommendations: int
    total_interviews: int
    total_placements: int
    total_days_worked: int
    verifications_per_day: float
    cv_per_day: float
    recommendations_per_day: float
    target_achievement: int
    points: int


class MonthlyKPIRow(PeriodTotals):
    month: int


class YearlyKPIRow(PeriodTotals):
    pass


class ChampionEntry(CamelModel):
    rank: int
    employee_id: int
    name: str
    position: Position
    placements: int
    interviews: int
    recommendations: int
    verifications: int
    cv_added: int
    placement_points: int
    interview_points: int
    recommendation_points: int
    verification_points: int
    cv_points: int
    total_points: int


class TrendPoint(CamelModel):
    week_start: date
    week_number: int
    year: int
    position: Position
    total_verifications: int
    total_cv_added: int
    total_recommendations: int
    total_interviews: int
    total_placements: int
    total_days_worked: int
    employee_count: int


class AvailableWeek(CamelModel):
    week_start: date
    week_end: date
    year: int
    week_number: int


class AvailableMonth(CamelModel):
    year: int
    month: int


class MetricTotals(CamelModel):
    verifications: int = 0
    cv_added: int = 0
    recommendations: int = 0
    interviews: int = 0
    placements: int = 0
    days_worked: int = 0


class PositionBreakdown(CamelModel):
    position: Position
    employee_count: int
    verifications: int
    cv_added: int
    recommendations: int
    interviews: int
    placements: int


class WeeklyChange(CamelModel):
    current_verifications: int = 0
    current_cv: int = 0
    current_placements: int = 0
    previous_verifications: int = 0
    previous_cv: int = 0
    previous_placements: int = 0


class DashboardSummary(CamelModel):
    year: int
    month: int
    monthly_totals: MetricTotals
    position_breakdown: List[PositionBreakdown]
    weekly_change: WeeklyChange


class MonthlyTrendPoint(CamelModel):
    year: int
    month: int
    total_verifications: int
    total_interviews: int
    total_placements: int
    verifications_per_placement: Optional[float] = None
    interviews_per_placement: Optional[float] = None


class WeeklyVerificationPoint(CamelModel):
    week_start: date
    year: int
    week_number: int
    total_verifications: int
    employee_count: int
    avg_verifications_per_person: float


class AllTimePlacementRow(CamelModel):
    employee_id: int
    name: str
    position: Position
    total_placements: int
    total_interviews: int
    total_recommendations: int
    first_week: Optional[date] = None
    last_week: Optional[date] = None


class AllTimeVerificationRow(CamelModel):
    employee_id: int
    name: str
    position: Position
    total_verifications: int
    total_cv_added: int
    total_days_worked: int
    verifications_per_day: float
    cv_per_day: float


class EmployeeResponse(CamelModel):
    id: int
    name: str
    position: Position
    is_active: bool
    created_at: Optional[datetime] = None


class KPIRecordResponse(CamelModel):
    id: int
    employee_id: int
    week_start: date
    week_end: date
    year: int
    week_number: int
    month: int
    verifications: int
    cv_added: int
    recommendations: int
    interviews: int
    placements: int
    days_worked: int
    uploaded_at: Optional[datetime] = None
    uploaded_by: Optional[int] = None


class KPIRecordWithEmployee(KPIRecordResponse):
    name: str
    position: Position


class EmployeeDetail(CamelModel):
    employee: EmployeeResponse
    kpi_data: List[KPIRecordResponse]
