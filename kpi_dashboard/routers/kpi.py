from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from kpi_dashboard.database import get_db
from kpi_dashboard.routers.auth_deps import get_current_user
from kpi_dashboard.schemas.kpi import (
    AllTimePlacementRow,
    AllTimeVerificationRow,
    AvailableMonth,
    AvailableWeek,
    ChampionEntry,
    DashboardSummary,
    EmployeeDetail,
    EmployeeResponse,
    KPIRecordResponse,
    MonthlyKPIRow,
    MonthlyTrendPoint,
    TrendPoint,
    WeeklyKPIRow,
    WeeklyVerificationPoint,
    YearlyKPIRow,
)
from kpi_dashboard.services import employee_service, kpi_calculator, kpi_trends
from kpi_dashboard.services.champions_league import get_champions_league

router = APIRouter(
    prefix="/kpi",
    tags=["kpi"],
    dependencies=[Depends(get_current_user)]
)


@router.get("/weekly", response_model=List[WeeklyKPIRow])
def weekly_kpi(
    week: Optional[date] = Query(None, description="Week start date, defaults to the latest week"),
    db: Session = Depends(get_db),
):
    return kpi_calculator.get_weekly_kpi(db, week)


@router.get("/monthly", response_model=List[MonthlyKPIRow])
def monthly_kpi(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    return kpi_calculator.get_monthly_kpi(db, year, month)


@router.get("/yearly", response_model=List[YearlyKPIRow])
def yearly_kpi(year: Optional[int] = Query(None, ge=2000, le=2100), db: Session = Depends(get_db)):
    return kpi_calculator.get_yearly_kpi(db, year)


@router.get("/champions", response_model=List[ChampionEntry])
def champions_league(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    return get_champions_league(db, year, month)


@router.get("/trends", response_model=List[TrendPoint])
def trends(weeks: Optional[int] = Query(None, ge=1, le=520), db: Session = Depends(get_db)):
    return kpi_trends.get_trends(db, weeks)


@router.get("/weeks", response_model=List[AvailableWeek])
def available_weeks(db: Session = Depends(get_db)):
    return kpi_trends.get_available_weeks(db)


@router.get("/months", response_model=List[AvailableMonth])
def available_months(db: Session = Depends(get_db)):
    return kpi_trends.get_available_months(db)


@router.get("/employees", response_model=List[EmployeeResponse])
def employees(db: Session = Depends(get_db)):
    return employee_service.list_employees(db)


@router.get("/employee/{employee_id}", response_model=EmployeeDetail)
def employee_detail(
    employee_id: int,
    weeks: int = Query(12, ge=1, le=520),
    db: Session = Depends(get_db),
):
    employee = employee_service.get_employee(db, employee_id)
    records = employee_service.get_recent_records(db, employee_id, weeks)
    return EmployeeDetail(
        employee=EmployeeResponse.model_validate(employee),
        kpi_data=[KPIRecordResponse.model_validate(r) for r in records],
    )


@router.get("/summary", response_model=DashboardSummary)
def summary(db: Session = Depends(get_db)):
    return kpi_trends.get_summary(db)


@router.get("/monthly-trend", response_model=List[MonthlyTrendPoint])
def monthly_trend(db: Session = Depends(get_db)):
    return kpi_trends.get_monthly_trend(db)


@router.get("/weekly-verification-trend", response_model=List[WeeklyVerificationPoint])
def weekly_verification_trend(db: Session = Depends(get_db)):
    return kpi_trends.get_weekly_verification_trend(db)


@router.get("/all-time-placements", response_model=List[AllTimePlacementRow])
def all_time_placements(db: Session = Depends(get_db)):
    return kpi_trends.get_all_time_placements(db)


@router.get("/all-time-verifications", response_model=List[AllTimeVerificationRow])
def all_time_verifications(db: Session = Depends(get_db)):
    return kpi_trends.get_all_time_verifications(db)
