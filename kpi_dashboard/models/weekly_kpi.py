from sqlalchemy import (
    Column, Integer, Date, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from kpi_dashboard.database import Base

# Columns summed by every aggregation and accumulated on re-upload
METRIC_FIELDS = ("verifications", "cv_added", "recommendations", "interviews", "placements")


class WeeklyKPI(Base):
    __tablename__ = "weekly_kpi"
    __table_args__ = (
        UniqueConstraint("employee_id", "week_start", name="uq_weekly_kpi_employee_week"),
        CheckConstraint("verifications >= 0", name="ck_weekly_kpi_verifications"),
        CheckConstraint("cv_added >= 0", name="ck_weekly_kpi_cv_added"),
        CheckConstraint("recommendations >= 0", name="ck_weekly_kpi_recommendations"),
        CheckConstraint("interviews >= 0", name="ck_weekly_kpi_interviews"),
        CheckConstraint("placements >= 0", name="ck_weekly_kpi_placements"),
        CheckConstraint("days_worked >= 0 AND days_worked <= 7", name="ck_weekly_kpi_days_worked"),
        Index("idx_weekly_kpi_dates", "week_start", "week_end"),
        Index("idx_weekly_kpi_month", "year", "month"),
        Index("idx_weekly_kpi_year_week", "year", "week_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)
    year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)

    verifications = Column(Integer, default=0, nullable=False)
    cv_added = Column(Integer, default=0, nullable=False)
    recommendations = Column(Integer, default=0, nullable=False)
    interviews = Column(Integer, default=0, nullable=False)
    placements = Column(Integer, default=0, nullable=False)
    days_worked = Column(Integer, default=0, nullable=False)

    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    employee = relationship("Employee", back_populates="weekly_records")
