"""
Admin maintenance of weekly records and upload history.
All deletes here are irreversible.
"""
import logging
from datetime import date
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from kpi_dashboard.core.exceptions import NotFoundError
from kpi_dashboard.models.employee import Employee
from kpi_dashboard.models.upload_log import UploadLog
from kpi_dashboard.models.user import User
from kpi_dashboard.models.weekly_kpi import WeeklyKPI
from kpi_dashboard.schemas.admin import KPIRecordUpdate, UploadLogResponse
from kpi_dashboard.schemas.kpi import KPIRecordWithEmployee

logger = logging.getLogger(__name__)

UPLOAD_HISTORY_LIMIT = 50


def list_records(db: Session) -> List[KPIRecordWithEmployee]:
    rows = (
        db.query(WeeklyKPI, Employee.name, Employee.position)
        .join(Employee, WeeklyKPI.employee_id == Employee.id)
        .order_by(WeeklyKPI.week_start.desc(), Employee.position, Employee.name)
        .all()
    )
    return [
        KPIRecordWithEmployee.model_validate({
            **{column.name: getattr(record, column.name) for column in WeeklyKPI.__table__.columns},
            "name": name,
            "position": position,
        })
        for record, name, position in rows
    ]


def update_record(db: Session, record_id: int, data: KPIRecordUpdate) -> WeeklyKPI:
    """Admin correction: overwrites the stored values instead of accumulating."""
    record = db.get(WeeklyKPI, record_id)
    if record is None:
        raise NotFoundError("Record not found")
    for field_name, value in data.model_dump().items():
        setattr(record, field_name, value)
    record.uploaded_at = func.now()
    db.commit()
    db.refresh(record)
    return record


def delete_record(db: Session, record_id: int) -> None:
    record = db.get(WeeklyKPI, record_id)
    if record is None:
        raise NotFoundError("Record not found")
    db.delete(record)
    db.commit()


def delete_week(db: Session, week_start: date) -> int:
    deleted = (
        db.query(WeeklyKPI)
        .filter(WeeklyKPI.week_start == week_start)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.warning(f"Deleted {deleted} records for week starting {week_start.isoformat()}")
    return deleted


def delete_all_records(db: Session) -> int:
    """Removes every weekly record; employees and users are kept."""
    deleted = db.query(WeeklyKPI).delete(synchronize_session=False)
    db.commit()
    logger.warning(f"Deleted all KPI data ({deleted} records)")
    return deleted


def upload_history(db: Session, limit: int = UPLOAD_HISTORY_LIMIT) -> List[UploadLogResponse]:
    rows = (
        db.query(UploadLog, User.username)
        .outerjoin(User, UploadLog.uploaded_by == User.id)
        .order_by(UploadLog.uploaded_at.desc(), UploadLog.id.desc())
        .limit(limit)
        .all()
    )
    return [
        UploadLogResponse(
            id=log.id,
            filename=log.filename,
            rows_processed=log.rows_processed or 0,
            rows_success=log.rows_success or 0,
            rows_failed=log.rows_failed or 0,
            errors=log.errors or [],
            uploaded_by=log.uploaded_by,
            uploaded_by_name=username,
            uploaded_at=log.uploaded_at,
            upload_type=log.upload_type,
        )
        for log, username in rows
    ]
