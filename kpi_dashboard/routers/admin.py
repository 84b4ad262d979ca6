import logging
import os
from datetime import date
from typing import BinaryIO, List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.orm import Session

from kpi_dashboard.core.config import settings
from kpi_dashboard.core.exceptions import UploadRejectedError
from kpi_dashboard.core.limiter import limiter
from kpi_dashboard.database import get_db
from kpi_dashboard.models.user import User
from kpi_dashboard.routers.auth_deps import require_admin
from kpi_dashboard.schemas.admin import (
    DeleteResponse,
    EmployeeCreate,
    EmployeeUpdate,
    KPIRecordUpdate,
    UploadDetails,
    UploadLogResponse,
    UploadResponse,
)
from kpi_dashboard.schemas.kpi import EmployeeResponse, KPIRecordResponse, KPIRecordWithEmployee
from kpi_dashboard.services import employee_service, record_service
from kpi_dashboard.services.excel_ingestion import ingest_workbook

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin())]
)


def read_upload(stream: BinaryIO, limit: int) -> bytes:
    """Reads at most limit + 1 bytes so oversized uploads are rejected without buffering them."""
    content = stream.read(limit + 1)
    if len(content) > limit:
        raise UploadRejectedError(f"File too large. Maximum size is {settings.max_upload_mb} MB")
    return content


@router.post("/upload", response_model=UploadResponse)
@limiter.limit("20/minute")
def upload_kpi_file(
    request: Request,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    """
    Ingest a body-leasing workbook. Row errors are reported in the details,
    a workbook that cannot be opened at all comes back with success=false.
    """
    if file is None or not file.filename:
        raise UploadRejectedError("No file uploaded")

    extension = os.path.splitext(file.filename)[1].lower()
    if extension not in settings.allowed_upload_extensions:
        raise UploadRejectedError("Only Excel files (.xlsx, .xls) are allowed")

    content = read_upload(file.file, settings.max_upload_bytes)

    logger.info(f"Upload started: {file.filename}", extra={"user_id": current_user.id, "bytes": len(content)})
    result = ingest_workbook(db, content, file.filename, current_user.id)

    return UploadResponse(
        success=result.success,
        message=result.message,
        details=UploadDetails(
            success=result.success,
            rows_processed=result.rows_processed,
            rows_success=result.rows_success,
            rows_failed=result.rows_failed,
            errors=result.errors,
        ),
    )


@router.get("/history", response_model=List[UploadLogResponse])
def get_upload_history(db: Session = Depends(get_db)):
    return record_service.upload_history(db)


@router.get("/data", response_model=List[KPIRecordWithEmployee])
def get_all_records(db: Session = Depends(get_db)):
    return record_service.list_records(db)


@router.put("/record/{record_id}", response_model=KPIRecordResponse)
def update_record(record_id: int, data: KPIRecordUpdate, db: Session = Depends(get_db)):
    return record_service.update_record(db, record_id, data)


@router.delete("/record/{record_id}", response_model=DeleteResponse)
def delete_record(record_id: int, db: Session = Depends(get_db)):
    record_service.delete_record(db, record_id)
    return DeleteResponse(message="Record deleted", deleted=1)


@router.delete("/week/{week_start}", response_model=DeleteResponse)
def delete_week(week_start: date, db: Session = Depends(get_db)):
    deleted = record_service.delete_week(db, week_start)
    return DeleteResponse(message=f"Deleted {deleted} records for week {week_start.isoformat()}", deleted=deleted)


@router.delete("/all-data", response_model=DeleteResponse)
def delete_all_data(db: Session = Depends(get_db)):
    deleted = record_service.delete_all_records(db)
    return DeleteResponse(message="All KPI data deleted", deleted=deleted)


@router.post("/employee", response_model=EmployeeResponse)
def create_employee(data: EmployeeCreate, db: Session = Depends(get_db)):
    return employee_service.create_employee(db, data)


@router.put("/employee/{employee_id}", response_model=EmployeeResponse)
def update_employee(employee_id: int, data: EmployeeUpdate, db: Session = Depends(get_db)):
    return employee_service.update_employee(db, employee_id, data)


@router.delete("/employee/{employee_id}", response_model=EmployeeResponse)
def deactivate_employee(employee_id: int, db: Session = Depends(get_db)):
    return employee_service.deactivate_employee(db, employee_id)
