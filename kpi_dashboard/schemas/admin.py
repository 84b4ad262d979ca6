from datetime import datetime
from typing import List, Optional

from pydantic import Field

from kpi_dashboard.schemas.common import CamelModel


class UploadDetails(CamelModel):
    success: bool
    rows_processed: int
    rows_success: int
    rows_failed: int
    errors: List[str]


class UploadResponse(CamelModel):
    success: bool
    message: str
    details: UploadDetails


class UploadLogResponse(CamelModel):
    id: int
    filename: str
    rows_processed: int
    rows_success: int
    rows_failed: int
    errors: List[str] = []
    uploaded_by: Optional[int] = None
    uploaded_by_name: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    upload_type: Optional[str] = None


class EmployeeCreate(CamelModel):
    name: str = Field(min_length=1)
    # Checked against Position in the service so a bad value is a 400, not a 422
    position: str


class EmployeeUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    position: Optional[str] = None
    is_active: Optional[bool] = None


class KPIRecordUpdate(CamelModel):
    verifications: int = Field(ge=0)
    cv_added: int = Field(default=0, ge=0)
    recommendations: int = Field(ge=0)
    interviews: int = Field(ge=0)
    placements: int = Field(ge=0)
    days_worked: int = Field(ge=0, le=7)


class DeleteResponse(CamelModel):
    success: bool = True
    message: str
    deleted: int = 0
