from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from kpi_dashboard.database import Base


class UploadLog(Base):
    """Append-only audit entry, one per ingestion batch."""
    __tablename__ = "upload_logs"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String, nullable=False)
    rows_processed = Column(Integer, default=0)
    rows_success = Column(Integer, default=0)
    rows_failed = Column(Integer, default=0)
    errors = Column(JSON, default=list)
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())
    upload_type = Column(String, default="body-leasing")

    uploader = relationship("User")
