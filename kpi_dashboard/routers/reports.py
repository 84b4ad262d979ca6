import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from kpi_dashboard.core.exceptions import NotFoundError
from kpi_dashboard.core.limiter import limiter
from kpi_dashboard.database import get_db
from kpi_dashboard.models.user import User
from kpi_dashboard.routers.auth_deps import get_ai, get_current_user, get_report_store
from kpi_dashboard.schemas.assistant import ReportRequest, ReportResponse, StoredReportResponse
from kpi_dashboard.schemas.common import MessageResponse
from kpi_dashboard.services.ai_client import AIClient
from kpi_dashboard.services.report_service import generate_report
from kpi_dashboard.services.report_store import ReportStore, StoredReport

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["reports"]
)


def _to_response(report: StoredReport, now: datetime) -> StoredReportResponse:
    return StoredReportResponse(
        id=report.id,
        title=report.title,
        content=report.content,
        created_at=report.created_at,
        expires_at=report.expires_at,
        remaining_minutes=report.remaining_minutes(now),
    )


def _owned_report(store: ReportStore, report_id: str, user: User) -> StoredReport:
    report = store.get(report_id)
    if report is None:
        raise NotFoundError("Report not found or expired")
    if report.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return report


@router.post("/generate", response_model=ReportResponse)
@limiter.limit("10/minute")
def generate(
    request: Request,
    body: ReportRequest,
    db: Session = Depends(get_db),
    ai: AIClient = Depends(get_ai),
    store: ReportStore = Depends(get_report_store),
    current_user: User = Depends(get_current_user),
):
    """
    Either a clarifying question or a finished report. Finished reports are
    kept for the caller until they expire.
    """
    history = [message.model_dump() for message in body.conversation_history]
    result = generate_report(db, ai, body.query, history)

    if result.type == "question" or result.failed:
        return ReportResponse(type=result.type, content=result.content, report_title=result.report_title)

    report = store.save(current_user.id, result.report_title, result.content)
    logger.info(f"Report generated: {report.id}", extra={"user_id": current_user.id})
    return ReportResponse(
        type="report",
        content=report.content,
        report_title=report.title,
        report_id=report.id,
        expires_at=report.expires_at,
    )


@router.get("", response_model=List[StoredReportResponse])
def list_reports(
    store: ReportStore = Depends(get_report_store),
    current_user: User = Depends(get_current_user),
):
    now = datetime.now(timezone.utc)
    return [_to_response(r, now) for r in store.list_for_user(current_user.id, now)]


@router.get("/{report_id}", response_model=StoredReportResponse)
def get_report(
    report_id: str,
    store: ReportStore = Depends(get_report_store),
    current_user: User = Depends(get_current_user),
):
    report = _owned_report(store, report_id, current_user)
    return _to_response(report, datetime.now(timezone.utc))


@router.delete("/{report_id}", response_model=MessageResponse)
def delete_report(
    report_id: str,
    store: ReportStore = Depends(get_report_store),
    current_user: User = Depends(get_current_user),
):
    _owned_report(store, report_id, current_user)
    store.delete(report_id)
    return MessageResponse(message="Report deleted")
