"""
AI report generation over the current KPI data.

The model either asks one clarifying question or returns a markdown report;
the caller decides what to store.
"""
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from kpi_dashboard.core import prompts
from kpi_dashboard.core.exceptions import AIError, AIKillSwitchError
from kpi_dashboard.models.employee import Employee
from kpi_dashboard.models.weekly_kpi import WeeklyKPI
from kpi_dashboard.services.ai_client import AIClient
from kpi_dashboard.services.champions_league import get_champions_league

logger = logging.getLogger(__name__)

DEFAULT_REPORT_TITLE = "KPI Report"
ERROR_REPORT_TITLE = "Error"
CONTEXT_RECORDS = 30


@dataclass
class ReportResult:
    type: str
    content: str
    report_title: Optional[str] = None
    failed: bool = False


def _error_report(content: str) -> ReportResult:
    return ReportResult(type="report", content=content, report_title=ERROR_REPORT_TITLE, failed=True)


def collect_report_data(db: Session, today: date) -> Dict:
    weekly_rows = (
        db.query(
            Employee.name,
            Employee.position,
            WeeklyKPI.week_start,
            WeeklyKPI.week_end,
            WeeklyKPI.verifications,
            WeeklyKPI.cv_added,
            WeeklyKPI.recommendations,
            WeeklyKPI.interviews,
            WeeklyKPI.placements,
            WeeklyKPI.days_worked,
        )
        .join(Employee, WeeklyKPI.employee_id == Employee.id)
        .filter(Employee.is_active.is_(True))
        .order_by(WeeklyKPI.week_start.desc(), Employee.name)
        .limit(CONTEXT_RECORDS)
        .all()
    )
    position_counts = (
        db.query(Employee.position, func.count(Employee.id).label("count"))
        .filter(Employee.is_active.is_(True))
        .group_by(Employee.position)
        .all()
    )
    champions = get_champions_league(db, today.year, today.month)

    return {
        "weekly": [row._asdict() for row in weekly_rows],
        "champions": [entry.model_dump(by_alias=True) for entry in champions],
        "positions": {row.position.value: row.count for row in position_counts},
        "year": today.year,
        "month": today.month,
    }


def parse_ai_reply(reply: str) -> ReportResult:
    text = reply.strip()
    if text.startswith(prompts.QUESTION_MARKER):
        return ReportResult(type="question", content=text[len(prompts.QUESTION_MARKER):].strip())
    if text.startswith(prompts.REPORT_MARKER):
        first_line, _, body = text.partition("\n")
        title = first_line[len(prompts.REPORT_MARKER):].strip() or DEFAULT_REPORT_TITLE
        return ReportResult(type="report", content=body.strip(), report_title=title)
    return ReportResult(type="report", content=text, report_title=DEFAULT_REPORT_TITLE)


def generate_report(
    db: Session,
    ai: AIClient,
    query: str,
    conversation_history: Optional[List[Dict[str, str]]] = None,
    today: Optional[date] = None,
) -> ReportResult:
    if not ai.is_configured:
        return _error_report("AI is not available. Check the OPENROUTER_API_KEY configuration.")

    today = today or date.today()
    data = collect_report_data(db, today)

    def dump(value) -> str:
        return json.dumps(value, indent=2, default=str, ensure_ascii=False)

    user_content = prompts.REPORT_DATA_TEMPLATE.format(
        weekly=dump(data["weekly"]),
        champions=dump(data["champions"]),
        positions=dump(data["positions"]),
        month=data["month"],
        year=data["year"],
        query=query,
    )
    messages = [*(conversation_history or []), {"role": "user", "content": user_content}]

    try:
        reply = ai.complete(prompts.REPORT_SYSTEM, messages, max_tokens=2000)
    except (AIError, AIKillSwitchError) as e:
        logger.error(f"Report generation failed: {e.message}")
        return _error_report("An error occurred while generating the report. Please try again.")

    return parse_ai_reply(reply)
