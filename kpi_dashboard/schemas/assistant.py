import enum
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from kpi_dashboard.schemas.common import CamelModel


class MindyEmotion(str, enum.Enum):
    ECSTATIC = "ecstatic"
    HAPPY = "happy"
    SATISFIED = "satisfied"
    NEUTRAL = "neutral"
    CONCERNED = "concerned"
    WORRIED = "worried"
    SAD = "sad"


class MindyStats(CamelModel):
    avg_target_achievement: int = 0
    top_performer: str = "-"
    total_placements: int = 0
    alerts_count: int = 0


class MindyResponse(CamelModel):
    emotion: MindyEmotion
    tip: str
    stats: MindyStats


class ConversationMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ReportRequest(CamelModel):
    query: str = Field(min_length=1)
    conversation_history: List[ConversationMessage] = []


class ReportResponse(CamelModel):
    type: Literal["question", "report"]
    content: str
    report_title: Optional[str] = None
    report_id: Optional[str] = None
    expires_at: Optional[datetime] = None


class StoredReportResponse(CamelModel):
    id: str
    title: str
    content: str
    created_at: datetime
    expires_at: datetime
    remaining_minutes: int
