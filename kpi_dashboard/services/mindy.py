"""
Mindy, the dashboard assistant: a mood derived from the latest week's
target achievement plus one short tip, written by the LLM when available.
"""
import json
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from kpi_dashboard.core import prompts
from kpi_dashboard.core.exceptions import AIError
from kpi_dashboard.schemas.assistant import MindyEmotion, MindyResponse, MindyStats
from kpi_dashboard.schemas.kpi import ChampionEntry, WeeklyKPIRow
from kpi_dashboard.services.ai_client import AIClient
from kpi_dashboard.services.champions_league import get_champions_league
from kpi_dashboard.services.kpi_calculator import get_weekly_kpi

ALERT_THRESHOLD = 70
EMPTY_DATA_TIP = "🤖 Hi! I'm Mindy. Upload the KPI data and I'll have tips for the team!"

# (minimum average achievement, emotion), checked top-down
EMOTION_THRESHOLDS = [
    (120, MindyEmotion.ECSTATIC),
    (100, MindyEmotion.HAPPY),
    (80, MindyEmotion.SATISFIED),
    (60, MindyEmotion.NEUTRAL),
    (40, MindyEmotion.CONCERNED),
    (20, MindyEmotion.WORRIED),
]

logger = logging.getLogger(__name__)


def calculate_stats(weekly: List[WeeklyKPIRow], champions: List[ChampionEntry]) -> MindyStats:
    achievements = [row.target_achievement for row in weekly]
    return MindyStats(
        avg_target_achievement=round(sum(achievements) / len(achievements)) if achievements else 0,
        top_performer=champions[0].name if champions else "-",
        total_placements=sum(row.placements for row in weekly),
        alerts_count=sum(1 for a in achievements if a < ALERT_THRESHOLD),
    )


def determine_emotion(avg_target_achievement: int) -> MindyEmotion:
    for minimum, emotion in EMOTION_THRESHOLDS:
        if avg_target_achievement >= minimum:
            return emotion
    return MindyEmotion.SAD


def default_tip(stats: MindyStats, emotion: MindyEmotion) -> str:
    tips = {
        MindyEmotion.ECSTATIC: f"🎉 Fantastic result! Average target achievement: {stats.avg_target_achievement}%! The team is on fire!",
        MindyEmotion.HAPPY: f"😊 Great work! {stats.top_performer} leads the Champions League. Keep the streak going!",
        MindyEmotion.SATISFIED: f"🙂 Good team effort! Average {stats.avg_target_achievement}% of target. Almost at 100%!",
        MindyEmotion.NEUTRAL: f"😐 Steady week. Average achievement: {stats.avg_target_achievement}%. We can do more!",
        MindyEmotion.CONCERNED: f"😟 Heads up! {stats.alerts_count} people are below target. Let's see what we can improve.",
        MindyEmotion.WORRIED: f"😰 Time to rally! Only {stats.avg_target_achievement}% of target. Let's go!",
        MindyEmotion.SAD: "😢 A tough week... but every day is a new chance. Let's support each other!",
    }
    return tips[emotion]


def _ai_tip(ai: AIClient, weekly: List[WeeklyKPIRow], champions: List[ChampionEntry]) -> Optional[str]:
    data = json.dumps({
        "currentWeek": [row.model_dump(mode="json", by_alias=True) for row in weekly[:5]],
        "topPerformers": [entry.model_dump(mode="json", by_alias=True) for entry in champions[:3]],
    })
    tip = ai.complete(
        prompts.MINDY_SYSTEM,
        [{"role": "user", "content": prompts.MINDY_USER_TEMPLATE.format(data=data)}],
        max_tokens=200,
    )
    return tip.strip() or None


def get_mindy_response(db: Session, ai: Optional[AIClient] = None, today: Optional[date] = None) -> MindyResponse:
    """Without an AI client the default tip for the emotion is used."""
    today = today or date.today()
    weekly = get_weekly_kpi(db)
    champions = get_champions_league(db, today.year, today.month)

    stats = calculate_stats(weekly, champions)
    if not weekly:
        return MindyResponse(emotion=MindyEmotion.NEUTRAL, tip=EMPTY_DATA_TIP, stats=stats)

    emotion = determine_emotion(stats.avg_target_achievement)
    tip = default_tip(stats, emotion)

    if ai is not None and ai.is_configured:
        try:
            tip = _ai_tip(ai, weekly, champions) or tip
        except AIError as e:
            logger.warning(f"Mindy falls back to the default tip: {e.message}")

    return MindyResponse(emotion=emotion, tip=tip, stats=stats)
