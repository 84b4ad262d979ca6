from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kpi_dashboard.database import get_db
from kpi_dashboard.routers.auth_deps import get_ai, get_current_user
from kpi_dashboard.schemas.assistant import MindyResponse
from kpi_dashboard.services.ai_client import AIClient
from kpi_dashboard.services.mindy import get_mindy_response

router = APIRouter(
    prefix="/mindy",
    tags=["mindy"],
    dependencies=[Depends(get_current_user)]
)


@router.get("", response_model=MindyResponse)
def mindy(db: Session = Depends(get_db), ai: AIClient = Depends(get_ai)):
    return get_mindy_response(db, ai)


@router.get("/emotion")
def mindy_emotion(db: Session = Depends(get_db)):
    # The mood never depends on the model, skip the round trip
    return {"emotion": get_mindy_response(db).emotion}


@router.get("/tip")
def mindy_tip(db: Session = Depends(get_db), ai: AIClient = Depends(get_ai)):
    return {"tip": get_mindy_response(db, ai).tip}
