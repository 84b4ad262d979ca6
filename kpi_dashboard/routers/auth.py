import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from kpi_dashboard.core.limiter import limiter
from kpi_dashboard.database import get_db
from kpi_dashboard.models.user import User
from kpi_dashboard.routers.auth_deps import get_current_user
from kpi_dashboard.schemas.auth import LoginRequest, PasswordChange, Token, UserResponse
from kpi_dashboard.schemas.common import MessageResponse
from kpi_dashboard.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/login", response_model=Token)
@limiter.limit("10/minute")
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    # JSON body instead of form-data, the dashboard posts JSON
    user = auth_service.authenticate_user(db, login_data.username, login_data.password)
    if not user:
        logger.warning(f"Failed login for '{login_data.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"User '{user.username}' logged in", extra={"user_id": user.id})
    return Token(
        access_token=auth_service.token_for_user(user),
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Securely update current user's password."""
    if not auth_service.verify_password(data.current_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Incorrect current password")

    current_user.password_hash = auth_service.get_password_hash(data.new_password)
    db.commit()
    logger.info("Password changed", extra={"user_id": current_user.id})

    return MessageResponse(message="Password updated successfully")
