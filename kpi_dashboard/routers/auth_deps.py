"""
Authentication and role dependencies for FastAPI endpoints.
"""
import logging
from typing import Callable, List

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from kpi_dashboard.database import get_db
from kpi_dashboard.models.user import User, UserRole
from kpi_dashboard.schemas.auth import TokenData
from kpi_dashboard.services import auth as auth_service
from kpi_dashboard.services.ai_client import AIClient, get_ai_client
from kpi_dashboard.services.report_store import ReportStore

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the JWT token.
    """
    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise _unauthorized("Could not validate credentials")

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise _unauthorized("TOKEN_EXPIRED")

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise _unauthorized("Invalid token type")

    token_data = TokenData(username=payload.get("sub"), role=payload.get("role"))
    if token_data.username is None:
        logger.warning("Authentication failed: Missing subject in token")
        raise _unauthorized("Missing subject in token")

    user = db.query(User).filter(User.username == token_data.username).first()
    if user is None:
        logger.warning(f"Authentication failed: User {token_data.username} not found in database")
        raise _unauthorized("User not found")
    return user


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory that checks if the user has one of the allowed roles.

    Usage:
        @router.delete("/all-data")
        def wipe(user: User = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker


def require_admin() -> Callable:
    """Shorthand for requiring the admin role."""
    return require_role([UserRole.ADMIN])


def get_report_store(request: Request) -> ReportStore:
    return request.app.state.report_store


def get_ai() -> AIClient:
    return get_ai_client()
