import pytest
from datetime import timedelta
from kpi_dashboard.services import auth as auth_service
from kpi_dashboard.models.user import User, UserRole

def test_password_hashing():
    """Test that password hashing and verification works correctly."""
    password = "MySecurePassword123!"
    hashed = auth_service.get_password_hash(password)
    assert hashed != password
    assert auth_service.verify_password(password, hashed)
    assert not auth_service.verify_password("WrongPassword", hashed)

def test_create_user(db_session):
    """Test creating a new user through the service."""
    auth_service.create_user(db_session, "newuser", "Password123!")

    saved_user = db_session.query(User).filter(User.username == "newuser").first()
    assert saved_user is not None
    assert saved_user.role == UserRole.VIEWER
    assert not saved_user.is_admin
    assert auth_service.verify_password("Password123!", saved_user.password_hash)

def test_authenticate_user(db_session, admin_user):
    assert auth_service.authenticate_user(db_session, "test-admin", "AdminPassword123!").id == admin_user.id
    assert auth_service.authenticate_user(db_session, "test-admin", "wrong") is None
    assert auth_service.authenticate_user(db_session, "nobody", "AdminPassword123!") is None

def test_token_round_trip(admin_user):
    payload = auth_service.decode_access_token(auth_service.token_for_user(admin_user))
    assert payload["sub"] == "test-admin"
    assert payload["role"] == "admin"
    assert payload["user_id"] == admin_user.id
    assert payload["type"] == "access"

def test_expired_token_is_flagged():
    token = auth_service.create_access_token({"sub": "someone"}, expires_delta=timedelta(minutes=-1))
    assert auth_service.decode_access_token(token) == {"error": "TOKEN_EXPIRED"}

def test_garbage_token_is_rejected():
    assert auth_service.decode_access_token("not-a-jwt") is None
