import logging
from kpi_dashboard.core.config import settings
from kpi_dashboard.database import SessionLocal
from kpi_dashboard.models.user import User, UserRole
from kpi_dashboard.services import auth as auth_service

logger = logging.getLogger(__name__)

def init_system_data():
    """
    Creates the configured admin account when it does not exist yet.
    Existing users are never modified.
    """
    db = SessionLocal()
    try:
        existing_admin = db.query(User).filter(User.username == settings.admin_username).first()
        if existing_admin:
            logger.info(f"System initialization check: admin '{settings.admin_username}' present.")
            return

        db.add(User(
            username=settings.admin_username,
            password_hash=auth_service.get_password_hash(settings.admin_password),
            role=UserRole.ADMIN,
        ))
        db.commit()
        logger.info(f"✓ Created default admin: {settings.admin_username} (change the password immediately)")
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
    finally:
        db.close()
