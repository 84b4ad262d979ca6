"""
Create a dashboard user, or reset the password of an existing one.

    python scripts/create_admin.py <username> <password> [admin|viewer]
"""
import sys
import os
import logging
from sqlalchemy.orm import Session

# Ensure we can import kpi_dashboard modules
sys.path.append(os.getcwd())

from kpi_dashboard.database import SessionLocal, init_db
from kpi_dashboard.models.user import User, UserRole
from kpi_dashboard.services.auth import get_password_hash

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

def create_or_reset_user(username: str, password: str, role: UserRole):
    init_db()
    db: Session = SessionLocal()
    try:
        user = db.query(User).filter(User.username == username).first()
        if user:
            user.password_hash = get_password_hash(password)
            user.role = role
            logger.warning(f"User '{username}' already exists, password and role reset.")
        else:
            db.add(User(username=username, password_hash=get_password_hash(password), role=role))
            logger.info(f"User '{username}' created with role {role.value}.")
        db.commit()
    except Exception as e:
        logger.error(f"Error creating user: {e}")
        db.rollback()
    finally:
        db.close()

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    role = UserRole(sys.argv[3]) if len(sys.argv) > 3 else UserRole.ADMIN
    create_or_reset_user(sys.argv[1], sys.argv[2], role)
