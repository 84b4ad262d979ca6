# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, employee, weekly_kpi, upload_log

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .employee import Employee, Position
from .weekly_kpi import WeeklyKPI, METRIC_FIELDS
from .upload_log import UploadLog

__all__ = [
    "User",
    "UserRole",
    "Employee",
    "Position",
    "WeeklyKPI",
    "METRIC_FIELDS",
    "UploadLog",
]
