import io
import os
from datetime import date

import pytest
import xlwt
from openpyxl import Workbook
from sqlalchemy.orm import sessionmaker

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OPENROUTER_API_KEY"] = ""

from kpi_dashboard.database import Base, build_engine, get_db
from kpi_dashboard.main import app
from fastapi.testclient import TestClient

HEADER = [
    "Name", "Position", "Week start", "Week end", "Days worked",
    "Verifications", "CV added", "Recommendations", "Interviews", "Placements",
]

# Separate in-memory database, the app engine only sees the lifespan bootstrap
engine = build_engine("sqlite:///:memory:")
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    import kpi_dashboard.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Clean session per test: commits become savepoints, everything is rolled back."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def admin_user(db_session):
    from kpi_dashboard.models.user import UserRole
    from kpi_dashboard.services import auth as auth_service
    return auth_service.create_user(db_session, "test-admin", "AdminPassword123!", UserRole.ADMIN)

@pytest.fixture(scope="function")
def viewer_user(db_session):
    from kpi_dashboard.models.user import UserRole
    from kpi_dashboard.services import auth as auth_service
    return auth_service.create_user(db_session, "test-viewer", "ViewerPassword123!", UserRole.VIEWER)

@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a user."""
    from kpi_dashboard.services.auth import token_for_user
    return token_for_user

@pytest.fixture(scope="function")
def admin_headers(admin_user, get_token):
    return {"Authorization": f"Bearer {get_token(admin_user)}"}

@pytest.fixture(scope="function")
def viewer_headers(viewer_user, get_token):
    return {"Authorization": f"Bearer {get_token(viewer_user)}"}

@pytest.fixture(scope="function")
def make_workbook():
    """
    Builds an .xlsx in memory. Rows are lists in sheet column order;
    dict rows are expanded with defaults for the columns they omit.
    """
    def _make(rows, header=True):
        wb = Workbook()
        ws = wb.active
        if header:
            ws.append(HEADER)
        for row in rows:
            if isinstance(row, dict):
                row = kpi_row(**row)
            ws.append(row)
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
    return _make

@pytest.fixture
def make_xls_workbook():
    """Same rows as make_workbook, written as a legacy .xls (BIFF8) file."""
    date_style = xlwt.easyxf(num_format_str="YYYY-MM-DD")

    def _make(rows):
        wb = xlwt.Workbook(encoding="utf-8")
        ws = wb.add_sheet("KPI")
        for col, title in enumerate(HEADER):
            ws.write(0, col, title)
        for row_index, row in enumerate(rows, start=1):
            if isinstance(row, dict):
                row = kpi_row(**row)
            for col, value in enumerate(row):
                if isinstance(value, date):
                    ws.write(row_index, col, value, date_style)
                elif value is not None:
                    ws.write(row_index, col, value)
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
    return _make

def kpi_row(
    name="Anna Kowalska",
    position="Sourcer",
    week_start=date(2025, 1, 6),
    week_end=date(2025, 1, 12),
    days_worked=5,
    verifications=20,
    cv_added=0,
    recommendations=4,
    interviews=1,
    placements=0,
):
    return [name, position, week_start, week_end, days_worked,
            verifications, cv_added, recommendations, interviews, placements]

@pytest.fixture(scope="function")
def add_week(db_session):
    """Insert one weekly record directly, creating the employee if needed."""
    from kpi_dashboard.models.employee import Employee, Position
    from kpi_dashboard.models.weekly_kpi import WeeklyKPI

    def _add(name, position, week_start, days_worked=5, verifications=0, cv_added=0,
             recommendations=0, interviews=0, placements=0, is_active=True):
        employee = db_session.query(Employee).filter(Employee.name == name).first()
        if employee is None:
            employee = Employee(name=name, position=Position(position), is_active=is_active)
            db_session.add(employee)
            db_session.flush()
        record = WeeklyKPI(
            employee_id=employee.id,
            week_start=week_start,
            week_end=date.fromordinal(week_start.toordinal() + 6),
            year=week_start.year,
            month=week_start.month,
            week_number=week_start.isocalendar()[1],
            verifications=verifications,
            cv_added=cv_added,
            recommendations=recommendations,
            interviews=interviews,
            placements=placements,
            days_worked=days_worked,
        )
        db_session.add(record)
        db_session.commit()
        return record
    return _add

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
