import io
import pytest
from datetime import date
from fastapi import status
from kpi_dashboard.core.exceptions import UploadRejectedError
from kpi_dashboard.models.employee import Employee
from kpi_dashboard.models.user import User
from kpi_dashboard.models.weekly_kpi import WeeklyKPI
from kpi_dashboard.routers.admin import read_upload

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
JAN_W2 = date(2025, 1, 6)


def _upload(client, headers, content, filename="kpi.xlsx"):
    return client.post(
        "/api/admin/upload",
        headers=headers,
        files={"file": (filename, content, XLSX_TYPE)},
    )


def test_admin_routes_reject_viewers(client, viewer_headers):
    response = client.get("/api/admin/data", headers=viewer_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_upload_and_history(client, admin_headers, make_workbook):
    content = make_workbook([{"name": "Anna Kowalska"}, {"name": "Jan Nowak", "days_worked": 8}])

    response = _upload(client, admin_headers, content)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Processed with errors: 1 success, 1 failed"
    assert body["details"]["rowsProcessed"] == 2
    assert body["details"]["rowsFailed"] == 1
    assert body["details"]["errors"] == ["Row 3: Days worked must be between 0 and 7"]

    history = client.get("/api/admin/history", headers=admin_headers).json()
    assert len(history) == 1
    assert history[0]["filename"] == "kpi.xlsx"
    assert history[0]["uploadedByName"] == "test-admin"


def test_upload_rejects_wrong_extension(client, admin_headers):
    response = _upload(client, admin_headers, b"a,b,c", filename="kpi.csv")
    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "UPLOAD_REJECTED"


def test_upload_without_file(client, admin_headers):
    response = client.post("/api/admin/upload", headers=admin_headers, data={"other": "x"})
    assert response.status_code == 400
    assert response.json()["errors"][0]["msg"] == "No file uploaded"


def test_upload_too_large(client, admin_headers, monkeypatch):
    from kpi_dashboard.core.config import settings
    monkeypatch.setattr(settings, "max_upload_mb", 0)
    response = _upload(client, admin_headers, b"x" * 10)
    assert response.status_code == 400
    assert "too large" in response.json()["errors"][0]["msg"]


def test_upload_legacy_xls(client, db_session, admin_headers, make_xls_workbook):
    content = make_xls_workbook([{"name": "Anna Kowalska", "verifications": 12}])

    response = client.post(
        "/api/admin/upload",
        headers=admin_headers,
        files={"file": ("kpi.xls", content, "application/vnd.ms-excel")},
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["details"]["rowsSuccess"] == 1
    assert db_session.query(WeeklyKPI).one().verifications == 12


def test_read_upload_stops_past_the_limit():
    stream = io.BytesIO(b"x" * 100)

    with pytest.raises(UploadRejectedError):
        read_upload(stream, 10)

    assert stream.tell() == 11
    assert read_upload(io.BytesIO(b"x" * 10), 10) == b"x" * 10


def test_unreadable_workbook_is_reported_not_raised(client, admin_headers):
    response = _upload(client, admin_headers, b"garbage bytes")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["details"]["errors"][0].startswith("File processing error:")


def test_list_update_and_delete_record(client, db_session, admin_headers, add_week):
    record = add_week("Anna Kowalska", "Sourcer", JAN_W2, verifications=20)
    record_id = record.id

    data = client.get("/api/admin/data", headers=admin_headers).json()
    assert data[0]["name"] == "Anna Kowalska"
    assert data[0]["position"] == "Sourcer"

    response = client.put(f"/api/admin/record/{record_id}", headers=admin_headers, json={
        "verifications": 5, "cvAdded": 0, "recommendations": 1,
        "interviews": 0, "placements": 0, "daysWorked": 2,
    })
    assert response.status_code == 200
    assert response.json()["verifications"] == 5
    assert response.json()["daysWorked"] == 2

    response = client.put(f"/api/admin/record/{record_id}", headers=admin_headers, json={
        "verifications": 5, "recommendations": 1, "interviews": 0, "placements": 0, "daysWorked": 9,
    })
    assert response.status_code == 422

    assert client.delete(f"/api/admin/record/{record_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/admin/record/{record_id}", headers=admin_headers).status_code == 404


def test_delete_week(client, db_session, admin_headers, add_week):
    add_week("Anna Kowalska", "Sourcer", JAN_W2)
    add_week("Jan Nowak", "Sourcer", JAN_W2)
    add_week("Jan Nowak", "Sourcer", date(2025, 1, 13))

    response = client.delete("/api/admin/week/2025-01-06", headers=admin_headers)

    assert response.json()["deleted"] == 2
    assert db_session.query(WeeklyKPI).count() == 1


def test_delete_all_keeps_employees_and_users(client, db_session, admin_headers, add_week):
    add_week("Anna Kowalska", "Sourcer", JAN_W2)
    add_week("Jan Nowak", "Sourcer", JAN_W2)
    users_before = db_session.query(User).count()

    response = client.delete("/api/admin/all-data", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["deleted"] == 2
    assert db_session.query(WeeklyKPI).count() == 0
    assert db_session.query(Employee).count() == 2
    assert db_session.query(User).count() == users_before


def test_employee_crud(client, db_session, admin_headers):
    response = client.post("/api/admin/employee", headers=admin_headers,
                           json={"name": "Ewa Nowa", "position": "Rekruter"})
    assert response.status_code == 200
    employee = response.json()
    assert employee["position"] == "Rekruter"
    assert employee["isActive"] is True

    response = client.put(f"/api/admin/employee/{employee['id']}", headers=admin_headers,
                          json={"position": "TAC"})
    assert response.json()["position"] == "TAC"

    response = client.delete(f"/api/admin/employee/{employee['id']}", headers=admin_headers)
    assert response.json()["isActive"] is False
    assert db_session.get(Employee, employee["id"]) is not None


def test_employee_invalid_position_is_400(client, admin_headers):
    response = client.post("/api/admin/employee", headers=admin_headers,
                           json={"name": "Ewa Nowa", "position": "Manager"})
    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "INVALID_POSITION"


def test_employee_duplicate_name_is_400(client, admin_headers):
    payload = {"name": "Ewa Nowa", "position": "Sourcer"}
    assert client.post("/api/admin/employee", headers=admin_headers, json=payload).status_code == 200

    response = client.post("/api/admin/employee", headers=admin_headers, json=payload)

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "DUPLICATE_EMPLOYEE"


def test_update_unknown_employee_is_404(client, admin_headers):
    response = client.put("/api/admin/employee/4242", headers=admin_headers, json={"isActive": False})
    assert response.status_code == 404
