from fastapi.testclient import TestClient

from jobdesk.models import StaffRecord


def test_login_returns_staff_without_password(client: TestClient, staff_member: StaffRecord) -> None:
    response = client.post("/auth/login", json={"username": "ravi", "password": "secret"})

    assert response.status_code == 200
    assert response.json() == {
        "id": "staff-1",
        "name": "Ravi Kumar",
        "username": "ravi",
        "role": "Technician",
    }


def test_login_rejects_wrong_password(client: TestClient, staff_member: StaffRecord) -> None:
    response = client.post("/auth/login", json={"username": "ravi", "password": "Secret"})

    assert response.status_code == 401
    assert response.json()["detail"] == "invalid credentials"


def test_login_requires_both_fields(client: TestClient) -> None:
    response = client.post("/auth/login", json={"username": "ravi", "password": ""})

    assert response.status_code == 422
