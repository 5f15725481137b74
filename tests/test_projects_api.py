import pytest
from fastapi.testclient import TestClient

from freelance_ledger.app.db.base import Base
from freelance_ledger.app.db.session import engine
from freelance_ledger.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str) -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


def create_project(client: TestClient, headers: dict) -> dict:
    client_id = client.post("/clients/", json={"name": "Acme"}, headers=headers).json()["id"]
    resp = client.post(
        "/projects/",
        json={"client_id": client_id, "name": "Website", "billing_type": "HOURLY", "hourly_rate": "85.00"},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()


def bill_an_hour(client: TestClient, headers: dict, project_id: int, start: str) -> dict:
    client.post("/time/manual", json={"project_id": project_id, "start": start, "duration_min": 60}, headers=headers)
    resp = client.post("/invoices/generate-project", json={"project_id": project_id}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


def test_create_read_and_update_project():
    client = TestClient(app)
    token = register_and_login(client, "proj@example.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}
    project = create_project(client, headers)
    assert project["status"] == "ACTIVE"
    assert project["is_archived"] is False

    fetched = client.get(f"/projects/{project['id']}", headers=headers)
    assert fetched.json()["name"] == "Website"

    updated = client.patch(f"/projects/{project['id']}", json={"name": "Website v2"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["name"] == "Website v2"
    assert [p["id"] for p in client.get("/projects/", headers=headers).json()] == [project["id"]]


def test_status_transitions_and_handover():
    client = TestClient(app)
    token = register_and_login(client, "status@example.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}
    project = create_project(client, headers)

    handed = client.patch(f"/projects/{project['id']}/status", json={"status": "HANDED_OVER"}, headers=headers)
    assert handed.status_code == 200
    assert handed.json()["is_archived"] is True
    assert handed.json()["handed_over_at"] is not None

    back = client.patch(f"/projects/{project['id']}/status", json={"status": "ON_HOLD"}, headers=headers)
    assert back.json()["is_archived"] is False

    bad = client.patch(f"/projects/{project['id']}/status", json={"status": "DONE"}, headers=headers)
    assert bad.status_code == 400


def test_freelancer_cancel_voids_draft_and_keeps_paid():
    client = TestClient(app)
    token = register_and_login(client, "cancel@example.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}
    project = create_project(client, headers)
    paid = bill_an_hour(client, headers, project["id"], "2030-01-01T09:00:00Z")
    client.post(f"/invoices/{paid['id']}/status", json={"status": "PAID"}, headers=headers)
    draft = bill_an_hour(client, headers, project["id"], "2030-01-02T09:00:00Z")

    resp = client.post(f"/projects/{project['id']}/cancel", json={"cancelled_by": "freelancer"}, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["project"]["status"] == "CANCELLED_BY_FREELANCER"
    assert data["project"]["is_archived"] is True
    assert data["voided_invoice_ids"] == [draft["id"]]

    assert client.get(f"/invoices/{draft['id']}", headers=headers).json()["status"] == "VOID"
    assert client.get(f"/invoices/{paid['id']}", headers=headers).json()["status"] == "PAID"


def test_client_cancel_keeps_invoices_and_blocks_further_changes():
    client = TestClient(app)
    token = register_and_login(client, "clientcancel@example.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}
    project = create_project(client, headers)
    draft = bill_an_hour(client, headers, project["id"], "2030-01-01T09:00:00Z")

    resp = client.post(f"/projects/{project['id']}/cancel", json={"cancelled_by": "client"}, headers=headers)
    assert resp.json()["project"]["status"] == "CANCELLED_BY_CLIENT"
    assert client.get(f"/invoices/{draft['id']}", headers=headers).json()["status"] == "DRAFT"

    again = client.post(f"/projects/{project['id']}/cancel", json={"cancelled_by": "client"}, headers=headers)
    assert again.status_code == 409
    reopen = client.patch(f"/projects/{project['id']}/status", json={"status": "ACTIVE"}, headers=headers)
    assert reopen.status_code == 409


def test_invalid_cancel_type_returns_400():
    client = TestClient(app)
    token = register_and_login(client, "badcancel@example.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}
    project = create_project(client, headers)
    resp = client.post(f"/projects/{project['id']}/cancel", json={"cancelled_by": "agency"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid cancel type"}


def test_delete_project():
    client = TestClient(app)
    token = register_and_login(client, "delete@example.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}
    project = create_project(client, headers)
    bill_an_hour(client, headers, project["id"], "2030-01-01T09:00:00Z")

    resp = client.delete(f"/projects/{project['id']}", headers=headers)
    assert resp.status_code == 200
    assert client.get(f"/projects/{project['id']}", headers=headers).status_code == 404
    assert client.get("/invoices/", headers=headers).json() == []


def test_other_users_project_is_not_found():
    client = TestClient(app)
    owner = register_and_login(client, "owner@example.com", "secret")
    intruder = register_and_login(client, "intruder@example.com", "secret")
    project = create_project(client, {"Authorization": f"Bearer {owner}"})
    resp = client.get(f"/projects/{project['id']}", headers={"Authorization": f"Bearer {intruder}"})
    assert resp.status_code == 404
