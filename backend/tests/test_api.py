"""End-to-end HTTP tests over in-memory storage."""
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.dependencies import build_services
from app.services.routines import InMemoryRoutineRepository
from app.services.users import InMemoryUserRepository
from main import create_app

ALICE = {"Authorization": "Bearer alice"}
BOB = {"Authorization": "Bearer bob"}


@pytest.fixture
def app_settings():
    settings = Settings()
    settings.REMINDERS_ENABLED = False
    settings.ALLOW_DEV_IMPERSONATION = False
    return settings


@pytest.fixture
def container(app_settings):
    return build_services(app_settings, InMemoryRoutineRepository(), InMemoryUserRepository())


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


def _create(client, headers=ALICE, **body):
    body.setdefault("title", "Read")
    return client.post("/v1/routines", json=body, headers=headers)


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/v1/health").status_code == 200


def test_requires_identity(client):
    assert client.get("/v1/routines").status_code == 401


def test_impersonation_header_only_when_enabled(container, app_settings):
    with TestClient(create_app(container)) as test_client:
        assert test_client.get("/v1/routines", headers={"X-User-Id": "alice"}).status_code == 401

    app_settings.ALLOW_DEV_IMPERSONATION = True
    with TestClient(create_app(container)) as test_client:
        assert test_client.get("/v1/routines", headers={"X-User-Id": "alice"}).status_code == 200


def test_create_and_get_routine_camel_case(client):
    response = _create(client, title="  Run ", schedule={"type": "daily", "time": "07:00"}, autoShare=True)
    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Run"
    assert body["userId"] == "alice"
    assert body["autoShare"] is True
    assert body["visibility"] == "private"
    assert body["currentStreak"] == 0 and body["maxStreak"] == 0
    assert body["deletedAt"] is None

    fetched = client.get(f"/v1/routines/{body['id']}", headers=ALICE)
    assert fetched.status_code == 200
    assert fetched.json()["id"] == body["id"]


def test_blank_title_is_400(client):
    response = _create(client, title="   ")
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_free_plan_limit_is_400(client):
    assert _create(client, title="One").status_code == 201
    assert _create(client, title="Two").status_code == 201
    response = _create(client, title="Three")
    assert response.status_code == 400
    assert "Free plan limit reached" in response.json()["message"]


def test_other_users_routine_is_404(client):
    routine_id = _create(client).json()["id"]
    response = client.get(f"/v1/routines/{routine_id}", headers=BOB)
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_list_pagination_params_are_lenient(client):
    _create(client, title="One")
    _create(client, title="Two")

    body = client.get("/v1/routines?page=abc&limit=500", headers=ALICE).json()
    assert body["page"] == 1
    assert body["limit"] == 100
    assert body["total"] == 2
    assert [r["title"] for r in body["items"]] == ["Two", "One"]

    body = client.get("/v1/routines?page=2&limit=1", headers=ALICE).json()
    assert [r["title"] for r in body["items"]] == ["One"]
    assert body["total"] == 2


def test_patch_routine(client):
    routine_id = _create(client, description="old").json()["id"]
    response = client.patch(f"/v1/routines/{routine_id}", json={"visibility": "public"}, headers=ALICE)
    assert response.status_code == 200
    assert response.json()["visibility"] == "public"
    assert response.json()["description"] == "old"

    bad = client.patch(f"/v1/routines/{routine_id}", json={"title": ""}, headers=ALICE)
    assert bad.status_code == 400


def test_delete_and_restore(client):
    routine_id = _create(client).json()["id"]
    assert client.delete(f"/v1/routines/{routine_id}", headers=ALICE).status_code == 204

    assert client.get("/v1/routines", headers=ALICE).json()["total"] == 0
    hidden = client.get(f"/v1/routines/{routine_id}", headers=ALICE)
    assert hidden.status_code == 400
    assert "deleted" in hidden.json()["message"]

    restored = client.post(f"/v1/routines/{routine_id}/restore", headers=ALICE)
    assert restored.status_code == 200
    assert restored.json()["deletedAt"] is None

    again = client.post(f"/v1/routines/{routine_id}/restore", headers=ALICE)
    assert again.status_code == 400


def test_completion_flow(client):
    routine_id = _create(client).json()["id"]
    url = f"/v1/routines/{routine_id}/completions"

    first = client.post(url, json={"date": "2024-04-01"}, headers=ALICE)
    second = client.post(url, json={"date": "2024-04-01"}, headers=ALICE)
    client.post(url, json={"date": "2024-04-02"}, headers=ALICE)
    assert first.status_code == 201
    assert first.json()["id"] == second.json()["id"]
    assert first.json()["routineId"] == routine_id

    items = client.get(url, headers=ALICE).json()["items"]
    assert [c["date"] for c in items] == ["2024-04-01", "2024-04-02"]

    routine = client.get(f"/v1/routines/{routine_id}", headers=ALICE).json()
    assert routine["maxStreak"] == 2
    assert routine["currentStreak"] <= routine["maxStreak"]

    ranged = client.get(f"{url}?from=2024-04-02&to=2024-04-02", headers=ALICE).json()["items"]
    assert [c["date"] for c in ranged] == ["2024-04-02"]
    assert client.get(f"{url}?from=2024-04-05&to=2024-04-01", headers=ALICE).status_code == 400

    assert client.delete(f"{url}/2024-04-01", headers=ALICE).status_code == 204
    assert client.delete(f"{url}/2024-04-01", headers=ALICE).status_code == 404
    assert client.post(url, json={"date": "04/01/2024"}, headers=ALICE).status_code == 400


def test_completion_requires_date(client):
    routine_id = _create(client).json()["id"]
    response = client.post(f"/v1/routines/{routine_id}/completions", json={}, headers=ALICE)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert "date" in response.json()["message"]


@pytest.mark.parametrize("body", [
    {"title": "Read", "visibility": "secret"},
    {"title": None},
    {"title": "Read", "autoShare": "sometimes"},
])
def test_malformed_routine_body_is_400(client, body):
    response = client.post("/v1/routines", json=body, headers=ALICE)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert client.get("/v1/routines", headers=ALICE).json()["total"] == 0


def test_users_me(client):
    assert client.get("/v1/users/me", headers=ALICE).status_code == 404

    created = client.patch("/v1/users/me", json={"displayName": "Alice", "isPremium": True}, headers=ALICE)
    assert created.status_code == 200
    assert created.json()["displayName"] == "Alice"
    assert created.json()["isPremium"] is False

    updated = client.patch(
        "/v1/users/me",
        json={"notificationSettings": {"whatsappEnabled": True, "whatsappNumber": "+15550001"}},
        headers=ALICE,
    )
    assert updated.json()["notificationSettings"]["whatsappEnabled"] is True
