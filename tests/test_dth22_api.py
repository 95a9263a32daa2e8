from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import api_manager.main as app_main
from api_manager import models
from api_manager.db import Base, get_session


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("API_MANAGER_DTH22_CORS_ENABLED", "1")
    monkeypatch.setattr(app_main, "init_db", lambda: None)

    db_path = tmp_path / "test_dth22_api.db"
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_session():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app_main.app.dependency_overrides[get_session] = override_get_session
    with TestClient(app_main.app) as test_client:
        yield test_client, TestingSessionLocal
    app_main.app.dependency_overrides.clear()


def _create(test_client: TestClient, **overrides: object) -> dict:
    payload: dict[str, object] = {"unit_name": "greenhouse-1", "suhu": 27.5, "kelembapan": 61.0}
    payload.update(overrides)
    response = test_client.post("/api/dth22", json=payload)
    assert response.status_code == 201
    return response.json()


def test_create_reading_returns_201_with_record(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, session_factory = client

    response = test_client.post(
        "/api/dth22",
        json={"unit_name": "greenhouse-1", "suhu": "27.5", "kelembapan": 61},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] >= 1
    assert body["unit_name"] == "greenhouse-1"
    assert body["suhu"] == 27.5
    assert body["kelembapan"] == 61.0
    assert response.headers["Access-Control-Allow-Origin"] == "*"

    with session_factory() as db:
        stored = db.get(models.Dth22Reading, body["id"])
        assert stored is not None
        assert stored.suhu == 27.5


def test_create_reading_missing_field_returns_400(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client

    response = test_client.post("/api/dth22", json={"unit_name": "greenhouse-1", "kelembapan": 61})

    assert response.status_code == 400
    assert response.json() == {"error": "Semua field harus diisi"}


@pytest.mark.parametrize(
    "payload",
    [
        {"unit_name": "", "suhu": 1, "kelembapan": 2},
        {"suhu": 1, "kelembapan": 2},
        {"unit_name": "a", "suhu": 1},
        {"unit_name": "a", "suhu": None, "kelembapan": 2},
    ],
)
def test_create_reading_requires_every_field(client: tuple[TestClient, sessionmaker], payload: dict) -> None:
    test_client, _ = client
    response = test_client.post("/api/dth22", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Semua field harus diisi"}


def test_create_reading_accepts_zero_values(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client
    body = _create(test_client, suhu=0, kelembapan=0)
    assert body["suhu"] == 0.0
    assert body["kelembapan"] == 0.0


def test_create_reading_rejects_non_numeric_values(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client
    response = test_client.post("/api/dth22", json={"unit_name": "a", "suhu": "hot", "kelembapan": 2})
    assert response.status_code == 400
    assert response.json() == {"error": "Suhu dan kelembapan harus berupa angka"}


def test_create_reading_rejects_malformed_json(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client
    response = test_client.post(
        "/api/dth22",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Body harus berupa JSON yang valid"}


def test_list_readings_newest_first(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client
    first = _create(test_client, unit_name="unit-a")
    second = _create(test_client, unit_name="unit-b")

    response = test_client.get("/api/dth22")

    assert response.status_code == 200
    ids = [item["id"] for item in response.json()]
    assert ids == [second["id"], first["id"]]
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, OPTIONS"


def test_update_reading_by_body_id(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client
    created = _create(test_client)

    response = test_client.put(
        "/api/dth22",
        json={"id": str(created["id"]), "suhu": "30.25", "created_at": "ignored", "extra": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["suhu"] == 30.25
    assert body["kelembapan"] == created["kelembapan"]
    assert body["unit_name"] == created["unit_name"]
    assert body["created_at"] == created["created_at"]


def test_update_reading_requires_id(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client
    response = test_client.put("/api/dth22", json={"suhu": 10})
    assert response.status_code == 400
    assert response.json() == {"error": "ID harus disertakan"}


def test_update_reading_unknown_id_returns_404(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client
    response = test_client.put("/api/dth22", json={"id": 9999, "suhu": 10})
    assert response.status_code == 404
    assert response.json() == {"error": "Data DTH22 tidak ditemukan"}


def test_update_and_delete_by_path(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, session_factory = client
    created = _create(test_client)

    update_response = test_client.put(
        f"/api/dth22/{created['id']}",
        json={**created, "unit_name": "renamed"},
    )
    assert update_response.status_code == 200
    assert update_response.json()["unit_name"] == "renamed"

    get_response = test_client.get(f"/api/dth22/{created['id']}")
    assert get_response.status_code == 200
    assert get_response.json()["unit_name"] == "renamed"

    delete_response = test_client.delete(f"/api/dth22/{created['id']}")
    assert delete_response.status_code == 200
    assert delete_response.json()["id"] == created["id"]

    with session_factory() as db:
        assert db.get(models.Dth22Reading, created["id"]) is None

    assert test_client.delete(f"/api/dth22/{created['id']}").status_code == 404


def test_options_preflight_returns_204_with_cors_headers(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client

    response = test_client.options("/api/dth22")

    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, Authorization"


def test_cors_headers_can_be_disabled(
    client: tuple[TestClient, sessionmaker],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    test_client, _ = client
    monkeypatch.setenv("API_MANAGER_DTH22_CORS_ENABLED", "0")

    response = test_client.get("/api/dth22")

    assert response.status_code == 200
    assert "Access-Control-Allow-Origin" not in response.headers


def test_storage_failure_returns_localized_500(
    client: tuple[TestClient, sessionmaker],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    from api_manager import dth22_api
    from api_manager.dth22_store import StorageError

    test_client, _ = client

    def fail_list_all(self) -> list:
        raise StorageError("database unavailable")

    monkeypatch.setattr(dth22_api.Dth22Store, "list_all", fail_list_all)

    response = test_client.get("/api/dth22")

    assert response.status_code == 500
    assert response.json() == {"error": "Gagal mengambil data DTH22"}


@pytest.mark.parametrize("record_id", [10**30, -3, "2e5"])
def test_update_reading_rejects_out_of_range_body_id(
    client: tuple[TestClient, sessionmaker],
    record_id: object,
) -> None:
    test_client, _ = client

    response = test_client.put("/api/dth22", json={"id": record_id, "suhu": 1})

    assert response.status_code == 400
    assert response.json() == {"error": "ID harus berupa angka"}
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_out_of_range_path_id_is_not_found(client: tuple[TestClient, sessionmaker]) -> None:
    test_client, _ = client
    too_large = 2**63

    assert test_client.get(f"/api/dth22/{too_large}").status_code == 404
    assert test_client.put(f"/api/dth22/{too_large}", json={"suhu": 1}).status_code == 404

    response = test_client.delete(f"/api/dth22/{too_large}")
    assert response.status_code == 404
    assert response.json() == {"error": "Data DTH22 tidak ditemukan"}
