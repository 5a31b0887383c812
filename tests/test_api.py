from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import make_settings


PHOTO_A = b"\x89PNG photo A"
PHOTO_B = b"\xff\xd8 photo B"


def _register(client: TestClient, name: str = "Drill", description: str = "", photo: bytes | None = PHOTO_A):
    files = {"photo": ("drill.png", photo, "image/png")} if photo is not None else None
    return client.post("/register", data={"inventory_name": name, "description": description}, files=files)


def test_register_returns_item_with_photo_url(client: TestClient) -> None:
    resp = _register(client, description="cordless")
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Drill"
    assert body["description"] == "cordless"
    assert body["photo_url"] == f"/inventory/{body['id']}/photo"
    assert "photo" not in body


def test_register_without_name_is_bad_request(client: TestClient, settings) -> None:
    resp = client.post("/register", data={"description": "x"}, files={"photo": ("a.png", PHOTO_A, "image/png")})
    assert resp.status_code == 400
    assert client.get("/inventory").json() == []
    assert [p.name for p in settings.cache_path.iterdir() if p.name != settings.JSON_DB_FILENAME] == []


def test_list_and_get(client: TestClient) -> None:
    created = _register(client, photo=None).json()
    assert created["photo_url"] is None
    assert client.get("/inventory").json() == [created]
    assert client.get(f"/inventory/{created['id']}").json() == created
    assert client.get("/inventory/does-not-exist").status_code == 404


def test_update_fields(client: TestClient) -> None:
    created = _register(client, description="old").json()
    resp = client.put(f"/inventory/{created['id']}", json={"description": "new"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Drill"
    assert resp.json()["description"] == "new"

    empty = client.put(f"/inventory/{created['id']}", json={"name": "", "description": ""})
    assert empty.status_code == 400
    assert client.get(f"/inventory/{created['id']}").json()["description"] == "new"

    assert client.put("/inventory/nope", json={"name": "x"}).status_code == 404


def test_photo_fetch_and_replace(client: TestClient) -> None:
    created = _register(client).json()
    photo_url = created["photo_url"]
    first = client.get(photo_url)
    assert first.status_code == 200
    assert first.content == PHOTO_A

    resp = client.put(photo_url, files={"photo": ("new.jpg", PHOTO_B, "image/jpeg")})
    assert resp.status_code == 200
    assert client.get(photo_url).content == PHOTO_B

    assert client.put(photo_url).status_code == 400
    assert client.put("/inventory/nope/photo", files={"photo": ("n.jpg", PHOTO_B, "image/jpeg")}).status_code == 404


def test_photo_fetch_without_photo_or_item(client: TestClient) -> None:
    bare = _register(client, photo=None).json()
    assert client.get(f"/inventory/{bare['id']}/photo").status_code == 404
    assert client.get("/inventory/nope/photo").status_code == 404


def test_missing_photo_file_is_not_found(client: TestClient, settings) -> None:
    created = _register(client).json()
    for path in settings.cache_path.iterdir():
        if path.name != settings.JSON_DB_FILENAME:
            path.unlink()
    assert client.get(created["photo_url"]).status_code == 404


def test_delete_removes_record_and_file(client: TestClient, settings) -> None:
    created = _register(client).json()
    resp = client.delete(f"/inventory/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert client.get(f"/inventory/{created['id']}").status_code == 404
    assert [p.name for p in settings.cache_path.iterdir() if p.name != settings.JSON_DB_FILENAME] == []
    assert client.delete(f"/inventory/{created['id']}").status_code == 404


def test_search_post_and_get(client: TestClient) -> None:
    created = _register(client, description="d").json()
    item_id = created["id"]

    posted = client.post("/search", data={"id": item_id, "includePhoto": "on"})
    assert posted.status_code == 201
    assert posted.json() == {
        "id": item_id,
        "name": "Drill",
        "description": "d",
        "photo_url": f"/inventory/{item_id}/photo",
    }

    plain = client.get("/search", params={"id": item_id})
    assert plain.status_code == 200
    assert plain.json() == {"id": item_id, "name": "Drill", "description": "d"}

    assert client.get("/search", params={"id": "nope"}).status_code == 404
    assert client.post("/search", data={"id": "nope"}).status_code == 404


def test_unmatched_route_or_method_is_405(client: TestClient) -> None:
    assert client.get("/nowhere").status_code == 405
    assert client.patch("/inventory").status_code == 405
    assert client.post("/inventory/123").status_code == 405


def test_forms_and_health(client: TestClient, backend: str) -> None:
    for page in ("/RegisterForm.html", "/SearchForm.html"):
        resp = client.get(page)
        assert resp.status_code == 200
        assert "<form" in resp.text
    health = client.get("/health/")
    assert health.status_code == 200
    assert health.json()["record_store"] == backend


def test_request_id_header_is_echoed(client: TestClient) -> None:
    from inventory_service.core.logging_config import set_request_logs_enabled

    set_request_logs_enabled(True)
    try:
        resp = client.get("/inventory", headers={"x-request-id": "abc123"})
    finally:
        set_request_logs_enabled(False)
    assert resp.headers["x-request-id"] == "abc123"


def test_forms_post_to_prefixed_routes(tmp_path) -> None:
    from inventory_service.main import create_app

    settings = make_settings(tmp_path, "json").model_copy(update={"API_PREFIX": "/api/v1"})
    with TestClient(create_app(settings)) as prefixed:
        register_page = prefixed.get("/api/v1/RegisterForm.html")
        search_page = prefixed.get("/api/v1/SearchForm.html")
    assert 'action="/api/v1/register"' in register_page.text
    assert 'action="/api/v1/search"' in search_page.text
    assert "{api_prefix}" not in register_page.text
