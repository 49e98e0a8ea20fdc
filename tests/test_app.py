"""Application wiring: health, routing, error rendering and an end-to-end flow."""

from conftest import ADMIN_PASSWORD, bearer, login, register


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_paths_are_case_insensitive(client):
    assert register(client, "alice").status_code == 200
    resp = client.post("/Auth/Login", json={"usernameOrEmail": "alice", "password": "User-pass-1"})
    assert resp.status_code == 200
    headers = {"Authorization": f"Bearer {resp.json()['token']}"}
    assert client.get("/CATEGORY", headers=headers).status_code == 200
    assert client.get("/Auth/Profile", headers=headers).json()["username"] == "alice"


def test_user_permissions_route_is_not_a_category_id(client):
    register(client, "root", password=ADMIN_PASSWORD, role="admin")
    headers = bearer(client, "root", ADMIN_PASSWORD)
    resp = client.get("/category/user-permissions", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == []


def test_malformed_body_is_400_with_message(client):
    resp = client.post("/auth/login", json={"usernameOrEmail": "alice"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "password: Field required"}


def test_malformed_profile_update_is_400(client):
    register(client, "alice")
    resp = client.put("/auth/profile", json={"email": ["not", "a", "string"]}, headers=bearer(client, "alice"))
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("email: ")


def test_grant_and_revoke_flow(client):
    register(client, "root", password=ADMIN_PASSWORD, role="admin")
    register(client, "u1")
    admin_headers = bearer(client, "root", ADMIN_PASSWORD)
    user_headers = bearer(client, "u1")

    c1 = client.post("/category", json={"name": "C1", "content": "one"}, headers=admin_headers).json()["categoryId"]
    client.post("/category", json={"name": "C2", "content": "two"}, headers=admin_headers)
    u1_id = client.get("/auth/profile", headers=user_headers).json()["id"]

    assert client.get("/category", headers=user_headers).json() == []

    client.post(
        "/category/grant-permission",
        json={"userId": u1_id, "categoryIds": [c1]},
        headers=admin_headers,
    )
    visible = client.get("/category", headers=user_headers).json()
    assert [c["id"] for c in visible] == [c1]
    assert visible[0]["createdByUsername"] == "root"
    assert client.get(f"/category/{c1}", headers=user_headers).status_code == 200

    client.delete(f"/category/revoke-permission/{u1_id}/{c1}", headers=admin_headers)
    assert client.get("/category", headers=user_headers).json() == []
    assert client.get(f"/category/{c1}", headers=user_headers).status_code == 403


def test_login_failure_body(client):
    resp = login(client, "ghost", "nope")
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid credentials"}
