"""Permission grant ledger: replace-all grants, revoke, listings."""

import pytest

from category import service as category_service
from conftest import ADMIN_PASSWORD, bearer, identity_of, register
from core.errors import Forbidden, InvalidReference, NotFound
from models.permission import PermissionGrant
from permission import service


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def categories(db, admin):
    return {
        name: category_service.create_category(db, admin, name, f"{name} content")
        for name in ("A", "B", "C")
    }


def _granted_ids(db, user_id):
    return sorted(
        row[0]
        for row in db.query(PermissionGrant.category_id).filter(PermissionGrant.user_id == user_id)
    )


# -- Grant -------------------------------------------------------------------------


def test_grant_replaces_whole_set(db, admin, alice, categories):
    service.grant_permissions(db, admin, alice.id, [categories["A"], categories["B"]])
    assert _granted_ids(db, alice.id) == sorted([categories["A"], categories["B"]])

    service.grant_permissions(db, admin, alice.id, [categories["C"]])
    assert _granted_ids(db, alice.id) == [categories["C"]]


def test_grant_empty_list_revokes_everything(db, admin, alice, categories):
    service.grant_permissions(db, admin, alice.id, list(categories.values()))
    service.grant_permissions(db, admin, alice.id, [])
    assert _granted_ids(db, alice.id) == []


def test_grant_records_granter_and_time(db, admin, admin_user, alice, categories):
    service.grant_permissions(db, admin, alice.id, [categories["A"]])
    grant = db.query(PermissionGrant).filter(PermissionGrant.user_id == alice.id).one()
    assert grant.granted_by_user_id == admin_user.id
    assert grant.granted_at is not None


def test_grant_does_not_touch_other_users(db, admin, alice, make_user, categories):
    bob = make_user("bob")
    service.grant_permissions(db, admin, bob.id, [categories["A"]])
    service.grant_permissions(db, admin, alice.id, [categories["B"]])
    assert _granted_ids(db, bob.id) == [categories["A"]]


def test_grant_collapses_repeated_ids(db, admin, alice, categories):
    service.grant_permissions(db, admin, alice.id, [categories["A"], categories["A"]])
    assert _granted_ids(db, alice.id) == [categories["A"]]


def test_grant_unknown_categories_changes_nothing(db, admin, alice, categories):
    service.grant_permissions(db, admin, alice.id, [categories["A"]])
    with pytest.raises(InvalidReference) as exc_info:
        service.grant_permissions(db, admin, alice.id, [categories["B"], 999, 500])
    assert exc_info.value.message == "Categories not found: 500, 999"
    assert _granted_ids(db, alice.id) == [categories["A"]]


def test_grant_to_unknown_user(db, admin, categories):
    with pytest.raises(NotFound):
        service.grant_permissions(db, admin, 999, [categories["A"]])


def test_grant_requires_admin(db, alice, categories):
    with pytest.raises(Forbidden):
        service.grant_permissions(db, identity_of(alice), alice.id, [categories["A"]])
    assert _granted_ids(db, alice.id) == []


# -- Revoke ------------------------------------------------------------------------


def test_revoke_removes_only_that_pair(db, admin, alice, categories):
    service.grant_permissions(db, admin, alice.id, [categories["A"], categories["B"]])
    service.revoke_permission(db, admin, alice.id, categories["A"])
    assert _granted_ids(db, alice.id) == [categories["B"]]


def test_revoke_missing_pair_is_not_found(db, admin, alice, categories):
    with pytest.raises(NotFound):
        service.revoke_permission(db, admin, alice.id, categories["A"])


def test_revoke_requires_admin(db, admin, alice, categories):
    service.grant_permissions(db, admin, alice.id, [categories["A"]])
    with pytest.raises(Forbidden):
        service.revoke_permission(db, identity_of(alice), alice.id, categories["A"])


# -- Listings ----------------------------------------------------------------------


def test_list_all_skips_admins_and_resolves_names(db, admin, alice, make_user, categories):
    bob = make_user("bob")
    service.grant_permissions(db, admin, alice.id, [categories["B"], categories["A"]])

    entries = service.list_all_permissions(db, admin)
    assert [e.username for e in entries] == ["alice", "bob"]

    alice_entry = entries[0]
    assert alice_entry.email == "alice@example.com"
    assert [p.category_name for p in alice_entry.permissions] == ["A", "B"]
    assert {p.granted_by_username for p in alice_entry.permissions} == {"admin"}
    assert entries[1].user_id == bob.id
    assert entries[1].permissions == []


def test_list_for_user(db, admin, alice, categories):
    service.grant_permissions(db, admin, alice.id, [categories["C"]])
    entry = service.list_user_permissions(db, admin, alice.id)
    assert entry.user_id == alice.id
    assert [p.category_id for p in entry.permissions] == [categories["C"]]


def test_list_for_unknown_user(db, admin):
    with pytest.raises(NotFound):
        service.list_user_permissions(db, admin, 999)


def test_listings_require_admin(db, alice):
    with pytest.raises(Forbidden):
        service.list_all_permissions(db, identity_of(alice))
    with pytest.raises(Forbidden):
        service.list_user_permissions(db, identity_of(alice), alice.id)


# -- HTTP --------------------------------------------------------------------------


def test_permission_http_routes(client):
    register(client, "root", password=ADMIN_PASSWORD, role="admin")
    register(client, "alice")
    admin_headers = bearer(client, "root", ADMIN_PASSWORD)
    alice_id = next(
        u["id"] for u in client.get("/auth/users", headers=admin_headers).json() if u["username"] == "alice"
    )
    docs = client.post("/category", json={"name": "Docs", "content": "c"}, headers=admin_headers).json()["categoryId"]

    resp = client.post(
        "/category/grant-permission",
        json={"userId": alice_id, "categoryIds": [docs]},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {"message": "Permissions granted successfully to alice"}

    bad = client.post(
        "/category/grant-permission",
        json={"userId": alice_id, "categoryIds": [docs, 77]},
        headers=admin_headers,
    )
    assert bad.status_code == 400
    assert bad.json() == {"message": "Categories not found: 77"}

    missing_user = client.post(
        "/category/grant-permission",
        json={"userId": 9999, "categoryIds": [docs]},
        headers=admin_headers,
    )
    assert missing_user.status_code == 404

    listing = client.get("/category/user-permissions", headers=admin_headers)
    assert listing.status_code == 200
    assert listing.json()[0]["permissions"][0]["categoryName"] == "Docs"

    single = client.get(f"/category/user-permissions/{alice_id}", headers=admin_headers)
    assert single.status_code == 200
    assert single.json()["username"] == "alice"
    assert single.json()["permissions"][0]["grantedByUsername"] == "root"

    revoked = client.delete(f"/category/revoke-permission/{alice_id}/{docs}", headers=admin_headers)
    assert revoked.status_code == 200
    again = client.delete(f"/category/revoke-permission/{alice_id}/{docs}", headers=admin_headers)
    assert again.status_code == 404
    assert again.json() == {"message": "Permission not found"}


def test_permission_routes_forbid_users(client):
    register(client, "alice")
    headers = bearer(client, "alice")
    assert client.get("/category/user-permissions", headers=headers).status_code == 403
    assert client.get("/category/user-permissions/1", headers=headers).status_code == 403
    assert client.delete("/category/revoke-permission/1/1", headers=headers).status_code == 403
    resp = client.post("/category/grant-permission", json={"userId": 1, "categoryIds": []}, headers=headers)
    assert resp.status_code == 403
