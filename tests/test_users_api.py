"""Admin user-management tests — the Admin Gate and the role/delete rules."""

import uuid

import pytest


def _new_user(username, **overrides):
    body = {
        "full_name": "Lan Vo",
        "dob": "1995-06-15",
        "gender": "female",
        "username": username,
        "email": f"{username}@example.com",
        "password": "secret123",
    }
    body.update(overrides)
    return body


# ═══════════════════════════════════════════════════════════
# Admin Gate
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_user_routes_require_auth(client, admin):
    assert (await client.get("/api/users")).status_code == 401
    assert (await client.post("/api/users", json=_new_user("lan"))).status_code == 401


@pytest.mark.asyncio
async def test_non_admin_gets_403_everywhere(client, admin, member):
    h = member["headers"]
    target = admin["user"]["id"]

    r = await client.get("/api/users", headers=h)
    assert r.status_code == 403
    assert r.json()["detail"] == "Not authorized as an admin"
    assert (await client.post("/api/users", headers=h, json=_new_user("lan"))).status_code == 403
    assert (
        await client.patch(f"/api/users/{target}", headers=h, json={"is_admin": False})
    ).status_code == 403
    assert (await client.delete(f"/api/users/{target}", headers=h)).status_code == 403


# ═══════════════════════════════════════════════════════════
# Create / list
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_admin_creates_regular_user_by_default(client, admin):
    r = await client.post("/api/users", headers=admin["headers"], json=_new_user("lan"))
    assert r.status_code == 201
    user = r.json()
    assert user["username"] == "lan"
    assert user["is_admin"] is False
    assert "password_hash" not in user


@pytest.mark.asyncio
async def test_admin_creates_admin(client, admin, login):
    r = await client.post(
        "/api/users", headers=admin["headers"], json=_new_user("lan", is_admin=True)
    )
    assert r.status_code == 201
    assert r.json()["is_admin"] is True

    # and the new account can log in with the password the admin chose
    assert await login("lan")


@pytest.mark.asyncio
async def test_admin_create_duplicate_email(client, admin):
    r = await client.post(
        "/api/users",
        headers=admin["headers"],
        json=_new_user("lan", email="alice@example.com"),
    )
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_admin_create_missing_fields(client, admin):
    r = await client.post(
        "/api/users", headers=admin["headers"], json={"username": "lan"}
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_list_users_newest_first(client, admin, member):
    await client.post("/api/users", headers=admin["headers"], json=_new_user("lan"))

    r = await client.get("/api/users", headers=admin["headers"])
    assert r.status_code == 200
    usernames = [u["username"] for u in r.json()]
    assert usernames == ["lan", "bob", "alice"]
    assert all("password_hash" not in u for u in r.json())


# ═══════════════════════════════════════════════════════════
# Role changes
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_promote_member(client, admin, member):
    r = await client.patch(
        f"/api/users/{member['user']['id']}",
        headers=admin["headers"],
        json={"is_admin": True},
    )
    assert r.status_code == 200
    assert r.json()["is_admin"] is True

    # takes effect on the member's very next request
    r = await client.get("/api/users", headers=member["headers"])
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_demoted_admin_loses_access(client, admin, member):
    await client.patch(
        f"/api/users/{member['user']['id']}",
        headers=admin["headers"],
        json={"is_admin": True},
    )
    r = await client.patch(
        f"/api/users/{member['user']['id']}",
        headers=admin["headers"],
        json={"is_admin": False},
    )
    assert r.json()["is_admin"] is False
    assert (await client.get("/api/users", headers=member["headers"])).status_code == 403


@pytest.mark.asyncio
async def test_admin_cannot_change_own_role(client, admin):
    r = await client.patch(
        f"/api/users/{admin['user']['id']}",
        headers=admin["headers"],
        json={"is_admin": False},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Admins cannot change their own role."

    me = (await client.get("/api/auth/me", headers=admin["headers"])).json()
    assert me["is_admin"] is True


@pytest.mark.asyncio
async def test_role_update_unknown_user(client, admin):
    r = await client.patch(
        f"/api/users/{uuid.uuid4()}", headers=admin["headers"], json={"is_admin": True}
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_role_update_malformed_id(client, admin):
    r = await client.patch(
        "/api/users/not-a-uuid", headers=admin["headers"], json={"is_admin": True}
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_role_update_requires_flag(client, admin, member):
    r = await client.patch(
        f"/api/users/{member['user']['id']}", headers=admin["headers"], json={}
    )
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_member_removes_account_and_conversations(client, admin, member):
    r = await client.post(
        "/api/conversations",
        headers=member["headers"],
        json={"assistant_name": "Emma", "gender": "female", "scenario": "restaurant"},
    )
    assert r.status_code == 201

    r = await client.delete(f"/api/users/{member['user']['id']}", headers=admin["headers"])
    assert r.status_code == 200
    assert r.json() == {"message": "User removed"}

    users = (await client.get("/api/users", headers=admin["headers"])).json()
    assert [u["username"] for u in users] == ["alice"]

    login = await client.post(
        "/api/auth/login", json={"identifier": "bob", "password": "secret123"}
    )
    assert login.status_code == 401


@pytest.mark.asyncio
async def test_cannot_delete_admin(client, admin):
    other = await client.post(
        "/api/users", headers=admin["headers"], json=_new_user("lan", is_admin=True)
    )
    r = await client.delete(f"/api/users/{other.json()['id']}", headers=admin["headers"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot delete an admin account."


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(client, admin):
    r = await client.delete(f"/api/users/{admin['user']['id']}", headers=admin["headers"])
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_delete_unknown_user(client, admin):
    r = await client.delete(f"/api/users/{uuid.uuid4()}", headers=admin["headers"])
    assert r.status_code == 404
    r = await client.delete("/api/users/12345", headers=admin["headers"])
    assert r.status_code == 404
