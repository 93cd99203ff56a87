import pytest

from teamhub.services.identity import IdentityProvider

ROOT_UID = "root-uid"


async def _login(client, email, password="secret1"):
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def _bootstrap_root(client, session_maker):
    async with session_maker() as session:
        await IdentityProvider(session).register("root@example.com", "secret1", uid=ROOT_UID)
    return await _login(client, "root@example.com")


async def _create_user(client, headers, email, role):
    response = await client.post(
        "/api/users/",
        json={"email": email, "password": "secret1", "displayName": role.title(), "role": role},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_task_flow(client, session_maker):
    root = await _bootstrap_root(client, session_maker)
    me = await client.get("/api/auth/me", headers=root)
    assert me.json()["role"] == "super_admin"

    response = await client.put(
        "/api/milestones/active", json={"title": "Launch", "deadline": 1_900_000_000_000}, headers=root
    )
    assert response.status_code == 200, response.text
    assert response.json()["id"] == "active"

    await _create_user(client, root, "admin@example.com", "admin")
    await _create_user(client, root, "staff@example.com", "staff")
    admin = await _login(client, "admin@example.com")
    staff = await _login(client, "staff@example.com")

    response = await client.post("/api/tasks/", json={"title": "Promote", "assignedRole": "super_admin"}, headers=admin)
    assert response.status_code == 403
    assert response.json()["code"] == "error_role_not_assignable"

    response = await client.post(
        "/api/tasks/", json={"title": "Write release notes", "assignedRole": "staff"}, headers=admin
    )
    assert response.status_code == 201, response.text
    task = response.json()
    assert task["assignedByRole"] == "admin"
    assert task["status"] == "todo"

    board = (await client.get("/api/tasks/", headers=staff)).json()
    assert [t["id"] for t in board["mine"]] == [task["id"]]
    assert board["subordinates"] == []

    status_url = f"/api/tasks/{task['id']}/status"
    response = await client.patch(status_url, json={"status": "blocked", "blockReason": " "}, headers=staff)
    assert response.status_code == 422
    assert response.json() == {
        "detail": "Block reason is required",
        "code": "error_block_reason_required",
        "field": "blockReason",
    }

    response = await client.patch(status_url, json={"status": "done"}, headers=root)
    assert response.status_code == 403
    assert response.json()["code"] == "error_done_requires_assigner_role"

    response = await client.patch(status_url, json={"status": "done"}, headers=admin)
    assert response.status_code == 200
    assert response.json()["status"] == "done"

    comments = (await client.get(f"/api/tasks/{task['id']}/comments", headers=staff)).json()
    assert [c["type"] for c in comments] == ["system_log"]

    assert (await client.delete(f"/api/tasks/{task['id']}", headers=staff)).status_code == 403
    assert (await client.delete(f"/api/tasks/{task['id']}", headers=admin)).status_code == 204
    assert (await client.get(f"/api/tasks/{task['id']}", headers=admin)).status_code == 404


@pytest.mark.asyncio
async def test_signup_and_sessions(client):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["code"] == "error_not_authenticated"

    response = await client.post(
        "/api/auth/signup", json={"email": "boss@example.com", "password": "secret1", "role": "admin"}
    )
    assert response.status_code == 403

    response = await client.post(
        "/api/auth/signup", json={"email": "new@example.com", "password": "secret1", "displayName": "Newbie"}
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["user"]["role"] == "trial_staff"
    headers = {"Authorization": f"Bearer {body['access_token']}"}

    response = await client.get("/api/users/", headers=headers)
    assert response.status_code == 403
    assert response.json()["code"] == "error_forbidden"

    response = await client.post("/api/tasks/", json={"title": "Sneaky", "assignedRole": "trial_staff"}, headers=headers)
    assert response.status_code == 422
    assert response.json()["code"] == "error_active_milestone_required"

    assert (await client.post("/api/auth/logout", headers=headers)).status_code == 204
    response = await client.get("/api/auth/me", headers=headers)
    assert response.status_code == 403
    assert response.json()["code"] == "error_invalid_token"


@pytest.mark.asyncio
async def test_user_administration(client, session_maker):
    root = await _bootstrap_root(client, session_maker)
    admin_user = await _create_user(client, root, "admin@example.com", "admin")
    staff_user = await _create_user(client, root, "staff@example.com", "staff")
    admin = await _login(client, "admin@example.com")

    response = await client.patch(f"/api/users/{ROOT_UID}/status", json={"status": "banned"}, headers=admin)
    assert response.status_code == 403
    assert response.json()["code"] == "error_super_admin_immutable"

    response = await client.patch(f"/api/users/{admin_user['uid']}/role", json={"role": "staff"}, headers=admin)
    assert response.status_code == 403

    response = await client.patch(f"/api/users/{staff_user['uid']}/status", json={"status": "timeout"}, headers=admin)
    assert response.status_code == 200
    assert response.json()["status"] == "timeout"

    response = await client.post("/api/auth/login", json={"email": "staff@example.com", "password": "secret1"})
    assert response.status_code == 403
    assert response.json()["code"] == "error_account_timeout"

    users = (await client.get("/api/users/", headers=admin)).json()
    assert {user["uid"] for user in users} == {ROOT_UID, admin_user["uid"], staff_user["uid"]}
