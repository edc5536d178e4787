from conftest import PASSWORD, bearer, register


def test_register_returns_token_and_public_user(client):
    resp = client.post(
        "/auth/register",
        json={
            "name": "T",
            "email": "t@x.com",
            "password": "p",
            "city": "Paris",
            "interests": ["sport"],
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["token"]
    user = body["data"]["user"]
    assert user["email"] == "t@x.com"
    assert user["role"] == "user"
    assert user["interests"] == ["sport"]
    assert "password" not in user
    assert "refreshToken" not in user


def test_register_twice_same_email_fails(client):
    assert register(client, "dup@example.com").status_code == 201
    resp = register(client, "DUP@example.com")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Email already registered"}


def test_register_missing_email_is_400(client):
    resp = client.post("/auth/register", json={"name": "Test User", "password": PASSWORD})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert "email" in body["error"]


def test_register_invalid_email_is_400(client):
    resp = register(client, "not-an-email")
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_register_cannot_choose_role(client):
    resp = register(client, "sneaky@example.com", role="admin")
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["role"] == "user"


def test_login_returns_access_and_refresh_tokens(client):
    register(client, "login@example.com")
    resp = client.post("/auth/login", json={"email": "login@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["token"]
    assert data["refreshToken"]
    assert data["user"]["email"] == "login@example.com"
    assert "password" not in data["user"]


def test_login_errors_do_not_reveal_which_part_failed(client):
    register(client, "known@example.com")
    wrong_pw = client.post("/auth/login", json={"email": "known@example.com", "password": "nope"})
    unknown = client.post("/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
    assert wrong_pw.status_code == 401
    assert unknown.status_code == 401
    assert wrong_pw.json() == unknown.json()
    assert wrong_pw.json()["success"] is False


def test_login_disabled_account_is_forbidden(client, user_service):
    register(client, "off@example.com")
    user = user_service.get_user_by_email("off@example.com")
    user.is_active = False
    user_service.session.add(user)
    user_service.session.commit()

    resp = client.post("/auth/login", json={"email": "off@example.com", "password": PASSWORD})
    assert resp.status_code == 403


def test_refresh_issues_new_access_token(client):
    register(client, "fresh@example.com")
    login = client.post("/auth/login", json={"email": "fresh@example.com", "password": PASSWORD})
    refresh_token = login.json()["data"]["refreshToken"]

    resp = client.post("/auth/refresh", json={"refreshToken": refresh_token})
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]
    assert client.get("/auth/me", headers=bearer(token)).status_code == 200


def test_refresh_rejects_access_token(client, user_token):
    resp = client.post("/auth/refresh", json={"refreshToken": user_token})
    assert resp.status_code == 401


def test_logout_revokes_refresh_token(client):
    register(client, "bye@example.com")
    login = client.post("/auth/login", json={"email": "bye@example.com", "password": PASSWORD})
    data = login.json()["data"]

    assert client.post("/auth/logout", headers=bearer(data["token"])).status_code == 200
    resp = client.post("/auth/refresh", json={"refreshToken": data["refreshToken"]})
    assert resp.status_code == 401


def test_me_returns_current_user(client, auth_headers):
    resp = client.get("/auth/me", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == "user@example.com"


def test_protected_routes_require_bearer_token(client):
    for method, path in [
        ("get", "/auth/me"),
        ("get", "/api/users/saved-events"),
        ("get", "/api/users/saved-events/abc/check"),
        ("post", "/api/events/fetch"),
        ("get", "/api/users"),
    ]:
        resp = getattr(client, method)(path)
        assert resp.status_code == 401, path
        assert resp.json()["success"] is False


def test_garbage_token_is_401(client):
    resp = client.get("/auth/me", headers=bearer("not.a.jwt"))
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Invalid or expired token"}


def test_register_blank_name_is_400(client):
    resp = register(client, "blank@example.com", name="   ")
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_register_trims_name_and_reports_utc_timestamps(client):
    resp = register(client, "trim@example.com", name="  Ana  ")
    user = resp.json()["data"]["user"]
    assert user["name"] == "Ana"
    assert user["createdAt"].endswith("Z")
    assert user["updatedAt"].endswith("Z")
