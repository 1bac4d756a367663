from datetime import timedelta

from conftest import bearer, login, product_payload


def _cookie(client, name="admin_session"):
    return client.get_cookie(name)


def test_login_sets_session_cookie(client):
    resp = login(client)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert len(body["token"]) == 64
    assert body["user"]["username"] == "admin"
    assert "passwordHash" not in body["user"]

    set_cookie = resp.headers.get("Set-Cookie")
    assert set_cookie.startswith("admin_session=")
    assert "HttpOnly" in set_cookie
    assert "SameSite=Strict" in set_cookie
    assert "Max-Age=900" in set_cookie
    assert _cookie(client).value == body["token"]


def test_login_then_verify(client):
    assert login(client).status_code == 200
    body = client.get("/api/auth/verify").get_json()
    assert body["authenticated"] is True
    assert body["user"]["username"] == "admin"
    assert body["expiresAt"]


def test_login_rejects_bad_credentials(client):
    resp = login(client, password="nope")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid username or password"}
    assert _cookie(client) is None

    resp = login(client, username="ghost")
    assert resp.status_code == 401


def test_login_requires_both_fields(client):
    resp = client.post("/api/auth/login", json={"username": "admin"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Username and password are required"
    assert client.post("/api/auth/login", data="not json").status_code == 400


def test_verify_without_session(client):
    assert client.get("/api/auth/verify").get_json() == {"authenticated": False}


def test_verify_with_unknown_token_clears_cookie(client):
    client.set_cookie("admin_session", "deadbeef")
    resp = client.get("/api/auth/verify")
    assert resp.get_json() == {"authenticated": False}
    assert _cookie(client) is None


def test_logout_invalidates_session(client):
    token = login(client).get_json()["token"]
    resp = client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True
    assert _cookie(client) is None

    assert client.get("/api/auth/verify", headers=bearer(token)).get_json() == {"authenticated": False}
    # logging out twice is harmless
    assert client.post("/api/auth/logout").status_code == 200


def test_bearer_token_is_accepted(app, client):
    token = login(client).get_json()["token"]
    anon = app.test_client()
    resp = anon.post("/api/products", json=product_payload(), headers=bearer(token))
    assert resp.status_code == 201


def test_protected_route_without_token(client):
    resp = client.post("/api/products", json=product_payload())
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Authentication required"}


def test_protected_route_with_bad_token_clears_cookie(client):
    client.set_cookie("admin_session", "0" * 64)
    resp = client.delete("/api/products/anything")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid or expired session"}
    assert _cookie(client) is None


def test_expired_session_is_rejected(app, client):
    with app.app_context():
        store = app.extensions["storefront"]["store"]
        user = store.get_admin_user_by_username("admin")
        token = store.create_session(user["id"], ttl=timedelta(seconds=-1))["token"]

    resp = client.get("/api/export", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid or expired session"


def test_deactivated_user_loses_access(app, client):
    token = login(client).get_json()["token"]
    with app.app_context():
        store = app.extensions["storefront"]["store"]
        store.set_admin_user_active(store.get_admin_user_by_username("admin")["id"], False)

    resp = client.get("/api/export", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "User not found or inactive"
    assert login(client).status_code == 401


def test_login_records_last_login(app, client):
    login(client)
    with app.app_context():
        user = app.extensions["storefront"]["store"].get_admin_user_by_username("admin")
    assert user["lastLogin"] is not None


def test_stale_cookie_does_not_mask_valid_bearer(app, client):
    token = login(app.test_client()).get_json()["token"]
    client.set_cookie("admin_session", "0" * 64)

    resp = client.post("/api/products", json=product_payload(), headers=bearer(token))
    assert resp.status_code == 201
    missing = client.delete("/api/products/does-not-exist", headers=bearer(token))
    assert missing.status_code == 404

    verify = client.get("/api/auth/verify", headers=bearer(token)).get_json()
    assert verify["authenticated"] is True
    assert verify["user"]["username"] == "admin"


def test_stale_cookie_and_stale_bearer_report_first_failure(client):
    client.set_cookie("admin_session", "0" * 64)
    resp = client.delete("/api/products/anything", headers=bearer("f" * 64))
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid or expired session"}
