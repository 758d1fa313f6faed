"""
Tests for authentication, sessions and role checks over HTTP.
"""
from retailpos.core.config import settings

PASSWORD = "secret123"


def test_login_sets_session_cookie(client, admin):
    response = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "admin@example.com"
    assert response.cookies.get(settings.session_cookie_name) == body["token"]
    assert "httponly" in response.headers["set-cookie"].lower()

    me = client.get("/api/v1/auth/me")
    assert me.status_code == 200
    assert me.json()["id"] == admin.id


def test_login_rejects_bad_password(client, admin):
    response = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_rejects_inactive_user(client, db, staff):
    staff.is_active = False
    db.commit()

    response = client.post("/api/v1/auth/login", json={"email": staff.email, "password": PASSWORD})

    assert response.status_code == 401


def test_logout_ends_session(client, admin_headers):
    assert client.post("/api/v1/auth/logout", headers=admin_headers).status_code == 200
    assert client.get("/api/v1/auth/me", headers=admin_headers).status_code == 401


def test_requests_without_session_are_unauthorized(client):
    for path in ("/api/v1/products", "/api/v1/sales", "/api/v1/customers", "/api/v1/analytics", "/api/v1/settings"):
        response = client.get(path)
        assert response.status_code == 401, path
        assert response.json()["detail"] == "Unauthorized"


def test_unknown_token_is_unauthorized(client, admin):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-session"})

    assert response.status_code == 401


def test_deactivated_user_session_is_revoked(client, db, staff, staff_headers):
    staff.is_active = False
    db.commit()

    assert client.get("/api/v1/auth/me", headers=staff_headers).status_code == 401


def test_staff_forbidden_on_admin_endpoints(client, staff_headers, products):
    checks = [
        client.post("/api/v1/products", headers=staff_headers, json={
            "name": "X", "sku": "X1", "price": 1, "cost": 1,
        }),
        client.delete(f"/api/v1/products/{products[0].id}", headers=staff_headers),
        client.post("/api/v1/users", headers=staff_headers, json={
            "email": "x@example.com", "full_name": "X", "password": "secret1",
        }),
        client.put("/api/v1/settings/inventory", headers=staff_headers, json={"low_stock_threshold": 3}),
        client.post("/api/v1/categories", headers=staff_headers, json={"name": "New"}),
    ]

    for response in checks:
        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden"


def test_health_and_root_are_public(client, monkeypatch):
    monkeypatch.setattr("retailpos.main.check_redis_connection", lambda: True)

    assert client.get("/").status_code == 200
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected", "redis": "connected"}


def test_health_reports_unhealthy_redis(client, monkeypatch):
    monkeypatch.setattr("retailpos.main.check_redis_connection", lambda: False)

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["redis"] == "disconnected"


def test_log_format_selects_renderer():
    import structlog
    from retailpos.main import log_renderer

    assert isinstance(log_renderer("json"), structlog.processors.JSONRenderer)
    assert isinstance(log_renderer("console"), structlog.dev.ConsoleRenderer)
