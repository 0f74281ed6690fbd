from sqlalchemy.exc import OperationalError

from models.login_attempt import LoginAttempt
from routes import auth as auth_routes
from security.attempt_log import now_ms

from conftest import PASSWORD, SERVICE_HEADERS


def _verify(client, **body):
    return client.post("/auth/verify", json=body, headers=SERVICE_HEADERS)


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_verify_requires_service_token(client, make_account):
    make_account("alice")

    resp = client.post("/auth/verify", json={"username": "alice", "password": PASSWORD})
    assert resp.status_code == 403

    resp = client.post(
        "/auth/verify",
        json={"username": "alice", "password": PASSWORD},
        headers={"X-Service-Token": "nope"},
    )
    assert resp.status_code == 403


def test_verify_without_configured_token(app, client):
    app.config["SERVICE_TOKEN"] = None

    resp = _verify(client, username="alice", password=PASSWORD)

    assert resp.status_code == 503


def test_verify_success(client, make_account):
    make_account("alice", roles=("game_master", "member"))

    resp = _verify(client, username="alice", password=PASSWORD, ip_address="203.0.113.5")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["role"] == "game_master"
    assert body["account"]["call_sign"] == "alice"
    assert "password_hash" not in body["account"]
    assert LoginAttempt.query.one().ip_address == "203.0.113.5"


def test_verify_uses_forwarded_for_when_body_has_no_ip(client, make_account):
    make_account("alice")

    client.post(
        "/auth/verify",
        json={"username": "alice", "password": "Wrong1Horse"},
        headers={**SERVICE_HEADERS, "X-Forwarded-For": "198.51.100.1, 10.0.0.1"},
    )

    assert LoginAttempt.query.one().ip_address == "198.51.100.1"


def test_verify_bad_password(client, make_account):
    make_account("alice")

    resp = _verify(client, username="alice", password="Wrong1Horse")

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid username or password"


def test_verify_deactivated(client, make_account):
    make_account("alice", is_active=False)

    resp = _verify(client, username="alice", password=PASSWORD)

    assert resp.status_code == 403
    assert resp.get_json()["kind"] == "deactivated"


def test_verify_locked_account(client, make_account, add_attempts):
    make_account("bob")
    first = now_ms() - 20 * 60 * 1000
    add_attempts("bob", [first + i * 1000 for i in range(10)])

    resp = _verify(client, username="bob", password=PASSWORD)

    assert resp.status_code == 429
    body = resp.get_json()
    assert body["kind"] == "account_locked"
    assert body["lockout_expires"] == first + 30 * 60 * 1000


def test_verify_missing_fields(client):
    resp = _verify(client, username="alice")

    assert resp.status_code == 400


def test_store_failure_maps_to_503(client, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("down"))

    monkeypatch.setattr(auth_routes, "verify_credentials", broken)

    resp = _verify(client, username="alice", password=PASSWORD)

    assert resp.status_code == 503
    assert resp.get_json() == {"error": "Service unavailable"}


def test_change_password_route(client, make_account):
    make_account("alice")

    resp = client.post(
        "/auth/change_password",
        json={"username": "alice", "current_password": PASSWORD, "new_password": "weak"},
        headers=SERVICE_HEADERS,
    )
    assert resp.status_code == 400
    assert resp.get_json()["details"]

    resp = client.post(
        "/auth/change_password",
        json={"username": "alice", "current_password": PASSWORD, "new_password": "Fresh2Horse"},
        headers=SERVICE_HEADERS,
    )
    assert resp.status_code == 200


def test_admin_rate_limit_status(client, add_attempts):
    add_attempts("alice", [now_ms() - 1000] * 5)

    resp = client.get("/admin/rate-limit?username=alice", headers=SERVICE_HEADERS)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["allowed"] is False
    assert body["kind"] == "username_rate_limit"

    assert client.get("/admin/rate-limit", headers=SERVICE_HEADERS).status_code == 400


def test_admin_stats(client, add_attempts):
    add_attempts("alice", [now_ms() - 1000] * 3)

    resp = client.get("/admin/login-attempts/stats?username=alice&window_minutes=10", headers=SERVICE_HEADERS)

    assert resp.status_code == 200
    assert resp.get_json()["failed"] == 3


def test_admin_sweep(client, add_attempts):
    add_attempts("alice", [now_ms() - 2 * 60 * 60 * 1000] * 2)

    resp = client.post("/admin/login-attempts/sweep", headers=SERVICE_HEADERS)

    assert resp.get_json() == {"deleted": 2}
    assert client.post("/admin/login-attempts/sweep", headers=SERVICE_HEADERS).get_json() == {"deleted": 0}


def test_admin_reset_password(client, make_account):
    person = make_account("alice")

    resp = client.post(f"/admin/accounts/{person.id}/reset_password", headers=SERVICE_HEADERS)
    assert resp.status_code == 200
    temporary = resp.get_json()["temporary_password"]
    assert _verify(client, username="alice", password=temporary).status_code == 200

    resp = client.post("/admin/accounts/999/reset_password", headers=SERVICE_HEADERS)
    assert resp.status_code == 404


def test_oversized_forwarded_for_is_truncated(client, make_account):
    make_account("alice")
    long_ip = "2001:db8:" + "a" * 120

    client.post(
        "/auth/verify",
        json={"username": "alice", "password": "Wrong1Horse"},
        headers={**SERVICE_HEADERS, "X-Forwarded-For": long_ip},
    )

    assert LoginAttempt.query.one().ip_address == long_ip[:64]


def test_non_object_json_body_is_a_bad_request(client):
    resp = client.post("/auth/verify", json=["alice", "pw"], headers=SERVICE_HEADERS)
    assert resp.status_code == 400

    resp = client.post("/auth/change_password", json=["alice"], headers=SERVICE_HEADERS)
    assert resp.status_code == 400


def test_change_password_route_is_throttled(client, make_account):
    make_account("alice")
    body = {"username": "alice", "current_password": "Wrong1Horse", "new_password": "Fresh2Horse"}
    for _ in range(5):
        assert client.post("/auth/change_password", json=body, headers=SERVICE_HEADERS).status_code == 400

    resp = client.post("/auth/change_password", json=body, headers=SERVICE_HEADERS)

    assert resp.status_code == 429
    assert resp.get_json()["kind"] == "ip_rate_limit"
