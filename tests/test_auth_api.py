from modules.auth.services.auth_service import AuthService, TokenCache
from modules.directory.models import User

from conftest import TEST_PASSWORD, auth_headers


def test_login_returns_token_and_cookie(client, common_user):
    resp = client.post("/auth/login", json={"username": "ana", "password": TEST_PASSWORD})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["username"] == "ana"
    assert body["data"]["user_role"] == "COMMON"
    assert "auth-token" in resp.cookies

    claims = AuthService.verify_token(body["data"]["access_token"])
    assert claims["sub"] == str(common_user.id)
    assert claims["username"] == "ana"
    assert claims["role"] == "COMMON"


def test_login_wrong_password(client, common_user):
    resp = client.post("/auth/login", json={"username": "ana", "password": "errada"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Credenciais inválidas"}


def test_login_missing_fields_lists_them(client):
    resp = client.post("/auth/login", json={"username": "ana"})
    assert resp.status_code == 400
    assert "password" in resp.json()["error"]


def test_me_with_bearer_and_cookie(client, common_user):
    resp = client.get("/auth/me", headers=auth_headers(common_user))
    assert resp.status_code == 200
    profile = resp.json()["data"]["user"]
    assert profile["username"] == "ana"
    assert profile["sector"]["name"] == "Administração"
    assert profile["has_security_question"] is False

    token, _ = AuthService.create_access_token(common_user)
    client.cookies.set("auth-token", token)
    assert client.get("/auth/me").status_code == 200


def test_me_without_token(client):
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_remember_me_extends_lifetime(common_user):
    _, short = AuthService.create_access_token(common_user)
    _, long = AuthService.create_access_token(common_user, remember_me=True)
    assert short == 24 * 3600
    assert long == 30 * 24 * 3600


def test_change_password(client, db_session, make_user):
    user = make_user("novo")
    headers = auth_headers(user)

    resp = client.post("/auth/change-password", json={"new_password": "abc", "confirm_password": "abc"}, headers=headers)
    assert resp.status_code == 400

    resp = client.post(
        "/auth/change-password", json={"new_password": "abcdef", "confirm_password": "abcdeg"}, headers=headers
    )
    assert resp.status_code == 400

    resp = client.post(
        "/auth/change-password", json={"new_password": "abcdef", "confirm_password": "abcdef"}, headers=headers
    )
    assert resp.status_code == 200
    login = client.post("/auth/login", json={"username": "novo", "password": "abcdef"})
    assert login.status_code == 200


def test_security_question_recovery(client, db_session, common_user):
    headers = auth_headers(common_user)
    resp = client.post(
        "/auth/security-question",
        json={"question": "Nome do primeiro pet?", "answer": "Rex"},
        headers=headers,
    )
    assert resp.status_code == 200

    resp = client.get("/auth/forgot-password", params={"username": "ana"})
    assert resp.json()["data"]["security_question"] == "Nome do primeiro pet?"

    bad = client.post("/auth/validate-security", json={"username": "ana", "security_answer": "Bob"})
    assert bad.status_code == 401
    good = client.post("/auth/validate-security", json={"username": "ana", "security_answer": "Rex"})
    assert good.status_code == 200

    resp = client.post(
        "/auth/forgot-password",
        json={"username": "ana", "security_answer": "Rex", "new_password": "nova123"},
    )
    assert resp.status_code == 200
    assert client.post("/auth/login", json={"username": "ana", "password": "nova123"}).status_code == 200

    db_session.expire_all()
    assert db_session.query(User).filter(User.username == "ana").one().security_answer_hash != "Rex"


def test_security_question_unknown_user(client):
    resp = client.get("/auth/forgot-password", params={"username": "ninguem"})
    assert resp.status_code == 404


def test_token_cache_expiry(monkeypatch):
    cache = TokenCache(ttl_seconds=10)
    now = [1000.0]
    monkeypatch.setattr("modules.auth.services.auth_service.time.monotonic", lambda: now[0])

    cache.set("t", {"sub": "1"})
    assert cache.get("t") == {"sub": "1"}
    now[0] += 11
    assert cache.get("t") is None

    disabled = TokenCache(ttl_seconds=0)
    disabled.set("t", {"sub": "1"})
    assert disabled.get("t") is None


def test_token_cache_respects_token_expiry(monkeypatch):
    monkeypatch.setattr("modules.auth.services.auth_service.time.time", lambda: 5000.0)
    cache = TokenCache(ttl_seconds=300)

    cache.set("expired", {"sub": "1", "exp": 4990})
    assert cache.get("expired") is None

    now = [100.0]
    monkeypatch.setattr("modules.auth.services.auth_service.time.monotonic", lambda: now[0])
    cache.set("short", {"sub": "1", "exp": 5010})
    assert cache.get("short") == {"sub": "1", "exp": 5010}
    now[0] += 11
    assert cache.get("short") is None


def test_token_cache_evicts_oldest_when_full():
    cache = TokenCache(ttl_seconds=300, max_entries=2)
    cache.set("a", {"sub": "1"})
    cache.set("b", {"sub": "2"})
    cache.set("c", {"sub": "3"})

    assert cache.get("a") is None
    assert cache.get("b") == {"sub": "2"}
    assert cache.get("c") == {"sub": "3"}
