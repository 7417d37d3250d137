"""
Tests for authentication endpoints.
"""

import pytest

from shared.config.settings import settings
from shared.infrastructure.redis.constants import PREFIX_AUTH_BLACKLIST, PREFIX_AUTH_USER_REVOKE
from shared.security.password import hash_password, needs_rehash, verify_password
from shared.security.rate_limit import limiter


class TestPasswordHashing:
    """Test password hashing utilities."""

    def test_hash_password_returns_bcrypt_hash(self):
        hashed = hash_password("mypassword")
        assert hashed.startswith("$2b$")

    def test_verify_password_correct(self):
        hashed = hash_password("mypassword")
        assert verify_password("mypassword", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("mypassword")
        assert verify_password("wrongpassword", hashed) is False

    def test_plain_text_is_never_accepted(self):
        assert verify_password("plaintext", "plaintext") is False
        assert needs_rehash("plaintext") is True

    def test_needs_rehash_bcrypt(self):
        hashed = hash_password("mypassword")
        assert needs_rehash(hashed) is False


class TestLogin:
    """Owner/manager login."""

    def test_login_success(self, client, demo_restaurant):
        response = client.post(
            "/api/auth/login",
            json={"email": "owner@demo.com", "password": "owner123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["token_type"] == "bearer"
        assert data["user"]["role"] == "OWNER"
        assert data["user"]["allowed_restaurant_ids"] == [demo_restaurant.id]
        assert data["user"]["restaurant_roles"] == {str(demo_restaurant.id): "OWNER"}

    def test_login_sets_http_only_cookies(self, client, seeded):
        response = client.post(
            "/api/auth/login",
            json={"email": "owner@demo.com", "password": "owner123"},
        )
        cookies = response.headers.get_list("set-cookie")
        access = next(c for c in cookies if c.startswith("pos_access="))
        refresh = next(c for c in cookies if c.startswith("pos_refresh="))
        assert "HttpOnly" in access
        assert "Path=/;" in access or access.endswith("Path=/")
        assert "Path=/api/auth" in refresh

    def test_login_email_is_case_insensitive(self, client, seeded):
        response = client.post(
            "/api/auth/login",
            json={"email": "Owner@Demo.com", "password": "owner123"},
        )
        assert response.status_code == 200

    def test_login_wrong_password(self, client, seeded):
        response = client.post(
            "/api/auth/login",
            json={"email": "owner@demo.com", "password": "nope"},
        )
        assert response.status_code == 401
        body = response.json()
        assert body["error"]["code"] == "UNAUTHORIZED"
        assert body["detail"] == body["error"]["message"]

    def test_login_unknown_user(self, client, seeded):
        response = client.post(
            "/api/auth/login",
            json={"email": "ghost@demo.com", "password": "owner123"},
        )
        assert response.status_code == 401

    def test_login_invalid_email_is_rejected(self, client, seeded):
        response = client.post("/api/auth/login", json={"email": "not-an-email", "password": "x"})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_suspended_tenant_cannot_login(self, client, seeded, demo_tenant):
        demo_tenant.is_suspended = True
        seeded.commit()

        response = client.post(
            "/api/auth/login",
            json={"email": "owner@demo.com", "password": "owner123"},
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_waiter_claims_only_assigned_restaurant(self, client, demo_restaurant):
        response = client.post(
            "/api/auth/login",
            json={"email": "waiter@demo.com", "password": "waiter123"},
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["role"] == "WAITER"
        assert user["restaurant_roles"] == {str(demo_restaurant.id): "WAITER"}


class TestStaffLogin:
    """Head and waiter portal logins accept an email or a phone."""

    @pytest.mark.parametrize("path", ["/api/auth/staff/login", "/api/auth/waiter/login"])
    def test_login_with_phone(self, client, seeded, path):
        response = client.post(path, json={"identifier": "+919800000002", "password": "waiter123"})
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "waiter@demo.com"

    def test_login_with_email(self, client, seeded):
        response = client.post(
            "/api/auth/staff/login",
            json={"identifier": "manager@demo.com", "password": "manager123"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "MANAGER"

    def test_unknown_phone(self, client, seeded):
        response = client.post(
            "/api/auth/staff/login",
            json={"identifier": "+919811111111", "password": "waiter123"},
        )
        assert response.status_code == 401


class TestTokenLifecycle:
    """Refresh, current user and logout."""

    def test_me_returns_claims(self, client, owner_headers):
        response = client.get("/api/auth/me", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "owner@demo.com"

    def test_me_requires_token(self, client, seeded):
        response = client.get("/api/auth/me")
        assert response.status_code == 401

    def test_me_accepts_access_cookie(self, client, seeded):
        client.post("/api/auth/login", json={"email": "owner@demo.com", "password": "owner123"})
        response = client.get("/api/auth/me")
        assert response.status_code == 200

    def test_refresh_with_body_token(self, client, seeded):
        login = client.post(
            "/api/auth/login",
            json={"email": "manager@demo.com", "password": "manager123"},
        ).json()
        client.cookies.clear()

        response = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "manager@demo.com"

    def test_refresh_with_access_token_fails(self, client, seeded):
        login = client.post(
            "/api/auth/login",
            json={"email": "manager@demo.com", "password": "manager123"},
        ).json()
        client.cookies.clear()

        response = client.post("/api/auth/refresh", json={"refresh_token": login["access_token"]})
        assert response.status_code == 401

    def test_refresh_without_token(self, client, seeded):
        response = client.post("/api/auth/refresh")
        assert response.status_code == 401

    def test_refresh_rejected_after_suspension(self, client, seeded, demo_tenant):
        login = client.post(
            "/api/auth/login",
            json={"email": "owner@demo.com", "password": "owner123"},
        ).json()
        client.cookies.clear()
        demo_tenant.is_suspended = True
        seeded.commit()

        response = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
        assert response.status_code == 403

    def test_logout_clears_cookies(self, client, owner_headers):
        response = client.post("/api/auth/logout", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True
        cleared = response.headers.get_list("set-cookie")
        assert any(c.startswith("pos_access=") for c in cleared)
        assert any(c.startswith("pos_refresh=") for c in cleared)


class FakeRedis:
    """Just enough of the sync Redis client for the token blacklist."""

    def __init__(self):
        self.store = {}

    def setex(self, key, ttl, value):
        self.store[key] = value

    def exists(self, key):
        return int(key in self.store)

    def get(self, key):
        return self.store.get(key)


@pytest.fixture
def token_store(monkeypatch):
    store = FakeRedis()
    monkeypatch.setattr(settings, "token_blacklist_enabled", True)
    monkeypatch.setattr("shared.security.token_blacklist.get_redis_sync_client", lambda: store)
    return store


class TestRefreshRotation:
    """Refresh token rotation with the blacklist enabled."""

    def _login(self, client):
        login = client.post(
            "/api/auth/login",
            json={"email": "manager@demo.com", "password": "manager123"},
        ).json()
        client.cookies.clear()
        return login

    def _refresh(self, client, token):
        response = client.post("/api/auth/refresh", json={"refresh_token": token})
        client.cookies.clear()
        return response

    def test_used_refresh_token_is_blacklisted(self, client, seeded, token_store):
        login = self._login(client)

        response = self._refresh(client, login["refresh_token"])
        assert response.status_code == 200
        assert response.json()["refresh_token"] != login["refresh_token"]
        assert any(key.startswith(PREFIX_AUTH_BLACKLIST) for key in token_store.store)

    def test_reuse_revokes_every_session(self, client, seeded, token_store):
        login = self._login(client)
        rotated = self._refresh(client, login["refresh_token"]).json()

        response = self._refresh(client, login["refresh_token"])
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Refresh token has been revoked. Please login again."
        assert f"{PREFIX_AUTH_USER_REVOKE}{login['user']['id']}" in token_store.store

        assert self._refresh(client, rotated["refresh_token"]).status_code == 401
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {login['access_token']}"})
        assert response.status_code == 401

    def test_logout_revokes_access_token(self, client, seeded, token_store):
        login = self._login(client)
        headers = {"Authorization": f"Bearer {login['access_token']}"}

        response = client.post("/api/auth/logout", headers=headers)
        assert response.status_code == 200
        assert response.json()["tokens_revoked"] is True

        client.cookies.clear()
        assert client.get("/api/auth/me", headers=headers).status_code == 401


@pytest.fixture
def rate_limited(monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield
    limiter.reset()


class TestRateLimit:
    def test_login_limit_returns_error_envelope(self, client, seeded, rate_limited):
        body = {"email": "owner@demo.com", "password": "wrong-password"}
        for _ in range(settings.login_rate_limit):
            assert client.post("/api/auth/login", json=body).status_code == 401

        response = client.post("/api/auth/login", json=body)
        assert response.status_code == 429
        data = response.json()
        assert data["error"]["code"] == "RATE_LIMITED"
        assert data["error"]["message"] == "Too many requests. Please try again later."
        assert response.headers["Retry-After"] == "60"
