"""
Memos Backend - Auth & Current User API Tests
==============================================

What:  End-to-end tests for signup, signin and bearer authentication.

Test Strategy:
    ✅ First signup creates the HOST; every later signup is refused
    ✅ Signin failures are indistinguishable
    ✅ Missing, malformed, foreign-secret and expired tokens → 401
    ✅ Token for a user that no longer exists → 404
"""

import pytest

from memos.security.tokens import TokenAuthenticator

from conftest import HOST_PASSWORD, HOST_USERNAME


class TestSignup:

    @pytest.mark.asyncio
    async def test_first_signup_creates_host(self, test_client):
        response = await test_client.post(
            "/api/auth/signup",
            json={"username": "owner", "password": "pw-123456", "email": "o@example.com"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["accessToken"].count(".") == 2
        assert body["user"]["username"] == "owner"
        assert body["user"]["role"] == "HOST"
        assert body["user"]["email"] == "o@example.com"
        assert body["user"]["rowStatus"] == "NORMAL"
        assert "passwordHash" not in body["user"]

    @pytest.mark.asyncio
    async def test_second_signup_refused(self, test_client, host_session):
        response = await test_client.post(
            "/api/auth/signup", json={"username": "intruder", "password": "pw"}
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        assert response.json()["message"] == "SIGNUP_DISABLED"

    @pytest.mark.asyncio
    async def test_signup_disabled_by_configuration(self, test_app, test_client, test_settings):
        test_app.state.settings = test_settings.model_copy(update={"allow_signup": False})
        response = await test_client.post(
            "/api/auth/signup", json={"username": "owner", "password": "pw"}
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [{"username": "owner"}, {"password": "pw"}, {"username": "  ", "password": "pw"}, {}],
    )
    async def test_missing_credentials(self, test_client, payload):
        response = await test_client.post("/api/auth/signup", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestSignin:

    @pytest.mark.asyncio
    async def test_signin_returns_token(self, test_client, host_session):
        response = await test_client.post(
            "/api/auth/signin",
            json={"username": HOST_USERNAME, "password": HOST_PASSWORD},
        )
        assert response.status_code == 200
        token = response.json()["accessToken"]

        me = await test_client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["username"] == HOST_USERNAME

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_look_the_same(self, test_client, host_session):
        wrong_password = await test_client.post(
            "/api/auth/signin", json={"username": HOST_USERNAME, "password": "nope"}
        )
        unknown_user = await test_client.post(
            "/api/auth/signin", json={"username": "ghost", "password": "nope"}
        )
        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json()["message"] == unknown_user.json()["message"] == "INVALID_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_missing_password(self, test_client, host_session):
        response = await test_client.post("/api/auth/signin", json={"username": HOST_USERNAME})
        assert response.status_code == 400


class TestBearerAuthentication:

    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.get("/api/user/me")
        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthenticated"
        assert body["message"] == "Unauthorized"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_garbage_token(self, test_client, host_session):
        response = await test_client.get(
            "/api/user/me", headers={"Authorization": "Bearer not.a.token"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret(self, test_client, host_session):
        forged = TokenAuthenticator("some-other-secret").issue(
            host_session["user"]["uid"], HOST_USERNAME, "HOST"
        )
        response = await test_client.get(
            "/api/user/me", headers={"Authorization": f"Bearer {forged}"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token(self, test_app, test_client, host_session):
        expired = test_app.state.authenticator.issue(
            host_session["user"]["uid"], HOST_USERNAME, "HOST", now=1000, ttl_seconds=60
        )
        response = await test_client.get(
            "/api/user/me", headers={"Authorization": f"Bearer {expired}"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_for_unknown_user(self, test_app, test_client, host_session):
        orphan = test_app.state.authenticator.issue("no-such-uid", "ghost", "USER")
        response = await test_client.get(
            "/api/user/me", headers={"Authorization": f"Bearer {orphan}"}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get("/api/user/me", headers={"X-Request-ID": "trace-123"})
        assert response.headers["x-request-id"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"
