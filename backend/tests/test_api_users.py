"""End-to-end tests for /api/user: listing, profiles, updates and settings."""

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def reader(make_user):
    return await make_user("reader")


class TestListUsers:

    @pytest.mark.asyncio
    async def test_host_lists_users(self, test_client, host_session, reader):
        response = await test_client.get("/api/user", headers=host_session["headers"])
        assert response.status_code == 200
        assert [user["username"] for user in response.json()] == ["admin", "reader"]

    @pytest.mark.asyncio
    async def test_user_cannot_list(self, test_client, host_session, reader):
        response = await test_client.get("/api/user", headers=reader["headers"])
        assert response.status_code == 403


class TestProfiles:

    @pytest.mark.asyncio
    async def test_public_profile(self, test_client, host_session):
        user_id = host_session["user"]["id"]
        response = await test_client.get(f"/api/user/{user_id}")
        assert response.status_code == 200
        profile = response.json()
        assert profile["username"] == "admin"
        assert "email" not in profile
        assert "passwordHash" not in profile

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        assert (await test_client.get("/api/user/999")).status_code == 404


class TestUpdateUser:

    @pytest.mark.asyncio
    async def test_update_self(self, test_client, reader):
        response = await test_client.patch(
            f"/api/user/{reader['id']}",
            json={"nickname": "Reader Rae", "description": "reads a lot"},
            headers=reader["headers"],
        )
        assert response.status_code == 200
        body = response.json()
        assert body["nickname"] == "Reader Rae"
        assert body["description"] == "reads a lot"
        assert body["username"] == "reader"

    @pytest.mark.asyncio
    async def test_update_other_forbidden(self, test_client, host_session, reader):
        response = await test_client.patch(
            f"/api/user/{host_session['user']['id']}",
            json={"nickname": "pwned"},
            headers=reader["headers"],
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_host_updates_others(self, test_client, host_session, reader):
        response = await test_client.patch(
            f"/api/user/{reader['id']}",
            json={"avatarUrl": "https://example.com/a.png"},
            headers=host_session["headers"],
        )
        assert response.status_code == 200
        assert response.json()["avatarUrl"] == "https://example.com/a.png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username", [None, "", "   "])
    async def test_empty_username_rejected(self, test_client, reader, username):
        response = await test_client.patch(
            f"/api/user/{reader['id']}",
            json={"username": username},
            headers=reader["headers"],
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

        me = await test_client.get("/api/user/me", headers=reader["headers"])
        assert me.json()["username"] == "reader"

    @pytest.mark.asyncio
    async def test_username_is_trimmed(self, test_client, reader):
        response = await test_client.patch(
            f"/api/user/{reader['id']}",
            json={"username": "  reader2  "},
            headers=reader["headers"],
        )
        assert response.status_code == 200
        assert response.json()["username"] == "reader2"

    @pytest.mark.asyncio
    async def test_username_conflict(self, test_client, host_session, reader):
        response = await test_client.patch(
            f"/api/user/{reader['id']}",
            json={"username": "admin"},
            headers=reader["headers"],
        )
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"


class TestUserSetting:

    @pytest.mark.asyncio
    async def test_defaults(self, test_client, reader):
        response = await test_client.get(
            f"/api/user/{reader['id']}/setting", headers=reader["headers"]
        )
        assert response.status_code == 200
        setting = response.json()
        assert setting["name"] == f"users/{reader['id']}/setting"
        assert setting["locale"] == "en"
        assert setting["appearance"] == "system"
        assert setting["memoVisibility"] == "PRIVATE"

    @pytest.mark.asyncio
    async def test_update(self, test_client, reader):
        url = f"/api/user/{reader['id']}/setting"
        response = await test_client.patch(
            url,
            json={"locale": "fr", "memoVisibility": "public"},
            headers=reader["headers"],
        )
        assert response.status_code == 200
        assert response.json()["memoVisibility"] == "PUBLIC"

        again = await test_client.get(url, headers=reader["headers"])
        assert again.json()["locale"] == "fr"
        assert again.json()["appearance"] == "system"

    @pytest.mark.asyncio
    async def test_other_users_setting_forbidden(self, test_client, host_session, reader):
        response = await test_client.get(
            f"/api/user/{host_session['user']['id']}/setting", headers=reader["headers"]
        )
        assert response.status_code == 403
