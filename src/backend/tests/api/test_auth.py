"""
Tests for authentication endpoints.
"""

from typing import Any

import pytest
from httpx import AsyncClient

from core.security import compute_device_fingerprint
from fakes import FakeRepositories

LOGIN_URL = "/api/v1/auth/student/login"
FORCE_LOGIN_URL = "/api/v1/auth/student/force-login"


def _credentials(student_id: str = "S101", password: str = "pass123", **extra: Any) -> dict[str, Any]:
    return {"student_id": student_id, "password": password, **extra}


@pytest.mark.unit
class TestStudentLogin:
    async def test_login_returns_session(self, client: AsyncClient, election: dict, repos: FakeRepositories) -> None:
        response = await client.post(LOGIN_URL, json=_credentials(device_id="dev-a"))

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["device_id"] == "dev-a"
        assert data["identity"]["kind"] == "student"
        assert data["identity"]["department"] == "BCA-1"
        assert (await repos.students.get_by_id("S101")).is_logged_in is True

    async def test_device_signals_are_hashed(self, client: AsyncClient, election: dict) -> None:
        signals = {"userAgent": "UA", "language": "en-US", "timezone": "Asia/Kolkata"}
        response = await client.post(LOGIN_URL, json=_credentials(device_signals=signals))

        assert response.status_code == 200
        assert response.json()["device_id"] == compute_device_fingerprint(signals)

    @pytest.mark.parametrize(
        "student_id,password,status_code,code",
        [
            ("S999", "pass123", 404, "not-found"),
            ("S101", "wrong", 401, "invalid-credential"),
            ("S103", "pass123", 403, "already-voted"),
        ],
    )
    async def test_login_failures(
        self, client: AsyncClient, election: dict, student_id: str, password: str, status_code: int, code: str
    ) -> None:
        response = await client.post(LOGIN_URL, json=_credentials(student_id, password))

        assert response.status_code == status_code
        assert response.json()["code"] == code

    async def test_already_logged_in_then_force(self, client: AsyncClient, election: dict) -> None:
        first = await client.post(LOGIN_URL, json=_credentials(device_id="dev-a"))
        assert first.status_code == 200

        second = await client.post(LOGIN_URL, json=_credentials(device_id="dev-b"))
        assert second.status_code == 409
        assert second.json() == {
            "detail": "Account is already logged in on another device",
            "code": "already-logged-in",
        }

        forced = await client.post(FORCE_LOGIN_URL, json=_credentials(device_id="dev-b"))
        assert forced.status_code == 200

        # The first session is superseded
        old_headers = {"Authorization": f"Bearer {first.json()['access_token']}"}
        me = await client.get("/api/v1/auth/me", headers=old_headers)
        assert me.status_code == 401

        new_headers = {"Authorization": f"Bearer {forced.json()['access_token']}"}
        me = await client.get("/api/v1/auth/me", headers=new_headers)
        assert me.status_code == 200

    async def test_force_login_on_same_device_supersedes_token(self, client: AsyncClient, election: dict) -> None:
        first = await client.post(LOGIN_URL, json=_credentials(device_id="dev-a"))
        forced = await client.post(FORCE_LOGIN_URL, json=_credentials(device_id="dev-a"))
        assert forced.status_code == 200

        old_headers = {"Authorization": f"Bearer {first.json()['access_token']}"}
        assert (await client.get("/api/v1/auth/me", headers=old_headers)).status_code == 401

        new_headers = {"Authorization": f"Bearer {forced.json()['access_token']}"}
        assert (await client.get("/api/v1/auth/me", headers=new_headers)).status_code == 200

    async def test_device_already_used(self, client: AsyncClient, election: dict, repos: FakeRepositories) -> None:
        await repos.devices.mark_used("dev-a", "S101")

        response = await client.post(LOGIN_URL, json=_credentials(device_id="dev-a"))

        assert response.status_code == 403
        assert response.json()["code"] == "device-already-used"

    async def test_missing_fields_are_validation_errors(self, client: AsyncClient) -> None:
        response = await client.post(LOGIN_URL, json={"student_id": "S101"})
        assert response.status_code == 422


@pytest.mark.unit
class TestSessionEndpoints:
    async def test_me_reports_identity_and_credits(self, client: AsyncClient, election: dict, student_login) -> None:
        headers = await student_login("S101")

        response = await client.get("/api/v1/auth/me", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["identity"]["student_id"] == "S101"
        assert data["device_id"] == "device-1"
        assert data["voting"]["status"] == "active"
        assert data["voting_credits"] == 2
        assert data["used_credits"] == 0

    async def test_me_requires_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401
        assert response.json()["code"] == "invalid-session"

    async def test_garbage_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    async def test_logout_releases_student(
        self, client: AsyncClient, election: dict, repos: FakeRepositories, student_login
    ) -> None:
        headers = await student_login("S101")

        response = await client.post("/api/v1/auth/logout", headers=headers)

        assert response.status_code == 200
        stored = await repos.students.get_by_id("S101")
        assert stored.is_logged_in is False
        assert stored.device_id is None

        # The token no longer works and the student can log in again
        assert (await client.get("/api/v1/auth/me", headers=headers)).status_code == 401
        await student_login("S101")


@pytest.mark.unit
class TestAdminLogin:
    async def test_admin_login(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.get("/api/v1/auth/me", headers=admin_headers)

        assert response.status_code == 200
        identity = response.json()["identity"]
        assert identity["kind"] == "admin"
        assert identity["email"] == "admin@college.edu"

    async def test_admin_login_denied(self, client: AsyncClient, admin_account: Any) -> None:
        response = await client.post(
            "/api/v1/auth/admin/login",
            json={"email": "admin@college.edu", "password": "wrong"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Access denied. Admin privileges required."

    async def test_admin_logout_writes_nothing(
        self, client: AsyncClient, admin_headers: dict, repos: FakeRepositories
    ) -> None:
        response = await client.post("/api/v1/auth/logout", headers=admin_headers)
        assert response.status_code == 200
        assert repos.students.items == {}
