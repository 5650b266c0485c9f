"""
Pytest fixtures for CouncilVote backend tests.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ["AZURE_COSMOS_ENDPOINT"] = ""
os.environ["AZURE_COSMOS_CONNECTION_STRING"] = ""

from fakes import FakeRepositories, active_window  # noqa: E402

ADMIN_EMAIL = "admin@college.edu"
ADMIN_PASSWORD = "admin-pass"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def repos() -> FakeRepositories:
    """Fresh in-memory store for each test."""
    return FakeRepositories()


@pytest.fixture
async def app(repos: FakeRepositories) -> AsyncGenerator[Any, None]:
    """FastAPI application wired to the in-memory store."""
    from main import app as fastapi_app

    repos.install(fastapi_app)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Origin": "http://localhost:3000"},
    ) as ac:
        yield ac


@pytest.fixture
async def election(repos: FakeRepositories) -> dict[str, Any]:
    """
    A small election with voting open.

    Positions: President (Alice BCA-1, Bob BCA-2), Secretary (Cara BCA-1, Dev BCA-2).
    Students: S101 (BCA-1), S102 (BCA-2), S103 (BCA-1, already voted).
    """
    from models.cosmos_documents import (
        CandidateDocument,
        ElectionConfigDocument,
        PositionDocument,
        StudentDocument,
    )

    president = await repos.positions.create(PositionDocument(id="pos-president", name="President"))
    secretary = await repos.positions.create(PositionDocument(id="pos-secretary", name="Secretary"))

    candidates = {}
    for cid, name, dept, position in [
        ("cand-alice", "Alice", "BCA-1", president),
        ("cand-bob", "Bob", "BCA-2", president),
        ("cand-cara", "Cara", "BCA-1", secretary),
        ("cand-dev", "Dev", "BCA-2", secretary),
    ]:
        candidates[cid] = await repos.candidates.create(
            CandidateDocument(id=cid, name=name, department=dept, position_id=position.id)
        )

    for sid, name, dept, voted in [
        ("S101", "Asha", "BCA-1", False),
        ("S102", "Ben", "BCA-2", False),
        ("S103", "Chen", "BCA-1", True),
    ]:
        await repos.students.save(
            StudentDocument(id=sid, student_id=sid, name=name, department=dept, password="pass123", has_voted=voted)
        )

    await repos.settings.save_election_config(ElectionConfigDocument(**active_window()))

    return {"positions": [president, secretary], "candidates": candidates}


@pytest.fixture
async def admin_account(repos: FakeRepositories) -> Any:
    """An admin with a bcrypt password."""
    from core.security import hash_password
    from models.cosmos_documents import AdminDocument

    return await repos.admins.create(
        AdminDocument(id="admin-1", email=ADMIN_EMAIL, password_hash=hash_password(ADMIN_PASSWORD))
    )


@pytest.fixture
async def admin_headers(client: AsyncClient, admin_account: Any) -> dict[str, str]:
    """Authorization headers for a signed-in admin."""
    response = await client.post(
        "/api/v1/auth/admin/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def student_login(client: AsyncClient) -> Callable[..., Awaitable[dict[str, str]]]:
    """Log a student in through the API; returns auth headers."""

    async def _login(student_id: str, password: str = "pass123", device_id: str | None = "device-1") -> dict[str, str]:
        response = await client.post(
            "/api/v1/auth/student/login",
            json={"student_id": student_id, "password": password, "device_id": device_id},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
