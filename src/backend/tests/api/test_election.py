"""
Tests for voter-facing election endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from fakes import FakeRepositories
from models.cosmos_documents import ElectionConfigDocument

FULL_BALLOT = {
    "votes": [
        {"position_id": "pos-president", "candidate_id": "cand-alice"},
        {"position_id": "pos-secretary", "candidate_id": "cand-cara"},
    ]
}


@pytest.mark.unit
class TestElectionStatus:
    async def test_not_scheduled(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/election/status")

        assert response.status_code == 200
        data = response.json()
        assert data["voting"]["status"] == "not_scheduled"
        assert data["config"] is None
        assert data["total_positions"] == 0

    async def test_active_with_countdown(self, client: AsyncClient, election: dict) -> None:
        data = (await client.get("/api/v1/election/status")).json()

        assert data["voting"]["status"] == "active"
        assert data["voting"]["message"].startswith("Voting is active until ")
        assert data["voting"]["countdown"]["expired"] is False
        assert data["config"]["is_active"] is True
        assert data["total_positions"] == 2

    async def test_not_started(self, client: AsyncClient, repos: FakeRepositories) -> None:
        now = datetime.now(timezone.utc)
        await repos.settings.save_election_config(
            ElectionConfigDocument(
                voting_start=now + timedelta(days=1), voting_end=now + timedelta(days=2), is_active=True
            )
        )

        data = (await client.get("/api/v1/election/status")).json()
        assert data["voting"]["status"] == "not_started"
        assert data["voting"]["countdown"]["days"] in (0, 1)

    async def test_public_positions(self, client: AsyncClient, election: dict) -> None:
        data = (await client.get("/api/v1/election/positions")).json()

        assert [p["name"] for p in data] == ["President", "Secretary"]
        assert [c["name"] for c in data[0]["candidates"]] == ["Alice", "Bob"]


@pytest.mark.unit
class TestBallot:
    async def test_ballot_requires_student(self, client: AsyncClient, election: dict, admin_headers: dict) -> None:
        assert (await client.get("/api/v1/election/ballot")).status_code == 401
        assert (await client.get("/api/v1/election/ballot", headers=admin_headers)).status_code == 401

    async def test_unrestricted_ballot(self, client: AsyncClient, election: dict, student_login) -> None:
        headers = await student_login("S101")

        data = (await client.get("/api/v1/election/ballot", headers=headers)).json()

        assert data["voting_credits"] == 2
        assert data["department_notice"] is None
        assert len(data["positions"][0]["candidates"]) == 2

    async def test_departmental_ballot(
        self, client: AsyncClient, election: dict, repos: FakeRepositories, student_login
    ) -> None:
        config = await repos.settings.get_election_config()
        config.enable_departmental_voting = True
        config.allow_cross_department_voting = False
        await repos.settings.save_election_config(config)
        headers = await student_login("S102")

        data = (await client.get("/api/v1/election/ballot", headers=headers)).json()

        assert data["department_notice"]["restricted_mode"] is True
        assert data["department_notice"]["user_department"] == "BCA-2"
        names = [c["name"] for p in data["positions"] for c in p["candidates"]]
        assert names == ["Bob", "Dev"]


@pytest.mark.unit
class TestSubmitVotes:
    async def test_vote_then_login_again_fails(
        self, client: AsyncClient, election: dict, repos: FakeRepositories, student_login
    ) -> None:
        headers = await student_login("S101")

        response = await client.post("/api/v1/election/votes", json=FULL_BALLOT, headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["votes_recorded"] == 2

        assert await repos.votes.count_all() == 2
        student = await repos.students.get_by_id("S101")
        assert student.has_voted is True
        assert student.is_logged_in is False
        assert await repos.devices.is_used("device-1", "S101")

        # Session is over and the student cannot come back
        again = await client.post("/api/v1/election/votes", json=FULL_BALLOT, headers=headers)
        assert again.status_code == 401
        login = await client.post(
            "/api/v1/auth/student/login",
            json={"student_id": "S101", "password": "pass123", "device_id": "device-2"},
        )
        assert login.status_code == 403
        assert login.json()["code"] == "already-voted"

    async def test_incomplete_ballot(
        self, client: AsyncClient, election: dict, repos: FakeRepositories, student_login
    ) -> None:
        headers = await student_login("S101")

        response = await client.post(
            "/api/v1/election/votes",
            json={"votes": [{"position_id": "pos-president", "candidate_id": "cand-alice"}]},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "incomplete-ballot"
        assert await repos.votes.count_all() == 0

    async def test_duplicate_position_is_rejected(self, client: AsyncClient, election: dict, student_login) -> None:
        headers = await student_login("S101")
        ballot = {"votes": FULL_BALLOT["votes"] + [{"position_id": "pos-president", "candidate_id": "cand-bob"}]}

        response = await client.post("/api/v1/election/votes", json=ballot, headers=headers)
        assert response.status_code == 422

    async def test_voting_closed(
        self, client: AsyncClient, election: dict, repos: FakeRepositories, student_login
    ) -> None:
        headers = await student_login("S101")
        config = await repos.settings.get_election_config()
        config.is_active = False
        await repos.settings.save_election_config(config)

        response = await client.post("/api/v1/election/votes", json=FULL_BALLOT, headers=headers)

        assert response.status_code == 403
        assert response.json()["code"] == "voting-inactive"
        assert response.json()["detail"].startswith("Voting is not currently active.")

    async def test_restricted_candidate_is_rejected(
        self, client: AsyncClient, election: dict, repos: FakeRepositories, student_login
    ) -> None:
        config = await repos.settings.get_election_config()
        config.enable_departmental_voting = True
        config.allow_cross_department_voting = False
        await repos.settings.save_election_config(config)
        headers = await student_login("S102")

        # S102 is BCA-2; Alice and Cara are BCA-1
        response = await client.post("/api/v1/election/votes", json=FULL_BALLOT, headers=headers)

        assert response.status_code == 400
        assert response.json()["code"] == "incomplete-ballot"
