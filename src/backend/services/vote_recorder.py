"""
Vote recorder.

Writes one vote per (position, candidate) pair and locks the student and the
device. The writes span several documents and are not wrapped in a
transaction. The student record is claimed first with a compare-and-swap on
has_voted, so two concurrent submissions cannot both record votes; a failure
after the claim leaves the student marked as voted with only some of the
votes written.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from azure.cosmos.exceptions import CosmosHttpResponseError

from core.exceptions import (
    AlreadyVotedError,
    ConcurrentUpdateError,
    InvalidSessionError,
    NotFoundError,
    VotingInactiveError,
    WriteFailedError,
)
from db.cosmos_session import PreconditionFailed
from repositories.provider import (
    DeviceRepositoryProtocol,
    SettingsRepositoryProtocol,
    StudentRepositoryProtocol,
    VoteRepositoryProtocol,
)
from schemas.auth import StudentIdentity, VotingSession
from schemas.election import BallotChoice
from services.schedule import evaluate_schedule

logger = structlog.get_logger(__name__)


class VoteRecorder:
    """Records a student's ballot."""

    def __init__(
        self,
        students: StudentRepositoryProtocol,
        votes: VoteRepositoryProtocol,
        devices: DeviceRepositoryProtocol,
        settings_repo: SettingsRepositoryProtocol,
    ):
        self.students = students
        self.votes = votes
        self.devices = devices
        self.settings_repo = settings_repo

    async def _ensure_voting_active(self, now: datetime) -> None:
        """Re-read the schedule; never trust the status from page load."""
        config = await self.settings_repo.get_election_config()
        voting = evaluate_schedule(config, now)
        if not voting.is_active:
            raise VotingInactiveError(f"Voting is not currently active. {voting.message}")

    async def submit(
        self,
        session: Optional[VotingSession],
        choices: list[BallotChoice],
        now: Optional[datetime] = None,
    ) -> datetime:
        """
        Record a ballot for the session's student.

        The caller validates completeness (one candidate per position) first.

        Returns:
            The timestamp stamped on every vote and on the student record.

        Raises:
            InvalidSessionError: No session, or an admin session
            VotingInactiveError: The schedule is not active
            AlreadyVotedError: The student record is already marked as voted
            ConcurrentUpdateError: Another request changed the student first
            WriteFailedError: The store rejected a write
        """
        if session is None or not isinstance(session.identity, StudentIdentity):
            raise InvalidSessionError()

        timestamp = now or datetime.now(timezone.utc)
        await self._ensure_voting_active(timestamp)

        student_id = session.identity.student_id
        device_id = session.device_id

        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError()
        if student.has_voted:
            raise AlreadyVotedError()

        # Claim the student before writing any vote
        student.has_voted = True
        student.is_logged_in = False
        student.vote_timestamp = timestamp
        try:
            await self.students.replace_if_unchanged(student)
        except PreconditionFailed as e:
            logger.warning("vote_submission_race", student_id=student_id)
            raise ConcurrentUpdateError() from e
        except CosmosHttpResponseError as e:
            logger.error("vote_claim_failed", student_id=student_id, error=str(e))
            raise WriteFailedError() from e

        try:
            for choice in choices:
                await self.votes.create(
                    position_id=choice.position_id,
                    candidate_id=choice.candidate_id,
                    voter_id=student_id,
                    device_id=device_id,
                    timestamp=timestamp,
                )

            if device_id:
                await self.devices.mark_used(device_id, student_id, timestamp)
        except CosmosHttpResponseError as e:
            logger.error(
                "vote_write_failed",
                student_id=student_id,
                error=str(e),
            )
            raise WriteFailedError("Failed to submit votes. Please contact the election administrator.") from e

        logger.info("ballot_recorded", student_id=student_id, votes=len(choices))
        return timestamp
