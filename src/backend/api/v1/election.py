"""
Election endpoints for voters.

Status is public and re-derived on every call so dashboards can poll it for
live countdowns. The ballot and vote submission require a student session.
"""

from datetime import datetime, timezone
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from api.deps import get_vote_recorder, require_student
from repositories.provider import (
    CandidateRepositoryProtocol,
    PositionRepositoryProtocol,
    SettingsRepositoryProtocol,
    get_candidate_repository,
    get_position_repository,
    get_settings_repository,
)
from schemas.auth import VotingSession
from schemas.election import (
    BallotPosition,
    BallotResponse,
    BallotSubmission,
    ElectionConfigResponse,
    ElectionStatusResponse,
    VoteSubmissionResponse,
)
from services.ballot import build_ballot, department_notice, filter_candidates, validate_ballot
from services.schedule import evaluate_schedule
from services.vote_recorder import VoteRecorder

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/status", response_model=ElectionStatusResponse)
async def election_status(
    settings_repo: SettingsRepositoryProtocol = Depends(get_settings_repository),
    positions: PositionRepositoryProtocol = Depends(get_position_repository),
) -> ElectionStatusResponse:
    """Schedule status, message and countdown as of now."""
    now = datetime.now(timezone.utc)
    config = await settings_repo.get_election_config()

    return ElectionStatusResponse(
        server_time=now,
        voting=evaluate_schedule(config, now),
        config=ElectionConfigResponse.model_validate(config) if config else None,
        total_positions=await positions.count(),
    )


@router.get("/positions", response_model=list[BallotPosition])
async def list_positions(
    positions: PositionRepositoryProtocol = Depends(get_position_repository),
    candidates: CandidateRepositoryProtocol = Depends(get_candidate_repository),
) -> list[BallotPosition]:
    """All positions with all their candidates, unfiltered."""
    return build_ballot(await positions.list_all(), await candidates.list_all())


@router.get("/ballot", response_model=BallotResponse)
async def get_ballot(
    session: Annotated[VotingSession, Depends(require_student)],
    settings_repo: SettingsRepositoryProtocol = Depends(get_settings_repository),
    positions: PositionRepositoryProtocol = Depends(get_position_repository),
    candidates: CandidateRepositoryProtocol = Depends(get_candidate_repository),
) -> BallotResponse:
    """The student's ballot with departmental filtering applied."""
    config = await settings_repo.get_election_config()
    department = session.identity.department

    all_positions = await positions.list_all()
    allowed = filter_candidates(await candidates.list_all(), department, config)

    return BallotResponse(
        voting=session.voting,
        positions=build_ballot(all_positions, allowed),
        department_notice=department_notice(department, config),
        voting_credits=len(all_positions),
    )


@router.post("/votes", response_model=VoteSubmissionResponse)
async def submit_votes(
    submission: BallotSubmission,
    session: Annotated[VotingSession, Depends(require_student)],
    recorder: Annotated[VoteRecorder, Depends(get_vote_recorder)],
    settings_repo: SettingsRepositoryProtocol = Depends(get_settings_repository),
    positions: PositionRepositoryProtocol = Depends(get_position_repository),
    candidates: CandidateRepositoryProtocol = Depends(get_candidate_repository),
) -> VoteSubmissionResponse:
    """
    Cast the student's ballot: one candidate for every position.

    The session is closed once the ballot is recorded.
    """
    config = await settings_repo.get_election_config()
    allowed = filter_candidates(await candidates.list_all(), session.identity.department, config)
    validate_ballot(await positions.list_all(), allowed, submission.votes)

    timestamp = await recorder.submit(session, submission.votes)

    return VoteSubmissionResponse(
        success=True,
        message="Your votes have been recorded successfully!",
        votes_recorded=len(submission.votes),
        vote_timestamp=timestamp,
    )
