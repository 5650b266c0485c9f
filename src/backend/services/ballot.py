"""
Ballot construction and departmental filtering.

Pure functions over positions, candidates and the election configuration.
Evaluated per request; nothing is persisted.
"""

from typing import Optional

from core.exceptions import IncompleteBallotError
from models.cosmos_documents import CandidateDocument, ElectionConfigDocument, PositionDocument
from schemas.election import (
    BallotChoice,
    BallotPosition,
    CandidateResponse,
    DepartmentNotice,
)


def is_department_restricted(config: Optional[ElectionConfigDocument]) -> bool:
    """Departmental voting on and cross-department voting off."""
    return bool(
        config
        and config.enable_departmental_voting
        and not config.allow_cross_department_voting
    )


def filter_candidates(
    candidates: list[CandidateDocument],
    student_department: Optional[str],
    config: Optional[ElectionConfigDocument],
) -> list[CandidateDocument]:
    """
    Candidates a student may vote for.

    In restricted mode only candidates whose department equals the student's
    are kept; otherwise the list is returned unchanged.
    """
    if not is_department_restricted(config):
        return list(candidates)
    return [c for c in candidates if c.department == student_department]


def department_notice(
    student_department: Optional[str],
    config: Optional[ElectionConfigDocument],
) -> Optional[DepartmentNotice]:
    """Notice for the voting page, or None when departmental voting is off."""
    if not config or not config.enable_departmental_voting:
        return None

    if config.allow_cross_department_voting:
        return DepartmentNotice(
            user_department=student_department,
            restricted_mode=False,
            message="You can vote for candidates from all departments",
        )

    return DepartmentNotice(
        user_department=student_department,
        restricted_mode=True,
        message=f"You can only vote for candidates from your department ({student_department})",
    )


def build_ballot(
    positions: list[PositionDocument],
    candidates: list[CandidateDocument],
) -> list[BallotPosition]:
    """Group (already filtered) candidates under their positions, by position name."""
    by_position: dict[str, list[CandidateResponse]] = {}
    for candidate in sorted(candidates, key=lambda c: c.name):
        by_position.setdefault(candidate.position_id, []).append(
            CandidateResponse.model_validate(candidate)
        )

    return [
        BallotPosition(
            id=position.id,
            name=position.name,
            description=position.description,
            candidates=by_position.get(position.id, []),
        )
        for position in sorted(positions, key=lambda p: p.name)
    ]


def validate_ballot(
    positions: list[PositionDocument],
    allowed_candidates: list[CandidateDocument],
    choices: list[BallotChoice],
) -> None:
    """
    Check that a ballot picks exactly one allowed candidate for every position.

    Raises:
        IncompleteBallotError: A position is missing, unknown or repeated, or
            a candidate does not stand for the chosen position.
    """
    position_ids = {p.id for p in positions}
    candidate_positions = {c.id: c.position_id for c in allowed_candidates}

    chosen: dict[str, str] = {}
    for choice in choices:
        if choice.position_id not in position_ids:
            raise IncompleteBallotError(f"Unknown position {choice.position_id}")
        if choice.position_id in chosen:
            raise IncompleteBallotError(f"Position {choice.position_id} was voted more than once")
        if candidate_positions.get(choice.candidate_id) != choice.position_id:
            raise IncompleteBallotError("Invalid candidate for this position")
        chosen[choice.position_id] = choice.candidate_id

    if set(chosen) != position_ids:
        raise IncompleteBallotError()
