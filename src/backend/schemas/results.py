"""
Results and statistics schemas.
"""

from pydantic import BaseModel, Field


class CandidateResult(BaseModel):
    """Votes received by one candidate."""

    candidate_id: str
    candidate_name: str
    candidate_department: str = ""
    votes: int = 0
    percentage: float = Field(0.0, description="Share of the position's votes, one decimal place")


class PositionResult(BaseModel):
    """Tally for one position, candidates sorted by votes descending."""

    position_id: str
    position: str
    total_votes: int = 0
    candidates: list[CandidateResult] = Field(default_factory=list)


class ElectionStats(BaseModel):
    """Turnout figures for the admin overview."""

    total_students: int = 0
    voted_students: int = 0
    total_votes: int = 0
    voting_percentage: float = 0.0


class ElectionResults(BaseModel):
    positions: list[PositionResult]
    stats: ElectionStats
