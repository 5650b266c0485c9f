"""Schemas module initialization."""

from schemas.auth import SessionResponse, StudentLoginRequest, VotingSession
from schemas.election import BallotResponse, BallotSubmission, ElectionStatusResponse, VotingStatus
from schemas.results import ElectionResults, ElectionStats
from schemas.student import StudentCreate, StudentCredential, StudentResponse

__all__ = [
    "StudentLoginRequest",
    "SessionResponse",
    "VotingSession",
    "VotingStatus",
    "ElectionStatusResponse",
    "BallotResponse",
    "BallotSubmission",
    "ElectionResults",
    "ElectionStats",
    "StudentCreate",
    "StudentCredential",
    "StudentResponse",
]
