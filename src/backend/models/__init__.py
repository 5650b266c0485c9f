"""Database models module."""

from models.cosmos_documents import (
    AdminDocument,
    CandidateDocument,
    DeviceUsageDocument,
    ElectionConfigDocument,
    PositionDocument,
    StudentDocument,
    VoteDocument,
)

__all__ = [
    "StudentDocument",
    "AdminDocument",
    "PositionDocument",
    "CandidateDocument",
    "VoteDocument",
    "ElectionConfigDocument",
    "DeviceUsageDocument",
]
