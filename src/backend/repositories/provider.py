"""
Repository provider for dependency injection.

This module provides a unified interface for accessing repositories
using Cosmos DB as the data store.

Usage:
    from repositories.provider import get_student_repository

    # In FastAPI dependencies:
    async def some_endpoint(
        student_repo: StudentRepositoryProtocol = Depends(get_student_repository),
    ):
        student = await student_repo.get_by_id(student_id)

Tests swap these providers via `app.dependency_overrides`.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from models.cosmos_documents import (
    AdminDocument,
    CandidateDocument,
    DeviceUsageDocument,
    ElectionConfigDocument,
    PositionDocument,
    StudentDocument,
    VoteDocument,
)
from repositories.cosmos_admin_repository import CosmosAdminRepository
from repositories.cosmos_candidate_repository import CosmosCandidateRepository
from repositories.cosmos_device_repository import CosmosDeviceRepository
from repositories.cosmos_position_repository import CosmosPositionRepository
from repositories.cosmos_settings_repository import CosmosSettingsRepository
from repositories.cosmos_student_repository import CosmosStudentRepository
from repositories.cosmos_vote_repository import CosmosVoteRepository

# =============================================================================
# Repository Protocols (Interfaces)
# =============================================================================


@runtime_checkable
class StudentRepositoryProtocol(Protocol):
    """Protocol defining student repository operations."""

    async def get_by_id(self, student_id: str) -> Optional[StudentDocument]: ...
    async def list_all(self) -> list[StudentDocument]: ...
    async def create(self, student: StudentDocument) -> StudentDocument: ...
    async def save(self, student: StudentDocument) -> StudentDocument: ...
    async def update(self, student: StudentDocument) -> StudentDocument: ...
    async def replace_if_unchanged(self, student: StudentDocument) -> StudentDocument: ...
    async def delete(self, student_id: str) -> None: ...


@runtime_checkable
class AdminRepositoryProtocol(Protocol):
    """Protocol defining admin repository operations."""

    async def get_by_id(self, admin_id: str) -> Optional[AdminDocument]: ...
    async def get_by_email(self, email: str) -> Optional[AdminDocument]: ...
    async def create(self, admin: AdminDocument) -> AdminDocument: ...
    async def update_last_login(self, admin: AdminDocument) -> AdminDocument: ...


@runtime_checkable
class PositionRepositoryProtocol(Protocol):
    """Protocol defining position repository operations."""

    async def get_by_id(self, position_id: str) -> Optional[PositionDocument]: ...
    async def list_all(self) -> list[PositionDocument]: ...
    async def count(self) -> int: ...
    async def create(self, position: PositionDocument) -> PositionDocument: ...
    async def update(self, position: PositionDocument) -> PositionDocument: ...
    async def delete(self, position_id: str) -> None: ...


@runtime_checkable
class CandidateRepositoryProtocol(Protocol):
    """Protocol defining candidate repository operations."""

    async def get_by_id(self, candidate_id: str) -> Optional[CandidateDocument]: ...
    async def list_all(self) -> list[CandidateDocument]: ...
    async def list_by_position(self, position_id: str) -> list[CandidateDocument]: ...
    async def create(self, candidate: CandidateDocument) -> CandidateDocument: ...
    async def update(self, candidate: CandidateDocument) -> CandidateDocument: ...
    async def delete(self, candidate_id: str) -> None: ...


@runtime_checkable
class VoteRepositoryProtocol(Protocol):
    """Protocol defining vote repository operations."""

    async def list_all(self) -> list[VoteDocument]: ...
    async def list_by_position(self, position_id: str) -> list[VoteDocument]: ...
    async def list_by_candidate(self, candidate_id: str) -> list[VoteDocument]: ...
    async def list_by_voter(self, voter_id: str) -> list[VoteDocument]: ...
    async def count_all(self) -> int: ...
    async def create(
        self,
        position_id: str,
        candidate_id: str,
        voter_id: str,
        device_id: Optional[str],
        timestamp: datetime,
    ) -> VoteDocument: ...
    async def delete(self, vote: VoteDocument) -> None: ...


@runtime_checkable
class DeviceRepositoryProtocol(Protocol):
    """Protocol defining device usage repository operations."""

    async def get(self, device_id: str, student_id: str) -> Optional[DeviceUsageDocument]: ...
    async def is_used(self, device_id: str, student_id: str) -> bool: ...
    async def mark_used(
        self,
        device_id: str,
        student_id: str,
        timestamp: Optional[datetime] = None,
    ) -> DeviceUsageDocument: ...


@runtime_checkable
class SettingsRepositoryProtocol(Protocol):
    """Protocol defining election configuration operations."""

    async def get_election_config(self) -> Optional[ElectionConfigDocument]: ...
    async def save_election_config(self, config: ElectionConfigDocument) -> ElectionConfigDocument: ...


# =============================================================================
# FastAPI Dependencies
# =============================================================================


async def get_student_repository() -> StudentRepositoryProtocol:
    return CosmosStudentRepository()


async def get_admin_repository() -> AdminRepositoryProtocol:
    return CosmosAdminRepository()


async def get_position_repository() -> PositionRepositoryProtocol:
    return CosmosPositionRepository()


async def get_candidate_repository() -> CandidateRepositoryProtocol:
    return CosmosCandidateRepository()


async def get_vote_repository() -> VoteRepositoryProtocol:
    return CosmosVoteRepository()


async def get_device_repository() -> DeviceRepositoryProtocol:
    return CosmosDeviceRepository()


async def get_settings_repository() -> SettingsRepositoryProtocol:
    return CosmosSettingsRepository()
