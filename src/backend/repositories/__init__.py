"""Repository modules for database access."""

from repositories.cosmos_admin_repository import CosmosAdminRepository
from repositories.cosmos_candidate_repository import CosmosCandidateRepository
from repositories.cosmos_device_repository import CosmosDeviceRepository
from repositories.cosmos_position_repository import CosmosPositionRepository
from repositories.cosmos_settings_repository import CosmosSettingsRepository
from repositories.cosmos_student_repository import CosmosStudentRepository
from repositories.cosmos_vote_repository import CosmosVoteRepository

__all__ = [
    "CosmosAdminRepository",
    "CosmosCandidateRepository",
    "CosmosDeviceRepository",
    "CosmosPositionRepository",
    "CosmosSettingsRepository",
    "CosmosStudentRepository",
    "CosmosVoteRepository",
]
