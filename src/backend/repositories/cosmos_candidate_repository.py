"""
Cosmos DB Candidate repository.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from db.cosmos_session import CANDIDATES_CONTAINER, create_item, delete_item, query_items, read_item, upsert_item
from models.cosmos_documents import CandidateDocument

logger = logging.getLogger(__name__)


class CosmosCandidateRepository:
    """Repository for candidates using Cosmos DB."""

    async def get_by_id(self, candidate_id: str) -> Optional[CandidateDocument]:
        data = await read_item(CANDIDATES_CONTAINER, candidate_id, partition_key=candidate_id)
        if data is None:
            return None
        return CandidateDocument(**data)

    async def list_all(self) -> list[CandidateDocument]:
        """All candidates ordered by name."""
        results = await query_items(CANDIDATES_CONTAINER, "SELECT * FROM c ORDER BY c.name")
        return [CandidateDocument(**row) for row in results]

    async def list_by_position(self, position_id: str) -> list[CandidateDocument]:
        """Candidates standing for one position."""
        results = await query_items(
            CANDIDATES_CONTAINER,
            "SELECT * FROM c WHERE c.position_id = @position_id",
            parameters=[{"name": "@position_id", "value": position_id}],
        )
        return [CandidateDocument(**row) for row in results]

    async def create(self, candidate: CandidateDocument) -> CandidateDocument:
        data = await create_item(CANDIDATES_CONTAINER, candidate.to_document())
        logger.info(f"Created candidate {candidate.id} for position {candidate.position_id}")
        return CandidateDocument(**data)

    async def update(self, candidate: CandidateDocument) -> CandidateDocument:
        candidate.updated_at = datetime.now(timezone.utc)
        data = await upsert_item(CANDIDATES_CONTAINER, candidate.to_document())
        return CandidateDocument(**data)

    async def delete(self, candidate_id: str) -> None:
        await delete_item(CANDIDATES_CONTAINER, candidate_id, partition_key=candidate_id)
        logger.info(f"Deleted candidate {candidate_id}")
