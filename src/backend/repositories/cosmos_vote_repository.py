"""
Cosmos DB Vote repository.

Votes are append-only. Partition key is position_id so per-position tallies
stay inside one partition.
"""

import logging
from datetime import datetime
from typing import Optional

from db.cosmos_session import (
    VOTES_CONTAINER,
    create_item,
    delete_item,
    query_count,
    query_items,
)
from models.cosmos_documents import VoteDocument

logger = logging.getLogger(__name__)


class CosmosVoteRepository:
    """
    Repository for vote operations using Cosmos DB.

    One document is written per (voter, position) choice. Nothing here
    prevents a second vote for the same pair; the student's has_voted flag
    is the only gate.
    """

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def list_all(self) -> list[VoteDocument]:
        results = await query_items(VOTES_CONTAINER, "SELECT * FROM c")
        return [VoteDocument(**row) for row in results]

    async def list_by_position(self, position_id: str) -> list[VoteDocument]:
        """All votes for a position (single-partition query)."""
        results = await query_items(
            VOTES_CONTAINER,
            "SELECT * FROM c WHERE c.position_id = @position_id",
            parameters=[{"name": "@position_id", "value": position_id}],
            partition_key=position_id,
        )
        return [VoteDocument(**row) for row in results]

    async def list_by_candidate(self, candidate_id: str) -> list[VoteDocument]:
        results = await query_items(
            VOTES_CONTAINER,
            "SELECT * FROM c WHERE c.candidate_id = @candidate_id",
            parameters=[{"name": "@candidate_id", "value": candidate_id}],
        )
        return [VoteDocument(**row) for row in results]

    async def list_by_voter(self, voter_id: str) -> list[VoteDocument]:
        results = await query_items(
            VOTES_CONTAINER,
            "SELECT * FROM c WHERE c.voter_id = @voter_id",
            parameters=[{"name": "@voter_id", "value": voter_id}],
        )
        return [VoteDocument(**row) for row in results]

    async def count_all(self) -> int:
        return await query_count(VOTES_CONTAINER, "SELECT VALUE COUNT(1) FROM c")

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(
        self,
        position_id: str,
        candidate_id: str,
        voter_id: str,
        device_id: Optional[str],
        timestamp: datetime,
    ) -> VoteDocument:
        """Record one vote."""
        vote = VoteDocument(
            position_id=position_id,
            candidate_id=candidate_id,
            voter_id=voter_id,
            device_id=device_id,
            timestamp=timestamp,
        )
        await create_item(VOTES_CONTAINER, vote.to_document())
        logger.debug(f"Created vote for position {position_id}")
        return vote

    async def delete(self, vote: VoteDocument) -> None:
        await delete_item(VOTES_CONTAINER, vote.id, partition_key=vote.position_id)
        logger.debug(f"Deleted vote {vote.id} for position {vote.position_id}")
