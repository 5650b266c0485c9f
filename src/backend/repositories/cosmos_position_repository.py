"""
Cosmos DB Position repository.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from db.cosmos_session import POSITIONS_CONTAINER, create_item, delete_item, query_items, read_item, upsert_item
from models.cosmos_documents import PositionDocument

logger = logging.getLogger(__name__)


class CosmosPositionRepository:
    """Repository for council positions using Cosmos DB."""

    async def get_by_id(self, position_id: str) -> Optional[PositionDocument]:
        data = await read_item(POSITIONS_CONTAINER, position_id, partition_key=position_id)
        if data is None:
            return None
        return PositionDocument(**data)

    async def list_all(self) -> list[PositionDocument]:
        """All positions ordered by name (ballot order)."""
        results = await query_items(POSITIONS_CONTAINER, "SELECT * FROM c ORDER BY c.name")
        return [PositionDocument(**row) for row in results]

    async def count(self) -> int:
        """Number of positions, i.e. the voting credits of every student."""
        return len(await self.list_all())

    async def create(self, position: PositionDocument) -> PositionDocument:
        data = await create_item(POSITIONS_CONTAINER, position.to_document())
        logger.info(f"Created position {position.id} ({position.name})")
        return PositionDocument(**data)

    async def update(self, position: PositionDocument) -> PositionDocument:
        position.updated_at = datetime.now(timezone.utc)
        data = await upsert_item(POSITIONS_CONTAINER, position.to_document())
        return PositionDocument(**data)

    async def delete(self, position_id: str) -> None:
        await delete_item(POSITIONS_CONTAINER, position_id, partition_key=position_id)
        logger.info(f"Deleted position {position_id}")
