"""
Cosmos DB repository for the singleton election configuration.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from db.cosmos_session import SETTINGS_CONTAINER, read_item, upsert_item
from models.cosmos_documents import ELECTION_CONFIG_ID, ElectionConfigDocument

logger = logging.getLogger(__name__)


class CosmosSettingsRepository:
    """Reads and overwrites settings/electionConfig."""

    async def get_election_config(self) -> Optional[ElectionConfigDocument]:
        """The stored configuration, or None if the election was never scheduled."""
        data = await read_item(SETTINGS_CONTAINER, ELECTION_CONFIG_ID, partition_key=ELECTION_CONFIG_ID)
        if data is None:
            return None
        return ElectionConfigDocument(**data)

    async def save_election_config(self, config: ElectionConfigDocument) -> ElectionConfigDocument:
        """Overwrite the configuration wholesale."""
        config.id = ELECTION_CONFIG_ID
        config.updated_at = datetime.now(timezone.utc)
        data = await upsert_item(SETTINGS_CONTAINER, config.to_document())
        logger.info(
            f"Saved election config (active={config.is_active}, "
            f"start={config.voting_start}, end={config.voting_end})"
        )
        return ElectionConfigDocument(**data)
