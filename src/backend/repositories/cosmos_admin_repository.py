"""
Cosmos DB Admin repository.

Admin accounts are looked up by email at sign-in and by id when a session
token is rehydrated.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from db.cosmos_session import ADMINS_CONTAINER, create_item, query_items, read_item, upsert_item
from models.cosmos_documents import AdminDocument

logger = logging.getLogger(__name__)


class CosmosAdminRepository:
    """Repository for admin accounts using Cosmos DB."""

    async def get_by_id(self, admin_id: str) -> Optional[AdminDocument]:
        """Get an admin by id (direct point read)."""
        data = await read_item(ADMINS_CONTAINER, admin_id, partition_key=admin_id)
        if data is None:
            return None
        return AdminDocument(**data)

    async def get_by_email(self, email: str) -> Optional[AdminDocument]:
        """Get an admin by email (case-insensitive)."""
        results = await query_items(
            ADMINS_CONTAINER,
            "SELECT * FROM c WHERE c.email = @email",
            parameters=[{"name": "@email", "value": email.strip().lower()}],
            max_items=1,
        )
        if not results:
            return None
        return AdminDocument(**results[0])

    async def create(self, admin: AdminDocument) -> AdminDocument:
        """Create an admin account."""
        admin.email = admin.email.strip().lower()
        data = await create_item(ADMINS_CONTAINER, admin.to_document())
        logger.info(f"Created admin {admin.id} ({admin.email})")
        return AdminDocument(**data)

    async def update_last_login(self, admin: AdminDocument) -> AdminDocument:
        """Stamp the admin's last sign-in time."""
        admin.last_login_at = datetime.now(timezone.utc)
        data = await upsert_item(ADMINS_CONTAINER, admin.to_document())
        return AdminDocument(**data)
