"""
Cosmos DB Device usage repository.

A device lock is keyed by "{device_id}_{student_id}": the same browser may be
used by several students, but each student only once.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from db.cosmos_session import DEVICES_CONTAINER, read_item, upsert_item
from models.cosmos_documents import DeviceUsageDocument

logger = logging.getLogger(__name__)


class CosmosDeviceRepository:
    """Repository for device usage locks using Cosmos DB."""

    async def get(self, device_id: str, student_id: str) -> Optional[DeviceUsageDocument]:
        doc_id = DeviceUsageDocument.make_id(device_id, student_id)
        data = await read_item(DEVICES_CONTAINER, doc_id, partition_key=doc_id)
        if data is None:
            return None
        return DeviceUsageDocument(**data)

    async def is_used(self, device_id: str, student_id: str) -> bool:
        """True if this student already voted from this device."""
        usage = await self.get(device_id, student_id)
        return usage is not None and usage.used

    async def mark_used(
        self,
        device_id: str,
        student_id: str,
        timestamp: Optional[datetime] = None,
    ) -> DeviceUsageDocument:
        """Lock the device for this student."""
        usage = DeviceUsageDocument(
            id=DeviceUsageDocument.make_id(device_id, student_id),
            device_id=device_id,
            student_id=student_id,
            used=True,
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        await upsert_item(DEVICES_CONTAINER, usage.to_document())
        logger.debug(f"Marked device {device_id[:12]} used by {student_id}")
        return usage
