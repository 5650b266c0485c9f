"""
Cosmos DB Student repository.

Students are keyed by their student id, which is also the partition key,
so every login and vote check is a direct point read.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from db.cosmos_session import (
    STUDENTS_CONTAINER,
    create_item,
    delete_item,
    query_items,
    read_item,
    replace_item_if_match,
    upsert_item,
)
from models.cosmos_documents import StudentDocument

logger = logging.getLogger(__name__)


class CosmosStudentRepository:
    """Repository for student operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_id(self, student_id: str) -> Optional[StudentDocument]:
        """Get a student by id (direct point read)."""
        data = await read_item(STUDENTS_CONTAINER, student_id, partition_key=student_id)
        if data is None:
            return None
        return StudentDocument(**data)

    async def list_all(self) -> list[StudentDocument]:
        """All students ordered by name."""
        results = await query_items(STUDENTS_CONTAINER, "SELECT * FROM c ORDER BY c.name")
        return [StudentDocument(**row) for row in results]

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, student: StudentDocument) -> StudentDocument:
        """
        Create a new student.

        Raises CosmosResourceExistsError if the student id is taken.
        """
        data = await create_item(STUDENTS_CONTAINER, student.to_document())
        logger.info(f"Created student {student.student_id}")
        return StudentDocument(**data)

    async def save(self, student: StudentDocument) -> StudentDocument:
        """Create or overwrite a student (bulk import and seeding)."""
        data = await upsert_item(STUDENTS_CONTAINER, student.to_document())
        return StudentDocument(**data)

    async def update(self, student: StudentDocument) -> StudentDocument:
        """Unconditional update of a student document."""
        student.updated_at = datetime.now(timezone.utc)
        data = await upsert_item(STUDENTS_CONTAINER, student.to_document())
        return StudentDocument(**data)

    async def replace_if_unchanged(self, student: StudentDocument) -> StudentDocument:
        """
        Replace a student only if nobody wrote it since it was read.

        Uses the etag captured on `student` when it was loaded.

        Raises:
            PreconditionFailed: The stored record changed in the meantime.
        """
        student.updated_at = datetime.now(timezone.utc)
        data = await replace_item_if_match(STUDENTS_CONTAINER, student.to_document(), student.etag)
        return StudentDocument(**data)

    async def delete(self, student_id: str) -> None:
        """Delete a student record."""
        await delete_item(STUDENTS_CONTAINER, student_id, partition_key=student_id)
        logger.info(f"Deleted student {student_id}")
