"""
Tests for Cosmos DB student repository and the conditional replace helper.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from azure.core import MatchConditions
from azure.cosmos.exceptions import CosmosAccessConditionFailedError

from db.cosmos_session import PreconditionFailed, replace_item_if_match
from models.cosmos_documents import StudentDocument


@pytest.fixture
def student_row() -> dict:
    """A student document as Cosmos returns it, system properties included."""
    return {
        "id": "S101",
        "student_id": "S101",
        "name": "Asha",
        "department": "BCA-1",
        "password": "pass123",
        "has_voted": False,
        "is_logged_in": False,
        "device_id": None,
        "_etag": '"00000a00-0000"',
        "_ts": 1735722000,
    }


@pytest.mark.unit
class TestCosmosStudentRepository:
    """Test CosmosStudentRepository operations."""

    async def test_get_by_id_keeps_etag(self, student_row: dict) -> None:
        from repositories.cosmos_student_repository import CosmosStudentRepository

        with patch("repositories.cosmos_student_repository.read_item") as mock_read:
            mock_read.return_value = student_row

            result = await CosmosStudentRepository().get_by_id("S101")

            mock_read.assert_called_once_with("users", "S101", partition_key="S101")
            assert result.name == "Asha"
            assert result.etag == '"00000a00-0000"'

    async def test_get_by_id_returns_none_for_missing(self) -> None:
        from repositories.cosmos_student_repository import CosmosStudentRepository

        with patch("repositories.cosmos_student_repository.read_item") as mock_read:
            mock_read.return_value = None
            assert await CosmosStudentRepository().get_by_id("S999") is None

    async def test_written_document_has_no_system_properties(self, student_row: dict) -> None:
        from repositories.cosmos_student_repository import CosmosStudentRepository

        student = StudentDocument(**student_row)

        with patch("repositories.cosmos_student_repository.upsert_item") as mock_upsert:
            mock_upsert.return_value = student_row
            await CosmosStudentRepository().save(student)

            container, body = mock_upsert.call_args.args
            assert container == "users"
            assert "_etag" not in body and "_ts" not in body and "etag" not in body
            assert body["student_id"] == "S101"

    async def test_replace_if_unchanged_passes_etag(self, student_row: dict) -> None:
        from repositories.cosmos_student_repository import CosmosStudentRepository

        student = StudentDocument(**student_row)
        student.is_logged_in = True

        with patch("repositories.cosmos_student_repository.replace_item_if_match") as mock_replace:
            mock_replace.return_value = {**student_row, "is_logged_in": True, "_etag": '"new"'}

            result = await CosmosStudentRepository().replace_if_unchanged(student)

            container, body, etag = mock_replace.call_args.args
            assert etag == '"00000a00-0000"'
            assert body["is_logged_in"] is True
            assert result.etag == '"new"'


@pytest.mark.unit
class TestReplaceItemIfMatch:
    """The compare-and-swap primitive."""

    async def test_sends_if_not_modified(self) -> None:
        container = MagicMock()
        container.replace_item = AsyncMock(return_value={"id": "S101"})

        with patch("db.cosmos_session.get_container", AsyncMock(return_value=container)):
            await replace_item_if_match("users", {"id": "S101"}, '"etag-1"')

        kwargs = container.replace_item.call_args.kwargs
        assert kwargs["etag"] == '"etag-1"'
        assert kwargs["match_condition"] == MatchConditions.IfNotModified

    async def test_conflict_raises_precondition_failed(self) -> None:
        container = MagicMock()
        container.replace_item = AsyncMock(
            side_effect=CosmosAccessConditionFailedError(status_code=412, message="Precondition failed")
        )

        with patch("db.cosmos_session.get_container", AsyncMock(return_value=container)):
            with pytest.raises(PreconditionFailed):
                await replace_item_if_match("users", {"id": "S101"}, '"stale"')
