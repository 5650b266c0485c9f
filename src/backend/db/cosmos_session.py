"""
Cosmos DB access for the election store.

One lazily created async client is shared by every repository. Deployed
instances authenticate with DefaultAzureCredential against
AZURE_COSMOS_ENDPOINT; local development points
AZURE_COSMOS_CONNECTION_STRING at the emulator instead.
"""

import logging
from typing import Any

from azure.core import MatchConditions
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential

from core.config import settings

logger = logging.getLogger(__name__)

STUDENTS_CONTAINER = "users"
ADMINS_CONTAINER = "admins"
POSITIONS_CONTAINER = "positions"
CANDIDATES_CONTAINER = "candidates"
VOTES_CONTAINER = "votes"
DEVICES_CONTAINER = "devices"
SETTINGS_CONTAINER = "settings"

# container -> partition key path
CONTAINERS: dict[str, str] = {
    STUDENTS_CONTAINER: "/id",
    ADMINS_CONTAINER: "/id",
    POSITIONS_CONTAINER: "/id",
    CANDIDATES_CONTAINER: "/id",
    VOTES_CONTAINER: "/position_id",
    DEVICES_CONTAINER: "/id",
    SETTINGS_CONTAINER: "/id",
}

_client: CosmosClient | None = None
_database: DatabaseProxy | None = None
_credential: DefaultAzureCredential | None = None


class PreconditionFailed(Exception):
    """The document changed since it was read (etag mismatch)."""


def is_cosmos_configured() -> bool:
    return bool(settings.AZURE_COSMOS_ENDPOINT or settings.AZURE_COSMOS_CONNECTION_STRING)


def parse_connection_string(value: str) -> tuple[str, str]:
    """
    Split an emulator/account connection string into (endpoint, key).

    Raises:
        ValueError: AccountEndpoint or AccountKey is missing.
    """
    parts = dict(segment.split("=", 1) for segment in value.split(";") if "=" in segment)
    endpoint, key = parts.get("AccountEndpoint", ""), parts.get("AccountKey", "")
    if not endpoint or not key:
        raise ValueError("AZURE_COSMOS_CONNECTION_STRING must contain AccountEndpoint and AccountKey")
    return endpoint, key


def _build_client() -> CosmosClient:
    global _credential

    if settings.AZURE_COSMOS_CONNECTION_STRING:
        endpoint, key = parse_connection_string(settings.AZURE_COSMOS_CONNECTION_STRING)
        verify = not settings.AZURE_COSMOS_DISABLE_SSL
        logger.info("Cosmos client for %s (key auth, verify_ssl=%s)", endpoint, verify)
        return CosmosClient(url=endpoint, credential=key, connection_verify=verify)

    if not settings.AZURE_COSMOS_ENDPOINT:
        raise ValueError("Either AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING must be set")

    _credential = DefaultAzureCredential()
    logger.info("Cosmos client for %s (RBAC)", settings.AZURE_COSMOS_ENDPOINT)
    return CosmosClient(url=settings.AZURE_COSMOS_ENDPOINT, credential=_credential)


async def get_cosmos_client() -> CosmosClient:
    """Shared async client, created on first use."""
    global _client

    if _client is None:
        _client = _build_client()
    return _client


async def get_database() -> DatabaseProxy:
    global _database

    if _database is None:
        client = await get_cosmos_client()
        _database = client.get_database_client(settings.AZURE_COSMOS_DATABASE)
    return _database


async def get_container(container_name: str) -> ContainerProxy:
    database = await get_database()
    return database.get_container_client(container_name)


async def close_cosmos() -> None:
    """Release the client and credential; called on shutdown."""
    global _client, _database, _credential

    if _client is not None:
        await _client.close()
        _client = None
        _database = None
        logger.info("Cosmos client closed")

    if _credential is not None:
        await _credential.close()
        _credential = None


# ============================================================================
# Item helpers used by the repositories
# ============================================================================


async def create_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    """Insert a new item. Raises CosmosResourceExistsError when the id is taken."""
    container = await get_container(container_name)
    return await container.create_item(body=item)


async def read_item(container_name: str, item_id: str, partition_key: str) -> dict[str, Any] | None:
    """Point read; None when the item does not exist."""
    container = await get_container(container_name)
    try:
        return await container.read_item(item=item_id, partition_key=partition_key)
    except CosmosResourceNotFoundError:
        return None


async def upsert_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    container = await get_container(container_name)
    return await container.upsert_item(body=item)


async def replace_item_if_match(
    container_name: str,
    item: dict[str, Any],
    etag: str | None,
) -> dict[str, Any]:
    """
    Replace an item only if it has not changed since it was read.

    Args:
        container_name: Container holding the item
        item: Full replacement body (must include 'id')
        etag: The `_etag` observed when the item was read. When None the
            replace is unconditional.

    Raises:
        PreconditionFailed: The stored etag no longer matches.
    """
    container = await get_container(container_name)
    kwargs: dict[str, Any] = {}
    if etag:
        kwargs["etag"] = etag
        kwargs["match_condition"] = MatchConditions.IfNotModified
    try:
        return await container.replace_item(item=item["id"], body=item, **kwargs)
    except CosmosAccessConditionFailedError as e:
        raise PreconditionFailed(f"{container_name}/{item['id']} was modified concurrently") from e


async def delete_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> None:
    """Delete an item by ID and partition key."""
    container = await get_container(container_name)
    await container.delete_item(item=item_id, partition_key=partition_key)


async def query_items(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
    max_items: int | None = None,
) -> list[dict[str, Any]]:
    """
    Run a parameterized SQL query and collect the results.

    Without a partition_key the query fans out across partitions.

    Example:
        await query_items(
            CANDIDATES_CONTAINER,
            "SELECT * FROM c WHERE c.position_id = @position_id",
            parameters=[{"name": "@position_id", "value": position_id}],
        )
    """
    container = await get_container(container_name)

    kwargs: dict[str, Any] = {"query": query}
    if parameters:
        kwargs["parameters"] = parameters
    if partition_key:
        kwargs["partition_key"] = partition_key
    if max_items:
        kwargs["max_item_count"] = max_items

    items: list[dict[str, Any]] = []
    async for item in container.query_items(**kwargs):
        items.append(item)
        if max_items and len(items) >= max_items:
            break
    return items


async def query_count(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
) -> int:
    """Scalar result of a `SELECT VALUE COUNT(1)` query."""
    results = await query_items(container_name, query, parameters, partition_key)
    if results and isinstance(results[0], (int, float)):
        return int(results[0])
    return 0
