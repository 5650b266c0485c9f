"""
Application lifecycle event handlers.

Opens the Cosmos DB connection on startup and closes it on shutdown.
"""

from typing import Callable

import structlog
from azure.core.exceptions import ServiceRequestError
from azure.cosmos.exceptions import CosmosHttpResponseError
from fastapi import FastAPI

from core.config import settings
from db import close_cosmos, get_database, is_cosmos_configured

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("app_starting", app=settings.APP_NAME, env=settings.APP_ENV)

        if not is_cosmos_configured():
            logger.warning("cosmos_not_configured", hint="Set AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING")
            return

        try:
            database = await get_database()
            await database.read()
            logger.info("cosmos_connected", database=settings.AZURE_COSMOS_DATABASE)
        except (CosmosHttpResponseError, ServiceRequestError) as e:
            logger.warning("cosmos_connect_failed", error=str(e))

        logger.info("app_started", app=settings.APP_NAME)

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("app_stopping", app=settings.APP_NAME)
        await close_cosmos()
        logger.info("app_stopped", app=settings.APP_NAME)

    return stop_app
