# maintenance_sdk/data_access/common.py
import contextlib
import logging
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI
from starlette.requests import Request

from maintenance_sdk.clients.base import MaintenanceClient
from maintenance_sdk.config import get_settings

logger = logging.getLogger(__name__)  # maintenance_sdk.data_access.common


async def get_optional_token(request: Request) -> Optional[str]:
    """
    FastAPI dependency to extract the optional Bearer token from the Authorization header.
    Returns None if the header is missing or not a Bearer token.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header:
        parts = auth_header.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            logger.debug("Bearer token found in Authorization header.")
            return parts[1]
        logger.debug(f"Invalid Authorization header format: '{auth_header[:30]}...'")
    else:
        logger.debug("No Authorization header found in request.")
    return None


@contextlib.asynccontextmanager
async def app_http_client_lifespan(app: FastAPI):
    """
    Держит один httpx.AsyncClient в app.state на время жизни приложения.
    """
    settings = get_settings()
    logger.info("SDK: Initializing HTTP client in app.state...")
    timeouts = httpx.Timeout(settings.HTTP_TIMEOUT, connect=5.0)
    limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
    client = httpx.AsyncClient(timeout=timeouts, limits=limits)
    app.state.http_client = client
    logger.info("SDK: HTTP client initialized successfully in app.state.")
    try:
        yield
    finally:
        logger.info("SDK: Closing HTTP client from app.state...")
        await client.aclose()
        app.state.http_client = None
        logger.info("SDK: HTTP client closed successfully.")


async def get_http_client_from_state(request: Request) -> Optional[httpx.AsyncClient]:
    """
    FastAPI dependency to get the httpx.AsyncClient from app.state.
    """
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        logger.warning("SDK Dependency: HTTP client not found in app.state.")
    return client


async def get_maintenance_client(request: Request) -> AsyncIterator[MaintenanceClient]:
    """
    Клиент обслуживания на один запрос: общий httpx-клиент из app.state
    и токен вызывающего пользователя (или AUTH_TOKEN из настроек).
    Собственный httpx-клиент создается, только если в app.state его нет, и закрывается после запроса.
    """
    http_client = await get_http_client_from_state(request)
    token = await get_optional_token(request)
    client = MaintenanceClient.from_settings(http_client=http_client, auth_token=token)
    try:
        yield client
    finally:
        await client.close()
