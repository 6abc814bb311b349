# maintenance_sdk/app_setup.py
import logging
from contextlib import asynccontextmanager
from typing import Optional, Sequence

from fastapi import APIRouter, FastAPI
from starlette.middleware.cors import CORSMiddleware

from maintenance_sdk.api.router import router as maintenance_router
from maintenance_sdk.config import MaintenanceSettings, get_settings
from maintenance_sdk.data_access.common import app_http_client_lifespan
from maintenance_sdk.logging_config import setup_sdk_logging

logger = logging.getLogger("maintenance_sdk.app_setup")


def create_maintenance_app(
    settings: Optional[MaintenanceSettings] = None,
    extra_routers: Sequence[APIRouter] = (),
    title: Optional[str] = None,
    version: Optional[str] = "0.1.0",
    include_health_check: bool = True,
) -> FastAPI:
    """
    Создает FastAPI приложение с роутером обслуживания, общим httpx-клиентом
    в app.state и логированием SDK по LOGGING_LEVEL.
    """
    settings = settings or get_settings()
    setup_sdk_logging(level=settings.LOGGING_LEVEL)
    effective_title = title or settings.PROJECT_NAME
    logger.info(f"Creating FastAPI app '{effective_title}' for maintenance API at {settings.API_URL}")

    @asynccontextmanager
    async def app_lifespan_wrapper(app: FastAPI):
        async with app_http_client_lifespan(app):
            yield

    app = FastAPI(title=effective_title, version=version, lifespan=app_lifespan_wrapper)

    if settings.BACKEND_CORS_ORIGINS:
        origins = [str(origin).strip() for origin in settings.BACKEND_CORS_ORIGINS if str(origin).strip()]
        allow_all = "*" in origins or not origins
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins if not allow_all else ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info(f"CORS middleware enabled for origins: {'*' if allow_all else origins}")

    app.include_router(maintenance_router)
    for router in extra_routers:
        app.include_router(router)

    if include_health_check:
        @app.get("/health", tags=["Health"])
        async def health_check():
            return {"status": "ok"}

    return app
