# maintenance_sdk/config.py
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
)


class MaintenanceSettings(BaseSettings):
    PROJECT_NAME: str = "MaintenanceSDK"
    # Базовый URL API (уже включает префикс /api)
    API_URL: str = "http://localhost:5000/api"
    MAINTENANCE_PREFIX: str = "/admin/maintenance"
    PERMISO_UPSERT_PATH: str = "/permisos/upsert"
    LOGGING_LEVEL: str = Field(
        "INFO",
        json_schema_extra={"examples": ["DEBUG", "INFO", "WARNING", "ERROR"]}
    )
    ADMIN_NUM_REGISTROS: int = Field(
        10, description="Размер страницы списка по умолчанию."
    )
    OPTIONS_PAGE_SIZE: int = Field(
        1000, description="Размер страницы при загрузке справочников для select."
    )
    HTTP_TIMEOUT: float = 10.0
    AUTH_TOKEN: Optional[str] = None
    BACKEND_CORS_ORIGINS: List[str] = []
    # Если задан, роутер SDK пускает только пользователей с этой ролью
    ADMIN_ROLE_ID: Optional[int] = None

    model_config = SettingsConfigDict(
        extra='ignore',
    )


@lru_cache()
def get_settings() -> MaintenanceSettings:
    return MaintenanceSettings()
