# maintenance_sdk/tests/conftest.py
import logging
from typing import Any, AsyncGenerator, Dict, List

import httpx
import pytest
import pytest_asyncio

from maintenance_sdk.clients.base import MaintenanceClient
from maintenance_sdk.config import get_settings
from maintenance_sdk.schemas.descriptor import FieldDescriptor, ModelMeta

logger = logging.getLogger("maintenance_sdk.tests.conftest")

API_URL = "http://fake-backend.io/api"
MAINTENANCE_URL = f"{API_URL}/admin/maintenance"
PERMISO_UPSERT_URL = f"{API_URL}/permisos/upsert"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Каждый тест видит настройки, собранные из текущего окружения."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def maintenance_client(http_client: httpx.AsyncClient) -> MaintenanceClient:
    return MaintenanceClient(base_url=API_URL, http_client=http_client)


@pytest.fixture
def maintenance_client_with_auth(http_client: httpx.AsyncClient) -> MaintenanceClient:
    return MaintenanceClient(base_url=API_URL, http_client=http_client, auth_token="test-auth-token")


@pytest.fixture
def parametro_descriptors() -> List[FieldDescriptor]:
    raw: List[Dict[str, Any]] = [
        {"name": "atr_id_parametro", "type": "INTEGER", "primaryKey": True, "allowNull": False},
        {"name": "atr_parametro", "type": "STRING", "allowNull": False, "maxLength": 50},
        {"name": "atr_valor", "type": "text", "allowNull": False, "maxLength": 100},
    ]
    return [FieldDescriptor.model_validate(d) for d in raw]


@pytest.fixture
def rol_meta() -> ModelMeta:
    return ModelMeta.model_validate(
        {
            "primaryKeyAttributes": ["atr_id_rol"],
            "attributes": [
                {"name": "atr_id_rol", "type": "INTEGER", "primaryKey": True, "allowNull": False},
                {"name": "atr_rol", "type": "STRING", "allowNull": False, "maxLength": 30, "unique": True},
                {"name": "atr_descripcion", "type": "STRING", "maxLength": 100},
            ],
        }
    )


@pytest.fixture
def usuario_meta() -> ModelMeta:
    return ModelMeta.model_validate(
        {
            "primaryKeyAttributes": ["atr_id_usuario"],
            "attributes": [
                {"name": "atr_id_usuario", "type": "INTEGER", "primaryKey": True, "allowNull": False},
                {"name": "atr_usuario", "type": "STRING", "allowNull": False, "maxLength": 15, "unique": True},
                {"name": "atr_email", "type": "STRING", "allowNull": False, "maxLength": 50},
                {"name": "atr_id_rol", "type": "INTEGER", "allowNull": False},
                {"name": "atr_activo", "type": "BOOLEAN"},
            ],
        }
    )
