# maintenance_sdk/data_access/__init__.py
from .common import (
    app_http_client_lifespan,
    get_http_client_from_state,
    get_maintenance_client,
    get_optional_token,
)

__all__ = [
    "app_http_client_lifespan",
    "get_http_client_from_state",
    "get_maintenance_client",
    "get_optional_token",
]
