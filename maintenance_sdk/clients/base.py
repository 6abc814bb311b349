# maintenance_sdk/clients/base.py
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx
from pydantic import BaseModel, ValidationError

from maintenance_sdk.config import MaintenanceSettings, get_settings
from maintenance_sdk.exceptions import ConfigurationError, ServiceCommunicationError
from maintenance_sdk.schemas.auth_user import ModelPermissions
from maintenance_sdk.schemas.descriptor import ModelMeta
from maintenance_sdk.schemas.pagination import CrudResult

from .envelope import parse_envelope

logger = logging.getLogger("maintenance_sdk.clients.base")

# Идентификатор записи: скаляр, упорядоченный список частей составного ключа или готовая строка "1/2"
ItemId = Union[int, str, Sequence[Any], Mapping[str, Any], None]

PERMISO_MODELS = frozenset({"permiso", "permisos"})
PERMISO_FLAG_FIELDS = (
    "atr_permiso_insercion",
    "atr_permiso_eliminacion",
    "atr_permiso_actualizacion",
    "atr_permiso_consultar",
)
DEFAULT_MODEL_PERMISSIONS = ModelPermissions(create=False, read=True, update=False, delete=False)

_FILENAME_RE = re.compile(r'filename\*?=(?:UTF-8\'\')?"?([^";]+)"?', re.IGNORECASE)


def build_id_segment(item_id: ItemId) -> str:
    """
    Строит один сегмент пути из идентификатора.
    Части составного ключа склеиваются через '/' в переданном порядке.
    """
    if item_id is None:
        return ""
    if isinstance(item_id, str):
        return item_id
    if isinstance(item_id, Mapping):
        # Порядок задает вызывающий код; предпочтительно передавать список
        return "/".join(str(v) for v in item_id.values())
    if isinstance(item_id, (list, tuple)):
        return "/".join(str(v) for v in item_id)
    return str(item_id)


def is_permiso_model(model: str) -> bool:
    return str(model).lower() in PERMISO_MODELS


def normalize_permiso_flag(value: Any) -> str:
    """Флаг права в каноничной строковой кодировке: '1' включено, '' выключено."""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, str):
        return "1" if value.strip() != "" else ""
    if isinstance(value, (int, float)):
        return "1" if value else ""
    return ""


def normalize_permiso_payload(payload: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    normalized = dict(payload or {})
    for flag in PERMISO_FLAG_FIELDS:
        normalized[flag] = normalize_permiso_flag(normalized.get(flag))
    return normalized


class ExportedFile(BaseModel):
    content: bytes
    content_type: str
    filename: str


class MaintenanceClient:
    """
    HTTP-клиент (CRUD Gateway) для обобщенного REST API обслуживания.
    Все ответы нормализуются в CrudResult; ошибки - в ServiceCommunicationError.
    Автоматических повторов нет.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        maintenance_prefix: str = "/admin/maintenance",
        permiso_upsert_path: str = "/permisos/upsert",
        default_page_size: int = 10,
    ):
        if not base_url:
            raise ConfigurationError("MaintenanceClient requires a base_url (API_URL).")
        self.base_url_str = str(base_url).rstrip("/")
        self.maintenance_prefix = "/" + maintenance_prefix.strip("/")
        self.permiso_upsert_path = "/" + permiso_upsert_path.strip("/")
        self.api_base_url = f"{self.base_url_str}{self.maintenance_prefix}"
        self.auth_token = auth_token
        self.default_page_size = default_page_size

        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None
        logger.debug(f"MaintenanceClient initialized for API base: {self.api_base_url}. Owns client: {self._owns_client}")

    @classmethod
    def from_settings(
        cls,
        settings: Optional[MaintenanceSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        auth_token: Optional[str] = None,
    ) -> "MaintenanceClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.API_URL,
            auth_token=auth_token or settings.AUTH_TOKEN,
            http_client=http_client,
            timeout=settings.HTTP_TIMEOUT,
            maintenance_prefix=settings.MAINTENANCE_PREFIX,
            permiso_upsert_path=settings.PERMISO_UPSERT_PATH,
            default_page_size=settings.ADMIN_NUM_REGISTROS,
        )

    def _get_auth_headers(self) -> Dict[str, str]:
        if self.auth_token:
            prefix = "Bearer "
            if self.auth_token.lower().startswith(prefix.lower()):
                return {"Authorization": self.auth_token}
            return {"Authorization": f"{prefix}{self.auth_token}"}
        return {}

    def _model_url(self, model: str, *parts: str) -> str:
        segments = [self.api_base_url, str(model).strip("/")]
        segments.extend(p.strip("/") for p in parts if p)
        return "/".join(segments)

    @staticmethod
    def _parse_error_body(response: httpx.Response) -> Dict[str, Any]:
        data: Any = None
        try:
            data = response.json()
        except ValueError:
            data = None
        message = None
        errors = None
        if isinstance(data, dict):
            message = data.get("message") or data.get("msg") or data.get("detail")
            errors = data.get("errors") or data.get("error")
        if not message or not isinstance(message, str):
            message = response.text[:500] or "Error en la solicitud"
        return {"message": message, "data": data, "errors": errors}

    async def _request(
        self,
        method: str,
        url: str,
        allowed_statuses: Optional[List[int]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = self._get_auth_headers()
        headers.update(kwargs.pop("headers", {}))
        if "json" in kwargs and "Content-Type" not in headers:
            headers["Content-Type"] = "application/json"
        logger.debug(f"Executing remote call: {method} {url}, Params: {kwargs.get('params')}, Data: {kwargs.get('json')}")
        try:
            response = await self._http_client.request(method, url, headers=headers, **kwargs)
            effective_allowed_statuses = allowed_statuses if allowed_statuses is not None else [200, 201, 204]
            if response.status_code not in effective_allowed_statuses:
                logger.warning(f"Remote call to {url} returned unexpected status: {response.status_code}. Allowed: {effective_allowed_statuses}. Response text: {response.text[:500]}")
                response.raise_for_status()
            logger.debug(f"Remote call to {url} successful. Status: {response.status_code}")
            return response
        except httpx.TimeoutException as e:
            raise ServiceCommunicationError(f"Timeout error accessing {url}: {e!s}", url=url) from e
        except httpx.RequestError as e:
            raise ServiceCommunicationError(f"Network error accessing {url}: {e!s}", url=url) from e
        except httpx.HTTPStatusError as e:
            parsed = self._parse_error_body(e.response)
            raise ServiceCommunicationError(
                message=parsed["message"],
                status_code=e.response.status_code,
                url=url,
                data=parsed["data"],
                errors=parsed["errors"],
            ) from e

    @staticmethod
    def _body(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ServiceCommunicationError(
                f"Invalid JSON in response: {response.text[:200]}",
                status_code=response.status_code,
                url=str(response.request.url),
            ) from e

    @staticmethod
    def _unwrap(body: Any) -> Any:
        # {success, message, data} -> data
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    async def get_meta(self, model: str) -> ModelMeta:
        url = self._model_url(model, "meta")
        logger.info(f"Client META: Fetching metadata for '{model}' from {url}")
        response = await self._request("GET", url, allowed_statuses=[200])
        payload = self._unwrap(self._body(response))
        try:
            if isinstance(payload, dict) and isinstance(payload.get("attributes"), list):
                return ModelMeta(
                    attributes=payload["attributes"],
                    primary_key_attributes=payload.get("primaryKeyAttributes") or [],
                )
            if isinstance(payload, list):
                # Старая форма: сразу массив атрибутов
                return ModelMeta(attributes=payload)
        except ValidationError as ve:
            raise ServiceCommunicationError(f"Invalid metadata payload for '{model}': {ve}", url=url) from ve
        logger.warning(f"Unrecognized metadata payload for '{model}': {type(payload).__name__}")
        return ModelMeta()

    async def get_models(self) -> Dict[str, List[str]]:
        url = f"{self.api_base_url}/models"
        response = await self._request("GET", url, allowed_statuses=[200])
        payload = self._unwrap(self._body(response)) or {}
        return {
            "sistemas": list(payload.get("sistemas", [])),
            "catalogos": list(payload.get("catalogos", [])),
        }

    async def list(
        self,
        model: str,
        page: int = 1,
        limit: Optional[int] = None,
        query: Optional[str] = None,
        extra_params: Optional[Mapping[str, Any]] = None,
    ) -> CrudResult:
        url = self._model_url(model)
        effective_limit = limit or self.default_page_size
        params: Dict[str, Any] = {"page": page, "limit": effective_limit}
        if query:
            params["q"] = query
        if extra_params:
            for key, value in extra_params.items():
                if value is not None:
                    params[key] = value
        logger.info(f"Client LIST: Fetching '{model}' from {url} with params: {params}")
        response = await self._request("GET", url, params=params, allowed_statuses=[200])
        return parse_envelope(self._body(response), page=page, limit=effective_limit, paginated=True)

    async def get_by_id(self, model: str, item_id: ItemId) -> CrudResult:
        id_segment = build_id_segment(item_id)
        url = self._model_url(model, id_segment)
        logger.info(f"Client GET: Fetching '{model}' with ID '{id_segment}' from {url}")
        response = await self._request("GET", url, allowed_statuses=[200])
        return parse_envelope(self._body(response))

    async def create(self, model: str, payload: Mapping[str, Any]) -> CrudResult:
        if is_permiso_model(model):
            return await self._upsert_permiso(payload)
        url = self._model_url(model)
        logger.info(f"Client CREATE: Posting '{model}' to {url}")
        response = await self._request("POST", url, json=dict(payload), allowed_statuses=[200, 201])
        return parse_envelope(self._body(response))

    async def update(self, model: str, item_id: ItemId, payload: Mapping[str, Any]) -> CrudResult:
        if is_permiso_model(model):
            return await self._upsert_permiso(payload)
        id_segment = build_id_segment(item_id)
        url = self._model_url(model, id_segment)
        logger.info(f"Client UPDATE: Putting '{model}' with ID '{id_segment}' to {url}")
        response = await self._request("PUT", url, json=dict(payload), allowed_statuses=[200, 204])
        return parse_envelope(self._body(response))

    async def _upsert_permiso(self, payload: Mapping[str, Any]) -> CrudResult:
        url = f"{self.base_url_str}{self.permiso_upsert_path}"
        normalized = normalize_permiso_payload(payload)
        logger.info(f"Client UPSERT: Posting permission flags to {url}")
        response = await self._request("POST", url, json=normalized, allowed_statuses=[200, 201])
        return parse_envelope(self._body(response))

    async def remove(self, model: str, item_id: ItemId) -> CrudResult:
        id_segment = build_id_segment(item_id)
        url = self._model_url(model, id_segment)
        logger.info(f"Client DELETE: Deleting '{model}' with ID '{id_segment}' at {url}")
        response = await self._request("DELETE", url, allowed_statuses=[200, 204])
        return parse_envelope(self._body(response))

    async def check_unique(
        self,
        model: str,
        field: str,
        value: Any,
        exclude_id: ItemId = None,
    ) -> bool:
        """
        Спрашивает backend, свободно ли значение. Принимает {unique} и {exists};
        при наличии обоих приоритет у unique.
        """
        url = self._model_url(model, "unique")
        params: Dict[str, Any] = {"field": field, "value": value}
        if exclude_id:
            params["id"] = build_id_segment(exclude_id)
        response = await self._request("GET", url, params=params, allowed_statuses=[200])
        payload = self._body(response)
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if not isinstance(payload, dict):
            return True
        if isinstance(payload.get("unique"), bool):
            return payload["unique"]
        return not payload.get("exists")

    async def export(self, model: str, format: str = "csv") -> ExportedFile:
        url = self._model_url(model, "export")
        logger.info(f"Client EXPORT: Exporting '{model}' as {format} from {url}")
        response = await self._request("GET", url, params={"format": format}, allowed_statuses=[200])
        content_type = response.headers.get("Content-Type", "application/octet-stream")
        filename = None
        disposition = response.headers.get("Content-Disposition")
        if disposition:
            match = _FILENAME_RE.search(disposition)
            if match:
                filename = match.group(1).strip()
        if not filename:
            timestamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
            filename = f"{model}_export_{timestamp}.{format}"
        return ExportedFile(content=response.content, content_type=content_type, filename=filename)

    async def get_permissions(self, model: str) -> ModelPermissions:
        url = self._model_url(model, "permissions")
        try:
            response = await self._request("GET", url, allowed_statuses=[200])
        except ServiceCommunicationError as e:
            logger.warning(f"Could not load permissions for '{model}', using defaults: {e}")
            return DEFAULT_MODEL_PERMISSIONS.model_copy()
        payload = self._unwrap(self._body(response))
        if not isinstance(payload, dict):
            return DEFAULT_MODEL_PERMISSIONS.model_copy()
        return ModelPermissions.model_validate(payload)

    async def close(self) -> None:
        if self._owns_client and self._http_client:
            logger.info(f"Closing owned HTTP client for {self.api_base_url}")
            try:
                await self._http_client.aclose()
            except Exception as e:
                logger.error(f"Error closing owned HTTP client for {self.api_base_url}: {e}", exc_info=True)
        elif not self._owns_client:
            logger.debug(f"HTTP client for {self.api_base_url} is managed externally, not closing.")

    async def __aenter__(self) -> "MaintenanceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
