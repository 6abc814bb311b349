# maintenance_sdk/clients/envelope.py
"""
Разбор конвертов ответов backend'а обслуживания.

Backend отдает данные в нескольких формах:

* голый массив записей: ``[{...}, {...}]``
* плоский конверт: ``{"data": [...], "meta": {...}}`` или ``{"data": [...], "pagination": {...}}``
* вложенный конверт: ``{"data": {"data": [...], "meta": {...}}}``
* одиночная запись: ``{"data": {...}}`` или сам объект записи

Форма определяется один раз (``detect_envelope``), после чего каждая ветка
разбирается своим обработчиком. Вызывающий код получает ``CrudResult``.
"""
import logging
import math
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.schemas.pagination import CrudResult, PaginationMeta

logger = logging.getLogger("maintenance_sdk.clients.envelope")

META_KEYS = ("meta", "pagination")


class EnvelopeKind(str, Enum):
    EMPTY = "empty"
    BARE_LIST = "bare_list"
    FLAT = "flat"
    NESTED = "nested"
    SINGLE = "single"
    UNKNOWN = "unknown"


def detect_envelope(body: Any) -> EnvelopeKind:
    if body is None or body == "" or body == b"":
        return EnvelopeKind.EMPTY
    if isinstance(body, list):
        return EnvelopeKind.BARE_LIST
    if not isinstance(body, dict):
        return EnvelopeKind.UNKNOWN
    inner = body.get("data")
    if isinstance(inner, list):
        return EnvelopeKind.FLAT
    if isinstance(inner, dict) and isinstance(inner.get("data"), list):
        return EnvelopeKind.NESTED
    return EnvelopeKind.SINGLE


def _first_present(raw: Mapping[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def build_pagination_meta(
    raw: Optional[Mapping[str, Any]],
    *,
    count: int,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> PaginationMeta:
    """
    Собирает PaginationMeta из того, что прислал backend.
    Недостающие total/totalPages вычисляются из количества записей и limit.
    """
    raw = raw or {}
    raw_total = _first_present(raw, "total", "count")
    total = int(raw_total) if raw_total is not None else count
    effective_limit = _first_present(raw, "limit", "pageSize")
    effective_limit = int(effective_limit) if effective_limit else limit
    total_pages = _first_present(raw, "totalPages", "total_pages", "pages")
    if total_pages is None:
        if effective_limit:
            total_pages = math.ceil(total / effective_limit)
        else:
            total_pages = 1 if total else 0
    effective_page = _first_present(raw, "page", "currentPage")
    return PaginationMeta(
        total=total,
        total_pages=int(total_pages),
        page=int(effective_page) if effective_page is not None else page,
        limit=effective_limit,
    )


def _find_meta(*containers: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    for container in containers:
        for key in META_KEYS:
            value = container.get(key)
            if isinstance(value, Mapping):
                return value
    return None


def _message_of(body: Any) -> Optional[str]:
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None


def parse_envelope(
    body: Any,
    *,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    paginated: bool = False,
) -> CrudResult:
    """
    Нормализует любой известный конверт в CrudResult.

    :param paginated: True для list-вызовов; тогда meta заполняется всегда.
    """
    kind = detect_envelope(body)
    logger.debug(f"Envelope detected: {kind.value}")

    if kind == EnvelopeKind.EMPTY:
        if paginated:
            return CrudResult(data=[], meta=build_pagination_meta(None, count=0, page=page, limit=limit))
        return CrudResult(data=None)

    if kind == EnvelopeKind.BARE_LIST:
        # Голый массив: total - это длина массива
        return CrudResult(
            data=list(body),
            meta=build_pagination_meta(None, count=len(body), page=page, limit=limit),
        )

    if kind == EnvelopeKind.FLAT:
        records = body["data"]
        raw_meta = _find_meta(body)
        return CrudResult(
            data=records,
            meta=build_pagination_meta(raw_meta, count=len(records), page=page, limit=limit),
            message=_message_of(body),
        )

    if kind == EnvelopeKind.NESTED:
        inner: Dict[str, Any] = body["data"]
        records = inner["data"]
        raw_meta = _find_meta(inner, body)
        return CrudResult(
            data=records,
            meta=build_pagination_meta(raw_meta, count=len(records), page=page, limit=limit),
            message=_message_of(body) or _message_of(inner),
        )

    if kind == EnvelopeKind.SINGLE:
        if "data" in body:
            record = body["data"]
        else:
            record = body
        if paginated:
            records = [record] if isinstance(record, dict) else []
            return CrudResult(
                data=records,
                meta=build_pagination_meta(None, count=len(records), page=page, limit=limit),
                message=_message_of(body),
            )
        return CrudResult(data=record if isinstance(record, dict) else None, message=_message_of(body))

    raise ServiceCommunicationError(
        f"Unsupported response envelope of type {type(body).__name__}", data=body
    )
