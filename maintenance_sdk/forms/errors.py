# maintenance_sdk/forms/errors.py
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from maintenance_sdk.exceptions import ServiceCommunicationError

logger = logging.getLogger("maintenance_sdk.forms.errors")

MSG_VALIDATION_GENERAL = "Errores de validación"


class SubmissionErrors(BaseModel):
    """Ошибки отправки формы: по полям и общее уведомление."""

    field_errors: Dict[str, str] = Field(default_factory=dict)
    general: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        return bool(self.field_errors) or self.general is not None


def _field_message(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    if isinstance(value, Mapping) and (value.get("message") or value.get("msg")):
        return str(value.get("message") or value.get("msg"))
    return str(value)


def _errors_block(error: ServiceCommunicationError) -> Any:
    if error.errors is not None:
        return error.errors
    if isinstance(error.data, Mapping):
        return error.data.get("errors")
    return None


def _general_message(error: ServiceCommunicationError) -> str:
    if isinstance(error.data, Mapping):
        message = error.data.get("message")
        if isinstance(message, str) and message:
            return message
    return MSG_VALIDATION_GENERAL


def map_submission_errors(
    error: ServiceCommunicationError,
    fields: Optional[Iterable[str]] = None,
) -> SubmissionErrors:
    """
    Раскладывает ошибку 422 backend'а по полям формы.

    Поддерживаемые формы блока errors:
    - список {field, message}; несколько сообщений одного поля склеиваются через пробел;
    - словарь поле -> список | {message|msg} | строка;
    - одна строка, которая целиком идет в общее уведомление.

    Если передан fields, сообщения по полям, которых нет в форме, и сообщения без поля
    попадают в общее уведомление, чтобы UI их показал.
    Общее уведомление есть всегда: эти сообщения, строка errors, data.message
    или "Errores de validación".
    """
    known = set(fields) if fields is not None else None
    errors = _errors_block(error)
    field_errors: Dict[str, str] = {}
    unmapped: List[str] = []
    general: Optional[str] = None

    def add(field: Optional[str], message: str) -> None:
        if not message:
            return
        if field is None:
            unmapped.append(message)
        elif known is not None and field not in known:
            unmapped.append(f"{field}: {message}")
        elif field in field_errors:
            field_errors[field] = f"{field_errors[field]} {message}"
        else:
            field_errors[field] = message

    if isinstance(errors, (list, tuple)):
        for item in errors:
            if isinstance(item, Mapping):
                field = item.get("field")
                message = item.get("message") or item.get("msg") or ""
                add(str(field) if field else None, str(message))
            elif item:
                add(None, str(item))
    elif isinstance(errors, Mapping):
        for field, value in errors.items():
            add(str(field), _field_message(value))
    elif isinstance(errors, str) and errors:
        general = errors

    if unmapped:
        general = " ".join([general, *unmapped]) if general else " ".join(unmapped)
    if general is None:
        general = _general_message(error)
    logger.debug(f"Mapped submission errors: fields={list(field_errors)}, general={general!r}")
    return SubmissionErrors(field_errors=field_errors, general=general)
